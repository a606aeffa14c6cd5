"""
Similarity Network Fusion by iterative cross-diffusion.

Every source keeps two views of its affinity matrix: a full transition kernel
``P`` that carries the global structure, and a sparse kernel ``S`` restricted
to each sample's K nearest neighbours. At each iteration a source's ``P`` is
replaced by the consensus of the other sources diffused through its own
neighbourhood graph, ``S . mean(P_others) . S^T``. Structure that all sources
agree on is reinforced, while edges only one source supports fade out.

Reference: Wang et al. (2014), "Similarity network fusion for aggregating data
types on a genomic scale", Nature Methods 11, 333-337.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import List, Sequence, Union

import numpy as np

from ._validation import as_square_matrix, check_neighbors, check_symmetric
from .exceptions import DimensionMismatch, InvalidInput


logger = logging.getLogger(__name__)

__all__ = ["fuse", "average_combine", "full_kernel", "sparse_kernel"]

AffinityCollection = Union[Mapping, Sequence[np.ndarray]]


def full_kernel(W: np.ndarray, *, self_weight: float = 0.5) -> np.ndarray:
    """
    Normalize an affinity matrix into a row-stochastic transition kernel.

    The diagonal is replaced by ``self_weight`` and the off-diagonal part of
    each row is rescaled to sum to ``1 - self_weight``. Rows without any
    off-diagonal mass spread it uniformly over the other samples.
    """

    P = np.array(W, dtype=np.float64, copy=True)
    n = P.shape[0]
    np.fill_diagonal(P, 0.0)
    rowsum = P.sum(axis=1)
    empty = rowsum <= 0
    if np.any(empty):
        P[empty] = 1.0
        P[empty, empty] = 0.0
        rowsum[empty] = n - 1
    P *= (1.0 - self_weight) / rowsum[:, None]
    np.fill_diagonal(P, self_weight)
    return P


def sparse_kernel(W: np.ndarray, K: int) -> np.ndarray:
    """
    Keep the ``K`` largest off-diagonal entries of each row, normalized to sum to 1.

    Ties are resolved in favour of the lowest column index.
    """

    n = W.shape[0]
    masked = np.array(W, dtype=np.float64, copy=True)
    np.fill_diagonal(masked, -np.inf)
    order = np.argsort(-masked, axis=1, kind="stable")[:, :K]

    S = np.zeros((n, n), dtype=np.float64)
    weights = np.take_along_axis(masked, order, axis=1)
    rowsum = weights.sum(axis=1, keepdims=True)
    weights = np.where(rowsum > 0, weights / np.where(rowsum > 0, rowsum, 1.0), 1.0 / K)
    np.put_along_axis(S, order, weights, axis=1)
    return S


def _collect(affinities: AffinityCollection, *, minimum: int) -> List[np.ndarray]:
    if isinstance(affinities, Mapping):
        named = list(affinities.items())
    else:
        named = [(f"#{idx}", W) for idx, W in enumerate(affinities)]

    if len(named) < minimum:
        raise InvalidInput(f"At least {minimum} affinity matrices are required; got {len(named)}.")

    matrices = []
    for name, W in named:
        arr = np.asarray(W, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
            raise InvalidInput(f"Affinity '{name}' must be square; got shape {arr.shape}.")
        matrices.append((name, arr))

    shapes = {arr.shape for _, arr in matrices}
    if len(shapes) != 1:
        detail = ", ".join(f"{name}={arr.shape}" for name, arr in matrices)
        raise DimensionMismatch(f"Affinity matrices differ in size: {detail}.")

    checked = []
    for name, arr in matrices:
        arr = as_square_matrix(arr, name=f"Affinity '{name}'")
        check_symmetric(arr, name=f"Affinity '{name}'")
        checked.append(arr)
    return checked


def fuse(
    affinities: AffinityCollection,
    K: int = 20,
    t: int = 20,
    *,
    self_weight: float = 0.5,
) -> np.ndarray:
    """
    Fuse per-source affinity matrices into one consensus affinity.

    Parameters
    ----------
    affinities
        Mapping of source name -> affinity matrix, or an ordered sequence of
        matrices. At least two are required and all must share one shape.
    K
        Number of nearest neighbours kept in each sparse kernel.
    t
        Number of cross-diffusion iterations. Iterations are sequential by
        construction; no convergence test is performed.
    self_weight
        Diagonal value of the transition kernels.

    Returns
    -------
    np.ndarray
        Symmetric, nonnegative fused affinity whose rows sum to 1 before the
        final symmetrization.
    """

    matrices = _collect(affinities, minimum=2)
    n = matrices[0].shape[0]
    K = check_neighbors(K, n)
    if int(t) != t or t < 1:
        raise InvalidInput(f"t must be a positive integer; got {t!r}.")
    if not 0.0 <= self_weight < 1.0:
        raise InvalidInput(f"self_weight must lie in [0, 1); got {self_weight}.")

    n_views = len(matrices)
    P = []
    for W in matrices:
        Pm = full_kernel(W, self_weight=self_weight)
        P.append((Pm + Pm.T) / 2.0)
    S = [sparse_kernel(W, K) for W in matrices]

    total = np.sum(P, axis=0)
    for iteration in range(int(t)):
        updated = []
        for m in range(n_views):
            others = (total - P[m]) / (n_views - 1)
            Pm = S[m] @ others @ S[m].T
            Pm = full_kernel(Pm, self_weight=self_weight)
            updated.append((Pm + Pm.T) / 2.0)
        P = updated
        total = np.sum(P, axis=0)
        logger.debug("Cross-diffusion iteration %d/%d done.", iteration + 1, t)

    fused = total / n_views
    fused = fused / fused.sum(axis=1, keepdims=True)
    fused = (fused + fused.T) / 2.0
    logger.info("Fused %d networks over %d samples (K=%d, t=%d).", n_views, n, K, t)
    return fused


def average_combine(affinities: AffinityCollection) -> np.ndarray:
    """
    Elementwise mean of the affinity matrices.

    A naive baseline: structures that disagree between sources cancel out
    instead of being reconciled.
    """

    matrices = _collect(affinities, minimum=1)
    return np.mean(matrices, axis=0)
