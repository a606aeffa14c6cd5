"""
Spectral partitioning of an affinity matrix.

Samples are embedded with the eigenvectors of the normalized graph Laplacian
and the embedding is clustered with scikit-learn's KMeans. Randomness only
enters through the KMeans restarts and is controlled by ``random_state``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from sklearn.cluster import KMeans

from .._validation import as_square_matrix, check_cluster_count, check_symmetric
from ..exceptions import InvalidInput, NumericalError


logger = logging.getLogger(__name__)

__all__ = ["SpectralResult", "normalized_laplacian", "spectral_embedding", "spectral_partition"]

SeedLike = Union[int, np.random.Generator, np.random.RandomState]

_DEGREE_FLOOR = np.finfo(np.float64).tiny
_NORM_FLOOR = 1e-12


@dataclass(frozen=True)
class SpectralResult:
    """
    Results from a spectral partitioning run.

    Attributes
    ----------
    labels:
        Cluster id per sample.
    embedding:
        Row-normalized (n_samples, k) spectral embedding that was clustered.
    eigenvalues:
        The k smallest eigenvalues of the normalized Laplacian.
    """

    labels: np.ndarray
    embedding: np.ndarray
    eigenvalues: np.ndarray


def _as_seed(random_state: Optional[SeedLike]) -> Union[int, np.random.RandomState]:
    if random_state is None:
        raise InvalidInput("random_state must be given explicitly for reproducible partitions.")
    if isinstance(random_state, np.random.Generator):
        return int(random_state.integers(0, 2**31 - 1))
    if isinstance(random_state, np.random.RandomState):
        return random_state
    return int(random_state)


def normalized_laplacian(affinity: np.ndarray) -> np.ndarray:
    """
    ``L = I - D^{-1/2} W D^{-1/2}`` with zero degrees floored to a tiny value.
    """

    W = np.asarray(affinity, dtype=np.float64)
    degree = W.sum(axis=1)
    isolated = degree < _DEGREE_FLOOR
    if np.any(isolated):
        logger.warning("%d isolated samples; flooring their degree.", int(isolated.sum()))
    inv_sqrt = 1.0 / np.sqrt(np.maximum(degree, _DEGREE_FLOOR))
    return np.eye(W.shape[0]) - inv_sqrt[:, None] * W * inv_sqrt[None, :]


def spectral_embedding(affinity: np.ndarray, n_components: int):
    """
    Return the eigenvalues and unit-length rows of the Laplacian embedding.
    """

    L = normalized_laplacian(affinity)
    L = (L + L.T) / 2.0
    try:
        eigenvalues, eigenvectors = np.linalg.eigh(L)
    except np.linalg.LinAlgError as exc:
        raise NumericalError(f"Eigendecomposition of the Laplacian failed: {exc}") from exc

    embedding = eigenvectors[:, :n_components]
    norms = np.linalg.norm(embedding, axis=1, keepdims=True)
    embedding = embedding / np.maximum(norms, _NORM_FLOOR)
    return eigenvalues[:n_components], embedding


def spectral_partition(
    affinity: np.ndarray,
    k: int,
    *,
    n_init: int = 10,
    random_state: SeedLike = 0,
) -> SpectralResult:
    """
    Partition samples into ``k`` clusters from an affinity matrix.

    Parameters
    ----------
    affinity
        Square, symmetric, nonnegative affinity matrix.
    k
        Number of clusters, ``2 <= k < n_samples``; also the embedding width.
    n_init
        Number of KMeans restarts.
    random_state
        Seed, ``numpy.random.Generator`` or ``RandomState`` for the KMeans
        restarts. Identical inputs and seed give identical labels.
    """

    W = as_square_matrix(affinity, name="affinity")
    check_symmetric(W, name="affinity")
    k = check_cluster_count(k, W.shape[0])
    if n_init < 1:
        raise InvalidInput(f"n_init must be at least 1; got {n_init}.")

    eigenvalues, embedding = spectral_embedding(W, k)
    estimator = KMeans(n_clusters=k, n_init=n_init, random_state=_as_seed(random_state))
    labels = estimator.fit_predict(embedding)
    return SpectralResult(labels=labels.astype(int), embedding=embedding, eigenvalues=eigenvalues)
