"""
Partitioning Around Medoids (PAM) on a precomputed distance matrix.

BUILD picks medoids greedily, SWAP then exchanges a medoid with a non-medoid
while that lowers the total distance of samples to their nearest medoid.
Ties always go to the lowest sample index, so results are deterministic.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass

import numpy as np

from .._validation import as_square_matrix, check_cluster_count
from ..exceptions import InvalidInput, NonConvergenceWarning


logger = logging.getLogger(__name__)

__all__ = ["KMedoidsResult", "k_medoids", "assign_to_medoids"]


@dataclass(frozen=True)
class KMedoidsResult:
    """
    Results from a k-medoids run.

    Attributes
    ----------
    labels:
        Cluster id per sample; cluster ``i`` is the one of ``medoids[i]``.
    medoids:
        Sample indices of the medoids, in increasing order.
    cost:
        Total distance of samples to their medoid after SWAP.
    build_cost:
        Total distance after the BUILD phase.
    n_iter:
        Number of swaps applied.
    converged:
        False when SWAP stopped at ``max_iter`` while still improving.
    """

    labels: np.ndarray
    medoids: np.ndarray
    cost: float
    build_cost: float
    n_iter: int
    converged: bool


def assign_to_medoids(distance: np.ndarray, medoids: np.ndarray) -> np.ndarray:
    """
    Label every sample with the position of its nearest medoid.

    Medoids always keep their own cluster, so no cluster comes out empty.
    """

    labels = np.argmin(distance[:, medoids], axis=1)
    labels[medoids] = np.arange(len(medoids))
    return labels


def _total_cost(distance: np.ndarray, medoids: np.ndarray) -> float:
    return float(distance[:, medoids].min(axis=1).sum())


def _build(distance: np.ndarray, k: int) -> np.ndarray:
    medoids = [int(np.argmin(distance.sum(axis=0)))]
    nearest = distance[:, medoids[0]].copy()

    for _ in range(1, k):
        gains = np.maximum(nearest[:, None] - distance, 0.0).sum(axis=0)
        gains[medoids] = -np.inf
        choice = int(np.argmax(gains))
        medoids.append(choice)
        nearest = np.minimum(nearest, distance[:, choice])

    return np.array(sorted(medoids), dtype=int)


def _best_swap(distance: np.ndarray, medoids: np.ndarray):
    n = distance.shape[0]
    is_medoid = np.zeros(n, dtype=bool)
    is_medoid[medoids] = True

    best_cost = np.inf
    best = None
    for slot in range(len(medoids)):
        others = np.delete(medoids, slot)
        base = distance[:, others].min(axis=1)
        costs = np.minimum(base[:, None], distance).sum(axis=0)
        costs[is_medoid] = np.inf
        candidate = int(np.argmin(costs))
        if costs[candidate] < best_cost:
            best_cost = float(costs[candidate])
            best = (slot, candidate)
    return best, best_cost


def k_medoids(distance: np.ndarray, k: int, *, max_iter: int = 100, tol: float = 1e-12) -> KMedoidsResult:
    """
    Partition samples into ``k`` clusters around actual samples.

    Parameters
    ----------
    distance
        Square, nonnegative (n_samples, n_samples) distance matrix.
    k
        Number of clusters, ``2 <= k < n_samples``.
    max_iter
        Maximum number of swaps. Hitting the cap raises a
        ``NonConvergenceWarning`` and returns the best partition found.
    tol
        Minimum decrease of the objective for a swap to be applied.
    """

    D = as_square_matrix(distance, name="distance")
    k = check_cluster_count(k, D.shape[0])
    if max_iter < 0:
        raise InvalidInput(f"max_iter must be nonnegative; got {max_iter}.")

    medoids = _build(D, k)
    build_cost = _total_cost(D, medoids)
    cost = build_cost

    n_iter = 0
    converged = False
    while n_iter < max_iter:
        swap, swap_cost = _best_swap(D, medoids)
        if swap is None or swap_cost >= cost - tol:
            converged = True
            break
        slot, candidate = swap
        medoids = np.sort(np.concatenate([np.delete(medoids, slot), [candidate]]))
        cost = swap_cost
        n_iter += 1
    else:
        swap, swap_cost = _best_swap(D, medoids)
        converged = swap is None or swap_cost >= cost - tol

    if not converged:
        warnings.warn(
            f"k-medoids SWAP phase did not stabilize within {max_iter} swaps; "
            "returning the best partition found.",
            NonConvergenceWarning,
            stacklevel=2,
        )

    labels = assign_to_medoids(D, medoids)
    logger.debug("k-medoids: k=%d, build cost %.6g, final cost %.6g, %d swaps.", k, build_cost, cost, n_iter)
    return KMedoidsResult(
        labels=labels,
        medoids=medoids,
        cost=cost,
        build_cost=build_cost,
        n_iter=n_iter,
        converged=converged,
    )
