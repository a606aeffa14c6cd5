"""
Conversion of affinity matrices into distances for medoid-based clustering.
"""

from __future__ import annotations

import logging

import numpy as np

from ._validation import as_square_matrix


logger = logging.getLogger(__name__)

__all__ = ["row_normalize", "to_distance"]


def row_normalize(affinity: np.ndarray) -> np.ndarray:
    """
    Scale each row to sum to 1; rows that sum to 0 become uniform.
    """

    W = as_square_matrix(affinity, name="affinity")
    n = W.shape[0]
    rowsum = W.sum(axis=1, keepdims=True)
    empty = rowsum[:, 0] <= 0
    if np.any(empty):
        logger.warning("%d samples have no affinity; using a uniform row.", int(empty.sum()))
    P = np.divide(W, rowsum, out=np.zeros_like(W), where=rowsum > 0)
    P[empty] = 1.0 / n
    return P


def to_distance(affinity: np.ndarray, *, stochastic: bool = False) -> np.ndarray:
    """
    Convert an affinity matrix into a symmetric distance matrix.

    Parameters
    ----------
    affinity
        Square, nonnegative affinity matrix.
    stochastic
        Set when ``affinity`` already has unit row sums (e.g. the output of
        ``fuse``); the row normalization is then skipped and the distance is
        ``1 - affinity`` directly.

    Returns
    -------
    np.ndarray
        Symmetric matrix with a zero diagonal, ``1 - P`` elsewhere.
    """

    if stochastic:
        P = as_square_matrix(affinity, name="affinity")
    else:
        P = row_normalize(affinity)

    dist = 1.0 - P
    np.fill_diagonal(dist, 0.0)
    dist = (dist + dist.T) / 2.0
    return np.clip(dist, 0.0, None)
