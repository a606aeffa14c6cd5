from __future__ import annotations

from typing import Any

import numpy as np

from .exceptions import InvalidInput


SYMMETRY_TOL = 1e-9


def as_square_matrix(matrix: Any, *, name: str) -> np.ndarray:
    """Return ``matrix`` as a float array after checking it is a finite, nonnegative square."""
    arr = np.asarray(matrix, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
        raise InvalidInput(f"{name} must be a square matrix; got shape {arr.shape}.")
    if arr.shape[0] < 2:
        raise InvalidInput(f"{name} must cover at least 2 samples.")
    if not np.all(np.isfinite(arr)):
        raise InvalidInput(f"{name} contains NaN or infinite values.")
    if np.any(arr < 0):
        raise InvalidInput(f"{name} contains negative entries.")
    return arr


def check_symmetric(matrix: np.ndarray, *, name: str, tol: float = SYMMETRY_TOL) -> None:
    scale = max(1.0, float(np.abs(matrix).max()))
    if not np.allclose(matrix, matrix.T, rtol=0.0, atol=tol * scale):
        raise InvalidInput(f"{name} must be symmetric.")


def check_cluster_count(k: int, n_samples: int) -> int:
    if int(k) != k:
        raise InvalidInput(f"k must be an integer; got {k!r}.")
    k = int(k)
    if k < 2 or k >= n_samples:
        raise InvalidInput(f"k must satisfy 2 <= k < n_samples ({n_samples}); got {k}.")
    return k


def check_neighbors(K: int, n_samples: int) -> int:
    if int(K) != K:
        raise InvalidInput(f"K must be an integer; got {K!r}.")
    K = int(K)
    if K < 1 or K >= n_samples:
        raise InvalidInput(f"K must satisfy 1 <= K < n_samples ({n_samples}); got {K}.")
    return K
