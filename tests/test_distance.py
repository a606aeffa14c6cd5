import numpy as np
import pytest

from snfclust.distance import row_normalize, to_distance
from snfclust.exceptions import InvalidInput


def _symmetric_affinity(n: int = 8) -> np.ndarray:
    rng = np.random.default_rng(4)
    W = rng.uniform(0.0, 1.0, size=(n, n))
    W = (W + W.T) / 2.0
    np.fill_diagonal(W, 0.0)
    return W


def test_row_normalize_gives_unit_row_sums():
    P = row_normalize(_symmetric_affinity())
    assert np.allclose(P.sum(axis=1), 1.0)
    assert (P >= 0.0).all()


def test_row_normalize_uses_uniform_row_for_isolated_sample():
    W = _symmetric_affinity(5)
    W[2, :] = 0.0
    W[:, 2] = 0.0
    P = row_normalize(W)
    assert np.allclose(P[2], 0.2)
    assert np.allclose(P.sum(axis=1), 1.0)


def test_distance_is_symmetric_nonnegative_with_zero_diagonal():
    D = to_distance(_symmetric_affinity())
    assert np.allclose(D, D.T)
    assert (D >= 0.0).all()
    assert np.allclose(np.diag(D), 0.0)


def test_distance_complements_symmetrized_transition_matrix():
    W = _symmetric_affinity()
    P = row_normalize(W)
    D = to_distance(W)
    off_diagonal = ~np.eye(W.shape[0], dtype=bool)
    assert np.allclose(D[off_diagonal], (1.0 - (P + P.T) / 2.0)[off_diagonal])


def test_stochastic_input_skips_normalization():
    W = _symmetric_affinity()
    P = row_normalize(W)
    P = (P + P.T) / 2.0
    D = to_distance(P, stochastic=True)
    off_diagonal = ~np.eye(W.shape[0], dtype=bool)
    assert np.allclose(D[off_diagonal], 1.0 - P[off_diagonal])


def test_stronger_affinity_means_smaller_distance():
    W = np.array([[0.0, 0.9, 0.1], [0.9, 0.0, 0.1], [0.1, 0.1, 0.0]])
    D = to_distance(W)
    assert D[0, 1] < D[0, 2]


def test_negative_affinity_raises():
    W = _symmetric_affinity()
    W[0, 1] = -1.0
    with pytest.raises(InvalidInput, match="negative"):
        to_distance(W)


def test_non_square_affinity_raises():
    with pytest.raises(InvalidInput, match="square"):
        to_distance(np.ones((3, 4)))
