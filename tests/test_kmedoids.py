import warnings

import numpy as np
import pytest

from snfclust.clustering import assign_to_medoids, k_medoids
from snfclust.exceptions import InvalidInput, NonConvergenceWarning


def _line_distance() -> np.ndarray:
    x = np.array([0.0, 1.0, 2.0, 10.0, 11.0, 12.0])
    return np.abs(x[:, None] - x[None, :])


def test_two_groups_on_a_line():
    result = k_medoids(_line_distance(), 2)
    assert result.labels.tolist() == [0, 0, 0, 1, 1, 1]
    assert result.medoids.tolist() == [1, 4]
    assert np.isclose(result.cost, 4.0)
    assert np.isclose(result.build_cost, 5.0)
    assert result.n_iter == 1
    assert result.converged


def test_swap_never_increases_cost():
    rng = np.random.default_rng(7)
    x = rng.normal(size=(30, 3))
    D = np.linalg.norm(x[:, None, :] - x[None, :, :], axis=-1)
    result = k_medoids(D, 4)
    assert result.cost <= result.build_cost + 1e-12
    assert np.unique(result.labels).size == 4


def test_medoids_label_themselves():
    rng = np.random.default_rng(8)
    x = rng.normal(size=(25, 2))
    D = np.linalg.norm(x[:, None, :] - x[None, :, :], axis=-1)
    result = k_medoids(D, 3)
    assert result.labels[result.medoids].tolist() == [0, 1, 2]


def test_results_are_deterministic():
    rng = np.random.default_rng(9)
    x = rng.normal(size=(20, 2))
    D = np.linalg.norm(x[:, None, :] - x[None, :, :], axis=-1)
    first = k_medoids(D, 3)
    second = k_medoids(D, 3)
    assert np.array_equal(first.labels, second.labels)
    assert np.array_equal(first.medoids, second.medoids)


def test_swap_cap_warns_and_returns_build_partition():
    with pytest.warns(NonConvergenceWarning):
        result = k_medoids(_line_distance(), 2, max_iter=0)
    assert not result.converged
    assert result.medoids.tolist() == [2, 4]
    assert result.labels.tolist() == [0, 0, 0, 1, 1, 1]


def test_converged_run_emits_no_warning():
    with warnings.catch_warnings():
        warnings.simplefilter("error", NonConvergenceWarning)
        k_medoids(_line_distance(), 2)


@pytest.mark.parametrize("k", [1, 6, 7])
def test_cluster_count_out_of_range_raises(k):
    with pytest.raises(InvalidInput, match="k must satisfy"):
        k_medoids(_line_distance(), k)


def test_negative_distance_raises():
    D = _line_distance()
    D[0, 1] = -1.0
    with pytest.raises(InvalidInput):
        k_medoids(D, 2)


def test_assign_to_medoids_picks_nearest():
    labels = assign_to_medoids(_line_distance(), np.array([0, 5]))
    assert labels.tolist() == [0, 0, 0, 1, 1, 1]
