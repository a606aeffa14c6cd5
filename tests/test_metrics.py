import numpy as np
import pandas as pd
import pytest

from snfclust.exceptions import DimensionMismatch, InvalidInput
from snfclust.metrics import (
    agreement_table,
    cluster_counts,
    contingency_table,
    jaccard_index,
    score,
)


def test_identical_partitions_score_one():
    labels = [0, 0, 1, 1, 2, 2]
    report = score(labels, labels)
    assert np.isclose(report.rand_index, 1.0)
    assert np.isclose(report.adjusted_rand_index, 1.0)
    assert np.isclose(report.normalized_mutual_info, 1.0)
    assert np.isclose(report.jaccard_index, 1.0)


def test_scores_ignore_cluster_names():
    report = score([0, 0, 1, 1, 2, 2], ["c", "c", "a", "a", "b", "b"])
    assert np.allclose(report.as_series().to_numpy(), 1.0)


def test_scores_are_symmetric():
    a = [0, 0, 0, 1, 1, 2, 2, 2]
    b = [1, 1, 0, 0, 0, 2, 2, 1]
    assert np.allclose(score(a, b).as_series(), score(b, a).as_series())


def test_known_pair_counts():
    report = score([0, 0, 1, 1], [0, 0, 0, 1])
    assert np.isclose(report.rand_index, 0.5)
    assert np.isclose(report.jaccard_index, 0.25)


def test_jaccard_without_any_joint_pairs_is_one():
    assert jaccard_index([0, 1, 2], [5, 6, 7]) == 1.0


def test_series_are_aligned_by_sample_id():
    a = pd.Series([0, 0, 1, 1], index=["s1", "s2", "s3", "s4"])
    b = pd.Series([0, 0, 1, 1], index=["s1", "s3", "s2", "s4"])
    assert np.isclose(score(a, b).adjusted_rand_index, -0.5)
    b_aligned = pd.Series([5, 5, 9, 9], index=["s4", "s3", "s2", "s1"])
    assert np.isclose(score(a, b_aligned).adjusted_rand_index, 1.0)


def test_series_over_different_samples_raise():
    a = pd.Series([0, 1], index=["s1", "s2"])
    b = pd.Series([0, 1], index=["s1", "s3"])
    with pytest.raises(DimensionMismatch):
        score(a, b)


def test_series_with_repeated_sample_ids_raise():
    a = pd.Series([0, 1, 1], index=["s1", "s1", "s2"])
    b = pd.Series([0, 0, 1], index=["s1", "s2", "s2"])
    with pytest.raises(DimensionMismatch, match="unique"):
        score(a, b)
    with pytest.raises(DimensionMismatch, match="unique"):
        score(pd.Series([0, 1], index=["s1", "s2"]), a)


def test_length_mismatch_raises():
    with pytest.raises(DimensionMismatch, match="differ in length"):
        score([0, 1, 1], [0, 1])


def test_degenerate_inputs_raise():
    with pytest.raises(InvalidInput):
        score([[0, 1], [1, 0]], [[0, 1], [1, 0]])
    with pytest.raises(InvalidInput):
        score([0], [0])


def test_agreement_table_has_one_row_per_method():
    reference = np.array([0, 0, 1, 1])
    partitions = pd.DataFrame({"good": [1, 1, 0, 0], "bad": [0, 1, 0, 1]})
    table = agreement_table(partitions, reference)
    assert table.index.name == "method"
    assert table.index.tolist() == ["good", "bad"]
    assert table.columns.tolist() == ["RI", "ARI", "NMI", "Jaccard"]
    assert np.isclose(table.loc["good", "ARI"], 1.0)
    assert table.loc["bad", "ARI"] < 0.0


def test_cluster_counts_and_contingency():
    counts = cluster_counts(np.array([2, 0, 0, 1, 2, 2]))
    assert counts["cluster"].tolist() == [0, 1, 2]
    assert counts["size"].tolist() == [2, 1, 3]

    table = contingency_table(np.array([0, 0, 1, 1]), np.array([0, 1, 1, 1]))
    assert table.to_numpy().sum() == 4
    assert table.loc[1, 1] == 2
