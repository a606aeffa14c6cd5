import logging

import numpy as np
import pandas as pd
import pytest

from snfclust.config import SNFConfig
from snfclust.exceptions import DimensionMismatch, InvalidInput
from snfclust.hyperparam import run_snf_grid, summarize_grid
from snfclust.pipeline import run_snf_pipeline
from snfclust.synthetic import generate_multiomic_sources


def _sources(n_samples: int = 60):
    return generate_multiomic_sources(
        n_samples, 3, {"rna": 40, "mirna": 30}, separation=3.0, noise_seed=0, label_seed=1
    )


def test_pipeline_reports_every_method():
    sources, labels = _sources()
    result = run_snf_pipeline(sources, labels, config=SNFConfig(K=10, t=10))

    expected = {
        "snf_kmedoids",
        "snf_spectral",
        "average_kmedoids",
        "average_spectral",
        "rna_kmedoids",
        "rna_spectral",
        "mirna_kmedoids",
        "mirna_spectral",
    }
    assert set(result.partitions.columns) == expected
    assert set(result.report.index) == expected
    assert result.report.columns.tolist() == ["RI", "ARI", "NMI", "Jaccard"]
    assert result.partitions.index.tolist() == list(sources.sample_ids)
    assert result.fused.shape == (60, 60)
    assert np.allclose(result.fused, result.fused.T)
    assert list(result.affinities) == ["rna", "mirna"]


def test_fusion_recovers_separated_clusters():
    sources, labels = _sources()
    result = run_snf_pipeline(sources, labels, config=SNFConfig(K=10, t=10), include_single_source=False)
    assert result.partitions.shape == (60, 4)
    assert result.report.loc["snf_spectral", "ARI"] > 0.9
    assert result.report.loc["snf_kmedoids", "ARI"] > 0.8


def test_reference_series_is_aligned_by_sample_id():
    sources, labels = _sources(30)
    reference = pd.Series(labels, index=list(sources.sample_ids)).iloc[::-1]
    config = SNFConfig(K=5, t=5)
    shuffled = run_snf_pipeline(sources, reference, config=config, include_single_source=False)
    ordered = run_snf_pipeline(sources, labels, config=config, include_single_source=False)
    pd.testing.assert_frame_equal(shuffled.report, ordered.report)


def test_pipeline_logs_scores(caplog):
    sources, labels = _sources(30)
    with caplog.at_level(logging.INFO, logger="snfclust"):
        run_snf_pipeline(sources, labels, config=SNFConfig(K=5, t=3), include_single_source=False)
    assert "snf_kmedoids: RI=" in caplog.text


def test_single_source_raises():
    sources, labels = generate_multiomic_sources(20, 2, {"rna": 5}, noise_seed=0, label_seed=0)
    with pytest.raises(InvalidInput, match="at least two sources"):
        run_snf_pipeline(sources, labels, config=SNFConfig(K=5, t=2))


def test_reference_length_mismatch_raises():
    sources, labels = _sources(30)
    with pytest.raises(DimensionMismatch):
        run_snf_pipeline(sources, labels[:-1], config=SNFConfig(K=5, t=2))


def test_reference_with_repeated_sample_ids_raises():
    sources, labels = _sources(30)
    ids = list(sources.sample_ids)
    reference = pd.Series(np.append(labels, labels[0]), index=ids + [ids[0]])
    with pytest.raises(DimensionMismatch, match="exactly once"):
        run_snf_pipeline(sources, reference, config=SNFConfig(K=5, t=2))



def test_grid_skips_oversized_neighbourhoods(caplog):
    sources, labels = _sources(30)
    with caplog.at_level(logging.WARNING, logger="snfclust.hyperparam"):
        result = run_snf_grid(
            sources,
            labels,
            neighbors=(5, 40),
            iterations=(2, 4),
            config=SNFConfig(K=5, t=2),
            save_labels=True,
        )
    assert "Skipping K=40" in caplog.text

    records = result.records
    assert len(records) == 4
    assert set(records["method"]) == {"kmedoids", "spectral"}
    assert set(records["K"]) == {5}
    assert sorted(set(records["t"])) == [2, 4]
    for column in ("n_clusters", "fusion_runtime", "RI", "ARI", "NMI", "Jaccard"):
        assert column in records.columns
    assert (5, 4, "spectral") in result.labels
    assert result.labels[(5, 2, "kmedoids")].shape == (30,)

    summary = summarize_grid(result)
    assert summary.shape == (2, 2)
    with pytest.raises(ValueError, match="Unknown metric"):
        summarize_grid(result, metric="F1")
