"""
Parameter sweeps for Similarity Network Fusion.

These helpers support the workflow:
    1. build per-source affinities once per neighbourhood size K,
    2. fuse them for every number of iterations t in the grid,
    3. partition the fused network with k-medoids and spectral partitioning,
    4. score every partition against the reference and, optionally, retain
       the label assignments for downstream analysis or plotting.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .affinity import build_affinities
from .config import SNFConfig
from .data_io import OmicSources
from .fusion import fuse
from .metrics import score
from .pipeline import _resolve_reference, partition_affinity
from .preprocessing import standardize_sources


logger = logging.getLogger(__name__)

__all__ = ["GridRunResult", "run_snf_grid", "summarize_grid"]


@dataclass(frozen=True)
class GridRunResult:
    """
    Results from a grid search over fusion hyperparameters.
    """

    records: pd.DataFrame
    labels: Dict[Tuple[int, int, str], np.ndarray]


def run_snf_grid(
    sources: OmicSources,
    reference,
    *,
    neighbors: Sequence[int],
    iterations: Sequence[int],
    n_clusters: Optional[int] = None,
    config: Optional[SNFConfig] = None,
    save_labels: bool = False,
) -> GridRunResult:
    """
    Run fusion and both partitioners over a grid of (K, t) pairs.

    Parameters
    ----------
    sources
        Aligned per-source matrices.
    reference
        Known labels used for scoring.
    neighbors
        Neighbourhood sizes K. Values that are not below the sample count are
        skipped with a warning.
    iterations
        Cross-diffusion iteration counts t.
    n_clusters
        Number of clusters; defaults to the number of distinct reference labels.
    config
        Remaining parameters (alpha, self weight, seeds, standardization).
    save_labels
        If True, retain label arrays keyed by (K, t, method).

    Returns
    -------
    GridRunResult
        `records` dataframe summarising each run, and optionally `labels`.
    """

    config = config or SNFConfig()
    if not isinstance(sources, OmicSources):
        sources = OmicSources(sources)
    reference = _resolve_reference(reference, sources.sample_ids)
    k = int(n_clusters) if n_clusters is not None else int(reference.nunique())
    if config.standardize:
        sources = standardize_sources(sources)

    records: List[dict] = []
    label_store: Dict[Tuple[int, int, str], np.ndarray] = {}

    for K in neighbors:
        if K >= sources.n_samples:
            logger.warning("Skipping K=%d: needs fewer neighbours than %d samples.", K, sources.n_samples)
            continue
        affinities = build_affinities(sources, K, alpha=config.alpha, n_jobs=config.n_jobs)

        for t in iterations:
            start = time.perf_counter()
            fused = fuse(affinities, K, t, self_weight=config.self_weight)
            elapsed = time.perf_counter() - start

            for method, labels in partition_affinity(fused, k, config, stochastic=True).items():
                report = score(labels, reference.to_numpy())
                record = {
                    "K": int(K),
                    "t": int(t),
                    "method": method,
                    "n_clusters": int(np.unique(labels).size),
                    "fusion_runtime": elapsed,
                }
                record.update(report.as_series().to_dict())
                records.append(record)

                if save_labels:
                    label_store[(int(K), int(t), method)] = labels

    records_df = pd.DataFrame.from_records(records)
    if not records_df.empty:
        records_df.sort_values(["method", "K", "t"], inplace=True)
        records_df.reset_index(drop=True, inplace=True)

    return GridRunResult(records=records_df, labels=label_store)


def summarize_grid(result: GridRunResult, *, metric: str = "ARI") -> pd.DataFrame:
    """
    Pivot a grid run into one (K x t) table of ``metric`` per method.
    """

    if result.records.empty:
        return pd.DataFrame()
    if metric not in result.records.columns:
        raise ValueError(f"Unknown metric '{metric}'.")
    return result.records.pivot_table(index=["method", "K"], columns="t", values=metric)
