"""
Similarity Network Fusion and clustering for aligned multi-omic data.

This package provides modular building blocks: locally scaled affinity
graphs per data source, cross-diffusion fusion of those graphs, k-medoids and
spectral partitioning, and agreement statistics against a reference labeling.
Use the modules from notebooks or scripts to keep analysis code light and
reproducible.
"""

import logging

from .affinity import build_affinities, build_affinity
from .clustering import KMedoidsResult, SpectralResult, k_medoids, spectral_partition
from .config import SNFConfig, load_json_config
from .data_io import DataMatrix, OmicSources, load_matrix, load_sources
from .distance import row_normalize, to_distance
from .exceptions import (
    DimensionMismatch,
    InvalidInput,
    NonConvergenceWarning,
    NumericalError,
    SNFError,
)
from .fusion import average_combine, fuse
from .hyperparam import GridRunResult, run_snf_grid, summarize_grid
from .metrics import (
    AgreementReport,
    agreement_table,
    cluster_counts,
    contingency_table,
    score,
)
from .pipeline import PipelineResult, run_snf_pipeline
from .preprocessing import standardize, standardize_sources
from .synthetic import generate_gaussian_mixture, generate_multiomic_sources

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "build_affinity",
    "build_affinities",
    "fuse",
    "average_combine",
    "row_normalize",
    "to_distance",
    "KMedoidsResult",
    "k_medoids",
    "SpectralResult",
    "spectral_partition",
    "AgreementReport",
    "score",
    "agreement_table",
    "cluster_counts",
    "contingency_table",
    "DataMatrix",
    "OmicSources",
    "load_matrix",
    "load_sources",
    "SNFConfig",
    "load_json_config",
    "PipelineResult",
    "run_snf_pipeline",
    "GridRunResult",
    "run_snf_grid",
    "summarize_grid",
    "standardize",
    "standardize_sources",
    "generate_gaussian_mixture",
    "generate_multiomic_sources",
    "SNFError",
    "DimensionMismatch",
    "InvalidInput",
    "NumericalError",
    "NonConvergenceWarning",
]
