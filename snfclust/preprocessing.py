"""
Per-source feature scaling ahead of affinity construction.

Distances are computed on raw feature values, so sources are usually z-scored
feature by feature first; otherwise a few high-variance features dominate the
kernel.
"""

from __future__ import annotations

from sklearn.preprocessing import StandardScaler

from .data_io import DataMatrix, OmicSources


__all__ = ["standardize", "standardize_sources"]


def standardize(data: DataMatrix) -> DataMatrix:
    """
    Z-score every feature; constant features are left at zero.
    """

    scaler = StandardScaler(with_mean=True, with_std=True)
    scaled = scaler.fit_transform(data.values)
    return DataMatrix(scaled, data.sample_ids, data.feature_names)


def standardize_sources(sources: OmicSources) -> OmicSources:
    """
    Z-score the features of every source, keeping names and sample order.
    """

    return OmicSources({name: standardize(sources[name]) for name in sources})
