"""
Utilities for summarizing and comparing clustering results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.metrics import adjusted_rand_score, normalized_mutual_info_score, rand_score
from sklearn.metrics.cluster import pair_confusion_matrix

from .exceptions import DimensionMismatch, InvalidInput


LabelsLike = Union[np.ndarray, pd.Series, list, tuple]

__all__ = [
    "AgreementReport",
    "score",
    "jaccard_index",
    "cluster_counts",
    "contingency_table",
    "agreement_table",
]


@dataclass(frozen=True)
class AgreementReport:
    """
    Agreement statistics between two partitions of the same samples.

    All four statistics are symmetric in the two partitions and invariant to
    renaming the cluster ids of either one.
    """

    rand_index: float
    adjusted_rand_index: float
    normalized_mutual_info: float
    jaccard_index: float

    def as_series(self) -> pd.Series:
        return pd.Series(
            {
                "RI": self.rand_index,
                "ARI": self.adjusted_rand_index,
                "NMI": self.normalized_mutual_info,
                "Jaccard": self.jaccard_index,
            }
        )


def _aligned_labels(labels_a: LabelsLike, labels_b: LabelsLike) -> Tuple[np.ndarray, np.ndarray]:
    if isinstance(labels_a, pd.Series) and isinstance(labels_b, pd.Series):
        if not (labels_a.index.is_unique and labels_b.index.is_unique):
            raise DimensionMismatch("Partition sample ids must be unique.")
        if set(labels_a.index) != set(labels_b.index):
            raise DimensionMismatch("Partitions cover different samples.")
        labels_b = labels_b.reindex(labels_a.index)

    a = np.asarray(labels_a)
    b = np.asarray(labels_b)
    if a.ndim != 1 or b.ndim != 1:
        raise InvalidInput("Partitions must be one-dimensional label arrays.")
    if a.shape != b.shape:
        raise DimensionMismatch(f"Partitions differ in length: {a.shape[0]} vs {b.shape[0]}.")
    if a.size < 2:
        raise InvalidInput("Partitions must cover at least 2 samples.")
    return a, b


def jaccard_index(labels_a: LabelsLike, labels_b: LabelsLike) -> float:
    """
    Pairs clustered together in both partitions over pairs together in either.
    """

    a, b = _aligned_labels(labels_a, labels_b)
    pairs = pair_confusion_matrix(a, b)
    together_both = pairs[1, 1]
    together_any = pairs[1, 1] + pairs[0, 1] + pairs[1, 0]
    if together_any == 0:
        return 1.0
    return float(together_both / together_any)


def score(labels_a: LabelsLike, labels_b: LabelsLike) -> AgreementReport:
    """
    Compute Rand index, adjusted Rand index, normalized mutual information
    (arithmetic mean of the two entropies) and Jaccard index.
    """

    a, b = _aligned_labels(labels_a, labels_b)
    return AgreementReport(
        rand_index=float(rand_score(a, b)),
        adjusted_rand_index=float(adjusted_rand_score(a, b)),
        normalized_mutual_info=float(normalized_mutual_info_score(a, b, average_method="arithmetic")),
        jaccard_index=jaccard_index(a, b),
    )


def cluster_counts(labels: np.ndarray, *, name: str = "cluster") -> pd.DataFrame:
    """
    Return a DataFrame of cluster sizes.
    """

    unique, counts = np.unique(labels, return_counts=True)
    frame = pd.DataFrame({name: unique, "size": counts})
    return frame.sort_values(by=name).reset_index(drop=True)


def contingency_table(labels_a: np.ndarray, labels_b: np.ndarray) -> pd.DataFrame:
    """
    Cross-tabulate two cluster labelings.
    """

    a, b = _aligned_labels(labels_a, labels_b)
    return pd.crosstab(a, b, rownames=["labels_a"], colnames=["labels_b"])


def agreement_table(partitions: Union[pd.DataFrame, Mapping[str, LabelsLike]], reference: LabelsLike) -> pd.DataFrame:
    """
    Score every partition against the reference, one row per method.
    """

    if isinstance(partitions, pd.DataFrame):
        items = [(str(col), partitions[col]) for col in partitions.columns]
    else:
        items = list(partitions.items())

    rows = {name: score(labels, reference).as_series() for name, labels in items}
    frame = pd.DataFrame.from_dict(rows, orient="index")
    frame.index.name = "method"
    return frame
