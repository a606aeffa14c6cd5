"""
Containers and loaders for per-source sample-by-feature matrices.

The loaders aim to be lightweight and composable: minimal global state,
explicit arguments, and simple return types. Sources are held in an ordered,
named collection so alignment across sources is checked structurally instead
of by position.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .exceptions import DimensionMismatch, InvalidInput


PathLike = Union[str, Path]

__all__ = ["DataMatrix", "OmicSources", "load_matrix", "load_sources"]


@dataclass(frozen=True)
class DataMatrix:
    """
    Container for a numeric data matrix and optional axis labels.

    Attributes
    ----------
    values:
        Two-dimensional NumPy array with shape (n_samples, n_features).
    sample_ids:
        Optional iterable of sample identifiers aligned with the rows.
    feature_names:
        Optional iterable of feature identifiers aligned with the columns.
    """

    values: np.ndarray
    sample_ids: Optional[Tuple[str, ...]] = None
    feature_names: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if self.values.ndim != 2:
            raise ValueError("DataMatrix.values must be two-dimensional.")
        if self.sample_ids is not None and len(self.sample_ids) != self.values.shape[0]:
            raise ValueError("sample_ids length must match number of rows.")
        if self.feature_names is not None and len(self.feature_names) != self.values.shape[1]:
            raise ValueError("feature_names length must match number of columns.")

    @property
    def n_samples(self) -> int:
        return int(self.values.shape[0])

    def as_numpy(self) -> np.ndarray:
        """Return the underlying numeric matrix."""
        return self.values

    def as_frame(self) -> pd.DataFrame:
        """Return the matrix as a DataFrame indexed by sample id."""
        index = self.sample_ids or tuple(f"sample_{i}" for i in range(self.n_samples))
        columns = self.feature_names or tuple(
            f"feature_{j}" for j in range(self.values.shape[1])
        )
        return pd.DataFrame(self.values, index=pd.Index(index, name="sample"), columns=columns)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, *, dtype: np.dtype = np.float64) -> "DataMatrix":
        """Build a matrix from a DataFrame whose index holds sample ids."""
        values = frame.to_numpy(dtype=dtype)
        return cls(
            values=values,
            sample_ids=tuple(str(idx) for idx in frame.index),
            feature_names=tuple(str(col) for col in frame.columns),
        )


class OmicSources(Mapping):
    """
    Ordered, read-only mapping of source name -> aligned ``DataMatrix``.

    Every source must describe the same samples in the same order. Sources
    without sample ids are accepted as long as their row counts agree; the
    first source that carries ids defines the shared sample order.
    """

    def __init__(self, sources: Union[Mapping, Iterable]) -> None:
        items = list(sources.items()) if isinstance(sources, Mapping) else list(sources)
        if not items:
            raise InvalidInput("OmicSources requires at least one source.")

        matrices: Dict[str, DataMatrix] = {}
        for name, matrix in items:
            name = str(name)
            if not isinstance(matrix, DataMatrix):
                matrix = DataMatrix(np.asarray(matrix, dtype=np.float64))
            if name in matrices:
                raise InvalidInput(f"Duplicate source name '{name}'.")
            if not np.all(np.isfinite(matrix.values)):
                raise InvalidInput(f"Source '{name}' contains NaN or infinite values.")
            matrices[name] = matrix

        counts = {name: m.n_samples for name, m in matrices.items()}
        if len(set(counts.values())) != 1:
            raise DimensionMismatch(f"Sources disagree on sample count: {counts}.")

        sample_ids: Optional[Tuple[str, ...]] = None
        for name, matrix in matrices.items():
            if matrix.sample_ids is None:
                continue
            if sample_ids is None:
                sample_ids = tuple(matrix.sample_ids)
            elif tuple(matrix.sample_ids) != sample_ids:
                raise DimensionMismatch(
                    f"Source '{name}' lists its samples in a different order "
                    "or covers different samples."
                )

        self._matrices = matrices
        n_samples = next(iter(counts.values()))
        self._sample_ids = sample_ids or tuple(f"sample_{i}" for i in range(n_samples))

    def __getitem__(self, name: str) -> DataMatrix:
        return self._matrices[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._matrices)

    def __len__(self) -> int:
        return len(self._matrices)

    def __repr__(self) -> str:
        shapes = ", ".join(f"{name}={m.values.shape}" for name, m in self._matrices.items())
        return f"OmicSources({shapes})"

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._matrices)

    @property
    def n_samples(self) -> int:
        return len(self._sample_ids)

    @property
    def sample_ids(self) -> Tuple[str, ...]:
        return self._sample_ids


def load_matrix(
    path: PathLike,
    *,
    dtype: np.dtype = np.float64,
    samples_as_columns: bool = False,
) -> DataMatrix:
    """
    Load a data matrix from a ``.csv`` or ``.tsv`` table.

    Parameters
    ----------
    path:
        Path to the file on disk. The first column holds row identifiers.
    dtype:
        Target numeric dtype. Defaults to ``np.float64`` for numerical
        stability in the kernel computations.
    samples_as_columns:
        Set when the file stores features in rows and samples in columns
        (the usual layout of expression tables).

    Returns
    -------
    DataMatrix
        Numeric matrix with rows representing samples and columns features.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in {".csv", ".tsv"}:
        raise ValueError(f"Unsupported file extension: {path.suffix}")

    frame = pd.read_csv(path, sep="\t" if suffix == ".tsv" else ",", index_col=0)
    frame = frame.apply(pd.to_numeric, errors="coerce")
    if samples_as_columns:
        frame = frame.T
    return DataMatrix.from_frame(frame, dtype=dtype)


def load_sources(paths: Mapping[str, PathLike], **kwargs) -> OmicSources:
    """
    Load one matrix per named source and check that they are aligned.
    """

    return OmicSources({name: load_matrix(path, **kwargs) for name, path in paths.items()})
