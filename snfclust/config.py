"""Configuration for fusion and partitioning runs."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

from .exceptions import InvalidInput


__all__ = ["SNFConfig", "load_json_config"]


@dataclass(frozen=True)
class SNFConfig:
    """
    Parameters shared by the pipeline and the parameter sweep.

    Attributes
    ----------
    K:
        Neighbourhood size for the local kernel scale and the sparse kernels.
    t:
        Number of cross-diffusion iterations.
    alpha:
        Smoothing constant of the exponential kernel.
    self_weight:
        Diagonal value of the fusion transition kernels.
    n_init:
        KMeans restarts inside spectral partitioning.
    random_state:
        Seed for the KMeans restarts.
    max_iter:
        Swap cap of the k-medoids SWAP phase.
    standardize:
        Z-score every feature before building affinities.
    n_jobs:
        Workers used to build per-source affinities.
    """

    K: int = 20
    t: int = 20
    alpha: float = 0.5
    self_weight: float = 0.5
    n_init: int = 10
    random_state: int = 0
    max_iter: int = 100
    standardize: bool = True
    n_jobs: int = 1

    def __post_init__(self) -> None:
        if self.K < 1:
            raise InvalidInput(f"K must be positive; got {self.K}.")
        if self.t < 1:
            raise InvalidInput(f"t must be positive; got {self.t}.")
        if self.alpha <= 0:
            raise InvalidInput(f"alpha must be positive; got {self.alpha}.")
        if not 0.0 <= self.self_weight < 1.0:
            raise InvalidInput(f"self_weight must lie in [0, 1); got {self.self_weight}.")
        if self.n_init < 1:
            raise InvalidInput(f"n_init must be positive; got {self.n_init}.")
        if self.max_iter < 0:
            raise InvalidInput(f"max_iter must be nonnegative; got {self.max_iter}.")

    def replace(self, **changes: Any) -> "SNFConfig":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SNFConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}.")
        return cls(**data)


def load_json_config(path: str | Path) -> SNFConfig:
    """Load and validate a run config from a JSON file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if config_path.suffix.lower() != ".json":
        raise ValueError(
            f"Unsupported config format for '{config_path}'. Use a .json config file."
        )

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Invalid JSON in config '{config_path}' at line {exc.lineno}, "
            f"column {exc.colno}: {exc.msg}"
        ) from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Invalid config root in '{config_path}': expected JSON object, got {type(data).__name__}."
        )
    return SNFConfig.from_dict(data)
