"""
Synthetic multi-source data with a known cluster structure.

Every source is a Gaussian mixture over the same samples and the same latent
labels; the per-source separation controls how much of the structure that
source reveals (0 gives pure noise).
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .data_io import DataMatrix, OmicSources


SeedLike = Union[int, np.random.Generator]

__all__ = ["generate_gaussian_mixture", "generate_multiomic_sources", "balanced_labels"]


def _rng(seed: Optional[SeedLike]) -> np.random.Generator:
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def balanced_labels(n_samples: int, n_clusters: int, *, seed: Optional[SeedLike] = None) -> np.ndarray:
    """Cluster ids of near-equal cluster sizes in random order."""
    return _rng(seed).permutation(np.arange(n_samples) % n_clusters)


def _component_means(means, n_features: int) -> np.ndarray:
    centers = np.asarray(means, dtype=np.float64)
    if centers.ndim == 1:
        centers = np.tile(centers[:, None], (1, n_features))
    if centers.ndim != 2 or centers.shape[1] != n_features:
        raise ValueError(
            f"means must have shape (n_components,) or (n_components, {n_features}); "
            f"got {centers.shape}."
        )
    return centers


def generate_gaussian_mixture(
    *,
    n_samples: int,
    n_features: int,
    means,
    variance: float = 1.0,
    noise_seed: Optional[SeedLike] = None,
    label_seed: Optional[SeedLike] = None,
    labels: Optional[Sequence[int]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample an isotropic Gaussian mixture with one component per mean.

    Parameters
    ----------
    means
        One scalar per component (shared by all features) or a
        (n_components, n_features) array.
    labels
        Fixed component of every sample. Drawn as balanced random labels
        from ``label_seed`` when omitted.
    """

    if n_samples <= 0 or n_features <= 0:
        raise ValueError("n_samples and n_features must be positive.")
    if variance <= 0:
        raise ValueError(f"variance must be positive; got {variance}.")

    centers = _component_means(means, n_features)
    if labels is None:
        component = balanced_labels(n_samples, centers.shape[0], seed=label_seed)
    else:
        component = np.asarray(labels, dtype=int)
        if component.shape != (n_samples,):
            raise ValueError(f"labels must have shape ({n_samples},); got {component.shape}.")
        if component.min() < 0 or component.max() >= centers.shape[0]:
            raise ValueError(f"labels must lie in [0, {centers.shape[0]}).")

    noise = _rng(noise_seed).normal(scale=np.sqrt(variance), size=(n_samples, n_features))
    return centers[component] + noise, component.copy()


def generate_multiomic_sources(
    n_samples: int,
    n_clusters: int,
    features: Mapping[str, int],
    *,
    separation: Union[float, Mapping[str, float]] = 3.0,
    noise_seed: Optional[int] = None,
    label_seed: Optional[int] = None,
) -> Tuple[OmicSources, np.ndarray]:
    """
    Generate aligned sources that share one latent clustering.

    Parameters
    ----------
    n_samples, n_clusters
        Sample count and number of latent clusters.
    features
        Mapping of source name -> number of features of that source.
    separation
        Mean shift of each cluster on its own block of features (per source
        when a mapping is given). 0 makes the source carry no cluster signal.
    noise_seed, label_seed
        Seeds for the feature noise and the latent labels.

    Returns
    -------
    tuple
        ``(OmicSources, labels)`` with sample ids ``sample_000``, ...
    """

    if n_clusters < 1 or n_clusters > n_samples:
        raise ValueError("n_clusters must lie in [1, n_samples].")
    if not features:
        raise ValueError("At least one source is required.")

    labels = balanced_labels(n_samples, n_clusters, seed=label_seed)
    noise_rng = _rng(noise_seed)
    sample_ids = tuple(f"sample_{i:03d}" for i in range(n_samples))

    matrices = {}
    for name, n_features in features.items():
        gap = separation[name] if isinstance(separation, Mapping) else separation
        means = np.zeros((n_clusters, n_features))
        for cluster, block in enumerate(np.array_split(np.arange(n_features), n_clusters)):
            means[cluster, block] = float(gap)
        values, _ = generate_gaussian_mixture(
            n_samples=n_samples,
            n_features=n_features,
            means=means,
            noise_seed=noise_rng,
            labels=labels,
        )
        matrices[name] = DataMatrix(
            values,
            sample_ids,
            tuple(f"{name}_{j:04d}" for j in range(n_features)),
        )

    return OmicSources(matrices), labels
