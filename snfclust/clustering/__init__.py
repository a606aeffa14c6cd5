"""
Partitioning algorithms: k-medoids on distances, spectral on affinities.
"""

from .kmedoids import KMedoidsResult, assign_to_medoids, k_medoids
from .spectral import SpectralResult, normalized_laplacian, spectral_embedding, spectral_partition

__all__ = [
    "KMedoidsResult",
    "assign_to_medoids",
    "k_medoids",
    "SpectralResult",
    "normalized_laplacian",
    "spectral_embedding",
    "spectral_partition",
]
