"""
County partitioning and cluster analysis for countycluster.

This subpackage contains the pairwise distance engine and the two clusterers:
fuzzy c-means (on the normalized feature vectors) and k-medoids (on the
distance matrix).
"""

from .distance import DistanceMatrix, pairwise_distance_matrix, check_distance_matrix
from .fuzzy_cmeans import (
    FuzzyCMeansResult,
    fuzzy_cmeans,
    harden_weights,
    fuzzy_partition_coefficient,
)
from .kmedoids import (
    KMedoidsResult,
    kmedoids,
    assign_to_medoids,
    update_medoids,
    initial_medoids,
)

__all__ = [
    # Distances
    "DistanceMatrix",
    "pairwise_distance_matrix",
    "check_distance_matrix",

    # Fuzzy c-means
    "FuzzyCMeansResult",
    "fuzzy_cmeans",
    "harden_weights",
    "fuzzy_partition_coefficient",

    # K-medoids
    "KMedoidsResult",
    "kmedoids",
    "assign_to_medoids",
    "update_medoids",
    "initial_medoids",
]
