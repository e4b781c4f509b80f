"""
countycluster - group the counties of a U.S. state by industry characteristics

This package clusters counties on three QCEW (Quarterly Census of Employment and
Wages) features - establishments, employment and average weekly wage - and
returns a county FIPS -> group mapping for choropleth display.

Subpackages:
- data_process: QCEW cleaning, county feature extraction and z-scoring
- partition_cluster: distance matrix, fuzzy c-means and k-medoids
"""

# Import from subpackages for convenience
from .config import ClusteringConfig
from .crosswalk import StateCrosswalk, topojson_feature_name
from .errors import (
    CountyClusterError, ConfigurationError, NoMatchingStateError, EmptyDatasetError,
    InvalidRecordError,
    DegenerateFeatureError, InvalidDistanceError, ConvergenceFailure, AssemblyMismatchError,
)
from .data_process import (
    CountyRecord, FeatureMatrix, NormalizedMatrix,
    select_state_counties, records_from_frame, build_feature_matrix, zscore_features,
)
from .partition_cluster import (
    DistanceMatrix, pairwise_distance_matrix,
    FuzzyCMeansResult, fuzzy_cmeans, harden_weights,
    KMedoidsResult, kmedoids,
)
from .assemble import ClusterAssignment, assemble_groups
from .ingest import read_qcew, read_state_crosswalk
from .pipeline import PipelineResult, cluster_counties, distance_table, prepare_features

__all__ = [
    # Configuration / lookup
    "ClusteringConfig", "StateCrosswalk", "topojson_feature_name",

    # Errors
    "CountyClusterError", "ConfigurationError", "NoMatchingStateError", "EmptyDatasetError",
    "InvalidRecordError",
    "DegenerateFeatureError", "InvalidDistanceError", "ConvergenceFailure",
    "AssemblyMismatchError",

    # Data processing
    "CountyRecord", "FeatureMatrix", "NormalizedMatrix",
    "select_state_counties", "records_from_frame", "build_feature_matrix", "zscore_features",

    # Clustering
    "DistanceMatrix", "pairwise_distance_matrix",
    "FuzzyCMeansResult", "fuzzy_cmeans", "harden_weights",
    "KMedoidsResult", "kmedoids",

    # Assembly / pipeline
    "ClusterAssignment", "assemble_groups",
    "read_qcew", "read_state_crosswalk",
    "PipelineResult", "cluster_counties", "distance_table", "prepare_features",
]

# Package metadata
__version__ = "0.1.0"
__description__ = "Cluster the counties of a U.S. state on QCEW industry characteristics"
