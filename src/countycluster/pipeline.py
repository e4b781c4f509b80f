from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Union

import pandas as pd

from .assemble import ClusterAssignment, assemble_groups
from .config import (
    ClusteringConfig, Metric, FUZZY_CMEANS, FCM_MAX_ITER, KMEDOIDS_MAX_ITER,
)
from .crosswalk import StateCrosswalk
from .errors import ConfigurationError
from .data_process.features import FeatureMatrix, select_state_counties, build_feature_matrix
from .data_process.transform import NormalizedMatrix, zscore_features
from .partition_cluster.distance import DistanceMatrix, pairwise_distance_matrix
from .partition_cluster.fuzzy_cmeans import FuzzyCMeansResult, fuzzy_cmeans
from .partition_cluster.kmedoids import KMedoidsResult, kmedoids

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class PipelineResult:
    assignment: ClusterAssignment
    features: FeatureMatrix
    normalized: NormalizedMatrix
    distances: Optional[DistanceMatrix]
    result: Union[FuzzyCMeansResult, KMedoidsResult]
    config: ClusteringConfig

    def groups_frame(self) -> pd.DataFrame:
        """(fips, group) table with the county names alongside."""
        out = self.assignment.to_frame()
        out.insert(1, "area", self.features.area_names.to_numpy())
        return out


def prepare_features(
    df: pd.DataFrame,
    state: str,
    crosswalk: Optional[StateCrosswalk] = None,
    degenerate: str = "raise",
) -> tuple[FeatureMatrix, NormalizedMatrix]:
    """QCEW table -> (raw FeatureMatrix, z-scored NormalizedMatrix) for one state."""
    counties = select_state_counties(df, state, crosswalk=crosswalk)
    features = build_feature_matrix(counties)
    return features, zscore_features(features, degenerate=degenerate)


def cluster_counties(
    df: pd.DataFrame,
    config: ClusteringConfig,
    crosswalk: Optional[StateCrosswalk] = None,
) -> PipelineResult:
    """
    Run one clustering of a state's counties.

    select counties -> feature matrix -> z-score -> (distances, k-medoids only)
    -> cluster -> FIPS -> group mapping.

    Args:
        df: QCEW table with normalized headers (see ``ingest.read_qcew``)
        config: ClusteringConfig for this run
        crosswalk: State lookup (default: bundled table)

    Returns:
        PipelineResult; ``assignment`` is what a choropleth renderer consumes

    Raises:
        ConfigurationError: cluster_count exceeds the number of counties in the state
    """
    features, normalized = prepare_features(
        df, config.state, crosswalk=crosswalk, degenerate=config.degenerate_policy
    )
    if config.cluster_count > normalized.n_counties:
        raise ConfigurationError(
            f"cluster_count ({config.cluster_count}) exceeds the {normalized.n_counties} "
            f"counties of {config.state.upper()}"
        )
    logger.info(
        "Clustering %d counties of %s with %s into %d groups",
        normalized.n_counties, config.state.upper(), config.algorithm, config.cluster_count,
    )

    distances = None
    if config.algorithm == FUZZY_CMEANS:
        result = fuzzy_cmeans(
            normalized,
            config.cluster_count,
            config.fuzziness,
            max_iter=config.max_iter or FCM_MAX_ITER,
            tol=config.tol,
            random_state=config.random_seed,
            on_nonconvergence=config.on_nonconvergence,
        )
    else:
        distances = pairwise_distance_matrix(normalized, metric=config.metric)
        result = kmedoids(
            distances,
            config.cluster_count,
            max_iter=config.max_iter or KMEDOIDS_MAX_ITER,
            random_state=config.random_seed,
            on_nonconvergence=config.on_nonconvergence,
        )

    assignment = assemble_groups(normalized.fips, result)
    return PipelineResult(
        assignment=assignment,
        features=features,
        normalized=normalized,
        distances=distances,
        result=result,
        config=config,
    )


def distance_table(
    df: pd.DataFrame,
    state: str,
    metric: Metric = "euclidean",
    crosswalk: Optional[StateCrosswalk] = None,
) -> pd.DataFrame:
    """County-by-county distance table for a state, labelled by county name."""
    _, normalized = prepare_features(df, state, crosswalk=crosswalk)
    return pairwise_distance_matrix(normalized, metric=metric).to_frame(labels="area")
