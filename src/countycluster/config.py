from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from .errors import ConfigurationError

ROOT = Path(__file__).resolve().parents[2]
DATA = ROOT / "data"
RAW = DATA / "raw"

# raw QCEW annual averages and the state crosswalk (adjust to yours)
RAW_QCEW_CSV = RAW / "allhlcn19.csv"
RAW_CROSSWALK_CSV = RAW / "states_abbrevs_fips.csv"

# QCEW column names after header normalization
AREA_TYPE_COL = "Area_Type"
INDUSTRY_COL = "Industry"
OWNERSHIP_COL = "Ownership"
STATE_COL = "St"
COUNTY_COL = "Cnty"
AREA_COL = "Area"
ESTABLISHMENTS_COL = "Annual_Average_Establishment_Count"
EMPLOYMENT_COL = "Annual_Average_Employment"
WAGE_COL = "Annual_Average_Weekly_Wage"

# row filter for the county / all-industries / private slice
COUNTY_AREA_TYPE = "County"
ALL_INDUSTRIES = "10 Total, all industries"
PRIVATE_OWNERSHIP = "Private"

# source column -> feature name, in feature-matrix column order
FEATURE_COLUMNS = {
    ESTABLISHMENTS_COL: "establishments",
    EMPLOYMENT_COL: "employment",
    WAGE_COL: "weekly_wage",
}
FEATURE_NAMES = list(FEATURE_COLUMNS.values())

# keys
KEYS = [STATE_COL, COUNTY_COL]
FIPS_COL = "fips"
GROUP_COL = "group"

# algorithm names and defaults
FUZZY_CMEANS = "fuzzy-c-means"
KMEDOIDS = "k-medoids"
ALGORITHMS = (FUZZY_CMEANS, KMEDOIDS)

DEFAULT_CLUSTER_COUNT = 4
DEFAULT_FUZZINESS = 2.0
FCM_MAX_ITER = 100
FCM_TOL = 1e-3
KMEDOIDS_MAX_ITER = 200

DEGENERATE_POLICIES = ("raise", "zero")
NONCONVERGENCE_POLICIES = ("raise", "warn")

Metric = Union[str, Callable[[np.ndarray, np.ndarray], float]]


@dataclass(frozen=True)
class ClusteringConfig:
    """
    Parameters for one clustering run over a single state.

    Attributes:
        state: Two-letter postal abbreviation (case-insensitive)
        algorithm: "fuzzy-c-means" or "k-medoids"
        cluster_count: Number of groups C (fuzzy) or k (medoids), at least 2
        fuzziness: Fuzzy c-means exponent m, strictly greater than 1
        metric: Distance used by k-medoids, a scikit-learn metric name or a callable
        random_seed: Seed for the initial weights / medoids (None = fresh entropy)
        max_iter: Iteration cap (None = algorithm default)
        tol: Fuzzy c-means convergence threshold on the weight change
        degenerate_policy: "raise" or "zero" for zero-variance features
        on_nonconvergence: "raise" or "warn" when the iteration cap is hit
    """

    state: str
    algorithm: str = KMEDOIDS
    cluster_count: int = DEFAULT_CLUSTER_COUNT
    fuzziness: float = DEFAULT_FUZZINESS
    metric: Metric = "euclidean"
    random_seed: Optional[int] = None
    max_iter: Optional[int] = None
    tol: float = FCM_TOL
    degenerate_policy: str = "raise"
    on_nonconvergence: str = "raise"

    def __post_init__(self):
        if not isinstance(self.state, str) or len(self.state.strip()) != 2:
            raise ConfigurationError(f"state must be a two-letter code, got {self.state!r}")
        if self.algorithm not in ALGORITHMS:
            raise ConfigurationError(
                f"Unknown algorithm: {self.algorithm!r}. Expected one of {ALGORITHMS}"
            )
        if isinstance(self.cluster_count, bool) or int(self.cluster_count) != self.cluster_count \
                or self.cluster_count < 2:
            raise ConfigurationError(f"cluster_count must be an integer >= 2, got {self.cluster_count!r}")
        if not self.fuzziness > 1.0:
            raise ConfigurationError(f"fuzziness must be > 1.0, got {self.fuzziness!r}")
        if not (isinstance(self.metric, str) or callable(self.metric)):
            raise ConfigurationError("metric must be a metric name or a callable (u, v) -> float")
        if self.max_iter is not None and self.max_iter < 1:
            raise ConfigurationError(f"max_iter must be >= 1, got {self.max_iter!r}")
        if not self.tol > 0:
            raise ConfigurationError(f"tol must be > 0, got {self.tol!r}")
        if self.degenerate_policy not in DEGENERATE_POLICIES:
            raise ConfigurationError(f"Unknown degenerate_policy: {self.degenerate_policy!r}")
        if self.on_nonconvergence not in NONCONVERGENCE_POLICIES:
            raise ConfigurationError(f"Unknown on_nonconvergence: {self.on_nonconvergence!r}")
