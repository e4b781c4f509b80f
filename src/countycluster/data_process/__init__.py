"""
Data processing for countycluster.

This subpackage turns a QCEW table into the per-state county feature matrix
and its z-scored form.
"""

from .cleaning import *
from .features import *
from .transform import *

__all__ = [
    # Cleaning
    "normalize_columns", "coerce_numeric", "zero_pad_codes",
    "drop_duplicates_on_keys", "drop_missing", "ensure_nonnegative",

    # Feature extraction
    "CountyRecord", "FeatureMatrix", "select_state_counties",
    "records_from_frame", "build_feature_matrix",

    # Normalization
    "NormalizedMatrix", "zscore_features",
]
