"""
County feature extraction.

Selects the county / all-industries / private-ownership slice of a QCEW table
for one state and turns it into a FeatureMatrix: one row per county (indexed by
the 5-character FIPS code), one column per feature, in the order of
``config.FEATURE_NAMES``.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..config import (
    AREA_TYPE_COL, INDUSTRY_COL, OWNERSHIP_COL, STATE_COL, COUNTY_COL, AREA_COL,
    COUNTY_AREA_TYPE, ALL_INDUSTRIES, PRIVATE_OWNERSHIP,
    FEATURE_COLUMNS, FEATURE_NAMES, KEYS, FIPS_COL,
)
from ..crosswalk import StateCrosswalk
from ..errors import EmptyDatasetError, InvalidRecordError
from .cleaning import (
    coerce_numeric, zero_pad_codes, drop_missing, drop_duplicates_on_keys, ensure_nonnegative,
)

logger = logging.getLogger(__name__)

__all__ = [
    "CountyRecord",
    "FeatureMatrix",
    "select_state_counties",
    "records_from_frame",
    "build_feature_matrix",
]


@dataclass(frozen=True)
class CountyRecord:
    state_code: str
    county_code: str
    area_name: str
    establishments: float
    employment: float
    weekly_wage: float

    @property
    def fips(self) -> str:
        return f"{self.state_code}{self.county_code}"

    def features(self) -> tuple:
        return (self.establishments, self.employment, self.weekly_wage)


@dataclass(frozen=True, eq=False)
class FeatureMatrix:
    """
    Counties x features table.

    Attributes:
        data (pd.DataFrame): float values, index = FIPS (county order), columns = features
        area_names (pd.Series): county names aligned to ``data.index``
    """

    data: pd.DataFrame
    area_names: pd.Series

    def __post_init__(self):
        if not self.data.index.equals(self.area_names.index):
            raise ValueError("area_names must be indexed like the feature data")

    @property
    def fips(self) -> list[str]:
        return list(self.data.index)

    @property
    def feature_names(self) -> list[str]:
        return list(self.data.columns)

    @property
    def n_counties(self) -> int:
        return self.data.shape[0]

    def to_numpy(self) -> np.ndarray:
        return self.data.to_numpy(dtype=float, copy=True)

    def __len__(self) -> int:
        return self.n_counties

    def __repr__(self):
        return (
            f"{type(self).__name__}(counties={self.n_counties}, "
            f"features={self.feature_names})"
        )


def _state_filter(df: pd.DataFrame, state_fips: str) -> pd.Series:
    st = df[STATE_COL].astype(str).str.strip().str.replace(r"\.0+$", "", regex=True).str.zfill(2)
    return (
        (df[AREA_TYPE_COL] == COUNTY_AREA_TYPE)
        & (df[INDUSTRY_COL] == ALL_INDUSTRIES)
        & (df[OWNERSHIP_COL] == PRIVATE_OWNERSHIP)
        & (st == state_fips)
    )


def select_state_counties(
    df: pd.DataFrame,
    state: str,
    crosswalk: Optional[StateCrosswalk] = None,
) -> pd.DataFrame:
    """
    Return the private, all-industries county rows of one state.

    Args:
        df: QCEW table with normalized headers
        state: Two-letter postal abbreviation
        crosswalk: State lookup (default: the bundled 50 states + DC + PR table)

    Returns:
        Filtered DataFrame in input order, with zero-padded ``St``/``Cnty``
        codes and a ``fips`` column; rows missing a feature value are dropped.

    Raises:
        NoMatchingStateError: state is not in the crosswalk
        EmptyDatasetError: no county rows remain for the state
        InvalidRecordError: required columns are missing or a feature is negative
    """
    if crosswalk is None:
        crosswalk = StateCrosswalk.default()
    state_fips = crosswalk.fips_for(state)

    required = [AREA_TYPE_COL, INDUSTRY_COL, OWNERSHIP_COL, STATE_COL, COUNTY_COL, AREA_COL,
                *FEATURE_COLUMNS]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise InvalidRecordError(
            f"QCEW columns not found: {missing}. Available: {list(df.columns)[:20]}..."
        )

    out = df.loc[_state_filter(df, state_fips)]
    out = zero_pad_codes(out, {STATE_COL: 2, COUNTY_COL: 3})
    out = coerce_numeric(out, list(FEATURE_COLUMNS))
    out = drop_missing(out, list(FEATURE_COLUMNS))
    try:
        out = ensure_nonnegative(out, list(FEATURE_COLUMNS))
    except ValueError as exc:
        raise InvalidRecordError(f"{exc} (state {state!r})") from exc
    out = drop_duplicates_on_keys(out, KEYS)
    if out.empty:
        raise EmptyDatasetError(
            f"No county rows for state {state!r} (FIPS {state_fips}) after filtering on "
            f"{AREA_TYPE_COL}={COUNTY_AREA_TYPE!r}, {INDUSTRY_COL}={ALL_INDUSTRIES!r}, "
            f"{OWNERSHIP_COL}={PRIVATE_OWNERSHIP!r}"
        )
    out = out.assign(**{FIPS_COL: out[STATE_COL] + out[COUNTY_COL]})
    logger.info("Selected %d counties for %s (FIPS %s)", len(out), state, state_fips)
    return out


def records_from_frame(df: pd.DataFrame) -> list[CountyRecord]:
    """Convert rows returned by ``select_state_counties`` into CountyRecords."""
    est, emp, wage = FEATURE_COLUMNS
    return [
        CountyRecord(
            state_code=str(row[STATE_COL]),
            county_code=str(row[COUNTY_COL]),
            area_name=str(row[AREA_COL]),
            establishments=float(row[est]),
            employment=float(row[emp]),
            weekly_wage=float(row[wage]),
        )
        for _, row in df.iterrows()
    ]


def build_feature_matrix(source: Union[pd.DataFrame, Iterable[CountyRecord]]) -> FeatureMatrix:
    """
    Build the counties x features matrix.

    Args:
        source: Rows from ``select_state_counties`` or a sequence of CountyRecords

    Raises:
        EmptyDatasetError: no counties
        ValueError: duplicate FIPS codes or non-finite feature values
    """
    if isinstance(source, pd.DataFrame):
        records: Sequence[CountyRecord] = records_from_frame(source)
    else:
        records = list(source)
    if not records:
        raise EmptyDatasetError("Cannot build a feature matrix from zero counties")

    index = pd.Index([r.fips for r in records], name=FIPS_COL)
    if not index.is_unique:
        dups = index[index.duplicated()].unique()
        raise ValueError(f"Duplicate county FIPS codes (first 10): {dups[:10].tolist()}")

    values = np.array([r.features() for r in records], dtype=float)
    if not np.isfinite(values).all():
        bad = index[~np.isfinite(values).all(axis=1)]
        raise ValueError(f"Non-finite feature values for counties: {bad[:10].tolist()}")

    data = pd.DataFrame(values, index=index, columns=FEATURE_NAMES)
    names = pd.Series([r.area_name for r in records], index=index, name=AREA_COL)
    return FeatureMatrix(data=data, area_names=names)
