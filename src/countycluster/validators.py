from __future__ import annotations
import pandas as pd
import pandera as pa
from pandera import Column, DataFrameSchema, Check

from .config import (
    AREA_TYPE_COL, INDUSTRY_COL, OWNERSHIP_COL, STATE_COL, COUNTY_COL, AREA_COL,
    ESTABLISHMENTS_COL, EMPLOYMENT_COL, WAGE_COL,
)

_nonnegative = Check.ge(0)

qcew_schema = DataFrameSchema(
    {
        AREA_TYPE_COL: Column(str, nullable=False, coerce=True),
        INDUSTRY_COL: Column(str, nullable=False, coerce=True),
        OWNERSHIP_COL: Column(str, nullable=False, coerce=True),
        STATE_COL: Column(nullable=False),
        COUNTY_COL: Column(nullable=True),
        AREA_COL: Column(str, nullable=False, coerce=True),
        # suppressed cells stay NaN here and are dropped at feature extraction
        ESTABLISHMENTS_COL: Column(pa.Float, _nonnegative, nullable=True, coerce=True),
        EMPLOYMENT_COL: Column(pa.Float, _nonnegative, nullable=True, coerce=True),
        WAGE_COL: Column(pa.Float, _nonnegative, nullable=True, coerce=True),
    },
    strict=False,
)

crosswalk_schema = DataFrameSchema(
    {
        "state": Column(str, nullable=False),
        "abbrev": Column(str, Check.str_matches(r"^[A-Z]{2}$"), nullable=False, unique=True),
        "fips": Column(str, Check.str_matches(r"^\d{2}$"), nullable=False),
    },
    strict=False,
)


def validate_qcew(df: pd.DataFrame) -> pd.DataFrame:
    return qcew_schema.validate(df, lazy=True)


def validate_crosswalk(df: pd.DataFrame) -> pd.DataFrame:
    return crosswalk_schema.validate(df, lazy=True)
