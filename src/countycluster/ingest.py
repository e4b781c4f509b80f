from __future__ import annotations
from pathlib import Path
from typing import Union

import pandas as pd

from .config import RAW_QCEW_CSV, RAW_CROSSWALK_CSV, FEATURE_COLUMNS, STATE_COL, COUNTY_COL
from .data_process.cleaning import normalize_columns, coerce_numeric, zero_pad_codes
from .validators import validate_qcew, validate_crosswalk

PathLike = Union[str, Path]


def _read_table(path: Path) -> pd.DataFrame:
    # codes stay strings so leading zeros survive
    if path.suffix.lower() == ".xlsx":
        return pd.read_excel(path, engine="openpyxl", dtype={STATE_COL: str, COUNTY_COL: str})
    return pd.read_csv(path, dtype={STATE_COL: str, COUNTY_COL: str}, low_memory=False)


def read_qcew(path: PathLike | None = None, validate: bool = True) -> pd.DataFrame:
    """
    Read a QCEW annual-averages table (CSV or Excel) with normalized headers
    and float feature columns; validated against ``validators.qcew_schema``.
    """
    df = _read_table(Path(path or RAW_QCEW_CSV))
    df = normalize_columns(df)
    df = coerce_numeric(df, list(FEATURE_COLUMNS))
    df = zero_pad_codes(df, {STATE_COL: 2})
    return validate_qcew(df) if validate else df


def read_state_crosswalk(path: PathLike | None = None, validate: bool = True) -> pd.DataFrame:
    df = pd.read_csv(path or RAW_CROSSWALK_CSV, dtype=str)
    df.columns = df.columns.str.strip().str.lower()
    df["abbrev"] = df["abbrev"].str.strip().str.upper()
    df = zero_pad_codes(df, {"fips": 2})
    return validate_crosswalk(df) if validate else df
