from __future__ import annotations
import logging

import pandas as pd

logger = logging.getLogger(__name__)


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Normalize QCEW headers: strip whitespace, join words with underscores,
    drop punctuation ("Area Type" -> "Area_Type").

    Args:
        df: Input DataFrame

    Returns:
        DataFrame with normalized column names
    """
    df = df.copy()
    df.columns = (
        df.columns
        .astype(str)
        .str.strip()
        .str.replace(r"\s+", "_", regex=True)
        .str.replace(r"[^0-9A-Za-z_]", "", regex=True)
    )
    return df


def coerce_numeric(df: pd.DataFrame, cols: list[str]) -> pd.DataFrame:
    """
    Convert columns to float, accepting thousands separators ("1,234").
    Unparseable cells become NaN.

    Args:
        df: Input DataFrame
        cols: Columns to convert; missing columns are skipped

    Returns:
        DataFrame with the columns cast to float64
    """
    df = df.copy()
    for col in cols:
        if col not in df.columns:
            continue
        s = df[col]
        if not pd.api.types.is_numeric_dtype(s):
            s = s.astype(str).str.replace(",", "", regex=False).str.strip()
        df[col] = pd.to_numeric(s, errors="coerce").astype("float64")
    return df


def zero_pad_codes(df: pd.DataFrame, widths: dict[str, int]) -> pd.DataFrame:
    """
    Render code columns as zero-padded strings ("1" -> "001").

    Codes read as floats ("1.0") are rendered without the decimal part so the
    leading zeros survive.

    Args:
        df: Input DataFrame
        widths: Mapping of column name to padded width

    Returns:
        DataFrame with the code columns as padded strings
    """
    df = df.copy()
    for col, width in widths.items():
        if col not in df.columns:
            continue
        s = df[col].astype(str).str.strip()
        s = s.str.replace(r"\.0+$", "", regex=True)
        df[col] = s.str.zfill(width)
    return df


def drop_duplicates_on_keys(df: pd.DataFrame, keys: list[str]) -> pd.DataFrame:
    """
    Remove duplicate rows based on specified key columns, keeping the first.

    Args:
        df: Input DataFrame
        keys: List of column names to use for duplicate detection

    Returns:
        DataFrame with duplicates removed
    """
    out = df.drop_duplicates(subset=keys[0] if len(keys) == 1 else keys, keep="first")
    if len(out) < len(df):
        logger.warning("Dropped %d duplicate rows on keys %s", len(df) - len(out), keys)
    return out


def drop_missing(df: pd.DataFrame, cols: list[str]) -> pd.DataFrame:
    """
    Drop rows with a missing or non-finite value in any of ``cols``.

    Args:
        df: Input DataFrame
        cols: Columns that must be present for a row to be kept

    Returns:
        DataFrame without the incomplete rows
    """
    values = df[cols].apply(pd.to_numeric, errors="coerce")
    keep = values.notna().all(axis=1) & ~values.isin([float("inf"), float("-inf")]).any(axis=1)
    dropped = int((~keep).sum())
    if dropped:
        logger.warning("Dropped %d rows with missing values in %s", dropped, cols)
    return df.loc[keep]


def ensure_nonnegative(df: pd.DataFrame, cols: list[str]) -> pd.DataFrame:
    """
    Validate that the given numeric columns contain only non-negative values.

    Args:
        df: Input DataFrame
        cols: Columns to check

    Returns:
        Original DataFrame if validation passes

    Raises:
        ValueError: If negative values are found in specified columns
    """
    negative = [c for c in cols if (df[c] < 0).any()]
    if negative:
        raise ValueError(f"Negative values found in columns: {negative}")
    return df
