"""
State abbreviation -> state FIPS crosswalk.

- STATES lists (state name, postal abbreviation, 2-digit FIPS) for the 50 states,
  the District of Columbia and Puerto Rico.
- StateCrosswalk is the lookup the feature extraction step resolves states with.
"""
from __future__ import annotations
import re
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from .errors import NoMatchingStateError

STATES: Tuple[Tuple[str, str, str], ...] = (
    ("Alabama", "AL", "01"),
    ("Alaska", "AK", "02"),
    ("Arizona", "AZ", "04"),
    ("Arkansas", "AR", "05"),
    ("California", "CA", "06"),
    ("Colorado", "CO", "08"),
    ("Connecticut", "CT", "09"),
    ("Delaware", "DE", "10"),
    ("District of Columbia", "DC", "11"),
    ("Florida", "FL", "12"),
    ("Georgia", "GA", "13"),
    ("Hawaii", "HI", "15"),
    ("Idaho", "ID", "16"),
    ("Illinois", "IL", "17"),
    ("Indiana", "IN", "18"),
    ("Iowa", "IA", "19"),
    ("Kansas", "KS", "20"),
    ("Kentucky", "KY", "21"),
    ("Louisiana", "LA", "22"),
    ("Maine", "ME", "23"),
    ("Maryland", "MD", "24"),
    ("Massachusetts", "MA", "25"),
    ("Michigan", "MI", "26"),
    ("Minnesota", "MN", "27"),
    ("Mississippi", "MS", "28"),
    ("Missouri", "MO", "29"),
    ("Montana", "MT", "30"),
    ("Nebraska", "NE", "31"),
    ("Nevada", "NV", "32"),
    ("New Hampshire", "NH", "33"),
    ("New Jersey", "NJ", "34"),
    ("New Mexico", "NM", "35"),
    ("New York", "NY", "36"),
    ("North Carolina", "NC", "37"),
    ("North Dakota", "ND", "38"),
    ("Ohio", "OH", "39"),
    ("Oklahoma", "OK", "40"),
    ("Oregon", "OR", "41"),
    ("Pennsylvania", "PA", "42"),
    ("Rhode Island", "RI", "44"),
    ("South Carolina", "SC", "45"),
    ("South Dakota", "SD", "46"),
    ("Tennessee", "TN", "47"),
    ("Texas", "TX", "48"),
    ("Utah", "UT", "49"),
    ("Vermont", "VT", "50"),
    ("Virginia", "VA", "51"),
    ("Washington", "WA", "53"),
    ("West Virginia", "WV", "54"),
    ("Wisconsin", "WI", "55"),
    ("Wyoming", "WY", "56"),
    ("Puerto Rico", "PR", "72"),
)


class StateCrosswalk:
    """Immutable lookup from postal abbreviation to (state name, FIPS)."""

    def __init__(self, rows: Iterable[Tuple[str, str, str]]):
        table: Dict[str, Tuple[str, str]] = {}
        for name, abbrev, fips in rows:
            key = str(abbrev).strip().upper()
            if key in table:
                raise ValueError(f"Duplicate state abbreviation in crosswalk: {key}")
            table[key] = (str(name).strip(), str(fips).strip().zfill(2))
        self._table = table

    @classmethod
    def default(cls) -> "StateCrosswalk":
        return cls(STATES)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "StateCrosswalk":
        """Build from a frame with columns ``state``, ``abbrev`` and ``fips``."""
        missing = [c for c in ("state", "abbrev", "fips") if c not in df.columns]
        if missing:
            raise KeyError(f"Crosswalk columns not found: {missing}. Available: {list(df.columns)}")
        return cls(df[["state", "abbrev", "fips"]].itertuples(index=False, name=None))

    def _lookup(self, abbrev: str) -> Tuple[str, str]:
        key = str(abbrev).strip().upper() if abbrev is not None else ""
        try:
            return self._table[key]
        except KeyError:
            raise NoMatchingStateError(str(abbrev), known=self._table.keys()) from None

    def fips_for(self, abbrev: str) -> str:
        """Return the 2-digit state FIPS code for a postal abbreviation."""
        return self._lookup(abbrev)[1]

    def name_for(self, abbrev: str) -> str:
        return self._lookup(abbrev)[0]

    def __contains__(self, abbrev: object) -> bool:
        return isinstance(abbrev, str) and abbrev.strip().upper() in self._table

    def __len__(self) -> int:
        return len(self._table)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [(name, abbrev, fips) for abbrev, (name, fips) in self._table.items()],
            columns=["state", "abbrev", "fips"],
        )


def topojson_feature_name(abbrev: str, crosswalk: Optional[StateCrosswalk] = None) -> str:
    """
    Name of the county object inside a state's TopoJSON file, as a choropleth
    renderer references it (e.g. "cb_2015_new_york_county_20m").
    """
    if crosswalk is None:
        crosswalk = StateCrosswalk.default()
    name = re.sub(r"[\s\-]+", "_", crosswalk.name_for(abbrev).strip().lower())
    return f"cb_2015_{name}_county_20m"
