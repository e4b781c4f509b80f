import pandas as pd
import pytest

QCEW_COLUMNS = [
    "Area_Type", "St", "Cnty", "Area", "Ownership", "Industry",
    "Annual_Average_Establishment_Count", "Annual_Average_Employment",
    "Annual_Average_Weekly_Wage",
]


def county_row(st, cnty, area, est, emp, wage,
               area_type="County", ownership="Private", industry="10 Total, all industries"):
    return [area_type, st, cnty, area, ownership, industry, est, emp, wage]


def make_qcew(rows):
    return pd.DataFrame(rows, columns=QCEW_COLUMNS)


@pytest.fixture
def three_counties_qcew():
    # two near-identical counties and one large outlier, Washington (53)
    return make_qcew([
        county_row("53", "1", "Adams County, Washington", 10, 100, 500),
        county_row("53", "3", "Asotin County, Washington", 12, 110, 520),
        county_row("53", "33", "King County, Washington", 500, 5000, 900),
    ])


@pytest.fixture
def qcew_frame():
    return make_qcew([
        # Washington private county rows
        county_row("53", "1", "Adams County, Washington", 10, 100, 500),
        county_row("53", "3", "Asotin County, Washington", 12, 110, 520),
        county_row("53", "33", "King County, Washington", 500, 5000, 900),
        county_row("53", "35", "Kitsap County, Washington", 150, 1800, 700),
        # same counties, wrong slice
        county_row("53", "1", "Adams County, Washington", 3, 40, 800, ownership="Federal Government"),
        county_row("53", "1", "Adams County, Washington", 2, 30, 450, industry="1021 Trade, transportation, and utilities"),
        county_row("53", "0", "Washington -- Statewide", 900, 9000, 800, area_type="State"),
        # suppressed county
        county_row("53", "5", "Benton County, Washington", None, 2000, 650),
        # another state
        county_row("41", "1", "Baker County, Oregon", 20, 300, 600),
        county_row("41", "3", "Benton County, Oregon", 40, 900, 640),
    ])
