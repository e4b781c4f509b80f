import pandas as pd
import pandera as pa
import pytest

from countycluster.crosswalk import StateCrosswalk
from countycluster.ingest import read_qcew, read_state_crosswalk
from countycluster.pipeline import prepare_features

RAW_QCEW = (
    "Area Type,St,Cnty,Area,Ownership,Industry,"
    "Annual Average Establishment Count,Annual Average Employment,Annual Average Weekly Wage\n"
    'County,53,001,"Adams County, Washington",Private,"10 Total, all industries",10,100,500\n'
    'County,53,003,"Asotin County, Washington",Private,"10 Total, all industries",12,110,520\n'
    'County,53,033,"King County, Washington",Private,"10 Total, all industries",500,"5,000",900\n'
    'County,06,037,"Los Angeles County, California",Private,"10 Total, all industries",'
    '"1,234","40,000","1,100"\n'
)


@pytest.fixture
def qcew_csv(tmp_path):
    path = tmp_path / "qcew.csv"
    path.write_text(RAW_QCEW)
    return path


def test_read_qcew_normalizes_headers_and_values(qcew_csv):
    df = read_qcew(qcew_csv)
    assert "Area_Type" in df.columns
    assert "Annual_Average_Establishment_Count" in df.columns
    assert df["St"].tolist() == ["53", "53", "53", "06"]
    assert df["Cnty"].tolist() == ["001", "003", "033", "037"]
    assert df["Annual_Average_Employment"].tolist() == [100.0, 110.0, 5000.0, 40000.0]
    assert df["Annual_Average_Weekly_Wage"].iloc[3] == 1100.0


def test_read_qcew_feeds_the_pipeline(qcew_csv):
    features, _ = prepare_features(read_qcew(qcew_csv), "WA")
    assert features.fips == ["53001", "53003", "53033"]
    assert features.data.loc["53033", "employment"] == 5000.0


def test_read_qcew_excel(tmp_path, qcew_csv):
    path = tmp_path / "qcew.xlsx"
    pd.read_csv(qcew_csv, dtype=str).to_excel(path, index=False, engine="openpyxl")
    df = read_qcew(path)
    assert df["Cnty"].tolist() == ["001", "003", "033", "037"]
    assert df["Annual_Average_Establishment_Count"].iloc[3] == 1234.0


def test_read_qcew_rejects_negative_counts(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text(RAW_QCEW.replace(",10,100,500", ",-10,100,500"))
    with pytest.raises(pa.errors.SchemaErrors):
        read_qcew(path)
    # validation can be skipped
    assert read_qcew(path, validate=False)["Annual_Average_Establishment_Count"].iloc[0] == -10.0


def test_read_state_crosswalk(tmp_path):
    path = tmp_path / "states.csv"
    path.write_text("State,Abbrev,FIPS\nWashington,wa,53\nCalifornia,CA,6\n")
    df = read_state_crosswalk(path)
    assert df["abbrev"].tolist() == ["WA", "CA"]
    assert df["fips"].tolist() == ["53", "06"]
    cw = StateCrosswalk.from_frame(df)
    assert cw.fips_for("ca") == "06"


def test_read_state_crosswalk_rejects_duplicates(tmp_path):
    path = tmp_path / "states.csv"
    path.write_text("state,abbrev,fips\nWashington,WA,53\nWashington,WA,53\n")
    with pytest.raises(pa.errors.SchemaErrors):
        read_state_crosswalk(path)
