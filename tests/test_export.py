import csv
import io
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from stormrisk.data.schemas import DistrictCollection
from stormrisk.export.subdistricts import (
    EXPORT_COLUMNS,
    EXPORT_FILENAME,
    EXPORT_MIME,
    SEVERITY_COL,
    export_subdistricts,
    severity_rank,
    subdistrict_rows,
)

HEADER = (
    "District Name,Sub-district/Upazila,Number of children under 5,"
    "Count of Health Facilities,Count of Education Facilities,Severity Level"
)


def _districts(*props_list):
    return DistrictCollection.model_validate(
        {
            "type": "FeatureCollection",
            "features": [
                {"type": "Feature", "geometry": None, "properties": props} for props in props_list
            ],
        }
    )


def _parse(text):
    return list(csv.reader(io.StringIO(text)))


def test_end_to_end_example():
    districts = _districts(
        {
            "NAME_2": "A",
            "NAME_4": "X",
            "children_under_five": 4.6,
            "health_facility_count": 2,
            "education_facility_count": None,
            "risk_level": "High",
        },
        {
            "NAME_2": "B",
            "NAME_4": "X",
            "children_under_five": 1,
            "health_facility_count": 0,
            "education_facility_count": 1,
            "risk_level": "Low",
        },
        {
            "NAME_2": "C",
            "NAME_4": "Y",
            "children_under_five": 0,
            "health_facility_count": 1,
            "education_facility_count": 1,
            "risk_level": "Very High",
        },
    )
    artifact = export_subdistricts(districts)
    assert artifact.filename == EXPORT_FILENAME == "bangladesh_subdistricts_export.csv"
    assert artifact.mime == EXPORT_MIME == "text/csv"
    assert artifact.content == "\n".join(
        [
            HEADER,
            '"C","Y","0","1","1","Very High"',
            '"A","X","5","2","0","High"',
        ]
    )


def test_first_occurrence_wins_and_count_bound():
    districts = _districts(
        {"NAME_2": "Satkhira", "NAME_4": "Sadar", "risk_level": "Low"},
        {"NAME_2": "Khulna", "NAME_4": "Koyra", "risk_level": "High"},
        {"NAME_2": "Bagerhat", "NAME_4": "Sadar", "risk_level": "Very High"},
    )
    rows = subdistrict_rows(districts)
    assert len(rows) == 2 <= len(districts.features)
    sadar = rows[rows["Sub-district/Upazila"] == "Sadar"].iloc[0]
    assert sadar["District Name"] == "Satkhira"
    assert sadar[SEVERITY_COL] == "Low"


def test_unique_names_keep_every_row():
    districts = _districts(*({"NAME_4": f"U{i}", "risk_level": "Medium"} for i in range(5)))
    assert len(subdistrict_rows(districts)) == 5


def test_sorted_by_rank_and_stable_for_ties():
    districts = _districts(
        {"NAME_4": "a", "risk_level": "Low"},
        {"NAME_4": "b", "risk_level": "Extreme"},
        {"NAME_4": "c", "risk_level": "Very High"},
        {"NAME_4": "d", "risk_level": "Low"},
        {"NAME_4": "e", "risk_level": "No Risk"},
        {"NAME_4": "f"},
        {"NAME_4": "g", "risk_level": "Very High"},
        {"NAME_4": "h", "risk_level": "Medium"},
    )
    rows = subdistrict_rows(districts)
    assert list(rows["Sub-district/Upazila"]) == ["c", "g", "h", "a", "d", "b", "e", "f"]
    ranks = [severity_rank(v) for v in rows[SEVERITY_COL]]
    assert all(a >= b for a, b in zip(ranks, ranks[1:]))


def test_defaults_for_missing_attributes():
    artifact = export_subdistricts(_districts({"NAME_2": "Bhola", "NAME_4": "Char Fasson"}))
    assert _parse(artifact.content)[1] == ["Bhola", "Char Fasson", "0", "0", "0", ""]


def test_children_round_half_up():
    districts = _districts(
        {"NAME_4": "a", "children_under_five": 2.5},
        {"NAME_4": "b", "children_under_five": 3.49},
        {"NAME_4": "c", "children_under_five": 41230.5},
    )
    parsed = _parse(export_subdistricts(districts).content)
    assert [row[2] for row in parsed[1:]] == ["3", "3", "41231"]


def test_quotes_are_doubled_and_round_trip():
    districts = _districts(
        {
            "NAME_2": 'Cox"s Bazar',
            "NAME_4": "Teknaf, Sabrang",
            "children_under_five": 120.2,
            "health_facility_count": 3,
            "education_facility_count": 7.0,
            "risk_level": "Medium",
        },
        {"NAME_2": "Bhola", "NAME_4": "Char Fasson", "risk_level": "High"},
    )
    artifact = export_subdistricts(districts)
    lines = artifact.content.split("\n")
    assert lines[0] == HEADER
    assert lines[2] == '"Cox""s Bazar","Teknaf, Sabrang","120","3","7","Medium"'
    parsed = _parse(artifact.content)
    assert parsed[0] == EXPORT_COLUMNS
    assert parsed[1:] == [
        ["Bhola", "Char Fasson", "0", "0", "0", "High"],
        ['Cox"s Bazar', "Teknaf, Sabrang", "120", "3", "7", "Medium"],
    ]
    assert not artifact.content.endswith("\n")


def test_empty_collection_is_header_only():
    artifact = export_subdistricts(_districts())
    assert artifact.content == HEADER
    assert artifact.rows.empty
