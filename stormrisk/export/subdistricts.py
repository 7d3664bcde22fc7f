import logging
from dataclasses import dataclass
from typing import Any, Iterable, Union

import pandas as pd

from ..data.schemas import DistrictCollection, DistrictFeature
from ..utils.formatting import js_number, round_half_up

LOGGER = logging.getLogger(__name__)

EXPORT_FILENAME = "bangladesh_subdistricts_export.csv"
EXPORT_MIME = "text/csv"

DISTRICT_COL = "District Name"
SUBDISTRICT_COL = "Sub-district/Upazila"
CHILDREN_COL = "Number of children under 5"
HEALTH_COL = "Count of Health Facilities"
EDUCATION_COL = "Count of Education Facilities"
SEVERITY_COL = "Severity Level"

EXPORT_COLUMNS = [
    DISTRICT_COL,
    SUBDISTRICT_COL,
    CHILDREN_COL,
    HEALTH_COL,
    EDUCATION_COL,
    SEVERITY_COL,
]

# Ranks the textual risk_level, not storm_risk_score; feeds may disagree between the two
SEVERITY_RANK = {
    "Very High": 5,
    "High": 4,
    "Medium": 3,
    "Low": 2,
    "Very Low": 1,
    "No Risk": 0,
}


@dataclass(frozen=True)
class ExportArtifact:
    content: str
    rows: pd.DataFrame
    filename: str = EXPORT_FILENAME
    mime: str = EXPORT_MIME


def severity_rank(label: Any) -> int:
    return SEVERITY_RANK.get(label, 0) if isinstance(label, str) else 0


def subdistrict_rows(districts: Union[DistrictCollection, Iterable[DistrictFeature]]) -> pd.DataFrame:
    """
    One row per sub-district name, first occurrence wins, sorted by severity
    (highest first). Ties keep their feed order.

    Sub-districts are keyed by NAME_4 alone, so two districts sharing an
    upazila name lose the later row.
    """
    features = districts.features if isinstance(districts, DistrictCollection) else list(districts)
    records = []
    for feature in features:
        props = feature.properties
        records.append(
            {
                DISTRICT_COL: props.name_2,
                SUBDISTRICT_COL: props.name_4,
                CHILDREN_COL: round_half_up(props.children_under_five or 0),
                HEALTH_COL: props.health_facility_count or 0,
                EDUCATION_COL: props.education_facility_count or 0,
                SEVERITY_COL: props.risk_level or "",
            }
        )
    df = pd.DataFrame(records, columns=EXPORT_COLUMNS, dtype=object)
    unique = df.drop_duplicates(subset=SUBDISTRICT_COL, keep="first")
    dropped = len(df) - len(unique)
    if dropped:
        LOGGER.warning("Dropped %d district rows with a repeated sub-district name.", dropped)
    ranked = unique.assign(_rank=[-severity_rank(v) for v in unique[SEVERITY_COL]])
    return ranked.sort_values("_rank", kind="stable").drop(columns="_rank").reset_index(drop=True)


def _quote(value: Any) -> str:
    return '"' + js_number(value).replace('"', '""') + '"'


def rows_to_csv(rows: pd.DataFrame) -> str:
    """Unquoted header line, fully quoted data lines, ``\\n`` separators, no trailing newline."""
    lines = [",".join(EXPORT_COLUMNS)]
    for record in rows[EXPORT_COLUMNS].itertuples(index=False, name=None):
        lines.append(",".join(_quote(v) for v in record))
    return "\n".join(lines)


def export_subdistricts(districts: Union[DistrictCollection, Iterable[DistrictFeature]]) -> ExportArtifact:
    rows = subdistrict_rows(districts)
    content = rows_to_csv(rows)
    LOGGER.info("Prepared %s with %d sub-district rows.", EXPORT_FILENAME, len(rows))
    return ExportArtifact(content=content, rows=rows)
