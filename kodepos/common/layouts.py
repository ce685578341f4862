"""Fixed field layouts of the staged source rows, one entry per entity type.

Every record on a source page is rendered as a fixed number of table cells.
Staged pages keep one cell per line, so a record is a run of ``field_count``
consecutive lines and each named field sits at a fixed offset inside that run.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RecordLayout:
    entity: str
    field_count: int
    offsets: dict[str, int]

    def offset(self, field: str) -> int:
        return self.offsets[field]


PROVINCE_LAYOUT = RecordLayout(
    entity="province",
    field_count=10,
    offsets={"name": 1},
)

REGENCY_LAYOUT = RecordLayout(
    entity="regency",
    field_count=7,
    offsets={"province_name": 1, "regency_prefix": 2, "regency_name": 3},
)

VILLAGE_LAYOUT = RecordLayout(
    entity="village",
    field_count=6,
    offsets={
        "zip_line": 1,
        "village_name": 2,
        "district_name": 3,
        "regency_prefix": 4,
        "regency_name": 5,
    },
)

# Zip code is the third whitespace-delimited token of the zip line.
ZIP_TOKEN_INDEX = 2

LAYOUTS = {layout.entity: layout for layout in (PROVINCE_LAYOUT, REGENCY_LAYOUT, VILLAGE_LAYOUT)}


def layout_for(entity: str) -> RecordLayout:
    try:
        return LAYOUTS[entity]
    except KeyError:
        raise ValueError(f"Unknown entity type: {entity}") from None
