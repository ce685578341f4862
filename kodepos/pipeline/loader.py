"""Load staged pages back into fixed-width raw records and typed rows."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from kodepos.common.config_loader import HarvestConfig
from kodepos.common.errors import AlignmentFault, StagingReadFailure
from kodepos.common.fs import read_lines
from kodepos.common.layouts import (
    PROVINCE_LAYOUT,
    REGENCY_LAYOUT,
    VILLAGE_LAYOUT,
    ZIP_TOKEN_INDEX,
    RecordLayout,
    layout_for,
)
from kodepos.common.models import ProvinceRow, RawRecord, RegencyKey, RegencyRow, VillageRow
from kodepos.harvest.fetcher import fetched_page_indices, staged_page_path


def _read_page(path: Path, ref: str) -> list[str]:
    try:
        return read_lines(path)
    except FileNotFoundError as exc:
        raise StagingReadFailure(f"Missing staged page: {path}", key=ref) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise StagingReadFailure(f"Unreadable staged page {path}: {exc}", key=ref) from exc


def load_raw_records(
    data_dir: Path,
    entity: str,
    page_indices: Iterable[int],
    parent: str | None = None,
) -> list[RawRecord]:
    layout = layout_for(entity)
    records: list[RawRecord] = []
    for page_index in page_indices:
        path = staged_page_path(data_dir, entity, page_index, parent)
        ref = str(path.relative_to(data_dir))
        rows = _read_page(path, ref)
        if len(rows) % layout.field_count != 0:
            raise AlignmentFault(
                f"{ref} has {len(rows)} rows, not a multiple of {layout.field_count}",
                key=ref,
            )
        for start in range(0, len(rows), layout.field_count):
            records.append(
                RawRecord(
                    entity=entity,
                    fields=tuple(rows[start : start + layout.field_count]),
                    source_ref=f"{ref}#{start // layout.field_count}",
                )
            )
    return records


def _field(record: RawRecord, layout: RecordLayout, name: str) -> str:
    return record.fields[layout.offset(name)]


def parse_province(record: RawRecord) -> ProvinceRow:
    return ProvinceRow(name=_field(record, PROVINCE_LAYOUT, "name"))


def parse_regency(record: RawRecord) -> RegencyRow:
    return RegencyRow(
        province_name=_field(record, REGENCY_LAYOUT, "province_name"),
        regency=RegencyKey(
            prefix=_field(record, REGENCY_LAYOUT, "regency_prefix"),
            name=_field(record, REGENCY_LAYOUT, "regency_name"),
        ),
    )


def parse_village(record: RawRecord) -> VillageRow:
    zip_tokens = _field(record, VILLAGE_LAYOUT, "zip_line").split()
    if len(zip_tokens) <= ZIP_TOKEN_INDEX:
        raise AlignmentFault(f"Zip line without a zip code in {record.source_ref}", key=record.source_ref)
    return VillageRow(
        zip_code=zip_tokens[ZIP_TOKEN_INDEX],
        village_name=_field(record, VILLAGE_LAYOUT, "village_name"),
        district_name=_field(record, VILLAGE_LAYOUT, "district_name"),
        regency=RegencyKey(
            prefix=_field(record, VILLAGE_LAYOUT, "regency_prefix"),
            name=_field(record, VILLAGE_LAYOUT, "regency_name"),
        ),
        source_ref=record.source_ref,
    )


def _pages(config: HarvestConfig, entity: str) -> list[int]:
    return fetched_page_indices(config.max_entities(entity), config.page_size)


def load_province_names(config: HarvestConfig, data_dir: Path) -> list[str]:
    records = load_raw_records(data_dir, "province", _pages(config, "province"))
    names = (parse_province(record).name for record in records)
    return list(dict.fromkeys(names))


def load_regency_rows(config: HarvestConfig, data_dir: Path, province_names: Iterable[str]) -> list[RegencyRow]:
    rows: list[RegencyRow] = []
    pages = _pages(config, "regency")
    for province_name in province_names:
        records = load_raw_records(data_dir, "regency", pages, parent=province_name)
        rows.extend(parse_regency(record) for record in records)
    return rows


def load_village_rows(config: HarvestConfig, data_dir: Path) -> list[VillageRow]:
    records = load_raw_records(data_dir, "village", _pages(config, "village"))
    return [parse_village(record) for record in records]
