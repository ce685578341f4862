"""Output contract checks run before any artifact is written."""

from __future__ import annotations

from kodepos.common.errors import ContractError
from kodepos.pipeline.aggregate import AggregationResult


def _dense(ids: list[int]) -> bool:
    return ids == list(range(1, len(ids) + 1))


def check_contracts(result: AggregationResult) -> None:
    errors: list[str] = []

    province_ids = [p.id for p in result.tree]
    regencies = [r for p in result.tree for r in p.regencies]
    districts = [d for r in regencies for d in r.districts]
    villages = [v for d in districts for v in d.villages]

    for level, ids in (
        ("province", province_ids),
        ("regency", [r.id for r in regencies]),
        ("district", [d.id for d in districts]),
        ("village", [v.id for v in villages]),
    ):
        if not _dense(ids):
            errors.append(f"{level.upper()}_IDS_NOT_DENSE")

    for province in result.tree:
        if any(r.province_id != province.id for r in province.regencies):
            errors.append("REGENCY_PARENT_MISMATCH")
        for regency in province.regencies:
            for district in regency.districts:
                if (district.regency_id, district.province_id) != (regency.id, province.id):
                    errors.append("DISTRICT_PARENT_MISMATCH")
                for village in district.villages:
                    if (village.district_id, village.regency_id, village.province_id) != (
                        district.id,
                        regency.id,
                        province.id,
                    ):
                        errors.append("VILLAGE_PARENT_MISMATCH")

    if [p.id for p in result.provinces] != province_ids:
        errors.append("PROVINCE_LIST_MISMATCH")
    if len(result.zip_code_by_village) != len(villages):
        errors.append("ZIP_INDEX_SIZE_MISMATCH")
    flat_villages = sum(len(entries) for entries in result.villages_by_district.values())
    if flat_villages != len(villages):
        errors.append("VILLAGE_PROJECTION_SIZE_MISMATCH")

    if errors:
        raise ContractError(";".join(sorted(set(errors))))
