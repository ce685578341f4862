"""Aggregate village rows into the linked tree and its flat projections.

Rows are folded into nested scopes (province, regency, district, village).
Each scope keeps its children in creation order next to a name index, so the
single numbering walk that follows hands out IDs in first-occurrence order
without ever depending on dict iteration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from kodepos.common.constants import KNOWN_DISTRICT_CORRECTIONS
from kodepos.common.logging import log_warning
from kodepos.common.models import (
    District,
    NamedEntry,
    Province,
    Regency,
    Village,
    VillageEntry,
    VillageRow,
)
from kodepos.pipeline.resolver import RegencyResolver


class _Scope:
    __slots__ = ("name", "children", "_index")

    def __init__(self, name: str) -> None:
        self.name = name
        self.children: list = []
        self._index: dict[str, object] = {}

    def child(self, name: str, factory) -> tuple[object, bool]:
        existing = self._index.get(name)
        if existing is not None:
            return existing, False
        node = factory(name)
        self._index[name] = node
        self.children.append(node)
        return node, True


class _VillageLeaf:
    __slots__ = ("name", "zip_code")

    def __init__(self, name: str) -> None:
        self.name = name
        self.zip_code = ""


@dataclass
class AggregationResult:
    tree: list[Province] = field(default_factory=list)
    provinces: list[NamedEntry] = field(default_factory=list)
    regencies_by_province: dict[str, list[NamedEntry]] = field(default_factory=dict)
    districts_by_regency: dict[str, list[NamedEntry]] = field(default_factory=dict)
    villages_by_district: dict[str, list[VillageEntry]] = field(default_factory=dict)
    zip_code_by_village: dict[str, str] = field(default_factory=dict)
    zip_conflicts: int = 0

    def counts(self) -> dict[str, int]:
        return {
            "provinces": len(self.provinces),
            "regencies": sum(len(v) for v in self.regencies_by_province.values()),
            "districts": sum(len(v) for v in self.districts_by_regency.values()),
            "villages": len(self.zip_code_by_village),
        }


def correct_district_name(name: str, corrections: dict[str, str]) -> str:
    return corrections.get(name, name)


def _collect_scopes(
    rows: Iterable[VillageRow],
    resolver: RegencyResolver,
    corrections: dict[str, str],
    logger: logging.Logger | None,
    run_id: str | None,
) -> tuple[_Scope, int]:
    root = _Scope("")
    conflicts = 0
    for row in rows:
        district_name = correct_district_name(row.district_name, corrections)
        province_ref = resolver.resolve(row.regency, source_ref=row.source_ref or None)

        province, _ = root.child(province_ref.name, _Scope)
        regency, _ = province.child(row.regency.text, _Scope)
        district, _ = regency.child(district_name, _Scope)
        village, created = district.child(row.village_name, _VillageLeaf)

        if created:
            village.zip_code = row.zip_code
        elif village.zip_code != row.zip_code:
            conflicts += 1
            if logger is not None:
                log_warning(
                    logger,
                    f"zip conflict for {row.village_name!r} in {district_name!r}; keeping {village.zip_code}",
                    run_id=run_id,
                    stage="build",
                    entity="village",
                    event="ZIP_CONFLICT",
                    status="warning",
                )
    return root, conflicts


def _assign_ids(root: _Scope) -> AggregationResult:
    result = AggregationResult()
    regency_id = district_id = village_id = 0

    for province_id, province_scope in enumerate(root.children, start=1):
        province = Province(id=province_id, name=province_scope.name)
        result.provinces.append(NamedEntry(id=province_id, name=province.name))
        regency_entries = result.regencies_by_province.setdefault(str(province_id), [])

        for regency_scope in province_scope.children:
            regency_id += 1
            regency = Regency(id=regency_id, province_id=province_id, name=regency_scope.name)
            regency_entries.append(NamedEntry(id=regency_id, name=regency.name))
            district_entries = result.districts_by_regency.setdefault(str(regency_id), [])

            for district_scope in regency_scope.children:
                district_id += 1
                district = District(
                    id=district_id,
                    regency_id=regency_id,
                    province_id=province_id,
                    name=district_scope.name,
                )
                district_entries.append(NamedEntry(id=district_id, name=district.name))
                village_entries = result.villages_by_district.setdefault(str(district_id), [])

                for leaf in district_scope.children:
                    village_id += 1
                    district.villages.append(
                        Village(
                            id=village_id,
                            district_id=district_id,
                            regency_id=regency_id,
                            province_id=province_id,
                            name=leaf.name,
                            zip_code=leaf.zip_code,
                        )
                    )
                    village_entries.append(VillageEntry(id=village_id, name=leaf.name, zip_code=leaf.zip_code))
                    result.zip_code_by_village[str(village_id)] = leaf.zip_code

                regency.districts.append(district)
            province.regencies.append(regency)
        result.tree.append(province)

    return result


def aggregate_villages(
    rows: Iterable[VillageRow],
    resolver: RegencyResolver,
    *,
    corrections: dict[str, str] | None = None,
    logger: logging.Logger | None = None,
    run_id: str | None = None,
) -> AggregationResult:
    """Deduplicate village rows by scope and number every level.

    ``corrections`` maps misspelled district names to canonical ones. It extends
    the built-in table and is applied before deduplication. Raises
    ``ResolutionFault`` for a row whose regency the resolver does not know.
    """
    table = dict(KNOWN_DISTRICT_CORRECTIONS)
    table.update(corrections or {})
    root, conflicts = _collect_scopes(rows, resolver, table, logger, run_id)
    result = _assign_ids(root)
    result.zip_conflicts = conflicts
    return result
