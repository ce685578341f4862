"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class PageTask:
    entity: str
    page_index: int
    parent: str | None = None

    @property
    def staging_key(self) -> tuple[str, str | None, int]:
        return (self.entity, self.parent, self.page_index)

    def describe(self) -> str:
        if self.parent is None:
            return f"{self.entity}/page_{self.page_index}"
        return f"{self.entity}/{self.parent}/page_{self.page_index}"


@dataclass(frozen=True)
class RawRecord:
    entity: str
    fields: tuple[str, ...]
    source_ref: str


@dataclass(frozen=True)
class RegencyKey:
    prefix: str
    name: str

    @property
    def text(self) -> str:
        return f"{self.prefix} {self.name}"


@dataclass(frozen=True)
class ProvinceRef:
    provisional_id: int
    name: str


@dataclass(frozen=True)
class ProvinceRow:
    name: str


@dataclass(frozen=True)
class RegencyRow:
    province_name: str
    regency: RegencyKey


@dataclass(frozen=True)
class VillageRow:
    zip_code: str
    village_name: str
    district_name: str
    regency: RegencyKey
    source_ref: str = ""


@dataclass
class Village:
    id: int
    district_id: int
    regency_id: int
    province_id: int
    name: str
    zip_code: str


@dataclass
class District:
    id: int
    regency_id: int
    province_id: int
    name: str
    villages: list[Village] = field(default_factory=list)


@dataclass
class Regency:
    id: int
    province_id: int
    name: str
    districts: list[District] = field(default_factory=list)


@dataclass
class Province:
    id: int
    name: str
    regencies: list[Regency] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NamedEntry:
    id: int
    name: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class VillageEntry:
    id: int
    name: str
    zip_code: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
