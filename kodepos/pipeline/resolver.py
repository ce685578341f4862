"""Regency to province lookup built from the regency harvest."""

from __future__ import annotations

from typing import Iterable

from kodepos.common.errors import ResolutionFault
from kodepos.common.models import ProvinceRef, RegencyKey, RegencyRow


class RegencyResolver:
    def __init__(self, provinces_by_regency: dict[str, ProvinceRef]) -> None:
        self._provinces_by_regency = provinces_by_regency

    @classmethod
    def from_records(cls, rows: Iterable[RegencyRow]) -> "RegencyResolver":
        mapping: dict[str, ProvinceRef] = {}
        for row in rows:
            key = row.regency.text
            existing = mapping.get(key)
            if existing is not None and existing.name != row.province_name:
                raise ResolutionFault(
                    f"Regency {key!r} is listed under both {existing.name!r} and {row.province_name!r}",
                    key=key,
                )
            mapping[key] = ProvinceRef(provisional_id=0, name=row.province_name)
        return cls(mapping)

    def __len__(self) -> int:
        return len(self._provinces_by_regency)

    def __contains__(self, key: RegencyKey) -> bool:
        return key.text in self._provinces_by_regency

    def resolve(self, key: RegencyKey, *, source_ref: str | None = None) -> ProvinceRef:
        try:
            return self._provinces_by_regency[key.text]
        except KeyError:
            raise ResolutionFault(
                f"Regency {key.text!r} is unknown to the regency harvest",
                key=source_ref or key.text,
            ) from None
