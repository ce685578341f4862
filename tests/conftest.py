"""Shared fixtures: in-memory harvest configs and a fake kodepos listing."""

from __future__ import annotations

import copy
import threading
from html import escape
from pathlib import Path

import pytest
import yaml

from kodepos.common.config_loader import HarvestConfig
from kodepos.common.fs import write_lines
from kodepos.common.layouts import layout_for
from kodepos.common.schema import validate_harvest_config
from kodepos.harvest.fetcher import staged_page_path

BASE_CONFIG = {
    "source": {
        "base_url": "https://kodepos.example/_kodepos.php",
        "row_selector": "tr[bgcolor='#ccffff'] > td",
        "retry": {"max_attempts": 1},
    },
    "fetch": {"page_size": 2, "concurrency": 2, "cooldown_seconds": 0, "skip_existing": False},
    "entities": {
        "province": {"max_entities": 2},
        "regency": {"max_entities": 3},
        "village": {"max_entities": 6},
    },
    "name_corrections": {"district": {"Kinovaru": "Kinovaro"}},
    "output": {
        "tree_filename": "zip_codes.json",
        "provinces_filename": "prov_map.json",
        "regencies_filename": "reg_map.json",
        "districts_filename": "dis_map.json",
        "villages_filename": "vil_map.json",
        "zip_codes_filename": "zip_code_map.json",
    },
}

PROVINCES = ["DKI Jakarta", "Jawa Barat"]

REGENCIES = [
    ("DKI Jakarta", "Kota", "Jakarta Pusat"),
    ("Jawa Barat", "Kota", "Bandung"),
    ("Jawa Barat", "Kabupaten", "Bandung"),
]

# (zip, village, district, regency prefix, regency name)
VILLAGES = [
    ("10110", "Gambir", "Gambir", "Kota", "Jakarta Pusat"),
    ("10120", "Kebon Kelapa", "Gambir", "Kota", "Jakarta Pusat"),
    ("40111", "Braga", "Sumur Bandung", "Kota", "Bandung"),
    ("10111", "Gambir", "Gambir", "Kota", "Jakarta Pusat"),
    ("40375", "Cileunyi Kulon", "Cileunyi", "Kabupaten", "Bandung"),
    ("40112", "Kebon Pisang", "Sumur Bandung", "Kota", "Bandung"),
]


def province_fields(index: int, name: str) -> list[str]:
    fields = [str(index), name] + [f"p{i}" for i in range(2, layout_for("province").field_count)]
    return fields


def regency_fields(index: int, province: str, prefix: str, name: str) -> list[str]:
    return [str(index), province, prefix, name, "x", "y", "z"]


def village_fields(index: int, zip_code: str, village: str, district: str, prefix: str, regency: str) -> list[str]:
    return [str(index), f"Kode Pos {zip_code}", village, district, prefix, regency]


def make_harvest_config(**overrides) -> HarvestConfig:
    raw = copy.deepcopy(BASE_CONFIG)
    for section, values in overrides.items():
        raw[section].update(values)
    return HarvestConfig(raw=validate_harvest_config(raw))


@pytest.fixture
def harvest_config() -> HarvestConfig:
    return make_harvest_config()


@pytest.fixture
def stage_page(tmp_path: Path):
    def _stage(entity: str, page_index: int, rows: list[str], parent: str | None = None) -> Path:
        path = staged_page_path(tmp_path, entity, page_index, parent)
        write_lines(path, rows)
        return path

    return _stage


class FakeKodeposClient:
    """Serves the fixture dataset as kodepos-style HTML pages."""

    def __init__(self, villages=None):
        self.villages = list(VILLAGES if villages is None else villages)
        self.calls: list[dict] = []
        self.lock = threading.Lock()

    def _records(self, params: dict) -> list[list[str]]:
        selector = params["_i"]
        if selector == "provinsi-kodepos":
            return [province_fields(i, name) for i, name in enumerate(PROVINCES, start=1)]
        if selector == "kota-kodepos":
            matching = [r for r in REGENCIES if r[0] == params["jobs"]]
            return [regency_fields(i, *r) for i, r in enumerate(matching, start=1)]
        if selector == "desa-kodepos":
            return [village_fields(i, *v) for i, v in enumerate(self.villages, start=1)]
        raise AssertionError(f"unexpected selector {selector}")

    def get_text(self, url: str, **kwargs) -> str:
        params = kwargs.get("params") or {}
        with self.lock:
            self.calls.append(dict(params))
        records = self._records(params)[int(params["no1"]) - 1 : int(params["no2"])]
        rows = "".join(
            "<tr bgcolor=\"#ccffff\">" + "".join(f"<td>{escape(cell)}</td>" for cell in record) + "</tr>"
            for record in records
        )
        return f"<html><body><table><tr><td>header</td></tr>{rows}</table></body></html>"

    def close(self):
        return None


@pytest.fixture
def fake_client() -> FakeKodeposClient:
    return FakeKodeposClient()


def write_config_dir(path: Path, **overrides) -> Path:
    raw = copy.deepcopy(BASE_CONFIG)
    for section, values in overrides.items():
        raw[section].update(values)
    path.mkdir(parents=True, exist_ok=True)
    (path / "kodepos.yml").write_text(yaml.safe_dump(raw, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def make_config():
    return make_harvest_config


@pytest.fixture
def config_dir(tmp_path: Path):
    def _write(**overrides) -> Path:
        return write_config_dir(tmp_path / "config", **overrides)

    return _write


@pytest.fixture
def fake_client_factory():
    return FakeKodeposClient
