"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from kodepos.common.constants import ENTITY_TYPES
from kodepos.common.errors import ConfigError

OUTPUT_KEYS = {
    "tree_filename",
    "provinces_filename",
    "regencies_filename",
    "districts_filename",
    "villages_filename",
    "zip_codes_filename",
}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_int(value: object, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive integer")


def validate_harvest_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"source", "fetch", "entities", "output"}
    top_known = top_required | {"name_corrections"}
    _assert_required_keys(cfg, top_required, "harvest config")
    _assert_no_unknown_keys(cfg, top_known, "harvest config", allow_unknown)

    _assert_required_keys(cfg["source"], {"base_url", "row_selector"}, "source")
    _assert_required_keys(
        cfg["fetch"],
        {"page_size", "concurrency", "cooldown_seconds"},
        "fetch",
    )
    _assert_positive_int(cfg["fetch"]["page_size"], "fetch.page_size")
    _assert_positive_int(cfg["fetch"]["concurrency"], "fetch.concurrency")
    cooldown = cfg["fetch"]["cooldown_seconds"]
    if isinstance(cooldown, bool) or not isinstance(cooldown, (int, float)) or cooldown < 0:
        raise ConfigError("fetch.cooldown_seconds must be a non-negative number")

    _assert_required_keys(cfg["entities"], set(ENTITY_TYPES), "entities")
    for entity in ENTITY_TYPES:
        _assert_required_keys(cfg["entities"][entity], {"max_entities"}, f"entities.{entity}")
        _assert_positive_int(cfg["entities"][entity]["max_entities"], f"entities.{entity}.max_entities")

    corrections = cfg.get("name_corrections") or {}
    _assert_no_unknown_keys(corrections, {"district"}, "name_corrections", allow_unknown)
    district_corrections = corrections.get("district") or {}
    if not isinstance(district_corrections, dict):
        raise ConfigError("name_corrections.district must be a mapping")

    _assert_required_keys(cfg["output"], OUTPUT_KEYS, "output")
    filenames = [cfg["output"][key] for key in sorted(OUTPUT_KEYS)]
    dupes = {name for name in filenames if filenames.count(name) > 1}
    if dupes:
        raise ConfigError(f"Duplicate output filenames: {', '.join(sorted(dupes))}")

    return cfg
