"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kodepos.common.constants import KNOWN_DISTRICT_CORRECTIONS
from kodepos.common.errors import ConfigError
from kodepos.common.fs import read_yaml
from kodepos.common.http import RetryConfig, TimeoutConfig
from kodepos.common.schema import validate_harvest_config

CONFIG_FILENAME = "kodepos.yml"


@dataclass(frozen=True)
class HarvestConfig:
    raw: dict

    @property
    def base_url(self) -> str:
        return self.raw["source"]["base_url"]

    @property
    def row_selector(self) -> str:
        return self.raw["source"]["row_selector"]

    @property
    def page_size(self) -> int:
        return int(self.raw["fetch"]["page_size"])

    @property
    def concurrency(self) -> int:
        return int(self.raw["fetch"]["concurrency"])

    @property
    def cooldown_seconds(self) -> float:
        return float(self.raw["fetch"]["cooldown_seconds"])

    @property
    def skip_existing(self) -> bool:
        return bool(self.raw["fetch"].get("skip_existing", False))

    @property
    def max_requests_per_second(self) -> float | None:
        value = self.raw["source"].get("max_requests_per_second")
        return float(value) if value else None

    @property
    def output(self) -> dict[str, str]:
        return dict(self.raw["output"])

    def max_entities(self, entity: str) -> int:
        return int(self.raw["entities"][entity]["max_entities"])

    def district_corrections(self) -> dict[str, str]:
        corrections = dict(KNOWN_DISTRICT_CORRECTIONS)
        configured = (self.raw.get("name_corrections") or {}).get("district") or {}
        corrections.update({str(k): str(v) for k, v in configured.items()})
        return corrections

    def timeout(self) -> TimeoutConfig:
        timeouts = self.raw["source"].get("timeout_seconds") or {}
        return TimeoutConfig(
            connect=float(timeouts.get("connect", 20.0)),
            read=float(timeouts.get("read", 120.0)),
        )

    def retry(self) -> RetryConfig:
        retry_cfg = self.raw["source"].get("retry") or {}
        return RetryConfig(
            max_attempts=int(retry_cfg.get("max_attempts", 3)),
            max_wait=float(retry_cfg.get("max_wait_seconds", 30.0)),
        )


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path) or {}
    return _deep_merge(base, overlay)


def load_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> HarvestConfig:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / CONFIG_FILENAME
    cfg = _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path)
    return HarvestConfig(raw=validate_harvest_config(cfg, allow_unknown=allow_unknown))
