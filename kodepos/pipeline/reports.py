"""Run report aggregation."""

from __future__ import annotations

from pathlib import Path

from kodepos.common.errors import SerializationFailure
from kodepos.common.fs import write_json
from kodepos.common.time_utils import utc_today_iso


def write_run_summary(
    data_dir: Path,
    run_id: str,
    *,
    stages: list[str],
    harvest: dict | None = None,
    counts: dict[str, int] | None = None,
    zip_conflicts: int = 0,
    artifacts: list[Path] | None = None,
) -> Path:
    warnings: list[str] = []
    if zip_conflicts:
        warnings.append("ZIP_CONFLICTS_PRESENT")

    status = "partial" if warnings else "success"

    summary_path = data_dir / "out" / "reports" / "run_summary.json"
    payload = {
        "run_id": run_id,
        "run_date": utc_today_iso(),
        "status": status,
        "stages": stages,
        "pages_staged": (harvest or {}).get("pages_staged", {}),
        "counts": counts or {},
        "zip_conflicts": zip_conflicts,
        "artifacts": [path.name for path in artifacts or []],
        "warnings": warnings,
    }
    try:
        write_json(summary_path, payload)
    except OSError as exc:
        raise SerializationFailure(f"Could not write run summary: {exc}", key=str(summary_path)) from exc
    return summary_path
