"""UTC-focused helpers for run metadata."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def utc_today_iso() -> str:
    return datetime.now(tz=timezone.utc).date().isoformat()


def generate_run_id() -> str:
    return datetime.now(tz=timezone.utc).strftime("harvest-%Y%m%dT%H%M%SZ")
