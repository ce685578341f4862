"""Projection writer for the six output artifacts."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from kodepos.common.errors import SerializationFailure
from kodepos.common.fs import ensure_dir, write_json
from kodepos.pipeline.aggregate import AggregationResult


def _entries(mapping: dict) -> dict[str, list[dict]]:
    return {key: [entry.to_dict() for entry in entries] for key, entries in mapping.items()}


def build_documents(result: AggregationResult, filenames: dict[str, str]) -> dict[str, object]:
    return {
        filenames["tree_filename"]: [province.to_dict() for province in result.tree],
        filenames["provinces_filename"]: [entry.to_dict() for entry in result.provinces],
        filenames["regencies_filename"]: _entries(result.regencies_by_province),
        filenames["districts_filename"]: _entries(result.districts_by_regency),
        filenames["villages_filename"]: _entries(result.villages_by_district),
        filenames["zip_codes_filename"]: dict(result.zip_code_by_village),
    }


def _restore(published: list[Path], backup_dir: Path) -> None:
    for target in reversed(published):
        backup = backup_dir / target.name
        if backup.exists():
            os.replace(backup, target)
        else:
            target.unlink()


def write_projections(result: AggregationResult, out_dir: Path, filenames: dict[str, str]) -> list[Path]:
    """Write all artifacts or none of them.

    Documents are staged in a sibling temporary directory and only moved into
    ``out_dir`` once every one of them has been written. Artifacts already in
    ``out_dir`` are copied aside first; if a move fails, every artifact moved
    so far is put back to its previous state.
    """
    documents = build_documents(result, filenames)
    try:
        ensure_dir(out_dir)
        tmp_dir = Path(tempfile.mkdtemp(prefix=".projections-", dir=out_dir))
    except OSError as exc:
        raise SerializationFailure(f"Output directory unavailable: {out_dir}: {exc}", key=str(out_dir)) from exc

    backup_dir = tmp_dir / "previous"
    written: list[Path] = []
    try:
        for name, payload in documents.items():
            try:
                write_json(tmp_dir / name, payload, sort_keys=False, indent=None)
            except (OSError, TypeError, ValueError) as exc:
                raise SerializationFailure(f"Could not encode {name}: {exc}", key=name) from exc
        try:
            ensure_dir(backup_dir)
            for name in documents:
                if (out_dir / name).exists():
                    shutil.copy2(out_dir / name, backup_dir / name)
        except OSError as exc:
            raise SerializationFailure(f"Could not back up existing artifacts: {exc}", key=str(out_dir)) from exc
        for name in documents:
            target = out_dir / name
            try:
                os.replace(tmp_dir / name, target)
            except OSError as exc:
                _restore(written, backup_dir)
                raise SerializationFailure(f"Could not publish {name}: {exc}", key=name) from exc
            written.append(target)
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)
    return written
