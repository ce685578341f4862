import json
import logging

import pytest

from kodepos.common.layouts import LAYOUTS, layout_for
from kodepos.common.logging import JsonLineFormatter
from kodepos.common.models import PageTask, RegencyKey
from kodepos.common.time_utils import generate_run_id, utc_today_iso


def test_generate_run_id_prefix():
    assert generate_run_id().startswith("harvest-")


def test_utc_today_iso_shape():
    assert len(utc_today_iso()) == len("2026-02-17")


def test_layout_offsets_fit_inside_field_count():
    for layout in LAYOUTS.values():
        assert all(0 <= offset < layout.field_count for offset in layout.offsets.values())


def test_layout_for_unknown_entity_raises():
    with pytest.raises(ValueError):
        layout_for("district")


def test_regency_key_text_joins_prefix_and_name():
    assert RegencyKey(prefix="Kota", name="Bandung").text == "Kota Bandung"


def test_page_task_staging_key_includes_parent():
    first = PageTask(entity="regency", page_index=1, parent="Aceh")
    second = PageTask(entity="regency", page_index=1, parent="Bali")
    assert first.staging_key != second.staging_key
    assert first.describe() == "regency/Aceh/page_1"


def test_json_line_formatter_emits_stable_fields():
    record = logging.LogRecord("kodepos", logging.INFO, __file__, 1, "hello", None, None)
    record.stage = "fetch"
    record.page = 3
    payload = json.loads(JsonLineFormatter().format(record))
    assert payload["message"] == "hello"
    assert payload["stage"] == "fetch"
    assert payload["page"] == 3
    assert payload["error_code"] is None
