"""Remote kodepos listing: page query parameters and result-table extraction."""

from __future__ import annotations

from bs4 import BeautifulSoup

from kodepos.common.constants import SOURCE_SELECTORS
from kodepos.common.errors import FetchFailure
from kodepos.common.models import PageTask


def page_window(page_index: int, page_size: int) -> tuple[int, int]:
    return ((page_index - 1) * page_size) + 1, page_index * page_size


def build_page_params(task: PageTask, page_size: int) -> dict[str, str | int]:
    try:
        selector = SOURCE_SELECTORS[task.entity]
    except KeyError:
        raise FetchFailure(f"No source listing for entity {task.entity}", key=task.describe()) from None

    start, end = page_window(task.page_index, page_size)
    params: dict[str, str | int] = {
        "_i": selector,
        "perhal": page_size,
        "sby": "000000",
        "no1": start,
        "no2": end,
    }
    if task.entity == "province":
        params.update({"daerah": "", "jobs": ""})
    elif task.entity == "regency":
        if task.parent is None:
            raise FetchFailure("Regency pages require a province name", key=task.describe())
        params.update({"daerah": "Provinsi", "jobs": task.parent})
    return params


def _cell_text(text: str) -> str:
    # One staged line per cell, so embedded line breaks are folded.
    return " ".join(text.split())


def extract_rows(html: str, row_selector: str) -> list[str]:
    soup = BeautifulSoup(html, "html.parser")
    return [_cell_text(cell.get_text()) for cell in soup.select(row_selector)]
