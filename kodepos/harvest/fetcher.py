"""Single-page fetch into the staging store."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from kodepos.common.config_loader import HarvestConfig
from kodepos.common.errors import FetchFailure
from kodepos.common.fs import write_lines
from kodepos.common.http import HttpClient
from kodepos.common.models import PageTask
from kodepos.harvest.source import build_page_params, extract_rows

STAGING_ROOT = Path("raw") / "pages"


def candidate_page_indices(max_entities: int, page_size: int) -> range:
    return range(1, (max_entities // page_size) + 2)


def should_fetch(page_index: int, page_size: int, max_entities: int) -> bool:
    # The trailing candidate is empty when page_size divides max_entities.
    return (page_index - 1) * page_size < max_entities


def fetched_page_indices(max_entities: int, page_size: int) -> list[int]:
    return [
        page_index
        for page_index in candidate_page_indices(max_entities, page_size)
        if should_fetch(page_index, page_size, max_entities)
    ]


def staged_page_path(data_dir: Path, entity: str, page_index: int, parent: str | None = None) -> Path:
    base = data_dir / STAGING_ROOT / entity
    if parent is not None:
        base = base / quote(parent, safe=" ")
    return base / f"page_{page_index}.txt"


def fetch_page(
    client: HttpClient,
    config: HarvestConfig,
    task: PageTask,
    data_dir: Path,
) -> Path | None:
    """Fetch one page for ``task`` and stage its rows.

    Returns the staged path, or ``None`` when the page is skipped because its
    window lies past the last entity or it was already staged and
    ``fetch.skip_existing`` is set.
    """
    max_entities = config.max_entities(task.entity)
    if not should_fetch(task.page_index, config.page_size, max_entities):
        return None

    out_path = staged_page_path(data_dir, task.entity, task.page_index, task.parent)
    if config.skip_existing and out_path.exists():
        return None

    params = build_page_params(task, config.page_size)
    try:
        html = client.get_text(config.base_url, params=params, timeout=config.timeout())
    except FetchFailure as exc:
        if exc.key is None:
            exc.key = task.describe()
        raise

    rows = extract_rows(html, config.row_selector)
    try:
        write_lines(out_path, rows)
    except OSError as exc:
        raise FetchFailure(f"Could not stage page {task.describe()}: {exc}", key=task.describe()) from exc
    return out_path
