"""Harvest orchestration with fail-fast semantics.

Provinces are harvested first because regency listings are queried per
province name. Villages come last and are paged over the whole country.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Sequence

from kodepos.common.config_loader import HarvestConfig
from kodepos.common.http import HttpClient
from kodepos.common.logging import log_event
from kodepos.common.models import PageTask
from kodepos.harvest.fetcher import candidate_page_indices, fetch_page
from kodepos.harvest.scheduler import run_in_batches
from kodepos.pipeline.loader import load_province_names


def _page_tasks(config: HarvestConfig, entity: str, parent: str | None = None) -> list[PageTask]:
    indices = candidate_page_indices(config.max_entities(entity), config.page_size)
    return [PageTask(entity=entity, page_index=index, parent=parent) for index in indices]


def _harvest_entity(
    client: HttpClient,
    config: HarvestConfig,
    data_dir: Path,
    logger: logging.Logger,
    run_id: str,
    entity: str,
    parent: str | None = None,
) -> int:
    tasks = _page_tasks(config, entity, parent)
    started = time.monotonic()

    def _group_done(group_number: int, group: Sequence[PageTask]) -> None:
        log_event(
            logger,
            f"{entity} page group {group_number + 1} fetched",
            run_id=run_id,
            stage="fetch",
            entity=entity,
            parent=parent,
            page=[task.page_index for task in group],
            event="PAGE_GROUP_DONE",
            status="ok",
        )

    staged = run_in_batches(
        tasks,
        lambda task: fetch_page(client, config, task, data_dir),
        concurrency=config.concurrency,
        cooldown_seconds=config.cooldown_seconds,
        on_group_done=_group_done,
    )
    staged_count = sum(1 for path in staged if path is not None)
    log_event(
        logger,
        f"{entity} pages staged",
        run_id=run_id,
        stage="fetch",
        entity=entity,
        parent=parent,
        event="ENTITY_FETCHED",
        status="ok",
        duration_ms=int((time.monotonic() - started) * 1000),
        rows_out=staged_count,
    )
    return staged_count


def run_harvest(
    config: HarvestConfig,
    data_dir: Path,
    logger: logging.Logger,
    run_id: str,
    http_client: HttpClient | None = None,
) -> dict:
    owns_client = http_client is None
    client = http_client or HttpClient(
        timeout=config.timeout(),
        retry=config.retry(),
        rate_per_sec=config.max_requests_per_second,
    )
    pages: dict[str, int] = {}
    try:
        pages["province"] = _harvest_entity(client, config, data_dir, logger, run_id, "province")

        province_names = load_province_names(config, data_dir)
        pages["regency"] = 0
        for province_name in province_names:
            pages["regency"] += _harvest_entity(
                client,
                config,
                data_dir,
                logger,
                run_id,
                "regency",
                parent=province_name,
            )

        pages["village"] = _harvest_entity(client, config, data_dir, logger, run_id, "village")
    finally:
        if owns_client:
            client.close()

    return {
        "run_id": run_id,
        "provinces": len(province_names),
        "pages_staged": pages,
    }
