"""Bulk import of shop submissions from a JSONL file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session

from shop_discovery.core.errors import ShopDiscoveryError
from shop_discovery.schemas.shop import ShopSubmission
from shop_discovery.services.enrichment import EnrichmentOrchestrator
from shop_discovery.services.shops import create_shop

logger = logging.getLogger(__name__)


def iter_jsonl(path: Path) -> Iterator[dict]:
    """JSONL 파일을 한 줄씩 읽어 dict로 yield."""
    with path.open("r", encoding="utf-8") as fp:
        for line_no, line in enumerate(fp, 1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed JSON at line %s", line_no)
                continue
            if isinstance(record, dict):
                yield record


async def import_shops(
    db: Session,
    orchestrator: EnrichmentOrchestrator,
    records: Iterator[dict],
    user_id: str,
) -> tuple[int, int, int]:
    """Enrich and insert each record as `user_id`. Returns (success, skipped, failed)."""
    success = 0
    skipped = 0
    failed = 0

    for record in records:
        try:
            submission = ShopSubmission.model_validate(record)
        except ValidationError as exc:
            skipped += 1
            logger.warning("Skipping invalid record name=%r: %s", record.get("name"), exc.errors()[:1])
            continue

        payload = await orchestrator.enrich(submission)
        try:
            await run_in_threadpool(create_shop, db, user_id, payload)
        except ShopDiscoveryError as exc:
            failed += 1
            logger.warning("Failed to insert shop name=%r: %s", submission.name, exc)
            continue
        success += 1
        if success % 10 == 0:
            logger.info("%s shops imported...", success)

    return success, skipped, failed
