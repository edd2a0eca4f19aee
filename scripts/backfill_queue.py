"""
Enqueue every sync-eligible source record that is not already queued.

Used after the warehouse tables are (re)created, or when records reached a
terminal status while the observers were down.
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import build_engine, build_session_maker
from core.logging import setup_logging
from models.base import SyncTarget
from sync_engine.queue import SyncQueueRepository
from sync_engine.sources import SourceDocumentRepository
from sync_engine.targets import build_targets

logger = logging.getLogger(__name__)


async def backfill_target(session, definition, limit=None, dry_run=False) -> int:
    """Enqueue eligible records of one target; returns the number enqueued"""
    sources = SourceDocumentRepository(session, definition.source_collection)
    queue = SyncQueueRepository(session, definition.target)

    reference_ids = await sources.list_ids_by_status(definition.eligible_statuses, limit=limit)
    logger.info(
        f"[{definition.target.value}] {len(reference_ids)} eligible records in "
        f"{definition.source_collection}"
    )

    enqueued = 0
    for reference_id in reference_ids:
        if dry_run:
            if not await queue.has_unprocessed(reference_id):
                enqueued += 1
            continue
        if await queue.enqueue_if_absent(reference_id) is not None:
            enqueued += 1

    verb = "would enqueue" if dry_run else "enqueued"
    logger.info(f"[{definition.target.value}] {verb} {enqueued} records")
    return enqueued


async def backfill(targets, limit=None, dry_run=False) -> int:
    engine = build_engine(settings.DATABASE_URL)
    SessionLocal = build_session_maker(engine)
    definitions = build_targets(settings)

    total = 0
    try:
        async with SessionLocal() as session:
            for target in targets:
                total += await backfill_target(session, definitions[target], limit, dry_run)
    finally:
        await engine.dispose()
    return total


def main() -> None:
    parser = argparse.ArgumentParser(description="Enqueue sync-eligible records that are not queued")
    parser.add_argument(
        "--target",
        choices=[t.value for t in SyncTarget],
        help="Only backfill this target (default: all)"
    )
    parser.add_argument("--limit", type=int, default=None, help="Max records per target")
    parser.add_argument("--dry-run", action="store_true", help="Count without enqueueing")
    args = parser.parse_args()

    setup_logging()
    targets = [SyncTarget(args.target)] if args.target else list(SyncTarget)

    try:
        total = asyncio.run(backfill(targets, args.limit, args.dry_run))
    except Exception as e:
        logger.error(f"Backfill failed: {str(e)}")
        sys.exit(1)

    logger.info(f"Backfill complete: {total} records")


if __name__ == "__main__":
    main()
