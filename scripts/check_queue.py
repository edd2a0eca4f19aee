"""
Report the sync queue backlog and the current status of queued records
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
from sync_engine.queue import SyncQueueRepository
from sync_engine.sources import SourceDocumentRepository
from sync_engine.targets import build_targets

logger = logging.getLogger(__name__)


async def check_queue(sample: int) -> None:
    engine = build_engine(settings.DATABASE_URL)
    SessionLocal = build_session_maker(engine)

    try:
        async with SessionLocal() as session:
            for target, definition in build_targets(settings).items():
                queue = SyncQueueRepository(session, target)
                sources = SourceDocumentRepository(session, definition.source_collection)

                unprocessed = await queue.count_unprocessed()
                logger.info(f"[{target.value}] unprocessed entries: {unprocessed}")

                if unprocessed == 0:
                    logger.info(f"[{target.value}] queue is empty - no pending sync entries")
                    continue

                logger.info(f"[{target.value}] oldest queued at: {await queue.oldest_unprocessed()}")

                entries = await queue.fetch_unprocessed(sample)
                documents = await sources.get_many(e.reference_id for e in entries)

                for index, entry in enumerate(entries, start=1):
                    document = documents.get(entry.reference_id)
                    if document is None:
                        state = "NOT FOUND (will be retired)"
                    elif definition.is_eligible(document.status):
                        state = f"status={document.status} (will be loaded)"
                    else:
                        state = f"status={document.status} (not eligible, will be retired)"
                    logger.info(
                        f"  {index}. {entry.reference_id}, queued {entry.queued_at}: {state}"
                    )
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--sample", type=int, default=5, help="Entries to inspect per target")
    args = parser.parse_args()

    setup_logging()
    try:
        asyncio.run(check_queue(args.sample))
    except Exception as e:
        logger.error(f"Error checking queue: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
