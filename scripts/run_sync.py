"""
Script to run one batch sync pass for every target
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.logging import setup_logging
from sync_engine.scheduler import SyncScheduler

logger = logging.getLogger(__name__)


async def run_sync() -> int:
    """Run the batch sync for all targets; exit code 1 if any target failed"""
    scheduler = SyncScheduler()

    try:
        results = await scheduler.run_all()
    finally:
        if scheduler.engine is not None:
            await scheduler.engine.dispose()

    failed = [target for target, result in results.items() if result is None]
    for target, result in results.items():
        if result is None:
            continue
        logger.info(
            f"Sync completed for {target}: status={result['status']}, "
            f"read={result['entries_read']}, loaded={result['records_transformed']}, "
            f"retired={result['entries_retired']}"
        )

    if failed:
        logger.error(f"Sync failed for: {', '.join(failed)}")
        return 1

    logger.info("All sync jobs completed")
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(run_sync()))
