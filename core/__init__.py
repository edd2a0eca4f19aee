"""
Core utilities and configuration for the delivery warehouse sync.

This package provides foundational components used throughout the sync engine:

Modules:
    config: Application configuration and environment variable management
    database: Engine/session factories for the queue and source stores
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import build_engine, build_session_maker
    from core.exceptions import QueueReadError, StagingUploadError
    from core.logging import setup_logging

Example:
    setup_logging()

    engine = build_engine()
    session_maker = build_session_maker(engine)
    async with session_maker() as session:
        ...
"""

__all__ = [
    "settings",
    "build_engine",
    "build_session_maker",
    "get_session",
    "setup_logging",
    # Exceptions
    "SyncException",
    "RetryableError",
    "NonRetryableError",
    "QueueError",
    "QueueReadError",
    "EnqueueError",
    "QueueRetirementError",
    "SourceFetchError",
    "TransformationError",
    "RecordTransformError",
    "StagingError",
    "StagingWriteError",
    "StagingUploadError",
    "LoadSubmissionError",
]
