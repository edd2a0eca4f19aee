"""
Custom exceptions for the warehouse sync engine with structured error context.

Each exception carries context information for debugging and monitoring.
Whether an invocation aborts or continues is decided by the exception type:
infrastructure failures abort the whole batch (queue entries stay queued and
are retried on the next tick), per-record defects are isolated.

Exception Hierarchy:
    SyncException (base)
    ├── QueueError
    │   ├── QueueReadError
    │   ├── EnqueueError
    │   └── QueueRetirementError
    ├── SourceFetchError
    ├── TransformationError
    │   └── RecordTransformError
    ├── StagingError
    │   ├── StagingWriteError
    │   └── StagingUploadError
    ├── LoadSubmissionError
    └── RetryableError / NonRetryableError (mixins)
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class SyncException(Exception):
    """
    Base exception for all sync-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (target, ids, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Retry Strategy Mixins
# ============================================================================

class RetryableError(SyncException):
    """
    Marker for errors that the next scheduled invocation will retry.

    Nothing retries in-process: the queue entries stay unprocessed and the
    next tick picks them up again.
    """
    pass


class NonRetryableError(SyncException):
    """
    Marker for errors that will fail the same way on every retry.

    Use this for permanent errors like:
    - A record missing a required column
    - A malformed payload
    """
    pass


# ============================================================================
# Queue Errors
# ============================================================================

class QueueError(SyncException):
    """Base exception for sync queue failures."""
    pass


class QueueReadError(RetryableError, QueueError):
    """
    Raised when unprocessed queue entries cannot be read.

    Context should include:
        - target: Sync target name
        - batch_size: Requested batch size
    """
    pass


class EnqueueError(QueueError):
    """
    Raised when an observer cannot append a queue entry.

    Context should include:
        - target: Sync target name
        - reference_id: Source record id
    """
    pass


class QueueRetirementError(RetryableError, QueueError):
    """
    Raised when processed queue entries cannot be deleted.

    The load was already submitted, so the entries will be synced again
    on the next tick (duplicate warehouse rows, never lost ones).
    """
    pass


# ============================================================================
# Source Errors
# ============================================================================

class SourceFetchError(RetryableError):
    """
    Raised when referenced source documents cannot be read.

    Context should include:
        - collection: Source collection name
        - reference_count: Number of ids requested
    """
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(SyncException):
    """Base exception for record transformation failures."""
    pass


class RecordTransformError(NonRetryableError, TransformationError):
    """
    Raised when a single source record cannot be mapped to a warehouse row.

    Context should include:
        - doc_id: Source document id
        - field_name: Field that could not be mapped (if applicable)
    """
    pass


# ============================================================================
# Staging / Load Errors
# ============================================================================

class StagingError(SyncException):
    """Base exception for staged batch failures."""
    pass


class StagingWriteError(StagingError):
    """Raised when the local NDJSON artifact cannot be written."""
    pass


class StagingUploadError(RetryableError, StagingError):
    """
    Raised when the NDJSON artifact cannot be uploaded to object storage.

    Context should include:
        - bucket: Staging bucket
        - object_name: Destination object name
    """
    pass


class LoadSubmissionError(RetryableError):
    """
    Raised when the warehouse refuses to accept a bulk load job.

    Context should include:
        - table_id: Destination table
        - source_uri: Staged artifact URI
    """
    pass
