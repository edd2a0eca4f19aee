"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from models.base import SyncTarget, SyncRunStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Health Check Schemas
# ============================================================================

class SyncRunInfo(BaseModel):
    """Last batch sync run of one target"""
    target: SyncTarget
    run_id: str
    status: SyncRunStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    entries_read: int = 0
    entries_retired: int = 0
    load_job_id: Optional[str] = None
    error_message: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=_utcnow)
    database_connected: bool
    last_runs: List[SyncRunInfo] = Field(default_factory=list)
    failed_targets: int = 0

    @model_validator(mode="after")
    def determine_status(self):
        """Determine overall health status"""
        if not self.database_connected:
            self.status = "unhealthy"
        elif self.failed_targets == 0:
            self.status = "healthy"
        elif self.failed_targets < len(SyncTarget):
            self.status = "degraded"
        else:
            self.status = "unhealthy"
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "timestamp": "2025-03-10T10:30:00Z",
                "database_connected": True,
                "failed_targets": 0,
                "last_runs": [
                    {
                        "target": "orders",
                        "run_id": "8b7c1f0e-5a43-4e0f-9a1b-0c3b8d7e2f11",
                        "status": "success",
                        "started_at": "2025-03-10T10:25:00Z",
                        "entries_read": 12,
                        "entries_retired": 12,
                        "load_job_id": "job_abc123"
                    }
                ]
            }
        }
    )


# ============================================================================
# Queue Schemas
# ============================================================================

class QueueTargetStatus(BaseModel):
    """Unprocessed backlog for one sync target"""
    target: SyncTarget
    unprocessed: int
    oldest_queued_at: Optional[datetime] = None
    sample_reference_ids: List[str] = Field(default_factory=list)

    model_config = ConfigDict(use_enum_values=True)


class QueueStatusResponse(BaseModel):
    """Queue status across every sync target"""
    timestamp: datetime = Field(default_factory=_utcnow)
    total_unprocessed: int
    targets: List[QueueTargetStatus]


# ============================================================================
# Event Schemas
# ============================================================================

class WriteEvent(BaseModel):
    """A source record write: snapshots before and after (None on create/delete)"""
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None


class EventResponse(BaseModel):
    target: SyncTarget
    reference_id: str
    enqueued: bool

    model_config = ConfigDict(use_enum_values=True)


# ============================================================================
# Sync Schemas
# ============================================================================

class SyncRunResponse(BaseModel):
    """Result of a single batch sync invocation"""
    status: str
    target: SyncTarget
    run_id: Optional[str] = None
    entries_read: int = 0
    records_eligible: int = 0
    records_transformed: int = 0
    records_failed: int = 0
    entries_retired: int = 0
    load_job_id: Optional[str] = None
    staged_object: Optional[str] = None
    error_details: Optional[List[Dict[str, Any]]] = None

    model_config = ConfigDict(use_enum_values=True)
