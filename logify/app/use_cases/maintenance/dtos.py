"""
Maintenance Use Case DTOs (Data Transfer Objects)
"""

from pydantic import BaseModel


class CleanupOldEventsResponse(BaseModel):
    """Response for cleanup old events use case"""

    deleted: int
    keep_days: int
    cutoff: str


class ResetLogResponse(BaseModel):
    """Response for reset log use case"""

    status: str
