"""
Maintenance Use Cases

Retention cleanup and log reset.
"""

from .cleanup_old_events_use_case import CleanupOldEventsUseCase
from .dtos import CleanupOldEventsResponse, ResetLogResponse
from .reset_log_use_case import ResetLogUseCase

__all__ = [
    "CleanupOldEventsUseCase",
    "CleanupOldEventsResponse",
    "ResetLogUseCase",
    "ResetLogResponse",
]
