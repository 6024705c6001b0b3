"""
Observation Use Cases

Turning host observations into log events.
"""

from .dtos import ObjectSnapshot, RecordObservationsCommand, RecordObservationsResponse
from .record_observations_use_case import RecordObservationsUseCase

__all__ = [
    "ObjectSnapshot",
    "RecordObservationsCommand",
    "RecordObservationsResponse",
    "RecordObservationsUseCase",
]
