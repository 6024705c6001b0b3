"""
Observation Use Case DTOs (Data Transfer Objects)

Command and Response classes for recording one unit of work.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from logify.app.trackers.base import Observation
from logify.domain.actor import Actor


# ============================================================================
# Command DTOs
# ============================================================================


class ObjectSnapshot(BaseModel):
    """A host object as it is now, for the object catalog"""

    type: str
    snapshot: Dict[str, Any]


class RecordObservationsCommand(BaseModel):
    """Everything the host observed while handling one request"""

    actor: Actor = Field(default_factory=Actor)
    # Objects the observations refer to by key only
    objects: List[ObjectSnapshot] = Field(default_factory=list)
    # In the order the hooks fired
    observations: List[Observation] = Field(default_factory=list)


# ============================================================================
# Response DTOs
# ============================================================================


class RecordObservationsResponse(BaseModel):
    """Response for record observations use case"""

    handled: int
    saved: List[int]
    deleted: List[int]
    discarded: List[str]
    failed: List[str]
