"""
Event Schemas.

Standardized event envelope for signals exchanged between windows.

Naming convention for event_type: domain.entity.action (dot notation)

Usage:
    from modules.sticky.events.schemas import CollectionChanged

    event = CollectionChanged(origin=window_id)
"""

from uuid import uuid4

from pydantic import BaseModel, Field

from modules.sticky.core.utils import utc_now


class EventEnvelope(BaseModel):
    """Base event envelope — all events inherit from this.

    Fields:
        event_id: Unique event identifier (auto-generated UUID)
        event_type: Domain event type in dot notation
        event_version: Schema version for forward compatibility
        timestamp: ISO 8601 UTC timestamp
        origin: Window that published the event; never delivered back to it
        payload: Event-specific data
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: str
    event_version: int = 1
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    origin: str
    payload: dict = Field(default_factory=dict)


class CollectionChanged(EventEnvelope):
    """Published after a window persisted the note collection.

    Carries no payload: receivers reload the whole collection from the store.
    """

    event_type: str = "notes.collection.changed"
