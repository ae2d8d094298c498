"""
Notification Schemas.

Payload handed to a notification sink when a reminder comes due.
"""

from pydantic import BaseModel, Field


class ReminderNotification(BaseModel):
    """A desktop notification for a due reminder."""

    title: str = Field(description="Notification headline")
    body: str = Field(description="Note title and due time")
    icon: str | None = Field(default=None, description="Optional image reference")
    note_id: str = Field(description="Note the reminder belongs to")
    due_at: int = Field(description="reminderAt value that fired, epoch ms")
