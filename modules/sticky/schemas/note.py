"""
Note Schemas.

Pydantic schemas for note creation templates and partial updates.
"""

from pydantic import BaseModel, Field

from modules.sticky.models.note import Recurrence


class NoteTemplate(BaseModel):
    """Starting title and content for a new note."""

    title: str = Field(default="Untitled", description="Note title")
    content: str = Field(default="", description="Note content")


TEMPLATES: dict[str, NoteTemplate] = {
    "blank": NoteTemplate(title="Untitled", content=""),
    "todo": NoteTemplate(
        title="Todo List",
        content="- [ ] Item 1\n- [ ] Item 2\n- [ ] Item 3",
    ),
    "meeting": NoteTemplate(
        title="Meeting Notes",
        content="Date: \nAttendees: \nTopics:\n- \nAction Items:\n- ",
    ),
    "shopping": NoteTemplate(
        title="Shopping List",
        content="- \n- \n- \n- \n- ",
    ),
}


def get_template(key: str | None) -> NoteTemplate:
    """Look up a template by key, falling back to the blank template."""
    return TEMPLATES.get((key or "").lower(), TEMPLATES["blank"])


class NoteUpdate(BaseModel):
    """Schema for a partial note update. Only fields that are set are applied."""

    title: str | None = Field(default=None, description="Note title")
    content: str | None = Field(default=None, description="Note content")
    color: str | None = Field(default=None, description="Palette color")
    pinned: bool | None = Field(default=None, description="Pinned to the top of the board")
    folder: str | None = Field(default=None, description="Folder name")
    tags: list[str] | None = Field(default=None, description="Tag list")
    reminder_at: int | None = Field(default=None, description="Reminder instant, epoch ms")
    recurrence: Recurrence | None = Field(default=None, description="Reminder recurrence")
