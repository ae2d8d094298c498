"""
Note Model.

The single persisted entity. Field names are snake_case in Python and
camelCase on the wire (reminderAt, voiceNotes, createdAt, updatedAt), the
layout existing stores were written with. Keys this model does not know
about are kept and written back unchanged.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

PALETTE: tuple[str, ...] = (
    "#f5b81b",
    "#1ad1a5",
    "#38bdf8",
    "#f472b6",
    "#fb7185",
    "#a3e635",
    "#f97316",
)

DEFAULT_FOLDER = "default"

# Widest instant a stored epoch-ms timestamp may hold (+/- 8.64e15)
MAX_INSTANT_MS = 8_640_000_000_000_000

IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})


class Recurrence(str, Enum):
    """How often a reminder repeats."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class VoiceNote(BaseModel):
    """An attached audio clip: an encoded blob reference and its length in seconds."""

    model_config = ConfigDict(extra="allow")

    data: str
    duration: int = 0


class Note(BaseModel):
    """
    A sticky note.

    Invariants enforced at validation time:
    - color is a palette member
    - tags carry no duplicates
    - password is present iff locked
    - reminder_at is a representable instant
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str = Field(min_length=1)
    title: str = ""
    content: str = ""
    color: str = PALETTE[0]
    pinned: bool = False
    folder: str = DEFAULT_FOLDER
    tags: list[str] = Field(default_factory=list)
    locked: bool = False
    password: str | None = None
    reminder_at: int | None = None
    recurrence: Recurrence | None = None
    voice_notes: list[VoiceNote] = Field(default_factory=list)
    created_at: int
    updated_at: int

    @field_validator("title", "content", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("folder", mode="before")
    @classmethod
    def _default_folder(cls, value: Any) -> Any:
        return DEFAULT_FOLDER if value is None else value

    @field_validator("tags", "voice_notes", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("color")
    @classmethod
    def _check_palette(cls, value: str) -> str:
        if value not in PALETTE:
            raise ValueError(f"color must be one of {', '.join(PALETTE)}")
        return value

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("recurrence", mode="before")
    @classmethod
    def _blank_recurrence(cls, value: Any) -> Any:
        if value in ("", "none"):
            return None
        return value

    @field_validator("reminder_at")
    @classmethod
    def _check_instant(cls, value: int | None) -> int | None:
        if value is not None and abs(value) > MAX_INSTANT_MS:
            raise ValueError("reminderAt is out of range")
        return value

    @model_validator(mode="after")
    def _check_lock(self) -> "Note":
        if self.locked and not self.password:
            raise ValueError("a locked note requires a password")
        if not self.locked and self.password is not None:
            raise ValueError("an unlocked note cannot carry a password")
        return self

    def to_record(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase record."""
        return self.model_dump(mode="json", by_alias=True)

    def merged(self, delta: dict[str, Any], updated_at: int) -> "Note":
        """
        Return a validated copy with delta applied and updated_at stamped.

        Args:
            delta: Field values keyed by Python field name
            updated_at: New modification timestamp

        Raises:
            ValueError: If delta names an unknown or immutable field
            pydantic.ValidationError: If the merged note breaks an invariant
        """
        unknown = set(delta) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"unknown note fields: {', '.join(sorted(unknown))}")
        frozen = set(delta) & IMMUTABLE_FIELDS
        if frozen:
            raise ValueError(f"immutable note fields: {', '.join(sorted(frozen))}")

        data = self.model_dump()
        data.update(delta)
        data["updated_at"] = updated_at
        return type(self).model_validate(data)

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r})>"
