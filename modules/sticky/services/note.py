"""
Note Service.

Board-level operations built on the repository: templates, pinning,
colors, tags, folders, bulk actions, reminder input, and voice notes.
Every change goes through NoteRepository.update(), so each one is a
whole-collection write followed by a change signal.
"""

from collections.abc import Iterable

from dateutil import parser as dateutil_parser

from modules.sticky.core.exceptions import InvalidReminderError, NoteLockedError
from modules.sticky.core.logging import get_logger
from modules.sticky.core.utils import to_epoch_ms
from modules.sticky.models.note import Note, Recurrence, VoiceNote
from modules.sticky.repositories.note import NoteRepository
from modules.sticky.schemas.note import NoteUpdate, get_template

logger = get_logger(__name__)

CONTENT_FIELDS = frozenset({"title", "content"})


def parse_reminder(text: str) -> int:
    """
    Parse user reminder input into epoch milliseconds.

    Accepts ISO-like forms such as ``2026-10-19T09:30`` or
    ``2026-10-19 09:30``. Times without an offset are local wall-clock time.

    Raises:
        InvalidReminderError: If the text is not a date/time
    """
    try:
        parsed = dateutil_parser.parse(text.strip())
    except (ValueError, OverflowError) as e:
        raise InvalidReminderError("Invalid date", details={"input": text}) from e
    return to_epoch_ms(parsed)


class NoteService:
    """
    Service for note business logic in one window.

    Mutators return the changed note, or None when the note no longer
    exists in this window's mirror.
    """

    def __init__(self, repo: NoteRepository) -> None:
        self.repo = repo

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def create_note(self, template: str | None = None) -> Note:
        """Create a note from a named template (blank, todo, meeting, shopping)."""
        note = self.repo.create(get_template(template))
        logger.info("Note created from template", extra={"note_id": note.id, "template": template or "blank"})
        return note

    def duplicate_note(self, note_id: str) -> Note | None:
        return self.repo.duplicate(note_id)

    def delete_note(self, note_id: str) -> None:
        self.repo.delete(note_id)

    # -------------------------------------------------------------------------
    # Field edits
    # -------------------------------------------------------------------------

    def update_note(self, note_id: str, data: NoteUpdate) -> Note | None:
        """
        Apply a partial update.

        Title and content of a locked note change only through the lock guard.

        Raises:
            NoteLockedError: If the update edits locked content
            ValidationError: If the result is not a valid note
        """
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            return self.repo.get_or_none(note_id)

        current = self.repo.get_or_none(note_id)
        if current is None:
            return None
        if current.locked and CONTENT_FIELDS & set(update_data):
            raise NoteLockedError()

        return self.repo.update(note_id, **update_data)

    def toggle_pin(self, note_id: str) -> Note | None:
        note = self.repo.get_or_none(note_id)
        if note is None:
            return None
        return self.repo.update(note_id, pinned=not note.pinned)

    def set_color(self, note_id: str, color: str) -> Note | None:
        return self.repo.update(note_id, color=color)

    def set_folder(self, note_id: str, folder: str) -> Note | None:
        return self.repo.update(note_id, folder=folder)

    def add_tag(self, note_id: str, tag: str) -> Note | None:
        """Append a tag. Blank tags and tags already present are ignored."""
        tag = tag.strip()
        note = self.repo.get_or_none(note_id)
        if note is None or not tag or tag in note.tags:
            return note
        return self.repo.update(note_id, tags=[*note.tags, tag])

    def remove_tag(self, note_id: str, tag: str) -> Note | None:
        note = self.repo.get_or_none(note_id)
        if note is None or tag not in note.tags:
            return note
        return self.repo.update(note_id, tags=[t for t in note.tags if t != tag])

    # -------------------------------------------------------------------------
    # Bulk actions
    # -------------------------------------------------------------------------

    def delete_many(self, note_ids: Iterable[str]) -> None:
        for note_id in list(note_ids):
            self.repo.delete(note_id)

    def tag_many(self, note_ids: Iterable[str], tag: str) -> None:
        if not tag.strip():
            return
        for note_id in list(note_ids):
            self.add_tag(note_id, tag)

    def move_many(self, note_ids: Iterable[str], folder: str) -> None:
        for note_id in list(note_ids):
            self.repo.update(note_id, folder=folder)

    # -------------------------------------------------------------------------
    # Reminders
    # -------------------------------------------------------------------------

    def set_reminder(
        self,
        note_id: str,
        text: str,
        recurrence: Recurrence | str | None = None,
    ) -> Note | None:
        """
        Set or clear a note's reminder from user input.

        Empty input clears the reminder and its recurrence. Unparseable
        input raises before anything is written.

        Raises:
            InvalidReminderError: If text is not a date/time
        """
        if not text.strip():
            return self.clear_reminder(note_id)

        reminder_at = parse_reminder(text)
        note = self.repo.update(
            note_id,
            reminder_at=reminder_at,
            recurrence=recurrence or None,
        )
        if note is not None:
            logger.info(
                "Reminder set",
                extra={"note_id": note_id, "reminder_at": reminder_at, "recurrence": note.recurrence},
            )
        return note

    def clear_reminder(self, note_id: str) -> Note | None:
        return self.repo.update(note_id, reminder_at=None, recurrence=None)

    # -------------------------------------------------------------------------
    # Voice notes
    # -------------------------------------------------------------------------

    def add_voice_note(self, note_id: str, data: str, duration: int) -> Note | None:
        note = self.repo.get_or_none(note_id)
        if note is None:
            return None
        clip = VoiceNote(data=data, duration=duration)
        return self.repo.update(note_id, voice_notes=[*note.voice_notes, clip])

    def remove_voice_note(self, note_id: str, index: int) -> Note | None:
        """Remove the voice note at a position. Out-of-range indexes are ignored."""
        note = self.repo.get_or_none(note_id)
        if note is None or not 0 <= index < len(note.voice_notes):
            return note
        clips = [clip for i, clip in enumerate(note.voice_notes) if i != index]
        return self.repo.update(note_id, voice_notes=clips)
