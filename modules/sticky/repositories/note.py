"""
Note Repository.

A window's in-memory mirror of the stored collection plus the CRUD
operations over it. Every mutator reads the mirror, builds the new
collection, writes the *entire* collection back to the store, and only
then swaps it into the mirror and signals sibling windows.

Concurrency model: whole-collection last-writer-wins. Two windows that
mutate without reloading in between overwrite each other's changes; the
mirror only catches up on refresh_from_store(), which the broadcaster
triggers. Mutations on ids missing from the mirror are silent no-ops so a
note deleted by another window does not turn into an error here.

Deleting an id that is not in the mirror does not write. Older clients
rewrote the unchanged collection in that case.
"""

import random
from collections.abc import Callable
from typing import Any

from modules.sticky.core.exceptions import NotFoundError, ValidationError
from modules.sticky.core.logging import get_logger
from modules.sticky.core.utils import new_note_id, now_ms
from modules.sticky.events.broadcaster import ChangeBroadcaster, NullBroadcaster
from modules.sticky.models.note import DEFAULT_FOLDER, PALETTE, Note
from modules.sticky.schemas.note import NoteTemplate
from modules.sticky.storage.store import Store

logger = get_logger(__name__)

COPY_SUFFIX = " (copy)"


class NoteRepository:
    """
    Repository for the note collection of one window.

    Returned notes are copies; mutating them has no effect until they are
    passed back through update().
    """

    def __init__(
        self,
        store: Store,
        broadcaster: ChangeBroadcaster | NullBroadcaster | None = None,
        clock: Callable[[], int] = now_ms,
        rng: random.Random | None = None,
        id_factory: Callable[[], str] = new_note_id,
    ) -> None:
        self.store = store
        self.broadcaster = broadcaster or NullBroadcaster()
        self._clock = clock
        self._rng = rng or random.Random()
        self._id_factory = id_factory
        self._notes: list[Note] = store.load()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, note_id: object) -> bool:
        return self._index_of(note_id) is not None

    def all(self) -> list[Note]:
        """Copy of the mirror in stored order."""
        return [note.model_copy(deep=True) for note in self._notes]

    def get_or_none(self, note_id: str) -> Note | None:
        """Get a note by id, returning None if the mirror lacks it."""
        index = self._index_of(note_id)
        if index is None:
            return None
        return self._notes[index].model_copy(deep=True)

    def get(self, note_id: str) -> Note:
        """
        Get a note by id.

        Raises:
            NotFoundError: If the note is not in the mirror
        """
        note = self.get_or_none(note_id)
        if note is None:
            raise NotFoundError(f"Note {note_id} not found")
        return note

    # -------------------------------------------------------------------------
    # Mutators
    # -------------------------------------------------------------------------

    def create(self, template: NoteTemplate | None = None, note_id: str | None = None) -> Note:
        """
        Create a note at the front of the collection.

        Args:
            template: Starting title/content (blank when omitted)
            note_id: Bind the note to this id instead of allocating one

        Returns:
            The created note
        """
        template = template or NoteTemplate()
        now = self._clock()
        note = Note(
            id=note_id or self._id_factory(),
            title=template.title,
            content=template.content,
            color=self._rng.choice(PALETTE),
            pinned=False,
            folder=DEFAULT_FOLDER,
            tags=[],
            locked=False,
            password=None,
            reminder_at=None,
            recurrence=None,
            voice_notes=[],
            created_at=now,
            updated_at=now,
        )
        self._commit([note, *self._notes])
        logger.info("Note created", extra={"note_id": note.id, "title": note.title})
        return note.model_copy(deep=True)

    def ensure(self, note_id: str) -> Note:
        """Return the note with this id, creating a default one bound to it if absent."""
        existing = self.get_or_none(note_id)
        if existing is not None:
            return existing
        return self.create(note_id=note_id)

    def update(self, note_id: str, **delta: Any) -> Note | None:
        """
        Merge field values into a note and persist the whole collection.

        Args:
            note_id: Note to change
            **delta: Field values keyed by Python field name

        Returns:
            The updated note, or None if the id is not in the mirror

        Raises:
            ValidationError: If delta names an unknown/immutable field or
                produces an invalid note
        """
        index = self._index_of(note_id)
        if index is None:
            logger.debug("Update ignored, note not in mirror", extra={"note_id": note_id})
            return None

        current = self._notes[index]
        try:
            updated = current.merged(delta, updated_at=self._stamp(current.updated_at))
        except ValueError as e:
            raise ValidationError(
                "Invalid note update",
                details={"note_id": note_id, "fields": sorted(delta), "error": str(e)},
            ) from e

        notes = list(self._notes)
        notes[index] = updated
        self._commit(notes)
        logger.debug("Note updated", extra={"note_id": note_id, "fields": sorted(delta)})
        return updated.model_copy(deep=True)

    def delete(self, note_id: str) -> None:
        """Remove a note if present; otherwise do nothing."""
        if self._index_of(note_id) is None:
            logger.debug("Delete ignored, note not in mirror", extra={"note_id": note_id})
            return
        self._commit([note for note in self._notes if note.id != note_id])
        logger.info("Note deleted", extra={"note_id": note_id})

    def duplicate(self, note_id: str) -> Note | None:
        """
        Clone a note under a fresh id at the front of the collection.

        Returns:
            The copy, or None if the source is not in the mirror
        """
        index = self._index_of(note_id)
        if index is None:
            logger.debug("Duplicate ignored, note not in mirror", extra={"note_id": note_id})
            return None

        source = self._notes[index]
        now = self._clock()
        data = source.model_dump()
        data.update(
            id=self._id_factory(),
            title=f"{source.title or 'Untitled'}{COPY_SUFFIX}",
            created_at=now,
            updated_at=now,
        )
        copy = Note.model_validate(data)
        self._commit([copy, *self._notes])
        logger.info("Note duplicated", extra={"note_id": copy.id, "source_id": note_id})
        return copy.model_copy(deep=True)

    def refresh_from_store(self) -> None:
        """Discard the mirror and reload it from the store."""
        self._notes = self.store.load()
        logger.debug("Mirror refreshed", extra={"count": len(self._notes)})

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _index_of(self, note_id: object) -> int | None:
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        return None

    def _stamp(self, previous: int) -> int:
        """Current time, forced strictly past the previous stamp."""
        return max(self._clock(), previous + 1)

    def _commit(self, notes: list[Note]) -> None:
        """Persist the full collection, then adopt it as the mirror and signal siblings."""
        self.store.save(notes)
        self._notes = notes
        self.broadcaster.notify_changed()
