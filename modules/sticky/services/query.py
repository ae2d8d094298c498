"""
Query and Sort Engine.

Filters and orders the visible note set for the board.

Search syntax:
    ""            everything
    tag:<value>   notes with a tag that contains <value>
    folder:<value> notes whose folder contains <value>
    anything else substring of title, content, or color

All matching is case-insensitive.
"""

from collections.abc import Iterable, Sequence
from enum import Enum

from modules.sticky.models.note import Note

TAG_PREFIX = "tag:"
FOLDER_PREFIX = "folder:"


class SortKey(str, Enum):
    """Primary ordering of the board."""

    UPDATED = "updated"
    CREATED = "created"
    TITLE = "title"


def matches(note: Note, search_text: str) -> bool:
    """Check one note against a search string."""
    query = search_text.strip().lower()
    if not query:
        return True

    if query.startswith(TAG_PREFIX):
        wanted = query[len(TAG_PREFIX):].strip()
        return any(wanted in tag.lower() for tag in note.tags)

    if query.startswith(FOLDER_PREFIX):
        wanted = query[len(FOLDER_PREFIX):].strip()
        return wanted in (note.folder or "").lower()

    return any(query in (value or "").lower() for value in (note.title, note.content, note.color))


def filter_notes(
    notes: Iterable[Note],
    search_text: str = "",
    pinned_only: bool = False,
) -> list[Note]:
    """
    Select the notes matching a search and the pinned-only toggle.

    Args:
        notes: Collection to filter
        search_text: Search string (see module docstring)
        pinned_only: Keep only pinned notes

    Returns:
        Matching notes in their original order
    """
    return [
        note for note in notes
        if (not pinned_only or note.pinned) and matches(note, search_text)
    ]


def sort_notes(notes: Sequence[Note], key: SortKey | str = SortKey.UPDATED) -> list[Note]:
    """
    Order notes by a primary key, then pinned notes first.

    Two stable passes: the pinned pass keeps the primary order intact
    inside the pinned and unpinned groups.
    """
    key = SortKey(key)
    if key is SortKey.CREATED:
        ordered = sorted(notes, key=lambda n: n.created_at, reverse=True)
    elif key is SortKey.TITLE:
        ordered = sorted(notes, key=lambda n: (n.title or "").casefold())
    else:
        ordered = sorted(notes, key=lambda n: n.updated_at, reverse=True)
    return sorted(ordered, key=lambda n: not n.pinned)


def visible_notes(
    notes: Iterable[Note],
    search_text: str = "",
    pinned_only: bool = False,
    key: SortKey | str = SortKey.UPDATED,
) -> list[Note]:
    """Filter then sort, the way the board renders its cards."""
    return sort_notes(filter_notes(notes, search_text, pinned_only), key)
