"""
Note Store.

Durable key-value persistence of the whole note collection as one blob.
Pure load/save with no policy: the repository decides what to write.

The collection lives under a namespaced key (default ``sticky-notes:v1``)
as an array of camelCase note records. Loading never fails: a missing,
unparseable, or non-array value yields an empty collection, and single
records that do not validate are skipped. Saving replaces the whole blob
and is atomic for readers (temp file + os.replace).

Usage:
    from modules.sticky.storage.store import JsonFileStore

    store = JsonFileStore(Path("data/sticky-store.json"))
    notes = store.load()
    store.save(notes)
"""

import json
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from modules.sticky.core.exceptions import StorageError
from modules.sticky.core.logging import get_logger, log_with_source
from modules.sticky.models.note import Note

logger = get_logger(__name__)

STORAGE_KEY = "sticky-notes:v1"


class Store(Protocol):
    """Persistence contract the repository depends on."""

    def load(self) -> list[Note]: ...

    def save(self, notes: Sequence[Note]) -> None: ...


def encode_collection(notes: Sequence[Note]) -> list[dict[str, Any]]:
    """Convert notes to persisted records, preserving order."""
    return [note.to_record() for note in notes]


def decode_collection(value: Any) -> list[Note]:
    """
    Build notes from a persisted value.

    Accepts the record array itself or a JSON string holding it (the
    layout of stores exported from browser local storage).
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            log_with_source(logger, "storage", "warning", "Stored collection is not JSON", error=str(e))
            return []

    if value is None:
        return []
    if not isinstance(value, list):
        log_with_source(
            logger, "storage", "warning", "Stored collection is not an array",
            value_type=type(value).__name__,
        )
        return []

    notes: list[Note] = []
    for index, record in enumerate(value):
        try:
            notes.append(Note.model_validate(record))
        except ValidationError as e:
            log_with_source(
                logger, "storage", "warning", "Skipping invalid note record",
                index=index, errors=e.error_count(),
            )
    return notes


def dump_raw(value: Any) -> str:
    """Canonical serialized form of a persisted value."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


class MemoryStore:
    """
    In-process store holding serialized blobs by key.

    Several repositories may share one instance; each load returns fresh
    Note objects, never references into another window's mirror.
    """

    def __init__(self, key: str = STORAGE_KEY, initial: str | None = None) -> None:
        self.key = key
        self._blobs: dict[str, str] = {}
        if initial is not None:
            self._blobs[key] = initial

    def load_raw(self) -> str | None:
        """Return the serialized collection, or None when nothing is stored."""
        return self._blobs.get(self.key)

    def save_raw(self, raw: str) -> None:
        """Replace the serialized collection."""
        self._blobs[self.key] = raw

    def load(self) -> list[Note]:
        raw = self.load_raw()
        if raw is None:
            return []
        return decode_collection(raw)

    def save(self, notes: Sequence[Note]) -> None:
        self.save_raw(dump_raw(encode_collection(notes)))


class JsonFileStore:
    """
    File-backed key-value store.

    The file is a JSON object; the collection is stored under ``key`` and
    any other keys in the document are carried over on save.
    """

    def __init__(self, path: Path, key: str = STORAGE_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            log_with_source(
                logger, "storage", "warning", "Store file unreadable, treating as empty",
                path=str(self.path), error=str(e),
            )
            return {}
        if not isinstance(document, dict):
            log_with_source(
                logger, "storage", "warning", "Store file is not a key-value document",
                path=str(self.path),
            )
            return {}
        return document

    def load_raw(self) -> str | None:
        """Return the serialized collection, or None when nothing is stored."""
        document = self._read_document()
        if self.key not in document:
            return None
        return dump_raw(document[self.key])

    def load(self) -> list[Note]:
        notes = decode_collection(self._read_document().get(self.key))
        logger.debug("Collection loaded", extra={"path": str(self.path), "count": len(notes)})
        return notes

    def save(self, notes: Sequence[Note]) -> None:
        document = self._read_document()
        document[self.key] = encode_collection(notes)
        self._write_document(document)
        logger.debug("Collection saved", extra={"path": str(self.path), "count": len(notes)})

    def save_raw(self, raw: str) -> None:
        """Replace the serialized collection with an already-encoded array."""
        document = self._read_document()
        document[self.key] = json.loads(raw)
        self._write_document(document)

    def _write_document(self, document: dict[str, Any]) -> None:
        """
        Write the document atomically.

        Raises:
            StorageError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(dump_raw(document))
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            log_with_source(
                logger, "storage", "error", "Failed to write store",
                path=str(self.path), error=str(e),
            )
            raise StorageError(f"Could not write {self.path}: {e}") from e
