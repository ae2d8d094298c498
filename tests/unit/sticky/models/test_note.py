"""Unit tests for the Note model."""

import pydantic
import pytest

from modules.sticky.models.note import DEFAULT_FOLDER, MAX_INSTANT_MS, PALETTE, Note, Recurrence


def _record(**overrides) -> dict:
    record = {
        "id": "n1",
        "title": "Groceries",
        "content": "milk",
        "color": PALETTE[1],
        "pinned": False,
        "folder": "default",
        "tags": [],
        "locked": False,
        "password": None,
        "reminderAt": None,
        "recurrence": None,
        "voiceNotes": [],
        "createdAt": 1000,
        "updatedAt": 1000,
    }
    record.update(overrides)
    return record


class TestNoteWireFormat:
    def test_accepts_camel_case_record(self):
        note = Note.model_validate(_record(reminderAt=5000, voiceNotes=[{"data": "d", "duration": 2}]))
        assert note.reminder_at == 5000
        assert note.voice_notes[0].duration == 2
        assert note.created_at == 1000

    def test_record_uses_camel_case_keys_in_stored_order(self):
        record = _record()
        assert list(Note.model_validate(record).to_record()) == list(record)

    def test_unknown_keys_are_written_back(self):
        """Fields written by newer releases survive a load/save cycle."""
        note = Note.model_validate(_record(archived=True))
        assert note.to_record()["archived"] is True

    def test_missing_optional_fields_get_defaults(self):
        note = Note.model_validate({"id": "n1", "color": PALETTE[0], "createdAt": 1, "updatedAt": 1})
        assert note.title == ""
        assert note.folder == DEFAULT_FOLDER
        assert note.tags == []
        assert note.voice_notes == []

    def test_null_title_and_folder_are_normalized(self):
        note = Note.model_validate(_record(title=None, folder=None, tags=None))
        assert note.title == ""
        assert note.folder == DEFAULT_FOLDER
        assert note.tags == []


class TestNoteInvariants:
    def test_rejects_color_outside_palette(self):
        with pytest.raises(pydantic.ValidationError):
            Note.model_validate(_record(color="#000000"))

    def test_tags_are_deduplicated_in_order(self):
        note = Note.model_validate(_record(tags=["work", "home", "work"]))
        assert note.tags == ["work", "home"]

    def test_locked_note_requires_password(self):
        with pytest.raises(pydantic.ValidationError):
            Note.model_validate(_record(locked=True, password=None))

    def test_unlocked_note_cannot_keep_password(self):
        with pytest.raises(pydantic.ValidationError):
            Note.model_validate(_record(locked=False, password="abc"))

    def test_blank_recurrence_reads_as_none(self):
        assert Note.model_validate(_record(recurrence="")).recurrence is None
        assert Note.model_validate(_record(recurrence="none")).recurrence is None

    def test_recurrence_values(self):
        assert Note.model_validate(_record(recurrence="weekly")).recurrence is Recurrence.WEEKLY

    def test_reminder_outside_date_range_is_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            Note.model_validate(_record(reminderAt=MAX_INSTANT_MS + 1))

    def test_empty_id_is_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            Note.model_validate(_record(id=""))


class TestNoteMerged:
    def test_applies_delta_and_stamps(self):
        note = Note.model_validate(_record())
        merged = note.merged({"title": "New"}, updated_at=2000)
        assert merged.title == "New"
        assert merged.updated_at == 2000
        assert merged.created_at == 1000
        assert note.title == "Groceries"

    def test_rejects_immutable_fields(self):
        note = Note.model_validate(_record())
        with pytest.raises(ValueError, match="immutable"):
            note.merged({"id": "other"}, updated_at=2000)

    def test_rejects_unknown_fields(self):
        note = Note.model_validate(_record())
        with pytest.raises(ValueError, match="unknown"):
            note.merged({"colour": PALETTE[0]}, updated_at=2000)

    def test_keeps_extra_keys(self):
        note = Note.model_validate(_record(archived=True))
        assert note.merged({"pinned": True}, updated_at=2000).to_record()["archived"] is True
