"""
Integration Tests for cli.py.

Drives the CLI through click's test runner against a real JSON store in a
temporary directory.
"""

import json
import re

import pytest
from click.testing import CliRunner

from cli import main
from modules.sticky.storage.store import STORAGE_KEY

runner = CliRunner()

pytestmark = pytest.mark.integration


def _invoke(*args: str, input: str | None = None):
    return runner.invoke(main, list(args), input=input)


def _create(template: str = "blank") -> str:
    result = _invoke("--service", "new", "--template", template)
    assert result.exit_code == 0, result.output
    return re.search(r"Created (\S+)", result.output).group(1)


def _stored(data_dir) -> list[dict]:
    document = json.loads((data_dir / "sticky-store.json").read_text(encoding="utf-8"))
    return document[STORAGE_KEY]


class TestHelp:
    def test_help(self):
        result = _invoke("--help")
        assert result.exit_code == 0
        assert "Sticky Board CLI" in result.output
        assert "--service" in result.output


class TestNoteLifecycle:
    def test_new_and_list(self, data_dir):
        note_id = _create("todo")

        result = _invoke("--service", "list")

        assert result.exit_code == 0
        assert "Todo" in result.output
        assert _stored(data_dir)[0]["id"] == note_id

    def test_empty_board(self, data_dir):
        result = _invoke("--service", "list")
        assert result.exit_code == 0
        assert "No notes" in result.output

    def test_edit_by_id_prefix(self, data_dir):
        note_id = _create()
        result = _invoke("--service", "edit", "--id", note_id[:8], "--title", "Groceries")
        assert result.exit_code == 0, result.output
        assert _stored(data_dir)[0]["title"] == "Groceries"

    def test_tag_and_search(self, data_dir):
        tagged = _create("meeting")
        _create("shopping")
        _invoke("--service", "tag", "--id", tagged, "--tag", "work")

        result = _invoke("--service", "list", "--search", "tag:work")

        assert "Meeting" in result.output
        assert "Shopping" not in result.output

    def test_pin_duplicate_and_delete(self, data_dir):
        note_id = _create()
        assert _invoke("--service", "pin", "--id", note_id).exit_code == 0
        assert _stored(data_dir)[0]["pinned"] is True

        assert _invoke("--service", "duplicate", "--id", note_id).exit_code == 0
        assert len(_stored(data_dir)) == 2

        assert _invoke("--service", "delete", "--id", note_id).exit_code == 0
        assert [n["title"] for n in _stored(data_dir)] == ["Untitled (copy)"]

    def test_folder(self, data_dir):
        note_id = _create()
        _invoke("--service", "folder", "--id", note_id, "--value", "archive")
        assert _stored(data_dir)[0]["folder"] == "archive"


class TestReminders:
    def test_set_and_clear(self, data_dir):
        note_id = _create()

        result = _invoke("--service", "remind", "--id", note_id, "--at", "2026-10-20 09:00", "--recurrence", "daily")
        assert result.exit_code == 0, result.output
        assert _stored(data_dir)[0]["reminderAt"] is not None
        assert _stored(data_dir)[0]["recurrence"] == "daily"

        _invoke("--service", "remind", "--id", note_id, "--at", "")
        assert _stored(data_dir)[0]["reminderAt"] is None

    def test_invalid_date(self, data_dir):
        note_id = _create()
        result = _invoke("--service", "remind", "--id", note_id, "--at", "banana")
        assert result.exit_code == 1
        assert "Invalid date" in result.output
        assert _stored(data_dir)[0]["reminderAt"] is None


class TestLocking:
    def test_lock_show_unlock(self, data_dir):
        note_id = _create()
        _invoke("--service", "edit", "--id", note_id, "--content", "the secret")

        result = _invoke("--service", "lock", "--id", note_id, input="abc\n")
        assert result.exit_code == 0, result.output
        assert _stored(data_dir)[0]["locked"] is True
        assert _stored(data_dir)[0]["password"] != "abc"

        denied = _invoke("--service", "show", "--id", note_id, "--password", "xyz")
        assert denied.exit_code == 1
        assert "Incorrect password" in denied.output

        shown = _invoke("--service", "show", "--id", note_id, "--password", "abc")
        assert "the secret" in shown.output

        rejected = _invoke("--service", "unlock", "--id", note_id, input="xyz\n")
        assert rejected.exit_code == 1
        assert _stored(data_dir)[0]["locked"] is True

        unlocked = _invoke("--service", "unlock", "--id", note_id, input="abc\n")
        assert unlocked.exit_code == 0, unlocked.output
        assert _stored(data_dir)[0]["locked"] is False
        assert _stored(data_dir)[0]["password"] is None


class TestErrors:
    def test_id_required(self, data_dir):
        result = _invoke("--service", "pin")
        assert result.exit_code == 2
        assert "--id is required" in result.output

    def test_unknown_id(self, data_dir):
        result = _invoke("--service", "pin", "--id", "nope")
        assert result.exit_code == 1
        assert "No note matches" in result.output


class TestInfoAndConfig:
    def test_info(self, data_dir):
        _create()
        result = _invoke("--service", "info")
        assert result.exit_code == 0
        assert "Sticky Board" in result.output
        assert "Notes: 1" in result.output

    def test_config(self, data_dir):
        result = _invoke("--service", "config")
        assert result.exit_code == 0
        assert "recurrence_mode" in result.output
