"""
Unit Tests for the Lock Guard.

bcrypt runs for real with the minimum cost factor to keep tests fast.
"""

import pytest

from modules.sticky.core.exceptions import IncorrectPasswordError, NotFoundError, ValidationError
from modules.sticky.core.security import is_password_hash
from modules.sticky.models.note import Note
from modules.sticky.services.lock import (
    INCORRECT_PASSWORD,
    LOCK_PROMPT,
    UNLOCK_PROMPT,
    LockGuard,
    LockOutcome,
)
from tests.doubles import ScriptedPrompt


@pytest.fixture
def guard(repo) -> LockGuard:
    return LockGuard(repo, hash_passwords=True, bcrypt_rounds=4)


@pytest.fixture
def note_id(repo) -> str:
    return repo.update(repo.create().id, title="Diary", content="secret").id


class TestLockDialog:
    def test_wrong_then_right_password(self, guard, repo, note_id):
        assert guard.toggle(note_id, ScriptedPrompt("abc")) is LockOutcome.LOCKED
        assert repo.get(note_id).locked

        prompt = ScriptedPrompt("xyz")
        assert guard.toggle(note_id, prompt) is LockOutcome.REJECTED
        assert prompt.alerts == [INCORRECT_PASSWORD]
        assert repo.get(note_id).locked

        assert guard.toggle(note_id, ScriptedPrompt("abc")) is LockOutcome.UNLOCKED
        unlocked = repo.get(note_id)
        assert unlocked.locked is False
        assert unlocked.password is None

    def test_prompts_match_lock_state(self, guard, note_id):
        lock_prompt = ScriptedPrompt("abc")
        guard.toggle(note_id, lock_prompt)
        unlock_prompt = ScriptedPrompt("abc")
        guard.toggle(note_id, unlock_prompt)
        assert lock_prompt.questions == [LOCK_PROMPT]
        assert unlock_prompt.questions == [UNLOCK_PROMPT]

    def test_cancel_while_locking(self, guard, repo, memory_store, note_id):
        before = memory_store.load_raw()
        assert guard.toggle(note_id, ScriptedPrompt(None)) is LockOutcome.CANCELLED
        assert memory_store.load_raw() == before

    def test_blank_password_counts_as_cancel(self, guard, repo, note_id):
        assert guard.toggle(note_id, ScriptedPrompt("   ")) is LockOutcome.CANCELLED
        assert not repo.get(note_id).locked

    def test_cancel_while_unlocking(self, guard, repo, note_id):
        guard.lock(note_id, "abc")
        prompt = ScriptedPrompt(None)
        assert guard.toggle(note_id, prompt) is LockOutcome.CANCELLED
        assert prompt.alerts == []
        assert repo.get(note_id).locked

    def test_missing_note(self, guard):
        assert guard.toggle("ghost", ScriptedPrompt()) is LockOutcome.MISSING


class TestLockUnlock:
    def test_stores_bcrypt_hash(self, guard, repo, note_id):
        guard.lock(note_id, "abc")
        stored = repo.get(note_id).password
        assert stored != "abc"
        assert is_password_hash(stored)

    def test_plaintext_when_hashing_disabled(self, repo, note_id):
        LockGuard(repo, hash_passwords=False).lock(note_id, "abc")
        assert repo.get(note_id).password == "abc"

    def test_legacy_plaintext_credential_unlocks(self, repo, note_id):
        """Stores written without hashing keep working after hashing is enabled."""
        LockGuard(repo, hash_passwords=False).lock(note_id, "abc")
        unlocked = LockGuard(repo, hash_passwords=True, bcrypt_rounds=4).unlock(note_id, "abc")
        assert unlocked.locked is False

    def test_lock_already_locked_note_changes_nothing(self, guard, repo, note_id):
        guard.lock(note_id, "abc")
        first = repo.get(note_id).password
        assert guard.lock(note_id, "other") is None
        assert repo.get(note_id).password == first

    def test_wrong_password_raises(self, guard, note_id):
        guard.lock(note_id, "abc")
        with pytest.raises(IncorrectPasswordError):
            guard.unlock(note_id, "xyz")

    def test_unlock_unlocked_note_is_noop(self, guard, repo, note_id):
        note = guard.unlock(note_id, "anything")
        assert isinstance(note, Note)
        assert not note.locked

    def test_unlock_missing_note(self, guard):
        assert guard.unlock("ghost", "abc") is None

    def test_password_is_trimmed(self, guard, note_id):
        guard.lock(note_id, "  abc  ")
        assert guard.unlock(note_id, "abc").locked is False


class TestReveal:
    def test_unlocked_note_needs_no_password(self, guard, note_id):
        assert guard.reveal(note_id).content == "secret"

    def test_locked_note_requires_password(self, guard, note_id):
        guard.lock(note_id, "abc")
        with pytest.raises(IncorrectPasswordError):
            guard.reveal(note_id)
        assert guard.reveal(note_id, "abc").content == "secret"

    def test_missing_note(self, guard):
        with pytest.raises(NotFoundError):
            guard.reveal("ghost")


class TestUpdateLocked:
    def test_edits_after_password_check(self, guard, repo, note_id):
        guard.lock(note_id, "abc")
        updated = guard.update_locked(note_id, "abc", content="new secret")
        assert updated.content == "new secret"
        assert updated.locked

    def test_wrong_password_changes_nothing(self, guard, repo, note_id):
        guard.lock(note_id, "abc")
        with pytest.raises(IncorrectPasswordError):
            guard.update_locked(note_id, "xyz", content="tampered")
        assert repo.get(note_id).content == "secret"

    def test_lock_fields_are_rejected(self, guard, note_id):
        with pytest.raises(ValidationError):
            guard.update_locked(note_id, None, locked=True)
