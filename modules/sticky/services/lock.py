"""
Lock Guard.

Gates a note's content behind a password. Locking stores a credential in
the note's password field; unlocking with the right password clears both
locked and password. A wrong password leaves the note untouched.

Dialogs are modelled as a Prompt capability: the guard asks a question and
acts on the answer. A None answer means the user cancelled.
"""

from enum import Enum
from typing import Any, Protocol

from modules.sticky.core.exceptions import IncorrectPasswordError, ValidationError
from modules.sticky.core.logging import get_logger
from modules.sticky.core.security import make_credential, verify_password
from modules.sticky.models.note import Note
from modules.sticky.repositories.note import NoteRepository

logger = get_logger(__name__)

LOCK_PROMPT = "Set a password to lock this note:"
UNLOCK_PROMPT = "Enter password to unlock:"
INCORRECT_PASSWORD = "Incorrect password"


class Prompt(Protocol):
    """Synchronous request/response user dialog."""

    def ask(self, message: str, default: str = "") -> str | None:
        """Ask for text. Returns None when the user cancels."""
        ...

    def alert(self, message: str) -> None:
        """Show a modal message."""
        ...


class LockOutcome(str, Enum):
    """Result of a lock/unlock dialog."""

    LOCKED = "locked"
    UNLOCKED = "unlocked"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    MISSING = "missing"


class LockGuard:
    """Lock, unlock, and password-gated access for notes of one repository."""

    def __init__(
        self,
        repo: NoteRepository,
        hash_passwords: bool = True,
        bcrypt_rounds: int = 12,
    ) -> None:
        self.repo = repo
        self.hash_passwords = hash_passwords
        self.bcrypt_rounds = bcrypt_rounds

    def is_locked(self, note_id: str) -> bool:
        note = self.repo.get_or_none(note_id)
        return bool(note and note.locked)

    def lock(self, note_id: str, password: str | None) -> Note | None:
        """
        Lock a note with a password.

        A blank password counts as a cancelled prompt and changes nothing.
        Locking an already locked note changes nothing either.

        Returns:
            The locked note, or None if nothing changed
        """
        secret = (password or "").strip()
        note = self.repo.get_or_none(note_id)
        if not secret or note is None or note.locked:
            return None

        credential = make_credential(secret, self.hash_passwords, self.bcrypt_rounds)
        locked = self.repo.update(note_id, locked=True, password=credential)
        logger.info("Note locked", extra={"note_id": note_id, "hashed": self.hash_passwords})
        return locked

    def unlock(self, note_id: str, password: str) -> Note | None:
        """
        Unlock a note.

        Returns:
            The unlocked note, or None if the note is missing

        Raises:
            IncorrectPasswordError: If the password does not match
        """
        note = self.repo.get_or_none(note_id)
        if note is None:
            return None
        if not note.locked:
            return note

        self._verify(note, password)
        unlocked = self.repo.update(note_id, locked=False, password=None)
        logger.info("Note unlocked", extra={"note_id": note_id})
        return unlocked

    def reveal(self, note_id: str, password: str | None = None) -> Note:
        """
        Return a note for viewing, checking the password if it is locked.

        Raises:
            NotFoundError: If the note is missing
            IncorrectPasswordError: If the note is locked and the password is wrong
        """
        note = self.repo.get(note_id)
        if note.locked:
            self._verify(note, password)
        return note

    def update_locked(self, note_id: str, password: str | None, **delta: Any) -> Note | None:
        """
        Edit a note that may be locked, after checking its password.

        Lock state itself changes only through lock()/unlock().

        Raises:
            IncorrectPasswordError: If the note is locked and the password is wrong
            ValidationError: If delta touches the lock fields
        """
        if {"locked", "password"} & set(delta):
            raise ValidationError(
                "Lock state changes through lock/unlock",
                details={"fields": sorted(delta)},
            )
        self.reveal(note_id, password)
        return self.repo.update(note_id, **delta)

    def toggle(self, note_id: str, prompt: Prompt) -> LockOutcome:
        """
        Run the lock or unlock dialog for a note.

        Cancelling leaves the note unchanged without an error. A wrong
        password raises an alert through the prompt and changes nothing.
        """
        note = self.repo.get_or_none(note_id)
        if note is None:
            logger.warning("Lock toggle on missing note", extra={"note_id": note_id})
            return LockOutcome.MISSING

        if note.locked:
            answer = prompt.ask(UNLOCK_PROMPT)
            if answer is None:
                return LockOutcome.CANCELLED
            try:
                self.unlock(note_id, answer)
            except IncorrectPasswordError as e:
                prompt.alert(e.message)
                return LockOutcome.REJECTED
            return LockOutcome.UNLOCKED

        answer = prompt.ask(LOCK_PROMPT)
        if self.lock(note_id, answer) is None:
            return LockOutcome.CANCELLED
        return LockOutcome.LOCKED

    def _verify(self, note: Note, password: str | None) -> None:
        if password is None or not note.password or not verify_password(password, note.password):
            logger.info("Unlock rejected", extra={"note_id": note.id})
            raise IncorrectPasswordError(INCORRECT_PASSWORD)
