"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Time is driven by a FakeClock so reminder and timestamp behavior is
deterministic. Stores are in-memory unless a test asks for the file-backed
store explicitly.
"""

import random

import pytest

from modules.sticky.events.broadcaster import BroadcastHub
from modules.sticky.repositories.note import NoteRepository
from modules.sticky.storage.store import MemoryStore
from tests.doubles import FakeClock, RecordingSink


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def hub() -> BroadcastHub:
    return BroadcastHub()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def repo(memory_store: MemoryStore, clock: FakeClock) -> NoteRepository:
    """
    Repository over an empty in-memory store.

    Usage:
        def test_create(repo):
            note = repo.create()
            assert note.id in repo
    """
    return NoteRepository(memory_store, clock=clock, rng=random.Random(7))
