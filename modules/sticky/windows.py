"""
Window Sessions.

A WindowSession is everything one window owns: its repository mirror,
its broadcaster handle, its reminder scheduler, and the services built on
them. The Desktop plays the host process: it holds the shared store, the
broadcast hub, and the notification sink, and opens windows.

Usage:
    desktop = Desktop.from_config(sink=my_sink)
    board = desktop.open_board()
    note = board.notes.create_note("todo")
    popout = desktop.open_note_window(note.id)
    popout.notes.toggle_pin(note.id)      # board mirror reloads via the hub
"""

import itertools
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from modules.sticky.core.config import AppConfig, get_app_config, get_store_path
from modules.sticky.core.logging import get_logger
from modules.sticky.core.utils import now_ms
from modules.sticky.events.broadcaster import BroadcastHub, ChangeBroadcaster
from modules.sticky.events.schemas import EventEnvelope
from modules.sticky.models.note import Note
from modules.sticky.repositories.note import NoteRepository
from modules.sticky.services.lock import LockGuard
from modules.sticky.services.note import NoteService
from modules.sticky.services.query import SortKey, visible_notes
from modules.sticky.services.voice import AudioCapture, VoiceRecorder
from modules.sticky.storage.store import JsonFileStore, Store
from modules.sticky.tasks.reminders import (
    LoggingNotificationSink,
    NotificationSink,
    RecurrenceMode,
    ReminderScheduler,
    next_upcoming,
)

logger = get_logger(__name__)


class WindowKind(str, Enum):
    BOARD = "board"
    NOTE = "note"


@dataclass
class SessionOptions:
    """Per-window tunables, normally read from config/settings."""

    interval_seconds: float = 60.0
    recurrence_mode: RecurrenceMode = RecurrenceMode.METADATA
    notification_title: str = "Reminder"
    notification_icon: str | None = None
    time_format: str = "%Y-%m-%d %H:%M"
    hash_passwords: bool = True
    bcrypt_rounds: int = 12
    broadcast_enabled: bool = True
    reminders_enabled: bool = True

    @classmethod
    def from_app_config(cls, config: AppConfig) -> "SessionOptions":
        reminders = config.reminders
        return cls(
            interval_seconds=reminders.interval_seconds,
            recurrence_mode=RecurrenceMode(reminders.recurrence_mode),
            notification_title=reminders.notification_title,
            notification_icon=reminders.notification_icon,
            time_format=reminders.time_format,
            hash_passwords=config.security.lock.hash_passwords,
            bcrypt_rounds=config.security.lock.bcrypt_rounds,
            broadcast_enabled=config.features.broadcast_enabled,
            reminders_enabled=config.features.reminders_enabled,
        )


class WindowSession:
    """One open window: a board, or a pop-out scoped to a single note."""

    def __init__(
        self,
        window_id: str,
        kind: WindowKind,
        store: Store,
        hub: BroadcastHub,
        sink: NotificationSink,
        options: SessionOptions | None = None,
        note_id: str | None = None,
        capture: AudioCapture | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        options = options or SessionOptions()
        self.window_id = window_id
        self.kind = kind
        self.options = options
        self.closed = False
        self._clock = clock
        self._refresh_listeners: list[Callable[[], None]] = []

        self.broadcaster = ChangeBroadcaster(hub, window_id, enabled=options.broadcast_enabled)
        self.repo = NoteRepository(store, self.broadcaster, clock=clock)
        self.notes = NoteService(self.repo)
        self.lock = LockGuard(
            self.repo,
            hash_passwords=options.hash_passwords,
            bcrypt_rounds=options.bcrypt_rounds,
        )
        self.scheduler = ReminderScheduler(
            self.repo,
            sink,
            interval_seconds=options.interval_seconds,
            recurrence_mode=options.recurrence_mode,
            clock=clock,
            title=options.notification_title,
            icon=options.notification_icon,
            time_format=options.time_format,
            # other processes write the same file without reaching this hub
            reload_before_tick=isinstance(store, JsonFileStore),
        )
        self.recorder = VoiceRecorder(capture, self.notes) if capture is not None else None
        self.broadcaster.subscribe(self._on_external_change)

        # First touch: a pop-out for an unknown id creates the note under that id
        self.note_id = self.repo.ensure(note_id).id if note_id else None
        logger.info(
            "Window opened",
            extra={"window_id": window_id, "kind": kind.value, "note_id": self.note_id},
        )

    @property
    def note(self) -> Note | None:
        """The note a pop-out window shows; None for boards or once deleted."""
        if self.note_id is None:
            return None
        return self.repo.get_or_none(self.note_id)

    def on_refresh(self, listener: Callable[[], None]) -> None:
        """Call listener after every reload triggered by another window."""
        self._refresh_listeners.append(listener)

    def visible(
        self,
        search_text: str = "",
        pinned_only: bool = False,
        key: SortKey | str = SortKey.UPDATED,
    ) -> list[Note]:
        """Notes as the board shows them."""
        return visible_notes(self.repo.all(), search_text, pinned_only, key)

    def next_reminder(self) -> Note | None:
        return next_upcoming(self.repo.all(), self._clock())

    def start(self) -> None:
        """Start background work; needs a running event loop."""
        if self.options.reminders_enabled:
            self.scheduler.start()

    def close(self) -> None:
        """Stop the window's loop. An unfinished recording is dropped."""
        if self.closed:
            return
        self.closed = True
        self.scheduler.stop()
        if self.recorder is not None:
            self.recorder.cancel()
        self.broadcaster.close()
        logger.info("Window closed", extra={"window_id": self.window_id})

    def _on_external_change(self, event: EventEnvelope) -> None:
        self.repo.refresh_from_store()
        for listener in list(self._refresh_listeners):
            listener()


class Desktop:
    """Host of all windows sharing one store."""

    def __init__(
        self,
        store: Store,
        sink: NotificationSink | None = None,
        options: SessionOptions | None = None,
        hub: BroadcastHub | None = None,
        capture_factory: Callable[[], AudioCapture] | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.sink = sink or LoggingNotificationSink()
        self.options = options or SessionOptions()
        self.hub = hub or BroadcastHub()
        self.capture_factory = capture_factory
        self.clock = clock
        self.windows: dict[str, WindowSession] = {}
        self._counter = itertools.count(1)

    @classmethod
    def from_config(
        cls,
        config: AppConfig | None = None,
        sink: NotificationSink | None = None,
        capture_factory: Callable[[], AudioCapture] | None = None,
    ) -> "Desktop":
        """Build a desktop over the configured JSON store."""
        config = config or get_app_config()
        store = JsonFileStore(get_store_path(), key=config.storage.storage_key)
        return cls(
            store,
            sink=sink,
            options=SessionOptions.from_app_config(config),
            capture_factory=capture_factory,
        )

    def open_board(self) -> WindowSession:
        return self._open(WindowKind.BOARD)

    def open_note_window(self, note_id: str) -> WindowSession | None:
        """
        Open a pop-out window for a note.

        An empty id is ignored. An id missing from the collection gets a
        fresh default note bound to it.
        """
        if not note_id:
            return None
        return self._open(WindowKind.NOTE, note_id=note_id)

    def close_window(self, window_id: str) -> None:
        session = self.windows.pop(window_id, None)
        if session is not None:
            session.close()

    def close_all(self) -> None:
        for window_id in list(self.windows):
            self.close_window(window_id)

    def _open(self, kind: WindowKind, note_id: str | None = None) -> WindowSession:
        window_id = f"{kind.value}-{next(self._counter)}"
        session = WindowSession(
            window_id,
            kind,
            self.store,
            self.hub,
            self.sink,
            options=self.options,
            note_id=note_id,
            capture=self.capture_factory() if self.capture_factory else None,
            clock=self.clock,
        )
        self.windows[window_id] = session
        return session
