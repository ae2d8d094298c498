"""
Reminder Scheduler.

Per-window polling loop that fires reminders from the window's mirror.

Every tick walks the mirror; a note is due when it has a reminderAt at or
before now and its id is not in this scheduler's notified set. A due note
is added to the set and exactly one notification goes to the sink. A
reminderAt of 0 counts as unset, matching how older stores cleared it.

A scheduler built with reload_before_tick re-reads the store at the start
of every pass. Windows in other processes share the file but not the
broadcast hub, so this is how a long-running watcher sees their changes.

The notified set lives in memory, belongs to one scheduler instance, and
is neither persisted nor shared. Each open window therefore notifies once
for the same reminder, and a restarted window notifies again for
reminders that are still past due.

Recurrence modes:
    metadata - recurrence is descriptive; a reminder fires once per stored reminderAt
    advance  - after firing, reminderAt moves to the next occurrence after now
               and is written through the repository

Typical usage:
    scheduler = ReminderScheduler(repo, sink, interval_seconds=60)
    scheduler.start()      # inside a running event loop
    ...
    scheduler.stop()
"""

import asyncio
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Protocol

from dateutil.relativedelta import relativedelta

from modules.sticky.core.logging import get_logger, log_with_source
from modules.sticky.core.utils import format_local, from_epoch_ms, now_ms, to_epoch_ms
from modules.sticky.models.note import Note, Recurrence
from modules.sticky.repositories.note import NoteRepository
from modules.sticky.schemas.notification import ReminderNotification

logger = get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0

_STEPS = {
    Recurrence.DAILY: relativedelta(days=1),
    Recurrence.WEEKLY: relativedelta(weeks=1),
    Recurrence.MONTHLY: relativedelta(months=1),
}


class RecurrenceMode(str, Enum):
    """What happens to a recurring reminder after it fires."""

    METADATA = "metadata"
    ADVANCE = "advance"


class NotificationSink(Protocol):
    """Fire-and-forget notification display."""

    def send(self, notification: ReminderNotification) -> None: ...


class LoggingNotificationSink:
    """Sink that writes notifications to the log."""

    def send(self, notification: ReminderNotification) -> None:
        log_with_source(
            logger, "scheduler", "info", notification.title,
            body=notification.body, note_id=notification.note_id,
        )


def next_occurrence(reminder_at: int, recurrence: Recurrence, now: int) -> int:
    """
    First occurrence of a recurring reminder strictly after now.

    Steps are counted from the original reminderAt so monthly reminders on
    the 31st land on each month's last day instead of drifting. Stepping
    happens in local wall-clock time, so a 09:00 reminder stays at 09:00
    across DST changes.
    """
    base = from_epoch_ms(reminder_at).replace(tzinfo=None)
    step = _STEPS[recurrence]
    count = 1
    candidate = to_epoch_ms(base + step * count)
    while candidate <= now:
        count += 1
        candidate = to_epoch_ms(base + step * count)
    return candidate


def next_upcoming(notes: Iterable[Note], now: int) -> Note | None:
    """The note whose reminder comes next after now, if any."""
    upcoming = [n for n in notes if n.reminder_at is not None and n.reminder_at > now]
    return min(upcoming, key=lambda n: n.reminder_at, default=None)


class ReminderScheduler:
    """
    Fires due reminders for one window.

    Args:
        repo: The window's repository; its mirror is what gets scanned
        sink: Where notifications go
        interval_seconds: Polling interval of the background loop
        recurrence_mode: metadata or advance (see module docstring)
        notified: Pre-existing notified set to adopt (a fresh set by default)
        clock: Epoch-millisecond clock
        reload_before_tick: Reload the mirror from the store before each pass
    """

    def __init__(
        self,
        repo: NoteRepository,
        sink: NotificationSink,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        recurrence_mode: RecurrenceMode | str = RecurrenceMode.METADATA,
        notified: set[str] | None = None,
        clock: Callable[[], int] = now_ms,
        title: str = "Reminder",
        icon: str | None = None,
        time_format: str = "%Y-%m-%d %H:%M",
        reload_before_tick: bool = False,
    ) -> None:
        self.repo = repo
        self.sink = sink
        self.interval_seconds = interval_seconds
        self.recurrence_mode = RecurrenceMode(recurrence_mode)
        self.notified = notified if notified is not None else set()
        self.title = title
        self.icon = icon
        self.time_format = time_format
        self.reload_before_tick = reload_before_tick
        self._clock = clock
        # reminderAt each notified id fired for; a different stored value is a new occurrence
        self._fired_at: dict[str, int] = {}
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self, now: int | None = None) -> list[ReminderNotification]:
        """
        Run one polling pass.

        Args:
            now: Current time in epoch ms (the scheduler clock by default)

        Returns:
            Notifications emitted during this pass
        """
        now = self._clock() if now is None else now
        emitted: list[ReminderNotification] = []

        if self.reload_before_tick:
            self.repo.refresh_from_store()

        for note in self.repo.all():
            if not note.reminder_at:
                continue
            if note.id in self.notified:
                fired = self._fired_at.get(note.id)
                if fired is None or fired == note.reminder_at:
                    continue
                self.notified.discard(note.id)
            if note.reminder_at > now:
                continue

            self.notified.add(note.id)
            self._fired_at[note.id] = note.reminder_at
            notification = self._build(note)
            self._emit(notification)
            emitted.append(notification)

            if self.recurrence_mode is RecurrenceMode.ADVANCE and note.recurrence is not None:
                self._advance(note, now)

        return emitted

    def _build(self, note: Note) -> ReminderNotification:
        due = format_local(note.reminder_at, self.time_format)
        return ReminderNotification(
            title=self.title,
            body=f"{note.title or 'Untitled'} - {due}",
            icon=self.icon,
            note_id=note.id,
            due_at=note.reminder_at,
        )

    def _emit(self, notification: ReminderNotification) -> None:
        """Hand a notification to the sink. Delivery failures are logged only."""
        try:
            self.sink.send(notification)
        except Exception as e:
            log_with_source(
                logger, "scheduler", "error", "Notification delivery failed",
                note_id=notification.note_id, error=str(e),
            )
            return
        log_with_source(
            logger, "scheduler", "info", "Reminder fired",
            note_id=notification.note_id, due_at=notification.due_at,
        )

    def _advance(self, note: Note, now: int) -> None:
        try:
            following = next_occurrence(note.reminder_at, note.recurrence, now)
        except (ValueError, OverflowError, OSError) as e:
            log_with_source(
                logger, "scheduler", "warning", "Recurring reminder left in place",
                note_id=note.id, reminder_at=note.reminder_at, error=str(e),
            )
            return
        if self.repo.update(note.id, reminder_at=following) is not None:
            logger.info(
                "Recurring reminder advanced",
                extra={"note_id": note.id, "reminder_at": following, "recurrence": note.recurrence.value},
            )

    # -------------------------------------------------------------------------
    # Background loop
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Start the polling loop as a task on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info("Reminder scheduler started", extra={"interval_seconds": self.interval_seconds})

    def stop(self) -> None:
        """Stop the polling loop. Notifications already handed off stay delivered."""
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.info("Reminder scheduler stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.tick()
            except Exception as e:
                logger.error("Reminder tick failed", extra={"error": str(e)}, exc_info=True)
