"""
Change Broadcaster.

Tells sibling windows that the store changed so each can reload its
mirror. Delivery is best-effort and fire-and-forget: no acknowledgment,
no ordering guarantee, and a window that is not registered simply misses
the signal (it self-heals on its next load).

BroadcastHub stands in for the host process that relays messages between
windows. Each window talks to it through its own ChangeBroadcaster.

Usage:
    hub = BroadcastHub()
    board = ChangeBroadcaster(hub, window_id="board")
    board.subscribe(lambda event: repo.refresh_from_store())
    board.notify_changed()   # delivered to every window except "board"
"""

from collections.abc import Callable

from modules.sticky.core.logging import get_logger, log_with_source
from modules.sticky.events.schemas import CollectionChanged, EventEnvelope

logger = get_logger(__name__)

Listener = Callable[[EventEnvelope], None]


class BroadcastHub:
    """Relays events to every registered window except the sender."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    @property
    def window_ids(self) -> list[str]:
        return list(self._listeners)

    def register(self, window_id: str, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for a window.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.setdefault(window_id, []).append(listener)

        def unregister() -> None:
            listeners = self._listeners.get(window_id)
            if listeners and listener in listeners:
                listeners.remove(listener)
                if not listeners:
                    del self._listeners[window_id]

        return unregister

    def unregister_window(self, window_id: str) -> None:
        """Drop every listener of a window."""
        self._listeners.pop(window_id, None)

    def publish(self, event: EventEnvelope) -> int:
        """
        Deliver an event to all windows other than its origin.

        A failing listener is logged and does not stop delivery to the rest.

        Returns:
            Number of listeners invoked successfully
        """
        delivered = 0
        for window_id, listeners in list(self._listeners.items()):
            if window_id == event.origin:
                continue
            for listener in list(listeners):
                try:
                    listener(event)
                    delivered += 1
                except Exception as e:
                    log_with_source(
                        logger, "broadcast", "error", "Listener failed",
                        window_id=window_id, event_id=event.event_id, error=str(e),
                    )
        logger.debug(
            "Event published",
            extra={"event_type": event.event_type, "origin": event.origin, "delivered": delivered},
        )
        return delivered


class ChangeBroadcaster:
    """A single window's handle on the hub."""

    def __init__(self, hub: BroadcastHub, window_id: str, enabled: bool = True) -> None:
        self.hub = hub
        self.window_id = window_id
        self.enabled = enabled
        self._unsubscribers: list[Callable[[], None]] = []

    def notify_changed(self) -> None:
        """Signal every other live window that the collection changed."""
        if not self.enabled:
            return
        self.hub.publish(CollectionChanged(origin=self.window_id))

    def subscribe(self, listener: Listener) -> None:
        """Receive change signals published by other windows."""
        self._unsubscribers.append(self.hub.register(self.window_id, listener))

    def close(self) -> None:
        """Stop receiving signals."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()


class NullBroadcaster:
    """Broadcaster for a lone window; publishes nothing."""

    window_id = "standalone"

    def notify_changed(self) -> None:
        pass

    def subscribe(self, listener: Listener) -> None:
        pass

    def close(self) -> None:
        pass
