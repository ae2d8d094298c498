"""Unit tests for event schemas and the change broadcaster."""

import uuid

from modules.sticky.events.broadcaster import BroadcastHub, ChangeBroadcaster, NullBroadcaster
from modules.sticky.events.schemas import CollectionChanged, EventEnvelope


class TestEventEnvelope:
    def test_auto_generates_fields(self):
        """EventEnvelope should auto-generate event_id and timestamp."""
        event = EventEnvelope(event_type="test", origin="board-1")
        uuid.UUID(event.event_id)
        assert event.event_version == 1
        assert "T" in event.timestamp
        assert event.payload == {}

    def test_collection_changed_event_type(self):
        event = CollectionChanged(origin="board-1")
        assert event.event_type == "notes.collection.changed"
        assert event.payload == {}


class TestBroadcastHub:
    def test_sender_does_not_receive_its_own_signal(self):
        hub = BroadcastHub()
        a_received, b_received = [], []
        hub.register("a", a_received.append)
        hub.register("b", b_received.append)

        delivered = hub.publish(CollectionChanged(origin="a"))

        assert delivered == 1
        assert a_received == []
        assert len(b_received) == 1

    def test_every_other_window_is_notified(self):
        hub = BroadcastHub()
        received = {name: [] for name in ("a", "b", "c")}
        for name, inbox in received.items():
            hub.register(name, inbox.append)

        hub.publish(CollectionChanged(origin="b"))

        assert [len(received[n]) for n in ("a", "b", "c")] == [1, 0, 1]

    def test_failing_listener_does_not_block_others(self):
        hub = BroadcastHub()
        received = []

        def broken(event):
            raise RuntimeError("window crashed")

        hub.register("broken", broken)
        hub.register("healthy", received.append)

        delivered = hub.publish(CollectionChanged(origin="x"))

        assert delivered == 1
        assert len(received) == 1

    def test_unregister_removes_window(self):
        hub = BroadcastHub()
        unregister = hub.register("a", lambda event: None)
        assert hub.window_ids == ["a"]
        unregister()
        assert hub.window_ids == []

    def test_publish_with_no_listeners(self):
        assert BroadcastHub().publish(CollectionChanged(origin="a")) == 0


class TestChangeBroadcaster:
    def test_notify_changed_stamps_origin(self):
        hub = BroadcastHub()
        received = []
        hub.register("other", received.append)

        ChangeBroadcaster(hub, "board-1").notify_changed()

        assert received[0].origin == "board-1"

    def test_closed_window_stops_receiving(self):
        hub = BroadcastHub()
        received = []
        window = ChangeBroadcaster(hub, "note-1")
        window.subscribe(received.append)
        window.close()

        ChangeBroadcaster(hub, "board-1").notify_changed()

        assert received == []
        assert "note-1" not in hub.window_ids

    def test_disabled_broadcaster_stays_silent(self):
        hub = BroadcastHub()
        received = []
        hub.register("other", received.append)

        ChangeBroadcaster(hub, "board-1", enabled=False).notify_changed()

        assert received == []

    def test_null_broadcaster_is_inert(self):
        broadcaster = NullBroadcaster()
        broadcaster.subscribe(lambda event: None)
        broadcaster.notify_changed()
        broadcaster.close()
