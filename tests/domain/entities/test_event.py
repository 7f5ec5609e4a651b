"""Tests for Event entity."""

from preekbot.domain.entities import Event, EventType


class TestEventIdentityKey:
    """get_identity_key tests."""

    def test_content_ready_key(self) -> None:
        event = Event(
            type=EventType.CONTENT_READY,
            payload={"church_id": 3, "sermon_id": "s-1"},
        )
        assert event.get_identity_key() == "content_ready:3:s-1"

    def test_same_content_shares_key(self) -> None:
        first = Event(EventType.CONTENT_READY, {"church_id": 3, "sermon_id": "s-1"})
        second = Event(EventType.CONTENT_READY, {"church_id": 3, "sermon_id": "s-1"})
        assert first.get_identity_key() == second.get_identity_key()

    def test_signal_messages_never_collapse(self) -> None:
        payload = {"sender": "+31612345678", "timestamp": 1}
        first = Event(EventType.SIGNAL_MESSAGE_RECEIVED, payload)
        second = Event(EventType.SIGNAL_MESSAGE_RECEIVED, dict(payload))
        assert first.get_identity_key() != second.get_identity_key()

    def test_attempt_defaults_to_zero(self) -> None:
        assert Event(EventType.CONTENT_READY, {}).attempt == 0
