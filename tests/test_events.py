"""Tests for simulation events and the tick mailbox."""

import pytest

from civcascade.core.events import (
    EVENT_TYPES,
    AgentStoryEvent,
    MetricChangeEvent,
    ResourceChangeEvent,
    TechUnlockedEvent,
    describe_event,
)
from civcascade.core.mailbox import Mailbox
from civcascade.core.metrics import MetricKey


class TestEvents:
    def test_type_tags(self):
        events = [
            ResourceChangeEvent("r", 0.0, "c"),
            MetricChangeEvent(MetricKey.MORALE, 1.0, "c"),
            TechUnlockedEvent("t", "c"),
            AgentStoryEvent("a", "s"),
        ]
        assert tuple(e.type for e in events) == EVENT_TYPES

    def test_metric_change_dict(self):
        event = MetricChangeEvent(MetricKey.CULTURE, 2.5, "Agent initiatives")
        assert event.to_dict() == {
            "type": "metricChange", "metric": "culture",
            "delta": 2.5, "cause": "Agent initiatives",
        }

    def test_describe(self):
        assert describe_event(MetricChangeEvent(MetricKey.CULTURE, 2.5, "Festival")) == (
            "Festival (culture +2.50)"
        )
        assert describe_event(MetricChangeEvent(MetricKey.CULTURE, -0.3, "Drift")) == (
            "Drift (culture -0.30)"
        )
        assert describe_event(AgentStoryEvent("a", "Ada writes.")) == "Ada writes."

    def test_describe_unknown_raises(self):
        with pytest.raises(TypeError):
            describe_event("not an event")


class TestMailbox:
    def test_drain_returns_in_order_and_empties(self):
        box = Mailbox("test")
        box.post(1)
        box.post_many([2, 3])
        assert len(box) == 3
        assert box.peek() == [1, 2, 3]
        assert box.drain() == [1, 2, 3]
        assert len(box) == 0
        assert box.drain() == []

    def test_peek_does_not_consume(self):
        box = Mailbox("test")
        box.post("x")
        box.peek().clear()
        assert len(box) == 1
        assert "pending=1" in repr(box)
