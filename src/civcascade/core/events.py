"""
Simulation events emitted during a civilization tick.

Four variants: resource change, metric change, tech unlocked, agent story.
Events are observational only; nothing in the tick reads them back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from civcascade.core.metrics import MetricKey


@dataclass(frozen=True)
class ResourceChangeEvent:
    resource_id: str
    delta: float
    cause: str
    type: str = "resourceChange"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type, "resource_id": self.resource_id,
            "delta": self.delta, "cause": self.cause,
        }


@dataclass(frozen=True)
class MetricChangeEvent:
    metric: MetricKey
    delta: float
    cause: str
    type: str = "metricChange"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type, "metric": self.metric.value,
            "delta": self.delta, "cause": self.cause,
        }


@dataclass(frozen=True)
class TechUnlockedEvent:
    tech_id: str
    cause: str
    type: str = "techUnlocked"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "tech_id": self.tech_id, "cause": self.cause}


@dataclass(frozen=True)
class AgentStoryEvent:
    agent_id: str
    summary: str
    type: str = "agentStory"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "agent_id": self.agent_id, "summary": self.summary}


SimulationEvent = Union[
    ResourceChangeEvent, MetricChangeEvent, TechUnlockedEvent, AgentStoryEvent,
]

EVENT_TYPES: tuple[str, ...] = (
    "resourceChange", "metricChange", "techUnlocked", "agentStory",
)


def describe_event(event: SimulationEvent) -> str:
    """One-line human readable rendering of any event variant."""
    if isinstance(event, MetricChangeEvent):
        sign = "+" if event.delta > 0 else ""
        return f"{event.cause} ({event.metric.value} {sign}{event.delta:.2f})"
    if isinstance(event, ResourceChangeEvent):
        return event.cause
    if isinstance(event, TechUnlockedEvent):
        return event.cause
    if isinstance(event, AgentStoryEvent):
        return event.summary
    raise TypeError(f"Unknown simulation event: {event!r}")
