"""
Metrics Collector — per-tick civilization statistics.

Condenses each CivilizationSnapshot into a TickMetrics row (metric values,
event counts, resource and tech progress, agent pressure) and provides
time series extraction and summaries for visualization.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

import numpy as np

from civcascade.core.engine import CivilizationSnapshot
from civcascade.core.events import EVENT_TYPES
from civcascade.core.metrics import METRIC_KEYS


@dataclass
class TickMetrics:
    """Condensed metrics for a single tick."""
    tick: int
    metrics: dict[str, float]

    # Event log composition
    event_counts: dict[str, int]
    agent_stories: int

    # Resources
    exposed_resources: list[str]
    exhausted_resources: list[str]
    finite_stock: float

    # Tech
    unlocked_techs: int
    newly_unlocked: list[str] = field(default_factory=list)

    # Agents
    mean_fatigue: float = 0.0
    mean_morale: float = 0.0
    focus_counts: dict[str, int] = field(default_factory=dict)


_ROW_FIELDS = frozenset(f.name for f in fields(TickMetrics))


class MetricsCollector:
    """Collects and aggregates metrics across ticks."""

    def __init__(self) -> None:
        self.metrics_history: list[TickMetrics] = []

    def collect(self, snapshot: CivilizationSnapshot) -> TickMetrics:
        """Record one snapshot."""
        event_counts = {t: 0 for t in EVENT_TYPES}
        newly_unlocked: list[str] = []
        for event in snapshot.events:
            event_counts[event.type] += 1
            if event.type == "techUnlocked":
                newly_unlocked.append(event.tech_id)

        resources = list(snapshot.resources.values())
        focus_counts: dict[str, int] = {}
        for agent in snapshot.agents:
            if agent.focus is not None:
                focus_counts[agent.focus.value] = focus_counts.get(agent.focus.value, 0) + 1

        fatigue = [a.fatigue for a in snapshot.agents]
        morale = [a.morale for a in snapshot.agents]

        row = TickMetrics(
            tick=snapshot.tick,
            metrics=dict(snapshot.metrics),
            event_counts=event_counts,
            agent_stories=event_counts["agentStory"],
            exposed_resources=[r.id for r in resources if r.exposed],
            exhausted_resources=[r.id for r in resources if r.exhausted],
            finite_stock=float(sum(r.amount for r in resources if r.is_finite)),
            unlocked_techs=sum(1 for t in snapshot.techs if t.unlocked),
            newly_unlocked=newly_unlocked,
            mean_fatigue=float(np.mean(fatigue)) if fatigue else 0.0,
            mean_morale=float(np.mean(morale)) if morale else 0.0,
            focus_counts=focus_counts,
        )
        self.metrics_history.append(row)
        return row

    def get_time_series(self, field_name: str) -> list[Any]:
        """Time series for a TickMetrics field or one of the seven metric names."""
        metric_names = {k.value for k in METRIC_KEYS}
        if field_name in metric_names:
            return [m.metrics[field_name] for m in self.metrics_history]
        if field_name not in _ROW_FIELDS:
            raise AttributeError(f"TickMetrics has no field '{field_name}'")
        return [getattr(m, field_name) for m in self.metrics_history]

    def metric_matrix(self) -> np.ndarray:
        """History as an array of shape (ticks, 7) in canonical metric order."""
        if not self.metrics_history:
            return np.zeros((0, len(METRIC_KEYS)))
        return np.array([
            [m.metrics[k.value] for k in METRIC_KEYS] for m in self.metrics_history
        ])

    def summary(self) -> dict[str, dict[str, float]]:
        """Mean / std / min / max / last per metric over the recorded history."""
        matrix = self.metric_matrix()
        if matrix.size == 0:
            return {}
        return {
            key.value: {
                "mean": float(matrix[:, i].mean()),
                "std": float(matrix[:, i].std()),
                "min": float(matrix[:, i].min()),
                "max": float(matrix[:, i].max()),
                "last": float(matrix[-1, i]),
            }
            for i, key in enumerate(METRIC_KEYS)
        }

    def export_for_visualization(self) -> list[dict[str, Any]]:
        """Export all rows as JSON-serializable dicts."""
        return [
            {
                "tick": m.tick,
                "metrics": m.metrics,
                "event_counts": m.event_counts,
                "agent_stories": m.agent_stories,
                "exposed_resources": m.exposed_resources,
                "exhausted_resources": m.exhausted_resources,
                "finite_stock": m.finite_stock,
                "unlocked_techs": m.unlocked_techs,
                "newly_unlocked": m.newly_unlocked,
                "mean_fatigue": m.mean_fatigue,
                "mean_morale": m.mean_morale,
                "focus_counts": m.focus_counts,
            }
            for m in self.metrics_history
        ]
