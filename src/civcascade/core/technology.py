"""
Technology graph — threshold-gated, one-shot unlocks.

Each blueprint becomes a node whose requirement set is generated once at
construction from its intensity plus randomness. A node unlocks the first
time every requirement holds; its effects are then applied exactly once
by the civilization engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union

from civcascade.core.metrics import METRIC_KEYS, MetricKey, js_round, round2
from civcascade.core.resources import Requirement, meets_requirements
from civcascade.core.rng import DeterministicRandom


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class MetricBoost:
    metric: MetricKey
    value: float
    type: str = "metricBoost"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "metric": self.metric.value, "value": self.value}


@dataclass(frozen=True)
class ResourceEfficiency:
    resource_id: str
    multiplier: float
    type: str = "resourceEfficiency"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type, "resource_id": self.resource_id,
            "multiplier": self.multiplier,
        }


@dataclass(frozen=True)
class ExposeResource:
    """Narrative hint only; real exposure is still gated by prerequisites."""
    resource_id: str
    type: str = "exposeResource"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "resource_id": self.resource_id}


TechEffect = Union[MetricBoost, ResourceEfficiency, ExposeResource]


def effect_from_dict(d: Mapping[str, Any]) -> TechEffect:
    kind = d.get("type")
    if kind == "metricBoost":
        return MetricBoost(metric=MetricKey(d["metric"]), value=float(d["value"]))
    if kind == "resourceEfficiency":
        return ResourceEfficiency(
            resource_id=d["resource_id"], multiplier=float(d["multiplier"]),
        )
    if kind == "exposeResource":
        return ExposeResource(resource_id=d["resource_id"])
    raise ValueError(f"Unknown tech effect type: {kind!r}")


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class TechBlueprint:
    id: str
    name: str
    requirement_intensity: float
    effects: tuple[TechEffect, ...] | None = None


@dataclass
class TechNode:
    id: str
    name: str
    requires: tuple[Requirement, ...]
    effects: tuple[TechEffect, ...]
    unlocked: bool = False
    unlocked_at: int | None = None

    def copy(self) -> TechNode:
        return TechNode(
            id=self.id, name=self.name, requires=self.requires,
            effects=self.effects, unlocked=self.unlocked,
            unlocked_at=self.unlocked_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "requires": [r.to_dict() for r in self.requires],
            "effects": [e.to_dict() for e in self.effects],
            "unlocked": self.unlocked,
            "unlocked_at": self.unlocked_at,
        }


def generate_requirements(
    intensity: float, rng: DeterministicRandom,
) -> tuple[Requirement, ...]:
    """1..N ``metric >= threshold`` conjuncts; harder blueprints get more and higher."""
    count = max(1, js_round(intensity * 2 + rng.next() * 2))
    requirements: list[Requirement] = []
    for _ in range(count):
        metric = METRIC_KEYS[rng.int_between(0, len(METRIC_KEYS) - 1)]
        threshold = 30 + rng.next() * 70 + intensity * 10
        requirements.append(Requirement(metric=metric, threshold=float(js_round(threshold))))
    return tuple(requirements)


def random_effect(rng: DeterministicRandom) -> TechEffect:
    metric = METRIC_KEYS[rng.int_between(0, len(METRIC_KEYS) - 1)]
    roll = rng.next()
    if roll < 0.4:
        return MetricBoost(metric=metric, value=float(js_round(10 + rng.next() * 20)))
    if roll < 0.75:
        return ExposeResource(resource_id=f"mystery-{rng.int_between(1, 9999)}")
    return ResourceEfficiency(
        resource_id=f"resource-{rng.int_between(1, 9999)}",
        multiplier=round2(1.1 + rng.next() * 0.5),
    )


class TechModel:
    """Procedurally parameterized technology graph."""

    def __init__(self, seed: int | str, blueprints: Iterable[TechBlueprint]):
        self.rng = DeterministicRandom(seed)
        self._nodes: dict[str, TechNode] = {}
        for bp in blueprints:
            requires = generate_requirements(bp.requirement_intensity, self.rng)
            effects = tuple(bp.effects) if bp.effects is not None else (random_effect(self.rng),)
            self._nodes[bp.id] = TechNode(
                id=bp.id, name=bp.name, requires=requires, effects=effects,
            )

    def list(self) -> list[TechNode]:
        return [n.copy() for n in self._nodes.values()]

    def get(self, tech_id: str) -> TechNode | None:
        node = self._nodes.get(tech_id)
        return node.copy() if node is not None else None

    @property
    def unlocked_count(self) -> int:
        return sum(1 for n in self._nodes.values() if n.unlocked)

    def evaluate(
        self, metrics: Mapping[str, float], tick: int | None = None,
    ) -> list[TechNode]:
        """Unlock every locked node whose requirements hold; return copies of them."""
        newly_unlocked: list[TechNode] = []
        for node in self._nodes.values():
            if node.unlocked:
                continue
            if meets_requirements(metrics, node.requires):
                node.unlocked = True
                node.unlocked_at = tick
                newly_unlocked.append(node.copy())
        return newly_unlocked
