"""
Core agent dataclass for Civ Cascade.

Agents carry a five-dimensional trait vector, a role that restricts which
metrics they may focus on, and per-tick mutable fatigue / morale state.
The roster is fixed at construction: agents are never added or removed.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

import numpy as np

from civcascade.core.metrics import MetricKey

TRAIT_NAMES: tuple[str, ...] = (
    "curiosity", "diligence", "empathy", "boldness", "pragmatism",
)
_TRAIT_INDEX: dict[str, int] = {name: i for i, name in enumerate(TRAIT_NAMES)}

# Recent ticks kept per agent.
HISTORY_LIMIT = 24


class AgentRole(Enum):
    SCIENCE = "science"
    INDUSTRY = "industry"
    CULTURE = "culture"
    POLICY = "policy"
    EXPLORATION = "exploration"


# Metrics each role may focus on, in evaluation order.
ROLE_FOCUS: dict[AgentRole, tuple[MetricKey, ...]] = {
    AgentRole.SCIENCE: (MetricKey.KNOWLEDGE, MetricKey.INFRASTRUCTURE),
    AgentRole.INDUSTRY: (MetricKey.INFRASTRUCTURE, MetricKey.SUSTAINABILITY),
    AgentRole.CULTURE: (MetricKey.CULTURE, MetricKey.MORALE),
    AgentRole.POLICY: (MetricKey.STABILITY, MetricKey.MORALE),
    AgentRole.EXPLORATION: (MetricKey.KNOWLEDGE, MetricKey.SUSTAINABILITY),
}


def trait_vector(values: Mapping[str, float] | np.ndarray | list[float]) -> np.ndarray:
    """Build a clipped (5,) trait vector from a name mapping or a sequence."""
    if isinstance(values, Mapping):
        arr = np.array([float(values.get(n, 0.5)) for n in TRAIT_NAMES], dtype=np.float64)
    else:
        arr = np.asarray(values, dtype=np.float64).copy()
        if arr.shape != (len(TRAIT_NAMES),):
            raise ValueError(
                f"Trait vector must have shape ({len(TRAIT_NAMES)},), got {arr.shape}"
            )
    return np.clip(arr, 0.0, 1.0)


@dataclass
class Agent:
    """An autonomous civic agent."""

    # === Identity ===
    id: str
    name: str
    role: AgentRole

    # === Personality (curiosity, diligence, empathy, boldness, pragmatism) ===
    traits: np.ndarray

    # === Per-tick state ===
    fatigue: float = 0.0
    morale: float = 0.5
    focus: MetricKey | None = None

    # === History ===
    focus_history: deque[str] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))
    effort_history: deque[float] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))

    def __post_init__(self) -> None:
        if not isinstance(self.role, AgentRole):
            self.role = AgentRole(self.role)
        self.traits = trait_vector(self.traits)
        if self.focus is None:
            self.focus = ROLE_FOCUS[self.role][0]
        elif not isinstance(self.focus, MetricKey):
            self.focus = MetricKey(self.focus)

    def trait(self, name: str) -> float:
        idx = _TRAIT_INDEX.get(name)
        if idx is None:
            raise KeyError(f"Unknown trait: '{name}'")
        return float(self.traits[idx])

    @property
    def focus_options(self) -> tuple[MetricKey, ...]:
        return ROLE_FOCUS[self.role]

    def record_tick(self, focus: MetricKey, effort: float) -> None:
        self.focus = focus
        self.focus_history.append(focus.value)
        self.effort_history.append(effort)

    def copy(self) -> Agent:
        """Copy of the current state. Tick history stays with the original."""
        return Agent(
            id=self.id, name=self.name, role=self.role,
            traits=self.traits.copy(), fatigue=self.fatigue,
            morale=self.morale, focus=self.focus,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "traits": {n: float(self.traits[i]) for i, n in enumerate(TRAIT_NAMES)},
            "fatigue": self.fatigue,
            "morale": self.morale,
            "focus": self.focus.value if self.focus else None,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> Agent:
        return cls(
            id=d["id"], name=d["name"], role=AgentRole(d["role"]),
            traits=trait_vector(d.get("traits", {})),
            fatigue=float(d.get("fatigue", 0.0)),
            morale=float(d.get("morale", 0.5)),
            focus=d.get("focus"),
        )

    def __repr__(self) -> str:
        return (
            f"Agent(id={self.id!r}, name={self.name!r}, role={self.role.value}, "
            f"fatigue={self.fatigue:.3f}, morale={self.morale:.3f})"
        )
