"""
Civilization metric set.

Seven named continuous values form the civilization's mutable state.
Only CivilizationEngine writes to a MetricSet; subsystems receive a plain
dict view and return proposed deltas. Every write goes through
``clamped_add`` so no phase can push a value outside [0, upper].
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Mapping

import numpy as np


class MetricKey(Enum):
    """The seven civilization metrics, in canonical order."""
    POPULATION = "population"
    KNOWLEDGE = "knowledge"
    CULTURE = "culture"
    INFRASTRUCTURE = "infrastructure"
    SUSTAINABILITY = "sustainability"
    MORALE = "morale"
    STABILITY = "stability"


METRIC_KEYS: list[MetricKey] = list(MetricKey)

DEFAULT_INITIAL_METRICS: dict[str, float] = {
    "population": 25.0,
    "knowledge": 12.0,
    "culture": 18.0,
    "infrastructure": 15.0,
    "sustainability": 16.0,
    "morale": 22.0,
    "stability": 20.0,
}


def js_round(value: float) -> int:
    """Round half up, the way tech thresholds and boosts have always been rounded."""
    return int(math.floor(value + 0.5))


def round2(value: float) -> float:
    """Two-decimal rounding with exact binary halves going away from zero."""
    return float(Decimal(float(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def clamp(value: float, lower: float, upper: float) -> float:
    return float(np.clip(value, lower, upper))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def as_metric_key(key: MetricKey | str) -> MetricKey:
    return key if isinstance(key, MetricKey) else MetricKey(key)


class MetricSet:
    """Mutable store of the seven metric values."""

    def __init__(self, initial: Mapping[str, float] | None = None):
        values = dict(DEFAULT_INITIAL_METRICS)
        if initial:
            for key, value in initial.items():
                values[as_metric_key(key).value] = float(value)
        self._values: dict[MetricKey, float] = {
            key: values[key.value] for key in METRIC_KEYS
        }

    def __getitem__(self, key: MetricKey | str) -> float:
        return self._values[as_metric_key(key)]

    def clamped_add(
        self, key: MetricKey | str, delta: float, upper: float,
        lower: float = 0.0,
    ) -> float:
        """Add ``delta`` and clamp to [lower, upper]. Returns the new value."""
        k = as_metric_key(key)
        self._values[k] = clamp(self._values[k] + delta, lower, upper)
        return self._values[k]

    def as_dict(self) -> dict[str, float]:
        return {key.value: value for key, value in self._values.items()}

    def as_array(self) -> np.ndarray:
        return np.array([self._values[k] for k in METRIC_KEYS], dtype=np.float64)

    def copy(self) -> MetricSet:
        return MetricSet(self.as_dict())

    def to_dict(self) -> dict[str, Any]:
        return self.as_dict()

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v:.2f}" for k, v in self.as_dict().items())
        return f"MetricSet({inner})"
