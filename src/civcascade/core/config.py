"""
Master configuration for Civ Cascade.

ALL tunable parameters live here. Nothing in the simulation is hardcoded.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any

from civcascade.core.metrics import MetricKey
from civcascade.puzzle.types import SCORING_KINDS, TileKind


@dataclass
class SimulationConfig:
    """
    Master configuration: every threshold, weight and bound.

    Use ``to_dict()`` / ``from_dict()`` for serialization and comparison.
    """

    # === Identity ===
    experiment_name: str = "default"
    random_seed: int | str | None = None  # None = wall-clock seed

    # === Puzzle board ===
    board_rows: int = 8
    board_cols: int = 8
    initial_reroll_limit: int = 20
    wild_tile_chance: float = 0.06
    combo_step: float = 0.25
    tiles_per_reward: int = 3
    combo_bonus_threshold: float = 1.5
    combo_bonus_factor: float = 0.8
    # Tile kind -> (target metric, reward magnitude). The wild kind never rewards.
    tile_rewards: dict[str, dict[str, Any]] = field(default_factory=lambda: {
        "energy": {"metric": "infrastructure", "magnitude": 1.3},
        "culture": {"metric": "culture", "magnitude": 1.2},
        "knowledge": {"metric": "knowledge", "magnitude": 1.4},
        "harmony": {"metric": "morale", "magnitude": 1.1},
        "industry": {"metric": "sustainability", "magnitude": 1.2},
    })

    # === Civilization metrics ===
    initial_metrics: dict[str, float] = field(default_factory=lambda: {
        "population": 25.0,
        "knowledge": 12.0,
        "culture": 18.0,
        "infrastructure": 15.0,
        "sustainability": 16.0,
        "morale": 22.0,
        "stability": 20.0,
    })
    # Upper clamp per contribution source; the floor is always 0.
    metric_bounds: dict[str, float] = field(default_factory=lambda: {
        "agents": 150.0,
        "puzzle": 160.0,
        "resources": 180.0,
        "drift": 180.0,
        "tech": 200.0,
    })

    # === Agents ===
    agent_contribution_scale: float = 4.5
    agent_story_chance: float = 0.15
    agent_config: dict[str, float] = field(default_factory=lambda: {
        "scarcity_reference": 120.0,
        "scarcity_base": 0.6,
        "pragmatism_weight": 0.25,
        "novelty_weight": 0.2,
        "off_focus_empathy": 0.4,
        "boldness_weight": 0.3,
        "fatigue_penalty": 0.6,
        "effort_base": 0.5,
        "effort_diligence": 0.3,
        "effort_morale": 0.2,
        "effort_fatigue": 0.4,
        "effort_noise": 0.1,
        "fatigue_gain": 0.02,
        "morale_gain": 0.01,
        "morale_fatigue_loss": 0.02,
        "morale_empathy_gain": 0.005,
    })

    # === Resources ===
    harvest_config: dict[str, float] = field(default_factory=lambda: {
        "infrastructure_weight": 0.05,
        "population_weight": 0.03,
        "finite_exhaustion_rate": 0.01,
        "infinite_initial_fraction": 0.1,
        "exhaustion_threshold": 0.05,
        "exhaustion_penalty": 1.5,
    })
    # Resource id -> metric -> weight applied to the harvested amount.
    resource_impacts: dict[str, dict[str, float]] = field(default_factory=lambda: {
        "fresh-water": {"population": 0.5, "morale": 0.3},
        "fertile-soil": {"population": 0.4, "morale": 0.2},
        "solar-winds": {"infrastructure": 0.6, "sustainability": 0.5},
        "geothermal-vents": {"infrastructure": 0.7, "knowledge": 0.2},
        "rare-elements": {"knowledge": 0.6, "infrastructure": 0.4},
    })

    # === Drift ===
    drift_base: float = -0.25
    drift_rate: float = 0.002

    def __post_init__(self) -> None:
        if self.board_rows <= 0 or self.board_cols <= 0:
            raise ValueError(
                f"Board must have positive dimensions, got "
                f"{self.board_rows}x{self.board_cols}"
            )
        if not 0.0 <= self.wild_tile_chance <= 1.0:
            raise ValueError("wild_tile_chance must be within [0, 1]")
        self._validate_metric_names()

    def _validate_metric_names(self) -> None:
        """Raise ValueError for unknown metric names or tile kinds."""
        for name in self.initial_metrics:
            MetricKey(name)
        for kind, entry in self.tile_rewards.items():
            TileKind(kind)
            MetricKey(entry["metric"])
        missing = [k.value for k in SCORING_KINDS if k.value not in self.tile_rewards]
        if missing:
            raise ValueError(f"tile_rewards is missing kinds: {missing}")
        for impacts in self.resource_impacts.values():
            for name in impacts:
                MetricKey(name)

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------
    def resolved_seed(self) -> int | str:
        """The seed actually used; a wall-clock value when none is configured."""
        if self.random_seed is None:
            self.random_seed = int(time.time() * 1000)
        return self.random_seed

    def bound(self, source: str) -> float:
        return float(self.metric_bounds[source])

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        d: dict[str, Any] = {}
        for k, v in self.__dict__.items():
            if k.startswith("_"):
                continue
            d[k] = v
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SimulationConfig:
        """Deserialize from a dict."""
        return cls(**{k: v for k, v in d.items() if not k.startswith("_")})

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    @classmethod
    def from_json(cls, s: str) -> SimulationConfig:
        return cls.from_dict(json.loads(s))

    def diff(self, other: SimulationConfig) -> dict[str, tuple[Any, Any]]:
        """Return parameters that differ between two configs."""
        diffs: dict[str, tuple[Any, Any]] = {}
        for k in self.to_dict():
            v1 = getattr(self, k)
            v2 = getattr(other, k)
            if v1 != v2:
                diffs[k] = (v1, v2)
        return diffs
