"""
Civilization engine.

Advances the civilization one tick per ``tick()`` call with 8 fixed phases,
owns the metric set exclusively, and emits an immutable snapshot plus the
ordered event log of the tick. There is no internal timer: callers choose
the cadence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from civcascade.core.agent import Agent
from civcascade.core.agents import AgentModel
from civcascade.core.config import SimulationConfig
from civcascade.core.events import (
    MetricChangeEvent,
    ResourceChangeEvent,
    SimulationEvent,
    TechUnlockedEvent,
)
from civcascade.core.mailbox import Mailbox
from civcascade.core.metrics import METRIC_KEYS, MetricKey, MetricSet, as_metric_key, round2
from civcascade.core.resources import ResourceDescriptor, ResourceModel, ResourceState
from civcascade.core.technology import (
    ExposeResource,
    MetricBoost,
    ResourceEfficiency,
    TechBlueprint,
    TechModel,
    TechNode,
)

if TYPE_CHECKING:
    from civcascade.puzzle.types import PuzzleReward

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class CivilizationSnapshot:
    """Point-in-time view of the civilization after a completed tick."""
    tick: int
    metrics: Mapping[str, float]
    resources: Mapping[str, ResourceState]
    agents: tuple[Agent, ...]
    techs: tuple[TechNode, ...]
    events: tuple[SimulationEvent, ...]

    def metric(self, key: MetricKey | str) -> float:
        return self.metrics[key.value if isinstance(key, MetricKey) else key]

    def events_of_type(self, event_type: str) -> list[SimulationEvent]:
        return [e for e in self.events if e.type == event_type]

    def to_dict(self) -> dict[str, Any]:
        return {
            "tick": self.tick,
            "metrics": dict(self.metrics),
            "resources": {rid: r.to_dict() for rid, r in self.resources.items()},
            "agents": [a.to_dict() for a in self.agents],
            "techs": [t.to_dict() for t in self.techs],
            "events": [e.to_dict() for e in self.events],
        }


# ---------------------------------------------------------------------------
# Civilization Engine
# ---------------------------------------------------------------------------
class CivilizationEngine:
    """
    Tick orchestrator.

    Phases per tick:
    1. Resource exposure
    2. Agent contributions
    3. Queued puzzle rewards
    4. Resource harvest
    5. Metric drift
    6. Tech unlocks and effects
    7. Queued tech-hint events
    8. Build snapshot

    Subsystems only compute; every metric write happens here.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        *,
        agents: Iterable[Agent] | None = None,
        resources: Iterable[ResourceDescriptor] | None = None,
        techs: Iterable[TechBlueprint] | None = None,
    ):
        from civcascade.data.defaults import (
            DEFAULT_RESOURCES,
            DEFAULT_TECH_BLUEPRINTS,
            default_agents,
        )

        self.config = config or SimulationConfig()
        self.seed = self.config.resolved_seed()

        # Core components
        self.agent_model = AgentModel(
            self.seed, agents if agents is not None else default_agents(), self.config,
        )
        self.resource_model = ResourceModel(
            resources if resources is not None else DEFAULT_RESOURCES, self.config,
        )
        self.tech_model = TechModel(
            self.seed, techs if techs is not None else DEFAULT_TECH_BLUEPRINTS,
        )

        # State
        self._metrics = MetricSet(self.config.initial_metrics)
        self._tick_count = 0
        self._efficiency: dict[str, float] = {}
        self._puzzle_rewards = Mailbox("puzzle-rewards")
        self._hint_events = Mailbox("tech-hints")

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def metrics(self) -> dict[str, float]:
        return self._metrics.as_dict()

    @property
    def pending_reward_count(self) -> int:
        return len(self._puzzle_rewards)

    @property
    def efficiency_multipliers(self) -> dict[str, float]:
        return dict(self._efficiency)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def apply_puzzle_rewards(self, rewards: Iterable[PuzzleReward]) -> None:
        """Queue rewards for the next tick; nothing is applied now."""
        self._puzzle_rewards.post_many(rewards)

    def tick(self) -> CivilizationSnapshot:
        """Advance the civilization by exactly one tick."""
        self._tick_count += 1
        events: list[SimulationEvent] = []

        # === Phase 1: Resource exposure ===
        for res in self.resource_model.evaluate_exposure(self._metrics.as_dict()):
            logger.debug("Tick %d: %s exposed", self._tick_count, res.id)
            events.append(ResourceChangeEvent(
                resource_id=res.id, delta=0.0,
                cause=f"{res.name} is now exploitable.",
            ))

        # === Phase 2: Agent contributions ===
        agent_result = self.agent_model.tick(self._metrics.as_dict())
        events.extend(agent_result.events)
        self._apply_agent_contributions(agent_result.contributions, events)

        # === Phase 3: Queued puzzle rewards ===
        self._flush_puzzle_rewards(events)

        # === Phase 4: Harvest ===
        self._harvest_resources(events)

        # === Phase 5: Drift ===
        self._apply_metric_drift(events)

        # === Phase 6: Tech ===
        for tech in self.tech_model.evaluate(self._metrics.as_dict(), tick=self._tick_count):
            logger.info("Tick %d: tech unlocked: %s", self._tick_count, tech.id)
            self._apply_tech_effects(tech, events)
            events.append(TechUnlockedEvent(
                tech_id=tech.id,
                cause=f"{tech.name} breakthroughs reach the public.",
            ))

        # === Phase 7: Tech hints ===
        events.extend(self._hint_events.drain())

        # === Phase 8: Snapshot ===
        return self._build_snapshot(events)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    def _apply_agent_contributions(
        self, contributions: Mapping[MetricKey, float],
        events: list[SimulationEvent],
    ) -> None:
        scale = self.config.agent_contribution_scale
        upper = self.config.bound("agents")
        for metric in METRIC_KEYS:
            boost = contributions.get(metric, 0.0) * scale
            if not boost:
                continue
            self._metrics.clamped_add(metric, boost, upper)
            events.append(MetricChangeEvent(
                metric=metric, delta=round2(boost), cause="Agent initiatives",
            ))

    def _flush_puzzle_rewards(self, events: list[SimulationEvent]) -> None:
        upper = self.config.bound("puzzle")
        for reward in self._puzzle_rewards.drain():
            metric = as_metric_key(reward.metric)
            self._metrics.clamped_add(metric, reward.delta, upper)
            events.append(MetricChangeEvent(
                metric=metric, delta=reward.delta, cause=reward.description,
            ))

    def _harvest_resources(self, events: list[SimulationEvent]) -> None:
        hc = self.config.harvest_config
        upper = self.config.bound("resources")
        for res in self.resource_model.list():
            if not res.exposed:
                continue
            efficiency = self._efficiency.get(res.id, 1.0)
            effort = (
                self._metrics[MetricKey.INFRASTRUCTURE] * hc["infrastructure_weight"]
                + self._metrics[MetricKey.POPULATION] * hc["population_weight"]
            ) * efficiency
            result = self.resource_model.harvest(res.id, effort)

            for metric_name, weight in self.config.resource_impacts.get(res.id, {}).items():
                scaled = round2(result.amount * weight)
                if scaled == 0:
                    continue
                metric = MetricKey(metric_name)
                self._metrics.clamped_add(metric, scaled, upper)
                events.append(MetricChangeEvent(
                    metric=metric, delta=scaled, cause=f"{res.name} output",
                ))

            if result.exhausted:
                logger.info("Tick %d: %s nears depletion", self._tick_count, res.id)
                events.append(ResourceChangeEvent(
                    resource_id=res.id, delta=-1.0,
                    cause=f"{res.name} nears depletion.",
                ))
                self._metrics.clamped_add(
                    MetricKey.SUSTAINABILITY, -hc["exhaustion_penalty"], upper,
                )

    def _apply_metric_drift(self, events: list[SimulationEvent]) -> None:
        upper = self.config.bound("drift")
        for metric in METRIC_KEYS:
            drift = self.config.drift_base - self._metrics[metric] * self.config.drift_rate
            self._metrics.clamped_add(metric, drift, upper)
            events.append(MetricChangeEvent(
                metric=metric, delta=round2(drift), cause="Systemic drift",
            ))

    def _apply_tech_effects(
        self, tech: TechNode, events: list[SimulationEvent],
    ) -> None:
        upper = self.config.bound("tech")
        for effect in tech.effects:
            if isinstance(effect, MetricBoost):
                self._metrics.clamped_add(effect.metric, effect.value, upper)
                events.append(MetricChangeEvent(
                    metric=effect.metric, delta=effect.value,
                    cause=f"{tech.name} breakthrough",
                ))
            elif isinstance(effect, ResourceEfficiency):
                current = self._efficiency.get(effect.resource_id, 1.0)
                self._efficiency[effect.resource_id] = current * effect.multiplier
                events.append(ResourceChangeEvent(
                    resource_id=effect.resource_id, delta=effect.multiplier,
                    cause=f"{tech.name} improves throughput",
                ))
            elif isinstance(effect, ExposeResource):
                # Exposure itself still waits on the resource's prerequisites.
                self._hint_events.post(ResourceChangeEvent(
                    resource_id=effect.resource_id, delta=0.0,
                    cause=f"{tech.name} hints at {effect.resource_id} deposits.",
                ))
            else:
                raise TypeError(f"Unknown tech effect: {effect!r}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _build_snapshot(self, events: list[SimulationEvent]) -> CivilizationSnapshot:
        return CivilizationSnapshot(
            tick=self._tick_count,
            metrics=MappingProxyType(self._metrics.as_dict()),
            resources=MappingProxyType(self.resource_model.states()),
            agents=tuple(self.agent_model.list()),
            techs=tuple(self.tech_model.list()),
            events=tuple(events),
        )
