"""
Agent decision model.

Each tick every agent scores the metrics its role allows it to focus on:

  score = scarcity * (0.6 + pragmatism * 0.25) + novelty * 0.2
          + empathy_term + boldness_term * 0.3 - fatigue * 0.6

and commits effort to the highest-scoring one. The model only proposes
per-metric contributions; the civilization engine decides how to apply
them. Randomness is drawn from one shared stream in fixed roster order,
so the roster order is part of the determinism contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from civcascade.core.agent import Agent
from civcascade.core.events import AgentStoryEvent
from civcascade.core.metrics import METRIC_KEYS, MetricKey, clamp01
from civcascade.core.rng import DeterministicRandom

if TYPE_CHECKING:
    from civcascade.core.config import SimulationConfig


# metric -> (context term deciding the variant, phrase when > 0.5, phrase otherwise)
NARRATIVES: dict[MetricKey, tuple[str, str, str]] = {
    MetricKey.KNOWLEDGE: (
        "novelty",
        "unveils a radical hypothesis that sparks debate.",
        "publishes careful research that nudges understanding forward.",
    ),
    MetricKey.CULTURE: (
        "empathy",
        "curates a festival fostering unity.",
        "launches avant-garde art that challenges norms.",
    ),
    MetricKey.INFRASTRUCTURE: (
        "boldness",
        "champions a daring infrastructural leap.",
        "optimises existing systems for steady gains.",
    ),
    MetricKey.SUSTAINABILITY: (
        "boldness",
        "proposes bold ecological restoration efforts.",
        "refines conservation programs to reduce waste.",
    ),
    MetricKey.MORALE: (
        "empathy",
        "hosts listening circles to heal social rifts.",
        "leads a spirited celebration to lift spirits.",
    ),
    MetricKey.STABILITY: (
        "boldness",
        "brokers a challenging but hopeful policy compromise.",
        "strengthens community councils for resilience.",
    ),
}
POPULATION_NARRATIVE = "coordinates social programs supporting population wellbeing."


def narrative_for(metric: MetricKey, context: Mapping[str, float]) -> str:
    entry = NARRATIVES.get(metric)
    if entry is None:
        return POPULATION_NARRATIVE
    term, high, low = entry
    return high if context[term] > 0.5 else low


@dataclass
class FocusDecision:
    """One agent's choice for one tick, with the scores that produced it."""
    agent_id: str
    focus: MetricKey
    effort: float
    scores: dict[str, float]
    narrative: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "focus": self.focus.value,
            "effort": self.effort,
            "scores": dict(self.scores),
            "narrative": self.narrative,
        }


@dataclass
class AgentTickResult:
    contributions: dict[MetricKey, float]
    events: list[AgentStoryEvent] = field(default_factory=list)
    decisions: list[FocusDecision] = field(default_factory=list)


class AgentModel:
    """Owns the agent roster and runs the per-tick focus/effort decision."""

    def __init__(
        self,
        seed: int | str,
        agents: Iterable[Agent],
        config: SimulationConfig | None = None,
    ):
        if config is None:
            from civcascade.core.config import SimulationConfig
            config = SimulationConfig()
        self.config = config
        self.weights = config.agent_config
        self.story_chance = config.agent_story_chance
        self.rng = DeterministicRandom(seed)
        self._agents: list[Agent] = [a.copy() for a in agents]

    def __len__(self) -> int:
        return len(self._agents)

    def list(self) -> list[Agent]:
        return [a.copy() for a in self._agents]

    def tick(self, metrics: Mapping[str, float]) -> AgentTickResult:
        """Run one decision round. ``metrics`` is read, never written."""
        w = self.weights
        result = AgentTickResult(contributions={k: 0.0 for k in METRIC_KEYS})

        for agent in self._agents:
            decision = self.decide(agent, metrics)
            result.contributions[decision.focus] += decision.effort
            result.decisions.append(decision)

            agent.record_tick(decision.focus, decision.effort)
            agent.fatigue = min(1.0, agent.fatigue + decision.effort * w["fatigue_gain"])
            agent.morale = clamp01(
                agent.morale
                + decision.effort * w["morale_gain"]
                - agent.fatigue * w["morale_fatigue_loss"]
                + agent.trait("empathy") * w["morale_empathy_gain"]
            )

            if self.rng.next() < self.story_chance:
                result.events.append(AgentStoryEvent(
                    agent_id=agent.id,
                    summary=f"{agent.name} ({agent.role.value}) {decision.narrative}",
                ))

        return result

    def decide(self, agent: Agent, metrics: Mapping[str, float]) -> FocusDecision:
        """Score every allowed focus metric and pick the best (first wins ties)."""
        w = self.weights
        curiosity = agent.trait("curiosity")
        empathy = agent.trait("empathy")
        boldness = agent.trait("boldness")
        pragmatism = agent.trait("pragmatism")

        options = agent.focus_options
        best_focus = options[0]
        best_score = float("-inf")
        scores: dict[str, float] = {}
        narratives: dict[MetricKey, str] = {}

        for metric in options:
            scarcity = 1.0 - clamp01(metrics[metric.value] / w["scarcity_reference"])
            novelty = curiosity * self.rng.next()
            empathy_term = empathy * (1.0 if metric is MetricKey.MORALE else w["off_focus_empathy"])
            boldness_term = boldness * self.rng.next()

            score = (
                scarcity * (w["scarcity_base"] + pragmatism * w["pragmatism_weight"])
                + novelty * w["novelty_weight"]
                + empathy_term
                + boldness_term * w["boldness_weight"]
                - agent.fatigue * w["fatigue_penalty"]
            )
            scores[metric.value] = score
            if score > best_score:
                best_score = score
                best_focus = metric

            narratives[metric] = narrative_for(metric, {
                "novelty": novelty, "empathy": empathy_term, "boldness": boldness_term,
            })

        effort = clamp01(
            w["effort_base"]
            + agent.trait("diligence") * w["effort_diligence"]
            + agent.morale * w["effort_morale"]
            - agent.fatigue * w["effort_fatigue"]
            + self.rng.next() * w["effort_noise"]
        )

        return FocusDecision(
            agent_id=agent.id,
            focus=best_focus,
            effort=effort,
            scores=scores,
            narrative=narratives[best_focus],
        )
