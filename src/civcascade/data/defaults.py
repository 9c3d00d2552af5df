"""
Default world data: resource catalogue, tech blueprints and agent roster.

These records are the data-initialization boundary of the simulation. They
are trusted as-is; nothing here is validated at runtime beyond what the
dataclass constructors do.
"""

from __future__ import annotations

from civcascade.core.agent import Agent, AgentRole, trait_vector
from civcascade.core.metrics import MetricKey
from civcascade.core.resources import Requirement, ResourceDescriptor, ResourceKind
from civcascade.core.technology import TechBlueprint


def _req(metric: str, threshold: float) -> Requirement:
    return Requirement(metric=MetricKey(metric), threshold=threshold)


DEFAULT_RESOURCES: tuple[ResourceDescriptor, ...] = (
    ResourceDescriptor(
        id="fresh-water", name="Fresh Water Basins", kind=ResourceKind.FINITE,
        abundance=100.0, discovery_difficulty=10.0,
        prerequisites=(_req("population", 25), _req("infrastructure", 20)),
    ),
    ResourceDescriptor(
        id="fertile-soil", name="Fertile Soil", kind=ResourceKind.FINITE,
        abundance=140.0, discovery_difficulty=5.0,
        prerequisites=(_req("population", 10),),
    ),
    ResourceDescriptor(
        id="solar-winds", name="Solar Winds", kind=ResourceKind.INFINITE,
        abundance=1.2, discovery_difficulty=40.0,
        prerequisites=(_req("knowledge", 45), _req("infrastructure", 35)),
    ),
    ResourceDescriptor(
        id="geothermal-vents", name="Geothermal Vents", kind=ResourceKind.INFINITE,
        abundance=0.9, discovery_difficulty=60.0,
        prerequisites=(_req("knowledge", 55), _req("sustainability", 50)),
    ),
    ResourceDescriptor(
        id="rare-elements", name="Rare Elements", kind=ResourceKind.FINITE,
        abundance=60.0, discovery_difficulty=70.0,
        prerequisites=(_req("knowledge", 60), _req("stability", 45)),
    ),
)


DEFAULT_TECH_BLUEPRINTS: tuple[TechBlueprint, ...] = (
    TechBlueprint(id="agro-automation", name="Agro Automation", requirement_intensity=0.6),
    TechBlueprint(id="civic-harmony", name="Civic Harmony Protocols", requirement_intensity=0.5),
    TechBlueprint(id="deepcore-extraction", name="Deepcore Extraction", requirement_intensity=0.8),
    TechBlueprint(id="solar-sails", name="Solar Sails", requirement_intensity=0.9),
    TechBlueprint(id="cultural-renaissance", name="Cultural Renaissance", requirement_intensity=0.7),
    TechBlueprint(id="adaptive-governance", name="Adaptive Governance", requirement_intensity=0.65),
)


# (id, name, role, curiosity, diligence, empathy, boldness, pragmatism, morale)
_ROSTER: list[tuple[str, str, AgentRole, float, float, float, float, float, float]] = [
    ("agent-ada", "Ada", AgentRole.SCIENCE, 0.9, 0.7, 0.4, 0.5, 0.6, 0.6),
    ("agent-kael", "Kael", AgentRole.INDUSTRY, 0.4, 0.9, 0.3, 0.6, 0.8, 0.5),
    ("agent-iris", "Iris", AgentRole.CULTURE, 0.7, 0.5, 0.9, 0.4, 0.3, 0.7),
    ("agent-reed", "Reed", AgentRole.POLICY, 0.5, 0.6, 0.7, 0.3, 0.7, 0.55),
    ("agent-wren", "Wren", AgentRole.EXPLORATION, 0.8, 0.5, 0.4, 0.9, 0.4, 0.6),
    ("agent-hugo", "Hugo", AgentRole.SCIENCE, 0.6, 0.8, 0.5, 0.3, 0.7, 0.5),
    ("agent-sage", "Sage", AgentRole.CULTURE, 0.6, 0.4, 0.8, 0.7, 0.4, 0.65),
    ("agent-mae", "Mae", AgentRole.INDUSTRY, 0.3, 0.7, 0.6, 0.5, 0.9, 0.5),
]


def default_agents() -> list[Agent]:
    """A fresh copy of the default roster (agents are mutable per engine)."""
    return [
        Agent(
            id=aid, name=name, role=role,
            traits=trait_vector([cur, dil, emp, bold, prag]),
            morale=morale,
        )
        for aid, name, role, cur, dil, emp, bold, prag, morale in _ROSTER
    ]
