"""
Resource catalogue — exposure gating and harvest semantics.

Resources start latent and become harvestable ("exposed") once every
metric prerequisite holds. Exposure is permanent. Finite resources deplete
under harvest pressure; infinite ones never deplete and instead scale their
output by abundance.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from civcascade.core.metrics import MetricKey, as_metric_key

if TYPE_CHECKING:
    from civcascade.core.config import SimulationConfig


class ResourceKind(Enum):
    FINITE = "finite"
    INFINITE = "infinite"


@dataclass(frozen=True)
class Requirement:
    """A single ``metric >= threshold`` conjunct."""
    metric: MetricKey
    threshold: float

    def is_met(self, metrics: Mapping[str, float]) -> bool:
        value = metrics.get(self.metric.value)
        return value is not None and value >= self.threshold

    def to_dict(self) -> dict[str, Any]:
        return {"metric": self.metric.value, "threshold": self.threshold}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> Requirement:
        return cls(metric=as_metric_key(d["metric"]), threshold=float(d["threshold"]))


def meets_requirements(
    metrics: Mapping[str, float], requirements: Iterable[Requirement],
) -> bool:
    return all(req.is_met(metrics) for req in requirements)


@dataclass(frozen=True)
class ResourceDescriptor:
    """Static description of a resource, supplied by the data layer."""
    id: str
    name: str
    kind: ResourceKind
    abundance: float
    discovery_difficulty: float = 0.0
    prerequisites: tuple[Requirement, ...] = ()


@dataclass
class ResourceState:
    """Runtime state of one resource."""
    descriptor: ResourceDescriptor
    amount: float
    exposed: bool = False
    exhaustion_rate: float = 0.0
    exhausted: bool = False

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def kind(self) -> ResourceKind:
        return self.descriptor.kind

    @property
    def abundance(self) -> float:
        return self.descriptor.abundance

    @property
    def is_finite(self) -> bool:
        return self.descriptor.kind is ResourceKind.FINITE

    def copy(self) -> ResourceState:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        d = self.descriptor
        return {
            "id": d.id,
            "name": d.name,
            "kind": d.kind.value,
            "abundance": d.abundance,
            "discovery_difficulty": d.discovery_difficulty,
            "prerequisites": [r.to_dict() for r in d.prerequisites],
            "amount": self.amount,
            "exposed": self.exposed,
            "exhaustion_rate": self.exhaustion_rate,
            "exhausted": self.exhausted,
        }


@dataclass(frozen=True)
class HarvestResult:
    amount: float = 0.0
    exhausted: bool = False


class ResourceModel:
    """Catalogue of resources keyed by id, in descriptor order."""

    def __init__(
        self,
        descriptors: Iterable[ResourceDescriptor],
        config: SimulationConfig | None = None,
    ):
        if config is None:
            from civcascade.core.config import SimulationConfig
            config = SimulationConfig()
        hc = config.harvest_config
        self._exhaustion_threshold = hc["exhaustion_threshold"]
        self._resources: dict[str, ResourceState] = {}
        for desc in descriptors:
            finite = desc.kind is ResourceKind.FINITE
            self._resources[desc.id] = ResourceState(
                descriptor=desc,
                amount=desc.abundance if finite else desc.abundance * hc["infinite_initial_fraction"],
                exhaustion_rate=hc["finite_exhaustion_rate"] if finite else 0.0,
            )

    def list(self) -> list[ResourceState]:
        return [r.copy() for r in self._resources.values()]

    def get(self, resource_id: str) -> ResourceState | None:
        res = self._resources.get(resource_id)
        return res.copy() if res is not None else None

    def states(self) -> dict[str, ResourceState]:
        return {rid: r.copy() for rid, r in self._resources.items()}

    def exposed_ids(self) -> list[str]:
        return [rid for rid, r in self._resources.items() if r.exposed]

    def evaluate_exposure(self, metrics: Mapping[str, float]) -> list[ResourceState]:
        """Expose every latent resource whose prerequisites hold; return copies."""
        newly_exposed: list[ResourceState] = []
        for res in self._resources.values():
            if res.exposed:
                continue
            if meets_requirements(metrics, res.descriptor.prerequisites):
                res.exposed = True
                res.amount = res.abundance
                newly_exposed.append(res.copy())
        return newly_exposed

    def harvest(self, resource_id: str, effort: float) -> HarvestResult:
        """Extract output from an exposed resource.

        Unknown or unexposed ids give a zero result rather than an error.
        """
        res = self._resources.get(resource_id)
        if res is None or not res.exposed:
            return HarvestResult()

        effort = max(0.0, effort)
        if res.is_finite:
            effective = min(res.amount, effort)
            res.amount = max(0.0, res.amount - effective * res.exhaustion_rate)
            exhausted = res.amount <= res.abundance * self._exhaustion_threshold
            res.exhausted = res.exhausted or exhausted
        else:
            effective = effort * res.abundance
            exhausted = False
        return HarvestResult(amount=effective, exhausted=exhausted)
