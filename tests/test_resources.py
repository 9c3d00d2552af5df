"""Tests for resource exposure and harvest."""

import pytest

from civcascade.core.metrics import DEFAULT_INITIAL_METRICS, MetricKey
from civcascade.core.resources import (
    HarvestResult,
    Requirement,
    ResourceDescriptor,
    ResourceKind,
    ResourceModel,
    meets_requirements,
)
from civcascade.data.defaults import DEFAULT_RESOURCES

WELL = ResourceDescriptor(
    id="well", name="Deep Well", kind=ResourceKind.FINITE, abundance=100.0,
    prerequisites=(Requirement(MetricKey.POPULATION, 20.0),),
)
SUN = ResourceDescriptor(
    id="sun", name="Sunlight", kind=ResourceKind.INFINITE, abundance=1.5,
    prerequisites=(Requirement(MetricKey.KNOWLEDGE, 30.0),),
)


def _exposed_model(*descriptors):
    model = ResourceModel(descriptors)
    model.evaluate_exposure({"population": 100.0, "knowledge": 100.0})
    return model


class TestRequirements:
    def test_threshold_is_inclusive(self):
        req = Requirement(MetricKey.CULTURE, 10.0)
        assert req.is_met({"culture": 10.0})
        assert not req.is_met({"culture": 9.99})

    def test_missing_metric_is_not_met(self):
        assert not Requirement(MetricKey.CULTURE, 0.0).is_met({})

    def test_all_conjuncts_must_hold(self):
        reqs = (Requirement(MetricKey.CULTURE, 10.0), Requirement(MetricKey.MORALE, 10.0))
        assert not meets_requirements({"culture": 20.0, "morale": 5.0}, reqs)
        assert meets_requirements({"culture": 20.0, "morale": 15.0}, reqs)

    def test_dict_round_trip(self):
        req = Requirement(MetricKey.STABILITY, 45.0)
        assert Requirement.from_dict(req.to_dict()) == req


class TestConstruction:
    def test_initial_amounts(self):
        model = ResourceModel([WELL, SUN])
        assert model.get("well").amount == 100.0
        assert model.get("sun").amount == pytest.approx(0.15)
        assert model.get("well").exhaustion_rate == 0.01
        assert model.get("sun").exhaustion_rate == 0.0
        assert model.exposed_ids() == []

    def test_default_catalogue(self):
        model = ResourceModel(DEFAULT_RESOURCES)
        assert [r.id for r in model.list()] == [
            "fresh-water", "fertile-soil", "solar-winds", "geothermal-vents", "rare-elements",
        ]

    def test_get_returns_copy(self):
        model = ResourceModel([WELL])
        model.get("well").amount = 0.0
        assert model.get("well").amount == 100.0

    def test_get_unknown(self):
        assert ResourceModel([WELL]).get("nope") is None


class TestExposure:
    def test_exposes_when_prerequisites_hold(self):
        model = ResourceModel([WELL, SUN])
        exposed = model.evaluate_exposure({"population": 25.0, "knowledge": 10.0})
        assert [r.id for r in exposed] == ["well"]
        assert model.get("well").exposed
        assert not model.get("sun").exposed

    def test_infinite_amount_set_to_abundance_on_exposure(self):
        model = _exposed_model(SUN)
        assert model.get("sun").amount == 1.5

    def test_exposure_is_permanent(self):
        model = ResourceModel([WELL])
        model.evaluate_exposure({"population": 25.0})
        assert model.evaluate_exposure({"population": 0.0}) == []
        assert model.get("well").exposed

    def test_default_opening_exposes_fertile_soil_only(self):
        model = ResourceModel(DEFAULT_RESOURCES)
        exposed = model.evaluate_exposure(DEFAULT_INITIAL_METRICS)
        assert [r.id for r in exposed] == ["fertile-soil"]


class TestHarvest:
    def test_unknown_or_latent_gives_nothing(self):
        model = ResourceModel([WELL])
        assert model.harvest("well", 10.0) == HarvestResult()
        assert model.harvest("ghost", 10.0) == HarvestResult(amount=0.0, exhausted=False)

    def test_finite_harvest_depletes_stock(self):
        model = _exposed_model(WELL)
        result = model.harvest("well", 4.0)
        assert result.amount == 4.0
        assert not result.exhausted
        assert model.get("well").amount == pytest.approx(100.0 - 4.0 * 0.01)

    def test_finite_harvest_capped_by_stock(self):
        model = _exposed_model(WELL)
        result = model.harvest("well", 500.0)
        assert result.amount == 100.0

    def test_negative_effort_is_ignored(self):
        model = _exposed_model(WELL)
        result = model.harvest("well", -5.0)
        assert result.amount == 0.0
        assert model.get("well").amount == 100.0

    def test_infinite_harvest_scales_by_abundance(self):
        model = _exposed_model(SUN)
        result = model.harvest("sun", 2.0)
        assert result.amount == pytest.approx(3.0)
        assert model.get("sun").amount == 1.5
        assert not result.exhausted

    def test_finite_stock_is_monotonic_and_exhausts(self):
        model = _exposed_model(WELL)
        previous = model.get("well").amount
        exhausted_at = None
        for i in range(1000):
            result = model.harvest("well", 1000.0)
            current = model.get("well").amount
            assert current <= previous
            previous = current
            if result.exhausted and exhausted_at is None:
                exhausted_at = i
        assert exhausted_at is not None
        assert model.get("well").exhausted
        assert model.get("well").amount <= 5.0
