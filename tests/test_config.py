"""Tests for SimulationConfig."""

import pytest

from civcascade.core.config import SimulationConfig
from civcascade.core.metrics import DEFAULT_INITIAL_METRICS


class TestDefaults:
    def test_board_defaults(self):
        config = SimulationConfig()
        assert (config.board_rows, config.board_cols) == (8, 8)
        assert config.initial_reroll_limit == 20
        assert config.wild_tile_chance == 0.06

    def test_initial_metrics_match_defaults(self):
        assert SimulationConfig().initial_metrics == DEFAULT_INITIAL_METRICS

    def test_bounds(self):
        config = SimulationConfig()
        assert config.bound("agents") == 150.0
        assert config.bound("puzzle") == 160.0
        assert config.bound("drift") == 180.0
        assert config.bound("tech") == 200.0

    def test_mutable_defaults_are_independent(self):
        a, b = SimulationConfig(), SimulationConfig()
        a.initial_metrics["knowledge"] = 99.0
        assert b.initial_metrics["knowledge"] == 12.0


class TestValidation:
    def test_bad_board_raises(self):
        with pytest.raises(ValueError):
            SimulationConfig(board_rows=0)

    def test_bad_wild_chance_raises(self):
        with pytest.raises(ValueError):
            SimulationConfig(wild_tile_chance=1.5)

    def test_unknown_initial_metric_raises(self):
        with pytest.raises(ValueError):
            SimulationConfig(initial_metrics={"wealth": 3.0})

    def test_unknown_reward_metric_raises(self):
        rewards = SimulationConfig().tile_rewards
        rewards["energy"] = {"metric": "gold", "magnitude": 1.0}
        with pytest.raises(ValueError):
            SimulationConfig(tile_rewards=rewards)

    def test_missing_reward_kind_raises(self):
        rewards = SimulationConfig().tile_rewards
        del rewards["harmony"]
        with pytest.raises(ValueError):
            SimulationConfig(tile_rewards=rewards)

    def test_unknown_impact_metric_raises(self):
        with pytest.raises(ValueError):
            SimulationConfig(resource_impacts={"fresh-water": {"gold": 0.5}})


class TestSeed:
    def test_explicit_seed_kept(self):
        assert SimulationConfig(random_seed="abc").resolved_seed() == "abc"

    def test_missing_seed_is_resolved_once(self):
        config = SimulationConfig()
        seed = config.resolved_seed()
        assert isinstance(seed, int)
        assert config.resolved_seed() == seed


class TestSerialization:
    def test_json_round_trip(self):
        config = SimulationConfig(random_seed=7, drift_rate=0.01, experiment_name="rt")
        restored = SimulationConfig.from_json(config.to_json())
        assert restored.to_dict() == config.to_dict()

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(TypeError):
            SimulationConfig.from_dict({"gravity": 9.8})

    def test_diff(self):
        a = SimulationConfig(random_seed=1)
        b = SimulationConfig(random_seed=1, drift_base=-1.0)
        assert a.diff(b) == {"drift_base": (-0.25, -1.0)}
