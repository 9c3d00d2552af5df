"""
Experiment presets — pre-configured session templates.

Each preset returns a SimulationConfig tuned to explore a different
balance between puzzle play and autonomous civic development.
"""

from __future__ import annotations

from civcascade.core.config import SimulationConfig


def baseline() -> SimulationConfig:
    """Standard configuration with default parameters."""
    return SimulationConfig(experiment_name="baseline")


def abundant() -> SimulationConfig:
    """Rich starting metrics: early resource exposure and faster tech."""
    return SimulationConfig(
        experiment_name="abundant",
        initial_metrics={
            "population": 40.0,
            "knowledge": 50.0,
            "culture": 30.0,
            "infrastructure": 40.0,
            "sustainability": 50.0,
            "morale": 35.0,
            "stability": 50.0,
        },
    )


def harsh_drift() -> SimulationConfig:
    """Stronger systemic decay; agents struggle to keep metrics afloat."""
    return SimulationConfig(
        experiment_name="harsh_drift",
        drift_base=-1.0,
        drift_rate=0.01,
    )


def puzzle_focus() -> SimulationConfig:
    """Agents contribute little; progress is driven by puzzle rewards."""
    return SimulationConfig(
        experiment_name="puzzle_focus",
        agent_contribution_scale=1.0,
        tiles_per_reward=2,
        combo_step=0.5,
    )


def small_board() -> SimulationConfig:
    """A 6x6 board with more wildcards: shorter, cascade-heavy games."""
    return SimulationConfig(
        experiment_name="small_board",
        board_rows=6,
        board_cols=6,
        wild_tile_chance=0.12,
    )


# Registry of all presets
PRESETS: dict[str, callable] = {
    "baseline": baseline,
    "abundant": abundant,
    "harsh_drift": harsh_drift,
    "puzzle_focus": puzzle_focus,
    "small_board": small_board,
}


def get_preset(name: str) -> SimulationConfig:
    """Get a preset config by name."""
    if name not in PRESETS:
        raise KeyError(f"Unknown preset: '{name}'. Available: {list(PRESETS.keys())}")
    return PRESETS[name]()


def list_presets() -> list[str]:
    """Return list of available preset names."""
    return list(PRESETS.keys())
