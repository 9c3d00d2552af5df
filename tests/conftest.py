"""
Shared test configuration.

Clears the CIVCASCADE_* environment for every test so a developer's .env
cannot change seeds or log levels under the test suite.
"""

import pytest

from civcascade.core.config import SimulationConfig
from civcascade.puzzle.types import Tile, TileKind

_LETTERS = {
    "E": TileKind.ENERGY,
    "C": TileKind.CULTURE,
    "K": TileKind.KNOWLEDGE,
    "H": TileKind.HARMONY,
    "I": TileKind.INDUSTRY,
    "W": TileKind.WILD,
}


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    monkeypatch.delenv("CIVCASCADE_DEFAULT_SEED", raising=False)
    monkeypatch.delenv("CIVCASCADE_LOG_LEVEL", raising=False)


@pytest.fixture
def seeded_config():
    return SimulationConfig(random_seed=42)


def _write_grid(engine, rows: list[str]) -> None:
    """Overwrite a board with tiles spelled by letter (E C K H I W)."""
    assert len(rows) == engine.rows and all(len(r) == engine.cols for r in rows)
    engine._grid = [
        [Tile(id=f"fx{r}-{c}", kind=_LETTERS[ch]) for c, ch in enumerate(row)]
        for r, row in enumerate(rows)
    ]


@pytest.fixture
def set_grid():
    return _write_grid
