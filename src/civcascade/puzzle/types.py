"""Value types for the match-3 board."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence

from civcascade.core.metrics import MetricKey


class TileKind(Enum):
    ENERGY = "energy"
    CULTURE = "culture"
    KNOWLEDGE = "knowledge"
    HARMONY = "harmony"
    INDUSTRY = "industry"
    WILD = "wild"


# The five kinds that score; WILD only ever matches.
SCORING_KINDS: tuple[TileKind, ...] = (
    TileKind.ENERGY,
    TileKind.CULTURE,
    TileKind.KNOWLEDGE,
    TileKind.HARMONY,
    TileKind.INDUSTRY,
)

EMPTY = "empty"


@dataclass(frozen=True)
class Tile:
    id: str
    kind: TileKind


@dataclass(frozen=True, order=True)
class Coord:
    row: int
    col: int

    @classmethod
    def parse(cls, value: Coord | Mapping[str, int] | Sequence[int]) -> Coord:
        """Accept a Coord, a ``{"row", "col"}`` mapping or a ``(row, col)`` pair."""
        if isinstance(value, Coord):
            return value
        if isinstance(value, Mapping):
            return cls(int(value["row"]), int(value["col"]))
        row, col = value
        return cls(int(row), int(col))

    def is_adjacent(self, other: Coord) -> bool:
        return abs(self.row - other.row) + abs(self.col - other.col) == 1

    def neighbours(self) -> tuple[Coord, ...]:
        return (
            Coord(self.row - 1, self.col),
            Coord(self.row + 1, self.col),
            Coord(self.row, self.col - 1),
            Coord(self.row, self.col + 1),
        )

    def to_dict(self) -> dict[str, int]:
        return {"row": self.row, "col": self.col}


@dataclass(frozen=True)
class PuzzleReward:
    metric: MetricKey
    delta: float
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric.value, "delta": self.delta,
            "description": self.description,
        }


@dataclass(frozen=True)
class PuzzleMove:
    """Outcome of one successful move, after cascades reached a fixed point."""
    selections: tuple[Coord, Coord]
    cleared_tiles: int
    combo_multiplier: float
    rewards: tuple[PuzzleReward, ...]
    cascades: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "selections": [c.to_dict() for c in self.selections],
            "cleared_tiles": self.cleared_tiles,
            "combo_multiplier": self.combo_multiplier,
            "rewards": [r.to_dict() for r in self.rewards],
            "cascades": self.cascades,
        }


@dataclass(frozen=True)
class CellView:
    """Read-only projection of one cell: a tile or empty."""
    kind: str
    id: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.kind == EMPTY

    def to_dict(self) -> dict[str, str]:
        if self.id is None:
            return {"kind": self.kind}
        return {"id": self.id, "kind": self.kind}


@dataclass(frozen=True)
class BoardState:
    grid: tuple[tuple[CellView, ...], ...]
    pending_rewards: tuple[PuzzleReward, ...] = field(default_factory=tuple)
    cascades: int = 0

    @property
    def rows(self) -> int:
        return len(self.grid)

    @property
    def cols(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    def kinds(self) -> list[list[str]]:
        return [[cell.kind for cell in row] for row in self.grid]

    def to_dict(self) -> dict[str, Any]:
        return {
            "grid": [[cell.to_dict() for cell in row] for row in self.grid],
            "pending_rewards": [r.to_dict() for r in self.pending_rewards],
            "cascades": self.cascades,
        }
