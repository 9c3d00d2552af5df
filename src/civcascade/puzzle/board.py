"""
Match-3 puzzle engine.

Owns one rows x cols grid of tiles. A move swaps two adjacent tiles; if
the swap creates a match the board resolves cascades
(clear -> gravity -> refill) until no match remains, then converts the
number of cleared tiles into metric rewards scaled by the combo multiplier.

Match detection is a two-step process:
- find maximal row/column runs of >= 3 "same" tiles (WILD is same as
  anything), then
- flood-fill (4-connected BFS) out from each run, absorbing neighbours that
  are WILD or share the run's base kind. Crossing or overlapping runs merge
  into one cluster.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from typing import TYPE_CHECKING, Iterator, Sequence

from civcascade.core.metrics import MetricKey, round2
from civcascade.core.rng import DeterministicRandom
from civcascade.puzzle.types import (
    EMPTY,
    SCORING_KINDS,
    BoardState,
    CellView,
    Coord,
    PuzzleMove,
    PuzzleReward,
    Tile,
    TileKind,
)

if TYPE_CHECKING:
    from civcascade.core.config import SimulationConfig

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    digits: list[str] = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


class PuzzleEngine:
    """State machine over a single match-3 board."""

    def __init__(
        self,
        rows: int = 8,
        cols: int = 8,
        seed: int | str = 0,
        config: SimulationConfig | None = None,
    ):
        if config is None:
            from civcascade.core.config import SimulationConfig
            config = SimulationConfig()
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Board must have positive dimensions, got {rows}x{cols}")

        self.config = config
        self._rows = rows
        self._cols = cols
        self.rng = DeterministicRandom(seed)
        self._grid: list[list[Tile | None]] = [[None] * cols for _ in range(rows)]
        self._cascades = 0
        self._pending_rewards: list[PuzzleReward] = []
        self._next_tile_id = 0
        self._reward_table: dict[TileKind, tuple[MetricKey, float]] = {
            TileKind(kind): (MetricKey(entry["metric"]), float(entry["magnitude"]))
            for kind, entry in config.tile_rewards.items()
        }
        self._seed_initial_grid()

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def cascades(self) -> int:
        return self._cascades

    def tile_at(self, coord: Coord) -> Tile | None:
        return self._grid[coord.row][coord.col]

    def in_bounds(self, coord: Coord) -> bool:
        return 0 <= coord.row < self._rows and 0 <= coord.col < self._cols

    def get_state(self) -> BoardState:
        """Immutable projection of the grid, pending rewards and last cascade count."""
        grid = tuple(
            tuple(
                CellView(kind=tile.kind.value, id=tile.id) if tile else CellView(kind=EMPTY)
                for tile in row
            )
            for row in self._grid
        )
        return BoardState(
            grid=grid,
            pending_rewards=tuple(self._pending_rewards),
            cascades=self._cascades,
        )

    def collect_rewards(self) -> list[PuzzleReward]:
        """Drain and return the pending reward buffer."""
        rewards, self._pending_rewards = self._pending_rewards, []
        return rewards

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------
    def perform_move(
        self, a: Coord | Sequence[int], b: Coord | Sequence[int],
    ) -> PuzzleMove | None:
        """Swap two adjacent tiles and resolve cascades.

        Returns None, leaving the grid untouched, when the cells are out of
        bounds, not orthogonally adjacent, or the swap creates no match.
        """
        a, b = Coord.parse(a), Coord.parse(b)
        if not (self.in_bounds(a) and self.in_bounds(b)) or not a.is_adjacent(b):
            return None

        self._swap(a, b)
        matches = self.find_matches()
        if not matches:
            self._swap(a, b)
            return None

        total_cleared = 0
        combo = 1.0
        self._cascades = 0
        self._pending_rewards = []

        while matches:
            total_cleared += self._clear(matches)
            combo = max(combo, 1.0 + self._cascades * self.config.combo_step)
            self._apply_gravity()
            self._refill()
            self._cascades += 1
            matches = self.find_matches()

        rewards = self._generate_rewards(total_cleared, combo)
        self._pending_rewards.extend(rewards)

        return PuzzleMove(
            selections=(a, b),
            cleared_tiles=total_cleared,
            combo_multiplier=combo,
            rewards=tuple(rewards),
            cascades=self._cascades,
        )

    def find_valid_moves(self) -> list[tuple[Coord, Coord]]:
        """Every right/down swap that would produce a match.

        Swaps are tentative and always undone; no randomness is consumed.
        """
        moves: list[tuple[Coord, Coord]] = []
        for row in range(self._rows):
            for col in range(self._cols):
                a = Coord(row, col)
                for b in (Coord(row, col + 1), Coord(row + 1, col)):
                    if not self.in_bounds(b):
                        continue
                    self._swap(a, b)
                    if self.find_matches():
                        moves.append((a, b))
                    self._swap(a, b)
        return moves

    def has_valid_move(self) -> bool:
        return bool(self.find_valid_moves())

    # ------------------------------------------------------------------
    # Match detection
    # ------------------------------------------------------------------
    def find_matches(self) -> set[Coord]:
        """All cells belonging to a match cluster on the current grid."""
        return set(self._matches_in_order())

    def _matches_in_order(self) -> list[Coord]:
        """Matched cells in discovery order: runs scanned by row then column,
        each cluster in breadth-first order."""
        matched: dict[Coord, None] = {}
        for run in self._all_runs():
            base_kind = self._resolve_run_kind(run)
            matched.update(dict.fromkeys(self._expand_cluster(run, base_kind)))
        return list(matched)

    def _all_runs(self) -> Iterator[list[Coord]]:
        for row in range(self._rows):
            yield from self._runs_in_line([Coord(row, c) for c in range(self._cols)])
        for col in range(self._cols):
            yield from self._runs_in_line([Coord(r, col) for r in range(self._rows)])

    def _runs_in_line(self, line: list[Coord]) -> Iterator[list[Coord]]:
        """Maximal runs of >= 3, each listed from its last cell back to its first."""
        streak = 1
        for i in range(1, len(line)):
            if self._is_same(line[i], line[i - 1]):
                streak += 1
                continue
            if streak >= 3:
                yield [line[i - 1 - k] for k in range(streak)]
            streak = 1
        if streak >= 3:
            yield [line[len(line) - 1 - k] for k in range(streak)]

    def _is_same(self, a: Coord, b: Coord) -> bool:
        ta, tb = self.tile_at(a), self.tile_at(b)
        if ta is None or tb is None:
            return False
        if ta.kind is TileKind.WILD or tb.kind is TileKind.WILD:
            return True
        return ta.kind is tb.kind

    def _resolve_run_kind(self, run: list[Coord]) -> TileKind:
        for coord in run:
            tile = self.tile_at(coord)
            if tile is not None and tile.kind is not TileKind.WILD:
                return tile.kind
        return TileKind.WILD

    def _expand_cluster(self, seeds: list[Coord], base_kind: TileKind) -> list[Coord]:
        visited: dict[Coord, None] = dict.fromkeys(seeds)
        queue: deque[Coord] = deque(visited)
        while queue:
            current = queue.popleft()
            for n in current.neighbours():
                if n in visited or not self.in_bounds(n):
                    continue
                tile = self.tile_at(n)
                if tile is None:
                    continue
                if tile.kind is TileKind.WILD or tile.kind is base_kind:
                    visited[n] = None
                    queue.append(n)
        return list(visited)

    # ------------------------------------------------------------------
    # Resolution steps
    # ------------------------------------------------------------------
    def _clear(self, matches: set[Coord]) -> int:
        for coord in matches:
            self._grid[coord.row][coord.col] = None
        return len(matches)

    def _apply_gravity(self) -> None:
        for col in range(self._cols):
            write_row = self._rows - 1
            for row in range(self._rows - 1, -1, -1):
                tile = self._grid[row][col]
                if tile is None:
                    continue
                self._grid[write_row][col] = tile
                if write_row != row:
                    self._grid[row][col] = None
                write_row -= 1

    def _refill(self) -> None:
        for col in range(self._cols):
            for row in range(self._rows):
                if self._grid[row][col] is None:
                    self._grid[row][col] = self._spawn_tile()

    def _generate_rewards(self, cleared: int, combo: float) -> list[PuzzleReward]:
        # Reward kinds are drawn fresh, independent of what was cleared.
        count = max(1, cleared // self.config.tiles_per_reward)
        rewards: list[PuzzleReward] = []
        for _ in range(count):
            kind = SCORING_KINDS[self.rng.int_between(0, len(SCORING_KINDS) - 1)]
            metric, magnitude = self._reward_table[kind]
            rewards.append(PuzzleReward(
                metric=metric,
                delta=round2(magnitude * combo),
                description=f"Puzzle surge boosts {metric.value}",
            ))
        if combo > self.config.combo_bonus_threshold:
            rewards.append(PuzzleReward(
                metric=MetricKey.STABILITY,
                delta=round2(combo * self.config.combo_bonus_factor),
                description="Cascading insight steadies governance.",
            ))
        return rewards

    # ------------------------------------------------------------------
    # Tiles
    # ------------------------------------------------------------------
    def _seed_initial_grid(self) -> None:
        for row in range(self._rows):
            for col in range(self._cols):
                self._grid[row][col] = self._spawn_tile()

        # Re-roll matched cells so the opening board starts quiet.
        cleanup = self._matches_in_order()
        attempts = 0
        while cleanup and attempts < self.config.initial_reroll_limit:
            for coord in cleanup:
                self._grid[coord.row][coord.col] = self._spawn_tile()
            cleanup = self._matches_in_order()
            attempts += 1
        if cleanup:
            logger.debug(
                "Initial board kept %d matched cells after %d re-rolls",
                len(cleanup), attempts,
            )

    def _random_kind(self) -> TileKind:
        roll = self.rng.next()
        if roll > 1.0 - self.config.wild_tile_chance:
            return TileKind.WILD
        return SCORING_KINDS[min(math.floor(roll * len(SCORING_KINDS)), len(SCORING_KINDS) - 1)]

    def _spawn_tile(self) -> Tile:
        tile = Tile(id=f"t{_base36(self._next_tile_id)}", kind=self._random_kind())
        self._next_tile_id += 1
        return tile

    def _swap(self, a: Coord, b: Coord) -> None:
        grid = self._grid
        grid[a.row][a.col], grid[b.row][b.col] = grid[b.row][b.col], grid[a.row][a.col]
