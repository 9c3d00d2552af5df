"""
Session coordinator.

Couples one PuzzleEngine to one CivilizationEngine: successful moves push
their rewards into the civilization's reward queue, and ticks are driven
explicitly by the caller. The coordinator itself holds no state beyond
the two engines and the latest snapshot.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from civcascade.core.agent import Agent
from civcascade.core.config import SimulationConfig
from civcascade.core.engine import CivilizationEngine, CivilizationSnapshot
from civcascade.core.resources import ResourceDescriptor
from civcascade.core.technology import TechBlueprint
from civcascade.puzzle.board import PuzzleEngine
from civcascade.puzzle.types import BoardState, Coord, PuzzleMove

logger = logging.getLogger(__name__)


class SessionCoordinator:
    """One game: a board plus a civilization, advanced by explicit commands."""

    def __init__(
        self,
        config: SimulationConfig | None = None,
        *,
        agents: Iterable[Agent] | None = None,
        resources: Iterable[ResourceDescriptor] | None = None,
        techs: Iterable[TechBlueprint] | None = None,
    ):
        self.config = config or SimulationConfig()
        seed = self.config.resolved_seed()
        self.civilization = CivilizationEngine(
            self.config, agents=agents, resources=resources, techs=techs,
        )
        self.board = PuzzleEngine(
            self.config.board_rows, self.config.board_cols, seed, self.config,
        )
        # A session opens on tick 1 so there is always a snapshot to read.
        self._latest = self.civilization.tick()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def play_move(
        self, a: Coord | Sequence[int], b: Coord | Sequence[int],
    ) -> PuzzleMove | None:
        """Play a move; on success its rewards are queued for the next tick."""
        outcome = self.board.perform_move(a, b)
        if outcome is None:
            return None
        rewards = self.board.collect_rewards()
        if rewards:
            self.civilization.apply_puzzle_rewards(rewards)
        logger.debug(
            "Move %s cleared %d tiles (x%.2f), %d rewards queued",
            outcome.selections, outcome.cleared_tiles,
            outcome.combo_multiplier, len(rewards),
        )
        return outcome

    def auto_move(self) -> PuzzleMove | None:
        """Play the first valid move in scan order, if the board has one."""
        moves = self.board.find_valid_moves()
        if not moves:
            return None
        return self.play_move(*moves[0])

    def step_tick(self) -> CivilizationSnapshot:
        self._latest = self.civilization.tick()
        return self._latest

    def fast_forward(self, ticks: int) -> list[CivilizationSnapshot]:
        if ticks < 0:
            raise ValueError(f"ticks must be non-negative, got {ticks}")
        return [self.step_tick() for _ in range(ticks)]

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------
    def board_state(self) -> BoardState:
        return self.board.get_state()

    def snapshot(self) -> CivilizationSnapshot:
        return self._latest
