"""
In-memory session manager for game sessions.

Each session wraps a SessionCoordinator + MetricsCollector. The core is
single-threaded, so every call into a session's engines is serialized
behind that session's lock; concurrent HTTP requests for the same session
never interleave inside a move or a tick.

Sessions live only for the lifetime of the process (no save-game format).
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Sequence

from civcascade.core.config import SimulationConfig
from civcascade.core.engine import CivilizationSnapshot
from civcascade.game.session import SessionCoordinator
from civcascade.metrics.collector import MetricsCollector
from civcascade.puzzle.types import Coord, PuzzleMove

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """A live game: coordinator, collected metrics and bookkeeping."""

    id: str
    name: str
    config: SimulationConfig
    coordinator: SessionCoordinator
    collector: MetricsCollector
    moves_played: int = 0
    moves_rejected: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def tick(self) -> int:
        return self.coordinator.snapshot().tick


class SessionManager:
    """Manages multiple game sessions keyed by short hex ids."""

    def __init__(self, default_seed: int | str | None = None):
        self.sessions: dict[str, GameSession] = {}
        self.default_seed = default_seed
        self._registry_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def create_session(
        self,
        config: SimulationConfig | None = None,
        name: str | None = None,
    ) -> GameSession:
        """Create a new session; its civilization opens on tick 1."""
        if config is None:
            config = SimulationConfig()
        if config.random_seed is None and self.default_seed is not None:
            config.random_seed = self.default_seed

        session_id = uuid.uuid4().hex[:8]
        coordinator = SessionCoordinator(config)
        collector = MetricsCollector()
        collector.collect(coordinator.snapshot())

        session = GameSession(
            id=session_id,
            name=name or config.experiment_name,
            config=config,
            coordinator=coordinator,
            collector=collector,
        )
        with self._registry_lock:
            self.sessions[session_id] = session
        logger.info(
            "Created session %s (seed=%r, board=%dx%d)",
            session_id, config.random_seed, config.board_rows, config.board_cols,
        )
        return session

    def get_session(self, session_id: str) -> GameSession:
        """Get a session by ID. Raises KeyError if not found."""
        session = self.sessions.get(session_id)
        if session is None:
            raise KeyError(f"Session '{session_id}' not found")
        return session

    def delete_session(self, session_id: str) -> None:
        with self._registry_lock:
            if session_id not in self.sessions:
                raise KeyError(f"Session '{session_id}' not found")
            del self.sessions[session_id]
        logger.info("Deleted session %s", session_id)

    def reset_session(self, session_id: str) -> GameSession:
        """Rebuild a session from its config; same seed gives the same opening."""
        session = self.get_session(session_id)
        with session.lock:
            session.coordinator = SessionCoordinator(session.config)
            session.collector = MetricsCollector()
            session.collector.collect(session.coordinator.snapshot())
            session.moves_played = 0
            session.moves_rejected = 0
        return session

    def list_sessions(self) -> list[dict[str, Any]]:
        return [self.summary(s) for s in self.sessions.values()]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def play_move(
        self, session_id: str, a: Coord | Sequence[int], b: Coord | Sequence[int],
    ) -> PuzzleMove | None:
        session = self.get_session(session_id)
        with session.lock:
            move = session.coordinator.play_move(a, b)
            if move is None:
                session.moves_rejected += 1
            else:
                session.moves_played += 1
        return move

    def auto_move(self, session_id: str) -> PuzzleMove | None:
        session = self.get_session(session_id)
        with session.lock:
            move = session.coordinator.auto_move()
            if move is not None:
                session.moves_played += 1
        return move

    def step(self, session_id: str, n: int = 1) -> list[CivilizationSnapshot]:
        """Advance a session by N ticks, recording metrics for each."""
        if n < 1:
            raise ValueError(f"n must be at least 1, got {n}")
        session = self.get_session(session_id)
        with session.lock:
            snapshots = session.coordinator.fast_forward(n)
            for snap in snapshots:
                session.collector.collect(snap)
        return snapshots

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------
    def summary(self, session: GameSession) -> dict[str, Any]:
        return {
            "id": session.id,
            "name": session.name,
            "tick": session.tick,
            "moves_played": session.moves_played,
            "moves_rejected": session.moves_rejected,
            "board_rows": session.config.board_rows,
            "board_cols": session.config.board_cols,
        }
