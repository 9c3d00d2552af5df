"""
Serializers for converting game objects to JSON-safe dicts.

Handles numpy scalars and the frozen value types of the board and the
civilization snapshot.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from civcascade.core.engine import CivilizationSnapshot
from civcascade.puzzle.types import BoardState, PuzzleMove


def _safe(v: Any) -> Any:
    """Recursively convert numpy values to Python scalars/lists."""
    if isinstance(v, dict):
        return {k: _safe(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_safe(x) for x in v]
    if isinstance(v, np.ndarray):
        return v.tolist()
    if isinstance(v, (np.integer, np.floating)):
        return v.item()
    return v


def serialize_snapshot(snapshot: CivilizationSnapshot) -> dict[str, Any]:
    return _safe(snapshot.to_dict())


def serialize_board(state: BoardState) -> dict[str, Any]:
    data = state.to_dict()
    data["rows"] = state.rows
    data["cols"] = state.cols
    return _safe(data)


def serialize_move(move: PuzzleMove) -> dict[str, Any]:
    return _safe(move.to_dict())


def serialize_metrics_rows(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [_safe(r) for r in rows]


def safe_values(values: list[Any]) -> list[Any]:
    return [_safe(v) for v in values]
