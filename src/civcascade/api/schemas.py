"""
Pydantic models for API request/response validation.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any


# === Sessions ===

class CreateSessionRequest(BaseModel):
    config: dict[str, Any] | None = None
    preset: str | None = None
    name: str | None = None
    seed: int | str | None = None


class StepRequest(BaseModel):
    n: int = Field(1, ge=1, le=10_000)


class FastForwardRequest(BaseModel):
    ticks: int = Field(..., ge=0, le=10_000)


class SessionSummary(BaseModel):
    id: str
    name: str
    tick: int
    moves_played: int
    moves_rejected: int
    board_rows: int
    board_cols: int


class SessionResponse(SessionSummary):
    config: dict[str, Any]


# === Board ===

class CoordModel(BaseModel):
    row: int
    col: int


class MoveRequest(BaseModel):
    first: CoordModel
    second: CoordModel


class MoveResponse(BaseModel):
    accepted: bool
    move: dict[str, Any] | None = None
    pending_rewards: int = 0


class ValidMovesResponse(BaseModel):
    count: int
    moves: list[list[CoordModel]]


# === Civilization ===

class StepResponse(BaseModel):
    tick: int
    snapshots: list[dict[str, Any]]


# === Metrics ===

class TimeSeriesResponse(BaseModel):
    field: str
    values: list[Any]


class SummaryResponse(BaseModel):
    session_id: str
    ticks_recorded: int
    metrics: dict[str, dict[str, float]]


# === Presets ===

class PresetInfo(BaseModel):
    name: str
    config: dict[str, Any]
