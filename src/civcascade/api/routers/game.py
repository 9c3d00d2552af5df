"""Game session endpoints: lifecycle, board moves and civilization ticks."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request

from civcascade.api.schemas import (
    CreateSessionRequest,
    FastForwardRequest,
    MoveRequest,
    MoveResponse,
    PresetInfo,
    SessionResponse,
    SessionSummary,
    StepRequest,
    StepResponse,
    ValidMovesResponse,
)
from civcascade.api.serializers import (
    serialize_board,
    serialize_metrics_rows,
    serialize_move,
    serialize_snapshot,
)
from civcascade.core.config import SimulationConfig
from civcascade.experiment.presets import get_preset, list_presets

logger = logging.getLogger(__name__)

router = APIRouter()


def _session_response(mgr, session) -> dict:
    return {**mgr.summary(session), "config": session.config.to_dict()}


def _get(mgr, session_id: str):
    try:
        return mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


# ------------------------------------------------------------------
# Lifecycle
# ------------------------------------------------------------------
@router.post("/sessions", response_model=SessionResponse)
def create_session(req: CreateSessionRequest, request: Request):
    mgr = request.app.state.session_manager

    config = None
    try:
        if req.preset:
            config = get_preset(req.preset)
        elif req.config:
            config = SimulationConfig.from_dict(req.config)
    except KeyError as exc:
        logger.warning("Rejected session request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc.args[0]))
    except (TypeError, ValueError) as exc:
        logger.warning("Rejected session config: %s", exc)
        raise HTTPException(status_code=400, detail=f"Invalid config: {exc}")

    if req.seed is not None:
        config = config or SimulationConfig()
        config.random_seed = req.seed

    try:
        session = mgr.create_session(config=config, name=req.name)
    except (TypeError, ValueError) as exc:
        logger.warning("Rejected session config: %s", exc)
        raise HTTPException(status_code=400, detail=f"Invalid config: {exc}")
    return _session_response(mgr, session)


@router.get("/sessions", response_model=list[SessionSummary])
def list_sessions(request: Request):
    mgr = request.app.state.session_manager
    return mgr.list_sessions()


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    return _session_response(mgr, _get(mgr, session_id))


@router.delete("/sessions/{session_id}")
def delete_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    try:
        mgr.delete_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return {"deleted": True}


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
def reset_session(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    try:
        session = mgr.reset_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return _session_response(mgr, session)


# ------------------------------------------------------------------
# Board
# ------------------------------------------------------------------
@router.get("/sessions/{session_id}/board")
def get_board(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    session = _get(mgr, session_id)
    with session.lock:
        state = session.coordinator.board_state()
    return serialize_board(state)


@router.get("/sessions/{session_id}/board/moves", response_model=ValidMovesResponse)
def get_valid_moves(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    session = _get(mgr, session_id)
    with session.lock:
        moves = session.coordinator.board.find_valid_moves()
    return {
        "count": len(moves),
        "moves": [[a.to_dict(), b.to_dict()] for a, b in moves],
    }


@router.post("/sessions/{session_id}/moves", response_model=MoveResponse)
def play_move(session_id: str, req: MoveRequest, request: Request):
    mgr = request.app.state.session_manager
    try:
        move = mgr.play_move(
            session_id, (req.first.row, req.first.col), (req.second.row, req.second.col),
        )
        session = mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    if move is None:
        return {"accepted": False, "move": None, "pending_rewards": 0}
    return {
        "accepted": True,
        "move": serialize_move(move),
        "pending_rewards": session.coordinator.civilization.pending_reward_count,
    }


@router.post("/sessions/{session_id}/moves/auto", response_model=MoveResponse)
def auto_move(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    try:
        move = mgr.auto_move(session_id)
        session = mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    if move is None:
        return {"accepted": False, "move": None, "pending_rewards": 0}
    return {
        "accepted": True,
        "move": serialize_move(move),
        "pending_rewards": session.coordinator.civilization.pending_reward_count,
    }


# ------------------------------------------------------------------
# Civilization
# ------------------------------------------------------------------
@router.post("/sessions/{session_id}/step", response_model=StepResponse)
def step_session(session_id: str, req: StepRequest, request: Request):
    mgr = request.app.state.session_manager
    try:
        snapshots = mgr.step(session_id, req.n)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return {
        "tick": snapshots[-1].tick,
        "snapshots": [serialize_snapshot(s) for s in snapshots],
    }


@router.post("/sessions/{session_id}/fast-forward")
def fast_forward(session_id: str, req: FastForwardRequest, request: Request):
    """Run N ticks and return only the final snapshot."""
    mgr = request.app.state.session_manager
    session = _get(mgr, session_id)
    if req.ticks > 0:
        mgr.step(session_id, req.ticks)
    with session.lock:
        snapshot = session.coordinator.snapshot()
    return serialize_snapshot(snapshot)


@router.get("/sessions/{session_id}/snapshot")
def get_snapshot(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    session = _get(mgr, session_id)
    with session.lock:
        snapshot = session.coordinator.snapshot()
    return serialize_snapshot(snapshot)


@router.get("/sessions/{session_id}/metrics")
def get_metrics_history(session_id: str, request: Request):
    mgr = request.app.state.session_manager
    session = _get(mgr, session_id)
    with session.lock:
        rows = session.collector.export_for_visualization()
    return serialize_metrics_rows(rows)


# ------------------------------------------------------------------
# Presets
# ------------------------------------------------------------------
@router.get("/presets", response_model=list[PresetInfo])
def get_presets():
    return [
        {"name": name, "config": get_preset(name).to_dict()}
        for name in list_presets()
    ]
