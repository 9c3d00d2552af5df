"""Per-tick metrics endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from civcascade.api.schemas import SummaryResponse, TimeSeriesResponse
from civcascade.api.serializers import safe_values, serialize_metrics_rows

router = APIRouter()


def _session(request: Request, session_id: str):
    mgr = request.app.state.session_manager
    try:
        return mgr.get_session(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


@router.get("/{session_id}/ticks")
def get_ticks(
    session_id: str,
    request: Request,
    from_tick: int = Query(0, ge=0),
    to_tick: int | None = Query(None),
) -> list[dict[str, Any]]:
    """Recorded rows whose tick lies in [from_tick, to_tick]."""
    session = _session(request, session_id)
    with session.lock:
        rows = session.collector.export_for_visualization()
    return serialize_metrics_rows([
        row for row in rows
        if row["tick"] >= from_tick and (to_tick is None or row["tick"] <= to_tick)
    ])


@router.get("/{session_id}/time-series/{field_name}", response_model=TimeSeriesResponse)
def get_time_series(session_id: str, field_name: str, request: Request):
    session = _session(request, session_id)
    try:
        with session.lock:
            values = session.collector.get_time_series(field_name)
    except AttributeError:
        raise HTTPException(status_code=400, detail=f"Unknown metric field: '{field_name}'")
    return {"field": field_name, "values": safe_values(values)}


@router.get("/{session_id}/summary", response_model=SummaryResponse)
def get_summary(session_id: str, request: Request):
    session = _session(request, session_id)
    with session.lock:
        return {
            "session_id": session_id,
            "ticks_recorded": len(session.collector.metrics_history),
            "metrics": session.collector.summary(),
        }
