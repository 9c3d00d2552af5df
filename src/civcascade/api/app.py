"""
FastAPI application factory for the Civ Cascade API.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from civcascade.api.sessions import SessionManager
from civcascade.api.routers import game, metrics

# Load .env from the project root, then CWD
_project_root = Path(__file__).resolve().parents[3]  # src/civcascade/api/app.py → project root
load_dotenv(_project_root / ".env")
load_dotenv(Path.cwd() / ".env")


def _default_seed() -> int | str | None:
    raw = os.environ.get("CIVCASCADE_DEFAULT_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return raw


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    level = os.environ.get("CIVCASCADE_LOG_LEVEL", "INFO").upper()
    logging.getLogger("civcascade").setLevel(getattr(logging, level, logging.INFO))

    application = FastAPI(
        title="Civ Cascade API",
        description="REST API for the Civ Cascade puzzle and civilization engine",
        version="0.1.0",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.state.session_manager = SessionManager(default_seed=_default_seed())

    application.include_router(game.router, prefix="/api/game", tags=["game"])
    application.include_router(metrics.router, prefix="/api/metrics", tags=["metrics"])

    @application.get("/api/health")
    def health_check():
        return {"status": "ok"}

    return application


app = create_app()
