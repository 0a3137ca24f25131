"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from fastapi import FastAPI
from sqlalchemy.orm import Session, sessionmaker

from api.routes import router
from domain.common import utcnow
from domain.config import GameConfig
from services.game_api import GameAPI


def create_app(
    session_factory: sessionmaker[Session],
    config: GameConfig | None = None,
    *,
    clock: Callable[[], datetime] = utcnow,
) -> FastAPI:
    app = FastAPI(
        title="Tactical Duel",
        description="Matchmaking, match lifecycle and judge ratings for tactical message duels",
        version="0.1.0",
    )
    app.state.game_api = GameAPI(session_factory, config, clock=clock)
    app.include_router(router, prefix="/api")

    @app.get("/health")
    def health_check():
        return {"status": "healthy", "service": "tactical-duel"}

    return app
