"""FastAPI application factory and configuration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional, Union

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel

from . import models  # noqa: F401 - ensure models are registered with SQLModel
from .api import register_routes
from .core import (
    ALLOWED_CORS_ORIGINS,
    DB_RESET,
    LOG_LEVEL,
    RANKING_POLICY,
    configure_logging,
    engine as default_engine,
)
from .services.ranking import RankingPolicy, RankingService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_engine: Engine = app.state.engine
    if DB_RESET:
        SQLModel.metadata.drop_all(db_engine)
        logger.warning("DB_RESET set, dropped all tables")
    SQLModel.metadata.create_all(db_engine)
    logger.info("Database tables ensured (%s)", db_engine.url.render_as_string())

    policy: RankingPolicy = app.state.ranking_policy
    if policy is RankingPolicy.ON_WRITE:
        # Rows written under the on-demand policy carry no stored rank.
        with Session(db_engine) as session:
            changed = RankingService(session, policy).recompute()
        logger.info("Backfilled %d stored rank(s)", changed)

    yield

    logger.info("Shutting down")


def create_app(
    *,
    engine: Optional[Engine] = None,
    ranking_policy: Union[RankingPolicy, str, None] = None,
) -> FastAPI:
    configure_logging(LOG_LEVEL)

    if ranking_policy is None:
        ranking_policy = RANKING_POLICY
    if not isinstance(ranking_policy, RankingPolicy):
        ranking_policy = RankingPolicy.parse(ranking_policy)

    app = FastAPI(title="Leaderboard API", version="1.0.0", lifespan=lifespan)
    app.state.engine = engine if engine is not None else default_engine
    app.state.ranking_policy = ranking_policy

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    register_routes(app)
    logger.info("Ranking policy: %s", ranking_policy.value)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("leaderboard.app:app", host="127.0.0.1", port=3000, reload=True)
