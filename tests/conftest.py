"""Shared fixtures: an app per test on its own SQLite file."""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel

from leaderboard.app import create_app
from leaderboard.core import build_engine
from leaderboard.services.ranking import RankingPolicy


@pytest.fixture
def engine(tmp_path) -> Iterator[Engine]:
    db_engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    SQLModel.metadata.create_all(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session(engine) -> Iterator[Session]:
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture(params=[RankingPolicy.ON_DEMAND, RankingPolicy.ON_WRITE], ids=lambda p: p.value)
def policy(request) -> RankingPolicy:
    return request.param


@pytest.fixture
def client(engine, policy) -> Iterator[TestClient]:
    app = create_app(engine=engine, ranking_policy=policy)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(client):
    """Create a user over HTTP, optionally setting its points."""

    def create(name: str, points: int | None = None) -> dict:
        response = client.post("/api/user", json={"displayName": name})
        assert response.status_code == 201, response.text
        body = response.json()
        if points is not None:
            update = client.put(f"/api/user/{body['id']}", json={"points": points})
            assert update.status_code == 204, update.text
            body["points"] = points
        return body

    return create
