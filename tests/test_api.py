"""HTTP tests for the user endpoints, run under both ranking policies."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from fastapi.testclient import TestClient
from sqlalchemy import inspect
from sqlmodel import Session

from leaderboard.app import create_app
from leaderboard.core import build_engine
from leaderboard.services.ranking import RankingPolicy, RankingService


def test_empty_list(client):
    response = client.get("/api/user")

    assert response.status_code == 200
    assert response.json() == []


def test_create_returns_ranked_user_and_location(client):
    response = client.post("/api/user", json={"displayName": "abc"})

    assert response.status_code == 201
    body = response.json()
    assert body == {"id": body["id"], "displayName": "abc", "points": 0, "rank": 1}
    assert response.headers["location"].endswith(f"/api/user/{body['id']}")
    assert client.get(response.headers["location"]).json() == body


def test_create_rejects_short_name(client):
    response = client.post("/api/user", json={"displayName": "ab"})

    assert response.status_code == 400
    assert response.json() == {
        "displayName": ["displayName must be between 3 and 30 characters."]
    }


def test_create_rejects_long_name(client):
    response = client.post("/api/user", json={"displayName": "x" * 31})

    assert response.status_code == 400
    assert list(response.json()) == ["displayName"]


def test_create_accepts_boundary_lengths(client):
    assert client.post("/api/user", json={"displayName": "abc"}).status_code == 201
    assert client.post("/api/user", json={"displayName": "y" * 30}).status_code == 201


def test_create_requires_name(client):
    response = client.post("/api/user", json={})

    assert response.status_code == 400
    assert response.json() == {"displayName": ["displayName is required."]}


def test_duplicate_name_is_a_client_error(client):
    first = client.post("/api/user", json={"displayName": "abc"})
    second = client.post("/api/user", json={"displayName": "abc"})

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json() == {"displayName": ["displayName 'abc' is already in use."]}
    assert [u["id"] for u in client.get("/api/user").json()] == [first.json()["id"]]


def test_ranking_ties_break_by_arrival(client, make_user):
    make_user("Axe", 100)
    make_user("Cid", 100)
    make_user("Bob", 50)

    ranked = client.get("/api/user").json()

    assert [(u["displayName"], u["rank"]) for u in ranked] == [("Axe", 1), ("Cid", 2), ("Bob", 3)]


def test_single_lookup_matches_list(client, make_user):
    users = [make_user("low", -3), make_user("high", 40), make_user("mid", 0)]

    listed = {u["id"]: u for u in client.get("/api/user").json()}

    for user in users:
        response = client.get(f"/api/user/{user['id']}")
        assert response.status_code == 200
        assert response.json() == listed[user["id"]]
    assert listed[users[1]["id"]]["rank"] == 1


def test_update_points_reorders(client, make_user):
    first = make_user("first")
    second = make_user("second")

    response = client.put(f"/api/user/{second['id']}", json={"points": 7})

    assert response.status_code == 204
    assert response.content == b""
    assert client.get(f"/api/user/{second['id']}").json()["rank"] == 1
    assert client.get(f"/api/user/{first['id']}").json()["rank"] == 2


def test_update_rejects_non_integer_points(client, make_user):
    user = make_user("player")

    response = client.put(f"/api/user/{user['id']}", json={"points": "lots"})

    assert response.status_code == 400
    assert list(response.json()) == ["points"]


def test_unknown_ids_are_404(client):
    assert client.get("/api/user/999").status_code == 404
    assert client.put("/api/user/999", json={"points": 1}).status_code == 404
    assert client.delete("/api/user/999").status_code == 404


def test_delete_user(client, make_user):
    gone = make_user("gone", 10)
    kept = make_user("kept")

    assert client.delete(f"/api/user/{gone['id']}").status_code == 204
    assert client.get(f"/api/user/{gone['id']}").status_code == 404
    assert client.get("/api/user").json() == [
        {"id": kept["id"], "displayName": "kept", "points": 0, "rank": 1}
    ]


def test_delete_all(client, make_user):
    make_user("one")
    make_user("two")

    assert client.delete("/api/user").status_code == 204
    response = client.get("/api/user")
    assert response.status_code == 200
    assert response.json() == []
    assert client.delete("/api/user").status_code == 204


def test_ids_are_not_reused(client, make_user):
    first = make_user("first")
    client.delete("/api/user")

    second = make_user("second")

    assert second["id"] > first["id"]


def test_health_and_config(client, policy):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/config").json() == {
        "ranking_policy": policy.value,
        "display_name_min_length": 3,
        "display_name_max_length": 30,
    }


def test_on_write_startup_backfills_ranks(engine):
    with Session(engine) as session:
        service = RankingService(session, RankingPolicy.ON_DEMAND)
        service.create_user("early")
        late = service.create_user("late")
        service.update_points(late.id, 1)

    app = create_app(engine=engine, ranking_policy="on_write")
    with TestClient(app) as client:
        ranked = client.get("/api/user").json()

    assert [(u["displayName"], u["rank"]) for u in ranked] == [("late", 1), ("early", 2)]


def test_lifespan_creates_tables(tmp_path):
    db_engine = build_engine(f"sqlite:///{tmp_path / 'nested' / 'fresh.db'}")
    app = create_app(engine=db_engine)
    with TestClient(app) as client:
        assert client.get("/api/user").json() == []
    assert inspect(db_engine).has_table("user")
    db_engine.dispose()


def test_malformed_json_is_keyed_on_body(client):
    response = client.post(
        "/api/user",
        content=b'{"displayName": ',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert list(response.json()) == ["body"]


def test_concurrent_creates_with_same_name(client):
    def create(_):
        return client.post("/api/user", json={"displayName": "racer"})

    with ThreadPoolExecutor(max_workers=8) as pool:
        responses = list(pool.map(create, range(8)))

    assert sorted(r.status_code for r in responses) == [201] + [400] * 7
    for response in responses:
        if response.status_code == 400:
            assert response.json() == {"displayName": ["displayName 'racer' is already in use."]}
    assert [u["displayName"] for u in client.get("/api/user").json()] == ["racer"]


def test_concurrent_creates_keep_ranks_contiguous(client):
    def create(index):
        return client.post("/api/user", json={"displayName": f"player{index:02d}"})

    with ThreadPoolExecutor(max_workers=8) as pool:
        responses = list(pool.map(create, range(40)))

    assert all(r.status_code == 201 for r in responses)
    ranked = client.get("/api/user").json()
    assert [u["rank"] for u in ranked] == list(range(1, 41))
    assert [u["id"] for u in ranked] == sorted(u["id"] for u in ranked)
