import pytest
from fastapi.testclient import TestClient

from app import main


@pytest.fixture
def api(monkeypatch, users_client):
    monkeypatch.setattr(main, "client", users_client)
    with TestClient(main.app) as c:
        yield c


def test_health(api):
    r = api.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_list_users_is_cached(api, source):
    r1 = api.get("/v1/users")
    r2 = api.get("/v1/users")
    assert r1.status_code == 200, r1.text
    assert r1.json()["count"] == 2
    assert r2.json() == r1.json()
    assert source.calls == 1


def test_list_users_upstream_failure(api, source):
    source.fail = True
    r = api.get("/v1/users")
    assert r.status_code == 502


def test_refresh_replaces_cached_users(api, source):
    api.get("/v1/users")
    source.payload = [{"id": 3, "name": "Clementine", "email": "c@example.com"}]
    r = api.post("/v1/users/refresh")
    assert r.status_code == 200, r.text
    assert r.json()["data"][0]["id"] == 3
    assert api.get("/v1/users").json()["count"] == 1
    assert source.calls == 2


def test_refresh_failure_keeps_cached_users(api, source):
    api.get("/v1/users")
    source.fail = True
    r = api.post("/v1/users/refresh")
    assert r.status_code == 502
    assert "network down" in r.json()["detail"]
    assert api.get("/v1/users").json()["count"] == 2


def test_get_user(api):
    api.get("/v1/users")
    r = api.get("/v1/users/2")
    assert r.status_code == 200
    assert r.json()["name"] == "Ervin Howell"
    assert r.json()["status"] == "active"
    assert api.get("/v1/users/99").status_code == 404


def test_create_update_delete_user(api):
    api.get("/v1/users")

    r = api.post("/v1/users", json={"name": " Kurtis ", "email": "kurtis@example.com"})
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["id"] == 3
    assert created["name"] == "Kurtis"
    assert api.get("/v1/users").json()["data"][0]["id"] == 3

    r = api.put("/v1/users/3", json={"name": "Kurtis W", "email": "kw@example.com", "status": "inactive"})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "inactive"

    assert api.delete("/v1/users/3").status_code == 204
    assert api.get("/v1/users/3").status_code == 404
    assert api.delete("/v1/users/3").status_code == 404


def test_update_unknown_user(api):
    api.get("/v1/users")
    r = api.put("/v1/users/42", json={"name": "X", "email": "x@example.com"})
    assert r.status_code == 404


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "", "email": "a@example.com"},
        {"name": "A", "email": "   "},
        {"name": "A", "email": "not-an-email"},
        {"email": "a@example.com"},
    ],
)
def test_create_user_rejects_invalid_input(api, payload):
    r = api.post("/v1/users", json=payload)
    assert r.status_code == 422


def test_clear_cache_forces_refetch(api, source):
    api.get("/v1/users")
    assert api.delete("/v1/cache").status_code == 204
    api.get("/v1/users")
    assert source.calls == 2


def test_create_user_on_cold_cache_keeps_remote_users(api, source):
    r = api.post("/v1/users", json={"name": "K", "email": "k@example.com"})
    assert r.status_code == 201, r.text
    assert r.json()["id"] == 3
    body = api.get("/v1/users").json()
    assert body["count"] == 3
    assert [u["id"] for u in body["data"]] == [3, 1, 2]
    assert source.calls == 1


def test_get_user_on_cold_cache(api, source):
    r = api.get("/v1/users/1")
    assert r.status_code == 200, r.text
    assert r.json()["name"] == "Leanne Graham"
    assert source.calls == 1


def test_update_user_on_cold_cache(api):
    r = api.put("/v1/users/1", json={"name": "Leanne G", "email": "lg@example.com"})
    assert r.status_code == 200, r.text
    assert r.json()["name"] == "Leanne G"


def test_delete_user_on_cold_cache(api):
    assert api.delete("/v1/users/2").status_code == 204
    assert api.get("/v1/users").json()["count"] == 1


def test_user_routes_on_cold_cache_upstream_failure(api, source):
    source.fail = True
    assert api.get("/v1/users/1").status_code == 502
    assert api.put("/v1/users/1", json={"name": "X", "email": "x@example.com"}).status_code == 502
    assert api.delete("/v1/users/1").status_code == 502
    assert api.post("/v1/users", json={"name": "X", "email": "x@example.com"}).status_code == 502


def test_list_users_non_json_upstream(api, source):
    source.text = "<html>"
    r = api.get("/v1/users")
    assert r.status_code == 502


def test_refresh_non_json_upstream_keeps_cached_users(api, source):
    api.get("/v1/users")
    source.text = "<html>"
    r = api.post("/v1/users/refresh")
    assert r.status_code == 502
    assert r.json()["detail"].startswith("Failed to refresh data")
    assert api.get("/v1/users").json()["count"] == 2
