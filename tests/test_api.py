"""Tests for the REST facade with the client dependency overridden."""

import pytest
from fastapi.testclient import TestClient

import scim_api
from tests.conftest import body_of


@pytest.fixture
def api(scim):
    scim_api.app.dependency_overrides[scim_api.get_client] = lambda: scim
    yield TestClient(scim_api.app)
    scim_api.app.dependency_overrides.clear()


def test_list(api, fake_uaa):
    fake_uaa.page([{"id": "u1", "userName": "joe"}], total=1)
    resp = api.get("/user", params={"attributes": "id,username"})
    assert resp.status_code == 200
    assert resp.json() == [{"id": "u1", "userName": "joe"}]
    assert fake_uaa.last.url.params["attributes"] == "id,userName"


def test_unknown_type_is_rejected(api, fake_uaa):
    assert api.get("/users").status_code == 422
    assert fake_uaa.requests == []


def test_get_by_name(api, fake_uaa):
    fake_uaa.page([{"client_id": "app"}], total=1)
    fake_uaa.reply(200, {"client_id": "app"})
    resp = api.get("/client/app")
    assert resp.status_code == 200
    assert resp.json() == {"client_id": "app", "id": "app"}


def test_get_missing_is_404(api, fake_uaa):
    fake_uaa.page([], total=0)
    resp = api.get("/group/nobody")
    assert resp.status_code == 404
    assert "nobody" in resp.json()["detail"]


def test_create(api, fake_uaa):
    fake_uaa.reply(201, {"id": "g1", "displayName": "admins"})
    resp = api.post("/group", json={"DisplayName": "admins"})
    assert resp.status_code == 201
    assert resp.json()["id"] == "g1"
    assert body_of(fake_uaa.last) == {"displayName": "admins"}


def test_create_conflict_is_400(api, fake_uaa):
    fake_uaa.reply(409, {"error": "scim_resource_already_exists", "error_description": "taken"})
    resp = api.post("/user", json={"userName": "joe"})
    assert resp.status_code == 400
    assert "taken" in resp.json()["detail"]


def test_update_sets_id_from_name(api, fake_uaa):
    fake_uaa.page([{"id": "u1", "userName": "joe"}], total=1)
    fake_uaa.reply(200, {"id": "u1", "userName": "joe"})
    resp = api.put("/user/joe", json={"userName": "joe", "meta": {"version": 1}})
    assert resp.status_code == 200
    assert fake_uaa.last.url.path == "/Users/u1"
    assert fake_uaa.last.headers["if-match"] == "1"


def test_delete(api, fake_uaa):
    fake_uaa.page([{"id": "g1", "displayName": "admins"}], total=1)
    fake_uaa.reply(204)
    resp = api.delete("/group/admins")
    assert resp.status_code == 200
    assert fake_uaa.last.url.path == "/Groups/g1"


def test_change_password(api, fake_uaa):
    fake_uaa.page([{"id": "u1", "userName": "joe"}], total=1)
    fake_uaa.reply(200, {"status": "ok"})
    resp = api.put("/user/joe/password", json={"password": "new"})
    assert resp.status_code == 200
    assert body_of(fake_uaa.last) == {"password": "new"}


def test_change_secret_bad_token_is_401(api, fake_uaa):
    fake_uaa.page([{"client_id": "app"}], total=1)
    fake_uaa.reply(401, {"error": "invalid_token", "error_description": "expired"})
    resp = api.put("/client/app/secret", json={"secret": "s", "oldSecret": "o"})
    assert resp.status_code == 401
    assert body_of(fake_uaa.last) == {"secret": "s", "oldSecret": "o"}
