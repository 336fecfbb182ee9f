"""Tests for configuration loading."""

import json

import pytest

from uaa_scim import InvalidArgument, Scim, load_config
from uaa_scim.config import auth_header_for


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("UAA_TARGET", raising=False)
    monkeypatch.delenv("UAA_TOKEN", raising=False)


def write_config(tmp_path, data) -> str:
    path = tmp_path / "uaa-config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_load_from_file(tmp_path):
    file = write_config(tmp_path, {
        "target": "https://uaa.example.com",
        "token": "abc",
        "timeout": 5,
        "skip_ssl_validation": True,
    })
    config = load_config(file)
    assert config.target == "https://uaa.example.com"
    assert config.auth_header == "bearer abc"
    assert config.timeout == 5.0
    assert config.skip_ssl_validation is True


def test_full_auth_header_is_kept(tmp_path):
    file = write_config(tmp_path, {"target": "https://uaa", "auth_header": "Basic YWRtaW46c2VjcmV0"})
    assert load_config(file).auth_header == "Basic YWRtaW46c2VjcmV0"


def test_environment_overrides_file(tmp_path, monkeypatch):
    file = write_config(tmp_path, {"target": "https://file", "token": "file-token"})
    monkeypatch.setenv("UAA_TARGET", "https://env")
    monkeypatch.setenv("UAA_TOKEN", "env-token")
    config = load_config(file)
    assert config.target == "https://env"
    assert config.auth_header == "bearer env-token"


def test_environment_only(tmp_path, monkeypatch):
    monkeypatch.setenv("UAA_TARGET", "https://env")
    monkeypatch.setenv("UAA_TOKEN", "bearer env-token")
    config = load_config(str(tmp_path / "missing.json"))
    assert config.auth_header == "bearer env-token"


def test_missing_values(tmp_path):
    with pytest.raises(InvalidArgument, match="target"):
        load_config(str(tmp_path / "missing.json"))
    file = write_config(tmp_path, {"target": "https://uaa"})
    with pytest.raises(InvalidArgument, match="token"):
        load_config(file)


def test_non_object_config(tmp_path):
    with pytest.raises(InvalidArgument):
        load_config(write_config(tmp_path, ["not", "an", "object"]))


def test_config_builds_client(tmp_path):
    config = load_config(write_config(tmp_path, {"target": "https://uaa/", "token": "abc"}))
    with config.client() as client:
        assert isinstance(client, Scim)
        assert client.target == "https://uaa"
        assert client.auth_header == "bearer abc"


def test_auth_header_for():
    assert auth_header_for(" abc ") == "bearer abc"
    assert auth_header_for("bearer abc") == "bearer abc"
