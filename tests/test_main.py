from __future__ import annotations

import importlib

import pytest
from fastapi.testclient import TestClient

DATABASE_URL_VARS = ("TIMESHEET_DATABASE_URL", "DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")


@pytest.fixture()
def main_module(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    return importlib.import_module("app.main")


def test_health_and_routes(main_module) -> None:
    application = main_module.create_app(validate_environment=False)
    paths = application.openapi()["paths"]

    assert "/timesheet/upload" in paths
    assert "/timesheet/download" in paths
    with TestClient(application) as client:
        assert client.get("/health").json() == {"status": "ok"}
        assert client.get("/timesheet/formulas").status_code == 200


def test_missing_database_url_fails_startup(main_module, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in DATABASE_URL_VARS:
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(RuntimeError, match="No database URL configured"):
        main_module.create_app()


def test_invalid_header_offset_fails_startup(main_module, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIMESHEET_HEADER_ROW_OFFSET", "eight")

    with pytest.raises(RuntimeError, match="TIMESHEET_HEADER_ROW_OFFSET"):
        main_module.create_app()
