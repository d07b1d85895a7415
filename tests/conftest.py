"""Pytest configuration and fixtures."""

import urllib.request

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from nomadseed.db import make_engine
from nomadseed.model import Argument
from nomadseed.ui.console import Console, set_console

from fake_nomad import create_app, routing_opener


@pytest.fixture(autouse=True)
def console():
    """Fresh console per test (debug on, so debug paths run too)."""
    c = Console(debug=True)
    set_console(c)
    yield c
    set_console(Console())


@pytest.fixture
def db_arguments():
    """The end-to-end argument set from the deployment docs."""
    return [
        Argument(key="MYAPP_HOST", value="127.0.0.1:3306"),
        Argument(key="MYAPP_USER", value="root"),
        Argument(key="MYAPP_PASS", value="mysecretpw"),
    ]


@pytest.fixture
def nomad_app():
    return create_app()


@pytest.fixture
def nomad_client(nomad_app):
    with TestClient(nomad_app) as client:
        yield client


@pytest.fixture
def nomad_opener(nomad_client):
    return routing_opener(nomad_client)


@pytest.fixture
def fake_urlopen(monkeypatch, nomad_opener):
    """Send every urllib request to the fake Nomad."""
    monkeypatch.setattr(urllib.request, "urlopen", nomad_opener)
    return nomad_opener


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'myappdb.sqlite'}"


@pytest.fixture
def sqlite_engine(sqlite_url):
    engine = make_engine(sqlite_url)
    yield engine
    engine.dispose()


@pytest.fixture
def read_names(sqlite_engine):
    """Return the names table contents in insertion order."""
    def _read():
        with sqlite_engine.connect() as conn:
            rows = conn.execute(text("SELECT name FROM names ORDER BY rowid")).all()
        return [r[0] for r in rows]
    return _read
