"""Test fixtures: temporary SQLite registry and a FastAPI test client."""

import pytest
from fastapi.testclient import TestClient

from wolserver.config import Settings
from wolserver.main import create_app
from wolserver.wol import BroadcastSender

from .fakes import FakeSocketFactory


@pytest.fixture
def settings(tmp_path):
    return Settings(
        port=8090,
        db_path=str(tmp_path / "devices.db"),
        wol_port=9,
        broadcast="255.255.255.255",
        fallback_broadcast="255.255.255.255",
        send_timeout=1.0,
        log_level="WARNING",
    )


@pytest.fixture
def sockets():
    return FakeSocketFactory()


@pytest.fixture
def app(settings, sockets):
    app = create_app(settings)
    app.state.sender = BroadcastSender(
        port=settings.wol_port,
        primary_address=settings.broadcast,
        fallback_address=settings.fallback_broadcast,
        timeout=settings.send_timeout,
        socket_factory=sockets,
    )
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
