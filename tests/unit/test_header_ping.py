"""Tests for the header's connection checks."""

from __future__ import annotations

from vimongo.db.dao import ServerStatus
from vimongo.exceptions import BackendError, PingError
from vimongo.ui.widgets.header import (
    PING_BACKOFF,
    PING_INTERVAL,
    STATUS_ACTIVE,
    STATUS_INACTIVE,
    STATUS_UNAUTHORIZED,
    check_connection,
    next_ping_interval,
)


def test_interval_resets_on_success():
    assert next_ping_interval(PING_INTERVAL + 3 * PING_BACKOFF, ok=True) == PING_INTERVAL


def test_interval_grows_on_failure():
    interval = PING_INTERVAL
    for _ in range(3):
        interval = next_ping_interval(interval, ok=False)
    assert interval == PING_INTERVAL + 3 * PING_BACKOFF


def test_active_server(fake_dao):
    status, server = check_connection(fake_dao)
    assert status == STATUS_ACTIVE
    assert server == ServerStatus(host="localhost:27017", version="7.0.5", uptime=42, current_connections=3)


def test_unreachable_server(fake_dao):
    fake_dao.ping_error = PingError("connection refused")
    assert check_connection(fake_dao) == (STATUS_INACTIVE, None)


def test_unauthorized_server(fake_dao):
    fake_dao.ping_error = PingError("Command ping requires authentication: Unauthorized")
    assert check_connection(fake_dao) == (STATUS_UNAUTHORIZED, None)


def test_server_status_refused(fake_dao, monkeypatch):
    def refuse():
        raise BackendError("server status", "not authorized on admin")

    monkeypatch.setattr(fake_dao, "get_server_status", refuse)
    assert check_connection(fake_dao) == (STATUS_ACTIVE, None)
