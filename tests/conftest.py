"""
Pytest configuration for the signaling relay tests.

Every test gets its own registry, coordinator and relay so that room
state never leaks between tests; the socket tests swap them into
``meetrelay.deps`` for the duration of the test.
"""

from unittest.mock import AsyncMock

import pytest

from meetrelay import deps, sockets
from meetrelay.registry import RoomRegistry
from meetrelay.services.coordinator import SessionCoordinator
from meetrelay.services.relay import SignalingRelay


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def coordinator(registry):
    return SessionCoordinator(registry)


@pytest.fixture
def relay(coordinator):
    return SignalingRelay(coordinator)


@pytest.fixture
def room(registry):
    """An open room with capacity 3 and no password."""
    return registry.create("ROOM01", "Alice", 3)


@pytest.fixture
def wired(monkeypatch, registry, coordinator, relay):
    """Point the socket handlers at the test instances and capture emits."""
    monkeypatch.setattr(deps, "registry", registry)
    monkeypatch.setattr(deps, "coordinator", coordinator)
    monkeypatch.setattr(deps, "relay", relay)
    emit = AsyncMock()
    monkeypatch.setattr(sockets.sio, "emit", emit)
    return emit


def events(messages, name):
    """All outbound messages with the given event name."""
    return [m for m in messages if m.event == name]


def one(messages, name):
    found = events(messages, name)
    assert len(found) == 1, f"expected exactly one {name!r}, got {len(found)}"
    return found[0]
