# backend_py/meetrelay/deps.py
from __future__ import annotations

from .registry import RoomRegistry
from .services.coordinator import SessionCoordinator
from .services.relay import SignalingRelay

# One in-memory authority per process. The socket handlers and the HTTP
# routes share these instances; tests build their own.
registry = RoomRegistry()
coordinator = SessionCoordinator(registry)
relay = SignalingRelay(coordinator)


def get_registry() -> RoomRegistry:
    return registry
