"""Signaling relay for browser video meetings.

This package exposes the ASGI application via ``meetrelay.main.asgi_app``
which combines a FastAPI instance (room creation and lookup) and a
Socket.IO server (room membership, chat, host controls and the
offer/answer/candidate relay) into a single ASGI app. All room state
is held in memory by one process; media never passes through here.
"""

from __future__ import annotations

# Expose the ASGI application at package level so that
# `uvicorn meetrelay:asgi_app` can locate it.
from .main import asgi_app  # noqa: F401
