"""Runtime settings for the meeting relay.

Every value is read from the environment once, at import time, with a
default that is suitable for local development. Rooms live in memory
only, so none of these settings survive a restart of the process.
"""

from __future__ import annotations

import os

DEFAULT_MAX_CAPACITY = int(os.getenv("MEETRELAY_DEFAULT_MAX_CAPACITY", "10"))
MAX_CAPACITY_LIMIT = int(os.getenv("MEETRELAY_MAX_CAPACITY_LIMIT", "50"))

# Chat history is kept per room as a ring buffer of this many messages.
MAX_CHAT_HISTORY = int(os.getenv("MEETRELAY_MAX_CHAT_HISTORY", "100"))
MAX_CHAT_MESSAGE_LENGTH = int(os.getenv("MEETRELAY_MAX_CHAT_MESSAGE_LENGTH", "500"))
MAX_DISPLAY_NAME_LENGTH = int(os.getenv("MEETRELAY_MAX_DISPLAY_NAME_LENGTH", "50"))
MAX_PASSWORD_LENGTH = 100

ROOM_ID_LENGTH = int(os.getenv("MEETRELAY_ROOM_ID_LENGTH", "6"))
ROOM_ID_MAX_ATTEMPTS = int(os.getenv("MEETRELAY_ROOM_ID_MAX_ATTEMPTS", "20"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("MEETRELAY_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
PUBLIC_BASE_URL = os.getenv("MEETRELAY_PUBLIC_BASE_URL") or None

PING_TIMEOUT = int(os.getenv("MEETRELAY_PING_TIMEOUT", "25"))
PING_INTERVAL = int(os.getenv("MEETRELAY_PING_INTERVAL", "20"))

LOG_LEVEL = os.getenv("MEETRELAY_LOG_LEVEL", "INFO").upper()
