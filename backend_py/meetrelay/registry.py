"""In-memory room registry.

The registry is the single authority for which rooms exist. It is owned
by one process and mutated only from the event loop thread, so every
method here runs to completion without yielding and needs no lock.
"""

from __future__ import annotations

import logging
import secrets
import string
from typing import Dict, List, Optional

from . import config
from .auth_utils import hash_password
from .errors import DuplicateRoomId, RoomIdExhausted
from .models import Room

log = logging.getLogger(__name__)

ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_room_id(length: int | None = None) -> str:
    """Return a short upper case code such as ``K7Q2ZD``."""
    length = length or config.ROOM_ID_LENGTH
    return "".join(secrets.choice(ROOM_ID_ALPHABET) for _ in range(length))


class RoomRegistry:
    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def create(
        self,
        room_id: str,
        owner_name: str,
        max_capacity: int,
        password: Optional[str] = None,
    ) -> Room:
        if room_id in self._rooms:
            raise DuplicateRoomId(room_id)
        if isinstance(max_capacity, bool) or not isinstance(max_capacity, int) or max_capacity < 1:
            raise ValueError(f"max_capacity must be a positive integer, got {max_capacity!r}")

        room = Room(
            id=room_id,
            owner_name=owner_name,
            max_capacity=max_capacity,
            password_hash=hash_password(password) if password else None,
        )
        self._rooms[room_id] = room
        log.info("Room created: %s by %s (capacity %d)", room_id, owner_name, max_capacity)
        return room

    def create_room(
        self,
        owner_name: str,
        max_capacity: int,
        password: Optional[str] = None,
    ) -> Room:
        """Create a room under a freshly generated code.

        Codes are short, so a collision with a live room is retried with a
        new code rather than surfaced to the caller.
        """
        for _ in range(config.ROOM_ID_MAX_ATTEMPTS):
            try:
                return self.create(generate_room_id(), owner_name, max_capacity, password)
            except DuplicateRoomId as e:
                log.debug("Room id collision on %s, retrying", e.room_id)
        raise RoomIdExhausted(
            f"Could not allocate a room id after {config.ROOM_ID_MAX_ATTEMPTS} attempts"
        )

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def remove_if_empty(self, room_id: str) -> bool:
        room = self._rooms.get(room_id)
        if room is None or not room.is_empty:
            return False
        del self._rooms[room_id]
        log.info("Room %s deleted", room_id)
        return True
