"""Errors raised by the room registry and the session coordinator.

Only admission failures ever reach a client: they are reported to the
connection that attempted the join and leave it free to try again.
Everything else that can go wrong while a connection is in a room
(non-host commands, vanished participants, relay misses) degrades to a
logged no-op instead of an exception.
"""

from __future__ import annotations


class MeetRelayError(Exception):
    """Base class for all errors raised by this package."""


class DuplicateRoomId(MeetRelayError):
    def __init__(self, room_id: str):
        super().__init__(f"Room id already in use: {room_id}")
        self.room_id = room_id


class RoomIdExhausted(MeetRelayError):
    """No free room code could be generated within the retry budget."""


class AdmissionError(MeetRelayError):
    """A join attempt was refused.

    ``reason`` is the stable, machine readable name sent to the client in
    the ``join-error`` event; ``message`` is the human readable text.
    """

    reason = "AdmissionError"
    message = "Unable to join room"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"reason": self.reason, "message": self.message}


class RoomNotFound(AdmissionError):
    reason = "RoomNotFound"
    message = "Room not found"


class RoomFull(AdmissionError):
    reason = "RoomFull"
    message = "Room is full"


class RoomLocked(AdmissionError):
    reason = "RoomLocked"
    message = "Room is locked by the host"


class IncorrectPassword(AdmissionError):
    reason = "IncorrectPassword"
    message = "Incorrect password"


class InvalidDisplayName(AdmissionError):
    reason = "InvalidDisplayName"
    message = "Please enter your name"


class InvalidRequest(AdmissionError):
    reason = "InvalidRequest"
    message = "Malformed join request"


class AlreadyJoined(AdmissionError):
    reason = "AlreadyJoined"
    message = "This connection has already joined a room"


class SessionClosed(AdmissionError):
    reason = "SessionClosed"
    message = "This connection has left its room; reconnect to join again"
