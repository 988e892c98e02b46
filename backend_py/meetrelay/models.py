from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Deque, List, Optional

from . import config


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConnectionQuality(str, PyEnum):
    good = "good"
    fair = "fair"
    poor = "poor"


class SessionState(str, PyEnum):
    unjoined = "unjoined"
    joined = "joined"
    left = "left"


@dataclass
class Participant:
    connection_id: str
    display_name: str
    joined_at: datetime = field(default_factory=_utcnow)
    is_host: bool = False
    is_muted: bool = False
    is_video_off: bool = False
    is_hand_raised: bool = False
    is_screen_sharing: bool = False
    connection_quality: ConnectionQuality = ConnectionQuality.good

    def to_dict(self) -> dict:
        return {
            "id": self.connection_id,
            "name": self.display_name,
            "joinedAt": self.joined_at.isoformat(),
            "isHost": self.is_host,
            "isMuted": self.is_muted,
            "isVideoOff": self.is_video_off,
            "isHandRaised": self.is_hand_raised,
            "isScreenSharing": self.is_screen_sharing,
            "connectionQuality": self.connection_quality.value,
        }


@dataclass
class ChatMessage:
    id: str
    sender_connection_id: str
    sender_name: str
    text: str
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "senderId": self.sender_connection_id,
            "senderName": self.sender_name,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }


def _chat_buffer() -> Deque[ChatMessage]:
    return deque(maxlen=config.MAX_CHAT_HISTORY)


@dataclass
class Room:
    """One meeting: its members in join order plus room level settings.

    ``participants`` order matters, the first entry is the next in line
    for host whenever the current host leaves. ``password_hash`` is never
    sent to clients.
    """

    id: str
    owner_name: str
    max_capacity: int
    password_hash: Optional[str] = None
    participants: List[Participant] = field(default_factory=list)
    is_locked: bool = False
    is_recording: bool = False
    chat_history: Deque[ChatMessage] = field(default_factory=_chat_buffer)
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def is_empty(self) -> bool:
        return not self.participants

    @property
    def is_full(self) -> bool:
        return len(self.participants) >= self.max_capacity

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None

    def find(self, connection_id: str) -> Optional[Participant]:
        for p in self.participants:
            if p.connection_id == connection_id:
                return p
        return None

    def host(self) -> Optional[Participant]:
        for p in self.participants:
            if p.is_host:
                return p
        return None

    def participant_ids(self, exclude: Optional[str] = None) -> tuple[str, ...]:
        return tuple(p.connection_id for p in self.participants if p.connection_id != exclude)

    def snapshot(self) -> list[dict]:
        return [p.to_dict() for p in self.participants]

    def to_summary(self) -> dict:
        return {
            "roomId": self.id,
            "ownerName": self.owner_name,
            "maxCapacity": self.max_capacity,
            "participantCount": len(self.participants),
            "isLocked": self.is_locked,
            "hasPassword": self.has_password,
            "isRecording": self.is_recording,
        }


@dataclass
class Session:
    """What the coordinator knows about one transport connection."""

    connection_id: str
    state: SessionState = SessionState.unjoined
    room_id: Optional[str] = None
    display_name: Optional[str] = None
