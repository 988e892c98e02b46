"""Pydantic models for HTTP bodies and inbound socket payloads.

Field names are snake_case in Python and camelCase on the wire; both
spellings are accepted when parsing.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from . import config


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --------------------------
# HTTP
# --------------------------
class CreateRoomRequest(CamelModel):
    owner_name: str = Field(..., min_length=1, max_length=config.MAX_DISPLAY_NAME_LENGTH)
    max_capacity: int = Field(config.DEFAULT_MAX_CAPACITY, ge=1, le=config.MAX_CAPACITY_LIMIT)
    password: Optional[str] = Field(None, max_length=config.MAX_PASSWORD_LENGTH)


class CreateRoomResponse(CamelModel):
    success: bool = True
    room_id: str
    invite_link: str
    max_capacity: int
    has_password: bool


class RoomSummary(CamelModel):
    room_id: str
    owner_name: str
    max_capacity: int
    participant_count: int
    is_locked: bool
    has_password: bool
    is_recording: bool


# --------------------------
# Socket events
# --------------------------
class JoinRoomPayload(CamelModel):
    room_id: str = Field(..., min_length=1)
    display_name: str = ""
    password: Optional[str] = None


class SignalPayload(CamelModel):
    target: str = Field(..., min_length=1)
    payload: Any = None


class ChatPayload(CamelModel):
    text: str = ""


class AudioPayload(CamelModel):
    is_muted: bool


class VideoPayload(CamelModel):
    is_video_off: bool


class HandPayload(CamelModel):
    is_hand_raised: bool


class ReactionPayload(CamelModel):
    reaction: str = Field(..., min_length=1, max_length=32)


class TargetPayload(CamelModel):
    target: str = Field(..., min_length=1)


class QualityPayload(CamelModel):
    quality: str
