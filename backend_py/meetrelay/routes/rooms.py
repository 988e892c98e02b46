from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from .. import config
from ..deps import get_registry
from ..errors import RoomIdExhausted
from ..registry import RoomRegistry
from ..schemas import CreateRoomRequest, CreateRoomResponse, RoomSummary

log = logging.getLogger(__name__)

router = APIRouter(tags=["rooms"])


def _invite_link(request: Request, room_id: str) -> str:
    """Build the shareable room URL.

    Public hosts are always linked over https because browsers refuse
    camera access on plain http anywhere but localhost.
    """
    if config.PUBLIC_BASE_URL:
        return f"{config.PUBLIC_BASE_URL.rstrip('/')}/room/{room_id}"
    host = request.headers.get("host") or request.url.netloc
    scheme = request.url.scheme if "localhost" in host or host.startswith("127.") else "https"
    return f"{scheme}://{host}/room/{room_id}"


@router.post("/create-room", response_model=CreateRoomResponse, response_model_by_alias=True)
def create_room(
    body: CreateRoomRequest,
    request: Request,
    registry: RoomRegistry = Depends(get_registry),
):
    try:
        room = registry.create_room(body.owner_name.strip(), body.max_capacity, body.password or None)
    except RoomIdExhausted as e:
        log.error("Room creation failed: %s", e)
        raise HTTPException(status_code=503, detail="No room id available, try again")

    return CreateRoomResponse(
        room_id=room.id,
        invite_link=_invite_link(request, room.id),
        max_capacity=room.max_capacity,
        has_password=room.has_password,
    )


@router.get("/rooms/{room_id}", response_model=RoomSummary, response_model_by_alias=True)
def get_room(room_id: str, registry: RoomRegistry = Depends(get_registry)):
    room = registry.get(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return RoomSummary.model_validate(room.to_summary())
