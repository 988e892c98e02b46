"""Socket.IO server definition.

This module instantiates the Socket.IO server used for real-time
signaling and binds every client event to the session coordinator or
the signaling relay. Handlers do three things: parse the payload, call
the synchronous coordinator operation, and deliver the resulting
notifications. Room state is never touched across an ``await``.

Delivery is fire-and-forget. A recipient that has gone away simply
misses the message; failures are logged and never retried.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Type, TypeVar

import socketio
from pydantic import BaseModel, ValidationError

from . import config, deps
from .errors import AdmissionError, InvalidRequest
from .schemas import (
    AudioPayload,
    ChatPayload,
    HandPayload,
    JoinRoomPayload,
    QualityPayload,
    ReactionPayload,
    SignalPayload,
    TargetPayload,
    VideoPayload,
)
from .services.coordinator import Outbound
from .services.relay import SignalKind

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# ``cors_allowed_origins`` should be restricted to the frontend domain
# in production via MEETRELAY_CORS_ORIGINS.
sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*" if config.CORS_ORIGINS == ["*"] else config.CORS_ORIGINS,
    ping_timeout=config.PING_TIMEOUT,
    ping_interval=config.PING_INTERVAL,
)


async def deliver(messages: Iterable[Outbound]) -> None:
    for message in messages:
        for sid in message.to:
            try:
                await sio.emit(message.event, message.data, to=sid)
            except Exception:
                log.warning("Failed to deliver %s to %s", message.event, sid, exc_info=True)


def _parse(model: Type[M], data, event: str, sid: str) -> Optional[M]:
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as e:
        log.info("Dropping malformed %s from %s: %s", event, sid, e.errors())
        return None


async def _run(sid: str, event: str, operation: Callable[..., List[Outbound]], *args) -> None:
    try:
        messages = operation(sid, *args)
    except Exception:
        log.exception("Unhandled error while processing %s from %s", event, sid)
        return
    await deliver(messages)


# --------------------------
# Connection lifecycle
# --------------------------
@sio.event
async def connect(sid, environ, auth=None):
    """Called when a client connects to the socket server."""
    deps.coordinator.connect(sid)
    log.info("Socket connected: %s", sid)


@sio.event
async def disconnect(sid, *args):
    """Called when a client disconnects; runs the same path as leave-room."""
    log.info("Socket disconnected: %s", sid)
    await _run(sid, "disconnect", deps.coordinator.disconnect)


@sio.on("join-room")
async def join_room(sid, data=None):
    payload = _parse(JoinRoomPayload, data, "join-room", sid)
    if payload is None:
        await sio.emit("join-error", InvalidRequest().to_dict(), to=sid)
        return

    try:
        messages = deps.coordinator.join(sid, payload.room_id, payload.display_name, payload.password)
    except AdmissionError as e:
        log.info("Join refused for %s on room %s: %s", sid, payload.room_id, e.reason)
        await sio.emit("join-error", e.to_dict(), to=sid)
        return
    await deliver(messages)


@sio.on("leave-room")
async def leave_room(sid, data=None):
    await _run(sid, "leave-room", deps.coordinator.leave)


# --------------------------
# Negotiation relay
# --------------------------
async def _relay(sid: str, kind: SignalKind, data) -> None:
    payload = _parse(SignalPayload, data, kind.event, sid)
    if payload is None:
        return
    await _run(sid, kind.event, deps.relay.relay, kind, payload.target, payload.payload)


@sio.on("offer")
async def offer(sid, data=None):
    await _relay(sid, SignalKind.offer, data)


@sio.on("answer")
async def answer(sid, data=None):
    await _relay(sid, SignalKind.answer, data)


@sio.on("ice-candidate")
async def ice_candidate(sid, data=None):
    await _relay(sid, SignalKind.candidate, data)


# --------------------------
# Chat, status and reactions
# --------------------------
@sio.on("chat-message")
async def chat_message(sid, data=None):
    payload = _parse(ChatPayload, data, "chat-message", sid)
    if payload is not None:
        await _run(sid, "chat-message", deps.coordinator.chat_message, payload.text)


@sio.on("toggle-audio")
async def toggle_audio(sid, data=None):
    payload = _parse(AudioPayload, data, "toggle-audio", sid)
    if payload is not None:
        await _run(sid, "toggle-audio", deps.coordinator.toggle_audio, payload.is_muted)


@sio.on("toggle-video")
async def toggle_video(sid, data=None):
    payload = _parse(VideoPayload, data, "toggle-video", sid)
    if payload is not None:
        await _run(sid, "toggle-video", deps.coordinator.toggle_video, payload.is_video_off)


@sio.on("raise-hand")
async def raise_hand(sid, data=None):
    payload = _parse(HandPayload, data, "raise-hand", sid)
    if payload is not None:
        await _run(sid, "raise-hand", deps.coordinator.raise_hand, payload.is_hand_raised)


@sio.on("start-screen-share")
async def start_screen_share(sid, data=None):
    await _run(sid, "start-screen-share", deps.coordinator.start_screen_share)


@sio.on("stop-screen-share")
async def stop_screen_share(sid, data=None):
    await _run(sid, "stop-screen-share", deps.coordinator.stop_screen_share)


@sio.on("send-reaction")
async def send_reaction(sid, data=None):
    payload = _parse(ReactionPayload, data, "send-reaction", sid)
    if payload is not None:
        await _run(sid, "send-reaction", deps.coordinator.send_reaction, payload.reaction)


@sio.on("connection-quality")
async def connection_quality(sid, data=None):
    payload = _parse(QualityPayload, data, "connection-quality", sid)
    if payload is not None:
        await _run(sid, "connection-quality", deps.coordinator.report_connection_quality, payload.quality)


# --------------------------
# Host controls
# --------------------------
@sio.on("mute-all")
async def mute_all(sid, data=None):
    await _run(sid, "mute-all", deps.coordinator.mute_all)


@sio.on("mute-participant")
async def mute_participant(sid, data=None):
    payload = _parse(TargetPayload, data, "mute-participant", sid)
    if payload is not None:
        await _run(sid, "mute-participant", deps.coordinator.mute_participant, payload.target)


@sio.on("remove-participant")
async def remove_participant(sid, data=None):
    payload = _parse(TargetPayload, data, "remove-participant", sid)
    if payload is not None:
        await _run(sid, "remove-participant", deps.coordinator.remove_participant, payload.target)


@sio.on("lock-room")
async def lock_room(sid, data=None):
    await _run(sid, "lock-room", deps.coordinator.lock_room)


@sio.on("unlock-room")
async def unlock_room(sid, data=None):
    await _run(sid, "unlock-room", deps.coordinator.unlock_room)


@sio.on("start-recording")
async def start_recording(sid, data=None):
    await _run(sid, "start-recording", deps.coordinator.start_recording)


@sio.on("stop-recording")
async def stop_recording(sid, data=None):
    await _run(sid, "stop-recording", deps.coordinator.stop_recording)
