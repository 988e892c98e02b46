"""Session coordinator: the room state machine.

Each transport connection moves through ``unjoined -> joined -> left``.
Every public method of :class:`SessionCoordinator` is synchronous: it
validates the request, mutates the room and participant records, and
returns the list of :class:`Outbound` notifications that describe who
must be told what. Recipients are resolved from room membership at the
moment of the mutation. The socket layer delivers the messages only
after the method has returned, so on a single event loop no other
connection can observe or interleave with a half-applied change (a join
capacity check, a host re-election, a forced removal).

Admission failures are raised as :class:`~meetrelay.errors.AdmissionError`.
Every other kind of failure (non-host commands, stale participants,
events from connections that are not in a room) returns an empty list.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .. import config
from ..auth_utils import verify_password
from ..errors import (
    AlreadyJoined,
    IncorrectPassword,
    InvalidDisplayName,
    RoomFull,
    RoomLocked,
    RoomNotFound,
    SessionClosed,
)
from ..models import ChatMessage, ConnectionQuality, Participant, Room, Session, SessionState
from ..registry import RoomRegistry

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outbound:
    """One event to deliver to a fixed set of connections."""

    event: str
    data: Any
    to: tuple[str, ...]


def _pack(messages: Iterable[Outbound]) -> List[Outbound]:
    return [m for m in messages if m.to]


class SessionCoordinator:
    def __init__(self, registry: RoomRegistry) -> None:
        self.registry = registry
        self._sessions: Dict[str, Session] = {}

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def session(self, sid: str) -> Optional[Session]:
        return self._sessions.get(sid)

    def room_of(self, sid: str) -> Optional[Room]:
        session = self._sessions.get(sid)
        if session is None or session.state is not SessionState.joined:
            return None
        return self.registry.get(session.room_id)

    def _joined(self, sid: str, action: str) -> tuple[Optional[Session], Optional[Room]]:
        session = self._sessions.get(sid)
        if session is None or session.state is not SessionState.joined:
            log.debug("Ignoring %s from %s: not in a room", action, sid)
            return None, None
        room = self.registry.get(session.room_id)
        if room is None:
            log.debug("Ignoring %s from %s: room %s is gone", action, sid, session.room_id)
            return session, None
        return session, room

    def _host_room(self, sid: str, command: str) -> Optional[Room]:
        _, room = self._joined(sid, command)
        if room is None:
            return None
        caller = room.find(sid)
        if caller is None or not caller.is_host:
            log.info("Ignoring %s from non-host %s in room %s", command, sid, room.id)
            return None
        return room

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------
    def connect(self, sid: str) -> Session:
        return self._sessions.setdefault(sid, Session(connection_id=sid))

    def join(
        self,
        sid: str,
        room_id: str,
        display_name: str,
        password: Optional[str] = None,
    ) -> List[Outbound]:
        # Sessions are created only by the transport connect; a join that
        # arrives after the disconnect of its connection must not revive it.
        session = self._sessions.get(sid)
        if session is None:
            log.info("Refusing join to %s from unknown or disconnected %s", room_id, sid)
            raise SessionClosed()
        if session.state is SessionState.joined:
            raise AlreadyJoined()
        if session.state is SessionState.left:
            raise SessionClosed()

        name = (display_name or "").strip()[: config.MAX_DISPLAY_NAME_LENGTH].strip()
        if not name:
            raise InvalidDisplayName()

        room = self.registry.get(room_id)
        if room is None:
            log.info("%s tried to join missing room %s", name, room_id)
            raise RoomNotFound()
        if room.is_full:
            raise RoomFull()
        if room.has_password and not verify_password(password, room.password_hash):
            raise IncorrectPassword()
        if room.is_locked and not room.is_empty:
            raise RoomLocked()

        participant = Participant(connection_id=sid, display_name=name, is_host=room.is_empty)
        room.participants.append(participant)
        session.state = SessionState.joined
        session.room_id = room.id
        session.display_name = name

        log.info(
            "%s (%s) joined room %s. Total: %d%s",
            name, sid, room.id, len(room.participants), " [host]" if participant.is_host else "",
        )

        snapshot = room.snapshot()
        return _pack([
            Outbound(
                "room-joined",
                {
                    "roomId": room.id,
                    "self": participant.to_dict(),
                    "participants": snapshot,
                    "isHost": participant.is_host,
                    "chatHistory": [m.to_dict() for m in room.chat_history],
                    "maxCapacity": room.max_capacity,
                    "isLocked": room.is_locked,
                    "isRecording": room.is_recording,
                },
                (sid,),
            ),
            Outbound("user-joined", participant.to_dict(), room.participant_ids(exclude=sid)),
            Outbound("participants-updated", {"participants": snapshot}, room.participant_ids()),
        ])

    def leave(self, sid: str) -> List[Outbound]:
        """Explicit leave. Safe to call any number of times."""
        session = self._sessions.get(sid)
        if session is None or session.state is not SessionState.joined:
            return []
        return self._depart(session)

    def disconnect(self, sid: str) -> List[Outbound]:
        """Transport disconnect: leave if still joined, then forget the connection."""
        messages = self.leave(sid)
        self._sessions.pop(sid, None)
        return messages

    def _depart(self, session: Session) -> List[Outbound]:
        session.state = SessionState.left
        room = self.registry.get(session.room_id)
        if room is None:
            return []

        participant = room.find(session.connection_id)
        if participant is None:
            self.registry.remove_if_empty(room.id)
            return []

        room.participants.remove(participant)
        log.info(
            "%s left room %s. Remaining: %d",
            participant.display_name, room.id, len(room.participants),
        )

        remaining = room.participant_ids()
        messages = [
            Outbound("user-left", {"id": participant.connection_id, "name": participant.display_name}, remaining),
        ]
        if room.participants and room.host() is None:
            new_host = room.participants[0]
            new_host.is_host = True
            log.info("%s is now host of room %s", new_host.display_name, room.id)
            messages.append(Outbound("new-host", new_host.to_dict(), remaining))
        messages.append(Outbound("participants-updated", {"participants": room.snapshot()}, remaining))

        self.registry.remove_if_empty(room.id)
        return _pack(messages)

    # ------------------------------------------------------------------
    # Participant status
    # ------------------------------------------------------------------
    def _set_flag(self, sid: str, attr: str, value: bool, event: str, data: dict) -> List[Outbound]:
        _, room = self._joined(sid, event)
        if room is None:
            return []
        participant = room.find(sid)
        if participant is None:
            log.debug("%s: participant %s vanished from room %s", event, sid, room.id)
        else:
            setattr(participant, attr, value)
        return _pack([Outbound(event, data, room.participant_ids())])

    def toggle_audio(self, sid: str, is_muted: bool) -> List[Outbound]:
        is_muted = bool(is_muted)
        return self._set_flag(sid, "is_muted", is_muted, "user-audio-toggled",
                              {"userId": sid, "isMuted": is_muted})

    def toggle_video(self, sid: str, is_video_off: bool) -> List[Outbound]:
        is_video_off = bool(is_video_off)
        return self._set_flag(sid, "is_video_off", is_video_off, "user-video-toggled",
                              {"userId": sid, "isVideoOff": is_video_off})

    def raise_hand(self, sid: str, is_hand_raised: bool) -> List[Outbound]:
        is_hand_raised = bool(is_hand_raised)
        return self._set_flag(sid, "is_hand_raised", is_hand_raised, "user-hand-raised",
                              {"userId": sid, "isHandRaised": is_hand_raised})

    def start_screen_share(self, sid: str) -> List[Outbound]:
        return self._set_flag(sid, "is_screen_sharing", True, "screen-share-started", {"userId": sid})

    def stop_screen_share(self, sid: str) -> List[Outbound]:
        return self._set_flag(sid, "is_screen_sharing", False, "screen-share-stopped", {"userId": sid})

    def report_connection_quality(self, sid: str, level: str) -> List[Outbound]:
        try:
            quality = ConnectionQuality(level)
        except ValueError:
            log.debug("Ignoring unknown connection quality %r from %s", level, sid)
            return []
        _, room = self._joined(sid, "connection-quality")
        if room is None:
            return []
        participant = room.find(sid)
        if participant is None:
            return []
        participant.connection_quality = quality
        return _pack([
            Outbound("connection-quality", {"userId": sid, "quality": quality.value},
                     room.participant_ids(exclude=sid)),
        ])

    # ------------------------------------------------------------------
    # Chat and reactions
    # ------------------------------------------------------------------
    def send_reaction(self, sid: str, symbol: str) -> List[Outbound]:
        session, room = self._joined(sid, "send-reaction")
        if room is None or not symbol:
            return []
        return _pack([
            Outbound(
                "user-reaction",
                {"userId": sid, "userName": session.display_name, "reaction": symbol},
                room.participant_ids(),
            ),
        ])

    def chat_message(self, sid: str, text: str) -> List[Outbound]:
        session, room = self._joined(sid, "chat-message")
        if room is None:
            return []
        text = (text or "").strip()[: config.MAX_CHAT_MESSAGE_LENGTH]
        if not text:
            return []

        message = ChatMessage(
            id=uuid.uuid4().hex,
            sender_connection_id=sid,
            sender_name=session.display_name,
            text=text,
        )
        room.chat_history.append(message)
        return _pack([Outbound("chat-message", message.to_dict(), room.participant_ids())])

    # ------------------------------------------------------------------
    # Host commands
    # ------------------------------------------------------------------
    def mute_all(self, sid: str) -> List[Outbound]:
        room = self._host_room(sid, "mute-all")
        if room is None:
            return []
        targets = [p for p in room.participants if not p.is_host]
        for p in targets:
            p.is_muted = True
        log.info("Host %s muted %d participant(s) in room %s", sid, len(targets), room.id)
        return _pack([
            Outbound("host-muted-you", {"roomId": room.id}, tuple(p.connection_id for p in targets)),
            Outbound("participants-updated", {"participants": room.snapshot()}, room.participant_ids()),
        ])

    def mute_participant(self, sid: str, target_id: str) -> List[Outbound]:
        room = self._host_room(sid, "mute-participant")
        if room is None or target_id == sid:
            return []
        target = room.find(target_id)
        if target is None:
            log.debug("mute-participant: %s is not in room %s", target_id, room.id)
            return []
        target.is_muted = True
        return _pack([
            Outbound("host-muted-you", {"roomId": room.id}, (target_id,)),
            Outbound("participants-updated", {"participants": room.snapshot()}, room.participant_ids()),
        ])

    def remove_participant(self, sid: str, target_id: str) -> List[Outbound]:
        room = self._host_room(sid, "remove-participant")
        if room is None or target_id == sid:
            return []
        target = room.find(target_id)
        if target is None:
            log.debug("remove-participant: %s is not in room %s", target_id, room.id)
            return []

        log.info("Host %s removed %s from room %s", sid, target.display_name, room.id)
        messages = [Outbound("removed-by-host", {"roomId": room.id}, (target_id,))]
        messages.extend(self._depart(self._sessions[target_id]))
        return _pack(messages)

    def _set_locked(self, sid: str, locked: bool) -> List[Outbound]:
        room = self._host_room(sid, "lock-room" if locked else "unlock-room")
        if room is None:
            return []
        room.is_locked = locked
        log.info("Room %s %s", room.id, "locked" if locked else "unlocked")
        return _pack([
            Outbound("room-lock-changed", {"roomId": room.id, "isLocked": locked}, room.participant_ids()),
        ])

    def lock_room(self, sid: str) -> List[Outbound]:
        return self._set_locked(sid, True)

    def unlock_room(self, sid: str) -> List[Outbound]:
        return self._set_locked(sid, False)

    def _set_recording(self, sid: str, recording: bool) -> List[Outbound]:
        event = "recording-started" if recording else "recording-stopped"
        room = self._host_room(sid, "start-recording" if recording else "stop-recording")
        if room is None:
            return []
        room.is_recording = recording
        return _pack([Outbound(event, {"roomId": room.id}, room.participant_ids())])

    def start_recording(self, sid: str) -> List[Outbound]:
        return self._set_recording(sid, True)

    def stop_recording(self, sid: str) -> List[Outbound]:
        return self._set_recording(sid, False)
