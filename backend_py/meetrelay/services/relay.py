"""Pass-through relay for peer negotiation messages.

Offers, answers and ICE candidates are produced and consumed by the
browsers. The server only checks that the sender is in a room and that
the addressed connection is still connected, then forwards the payload as-is.
A miss is logged and dropped; the peer notices through its own
negotiation timeout.
"""

from __future__ import annotations

import logging
from enum import Enum as PyEnum
from typing import Any, List

from ..models import SessionState
from .coordinator import Outbound, SessionCoordinator

log = logging.getLogger(__name__)


class SignalKind(str, PyEnum):
    offer = "offer"
    answer = "answer"
    candidate = "candidate"

    @property
    def event(self) -> str:
        return "ice-candidate" if self is SignalKind.candidate else self.value


class SignalingRelay:
    def __init__(self, coordinator: SessionCoordinator) -> None:
        self.coordinator = coordinator

    def relay(self, sender_sid: str, kind: SignalKind | str, target: str | None, payload: Any) -> List[Outbound]:
        kind = SignalKind(kind)

        sender = self.coordinator.session(sender_sid)
        if sender is None or sender.state is not SessionState.joined:
            log.debug("Dropping %s from %s: sender is not in a room", kind.value, sender_sid)
            return []

        recipient = self.coordinator.session(target) if target else None
        if recipient is None or target == sender_sid:
            log.info("Dropping %s from %s: target %s is not connected", kind.value, sender_sid, target)
            return []

        return [
            Outbound(
                kind.event,
                {"payload": payload, "senderId": sender_sid, "senderName": sender.display_name},
                (target,),
            )
        ]
