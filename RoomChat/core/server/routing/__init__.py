"""
Message delivery and room broadcasting.

Delivery is fire-and-forget: each recipient's transport queues the frame
and a failure for one recipient never affects the others.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional

from RoomChat.core.message.protocol import serialize
from RoomChat.core.server.state import ChatState

logger = logging.getLogger(__name__)


class DeliveryStatus(Enum):
    """Status of message delivery."""
    DELIVERED = auto()
    FAILED = auto()
    USER_OFFLINE = auto()


@dataclass
class DeliveryResult:
    """Result of message delivery attempt."""
    status: DeliveryStatus
    conn_id: str
    error: Optional[str] = None


class BroadcastDispatcher:
    """
    Delivers payloads to single connections and to whole rooms.

    Frames are handed to each transport in call order, and transports keep
    per-connection FIFO order, so messages for one room reach every member
    in the order they were broadcast.
    """

    def __init__(self, state: ChatState):
        """
        Initialize dispatcher.

        Args:
            state: Shared registry and directory
        """
        self._state = state

    def send(self, conn_id: str, payload: Dict[str, Any]) -> DeliveryResult:
        """Send a payload to one connection."""
        return self._deliver(conn_id, serialize(payload))

    def broadcast(
        self,
        room: str,
        payload: Dict[str, Any],
        exclude: Optional[str] = None
    ) -> Dict[str, DeliveryResult]:
        """
        Send a payload to every member of a room.

        Args:
            room: Room name
            payload: Outbound packet, serialized once for all recipients
            exclude: Connection id to skip (usually the originator)

        Returns:
            Delivery results by connection id
        """
        results: Dict[str, DeliveryResult] = {}
        members = self._state.directory.members(room)
        if not members:
            return results

        message = serialize(payload)
        for conn_id in members:
            if conn_id == exclude:
                continue
            results[conn_id] = self._deliver(conn_id, message)

        logger.debug(
            "Broadcast %s to room %r: %d recipient(s)",
            payload.get("type"), room, len(results)
        )
        return results

    def _deliver(self, conn_id: str, message: str) -> DeliveryResult:
        record = self._state.registry.get(conn_id)
        transport = record.transport if record else None
        if transport is None or not transport.is_open():
            return DeliveryResult(DeliveryStatus.USER_OFFLINE, conn_id)

        try:
            if transport.send(message):
                return DeliveryResult(DeliveryStatus.DELIVERED, conn_id)
            return DeliveryResult(DeliveryStatus.FAILED, conn_id, error="Send failed")
        except Exception as e:
            logger.exception("Error sending message to %s: %s", conn_id, e)
            return DeliveryResult(DeliveryStatus.FAILED, conn_id, error=str(e))


__all__ = [
    'BroadcastDispatcher',
    'DeliveryResult',
    'DeliveryStatus',
]
