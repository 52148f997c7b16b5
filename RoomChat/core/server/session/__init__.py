"""
Connection registry for the server.

Tracks every live connection by its opaque connection id together with the
display name, the current room and the liveness flag.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional

from RoomChat.config import config
from RoomChat.core.exceptions import DuplicateConnectionError
from RoomChat.core.server.interfaces import TransportConnection

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Protocol state of a connection."""
    UNIDENTIFIED = auto()  # Opened, no hello yet
    IDLE = auto()  # Identified, not in a room
    IN_ROOM = auto()  # Member of a room


@dataclass
class ConnectionRecord:
    """
    Represents one live transport session.

    Attributes:
        conn_id: Opaque connection identifier issued at accept time
        transport: Transport used to reach the client (None in bare registries)
        username: Display name set by ``hello``, None until then
        room: Name of the current room, None when not in a room
        is_alive: Liveness flag, cleared by each probe and set by acknowledgments
    """
    conn_id: str
    transport: Optional[TransportConnection] = None
    username: Optional[str] = None
    room: Optional[str] = None
    is_alive: bool = True

    @property
    def display_name(self) -> str:
        """Display name, falling back to the placeholder before ``hello``."""
        return self.username or config.DEFAULT_USERNAME

    @property
    def state(self) -> ConnectionState:
        if self.room is not None:
            return ConnectionState.IN_ROOM
        if self.username is None:
            return ConnectionState.UNIDENTIFIED
        return ConnectionState.IDLE


class ConnectionRegistry:
    """
    In-memory registry of live connections.

    All mutations happen on the event loop thread; no locking is needed.
    """

    def __init__(self):
        self._connections: Dict[str, ConnectionRecord] = {}

    def register(
        self,
        conn_id: str,
        transport: Optional[TransportConnection] = None
    ) -> ConnectionRecord:
        """
        Register a new connection with no identity and no room.

        Args:
            conn_id: Connection identifier
            transport: Transport to deliver outbound packets through

        Returns:
            Created ConnectionRecord

        Raises:
            DuplicateConnectionError: If the id is already registered
        """
        if conn_id in self._connections:
            raise DuplicateConnectionError(conn_id)
        record = ConnectionRecord(conn_id=conn_id, transport=transport)
        self._connections[conn_id] = record
        logger.debug("Registered connection %s (total: %d)", conn_id, len(self._connections))
        return record

    def set_identity(self, conn_id: str, name: str) -> bool:
        record = self._connections.get(conn_id)
        if record is None:
            return False
        record.username = name
        return True

    def set_room(self, conn_id: str, room: Optional[str]) -> bool:
        record = self._connections.get(conn_id)
        if record is None:
            return False
        record.room = room
        return True

    def get(self, conn_id: str) -> Optional[ConnectionRecord]:
        return self._connections.get(conn_id)

    def remove(self, conn_id: str) -> Optional[ConnectionRecord]:
        """
        Remove a connection. Removing an unknown id is a no-op.

        Returns:
            The removed record, or None if it was not registered
        """
        record = self._connections.pop(conn_id, None)
        if record is not None:
            logger.debug("Removed connection %s (total: %d)", conn_id, len(self._connections))
        return record

    def mark_alive(self, conn_id: str) -> bool:
        """Record a liveness acknowledgment."""
        record = self._connections.get(conn_id)
        if record is None:
            return False
        record.is_alive = True
        return True

    def connections(self) -> List[ConnectionRecord]:
        """Snapshot of all registered connections."""
        return list(self._connections.values())

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, conn_id: str) -> bool:
        return conn_id in self._connections


__all__ = [
    'ConnectionState',
    'ConnectionRecord',
    'ConnectionRegistry',
]
