"""
Shared server state.

One ChatState is built per server and handed to the router, the dispatcher
and the liveness monitor. It owns the two id-indexed tables and keeps them
consistent: every method that moves a connection between rooms updates the
directory and the registry in the same call.
"""

import logging
from typing import Optional

from RoomChat.core.server.rooms import RoomDirectory
from RoomChat.core.server.session import ConnectionRegistry

logger = logging.getLogger(__name__)


class ChatState:
    """Connection registry and room directory for one server instance."""

    def __init__(
        self,
        registry: Optional[ConnectionRegistry] = None,
        directory: Optional[RoomDirectory] = None
    ):
        self.registry = registry or ConnectionRegistry()
        self.directory = directory or RoomDirectory()

    def move_to_room(self, conn_id: str, room: str) -> Optional[str]:
        """
        Make ``room`` the connection's only room.

        Leaves the current room first (deleting it if it empties), then joins
        ``room``, creating it if needed. Moving into the current room is a no-op.

        Returns:
            The room that was left, or None
        """
        record = self.registry.get(conn_id)
        if record is None:
            return None
        previous = record.room
        if previous == room:
            return None
        if previous is not None:
            self.directory.remove_member(previous, conn_id)
        self.directory.add_member(room, conn_id)
        self.registry.set_room(conn_id, room)
        logger.debug("Connection %s moved %r -> %r", conn_id, previous, room)
        return previous

    def leave_room(self, conn_id: str) -> Optional[str]:
        """
        Remove the connection from its current room.

        Returns:
            The room that was left, or None
        """
        record = self.registry.get(conn_id)
        if record is None or record.room is None:
            return None
        previous = record.room
        self.directory.remove_member(previous, conn_id)
        self.registry.set_room(conn_id, None)
        return previous

    def drop(self, conn_id: str) -> None:
        """Forget a connection entirely. Safe to call more than once."""
        self.leave_room(conn_id)
        self.registry.remove(conn_id)
