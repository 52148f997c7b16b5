"""
Room directory for the server.

Maps each room name to its member set and optional password. A room exists
only while it has members: removing the last member deletes it in the same
call, so an empty room is never observable between events.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

logger = logging.getLogger(__name__)


@dataclass
class Room:
    """
    A named broadcast group.

    Attributes:
        name: Unique room name
        members: Connection ids of the members
        password: Shared password, empty when the room is open
    """
    name: str
    members: Set[str] = field(default_factory=set)
    password: str = ""

    @property
    def is_protected(self) -> bool:
        return bool(self.password)


class RoomDirectory:
    """In-memory room directory keyed by room name."""

    def __init__(self):
        self._rooms: Dict[str, Room] = {}

    def ensure(self, name: str) -> Room:
        """Create an empty room if absent. Idempotent."""
        room = self._rooms.get(name)
        if room is None:
            room = Room(name=name)
            self._rooms[name] = room
            logger.info("Room %r created", name)
        return room

    def add_member(self, name: str, conn_id: str) -> Room:
        """Add a member, creating the room first if needed."""
        room = self.ensure(name)
        room.members.add(conn_id)
        return room

    def remove_member(self, name: str, conn_id: str) -> bool:
        """
        Remove a member and delete the room if it became empty.

        Returns:
            True if the room was deleted
        """
        room = self._rooms.get(name)
        if room is None:
            return False
        room.members.discard(conn_id)
        if not room.members:
            del self._rooms[name]
            logger.info("Room %r deleted (empty)", name)
            return True
        return False

    def members(self, name: str) -> Set[str]:
        """Copy of the member set; empty if the room does not exist."""
        room = self._rooms.get(name)
        return set(room.members) if room else set()

    def list_rooms(self) -> List[str]:
        """Sorted names of all rooms that have members."""
        return sorted(name for name, room in self._rooms.items() if room.members)

    def set_password(self, name: str, password: str) -> bool:
        """
        Protect a room with a password.

        The password is set once; it cannot be replaced while the room exists.

        Returns:
            True if the password was stored
        """
        room = self._rooms.get(name)
        if room is None or not password:
            return False
        if room.password:
            logger.debug("Room %r already has a password, keeping it", name)
            return False
        room.password = password
        logger.info("Room %r is now password protected", name)
        return True

    def required_password(self, name: str) -> str:
        """Password required to join, empty string if none."""
        room = self._rooms.get(name)
        return room.password if room else ""

    def get(self, name: str) -> Optional[Room]:
        return self._rooms.get(name)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, name: str) -> bool:
        return name in self._rooms


__all__ = [
    'Room',
    'RoomDirectory',
]
