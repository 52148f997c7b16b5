"""
Packet handlers for the server.

Each inbound packet type has one handler. Handlers validate the packet
against the current state, apply the state transition and emit replies and
broadcasts. A refused request is signalled by raising ProtocolError; the
router turns it into an ``error`` reply.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from RoomChat.config import config
from RoomChat.core.exceptions import NotInRoomError, WrongPasswordError
from RoomChat.core.message.protocol import (
    Packet,
    PacketType,
    chat_message,
    joined_message,
    now_ms,
    rooms_message,
    sanitize_text,
    system_message,
)
from RoomChat.core.server.routing import BroadcastDispatcher
from RoomChat.core.server.session import ConnectionRecord
from RoomChat.core.server.state import ChatState

logger = logging.getLogger(__name__)


@dataclass
class PacketContext:
    """Context passed to packet handlers."""
    conn_id: str
    packet: Packet
    state: ChatState
    dispatcher: BroadcastDispatcher
    clock: Callable[[], int] = now_ms

    @property
    def record(self) -> ConnectionRecord:
        return self.state.registry.get(self.conn_id)

    def reply(self, payload: Dict[str, Any]) -> None:
        """Send a payload back to the originating connection."""
        self.dispatcher.send(self.conn_id, payload)

    def room_list(self) -> Dict[str, Any]:
        return rooms_message(self.state.directory.list_rooms())


class PacketHandler(ABC):
    """
    Abstract base class for packet handlers.

    Implement this class to support a new packet type.
    """

    packet_type: PacketType

    @abstractmethod
    def handle(self, context: PacketContext) -> None:
        """
        Process the packet.

        Args:
            context: Packet context

        Raises:
            ProtocolError: If the request is refused
        """
        pass


class HandlerRegistry:
    """Registry of packet handlers keyed by packet type."""

    def __init__(self):
        self._handlers: Dict[str, PacketHandler] = {}

    def register(self, handler: PacketHandler) -> None:
        self._handlers[handler.packet_type.value] = handler
        logger.debug("Registered packet handler: %s", handler.packet_type.value)

    def get_handler(self, packet_type: str) -> Optional[PacketHandler]:
        """
        Get handler for a packet type.

        Args:
            packet_type: Type string from the packet

        Returns:
            Packet handler or None for unknown types
        """
        return self._handlers.get(packet_type)


def _room_name(packet: Packet) -> str:
    return sanitize_text(packet.get("room"), config.MAX_ROOM_LENGTH) or config.DEFAULT_ROOM


def _password(packet: Packet) -> str:
    return sanitize_text(packet.get("password"), config.MAX_PASSWORD_LENGTH)


class HelloHandler(PacketHandler):
    """Declares the connection's display name."""

    packet_type = PacketType.HELLO

    def handle(self, context: PacketContext) -> None:
        username = (
            sanitize_text(context.packet.get("username"), config.MAX_NAME_LENGTH)
            or config.DEFAULT_USERNAME
        )
        context.state.registry.set_identity(context.conn_id, username)
        logger.info("Connection %s identified as %r", context.conn_id, username)

        context.reply(context.room_list())
        context.reply(system_message(f"Hello {username}"))


class CreateHandler(PacketHandler):
    """Creates a room (or enters an existing one) and moves the connection into it."""

    packet_type = PacketType.CREATE

    def handle(self, context: PacketContext) -> None:
        room = _room_name(context.packet)
        password = _password(context.packet)

        context.state.move_to_room(context.conn_id, room)
        if password:
            context.state.directory.set_password(room, password)

        username = context.record.display_name
        context.dispatcher.broadcast(
            room,
            system_message(f'{username} created room "{room}"'),
            exclude=context.conn_id
        )
        context.reply(joined_message(room))


class JoinHandler(PacketHandler):
    """Moves the connection into a room after checking the room password."""

    packet_type = PacketType.JOIN

    def handle(self, context: PacketContext) -> None:
        room = _room_name(context.packet)
        password = _password(context.packet)

        required = context.state.directory.required_password(room)
        if required and password != required:
            logger.warning("Connection %s gave a wrong password for room %r", context.conn_id, room)
            raise WrongPasswordError()

        context.state.move_to_room(context.conn_id, room)

        username = context.record.display_name
        context.dispatcher.broadcast(
            room,
            system_message(f'{username} joined "{room}"'),
            exclude=context.conn_id
        )
        context.reply(joined_message(room))
        context.reply(context.room_list())


class ChatHandler(PacketHandler):
    """Broadcasts a text message to the sender's room, sender included."""

    packet_type = PacketType.CHAT

    def handle(self, context: PacketContext) -> None:
        record = context.record
        if record.room is None:
            raise NotInRoomError()

        text = sanitize_text(context.packet.get("text"), config.MAX_TEXT_LENGTH)
        context.dispatcher.broadcast(
            record.room,
            chat_message(record.display_name, text, context.clock(), record.room)
        )


class ListHandler(PacketHandler):
    """Replies with the sorted room list."""

    packet_type = PacketType.LIST

    def handle(self, context: PacketContext) -> None:
        context.reply(context.room_list())


def create_default_registry() -> HandlerRegistry:
    """
    Create a registry with handlers for every protocol packet type.

    Returns:
        Configured HandlerRegistry
    """
    registry = HandlerRegistry()
    for handler in (HelloHandler(), CreateHandler(), JoinHandler(), ChatHandler(), ListHandler()):
        registry.register(handler)
    return registry


__all__ = [
    'PacketContext',
    'PacketHandler',
    'HandlerRegistry',
    'HelloHandler',
    'CreateHandler',
    'JoinHandler',
    'ChatHandler',
    'ListHandler',
    'create_default_registry',
]
