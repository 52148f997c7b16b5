"""
Message protocol module for RoomChat application.
Defines packet types, the inbound packet structure and the outbound payloads
exchanged as JSON text frames between clients and the server.
"""

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Union

from RoomChat.core.exceptions import MalformedPacketError


class PacketType(str, Enum):
    """
    Enumeration of packet types a client may send.
    """
    HELLO = "hello"  # Declare display name
    CREATE = "create"  # Create (or enter) a room, optionally with a password
    JOIN = "join"  # Join a room, supplying its password if it has one
    CHAT = "chat"  # Text message to the current room
    LIST = "list"  # Request the room list


class OutboundType(str, Enum):
    """
    Enumeration of packet types the server sends.
    """
    SYSTEM = "system"
    ROOMS = "rooms"
    JOINED = "joined"
    CHAT = "chat"
    ERROR = "error"


def sanitize_text(value: Any, max_len: int) -> str:
    """
    Normalize a client-supplied string.

    Non-string input becomes an empty string; strings are stripped and
    silently truncated to ``max_len`` characters.
    """
    if not isinstance(value, str):
        return ""
    return value.strip()[:max_len]


def now_ms() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass
class Packet:
    """
    Inbound packet.

    Attributes:
        type (str): Packet type as sent by the client (may be unknown)
        fields (dict): The remaining raw fields of the JSON object
    """
    type: str
    fields: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    @classmethod
    def deserialize(cls, data: Union[str, bytes]) -> 'Packet':
        """
        Create a Packet from a raw frame payload.

        Args:
            data: Text or binary frame payload

        Returns:
            Packet: Parsed packet

        Raises:
            MalformedPacketError: If the payload is not a JSON object with a string ``type``
        """
        if isinstance(data, (bytes, bytearray)):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedPacketError("Frame is not valid UTF-8") from e

        try:
            obj = json.loads(data)
        except (TypeError, ValueError) as e:
            raise MalformedPacketError("Frame is not valid JSON") from e

        if not isinstance(obj, dict):
            raise MalformedPacketError("Packet must be a JSON object")

        packet_type = obj.pop("type", None)
        if not isinstance(packet_type, str):
            raise MalformedPacketError("Packet has no type")

        return cls(type=packet_type, fields=obj)


def serialize(payload: Dict[str, Any]) -> str:
    """Serialize an outbound payload to a JSON text frame."""
    return json.dumps(payload, ensure_ascii=False)


def system_message(text: str) -> Dict[str, Any]:
    return {"type": OutboundType.SYSTEM.value, "text": text}


def rooms_message(rooms: Iterable[str]) -> Dict[str, Any]:
    return {"type": OutboundType.ROOMS.value, "rooms": list(rooms)}


def joined_message(room: str) -> Dict[str, Any]:
    return {"type": OutboundType.JOINED.value, "room": room}


def error_message(text: str) -> Dict[str, Any]:
    return {"type": OutboundType.ERROR.value, "text": text}


def chat_message(username: str, text: str, ts: int, room: str) -> Dict[str, Any]:
    """
    Build a chat payload.

    Args:
        username: Sender display name
        text: Sanitized message text
        ts: Milliseconds since the epoch
        room: Room the message was sent to
    """
    return {
        "type": OutboundType.CHAT.value,
        "username": username,
        "text": text,
        "ts": ts,
        "room": room,
    }
