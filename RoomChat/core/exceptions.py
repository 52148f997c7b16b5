"""
Exception classes for RoomChat.

Protocol errors carry the text that is sent back to the client in an
``error`` packet; everything else is internal.
"""


class RoomChatError(Exception):
    """Base exception for server errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class MalformedPacketError(RoomChatError):
    """Raised when an inbound frame cannot be parsed into a packet."""
    pass


class DuplicateConnectionError(RoomChatError):
    """Raised when a connection id is registered twice."""

    def __init__(self, conn_id: str):
        self.conn_id = conn_id
        super().__init__(f"Connection already registered: {conn_id}")


class ProtocolError(RoomChatError):
    """
    Raised by packet handlers when a request is refused.

    The message is the reply text delivered to the originating connection.
    """

    reply_text = "Request refused"

    def __init__(self, message: str = None, details: dict = None):
        super().__init__(message or self.reply_text, details)


class WrongPasswordError(ProtocolError):
    """Raised when a join supplies a password that does not match the room's."""
    reply_text = "Wrong password"


class NotInRoomError(ProtocolError):
    """Raised when a chat packet arrives from a connection without a room."""
    reply_text = "Join or create a room first"
