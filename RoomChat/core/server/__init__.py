"""
Server module for RoomChat.

Architecture Overview:
---------------------

1. **Connection Registry** (`session/`)
   - ConnectionRegistry: connection id -> display name, room, liveness flag

2. **Room Directory** (`rooms/`)
   - RoomDirectory: room name -> member set and optional password

3. **Shared State** (`state.py`)
   - ChatState: owns both tables and keeps them consistent

4. **Packet Handling** (`handlers/`, `router.py`)
   - HandlerRegistry: one PacketHandler per packet type
   - MessageRouter: per-connection protocol state machine

5. **Broadcasting** (`routing/`)
   - BroadcastDispatcher: fan-out to room members

6. **Transport Layer** (`transport/`)
   - WebSocketConnection: connection wrapper with a non-blocking outbox
   - LivenessMonitor: two-strike heartbeat eviction

7. **Server** (`websocket_manager.py`)
   - ChatServer: composes everything behind a websockets listener

Usage:

    from RoomChat.core.server import ChatServer

    async with ChatServer().run("0.0.0.0", 5001):
        await asyncio.Future()
"""

from RoomChat.core.server.interfaces import (
    TransportConnection,
    ServerLifecycle,
)
from RoomChat.core.server.session import (
    ConnectionState,
    ConnectionRecord,
    ConnectionRegistry,
)
from RoomChat.core.server.rooms import (
    Room,
    RoomDirectory,
)
from RoomChat.core.server.state import ChatState
from RoomChat.core.server.routing import (
    BroadcastDispatcher,
    DeliveryResult,
    DeliveryStatus,
)
from RoomChat.core.server.handlers import (
    PacketContext,
    PacketHandler,
    HandlerRegistry,
    create_default_registry,
)
from RoomChat.core.server.router import MessageRouter
from RoomChat.core.server.transport import (
    WebSocketConnection,
    LivenessMonitor,
)
from RoomChat.core.server.websocket_manager import (
    ChatServer,
)

__all__ = [
    'TransportConnection',
    'ServerLifecycle',

    'ConnectionState',
    'ConnectionRecord',
    'ConnectionRegistry',

    'Room',
    'RoomDirectory',

    'ChatState',

    'BroadcastDispatcher',
    'DeliveryResult',
    'DeliveryStatus',

    'PacketContext',
    'PacketHandler',
    'HandlerRegistry',
    'create_default_registry',

    'MessageRouter',

    'WebSocketConnection',
    'LivenessMonitor',

    'ChatServer',
]
