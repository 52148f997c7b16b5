"""
WebSocket chat server that composes all server components.

Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                          ChatServer                          │
    │  ┌──────────────┐  ┌───────────────┐  ┌────────────────────┐ │
    │  │ Message      │  │ Broadcast     │  │ Liveness           │ │
    │  │ Router       │  │ Dispatcher    │  │ Monitor            │ │
    │  └──────────────┘  └───────────────┘  └────────────────────┘ │
    │  ┌────────────────────────────────────────────────────────┐  │
    │  │ ChatState (Connection Registry + Room Directory)       │  │
    │  └────────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────────┘

Event flow:
    1. accept  → WebSocketConnection (new id) → router.handle_open
    2. frame   → router.handle_message → handler → dispatcher
    3. pong    → router.handle_pong
    4. close   → router.handle_close (also reached from monitor eviction)
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from RoomChat.config import config
from RoomChat.core.server.interfaces import ServerLifecycle
from RoomChat.core.server.router import MessageRouter
from RoomChat.core.server.routing import BroadcastDispatcher
from RoomChat.core.server.state import ChatState
from RoomChat.core.server.transport import LivenessMonitor, WebSocketConnection

logger = logging.getLogger(__name__)


class ChatServer(ServerLifecycle):
    """
    Multi-room broadcast chat server.

    Example:
        server = ChatServer()

        async with server.run("0.0.0.0", 5001):
            await asyncio.Future()
    """

    def __init__(
        self,
        state: Optional[ChatState] = None,
        heartbeat_interval: Optional[float] = None
    ):
        """
        Initialize the chat server.

        Args:
            state: Shared state (a fresh one if None)
            heartbeat_interval: Seconds between liveness probes
        """
        self._state = state or ChatState()
        self._dispatcher = BroadcastDispatcher(self._state)
        self._router = MessageRouter(self._state, self._dispatcher)
        self._monitor = LivenessMonitor(
            self._state,
            on_terminate=self._router.handle_close,
            interval=heartbeat_interval or config.HEARTBEAT_INTERVAL
        )

        self._host: Optional[str] = None
        self._port: Optional[int] = None
        self._server: Optional[Server] = None
        self._running = False

        logger.info("ChatServer initialized")

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def router(self) -> MessageRouter:
        return self._router

    @property
    def dispatcher(self) -> BroadcastDispatcher:
        return self._dispatcher

    @property
    def monitor(self) -> LivenessMonitor:
        return self._monitor

    @property
    def port(self) -> Optional[int]:
        """Port actually bound (useful when started on port 0)."""
        return self._port

    @property
    def is_running(self) -> bool:
        """Check if server is running."""
        return self._running

    @asynccontextmanager
    async def run(self, host: str = config.DEFAULT_HOST, port: int = config.DEFAULT_PORT):
        """
        Run the server as an async context manager.

        Args:
            host: Host to bind to
            port: Port to listen on

        Yields:
            The server instance
        """
        await self.start(host, port)
        try:
            yield self
        finally:
            await self.stop()

    async def start(self, host: str = config.DEFAULT_HOST, port: int = config.DEFAULT_PORT) -> None:
        """
        Start listening and probing.

        Args:
            host: Host to bind to
            port: Port to listen on (0 picks a free port)
        """
        self._server = await serve(
            self._handle_connection,
            host,
            port,
            ping_interval=None
        )
        self._host = host
        self._port = self._server.sockets[0].getsockname()[1] if self._server.sockets else port
        self._running = True

        await self._monitor.start()

        logger.info("WebSocket server listening on ws://%s:%s", host, self._port)

    async def stop(self) -> None:
        """Stop the server and drop every connection."""
        self._running = False

        await self._monitor.stop()

        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

        logger.info("WebSocket server stopped")

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        """Serve one client from accept to close."""
        connection = WebSocketConnection(websocket, on_pong=self._router.handle_pong)
        connection.start()
        conn_id = self._router.handle_open(connection)

        try:
            async for raw_message in websocket:
                self._router.handle_message(conn_id, raw_message)
        except ConnectionClosed:
            logger.debug("Connection %s closed by peer", conn_id)
        except Exception as e:
            logger.exception("Error handling connection %s: %s", conn_id, e)
        finally:
            self._router.handle_close(conn_id)
            await connection.shutdown()


__all__ = ['ChatServer']
