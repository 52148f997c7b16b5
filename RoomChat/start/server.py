"""
Server startup module for RoomChat application.
Provides the entry points for starting the chat server and the static web client.
"""

import asyncio
import logging
import threading
from typing import Optional

from RoomChat.config import config
from RoomChat.core.logging import auto_configure
from RoomChat.core.server import ChatServer
from RoomChat.web import routes

logger = logging.getLogger(__name__)

__all__ = ['server', 'web']


def server(
    host: str = config.DEFAULT_HOST,
    port: int = config.DEFAULT_PORT,
    http_port: Optional[int] = None,
    heartbeat_interval: Optional[float] = None,
    srv_only: bool = False
):
    """
    Start the chat server and, unless ``srv_only``, the static web client.

    Args:
        host (str): Address to bind both listeners to
        port (int): WebSocket port (default: 5001)
        http_port (int): Static web port (default: port + 1)
        heartbeat_interval (float): Seconds between liveness probes
        srv_only (bool): If True, run only the websocket server
    """
    auto_configure(config.ENVIRONMENT)
    http_port = http_port or port + 1

    chat_server = ChatServer(heartbeat_interval=heartbeat_interval)

    async def start_websocket_server():
        async with chat_server.run(host, port):
            await asyncio.Future()

    def start_http_server():
        routes.run(host=host, port=http_port)

    try:
        if not srv_only:
            http_thread = threading.Thread(target=start_http_server, daemon=True)
            http_thread.start()
            logger.info("Open http://localhost:%s in your browser", http_port)

        asyncio.run(start_websocket_server())
    except KeyboardInterrupt:
        logger.info("Closed by user.")


def web(host: str = config.DEFAULT_HOST, port: int = config.DEFAULT_HTTP_PORT):
    """
    Start only the static web client.

    Args:
        host (str): Address to bind to
        port (int): HTTP port
    """
    auto_configure(config.ENVIRONMENT)
    try:
        routes.run(host=host, port=port)
    except KeyboardInterrupt:
        logger.info("Closed by user.")
