"""
Test configuration and fixtures for RoomChat server tests.

Provides:
- A fresh state / dispatcher / router bundle per test
- A factory for fake client connections
- A live websocket server on an ephemeral port
"""

import json
from typing import Callable, Optional

import pytest
import pytest_asyncio

from RoomChat.core.logging import LogConfig, configure_logging
from RoomChat.core.server import BroadcastDispatcher, ChatServer, ChatState, MessageRouter
from RoomChat.test.fakes import FIXED_TS, FakeTransport


@pytest.fixture
def state() -> ChatState:
    return ChatState()


@pytest.fixture
def dispatcher(state: ChatState) -> BroadcastDispatcher:
    return BroadcastDispatcher(state)


@pytest.fixture
def router(state: ChatState, dispatcher: BroadcastDispatcher) -> MessageRouter:
    """Router with a frozen clock so chat timestamps are predictable."""
    return MessageRouter(state, dispatcher, clock=lambda: FIXED_TS)


@pytest.fixture
def connect(router: MessageRouter) -> Callable[..., FakeTransport]:
    """
    Open a fake client connection.

    ``connect("alice")`` also sends hello and discards the greeting, so the
    returned transport starts with an empty outbox.
    """
    def _connect(username: Optional[str] = None) -> FakeTransport:
        transport = FakeTransport()
        router.handle_open(transport)
        if username is not None:
            router.handle_message(transport.conn_id, json.dumps({"type": "hello", "username": username}))
            transport.clear()
        return transport

    return _connect


@pytest.fixture
def send(router: MessageRouter) -> Callable[..., None]:
    """Deliver a packet from a fake client to the router."""
    def _send(transport: FakeTransport, **packet) -> None:
        router.handle_message(transport.conn_id, json.dumps(packet))

    return _send


@pytest_asyncio.fixture
async def live_server():
    """Start a ChatServer on a free local port."""
    server = ChatServer(heartbeat_interval=3600)
    await server.start("127.0.0.1", 0)
    try:
        yield server
    finally:
        await server.stop()


@pytest.fixture
def quiet_logging():
    """Drop handlers installed by a test."""
    yield
    configure_logging(LogConfig(console_output=False, file_output=False))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
