"""
Transport layer for WebSocket connections.

Wraps websockets server connections behind the TransportConnection
contract and runs the heartbeat that evicts unresponsive clients.
"""

import asyncio
import logging
import uuid
from typing import Callable, List, Optional, Union

from websockets.asyncio.server import ServerConnection
from websockets.exceptions import ConnectionClosed
from websockets.protocol import State

from RoomChat.core.server.state import ChatState

logger = logging.getLogger(__name__)

# Outbox marker for a liveness probe
_PING = object()


class WebSocketConnection:
    """
    Wrapper around ServerConnection that implements TransportConnection.

    Outbound frames and probes go through a FIFO outbox drained by a single
    writer task, so ``send`` never blocks the caller and frames reach the
    client in the order they were queued.
    """

    def __init__(
        self,
        websocket: ServerConnection,
        on_pong: Optional[Callable[[str], None]] = None,
        conn_id: Optional[str] = None
    ):
        """
        Initialize WebSocket connection wrapper.

        Args:
            websocket: Underlying WebSocket connection
            on_pong: Called with the connection id when a probe is acknowledged
            conn_id: Connection id (a fresh opaque id if omitted)
        """
        self._websocket = websocket
        self._on_pong = on_pong
        self.conn_id: str = conn_id or uuid.uuid4().hex
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None
        self._terminated = False

    def start(self) -> None:
        """Start the writer task."""
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain_outbox())

    async def shutdown(self) -> None:
        """Stop the writer task, discarding anything still queued."""
        if self._writer is not None:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
            self._writer = None

    def send(self, message: str) -> bool:
        """
        Queue a message for delivery.

        Args:
            message: Serialized packet

        Returns:
            True if the message was queued
        """
        if not self.is_open():
            return False
        self._outbox.put_nowait(message)
        return True

    def ping(self) -> None:
        """Queue a websocket ping frame."""
        if self.is_open():
            self._outbox.put_nowait(_PING)

    def terminate(self) -> None:
        """Abort the TCP connection without a closing handshake."""
        if self._terminated:
            return
        self._terminated = True
        transport = getattr(self._websocket, "transport", None)
        if transport is not None:
            transport.abort()
        logger.debug("Connection %s terminated", self.conn_id)

    def is_open(self) -> bool:
        """Check if connection is open."""
        if self._terminated:
            return False
        return self._websocket.state is State.OPEN

    async def _drain_outbox(self) -> None:
        while True:
            item: Union[str, object] = await self._outbox.get()
            try:
                if item is _PING:
                    pong_waiter = await self._websocket.ping()
                    pong_waiter.add_done_callback(self._pong_received)
                else:
                    await self._websocket.send(item)
            except ConnectionClosed:
                logger.debug("Connection %s closed while writing", self.conn_id)
                return
            except Exception as e:
                logger.debug("Failed to write to %s: %s", self.conn_id, e)

    def _pong_received(self, waiter: asyncio.Future) -> None:
        if waiter.cancelled() or waiter.exception() is not None:
            return
        if self._on_pong:
            self._on_pong(self.conn_id)


class LivenessMonitor:
    """
    Probes every connection on a fixed cadence and evicts silent ones.

    Each tick, a connection whose liveness flag is still cleared from the
    previous tick is terminated; every other connection has its flag cleared
    and receives a probe. A connection is therefore evicted after missing
    two consecutive probes.
    """

    def __init__(
        self,
        state: ChatState,
        on_terminate: Optional[Callable[[str], None]] = None,
        interval: float = 30
    ):
        """
        Initialize liveness monitor.

        Args:
            state: Shared registry to inspect
            on_terminate: Cleanup callback invoked with the id of each evicted connection
            interval: Seconds between ticks
        """
        self._state = state
        self._on_terminate = on_terminate
        self._interval = interval
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the liveness monitor."""
        self._running = True
        self._task = asyncio.create_task(self._monitor_loop())
        logger.info("Liveness monitor started (interval: %ss)", self._interval)

    async def stop(self) -> None:
        """Stop the liveness monitor."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Liveness monitor stopped")

    async def _monitor_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self._interval)
            try:
                self.check_connections()
            except Exception as e:
                logger.exception("Error in liveness monitor: %s", e)

    def check_connections(self) -> List[str]:
        """
        Run one tick.

        Returns:
            Ids of the connections terminated in this tick
        """
        terminated = []

        for record in self._state.registry.connections():
            transport = record.transport
            if not record.is_alive:
                if transport is not None:
                    transport.terminate()
                terminated.append(record.conn_id)
                if self._on_terminate:
                    try:
                        self._on_terminate(record.conn_id)
                    except Exception as e:
                        logger.exception("Error in terminate callback: %s", e)
                continue

            record.is_alive = False
            if transport is not None:
                try:
                    transport.ping()
                except Exception as e:
                    logger.debug("Failed to probe %s: %s", record.conn_id, e)

        if terminated:
            logger.warning("Evicted %d unresponsive connection(s)", len(terminated))
        return terminated


__all__ = [
    'WebSocketConnection',
    'LivenessMonitor',
]
