"""
Message router: the per-connection protocol state machine.

The router exposes one synchronous entry point per transport event
(open, message, pong, close). Each call runs to completion before the next
event is handled, so the registry and directory need no locking.
"""

import logging
from typing import Callable, Optional, Union

from RoomChat.core.exceptions import MalformedPacketError, ProtocolError
from RoomChat.core.message.protocol import Packet, error_message, now_ms, system_message
from RoomChat.core.server.handlers import HandlerRegistry, PacketContext, create_default_registry
from RoomChat.core.server.interfaces import TransportConnection
from RoomChat.core.server.routing import BroadcastDispatcher
from RoomChat.core.server.state import ChatState

logger = logging.getLogger(__name__)


class MessageRouter:
    """
    Validates inbound packets and applies the matching state transition.

    Example:
        state = ChatState()
        router = MessageRouter(state, BroadcastDispatcher(state))
        conn_id = router.handle_open(transport)
        router.handle_message(conn_id, '{"type": "hello", "username": "alice"}')
    """

    def __init__(
        self,
        state: ChatState,
        dispatcher: BroadcastDispatcher,
        handlers: Optional[HandlerRegistry] = None,
        clock: Callable[[], int] = now_ms
    ):
        """
        Initialize message router.

        Args:
            state: Shared registry and directory
            dispatcher: Delivery service for replies and broadcasts
            handlers: Packet handlers (defaults to the full protocol)
            clock: Millisecond clock used for chat timestamps
        """
        self._state = state
        self._dispatcher = dispatcher
        self._handlers = handlers or create_default_registry()
        self._clock = clock

    @property
    def state(self) -> ChatState:
        return self._state

    def handle_open(self, transport: TransportConnection) -> str:
        """Register a freshly accepted connection and return its id."""
        self._state.registry.register(transport.conn_id, transport)
        logger.info("Connection %s opened", transport.conn_id)
        return transport.conn_id

    def handle_message(self, conn_id: str, data: Union[str, bytes]) -> None:
        """
        Process one inbound frame.

        Malformed frames and unknown packet types are dropped without a reply.
        """
        if conn_id not in self._state.registry:
            logger.debug("Dropping frame from unregistered connection %s", conn_id)
            return

        try:
            packet = Packet.deserialize(data)
        except MalformedPacketError as e:
            logger.debug("Dropping malformed frame from %s: %s", conn_id, e)
            return

        handler = self._handlers.get_handler(packet.type)
        if handler is None:
            logger.debug("Ignoring unknown packet type %r from %s", packet.type, conn_id)
            return

        context = PacketContext(
            conn_id=conn_id,
            packet=packet,
            state=self._state,
            dispatcher=self._dispatcher,
            clock=self._clock
        )
        try:
            handler.handle(context)
        except ProtocolError as e:
            logger.debug("Refused %r from %s: %s", packet.type, conn_id, e)
            self._dispatcher.send(conn_id, error_message(e.message))

    def handle_pong(self, conn_id: str) -> None:
        """Record a liveness acknowledgment."""
        self._state.registry.mark_alive(conn_id)

    def handle_close(self, conn_id: str) -> None:
        """
        Clean up after a connection ends, whoever ended it.

        Remaining room members are notified before the membership is removed.
        Calling this for an already removed connection does nothing.
        """
        record = self._state.registry.get(conn_id)
        if record is None:
            return

        if record.room is not None:
            self._dispatcher.broadcast(
                record.room,
                system_message(f'{record.display_name} left "{record.room}"'),
                exclude=conn_id
            )
        self._state.drop(conn_id)
        logger.info("Connection %s closed (%s)", conn_id, record.display_name)


__all__ = ['MessageRouter']
