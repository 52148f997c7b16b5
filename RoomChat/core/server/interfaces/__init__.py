"""
Abstract base classes and interfaces for the server module.

The core (registry, directory, router, dispatcher and monitor) talks to
transports only through these contracts, so tests can drive it with fake
connections and no sockets.
"""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class TransportConnection(Protocol):
    """Protocol for transport layer connections."""

    conn_id: str

    @abstractmethod
    def send(self, message: str) -> bool:
        """
        Queue a serialized packet for delivery without blocking.

        Returns:
            True if the message was accepted for delivery
        """
        ...

    @abstractmethod
    def ping(self) -> None:
        """Send a liveness probe."""
        ...

    @abstractmethod
    def terminate(self) -> None:
        """Drop the connection immediately, without a closing handshake."""
        ...

    @abstractmethod
    def is_open(self) -> bool:
        """Check if connection is open."""
        ...


class ServerLifecycle(ABC):
    """Abstract base class for server lifecycle management."""

    @abstractmethod
    async def start(self, host: str, port: int) -> None:
        """Start the server."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop the server."""
        pass

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Check if server is running."""
        pass


__all__ = [
    'TransportConnection',
    'ServerLifecycle',
]
