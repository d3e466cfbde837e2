"""Transport-agnostic exceptions and results.

These live outside the ZeroMQ-specific modules so that callers can handle
transport failures without importing :mod:`zmq`.
"""

from __future__ import annotations

from dataclasses import dataclass


class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportTimeout(TransportError):
    """A message did not receive a timely acknowledgment."""


class TransportConnectionError(TransportError):
    """The transport could not establish or maintain a connection."""


class TransportPortError(TransportError):
    """No suitable port could be bound."""


@dataclass(frozen=True)
class SendResult:
    """Outcome of a completed send.

    ``confirmed`` is False when the acknowledgment did not arrive in time
    and the configured policy presumed the message delivered anyway.
    """

    msg_id: bytes
    confirmed: bool
    attempts: int = 1
    elapsed: float = 0.0
