"""ZeroMQ transport for amilink records."""

from .base import (
    SendResult,
    TransportError,
    TransportTimeout,
    TransportConnectionError,
    TransportPortError,
)

from .receiver import Receiver, State
from .sender import Sender
