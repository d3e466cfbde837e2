"""Connection establishment with a bounded wait.

A ZeroMQ ``connect()`` never fails on its own: the library keeps retrying in
the background. A socket monitor reports what actually happened, which lets
a caller distinguish a live peer from a refused or unreachable one.
"""

from __future__ import annotations

import logging
import time

import zmq
from zmq.utils.monitor import recv_monitor_message

from .base import TransportConnectionError


logger = logging.getLogger(__name__)

zmq_context = zmq.Context.instance()

_EVENTS = zmq.EVENT_CONNECTED | zmq.EVENT_CONNECT_RETRIED


def endpoint(address: str, port: int) -> str:
    return f"tcp://{address}:{int(port)}"


def connect(socket: zmq.Socket, target: str, timeout: float) -> None:
    """Connect *socket* to *target* and block until the connection is
    established. Raise :class:`TransportConnectionError` if the peer
    refuses the connection or if *timeout* seconds elapse first.
    """

    monitor = socket.get_monitor_socket(_EVENTS)

    try:
        socket.connect(target)
        deadline = time.monotonic() + timeout

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TransportConnectionError(
                    f"{target}: no connection in {timeout:.2f} sec"
                )

            if monitor.poll(max(1, int(remaining * 1000))) == 0:
                continue

            event = recv_monitor_message(monitor)
            code = event["event"]

            if code == zmq.EVENT_CONNECTED:
                logger.debug("connected to %s", target)
                return

            if code == zmq.EVENT_CONNECT_RETRIED:
                raise TransportConnectionError(
                    f"{target}: connection refused or unreachable"
                )

    except zmq.ZMQError as exc:
        raise TransportConnectionError(f"{target}: {exc}") from exc

    finally:
        socket.disable_monitor()
        monitor.close()
