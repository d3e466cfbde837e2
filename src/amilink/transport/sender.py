"""Sending side of the amilink link.

Each send opens its own DEALER connection to the receiver, transmits one
record, and waits a bounded time for the acknowledgment. The work happens
on a small worker pool so that :func:`Sender.send` returns immediately;
the caller receives a :class:`concurrent.futures.Future` and may also
register callbacks.
"""

from __future__ import annotations

import concurrent.futures
import logging
import time
from typing import Callable, Optional

import zmq

from .. import config
from ..protocol import wire
from ..protocol.fields import ACK, ERR
from ..protocol.message import Message, ProtocolError
from .base import SendResult, TransportConnectionError, TransportTimeout
from .monitor import connect, endpoint, zmq_context


logger = logging.getLogger(__name__)


class Sender:
    """Send :class:`Message` instances to a receiver at *address* and *port*.

    Settings not given explicitly are taken from *settings*, or from
    :func:`amilink.config.get` if no *settings* are provided. Status
    messages are logged, and passed to *on_status* if it is set.
    """

    def __init__(
        self,
        address: Optional[str] = None,
        port: Optional[int] = None,
        settings: Optional[config.Settings] = None,
        on_status: Optional[Callable[[str], None]] = None,
    ):
        if settings is None:
            settings = config.get()

        self.settings = settings
        self.address = address or settings.address
        self.port = int(port) if port is not None else settings.port
        self.on_status = on_status

        self.workers = concurrent.futures.ThreadPoolExecutor(
            max_workers=settings.send_workers,
            thread_name_prefix="amilink.Sender",
        )

    def __enter__(self) -> "Sender":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def endpoint(self) -> str:
        return endpoint(self.address, self.port)

    def close(self) -> None:
        """Wait for outstanding sends, then release the worker pool."""
        self.workers.shutdown(wait=True)

    # --- public API ---

    def send(
        self,
        message: Message,
        on_success: Optional[Callable[[SendResult], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> concurrent.futures.Future:
        """Send *message* in the background.

        The returned future resolves to a :class:`SendResult`, or holds the
        exception that ended the send. Failures are never raised here;
        they reach the caller only through *on_error* or the future.
        """

        return self.workers.submit(self._send_background, message, on_success, on_error)

    def send_sync(self, message: Message) -> SendResult:
        """Send *message* and block until the outcome is known."""

        frames = wire.pack(message)
        msg_id = frames[1]
        policy = self.settings.ack_policy
        started = time.monotonic()
        attempts = 0

        while True:
            attempts += 1
            reply = self._attempt(frames)

            if reply is not None:
                break

            waited = self.settings.ack_timeout

            if policy == "retry" and attempts <= self.settings.retries:
                self._status(
                    f"no acknowledgment in {waited:.2f} sec, retrying ({attempts}/{self.settings.retries})",
                    logging.WARNING,
                )
                continue

            if policy == "fail":
                raise TransportTimeout(
                    f"{self.endpoint}: no acknowledgment in {waited:.2f} sec"
                )

            self._status(
                f"no acknowledgment in {waited:.2f} sec, message sent but unconfirmed",
                logging.WARNING,
            )
            return SendResult(msg_id, False, attempts, time.monotonic() - started)

        reply_id, reply_type, body = wire.split(reply)

        if reply_id != msg_id:
            raise ProtocolError(f"reply is for record {reply_id!r}, expected {msg_id!r}")

        if reply_type == ACK:
            self._status("message sent and acknowledged")
            return SendResult(msg_id, True, attempts, time.monotonic() - started)

        if reply_type == ERR:
            text = body.decode("utf-8", "replace")
            raise ProtocolError(f"receiver rejected the message: {text}")

        raise ProtocolError(f"unexpected reply {reply_type!r}")

    def test_connection(self, timeout: Optional[float] = None) -> bool:
        """Return True if a connection to the receiver can be established
        within *timeout* seconds. No message is transmitted."""

        if timeout is None:
            timeout = self.settings.probe_timeout

        self._status(f"testing connection to {self.endpoint}")

        socket = zmq_context.socket(zmq.DEALER)
        socket.setsockopt(zmq.LINGER, 0)

        try:
            connect(socket, self.endpoint, timeout)
        except TransportConnectionError as exc:
            self._status(f"receiver not reachable: {exc}", logging.WARNING)
            return False
        finally:
            socket.close()

        self._status("receiver is reachable")
        return True

    # --- internal ---

    def _attempt(self, frames: wire.Frames) -> Optional[wire.Frames]:
        """Make one delivery attempt on a fresh connection.

        Returns the reply frames, or None if no reply arrived within the
        acknowledgment timeout.
        """

        socket = zmq_context.socket(zmq.DEALER)
        socket.setsockopt(zmq.LINGER, 0)

        try:
            self._status(f"connecting to {self.endpoint}")
            connect(socket, self.endpoint, self.settings.connect_timeout)

            socket.send_multipart(frames)
            self._status(f"sent message ({len(frames[-1])} bytes)", logging.DEBUG)

            if socket.poll(self.settings.ack_timeout_ms, zmq.POLLIN) == 0:
                return None

            return tuple(socket.recv_multipart())

        except zmq.ZMQError as exc:
            raise TransportConnectionError(f"{self.endpoint}: {exc}") from exc

        finally:
            socket.close()

    def _send_background(self, message, on_success, on_error) -> SendResult:
        try:
            result = self.send_sync(message)
        except Exception as exc:
            self._status(f"send failed: {exc}", logging.ERROR)
            self._callback(on_error, exc)
            raise

        self._callback(on_success, result)

        return result

    def _callback(self, function, argument) -> None:
        if function is None:
            return

        try:
            function(argument)
        except Exception:
            logger.exception("send callback failed")

    def _status(self, text: str, level: int = logging.INFO) -> None:
        logger.log(level, "%s", text)

        if self.on_status is not None:
            try:
                self.on_status(text)
            except Exception:
                logger.exception("status callback failed")
