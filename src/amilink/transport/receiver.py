"""Receiving side of the amilink link.

A :class:`Receiver` binds a ZeroMQ ROUTER socket and runs an accept loop
on a dedicated thread. Each inbound record is handed to a bounded worker
pool; the worker parses it, invokes the message callback, and queues the
acknowledgment. Only the loop thread ever touches the ROUTER socket:
workers hand their replies back through a queue, and wake the loop via an
inproc signal socket.
"""

from __future__ import annotations

import concurrent.futures
import enum
import itertools
import logging
import queue
import threading
import time
from typing import Callable, Optional, Set, Tuple

import zmq

from .. import config
from ..codec import ami
from ..protocol import wire
from ..protocol.message import Message, ProtocolError
from .base import TransportPortError
from .monitor import zmq_context


logger = logging.getLogger(__name__)

_instance_ticker = itertools.count()


class State(enum.Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    LISTENING = "listening"
    STOPPING = "stopping"


class Receiver:
    """Listen for amilink records and acknowledge them.

    *on_message* is called with each received :class:`Message`, from a
    worker thread. *on_status* receives human-readable status text,
    including the notifications issued when :func:`start` or :func:`stop`
    is called in the wrong state.
    """

    def __init__(
        self,
        address: Optional[str] = None,
        port: Optional[int] = None,
        on_message: Optional[Callable[[Message], None]] = None,
        on_status: Optional[Callable[[str], None]] = None,
        settings: Optional[config.Settings] = None,
    ):
        if settings is None:
            settings = config.get()

        self.settings = settings
        self.address = address or settings.bind_address
        self.port = int(port) if port is not None else settings.port
        self.on_message = on_message
        self.on_status = on_status

        self._state = State.STOPPED
        self._lifecycle = threading.Lock()
        self._shutdown = threading.Event()

        self._instance = next(_instance_ticker)
        self._socket: Optional[zmq.Socket] = None
        self._signal_rx: Optional[zmq.Socket] = None
        self._signal_tx: Optional[zmq.Socket] = None
        self._signal_lock = threading.Lock()
        self._responses: "queue.SimpleQueue[Tuple[bytes, ...]]" = queue.SimpleQueue()

        self._inflight: Set[concurrent.futures.Future] = set()
        self._inflight_lock = threading.Lock()
        self.workers: Optional[concurrent.futures.ThreadPoolExecutor] = None
        self.thread: Optional[threading.Thread] = None

    @property
    def state(self) -> State:
        return self._state

    @property
    def running(self) -> bool:
        return self._state == State.LISTENING

    # --- lifecycle ---

    def start(self, port: Optional[int] = None) -> bool:
        """Bind and begin accepting records.

        Valid only when stopped; otherwise a status notification is issued
        and False is returned. A *port* of 0 selects the first free port in
        the configured range. Raises :class:`TransportPortError` if the
        port cannot be bound.
        """

        with self._lifecycle:
            if self._state == State.STOPPING:
                self._status("receiver is still shutting down", logging.WARNING)
                return False

            if self._state != State.STOPPED:
                self._status(f"receiver already running on port {self.port}", logging.WARNING)
                return False

            self._state = State.STARTING
            self._responses = queue.SimpleQueue()

            if port is not None:
                self.port = int(port)

            try:
                self._open()
            except Exception:
                self._close_sockets()
                self._state = State.STOPPED
                raise

            self._shutdown.clear()
            self.workers = concurrent.futures.ThreadPoolExecutor(
                max_workers=self.settings.max_workers,
                thread_name_prefix=f"amilink.Receiver.{self.port}",
            )
            self.thread = threading.Thread(
                target=self.run, name=f"amilink.Receiver.{self.port}", daemon=True
            )
            self.thread.start()

            self._state = State.LISTENING

        self._status(f"receiver listening on port {self.port}")
        return True

    def stop(self) -> bool:
        """Stop accepting records.

        Valid only while listening; otherwise a status notification is
        issued and False is returned. Waits at most ``stop_timeout``
        seconds for the accept loop to exit. If it is still delivering
        replies for in-flight records at that point, the receiver remains
        STOPPING until the loop exits on its own, and :func:`start` is
        refused until then. Records already handed to a worker are not
        canceled.
        """

        with self._lifecycle:
            if self._state != State.LISTENING:
                self._status("receiver is not running", logging.WARNING)
                return False

            self._state = State.STOPPING
            self._status("stopping receiver")

            self._shutdown.set()
            self._wake()

            thread = self.thread
            thread.join(self.settings.stop_timeout)

            self.workers.shutdown(wait=False)

            if thread.is_alive():
                logger.warning(
                    "accept loop did not exit within %.2f sec", self.settings.stop_timeout
                )
                self._status("receiver still delivering replies, stopping in the background")
                return True

            self._state = State.STOPPED

        self._status("receiver stopped")
        return True

    def __enter__(self) -> "Receiver":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        if self.running:
            self.stop()

    # --- accept loop ---

    def run(self) -> None:
        poller = zmq.Poller()
        poller.register(self._socket, zmq.POLLIN)
        poller.register(self._signal_rx, zmq.POLLIN)

        try:
            while not self._shutdown.is_set():
                for active, _flag in poller.poll(self.settings.poll_interval_ms):
                    if active == self._signal_rx:
                        self._rep_outgoing()
                    elif active == self._socket:
                        self._req_incoming()

            self._drain()

        except zmq.ZMQError:
            if not self._shutdown.is_set():
                logger.exception("accept loop failed on port %s", self.port)
                self._status(f"receiver error on port {self.port}", logging.ERROR)

        finally:
            self._close_sockets()

            # Completes the transition when stop() gave up waiting.
            if self._state == State.STOPPING:
                self._state = State.STOPPED

    def _drain(self) -> None:
        """Keep flushing replies until in-flight handlers finish, or the
        stop timeout elapses."""

        deadline = time.monotonic() + self.settings.stop_timeout

        poller = zmq.Poller()
        poller.register(self._signal_rx, zmq.POLLIN)

        while True:
            with self._inflight_lock:
                pending = len(self._inflight)

            if pending == 0:
                break

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning("%d handler(s) still running, replies will be dropped", pending)
                break

            if poller.poll(max(1, int(min(remaining, 0.05) * 1000))):
                self._rep_outgoing()

        self._rep_outgoing()

    def _req_incoming(self) -> None:
        parts = self._socket.recv_multipart()
        identity = parts[0]
        frames = tuple(parts[1:])

        future = self.workers.submit(self._handle, identity, frames)

        with self._inflight_lock:
            self._inflight.add(future)

        future.add_done_callback(self._handled)

    def _handled(self, future: concurrent.futures.Future) -> None:
        with self._inflight_lock:
            self._inflight.discard(future)

        if not future.cancelled() and future.exception() is not None:
            logger.error("record handler failed", exc_info=future.exception())

    def _rep_outgoing(self) -> None:
        """Clear pending signals and send every queued reply."""

        while True:
            try:
                self._signal_rx.recv(flags=zmq.NOBLOCK)
            except zmq.Again:
                break

        while True:
            try:
                parts = self._responses.get(block=False)
            except queue.Empty:
                break

            self._socket.send_multipart(parts)

    # --- per-record handling ---

    def _handle(self, identity: bytes, frames: Tuple[bytes, ...]) -> None:
        try:
            msg_id, message = wire.unpack(frames)
        except ProtocolError as exc:
            logger.warning("rejected malformed record: %s", exc)
            self._status(f"malformed message received: {exc}", logging.WARNING)
            self._reply(identity, wire.error(wire.header_id(frames), str(exc)))
            return

        self._status(f"message received ({len(message.encoded_signal)} levels)")

        violations = ami.violations(message.encoded_signal)
        if violations:
            logger.warning(
                "signal alternation violated at %d position(s), first at %d",
                len(violations),
                violations[0],
            )

        if self.on_message is not None:
            try:
                self.on_message(message)
            except Exception:
                logger.exception("message callback failed")

        self._reply(identity, wire.ack(msg_id))

    def _reply(self, identity: bytes, frames: Tuple[bytes, ...]) -> None:
        if self._shutdown.is_set() and not self.thread.is_alive():
            logger.debug("receiver closed, dropping reply %r", frames[2])
            return

        self._responses.put((identity,) + tuple(frames))
        self._wake()

    # --- sockets ---

    def _open(self) -> None:
        self._socket = zmq_context.socket(zmq.ROUTER)
        # Replies flushed while draining must survive the close.
        self._socket.setsockopt(zmq.LINGER, int(self.settings.stop_timeout * 1000))

        if self.port == 0:
            self.port = self._bind_any()
        else:
            try:
                self._socket.bind(f"tcp://{self.address}:{self.port}")
            except zmq.ZMQError as exc:
                raise TransportPortError(f"cannot bind port {self.port}: {exc}") from exc

        internal = f"inproc://amilink.Receiver:signal:{self._instance}:{self.port}:{time.monotonic_ns()}"
        self._signal_rx = zmq_context.socket(zmq.PAIR)
        self._signal_rx.setsockopt(zmq.LINGER, 0)
        self._signal_rx.bind(internal)
        self._signal_tx = zmq_context.socket(zmq.PAIR)
        self._signal_tx.setsockopt(zmq.LINGER, 0)
        self._signal_tx.connect(internal)

    def _bind_any(self) -> int:
        minimum = self.settings.minimum_port
        maximum = self.settings.maximum_port

        for port in range(minimum, maximum + 1):
            try:
                self._socket.bind(f"tcp://{self.address}:{port}")
            except zmq.ZMQError:
                continue
            return port

        raise TransportPortError(f"no ports available in range {minimum}:{maximum}")

    def _wake(self) -> None:
        with self._signal_lock:
            signal_tx = self._signal_tx
            if signal_tx is None:
                return
            try:
                signal_tx.send(b"", flags=zmq.NOBLOCK)
            except zmq.ZMQError:
                # A full signal pipe already guarantees a wake-up.
                pass

    def _close_sockets(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None

        if self._signal_rx is not None:
            self._signal_rx.close()
            self._signal_rx = None

        with self._signal_lock:
            if self._signal_tx is not None:
                self._signal_tx.close()
                self._signal_tx = None

    def _status(self, text: str, level: int = logging.INFO) -> None:
        logger.log(level, "%s", text)

        if self.on_status is not None:
            try:
                self.on_status(text)
            except Exception:
                logger.exception("status callback failed")
