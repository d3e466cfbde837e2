import socket
import threading

import pytest

import amilink


@pytest.fixture
def settings():
    """ Settings isolated from the environment and any settings file, with
        timeouts short enough to keep the transport tests quick.
    """

    return amilink.config.Settings(
        filename='',
        environ={},
        address='127.0.0.1',
        bind_address='127.0.0.1',
        connect_timeout=1.0,
        ack_timeout=1.0,
        probe_timeout=0.5,
        poll_interval=0.05,
        stop_timeout=1.0,
    )


class Collector:
    """ Gather messages and status text delivered by callbacks on other
        threads.
    """

    def __init__(self):
        self.messages = list()
        self.status = list()
        self.lock = threading.Lock()
        self.event = threading.Event()

    def message(self, message):
        with self.lock:
            self.messages.append(message)
        self.event.set()

    def text(self, text):
        with self.lock:
            self.status.append(text)


@pytest.fixture
def collector():
    return Collector()


@pytest.fixture
def receiver(settings, collector):
    instance = amilink.Receiver(on_message=collector.message, on_status=collector.text, settings=settings)
    instance.start(port=0)

    yield instance

    if instance.running:
        instance.stop()


@pytest.fixture
def closed_port():
    """ A loopback port number with nothing listening on it.
    """

    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(('127.0.0.1', 0))
    port = listener.getsockname()[1]
    listener.close()
    return port

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
