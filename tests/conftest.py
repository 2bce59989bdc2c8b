import socket

import pytest

from beacon_listener import BeaconListener


@pytest.fixture
def udp_socket():
    """Plain UDP socket for putting arbitrary datagrams on the wire."""
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    yield s
    s.close()


@pytest.fixture
def receiver():
    """UDP socket on an ephemeral loopback port, for catching what a sender emits."""
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    s.bind(("127.0.0.1", 0))
    s.settimeout(2.0)
    yield s
    s.close()


@pytest.fixture
def make_listener():
    listeners = []

    def _make(service_name, port=0, **kwargs):
        listener = BeaconListener(service_name, port, **kwargs)
        listeners.append(listener)
        return listener

    yield _make
    for listener in listeners:
        listener.close()
