import socket
import threading
import time

import pytest

pytest.importorskip("PyQt5")

from PyQt5.QtCore import Qt

from beacon_protocol import encode
from discovery_workers import BeaconBroadcaster, BeaconWatcher


def _collect(signal):
    received = []
    # Direct so emits from worker threads land without an event loop
    signal.connect(lambda *args: received.append(args), type=Qt.DirectConnection)
    return received


def test_watcher_reports_found_beacon(receiver, udp_socket):
    # Reserve a port, then free it for the watcher
    port = receiver.getsockname()[1]
    receiver.close()
    watcher = BeaconWatcher(b"svc-A", port, timeout=2.0)
    found = _collect(watcher.beacon_found)
    finished = _collect(watcher.finished)

    timer = threading.Timer(0.2, udp_socket.sendto, args=(encode(8080, b"svc-A"), ("127.0.0.1", port)))
    timer.start()
    try:
        watcher.run()
    finally:
        timer.cancel()

    assert found == [("127.0.0.1", 8080, b"svc-A")]
    assert finished == [()]


def test_watcher_reports_timeout(receiver):
    port = receiver.getsockname()[1]
    receiver.close()
    watcher = BeaconWatcher(b"svc-A", port, timeout=0.01)
    timed_out = _collect(watcher.timed_out)
    found = _collect(watcher.beacon_found)

    watcher.run()

    assert timed_out == [()]
    assert found == []


def test_watcher_reports_bind_failure(receiver):
    watcher = BeaconWatcher(b"svc-A", receiver.getsockname()[1], timeout=0.01, bind_address="127.0.0.1")
    errors = _collect(watcher.error)
    finished = _collect(watcher.finished)

    watcher.run()

    assert len(errors) == 1
    assert "FATAL" in errors[0][0]
    assert finished == [()]


def test_broadcaster_sends_until_stopped(receiver):
    broadcaster = BeaconBroadcaster(8080, b"svc-A", receiver.getsockname()[1],
                                    period=0.01, broadcast_address="127.0.0.1")
    finished = _collect(broadcaster.finished)
    thread = threading.Thread(target=broadcaster.run, daemon=True)
    thread.start()
    try:
        data, _ = receiver.recvfrom(1024)
    finally:
        broadcaster.stop()
        thread.join(2.0)

    assert data == encode(8080, b"svc-A")
    assert not thread.is_alive()
    assert finished == [()]


def test_watcher_without_timeout_stops_on_request(receiver):
    port = receiver.getsockname()[1]
    receiver.close()
    watcher = BeaconWatcher(b"svc-A", port, timeout=None, poll_interval=0.05)
    finished = _collect(watcher.finished)
    found = _collect(watcher.beacon_found)
    timed_out = _collect(watcher.timed_out)
    thread = threading.Thread(target=watcher.run, daemon=True)
    thread.start()

    time.sleep(0.1)
    watcher.stop()
    thread.join(2.0)

    assert not thread.is_alive()
    assert finished == [()]
    assert found == []
    assert timed_out == []


def test_broadcaster_stopped_before_run_sends_nothing(receiver):
    broadcaster = BeaconBroadcaster(8080, b"svc-A", receiver.getsockname()[1],
                                    period=0.01, broadcast_address="127.0.0.1")
    finished = _collect(broadcaster.finished)
    broadcaster.stop()

    thread = threading.Thread(target=broadcaster.run, daemon=True)
    thread.start()
    thread.join(2.0)

    assert not thread.is_alive()
    assert finished == [()]
    receiver.settimeout(0.1)
    with pytest.raises(socket.timeout):
        receiver.recvfrom(1024)
