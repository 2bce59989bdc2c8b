import threading
from unittest import mock

import pytest

import run_announce
import run_listen
import run_announce_and_wait
from beacon_protocol import encode


def _free_port(receiver):
    port = receiver.getsockname()[1]
    receiver.close()
    return port


def test_listen_prints_beacon(receiver, udp_socket, capsys):
    port = _free_port(receiver)
    timer = threading.Timer(0.2, udp_socket.sendto, args=(encode(4242, b"svc-A"), ("127.0.0.1", port)))
    timer.start()
    try:
        status = run_listen.main(["svc-A", "2", "--port", str(port)])
    finally:
        timer.cancel()
    assert status == 0
    out = capsys.readouterr().out
    assert "Service Port: 4242" in out


def test_listen_times_out(receiver):
    port = _free_port(receiver)
    assert run_listen.main(["svc-A", "0.01", "--port", str(port)]) == 1


def test_listen_reports_port_in_use(make_listener):
    listener = make_listener(b"svc-A")
    assert run_listen.main(["svc-A", "0.01", "--port", str(listener.port)]) == 2


def test_announce_and_wait_finds_itself(receiver, capsys):
    port = _free_port(receiver)
    status = run_announce_and_wait.main([
        "--service-name", "svc-A", "--service-port", "8080", "--port", str(port),
        "--broadcast-address", "127.0.0.1", "--period", "0.05", "--timeout", "2",
    ])
    assert status == 0
    assert "ServiceName: 'svc-A'" in capsys.readouterr().out


def test_announce_parser_defaults():
    args = run_announce.build_parser().parse_args([])
    assert args.service_name == "BeaconTestService"
    assert args.port == 9002
    assert args.period == 1.0


def test_announce_and_wait_joins_sender_thread(receiver):
    port = _free_port(receiver)
    with mock.patch.object(run_announce_and_wait, "log_exception") as log_exception:
        status = run_announce_and_wait.main([
            "--service-name", "svc-A", "--port", str(port),
            "--broadcast-address", "127.0.0.1", "--period", "0.01", "--timeout", "2",
        ])
    assert status == 0
    assert not any(t.name == "BeaconSenderThread" for t in threading.enumerate())
    log_exception.assert_not_called()


def test_announce_and_wait_timeout_joins_sender_thread(receiver):
    port = _free_port(receiver)
    # Beacons go to an unreachable documentation address, so the wait expires
    status = run_announce_and_wait.main([
        "--service-name", "svc-A", "--port", str(port),
        "--broadcast-address", "203.0.113.1", "--period", "0.01", "--timeout", "0.1",
    ])
    assert status == 1
    assert not any(t.name == "BeaconSenderThread" for t in threading.enumerate())


def test_log_level_is_case_insensitive():
    args = run_listen.build_parser().parse_args(["--log-level", "debug"])
    assert args.log_level == "DEBUG"


def test_unknown_log_level_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        run_announce.build_parser().parse_args(["--log-level", "loud"])
    assert excinfo.value.code == 2
    assert "invalid choice" in capsys.readouterr().err
