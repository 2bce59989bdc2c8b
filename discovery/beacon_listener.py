# discovery/beacon_listener.py
import socket
import time

import beacon_config
import beacon_protocol
from beacon_errors import BindError, BeaconTimeoutError
from beacon_logger import log_message


class BeaconListener:
    """
    Waits for beacons of one named service.

    A listener is meant to be driven by one caller at a time: wait() changes
    the socket timeout, so two threads calling wait() on the same listener
    will interfere with each other.
    """
    def __init__(self, service_name, listening_port,
                 bind_address=beacon_config.LISTEN_ADDRESS, reuse_address=False):
        if isinstance(service_name, str):
            service_name = service_name.encode("utf-8")
        self.service_name = bytes(service_name)

        address = (bind_address, listening_port)
        self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            if reuse_address:
                self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self.socket.bind(address)
            self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        except OSError as e:
            self.socket.close()
            error = BindError(address, e)
            log_message(f"[beacon listener] {error}", "ERROR")
            raise error from e
        log_message(f"[beacon listener] Socket bound to: {bind_address}:{self.port}", "DEBUG")

    @property
    def port(self):
        """The port actually bound, useful when constructed with port 0."""
        return self.socket.getsockname()[1]

    def wait(self, timeout=None):
        """
        Blocks until a beacon carrying this listener's service name arrives.

        Args:
            timeout: Seconds to wait in total, or None to wait forever. The
                budget covers the whole call, so beacons for other services
                arriving in the meantime do not extend it. Once the budget
                is spent (or with timeout <= 0) datagrams already queued on
                the socket are still read without blocking.
        Returns:
            Beacon: the first matching beacon.
        Raises:
            BeaconTimeoutError: nothing matching arrived in time.
            OSError: the receive itself failed.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        log_message(f"[beacon listener] Waiting for service {self.service_name!r} on port {self.port} "
                    f"(timeout: {timeout})", "DEBUG")

        while True:
            if deadline is None:
                self.socket.settimeout(None)
            else:
                # 0.0 puts the socket in non-blocking mode
                self.socket.settimeout(max(deadline - time.monotonic(), 0.0))

            try:
                data, (source_ip, _source_port) = self.socket.recvfrom(beacon_protocol.MAX_DATAGRAM_SIZE)
            except (socket.timeout, BlockingIOError) as e:
                raise BeaconTimeoutError(self.service_name, timeout) from e

            decoded = beacon_protocol.decode(data)
            if decoded is None:
                log_message(f"[beacon listener] Ignoring non-beacon datagram from {source_ip}", "DEBUG")
                continue

            service_port, service_name = decoded
            if service_name != self.service_name:
                log_message(f"[beacon listener] Ignoring beacon for {service_name!r} from {source_ip}", "DEBUG")
                continue

            beacon = beacon_protocol.Beacon(source_ip, service_port, service_name)
            log_message(f"[beacon listener] Beacon received: {beacon}")
            return beacon

    def close(self):
        self.socket.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.close()
