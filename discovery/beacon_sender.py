# discovery/beacon_sender.py
import socket
import threading

import beacon_config
import beacon_protocol
from beacon_errors import BindError
from beacon_logger import log_message


class BeaconSender:
    """
    Announces one service on the LAN by broadcasting the same beacon
    datagram over and over.

    The payload is built once in the constructor and never changes, so every
    send puts identical bytes on the wire.
    """
    def __init__(self, service_port, service_name, broadcast_port,
                 broadcast_address=beacon_config.BROADCAST_ADDRESS,
                 bind_address="0.0.0.0"):
        self._payload = beacon_protocol.encode(service_port, service_name)
        self.destination = (broadcast_address, broadcast_port)
        self._stop_event = threading.Event()

        # Ephemeral port, the socket only originates broadcasts
        local_address = (bind_address, 0)
        self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            self.socket.bind(local_address)
            log_message(f"[beacon sender] Socket bound to: {bind_address}:{self.socket.getsockname()[1]}", "DEBUG")
            self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            log_message("[beacon sender] Broadcast mode set to ON", "DEBUG")
        except OSError as e:
            self.socket.close()
            error = BindError(local_address, e)
            log_message(f"[beacon sender] {error}", "ERROR")
            raise error from e

    @property
    def payload(self):
        return self._payload

    def send_one(self):
        """Sends the beacon once. Returns the number of bytes sent."""
        log_message(f"[beacon sender] Sending Beacon to: '{self.destination[0]}:{self.destination[1]}'", "DEBUG")
        return self.socket.sendto(self._payload, self.destination)

    def send_loop(self, period=beacon_config.BROADCAST_INTERVAL_S):
        """
        Sends a beacon every `period` seconds until stop() is called.
        Once stopped, a sender stays stopped.

        A failed send is not retried: the OSError ends the loop and reaches
        the caller.
        """
        log_message(f"[beacon sender] Broadcasting to {self.destination[0]}:{self.destination[1]} every {period}s")
        while not self._stop_event.is_set():
            try:
                self.send_one()
            except OSError as e:
                log_message(f"[beacon sender] Send failed, stopping: {e}", "ERROR")
                raise
            # wait() returns early when stop() is called mid-sleep
            self._stop_event.wait(period)
        log_message("[beacon sender] Broadcast stopped.")

    def stop(self):
        """Ends a running send_loop(), usually from another thread."""
        self._stop_event.set()

    def close(self):
        self.stop()
        self.socket.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.close()
