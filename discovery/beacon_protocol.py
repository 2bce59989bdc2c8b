# discovery/beacon_protocol.py
# Wire format shared by senders and listeners.
#
#   offset 0  u16  magic number (0xBEEF)
#   offset 2  u16  advertised service port
#   offset 4  ...  service name, raw bytes, runs to the end of the datagram
#
# All integers are big-endian.
import struct

MAGIC_NUMBER = 0xBEEF

HEADER_FORMAT = "!HH"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)

# Receive buffer size. Anything longer is truncated by the socket layer.
MAX_DATAGRAM_SIZE = 1024
MAX_SERVICE_NAME_SIZE = MAX_DATAGRAM_SIZE - HEADER_SIZE


class Beacon:
    """A service announcement seen by a listener. Read-only once built."""
    __slots__ = ("_service_ip", "_service_port", "_service_name")

    def __init__(self, service_ip, service_port, service_name):
        object.__setattr__(self, "_service_ip", service_ip)
        object.__setattr__(self, "_service_port", service_port)
        object.__setattr__(self, "_service_name", bytes(service_name))

    @property
    def service_ip(self) -> str:
        return self._service_ip

    @property
    def service_port(self) -> int:
        return self._service_port

    @property
    def service_name(self) -> bytes:
        return self._service_name

    def __setattr__(self, name, value):
        raise AttributeError("Beacon is immutable")

    def __eq__(self, other):
        if not isinstance(other, Beacon):
            return NotImplemented
        return (self._service_ip, self._service_port, self._service_name) == \
               (other._service_ip, other._service_port, other._service_name)

    def __hash__(self):
        return hash((self._service_ip, self._service_port, self._service_name))

    def __repr__(self):
        return (f"Beacon(service_ip={self._service_ip!r}, "
                f"service_port={self._service_port!r}, service_name={self._service_name!r})")

    def __str__(self):
        # Names are opaque bytes, decode only for display
        name = self._service_name.decode("utf-8", errors="replace")
        return f"ServiceName: '{name}', Service IP: {self._service_ip}, Service Port: {self._service_port}"


def _name_bytes(service_name):
    if isinstance(service_name, str):
        return service_name.encode("utf-8")
    return bytes(service_name)


def encode(service_port: int, service_name) -> bytes:
    """
    Builds the beacon payload for a service.

    Args:
        service_port: Port the announced service listens on (0-65535).
        service_name: Service identifier, bytes or str (str is sent as UTF-8).
    Returns:
        bytes: magic + port + name.
    """
    if not 0 <= service_port <= 0xFFFF:
        raise ValueError(f"service_port out of range: {service_port}")
    return struct.pack(HEADER_FORMAT, MAGIC_NUMBER, service_port) + _name_bytes(service_name)


def decode(data):
    """
    Parses a received datagram.

    Returns (service_port, service_name) or None when the datagram is not a
    beacon (too short or wrong magic number). Never raises on bad input.
    """
    if len(data) < HEADER_SIZE:
        return None
    magic, service_port = struct.unpack_from(HEADER_FORMAT, data)
    if magic != MAGIC_NUMBER:
        return None
    return service_port, bytes(data[HEADER_SIZE:])
