# discovery/beacon_errors.py
import errno as _errno


class BindError(OSError):
    """
    Raised when a beacon socket cannot be bound or switched to broadcast mode.
    Keeps the address that was attempted and the O/S reason.
    """
    def __init__(self, address, cause):
        self.address = address
        self.cause = cause
        code = getattr(cause, "errno", None)
        reason = getattr(cause, "strerror", None) or str(cause)
        super().__init__(code, reason)

    @property
    def address_in_use(self):
        return self.errno == _errno.EADDRINUSE

    def __str__(self):
        host, port = self.address
        if self.address_in_use:
            return f"Address {host}:{port} is already in use ({self.strerror})"
        return f"Could not bind to {host}:{port}: {self.strerror}"


class BeaconTimeoutError(TimeoutError):
    """No beacon matching the listener's filter arrived before the timeout."""
    def __init__(self, service_name, timeout):
        self.service_name = service_name
        self.timeout = timeout
        super().__init__(f"No beacon for service {service_name!r} within {timeout}s")
