# discovery/discovery_workers.py
# QObject wrappers so a Qt app can run the sender loop and the listener
# wait on a QThread and get results back as signals.
import time

from PyQt5.QtCore import QObject, pyqtSignal, pyqtSlot

import beacon_config
from beacon_errors import BeaconTimeoutError
from beacon_listener import BeaconListener
from beacon_sender import BeaconSender


class BeaconBroadcaster(QObject):
    """
    Runs in a dedicated thread to broadcast a service's presence
    over the local network using UDP.
    """
    log_message = pyqtSignal(str)
    error = pyqtSignal(str)
    finished = pyqtSignal()

    def __init__(self, service_port, service_name, broadcast_port=beacon_config.DISCOVERY_PORT,
                 period=beacon_config.BROADCAST_INTERVAL_S,
                 broadcast_address=beacon_config.BROADCAST_ADDRESS):
        super().__init__()
        self.service_port = service_port
        self.service_name = service_name
        self.broadcast_port = broadcast_port
        self.period = period
        self.broadcast_address = broadcast_address
        self.sender = None
        self._stop_requested = False

    @pyqtSlot()
    def run(self):
        try:
            self.sender = BeaconSender(self.service_port, self.service_name, self.broadcast_port,
                                       broadcast_address=self.broadcast_address)
        except OSError as e:
            self.error.emit(f"FATAL: Could not open broadcast socket: {e}")
            self.finished.emit()
            return

        self.log_message.emit(f"Starting UDP broadcast on port {self.broadcast_port}")
        try:
            # stop() may have run before the sender existed
            if not self._stop_requested:
                self.sender.send_loop(self.period)
        except OSError as e:
            self.error.emit(f"Broadcast error: {e}")
        finally:
            self.sender.close()
            self.log_message.emit("UDP broadcast stopped.")
            self.finished.emit()

    @pyqtSlot()
    def stop(self):
        self._stop_requested = True
        if self.sender:
            self.sender.stop()


class BeaconWatcher(QObject):
    """
    Listens for the beacon of one service and reports where it was found.
    Waits in short slices so stop() is noticed within poll_interval seconds.
    """
    # Signal: emits (str: service ip, int: service port, bytes: service name)
    beacon_found = pyqtSignal(str, int, object)
    timed_out = pyqtSignal()
    error = pyqtSignal(str)
    log_message = pyqtSignal(str)
    finished = pyqtSignal()

    def __init__(self, service_name, listening_port=beacon_config.DISCOVERY_PORT, timeout=None,
                 bind_address=beacon_config.LISTEN_ADDRESS, poll_interval=1.0):
        super().__init__()
        self.service_name = service_name
        self.listening_port = listening_port
        self.timeout = timeout
        self.bind_address = bind_address
        self.poll_interval = poll_interval
        self._is_running = True

    @pyqtSlot()
    def run(self):
        try:
            listener = BeaconListener(self.service_name, self.listening_port, bind_address=self.bind_address)
        except OSError as e:
            self.error.emit(f"FATAL: Could not bind to UDP port {self.listening_port}. Error: {e}")
            self.finished.emit()
            return

        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        with listener:
            self.log_message.emit(f"Listening for beacons on UDP port {listener.port}...")
            while self._is_running:
                slice_s = self.poll_interval
                if deadline is not None:
                    slice_s = min(slice_s, deadline - time.monotonic())
                try:
                    beacon = listener.wait(slice_s)
                except BeaconTimeoutError:
                    if deadline is not None and time.monotonic() >= deadline:
                        self.log_message.emit(str(BeaconTimeoutError(listener.service_name, self.timeout)))
                        self.timed_out.emit()
                        break
                    continue
                except OSError as e:
                    self.error.emit(f"Discovery error: {e}")
                    break
                self.log_message.emit(f"Discovered service at {beacon.service_ip}:{beacon.service_port}")
                self.beacon_found.emit(beacon.service_ip, beacon.service_port, beacon.service_name)
                break

        self.log_message.emit("Discovery listener stopped.")
        self.finished.emit()

    @pyqtSlot()
    def stop(self):
        self._is_running = False
