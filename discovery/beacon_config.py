# discovery/beacon_config.py
import os

# --- Network ---
# UDP port beacons are broadcast to and listeners bind on
DISCOVERY_PORT = int(os.environ.get("BEACON_DISCOVERY_PORT", 9002))
BROADCAST_ADDRESS = os.environ.get("BEACON_BROADCAST_ADDRESS", "255.255.255.255")
LISTEN_ADDRESS = os.environ.get("BEACON_LISTEN_ADDRESS", "0.0.0.0")

# Seconds between two beacons from the same sender
BROADCAST_INTERVAL_S = float(os.environ.get("BEACON_BROADCAST_INTERVAL_S", 1.0))

# --- Service ---
DEFAULT_SERVICE_NAME = os.environ.get("BEACON_DEFAULT_SERVICE_NAME", "BeaconTestService")
DEFAULT_SERVICE_PORT = int(os.environ.get("BEACON_DEFAULT_SERVICE_PORT", 8080))

# --- Logging ---
LOG_DIR = os.environ.get("BEACON_LOG_DIR", "logs")
LOG_LEVEL = os.environ.get("BEACON_LOG_LEVEL", "INFO").upper()
