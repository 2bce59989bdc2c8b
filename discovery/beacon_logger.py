# discovery/beacon_logger.py
import os
import sys
import datetime
import traceback
from pathlib import Path
import threading

import beacon_config

LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40, "EXCEPTION": 40, "CRITICAL": 50}

_log_level = LEVELS.get(beacon_config.LOG_LEVEL, LEVELS["INFO"])


def _timestamp():
    return datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


class _TeeStream:
    """Passes writes through to a console stream and appends them to a shared log file."""
    def __init__(self, stream, log_file, lock, tag=""):
        self.stream = stream
        self.log_file = log_file
        self.lock = lock
        self.tag = tag

    def write(self, text):
        self.stream.write(text)
        lines = [line for line in text.splitlines() if line.strip()]
        if not lines:
            return
        with self.lock:
            if not self.log_file.closed:
                self.log_file.writelines(f"{self.tag}{line}\n" for line in lines)
                self.log_file.flush()

    def flush(self):
        self.stream.flush()

    def __getattr__(self, attr):
        return getattr(self.stream, attr)


class DiscoveryLogger:
    """Copies a runner's console output into logs/discovery_log_<timestamp>.txt."""
    def __init__(self, log_dir=beacon_config.LOG_DIR):
        os.makedirs(log_dir, exist_ok=True)
        stamp = datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.log_file_path = Path(log_dir) / f"discovery_log_{stamp}.txt"
        self.log_file = open(self.log_file_path, 'a', encoding='utf-8')
        self.stdout_original = sys.stdout
        self.stderr_original = sys.stderr

    def start(self):
        lock = threading.Lock()
        sys.stdout = _TeeStream(self.stdout_original, self.log_file, lock)
        sys.stderr = _TeeStream(self.stderr_original, self.log_file, lock, tag="[STDERR] ")
        log_message(f"[discovery logger] Output also saved to: {self.log_file_path}")
        return self

    def stop(self):
        sys.stdout = self.stdout_original
        sys.stderr = self.stderr_original
        self.log_file.close()


def init_logging(log_dir=beacon_config.LOG_DIR):
    """Start file logging. Returns the logger, or None if the log file can't be created."""
    try:
        return DiscoveryLogger(log_dir).start()
    except OSError as e:
        log_message(f"[discovery logger] Failed to initialize logging: {e}", "ERROR")
        return None


def set_log_level(level):
    """Sets the lowest level log_message() will print."""
    global _log_level
    level = level.upper()
    if level not in LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    _log_level = LEVELS[level]


def is_enabled(level):
    return LEVELS.get(level, LEVELS["INFO"]) >= _log_level


def log_message(message, level="INFO"):
    """
    Print a timestamped, levelled message.
    ERROR and above go to stderr, the rest to stdout.
    """
    if not is_enabled(level):
        return
    formatted_message = f"{_timestamp()} [{level}] {message}\n"
    if LEVELS.get(level, 0) >= LEVELS["ERROR"]:
        sys.stderr.write(formatted_message)
        sys.stderr.flush()
    else:
        sys.stdout.write(formatted_message)
        sys.stdout.flush()


def log_exception(e, context=""):
    """Log an exception with its traceback."""
    timestamp = _timestamp()
    error_msg = f"{timestamp} [EXCEPTION] {context}: {e}\n"
    tb_text = "".join(traceback.format_exception(type(e), e, e.__traceback__))
    for line in tb_text.splitlines():
        if line.strip():
            error_msg += f"{timestamp} [EXCEPTION] {line}\n"
    sys.stderr.write(error_msg)
    sys.stderr.flush()
