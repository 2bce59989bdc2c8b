# discovery/run_announce_and_wait.py
# Announces a service and listens for that same announcement, a quick
# check that broadcasts leave and come back on this machine's network.
import argparse
import sys
from threading import Thread

import beacon_config
from beacon_errors import BindError, BeaconTimeoutError
from beacon_listener import BeaconListener
from beacon_logger import LEVELS, init_logging, log_exception, log_message, set_log_level
from beacon_sender import BeaconSender


def build_parser():
    parser = argparse.ArgumentParser(description="Broadcast a beacon and wait to receive it")
    parser.add_argument("--service-name", default=beacon_config.DEFAULT_SERVICE_NAME)
    parser.add_argument("--service-port", type=int, default=beacon_config.DEFAULT_SERVICE_PORT)
    parser.add_argument("--port", type=int, default=beacon_config.DISCOVERY_PORT)
    parser.add_argument("--broadcast-address", default=beacon_config.BROADCAST_ADDRESS)
    parser.add_argument("--period", type=float, default=beacon_config.BROADCAST_INTERVAL_S)
    parser.add_argument("--timeout", type=float, default=None)
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--log-level", default=beacon_config.LOG_LEVEL, type=str.upper,
                        choices=list(LEVELS))
    return parser


def _send_in_background(sender, period):
    try:
        sender.send_loop(period)
    except OSError as e:
        log_exception(e, "[announce and wait] Sender stopped")


def main(argv=None):
    args = build_parser().parse_args(argv)
    set_log_level(args.log_level)
    logger = init_logging(args.log_dir) if args.log_dir else None

    try:
        # Bind the listener first so the first beacon isn't missed
        with BeaconListener(args.service_name, args.port) as listener, \
                BeaconSender(args.service_port, args.service_name, args.port,
                             broadcast_address=args.broadcast_address) as sender:
            sender_thread = Thread(target=_send_in_background, args=(sender, args.period),
                                   daemon=True, name="BeaconSenderThread")
            sender_thread.start()
            try:
                beacon = listener.wait(args.timeout)
            finally:
                # The socket closes when the block exits, the loop must be done by then
                sender.stop()
                sender_thread.join()
        print(f"Beacon {beacon}")
        return 0
    except BeaconTimeoutError as e:
        log_message(f"[announce and wait] {e}", "WARNING")
        return 1
    except BindError as e:
        log_message(f"[announce and wait] {e}", "ERROR")
        return 2
    finally:
        if logger:
            logger.stop()


if __name__ == "__main__":
    sys.exit(main())
