# discovery/run_listen.py
import argparse
import sys

import beacon_config
from beacon_errors import BindError, BeaconTimeoutError
from beacon_listener import BeaconListener
from beacon_logger import LEVELS, init_logging, log_message, set_log_level


def build_parser():
    parser = argparse.ArgumentParser(description="Wait for a service beacon on the LAN")
    parser.add_argument("service_name", nargs="?", default=beacon_config.DEFAULT_SERVICE_NAME,
                        help="Name of the service to wait for")
    parser.add_argument("timeout", nargs="?", type=float, default=None,
                        help="Seconds to wait before giving up (default: wait forever)")
    parser.add_argument("--port", type=int, default=beacon_config.DISCOVERY_PORT, help="UDP port to listen on")
    parser.add_argument("--bind-address", default=beacon_config.LISTEN_ADDRESS)
    parser.add_argument("--log-dir", default=None, help="Also write output to a log file in this directory")
    parser.add_argument("--log-level", default=beacon_config.LOG_LEVEL, type=str.upper,
                        choices=list(LEVELS))
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    set_log_level(args.log_level)
    logger = init_logging(args.log_dir) if args.log_dir else None

    print(f"Timeout set to {args.timeout}")
    print(f"Waiting for a beacon from service: '{args.service_name}'")
    try:
        with BeaconListener(args.service_name, args.port, bind_address=args.bind_address) as listener:
            beacon = listener.wait(args.timeout)
        print(f"Beacon {beacon}")
        return 0
    except BeaconTimeoutError as e:
        log_message(f"[listen] {e}", "WARNING")
        return 1
    except BindError as e:
        log_message(f"[listen] {e}", "ERROR")
        return 2
    finally:
        if logger:
            logger.stop()


if __name__ == "__main__":
    sys.exit(main())
