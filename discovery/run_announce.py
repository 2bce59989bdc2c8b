# discovery/run_announce.py
import argparse
import sys

import beacon_config
from beacon_errors import BindError
from beacon_logger import LEVELS, init_logging, log_message, set_log_level
from beacon_sender import BeaconSender


def build_parser():
    parser = argparse.ArgumentParser(description="Broadcast a service beacon on the LAN")
    parser.add_argument("--service-name", default=beacon_config.DEFAULT_SERVICE_NAME, help="Name to announce")
    parser.add_argument("--service-port", type=int, default=beacon_config.DEFAULT_SERVICE_PORT,
                        help="Port the announced service listens on")
    parser.add_argument("--port", type=int, default=beacon_config.DISCOVERY_PORT, help="UDP broadcast port")
    parser.add_argument("--broadcast-address", default=beacon_config.BROADCAST_ADDRESS)
    parser.add_argument("--period", type=float, default=beacon_config.BROADCAST_INTERVAL_S,
                        help="Seconds between beacons")
    parser.add_argument("--log-dir", default=None, help="Also write output to a log file in this directory")
    parser.add_argument("--log-level", default=beacon_config.LOG_LEVEL, type=str.upper,
                        choices=list(LEVELS))
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    set_log_level(args.log_level)
    logger = init_logging(args.log_dir) if args.log_dir else None

    try:
        with BeaconSender(args.service_port, args.service_name, args.port,
                          broadcast_address=args.broadcast_address) as sender:
            sender.send_loop(args.period)
    except BindError as e:
        log_message(f"[announce] {e}", "ERROR")
        return 1
    except KeyboardInterrupt:
        log_message("[announce] Interrupted, exiting.")
    finally:
        if logger:
            logger.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
