#!/usr/bin/env python3
"""
apsak-miner Command Line Interface

Resolves the miner configuration from command line flags:
- apsakd address is normalized to grpc://host:port
- Port defaults to 16110 on mainnet and 16211 on testnet
- Devfund share defaults to 5% (minimum 2%)

Usage:
    apsak-miner --mining-address <address> [--apsakd-address <host[:port]>]
                [--devfund-percent <XX.YY>] [--port <port>] [--testnet]
                [--threads <n>] [--mine-when-not-synced] [--debug]
                [--log-file <path>]
"""

import sys
import logging
import argparse
from typing import List, Optional

from apsakminer import __version__
from apsakminer import config
from apsakminer.options import MinerOptions, InvalidPercentFormat, parse_devfund_percent


# =============================================================================
# Logging Setup
# =============================================================================

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
FILE_LOG_FORMAT = '%(asctime)s [%(levelname)s] [%(threadName)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _configured_handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=LOG_DATE_FORMAT))
    return handler


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the apsak-miner logger at the level chosen by --debug.

    Records go to stderr and, with --log-file, to that file as well. Calling
    it again replaces the previous handlers.
    """
    logger = logging.getLogger('apsak-miner')
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_configured_handler(logging.StreamHandler(), level, LOG_FORMAT))
    if log_file:
        logger.addHandler(_configured_handler(logging.FileHandler(log_file), level, FILE_LOG_FORMAT))

    return logger


# =============================================================================
# Argument Types
# =============================================================================

def devfund_percent_type(value: str) -> int:
    try:
        return parse_devfund_percent(value)
    except InvalidPercentFormat as e:
        raise argparse.ArgumentTypeError(str(e))


def port_type(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value}")
    if not 0 <= port <= config.MAX_PORT:
        raise argparse.ArgumentTypeError(f"port must be between 0 and {config.MAX_PORT}")
    return port


def threads_type(value: str) -> int:
    try:
        threads = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid thread count: {value}")
    if not 0 <= threads <= config.MAX_THREADS:
        raise argparse.ArgumentTypeError(f"thread count must be between 0 and {config.MAX_THREADS}")
    return threads


# =============================================================================
# CLI Entry Point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='apsak-miner',
        description='A apsaK high performance CPU miner',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Mine to a local mainnet apsakd
  apsak-miner --mining-address apsak:qr...

  # Mine on testnet against a remote node with 8 threads
  apsak-miner -a apsaktest:qr... -s 10.0.0.5 --testnet -t 8

  # Give 3.5% to the devfund
  apsak-miner -a apsak:qr... --devfund-percent 3.50
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--debug', '-d', action='store_true',
                        help='Enable debug logging level')
    parser.add_argument('--mining-address', '-a', required=True,
                        help='The apsaK address for the miner reward')
    parser.add_argument('--apsakd-address', '-s', default=config.DEFAULT_APSAKD_HOST,
                        help=f'The IP of the apsakd instance (default: {config.DEFAULT_APSAKD_HOST})')
    parser.add_argument('--devfund-percent', type=devfund_percent_type,
                        default=config.DEVFUND_DEFAULT_PERCENT,
                        help='The percentage of blocks to send to the devfund (minimum 2%%, default: 5)')
    parser.add_argument('--port', '-p', type=port_type, default=None,
                        help=f'apsakd port (default: Mainnet = {config.MAINNET_PORT}, '
                             f'Testnet = {config.TESTNET_PORT})')
    parser.add_argument('--testnet', action='store_true',
                        help='Use testnet instead of mainnet (default: false)')
    parser.add_argument('--threads', '-t', type=threads_type, default=None,
                        help='Amount of CPU miner threads to launch (default: 0, all CPUs)')
    parser.add_argument('--mine-when-not-synced', '-m', action='store_true',
                        help='Mine even when apsakd says it is not synced, only useful when passing '
                             '`--allow-submit-block-when-not-synced` to apsakd (default: false)')
    parser.add_argument('--log-file', type=str,
                        help='Log file path')

    return parser


def options_from_args(args: argparse.Namespace) -> MinerOptions:
    return MinerOptions(
        mining_address=args.mining_address,
        apsakd_address=args.apsakd_address,
        devfund_percent=args.devfund_percent,
        port=args.port,
        testnet=args.testnet,
        num_threads=args.threads,
        mine_when_not_synced=args.mine_when_not_synced,
        debug=args.debug,
    )


def print_options(options: MinerOptions):
    """Print the resolved configuration."""
    threads = options.num_threads or "auto"
    percent = options.devfund_percent * 100 / config.DEVFUND_DENOMINATOR

    print(f"\n⚙️  Miner configuration:")
    print(f"   Mining address: {options.mining_address}")
    print(f"   apsakd: {options.apsakd_address}")
    print(f"   Network: {'testnet' if options.testnet else 'mainnet'}")
    print(f"   Threads: {threads}")
    print(f"   Devfund: {percent:.2f}% to {options.devfund_address}")
    print(f"   Mine when not synced: {'yes' if options.mine_when_not_synced else 'no'}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    options = options_from_args(args)
    logger = setup_logging(options.log_level(), args.log_file)

    try:
        options.process()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logger.debug(f"Resolved options: {options.to_dict()}")
    print_options(options)
    return 0


if __name__ == '__main__':
    sys.exit(main())
