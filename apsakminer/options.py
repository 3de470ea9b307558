"""
apsak-miner Options

Resolves raw command line values into the configuration consumed by the
miner, the apsakd client and the devfund payout:
- Parses the devfund share into a fixed-point value
- Normalizes the apsakd address into a grpc:// endpoint
- Picks the default port for mainnet or testnet
- Turns a missing thread count into the "auto" value
- Disables the devfund when the mining address is on another network
"""

import string
import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional, Tuple

from . import config


logger = logging.getLogger('apsak-miner')


class InvalidPercentFormat(ValueError):
    """Raised when --devfund-percent does not match XX.YY."""

    def __init__(self, message: str = config.DEVFUND_PERCENT_ERROR):
        super().__init__(message)


def _parse_percent_part(part: str) -> int:
    if not part or len(part) > 2:
        raise InvalidPercentFormat()
    if any(c not in string.digits for c in part):
        raise InvalidPercentFormat()
    return int(part)


def parse_devfund_percent(value: str) -> int:
    """
    Parse a devfund percentage into a share out of 10000.

    Accepts "XX" or "XX.YY" with one or two digits on each side of the dot.
    Anything below 2% is raised to 2%, so "0" and "1.99" both give 200.

    Args:
        value: Percentage as typed on the command line

    Returns:
        Share out of DEVFUND_DENOMINATOR (e.g. "5" -> 500, "12.34" -> 1234)

    Raises:
        InvalidPercentFormat: If the value does not match the format
    """
    parts = value.split('.')
    if len(parts) > 2:
        raise InvalidPercentFormat()

    prefix_text = parts[0]
    # No dot means no fractional part
    postfix_text = parts[1] if len(parts) == 2 else "0"

    prefix = _parse_percent_part(prefix_text)
    postfix = _parse_percent_part(postfix_text)

    # Can't be more than 99.99%
    if prefix >= 100 or postfix >= 100:
        raise InvalidPercentFormat()

    if prefix < 2:
        return config.DEVFUND_MIN_PERCENT

    return prefix * 100 + postfix


def network_prefix(address: str) -> Optional[str]:
    """Return the part of an address before the first ':' (None if there is no ':')."""
    if config.ADDRESS_SEPARATOR not in address:
        return None
    return address.split(config.ADDRESS_SEPARATOR, 1)[0]


@dataclass
class MinerOptions:
    """
    Miner configuration.

    Built once from the command line and resolved with process(). After that
    it is read-only for the rest of the run.
    """
    mining_address: str
    apsakd_address: str = config.DEFAULT_APSAKD_HOST
    devfund_percent: int = config.DEVFUND_DEFAULT_SHARE
    port: Optional[int] = None
    testnet: bool = False
    num_threads: Optional[int] = None
    mine_when_not_synced: bool = False
    debug: bool = False
    devfund_address: str = ""

    def default_port(self) -> int:
        return config.TESTNET_PORT if self.testnet else config.MAINNET_PORT

    def _resolved_port(self) -> int:
        if self.port is not None:
            return self.port
        return self.default_port()

    def _resolved_endpoint(self) -> Tuple[str, Optional[int]]:
        """Return the grpc:// endpoint and the port field that goes with it."""
        address = self.apsakd_address or config.DEFAULT_APSAKD_HOST

        # Already a full endpoint, the port default is never needed
        if config.SCHEME_SEPARATOR in address:
            return address, self.port

        port = self._resolved_port()
        if config.ADDRESS_SEPARATOR in address:
            host, port_text = address.split(config.ADDRESS_SEPARATOR, 1)
        else:
            host, port_text = address, str(port)

        return f"{config.APSAKD_SCHEME}{config.SCHEME_SEPARATOR}{host}:{port_text}", port

    def _resolved_threads(self) -> int:
        if self.num_threads is None:
            return config.AUTO_THREADS
        return self.num_threads

    def _checked_devfund_percent(self, devfund_address: str) -> int:
        miner_network = network_prefix(self.mining_address)
        devfund_network = network_prefix(devfund_address)

        if miner_network is not None and devfund_network is not None \
                and miner_network != devfund_network:
            logger.info(
                f"Mining address ({miner_network}) and devfund ({devfund_network}) "
                f"are not from the same network. Disabling devfund."
            )
            return 0

        return self.devfund_percent

    def resolve_port(self) -> int:
        """Return the port to use, storing the network default on first use."""
        self.port = self._resolved_port()
        return self.port

    def normalize_daemon_address(self) -> str:
        """Rewrite apsakd_address in place as grpc://host:port and return it."""
        self.apsakd_address, self.port = self._resolved_endpoint()
        logger.info(f"apsakd address: {self.apsakd_address}")
        return self.apsakd_address

    def resolve_threads(self) -> int:
        """Replace a missing thread count with AUTO_THREADS."""
        self.num_threads = self._resolved_threads()
        return self.num_threads

    def check_devfund_network(self, devfund_address: str = config.DEVFUND_ADDRESS) -> int:
        """
        Disable the devfund if the mining address is on another network.

        Addresses without a ':' carry no network prefix and are treated as
        compatible.

        Returns:
            The devfund share after the check
        """
        self.devfund_address = devfund_address
        self.devfund_percent = self._checked_devfund_percent(devfund_address)
        return self.devfund_percent

    def process(self, devfund_address: str = config.DEVFUND_ADDRESS) -> 'MinerOptions':
        """
        Resolve every derived option.

        Steps run in order: apsakd address default, endpoint normalization,
        thread count, devfund network check. All values are computed before
        any field is written, so if a step raises the options are left as
        they were.

        Args:
            devfund_address: Address the devfund share is paid to

        Returns:
            self, resolved
        """
        apsakd_address, port = self._resolved_endpoint()
        logger.info(f"apsakd address: {apsakd_address}")
        num_threads = self._resolved_threads()
        devfund_percent = self._checked_devfund_percent(devfund_address)

        self.apsakd_address = apsakd_address
        self.port = port
        self.num_threads = num_threads
        self.devfund_address = devfund_address
        self.devfund_percent = devfund_percent

        return self

    def log_level(self) -> int:
        """Logging level selected by --debug."""
        return logging.DEBUG if self.debug else logging.INFO

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
