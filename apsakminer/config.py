"""
apsak-miner Configuration

Devfund:
- A share of found blocks goes to the devfund address
- Shares are fixed-point, out of DEVFUND_DENOMINATOR (500 = 5.00%)
- Any requested share below 2% is raised to DEVFUND_MIN_PERCENT
"""

# =============================================================================
# NETWORK
# =============================================================================

# apsakd gRPC ports
MAINNET_PORT = 16110
TESTNET_PORT = 16211

# Used when --apsakd-address is empty or omitted
DEFAULT_APSAKD_HOST = "127.0.0.1"

# Scheme prepended to bare host[:port] addresses
APSAKD_SCHEME = "grpc"
SCHEME_SEPARATOR = "://"

# Separates the network prefix from the payload of an address
ADDRESS_SEPARATOR = ":"

# =============================================================================
# DEVFUND
# =============================================================================

DEVFUND_ADDRESS = "apsak:qrwsj38ulfq30dwze7q5rvwy8rfa237ct9eegtexah3wdjgd7g5ggmw7ut4tu"

DEVFUND_DENOMINATOR = 10000
DEVFUND_DEFAULT_PERCENT = "5"
DEVFUND_DEFAULT_SHARE = 500  # 5.00%
DEVFUND_MIN_PERCENT = 200  # 2.00%

DEVFUND_PERCENT_ERROR = (
    "devfund-percent should be --devfund-percent=XX.YY up to 2 numbers after the dot"
)

# =============================================================================
# MINING
# =============================================================================

# Thread count meaning "use every available CPU"
AUTO_THREADS = 0
MAX_THREADS = 65535

MAX_PORT = 65535
