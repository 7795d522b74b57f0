"""
Scanner constants and configuration values.

This module contains the hardcoded values used throughout the scanner.
Values are organized by category for easy maintenance and auditing.
"""

from typing import Final


# =============================================================================
# Huobi API Endpoints
# =============================================================================

HUOBI_REST_URL: Final[str] = "https://api.huobi.pro"

# API Endpoints
ENDPOINT_SYMBOLS: Final[str] = "/v1/common/symbols"
ENDPOINT_DEPTH: Final[str] = "/market/depth"

# Aggregation level for /market/depth ("step0" = no price merging)
DEPTH_TYPE: Final[str] = "step0"

# Depth sizes accepted by /market/depth together with step0
ALLOWED_DEPTHS: Final[tuple[int, ...]] = (5, 10, 20)

# Response status values
STATUS_ERROR: Final[str] = "error"

# Symbol state reported for tradable pairs
SYMBOL_STATE_ONLINE: Final[str] = "online"

USER_AGENT: Final[str] = "triscan/1.0 (+aiohttp)"


# =============================================================================
# Fees
# =============================================================================

# Round-trip taker fees subtracted from the cycle rate (0.2%)
DEFAULT_ROUND_TRIP_FEE: Final[float] = 0.002


# =============================================================================
# Scanning
# =============================================================================

DEFAULT_REFERENCE_CURRENCY: Final[str] = "usdt"

# Order book levels sampled per leg (1 = top of book)
DEFAULT_DEPTH_LEVELS: Final[int] = 1

DEFAULT_SCAN_INTERVAL: Final[float] = 1.0  # seconds
DEFAULT_CATALOG_REFRESH: Final[float] = 3600.0  # seconds
DEFAULT_MAX_CONCURRENT_CYCLES: Final[int] = 8


# =============================================================================
# Network & Retry Strategy
# =============================================================================

DEFAULT_REQUEST_TIMEOUT: Final[float] = 10.0  # seconds
DEFAULT_MAX_RETRIES: Final[int] = 3
DEFAULT_RETRY_BASE_DELAY: Final[float] = 0.5  # seconds
RETRY_MAX_DELAY: Final[float] = 8.0  # seconds
RETRY_MULTIPLIER: Final[float] = 2.0

# HTTP statuses treated as transient
RETRYABLE_STATUSES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})


# =============================================================================
# Rate Limiting
# =============================================================================

# Conservative share of Huobi's public market data limit
DEFAULT_REQUESTS_PER_SECOND: Final[int] = 10


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Maximum log queue size
MAX_LOG_QUEUE_SIZE: Final[int] = 10_000

# Number of cycles shown in the per-scan summary
DEFAULT_REPORT_TOP: Final[int] = 10
