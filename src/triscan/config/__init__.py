"""Configuration module for the cycle scanner."""

from triscan.config.constants import (
    DEFAULT_ROUND_TRIP_FEE,
    HUOBI_REST_URL,
    RETRY_MAX_DELAY,
)
from triscan.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_ROUND_TRIP_FEE",
    "HUOBI_REST_URL",
    "RETRY_MAX_DELAY",
]
