"""Exchange integration module for Huobi."""

from triscan.exchange.client import HuobiClient
from triscan.exchange.models import DepthResponse, DepthTick, SymbolData, SymbolsResponse
from triscan.exchange.rate_limiter import RateLimiter


__all__ = [
    "DepthResponse",
    "DepthTick",
    "HuobiClient",
    "RateLimiter",
    "SymbolData",
    "SymbolsResponse",
]
