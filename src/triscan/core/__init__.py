"""Core module containing the data model, errors and the scan loop."""

from triscan.core.errors import (
    DecodeError,
    DirectionMismatchError,
    EmptyBookError,
    FetchError,
    InsufficientLegsError,
    LegFetchError,
    ProviderError,
    ScanError,
)
from triscan.core.types import (
    BookSide,
    Currency,
    Cycle,
    CycleEvaluation,
    DirectionalRate,
    MarketDataProvider,
    OrderBookSnapshot,
    Pair,
    PriceLevel,
    normalize_currency,
)


__all__ = [
    "BookSide",
    "Currency",
    "Cycle",
    "CycleEvaluation",
    "DecodeError",
    "DirectionMismatchError",
    "DirectionalRate",
    "EmptyBookError",
    "FetchError",
    "InsufficientLegsError",
    "LegFetchError",
    "MarketDataProvider",
    "OrderBookSnapshot",
    "Pair",
    "PriceLevel",
    "ProviderError",
    "ScanError",
    "normalize_currency",
]
