"""
Exception hierarchy for the cycle scanner.

Every error raised by the catalog, the strategy layer or the exchange
client derives from ScanError, so the scan loop can isolate a failing
cycle without catching programming errors.
"""


class ScanError(Exception):
    """Base exception for scanner errors."""


class FetchError(ScanError):
    """Network or transport failure reaching the provider."""


class ProviderError(ScanError):
    """Provider answered but reported a logical error status."""

    def __init__(self, message: str, code: str | int | None = None) -> None:
        super().__init__(message)
        self.code = code


class DecodeError(ScanError):
    """Provider response could not be parsed."""


class DirectionMismatchError(ScanError):
    """Conversion direction cannot be derived from the pair and snapshot."""


class InsufficientLegsError(ScanError):
    """A cycle leg has no tradable pair in the catalog."""


class EmptyBookError(ScanError):
    """The order book side needed for a conversion has no liquidity."""


class LegFetchError(ScanError):
    """Snapshot for one leg of a cycle could not be obtained."""

    def __init__(self, message: str, cycle_id: str, symbol: str) -> None:
        super().__init__(message)
        self.cycle_id = cycle_id
        self.symbol = symbol
