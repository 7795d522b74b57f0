"""
Type definitions for the cycle scanner.

This module contains the dataclasses, enums and Protocol definitions
shared by the catalog, the strategy layer and the exchange client.
Using slots=True for memory efficiency and faster attribute access.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


# Currencies are plain lower-case string tokens ("btc", "usdt")
Currency = str


def normalize_currency(token: str) -> Currency:
    """
    Normalize a currency token.

    Args:
        token: Raw token as returned by the exchange or typed by a user.

    Returns:
        Lower-case token without surrounding whitespace.

    Raises:
        ValueError: If the token is empty.
    """
    normalized = token.strip().lower()
    if not normalized:
        raise ValueError("Currency token cannot be empty")
    return normalized


# =============================================================================
# Enums
# =============================================================================


class BookSide(str, Enum):
    """Order book side consumed by a conversion."""

    BID = "BID"
    ASK = "ASK"


# =============================================================================
# Catalog Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class Pair:
    """
    Tradable currency pair with precision metadata.

    Frozen for immutability and hashability. The base currency always
    comes first in the trading symbol.
    """

    base: Currency
    quote: Currency
    price_precision: int = 8
    amount_precision: int = 8
    partition: str = "main"

    def __post_init__(self) -> None:
        """Normalize tokens and check the pair is not degenerate."""
        object.__setattr__(self, "base", normalize_currency(self.base))
        object.__setattr__(self, "quote", normalize_currency(self.quote))
        if self.base == self.quote:
            raise ValueError(f"Pair members must differ, got {self.base}/{self.quote}")

    @property
    def symbol(self) -> str:
        """Trading symbol: base token followed by quote token."""
        return self.base + self.quote

    @property
    def members(self) -> tuple[Currency, Currency]:
        """Both currencies, base first."""
        return (self.base, self.quote)

    def has(self, currency: Currency) -> bool:
        """Check whether currency is one of the two members."""
        return currency == self.base or currency == self.quote

    def other(self, currency: Currency) -> Currency:
        """Return the member that is not currency."""
        if currency == self.base:
            return self.quote
        if currency == self.quote:
            return self.base
        raise ValueError(f"{currency} is not a member of {self.symbol}")

    def __repr__(self) -> str:
        return f"Pair({self.base}/{self.quote})"


# =============================================================================
# Cycle Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class Cycle:
    """
    Ordered triple start -> mid1 -> mid2 -> start.

    Two cycles over the same three currencies but in opposite
    directions are different cycles.
    """

    start: Currency
    mid1: Currency
    mid2: Currency

    def __post_init__(self) -> None:
        """Validate the three members are distinct."""
        if len({self.start, self.mid1, self.mid2}) != 3:
            raise ValueError(
                f"Cycle members must be distinct: {self.start}, {self.mid1}, {self.mid2}"
            )

    @property
    def id(self) -> str:
        """Stable identifier, e.g. "usdt-btc-eth"."""
        return f"{self.start}-{self.mid1}-{self.mid2}"

    @property
    def currencies(self) -> tuple[Currency, Currency, Currency]:
        """Members in traversal order."""
        return (self.start, self.mid1, self.mid2)

    @property
    def legs(
        self,
    ) -> tuple[tuple[Currency, Currency], tuple[Currency, Currency], tuple[Currency, Currency]]:
        """Directed conversions making up the cycle."""
        return (
            (self.start, self.mid1),
            (self.mid1, self.mid2),
            (self.mid2, self.start),
        )

    def reversed(self) -> "Cycle":
        """Same triangle traversed in the opposite direction."""
        return Cycle(self.start, self.mid2, self.mid1)

    def __str__(self) -> str:
        return self.id


# =============================================================================
# Market Data Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class PriceLevel:
    """Single (price, amount) entry of an order book side."""

    price: float
    amount: float

    @property
    def notional(self) -> float:
        """Quote-currency value of the level."""
        return self.price * self.amount


@dataclass(slots=True, frozen=True)
class OrderBookSnapshot:
    """
    Order book depth for one trading symbol.

    Bids are sorted by descending price, asks by ascending price.
    Treated as immutable once obtained from the provider.
    """

    symbol: str
    bids: tuple[PriceLevel, ...]
    asks: tuple[PriceLevel, ...]
    version: int = 0
    timestamp_ms: int = 0

    @property
    def best_bid(self) -> PriceLevel | None:
        """Top-of-book bid."""
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> PriceLevel | None:
        """Top-of-book ask."""
        return self.asks[0] if self.asks else None

    def side(self, side: BookSide) -> tuple[PriceLevel, ...]:
        """Get the levels of one side."""
        return self.bids if side == BookSide.BID else self.asks


# =============================================================================
# Evaluation Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class DirectionalRate:
    """
    Estimated conversion from one currency to another.

    rate is the amount of FROM spent per unit of TO obtained, so the
    round-trip multiplier of a cycle is 1 / (r1 * r2 * r3).
    max_volume is expressed in FROM units.
    """

    from_currency: Currency
    to_currency: Currency
    rate: float
    max_volume: float
    side: BookSide
    symbol: str = ""

    def __repr__(self) -> str:
        return (
            f"{self.from_currency}->{self.to_currency}"
            f"({self.symbol}:{self.side.value} rate={self.rate:.8g} max={self.max_volume:.8g})"
        )


@dataclass(slots=True)
class CycleEvaluation:
    """
    Evaluated cycle with net return and executable size.

    net_rate is a multiplicative return: values above 1.0 are
    profitable after fees.
    """

    cycle: Cycle
    rates: tuple[DirectionalRate, DirectionalRate, DirectionalRate]
    gross_rate: float
    net_rate: float
    fee: float
    bottleneck_volume: float
    timestamp_us: int = field(default=0, compare=False)

    @property
    def is_profitable(self) -> bool:
        """Check if the cycle beats break-even after fees."""
        return self.net_rate > 1.0

    @property
    def profit_pct(self) -> float:
        """Net return expressed as a percentage."""
        return (self.net_rate - 1.0) * 100.0


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class MarketDataProvider(Protocol):
    """Protocol for market data sources feeding the scanner."""

    async def fetch_pairs(self) -> list[Pair]:
        """Get the tradable pair catalog."""
        ...

    async def fetch_order_book(self, symbol: str, depth_hint: int = 0) -> OrderBookSnapshot:
        """Get current bids/asks for a trading symbol."""
        ...
