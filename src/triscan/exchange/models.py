"""
Pydantic models for Huobi API responses.

These models provide type-safe parsing of exchange responses
with automatic validation.
"""

from pydantic import BaseModel, Field

from triscan.config.constants import STATUS_ERROR, SYMBOL_STATE_ONLINE
from triscan.core.types import OrderBookSnapshot, Pair, PriceLevel


class ApiResponse(BaseModel):
    """Envelope fields shared by every Huobi response."""

    status: str
    err_code: str | None = Field(default=None, alias="err-code")
    err_msg: str | None = Field(default=None, alias="err-msg")

    model_config = {"populate_by_name": True}

    @property
    def is_error(self) -> bool:
        """Check if the provider reported an error status."""
        return self.status == STATUS_ERROR


class SymbolData(BaseModel):
    """Symbol information from /v1/common/symbols."""

    base_currency: str = Field(alias="base-currency")
    quote_currency: str = Field(alias="quote-currency")
    price_precision: int = Field(alias="price-precision")
    amount_precision: int = Field(alias="amount-precision")
    symbol_partition: str = Field(default="main", alias="symbol-partition")
    symbol: str | None = None
    state: str | None = None

    model_config = {"populate_by_name": True}

    @property
    def is_online(self) -> bool:
        """Older payloads omit state; treat those symbols as tradable."""
        return self.state is None or self.state == SYMBOL_STATE_ONLINE

    def to_pair(self) -> Pair:
        """Convert to the internal Pair type."""
        return Pair(
            base=self.base_currency,
            quote=self.quote_currency,
            price_precision=self.price_precision,
            amount_precision=self.amount_precision,
            partition=self.symbol_partition,
        )


class SymbolsResponse(ApiResponse):
    """Response of /v1/common/symbols."""

    data: list[SymbolData] = Field(default_factory=list)


class DepthTick(BaseModel):
    """Order book payload of /market/depth."""

    bids: list[tuple[float, float]] = Field(default_factory=list)
    asks: list[tuple[float, float]] = Field(default_factory=list)
    ts: int = 0
    version: int = 0

    def to_snapshot(self, symbol: str) -> OrderBookSnapshot:
        """Convert to an immutable snapshot for symbol."""
        return OrderBookSnapshot(
            symbol=symbol,
            bids=tuple(PriceLevel(price, amount) for price, amount in self.bids),
            asks=tuple(PriceLevel(price, amount) for price, amount in self.asks),
            version=self.version,
            timestamp_ms=self.ts,
        )


class DepthResponse(ApiResponse):
    """Response of /market/depth."""

    ch: str | None = None
    ts: int = 0
    tick: DepthTick | None = None
