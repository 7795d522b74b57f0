"""
Directional rate estimation from order book depth.

Selling the base currency hits the bids; buying it with the quote
currency lifts the asks. Only the best N levels are sampled, so the
estimated volume reflects immediately available liquidity and
understates what deeper levels could absorb.
"""

from triscan.config.constants import DEFAULT_DEPTH_LEVELS
from triscan.core.errors import DirectionMismatchError, EmptyBookError
from triscan.core.types import BookSide, Currency, DirectionalRate, OrderBookSnapshot, Pair


class RateEstimator:
    """
    Computes conversion rates and volumes for a single leg.

    The direction comes from the pair's base/quote fields, never from
    the shape of the trading symbol.
    """

    __slots__ = ("_depth_levels",)

    def __init__(self, depth_levels: int = DEFAULT_DEPTH_LEVELS) -> None:
        """
        Initialize estimator.

        Args:
            depth_levels: Best levels accumulated per side (1 = top of book).
        """
        if depth_levels < 1:
            raise ValueError("depth_levels must be at least 1")
        self._depth_levels = depth_levels

    @property
    def depth_levels(self) -> int:
        """Levels sampled per side."""
        return self._depth_levels

    def estimate(
        self,
        from_currency: Currency,
        to_currency: Currency,
        snapshot: OrderBookSnapshot,
        pair: Pair,
    ) -> DirectionalRate:
        """
        Estimate the conversion from_currency -> to_currency.

        from == base: sum/amount over the top bids; rate = amount / sum,
        max volume = amount (base units).
        from == quote: same accumulation over the top asks;
        rate = sum / amount, max volume = sum (quote units).

        Args:
            from_currency: Currency spent.
            to_currency: Currency obtained.
            snapshot: Order book of the pair.
            pair: Catalog pair trading the two currencies.

        Returns:
            DirectionalRate for the leg.

        Raises:
            DirectionMismatchError: If the currencies or the snapshot do
                not belong to the pair.
            EmptyBookError: If the consumed side has no volume.
        """
        if snapshot.symbol != pair.symbol:
            raise DirectionMismatchError(
                f"Snapshot {snapshot.symbol} does not describe pair {pair.symbol}"
            )

        if from_currency == pair.base and to_currency == pair.quote:
            side = BookSide.BID
        elif from_currency == pair.quote and to_currency == pair.base:
            side = BookSide.ASK
        else:
            raise DirectionMismatchError(
                f"Cannot convert {from_currency}->{to_currency} on {pair.symbol}"
            )

        total, amount = self._accumulate(snapshot, side)

        if side == BookSide.BID:
            rate = amount / total
            max_volume = amount
        else:
            rate = total / amount
            max_volume = total

        return DirectionalRate(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=rate,
            max_volume=max_volume,
            side=side,
            symbol=pair.symbol,
        )

    def _accumulate(self, snapshot: OrderBookSnapshot, side: BookSide) -> tuple[float, float]:
        """
        Sum notional and amount over the best levels of one side.

        Returns:
            (sum of price * amount, sum of amount).
        """
        total = 0.0
        amount = 0.0
        for level in snapshot.side(side)[: self._depth_levels]:
            total += level.notional
            amount += level.amount

        if total <= 0.0 or amount <= 0.0:
            raise EmptyBookError(f"No {side.value.lower()} liquidity on {snapshot.symbol}")

        return total, amount
