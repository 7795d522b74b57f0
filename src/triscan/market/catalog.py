"""
Tradable pair catalog.

Holds the exchange's currency pairs and answers membership and
lookup queries for the cycle enumerator and evaluator.
"""

import logging
from collections.abc import Iterable, Iterator

import networkx as nx

from triscan.core.errors import InsufficientLegsError
from triscan.core.types import Currency, MarketDataProvider, Pair


logger = logging.getLogger(__name__)


class PairCatalog:
    """
    Read-only set of tradable pairs.

    Pairs are kept in exchange listing order and indexed in an
    undirected graph where nodes are currencies and each edge carries
    the pair trading them. When the exchange lists two pairs over the
    same currencies, the first one listed wins.
    """

    __slots__ = ("_pairs", "_graph")

    def __init__(self, pairs: Iterable[Pair] = ()) -> None:
        """
        Initialize catalog.

        Args:
            pairs: Pairs in listing order.
        """
        self._pairs: list[Pair] = []
        self._graph: nx.Graph = nx.Graph()

        for pair in pairs:
            self._add_pair(pair)

    @classmethod
    async def load(cls, provider: MarketDataProvider) -> "PairCatalog":
        """
        Fetch the catalog from a market data provider.

        Args:
            provider: Source of the pair list.

        Returns:
            Loaded catalog.

        Raises:
            FetchError: On transport failure.
            DecodeError: On a malformed response.
            ProviderError: If the provider reports an error status.
        """
        pairs = await provider.fetch_pairs()
        catalog = cls(pairs)
        logger.info(
            f"Loaded {len(catalog)} pairs over {len(catalog.currencies)} currencies"
        )
        return catalog

    def _add_pair(self, pair: Pair) -> None:
        """Add pair to the list and the graph index."""
        self._pairs.append(pair)

        if self._graph.has_edge(pair.base, pair.quote):
            existing = self._graph.edges[pair.base, pair.quote]["pair"]
            logger.debug(f"Duplicate listing {pair.symbol}, keeping {existing.symbol}")
            return

        self._graph.add_edge(pair.base, pair.quote, pair=pair)

    # =========================================================================
    # Queries
    # =========================================================================

    @staticmethod
    def has(pair: Pair, currency: Currency) -> bool:
        """
        Check if currency is one of the pair's two members.

        Args:
            pair: Pair to inspect.
            currency: Currency token.

        Returns:
            True if currency is the base or the quote.
        """
        return pair.has(currency)

    @staticmethod
    def symbol_of(pair: Pair) -> str:
        """Trading symbol of a pair: base token then quote token."""
        return pair.symbol

    def find_pair(self, currency_a: Currency, currency_b: Currency) -> Pair | None:
        """
        Find the pair trading two currencies directly.

        Args:
            currency_a: First currency.
            currency_b: Second currency.

        Returns:
            Pair or None if the currencies are not directly tradable.
        """
        if currency_a == currency_b or not self._graph.has_edge(currency_a, currency_b):
            return None
        pair: Pair = self._graph.edges[currency_a, currency_b]["pair"]
        return pair

    def lookup_pair(self, currency_a: Currency, currency_b: Currency) -> Pair:
        """
        Get the pair whose members are exactly {currency_a, currency_b}.

        Raises:
            InsufficientLegsError: If no such pair is listed.
        """
        pair = self.find_pair(currency_a, currency_b)
        if pair is None:
            raise InsufficientLegsError(f"No pair trades {currency_a} against {currency_b}")
        return pair

    def has_pair(self, currency_a: Currency, currency_b: Currency) -> bool:
        """Check whether two currencies trade directly."""
        return self.find_pair(currency_a, currency_b) is not None

    def pairs_with(self, currency: Currency) -> list[Pair]:
        """
        Get all pairs containing a currency, in listing order.

        Args:
            currency: Currency token.

        Returns:
            Matching pairs.
        """
        return [pair for pair in self._pairs if pair.has(currency)]

    @property
    def pairs(self) -> list[Pair]:
        """All pairs in listing order."""
        return list(self._pairs)

    @property
    def currencies(self) -> set[Currency]:
        """All currencies appearing in at least one pair."""
        return set(self._graph.nodes())

    @property
    def graph(self) -> nx.Graph:
        """Get the underlying NetworkX graph."""
        return self._graph

    def __contains__(self, pair: object) -> bool:
        return pair in self._pairs

    def __iter__(self) -> Iterator[Pair]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)
