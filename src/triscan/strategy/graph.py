"""
Cycle discovery over the tradable pair graph.

Finds every triangle start -> A -> B -> start that the catalog allows,
in both traversal directions.
"""

import logging
from typing import Any

from triscan.core.types import Currency, Cycle, Pair
from triscan.market.catalog import PairCatalog


logger = logging.getLogger(__name__)


class CycleEnumerator:
    """
    Enumerates 3-currency trading cycles from a reference currency.

    Every ordered combination (P, P') of two distinct pairs containing
    the reference currency contributes its two non-reference members
    M and M'. When M and M' are distinct and trade directly, both
    (ref, M, M') and (ref, M', M) are emitted.
    """

    def __init__(self, catalog: PairCatalog) -> None:
        """
        Initialize cycle enumerator.

        Args:
            catalog: Loaded pair catalog.
        """
        self._catalog = catalog
        self._cycles: list[Cycle] = []

    def enumerate(
        self,
        reference: Currency,
        deduplicate: bool = True,
        max_cycles: int = 0,
    ) -> list[Cycle]:
        """
        Find all cycles starting and ending at the reference currency.

        Visiting (P, P') and later (P', P) yields the same two cycles
        again; with deduplicate=False those mirrored repeats are kept.

        Args:
            reference: Start/end currency.
            deduplicate: Drop cycles already emitted.
            max_cycles: Maximum cycles to return (0 = no limit).

        Returns:
            Cycles in discovery order.
        """
        anchored = self._catalog.pairs_with(reference)
        if not anchored:
            logger.warning(f"Reference currency {reference} not in catalog")
            self._cycles = []
            return []

        cycles: list[Cycle] = []
        seen: set[Cycle] = set()

        for first in anchored:
            for second in anchored:
                if first == second:
                    continue

                members = self._new_members(first, second, reference)
                if members is None:
                    continue

                mid1, mid2 = members
                if not self._catalog.has_pair(mid1, mid2):
                    continue

                for cycle in (Cycle(reference, mid1, mid2), Cycle(reference, mid2, mid1)):
                    if deduplicate:
                        if cycle in seen:
                            continue
                        seen.add(cycle)
                    cycles.append(cycle)

                if max_cycles and len(cycles) >= max_cycles:
                    break

            if max_cycles and len(cycles) >= max_cycles:
                break

        if max_cycles:
            cycles = cycles[:max_cycles]

        self._cycles = cycles
        logger.info(f"Found {len(cycles)} cycles from {reference}")

        return cycles

    @staticmethod
    def _new_members(
        first: Pair,
        second: Pair,
        reference: Currency,
    ) -> tuple[Currency, Currency] | None:
        """
        Collect the non-reference members of two anchored pairs.

        Returns:
            (M, M') when each pair contributes exactly one distinct
            new currency, None otherwise.
        """
        members = [c for c in (*first.members, *second.members) if c != reference]
        if len(members) != 2 or members[0] == members[1]:
            return None
        return members[0], members[1]

    def get_cycles(self) -> list[Cycle]:
        """Get the cycles from the last enumeration."""
        return self._cycles

    def symbols_for(self, cycles: list[Cycle] | None = None) -> set[str]:
        """
        Get every trading symbol the cycles touch.

        Args:
            cycles: Cycles to inspect (default: last enumeration).

        Returns:
            Set of trading symbols.
        """
        symbols: set[str] = set()
        for cycle in self._cycles if cycles is None else cycles:
            for from_currency, to_currency in cycle.legs:
                pair = self._catalog.find_pair(from_currency, to_currency)
                if pair is not None:
                    symbols.add(pair.symbol)
        return symbols

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        """
        Convert cycles to serializable format.

        Returns:
            Dict with cycle data.
        """
        return {
            "cycles": [
                {
                    "id": cycle.id,
                    "start": cycle.start,
                    "legs": [
                        {
                            "symbol": self._catalog.lookup_pair(from_currency, to_currency).symbol,
                            "from": from_currency,
                            "to": to_currency,
                        }
                        for from_currency, to_currency in cycle.legs
                    ],
                }
                for cycle in self._cycles
            ]
        }
