#!/usr/bin/env python3
"""
Cycle Discovery Script.

Loads the Huobi pair catalog and lists every triangular cycle from the
configured reference currency without evaluating any order book.
"""

import asyncio
import sys
from pathlib import Path

import orjson

from triscan.config.settings import get_settings
from triscan.core.errors import ScanError
from triscan.exchange.client import HuobiClient
from triscan.market.catalog import PairCatalog
from triscan.strategy.graph import CycleEnumerator


async def main() -> int:
    """Discover and display cycles."""
    print("=" * 60)
    print("  CYCLE DISCOVERY")
    print("=" * 60)
    print()

    settings = get_settings()

    async with HuobiClient(
        base_url=settings.rest_url,
        timeout=settings.request_timeout_seconds,
        max_retries=settings.max_retries,
    ) as client:
        print("Loading pair catalog...")
        try:
            catalog = await PairCatalog.load(client)
        except ScanError as e:
            print(f"Failed to load catalog: {e}")
            return 1

        print(f"Loaded {len(catalog)} pairs over {len(catalog.currencies)} currencies")
        print()

        print(f"Enumerating cycles from {settings.reference_currency}...")
        enumerator = CycleEnumerator(catalog)
        cycles = enumerator.enumerate(
            settings.reference_currency,
            deduplicate=settings.deduplicate_cycles,
            max_cycles=settings.max_cycles,
        )

        print(f"Found {len(cycles)} cycles")
        print()

        for i, cycle in enumerate(cycles, 1):
            legs_str = " -> ".join(
                f"{from_currency}({catalog.lookup_pair(from_currency, to_currency).symbol})"
                for from_currency, to_currency in cycle.legs
            )
            print(f"{i:4}. {cycle.id}")
            print(f"      {legs_str} -> {cycle.start}")

        print()
        print("=" * 60)
        print("  SUMMARY")
        print("=" * 60)
        print()
        print(f"Total cycles:    {len(cycles)}")
        print(f"Unique symbols:  {len(enumerator.symbols_for())}")
        print(f"Reference:       {settings.reference_currency}")
        print()

        export_path = Path("cycles.json")
        export_path.write_bytes(orjson.dumps(enumerator.to_dict(), option=orjson.OPT_INDENT_2))
        print(f"Exported to: {export_path}")

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
