"""Market data module: the tradable pair catalog."""

from triscan.market.catalog import PairCatalog


__all__ = [
    "PairCatalog",
]
