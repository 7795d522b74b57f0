"""
Triangular Arbitrage Scanner.

An asynchronous monitor that enumerates 3-currency trading cycles on
Huobi and reports their fee-adjusted return and executable volume from
live order book snapshots. It observes only and never places orders.
"""

__version__ = "1.0.0"
