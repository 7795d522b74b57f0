"""
Entry point for the cycle scanner.

Usage:
    python -m triscan
    triscan  # if installed via pip
"""

import asyncio
import logging
import sys


# Try to use uvloop for better performance
try:
    import uvloop

    uvloop.install()
    UVLOOP_ENABLED = True
except ImportError:
    UVLOOP_ENABLED = False


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    from pydantic import ValidationError

    from triscan import __version__
    from triscan.config.settings import get_settings
    from triscan.core.errors import ScanError
    from triscan.core.scanner import CycleScanner

    # Print banner
    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║     TRIANGULAR ARBITRAGE SCANNER v{__version__:<22}      ║
║                                                               ║
║     Read-only cycle monitor for Huobi                         ║
╚═══════════════════════════════════════════════════════════════╝
    """
    )

    # Load settings
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Configuration error: {e}")
        print("\nSettings are read from TRISCAN_* environment variables or .env")
        return 1

    # Print configuration summary
    print("Configuration:")
    print(f"  Endpoint:       {settings.rest_url}")
    print(f"  Reference:      {settings.reference_currency}")
    print(f"  Fee:            {settings.fee * 100:.3f}%")
    print(f"  Depth levels:   {settings.depth_levels}")
    print(f"  Scan interval:  {settings.scan_interval_seconds}s")
    print(f"  Max cycles:     {settings.max_cycles or 'all'}")
    print(f"  Concurrency:    {settings.max_concurrent_cycles}")
    print(f"  uvloop:         {'Enabled' if UVLOOP_ENABLED else 'Disabled'}")
    print()

    # Run the scanner
    async def run_scanner() -> int:
        scanner = CycleScanner(settings)

        try:
            await scanner.setup()
            await scanner.run()
            return 0

        except KeyboardInterrupt:
            print("\nInterrupted by user")
            return 0

        except ScanError as e:
            print(f"\nFatal error: {e}")
            logging.getLogger("triscan").exception("Scanner aborted")
            return 1

        finally:
            await scanner.shutdown()

    return asyncio.run(run_scanner())


if __name__ == "__main__":
    sys.exit(main())
