"""Mock implementations for testing."""

from tests.mocks.http import FakeResponse, FakeSession
from tests.mocks.provider import MockMarketDataProvider, make_snapshot


__all__ = ["FakeResponse", "FakeSession", "MockMarketDataProvider", "make_snapshot"]
