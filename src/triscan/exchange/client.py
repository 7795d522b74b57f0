"""
Async Huobi REST API client.

Implements the MarketDataProvider protocol with:
- A single long-lived session, injectable for sharing and testing
- Fast JSON parsing with orjson
- Integrated rate limiting
- Per-request timeouts and bounded retry with exponential backoff
"""

import asyncio
import logging
from typing import Any

import aiohttp
import orjson
from pydantic import ValidationError

from triscan.config.constants import (
    ALLOWED_DEPTHS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_BASE_DELAY,
    DEPTH_TYPE,
    ENDPOINT_DEPTH,
    ENDPOINT_SYMBOLS,
    HUOBI_REST_URL,
    RETRY_MAX_DELAY,
    RETRY_MULTIPLIER,
    RETRYABLE_STATUSES,
    USER_AGENT,
)
from triscan.core.errors import DecodeError, FetchError, ProviderError
from triscan.core.types import OrderBookSnapshot, Pair
from triscan.exchange.models import ApiResponse, DepthResponse, SymbolsResponse
from triscan.exchange.rate_limiter import RateLimiter


logger = logging.getLogger(__name__)


def depth_param(depth_hint: int) -> int | None:
    """
    Map a requested number of levels to a /market/depth size.

    Args:
        depth_hint: Levels wanted per side (0 = exchange default).

    Returns:
        Smallest allowed depth covering the hint, or None to omit the parameter.
    """
    if depth_hint <= 0:
        return None
    for allowed in ALLOWED_DEPTHS:
        if depth_hint <= allowed:
            return allowed
    return None


class HuobiClient:
    """
    Async Huobi public market data client.

    Features:
    - Single session with connection pooling
    - orjson for fast JSON parsing
    - Integrated rate limiting
    - Retries transient FetchError only
    """

    def __init__(
        self,
        base_url: str = HUOBI_REST_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        rate_limiter: RateLimiter | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        Initialize the Huobi client.

        Args:
            base_url: REST API base URL.
            timeout: Total timeout per request in seconds.
            max_retries: Retries for transient transport failures.
            retry_base_delay: First backoff delay in seconds.
            rate_limiter: Optional rate limiter instance.
            session: Externally owned session; the client creates and
                owns one when omitted.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._rate_limiter = rate_limiter or RateLimiter()
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=100,
                limit_per_host=50,
                keepalive_timeout=30,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"User-Agent": USER_AGENT},
                timeout=self._timeout,
            )
            self._owns_session = True

        return self._session

    async def close(self) -> None:
        """Close the client session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _backoff_delay(self, attempt: int) -> float:
        """Exponential backoff for a zero-based retry attempt."""
        delay = self._retry_base_delay * (RETRY_MULTIPLIER**attempt)
        return min(delay, RETRY_MAX_DELAY)

    async def _request(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Make a GET request, retrying transient failures.

        Args:
            endpoint: API endpoint.
            params: Query parameters.

        Returns:
            Parsed JSON response.

        Raises:
            FetchError: On network errors once retries are exhausted.
            ProviderError: On an error status reported by the exchange.
            DecodeError: On a malformed response body.
        """
        attempt = 0
        while True:
            try:
                return await self._request_once(endpoint, params)
            except FetchError as e:
                if attempt >= self._max_retries:
                    raise
                delay = self._backoff_delay(attempt)
                attempt += 1
                logger.warning(
                    f"Request {endpoint} failed ({e}), retry {attempt}/{self._max_retries} in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

    async def _request_once(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Single request attempt without retry."""
        await self._rate_limiter.acquire()

        url = f"{self._base_url}{endpoint}"
        session = await self._get_session()

        try:
            async with session.get(url, params=params or {}, timeout=self._timeout) as response:
                body = await response.read()
                status = response.status
        except asyncio.TimeoutError as e:
            raise FetchError(f"Timeout requesting {endpoint}") from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Network error: {e}") from e

        return self._handle_response(endpoint, status, body)

    @staticmethod
    def _handle_response(endpoint: str, status: int, body: bytes) -> dict[str, Any]:
        """
        Decode a raw body into a JSON object.

        The body is handed to orjson as bytes, so invalid UTF-8 surfaces
        as a DecodeError like any other unparseable payload.
        """
        if status in RETRYABLE_STATUSES:
            raise FetchError(f"HTTP {status} from {endpoint}")

        try:
            data = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            if status >= 400:
                raise ProviderError(f"HTTP {status} from {endpoint}", code=status) from e
            raise DecodeError(f"Invalid JSON response from {endpoint}: {e}") from e

        if not isinstance(data, dict):
            raise DecodeError(f"Unexpected payload type from {endpoint}: {type(data).__name__}")

        if status >= 400:
            code = data.get("err-code", status)
            msg = data.get("err-msg", f"HTTP {status}")
            raise ProviderError(f"API error {code}: {msg}", code=code)

        return data

    @staticmethod
    def _check_status(endpoint: str, data: dict[str, Any]) -> None:
        """
        Validate the envelope alone and raise on an error status.

        Runs before the payload model so that error replies carrying
        "data": null are reported as provider errors.
        """
        try:
            response = ApiResponse.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Malformed envelope from {endpoint}: {e}") from e

        if response.is_error:
            raise ProviderError(
                f"Exchange error {response.err_code} on {endpoint}: {response.err_msg}",
                code=response.err_code,
            )

    # =========================================================================
    # Public Endpoints
    # =========================================================================

    async def fetch_pairs(self) -> list[Pair]:
        """
        Get the tradable pair catalog.

        Offline symbols are skipped.

        Returns:
            Pairs in exchange listing order.
        """
        data = await self._request(ENDPOINT_SYMBOLS)
        self._check_status(ENDPOINT_SYMBOLS, data)

        try:
            response = SymbolsResponse.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Malformed symbols response: {e}") from e

        pairs: list[Pair] = []
        for symbol_data in response.data:
            if not symbol_data.is_online:
                continue
            try:
                pairs.append(symbol_data.to_pair())
            except ValueError as e:
                logger.debug(f"Skipping invalid symbol {symbol_data.symbol}: {e}")

        return pairs

    async def fetch_order_book(self, symbol: str, depth_hint: int = 0) -> OrderBookSnapshot:
        """
        Get order book depth for a trading symbol.

        Args:
            symbol: Trading symbol (e.g., "btcusdt").
            depth_hint: Levels wanted per side (0 = exchange default).

        Returns:
            Order book snapshot.
        """
        params: dict[str, Any] = {"symbol": symbol, "type": DEPTH_TYPE}
        depth = depth_param(depth_hint)
        if depth is not None:
            params["depth"] = depth

        data = await self._request(ENDPOINT_DEPTH, params)
        self._check_status(ENDPOINT_DEPTH, data)

        try:
            response = DepthResponse.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Malformed depth response for {symbol}: {e}") from e

        if response.tick is None:
            raise DecodeError(f"Depth response for {symbol} has no tick")

        return response.tick.to_snapshot(symbol)

    async def __aenter__(self) -> "HuobiClient":
        """Async context manager entry."""
        await self._get_session()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.close()
