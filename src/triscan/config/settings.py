"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from triscan.config.constants import (
    DEFAULT_CATALOG_REFRESH,
    DEFAULT_DEPTH_LEVELS,
    DEFAULT_MAX_CONCURRENT_CYCLES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REFERENCE_CURRENCY,
    DEFAULT_REPORT_TOP,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_REQUESTS_PER_SECOND,
    DEFAULT_RETRY_BASE_DELAY,
    DEFAULT_ROUND_TRIP_FEE,
    DEFAULT_SCAN_INTERVAL,
    HUOBI_REST_URL,
)
from triscan.core.types import normalize_currency


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field can be overridden with a TRISCAN_ prefixed variable,
    e.g. TRISCAN_REFERENCE_CURRENCY=btc.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRISCAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Network Configuration
    # =========================================================================

    rest_url: str = Field(
        default=HUOBI_REST_URL,
        description="Base URL of the exchange REST API",
    )

    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0.0,
        le=120.0,
        description="Total timeout for a single HTTP request",
    )

    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        ge=0,
        le=10,
        description="Retries for transient transport failures",
    )

    retry_base_delay: float = Field(
        default=DEFAULT_RETRY_BASE_DELAY,
        ge=0.0,
        le=30.0,
        description="First backoff delay in seconds, doubled on each retry",
    )

    requests_per_second: int = Field(
        default=DEFAULT_REQUESTS_PER_SECOND,
        ge=1,
        le=100,
        description="Maximum REST requests per second",
    )

    # =========================================================================
    # Scanning Configuration
    # =========================================================================

    reference_currency: str = Field(
        default=DEFAULT_REFERENCE_CURRENCY,
        description="Start/end currency of every cycle",
    )

    fee: float = Field(
        default=DEFAULT_ROUND_TRIP_FEE,
        ge=0.0,
        le=0.05,
        description="Round-trip fee subtracted from the cycle rate (0.002 = 0.2%)",
    )

    depth_levels: int = Field(
        default=DEFAULT_DEPTH_LEVELS,
        ge=1,
        le=20,
        description="Order book levels sampled per leg (1 = top of book)",
    )

    scan_interval_seconds: float = Field(
        default=DEFAULT_SCAN_INTERVAL,
        ge=0.0,
        description="Pause between two scans",
    )

    catalog_refresh_seconds: float = Field(
        default=DEFAULT_CATALOG_REFRESH,
        ge=0.0,
        description="Reload the pair catalog after this many seconds (0 disables)",
    )

    max_concurrent_cycles: int = Field(
        default=DEFAULT_MAX_CONCURRENT_CYCLES,
        ge=1,
        le=128,
        description="Cycles evaluated concurrently within a scan",
    )

    max_cycles: int = Field(
        default=0,
        ge=0,
        description="Maximum number of cycles to monitor (0 = all)",
    )

    deduplicate_cycles: bool = Field(
        default=True,
        description="Drop mirrored duplicates produced by cycle enumeration",
    )

    # =========================================================================
    # Operation Mode
    # =========================================================================

    report_top: int = Field(
        default=DEFAULT_REPORT_TOP,
        ge=1,
        le=100,
        description="Cycles shown in the per-scan summary",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("reference_currency", mode="after")
    @classmethod
    def validate_reference_currency(cls, v: str) -> str:
        """Normalize the reference currency token."""
        return normalize_currency(v)

    @field_validator("rest_url", mode="after")
    @classmethod
    def validate_rest_url(cls, v: str) -> str:
        """Strip trailing slashes so endpoints can be appended."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"REST URL must be http(s), got {v!r}")
        return v.rstrip("/")

    @field_validator("fee", mode="after")
    @classmethod
    def validate_fee(cls, v: float) -> float:
        """Warn if the fee is set below realistic taker fees."""
        if v < 0.001:
            import warnings

            warnings.warn(
                f"Round-trip fee {v} is below typical taker fees, reported rates will be optimistic",
                stacklevel=2,
            )
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
