"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Holds per-exchange base URLs and credentials
- Transport tuning (timeouts, retries, history throttling)
- Cache TTL and server settings

Missing exchange credentials are not an error: the affected exchange is
disabled and only produces placeholder products.

Usage:
    from core.config import settings

    print(settings.binance_base_url)
    print(settings.bitget_credentials_configured)
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        binance_base_url: Base URL for Binance spot/SAPI endpoints
        binance_api_key: Binance API key (required for Simple Earn endpoints)
        binance_secret_key: Binance secret key used to sign requests
        bybit_base_url: Base URL for Bybit v5 API
        okx_base_url: Base URL for OKX v5 API
        bitget_base_url: Base URL for Bitget v2 API
        bitget_api_key: Bitget API key
        bitget_secret_key: Bitget secret key used to sign requests
        bitget_passphrase: Bitget API passphrase
        request_timeout: Total timeout for a single outbound request in seconds
        max_retries: Attempts per outbound request for transient failures
        retry_backoff: Base delay between retries in seconds (linear backoff)
        history_request_delay: Minimum spacing between rate-history calls in seconds
        cache_ttl: Product cache time-to-live in seconds
        app_host: Host address for FastAPI server
        app_port: Port number for FastAPI server
        environment: Current environment (development, production)
        debug: Enable debug mode
        log_level: Logging level
        cors_origins: Comma-separated list of allowed CORS origins
        disconnect_poll_interval: How often an in-flight request checks for client disconnect
    """

    # ============================================
    # Binance (Simple Earn) Configuration
    # ============================================

    binance_base_url: str = Field(
        default="https://api.binance.com",
        description="Binance API base URL (SAPI endpoints)"
    )

    binance_api_key: str = Field(
        default="",
        description="Binance API key (empty = Binance disabled)"
    )

    binance_secret_key: str = Field(
        default="",
        description="Binance secret key (empty = Binance disabled)"
    )

    # ============================================
    # Bybit / OKX Configuration (public endpoints)
    # ============================================

    bybit_base_url: str = Field(
        default="https://api.bybit.com",
        description="Bybit v5 API base URL"
    )

    okx_base_url: str = Field(
        default="https://www.okx.com",
        description="OKX v5 API base URL"
    )

    # ============================================
    # Bitget Configuration
    # ============================================

    bitget_base_url: str = Field(
        default="https://api.bitget.com",
        description="Bitget v2 API base URL"
    )

    bitget_api_key: str = Field(
        default="",
        description="Bitget API key (empty = Bitget disabled)"
    )

    bitget_secret_key: str = Field(
        default="",
        description="Bitget secret key (empty = Bitget disabled)"
    )

    bitget_passphrase: str = Field(
        default="",
        description="Bitget API passphrase (empty = Bitget disabled)"
    )

    # ============================================
    # Transport & Rate Limiting
    # ============================================

    request_timeout: float = Field(
        default=10.0,
        description="Total timeout for one outbound HTTP request (seconds)"
    )

    max_retries: int = Field(
        default=2,
        description="Attempts per outbound request for timeouts, connection errors and 5xx"
    )

    retry_backoff: float = Field(
        default=0.5,
        description="Base retry delay in seconds (delay = retry_backoff * attempt)"
    )

    history_request_delay: float = Field(
        default=0.25,
        description="Minimum spacing between rate-history requests to one exchange (seconds)"
    )

    # ============================================
    # Caching Configuration
    # ============================================

    cache_ttl: float = Field(
        default=120.0,
        description="Product cache TTL in seconds"
    )

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8000,
        description="FastAPI server port"
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, production)"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    disconnect_poll_interval: float = Field(
        default=0.1,
        description="Interval (seconds) at which /products checks for client disconnect"
    )

    # ============================================
    # Pydantic Settings Configuration
    # ============================================

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    # ============================================
    # Properties
    # ============================================

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Convert comma-separated CORS origins string to a list.

        Example:
            >>> settings.cors_origins_list
            ['http://localhost:3000']
        """
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def binance_credentials_configured(self) -> bool:
        """True when both Binance key and secret are set."""
        return bool(self.binance_api_key and self.binance_secret_key)

    @property
    def bitget_credentials_configured(self) -> bool:
        """True when Bitget key, secret and passphrase are all set."""
        return bool(self.bitget_api_key and self.bitget_secret_key and self.bitget_passphrase)


# ============================================
# Global Settings Instance
# ============================================

# Loaded once and reused; components accept an explicit Settings for tests
settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(config: Settings = None) -> None:
    """
    Validate configuration settings on application startup.

    Args:
        config: Settings to validate (defaults to the global settings)

    Raises:
        ValueError: If a setting is invalid

    Missing exchange credentials are reported but never raise; the exchange
    simply stays disabled.
    """
    # Import logger here to avoid circular import
    # (logging.py imports config.py, so we can't import at module level)
    from core.logging import logger

    config = config or settings

    if not (1 <= config.app_port <= 65535):
        raise ValueError(f"Invalid port number: {config.app_port}. Must be between 1 and 65535")

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    if config.cache_ttl <= 0:
        raise ValueError(f"CACHE_TTL must be positive, got {config.cache_ttl}")

    if config.request_timeout <= 0:
        raise ValueError(f"REQUEST_TIMEOUT must be positive, got {config.request_timeout}")

    if config.max_retries < 1:
        raise ValueError(f"MAX_RETRIES must be at least 1, got {config.max_retries}")

    logger.info("Configuration validated successfully")
    logger.info(f"Binance: {'enabled' if config.binance_credentials_configured else 'disabled (no credentials)'}")
    logger.info(f"Bitget: {'enabled' if config.bitget_credentials_configured else 'disabled (no credentials)'}")
    logger.info(f"Server: {config.app_host}:{config.app_port}")
    logger.info(f"Log level: {config.log_level.upper()}")
    logger.info(f"Cache TTL: {config.cache_ttl:.0f}s")
