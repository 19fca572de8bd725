"""
Unified Logging Configuration

This module sets up a centralized logging system for the entire application.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import logger, get_logger

    logger.info("Aggregating products")

    log = get_logger(__name__)
    log.warning("Bitget disabled: missing credentials")

Log Levels (from most to least verbose):
    DEBUG    - Request/response lines for every exchange call
    INFO     - Lifecycle events and cache misses
    WARNING  - Vendor-scoped failures that were absorbed into placeholders
    ERROR    - Unexpected failures that reach the HTTP error branch

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.

Secrets and request signatures are never logged: request parameters pass
through redact_params() before they are written.
"""

import logging
import sys
from typing import Any, Dict, Optional


LOGGER_NAME = "earnboard"

# Query/header keys whose values must never reach the log
SENSITIVE_KEYS = {"signature", "access-sign", "access-key", "access-passphrase", "x-mbx-apikey"}


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the application logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include module name in log messages

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Application started")
        2024-01-01 12:00:00 [INFO] earnboard: Application started
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level
except ImportError:
    log_level = "INFO"

logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module or component.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Child of the application logger

    Example:
        # In exchanges/okx/api_client.py:
        logger = get_logger(__name__)  # "earnboard.exchanges.okx.api_client"
    """
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def set_log_level(level: str) -> None:
    """
    Change the log level at runtime.

    Args:
        level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))


# ============================================
# Log Helper Functions
# ============================================

def redact_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Return a copy of params/headers with sensitive values masked.

    Example:
        >>> redact_params({"asset": "USDT", "signature": "ab12"})
        {'asset': 'USDT', 'signature': '***'}
    """
    if not params:
        return {}
    return {
        key: ("***" if key.lower() in SENSITIVE_KEYS else value)
        for key, value in params.items()
    }


def log_api_request(exchange: str, endpoint: str, params: dict = None) -> None:
    """
    Log an API request with consistent formatting.

    Args:
        exchange: Exchange name (e.g., "binance")
        endpoint: API endpoint being called
        params: Request parameters (optional, redacted before logging)

    Example:
        >>> log_api_request("okx", "/api/v5/finance/savings/lending-rate-summary", {"ccy": "USDT"})
        [DEBUG] API Request: okx /api/v5/finance/savings/lending-rate-summary | Params: {'ccy': 'USDT'}
    """
    if params:
        logger.debug(f"API Request: {exchange} {endpoint} | Params: {redact_params(params)}")
    else:
        logger.debug(f"API Request: {exchange} {endpoint}")


def log_api_response(exchange: str, endpoint: str, status: int, response_time: float = None) -> None:
    """
    Log an API response with status and timing information.

    Args:
        exchange: Exchange name
        endpoint: API endpoint
        status: HTTP status code
        response_time: Response time in seconds (optional)

    Example:
        >>> log_api_response("bybit", "/v5/earn/product", 200, 0.342)
        [DEBUG] API Response: bybit /v5/earn/product | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {exchange} {endpoint} | Status: {status}{time_str}")


logger.debug("Logging system initialized")
