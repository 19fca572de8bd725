"""
Exchange Error Taxonomy

Every failure that originates at an exchange is raised as an ExchangeError
subclass. Adapters catch ExchangeError at their public boundary and turn it
into placeholder products, so none of these ever reaches the HTTP layer.
Anything that is not an ExchangeError is treated as a programming defect and
propagates to the endpoint's error branch.

Hierarchy:
    ExchangeError
    ├── MissingCredentialsError    configuration (key/secret/passphrase unset)
    ├── ExchangeTransportError     network failure
    │   ├── ExchangeTimeoutError   request exceeded its timeout
    │   └── SessionNotOpenError    HTTP session never opened
    ├── ExchangeHTTPError          non-success HTTP status
    │   └── RateLimitedError       429/418 or a vendor throttle code
    ├── ExchangeResponseError      business error inside a 200 JSON body
    └── PayloadSchemaError         payload did not match the vendor schema
"""

from typing import Optional


class ExchangeError(Exception):
    """Base class for vendor-scoped, non-fatal errors."""

    def __init__(self, exchange: str, message: str):
        self.exchange = exchange
        self.message = message
        super().__init__(f"[{exchange}] {message}")


class MissingCredentialsError(ExchangeError):
    """Raised when a signed request is attempted without a configured secret."""

    def __init__(self, exchange: str, message: str = "API credentials are not configured"):
        super().__init__(exchange, message)


class ExchangeTransportError(ExchangeError):
    """Network-level failure (connection refused, DNS, reset, ...)."""


class ExchangeTimeoutError(ExchangeTransportError):
    """Request did not complete within the configured timeout."""


class SessionNotOpenError(ExchangeTransportError):
    """Request attempted before the client's HTTP session was opened."""


class ExchangeHTTPError(ExchangeError):
    """Exchange answered with a non-success HTTP status."""

    def __init__(self, exchange: str, status: int, message: str = ""):
        self.status = status
        super().__init__(exchange, f"HTTP {status}{': ' + message if message else ''}")


class RateLimitedError(ExchangeHTTPError):
    """Exchange throttled the request. Never retried."""

    def __init__(self, exchange: str, status: int = 429, message: str = "rate limited"):
        super().__init__(exchange, status, message)


class ExchangeResponseError(ExchangeError):
    """Exchange returned a business error code in an otherwise successful response."""

    def __init__(self, exchange: str, code: Optional[str], message: str = ""):
        self.code = code
        super().__init__(exchange, f"code={code} {message}".strip())


class PayloadSchemaError(ExchangeError):
    """Response body did not match the expected vendor schema."""
