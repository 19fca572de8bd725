"""
Request Signing

HMAC-SHA256 signatures for exchanges whose earn endpoints require
authenticated requests.

- Binance: hex digest over the urlencoded query string (which carries
  the timestamp). Sent as the `signature` query parameter.
- Bitget: base64 digest over timestamp + METHOD + requestPath[?query] + body.
  Sent in the ACCESS-SIGN header.

All functions are pure. Nothing here logs, stores or caches a secret or a
signature.
"""

import base64
import hashlib
import hmac
from typing import Literal

from core.exceptions import MissingCredentialsError


SignatureEncoding = Literal["hex", "base64"]


def sign_hmac_sha256(
    message: str,
    secret: str,
    encoding: SignatureEncoding = "hex",
    exchange: str = "unknown"
) -> str:
    """
    Compute an HMAC-SHA256 signature.

    Args:
        message: Canonical request string built by the caller
        secret: Secret key
        encoding: "hex" or "base64"
        exchange: Exchange name used in the error when the secret is missing

    Returns:
        Encoded signature

    Raises:
        MissingCredentialsError: If secret is empty
        ValueError: If encoding is unknown
    """
    if not secret:
        raise MissingCredentialsError(exchange, "secret key is not configured")

    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()

    if encoding == "hex":
        return digest.hex()
    if encoding == "base64":
        return base64.b64encode(digest).decode("ascii")
    raise ValueError(f"Unsupported signature encoding: {encoding}")


# ============================================
# Vendor Conventions
# ============================================

def binance_query_signature(query_string: str, secret: str) -> str:
    """Signature for a Binance SIGNED endpoint: hex HMAC of the exact query string."""
    return sign_hmac_sha256(query_string, secret, encoding="hex", exchange="binance")


def bitget_prehash(
    timestamp: str,
    method: str,
    request_path: str,
    query_string: str = "",
    body: str = ""
) -> str:
    """
    Build Bitget's canonical string.

    Example:
        >>> bitget_prehash("1700000000000", "get", "/api/v2/earn/savings/product", "coin=USDT")
        '1700000000000GET/api/v2/earn/savings/product?coin=USDT'
    """
    path = f"{request_path}?{query_string}" if query_string else request_path
    return f"{timestamp}{method.upper()}{path}{body}"


def bitget_signature(
    timestamp: str,
    method: str,
    request_path: str,
    secret: str,
    query_string: str = "",
    body: str = ""
) -> str:
    """Signature for a Bitget private endpoint: base64 HMAC of the prehash string."""
    message = bitget_prehash(timestamp, method, request_path, query_string, body)
    return sign_hmac_sha256(message, secret, encoding="base64", exchange="bitget")
