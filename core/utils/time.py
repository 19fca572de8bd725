"""
Time Utilities

Exchanges disagree on timestamp formats:
- Binance / Bitget: milliseconds since epoch as int or numeric string
- OKX: milliseconds since epoch as string ("1704110400000")
- Some payloads: seconds since epoch

Products carry `update_time` in epoch milliseconds, and history samples are
ordered by their normalized millisecond timestamps.
"""

from datetime import datetime, timezone
from typing import Union


def to_epoch_ms(timestamp: Union[int, float, str]) -> int:
    """
    Normalize a timestamp (seconds or milliseconds, number or numeric string) to epoch ms.

    Detection Logic:
        - If timestamp > 1e12: assumed to be milliseconds
        - Otherwise: assumed to be seconds

    Args:
        timestamp: Unix timestamp in seconds or milliseconds

    Returns:
        int: Milliseconds since epoch

    Raises:
        ValueError: If timestamp is negative or not numeric

    Examples:
        >>> to_epoch_ms("1704110400000")
        1704110400000
        >>> to_epoch_ms(1704110400)
        1704110400000
    """
    value = float(timestamp)

    if value < 0:
        raise ValueError(f"Timestamp cannot be negative: {timestamp}")

    if value > 1e12:
        return int(value)
    return int(value * 1000)


def datetime_to_timestamp(dt: datetime, milliseconds: bool = False) -> int:
    """
    Convert a datetime object to Unix timestamp.

    Args:
        dt: Datetime object (can be naive or timezone-aware)
        milliseconds: If True, return milliseconds; if False, return seconds

    Returns:
        int: Unix timestamp in seconds or milliseconds

    Notes:
        - If datetime is naive (no timezone), UTC is assumed
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    if milliseconds:
        return int(dt.timestamp() * 1000)
    return int(dt.timestamp())


def current_utc_timestamp(milliseconds: bool = False) -> int:
    """
    Get current UTC timestamp.

    Args:
        milliseconds: If True, return milliseconds; if False, return seconds

    Examples:
        >>> current_utc_timestamp(milliseconds=True)
        1704110400000
    """
    return datetime_to_timestamp(datetime.now(timezone.utc), milliseconds)
