"""
Rate Normalization Helpers

Shared by all exchange adapters to turn vendor-native numbers into the
Product schema's units:

- APY in percentage points with two decimals (4.25 == 4.25%)
- fixed-length history per period, oldest first, padded with the current APY
- the tier / product selection rules used when an exchange offers several rates
"""

from typing import Callable, Dict, List, Optional, Sequence, TypeVar, Union

from core.schemas import HISTORY_POINTS


T = TypeVar("T")

Number = Union[int, float, str]


def round_rate(value: Number) -> float:
    """Round a percentage-point value to two decimals."""
    return round(float(value), 2)


def to_percent(fraction: Number) -> float:
    """
    Convert a fractional rate to percentage points.

    Examples:
        >>> to_percent("0.0425")
        4.25
        >>> to_percent(0.051234)
        5.12
    """
    return round_rate(float(fraction) * 100)


def parse_percent(value: str) -> float:
    """
    Parse a rate that is already expressed in percent, with or without a "%" suffix.

    Examples:
        >>> parse_percent("4.25%")
        4.25
        >>> parse_percent(" 3.1 ")
        3.1
    """
    return round_rate(value.strip().rstrip("%"))


def parse_amount(value: Optional[Number]) -> Optional[float]:
    """
    Parse an optional amount bound. Empty strings and None mean "no bound".

    Examples:
        >>> parse_amount("500")
        500.0
        >>> parse_amount("") is None
        True
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return float(value)


def select_tier(tiers: Sequence[T], lower_bound: Callable[[T], float]) -> T:
    """
    Pick the rate tier to report for a tiered (ladder) product.

    Tiers are ordered by their lower bound. The first tier of a ladder is a
    small promotional bracket, so the second tier is reported whenever more
    than one exists; a single-tier product reports its only tier.

    Args:
        tiers: Tier objects in any order
        lower_bound: Extracts a tier's minimum deposit

    Raises:
        ValueError: If tiers is empty

    Example:
        >>> select_tier([{"min": 0, "apy": 10}, {"min": 500, "apy": 4}], lambda t: t["min"])
        {'min': 500, 'apy': 4}
    """
    if not tiers:
        raise ValueError("Cannot select a tier from an empty tier list")

    ordered = sorted(tiers, key=lower_bound)
    return ordered[1] if len(ordered) > 1 else ordered[0]


def pick_highest(candidates: Sequence[T], rate: Callable[[T], float]) -> Optional[T]:
    """Return the candidate with the highest rate (first one wins ties), or None if empty."""
    if not candidates:
        return None
    return max(candidates, key=rate)


def build_apy_history(samples: Sequence[float], current_apy: float) -> Dict[str, List[float]]:
    """
    Build the fixed-length history for every period.

    For each period the newest N samples are kept (N = 12, 28, 120), still
    ordered oldest to newest. When fewer than N samples exist the tail is
    padded with the current APY.

    Args:
        samples: Historical APY values in percentage points, oldest first
        current_apy: Current APY in percentage points

    Example:
        >>> build_apy_history([5.0, 5.1, 5.2], 5.3)["1d"]
        [5.0, 5.1, 5.2, 5.3, 5.3, 5.3, 5.3, 5.3, 5.3, 5.3, 5.3, 5.3]
    """
    history = {}
    for period, points in HISTORY_POINTS.items():
        recent = list(samples[-points:]) if samples else []
        history[period] = recent + [current_apy] * (points - len(recent))
    return history
