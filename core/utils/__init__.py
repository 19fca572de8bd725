"""
Core Utilities Package

Modules:
    - time: Timestamp normalization
    - rates: APY unit conversion, tier selection and history back-fill
"""

from core.utils.time import to_epoch_ms, current_utc_timestamp
from core.utils.rates import to_percent, parse_percent, build_apy_history, select_tier

__all__ = [
    "to_epoch_ms",
    "current_utc_timestamp",
    "to_percent",
    "parse_percent",
    "build_apy_history",
    "select_tier",
]
