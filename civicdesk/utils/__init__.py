"""
Utility package initialization and exports
"""

from .datetime_utils import DateTimeHelper, to_naive_utc, utc_now
from .hashing import TokenHasher

__all__ = [
    "DateTimeHelper",
    "TokenHasher",
    "to_naive_utc",
    "utc_now",
]
