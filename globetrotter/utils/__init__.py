"""
Utility modules for the GlobeTrotter service.
"""

from .date_utils import date_range_inclusive, format_date, is_upcoming
from .formatting import format_currency

__all__ = [
    'date_range_inclusive',
    'format_date',
    'is_upcoming',
    'format_currency',
]
