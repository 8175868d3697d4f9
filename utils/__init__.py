"""
Utility modules for the report engine.
"""

from .formatting import (
    format_currency,
    format_date,
    format_datetime,
    format_number,
    format_percent,
    format_quantity,
    sanitize_text,
    to_number,
    truncate_text,
)
from .config import Config

__all__ = [
    "format_currency",
    "format_date",
    "format_datetime",
    "format_number",
    "format_percent",
    "format_quantity",
    "sanitize_text",
    "to_number",
    "truncate_text",
    "Config",
]
