"""
Formatting utilities.

Locale-aware number, currency, percentage and date formatting used by the
report sections. All functions are pure and safe to call with partial or
malformed data: missing values render as a dash, unparsable numbers as zero.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Final, Optional, Union


# =============================================================================
# Locale Conventions
# =============================================================================

NBSP: Final[str] = "\u00a0"
MISSING: Final[str] = "—"
ELLIPSIS: Final[str] = "…"


@dataclass(frozen=True)
class LocaleConventions:
    """Separators and ordering rules for one locale."""

    thousands: str
    decimal: str
    symbol_first: bool
    date_format: str
    time_format: str = "%H:%M"


LOCALES: Final[dict[str, LocaleConventions]] = {
    "en-US": LocaleConventions(",", ".", True, "%m/%d/%Y", "%I:%M %p"),
    "en-GB": LocaleConventions(",", ".", True, "%d %B %Y"),
    "fr-FR": LocaleConventions(NBSP, ",", False, "%d/%m/%Y"),
    "fr-MR": LocaleConventions(NBSP, ",", False, "%d/%m/%Y"),
    "de-DE": LocaleConventions(".", ",", False, "%d.%m.%Y"),
}

DEFAULT_LOCALE: Final[str] = "en-US"

CURRENCY_SYMBOLS: Final[dict[str, str]] = {
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
}


def get_locale(locale: Optional[str]) -> LocaleConventions:
    """Look up conventions for a locale tag, falling back to en-US."""
    if locale and locale in LOCALES:
        return LOCALES[locale]
    if locale:
        # "fr_FR" and "fr" style tags
        tag = locale.replace("_", "-")
        if tag in LOCALES:
            return LOCALES[tag]
        language = tag.split("-")[0].lower()
        for key, conventions in LOCALES.items():
            if key.lower().startswith(language + "-"):
                return conventions
    return LOCALES[DEFAULT_LOCALE]


# =============================================================================
# Numbers
# =============================================================================

def to_number(value, default: float = 0.0) -> float:
    """
    Coerce a value to a finite float.

    Strings such as "1 200,50" or "$1,200.50" are not guessed at: only plain
    numeric strings are accepted. Anything else returns the default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except (TypeError, ValueError):
            return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def format_number(value, decimals: int = 0, locale: Optional[str] = None) -> str:
    """
    Format a number with locale grouping and decimal separators.

    Args:
        value: Any numeric-like value (coerced with to_number).
        decimals: Number of decimal places.
        locale: Locale tag, e.g. "fr-FR".

    Returns:
        Formatted number string.
    """
    conventions = get_locale(locale)
    number = to_number(value)
    text = f"{number:,.{decimals}f}"
    if text.startswith("-") and float(text.replace(",", "")) == 0:
        text = text[1:]
    integer, _, fraction = text.partition(".")
    integer = integer.replace(",", conventions.thousands)
    if fraction:
        return f"{integer}{conventions.decimal}{fraction}"
    return integer


def format_currency(
    amount,
    currency: str = "USD",
    locale: Optional[str] = None,
    decimals: int = 2,
) -> str:
    """
    Format an amount as currency.

    Known currencies use their symbol; anything else (e.g. MRU) is rendered
    with its ISO code. Placement follows the locale.

    Args:
        amount: The amount in whole units.
        currency: Currency code.
        locale: Locale tag.
        decimals: Number of decimal places.

    Returns:
        Formatted currency string.
    """
    conventions = get_locale(locale)
    number = round(to_number(amount), decimals)
    body = format_number(abs(number), decimals, locale)
    sign = "-" if number < 0 else ""
    symbol = CURRENCY_SYMBOLS.get(currency)

    if symbol is None:
        return f"{sign}{body}{NBSP}{currency}"
    if conventions.symbol_first:
        return f"{sign}{symbol}{body}"
    return f"{sign}{body}{NBSP}{symbol}"


def format_percent(value, decimals: int = 1, locale: Optional[str] = None) -> str:
    """
    Format a number as a percentage.

    Args:
        value: The percentage value.
        decimals: Number of decimal places.
        locale: Locale tag.

    Returns:
        Formatted percentage string.
    """
    body = format_number(value, decimals, locale)
    if get_locale(locale).symbol_first:
        return f"{body}%"
    return f"{body}{NBSP}%"


def format_quantity(quantity, unit: str = "", locale: Optional[str] = None) -> str:
    """Format a material quantity, dropping trailing zero decimals."""
    number = to_number(quantity)
    decimals = 0 if number == int(number) else 2
    body = format_number(number, decimals, locale)
    return f"{body} {unit}".strip()


# =============================================================================
# Dates
# =============================================================================

DateLike = Union[date, datetime, str, None]


def parse_date(value: DateLike) -> Optional[datetime]:
    """Parse a date-like value into a datetime, or None if it cannot be read."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_date(value: DateLike, locale: Optional[str] = None) -> str:
    """
    Format a date using the locale's short date pattern.

    Missing values render as a dash; unparsable strings are returned as-is.
    """
    if value is None or value == "":
        return MISSING
    parsed = parse_date(value)
    if parsed is None:
        return str(value)
    return parsed.strftime(get_locale(locale).date_format)


def format_datetime(value: DateLike, locale: Optional[str] = None) -> str:
    """Format a timestamp as date plus time."""
    if value is None or value == "":
        return MISSING
    parsed = parse_date(value)
    if parsed is None:
        return str(value)
    conventions = get_locale(locale)
    return parsed.strftime(f"{conventions.date_format} {conventions.time_format}")


# =============================================================================
# Text
# =============================================================================

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_text(value) -> str:
    """Strip control characters and collapse whitespace. None becomes ''."""
    if value is None:
        return ""
    text = _CONTROL_CHARS.sub("", str(value))
    return _WHITESPACE.sub(" ", text).strip()


def truncate_text(text, limit: int) -> str:
    """Truncate text to at most `limit` characters, ending with an ellipsis."""
    text = sanitize_text(text)
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + ELLIPSIS


def title_case_status(status) -> str:
    """'in-progress' -> 'In Progress'."""
    text = sanitize_text(getattr(status, "value", status))
    if not text:
        return MISSING
    return " ".join(part.capitalize() for part in re.split(r"[-_\s]+", text) if part)
