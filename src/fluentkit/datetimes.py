"""Locale-aware date and time parsing and formatting.

Formats are CLDR names (`short`, `medium`, `long`, `full`), `numeric` (the
locale's short date with a full year) or raw LDML patterns such as `d.M.y`.
Parsers return ISO strings (`2023-01-24`, `17:04:00`, `2023-01-24 17:04:00`)
or None; they never raise for bad input.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time

from babel import Locale
from babel.dates import (
    format_datetime,
    get_date_format,
    get_datetime_format,
    get_time_format,
    tokenize_pattern,
)
from dateutil import parser as dateutil_parser

from fluentkit.locales import LocaleCache, resolve_locale

logger = logging.getLogger(__name__)

DateLike = int | float | str | date | datetime | time | None

NUMERIC = "numeric"
NAMED_FORMATS = ("short", "medium", "long", "full")

DEFAULT_DATE_FORMAT = NUMERIC
DEFAULT_TIME_FORMAT = "short"
DEFAULT_DATE_TIME_FORMAT = NUMERIC

_SHORT_YEAR = re.compile(r"(?<!y)yy(?!y)")
_NAME_CONTEXTS = ("format", "stand-alone")
_NAME_WIDTHS = ("wide", "abbreviated", "short", "narrow")

# LDML hour fields: h 1-12, K 0-11, H 0-23, k 1-24
_HOUR_ROLES = {"h": "hour1_12", "K": "hour0_11", "H": "hour0_23", "k": "hour1_24"}
_HOUR_RANGES = {
    "hour1_12": (1, 12),
    "hour0_11": (0, 11),
    "hour0_23": (0, 23),
    "hour1_24": (1, 24),
}

_ZONE_FIELDS = "zZOvVxX"
# an offset (+01, +0100, +01:00) or a zone name such as "UTC", "GMT+1" or
# "Coordinated Universal Time"
_ZONE = r"[+-]\d{2}(?::?\d{2})?|[^\d\s,][^,]*?"


# ============================================================================
#                           Pattern resolution
# ============================================================================


def _date_pattern(fmt: str, loc: Locale) -> str:
    if fmt == NUMERIC:
        return _SHORT_YEAR.sub("y", get_date_format("short", loc).pattern)
    if fmt in NAMED_FORMATS:
        return get_date_format(fmt, loc).pattern
    return fmt


def _time_pattern(fmt: str, loc: Locale) -> str:
    if fmt in NAMED_FORMATS:
        return get_time_format(fmt, loc).pattern
    return fmt


def _date_time_pattern(fmt: str, loc: Locale) -> str:
    """Combine date and time patterns with the locale's glue (`{1}` date, `{0}` time)."""
    if fmt != NUMERIC and fmt not in NAMED_FORMATS:
        return fmt

    width = "short" if fmt == NUMERIC else fmt
    glue = get_datetime_format(width, loc)
    return glue.replace("{1}", _date_pattern(fmt, loc)).replace(
        "{0}", _time_pattern(width, loc)
    )


# ============================================================================
#                           Parsing
# ============================================================================


@dataclass
class _PatternRegex:
    """A compiled LDML pattern and the role of each of its capture groups."""

    regex: re.Pattern[str]
    roles: dict[str, str] = field(default_factory=dict)
    names: dict[str, dict[str, int]] = field(default_factory=dict)


def _names(mapping_source: dict, widths: tuple[str, ...]) -> dict[str, int]:
    """Collect lowercased month/weekday names over contexts and widths."""
    result: dict[str, int] = {}
    for context in _NAME_CONTEXTS:
        for width in widths:
            for number, name in mapping_source.get(context, {}).get(width, {}).items():
                result.setdefault(name.lower(), number)
    return result


def _alternation(names: dict[str, int]) -> str:
    # longest first, so "januar" is not matched as "jan"
    return "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))


def _compile_pattern(pattern: str, loc: Locale) -> _PatternRegex:
    """Translate an LDML pattern into a full-match regular expression.

    Raises:
        ValueError: If the pattern uses a field that cannot be parsed.
    """
    compiled = _PatternRegex(regex=re.compile(""))
    parts = []

    for kind, token in tokenize_pattern(pattern):
        if kind == "chars":
            for char in token:
                if char.isspace():
                    parts.append(r"\s*")
                elif char == ",":
                    parts.append(",?")
                else:
                    parts.append(re.escape(char))
            continue

        char, count = token
        group = f"g{len(compiled.roles)}"

        if char == "d":
            compiled.roles[group] = "day"
            parts.append(rf"(?P<{group}>\d{{1,2}})")
        elif char in "ML" and count <= 2:
            compiled.roles[group] = "month"
            parts.append(rf"(?P<{group}>\d{{1,2}})")
        elif char in "ML":
            compiled.roles[group] = "month_name"
            compiled.names[group] = _names(loc.months, _NAME_WIDTHS)
            parts.append(rf"(?P<{group}>{_alternation(compiled.names[group])})")
        elif char in "yYu":
            compiled.roles[group] = "year"
            digits = r"\d{2}" if count == 2 else r"\d{4}|\d{2}"
            parts.append(rf"(?P<{group}>{digits})")
        elif char in "Eec" and (char == "E" or count > 2):
            compiled.roles[group] = "weekday"
            compiled.names[group] = _names(loc.days, _NAME_WIDTHS)
            parts.append(rf"(?P<{group}>{_alternation(compiled.names[group])})")
        elif char in "ec":
            compiled.roles[group] = "weekday"
            parts.append(rf"(?P<{group}>\d)")
        elif char in "HkhK":
            compiled.roles[group] = _HOUR_ROLES[char]
            parts.append(rf"(?P<{group}>\d{{1,2}})")
        elif char == "m":
            compiled.roles[group] = "minute"
            parts.append(rf"(?P<{group}>\d{{1,2}})")
        elif char == "s":
            compiled.roles[group] = "second"
            parts.append(rf"(?P<{group}>\d{{1,2}})")
        elif char == "S":
            compiled.roles[group] = "fraction"
            parts.append(rf"(?P<{group}>\d+)")
        elif char in "abB":
            compiled.roles[group] = "period"
            compiled.names[group] = _day_periods(loc)
            parts.append(rf"(?P<{group}>{_alternation(compiled.names[group])})")
        elif char in _ZONE_FIELDS:
            # read and ignored; the result is wall-clock time
            compiled.roles[group] = "zone"
            parts.append(rf"(?P<{group}>{_ZONE})")
        else:
            raise ValueError(f"Pattern field {char * count!r} cannot be parsed")

    compiled.regex = re.compile("".join(parts), re.IGNORECASE)
    return compiled


def _day_periods(loc: Locale) -> dict[str, int]:
    """Map lowercased AM/PM spellings to 0 (am) or 12 (pm)."""
    result = {"am": 0, "pm": 12}
    for context in _NAME_CONTEXTS:
        for width in _NAME_WIDTHS:
            periods = loc.day_periods.get(context, {}).get(width, {})
            for key, offset in (("am", 0), ("pm", 12)):
                if key in periods:
                    result.setdefault(periods[key].lower(), offset)
    return result


def _match(value: str, pattern: str, loc: Locale) -> datetime | None:
    """Parse `value` against an LDML pattern, filling missing date parts from today."""
    try:
        compiled = _compile_pattern(pattern, loc)
    except ValueError as e:
        logger.debug("Unsupported date pattern %r: %s", pattern, e)
        return None

    match = compiled.regex.fullmatch(value.strip())
    if not match:
        return None

    today = date.today()
    parts = {"year": today.year, "month": today.month, "day": today.day}
    hour = minute = second = 0
    twelve_hour = False
    period: int | None = None

    for group, role in compiled.roles.items():
        raw = match.group(group)
        if role == "year":
            parts["year"] = int(raw) + 2000 if len(raw) == 2 else int(raw)
        elif role in ("day", "month"):
            parts[role] = int(raw)
        elif role == "month_name":
            parts["month"] = compiled.names[group][raw.lower()]
        elif role in _HOUR_RANGES:
            low, high = _HOUR_RANGES[role]
            hour = int(raw)
            if not low <= hour <= high:
                return None
            twelve_hour = role in ("hour1_12", "hour0_11")
            hour %= 12 if twelve_hour else 24
        elif role == "minute":
            minute = int(raw)
        elif role == "second":
            second = int(raw)
        elif role == "period":
            period = compiled.names[group][raw.lower()]

    if twelve_hour:
        hour += period or 0

    try:
        return datetime(
            parts["year"], parts["month"], parts["day"], hour, minute, second
        )
    except ValueError:
        return None


def _parse(
    value: str,
    pattern_for: str,
    fmt: str,
    locale: str | None,
    cache: LocaleCache | None,
) -> datetime | None:
    loc = resolve_locale(locale, "LC_TIME", cache)
    if pattern_for == "date":
        pattern = _date_pattern(fmt, loc)
    elif pattern_for == "time":
        pattern = _time_pattern(fmt, loc)
    else:
        pattern = _date_time_pattern(fmt, loc)

    parsed = _match(value, pattern, loc)
    if parsed is None:
        logger.debug("Value %r does not match %s pattern %r", value, loc, pattern)
    return parsed


def parse_date(
    value: str,
    fmt: str | None = None,
    locale: str | None = None,
    cache: LocaleCache | None = None,
) -> str | None:
    """Parse a localized date and return it as `YYYY-MM-DD`.

    Example:
        ```py
        parse_date("01/24/2023", locale="en_US")         # "2023-01-24"
        parse_date("24.1.2023", locale="de_DE")          # "2023-01-24"
        parse_date("Jan 24, 2023", "medium", "en_US")    # "2023-01-24"
        ```

    Args:
        value: The localized date.
        fmt: CLDR format name or LDML pattern; defaults to `numeric`.
        locale: Locale of the value; defaults to the configured `LC_TIME` locale.
        cache: Optional locale cache.

    Returns:
        The ISO date, or None if the value does not match or is not a real date.

    Raises:
        InvalidLocaleError: If the locale is unknown.
    """
    parsed = _parse(value, "date", fmt or DEFAULT_DATE_FORMAT, locale, cache)
    return parsed.date().isoformat() if parsed else None


def parse_time(
    value: str,
    fmt: str | None = None,
    locale: str | None = None,
    cache: LocaleCache | None = None,
) -> str | None:
    """Parse a localized time and return it as `HH:MM:SS`.

    `fmt` defaults to `short` (`5:04 PM` in `en_US`, `17:04` in `de_DE`).
    """
    parsed = _parse(value, "time", fmt or DEFAULT_TIME_FORMAT, locale, cache)
    return parsed.strftime("%H:%M:%S") if parsed else None


def parse_date_time(
    value: str,
    fmt: str | None = None,
    locale: str | None = None,
    cache: LocaleCache | None = None,
) -> str | None:
    """Parse a localized date and time and return it as `YYYY-MM-DD HH:MM:SS`.

    With a format name the locale's date and time patterns are joined the way
    the locale joins them (`1/24/2023, 5:04 PM`); the comma is optional.
    """
    parsed = _parse(value, "datetime", fmt or DEFAULT_DATE_TIME_FORMAT, locale, cache)
    return parsed.strftime("%Y-%m-%d %H:%M:%S") if parsed else None


# ============================================================================
#                           Formatting
# ============================================================================


def _to_datetime(value: DateLike) -> datetime | None:
    """Coerce a formatter input to a datetime, or None if a string does not parse."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return datetime.now()
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value)
        except (OverflowError, OSError, ValueError) as e:
            logger.debug("Cannot read timestamp %r: %s", value, e)
            return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, time):
        return datetime.combine(date.today(), value)

    try:
        return dateutil_parser.parse(value)
    except (ValueError, OverflowError) as e:
        logger.debug("Cannot read %r as a date: %s", value, e)
        return None


def _format(
    value: DateLike,
    pattern_for: str,
    fmt: str,
    locale: str | None,
    cache: LocaleCache | None,
) -> str | None:
    dt = _to_datetime(value)
    if dt is None:
        return None

    loc = resolve_locale(locale, "LC_TIME", cache)
    if pattern_for == "date":
        pattern = _date_pattern(fmt, loc)
    elif pattern_for == "time":
        pattern = _time_pattern(fmt, loc)
    else:
        pattern = _date_time_pattern(fmt, loc)

    # naive values are rendered as wall-clock time
    return format_datetime(dt, pattern, locale=loc)


def format_date(
    value: DateLike = None,
    fmt: str | None = None,
    locale: str | None = None,
    cache: LocaleCache | None = None,
) -> str | None:
    """Format a date for display.

    Example:
        ```py
        format_date("2023-01-24", locale="en_US")           # "1/24/2023"
        format_date("2023-01-24", "long", locale="en_US")   # "January 24, 2023"
        format_date("foo")                                  # None
        ```

    Args:
        value: Unix timestamp (local time), date/datetime/time, a string in
            any common notation, or None for now.
        fmt: CLDR format name or LDML pattern; defaults to `numeric`.
        locale: Display locale; defaults to the configured `LC_TIME` locale.
        cache: Optional locale cache.

    Returns:
        The formatted date, or None if a string value could not be read.

    Raises:
        InvalidLocaleError: If the locale is unknown.
    """
    return _format(value, "date", fmt or DEFAULT_DATE_FORMAT, locale, cache)


def format_time(
    value: DateLike = None,
    fmt: str | None = None,
    locale: str | None = None,
    cache: LocaleCache | None = None,
) -> str | None:
    """Format a time for display; `fmt` defaults to `short`. See `format_date()`."""
    return _format(value, "time", fmt or DEFAULT_TIME_FORMAT, locale, cache)


def format_date_time(
    value: DateLike = None,
    fmt: str | None = None,
    locale: str | None = None,
    cache: LocaleCache | None = None,
) -> str | None:
    """Format a date and time for display; `fmt` defaults to `numeric`. See `format_date()`."""
    return _format(value, "datetime", fmt or DEFAULT_DATE_TIME_FORMAT, locale, cache)
