"""Locale-aware number formatting and parsing.

Formatting and parsing delegate to Babel's CLDR data. The locale's own number
pattern is used and only its fraction part is rewritten, so grouping, symbols
and symbol placement stay locale-specific.
"""

from __future__ import annotations

import logging
import math
import re
from decimal import Decimal, InvalidOperation
from enum import Enum

from babel import Locale
from babel.numbers import (
    NumberFormatError,
    format_currency,
    format_decimal,
    format_percent,
    get_currency_precision,
    get_decimal_symbol,
    get_group_symbol,
    parse_decimal,
)

from fluentkit.errors import (
    InvalidNumberError,
    InvalidUnitError,
    NumberParseError,
)
from fluentkit.locales import LocaleCache, resolve_locale
from fluentkit.strings import FluentString

logger = logging.getLogger(__name__)

Number = int | float

DEFAULT_MIN_DECIMALS = 2
DEFAULT_MAX_DECIMALS = 10

NBSP = "\u00a0"

FILE_SIZE_UNITS = ("B", "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")
FILE_SIZE_STEP = 1000

TIME_UNITS = {"d": 86400, "h": 3600, "m": 60, "s": 1}

ROMAN_NUMERALS = (
    ("M", 1000),
    ("CM", 900),
    ("D", 500),
    ("CD", 400),
    ("C", 100),
    ("XC", 90),
    ("L", 50),
    ("XL", 40),
    ("X", 10),
    ("IX", 9),
    ("V", 5),
    ("IV", 4),
    ("I", 1),
)

_NUMERIC_STRING = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_NUMBER_CORE = re.compile(r"([#0,]*0)(\.[0#]*)?")


class NumberKind(Enum):
    """Tag of a `FluentNumber` value, fixed when the value is set."""

    INTEGER = "integer"
    DECIMAL = "decimal"


def int_to_roman(number: Number | str) -> str:
    """Convert the integer part of a number to roman notation.

    Args:
        number: The number to convert. Values below 1 yield an empty string.

    Returns:
        The roman numeral, e.g. `"MCMXCIV"` for 1994.
    """
    n = int(Decimal(str(number)))
    if n < 1:
        return ""

    result = []
    for roman, value in ROMAN_NUMERALS:
        count, n = divmod(n, value)
        result.append(roman * count)
    return "".join(result)


def _with_fraction(pattern: str, minimum: int, maximum: int) -> str:
    """Replace the fraction digits of a CLDR number pattern."""
    fraction = "." + "0" * minimum + "#" * (maximum - minimum) if maximum else ""
    return _NUMBER_CORE.sub(lambda m: m.group(1) + fraction, pattern)


def _coerce(value: Number | Decimal | str) -> tuple[Number, NumberKind]:
    if isinstance(value, bool):
        raise InvalidNumberError(f"Boolean {value!r} is not a number!")

    if isinstance(value, int):
        return value, NumberKind.INTEGER

    if isinstance(value, float | Decimal):
        number = float(value)
    elif isinstance(value, str) and _NUMERIC_STRING.fullmatch(value.strip()):
        number = float(value.strip())
    else:
        raise InvalidNumberError(f'Value "{value}" is not numeric!')

    if not math.isfinite(number):
        raise InvalidNumberError(f'Value "{value}" is not a finite number!')
    return number, NumberKind.DECIMAL


class FluentNumber:
    """Chainable wrapper around a numeric value.

    The value is an integer or a decimal, decided once when it is set:
    `int` is an integer; `float`, `Decimal` and numeric strings are decimals.

    Example:
        ```py
        num(1234.5).format(locale="de")  # "1.234,50"
        num(75).as_percent()             # "75%"
        num(3661).as_time_interval()     # "1h 1m 1s"
        ```
    """

    def __init__(
        self,
        value: Number | Decimal | str,
        locale: str | None = None,
        cache: LocaleCache | None = None,
    ) -> None:
        self._value, self._kind = _coerce(value)
        self._locale = locale
        self._cache = cache

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"FluentNumber({self._value!r})"

    def __int__(self) -> int:
        return int(self._value)

    def __float__(self) -> float:
        return float(self._value)

    # --- Accessors ---

    @property
    def value(self) -> Number:
        """The wrapped number."""
        return self._value

    @property
    def kind(self) -> NumberKind:
        """Whether the wrapped number is an integer or a decimal."""
        return self._kind

    def set_value(self, value: Number | Decimal | str) -> FluentNumber:
        """Replace the wrapped number.

        Raises:
            InvalidNumberError: If the value is not numeric.
        """
        self._value, self._kind = _coerce(value)
        return self

    def is_integer(self) -> bool:
        """Return True if the wrapped value is an integer."""
        return self._kind is NumberKind.INTEGER

    def is_decimal(self) -> bool:
        """Return True if the wrapped value is a decimal."""
        return self._kind is NumberKind.DECIMAL

    # --- Formatting ---

    def format(
        self,
        decimals: int | None = None,
        min_decimals: int | None = None,
        locale: str | None = None,
    ) -> str:
        """Format the number with the locale's grouping and decimal symbols.

        Args:
            decimals: Maximum fraction digits. Also the minimum unless
                `min_decimals` is given. Defaults to 0 for integers and 10 for
                decimals.
            min_decimals: Minimum fraction digits; trailing zeros past it are
                trimmed. Defaults to 0 for integers and 2 for decimals.
            locale: Locale override for this call.

        Returns:
            The formatted number, e.g. `"1,234.57"`.
        """
        loc = self._resolve(locale)
        minimum, maximum = self._fraction_digits(decimals, min_decimals)
        pattern = _with_fraction(loc.decimal_formats[None].pattern, minimum, maximum)
        return format_decimal(self._decimal(), format=pattern, locale=loc)

    def as_percent(
        self,
        decimals: int | None = None,
        min_decimals: int | None = None,
        locale: str | None = None,
    ) -> str:
        """Format the number as a percentage; the value is already in percent.

        `num(75).as_percent()` is `"75%"`. Digit rules are the same as `format()`.
        """
        loc = self._resolve(locale)
        minimum, maximum = self._fraction_digits(decimals, min_decimals)
        pattern = _with_fraction(loc.percent_formats[None].pattern, minimum, maximum)
        return format_percent(self._decimal() / 100, format=pattern, locale=loc)

    def as_money(
        self,
        currency: str,
        decimals: int | None = None,
        min_decimals: int | None = None,
        locale: str | None = None,
    ) -> str:
        """Format the number as an amount of money.

        Args:
            currency: ISO 4217 currency code, e.g. `"EUR"`.
            decimals: Maximum fraction digits (see `format()`). Integers default
                to the currency's own precision.
            min_decimals: Minimum fraction digits.
            locale: Locale override for this call.
        """
        loc = self._resolve(locale)
        if self.is_integer() and decimals is None:
            decimals = get_currency_precision(currency)
        minimum, maximum = self._fraction_digits(decimals, min_decimals)
        pattern = _with_fraction(
            loc.currency_formats["standard"].pattern, minimum, maximum
        )
        return format_currency(
            self._decimal(),
            currency,
            format=pattern,
            locale=loc,
            currency_digits=False,
        )

    def as_file_size(self, precision: int = 2, locale: str | None = None) -> str:
        """Format a byte count with a decimal (1000-based) unit.

        Args:
            precision: Maximum fraction digits for kB and larger units.
            locale: Locale override for this call.

        Returns:
            The size, e.g. `"123 B"` or `"1.23 kB"` (with a no-break space).

        Raises:
            InvalidNumberError: If the value is not an integer.
        """
        if not self.is_integer():
            raise InvalidNumberError("Only integer values can be formatted as file size!")

        size = Decimal(self._value)
        unit = 0
        # step on the displayed value, so 999_999 is "1 MB" and not "1,000 kB"
        while (
            abs(round(size, precision if unit else 0)) >= FILE_SIZE_STEP
            and unit < len(FILE_SIZE_UNITS) - 1
        ):
            size /= FILE_SIZE_STEP
            unit += 1

        loc = self._resolve(locale)
        digits = precision if unit else 0
        pattern = _with_fraction(loc.decimal_formats[None].pattern, 0, digits)
        amount = format_decimal(size, format=pattern, locale=loc)
        return f"{amount}{NBSP}{FILE_SIZE_UNITS[unit]}"

    def as_time_interval(self, precision: str = "s", start: str = "d") -> str:
        """Format a number of seconds as a compact duration.

        Args:
            precision: Smallest unit to show (`d`, `h`, `m` or `s`).
            start: Largest unit to show; larger amounts accumulate in it.

        Returns:
            The duration, e.g. `"1d 1h 1m 1s"`, or `"25h 1m"` with `start="h"`
            and `precision="m"`. A zero duration is `"0<precision>"`.

        Raises:
            InvalidUnitError: If a unit is unknown or `start` is smaller than
                `precision`.
        """
        units = list(TIME_UNITS)
        for unit in (precision, start):
            if unit not in TIME_UNITS:
                raise InvalidUnitError(
                    f'Unknown time unit "{unit}", expected one of {", ".join(units)}'
                )
        if units.index(start) > units.index(precision):
            raise InvalidUnitError(
                f'Start unit "{start}" is smaller than precision "{precision}"'
            )

        remaining = int(abs(self._value))
        parts = []
        for unit in units[units.index(start) : units.index(precision) + 1]:
            amount, remaining = divmod(remaining, TIME_UNITS[unit])
            if amount:
                parts.append(f"{amount}{unit}")

        if not parts:
            return f"0{precision}"
        sign = "-" if self._value < 0 else ""
        return sign + " ".join(parts)

    def to_roman(self) -> FluentString:
        """Convert the integer part of the number to roman notation."""
        return FluentString(int_to_roman(self._value))

    # --- Parsing ---

    @classmethod
    def parse(
        cls,
        value: str,
        locale: str | None = None,
        cache: LocaleCache | None = None,
    ) -> FluentNumber:
        """Parse a localized number string.

        Group separators must be placed correctly (`"123,45"` is not a number in
        `en_US`). Locales that group with a space also accept `.` and plain
        spaces as group separators.

        Args:
            value: The localized string, e.g. `"1.234.567,89"` for `sl_SI`.
            locale: Locale of the string; defaults to the configured locale.
            cache: Optional locale cache, kept on the returned number.

        Returns:
            A new FluentNumber, an integer when the string has no fraction.

        Raises:
            NumberParseError: If the string is not a number in that locale.
        """
        loc = resolve_locale(locale, "LC_NUMERIC", cache)
        decimal_symbol = get_decimal_symbol(loc)
        group_symbol = get_group_symbol(loc)

        candidate = value.strip()
        if group_symbol.isspace():
            candidate = re.sub(r"\s", group_symbol, candidate)
            if decimal_symbol != ".":
                candidate = candidate.replace(".", group_symbol)

        try:
            parsed = parse_decimal(candidate, locale=loc, strict=True)
        except (NumberFormatError, InvalidOperation) as e:
            logger.debug("Number parsing failed for %r (%s): %s", value, loc, e)
            raise NumberParseError(value, str(loc), str(e)) from e

        if decimal_symbol not in candidate and parsed == parsed.to_integral_value():
            return cls(int(parsed), locale=locale, cache=cache)
        return cls(float(parsed), locale=locale, cache=cache)

    # --- Internal Helpers ---

    def _resolve(self, locale: str | None) -> Locale:
        return resolve_locale(locale or self._locale, "LC_NUMERIC", self._cache)

    def _decimal(self) -> Decimal:
        return Decimal(str(self._value))

    def _fraction_digits(
        self, decimals: int | None, min_decimals: int | None
    ) -> tuple[int, int]:
        if decimals is None:
            if self.is_integer():
                maximum = min_decimals or 0
                minimum = min_decimals or 0
            else:
                maximum = DEFAULT_MAX_DECIMALS
                minimum = DEFAULT_MIN_DECIMALS if min_decimals is None else min_decimals
        else:
            maximum = decimals
            minimum = decimals if min_decimals is None else min_decimals

        maximum = max(maximum, 0)
        return min(max(minimum, 0), maximum), maximum


def parse_number(
    value: str,
    locale: str | None = None,
    cache: LocaleCache | None = None,
) -> Number | None:
    """Parse a localized number string, returning None if it is not a number.

    Example:
        ```py
        parse_number("123,45", "sl_SI")  # 123.45
        parse_number("123,45", "en_US")  # None
        ```
    """
    try:
        return FluentNumber.parse(value, locale, cache).value
    except NumberParseError:
        return None
