"""Short factory functions for the fluent wrappers.

Example:
    ```py
    from fluentkit.helpers import arr, num, string

    num(1234.5).format(locale="de")        # "1.234,50"
    string("  a   b ").clean().value       # "a b"
    arr([1, 3]).after(1).insert(2).value   # [1, 2, 3]
    ```
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from decimal import Decimal
from typing import Any

from fluentkit.arrays import FluentArray
from fluentkit.barcodes import FluentBarcode
from fluentkit.directory import FluentDirectory, PathLike
from fluentkit.locales import LocaleCache
from fluentkit.numbers import FluentNumber, Number
from fluentkit.phone import FluentPhoneNumber
from fluentkit.strings import FluentString


def num(
    value: Number | Decimal | str,
    locale: str | None = None,
    cache: LocaleCache | None = None,
) -> FluentNumber:
    """Wrap a number; `locale` and `cache` apply to formatting and parsing."""
    return FluentNumber(value, locale=locale, cache=cache)


def string(value: str) -> FluentString:
    """Wrap a string for chained cleanup and conversion."""
    return FluentString(value)


def arr(items: Iterable[Any] | Mapping[Hashable, Any]) -> FluentArray:
    """Wrap a sequence (keys `0..n-1`) or a mapping as an ordered array."""
    return FluentArray(items)


def barcode(code: str, barcode_type: str | None = None) -> FluentBarcode:
    """Create a barcode; the symbology defaults to EAN-13."""
    return FluentBarcode(code, barcode_type)


def directory(path: PathLike) -> FluentDirectory:
    """Wrap an existing directory.

    Raises:
        PathNotFoundError: If the path does not exist.
        NotADirectoryPathError: If the path is not a directory.
    """
    return FluentDirectory(path)


def phone(number: str, region: str) -> FluentPhoneNumber | None:
    """Parse a phone number; None if it is not valid for the region."""
    return FluentPhoneNumber.from_string(number, region)
