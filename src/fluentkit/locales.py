"""Locale lookup shared by the number and date helpers.

Locale identifiers arrive in many shapes (`sl`, `sl_SI`, `sl-SI`,
`de_DE.UTF-8`). They are normalized once and resolved to Babel `Locale`
objects. Memoization is opt-in through a caller-owned `LocaleCache`; there is
no module-level cache.
"""

from babel import Locale, UnknownLocaleError

from fluentkit.config import get_default_locale
from fluentkit.errors import InvalidLocaleError


def normalize_locale(identifier: str) -> str:
    """Normalize a POSIX or BCP 47 style locale identifier for Babel.

    Args:
        identifier: Identifier such as `sl-SI`, `de_DE.UTF-8` or `de_DE@euro`.

    Returns:
        The identifier without encoding or modifier, using `_` as separator.
    """
    identifier = identifier.split(".", 1)[0].split("@", 1)[0]
    return identifier.strip().replace("-", "_")


def _parse(identifier: str) -> Locale:
    try:
        return Locale.parse(normalize_locale(identifier))
    except (UnknownLocaleError, ValueError, TypeError) as e:
        raise InvalidLocaleError(identifier) from e


class LocaleCache:
    """Caller-owned memo of parsed locales.

    Example:
        ```py
        cache = LocaleCache()
        num(1234.5, cache=cache).format(locale="sl")
        ```
    """

    def __init__(self) -> None:
        self._locales: dict[str, Locale] = {}

    def get(self, identifier: str | None = None, category: str = "LC_NUMERIC") -> Locale:
        """Resolve an identifier, parsing it only on first use.

        Args:
            identifier: Locale identifier, or None for the configured default.
            category: POSIX category used to find the default locale.

        Returns:
            The Babel `Locale`.

        Raises:
            InvalidLocaleError: If the identifier is not a known locale.
        """
        key = normalize_locale(identifier or get_default_locale(category))
        if key not in self._locales:
            self._locales[key] = _parse(key)
        return self._locales[key]

    def __len__(self) -> int:
        return len(self._locales)

    def clear(self) -> None:
        """Forget every memoized locale."""
        self._locales.clear()


def resolve_locale(
    identifier: str | None = None,
    category: str = "LC_NUMERIC",
    cache: LocaleCache | None = None,
) -> Locale:
    """Resolve a locale identifier, through `cache` when one is given.

    Raises:
        InvalidLocaleError: If the identifier is not a known locale.
    """
    if cache is not None:
        return cache.get(identifier, category)
    return _parse(identifier or get_default_locale(category))
