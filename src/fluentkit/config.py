"""Configuration utilities for fluentkit.

This module centralizes the environment variables fluentkit reads and the
defaults used when they are not set. Values are read at call time, so tests
and applications can change the environment without reloading anything.
"""

import os
import tempfile
from pathlib import Path

from babel import default_locale

from fluentkit.errors import InvalidConfigError

LOCALE_ENV_VAR = "FLUENTKIT_LOCALE"
TMPDIR_ENV_VAR = "FLUENTKIT_TMPDIR"
DNS_LIFETIME_ENV_VAR = "FLUENTKIT_DNS_LIFETIME"

FALLBACK_LOCALE = "en_US"
DEFAULT_DNS_LIFETIME = 5.0

# Babel maps the C/POSIX locale to this identifier, which has no grouping.
_POSIX_LOCALE = "en_US_POSIX"


def get_default_locale(category: str = "LC_NUMERIC") -> str:
    """Get the locale identifier used when a helper is not given one.

    Args:
        category: POSIX locale category consulted when `FLUENTKIT_LOCALE` is not
            set (`LC_NUMERIC` for numbers, `LC_TIME` for dates).

    Returns:
        The value of `FLUENTKIT_LOCALE` if set, otherwise the locale from the
        POSIX environment variables, otherwise `en_US`.
    """
    if identifier := os.environ.get(LOCALE_ENV_VAR):
        return identifier

    identifier = default_locale(category)
    if not identifier or identifier == _POSIX_LOCALE:
        return FALLBACK_LOCALE
    return identifier


def get_temp_dir() -> Path:
    """Get the directory where generated files without an explicit name go.

    Returns:
        `FLUENTKIT_TMPDIR` if set, otherwise the system temp directory.
    """
    if not (path := os.environ.get(TMPDIR_ENV_VAR)):
        return Path(tempfile.gettempdir())
    return Path(path)


def get_dns_lifetime() -> float:
    """Get the number of seconds a DNS lookup may take in total.

    Raises:
        InvalidConfigError: If `FLUENTKIT_DNS_LIFETIME` is not a positive number.
    """
    if not (raw := os.environ.get(DNS_LIFETIME_ENV_VAR)):
        return DEFAULT_DNS_LIFETIME

    try:
        lifetime = float(raw)
    except ValueError as e:
        raise InvalidConfigError(DNS_LIFETIME_ENV_VAR, raw, "not a number") from e

    if lifetime <= 0:
        raise InvalidConfigError(DNS_LIFETIME_ENV_VAR, raw, "must be positive")
    return lifetime
