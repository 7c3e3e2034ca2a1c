"""String cleanup and transformation helpers.

Every helper is a plain function; `FluentString` wraps a value and exposes the
same helpers as chainable methods that replace the wrapped value.
"""

from __future__ import annotations

import calendar
import html
import logging
import re
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from email.utils import format_datetime
from typing import Any
from urllib.parse import parse_qs, urlparse

from fluentkit.errors import InvalidChunkSizeError
from fluentkit.mail import is_valid_domain

logger = logging.getLogger(__name__)

DEFAULT_ETC = "..."
DEFAULT_FALLBACK_ENCODING = "iso-8859-2"
META_DESCRIPTION_LENGTH = 155

# BOM and zero-width characters are trimmed along with Unicode whitespace.
_INVISIBLE = "\ufeff\u200b\u200c\u200d\u2060"
_TRIM_RE = re.compile(rf"^[\s{_INVISIBLE}]+|[\s{_INVISIBLE}]+$")
_TRAILING_PUNCTUATION = " \t\n\r\f\v,.;:!?-"

_TAG_RE = re.compile(r"<(?:/?[A-Za-z][^>]*|!--.*?--|![A-Za-z][^>]*)>", re.DOTALL)
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_PARAGRAPH_RE = re.compile(
    r"</p>\s*<p(?:\s[^>]*)?>|<p(?:\s[^>]*)?>|</p>", re.IGNORECASE
)
_HASHTAG_RE = re.compile(r"(?<![\w&])#([a-z0-9]+)", re.IGNORECASE)
_CAMEL_RE = re.compile(r"(^|[a-z])([A-Z])")
_WORD_TAIL_RE = re.compile(r"\s+?(\S+)?\Z")

# Street: anything ending with a dot, comma or letter. House number: digits,
# optionally followed by spaces/slashes and a single letter.
_ADDRESS_RE = re.compile(
    r"^(.+(?:[.,]|[^\W\d_])+)[ /]*(\d+[ /]*[^\W\d_]?)$", re.IGNORECASE
)

_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")
_TIME_PLACEHOLDER_RE = re.compile(r"\{%([A-Za-z])\}")

_YOUTUBE_PATH_RES = (
    re.compile(r"youtu\.be/([^/?&#]+)"),
    re.compile(r"youtube\.com/(?:shorts|embed|live)/([^/?&#]+)"),
)

# date() output is English regardless of the process locale
_WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


# ============================================================================
#                           Cleanup
# ============================================================================


def clean(value: str) -> str:
    """Trim and collapse every run of two or more whitespace characters."""
    return re.sub(r"\s{2,}", " ", value.strip())


def trim(value: str) -> str:
    """Trim Unicode whitespace, BOMs and zero-width characters from both ends."""
    return _TRIM_RE.sub("", value)


def is_blank(value: str) -> bool:
    """Return True if nothing but whitespace or invisible characters is left."""
    return not trim(value)


def uppercase_first(value: str) -> str:
    """Uppercase the first character (`"črt"` -> `"Črt"`)."""
    return value[:1].upper() + value[1:]


# ============================================================================
#                           HTML
# ============================================================================


def strip_tags(value: str) -> str:
    """Remove HTML tags and comments. A `<` that does not open a tag is kept."""
    return _TAG_RE.sub("", value)


def has_html_tags(value: str) -> bool:
    """Return True if the string contains at least one HTML tag."""
    return _TAG_RE.search(value) is not None


def html_to_plain(value: str, newline: str = "\n") -> str:
    """Best-effort conversion of HTML to plain text.

    Existing line breaks are dropped (they carry no meaning in HTML), `<br>`
    becomes one newline and paragraph boundaries become two.

    Args:
        value: HTML text.
        newline: Newline sequence to use.

    Returns:
        The plain text, trimmed.
    """
    text = _LINE_BREAK_RE.sub("", value)
    text = _BREAK_RE.sub(newline, text)
    text = _PARAGRAPH_RE.sub(newline * 2, text)
    return strip_tags(text).strip()


def link_hashtags(text: str, href_template: str, css_class: str = "hashtag") -> str:
    """Turn `#hashtags` into anchor elements.

    Example:
        ```py
        link_hashtags("Check out #holiday gifts!", "https://www.instagram.com/{tag}")
        # 'Check out <a class="hashtag" href="https://www.instagram.com/holiday"
        #  data-tag="holiday">#holiday</a> gifts!'
        ```

    Args:
        text: Text with hashtags.
        href_template: Link target. `{tag}` is replaced with the tag; without a
            placeholder the tag is appended.
        css_class: Class attribute of the anchor element.

    Returns:
        The text with linked hashtags. Punctuation after a tag stays outside.
    """

    def _link(match: re.Match[str]) -> str:
        tag = match.group(1)
        if "{tag}" in href_template:
            href = href_template.replace("{tag}", tag)
        else:
            href = href_template + tag
        return f'<a class="{css_class}" href="{href}" data-tag="{tag}">#{tag}</a>'

    return _HASHTAG_RE.sub(_link, text)


def prep_meta_description(value: str, length: int = META_DESCRIPTION_LENGTH) -> str:
    """Make a string suitable for an HTML meta description.

    Strips tags, decodes entities, cleans whitespace, truncates to `length` and
    escapes the result for use inside an attribute.
    """
    text = clean(html.unescape(strip_tags(value)))
    return html.escape(truncate(text, length))


# ============================================================================
#                           Case conversion
# ============================================================================


def camel_to_snake(value: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""

    def _snake(match: re.Match[str]) -> str:
        if not match.group(1):
            return match.group(2).lower()
        return f"{match.group(1)}_{match.group(2)}".lower()

    return _CAMEL_RE.sub(_snake, value)


def snake_to_camel(value: str, upper: bool = True) -> str:
    """Convert snake_case to PascalCase, or camelCase when `upper` is False."""
    result = "".join(part[:1].upper() + part[1:] for part in value.split("_"))
    if not upper:
        return result[:1].lower() + result[1:]
    return result


# ============================================================================
#                           Truncation and splitting
# ============================================================================


def truncate(
    value: str,
    length: int = 80,
    etc: str | None = DEFAULT_ETC,
    break_words: bool = False,
    middle: bool = False,
) -> str:
    """Truncate a string to at most `length` characters, `etc` included.

    Args:
        value: The string to truncate.
        length: Maximum length. `0` returns the string unchanged.
        etc: Marker for the removed part (defaults to `...`).
        break_words: Allow cutting through a word instead of backing off to the
            previous word boundary.
        middle: Keep the head and the tail and put `etc` in the middle.

    Returns:
        The truncated string. Trailing whitespace and punctuation are dropped
        before `etc` unless truncating in the middle.
    """
    if length == 0 or len(value) <= length:
        return value

    if etc is None:
        etc = DEFAULT_ETC
    length -= min(length, len(etc))

    if middle:
        half = length // 2
        tail = value[-half:] if half else ""
        return value[:half] + etc + tail

    if not break_words:
        value = _WORD_TAIL_RE.sub("", value[: length + 1])

    return value[:length].rstrip(_TRAILING_PUNCTUATION) + etc


def chunks(value: str, size: int, preserve_words: bool = False) -> list[str]:
    """Split a string into pieces of at most `size` characters.

    Args:
        value: The string to split.
        size: Maximum chunk length, at least 2.
        preserve_words: Pack whole words greedily instead of cutting at fixed
            offsets. Words longer than `size` are abbreviated to `size - 1`
            characters followed by a dot.

    Returns:
        The chunks, e.g. `["The", "modification", "is a neutral"]`.

    Raises:
        InvalidChunkSizeError: If `size` is smaller than 2.
    """
    if size < 2:
        raise InvalidChunkSizeError(size)

    if len(value) <= size:
        return [value]

    if not preserve_words:
        return [value[i : i + size] for i in range(0, len(value), size)]

    result = []
    line = ""
    for word in value.split():
        if len(word) > size:
            word = word[: size - 1] + "."
        if not line:
            line = word
        elif len(line) + 1 + len(word) <= size:
            line = f"{line} {word}"
        else:
            result.append(line)
            line = word
    if line:
        result.append(line)
    return result


def split_address(address: str) -> tuple[str, str] | None:
    """Best-effort split of a German-style address into street and house number.

    `"Pot v X 123b"` gives `("Pot v X", "123b")`.

    Returns:
        The street name and the house number (without spaces), or None if the
        address does not end with a house number.
    """
    match = _ADDRESS_RE.match(clean(address).strip(".,"))
    if not match:
        return None

    street, number = match.group(1).strip(","), match.group(2)

    # "Cesta 13c, 13c": the number is repeated at the end of the street
    if street.lower().endswith(number.lower()):
        street = street[: -len(number)].strip().rstrip(",")

    return street, number.replace(" ", "")


# ============================================================================
#                           Placeholders
# ============================================================================


def _decode(value: Any, fallback_encoding: str) -> str:
    if isinstance(value, bytes | bytearray):
        raw = bytes(value)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return raw.decode(fallback_encoding, errors="replace")
    return str(value)


def parse_placeholders(
    value: str,
    placeholders: Mapping[Any, Any],
    include_time: bool = False,
    fallback_encoding: str = DEFAULT_FALLBACK_ENCODING,
) -> str:
    """Replace `{name}` placeholders with values.

    `bytes` keys and values are decoded as UTF-8, or with `fallback_encoding`
    when they are not valid UTF-8. Other values are converted with `str()`.
    Unknown placeholders are left as they are.

    Args:
        value: Text such as `"Hello, {name}!"`.
        placeholders: Mapping of placeholder names to values.
        include_time: Also resolve `{%X}` time placeholders for the current time.
        fallback_encoding: Encoding for byte strings that are not UTF-8.
    """
    replacements = {
        _decode(k, fallback_encoding): _decode(v, fallback_encoding)
        for k, v in placeholders.items()
    }
    result = _PLACEHOLDER_RE.sub(
        lambda m: replacements.get(m.group(1), m.group(0)), value
    )
    if include_time:
        result = parse_time_placeholders(result)
    return result


def _utc_offset(dt: datetime, separator: str = "") -> str:
    total = int((dt.utcoffset() or timedelta(0)).total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


_DATE_TOKENS: dict[str, Callable[[datetime], str]] = {
    # Day
    "d": lambda dt: f"{dt.day:02d}",
    "D": lambda dt: _WEEKDAYS[dt.weekday()][:3],
    "j": lambda dt: str(dt.day),
    "l": lambda dt: _WEEKDAYS[dt.weekday()],
    "N": lambda dt: str(dt.isoweekday()),
    "w": lambda dt: str(dt.isoweekday() % 7),
    "z": lambda dt: str(dt.timetuple().tm_yday - 1),
    # Week, month, year
    "W": lambda dt: f"{dt.isocalendar()[1]:02d}",
    "F": lambda dt: _MONTHS[dt.month - 1],
    "m": lambda dt: f"{dt.month:02d}",
    "M": lambda dt: _MONTHS[dt.month - 1][:3],
    "n": lambda dt: str(dt.month),
    "t": lambda dt: str(calendar.monthrange(dt.year, dt.month)[1]),
    "L": lambda dt: "1" if calendar.isleap(dt.year) else "0",
    "Y": lambda dt: str(dt.year),
    "y": lambda dt: f"{dt.year % 100:02d}",
    # Time
    "a": lambda dt: "am" if dt.hour < 12 else "pm",
    "A": lambda dt: "AM" if dt.hour < 12 else "PM",
    "g": lambda dt: str(dt.hour % 12 or 12),
    "G": lambda dt: str(dt.hour),
    "h": lambda dt: f"{dt.hour % 12 or 12:02d}",
    "H": lambda dt: f"{dt.hour:02d}",
    "i": lambda dt: f"{dt.minute:02d}",
    "s": lambda dt: f"{dt.second:02d}",
    "u": lambda dt: f"{dt.microsecond:06d}",
    "v": lambda dt: f"{dt.microsecond // 1000:03d}",
    # Timezone and full formats
    "e": lambda dt: dt.tzname() or "",
    "T": lambda dt: dt.tzname() or "",
    "P": lambda dt: _utc_offset(dt, ":"),
    "O": _utc_offset,
    "Z": lambda dt: str(int((dt.utcoffset() or timedelta(0)).total_seconds())),
    "c": lambda dt: dt.isoformat(timespec="seconds"),
    "r": format_datetime,
    "U": lambda dt: str(int(dt.timestamp())),
}


def _local_datetime(timestamp: int | float | datetime | None) -> datetime:
    if timestamp is None:
        return datetime.now().astimezone()
    if isinstance(timestamp, datetime):
        return timestamp if timestamp.tzinfo else timestamp.astimezone()
    return datetime.fromtimestamp(timestamp).astimezone()


def parse_time_placeholders(
    value: str, timestamp: int | float | datetime | None = None
) -> str:
    """Replace `{%X}` placeholders with date/time parts.

    `X` is a single PHP `date()` format character, e.g. `{%H}:{%i}` for hours
    and minutes or `{%r}` for an RFC 2822 date. Unknown characters are left as
    they are.

    Args:
        value: Text with time placeholders.
        timestamp: Unix timestamp or datetime; defaults to now. Naive values
            are taken as local time.
    """
    dt = _local_datetime(timestamp)

    def _replace(match: re.Match[str]) -> str:
        token = _DATE_TOKENS.get(match.group(1))
        return token(dt) if token else match.group(0)

    return _TIME_PLACEHOLDER_RE.sub(_replace, value)


# ============================================================================
#                           Extraction
# ============================================================================


def extract_youtube_hash(value: str) -> str | None:
    """Extract the video ID from a YouTube link.

    Supports `watch?v=<id>`, `youtu.be/<id>` and `/shorts/<id>` style links,
    with or without a scheme.
    """
    params = parse_qs(urlparse(value).query)
    if video_ids := params.get("v"):
        return video_ids[0]

    for pattern in _YOUTUBE_PATH_RES:
        if match := pattern.search(value):
            return match.group(1)
    return None


# ============================================================================
#                           FluentString
# ============================================================================


class FluentString:
    """Chainable wrapper around a string.

    Transforming methods replace the wrapped value and return the wrapper;
    query methods return their result.

    Example:
        ```py
        string("  <p>Hello   world</p> ").html_to_plain().clean().value  # "Hello world"
        ```
    """

    def __init__(self, value: str) -> None:
        self._value = value

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"FluentString({self._value!r})"

    def __len__(self) -> int:
        return len(self._value)

    # --- Accessors ---

    @property
    def value(self) -> str:
        """The wrapped string."""
        return self._value

    def set_value(self, value: str) -> FluentString:
        """Replace the wrapped string."""
        self._value = value
        return self

    @property
    def length(self) -> int:
        """Number of characters (not bytes)."""
        return len(self._value)

    # --- Transformations ---

    def clean(self) -> FluentString:
        """See `clean()`."""
        self._value = clean(self._value)
        return self

    def trim(self) -> FluentString:
        """See `trim()`."""
        self._value = trim(self._value)
        return self

    def uppercase_first(self) -> FluentString:
        """See `uppercase_first()`."""
        self._value = uppercase_first(self._value)
        return self

    def strip_tags(self) -> FluentString:
        """See `strip_tags()`."""
        self._value = strip_tags(self._value)
        return self

    def html_to_plain(self, newline: str = "\n") -> FluentString:
        """See `html_to_plain()`."""
        self._value = html_to_plain(self._value, newline)
        return self

    def link_hashtags(self, href_template: str, css_class: str = "hashtag") -> FluentString:
        """See `link_hashtags()`."""
        self._value = link_hashtags(self._value, href_template, css_class)
        return self

    def prep_meta_description(self, length: int = META_DESCRIPTION_LENGTH) -> FluentString:
        """See `prep_meta_description()`."""
        self._value = prep_meta_description(self._value, length)
        return self

    def camel_to_snake(self) -> FluentString:
        """See `camel_to_snake()`."""
        self._value = camel_to_snake(self._value)
        return self

    def snake_to_camel(self, upper: bool = True) -> FluentString:
        """See `snake_to_camel()`."""
        self._value = snake_to_camel(self._value, upper)
        return self

    def truncate(
        self,
        length: int = 80,
        etc: str | None = DEFAULT_ETC,
        break_words: bool = False,
        middle: bool = False,
    ) -> FluentString:
        """See `truncate()`."""
        self._value = truncate(self._value, length, etc, break_words, middle)
        return self

    def parse_placeholders(
        self,
        placeholders: Mapping[Any, Any],
        include_time: bool = False,
        fallback_encoding: str = DEFAULT_FALLBACK_ENCODING,
    ) -> FluentString:
        """See `parse_placeholders()`."""
        self._value = parse_placeholders(
            self._value, placeholders, include_time, fallback_encoding
        )
        return self

    def parse_time_placeholders(
        self, timestamp: int | float | datetime | None = None
    ) -> FluentString:
        """See `parse_time_placeholders()`."""
        self._value = parse_time_placeholders(self._value, timestamp)
        return self

    # --- Queries ---

    def to_address(self) -> tuple[str, str] | None:
        """See `split_address()`."""
        return split_address(self._value)

    def chunks(self, size: int, preserve_words: bool = False) -> list[str]:
        """See `chunks()`."""
        return chunks(self._value, size, preserve_words)

    def extract_youtube_hash(self) -> str | None:
        """See `extract_youtube_hash()`."""
        return extract_youtube_hash(self._value)

    def is_empty(self) -> bool:
        """Return True if the string is blank (see `is_blank()`)."""
        return is_blank(self._value)

    def has_html_tags(self) -> bool:
        """See `has_html_tags()`."""
        return has_html_tags(self._value)

    def is_email_domain_valid(self) -> bool:
        """Check that the e-mail address's domain has MX records."""
        return is_valid_domain(self._value)
