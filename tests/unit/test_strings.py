"""Unit tests for fluentkit.strings."""

import re
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import pytest

from fluentkit import strings
from fluentkit.errors import InvalidChunkSizeError
from fluentkit.helpers import string
from fluentkit.strings import (
    FluentString,
    camel_to_snake,
    chunks,
    clean,
    extract_youtube_hash,
    has_html_tags,
    html_to_plain,
    is_blank,
    link_hashtags,
    parse_placeholders,
    parse_time_placeholders,
    prep_meta_description,
    snake_to_camel,
    split_address,
    strip_tags,
    trim,
    truncate,
)

# pylint: disable=magic-value-comparison

CET = timezone(timedelta(hours=1))
NEW_YEAR = datetime(2023, 1, 1, 12, 21, 12, tzinfo=CET)


def _link(tag: str) -> str:
    return (
        f'<a class="hashtag" href="https://www.example.com/{tag}" '
        f'data-tag="{tag}">#{tag}</a>'
    )


# ============================================================================
#                               FluentString
# ============================================================================


def test_set_and_get():
    """Test reading and replacing the wrapped string."""
    sentence = string("First string")
    assert sentence.value == "First string"

    sentence.set_value("Second string")
    assert str(sentence) == "Second string"
    assert sentence.length == len(sentence) == 13


def test_methods_chain():
    """Test that transforming methods return the wrapper."""
    result = (
        FluentString("  <p>hello   world</p>  ")
        .html_to_plain()
        .clean()
        .uppercase_first()
        .truncate(8)
    )
    assert isinstance(result, FluentString)
    assert result.value == "Hello..."


def test_is_empty():
    """Test blank detection, including invisible characters."""
    assert string("").is_empty()
    assert string(" \t\n\ufeff").is_empty()
    assert not string(" x ").is_empty()
    assert is_blank("\u200b ")


def test_is_email_domain_valid_uses_mx_lookup(monkeypatch):
    """Test that the wrapper delegates to the DNS check."""
    monkeypatch.setattr(
        strings, "is_valid_domain", lambda email: email.endswith("@ok.test")
    )
    assert string("me@ok.test").is_email_domain_valid()
    assert not string("me@bad.test").is_email_domain_valid()


# ============================================================================
#                               HTML
# ============================================================================


@pytest.mark.parametrize(
    "html, expected",
    [
        ("<p>This is a test paragraph.</p>", "This is a test paragraph."),
        (
            "<p>This is a test paragraph.</p><p>This is another paragraph,<br/>"
            "but it has a line break.</p>",
            "This is a test paragraph.\n\nThis is another paragraph,\n"
            "but it has a line break.",
        ),
        (
            "This is the first line break.<br>This is the second line break.<br/>"
            "And this is the third one.<br />",
            "This is the first line break.\nThis is the second line break.\n"
            "And this is the third one.",
        ),
        (
            "  <p>This is a test paragraph.</p>No paragraph.  ",
            "This is a test paragraph.\n\nNo paragraph.",
        ),
        ("<p>Line\none</p>", "Lineone"),
    ],
)
def test_html_to_plain(html, expected):
    """Test converting HTML paragraphs and breaks to plain text."""
    assert html_to_plain(html) == expected
    assert string(html).html_to_plain().value == expected


def test_html_to_plain_custom_newline():
    """Test a custom newline sequence."""
    assert html_to_plain("<p>A</p><p>B<br>C</p>", "\r\n") == "A\r\n\r\nB\r\nC"


def test_strip_tags_keeps_lone_angle_brackets():
    """Test that only real tags and comments are removed."""
    assert strip_tags("<b>bold</b> & 1 < 2 <!-- note -->") == "bold & 1 < 2 "


@pytest.mark.parametrize(
    "value, expected",
    [("<p>x</p>", True), ("text<br/>", True), ("a < b > c", False), ("plain", False)],
)
def test_has_html_tags(value, expected):
    """Test tag detection."""
    assert has_html_tags(value) is expected
    assert string(value).has_html_tags() is expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("#this is something", f"{_link('this')} is something"),
        ("this #is something", f"this {_link('is')} something"),
        ("this is #something", f"this is {_link('something')}"),
        ("#this is #something", f"{_link('this')} is {_link('something')}"),
        ("this is something", "this is something"),
        ("", ""),
        ("this #is. something", f"this {_link('is')}. something"),
        ("this #is, something", f"this {_link('is')}, something"),
        ("this #is; something", f"this {_link('is')}; something"),
        ("this #is? something", f"this {_link('is')}? something"),
        ("this #is! something", f"this {_link('is')}! something"),
        ("this #is: something", f"this {_link('is')}: something"),
        ("#this? is #something,", f"{_link('this')}? is {_link('something')},"),
        ("this #is... something", f"this {_link('is')}... something"),
    ],
)
def test_link_hashtags(text, expected):
    """Test that tags are appended to a template without a placeholder."""
    assert link_hashtags(text, "https://www.example.com/") == expected


def test_link_hashtags_placeholder_and_class():
    """Test the {tag} placeholder and a custom class."""
    result = link_hashtags("Check #gifts", "https://x.test/tags/{tag}/", "tag")
    assert result == (
        'Check <a class="tag" href="https://x.test/tags/gifts/" '
        'data-tag="gifts">#gifts</a>'
    )


def test_link_hashtags_ignores_entities():
    """Test that numeric HTML entities are not linked."""
    assert link_hashtags("it&#39;s", "https://x.test/") == "it&#39;s"


META_SENTENCE = "This is a very nice meta description that we just wrote."
META_EXPECTED = (
    "This is a very nice meta description that we just wrote. "
    "This is a very nice meta description that we just wrote. "
    "This is a very nice meta description..."
)


@pytest.mark.parametrize(
    "value",
    [
        " ".join([META_SENTENCE] * 3),
        f"<p>{' '.join([META_SENTENCE] * 3)}</p>",
        f"<h1>{' '.join([META_SENTENCE] * 3)}</h1>",
    ],
)
def test_prep_meta_description(value):
    """Test the default 155 character meta description."""
    assert prep_meta_description(value) == META_EXPECTED


def test_prep_meta_description_length_and_escaping():
    """Test a custom length and attribute escaping."""
    assert (
        string(META_SENTENCE).prep_meta_description(52).value
        == "This is a very nice meta description that we just..."
    )
    assert (
        prep_meta_description(
            "This < > is a very nice meta description symbol we have here.", 52
        )
        == "This &lt; &gt; is a very nice meta description symbol..."
    )


def test_prep_meta_description_decodes_entities():
    """Test that entities are decoded before cleaning and re-escaped once."""
    assert prep_meta_description("Fish &amp;   chips") == "Fish &amp; chips"


# ============================================================================
#                               Cleanup and case
# ============================================================================


@pytest.mark.parametrize(
    "value, expected",
    [
        ("mark  ", "mark"),
        ("Johnny Bravo", "Johnny Bravo"),
        ("Johnny   Bravo", "Johnny Bravo"),
        ("Johnny  Bravo  ", "Johnny Bravo"),
        ("  Danny Robinson    ", "Danny Robinson"),
        ("a\t\tb", "a b"),
        ("", ""),
    ],
)
def test_clean(value, expected):
    """Test trimming and collapsing repeated whitespace."""
    assert clean(value) == expected
    assert string(value).clean().value == expected


def test_trim_unicode_whitespace_and_bom():
    """Test trimming BOMs and Unicode spaces."""
    spaces = "".join(chr(c) for c in range(0x2000, 0x200A))
    assert trim("\ufeff\ufeffTest\ufeff\ufeff") == "Test"
    assert trim(f"{spaces}Test{spaces}") == "Test"
    assert string(" \u200bTest ").trim().value == "Test"


@pytest.mark.parametrize(
    "value, expected",
    [("črt", "Črt"), ("šerbi", "Šerbi"), ("žan", "Žan"), ("çakmak", "Çakmak"), ("", "")],
)
def test_uppercase_first(value, expected):
    """Test multibyte-safe uppercasing of the first character."""
    assert string(value).uppercase_first().value == expected


@pytest.mark.parametrize(
    "value, expected", [("camelCase", "camel_case"), ("PascalCase", "pascal_case")]
)
def test_camel_to_snake(value, expected):
    """Test camel and Pascal case conversion."""
    assert camel_to_snake(value) == expected
    assert string(value).camel_to_snake().value == expected


def test_snake_to_camel():
    """Test Pascal and camel case output."""
    assert snake_to_camel("pascal_case") == "PascalCase"
    assert snake_to_camel("camel_case", upper=False) == "camelCase"
    assert string("a_b_c").snake_to_camel().value == "ABC"


# ============================================================================
#                               Truncation and splitting
# ============================================================================


@pytest.mark.parametrize(
    "value, args, expected",
    [
        ("This is a happy, string.", (20, None, True), "This is a happy..."),
        ("This is a happy, string.", (19,), "This is a happy..."),
        ("This is a happy string.", (0,), "This is a happy string."),
        ("Short", (20,), "Short"),
        (
            "This is a string that should be truncated after 20 characters.",
            (20,),
            "This is a string...",
        ),
        (
            "This is a list with apples, strawberries, bananas and lemons.",
            (55, " etc."),
            "This is a list with apples, strawberries, bananas etc.",
        ),
        (
            "This is a list with apples, strawberries, bananas and lemons.",
            (52, None, True),
            "This is a list with apples, strawberries, bananas...",
        ),
        (
            "This is a text truncated in the middle.",
            (30, None, False, True),
            "This is a tex...n the middle.",
        ),
    ],
)
def test_truncate(value, args, expected):
    """Test word-aware, word-breaking and middle truncation."""
    assert truncate(value, *args) == expected
    assert string(value).truncate(*args).value == expected


def test_truncate_length_shorter_than_etc():
    """Test that a tiny length still returns just the marker."""
    assert truncate("abcdef", 2) == "..."
    assert truncate("abcdef", 2, middle=True) == "..."


@pytest.mark.parametrize(
    "size, expected",
    [
        (12, ["The", "modification", "is a neutral", "cosmonaut."]),
        (10, ["The", "modificat.", "is a", "neutral", "cosmonaut."]),
    ],
)
def test_chunks_preserving_words(size, expected):
    """Test greedy word packing with abbreviation of long words."""
    value = "The modification is a neutral cosmonaut."
    assert chunks(value, size, preserve_words=True) == expected
    assert string(value).chunks(size, True) == expected


def test_chunks_fixed_size():
    """Test plain fixed-size splitting."""
    assert chunks("abcdefg", 3) == ["abc", "def", "g"]
    assert chunks("abc", 5) == ["abc"]


@pytest.mark.parametrize("size", [1, 0, -3])
def test_chunks_invalid_size(size):
    """Test that chunks must be at least two characters long."""
    with pytest.raises(
        InvalidChunkSizeError,
        match=re.escape(f"Chunk size must be at least 2, {size} given."),
    ):
        chunks("abc", size)


@pytest.mark.parametrize(
    "address, expected",
    [
        ("Pot v X 123b", ("Pot v X", "123b")),
        ("Pot  v   X 123/b ", ("Pot v X", "123/b")),
        ("Aljaževa, 20 a", ("Aljaževa", "20a")),
        ("Aškerčeva cesta, 22", ("Aškerčeva cesta", "22")),
        ("B. Radić 88,", ("B. Radić", "88")),
        ("Bakovci, Cvetna ulica 24", ("Bakovci, Cvetna ulica", "24")),
        ("Cesta 15.aprila 35", ("Cesta 15.aprila", "35")),
        ("Cesta 20. Julija 13", ("Cesta 20. Julija", "13")),
        ("Cesta II. Grupe Odredov 13c, 13c", ("Cesta II. Grupe Odredov", "13c")),
        ("Delavska C.57,", ("Delavska C.", "57")),
    ],
)
def test_split_address(address, expected):
    """Test splitting addresses into street and house number."""
    assert split_address(address) == expected
    assert string(address).to_address() == expected


@pytest.mark.parametrize("address", ["Main street", "?+*/**, 15='+", ""])
def test_split_address_invalid(address):
    """Test that addresses without a house number are rejected."""
    assert split_address(address) is None


# ============================================================================
#                               Placeholders
# ============================================================================


def test_parse_placeholders():
    """Test replacing named placeholders."""
    subject = "Hello, {name} from {place}!"
    assert (
        parse_placeholders(subject, {"name": "George", "place": "the Jungle"})
        == "Hello, George from the Jungle!"
    )
    assert (
        string(subject)
        .parse_placeholders({"name": "Frančiška Žorž", "place": "Šared"})
        .value
        == "Hello, Frančiška Žorž from Šared!"
    )


def test_parse_placeholders_mixed_encodings():
    """Test that non-UTF-8 byte values are decoded with the fallback encoding."""
    subject = "Živjo, {name} iz dišečega kraja {place} s {amount} € ✅!"
    placeholders = {
        "name": "Frančiška Žorž".encode("iso-8859-2"),
        "place": "Šared".encode("iso-8859-2"),
        "amount": 100,
    }
    assert (
        parse_placeholders(subject, placeholders)
        == "Živjo, Frančiška Žorž iz dišečega kraja Šared s 100 € ✅!"
    )


def test_parse_placeholders_utf8_bytes_and_unknown_keys():
    """Test UTF-8 byte keys and values, and unknown placeholders."""
    result = parse_placeholders("{a} {b} {c}", {b"a": "Žan".encode(), "b": 1.5})
    assert result == "Žan 1.5 {c}"


def test_parse_placeholders_custom_fallback_encoding():
    """Test a custom fallback encoding."""
    value = "Grüße".encode("cp1252")
    assert parse_placeholders("{x}", {"x": value}, fallback_encoding="cp1252") == "Grüße"


def test_parse_placeholders_with_time(monkeypatch):
    """Test that include_time also resolves time placeholders."""
    monkeypatch.setattr(strings, "_local_datetime", lambda timestamp: NEW_YEAR)
    result = parse_placeholders(
        "Hi {name}, the time is now {%r}!", {"name": "George"}, include_time=True
    )
    assert result == "Hi George, the time is now Sun, 01 Jan 2023 12:21:12 +0100!"


@pytest.mark.parametrize(
    "template, expected",
    [
        ("{%H}:{%i}:{%s}", "12:21:12"),
        ("{%D} {%j} {%M} {%Y}", "Sun 1 Jan 2023"),
        ("{%l}, {%F} {%d}", "Sunday, January 01"),
        ("{%N} {%w} {%z} {%W}", "7 0 0 52"),
        ("{%m}/{%n} {%t} {%L} {%y}", "01/1 31 0 23"),
        ("{%g}{%a} {%h}{%A} {%G}", "12pm 12PM 12"),
        ("{%u} {%v}", "000000 000"),
        ("{%P} {%O} {%Z}", "+01:00 +0100 3600"),
        ("{%c}", "2023-01-01T12:21:12+01:00"),
        ("{%r}", "Sun, 01 Jan 2023 12:21:12 +0100"),
        ("{%U}", "1672572072"),
        ("{%q} {name}", "{%q} {name}"),
    ],
)
def test_parse_time_placeholders(template, expected):
    """Test date() style time placeholders for a fixed moment."""
    assert parse_time_placeholders(template, NEW_YEAR) == expected


def test_parse_time_placeholders_timestamp():
    """Test that Unix timestamps are read as local time."""
    timestamp = NEW_YEAR.timestamp()
    local = datetime.fromtimestamp(timestamp).astimezone()
    assert (
        string("{%r}").parse_time_placeholders(timestamp).value
        == format_datetime(local)
    )


def test_parse_time_placeholders_defaults_to_now():
    """Test that the current year is used without a timestamp."""
    year = datetime.now().year
    assert parse_time_placeholders("{%Y}") in (str(year), str(year + 1))


# ============================================================================
#                               Extraction
# ============================================================================


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.youtube.com/watch?v=FQPbLJ__wdQ", "FQPbLJ__wdQ"),
        ("http://www.youtube.com/watch?v=FQPbLJ__wdQ", "FQPbLJ__wdQ"),
        ("www.youtube.com/watch?v=FQPbLJ__wdQ", "FQPbLJ__wdQ"),
        ("https://www.youtube.com/watch?feature=share&v=FQPbLJ__wdQ", "FQPbLJ__wdQ"),
        ("http://youtu.be/FQPbLJ__wdQ", "FQPbLJ__wdQ"),
        ("https://youtu.be/FQPbLJ__wdQ?t=42", "FQPbLJ__wdQ"),
        ("https://www.youtube.com/shorts/W6eQhzKb0lc", "W6eQhzKb0lc"),
        ("https://you.be/FQPbLJ__wdQ", None),
        ("not a link", None),
    ],
)
def test_extract_youtube_hash(url, expected):
    """Test extracting video IDs from YouTube links."""
    assert extract_youtube_hash(url) == expected
    assert string(url).extract_youtube_hash() == expected
