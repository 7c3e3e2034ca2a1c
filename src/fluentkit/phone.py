"""Phone number parsing and formatting on top of phonenumbers."""

from __future__ import annotations

import logging

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumber, PhoneNumberFormat

logger = logging.getLogger(__name__)


class FluentPhoneNumber(PhoneNumber):
    """A `phonenumbers.PhoneNumber` with shortcut formatting methods.

    Example:
        ```py
        number = FluentPhoneNumber.from_string("(01) 584 61 00", "si")
        number.format()      # "+386 1 584 61 00"
        number.format_uri()  # "tel:+386-1-584-61-00"
        ```
    """

    @classmethod
    def from_string(cls, number: str, region: str) -> FluentPhoneNumber | None:
        """Parse a number written in local or international notation.

        Args:
            number: The number, e.g. `"(01) 584 61 00"` or `"+385 1 4802 500"`.
            region: ISO 3166-1 alpha-2 code of the region the number must be
                valid for, in any case.

        Returns:
            The parsed number, or None if it cannot be parsed or is not a valid
            number for the region.
        """
        region = region.upper()
        try:
            parsed = phonenumbers.parse(number, region)
        except NumberParseException as e:
            logger.debug("Cannot parse phone number %r for %s: %s", number, region, e)
            return None

        if not phonenumbers.is_valid_number_for_region(parsed, region):
            return None

        result = cls()
        result.merge_from(parsed)
        return result

    def format(self) -> str:
        """Format in international notation (`+386 1 584 61 00`)."""
        return phonenumbers.format_number(self, PhoneNumberFormat.INTERNATIONAL)

    def format_national(self) -> str:
        """Format in the region's national notation (`(01) 584 61 00`)."""
        return phonenumbers.format_number(self, PhoneNumberFormat.NATIONAL)

    def format_uri(self) -> str:
        """Format as an RFC 3966 `tel:` URI."""
        return phonenumbers.format_number(self, PhoneNumberFormat.RFC3966)
