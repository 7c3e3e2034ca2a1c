"""E-mail address helpers backed by DNS lookups."""

import logging

import dns.exception
import dns.resolver

from fluentkit.config import get_dns_lifetime

logger = logging.getLogger(__name__)


def is_valid_domain(email: str, lifetime: float | None = None) -> bool:
    """Check that the domain of an e-mail address has MX records.

    Args:
        email: The address. Anything without exactly one `@` and a non-empty
            domain is rejected without a lookup.
        lifetime: Seconds the lookup may take; defaults to
            `FLUENTKIT_DNS_LIFETIME` (5 s).

    Returns:
        True if at least one MX record was found, False otherwise (including
        lookup failures and timeouts).
    """
    parts = email.split("@")
    if len(parts) != 2 or not parts[1].strip():
        return False

    domain = parts[1].strip()
    if lifetime is None:
        lifetime = get_dns_lifetime()

    try:
        answer = dns.resolver.resolve(domain, "MX", lifetime=lifetime)
    except dns.exception.DNSException as e:
        logger.debug("MX lookup for %s failed: %s", domain, e)
        return False

    return len(answer) > 0
