"""Canonical forms for contact identities.

Applied before any validation or persistence so uniqueness checks compare
like with like.
"""

import os
import re

# Prefix substituted for the leading zero of an 11-digit local number
PHONE_COUNTRY_CODE = os.getenv('PHONE_COUNTRY_CODE', '88')

_NON_DIGITS = re.compile(r'\D')


def normalize_email(raw: str | None) -> str | None:
    """Trim and lowercase an email. Blank input yields None."""
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower()


def normalize_phone(raw: str | None, country_code: str = PHONE_COUNTRY_CODE) -> str | None:
    """Reduce a phone number to ``+<digits>``.

    A local number (11 digits with a leading 0) gets the country code in
    front of it. Digit counts are not otherwise checked.

    >>> normalize_phone('017-1111-2222')
    '+8801711112222'
    >>> normalize_phone('1234567')
    '+1234567'
    """
    if raw is None or not raw.strip():
        return None

    digits = _NON_DIGITS.sub('', raw)
    if digits.startswith('0') and len(digits) == 11:
        return f"+{country_code}{digits}"
    return f"+{digits}"
