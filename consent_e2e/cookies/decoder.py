"""Consent cookie value decoding.

The consent cookie value is a list of ``key:yes`` / ``key:no`` tokens owned
by the consent banner vendor. Flags are detected by substring containment so
that delimiter, spacing or ordering changes upstream never break decoding.
"""

from typing import Iterable, Optional

from .config import CONSENT_COOKIE_NAME
from .models import ConsentFlags, Cookie


CONSENT_KEYS = (
    'necessary',
    'functional',
    'analytics',
    'performance',
    'advertisement',
    'other',
    'consent',
    'action',
)


def has_yes(raw_value: Optional[str], key: str) -> bool:
    """Check whether ``<key>:yes`` occurs in a raw consent value."""
    if not raw_value:
        return False
    return f"{key}:yes" in raw_value


def decode_consent_value(raw_value: Optional[str]) -> ConsentFlags:
    """Decode a raw consent cookie value into consent flags.

    Args:
        raw_value: Consent cookie value, e.g.
            ``consent:yes;action:yes;necessary:yes;analytics:no``

    Returns:
        Fully populated ConsentFlags; every flag is False for empty or
        unrecognised input.
    """
    return ConsentFlags(**{key: has_yes(raw_value, key) for key in CONSENT_KEYS})


def find_consent_cookie(
    cookies: Iterable[Cookie],
    name: str = CONSENT_COOKIE_NAME
) -> Optional[Cookie]:
    """Return the first cookie with the consent cookie name, if any."""
    for cookie in cookies:
        if cookie.name == name:
            return cookie
    return None


def is_consent_committed(
    cookies: Iterable[Cookie],
    name: str = CONSENT_COOKIE_NAME
) -> bool:
    """Check whether any consent cookie in the snapshot records consent:yes."""
    return any(
        cookie.name == name and has_yes(cookie.value, 'consent')
        for cookie in cookies
    )
