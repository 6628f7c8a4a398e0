"""Cookie set validation against per-project expectations.

Compares an observed cookie snapshot with the expected cookies registered
for an execution project, checks the consent cookie content, and reports
failures as assertion errors carrying the full diagnostic context.
"""

import logging
from typing import Iterable, List, Sequence

from .config import CONSENT_COOKIE_NAME
from .decoder import find_consent_cookie, has_yes
from .models import ConsentContentResult, Cookie, ExpectedCookies, ValidationResult

logger = logging.getLogger(__name__)


class CookieValidationError(AssertionError):
    """Raised when observed cookies do not satisfy an expectation."""

    def __init__(self, message: str, missing: Sequence[str] = (), observed: Sequence[str] = ()):
        super().__init__(message)
        self.missing = list(missing)
        self.observed = list(observed)


def cookie_keys(cookies: Iterable[Cookie]) -> List[str]:
    """Build ``name@domain`` keys for a cookie snapshot."""
    return [cookie.key for cookie in cookies]


def validate_cookies(cookies: Iterable[Cookie], expected: ExpectedCookies) -> ValidationResult:
    """Validate observed cookies against an expectation record.

    Args:
        cookies: Observed cookie snapshot
        expected: Expected cookies for the execution project

    Returns:
        ValidationResult; ``missing_required`` keeps the declaration order of
        ``expected.required_cookies``.
    """
    observed = set(cookie_keys(cookies))

    missing_required = [
        required for required in expected.required_cookies
        if required not in observed
    ]

    optional_cookies = expected.optional_cookies or []
    found_optional = sum(1 for optional in optional_cookies if optional in observed)

    return ValidationResult(
        is_valid=not missing_required,
        missing_required=missing_required,
        found_optional=found_optional,
        total_optional=len(optional_cookies),
    )


def validate_consent_content(
    cookies: Iterable[Cookie],
    name: str = CONSENT_COOKIE_NAME
) -> ConsentContentResult:
    """Check the consent cookie for consent, action and necessary grants."""
    consent_cookie = find_consent_cookie(cookies, name)
    if consent_cookie is None:
        return ConsentContentResult()

    return ConsentContentResult(
        has_yes_consent=has_yes(consent_cookie.value, 'consent'),
        has_yes_action=has_yes(consent_cookie.value, 'action'),
        has_yes_necessary=has_yes(consent_cookie.value, 'necessary'),
    )


def find_tracker_cookies(cookies: Iterable[Cookie], tracker_domains: Iterable[str]) -> List[Cookie]:
    """Return cookies set on any of the given third-party tracker domains."""
    domains = list(tracker_domains)
    return [
        cookie for cookie in cookies
        if any(domain in cookie.domain for domain in domains)
    ]


def assert_required_cookies(result: ValidationResult, cookies: Sequence[Cookie]) -> None:
    """Fail with every missing required cookie and the observed cookie set.

    Raises:
        CookieValidationError: If the validation result is not valid
    """
    if result.is_valid:
        return

    observed = cookie_keys(cookies)
    available = ', '.join(observed)
    logger.warning(f"Missing required cookies: {', '.join(result.missing_required)}")
    logger.info(f"Available cookies: {available}")

    lines = [
        f"Required cookie {missing} should be present. Available cookies: {available}"
        for missing in result.missing_required
    ]
    raise CookieValidationError('\n'.join(lines), result.missing_required, observed)


def assert_consent_content(content: ConsentContentResult) -> None:
    """Fail unless the consent cookie records consent, action and necessary."""
    failures = []
    if not content.has_yes_consent:
        failures.append("Consent cookie should contain consent:yes")
    if not content.has_yes_action:
        failures.append("Consent cookie should contain action:yes")
    if not content.has_yes_necessary:
        failures.append("Consent cookie should contain necessary:yes")

    if failures:
        raise CookieValidationError('\n'.join(failures))


def log_cookie_validation(
    project_name: str,
    cookies_before: Sequence[Cookie],
    cookies_after: Sequence[Cookie],
    expected: ExpectedCookies
) -> None:
    """Log required/optional cookie presence for a project."""
    logger.info(f"Validating cookies for {project_name}...")
    logger.info(
        f"Cookie count: {len(cookies_before)} -> {len(cookies_after)} "
        f"(change: {len(cookies_after) - len(cookies_before)})"
    )

    observed = set(cookie_keys(cookies_after))

    for required in expected.required_cookies:
        status = 'FOUND' if required in observed else 'MISSING'
        logger.info(f"  {required}: {status} (required)")

    if expected.optional_cookies:
        found = 0
        for optional in expected.optional_cookies:
            present = optional in observed
            logger.info(f"  {optional}: {'FOUND' if present else 'MISSING'} (optional)")
            if present:
                found += 1
        logger.info(f"  Optional cookies found: {found}/{len(expected.optional_cookies)}")


def log_consent_content(content: ConsentContentResult) -> None:
    """Log the consent cookie content checks."""
    logger.info(f"  Consent value: {'YES' if content.has_yes_consent else 'NO'}")
    logger.info(f"  Action value: {'YES' if content.has_yes_action else 'NO'}")
    logger.info(f"  Necessary value: {'YES' if content.has_yes_necessary else 'NO'}")
