"""Consent cookie validation.

This package decodes the consent banner's cookie, validates the cookie jar
against per-project expectations and polls the browser until the consent
cookie has been written.
"""

from .models import (
    Cookie,
    ExpectedCookies,
    ConsentFlags,
    ValidationResult,
    ConsentContentResult,
    ConsentState,
    CookieCategory,
    PollState,
    PollResult
)

from .config import (
    CONSENT_COOKIE_NAME,
    CookieExpectationRegistry,
    SuiteConfiguration,
    ConfigLoadError,
    load_suite_config,
    get_suite_config,
    get_cookie_registry,
    get_expected_cookies
)

from .decoder import decode_consent_value, find_consent_cookie, is_consent_committed
from .validator import (
    CookieValidationError,
    validate_cookies,
    validate_consent_content,
    find_tracker_cookies,
    assert_required_cookies,
    assert_consent_content,
    log_cookie_validation,
    log_consent_content
)
from .polling import (
    CookieSource,
    BrowserContextCookieSource,
    ConsentPoller,
    await_consent_commit
)

__all__ = [
    # Models
    "Cookie",
    "ExpectedCookies",
    "ConsentFlags",
    "ValidationResult",
    "ConsentContentResult",
    "ConsentState",
    "CookieCategory",
    "PollState",
    "PollResult",

    # Configuration
    "CONSENT_COOKIE_NAME",
    "CookieExpectationRegistry",
    "SuiteConfiguration",
    "ConfigLoadError",
    "load_suite_config",
    "get_suite_config",
    "get_cookie_registry",
    "get_expected_cookies",

    # Decoding
    "decode_consent_value",
    "find_consent_cookie",
    "is_consent_committed",

    # Validation
    "CookieValidationError",
    "validate_cookies",
    "validate_consent_content",
    "find_tracker_cookies",
    "assert_required_cookies",
    "assert_consent_content",
    "log_cookie_validation",
    "log_consent_content",

    # Polling
    "CookieSource",
    "BrowserContextCookieSource",
    "ConsentPoller",
    "await_consent_commit"
]
