"""Unit tests for cookie set validation."""

import random

import pytest

from consent_e2e.cookies.config import BASE_DOMAIN, CONSENT_COOKIE_NAME, WWW_DOMAIN
from consent_e2e.cookies.models import ConsentContentResult, ExpectedCookies
from consent_e2e.cookies.validator import (
    CookieValidationError,
    assert_consent_content,
    assert_required_cookies,
    cookie_keys,
    find_tracker_cookies,
    log_cookie_validation,
    validate_consent_content,
    validate_cookies
)

from fakes import ACCEPT_ALL_VALUE, CUSTOMIZED_VALUE, PENDING_VALUE, consent_cookie, make_cookie


CONSENT_KEY = f"{CONSENT_COOKIE_NAME}@{WWW_DOMAIN}"


class TestValidateCookies:
    """Tests for validate_cookies."""

    def test_all_required_present(self, committed_cookies, desktop_expectations):
        result = validate_cookies(committed_cookies, desktop_expectations)

        assert result.is_valid is True
        assert result.missing_required == []
        assert result.found_optional == 2
        assert result.total_optional == 4

    def test_missing_required(self, desktop_expectations):
        result = validate_cookies([consent_cookie()], desktop_expectations)

        assert result.is_valid is False
        assert result.missing_required == [f"_clck@{BASE_DOMAIN}"]

    def test_missing_order_matches_declaration(self):
        """Shuffling the observed cookies never changes the missing order."""
        expected = ExpectedCookies(
            required_cookies=[f"c{i}@{BASE_DOMAIN}" for i in range(6)],
        )
        observed = [make_cookie("c1"), make_cookie("c4"), make_cookie("unrelated")]

        for seed in range(5):
            shuffled = observed[:]
            random.Random(seed).shuffle(shuffled)
            result = validate_cookies(shuffled, expected)
            assert result.missing_required == [
                f"c0@{BASE_DOMAIN}", f"c2@{BASE_DOMAIN}",
                f"c3@{BASE_DOMAIN}", f"c5@{BASE_DOMAIN}",
            ]

    def test_domain_must_match_exactly(self, desktop_expectations):
        """A cookie on a different domain does not satisfy the expectation."""
        cookies = [consent_cookie(), make_cookie("_clck", domain=WWW_DOMAIN)]

        result = validate_cookies(cookies, desktop_expectations)

        assert result.missing_required == [f"_clck@{BASE_DOMAIN}"]

    def test_match_is_case_sensitive(self, desktop_expectations):
        cookies = [consent_cookie(), make_cookie("_CLCK")]

        result = validate_cookies(cookies, desktop_expectations)

        assert result.is_valid is False

    def test_duplicate_cookies_collapse(self, desktop_expectations):
        cookies = [consent_cookie(), make_cookie("_clck"), make_cookie("_clck"), make_cookie("_uetsid")]

        result = validate_cookies(cookies, desktop_expectations)

        assert result.is_valid is True
        assert result.found_optional == 1

    def test_optional_cookies_absent(self):
        """total_optional is zero when no optional cookies are declared."""
        expected = ExpectedCookies(required_cookies=[CONSENT_KEY])

        result = validate_cookies([consent_cookie()], expected)

        assert result.is_valid is True
        assert result.found_optional == 0
        assert result.total_optional == 0

    def test_optional_cookies_none(self):
        expected = ExpectedCookies(required_cookies=[CONSENT_KEY], optional_cookies=None)

        result = validate_cookies([], expected)

        assert result.total_optional == 0
        assert result.missing_required == [CONSENT_KEY]

    def test_optional_never_gates_validity(self, desktop_expectations):
        cookies = [consent_cookie(), make_cookie("_clck")]

        result = validate_cookies(cookies, desktop_expectations)

        assert result.is_valid is True
        assert result.found_optional == 0

    def test_customized_consent_end_to_end(self):
        """Decoded customization value validates against a consent-only expectation."""
        expected = ExpectedCookies(required_cookies=[CONSENT_KEY])

        result = validate_cookies([consent_cookie(CUSTOMIZED_VALUE)], expected)
        content = validate_consent_content([consent_cookie(CUSTOMIZED_VALUE)])

        assert result.is_valid is True
        assert content == ConsentContentResult(
            has_yes_consent=True, has_yes_action=True, has_yes_necessary=True
        )


class TestConsentContent:
    """Tests for consent cookie content checks."""

    def test_missing_consent_cookie(self):
        content = validate_consent_content([make_cookie("_clck")])

        assert content == ConsentContentResult()

    def test_pending_consent(self):
        content = validate_consent_content([consent_cookie(PENDING_VALUE)])

        assert content.has_yes_consent is False
        assert content.has_yes_action is False
        assert content.has_yes_necessary is True

    def test_assert_consent_content_passes(self):
        assert_consent_content(validate_consent_content([consent_cookie(ACCEPT_ALL_VALUE)]))

    def test_assert_consent_content_lists_failures(self):
        with pytest.raises(CookieValidationError) as exc_info:
            assert_consent_content(validate_consent_content([consent_cookie(PENDING_VALUE)]))

        message = str(exc_info.value)
        assert "consent:yes" in message
        assert "action:yes" in message
        assert "necessary:yes" not in message


class TestAssertRequiredCookies:
    """Tests for assert_required_cookies."""

    def test_valid_result_passes(self, committed_cookies, desktop_expectations):
        result = validate_cookies(committed_cookies, desktop_expectations)

        assert_required_cookies(result, committed_cookies)

    def test_reports_missing_and_available(self, desktop_expectations):
        cookies = [make_cookie("_uetsid")]
        result = validate_cookies(cookies, desktop_expectations)

        with pytest.raises(CookieValidationError) as exc_info:
            assert_required_cookies(result, cookies)

        error = exc_info.value
        assert isinstance(error, AssertionError)
        assert error.missing == list(desktop_expectations.required_cookies)
        assert error.observed == [f"_uetsid@{BASE_DOMAIN}"]
        assert CONSENT_KEY in str(error)
        assert f"Available cookies: _uetsid@{BASE_DOMAIN}" in str(error)


class TestTrackerCookies:
    """Tests for third-party tracker detection."""

    def test_find_tracker_cookies(self):
        cookies = [
            make_cookie("_ga", domain=".google-analytics.com"),
            make_cookie("fr", domain=".facebook.com"),
            make_cookie("_clck"),
        ]

        trackers = find_tracker_cookies(cookies, ["google-analytics.com", "facebook.com"])

        assert [cookie.name for cookie in trackers] == ["_ga", "fr"]

    def test_no_tracker_cookies(self, committed_cookies):
        assert find_tracker_cookies(committed_cookies, ["googletagmanager.com"]) == []


def test_cookie_keys(committed_cookies):
    assert cookie_keys(committed_cookies)[0] == CONSENT_KEY


def test_log_cookie_validation(caplog, committed_cookies, desktop_expectations):
    """Presence of every expected cookie is logged."""
    with caplog.at_level("INFO", logger="consent_e2e.cookies.validator"):
        log_cookie_validation("chromium", [], committed_cookies, desktop_expectations)

    assert "Validating cookies for chromium" in caplog.text
    assert "change: 4" in caplog.text
    assert f"_clck@{BASE_DOMAIN}: FOUND (required)" in caplog.text
    assert f"_uetvid@{BASE_DOMAIN}: MISSING (optional)" in caplog.text
    assert "Optional cookies found: 2/4" in caplog.text
