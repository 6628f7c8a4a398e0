"""Shared test fixtures and configuration for the consent cookie suite tests."""

import pytest
from pathlib import Path
import sys

# Add project root and the tests directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from consent_e2e.cookies.config import BASE_DOMAIN, CONSENT_COOKIE_NAME, WWW_DOMAIN
from consent_e2e.cookies.models import ExpectedCookies
from fakes import RecordingSleep, consent_cookie, make_cookie


@pytest.fixture
def desktop_expectations():
    """Expected cookies for a desktop project."""
    return ExpectedCookies(
        required_cookies=[
            f"{CONSENT_COOKIE_NAME}@{WWW_DOMAIN}",
            f"_clck@{BASE_DOMAIN}",
        ],
        optional_cookies=[
            f"tttdemorepath-_zldp@{BASE_DOMAIN}",
            f"tttdemorepath-_zldt@{BASE_DOMAIN}",
            f"_uetsid@{BASE_DOMAIN}",
            f"_uetvid@{BASE_DOMAIN}",
        ],
    )


@pytest.fixture
def committed_cookies():
    """Cookie jar after a successful customization."""
    return [
        consent_cookie(),
        make_cookie("_clck"),
        make_cookie("tttdemorepath-_zldp"),
        make_cookie("_uetsid"),
    ]


@pytest.fixture
def recording_sleep():
    """Sleep replacement recording each requested delay."""
    return RecordingSleep()


def pytest_addoption(parser):
    parser.addoption(
        "--project",
        action="store",
        default=None,
        help="Execution project for browser tests (default: $CONSENT_E2E_PROJECT or chromium)",
    )
    parser.addoption(
        "--headed",
        action="store_true",
        default=False,
        help="Run browser tests with a visible browser",
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "e2e: browser tests against the live site (set CONSENT_E2E_LIVE=1 to run)"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
