"""Fixtures for the live-site browser scenarios.

These tests drive a real browser against the production site. They are
skipped unless CONSENT_E2E_LIVE=1; the execution project comes from
--project or $CONSENT_E2E_PROJECT (default: chromium).
"""

import os

import pytest
import pytest_asyncio

from consent_e2e.capture.browser_factory import create_browser_factory, get_project
from consent_e2e.cookies.config import get_suite_config
from consent_e2e.pages.cookie_consent import CookieConsentPage


LIVE_ENV = 'CONSENT_E2E_LIVE'
PROJECT_ENV = 'CONSENT_E2E_PROJECT'


def pytest_collection_modifyitems(config, items):
    if os.getenv(LIVE_ENV) == '1':
        return

    skip_live = pytest.mark.skip(reason=f"live-site browser test (set {LIVE_ENV}=1 to run)")
    for item in items:
        if 'e2e' in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture(scope="session")
def project(pytestconfig):
    """Execution project the browser scenarios run against."""
    name = pytestconfig.getoption("--project") or os.getenv(PROJECT_ENV, 'chromium')
    return get_project(name)


@pytest.fixture(scope="session")
def suite_config():
    return get_suite_config()


@pytest_asyncio.fixture
async def browser_factory(project, suite_config, pytestconfig):
    """Started browser factory for the selected execution project."""
    factory = create_browser_factory(
        project.name,
        headless=not pytestconfig.getoption("--headed"),
        action_timeout_ms=suite_config.action_timeout_ms,
        navigation_timeout_ms=suite_config.navigation_timeout_ms,
    )
    await factory.start()
    yield factory
    await factory.stop()


@pytest_asyncio.fixture
async def page(browser_factory):
    """Page in a fresh browser context, so every scenario starts without cookies."""
    async with browser_factory.page() as page:
        yield page


@pytest.fixture
def consent_page(page, suite_config):
    return CookieConsentPage(page, suite_config)
