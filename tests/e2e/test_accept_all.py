"""Accept all: every consent category granted and tracking cookies set."""

import asyncio

import pytest

from consent_e2e.cookies.decoder import find_consent_cookie, has_yes
from consent_e2e.cookies.validator import cookie_keys

pytestmark = pytest.mark.e2e


@pytest.mark.asyncio
async def test_accept_all_sets_consent_and_tracking_cookies(consent_page, project, suite_config):
    expectations = suite_config.accept_all

    await consent_page.navigate()
    await consent_page.accept_all()

    cookies_after = await consent_page.get_cookies()
    consent = find_consent_cookie(cookies_after, suite_config.registry.consent_cookie_name)

    assert consent is not None, "Consent cookie should be present"
    for category in expectations.required_categories:
        assert has_yes(consent.value, category), f"Consent cookie should contain {category}:yes"

    names = [cookie.name for cookie in cookies_after]
    assert expectations.tracking_cookie in names, (
        f"Tracking cookie {expectations.tracking_cookie} should be present. "
        f"Available cookies: {', '.join(cookie_keys(cookies_after))}"
    )

    if project.name in expectations.analytics_projects:
        await asyncio.sleep(expectations.analytics_wait_ms / 1000)
        updated_names = [cookie.name for cookie in await consent_page.get_cookies()]
        for analytics_cookie in expectations.analytics_cookies:
            assert analytics_cookie in updated_names, f"Analytics cookie {analytics_cookie} should be present"

    minimum = expectations.minimum_for(project.name)
    assert len(cookies_after) >= minimum, (
        f"Expected at least {minimum} cookies for {project.name}, got {len(cookies_after)}"
    )
