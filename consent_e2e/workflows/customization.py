"""Cookie customization workflow.

Opens the consent banner's customize dialog, saves the default preferences,
waits for the consent cookie to be written and validates the resulting cookie
jar against the expectations registered for the execution project.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from playwright.async_api import Page
from pydantic import BaseModel, Field

from ..capture.browser_factory import ExecutionProject
from ..cookies.config import SuiteConfiguration, get_suite_config
from ..cookies.models import ConsentState, Cookie, ValidationResult
from ..cookies.polling import ConsentPoller
from ..cookies.decoder import is_consent_committed
from ..cookies.validator import (
    CookieValidationError,
    assert_consent_content,
    assert_required_cookies,
    log_consent_content,
    log_cookie_validation,
    validate_consent_content,
    validate_cookies
)
from ..pages.cookie_consent import CookieConsentPage

logger = logging.getLogger(__name__)


class CustomizationReport(BaseModel):
    """Outcome of one customization run."""

    project: str = Field(description="Execution project name")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    cookies_before: List[Cookie] = Field(default_factory=list)
    cookies_after: List[Cookie] = Field(default_factory=list)
    consent_cookie_updated: bool = False
    validation: Optional[ValidationResult] = None
    skipped: bool = Field(
        default=False,
        description="True when no expectations are registered for the project"
    )

    @property
    def cookie_count_change(self) -> int:
        return len(self.cookies_after) - len(self.cookies_before)

    def to_run_record(self) -> dict:
        """Build the JSON run record consumed by the cross-run analysis."""
        return {
            'project': self.project,
            'timestamp': self.timestamp.isoformat(),
            'cookie_count_before': len(self.cookies_before),
            'cookie_count_after': len(self.cookies_after),
            'customization_results': {
                'cookie_count_change': self.cookie_count_change,
                'consent_cookie_updated': self.consent_cookie_updated,
            },
            'cookies_after': [
                {'name': cookie.name, 'domain': cookie.domain}
                for cookie in self.cookies_after
            ],
        }

    def export(self, directory: Path) -> Path:
        """Write the run record to ``directory`` and return its path."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        safe_project = self.project.replace(' ', '-').lower()
        path = directory / f"{safe_project}-{self.timestamp.strftime('%Y%m%dT%H%M%S%f')}.json"
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_run_record(), f, indent=2)

        logger.info(f"Exported run record: {path}")
        return path


class CookieCustomizationWorkflow:
    """Customize-and-save scenario for one execution project."""

    def __init__(
        self,
        page: Page,
        project: ExecutionProject,
        config: Optional[SuiteConfiguration] = None
    ):
        """Initialize workflow.

        Args:
            page: Playwright page in a fresh browser context
            project: Execution project the page was created for
            config: Suite configuration; defaults to the process-wide config
        """
        self.page = page
        self.project = project
        self.config = config or get_suite_config()
        self.consent_page = CookieConsentPage(page, self.config)

    async def execute(self) -> CustomizationReport:
        """Run the scenario and validate the resulting cookies.

        Raises:
            CookieValidationError: If a required cookie is missing or the
                consent cookie does not record the expected grants
        """
        await self.consent_page.navigate()
        cookies_before = await self.consent_page.get_cookies()

        await self.consent_page.choose(ConsentState.CUSTOM)
        await self.consent_page.handle_desktop_specific_interactions(self.project.platform)
        await self.consent_page.save_preferences()

        await self.consent_page.apply_browser_specific_waits(self.project.name)
        await self.consent_page.wait_for_network_idle()

        poller = ConsentPoller(
            self.consent_page.cookie_source,
            max_attempts=self.config.polling.max_attempts,
            interval_ms=self.config.polling.interval_ms,
            consent_cookie_name=self.config.registry.consent_cookie_name,
        )
        poll_result = await poller.poll()

        report = CustomizationReport(
            project=self.project.name,
            cookies_before=cookies_before,
            cookies_after=poll_result.cookies,
            consent_cookie_updated=poll_result.committed,
        )

        self.validate(report)
        return report

    def validate(self, report: CustomizationReport) -> None:
        """Validate a report against the registry and consent cookie content."""
        expected = self.config.registry.lookup(report.project)
        if expected is None:
            logger.warning(f"No validation rules defined for project: {report.project}")
            report.skipped = True
            return

        log_cookie_validation(report.project, report.cookies_before, report.cookies_after, expected)

        report.validation = validate_cookies(report.cookies_after, expected)
        assert_required_cookies(report.validation, report.cookies_after)

        self.validate_consent_cookie(report.cookies_after)

        logger.info("All required cookies validated successfully")

    def validate_consent_cookie(self, cookies: List[Cookie]) -> None:
        consent_cookie_name = self.config.registry.consent_cookie_name
        updated = is_consent_committed(cookies, consent_cookie_name)
        logger.info(f"  Consent cookie updated: {updated}")
        if not updated:
            raise CookieValidationError(
                "Consent cookie should be updated after customization",
                observed=[cookie.key for cookie in cookies],
            )

        content = validate_consent_content(cookies, consent_cookie_name)
        log_consent_content(content)
        assert_consent_content(content)
