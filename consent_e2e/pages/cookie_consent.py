"""Page object for the cookie consent banner and preference center.

Wraps the banner buttons (Accept all, Accept necessary only, Customize) and
the preference center dialog (category toggles, Save My Preferences) of the
site under test behind async methods used by the browser tests.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from playwright.async_api import Error as PlaywrightError, Locator, Page, TimeoutError as PlaywrightTimeoutError

from ..cookies.config import SuiteConfiguration, get_suite_config
from ..cookies.models import ConsentState, Cookie, CookieCategory
from ..cookies.polling import BrowserContextCookieSource

logger = logging.getLogger(__name__)


PREFERENCES_DIALOG = '[role="dialog"][aria-label*="Customize"]'
DIALOG_CLOSE_BUTTON = f'{PREFERENCES_DIALOG} button[aria-label="Close"]'

OPTIONAL_CATEGORIES: List[CookieCategory] = [
    CookieCategory.FUNCTIONAL,
    CookieCategory.ANALYTICS,
    CookieCategory.ADVERTISEMENT,
    CookieCategory.UNCATEGORIZED,
]


class ConsentInteractionError(Exception):
    """Raised when the consent UI cannot be driven into the requested state."""
    pass


class CookieConsentPage:
    """Drives the consent banner and preference center of the site."""

    def __init__(self, page: Page, config: Optional[SuiteConfiguration] = None):
        """Initialize page object.

        Args:
            page: Playwright page object
            config: Suite configuration; defaults to the process-wide config
        """
        self.page = page
        self.config = config or get_suite_config()
        self.cookie_source = BrowserContextCookieSource(page)

        self.accept_all_button = page.get_by_role('button', name='Accept all')
        self.accept_necessary_button = page.get_by_role('button', name='Accept necessary only')
        self.customize_button = page.get_by_role('button', name='Customize')
        self.save_preferences_button = page.get_by_role('button', name='Save My Preferences')
        self.title_div = page.locator('#titlediv')
        self.preferences_dialog = page.locator(PREFERENCES_DIALOG)

    async def _settle(self, milliseconds: int) -> None:
        if milliseconds:
            await asyncio.sleep(milliseconds / 1000)

    async def navigate(self, url: Optional[str] = None, clear_cookies: bool = False) -> None:
        """Open the site and wait for the DOM to load.

        Args:
            url: Page to open; defaults to the configured base URL
            clear_cookies: Clear the context cookie jar first
        """
        if clear_cookies:
            await self.page.context.clear_cookies()

        target = url or self.config.base_url
        logger.info(f"Navigating to {target}")
        await self.page.goto(target)
        await self.page.wait_for_load_state('domcontentloaded')

    async def get_cookies(self) -> List[Cookie]:
        """Snapshot the browser context cookie jar."""
        return await self.cookie_source.current_cookies()

    async def accept_all(self) -> None:
        """Click the banner's Accept all button."""
        await self.accept_all_button.click()
        logger.info("Clicked Accept all")

    async def accept_necessary_only(self) -> None:
        """Click the banner's Accept necessary only button."""
        await self.accept_necessary_button.click()
        logger.info("Clicked Accept necessary only")

    async def open_customize_modal(self) -> None:
        """Open the customize dialog from the banner and let it settle."""
        await self.customize_button.click()
        await self._settle(self.config.modal_settle_ms)

    async def choose(self, state: ConsentState) -> None:
        """Answer the banner with one of its consent actions."""
        if state == ConsentState.ACCEPT_ALL:
            await self.accept_all()
        elif state == ConsentState.REJECT_ALL:
            await self.accept_necessary_only()
        else:
            await self.open_customize_modal()

    async def handle_desktop_specific_interactions(self, platform: Optional[str]) -> None:
        """Dismiss the desktop-only title overlay when present.

        Missing elements are logged and ignored; the overlay does not exist
        on every layout.
        """
        if platform != 'desktop':
            return

        try:
            await self.title_div.hover(timeout=3000)
            await self.title_div.get_by_role('emphasis').click(timeout=3000)
        except PlaywrightError:
            logger.info("Desktop-specific elements not found or already handled, continuing...")

    async def save_preferences(self, close_dialog: bool = False) -> None:
        """Click Save My Preferences and wait for the cookie write.

        Args:
            close_dialog: Close the preference dialog if it stays open
        """
        await self.save_preferences_button.click(force=True)
        await self._settle(self.config.save_settle_ms)

        if close_dialog and await self.preferences_dialog.is_visible():
            await self.page.locator(DIALOG_CLOSE_BUTTON).click(force=True)
            await self._settle(self.config.modal_settle_ms)

    async def open_cookie_preferences(self) -> None:
        """Open the preference center dialog.

        Tries the footer Cookie Preferences button, then the footer link text,
        then the banner Customize button.

        Raises:
            ConsentInteractionError: If no strategy opens the dialog
        """
        if await self.preferences_dialog.is_visible():
            return

        strategies: List[Callable[[], Awaitable[bool]]] = [
            self._open_via_footer_button,
            self._open_via_footer_link,
            self._open_via_customize_button,
        ]

        for attempt, strategy in enumerate(strategies, start=1):
            try:
                if await strategy():
                    logger.info(f"Cookie preferences dialog opened (attempt {attempt})")
                    return
            except PlaywrightError as e:
                logger.warning(f"Attempt {attempt} to open cookie preferences failed: {e}")

        raise ConsentInteractionError(
            "Could not open cookie preferences dialog after all attempts"
        )

    async def _click_and_check_dialog(self, locator: Locator) -> bool:
        await locator.scroll_into_view_if_needed()
        await self._settle(self.config.modal_settle_ms)
        await locator.click(force=True)
        await self._settle(2000)
        return await self.preferences_dialog.is_visible()

    async def _open_via_footer_button(self) -> bool:
        logger.debug("Attempting footer Cookie Preferences button")
        return await self._click_and_check_dialog(
            self.page.locator('button:has-text("Cookie Preferences")')
        )

    async def _open_via_footer_link(self) -> bool:
        logger.debug("Attempting footer Cookie Preferences link")
        return await self._click_and_check_dialog(
            self.page.locator('text=Cookie Preferences')
        )

    async def _open_via_customize_button(self) -> bool:
        logger.debug("Looking for Customize button")
        button = self.page.locator('button:has-text("Customize")').first
        if not await button.is_visible():
            return False
        await button.click(force=True)
        await self._settle(2000)
        return await self.preferences_dialog.is_visible()

    def category_checkbox(self, category: CookieCategory) -> Locator:
        """Locate the checkbox toggling a preference center category."""
        label = category.value if isinstance(category, CookieCategory) else str(category)
        section = self.preferences_dialog.locator(f'button:has-text("{label}")').locator('..')
        return section.locator('input[type="checkbox"]')

    async def is_category_enabled(self, category: CookieCategory) -> bool:
        return await self.category_checkbox(category).is_checked()

    async def set_category(self, category: CookieCategory, enabled: bool) -> None:
        """Check or uncheck a category toggle if it is not already in that state."""
        checkbox = self.category_checkbox(category)
        if await checkbox.is_checked() == enabled:
            return
        if enabled:
            await checkbox.check()
        else:
            await checkbox.uncheck()

    async def disable_all_optional_categories(self) -> None:
        """Uncheck every optional category; missing toggles are logged and skipped."""
        for category in OPTIONAL_CATEGORIES:
            try:
                await self.set_category(category, False)
            except PlaywrightError as e:
                logger.warning(f"Could not find or disable {category.value} checkbox: {e}")

    async def close_dialog(self) -> None:
        """Close the preference center and wait until it is hidden."""
        await self.page.locator(DIALOG_CLOSE_BUTTON).click(force=True)
        await self.page.wait_for_selector(PREFERENCES_DIALOG, state='hidden')

    async def verify_category_is_enabled(self, category: CookieCategory) -> bool:
        """Reopen the preference center and read a category's saved state."""
        await self.open_cookie_preferences()
        enabled = await self.is_category_enabled(category)
        await self.close_dialog()
        return enabled

    async def wait_for_network_idle(self, timeout_ms: Optional[int] = None) -> None:
        """Wait for network idle; a timeout is logged, not raised."""
        timeout = timeout_ms if timeout_ms is not None else self.config.network_idle_timeout_ms
        try:
            await self.page.wait_for_load_state('networkidle', timeout=timeout)
        except PlaywrightTimeoutError:
            logger.info("Network did not reach idle state, continuing...")

    async def apply_browser_specific_waits(self, project_name: str) -> None:
        """Give slower projects extra time to write tracking cookies."""
        extra_wait = self.config.extra_wait_for(project_name)
        if extra_wait:
            logger.info(f"{project_name} detected - adding extra wait time for tracking cookies...")
            await self._settle(extra_wait)
