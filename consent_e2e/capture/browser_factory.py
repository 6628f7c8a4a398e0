"""Browser factory for the consent test execution matrix.

This module provides the BrowserFactory class that handles browser lifecycle
management and context creation for each execution project (browser engine,
device emulation profile and release channel) the consent tests run against.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, List, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Playwright,
    async_playwright,
    Page
)

logger = logging.getLogger(__name__)


class BrowserEngineType:
    """Supported browser engine types."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class PlatformType:
    """Platform metadata attached to execution projects."""
    DESKTOP = "desktop"
    MOBILE = "mobile"


class ExecutionProject:
    """One entry of the execution matrix."""

    def __init__(
        self,
        name: str,
        engine: str,
        device: Optional[str] = None,
        channel: Optional[str] = None,
        platform: str = PlatformType.DESKTOP
    ):
        """Initialize execution project.

        Args:
            name: Project name, also the cookie expectation registry key
            engine: Browser engine to launch
            device: Playwright device descriptor to emulate
            channel: Browser release channel (e.g. 'msedge')
            platform: 'desktop' or 'mobile'
        """
        self.name = name
        self.engine = engine
        self.device = device
        self.channel = channel
        self.platform = platform

    @property
    def is_desktop(self) -> bool:
        return self.platform == PlatformType.DESKTOP

    def __repr__(self) -> str:
        return (
            f"ExecutionProject(name={self.name!r}, engine={self.engine}, "
            f"device={self.device!r}, platform={self.platform})"
        )


EXECUTION_PROJECTS: Dict[str, ExecutionProject] = {
    project.name: project for project in [
        ExecutionProject('Mobile Safari', BrowserEngineType.WEBKIT,
                         device='iPhone 15 Pro Max', platform=PlatformType.MOBILE),
        ExecutionProject('Mobile Chrome', BrowserEngineType.CHROMIUM,
                         device='Galaxy S24', platform=PlatformType.MOBILE),
        ExecutionProject('chromium', BrowserEngineType.CHROMIUM, device='Desktop Chrome'),
        ExecutionProject('webkit', BrowserEngineType.WEBKIT, device='Desktop Safari'),
        ExecutionProject('firefox', BrowserEngineType.FIREFOX, device='Desktop Firefox'),
        ExecutionProject('Microsoft Edge', BrowserEngineType.CHROMIUM,
                         device='Desktop Edge', channel='msedge'),
    ]
}


def get_project(name: str) -> ExecutionProject:
    """Get an execution project by name.

    Raises:
        KeyError: If the project is not part of the execution matrix
    """
    try:
        return EXECUTION_PROJECTS[name]
    except KeyError:
        raise KeyError(
            f"Unknown execution project: {name!r} "
            f"(known: {', '.join(EXECUTION_PROJECTS)})"
        ) from None


def list_projects() -> List[str]:
    return list(EXECUTION_PROJECTS)


class BrowserConfig:
    """Configuration for browser creation and context setup."""

    def __init__(
        self,
        project: Optional[ExecutionProject] = None,
        headless: bool = True,
        slow_mo: int = 0,
        base_url: Optional[str] = None,
        action_timeout_ms: int = 10000,
        navigation_timeout_ms: int = 30000,
        locale: Optional[str] = None,
        trace: bool = False,
        trace_dir: str = "test-results/traces",
        **kwargs
    ):
        """Initialize browser configuration.

        Args:
            project: Execution project to launch; defaults to 'chromium'
            headless: Run browser in headless mode
            slow_mo: Slow down operations by specified milliseconds
            base_url: Base URL for relative navigation
            action_timeout_ms: Default timeout for page actions
            navigation_timeout_ms: Default timeout for navigation
            locale: Locale for the browser context
            trace: Enable Playwright tracing
            trace_dir: Directory for traces recorded without an explicit path
        """
        self.project = project or get_project('chromium')
        self.headless = headless
        self.slow_mo = slow_mo
        self.base_url = base_url
        self.action_timeout_ms = action_timeout_ms
        self.navigation_timeout_ms = navigation_timeout_ms
        self.locale = locale
        self.trace = trace
        self.trace_dir = trace_dir
        self.extra_options = kwargs

    @property
    def engine(self) -> str:
        return self.project.engine

    def to_browser_options(self) -> Dict[str, Any]:
        """Convert to Playwright browser launch options."""
        options = {
            'headless': self.headless,
            'slow_mo': self.slow_mo,
        }

        if self.project.channel:
            options['channel'] = self.project.channel

        options.update(self.extra_options)

        return options

    def to_context_options(self, devices: Optional[Dict[str, Dict[str, Any]]] = None) -> Dict[str, Any]:
        """Convert to Playwright browser context options.

        Args:
            devices: Playwright device descriptors (``playwright.devices``)
        """
        options = {}

        if devices and self.project.device:
            descriptor = devices.get(self.project.device)
            if descriptor is None:
                logger.warning(f"Unknown device descriptor: {self.project.device}")
            else:
                options.update(descriptor)
                # Launch-time setting, not a context option
                options.pop('default_browser_type', None)

        if self.base_url:
            options['base_url'] = self.base_url

        if self.locale:
            options['locale'] = self.locale

        return options


class BrowserFactory:
    """Factory for creating and managing Playwright browser instances."""

    def __init__(self, config: BrowserConfig):
        """Initialize browser factory with configuration.

        Args:
            config: Browser configuration object
        """
        self.config = config
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self._context_count = 0

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        if self.playwright is not None:
            logger.warning("Browser factory already started")
            return

        logger.info(f"Starting browser factory for project: {self.config.project.name}")

        try:
            self.playwright = await async_playwright().start()

            if self.config.engine == BrowserEngineType.FIREFOX:
                browser_type = self.playwright.firefox
            elif self.config.engine == BrowserEngineType.WEBKIT:
                browser_type = self.playwright.webkit
            else:
                browser_type = self.playwright.chromium

            browser_options = self.config.to_browser_options()
            self.browser = await browser_type.launch(**browser_options)

            logger.info(f"Browser launched successfully (headless={self.config.headless})")

        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop browser and cleanup resources."""
        logger.info("Stopping browser factory")

        try:
            if self.browser:
                await self.browser.close()
                self.browser = None

            if self.playwright:
                await self.playwright.stop()
                self.playwright = None

            self._context_count = 0
            logger.info("Browser factory stopped successfully")

        except Exception as e:
            logger.error(f"Error stopping browser factory: {e}")

    async def create_context(self, **context_overrides) -> BrowserContext:
        """Create a new browser context for the configured project.

        Args:
            **context_overrides: Override default context options

        Returns:
            New browser context with default timeouts applied

        Raises:
            RuntimeError: If browser factory not started
        """
        if not self.browser:
            raise RuntimeError("Browser factory not started. Call start() first.")

        devices = self.playwright.devices if self.playwright else None
        context_options = self.config.to_context_options(devices)
        context_options.update(context_overrides)

        context = await self.browser.new_context(**context_options)
        context.set_default_timeout(self.config.action_timeout_ms)
        context.set_default_navigation_timeout(self.config.navigation_timeout_ms)
        self._context_count += 1

        logger.debug(f"Created browser context #{self._context_count}")
        return context

    def _default_trace_path(self) -> str:
        trace_dir = Path(self.config.trace_dir)
        trace_dir.mkdir(parents=True, exist_ok=True)
        safe_project = self.config.project.name.replace(' ', '-').lower()
        return str(trace_dir / f"{safe_project}-{datetime.now().strftime('%Y%m%dT%H%M%S%f')}.zip")

    @asynccontextmanager
    async def context(self, **context_overrides) -> AsyncGenerator[BrowserContext, None]:
        """Context manager for browser context lifecycle.

        Args:
            **context_overrides: Override default context options

        Yields:
            Browser context that will be automatically closed
        """
        trace_path = context_overrides.pop('record_trace_path', None)
        if trace_path is None and self.config.trace:
            trace_path = self._default_trace_path()
        context = await self.create_context(**context_overrides)

        try:
            if trace_path:
                await context.tracing.start(screenshots=True, snapshots=True, sources=True)

            yield context

        finally:
            if trace_path:
                try:
                    await context.tracing.stop(path=trace_path)
                    logger.debug(f"Trace saved: {trace_path}")
                except Exception as e:
                    logger.warning(f"Failed to save trace: {e}")

            await context.close()
            self._context_count -= 1

    @asynccontextmanager
    async def page(self, **context_overrides) -> AsyncGenerator[Page, None]:
        """Context manager for a single page in a fresh context.

        Args:
            **context_overrides: Override default context options

        Yields:
            Page instance that will be automatically closed
        """
        async with self.context(**context_overrides) as context:
            page = await context.new_page()
            try:
                yield page
            finally:
                await page.close()

    @property
    def is_running(self) -> bool:
        """Check if browser factory is running."""
        if self.browser is None:
            return False
        return self.browser.is_connected()

    @property
    def context_count(self) -> int:
        """Get current number of active contexts."""
        return self._context_count

    def __repr__(self) -> str:
        return (
            f"BrowserFactory(project={self.config.project.name!r}, "
            f"headless={self.config.headless}, "
            f"running={self.is_running}, "
            f"contexts={self.context_count})"
        )


def create_browser_factory(
    project_name: str = 'chromium',
    headless: bool = True,
    **kwargs
) -> BrowserFactory:
    """Create a browser factory for an execution project.

    Args:
        project_name: Execution project name
        headless: Run in headless mode
        **kwargs: Additional BrowserConfig options

    Returns:
        Configured BrowserFactory instance
    """
    config = BrowserConfig(project=get_project(project_name), headless=headless, **kwargs)
    return BrowserFactory(config)
