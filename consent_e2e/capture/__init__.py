"""Browser management for the consent test execution matrix.

Usage:
    from consent_e2e.capture import create_browser_factory

    factory = create_browser_factory('Mobile Safari')
    await factory.start()
    async with factory.page() as page:
        await page.goto("https://www.thethinkingtraveller.com/")
"""

from .browser_factory import (
    BrowserEngineType,
    PlatformType,
    ExecutionProject,
    EXECUTION_PROJECTS,
    get_project,
    list_projects,
    BrowserConfig,
    BrowserFactory,
    create_browser_factory
)

__all__ = [
    "BrowserEngineType",
    "PlatformType",
    "ExecutionProject",
    "EXECUTION_PROJECTS",
    "get_project",
    "list_projects",
    "BrowserConfig",
    "BrowserFactory",
    "create_browser_factory"
]
