"""Consent cookie polling.

The consent banner writes its cookie asynchronously after the click that
triggers it. ConsentPoller samples the browser cookie store until the consent
cookie records ``consent:yes`` or the attempt budget runs out.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Union

from playwright.async_api import BrowserContext, Page

from .config import CONSENT_COOKIE_NAME
from .decoder import is_consent_committed
from .models import Cookie, PollResult, PollState

logger = logging.getLogger(__name__)


SleepFunc = Callable[[float], Awaitable[Any]]


class CookieSource(Protocol):
    """Anything that can produce the current cookie snapshot."""

    async def current_cookies(self) -> List[Cookie]:
        ...


class BrowserContextCookieSource:
    """Cookie source backed by a Playwright browser context."""

    def __init__(self, target: Union[BrowserContext, Page]):
        """Initialize cookie source.

        Args:
            target: Browser context, or a page whose context is used
        """
        if isinstance(target, Page):
            target = target.context
        self.context = target

    async def current_cookies(self) -> List[Cookie]:
        raw_cookies = await self.context.cookies()
        return [Cookie.from_playwright_cookie(cookie) for cookie in raw_cookies]


class ConsentPoller:
    """Polls a cookie source until the consent cookie is committed."""

    def __init__(
        self,
        source: CookieSource,
        max_attempts: int = 3,
        interval_ms: int = 1000,
        consent_cookie_name: str = CONSENT_COOKIE_NAME,
        sleep: Optional[SleepFunc] = None
    ):
        """Initialize poller.

        Args:
            source: Cookie source to sample
            max_attempts: Snapshots to take before giving up (at least one is
                always taken)
            interval_ms: Wait between snapshots in milliseconds
            consent_cookie_name: Name of the consent cookie
            sleep: Coroutine used to wait between snapshots
        """
        self.source = source
        self.max_attempts = max_attempts
        self.interval_ms = interval_ms
        self.consent_cookie_name = consent_cookie_name
        self._sleep = sleep or asyncio.sleep

    async def poll(self) -> PollResult:
        """Sample the cookie store until consent is committed or the budget is spent.

        Errors raised by the cookie source propagate unchanged; only a
        missing or uncommitted consent cookie is retried.
        """
        fetches = 0
        waits = 0

        while True:
            cookies = await self.source.current_cookies()
            fetches += 1

            if is_consent_committed(cookies, self.consent_cookie_name):
                logger.debug(f"Consent cookie committed after {fetches} snapshot(s)")
                return PollResult(
                    state=PollState.COMMITTED,
                    cookies=cookies,
                    fetches=fetches,
                    waits=waits,
                )

            if fetches >= self.max_attempts:
                logger.warning(
                    f"Consent cookie not committed after {fetches} snapshot(s), "
                    f"returning last snapshot"
                )
                return PollResult(
                    state=PollState.EXHAUSTED,
                    cookies=cookies,
                    fetches=fetches,
                    waits=waits,
                )

            logger.info(f"Retry {fetches}: Waiting for consent cookie to be properly set...")
            await self._sleep(self.interval_ms / 1000)
            waits += 1


async def await_consent_commit(
    source: CookieSource,
    max_attempts: int = 3,
    interval_ms: int = 1000,
    **kwargs
) -> List[Cookie]:
    """Wait for the consent cookie and return the resulting cookie snapshot.

    Args:
        source: Cookie source to sample
        max_attempts: Snapshots to take before giving up
        interval_ms: Wait between snapshots in milliseconds
        **kwargs: Additional ConsentPoller options

    Returns:
        The committed snapshot, or the last snapshot taken when the budget
        was exhausted. Whether that is a failure is up to the caller.
    """
    poller = ConsentPoller(source, max_attempts=max_attempts, interval_ms=interval_ms, **kwargs)
    result = await poller.poll()
    return result.cookies
