"""Headless browser sessions for the schedule website.

Local runs use the system Chrome (``CHROME_EXECUTABLE_PATH``) or the
Playwright-managed Chromium; serverless runs add the sandbox and shared
memory flags those environments need.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from .config import DEFAULT_HEADERS, DEFAULT_USER_AGENT, DEFAULT_VIEWPORT, Settings
from .errors import PageUnavailable, SessionUnavailable

logger = logging.getLogger(__name__)

LOCAL_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
]
SERVERLESS_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--no-zygote",
    "--single-process",
]


def launch_options(settings: Settings) -> dict[str, Any]:
    """Chromium launch keyword arguments for the current environment."""

    options: dict[str, Any] = {
        "headless": True,
        "args": list(SERVERLESS_ARGS if settings.serverless else LOCAL_ARGS),
    }
    if settings.chrome_executable_path:
        options["executable_path"] = settings.chrome_executable_path
    return options


class Session:
    """One launched browser plus the pages opened on it."""

    def __init__(self, playwright: Playwright, browser: Browser, settings: Settings) -> None:
        self.playwright = playwright
        self.browser = browser
        self.settings = settings
        self.contexts: list[BrowserContext] = []

    async def new_page(self) -> Page:
        try:
            context = await self.browser.new_context(
                viewport=DEFAULT_VIEWPORT,
                user_agent=DEFAULT_USER_AGENT,
                locale="en-US",
                extra_http_headers={"Accept-Language": DEFAULT_HEADERS["Accept-Language"]},
            )
            self.contexts.append(context)
            context.set_default_timeout(self.settings.page_timeout_ms)
            page = await context.new_page()
        except PlaywrightError as exc:
            logger.error("Failed to open a browser page: %s", exc)
            raise PageUnavailable("", "open a new page", exc) from exc
        page.set_default_timeout(self.settings.page_timeout_ms)
        logger.debug("Created new page with standard configuration")
        return page


class SessionManager:
    """Acquire and release browser sessions.

    ``release`` never raises: pages are closed first, then the browser gets
    ``close_grace_seconds`` to shut down before the driver (and with it the
    browser process) is stopped.
    """

    def __init__(self, settings: Settings | None = None, playwright_factory=async_playwright) -> None:
        self.settings = settings or Settings.from_env()
        self._playwright_factory = playwright_factory

    def _launch_hint(self) -> str:
        if self.settings.serverless:
            return "Serverless browser configuration failed."
        return "Please ensure Chrome is installed and CHROME_EXECUTABLE_PATH is set correctly."

    async def acquire(self) -> Session:
        options = launch_options(self.settings)
        logger.info("Launching browser...")
        logger.debug("Browser config: %s", options)

        try:
            playwright = await self._playwright_factory().start()
        except Exception as exc:
            logger.error("Failed to start browser driver: %s", exc)
            raise SessionUnavailable(self._launch_hint(), exc) from exc

        try:
            browser = await playwright.chromium.launch(**options)
        except Exception as exc:
            logger.error("Failed to launch browser: %s", exc)
            await self._stop_driver(playwright)
            raise SessionUnavailable(self._launch_hint(), exc) from exc

        logger.info("Browser launched successfully")
        return Session(playwright, browser, self.settings)

    async def release(self, session: Session) -> None:
        grace = self.settings.close_grace_seconds

        for context in session.contexts:
            for page in list(context.pages):
                try:
                    await asyncio.wait_for(page.close(), timeout=grace)
                except (PlaywrightError, asyncio.TimeoutError) as exc:
                    logger.warning("Error closing page: %s", exc)
            try:
                await asyncio.wait_for(context.close(), timeout=grace)
            except (PlaywrightError, asyncio.TimeoutError) as exc:
                logger.warning("Error closing browser context: %s", exc)

        try:
            await asyncio.wait_for(session.browser.close(), timeout=grace)
            logger.info("Browser closed successfully")
        except (PlaywrightError, asyncio.TimeoutError) as exc:
            logger.warning("Browser did not close within %.1fs, terminating: %s", grace, exc)

        await self._stop_driver(session.playwright)

    async def _stop_driver(self, playwright: Playwright) -> None:
        # Stopping the driver kills any browser process it still owns.
        try:
            await asyncio.wait_for(playwright.stop(), timeout=self.settings.close_grace_seconds)
        except (PlaywrightError, asyncio.TimeoutError) as exc:
            logger.error("Browser driver did not stop cleanly: %s", exc)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Session]:
        session = await self.acquire()
        try:
            yield session
        finally:
            await self.release(session)
