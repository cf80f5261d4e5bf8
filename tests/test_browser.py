from __future__ import annotations

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from pghl_schedule.browser import LOCAL_ARGS, SERVERLESS_ARGS, SessionManager, launch_options
from pghl_schedule.config import Settings
from pghl_schedule.errors import InvalidSetting, PageUnavailable, SessionUnavailable


class _FakePage:
    def __init__(self):
        self.timeout = None
        self.closed = False

    def set_default_timeout(self, timeout):
        self.timeout = timeout

    async def close(self):
        self.closed = True


class _FakeContext:
    def __init__(self, options):
        self.options = options
        self.pages = []
        self.timeout = None
        self.closed = False

    def set_default_timeout(self, timeout):
        self.timeout = timeout

    async def new_page(self):
        page = _FakePage()
        self.pages.append(page)
        return page

    async def close(self):
        self.closed = True


class _FakeBrowser:
    def __init__(self, close_behaviour=None, context_error=None):
        self.contexts = []
        self.close_behaviour = close_behaviour
        self.context_error = context_error
        self.closed = False

    async def new_context(self, **options):
        if self.context_error is not None:
            raise self.context_error
        context = _FakeContext(options)
        self.contexts.append(context)
        return context

    async def close(self):
        if self.close_behaviour == "hang":
            await asyncio.sleep(10)
        elif self.close_behaviour == "error":
            raise PlaywrightError("browser crashed")
        self.closed = True


class _FakeChromium:
    def __init__(self, browser=None, error=None):
        self.browser = browser
        self.error = error
        self.launch_kwargs = None

    async def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.browser


class _FakePlaywright:
    def __init__(self, chromium):
        self.chromium = chromium
        self.stopped = False

    async def stop(self):
        self.stopped = True


class _FakeFactory:
    def __init__(self, playwright):
        self.playwright = playwright

    def __call__(self):
        return self

    async def start(self):
        return self.playwright


SETTINGS = Settings(close_grace_seconds=0.05, page_timeout_ms=1234)


def _manager(browser=None, launch_error=None):
    playwright = _FakePlaywright(_FakeChromium(browser or _FakeBrowser(), launch_error))
    return SessionManager(SETTINGS, playwright_factory=_FakeFactory(playwright)), playwright


def test_launch_options_local_and_serverless():
    local = launch_options(Settings(chrome_executable_path="/usr/bin/google-chrome"))
    assert local == {"headless": True, "args": LOCAL_ARGS, "executable_path": "/usr/bin/google-chrome"}

    serverless = launch_options(Settings(serverless=True))
    assert serverless["args"] == SERVERLESS_ARGS
    assert "--disable-dev-shm-usage" in serverless["args"]
    assert "executable_path" not in serverless


def test_settings_from_env():
    settings = Settings.from_env(
        {
            "VERCEL": "1",
            "CHROME_EXECUTABLE_PATH": "/opt/chrome",
            "PGHL_LEAGUE_ID": "2000",
            "PGHL_TIMEOUT_MS": "45000",
        }
    )
    assert settings.serverless
    assert settings.chrome_executable_path == "/opt/chrome"
    assert settings.league_id == "2000"
    assert settings.page_timeout_ms == 45000
    assert settings.schedule_url == "https://www.pacificgirlshockey.com/stats#/2000/schedule"


def test_settings_from_env_serverless_override():
    assert not Settings.from_env({"AWS_LAMBDA_FUNCTION_NAME": "fn", "PGHL_SERVERLESS": "false"}).serverless
    assert Settings.from_env({"PGHL_SERVERLESS": "yes"}).serverless
    assert not Settings.from_env({}).serverless


def test_session_opens_configured_pages_and_releases_everything():
    browser = _FakeBrowser()
    manager, playwright = _manager(browser)

    async def scenario():
        async with manager.session() as session:
            return await session.new_page()

    page = asyncio.run(scenario())

    context = browser.contexts[0]
    assert context.options["locale"] == "en-US"
    assert context.options["viewport"] == {"width": 1280, "height": 720}
    assert context.timeout == 1234
    assert page.timeout == 1234
    assert page.closed and context.closed and browser.closed
    assert playwright.stopped


def test_launch_failure_raises_session_unavailable_and_stops_driver():
    manager, playwright = _manager(launch_error=PlaywrightError("Executable doesn't exist"))

    with pytest.raises(SessionUnavailable) as excinfo:
        asyncio.run(manager.acquire())

    assert "CHROME_EXECUTABLE_PATH" in str(excinfo.value)
    assert "Executable doesn't exist" in str(excinfo.value)
    assert playwright.stopped


def test_serverless_launch_failure_hint():
    playwright = _FakePlaywright(_FakeChromium(error=PlaywrightError("no /tmp")))
    manager = SessionManager(
        Settings(serverless=True, close_grace_seconds=0.05),
        playwright_factory=_FakeFactory(playwright),
    )

    with pytest.raises(SessionUnavailable) as excinfo:
        asyncio.run(manager.acquire())

    assert excinfo.value.hint == "Serverless browser configuration failed."


@pytest.mark.parametrize("behaviour", ["hang", "error"])
def test_release_stops_driver_even_when_browser_close_fails(behaviour):
    browser = _FakeBrowser(close_behaviour=behaviour)
    manager, playwright = _manager(browser)

    async def scenario():
        session = await manager.acquire()
        await session.new_page()
        await manager.release(session)

    asyncio.run(scenario())

    assert not browser.closed
    assert browser.contexts[0].closed
    assert playwright.stopped


def test_session_released_when_body_raises():
    manager, playwright = _manager()

    async def scenario():
        async with manager.session():
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        asyncio.run(scenario())

    assert playwright.stopped


def test_new_page_failure_is_reported_and_session_still_released():
    browser = _FakeBrowser(context_error=PlaywrightError("Browser has been closed"))
    manager, playwright = _manager(browser)

    async def scenario():
        async with manager.session() as session:
            await session.new_page()

    with pytest.raises(PageUnavailable) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.action == "open a new page"
    assert playwright.stopped


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_settings_from_env_rejects_bad_timeout(value):
    with pytest.raises(InvalidSetting) as excinfo:
        Settings.from_env({"PGHL_TIMEOUT_MS": value})

    assert excinfo.value.to_payload()["setting"] == "PGHL_TIMEOUT_MS"
