"""Drive the schedule page through its season -> division -> team dropdowns.

The site is an Angular app whose markup is not under our control, so every
dropdown is looked up through an ordered list of candidate selectors in
``CONTROL_LOCATORS``. When the site changes, add a selector there.
"""

from __future__ import annotations

import enum
import logging
from urllib.parse import urlencode

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import Settings
from .errors import (
    ControlNotFound,
    NavigationStateError,
    OptionNotFound,
    PageUnavailable,
    RenderTimeout,
    TeamNotFound,
)
from .models import SelectOption
from .normalize import plain_id

logger = logging.getLogger(__name__)

SEASON = "season"
DIVISION = "division"
TEAM = "team"

CONTROL_LOCATORS: dict[str, tuple[str, ...]] = {
    SEASON: (
        'select[ng-model*="season"]',
        'select[name="season"]',
        "select#season",
        ".season-select select",
        'select[ng-model*="Season"]',
    ),
    DIVISION: (
        'select[ng-model*="division"]',
        'select[name="division"]',
        "select#division",
        ".division-select select",
        'select[ng-model*="Division"]',
    ),
    TEAM: (
        'select[ng-model*="team"]',
        'select[name="team"]',
        "select#team",
        ".team-select select",
        'select[ng-model*="Team"]',
    ),
}

BOOTSTRAP_MARKER = "[ng-app], [data-ng-app], .ng-scope"
ANY_CONTROL = "select"

READ_OPTIONS_SCRIPT = """
elements => elements.map(el => ({
    value: el.value || '',
    label: (el.textContent || '').trim(),
    selected: !!el.selected,
}))
"""

CLICK_SCOPE_SCRIPT = """
keyword => {
    const candidates = Array.from(document.querySelectorAll('a, button, [role="tab"]'));
    const match = candidates.find(el => (el.textContent || '').toLowerCase().includes(keyword));
    if (!match) {
        return false;
    }
    match.click();
    return true;
}
"""

SCOPE_KEYWORDS = {"current": "current", "full": "full"}


class NavState(enum.IntEnum):
    UNLOADED = 0
    LOADED = 1
    SEASON_SELECTED = 2
    DIVISION_SELECTED = 3
    TEAM_SELECTED = 4
    ALL_TEAMS = 5


async def read_options(page: Page, selector: str, settings: Settings) -> list[SelectOption]:
    """Read the non-placeholder options of one dropdown.

    Waits for ``selector`` to exist, gives the app one settle pause to fill
    it in, then returns every option with both a value and a label. Raises
    the driver's error if the selector never appears.
    """

    await page.wait_for_selector(selector, state="attached", timeout=settings.control_timeout_ms)
    await page.wait_for_timeout(settings.selection_settle_ms)
    raw = await page.eval_on_selector_all(f"{selector} option", READ_OPTIONS_SCRIPT)
    options = [
        SelectOption(
            value=str(item.get("value") or ""),
            label=str(item.get("label") or ""),
            selected=bool(item.get("selected")),
        )
        for item in raw
    ]
    return [option for option in options if option.value.strip() and option.label.strip()]


async def resolve_control(page: Page, role: str, settings: Settings) -> tuple[str, list[SelectOption]]:
    """Return the first candidate selector for ``role`` that has options."""

    selectors = CONTROL_LOCATORS[role]
    for selector in selectors:
        try:
            options = await read_options(page, selector, settings)
        except PlaywrightError as exc:
            logger.debug("Selector %s for %s unavailable: %s", selector, role, exc)
            continue
        if options:
            logger.info("Found %d %s options using selector: %s", len(options), role, selector)
            return selector, options
        logger.debug("Selector %s for %s has no usable options", selector, role)
    raise ControlNotFound(role, selectors, url=page.url)


async def extract_options(page: Page, role: str, settings: Settings) -> list[SelectOption]:
    """Options for ``role``, or an empty list when the page offers none."""

    try:
        _, options = await resolve_control(page, role, settings)
    except ControlNotFound:
        logger.warning("No %s dropdown found, returning empty list", role)
        return []
    return options


def find_option(options: list[SelectOption], value: str) -> SelectOption | None:
    for option in options:
        if option.value == value:
            return option
    wanted = plain_id(value)
    for option in options:
        if plain_id(option.value) == wanted:
            return option
    return None


class ScheduleNavigator:
    """State machine over a single page of the schedule site.

    ``UNLOADED -> LOADED -> SEASON_SELECTED -> DIVISION_SELECTED ->
    TEAM_SELECTED | ALL_TEAMS``. Loading with ids in the URL lands directly
    on the matching later state. The page is only ever loaded once.
    """

    def __init__(self, page: Page, settings: Settings) -> None:
        self.page = page
        self.settings = settings
        self.state = NavState.UNLOADED

    def _require(self, minimum: NavState, action: str) -> None:
        if self.state < minimum:
            raise NavigationStateError(self.state.name, action)

    def schedule_url(self, season_id: str | None = None, division_id: str | None = None) -> str:
        params = {}
        if season_id:
            params["season_id"] = plain_id(season_id)
            if division_id:
                params["division_id"] = plain_id(division_id)
        url = self.settings.schedule_url
        return f"{url}?{urlencode(params)}" if params else url

    async def _snippet(self) -> str:
        try:
            content = await self.page.content()
        except PlaywrightError:
            return ""
        return content[:500]

    async def load(self, season_id: str | None = None, division_id: str | None = None) -> None:
        if self.state is not NavState.UNLOADED:
            raise NavigationStateError(self.state.name, "load the schedule page")

        url = self.schedule_url(season_id, division_id)
        logger.info("Navigating to schedule page: %s", url)
        try:
            await self.page.goto(url, wait_until="domcontentloaded", timeout=self.settings.page_timeout_ms)
        except PlaywrightError as exc:
            logger.error("Failed to navigate to schedule page: %s", exc)
            raise RenderTimeout(url, "the schedule page", await self._snippet()) from exc

        try:
            await self.page.wait_for_selector(
                BOOTSTRAP_MARKER, state="attached", timeout=self.settings.bootstrap_timeout_ms
            )
        except PlaywrightError as exc:
            snippet = await self._snippet()
            logger.error("Application never bootstrapped. Page HTML sample: %s", snippet)
            raise RenderTimeout(url, "the application bootstrap marker", snippet) from exc
        await self._pause(self.settings.bootstrap_settle_ms, "wait for the application to settle")

        if not season_id:
            try:
                await self.page.wait_for_selector(
                    ANY_CONTROL, state="attached", timeout=self.settings.control_timeout_ms
                )
            except PlaywrightError as exc:
                snippet = await self._snippet()
                logger.error("No select elements found after load. Page HTML sample: %s", snippet)
                raise RenderTimeout(url, "a selection control", snippet) from exc

        if season_id and division_id:
            self.state = NavState.DIVISION_SELECTED
        elif season_id:
            self.state = NavState.SEASON_SELECTED
        else:
            self.state = NavState.LOADED
        logger.debug("Schedule page loaded, state=%s", self.state.name)

    async def _pause(self, ms: int, action: str) -> None:
        try:
            await self.page.wait_for_timeout(ms)
        except PlaywrightError as exc:
            raise PageUnavailable(self.page.url, action, exc) from exc

    async def _settle(self) -> None:
        await self._pause(self.settings.selection_settle_ms, "wait for the page to refresh")
        try:
            await self.page.wait_for_load_state(
                "networkidle", timeout=self.settings.network_idle_timeout_ms
            )
        except PlaywrightTimeoutError:
            logger.warning(
                "Network did not go idle within %dms; reading page as-is",
                self.settings.network_idle_timeout_ms,
            )
        except PlaywrightError as exc:
            logger.error("Page failed while waiting for refresh: %s", exc)
            raise PageUnavailable(self.page.url, "wait for the page to refresh", exc) from exc

    async def _select(self, role: str, value: str) -> SelectOption:
        selector, options = await resolve_control(self.page, role, self.settings)
        option = find_option(options, value)
        if option is None:
            labels = [item.label for item in options]
            if role == TEAM:
                raise TeamNotFound(value, labels)
            raise OptionNotFound(role, value, labels)

        if option.selected:
            logger.debug("%s %s already selected", role, option.value)
            return option

        logger.debug("Selecting %s: %s", role, option.value)
        try:
            await self.page.select_option(selector, value=option.value)
        except PlaywrightError as exc:
            logger.error("Failed to select %s: %s", role, exc)
            raise ControlNotFound(role, [selector], url=self.page.url) from exc
        await self._settle()
        option.selected = True
        logger.debug("Selected %s: %s", role, option.value)
        return option

    async def select_season(self, value: str) -> SelectOption:
        self._require(NavState.LOADED, "select a season")
        option = await self._select(SEASON, value)
        self.state = NavState.SEASON_SELECTED
        return option

    async def select_division(self, value: str) -> SelectOption:
        self._require(NavState.SEASON_SELECTED, "select a division")
        option = await self._select(DIVISION, value)
        self.state = NavState.DIVISION_SELECTED
        return option

    async def select_team(self, value: str | None) -> SelectOption | None:
        """Select one team, or leave the page on "All Teams" when ``value`` is None."""

        self._require(NavState.DIVISION_SELECTED, "select a team")
        if value is None:
            self.state = NavState.ALL_TEAMS
            return None
        option = await self._select(TEAM, value)
        self.state = NavState.TEAM_SELECTED
        return option

    async def options(self, role: str) -> list[SelectOption]:
        self._require(NavState.LOADED, f"read {role} options")
        return await extract_options(self.page, role, self.settings)

    async def choose_scope(self, scope: str) -> bool:
        """Click the "current"/"full" schedule switch if the page has one."""

        self._require(NavState.LOADED, "choose a schedule scope")
        keyword = SCOPE_KEYWORDS[scope]
        try:
            clicked = await self.page.evaluate(CLICK_SCOPE_SCRIPT, keyword)
        except PlaywrightError as exc:
            logger.debug("Could not switch schedule scope to %s: %s", scope, exc)
            return False
        if not clicked:
            logger.debug("No %r schedule switch found, using default view", scope)
            return False
        await self._settle()
        return True
