"""Two interchangeable ways of getting the same list of games."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from . import ical_feed
from .browser import SessionManager
from .config import Settings
from .models import Game
from .navigation import DIVISION, SEASON, ScheduleNavigator, find_option
from .schedule_table import extract_games

logger = logging.getLogger(__name__)

SCOPES = ("current", "full")


@dataclass(frozen=True)
class ScheduleRequest:
    """Ids to fetch plus the labels used to interpret the rows.

    ``season`` anchors yearless dates such as ``Sat Sep 13``; ``division``
    is recorded on every game. The table source reads both from the page
    when they are left empty.
    """

    season_id: str
    division_id: str | None = None
    team_id: str | None = None
    season: str = ""
    division: str = ""
    scope: str = "full"


class ScheduleSource(Protocol):
    name: str

    async def fetch_games(self, request: ScheduleRequest) -> list[Game]:
        ...


class TableScheduleSource:
    """Render the schedule page in a browser and read its results table."""

    name = "table"

    def __init__(self, session_manager: SessionManager) -> None:
        self.session_manager = session_manager

    async def _label(self, navigator: ScheduleNavigator, role: str, value: str) -> str:
        options = await navigator.options(role)
        option = find_option(options, value) or next((item for item in options if item.selected), None)
        return option.label if option else ""

    async def fetch_games(self, request: ScheduleRequest) -> list[Game]:
        if request.scope not in SCOPES:
            raise ValueError(f"scope must be one of {SCOPES}, got {request.scope!r}")
        logger.info(
            "Scraping schedule table season=%s division=%s team=%s scope=%s",
            request.season_id,
            request.division_id,
            request.team_id,
            request.scope,
        )
        settings = self.session_manager.settings

        async with self.session_manager.session() as session:
            page = await session.new_page()
            navigator = ScheduleNavigator(page, settings)
            await navigator.load(request.season_id, request.division_id)

            season = request.season or await self._label(navigator, SEASON, request.season_id)
            division = request.division
            if request.division_id and not division:
                division = await self._label(navigator, DIVISION, request.division_id)

            if request.division_id or request.team_id:
                await navigator.select_team(request.team_id)
            await navigator.choose_scope(request.scope)

            games = await extract_games(page, division, season, settings.table_timeout_ms)

        logger.info("Successfully scraped %d games", len(games))
        return games


class FeedScheduleSource:
    """Download the calendar-subscription feed; no browser involved."""

    name = "feed"

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def fetch_games(self, request: ScheduleRequest) -> list[Game]:
        return await asyncio.to_thread(
            ical_feed.fetch_games,
            self.settings,
            request.season_id,
            request.division_id,
            request.team_id,
            request.division,
        )


def make_source(
    strategy: str,
    settings: Settings,
    session_manager: SessionManager | None = None,
) -> ScheduleSource:
    if strategy == TableScheduleSource.name:
        return TableScheduleSource(session_manager or SessionManager(settings))
    if strategy == FeedScheduleSource.name:
        return FeedScheduleSource(settings)
    raise ValueError(f"strategy must be 'table' or 'feed', got {strategy!r}")
