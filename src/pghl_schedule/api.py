"""Public operations: discover schedule options and fetch games.

Each call runs its own event loop and, for browser-backed work, its own
browser session, so calls are independent of one another.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from .browser import SessionManager
from .config import Settings
from .discovery import discover, find_option_by_label
from .errors import NoScheduleData, OptionNotFound, TeamNotFound
from .models import Division, Game, ScheduleOptions, Season, Team
from .normalize import names_match, plain_id
from .sources import ScheduleRequest, make_source

logger = logging.getLogger(__name__)


@dataclass
class TeamSchedule:
    team: Team
    season: Season
    division: Division
    team_id: str
    games: list[Game] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "team": self.team.name,
            "team_id": self.team_id,
            "season": self.season.label,
            "season_id": self.season.id,
            "division": self.team.division,
            "division_id": self.division.id,
            "games": [game.to_dict() for game in self.games],
            "totalGames": len(self.games),
        }


def _manager(settings: Settings | None, session_manager: SessionManager | None) -> SessionManager:
    if session_manager is not None:
        return session_manager
    return SessionManager(settings or Settings.from_env())


async def discover_options_async(
    season_label: str | None = None,
    division_label: str | None = None,
    settings: Settings | None = None,
    session_manager: SessionManager | None = None,
) -> ScheduleOptions:
    return await discover(_manager(settings, session_manager), season_label, division_label)


def discover_options(
    season_label: str | None = None,
    division_label: str | None = None,
    settings: Settings | None = None,
) -> ScheduleOptions:
    """Seasons, plus divisions for ``season_label`` and teams for ``division_label``."""

    return asyncio.run(discover_options_async(season_label, division_label, settings))


async def get_games_async(
    season_id: str,
    division_id: str | None = None,
    team_id: str | None = None,
    strategy: str = "table",
    *,
    season: str = "",
    division: str = "",
    scope: str = "full",
    settings: Settings | None = None,
    session_manager: SessionManager | None = None,
) -> list[Game]:
    settings = settings or (session_manager.settings if session_manager else Settings.from_env())
    source = make_source(strategy, settings, session_manager)
    request = ScheduleRequest(
        season_id=season_id,
        division_id=division_id,
        team_id=team_id,
        season=season,
        division=division,
        scope=scope,
    )
    return await source.fetch_games(request)


def get_games(
    season_id: str,
    division_id: str | None = None,
    team_id: str | None = None,
    strategy: str = "table",
    *,
    season: str = "",
    division: str = "",
    scope: str = "full",
    settings: Settings | None = None,
) -> list[Game]:
    """Games for the given ids using the ``table`` (browser) or ``feed`` (iCal) strategy."""

    return asyncio.run(
        get_games_async(
            season_id,
            division_id,
            team_id,
            strategy,
            season=season,
            division=division,
            scope=scope,
            settings=settings,
        )
    )


async def get_team_schedule_async(
    season: str,
    division: str,
    team: str,
    strategy: str = "feed",
    settings: Settings | None = None,
    session_manager: SessionManager | None = None,
) -> TeamSchedule:
    manager = _manager(settings, session_manager)
    options = await discover(manager, season, division)

    season_option = find_option_by_label(options.seasons, season)
    if season_option is None:
        raise OptionNotFound("season", season, [option.label for option in options.seasons])

    division_option = find_option_by_label(options.divisions, division)
    if division_option is None:
        raise OptionNotFound(
            "division", division, [option.label for option in options.divisions], f" for season {season!r}"
        )

    team_option = next((option for option in options.teams if names_match(team, option.label)), None)
    if team_option is None:
        raise TeamNotFound(team, [option.label for option in options.teams], division, season)

    logger.info(
        "Found team %s (season=%s division=%s team=%s)",
        team_option.label,
        season_option.value,
        division_option.value,
        team_option.value,
    )

    games = await get_games_async(
        plain_id(season_option.value),
        plain_id(division_option.value),
        plain_id(team_option.value),
        strategy,
        season=season_option.label,
        division=division_option.label,
        settings=manager.settings,
        session_manager=manager,
    )
    if not games:
        raise NoScheduleData(team_option.label, season_option.label)

    season_model = Season.from_option(season_option)
    return TeamSchedule(
        team=Team(name=team_option.label, division=division_option.label, season=season_model.label),
        season=season_model,
        division=Division.from_label(division_option.label, season_model.label, plain_id(division_option.value)),
        team_id=plain_id(team_option.value),
        games=games,
    )


def get_team_schedule(
    season: str,
    division: str,
    team: str,
    strategy: str = "feed",
    settings: Settings | None = None,
) -> TeamSchedule:
    """Resolve season/division/team labels and return that team's games."""

    return asyncio.run(get_team_schedule_async(season, division, team, strategy, settings))
