"""Progressive discovery of seasons, divisions and teams."""

from __future__ import annotations

import logging

from .browser import SessionManager
from .models import ScheduleOptions, SelectOption
from .navigation import DIVISION, SEASON, TEAM, ScheduleNavigator, resolve_control

logger = logging.getLogger(__name__)


def find_option_by_label(options: list[SelectOption], label: str) -> SelectOption | None:
    """Case-insensitive exact label match, falling back to substring containment."""

    wanted = label.strip().lower()
    if not wanted:
        return None
    for option in options:
        if option.label.strip().lower() == wanted:
            return option
    for option in options:
        if wanted in option.label.lower():
            return option
    return None


def mark_selected(options: list[SelectOption], chosen: SelectOption) -> None:
    for option in options:
        option.selected = option.value == chosen.value


async def discover(
    session_manager: SessionManager,
    season_label: str | None = None,
    division_label: str | None = None,
) -> ScheduleOptions:
    """Resolve labels level by level inside a single browser session.

    Seasons are always returned. Divisions are only filled in when
    ``season_label`` resolves, and teams only when ``division_label`` also
    resolves. An unresolved label is logged and leaves the deeper levels
    empty; callers decide whether that is an error.
    """

    logger.info("Getting schedule options season=%r division=%r", season_label, division_label)
    settings = session_manager.settings

    async with session_manager.session() as session:
        page = await session.new_page()
        navigator = ScheduleNavigator(page, settings)
        await navigator.load()

        # An empty season list means the page itself is broken.
        _, seasons = await resolve_control(page, SEASON, settings)
        result = ScheduleOptions(seasons=seasons)
        logger.debug("Retrieved %d seasons", len(seasons))

        if not season_label:
            return result

        season = find_option_by_label(seasons, season_label)
        if season is None:
            logger.warning("Season label %r not found in available seasons", season_label)
            return result
        logger.debug("Resolved season label %r to value %r", season_label, season.value)
        mark_selected(seasons, season)

        await navigator.select_season(season.value)
        result.divisions = await navigator.options(DIVISION)
        logger.debug("Retrieved %d divisions", len(result.divisions))

        if not division_label or not result.divisions:
            return result

        division = find_option_by_label(result.divisions, division_label)
        if division is None:
            logger.warning("Division label %r not found in available divisions", division_label)
            return result
        logger.debug("Resolved division label %r to value %r", division_label, division.value)
        mark_selected(result.divisions, division)

        await navigator.select_division(division.value)
        result.teams = await navigator.options(TEAM)
        logger.debug("Retrieved %d teams", len(result.teams))

    logger.info(
        "Schedule options retrieved: %d seasons, %d divisions, %d teams",
        len(result.seasons),
        len(result.divisions),
        len(result.teams),
    )
    return result
