"""Fetch games from the league's public calendar-subscription feed.

The feed needs no browser: one GET against the iCal endpoint returns every
game for the requested season, division or team.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import requests
from icalendar import Calendar

from .config import DEFAULT_HEADERS, Settings
from .errors import FeedEventUnparseable, FeedFormatUnrecognized, FeedUnavailable, ScheduleScrapeError
from .models import Game
from .normalize import infer_division, localize, plain_id

logger = logging.getLogger(__name__)

AWAY_AT_HOME = re.compile(r"\s+@\s+")
AWAY_VERSUS_HOME = re.compile(r"\s+vs\.?\s+", re.IGNORECASE)
LOCATION_SEPARATOR = " / "

# delimiter -> game type tag, checked in order
SUMMARY_DELIMITERS = (
    (AWAY_AT_HOME, "away"),
    (AWAY_VERSUS_HOME, "home"),
)


def _get_session() -> requests.Session:
    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)
    return session


def feed_params(
    settings: Settings,
    season_id: str | None = None,
    division_id: str | None = None,
    team_id: str | None = None,
) -> dict[str, str]:
    params = {
        "league_id": settings.league_id,
        "client_service_id": settings.client_service_id,
    }
    for key, value in (("season_id", season_id), ("division_id", division_id), ("team_id", team_id)):
        if value:
            params[key] = plain_id(value)
    return params


def fetch_calendar(settings: Settings, params: dict[str, str]) -> str:
    """Issue the single feed request and return the calendar text."""

    session = _get_session()
    url = settings.ical_url
    logger.info("Fetching iCal schedule from %s params=%s", url, params)
    try:
        response = session.get(url, params=params, timeout=settings.feed_timeout_seconds)
    except requests.RequestException as exc:
        logger.error("Calendar feed request failed: %s", exc)
        raise FeedUnavailable(url, None, str(exc)) from exc

    if not response.ok:
        logger.error("Calendar feed returned HTTP %s", response.status_code)
        raise FeedUnavailable(response.url or url, response.status_code, response.reason or "")

    logger.debug("Downloaded %d bytes of iCal data", len(response.text))
    return response.text


def split_summary(summary: str) -> tuple[str, str, str]:
    """Return ``(away, home, game_type)`` from ``"A @ B"`` or ``"A vs B"``."""

    for pattern, game_type in SUMMARY_DELIMITERS:
        parts = pattern.split(summary.strip(), maxsplit=1)
        if len(parts) == 2:
            away, home = (part.strip() for part in parts)
            if away and home:
                return away, home, game_type
    raise ValueError(f"summary {summary!r} has no '@' or 'vs' delimiter")


def split_location(location: str) -> tuple[str, str | None]:
    if LOCATION_SEPARATOR not in location:
        return location.strip(), None
    facility, rink = location.split(LOCATION_SEPARATOR, 1)
    return facility.strip(), rink.strip() or None


def _text(component: Any, key: str) -> str:
    value = component.get(key)
    return str(value).strip() if value is not None else ""


def parse_event(event: Any, timezone: str, division: str = "") -> Game:
    """Convert one VEVENT into a game."""

    uid = _text(event, "uid") or "<no uid>"
    try:
        away, home, game_type = split_summary(_text(event, "summary"))
    except ValueError as exc:
        raise FeedEventUnparseable(uid, str(exc)) from exc

    start = event.get("dtstart")
    if start is None:
        raise FeedEventUnparseable(uid, "missing DTSTART")
    game_date, game_time = localize(start.dt, timezone)

    venue, rink = split_location(_text(event, "location"))
    return Game(
        date=game_date,
        time=game_time,
        home=home,
        away=away,
        venue=venue,
        division=division or infer_division(away, home),
        rink=rink,
        game_type=game_type,
    )


def parse_calendar(payload: str | bytes, timezone: str, division: str = "", url: str = "") -> list[Game]:
    """Parse a calendar payload, skipping events that cannot be read.

    A body that is not a calendar at all (maintenance page, empty response)
    raises ``FeedFormatUnrecognized``.
    """

    try:
        calendar = Calendar.from_ical(payload)
    except ValueError as exc:
        snippet = payload.decode("utf-8", "replace") if isinstance(payload, bytes) else payload
        logger.error("Calendar feed body is not iCalendar data: %s", exc)
        raise FeedFormatUnrecognized(url, snippet[:500], str(exc)) from exc

    games: list[Game] = []
    for component in calendar.walk("VEVENT"):
        try:
            games.append(parse_event(component, timezone, division))
        except ScheduleScrapeError as exc:
            logger.warning("Failed to parse iCal event: %s", exc)
            continue

    games.sort(key=lambda game: (game.date, game.time))
    logger.info("Parsed %d games from iCal feed", len(games))
    return games


def fetch_games(
    settings: Settings,
    season_id: str | None = None,
    division_id: str | None = None,
    team_id: str | None = None,
    division: str = "",
) -> list[Game]:
    """Fetch and parse the feed for whichever ids are given, sorted by date."""

    params = feed_params(settings, season_id, division_id, team_id)
    payload = fetch_calendar(settings, params)
    return parse_calendar(payload, settings.timezone, division, url=settings.ical_url)
