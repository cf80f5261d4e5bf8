"""Entities produced by discovery and schedule extraction."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any

from .normalize import parse_season_id

_DIVISION_LABEL = re.compile(r"^\s*(?P<age>\d{1,2}(?:/\d{1,2})?\s*u)\s+(?P<skill>.+?)\s*$", re.IGNORECASE)
_SEASON_PREFIX = re.compile(r"\d{4}[-/]\d{2}")


@dataclass(frozen=True)
class Season:
    """League season spanning two calendar years."""

    id: str
    label: str
    start_year: int | None = None
    end_year: int | None = None

    @classmethod
    def from_option(cls, option: "SelectOption") -> "Season":
        years = None
        match = _SEASON_PREFIX.search(option.label)
        if match:
            years = parse_season_id(match.group(0))
        start, end = years if years else (None, None)
        return cls(id=option.value, label=option.label, start_year=start, end_year=end)


@dataclass(frozen=True)
class Division:
    """Age group and skill level bracket within a season."""

    id: str
    age_group: str
    skill_level: str
    season: str

    @classmethod
    def from_label(cls, label: str, season: str, division_id: str = "") -> "Division":
        match = _DIVISION_LABEL.match(label)
        if match:
            age_group = match.group("age").replace(" ", "").lower()
            skill_level = match.group("skill")
        else:
            age_group, skill_level = label.strip(), ""
        return cls(id=division_id or label.strip(), age_group=age_group, skill_level=skill_level, season=season)


@dataclass(frozen=True)
class Team:
    name: str
    division: str
    season: str


@dataclass
class SelectOption:
    """One entry of a season, division or team dropdown.

    ``selected`` is rewritten by discovery to mark the resolved entry.
    """

    value: str
    label: str
    selected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ScheduleOptions:
    seasons: list[SelectOption] = field(default_factory=list)
    divisions: list[SelectOption] = field(default_factory=list)
    teams: list[SelectOption] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "seasons": [option.to_dict() for option in self.seasons],
            "divisions": [option.to_dict() for option in self.divisions],
            "teams": [option.to_dict() for option in self.teams],
        }


@dataclass(frozen=True)
class Game:
    """Single scheduled game.

    ``date`` is ISO ``YYYY-MM-DD`` and ``time`` is 24-hour ``HH:MM`` in the
    venue's timezone. ``status``, ``rink`` and ``game_type`` are passed
    through from the source as-is.
    """

    date: str
    time: str
    home: str
    away: str
    venue: str
    division: str
    status: str | None = None
    rink: str | None = None
    game_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "date": self.date,
            "time": self.time,
            "home": self.home,
            "away": self.away,
            "venue": self.venue,
            "division": self.division,
        }
        if self.status:
            row["status"] = self.status
        if self.rink:
            row["rink"] = self.rink
        if self.game_type:
            row["gameType"] = self.game_type
        return row
