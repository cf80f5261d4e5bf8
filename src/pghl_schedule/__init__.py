from .api import discover_options, get_games, get_team_schedule
from .errors import (
    ControlNotFound,
    DateUnparseable,
    FeedFormatUnrecognized,
    FeedUnavailable,
    InvalidSetting,
    NoScheduleData,
    OptionNotFound,
    PageUnavailable,
    RenderTimeout,
    ScheduleScrapeError,
    SessionUnavailable,
    TableFormatUnrecognized,
    TableNotFound,
    TeamNotFound,
    TimeUnparseable,
)
from .models import Division, Game, ScheduleOptions, Season, SelectOption, Team
from .normalize import names_match, normalize_team_name, parse_date, parse_season_id, parse_time

__all__ = [
    "discover_options",
    "get_games",
    "get_team_schedule",
    "Game",
    "Season",
    "Division",
    "Team",
    "SelectOption",
    "ScheduleOptions",
    "parse_date",
    "parse_time",
    "normalize_team_name",
    "names_match",
    "parse_season_id",
    "ScheduleScrapeError",
    "SessionUnavailable",
    "RenderTimeout",
    "ControlNotFound",
    "TableNotFound",
    "TableFormatUnrecognized",
    "FeedUnavailable",
    "FeedFormatUnrecognized",
    "PageUnavailable",
    "InvalidSetting",
    "DateUnparseable",
    "TimeUnparseable",
    "OptionNotFound",
    "TeamNotFound",
    "NoScheduleData",
]
