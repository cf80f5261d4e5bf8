"""Date, time, team-name and season normalization.

Pure helpers shared by the table and calendar-feed pipelines. Nothing in
here touches the network or the browser.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

from .errors import DateUnparseable, TimeUnparseable

DATE_FORMATS = ("EEE MMM dd", "MM/dd/yyyy", "M/d/yyyy", "yyyy-MM-dd")
TIME_FORMATS = ("H:MM AM/PM", "HH:MM")

_WEEKDAY_MONTH_DAY = re.compile(
    r"^(?P<weekday>mon|tue|wed|thu|fri|sat|sun)[a-z]*\.?,?\s+(?P<month>[a-z]{3,9})\.?\s+(?P<day>\d{1,2})$",
    re.IGNORECASE,
)
_PADDED_US_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
_US_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

_WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
_MONTHS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

_TIME = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?(?::\d{2})?\s*(?P<meridiem>[ap]\.?m\.?)?(?:\s+[a-z]{2,4})?$",
    re.IGNORECASE,
)

_SEASON_ID = re.compile(r"^(\d{4})[-/](\d{2})$")
_SEASON_RANGE = re.compile(r"(\d{4})\s*[-/]\s*(\d{4}|\d{2})(?!\d)")
_DIVISION_TOKEN = re.compile(r"(?<![\w/])(\d{1,2}(?:/\d{1,2})?u\s+A{1,3})(?![A-Za-z])")


def _normalize_whitespace(value: str) -> str:
    return " ".join(value.split())


def _end_year(start: int, tail: str) -> int:
    if len(tail) == 4:
        return int(tail)
    end = start - start % 100 + int(tail)
    # 1999-00 rolls over into the next century
    return end + 100 if end < start else end


def parse_season_id(text: str) -> tuple[int, int] | None:
    """Return ``(start_year, end_year)`` for ``YYYY-YY`` / ``YYYY/YY``, else None."""

    match = _SEASON_ID.match(text.strip())
    if not match:
        return None
    start = int(match.group(1))
    return start, _end_year(start, match.group(2))


def season_years(season: str) -> tuple[int, int] | None:
    """Find a year range anywhere in a season label such as ``2025-26 12u-19u AA``."""

    years = parse_season_id(season)
    if years is not None:
        return years
    match = _SEASON_RANGE.search(season)
    if not match:
        return None
    start = int(match.group(1))
    tail = match.group(2)
    return start, _end_year(start, tail)


def normalize_season_label(season: str) -> str:
    """Canonicalise ``2025/26``, ``2025-2026`` and friends to ``2025-26``."""

    years = season_years(season)
    if years is None:
        return season.strip()
    return f"{years[0]}-{years[1] % 100:02d}"


def _check_season_range(parsed: date, text: str, years: tuple[int, int] | None) -> str:
    if years is not None and not years[0] <= parsed.year <= years[1]:
        raise DateUnparseable(
            text, [f"a date between {years[0]} and {years[1]} for this season"]
        )
    return parsed.isoformat()


def _weekday_month_day(match: re.Match, years: tuple[int, int] | None) -> date | None:
    if years is None:
        return None
    month_key = match.group("month")[:3].lower()
    if month_key not in _MONTHS:
        return None
    month = _MONTHS.index(month_key) + 1
    day = int(match.group("day"))
    weekday = _WEEKDAYS.index(match.group("weekday")[:3].lower())

    candidates: list[date] = []
    for year in dict.fromkeys(years):
        try:
            candidates.append(date(year, month, day))
        except ValueError:
            continue
    if not candidates:
        return None
    for candidate in candidates:
        if candidate.weekday() == weekday:
            return candidate
    return candidates[0]


def parse_date(text: str, season: str) -> str:
    """Parse a schedule date into ``YYYY-MM-DD``.

    Formats are tried in order: ``Sat Sep 13`` (year taken from the season,
    preferring the start year unless only the end year agrees with the
    weekday), ``MM/DD/YYYY``, ``M/D/YYYY`` and ISO passthrough.
    """

    value = _normalize_whitespace(text)
    years = season_years(season)

    match = _WEEKDAY_MONTH_DAY.match(value)
    if match:
        parsed = _weekday_month_day(match, years)
        if parsed is not None:
            return parsed.isoformat()

    for pattern in (_PADDED_US_DATE, _US_DATE):
        match = pattern.match(value)
        if match:
            month, day, year = (int(part) for part in match.groups())
            try:
                parsed = date(year, month, day)
            except ValueError:
                continue
            return _check_season_range(parsed, text, years)

    match = _ISO_DATE.match(value)
    if match:
        try:
            parsed = date(*(int(part) for part in match.groups()))
        except ValueError as exc:
            raise DateUnparseable(text, DATE_FORMATS) from exc
        return _check_season_range(parsed, text, years)

    raise DateUnparseable(text, DATE_FORMATS)


def parse_time(text: str) -> str:
    """Parse ``7:15AM PDT``, ``7:15 pm``, ``19:15`` or ``14:30:00`` into ``HH:MM``."""

    match = _TIME.match(text.strip())
    if not match:
        raise TimeUnparseable(text, TIME_FORMATS)

    hour = int(match.group("hour"))
    minute = int(match.group("minute") or 0)
    meridiem = match.group("meridiem")

    if meridiem:
        if not 1 <= hour <= 12:
            raise TimeUnparseable(text, TIME_FORMATS)
        is_pm = meridiem.lower().startswith("p")
        if is_pm and hour != 12:
            hour += 12
        elif not is_pm and hour == 12:
            hour = 0
    elif match.group("minute") is None or hour > 23:
        raise TimeUnparseable(text, TIME_FORMATS)

    if minute > 59:
        raise TimeUnparseable(text, TIME_FORMATS)
    return f"{hour:02d}:{minute:02d}"


def normalize_team_name(name: str) -> str:
    lowered = re.sub(r"[^\w\s]", "", name.lower())
    return _normalize_whitespace(lowered)


def names_match(query: str, canonical: str) -> bool:
    """True when ``query`` equals or is contained in ``canonical`` after normalization."""

    normalized_query = normalize_team_name(query)
    normalized_canonical = normalize_team_name(canonical)
    if not normalized_query:
        return False
    if normalized_query == normalized_canonical:
        return True
    return normalized_query in normalized_canonical


def infer_division(*team_names: str) -> str:
    """Pull an age/skill token like ``12u AA`` out of the first team name that has one."""

    for name in team_names:
        match = _DIVISION_TOKEN.search(name or "")
        if match:
            return _normalize_whitespace(match.group(1))
    return ""


def plain_id(value: str) -> str:
    """Strip the type prefix the site puts on option values (``number:9486`` -> ``9486``)."""

    return value.strip().rsplit(":", 1)[-1]


def localize(moment: datetime | date, timezone: str) -> tuple[str, str]:
    """Return ``(YYYY-MM-DD, HH:MM)`` for a calendar timestamp in the venue timezone.

    All-day values have no time and yield an empty time string. Naive
    datetimes are taken to already be venue-local.
    """

    if not isinstance(moment, datetime):
        return moment.isoformat(), ""
    if moment.tzinfo is not None:
        moment = moment.astimezone(ZoneInfo(timezone))
    return moment.date().isoformat(), moment.strftime("%H:%M")
