"""Parse the rendered schedule results table.

The browser only supplies the page HTML; locating the table, cleaning the
cells and turning rows into games happens here with BeautifulSoup so it can
be exercised against saved markup.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import FieldUnparseable, PageUnavailable, TableFormatUnrecognized, TableNotFound
from .models import Game
from .normalize import infer_division, parse_date, parse_time, season_years

logger = logging.getLogger(__name__)

# "LA Lions 12u AALions12AA" -> "LA Lions 12u AA"
SHORT_CODE_ARTIFACT = re.compile(r"^(.*?\d+u\s+A{1,3})([A-Z][A-Za-z]*\d+[A-Za-z]*)$")
GAME_DESCRIPTION_SPLIT = " vs "
VENUE_RINK_SEPARATOR = " - "

COLUMN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "date": ("date",),
    "time": ("time",),
    "home": ("home",),
    "away": ("away", "visitor"),
    "venue": ("venue", "location", "rink"),
    "status": ("status", "result"),
}
REQUIRED_COLUMNS = ("date", "home", "away")
HEADER_TOKENS = {"date", "time", "home", "away", "visitor", "team", "venue", "location", "rink", "status"}


@dataclass(frozen=True)
class ColumnMap:
    date: int
    home: int
    away: int
    time: int | None = None
    venue: int | None = None
    status: int | None = None


def _normalize_whitespace(value: str) -> str:
    return " ".join(value.split())


def clean_cell(text: str) -> str:
    """Collapse whitespace and drop the condensed short-code repeat some cells carry."""

    value = _normalize_whitespace(text)
    match = SHORT_CODE_ARTIFACT.match(value)
    if match:
        return match.group(1)
    return value


def clean_team_name(text: str) -> str:
    """Reduce a team cell to just the team name.

    Cells sometimes hold a whole game description
    (``A 12u AA vs B 12u AA on 10/18/25 11:00 AMA 12u AA``); only the first
    team is kept.
    """

    value = _normalize_whitespace(text)
    if GAME_DESCRIPTION_SPLIT in value:
        value = value.split(GAME_DESCRIPTION_SPLIT, 1)[0]
    return clean_cell(value)


def _cell_text(cell: Tag) -> str:
    # Nested spans are concatenated without separators, as the browser does.
    return clean_cell(cell.get_text())


def _header_cells(table: Tag) -> list[Tag]:
    cells = table.select("thead th")
    if cells:
        return cells
    for row in table.find_all("tr"):
        cells = row.find_all("th")
        if cells:
            return cells
    return []


def _is_schedule_header(header_text: str) -> bool:
    return "date" in header_text and ("home" in header_text or "team" in header_text)


def find_schedule_table(soup: BeautifulSoup) -> Tag | None:
    for table in soup.find_all("table"):
        header_text = " ".join(cell.get_text(" ", strip=True).lower() for cell in _header_cells(table))
        if _is_schedule_header(header_text):
            return table
    return None


def extract_schedule_rows(html: str, url: str = "") -> list[list[str]]:
    """Return the schedule table as ``[header, *rows]`` of cleaned cell text."""

    soup = BeautifulSoup(html, "html.parser")
    table = find_schedule_table(soup)
    if table is None:
        raise TableNotFound(url)

    header_cells = _header_cells(table)
    rows = [[_normalize_whitespace(cell.get_text(" ")) for cell in header_cells]]

    body_rows = table.select("tbody tr") or table.find_all("tr")
    for row in body_rows:
        cells = row.find_all("td")
        if cells:
            rows.append([_cell_text(cell) for cell in cells])

    logger.debug("Extracted %d rows from schedule table", len(rows))
    return rows


def map_columns(headers: list[str]) -> ColumnMap:
    """Locate column roles by keyword, independent of column order."""

    lowered = [header.lower() for header in headers]
    found: dict[str, int | None] = {}
    for role, keywords in COLUMN_KEYWORDS.items():
        found[role] = next(
            (index for index, header in enumerate(lowered) if any(word in header for word in keywords)),
            None,
        )

    missing = [role for role in REQUIRED_COLUMNS if found[role] is None]
    if missing:
        logger.error("Could not find required columns in schedule table: headers=%s", headers)
        raise TableFormatUnrecognized(headers, missing)
    return ColumnMap(**found)  # type: ignore[arg-type]


def _cell(row: list[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index]


def split_venue(venue: str, separator: str = VENUE_RINK_SEPARATOR) -> tuple[str, str | None]:
    if separator not in venue:
        return venue.strip(), None
    facility, rink = venue.split(separator, 1)
    return facility.strip(), rink.strip() or None


def _is_header_echo(row: list[str], headers: list[str], columns: ColumnMap) -> bool:
    for index in (columns.date, columns.home):
        value = _cell(row, index).strip().lower()
        if value in HEADER_TOKENS or value == headers[index].strip().lower():
            return True
    return False


def parse_row(row: list[str], headers: list[str], columns: ColumnMap, division: str, season: str) -> Game | None:
    """Build one game from a table row.

    Returns None for blank and repeated header rows. Raises
    ``FieldUnparseable`` when the date or time cannot be read.
    """

    date_text = _cell(row, columns.date)
    home = clean_team_name(_cell(row, columns.home))
    away = clean_team_name(_cell(row, columns.away))
    if not date_text or not home or not away:
        return None
    if _is_header_echo(row, headers, columns) or away.lower() in HEADER_TOKENS:
        return None

    time_text = _cell(row, columns.time)
    venue, rink = split_venue(_cell(row, columns.venue))
    status = _cell(row, columns.status) or None

    return Game(
        date=parse_date(date_text, season),
        time=parse_time(time_text) if time_text else "",
        home=home,
        away=away,
        venue=venue,
        division=division or infer_division(home, away),
        status=status,
        rink=rink,
    )


def parse_schedule_table(rows: list[list[str]], division: str, season: str) -> list[Game]:
    """Turn ``[header, *rows]`` into games, skipping rows that fail to parse."""

    if len(rows) < 2:
        logger.warning("No schedule data found in table")
        return []

    headers = rows[0]
    columns = map_columns(headers)
    if season_years(season) is None:
        logger.warning(
            "Season %r has no year range; dates without a year cannot be placed and those rows will be skipped",
            season,
        )

    games: list[Game] = []
    for row in rows[1:]:
        try:
            game = parse_row(row, headers, columns, division, season)
        except FieldUnparseable as exc:
            logger.warning("Skipping schedule row %s: %s", row, exc)
            continue
        if game is not None:
            games.append(game)

    logger.info("Parsed %d games from schedule table", len(games))
    return games


async def extract_games(page: Page, division: str, season: str, timeout_ms: int = 10_000) -> list[Game]:
    """Read the results table currently rendered on ``page``."""

    try:
        await page.wait_for_selector("table", state="attached", timeout=timeout_ms)
    except PlaywrightTimeoutError as exc:
        logger.error("No table rendered on %s", page.url)
        raise TableNotFound(page.url) from exc
    except PlaywrightError as exc:
        raise PageUnavailable(page.url, "wait for the schedule table", exc) from exc

    try:
        html = await page.content()
    except PlaywrightError as exc:
        logger.error("Could not read page content from %s: %s", page.url, exc)
        raise PageUnavailable(page.url, "read the schedule table", exc) from exc
    rows = extract_schedule_rows(html, url=page.url)
    return parse_schedule_table(rows, division, season)
