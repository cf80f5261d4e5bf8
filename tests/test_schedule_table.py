from __future__ import annotations

import asyncio
import logging

import pytest
from playwright.async_api import Error as PlaywrightError

import pghl_schedule.schedule_table as schedule_table
from pghl_schedule.errors import PageUnavailable, TableFormatUnrecognized, TableNotFound
from pghl_schedule.models import Game

from fake_browser import FakePage


HTML = """
<html>
  <body>
    <table class="standings">
      <thead><tr><th>Team</th><th>GP</th><th>PTS</th></tr></thead>
      <tbody><tr><td>Las Vegas Storm 12u AA</td><td>4</td><td>8</td></tr></tbody>
    </table>
    <table class="schedule">
      <thead>
        <tr><th>Status</th><th>Date</th><th>Time</th><th>Visitor</th><th>Home</th><th>Venue</th></tr>
      </thead>
      <tbody>
        <tr>
          <td>Final</td><td>Sat Sep 13</td><td>7:15AM PDT</td>
          <td><span>LA Lions 12u AA</span><span>Lions12AA</span></td>
          <td>Las Vegas Storm 12u AA</td>
          <td>City National Arena - Rink 2</td>
        </tr>
        <tr>
          <td>Status</td><td>Date</td><td>Time</td><td>Visitor</td><td>Home</td><td>Venue</td>
        </tr>
        <tr>
          <td></td><td>not a date</td><td>9:00 AM</td>
          <td>San Jose Jr Sharks 12u AA</td><td>Anaheim Lady Ducks 12u AA</td><td>Great Park Ice</td>
        </tr>
        <tr>
          <td></td><td>10/18/2025</td><td>11:00 AM</td>
          <td>Anaheim Lady Ducks 12u AA vs LA Lions 12u AA on 10/18/25 11:00 AMAnaheim Lady Ducks 12u AA</td>
          <td>LA Lions 12u AA</td>
          <td>Toyota Sports Performance Center</td>
        </tr>
        <tr><td></td><td></td><td></td><td></td><td></td><td></td></tr>
      </tbody>
    </table>
  </body>
</html>
"""


def test_clean_cell_strips_short_code_artifact():
    assert schedule_table.clean_cell("LA Lions 12u AALions12AA") == "LA Lions 12u AA"
    assert schedule_table.clean_cell("Las Vegas Storm 14u AAAStorm14AAA") == "Las Vegas Storm 14u AAA"
    assert schedule_table.clean_cell("LA Lions 12u AA") == "LA Lions 12u AA"
    assert schedule_table.clean_cell("  Great   Park Ice ") == "Great Park Ice"


def test_clean_team_name_keeps_first_team_of_game_description():
    text = "LA Lions 12u AA vs Anaheim Lady Ducks 12u AA on 10/18/25 11:00 AMLA Lions 12u AA"
    assert schedule_table.clean_team_name(text) == "LA Lions 12u AA"


def test_extract_schedule_rows_picks_the_schedule_table():
    rows = schedule_table.extract_schedule_rows(HTML)

    assert rows[0] == ["Status", "Date", "Time", "Visitor", "Home", "Venue"]
    assert rows[1][3] == "LA Lions 12u AA"
    assert len(rows) == 6


def test_extract_schedule_rows_without_schedule_table():
    with pytest.raises(TableNotFound):
        schedule_table.extract_schedule_rows("<table><tr><th>Team</th></tr></table>", url="https://x/schedule")


def test_parse_schedule_table_maps_columns_by_header_and_skips_bad_rows():
    rows = schedule_table.extract_schedule_rows(HTML)
    games = schedule_table.parse_schedule_table(rows, division="12u AA", season="2025-26")

    assert games == [
        Game(
            date="2025-09-13",
            time="07:15",
            home="Las Vegas Storm 12u AA",
            away="LA Lions 12u AA",
            venue="City National Arena",
            division="12u AA",
            status="Final",
            rink="Rink 2",
        ),
        Game(
            date="2025-10-18",
            time="11:00",
            home="LA Lions 12u AA",
            away="Anaheim Lady Ducks 12u AA",
            venue="Toyota Sports Performance Center",
            division="12u AA",
        ),
    ]


def test_duplicate_header_row_produces_no_game():
    rows = [
        ["Date", "Time", "Home", "Away"],
        ["Date", "Time", "Home", "Away"],
    ]
    assert schedule_table.parse_schedule_table(rows, division="12u AA", season="2025-26") == []


def test_division_inferred_from_team_names_when_not_given():
    rows = [
        ["Date", "Home", "Away"],
        ["2025-10-04", "Las Vegas Storm 14u AA", "LA Lions 14u AA"],
    ]
    games = schedule_table.parse_schedule_table(rows, division="", season="2025-26")
    assert games[0].division == "14u AA"
    assert games[0].time == ""
    assert games[0].venue == ""


def test_missing_required_column_is_fatal():
    with pytest.raises(TableFormatUnrecognized) as excinfo:
        schedule_table.parse_schedule_table([["Date", "Home", "Venue"], ["x", "y", "z"]], "", "2025-26")
    assert excinfo.value.missing == ["away"]


def test_header_only_table_yields_nothing():
    assert schedule_table.parse_schedule_table([["Date", "Home", "Away"]], "12u AA", "2025-26") == []


def test_extract_games_reads_rendered_page():
    page = FakePage(html=HTML, url="https://example.test/stats")
    games = asyncio.run(schedule_table.extract_games(page, "12u AA", "2025-26"))
    assert [game.date for game in games] == ["2025-09-13", "2025-10-18"]


def test_extract_games_without_any_table():
    page = FakePage(html="<html><body>Loading...</body></html>", url="https://example.test/stats")
    with pytest.raises(TableNotFound) as excinfo:
        asyncio.run(schedule_table.extract_games(page, "12u AA", "2025-26"))
    assert excinfo.value.url == "https://example.test/stats"


def test_extract_games_when_page_closes_before_content_is_read():
    page = FakePage(html=HTML, url="https://example.test/stats")
    page.content_error = PlaywrightError("Target page, context or browser has been closed")

    with pytest.raises(PageUnavailable) as excinfo:
        asyncio.run(schedule_table.extract_games(page, "12u AA", "2025-26"))

    assert excinfo.value.url == "https://example.test/stats"
    assert "has been closed" in excinfo.value.to_payload()["cause"]


def test_missing_season_years_is_reported_once(caplog):
    rows = [
        ["Date", "Home", "Away"],
        ["Sat Sep 13", "Las Vegas Storm 12u AA", "LA Lions 12u AA"],
        ["Sun Sep 14", "LA Lions 12u AA", "Las Vegas Storm 12u AA"],
    ]

    with caplog.at_level(logging.WARNING, logger="pghl_schedule.schedule_table"):
        games = schedule_table.parse_schedule_table(rows, division="12u AA", season="")

    assert games == []
    assert sum("no year range" in record.getMessage() for record in caplog.records) == 1
