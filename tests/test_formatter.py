from pghl_schedule.formatter import format_game, format_games_list
from pghl_schedule.models import Game


GAME = Game(
    "2025-10-11",
    "19:15",
    "Las Vegas Storm 12u AA",
    "LA Lions 12u AA",
    "City National Arena",
    "12u AA",
    status="Final",
    rink="Rink 2",
)


def test_format_game():
    assert format_game(GAME) == (
        "Sat Oct 11 at 19:15 LA Lions 12u AA @ Las Vegas Storm 12u AA - City National Arena / Rink 2 [Final]"
    )
    assert format_game(GAME, include_date=False, include_opponent=False) == (
        "19:15 - City National Arena / Rink 2 [Final]"
    )


def test_format_game_without_time_or_venue():
    game = Game("2025-10-12", "", "Home 12u AA", "Away 12u AA", "", "12u AA")
    assert format_game(game) == "Sun Oct 12 at TBD Away 12u AA @ Home 12u AA"


def test_format_games_list_grouped_by_date():
    later = Game("2025-10-12", "09:00", "A 12u AA", "B 12u AA", "Great Park Ice", "12u AA")
    text = format_games_list([GAME, later], title="Storm", group_by_date=True)

    lines = text.splitlines()
    assert lines[:3] == ["Storm", "=====", ""]
    assert "## Saturday, October 11, 2025" in lines
    assert "## Sunday, October 12, 2025" in lines
    assert "09:00 B 12u AA @ A 12u AA - Great Park Ice" in lines


def test_format_games_list_flat():
    assert format_games_list([]) == ""
    assert format_games_list([GAME]).startswith("Sat Oct 11 at 19:15")
