import json

from pghl_schedule.cli import main
from pghl_schedule.errors import TeamNotFound
from pghl_schedule.models import Game, ScheduleOptions, SelectOption


GAMES = [
    Game("2025-10-11", "19:15", "LA Lions 12u AA", "Las Vegas Storm 12u AA", "City National Arena", "12u AA",
         rink="Rink 2", game_type="home"),
    Game("2025-10-12", "", "Las Vegas Storm 12u AA", "LA Lions 12u AA", "", "12u AA"),
]


def test_cli_options_prints_json(monkeypatch, capsys):
    calls = []

    def fake_discover_options(season, division, settings=None):
        calls.append((season, division))
        return ScheduleOptions(seasons=[SelectOption("number:9486", "2025-26 12u-19u AA", True)])

    monkeypatch.setattr("pghl_schedule.cli.api.discover_options", fake_discover_options)

    assert main(["options", "--season", "2025-26"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert calls == [("2025-26", None)]
    assert payload["seasons"] == [{"value": "number:9486", "label": "2025-26 12u-19u AA", "selected": True}]
    assert payload["divisions"] == []


def test_cli_games_resolves_labels_and_writes_outputs(monkeypatch, capsys, tmp_path):
    calls = []

    def fake_get_games(season_id, division_id, team_id, strategy, **kwargs):
        calls.append((season_id, division_id, team_id, strategy, kwargs["division"]))
        return list(GAMES)

    monkeypatch.setattr("pghl_schedule.cli.api.get_games", fake_get_games)
    json_out = tmp_path / "games.json"
    csv_out = tmp_path / "games.csv"

    exit_code = main(
        [
            "games",
            "--season", "2025-26 12u-19u AA",
            "--division", "12u aa",
            "--json-out", str(json_out),
            "--csv-out", str(csv_out),
        ]
    )

    assert exit_code == 0
    assert calls == [("9486", "42897", None, "feed", "12u aa")]
    assert json.loads(capsys.readouterr().out)["metadata"] == {"count": 2}
    assert json.loads(json_out.read_text(encoding="utf-8"))[0]["gameType"] == "home"

    lines = csv_out.read_text(encoding="utf-8").strip().splitlines()
    assert lines[0] == "date,time,home,away,venue,rink,division,status,gameType"
    assert lines[1] == "2025-10-11,19:15,LA Lions 12u AA,Las Vegas Storm 12u AA,City National Arena,Rink 2,12u AA,,home"
    assert lines[2] == "2025-10-12,,Las Vegas Storm 12u AA,LA Lions 12u AA,,,12u AA,,"


def test_cli_games_with_ids_skips_lookup(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(
        "pghl_schedule.cli.api.get_games",
        lambda season_id, division_id, team_id, strategy, **kwargs: calls.append(
            (season_id, division_id, team_id, strategy, kwargs["scope"])
        ) or [],
    )

    exit_code = main(
        ["games", "--season-id", "1234", "--division-id", "5678", "--team-id", "9", "--strategy", "table",
         "--scope", "current"]
    )

    assert exit_code == 0
    assert calls == [("1234", "5678", "9", "table", "current")]


def test_cli_games_ambiguous_season_label_fails(capsys):
    # 2025-26 has two season tiers, so the bare year range cannot be resolved
    assert main(["games", "--season", "2025-26"]) == 1

    payload = json.loads(capsys.readouterr().out)
    assert payload["error"] == "ScheduleScrapeError"
    assert "2025-26 14-19u Tier 1" in payload["message"]


def test_cli_games_text_output(monkeypatch, capsys):
    monkeypatch.setattr("pghl_schedule.cli.api.get_games", lambda *args, **kwargs: list(GAMES))

    assert main(["games", "--season-id", "9486", "--format", "text", "--group-by-date"]) == 0

    out = capsys.readouterr().out
    assert "## Saturday, October 11, 2025" in out
    assert "TBD LA Lions 12u AA @ Las Vegas Storm 12u AA" in out


def test_cli_team_error_prints_payload_and_exits_nonzero(monkeypatch, capsys):
    def fake_get_team_schedule(season, division, team, strategy, settings=None):
        raise TeamNotFound(team, ["LA Lions 12u AA"], division, season)

    monkeypatch.setattr("pghl_schedule.cli.api.get_team_schedule", fake_get_team_schedule)

    exit_code = main(["team", "--season", "2025-26", "--division", "12u AA", "--team", "Kings"])

    assert exit_code == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["error"] == "TeamNotFound"
    assert payload["available"] == ["LA Lions 12u AA"]
    assert payload["division"] == "12u AA"


def test_cli_bad_environment_prints_payload(monkeypatch, capsys):
    monkeypatch.setenv("PGHL_TIMEOUT_MS", "soon")

    assert main(["games", "--season-id", "9486"]) == 1

    payload = json.loads(capsys.readouterr().out)
    assert payload["error"] == "InvalidSetting"
    assert payload["value"] == "soon"


def test_cli_feed_returning_html_prints_payload(monkeypatch, capsys):
    class _Response:
        ok = True
        status_code = 200
        reason = "OK"
        url = "https://feed.test/ical"
        text = "<html><body>Maintenance</body></html>"

    class _Session:
        def get(self, url, params=None, timeout=None):
            return _Response()

    monkeypatch.setattr("pghl_schedule.ical_feed._get_session", lambda: _Session())

    assert main(["games", "--season-id", "9486", "--strategy", "feed"]) == 1

    payload = json.loads(capsys.readouterr().out)
    assert payload["error"] == "FeedFormatUnrecognized"
    assert "Maintenance" in payload["snippet"]
