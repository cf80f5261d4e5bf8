"""Command-line entry point for the PGHL schedule scraper."""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path
from typing import Any

from . import api
from .config import Settings
from .errors import ScheduleScrapeError
from .formatter import format_games_list
from .lookup import ScheduleLookup, default_lookup, load_lookup
from .models import Game
from .sources import SCOPES

logger = logging.getLogger("pghl_schedule")

CSV_FIELDS = ["date", "time", "home", "away", "venue", "rink", "division", "status", "gameType"]


def write_outputs(games: list[Game], json_path: Path | None, csv_path: Path | None) -> None:
    rows = [game.to_dict() for game in games]
    if json_path is not None:
        json_path.write_text(json.dumps(rows, indent=2), encoding="utf-8")

    if csv_path is not None:
        with csv_path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=CSV_FIELDS, restval="")
            writer.writeheader()
            writer.writerows(rows)


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


def _resolve_ids(args: argparse.Namespace, lookup: ScheduleLookup) -> tuple[str, str | None]:
    season_id = args.season_id
    if season_id is None:
        season_id = lookup.season_id(args.season)
        if season_id is None:
            raise ScheduleScrapeError(
                f"Season {args.season!r} is not in the lookup table. Known seasons: "
                + ", ".join(lookup.seasons.labels())
            )

    division_id = args.division_id
    if division_id is None and args.division:
        division_id = lookup.division_id(args.division, season_id)
        if division_id is None:
            raise ScheduleScrapeError(
                f"Division {args.division!r} is not in the lookup table for season {season_id}."
            )
    return season_id, division_id


def _output_games(games: list[Game], args: argparse.Namespace, title: str) -> None:
    write_outputs(games, args.json_out, args.csv_out)
    if args.format == "text":
        print(format_games_list(games, title=title, group_by_date=args.group_by_date))
    else:
        _emit({"games": [game.to_dict() for game in games], "metadata": {"count": len(games)}})


def cmd_options(args: argparse.Namespace, settings: Settings) -> int:
    options = api.discover_options(args.season, args.division, settings=settings)
    _emit(options.to_dict())
    return 0


def cmd_games(args: argparse.Namespace, settings: Settings) -> int:
    lookup = load_lookup(args.lookup) if args.lookup else default_lookup()
    season_id, division_id = _resolve_ids(args, lookup)
    games = api.get_games(
        season_id,
        division_id,
        args.team_id,
        args.strategy,
        season=args.season or "",
        division=args.division or "",
        scope=args.scope,
        settings=settings,
    )
    _output_games(games, args, title=f"Season {season_id} schedule")
    return 0


def cmd_team(args: argparse.Namespace, settings: Settings) -> int:
    schedule = api.get_team_schedule(args.season, args.division, args.team, args.strategy, settings=settings)
    write_outputs(schedule.games, args.json_out, args.csv_out)
    if args.format == "text":
        print(format_games_list(schedule.games, title=schedule.team.name, group_by_date=args.group_by_date))
    else:
        _emit(schedule.to_dict())
    return 0


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--format", choices=["json", "text"], default="json", help="stdout format")
    parser.add_argument("--group-by-date", action="store_true", help="Group text output by date")
    parser.add_argument("--json-out", type=Path, default=None, help="Also write games to this JSON file")
    parser.add_argument("--csv-out", type=Path, default=None, help="Also write games to this CSV file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pghl-schedule", description="PGHL schedule discovery and extraction.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    options_parser = subparsers.add_parser("options", help="List seasons, divisions and teams")
    options_parser.add_argument("--season", help="Season label, e.g. 2025-26")
    options_parser.add_argument("--division", help="Division label, e.g. '12u AA' (requires --season)")

    games_parser = subparsers.add_parser("games", help="Fetch games by id")
    season_group = games_parser.add_mutually_exclusive_group(required=True)
    season_group.add_argument("--season-id", help="Season id, e.g. 9486")
    season_group.add_argument("--season", help="Season label resolved through the lookup table")
    games_parser.add_argument("--division-id", default=None)
    games_parser.add_argument("--division", default=None, help="Division label resolved through the lookup table")
    games_parser.add_argument("--team-id", default=None)
    games_parser.add_argument("--strategy", choices=["table", "feed"], default="feed")
    games_parser.add_argument("--scope", choices=list(SCOPES), default="full")
    games_parser.add_argument("--lookup", type=Path, default=None, help="JSON label -> id lookup file")
    _add_output_args(games_parser)

    team_parser = subparsers.add_parser("team", help="Fetch one team's games by season/division/team labels")
    team_parser.add_argument("--season", required=True)
    team_parser.add_argument("--division", required=True)
    team_parser.add_argument("--team", required=True, help="Team name; partial matches are accepted")
    team_parser.add_argument("--strategy", choices=["table", "feed"], default="feed")
    _add_output_args(team_parser)

    return parser


COMMANDS = {"options": cmd_options, "games": cmd_games, "team": cmd_team}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    # stdout carries JSON, so logs go to stderr.
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = Settings.from_env()
        return COMMANDS[args.command](args, settings)
    except ScheduleScrapeError as exc:
        logger.error("%s failed: %s", args.command, exc)
        _emit(exc.to_payload())
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
