"""Plain-text rendering of game lists."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from .models import Game


def _short_date(value: str) -> str:
    day = date.fromisoformat(value)
    return f"{day:%a} {day:%b} {day.day}"


def _long_date(value: str) -> str:
    day = date.fromisoformat(value)
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def format_game(game: Game, include_date: bool = True, include_opponent: bool = True) -> str:
    parts: list[str] = []
    when = game.time or "TBD"
    parts.append(f"{_short_date(game.date)} at {when}" if include_date else when)

    if include_opponent:
        parts.append(f"{game.away} @ {game.home}")

    if game.venue:
        venue = " / ".join(part for part in (game.venue, game.rink) if part)
        parts.append(f"- {venue}")

    if game.status:
        parts.append(f"[{game.status}]")

    return " ".join(parts)


def format_games_list(
    games: Iterable[Game],
    title: str | None = None,
    group_by_date: bool = False,
    include_opponent: bool = True,
) -> str:
    lines: list[str] = []
    if title:
        lines.extend([title, "=" * len(title), ""])

    if not group_by_date:
        lines.extend(format_game(game, include_opponent=include_opponent) for game in games)
        return "\n".join(lines)

    by_date: dict[str, list[Game]] = {}
    for game in games:
        by_date.setdefault(game.date, []).append(game)

    for day, day_games in by_date.items():
        lines.extend([f"## {_long_date(day)}", ""])
        lines.extend(
            format_game(game, include_date=False, include_opponent=include_opponent) for game in day_games
        )
        lines.append("")

    return "\n".join(lines)
