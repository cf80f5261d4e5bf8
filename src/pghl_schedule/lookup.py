"""Label -> id lookup tables for seasons and divisions.

These are configuration data. The built-in tables were copied from the
league website and can be replaced with a JSON file via ``load_lookup``::

    {
      "seasons": {"2025-26 12u-19u AA": "9486"},
      "divisions": {"9486": {"12u AA": "42897"}}
    }

Division tables are keyed by season id because the same division label
(e.g. ``14u``) exists under more than one season tier.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .normalize import normalize_season_label

logger = logging.getLogger(__name__)

DEFAULT_SEASON_IDS: dict[str, str] = {
    "2025-26 12u-19u AA": "9486",
    "2025-26 14-19u Tier 1": "9485",
    "2024-25 Championships": "8540",
    "2024-25 12u-19u AA": "7722",
    "2024-25 14-19u Tier 1": "7721",
    "2023-24 Championships": "6877",
    "2023-24 Season": "5979",
    "2022-23 Championships": "5143",
    "2022-23 Season": "4679",
}

DEFAULT_DIVISION_IDS: dict[str, dict[str, str]] = {
    "9486": {
        "12u AA": "42897",
        "12u AAA": "42898",
        "14u AA": "42899",
        "16/19u AA": "42900",
    },
    "9485": {
        "14u AAA": "42895",
        "16/19u AAA": "42896",
    },
}


@dataclass(frozen=True)
class LabelLookup:
    """Case-insensitive ``label -> id`` mapping."""

    entries: Mapping[str, str] = field(default_factory=dict)

    def lookup(self, label: str) -> str | None:
        wanted = label.strip().lower()
        for key, value in self.entries.items():
            if key.strip().lower() == wanted:
                return value
        return None

    def labels(self) -> list[str]:
        return list(self.entries)


@dataclass(frozen=True)
class ScheduleLookup:
    seasons: LabelLookup
    divisions: Mapping[str, LabelLookup]

    def season_id(self, label: str) -> str | None:
        """Resolve a full season label, or a bare year range if it names exactly one season."""

        exact = self.seasons.lookup(label)
        if exact is not None:
            return exact
        year_range = normalize_season_label(label)
        matches = [
            value for key, value in self.seasons.entries.items() if key.startswith(f"{year_range} ")
        ]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            logger.warning("Season %r is ambiguous across %d season tiers", label, len(matches))
        return None

    def division_id(self, label: str, season_id: str) -> str | None:
        table = self.divisions.get(season_id)
        if table is None:
            logger.warning("No division table configured for season %s", season_id)
            return None
        return table.lookup(label)


def build_lookup(
    seasons: Mapping[str, str],
    divisions: Mapping[str, Mapping[str, str]],
) -> ScheduleLookup:
    return ScheduleLookup(
        seasons=LabelLookup(dict(seasons)),
        divisions={season_id: LabelLookup(dict(table)) for season_id, table in divisions.items()},
    )


def default_lookup() -> ScheduleLookup:
    return build_lookup(DEFAULT_SEASON_IDS, DEFAULT_DIVISION_IDS)


def load_lookup(path: Path) -> ScheduleLookup:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"{path}: expected a JSON object with 'seasons' and 'divisions'")
    return build_lookup(payload.get("seasons") or {}, payload.get("divisions") or {})
