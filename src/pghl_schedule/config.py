"""Runtime settings for the PGHL schedule scraper."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .errors import InvalidSetting

DEFAULT_WEBSITE_URL = "https://www.pacificgirlshockey.com"
DEFAULT_LEAGUE_ID = "1447"
# Taken from the "Subscribe to Schedule" button on the league website.
DEFAULT_CLIENT_SERVICE_ID = "05e3fa78-061c-4607-a558-a54649c5044f"
DEFAULT_ICAL_URL = "https://web.api.digitalshift.ca/partials/stats/schedule/ical"
DEFAULT_TIMEZONE = "America/Los_Angeles"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "text/calendar,text/html,application/xhtml+xml,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}
DEFAULT_VIEWPORT = {"width": 1280, "height": 720}

SERVERLESS_MARKERS = ("VERCEL", "AWS_LAMBDA_FUNCTION_NAME")


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def _positive_int(name: str, value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        parsed = 0
    if parsed <= 0:
        raise InvalidSetting(name, value, "a positive number of milliseconds")
    return parsed


@dataclass(frozen=True)
class Settings:
    """Endpoint, environment and timeout configuration.

    Timeouts are in milliseconds (the browser driver's unit) except for the
    HTTP feed timeout, which is handed to ``requests`` in seconds.
    """

    website_url: str = DEFAULT_WEBSITE_URL
    league_id: str = DEFAULT_LEAGUE_ID
    client_service_id: str = DEFAULT_CLIENT_SERVICE_ID
    ical_url: str = DEFAULT_ICAL_URL
    timezone: str = DEFAULT_TIMEZONE
    chrome_executable_path: str | None = None
    serverless: bool = False

    page_timeout_ms: int = 30_000
    bootstrap_timeout_ms: int = 15_000
    control_timeout_ms: int = 10_000
    network_idle_timeout_ms: int = 10_000
    table_timeout_ms: int = 10_000
    bootstrap_settle_ms: int = 1_000
    selection_settle_ms: int = 500
    close_grace_seconds: float = 5.0
    feed_timeout_seconds: int = 30

    @property
    def schedule_url(self) -> str:
        return f"{self.website_url.rstrip('/')}/stats#/{self.league_id}/schedule"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        serverless_override = env.get("PGHL_SERVERLESS")
        if serverless_override is not None:
            serverless = _truthy(serverless_override)
        else:
            serverless = any(env.get(marker) for marker in SERVERLESS_MARKERS)

        page_timeout = env.get("PGHL_TIMEOUT_MS")
        return cls(
            website_url=env.get("PGHL_WEBSITE_URL", DEFAULT_WEBSITE_URL),
            league_id=env.get("PGHL_LEAGUE_ID", DEFAULT_LEAGUE_ID),
            client_service_id=env.get("PGHL_CLIENT_SERVICE_ID", DEFAULT_CLIENT_SERVICE_ID),
            ical_url=env.get("PGHL_ICAL_URL", DEFAULT_ICAL_URL),
            timezone=env.get("PGHL_TIMEZONE", DEFAULT_TIMEZONE),
            chrome_executable_path=env.get("CHROME_EXECUTABLE_PATH") or None,
            serverless=serverless,
            page_timeout_ms=_positive_int("PGHL_TIMEOUT_MS", page_timeout) if page_timeout else 30_000,
        )
