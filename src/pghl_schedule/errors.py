"""Conditions raised by the discovery and extraction engine."""

from __future__ import annotations

from typing import Any, Sequence


class ScheduleScrapeError(RuntimeError):
    """Base class for every condition raised by this package."""

    def context(self) -> dict[str, Any]:
        return {}

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": type(self).__name__, "message": str(self)}
        payload.update(self.context())
        return payload


class SessionUnavailable(ScheduleScrapeError):
    """The headless browser could not be started."""

    def __init__(self, hint: str, cause: BaseException | None = None) -> None:
        self.hint = hint
        self.cause = cause
        detail = f"\n\nOriginal error: {cause}" if cause is not None else ""
        super().__init__(f"Failed to launch browser. {hint}{detail}")

    def context(self) -> dict[str, Any]:
        return {"hint": self.hint, "cause": str(self.cause) if self.cause else None}


class PageStructureError(ScheduleScrapeError):
    """The source page did not look the way the scraper expects."""


class RenderTimeout(PageStructureError):
    def __init__(self, url: str, waited_for: str, snippet: str = "") -> None:
        self.url = url
        self.waited_for = waited_for
        self.snippet = snippet
        super().__init__(
            f"Page {url} did not render {waited_for} in time; the site may have changed. "
            f"Content sample: {snippet[:200]!r}"
        )

    def context(self) -> dict[str, Any]:
        return {"url": self.url, "waited_for": self.waited_for, "snippet": self.snippet}


class ControlNotFound(PageStructureError):
    def __init__(self, role: str, selectors: Sequence[str], url: str = "") -> None:
        self.role = role
        self.selectors = list(selectors)
        self.url = url
        super().__init__(
            f"No {role} dropdown found (tried {', '.join(self.selectors)}). "
            "The website structure may have changed."
        )

    def context(self) -> dict[str, Any]:
        return {"role": self.role, "selectors": self.selectors, "url": self.url}


class TableNotFound(PageStructureError):
    def __init__(self, url: str = "") -> None:
        self.url = url
        super().__init__(f"Could not find a schedule table on {url or 'the page'}.")

    def context(self) -> dict[str, Any]:
        return {"url": self.url}


class TableFormatUnrecognized(PageStructureError):
    def __init__(self, headers: Sequence[str], missing: Sequence[str]) -> None:
        self.headers = list(headers)
        self.missing = list(missing)
        super().__init__(
            f"Schedule table format not recognized: missing {', '.join(self.missing)} column(s) "
            f"in headers {self.headers}."
        )

    def context(self) -> dict[str, Any]:
        return {"headers": self.headers, "missing": self.missing}


class NavigationStateError(ScheduleScrapeError):
    """A navigation step was requested out of order."""

    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot {requested} while navigator is in state {current}.")

    def context(self) -> dict[str, Any]:
        return {"state": self.current, "requested": self.requested}


class FeedUnavailable(ScheduleScrapeError):
    def __init__(self, url: str, status: int | None = None, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.reason = reason
        status_text = f"HTTP {status}" if status is not None else "request failed"
        super().__init__(f"Calendar feed unavailable ({status_text}: {reason}) at {url}")

    def context(self) -> dict[str, Any]:
        return {"url": self.url, "status": self.status, "reason": self.reason}


class FieldUnparseable(ScheduleScrapeError, ValueError):
    field = "value"

    def __init__(self, value: str, expected: Sequence[str]) -> None:
        self.value = value
        self.expected = list(expected)
        super().__init__(
            f"Unable to parse {self.field}: {value!r}. Expected formats: {', '.join(self.expected)}"
        )

    def context(self) -> dict[str, Any]:
        return {"field": self.field, "value": self.value, "expected": self.expected}


class DateUnparseable(FieldUnparseable):
    field = "date"


class TimeUnparseable(FieldUnparseable):
    field = "time"


class FeedEventUnparseable(ScheduleScrapeError, ValueError):
    def __init__(self, uid: str, reason: str) -> None:
        self.uid = uid
        self.reason = reason
        super().__init__(f"Calendar event {uid}: {reason}")

    def context(self) -> dict[str, Any]:
        return {"uid": self.uid, "reason": self.reason}


class OptionNotFound(ScheduleScrapeError):
    """A requested season/division/team is not offered by the page."""

    def __init__(
        self, role: str, requested: str, available: Sequence[str], scope: str = ""
    ) -> None:
        self.role = role
        self.requested = requested
        self.available = list(available)
        suggestion = ""
        if self.available:
            suggestion = "\n\nAvailable {}s:\n{}".format(
                role, "\n".join(f"- {label}" for label in self.available)
            )
        super().__init__(f"{role.title()} {requested!r} not found{scope}.{suggestion}")

    def context(self) -> dict[str, Any]:
        return {"role": self.role, "requested": self.requested, "available": self.available}


class TeamNotFound(OptionNotFound):
    def __init__(
        self,
        team: str,
        available: Sequence[str],
        division: str = "",
        season: str = "",
    ) -> None:
        self.division = division
        self.season = season
        scope = f" in division {division!r} for season {season!r}" if division or season else ""
        super().__init__("team", team, available, scope)

    def context(self) -> dict[str, Any]:
        payload = super().context()
        payload.update({"division": self.division, "season": self.season})
        return payload


class NoScheduleData(ScheduleScrapeError):
    def __init__(self, subject: str, season: str = "") -> None:
        self.subject = subject
        self.season = season
        where = f" in season {season}" if season else ""
        super().__init__(
            f"No schedule data available for {subject}{where}. The schedule may not be published yet."
        )

    def context(self) -> dict[str, Any]:
        return {"subject": self.subject, "season": self.season}


class FeedFormatUnrecognized(ScheduleScrapeError):
    """The feed answered successfully but the body is not a calendar."""

    def __init__(self, url: str, snippet: str, reason: str = "") -> None:
        self.url = url
        self.snippet = snippet
        self.reason = reason
        super().__init__(
            f"Calendar feed at {url or 'the feed endpoint'} did not return an iCalendar payload "
            f"({reason}). Content sample: {snippet[:200]!r}"
        )

    def context(self) -> dict[str, Any]:
        return {"url": self.url, "snippet": self.snippet, "reason": self.reason}


class PageUnavailable(ScheduleScrapeError):
    """The browser page failed mid-operation, e.g. it was closed or crashed."""

    def __init__(self, url: str, action: str, cause: BaseException | None = None) -> None:
        self.url = url
        self.action = action
        self.cause = cause
        super().__init__(f"Browser page {url or '(no url)'} failed while trying to {action}: {cause}")

    def context(self) -> dict[str, Any]:
        return {"url": self.url, "action": self.action, "cause": str(self.cause) if self.cause else None}


class InvalidSetting(ScheduleScrapeError, ValueError):
    def __init__(self, name: str, value: str, expected: str) -> None:
        self.name = name
        self.value = value
        self.expected = expected
        super().__init__(f"Invalid value for {name}: {value!r} (expected {expected}).")

    def context(self) -> dict[str, Any]:
        return {"setting": self.name, "value": self.value, "expected": self.expected}
