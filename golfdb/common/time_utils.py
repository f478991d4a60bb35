"""Run-date and log timestamp helpers (always UTC)."""

from __future__ import annotations

from datetime import date, datetime, timezone

from golfdb.common.errors import ConfigError


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def parse_run_date(value: str | None) -> str:
    """ISO date stamped into published files; today (UTC) when not given."""
    if not value:
        return _utc_now().date().isoformat()
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError as exc:
        raise ConfigError(f"Run date must be YYYY-MM-DD, got {value!r}") from exc


def utc_timestamp_iso() -> str:
    return _utc_now().isoformat(timespec="milliseconds")
