from __future__ import annotations

import os
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def configured_timezone_name() -> str:
    return (os.getenv("GATHERER_TIMEZONE") or "UTC").strip()


def configured_timezone() -> tzinfo:
    try:
        return ZoneInfo(configured_timezone_name())
    except ZoneInfoNotFoundError:
        return timezone.utc


def now_local() -> datetime:
    return datetime.now(configured_timezone())


def export_timestamp(moment: datetime | None = None) -> str:
    """Date and time for default export file names, e.g. 2026-10-19_14-05-33."""
    moment = moment or now_local()
    return moment.strftime("%Y-%m-%d_%H-%M-%S")
