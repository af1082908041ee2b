"""Local-day boundaries; timestamps are stored as naive UTC"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple
from zoneinfo import ZoneInfo

from campus_dining.config import settings


def _local_zone():
    if settings.timezone:
        return ZoneInfo(settings.timezone)
    return datetime.now().astimezone().tzinfo


def local_today() -> date:
    return datetime.now(_local_zone()).date()


def local_midnight_utc(day: date) -> datetime:
    """Start of ``day`` in local time, expressed as naive UTC"""
    local_start = datetime.combine(day, time.min)
    if settings.timezone:
        aware = local_start.replace(tzinfo=ZoneInfo(settings.timezone))
    else:
        aware = local_start.astimezone()
    return aware.astimezone(timezone.utc).replace(tzinfo=None)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Inclusive [00:00:00.000, 23:59:59.999] interval of a local day"""
    start = local_midnight_utc(day)
    end = local_midnight_utc(day + timedelta(days=1)) - timedelta(milliseconds=1)
    return start, end
