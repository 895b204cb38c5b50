"""Clock and calendar-day helpers.

All scheduling code takes ``now`` as an argument. Routes obtain it from
:func:`get_now`, which honours ``app.config['CLOCK']`` so tests can pin time.
Timestamps are stored as naive UTC datetimes.
"""

from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from flask import current_app


def get_now() -> datetime:
    """Current time as an aware UTC datetime, from the configured clock if any"""
    clock = current_app.config.get('CLOCK')
    now = clock() if clock else datetime.now(timezone.utc)
    return as_utc(now)


def get_timezone() -> tzinfo:
    """Timezone that defines the calendar day for the running app"""
    return ZoneInfo(current_app.config.get('SCHEDULER_TIMEZONE') or 'UTC')


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def to_storage(moment: datetime) -> datetime:
    """Naive UTC datetime suitable for a DateTime column"""
    return as_utc(moment).replace(tzinfo=None)


def calendar_day(moment: datetime, tz: tzinfo = timezone.utc) -> date:
    """Calendar date of ``moment`` as seen in ``tz``"""
    return as_utc(moment).astimezone(tz).date()


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5
