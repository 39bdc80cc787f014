# trainer/dates.py
from __future__ import annotations

import datetime as dt
from typing import Optional

import pytz
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


def _to_aware_utc(d: dt.datetime) -> dt.datetime:
    """Treat naive datetimes as UTC and normalize everything to UTC."""
    if timezone.is_naive(d):
        d = timezone.make_aware(d, dt.timezone.utc)
    return d.astimezone(dt.timezone.utc)


def parse_instant(value) -> Optional[dt.datetime]:
    """
    Coerce a stored timestamp into a tz-aware UTC datetime.
    Accepts datetimes and ISO strings; anything unparseable is treated as absent (None).
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return _to_aware_utc(value)
    if isinstance(value, str):
        try:
            d = parse_datetime(value.strip())
        except ValueError:
            return None
        return _to_aware_utc(d) if d is not None else None
    return None


def local_day(instant: dt.datetime, tz: dt.tzinfo) -> dt.date:
    """Calendar day of an instant as seen in the given timezone."""
    return _to_aware_utc(instant).astimezone(tz).date()


def parse_day(value, tz: dt.tzinfo = pytz.utc) -> Optional[dt.date]:
    """
    Coerce a stored calendar-day value into a date.
      - date -> itself
      - datetime / ISO timestamp -> its calendar day in `tz`
      - 'YYYY-MM-DD' -> that day
      - anything else (including impossible dates like 2024-02-30) -> None
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return local_day(value, tz)
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        try:
            d = parse_date(raw)
        except ValueError:
            return None
        if d is not None:
            return d
        instant = parse_instant(raw)
        return local_day(instant, tz) if instant is not None else None
    return None


def today_in(tz: dt.tzinfo) -> dt.date:
    return timezone.now().astimezone(tz).date()
