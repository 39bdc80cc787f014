# trainer/activity.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import pytz

from .dates import local_day, parse_instant
from .records import as_count, field_value


@dataclass
class DailyActivity:
    day: dt.date
    seconds: int = 0
    cards: int = 0
    correct: int = 0
    wrong: int = 0

    @property
    def minutes(self) -> int:
        return round(self.seconds / 60)

    def absorb(self, other: "DailyActivity") -> None:
        self.seconds += other.seconds
        self.cards += other.cards
        self.correct += other.correct
        self.wrong += other.wrong


@dataclass
class WeeklyActivity:
    week_start: dt.date  # Monday
    seconds: int = 0
    cards: int = 0
    correct: int = 0
    wrong: int = 0
    days_practiced: int = 0

    @property
    def minutes(self) -> int:
        return round(self.seconds / 60)


@dataclass
class ActivitySummary:
    per_day: List[DailyActivity] = field(default_factory=list)
    per_week: List[WeeklyActivity] = field(default_factory=list)
    minutes_in_window: int = 0
    days_practiced_in_window: int = 0
    last_practice_at: Optional[dt.datetime] = None


def _session_start(session) -> Optional[dt.datetime]:
    """Bucket instant of a session: started_at, else last_activity_at."""
    return (
        parse_instant(field_value(session, "started_at"))
        or parse_instant(field_value(session, "last_activity_at"))
    )


def _session_last_seen(session) -> Optional[dt.datetime]:
    for name in ("last_activity_at", "ended_at", "started_at"):
        instant = parse_instant(field_value(session, name))
        if instant is not None:
            return instant
    return None


def _week_start(day: dt.date) -> dt.date:
    return day - dt.timedelta(days=day.weekday())


def _sorted_days(by_day: Dict[dt.date, DailyActivity]) -> List[DailyActivity]:
    return [by_day[d] for d in sorted(by_day, reverse=True)]


def daily_rollups(
    sessions: Iterable,
    tz: dt.tzinfo = pytz.utc,
    today: Optional[dt.date] = None,
) -> List[DailyActivity]:
    """
    One row per calendar day present in the input, newest first.
    Sessions without any usable timestamp are counted under `today`; without `today` they are skipped.
    """
    by_day: Dict[dt.date, DailyActivity] = {}
    for s in sessions:
        start = _session_start(s)
        if start is not None:
            day = local_day(start, tz)
        elif today is not None:
            day = today
        else:
            continue
        row = by_day.setdefault(day, DailyActivity(day=day))
        # Open sessions have no duration yet and count as 0 seconds.
        row.seconds += as_count(field_value(s, "duration_seconds"))
        row.cards += as_count(field_value(s, "cards_answered"))
        row.correct += as_count(field_value(s, "correct_answers"))
        row.wrong += as_count(field_value(s, "wrong_answers"))
    return _sorted_days(by_day)


def merge_days(*rollups: Iterable[DailyActivity]) -> List[DailyActivity]:
    """Merge several per-day lists (e.g. from partial reads) into one, newest first."""
    by_day: Dict[dt.date, DailyActivity] = {}
    for rows in rollups:
        for row in rows:
            acc = by_day.setdefault(row.day, DailyActivity(day=row.day))
            acc.absorb(row)
    return _sorted_days(by_day)


def weekly_rollups(per_day: Iterable[DailyActivity]) -> List[WeeklyActivity]:
    """Roll per-day rows up to ISO weeks (Monday start), newest first."""
    by_week: Dict[dt.date, WeeklyActivity] = {}
    for row in per_day:
        ws = _week_start(row.day)
        acc = by_week.setdefault(ws, WeeklyActivity(week_start=ws))
        acc.seconds += row.seconds
        acc.cards += row.cards
        acc.correct += row.correct
        acc.wrong += row.wrong
        acc.days_practiced += 1
    return [by_week[w] for w in sorted(by_week, reverse=True)]


def aggregate(
    sessions: Iterable,
    today: dt.date,
    window_days: int,
    *,
    tz: dt.tzinfo = pytz.utc,
) -> ActivitySummary:
    """
    Turn raw practice-session rows into dashboard metrics.

    Rules:
      1) Sessions are bucketed by the calendar day (in `tz`) of started_at,
         falling back to last_activity_at.
      2) last_practice_at is the latest of each session's
         last_activity_at / ended_at / started_at (first non-null of the three).
      3) The window covers the `window_days` calendar days ending on `today`;
         minutes are rounded once over the summed seconds.
      4) Missing counters count as zero, unparseable timestamps as absent.
         A session with no timestamp at all lands in today's row but not in the window.
    """
    rows = list(sessions)
    per_day = daily_rollups(rows, tz, today)

    last_practice_at = None
    for s in rows:
        seen = _session_last_seen(s)
        if seen is not None and (last_practice_at is None or seen > last_practice_at):
            last_practice_at = seen

    window_start = today - dt.timedelta(days=window_days - 1)
    seconds_in_window = 0
    practiced: set = set()
    for s in rows:
        start = _session_start(s)
        if start is None:
            continue
        day = local_day(start, tz)
        if window_start <= day <= today:
            seconds_in_window += as_count(field_value(s, "duration_seconds"))
            practiced.add(day)

    return ActivitySummary(
        per_day=per_day,
        per_week=weekly_rollups(per_day),
        minutes_in_window=round(seconds_in_window / 60),
        days_practiced_in_window=len(practiced),
        last_practice_at=last_practice_at,
    )
