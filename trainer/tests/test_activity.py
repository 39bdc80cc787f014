import datetime as dt

import pytz

from trainer.activity import aggregate, daily_rollups, merge_days, weekly_rollups

UTC = dt.timezone.utc
TODAY = dt.date(2024, 6, 10)  # a Monday


def at(day, hour=9, minute=0):
    return dt.datetime(2024, 6, day, hour, minute, tzinfo=UTC)


def sess(start, seconds=600, cards=10, correct=8, wrong=2, last=None, ended=None):
    return {
        "started_at": start,
        "ended_at": ended,
        "duration_seconds": seconds,
        "cards_answered": cards,
        "correct_answers": correct,
        "wrong_answers": wrong,
        "last_activity_at": last,
    }


def sums(rows):
    return [(r.day, r.seconds, r.cards, r.correct, r.wrong) for r in rows]


def test_sessions_are_grouped_per_day_newest_first():
    rows = daily_rollups([
        sess(at(3), seconds=120, cards=4, correct=3, wrong=1),
        sess(at(5), seconds=300),
        sess(at(3, 18), seconds=60, cards=2, correct=2, wrong=0),
    ])
    assert sums(rows) == [
        (dt.date(2024, 6, 5), 300, 10, 8, 2),
        (dt.date(2024, 6, 3), 180, 6, 5, 1),
    ]


def test_missing_counters_count_as_zero():
    rows = daily_rollups([
        {"started_at": at(4)},
        sess(at(4), seconds=None, cards=None, correct=None, wrong="oops"),
        sess(at(4), seconds=90, cards=3, correct=1, wrong=2),
    ])
    assert sums(rows) == [(dt.date(2024, 6, 4), 90, 3, 1, 2)]


def test_falls_back_to_last_activity_and_skips_sessions_without_timestamps():
    rows = daily_rollups([
        sess(None, last=at(6, 20)),
        sess(None),
        sess("garbage"),
    ])
    assert [r.day for r in rows] == [dt.date(2024, 6, 6)]


def test_iso_strings_are_accepted():
    rows = daily_rollups([sess("2024-06-07T10:00:00Z"), sess("2024-06-07T11:30:00+00:00")])
    assert sums(rows) == [(dt.date(2024, 6, 7), 1200, 20, 16, 4)]


def test_calendar_day_follows_configured_timezone():
    late = dt.datetime(2024, 6, 1, 23, 30, tzinfo=UTC)
    assert daily_rollups([sess(late)])[0].day == dt.date(2024, 6, 1)
    assert daily_rollups([sess(late)], pytz.timezone("Asia/Tokyo"))[0].day == dt.date(2024, 6, 2)


def test_last_practice_at_prefers_last_activity_then_end_then_start():
    summary = aggregate([
        sess(at(8), last=at(8, 10)),
        sess(at(9), ended=at(9, 11)),
        sess(at(2)),
    ], TODAY, 7)
    assert summary.last_practice_at == at(9, 11)


def test_last_practice_at_is_none_without_sessions():
    summary = aggregate([], TODAY, 7)
    assert summary.last_practice_at is None
    assert summary.per_day == []
    assert summary.minutes_in_window == 0
    assert summary.days_practiced_in_window == 0


def test_window_covers_trailing_days_ending_today():
    summary = aggregate([
        sess(at(3), seconds=6000),   # outside: window starts 2024-06-04
        sess(at(4), seconds=90),
        sess(at(10), seconds=60),
    ], TODAY, 7)
    assert summary.minutes_in_window == round(150 / 60)
    assert summary.days_practiced_in_window == 2
    # the per-day rollup is not restricted to the window
    assert len(summary.per_day) == 3


def test_thirty_sessions_over_five_days():
    days = [4, 6, 7, 9, 10]
    sessions = [sess(at(days[i % 5], hour=8 + i // 5)) for i in range(30)]
    sessions += [sess(at(1)), sess(at(2))]  # older, outside the 7-day window

    summary = aggregate(sessions, TODAY, 7)
    assert summary.minutes_in_window == 30 * 10
    assert summary.days_practiced_in_window == 5


def test_open_sessions_contribute_no_time():
    summary = aggregate([sess(at(10), seconds=None, cards=3)], TODAY, 7)
    assert summary.minutes_in_window == 0
    assert summary.days_practiced_in_window == 1
    assert summary.per_day[0].cards == 3


def test_splitting_input_and_merging_gives_same_per_day_sums():
    sessions = [sess(at(d, h), seconds=60 * d + h, cards=d) for d in (2, 3, 3, 5, 8) for h in (7, 19)]
    whole = daily_rollups(sessions)
    merged = merge_days(daily_rollups(sessions[:3]), daily_rollups(sessions[3:]))
    assert sums(merged) == sums(whole)


def test_weekly_rollups_start_on_monday():
    per_day = daily_rollups([
        sess(at(3), seconds=600),    # Mon
        sess(at(9), seconds=1200),   # Sun, same week
        sess(at(10), seconds=300),   # Mon, next week
    ])
    weeks = weekly_rollups(per_day)
    assert [(w.week_start, w.seconds, w.days_practiced) for w in weeks] == [
        (dt.date(2024, 6, 10), 300, 1),
        (dt.date(2024, 6, 3), 1800, 2),
    ]
    assert weeks[1].minutes == 30


def test_aggregate_includes_weekly_rollups():
    summary = aggregate([sess(at(3)), sess(at(10))], TODAY, 7)
    assert [w.week_start for w in summary.per_week] == [dt.date(2024, 6, 10), dt.date(2024, 6, 3)]


def test_sessions_without_timestamps_count_under_today():
    summary = aggregate([
        sess(None, seconds=120, cards=4, correct=3, wrong=1),
        sess(at(10), seconds=60, cards=2, correct=2, wrong=0),
    ], TODAY, 7)
    assert sums(summary.per_day) == [(TODAY, 180, 6, 5, 1)]
    # only sessions with a known start day count towards the window
    assert summary.minutes_in_window == 1
    assert summary.days_practiced_in_window == 1
