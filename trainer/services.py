# trainer/services.py
from __future__ import annotations

import datetime as dt
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import pytz
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import NotFound

from .activity import aggregate
from .conf import TrainerSettings, trainer_settings
from .exceptions import SessionClosed, StoreUnavailable
from .grading import GradeResult, grade
from .models import Learner, PracticeSession, ProgressRecord, VocabularyItem
from .selection import SessionPlan, count_new_today, plan_initial_progress, select_session
from .srs import MAX_STAGE, StageResult, advance, clamp_stage

logger = logging.getLogger(__name__)

INIT_BATCH_SIZE = 200


@contextmanager
def _store(action: str):
    """Surface ORM failures as a distinguishable 'cannot load/save' condition."""
    try:
        yield
    except DatabaseError as e:
        logger.exception("store failure while trying to %s", action)
        raise StoreUnavailable(f"cannot {action}.") from e


@dataclass
class AnswerOutcome:
    grade: GradeResult
    schedule: StageResult
    progress: ProgressRecord
    session: Optional[PracticeSession] = None


def _window_start_utc(today: dt.date, days: int, tz: pytz.BaseTzInfo) -> dt.datetime:
    """UTC instant of local midnight starting a `days`-long window that ends on `today`."""
    first_day = today - dt.timedelta(days=max(days, 1) - 1)
    local_midnight = dt.datetime.combine(first_day, dt.time.min)
    return tz.localize(local_midnight).astimezone(dt.timezone.utc)


def ensure_progress_initialized(user_id: str, today: dt.date, conf: Optional[TrainerSettings] = None) -> int:
    """
    Materialize one stage-0 ProgressRecord per vocabulary item for a learner who has none.
    Items unlock `daily_new_quota` per day in lesson order. Returns the number of rows created.
    """
    conf = conf or trainer_settings()
    with _store("load progress"):
        if ProgressRecord.objects.filter(user_id=user_id).exists():
            return 0
        vocab_ids = list(VocabularyItem.objects.order_by(F("day").asc(nulls_last=True), "id").values_list("id", flat=True))

    if not vocab_ids:
        return 0

    rows = [
        ProgressRecord(user_id=user_id, vocab_id=vid, stage=0, due_date=due, first_seen_date=None)
        for vid, due in plan_initial_progress(vocab_ids, today, conf.daily_new_quota)
    ]
    with _store("save progress"):
        ProgressRecord.objects.bulk_create(rows, batch_size=INIT_BATCH_SIZE, ignore_conflicts=True)
    logger.info("initialized %d progress rows for user %s", len(rows), user_id)
    return len(rows)


def start_session(
    user_id: str,
    today: dt.date,
    *,
    now: Optional[dt.datetime] = None,
    conf: Optional[TrainerSettings] = None,
) -> PracticeSession:
    ensure_progress_initialized(user_id, today, conf)
    with _store("save session"):
        session = PracticeSession.objects.create(user_id=user_id, started_at=now or timezone.now())
    logger.info("opened practice session %s for user %s", session.id, user_id)
    return session


def _load_progress(user_id: str) -> List[ProgressRecord]:
    with _store("load progress"):
        return list(ProgressRecord.objects.filter(user_id=user_id).select_related("vocab"))


def progress_counters(records: Iterable, today: dt.date, daily_new_quota: int) -> Dict:
    """Stage histogram and derived counters shown above the trainer and on the dashboard."""
    rows = list(records)
    stage_counts = [0] * (MAX_STAGE + 1)
    due_now = 0
    for p in rows:
        stage_counts[clamp_stage(p.stage)] += 1
        if p.due_date is not None and p.due_date <= today:
            due_now += 1

    total = len(rows)
    mastered = stage_counts[MAX_STAGE]
    learned = total - stage_counts[0]
    new_today = count_new_today(rows, today)
    return {
        "total_cards": total,
        "stage_counts": stage_counts,
        "due_now": due_now,
        "mastered": mastered,
        "mastered_pct": round(mastered / total * 100) if total else 0,
        "learned_pct": round(learned / total * 100) if total else 0,
        "new_today": new_today,
        "new_remaining_today": max(0, daily_new_quota - new_today),
    }


def load_work_queue(user_id: str, today: dt.date, conf: Optional[TrainerSettings] = None):
    """Single batched read of a learner's progress, then the pure selection policy. Returns (plan, counters)."""
    conf = conf or trainer_settings()
    records = _load_progress(user_id)
    plan: SessionPlan = select_session(records, today, conf.session_limit, conf.daily_new_quota)
    counters = progress_counters(records, today, conf.daily_new_quota)
    if plan.is_empty:
        logger.info("nothing due for user %s on %s", user_id, today)
    return plan, counters


def _get_session(user_id: str, session_id) -> PracticeSession:
    with _store("load session"):
        session = PracticeSession.objects.filter(id=session_id, user_id=user_id).first()
    if session is None:
        raise NotFound("Practice session not found.")
    return session


def record_answer(
    user_id: str,
    progress_id,
    answer: str,
    today: dt.date,
    *,
    session_id=None,
    now: Optional[dt.datetime] = None,
) -> AnswerOutcome:
    """
    Grade one answer and persist its consequences:
      - progress: new stage and due date, counters, last_seen, first_seen_date on first showing;
      - session (if given): answer counters and last_activity_at.
    A closed session is refused before anything is written.
    Counter updates are plain read-modify-write; concurrent answers for the same learner may lose an update.
    """
    now = now or timezone.now()

    with _store("load progress"):
        progress = ProgressRecord.objects.select_related("vocab").filter(id=progress_id, user_id=user_id).first()
    if progress is None:
        raise NotFound("Progress record not found.")
    session = _get_session(user_id, session_id) if session_id is not None else None
    if session is not None and not session.is_open:
        raise SessionClosed()

    result = grade(answer, progress.vocab.accepted_answers)
    schedule = advance(progress.stage, result.correct, today)

    progress.stage = schedule.stage
    progress.due_date = schedule.due_date
    progress.last_seen = today
    if result.correct:
        progress.correct_count += 1
    else:
        progress.wrong_count += 1
    update_fields = ["stage", "due_date", "last_seen", "correct_count", "wrong_count"]
    if progress.first_seen_date is None:
        progress.first_seen_date = today
        update_fields.append("first_seen_date")

    with _store("save answer"), transaction.atomic():
        progress.save(update_fields=update_fields)
        if session is not None:
            session.cards_answered += 1
            if result.correct:
                session.correct_answers += 1
            else:
                session.wrong_answers += 1
            session.last_activity_at = now
            session.save(update_fields=["cards_answered", "correct_answers", "wrong_answers", "last_activity_at"])

    logger.debug(
        "user %s progress %s graded %s (fuzzy=%s) -> stage %d due %s",
        user_id, progress.id, result.correct, result.fuzzy, schedule.stage, schedule.due_date,
    )
    return AnswerOutcome(grade=result, schedule=schedule, progress=progress, session=session)


def close_session(user_id: str, session_id, *, now: Optional[dt.datetime] = None) -> PracticeSession:
    """Set ended_at and duration_seconds once; closing an already closed session is a no-op."""
    session = _get_session(user_id, session_id)
    if not session.is_open:
        return session

    ended = now or timezone.now()
    seconds = max(0, round((ended - session.started_at).total_seconds())) if session.started_at else 0
    session.ended_at = ended
    session.duration_seconds = seconds
    session.last_activity_at = ended
    with _store("save session"):
        session.save(update_fields=["ended_at", "duration_seconds", "last_activity_at"])
    logger.info("closed practice session %s for user %s after %ss", session.id, user_id, seconds)
    return session


def _activity_payload(sessions: Iterable, today: dt.date, conf: TrainerSettings) -> Dict:
    summary = aggregate(sessions, today, conf.activity_window_days, tz=conf.tzinfo)
    return {
        "days": [
            {
                "date": d.day.isoformat(),
                "seconds": d.seconds,
                "minutes": d.minutes,
                "cards": d.cards,
                "correct": d.correct,
                "wrong": d.wrong,
            }
            for d in summary.per_day[: conf.rollup_days_shown]
        ],
        "weeks": [
            {
                "week_start": w.week_start.isoformat(),
                "minutes": w.minutes,
                "cards": w.cards,
                "correct": w.correct,
                "wrong": w.wrong,
                "days_practiced": w.days_practiced,
            }
            for w in summary.per_week
        ],
        "last_practice_at": summary.last_practice_at.isoformat() if summary.last_practice_at else None,
        "minutes_in_window": summary.minutes_in_window,
        "days_practiced_in_window": summary.days_practiced_in_window,
    }


def _recent_sessions(user_ids: List[str], today: dt.date, conf: TrainerSettings) -> Dict[str, List[PracticeSession]]:
    since = _window_start_utc(today, conf.rollup_window_days, conf.tzinfo)
    grouped: Dict[str, List[PracticeSession]] = {uid: [] for uid in user_ids}
    with _store("load sessions"):
        qs = PracticeSession.objects.filter(user_id__in=user_ids, started_at__gte=since).order_by("-started_at")
        for s in qs:
            grouped[s.user_id].append(s)
    return grouped


def learner_stats(user_id: str, today: dt.date, conf: Optional[TrainerSettings] = None) -> Dict:
    """Dashboard row for one learner."""
    conf = conf or trainer_settings()
    records = _load_progress(user_id)
    sessions = _recent_sessions([user_id], today, conf)[user_id]
    row = {"user_id": user_id}
    row.update(progress_counters(records, today, conf.daily_new_quota))
    row["activity"] = _activity_payload(sessions, today, conf)
    return row


def overview(today: dt.date, conf: Optional[TrainerSettings] = None) -> Dict:
    """
    Supervisor dashboard over every Learner, ordered by username.
    Two batched reads (all progress, all recent sessions) grouped in memory.
    """
    conf = conf or trainer_settings()
    with _store("load learners"):
        learners = list(Learner.objects.order_by("username"))
    user_ids = [learner.user_id for learner in learners]

    progress_by_user: Dict[str, List[ProgressRecord]] = {uid: [] for uid in user_ids}
    with _store("load progress"):
        for p in ProgressRecord.objects.filter(user_id__in=user_ids).only(
            "user_id", "stage", "due_date", "first_seen_date"
        ):
            progress_by_user[p.user_id].append(p)
    sessions_by_user = _recent_sessions(user_ids, today, conf)

    students = []
    for learner in learners:
        row = {
            "student": {
                "user_id": learner.user_id,
                "username": learner.username,
                "display_name": learner.display_name,
                "class_name": learner.class_name,
            },
        }
        row.update(progress_counters(progress_by_user[learner.user_id], today, conf.daily_new_quota))
        row["activity"] = _activity_payload(sessions_by_user[learner.user_id], today, conf)
        students.append(row)

    return {
        "today": today.isoformat(),
        "new_per_day": conf.daily_new_quota,
        "students": students,
    }
