"""Daily work-queue selection.

Overdue reviews come first (oldest due date first), then never-seen items up
to whatever is left of the learner's daily new-item quota.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Sequence, Tuple

from .dates import parse_day
from .records import field_value
from .srs import clamp_stage

logger = logging.getLogger(__name__)

_FAR_FUTURE = dt.date.max


@dataclass
class SessionPlan:
    """Fixed presentation order for one practice visit."""
    reviews: List = field(default_factory=list)
    new_items: List = field(default_factory=list)
    new_today: int = 0
    remaining_quota: int = 0

    @property
    def cards(self) -> List:
        return [*self.reviews, *self.new_items]

    @property
    def is_empty(self) -> bool:
        return not self.reviews and not self.new_items

    def __iter__(self) -> Iterator:
        return iter(self.cards)

    def __len__(self) -> int:
        return len(self.reviews) + len(self.new_items)


def _identity(record):
    vocab_id = field_value(record, "vocab_id")
    return vocab_id if vocab_id is not None else field_value(record, "id")


def _insertion_order(record):
    row_id = field_value(record, "id")
    return row_id if row_id is not None else field_value(record, "vocab_id")


def _review_key(record) -> Tuple[dt.date, object]:
    due = parse_day(field_value(record, "due_date"))
    return (due or _FAR_FUTURE, _identity(record))


def _new_item_key(record) -> Tuple[dt.date, object]:
    # Progress rows are written in lesson order, so the row id keeps that order within a day.
    due = parse_day(field_value(record, "due_date"))
    return (due or _FAR_FUTURE, _insertion_order(record))


def count_new_today(progress_records: Iterable, today: dt.date) -> int:
    return sum(1 for p in progress_records if parse_day(field_value(p, "first_seen_date")) == today)


def select_session(
    progress_records: Sequence,
    today: dt.date,
    session_limit: int,
    daily_new_quota: int,
) -> SessionPlan:
    """
    Decide which items a learner works through in this visit.

    Rules:
      1) remaining quota = daily quota minus items first seen today (never negative).
      2) Reviews: stage > 0 and due on or before today, oldest due date first,
         ties broken by item id, at most `session_limit`.
      3) New items: stage 0 and never seen, whatever their due date, in stable
         insertion order (due date, then progress row), filling the free slots up to the remaining quota.
      4) Reviews then new items; an empty plan means "nothing due", not an error.
    """
    records = list(progress_records)
    limit = max(0, session_limit)

    new_today = count_new_today(records, today)
    remaining_quota = max(0, daily_new_quota - new_today)

    reviews = []
    fresh = []
    for p in records:
        stage = clamp_stage(field_value(p, "stage"))
        if stage > 0:
            due = parse_day(field_value(p, "due_date"))
            if due is not None and due <= today:
                reviews.append(p)
        elif parse_day(field_value(p, "first_seen_date")) is None:
            fresh.append(p)

    reviews = sorted(reviews, key=_review_key)[:limit]

    allow_new = min(limit - len(reviews), remaining_quota)
    new_items = sorted(fresh, key=_new_item_key)[:allow_new] if allow_new > 0 else []

    logger.debug(
        "selected %d reviews, %d new (new_today=%d, remaining_quota=%d)",
        len(reviews), len(new_items), new_today, remaining_quota,
    )
    return SessionPlan(
        reviews=reviews,
        new_items=new_items,
        new_today=new_today,
        remaining_quota=remaining_quota,
    )


def plan_initial_progress(
    vocab_ids: Sequence, today: dt.date, daily_new_quota: int
) -> List[Tuple[object, dt.date]]:
    """Spread a fresh learner's items over consecutive days, `daily_new_quota` per day."""
    per_day = max(1, daily_new_quota)
    return [
        (vocab_id, today + dt.timedelta(days=i // per_day))
        for i, vocab_id in enumerate(vocab_ids)
    ]
