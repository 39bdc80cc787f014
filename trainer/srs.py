"""Leitner-box scheduling.

Five fixed boxes (stages 0..4), each with a fixed review interval. A correct
answer moves the item up one box, a wrong answer sends it back to box 0.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

INTERVAL_DAYS = (1, 2, 7, 30, 90)
MIN_STAGE = 0
MAX_STAGE = len(INTERVAL_DAYS) - 1


@dataclass(frozen=True)
class StageResult:
    """Outcome of one scheduling step."""
    stage: int
    due_date: dt.date
    interval_days: int


def clamp_stage(stage) -> int:
    """Stale or corrupted stage values (out of range, non-integer) count as stage 0."""
    if isinstance(stage, bool) or not isinstance(stage, int):
        return MIN_STAGE
    if stage < MIN_STAGE or stage > MAX_STAGE:
        return MIN_STAGE
    return stage


def advance(stage: int, correct: bool, today: dt.date) -> StageResult:
    """Calculate the next stage and due date after a graded answer.

    Args:
        stage: Current stage (0-4)
        correct: Whether the answer was graded correct
        today: Calendar day the answer was given

    Returns:
        StageResult with the new stage, its due date and the interval used
    """
    current = clamp_stage(stage)
    if correct:
        new_stage = min(current + 1, MAX_STAGE)
    else:
        # No partial credit
        new_stage = MIN_STAGE

    days = INTERVAL_DAYS[new_stage]
    return StageResult(
        stage=new_stage,
        due_date=today + dt.timedelta(days=days),
        interval_days=days,
    )
