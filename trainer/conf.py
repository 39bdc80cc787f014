# trainer/conf.py
from __future__ import annotations

from dataclasses import dataclass

import pytz
from django.conf import settings


@dataclass(frozen=True)
class TrainerSettings:
    daily_new_quota: int = 25
    session_limit: int = 20
    activity_window_days: int = 7
    rollup_window_days: int = 30
    rollup_days_shown: int = 14
    timezone: str = "UTC"

    @property
    def tzinfo(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.timezone)


def trainer_settings() -> TrainerSettings:
    """Snapshot the TRAINER_* values from Django settings (missing keys fall back to defaults)."""
    defaults = TrainerSettings()
    return TrainerSettings(
        daily_new_quota=getattr(settings, "TRAINER_DAILY_NEW_QUOTA", defaults.daily_new_quota),
        session_limit=getattr(settings, "TRAINER_SESSION_LIMIT", defaults.session_limit),
        activity_window_days=getattr(settings, "TRAINER_ACTIVITY_WINDOW_DAYS", defaults.activity_window_days),
        rollup_window_days=getattr(settings, "TRAINER_ROLLUP_WINDOW_DAYS", defaults.rollup_window_days),
        rollup_days_shown=getattr(settings, "TRAINER_ROLLUP_DAYS_SHOWN", defaults.rollup_days_shown),
        timezone=getattr(settings, "TRAINER_TIMEZONE", defaults.timezone),
    )
