# trainer/serializers.py
import datetime as dt

from django.utils import timezone
from rest_framework import serializers

from .models import PracticeSession, ProgressRecord


class AwareDateTimeField(serializers.DateTimeField):
    """
    Datetime field that ensures tz-aware UTC datetimes.
    - Accepts ISO strings with/without timezone; if naive → assume UTC.
    - Always outputs ISO in UTC.
    """
    def to_internal_value(self, value):
        d = super().to_internal_value(value)
        if d is None:
            return None
        if timezone.is_naive(d):
            d = timezone.make_aware(d, dt.timezone.utc)
        return d.astimezone(dt.timezone.utc)

    def to_representation(self, value):
        if value is None:
            return None
        if timezone.is_naive(value):
            value = timezone.make_aware(value, dt.timezone.utc)
        return super().to_representation(value.astimezone(dt.timezone.utc))


class AnswerSubmitSerializer(serializers.Serializer):
    """
    Body of POST /api/users/{user_id}/answers.
    Notes:
      - answer may be blank (an empty answer is simply graded wrong); whitespace is kept for the grader.
      - session_id is optional; without it only the progress record is updated.
      - today overrides the configured calendar day (YYYY-MM-DD).
    """
    progress_id = serializers.IntegerField(min_value=1)
    answer = serializers.CharField(allow_blank=True, trim_whitespace=False, max_length=500)
    session_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    today = serializers.DateField(required=False, allow_null=True)


class WorkCardSerializer(serializers.ModelSerializer):
    """One entry of the work queue. Accepted answers are not sent before grading."""
    progress_id = serializers.IntegerField(source="id", read_only=True)
    vocab_id = serializers.IntegerField(read_only=True)
    prompt = serializers.CharField(source="vocab.prompt", read_only=True)
    is_idiom = serializers.BooleanField(source="vocab.is_idiom", read_only=True)
    is_review = serializers.SerializerMethodField()

    class Meta:
        model = ProgressRecord
        fields = (
            "progress_id",
            "vocab_id",
            "prompt",
            "is_idiom",
            "stage",
            "due_date",
            "first_seen_date",
            "correct_count",
            "wrong_count",
            "is_review",
        )

    def get_is_review(self, obj) -> bool:
        return obj.stage > 0


class PracticeSessionSerializer(serializers.ModelSerializer):
    """
    Read-only snapshot of a practice session together with a derived `study_minutes`.
    Open sessions report 0 minutes.
    """
    started_at = AwareDateTimeField(read_only=True)
    ended_at = AwareDateTimeField(read_only=True)
    last_activity_at = AwareDateTimeField(read_only=True)
    study_minutes = serializers.SerializerMethodField()

    class Meta:
        model = PracticeSession
        fields = (
            "id",
            "user_id",
            "started_at",
            "ended_at",
            "duration_seconds",
            "cards_answered",
            "correct_answers",
            "wrong_answers",
            "last_activity_at",
            "study_minutes",
        )
        read_only_fields = fields

    def get_study_minutes(self, obj) -> int:
        return (obj.duration_seconds or 0) // 60
