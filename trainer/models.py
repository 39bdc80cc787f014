from django.core.validators import MaxValueValidator
from django.db import models
from django.db.models import F
from django.utils import timezone


class VocabularyItem(models.Model):
    prompt = models.CharField(max_length=255)                         # Source-language prompt
    accepted_answers = models.TextField()                             # ';'-separated accepted translations
    is_idiom = models.BooleanField(default=False)                     # Presentation only
    day = models.PositiveIntegerField(null=True, blank=True)          # Lesson order for new learners

    class Meta:
        ordering = [F("day").asc(nulls_last=True), "id"]

    def __str__(self):
        return self.prompt


class Learner(models.Model):
    user_id = models.CharField(max_length=64, unique=True)            # External auth identity
    username = models.CharField(max_length=150)
    display_name = models.CharField(max_length=150, blank=True, default="")
    class_name = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        ordering = ["username"]

    def __str__(self):
        return self.username


class ProgressRecord(models.Model):
    user_id = models.CharField(max_length=64, db_index=True)
    vocab = models.ForeignKey(VocabularyItem, on_delete=models.CASCADE, related_name="progress")
    stage = models.PositiveSmallIntegerField(default=0, validators=[MaxValueValidator(4)])
    due_date = models.DateField()
    first_seen_date = models.DateField(null=True, blank=True)         # Set once, on first showing
    correct_count = models.PositiveIntegerField(default=0)
    wrong_count = models.PositiveIntegerField(default=0)
    last_seen = models.DateField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user_id", "vocab"], name="uq_user_vocab"),
        ]
        indexes = [
            models.Index(fields=["user_id", "due_date"], name="idx_progress_user_due"),
            models.Index(fields=["user_id", "first_seen_date"], name="idx_progress_user_seen"),
        ]


class PracticeSession(models.Model):
    user_id = models.CharField(max_length=64, db_index=True)
    started_at = models.DateTimeField(default=timezone.now, db_index=True)
    ended_at = models.DateTimeField(null=True, blank=True)            # Null while the visit is open
    duration_seconds = models.PositiveIntegerField(null=True, blank=True)
    cards_answered = models.PositiveIntegerField(default=0)
    correct_answers = models.PositiveIntegerField(default=0)
    wrong_answers = models.PositiveIntegerField(default=0)
    last_activity_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["user_id", "started_at"], name="idx_session_user_start"),
        ]

    @property
    def is_open(self) -> bool:
        return self.ended_at is None
