# trainer/views.py
from __future__ import annotations

import datetime as dt

from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import services
from .conf import trainer_settings
from .dates import today_in
from .serializers import AnswerSubmitSerializer, PracticeSessionSerializer, WorkCardSerializer


def _resolve_today(raw) -> dt.date:
    """Explicit ?today=YYYY-MM-DD wins; otherwise the current day in TRAINER_TIMEZONE."""
    if raw in (None, ""):
        return today_in(trainer_settings().tzinfo)
    if isinstance(raw, dt.date):
        return raw
    try:
        d = parse_date(str(raw))
    except ValueError:
        d = None
    if d is None:
        raise ValueError("today must be YYYY-MM-DD.")
    return d


class SessionStartView(APIView):
    """POST /api/users/{user_id}/sessions (initializes progress on first visit)."""
    def post(self, request, user_id: str):
        try:
            today = _resolve_today((request.data or {}).get("today"))
        except ValueError as e:
            return Response({"detail": str(e)}, status=400)

        session = services.start_session(user_id, today)
        return Response(PracticeSessionSerializer(session).data, status=status.HTTP_201_CREATED)


class WorkQueueView(APIView):
    """
    GET /api/users/{user_id}/queue?today=YYYY-MM-DD
    Reviews first, then new items; `nothing_due` is true when the queue is empty.
    """
    def get(self, request, user_id: str):
        try:
            today = _resolve_today(request.query_params.get("today"))
        except ValueError as e:
            return Response({"detail": str(e)}, status=400)

        plan, counters = services.load_work_queue(user_id, today)
        return Response({
            "user_id": user_id,
            "today": today.isoformat(),
            "cards": WorkCardSerializer(plan.cards, many=True).data,
            "review_count": len(plan.reviews),
            "new_count": len(plan.new_items),
            "nothing_due": plan.is_empty,
            "counters": counters,
        }, status=status.HTTP_200_OK)


class AnswerView(APIView):
    """POST /api/users/{user_id}/answers: grade, reschedule and count one answer."""
    def post(self, request, user_id: str):
        ser = AnswerSubmitSerializer(data=request.data or {})
        if not ser.is_valid():
            return Response({"detail": ser.errors}, status=400)
        data = ser.validated_data
        today = _resolve_today(data.get("today"))

        outcome = services.record_answer(
            user_id,
            data["progress_id"],
            data["answer"],
            today,
            session_id=data.get("session_id"),
        )
        return Response({
            "progress_id": outcome.progress.id,
            "correct": outcome.grade.correct,
            "fuzzy": outcome.grade.fuzzy,
            "solution": outcome.grade.solution,
            "all_solutions": outcome.grade.solutions,
            "stage": outcome.schedule.stage,
            "due_date": outcome.schedule.due_date.isoformat(),
            "interval_days": outcome.schedule.interval_days,
            "session": PracticeSessionSerializer(outcome.session).data if outcome.session else None,
        }, status=status.HTTP_200_OK)


class SessionCloseView(APIView):
    """POST /api/users/{user_id}/sessions/{session_id}/close (idempotent)."""
    def post(self, request, user_id: str, session_id: int):
        session = services.close_session(user_id, session_id)
        return Response(PracticeSessionSerializer(session).data, status=status.HTTP_200_OK)


class LearnerStatsView(APIView):
    """GET /api/users/{user_id}/stats?today=YYYY-MM-DD"""
    def get(self, request, user_id: str):
        try:
            today = _resolve_today(request.query_params.get("today"))
        except ValueError as e:
            return Response({"detail": str(e)}, status=400)
        return Response(services.learner_stats(user_id, today), status=status.HTTP_200_OK)


class OverviewView(APIView):
    """
    GET /api/admin/overview?today=YYYY-MM-DD
    One dashboard row per learner. Access control is handled in front of this service.
    """
    def get(self, request):
        try:
            today = _resolve_today(request.query_params.get("today"))
        except ValueError as e:
            return Response({"detail": str(e)}, status=400)
        return Response(services.overview(today), status=status.HTTP_200_OK)
