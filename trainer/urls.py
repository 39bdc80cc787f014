from django.urls import path
from .views import (
    AnswerView,
    LearnerStatsView,
    OverviewView,
    SessionCloseView,
    SessionStartView,
    WorkQueueView,
)

urlpatterns = [
    path("users/<str:user_id>/sessions", SessionStartView.as_view(), name="session-start"),
    path("users/<str:user_id>/sessions/<int:session_id>/close", SessionCloseView.as_view(), name="session-close"),
    path("users/<str:user_id>/queue", WorkQueueView.as_view(), name="work-queue"),
    path("users/<str:user_id>/answers", AnswerView.as_view(), name="answer"),
    path("users/<str:user_id>/stats", LearnerStatsView.as_view(), name="learner-stats"),
    path("admin/overview", OverviewView.as_view(), name="admin-overview"),
]
