"""
API endpoints for learning progress, quiz history and statistics.
"""
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status

from patternlab.api.v1.patterns import require_pattern
from patternlab.core.dependencies import get_current_active_user, get_progress_store
from patternlab.models.user import User
from patternlab.schemas.learning import (
    ActivityData,
    Dashboard,
    LearningHistory as LearningHistorySchema,
    LearningProgress as LearningProgressSchema,
    LearningStats,
    QuizAnswer as QuizAnswerSchema,
    QuizAnswerCreate,
)
from patternlab.services import catalog
from patternlab.services.progress_store import ProgressStore
from patternlab.services.statistics import (
    activity_window_start,
    compute_activity_data,
    compute_learning_stats,
)

router = APIRouter()

RECENT_ACTIVITY_LIMIT = 20
DASHBOARD_HISTORY_LIMIT = 50
DEFAULT_ACTIVITY_DAYS = 365


def _learning_stats(store: ProgressStore, user_id: int, progress: Optional[List[Any]] = None) -> LearningStats:
    if progress is None:
        progress = store.get_all_learning_progress(user_id)
    answers = store.get_quiz_answers(user_id)
    recent = store.get_learning_history(user_id, RECENT_ACTIVITY_LIMIT)
    return compute_learning_stats(
        catalog.get_design_patterns(),
        progress,
        answers,
        [LearningHistorySchema.model_validate(h) for h in recent],
    )


def _activity(store: ProgressStore, user_id: int, days: int) -> List[ActivityData]:
    now = datetime.now(timezone.utc)
    rows = store.get_history_since(user_id, activity_window_start(days, now))
    return compute_activity_data(rows, days, now)


# ============= Progress =============

@router.get("/progress", response_model=List[LearningProgressSchema])
def get_learning_progress(
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Get the user's progress rows across all patterns.
    """
    return store.get_all_learning_progress(current_user.id)


# ============= Quiz answers =============

@router.post("/quiz-answers", response_model=QuizAnswerSchema, status_code=status.HTTP_201_CREATED)
def submit_quiz_answer(
    answer_in: QuizAnswerCreate,
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Record one quiz answer.
    """
    require_pattern(answer_in.pattern_id)
    return store.record_quiz_answer(
        current_user.id,
        answer_in.pattern_id,
        answer_in.question_type,
        answer_in.answer,
        answer_in.is_correct,
    )


@router.get("/quiz-answers", response_model=List[QuizAnswerSchema])
def get_quiz_answers(
    pattern_id: Optional[str] = None,
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Quiz answer history, newest first.
    """
    return store.get_quiz_answers(current_user.id, pattern_id)


# ============= History and activity =============

@router.get("/history", response_model=List[LearningHistorySchema])
def get_learning_history(
    limit: int = Query(DASHBOARD_HISTORY_LIMIT, ge=1, le=500),
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return store.get_learning_history(current_user.id, limit)


@router.get("/activity", response_model=List[ActivityData])
def get_activity(
    days: int = Query(DEFAULT_ACTIVITY_DAYS, ge=1, le=730),
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Per-day event counts for the activity calendar. Days without events are omitted.
    """
    return _activity(store, current_user.id, days)


# ============= Statistics =============

@router.get("/stats", response_model=LearningStats)
def get_learning_stats(
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Completion, category and quiz statistics plus the most recent activity.
    """
    return _learning_stats(store, current_user.id)


@router.get("/dashboard", response_model=Dashboard)
def get_dashboard(
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Everything the dashboard renders in one response. If any fetch fails the
    whole request fails, so partial statistics are never shown.
    """
    progress = store.get_all_learning_progress(current_user.id)
    return Dashboard(
        progress=[LearningProgressSchema.model_validate(p) for p in progress],
        stats=_learning_stats(store, current_user.id, progress),
        quiz_answers=[QuizAnswerSchema.model_validate(a) for a in store.get_quiz_answers(current_user.id)],
        history=[
            LearningHistorySchema.model_validate(h)
            for h in store.get_learning_history(current_user.id, DASHBOARD_HISTORY_LIMIT)
        ],
        activity=_activity(store, current_user.id, DEFAULT_ACTIVITY_DAYS),
    )
