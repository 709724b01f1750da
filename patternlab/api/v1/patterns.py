"""
Design pattern catalog, lesson content and per-pattern progress endpoints.
"""
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from patternlab.core.dependencies import (
    get_content_loader,
    get_current_active_user,
    get_progress_store,
)
from patternlab.core.enums import LearningStatus, PatternCategory
from patternlab.models.user import User
from patternlab.schemas.learning import (
    LearningProgress as LearningProgressSchema,
    LearningProgressUpdate,
    PatternProgress,
    QuizTotals,
)
from patternlab.schemas.common import ErrorResponse
from patternlab.schemas.pattern import Pattern, PatternWithDetails
from patternlab.services import catalog
from patternlab.services.content import LessonContentLoader
from patternlab.services.progress_store import ProgressStore
from patternlab.services.statistics import classify_status
from patternlab.services.transitions import can_transition, next_statuses

router = APIRouter()


def require_pattern(pattern_id: str) -> Pattern:
    """
    Look up a catalog pattern.

    Raises:
        HTTPException: 404 when the id is not in the catalog
    """
    pattern = catalog.get_pattern_by_id(pattern_id)
    if pattern is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Pattern '{pattern_id}' not found",
        )
    return pattern


@router.get("", response_model=List[Pattern])
def list_patterns(
    q: str = "",
    category: Optional[PatternCategory] = None,
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    List catalog patterns, optionally filtered by category and a search query.
    """
    patterns = catalog.get_patterns_by_category(category) if category else catalog.get_design_patterns()
    return catalog.search_patterns(q, patterns)


@router.get("/{pattern_id}", response_model=PatternWithDetails, responses={404: {"model": ErrorResponse}})
def get_pattern(
    pattern_id: str,
    content: LessonContentLoader = Depends(get_content_loader),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Pattern detail with rendered lesson files and solution code.
    """
    require_pattern(pattern_id)
    return content.attach(catalog.get_pattern_with_details(pattern_id))


def _pattern_progress(pattern_id: str, progress) -> PatternProgress:
    current = classify_status(progress.status) if progress is not None else LearningStatus.NOT_STARTED
    return PatternProgress(
        pattern_id=pattern_id,
        status=current,
        next_statuses=next_statuses(current),
        progress=LearningProgressSchema.model_validate(progress) if progress is not None else None,
    )


@router.get("/{pattern_id}/progress", response_model=PatternProgress)
def get_pattern_progress(
    pattern_id: str,
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Current status for one pattern (not_started when there is no row yet).
    """
    require_pattern(pattern_id)
    return _pattern_progress(pattern_id, store.get_learning_progress(current_user.id, pattern_id))


@router.put(
    "/{pattern_id}/progress",
    response_model=PatternProgress,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_pattern_progress(
    pattern_id: str,
    body: LearningProgressUpdate,
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Move a pattern to a new status.

    Raises:
        HTTPException: 409 when the transition is not allowed from the current status
    """
    require_pattern(pattern_id)
    existing = store.get_learning_progress(current_user.id, pattern_id)
    current = classify_status(existing.status) if existing is not None else LearningStatus.NOT_STARTED

    if not can_transition(current, body.status):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change status from {current.value} to {body.status.value}",
        )

    progress = store.upsert_learning_progress(current_user.id, pattern_id, body.status)
    return _pattern_progress(pattern_id, progress)


@router.get("/{pattern_id}/quiz-stats", response_model=QuizTotals)
def get_pattern_quiz_stats(
    pattern_id: str,
    store: ProgressStore = Depends(get_progress_store),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    require_pattern(pattern_id)
    return store.get_quiz_stats_by_pattern(current_user.id, pattern_id)
