"""
Learning statistics aggregation.

Pure functions over rows already fetched by the progress store. Nothing here
performs I/O, mutates its inputs, or raises on odd data: rows that reference
patterns outside the catalog, or carry an unknown status, are simply not
counted (unknown statuses fall into ``not_started``).

Rows are read by attribute, so ORM objects and the response schemas both work.
"""
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from patternlab.core.enums import LearningStatus, PatternCategory
from patternlab.schemas.learning import (
    ActivityData,
    CategoryProgress,
    CategoryStats,
    LearningStats,
    PatternQuizStats,
    QuizStats,
)

_MIN_DATETIME = datetime.min.replace(tzinfo=timezone.utc)


def percentage(part: int, whole: int) -> int:
    """``part / whole`` as a whole percentage, rounded half up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    # floor(part * 100 / whole + 0.5) in integer arithmetic
    return (part * 200 + whole) // (whole * 2)


def _as_utc(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def classify_status(status: Any) -> LearningStatus:
    """Map a stored status value onto ``LearningStatus``; unknown values are not started."""
    try:
        return LearningStatus(status)
    except ValueError:
        return LearningStatus.NOT_STARTED


def latest_progress_by_pattern(progress_rows: Iterable[Any]) -> Dict[str, Any]:
    """
    Index progress rows by ``pattern_id``.

    The store keeps one row per (user, pattern). Should duplicates slip
    through anyway, the row with the latest ``updated_at`` wins.
    """
    index: Dict[str, Any] = {}
    for row in progress_rows:
        current = index.get(row.pattern_id)
        if current is None:
            index[row.pattern_id] = row
            continue
        row_updated = _as_utc(getattr(row, "updated_at", None)) or _MIN_DATETIME
        current_updated = _as_utc(getattr(current, "updated_at", None)) or _MIN_DATETIME
        if row_updated >= current_updated:
            index[row.pattern_id] = row
    return index


def _pattern_statuses(catalog: Sequence[Any], progress_rows: Iterable[Any]) -> List[LearningStatus]:
    """One status per catalog pattern, in catalog order."""
    by_pattern = latest_progress_by_pattern(progress_rows)
    statuses = []
    for pattern in catalog:
        row = by_pattern.get(pattern.id)
        statuses.append(classify_status(row.status) if row is not None else LearningStatus.NOT_STARTED)
    return statuses


def _tally(bucket: CategoryProgress, status: LearningStatus) -> None:
    bucket.total += 1
    if status is LearningStatus.COMPLETED:
        bucket.completed += 1
    elif status is LearningStatus.IN_PROGRESS:
        bucket.in_progress += 1
    elif status is LearningStatus.NOT_STARTED:
        bucket.not_started += 1
    else:
        raise AssertionError(f"Unhandled learning status: {status!r}")


def compute_category_stats(catalog: Sequence[Any], progress_rows: Iterable[Any]) -> CategoryStats:
    """Completed / in-progress / not-started counts for each pattern category."""
    stats = CategoryStats()
    statuses = _pattern_statuses(catalog, progress_rows)
    for pattern, status in zip(catalog, statuses):
        category = PatternCategory(pattern.category)
        _tally(getattr(stats, category.value), status)
    return stats


def compute_quiz_stats(quiz_rows: Iterable[Any]) -> QuizStats:
    """
    Overall and per-pattern quiz correctness.

    Every answer counts, including repeated answers to the same question.
    ``by_pattern`` keeps the order in which each pattern first appears.
    """
    total_answers = 0
    correct_answers = 0
    per_pattern: Dict[str, List[int]] = {}

    for answer in quiz_rows:
        counts = per_pattern.setdefault(answer.pattern_id, [0, 0])
        counts[0] += 1
        total_answers += 1
        if answer.is_correct:
            counts[1] += 1
            correct_answers += 1

    by_pattern = [
        PatternQuizStats(
            pattern_id=pattern_id,
            total=total,
            correct=correct,
            correct_rate=percentage(correct, total),
        )
        for pattern_id, (total, correct) in per_pattern.items()
    ]

    return QuizStats(
        total_answers=total_answers,
        correct_answers=correct_answers,
        correct_rate=percentage(correct_answers, total_answers),
        by_pattern=by_pattern,
    )


def compute_learning_stats(
    catalog: Sequence[Any],
    progress_rows: Iterable[Any],
    quiz_rows: Iterable[Any],
    recent_activity: Sequence[Any] = (),
) -> LearningStats:
    """
    Summarise one user's progress against the catalog.

    Every catalog pattern lands in exactly one bucket, so the three counts
    always add up to ``total_patterns``.
    """
    progress_rows = list(progress_rows)
    statuses = _pattern_statuses(catalog, progress_rows)
    counts = Counter(statuses)

    total_patterns = len(catalog)
    completed_count = counts[LearningStatus.COMPLETED]

    return LearningStats(
        total_patterns=total_patterns,
        completed_count=completed_count,
        in_progress_count=counts[LearningStatus.IN_PROGRESS],
        not_started_count=counts[LearningStatus.NOT_STARTED],
        completion_rate=percentage(completed_count, total_patterns),
        category_stats=compute_category_stats(catalog, progress_rows),
        quiz_stats=compute_quiz_stats(quiz_rows),
        recent_activity=list(recent_activity),
    )


def activity_window_start(window_days: int, now: Optional[datetime] = None) -> datetime:
    """Midnight (UTC) of the day ``window_days`` before ``now``."""
    now = _as_utc(now) or datetime.now(timezone.utc)
    start = now - timedelta(days=window_days)
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def compute_activity_data(
    history_rows: Iterable[Any],
    window_days: int,
    now: Optional[datetime] = None,
) -> List[ActivityData]:
    """
    Count history events per UTC calendar day inside the trailing window.

    Only days with at least one event are returned; callers fill the gaps.
    """
    start = activity_window_start(window_days, now)
    per_day: Dict[str, int] = {}
    for row in history_rows:
        created_at = _as_utc(row.created_at)
        if created_at is None or created_at < start:
            continue
        day = created_at.date().isoformat()
        per_day[day] = per_day.get(day, 0) + 1

    return [ActivityData(date=day, count=count) for day, count in per_day.items()]
