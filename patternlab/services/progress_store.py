"""
Progress store: reads and writes learning progress, quiz answers and history.

A ``ProgressStore`` wraps one SQLAlchemy session. Database failures are
logged and re-raised as ``ProgressStoreError`` so callers can tell "no rows"
(an empty list) apart from "the query failed".
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from patternlab.core.enums import LearningAction, LearningStatus, QuestionType
from patternlab.models.learning import LearningHistory, LearningProgress, QuizAnswer, utcnow
from patternlab.schemas.learning import QuizTotals

logger = logging.getLogger(__name__)


class ProgressStoreError(Exception):
    """A progress store query or write failed."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


def history_action_for(status: LearningStatus) -> LearningAction:
    """History action recorded for a status change."""
    if status is LearningStatus.IN_PROGRESS:
        return LearningAction.START
    if status is LearningStatus.COMPLETED:
        return LearningAction.COMPLETE
    return LearningAction.VIEW


class ProgressStore:
    """Service for per-user learning records."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, operation: str, exc: SQLAlchemyError, rollback: bool = False) -> ProgressStoreError:
        if rollback:
            self.db.rollback()
        logger.error(f"Progress store {operation} failed: {exc}")
        return ProgressStoreError(operation, exc)

    # ============= Learning progress =============

    def get_all_learning_progress(self, user_id: int) -> List[LearningProgress]:
        try:
            return (
                self.db.query(LearningProgress)
                .filter(LearningProgress.user_id == user_id)
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail("get_all_learning_progress", e) from e

    def get_learning_progress(self, user_id: int, pattern_id: str) -> Optional[LearningProgress]:
        """Progress row for one pattern, or None when the user has none yet."""
        try:
            return (
                self.db.query(LearningProgress)
                .filter(
                    LearningProgress.user_id == user_id,
                    LearningProgress.pattern_id == pattern_id,
                )
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail("get_learning_progress", e) from e

    def _apply_status(self, user_id: int, pattern_id: str, status: LearningStatus) -> LearningProgress:
        now = utcnow()
        progress = self.get_learning_progress(user_id, pattern_id)
        if progress is None:
            progress = LearningProgress(user_id=user_id, pattern_id=pattern_id, created_at=now)
            self.db.add(progress)

        progress.status = status.value
        progress.updated_at = now
        if status is LearningStatus.IN_PROGRESS:
            progress.started_at = now
        elif status is LearningStatus.COMPLETED:
            progress.completed_at = now
        self.db.flush()

        # Status change and its history row commit together or not at all
        self.db.add(LearningHistory(
            user_id=user_id,
            pattern_id=pattern_id,
            action=history_action_for(status).value,
            created_at=now,
        ))
        self.db.commit()
        self.db.refresh(progress)
        return progress

    def upsert_learning_progress(
        self, user_id: int, pattern_id: str, status: LearningStatus
    ) -> LearningProgress:
        """
        Create or update the progress row for (user, pattern) and log the change.

        ``started_at`` is stamped on in_progress and ``completed_at`` on
        completed; the other timestamp is left as it was. The history row is
        written in the same transaction, so a failed save leaves neither.
        """
        status = LearningStatus(status)
        try:
            try:
                progress = self._apply_status(user_id, pattern_id, status)
            except IntegrityError:
                # Another request inserted the row first; update it instead
                self.db.rollback()
                progress = self._apply_status(user_id, pattern_id, status)
        except SQLAlchemyError as e:
            raise self._fail("upsert_learning_progress", e, rollback=True) from e
        return progress

    # ============= Quiz answers =============

    def record_quiz_answer(
        self,
        user_id: int,
        pattern_id: str,
        question_type: QuestionType,
        answer: str,
        is_correct: bool,
    ) -> QuizAnswer:
        quiz_answer = QuizAnswer(
            user_id=user_id,
            pattern_id=pattern_id,
            question_type=QuestionType(question_type).value,
            answer=answer,
            is_correct=is_correct,
        )
        try:
            self.db.add(quiz_answer)
            self.db.commit()
            self.db.refresh(quiz_answer)
        except SQLAlchemyError as e:
            raise self._fail("record_quiz_answer", e, rollback=True) from e
        return quiz_answer

    def get_quiz_answers(self, user_id: int, pattern_id: Optional[str] = None) -> List[QuizAnswer]:
        """Quiz answers, newest first, optionally for a single pattern."""
        try:
            query = self.db.query(QuizAnswer).filter(QuizAnswer.user_id == user_id)
            if pattern_id:
                query = query.filter(QuizAnswer.pattern_id == pattern_id)
            return query.order_by(QuizAnswer.created_at.desc(), QuizAnswer.id.desc()).all()
        except SQLAlchemyError as e:
            raise self._fail("get_quiz_answers", e) from e

    def get_quiz_stats_by_pattern(self, user_id: int, pattern_id: str) -> QuizTotals:
        try:
            total, correct = (
                self.db.query(
                    func.count(QuizAnswer.id),
                    func.coalesce(func.sum(case((QuizAnswer.is_correct.is_(True), 1), else_=0)), 0),
                )
                .filter(QuizAnswer.user_id == user_id, QuizAnswer.pattern_id == pattern_id)
                .one()
            )
        except SQLAlchemyError as e:
            raise self._fail("get_quiz_stats_by_pattern", e) from e
        return QuizTotals(total=int(total), correct=int(correct))

    # ============= Learning history =============

    def record_learning_history(
        self, user_id: int, pattern_id: str, action: LearningAction
    ) -> LearningHistory:
        entry = LearningHistory(
            user_id=user_id,
            pattern_id=pattern_id,
            action=LearningAction(action).value,
        )
        try:
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        except SQLAlchemyError as e:
            raise self._fail("record_learning_history", e, rollback=True) from e
        return entry

    def get_learning_history(self, user_id: int, limit: int = 50) -> List[LearningHistory]:
        """Most recent history rows, newest first."""
        try:
            return (
                self.db.query(LearningHistory)
                .filter(LearningHistory.user_id == user_id)
                .order_by(LearningHistory.created_at.desc(), LearningHistory.id.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail("get_learning_history", e) from e

    def get_history_since(self, user_id: int, since: datetime) -> List[LearningHistory]:
        try:
            return (
                self.db.query(LearningHistory)
                .filter(
                    LearningHistory.user_id == user_id,
                    LearningHistory.created_at >= since,
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise self._fail("get_history_since", e) from e
