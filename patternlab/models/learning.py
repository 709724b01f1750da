"""
Learning progress, quiz answer and learning history models.
"""
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from patternlab.core.enums import LearningStatus
from patternlab.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LearningProgress(Base):
    """Per-pattern learning status. One row per (user, pattern)."""

    __tablename__ = "learning_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "pattern_id", name="uq_learning_progress_user_pattern"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    pattern_id = Column(String(64), nullable=False)
    status = Column(String(20), nullable=False, default=LearningStatus.NOT_STARTED.value)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="learning_progress")

    def __repr__(self):
        return f"<LearningProgress(user_id={self.user_id}, pattern_id={self.pattern_id}, status={self.status})>"


class QuizAnswer(Base):
    """Append-only log of submitted quiz answers."""

    __tablename__ = "quiz_answers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    pattern_id = Column(String(64), nullable=False, index=True)
    question_type = Column(String(20), nullable=False)  # implementation, advanced
    answer = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="quiz_answers")


class LearningHistory(Base):
    """Append-only audit log of view/start/complete events."""

    __tablename__ = "learning_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    pattern_id = Column(String(64), nullable=False)
    action = Column(String(20), nullable=False)  # view, start, complete
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="learning_history")
