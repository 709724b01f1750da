"""
Pydantic schemas for learning progress, quiz answers, history and statistics.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from patternlab.core.enums import LearningAction, LearningStatus, QuestionType


class LearningProgress(BaseModel):
    """Schema for learning progress response."""

    id: int
    user_id: int
    pattern_id: str
    status: LearningStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True


class LearningProgressUpdate(BaseModel):
    """Schema for a status change request."""

    status: LearningStatus


class PatternProgress(BaseModel):
    """Current status of one pattern plus the statuses it may move to."""

    pattern_id: str
    status: LearningStatus
    next_statuses: List[LearningStatus]
    progress: Optional[LearningProgress] = None


class QuizAnswerCreate(BaseModel):
    """Schema for submitting a quiz answer."""

    pattern_id: str
    question_type: QuestionType
    answer: str = Field(..., min_length=1)
    is_correct: bool


class QuizAnswer(BaseModel):
    """Schema for quiz answer response."""

    id: int
    user_id: int
    pattern_id: str
    question_type: QuestionType
    answer: str
    is_correct: bool
    created_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True


class LearningHistory(BaseModel):
    """Schema for learning history response."""

    id: int
    user_id: int
    pattern_id: str
    action: LearningAction
    created_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True


# ============= Statistics =============

class CategoryProgress(BaseModel):
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    not_started: int = 0


class CategoryStats(BaseModel):
    creational: CategoryProgress = Field(default_factory=CategoryProgress)
    structural: CategoryProgress = Field(default_factory=CategoryProgress)
    behavioral: CategoryProgress = Field(default_factory=CategoryProgress)


class PatternQuizStats(BaseModel):
    pattern_id: str
    total: int
    correct: int
    correct_rate: int


class QuizTotals(BaseModel):
    """Answer counts for one pattern."""

    total: int
    correct: int


class QuizStats(BaseModel):
    total_answers: int
    correct_answers: int
    correct_rate: int
    by_pattern: List[PatternQuizStats]


class ActivityData(BaseModel):
    date: str  # YYYY-MM-DD
    count: int


class LearningStats(BaseModel):
    """Aggregated learning statistics for one user."""

    total_patterns: int
    completed_count: int
    in_progress_count: int
    not_started_count: int
    completion_rate: int
    category_stats: CategoryStats
    quiz_stats: QuizStats
    recent_activity: List[LearningHistory] = []


class Dashboard(BaseModel):
    """Everything the dashboard page renders, loaded in one request."""

    progress: List[LearningProgress]
    stats: LearningStats
    quiz_answers: List[QuizAnswer]
    history: List[LearningHistory]
    activity: List[ActivityData]
