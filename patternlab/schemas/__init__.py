"""Schemas module - Import all schemas."""
from patternlab.schemas.user import User, UserCreate, Token, EmailRequest, ResetPasswordRequest
from patternlab.schemas.pattern import Pattern, PatternWithDetails, LessonDocument
from patternlab.schemas.learning import (
    ActivityData,
    CategoryProgress,
    CategoryStats,
    Dashboard,
    LearningHistory,
    LearningProgress,
    LearningProgressUpdate,
    LearningStats,
    PatternProgress,
    PatternQuizStats,
    QuizAnswer,
    QuizAnswerCreate,
    QuizStats,
    QuizTotals,
)
from patternlab.schemas.common import Message, ErrorResponse

__all__ = [
    "User",
    "UserCreate",
    "Token",
    "EmailRequest",
    "ResetPasswordRequest",
    "Pattern",
    "PatternWithDetails",
    "LessonDocument",
    "ActivityData",
    "CategoryProgress",
    "CategoryStats",
    "Dashboard",
    "LearningHistory",
    "LearningProgress",
    "LearningProgressUpdate",
    "LearningStats",
    "PatternProgress",
    "PatternQuizStats",
    "QuizAnswer",
    "QuizAnswerCreate",
    "QuizStats",
    "QuizTotals",
    "Message",
    "ErrorResponse",
]
