"""Models module - Import all models here for Alembic."""
from patternlab.db.base import Base
from patternlab.models.user import User, PasswordResetToken, RevokedToken
from patternlab.models.learning import LearningProgress, QuizAnswer, LearningHistory

__all__ = [
    "Base",
    "User",
    "PasswordResetToken",
    "RevokedToken",
    "LearningProgress",
    "QuizAnswer",
    "LearningHistory",
]
