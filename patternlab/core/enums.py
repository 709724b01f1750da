"""
Closed value sets shared by models, schemas and services.
"""
from enum import Enum


class PatternCategory(str, Enum):
    CREATIONAL = "creational"
    STRUCTURAL = "structural"
    BEHAVIORAL = "behavioral"


class LearningStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class QuestionType(str, Enum):
    IMPLEMENTATION = "implementation"
    ADVANCED = "advanced"


class LearningAction(str, Enum):
    VIEW = "view"
    START = "start"
    COMPLETE = "complete"
