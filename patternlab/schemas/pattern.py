"""
Pydantic schemas for the design pattern catalog and lesson content.
"""
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel

from patternlab.core.enums import PatternCategory


class Pattern(BaseModel):
    """One catalog entry."""

    id: str
    name: str
    category: PatternCategory
    description: str
    difficulty: Literal[1, 2, 3]

    class Config:
        frozen = True


class LessonDocument(BaseModel):
    """A rendered markdown lesson file."""

    meta: Dict[str, Any] = {}
    content_html: str


class PatternWithDetails(Pattern):
    """Catalog entry with lesson text for the detail page."""

    overview: Optional[str] = None
    problem: Optional[str] = None
    solution: Optional[str] = None
    code_example: Optional[str] = None
    explanation: Optional[LessonDocument] = None
    question: Optional[LessonDocument] = None
    solution_code: Optional[str] = None
