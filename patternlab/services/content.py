"""
Lesson content loader.

Each pattern may have a directory ``<content_dir>/<category>/<pattern_id>/``
holding ``explanation.md``, ``question.md`` and ``solution.py``. Markdown
files can start with YAML front matter, which is returned as ``meta``.
"""
import logging
from pathlib import Path
from typing import Optional, Union

import frontmatter
import markdown

from patternlab.schemas.pattern import LessonDocument, PatternWithDetails

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_DIR = Path(__file__).resolve().parents[1] / "content" / "patterns"

EXPLANATION_FILE = "explanation.md"
QUESTION_FILE = "question.md"
SOLUTION_FILE = "solution.py"


class LessonContentLoader:
    """Reads lesson files from disk and renders markdown to HTML."""

    def __init__(self, base_dir: Union[str, Path, None] = None):
        self.base_dir = Path(base_dir) if base_dir else DEFAULT_CONTENT_DIR

    def _pattern_dir(self, category: str, pattern_id: str) -> Path:
        return self.base_dir / category / pattern_id

    def _resolve(self, category: str, pattern_id: str, file_name: str) -> Optional[Path]:
        path = (self._pattern_dir(category, pattern_id) / file_name).resolve()
        # Refuse anything that escapes the content directory
        if self.base_dir.resolve() not in path.parents:
            logger.warning(f"Rejected lesson path outside content dir: {path}")
            return None
        if not path.is_file():
            logger.info(f"Lesson file not found: {path}")
            return None
        return path

    def get_markdown_file(self, category: str, pattern_id: str, file_name: str) -> Optional[LessonDocument]:
        """Render one markdown lesson file, or None when it does not exist."""
        path = self._resolve(category, pattern_id, file_name)
        if path is None:
            return None

        post = frontmatter.loads(path.read_text(encoding="utf-8"))
        html = markdown.markdown(post.content, extensions=["fenced_code", "tables"])
        return LessonDocument(meta=dict(post.metadata), content_html=html)

    def get_solution_code(self, category: str, pattern_id: str) -> Optional[str]:
        path = self._resolve(category, pattern_id, SOLUTION_FILE)
        if path is None:
            return None
        return path.read_text(encoding="utf-8")

    def attach(self, details: PatternWithDetails) -> PatternWithDetails:
        """Return ``details`` with whatever lesson files exist for it."""
        category = details.category.value
        return details.model_copy(update={
            "explanation": self.get_markdown_file(category, details.id, EXPLANATION_FILE),
            "question": self.get_markdown_file(category, details.id, QUESTION_FILE),
            "solution_code": self.get_solution_code(category, details.id),
        })
