"""
Script to scaffold lesson files for every catalog pattern.

Existing files are left untouched, so hand-written lessons survive reruns.
"""
from pathlib import Path

from patternlab.core.config import settings
from patternlab.services.catalog import get_design_patterns
from patternlab.services.content import (
    DEFAULT_CONTENT_DIR,
    EXPLANATION_FILE,
    QUESTION_FILE,
    SOLUTION_FILE,
)

EXPLANATION_TEMPLATE = """---
title: {name}
category: {category}
difficulty: {difficulty}
---
# {name}

## Overview
{description}

## Participants
- Role 1
- Role 2

## When to use it
- Describe a concrete use case.
"""

QUESTION_TEMPLATE = """# {name} exercise

## Learning goals
- Understand the structure of {name}.
- Implement it in Python.

## Implementation task
- Define the interfaces.
- Write the concrete classes.

## Advanced task
- How does {name} differ from similar patterns?
"""

SOLUTION_TEMPLATE = '''class {class_name}:
    def execute(self):
        return "{name} executed"
'''


def scaffold(base_dir: Path) -> int:
    """Write missing lesson files. Returns how many files were created."""
    created = 0
    for pattern in get_design_patterns():
        pattern_dir = base_dir / pattern.category.value / pattern.id
        pattern_dir.mkdir(parents=True, exist_ok=True)
        values = {
            "name": pattern.name,
            "category": pattern.category.value,
            "difficulty": pattern.difficulty,
            "description": pattern.description,
            "class_name": "Concrete" + pattern.name.replace(" ", ""),
        }
        for file_name, template in (
            (EXPLANATION_FILE, EXPLANATION_TEMPLATE),
            (QUESTION_FILE, QUESTION_TEMPLATE),
            (SOLUTION_FILE, SOLUTION_TEMPLATE),
        ):
            path = pattern_dir / file_name
            if path.exists():
                continue
            path.write_text(template.format(**values), encoding="utf-8")
            created += 1
        print(f"Ready: {pattern.category.value}/{pattern.id}")
    return created


if __name__ == "__main__":
    base_dir = Path(settings.CONTENT_DIR) if settings.CONTENT_DIR else DEFAULT_CONTENT_DIR
    count = scaffold(base_dir)
    print(f"Created {count} lesson files under {base_dir}")
