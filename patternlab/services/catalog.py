"""
Static design pattern catalog.
"""
from typing import List, Optional

from patternlab.core.enums import PatternCategory
from patternlab.schemas.pattern import Pattern, PatternWithDetails

C = PatternCategory.CREATIONAL
S = PatternCategory.STRUCTURAL
B = PatternCategory.BEHAVIORAL

DESIGN_PATTERNS: List[Pattern] = [
    # Creational
    Pattern(id="singleton", name="Singleton", category=C, description="Ensure a class has only one instance.", difficulty=1),
    Pattern(id="factory-method", name="Factory Method", category=C, description="Let subclasses decide which object to create.", difficulty=2),
    Pattern(id="abstract-factory", name="Abstract Factory", category=C, description="Create families of related objects.", difficulty=3),
    Pattern(id="builder", name="Builder", category=C, description="Construct a complex object step by step.", difficulty=2),
    Pattern(id="prototype", name="Prototype", category=C, description="Create objects by cloning an existing one.", difficulty=2),

    # Structural
    Pattern(id="adapter", name="Adapter", category=S, description="Convert one interface into another.", difficulty=2),
    Pattern(id="bridge", name="Bridge", category=S, description="Separate an abstraction from its implementation.", difficulty=3),
    Pattern(id="composite", name="Composite", category=S, description="Compose objects into tree structures.", difficulty=2),
    Pattern(id="decorator", name="Decorator", category=S, description="Attach responsibilities to an object dynamically.", difficulty=2),
    Pattern(id="facade", name="Facade", category=S, description="Provide a simple interface to a subsystem.", difficulty=1),
    Pattern(id="flyweight", name="Flyweight", category=S, description="Share common state between many objects efficiently.", difficulty=3),
    Pattern(id="proxy", name="Proxy", category=S, description="Control access to another object.", difficulty=2),

    # Behavioral
    Pattern(id="chain-of-responsibility", name="Chain of Responsibility", category=B, description="Pass a request along a chain of handlers.", difficulty=3),
    Pattern(id="command", name="Command", category=B, description="Encapsulate a request as an object.", difficulty=2),
    Pattern(id="iterator", name="Iterator", category=B, description="Access elements of a collection sequentially.", difficulty=1),
    Pattern(id="mediator", name="Mediator", category=B, description="Reduce direct dependencies between objects.", difficulty=3),
    Pattern(id="memento", name="Memento", category=B, description="Capture and restore an object's state.", difficulty=3),
    Pattern(id="observer", name="Observer", category=B, description="Notify many dependent objects of a change.", difficulty=1),
    Pattern(id="state", name="State", category=B, description="Change behaviour when internal state changes.", difficulty=2),
    Pattern(id="strategy", name="Strategy", category=B, description="Encapsulate interchangeable algorithms.", difficulty=1),
    Pattern(id="template-method", name="Template Method", category=B, description="Define the skeleton of an algorithm.", difficulty=2),
    Pattern(id="visitor", name="Visitor", category=B, description="Separate an operation from the objects it acts on.", difficulty=3),
]

_PATTERNS_BY_ID = {p.id: p for p in DESIGN_PATTERNS}


def get_design_patterns() -> List[Pattern]:
    return list(DESIGN_PATTERNS)


def get_pattern_by_id(pattern_id: str) -> Optional[Pattern]:
    return _PATTERNS_BY_ID.get(pattern_id)


def get_patterns_by_category(category: PatternCategory) -> List[Pattern]:
    return [p for p in DESIGN_PATTERNS if p.category == category]


def search_patterns(query: str, patterns: Optional[List[Pattern]] = None) -> List[Pattern]:
    """
    Case-insensitive substring search over name and description.

    A blank query returns every pattern.
    """
    patterns = DESIGN_PATTERNS if patterns is None else patterns
    if not query.strip():
        return list(patterns)

    lower = query.strip().lower()
    return [
        p for p in patterns
        if lower in p.name.lower() or lower in p.description.lower()
    ]


def get_pattern_with_details(pattern_id: str) -> Optional[PatternWithDetails]:
    """Catalog entry plus the placeholder lesson text shown on the detail page."""
    base = get_pattern_by_id(pattern_id)
    if base is None:
        return None

    return PatternWithDetails(
        **base.model_dump(),
        overview=f"{base.name} pattern overview.",
        problem=f"What problem does {base.name} solve?",
        solution=f"How does {base.name} solve the problem?",
        code_example=(
            f"# {base.name} example\n"
            "class Example:\n"
            "    def execute(self):\n"
            f"        print(\"{base.name} pattern example\")\n"
        ),
    )
