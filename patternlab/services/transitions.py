"""
Allowed learning status transitions.
"""
from typing import Dict, List, Tuple

from patternlab.core.enums import LearningStatus

STATUS_TRANSITIONS: Dict[LearningStatus, Tuple[LearningStatus, ...]] = {
    LearningStatus.NOT_STARTED: (LearningStatus.IN_PROGRESS,),
    LearningStatus.IN_PROGRESS: (LearningStatus.COMPLETED, LearningStatus.NOT_STARTED),
    LearningStatus.COMPLETED: (LearningStatus.IN_PROGRESS,),
}


def next_statuses(status: LearningStatus) -> List[LearningStatus]:
    """Statuses a pattern may move to from ``status``."""
    return list(STATUS_TRANSITIONS[LearningStatus(status)])


def can_transition(current: LearningStatus, new: LearningStatus) -> bool:
    return LearningStatus(new) in STATUS_TRANSITIONS[LearningStatus(current)]
