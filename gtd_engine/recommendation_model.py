"""
Recommendation Model

Data structures for the "what should I work on?" suggestions.

- SuggestionPreferences: the caller's current situation (all optional)
- ScoredTask: one ranked suggestion with its score and ordered reasons

Preferences are additive: a preference that does not match a task only
withholds its bonus, it never removes the task from the candidates.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .config import DEFAULT_MAX_SUGGESTIONS
from .task_model import Task, TaskStatus, EnergyLevel


# -----------------------------------------------------------------------------
# Reason Strings
# -----------------------------------------------------------------------------
REASON_OVERDUE = "Overdue"
REASON_DUE_TODAY = "Due today"
REASON_QUICK_TASK = "Quick task"
REASON_NEXT_ACTION = "Next Action"
REASON_ACTIVE_PROJECT = "Active project"
REASON_WAITING = "Waiting for something"


def reason_due_in(days: int) -> str:
    return f"Due in {days} day{'s' if days != 1 else ''}"


def reason_context(context: str) -> str:
    return f"Matches current context ({context})"


def reason_energy(level: str) -> str:
    return f"Matches your energy level ({level})"


def reason_fits_time(minutes: int) -> str:
    return f"Fits your available time ({minutes}m)"


def reason_too_long(minutes: int) -> str:
    return f"Too long for available time ({minutes}m)"


# -----------------------------------------------------------------------------
# Preferences
# -----------------------------------------------------------------------------
class SuggestionPreferences(BaseModel):
    """
    Contextual preferences for a suggestion request.

    context:           a context tag the user is in ("@home")
    energy_level:      the user's current energy
    available_minutes: time budget; shorter tasks fit, longer ones are penalized
                       (0 is treated as no budget)
    max_suggestions:   cap on the returned list
    view_scope:        restrict candidates to one status (None = all statuses)
    """
    model_config = ConfigDict(extra="forbid", use_enum_values=False)

    context: Optional[str] = None
    energy_level: Optional[EnergyLevel] = None
    available_minutes: Optional[int] = Field(default=None, ge=0)
    max_suggestions: int = Field(default=DEFAULT_MAX_SUGGESTIONS, ge=1)
    view_scope: Optional[TaskStatus] = None


# -----------------------------------------------------------------------------
# Scored Task (Immutable)
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ScoredTask:
    """
    A suggestion: the task, its score, and why it scored that way.

    reasons keeps the order in which factors were evaluated.
    """
    task: Task
    score: int
    reasons: Tuple[str, ...]

    def __post_init__(self):
        if not isinstance(self.reasons, tuple):
            raise ValueError("reasons must be a tuple for immutability")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task.id,
            "title": self.task.title,
            "score": self.score,
            "reasons": list(self.reasons),
        }
