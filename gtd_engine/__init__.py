"""
GTD Engine

Task lifecycle state machine and recommendation engine for a personal
"Getting Things Done" assistant.

Components:
- Task & Project model: statuses inbox/next/waiting/someday/completed
- Dependency resolver: prerequisite and defer-date checks
- Lifecycle engine: promote_blocked / promote_ready scans, validated
  manual transitions, transition ledger
- Recommendation engine: additive multi-factor scoring with ordered
  reasons, stable ranking, truncation
- Dependency analysis: cycle prevention, blocked/ready stats, critical path
- Recurrence: next-occurrence dates for repeating tasks
- Priority scoring: 0-100 badge score

The engine performs no I/O on tasks. Callers pass the task collection and
an explicit `now` into every operation; storage, rendering and date parsing
live outside this package.
"""

__version__ = "0.4.0"

from .config import EngineConfig, load_config, configure_logging
from .errors import (
    GTDError,
    TaskNotFoundError,
    DependencyCycleError,
    InvalidTransitionError,
    ConfigError,
)
from .task_model import (
    Task,
    Project,
    TaskStatus,
    EnergyLevel,
    ProjectStatus,
    RecurrencePattern,
    RecurrenceType,
)
from .dependency_resolver import dependencies_met, is_available
from .lifecycle_engine import (
    LifecycleEngine,
    TransitionRecord,
    TransitionTrigger,
    promote_blocked,
    promote_ready,
)
from .recommendation_model import SuggestionPreferences, ScoredTask
from .recommendation_engine import (
    RecommendationEngine,
    RecommendationScorer,
    RecommendationSelector,
    get_suggestions,
)
from .dependency_analysis import (
    DependencyStats,
    add_dependency,
    critical_path,
    find_cycles,
    get_dependency_stats,
    would_create_cycle,
)
from .recurrence import (
    next_instance_fields,
    next_occurrence_date,
    should_recurrence_end,
)
from .priority_scoring import (
    calculate_priority,
    priority_label,
    priority_score,
    rank_by_priority,
)
