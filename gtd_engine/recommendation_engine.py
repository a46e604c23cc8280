"""
Recommendation Engine

Ranks actionable tasks for "what should I work on now?".

Pipeline:
1. Candidate filter: view scope, not done, prerequisites met, available
2. RecommendationScorer: additive, rule-based score with ordered reasons
3. RecommendationSelector: stable sort by score, truncate

The engine only reads tasks. It never changes a status; acting on a
suggestion is up to the caller.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .config import EngineConfig, ScoringThresholds, ScoringWeights
from .dependency_resolver import dependencies_met, index_tasks, is_available
from .recommendation_model import (
    ScoredTask,
    SuggestionPreferences,
    REASON_ACTIVE_PROJECT,
    REASON_DUE_TODAY,
    REASON_NEXT_ACTION,
    REASON_OVERDUE,
    REASON_QUICK_TASK,
    REASON_WAITING,
    reason_context,
    reason_due_in,
    reason_energy,
    reason_fits_time,
    reason_too_long,
)
from .task_model import Project, Task, TaskStatus

logger = logging.getLogger("recommendation_engine")

TaskIndex = Mapping[str, Task]
ProjectIndex = Mapping[str, Project]


# -----------------------------------------------------------------------------
# Scorer
# -----------------------------------------------------------------------------
class RecommendationScorer:
    """
    Scores a single candidate task.

    Factors are evaluated in a fixed order and the reasons list follows that
    order:
        overdue, due today, due soon,
        context match, energy match, time budget,
        quick task, next action, active project, waiting, description
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        config = config or EngineConfig()
        self.weights: ScoringWeights = config.scoring.weights
        self.thresholds: ScoringThresholds = config.scoring.thresholds

    def is_candidate(
        self,
        task: Task,
        preferences: SuggestionPreferences,
        all_tasks: Union[Iterable[Task], TaskIndex],
        now: datetime
    ) -> bool:
        """Eligibility before scoring."""
        if preferences.view_scope is not None and task.status != preferences.view_scope:
            return False
        if task.is_done:
            return False
        if not dependencies_met(task, all_tasks):
            return False
        return is_available(task, now)

    def score(
        self,
        task: Task,
        preferences: SuggestionPreferences,
        all_tasks: Union[Iterable[Task], TaskIndex],
        all_projects: Union[Iterable[Project], ProjectIndex],
        now: datetime
    ) -> ScoredTask:
        """Compute score and reasons for one task."""
        w = self.weights
        today = now.date()
        score = 0
        reasons: List[str] = []

        # Due date urgency
        if task.is_overdue(today):
            score += w.overdue
            reasons.append(REASON_OVERDUE)
        elif task.is_due_today(today):
            score += w.due_today
            reasons.append(REASON_DUE_TODAY)
        elif task.is_due_within(self.thresholds.due_soon_days, today):
            score += w.due_soon
            reasons.append(reason_due_in(task.days_until_due(today)))

        # Preferences
        if preferences.context and preferences.context in task.contexts:
            score += w.context_match
            reasons.append(reason_context(preferences.context))

        if preferences.energy_level and task.energy == preferences.energy_level:
            score += w.energy_match
            reasons.append(reason_energy(preferences.energy_level.value))

        # 0 minutes means no budget was given
        budget = preferences.available_minutes or None
        if budget is not None and task.time:
            if task.time <= budget:
                score += w.fits_time
                reasons.append(reason_fits_time(task.time))
            else:
                score += w.too_long_penalty
                reasons.append(reason_too_long(task.time))
        elif budget is None and task.time and task.time <= self.thresholds.quick_win_minutes:
            score += w.quick_task
            reasons.append(REASON_QUICK_TASK)

        # Status and project
        if task.status == TaskStatus.NEXT:
            score += w.next_action
            reasons.append(REASON_NEXT_ACTION)

        if task.project_id:
            project = _lookup_project(all_projects, task.project_id)
            if project is not None and project.is_active:
                score += w.active_project
                reasons.append(REASON_ACTIVE_PROJECT)

        if task.status == TaskStatus.WAITING:
            score += w.waiting_penalty
            reasons.append(REASON_WAITING)

        if task.description and task.description.strip():
            score += w.has_description

        return ScoredTask(task=task, score=score, reasons=tuple(reasons))


def _lookup_project(
    all_projects: Union[Iterable[Project], ProjectIndex],
    project_id: str
) -> Optional[Project]:
    if isinstance(all_projects, Mapping):
        return all_projects.get(project_id)
    for project in all_projects:
        if project.id == project_id:
            return project
    return None


# -----------------------------------------------------------------------------
# Selector
# -----------------------------------------------------------------------------
class RecommendationSelector:
    """Orders scored candidates and trims the list."""

    def select(self, scored: List[ScoredTask], max_suggestions: int) -> List[ScoredTask]:
        """
        Highest score first; equal scores keep their input order.

        sorted() is stable, so no secondary key is used.
        """
        ranked = sorted(scored, key=lambda s: s.score, reverse=True)
        return ranked[:max(max_suggestions, 0)]


# -----------------------------------------------------------------------------
# Recommendation Engine (Main Interface)
# -----------------------------------------------------------------------------
class RecommendationEngine:
    """
    Main entry point for task suggestions.

    READ-ONLY: scoring never mutates tasks or projects.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._scorer = RecommendationScorer(self.config)
        self._selector = RecommendationSelector()

    def get_suggestions(
        self,
        tasks: List[Task],
        projects: List[Project],
        preferences: Optional[SuggestionPreferences],
        now: datetime
    ) -> List[ScoredTask]:
        """
        Rank actionable tasks for the given preferences.

        Returns at most max_suggestions items, best first.
        """
        preferences = preferences or SuggestionPreferences()
        if "max_suggestions" in preferences.model_fields_set:
            limit = preferences.max_suggestions
        else:
            limit = self.config.scoring.thresholds.default_max_suggestions

        task_index = index_tasks(tasks)
        project_index: Dict[str, Project] = {p.id: p for p in projects}

        scored = [
            self._scorer.score(task, preferences, task_index, project_index, now)
            for task in tasks
            if self._scorer.is_candidate(task, preferences, task_index, now)
        ]
        suggestions = self._selector.select(scored, limit)

        logger.debug(f"Scored {len(scored)} candidate(s), returning {len(suggestions)}")
        return suggestions


# -----------------------------------------------------------------------------
# Module-Level Functions
# -----------------------------------------------------------------------------
_engine: Optional[RecommendationEngine] = None


def get_recommendation_engine() -> RecommendationEngine:
    """Get the global recommendation engine instance."""
    global _engine
    if _engine is None:
        _engine = RecommendationEngine()
    return _engine


def get_suggestions(
    tasks: List[Task],
    projects: List[Project],
    preferences: Optional[SuggestionPreferences],
    now: datetime
) -> List[ScoredTask]:
    """Rank tasks using the default engine."""
    return get_recommendation_engine().get_suggestions(tasks, projects, preferences, now)
