"""
Priority Scoring

A 0-100 priority score for list badges, separate from suggestion ranking.

Factors (starting from 50):
- Due date urgency        +25 overdue, +20 today, +15 tomorrow, +10 within 3 days, +5 within a week
- Starred                 +15
- Status                  +10 next, +5 inbox
- Dependencies            +10 all met, -10 blocked
- Energy vs. duration     +8 quick high-energy, -5 long low-energy
- Duration                +5 up to 5m, +3 up to 15m
- Active project          +5
- Future defer date       -20
- Age                     +7 over 30 days, +5 over 14, +3 over 7
"""

from datetime import datetime
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from .dependency_resolver import dependencies_met, index_tasks
from .task_model import EnergyLevel, Project, Task, TaskStatus

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

# (lower bound, label), highest first
PRIORITY_LABELS: Tuple[Tuple[int, str], ...] = (
    (80, "Urgent"),
    (60, "High"),
    (40, "Medium"),
    (20, "Low"),
    (0, "Very Low"),
)


def calculate_priority(
    task: Task,
    all_tasks: Union[Iterable[Task], Mapping[str, Task]],
    projects: Iterable[Project],
    now: datetime
) -> Tuple[int, List[str]]:
    """Return (score, reasons) for a task; completed tasks score 0."""
    if task.is_done:
        return 0, []

    today = now.date()
    score = BASE_SCORE
    reasons: List[str] = []

    days = task.days_until_due(today)
    if days is not None:
        if days < 0:
            score += 25
            reasons.append("Overdue")
        elif days == 0:
            score += 20
            reasons.append("Due today")
        elif days == 1:
            score += 15
            reasons.append("Due tomorrow")
        elif days <= 3:
            score += 10
            reasons.append("Due soon")
        elif days <= 7:
            score += 5

    if task.starred:
        score += 15
        reasons.append("Starred")

    if task.status == TaskStatus.NEXT:
        score += 10
        reasons.append("Next Action")
    elif task.status == TaskStatus.INBOX:
        score += 5

    if task.waiting_for_task_ids:
        if dependencies_met(task, all_tasks):
            score += 10
            reasons.append("Ready to start")
        else:
            score -= 10
            reasons.append("Blocked")

    if task.energy and task.time:
        if task.energy == EnergyLevel.HIGH and task.time <= 15:
            score += 8
            reasons.append("Quick & high energy")
        elif task.energy == EnergyLevel.LOW and task.time > 60:
            score -= 5

    if task.time:
        if task.time <= 5:
            score += 5
            reasons.append("Quick task")
        elif task.time <= 15:
            score += 3

    if task.project_id:
        project = next((p for p in projects if p.id == task.project_id), None)
        if project is not None and project.is_active:
            score += 5
            reasons.append("Active project")

    if not task.is_available(today):
        score -= 20
        reasons.append("Deferred")

    age_days = (now - task.created_at).days
    if age_days > 30:
        score += 7
        reasons.append("Old task")
    elif age_days > 14:
        score += 5
    elif age_days > 7:
        score += 3

    return max(MIN_SCORE, min(MAX_SCORE, score)), reasons


def priority_score(
    task: Task,
    all_tasks: Union[Iterable[Task], Mapping[str, Task]],
    projects: Iterable[Project],
    now: datetime
) -> int:
    return calculate_priority(task, all_tasks, projects, now)[0]


def priority_label(score: int) -> str:
    for lower_bound, label in PRIORITY_LABELS:
        if score >= lower_bound:
            return label
    return PRIORITY_LABELS[-1][1]


def rank_by_priority(
    tasks: List[Task],
    projects: List[Project],
    now: datetime,
    limit: Optional[int] = None
) -> List[Tuple[Task, int]]:
    """Open tasks sorted by priority score, highest first (stable)."""
    index = index_tasks(tasks)
    ranked = [
        (task, priority_score(task, index, projects, now))
        for task in tasks
        if not task.is_done
    ]
    ranked.sort(key=lambda pair: pair[1], reverse=True)
    return ranked[:limit] if limit is not None else ranked
