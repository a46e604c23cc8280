"""
Dependency Resolver

Answers two questions about a task:
- are all of its prerequisites (waiting-for ids) completed?
- has its defer date arrived?

Both are pure and total. A waiting-for id that points at a deleted task is
treated as satisfied, so removing a prerequisite never strands its
dependent.
"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Union

from .task_model import Task

TaskIndex = Mapping[str, Task]


def index_tasks(all_tasks: Iterable[Task]) -> Dict[str, Task]:
    """Map task id -> task (first occurrence wins)."""
    index: Dict[str, Task] = {}
    for task in all_tasks:
        index.setdefault(task.id, task)
    return index


def _as_index(all_tasks: Union[Iterable[Task], TaskIndex]) -> TaskIndex:
    if isinstance(all_tasks, Mapping):
        return all_tasks
    return index_tasks(all_tasks)


def dependencies_met(task: Task, all_tasks: Union[Iterable[Task], TaskIndex]) -> bool:
    """True iff every prerequisite is completed or no longer exists."""
    if not task.waiting_for_task_ids:
        return True
    index = _as_index(all_tasks)
    for dep_id in task.waiting_for_task_ids:
        dep = index.get(dep_id)
        if dep is not None and not dep.is_done:
            return False
    return True


def pending_dependencies(task: Task, all_tasks: Union[Iterable[Task], TaskIndex]) -> List[Task]:
    """Existing prerequisites that are not yet completed, in waiting-for order."""
    if not task.waiting_for_task_ids:
        return []
    index = _as_index(all_tasks)
    pending = []
    for dep_id in task.waiting_for_task_ids:
        dep = index.get(dep_id)
        if dep is not None and not dep.is_done:
            pending.append(dep)
    return pending


def is_available(task: Task, as_of: Union[date, datetime]) -> bool:
    """True iff the task has no defer date or it is on/before `as_of`."""
    if task.defer_date is None:
        return True
    if isinstance(as_of, datetime):
        as_of = as_of.date()
    return task.defer_date <= as_of
