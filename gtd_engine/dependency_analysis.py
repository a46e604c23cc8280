"""
Dependency Analysis

Graph helpers over waiting-for edges (dependent -> prerequisite):
- cycle prevention when a dependency is added
- cycle diagnostics for existing data
- blocked/ready statistics
- critical path (longest open chain)

The lifecycle scans do not call any of this; a cyclic group simply stays
waiting there. These helpers are for edit flows and reporting.
"""

import logging
from collections import deque
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Set

from .dependency_resolver import dependencies_met, index_tasks
from .errors import DependencyCycleError, TaskNotFoundError
from .task_model import Task

logger = logging.getLogger("dependency_analysis")


@dataclass
class DependencyStats:
    """Counts for the dependency overview."""
    total_tasks: int
    with_dependencies: int
    blocked: int
    ready: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


# -----------------------------------------------------------------------------
# Cycle Detection
# -----------------------------------------------------------------------------
def would_create_cycle(dependent_id: str, prerequisite_id: str, tasks: List[Task]) -> bool:
    """
    Would making `dependent_id` wait for `prerequisite_id` close a loop?

    Breadth-first walk from the prerequisite along its own waiting-for ids;
    reaching the dependent means a cycle.
    """
    if dependent_id == prerequisite_id:
        return True

    index = index_tasks(tasks)
    visited: Set[str] = set()
    queue = deque([prerequisite_id])

    while queue:
        current_id = queue.popleft()
        if current_id == dependent_id:
            return True
        if current_id in visited:
            continue
        visited.add(current_id)
        current = index.get(current_id)
        if current is None:
            continue
        for dep_id in current.waiting_for_task_ids:
            if dep_id not in visited:
                queue.append(dep_id)
    return False


def add_dependency(dependent: Task, prerequisite_id: str, tasks: List[Task]) -> bool:
    """
    Make `dependent` wait for `prerequisite_id`.

    Returns False if the dependency already exists. Raises
    TaskNotFoundError for an unknown prerequisite and DependencyCycleError
    if the edge would close a loop.
    """
    index = index_tasks(tasks)
    if prerequisite_id not in index:
        raise TaskNotFoundError(prerequisite_id)
    if prerequisite_id in dependent.waiting_for_task_ids:
        return False
    if would_create_cycle(dependent.id, prerequisite_id, tasks):
        raise DependencyCycleError(dependent.id, prerequisite_id)

    dependent.waiting_for_task_ids.append(prerequisite_id)
    logger.info(f"Task {dependent.id} now waits for {prerequisite_id}")
    return True


def find_cycles(tasks: List[Task]) -> List[List[str]]:
    """
    Return each distinct dependency cycle as a list of task ids.

    Uses a coloring DFS over an explicit stack; a cycle is reported once,
    starting at its smallest id.
    """
    index = index_tasks(tasks)
    WHITE, GREY, BLACK = 0, 1, 2
    color: Dict[str, int] = {task_id: WHITE for task_id in index}
    seen: Set[tuple] = set()
    cycles: List[List[str]] = []

    for root_id in index:
        if color[root_id] != WHITE:
            continue
        color[root_id] = GREY
        path = [root_id]
        stack = [(root_id, iter(index[root_id].waiting_for_task_ids))]

        while stack:
            task_id, deps = stack[-1]
            for dep_id in deps:
                if dep_id not in index:
                    continue
                if color[dep_id] == GREY:
                    cycle = path[path.index(dep_id):]
                    start = cycle.index(min(cycle))
                    normalized = tuple(cycle[start:] + cycle[:start])
                    if normalized not in seen:
                        seen.add(normalized)
                        cycles.append(list(normalized))
                elif color[dep_id] == WHITE:
                    color[dep_id] = GREY
                    path.append(dep_id)
                    stack.append((dep_id, iter(index[dep_id].waiting_for_task_ids)))
                    break
            else:
                # All prerequisites explored
                stack.pop()
                path.pop()
                color[task_id] = BLACK

    if cycles:
        logger.warning(f"Found {len(cycles)} dependency cycle(s)")
    return cycles


# -----------------------------------------------------------------------------
# Reporting
# -----------------------------------------------------------------------------
def _scoped(tasks: List[Task], project_id: Optional[str]) -> List[Task]:
    if project_id is None:
        return list(tasks)
    return [t for t in tasks if t.project_id == project_id]


def get_dependency_stats(tasks: List[Task], project_id: Optional[str] = None) -> DependencyStats:
    """
    Blocked/ready counts among open tasks that have prerequisites.

    Prerequisite lookups always use the full collection, so a
    cross-project prerequisite still counts.
    """
    index = index_tasks(tasks)
    scoped = [t for t in _scoped(tasks, project_id) if not t.is_done]
    with_deps = [t for t in scoped if t.waiting_for_task_ids]
    blocked = sum(1 for t in with_deps if not dependencies_met(t, index))
    return DependencyStats(
        total_tasks=len(scoped),
        with_dependencies=len(with_deps),
        blocked=blocked,
        ready=len(with_deps) - blocked,
    )


def critical_path(tasks: List[Task], project_id: Optional[str] = None) -> List[Task]:
    """
    Longest chain of open tasks linked by dependencies, prerequisite first.

    Edges into completed, missing or out-of-scope tasks are ignored, and
    edges back onto the chain being walked are skipped so existing cycles
    terminate. Chain lengths are memoised in post-order; ties go to the
    chain found first in collection order.
    """
    scoped = [t for t in _scoped(tasks, project_id) if not t.is_done]
    index = index_tasks(scoped)
    length: Dict[str, int] = {}
    via: Dict[str, Optional[str]] = {}

    for root in index.values():
        if root.id in length:
            continue
        on_path = {root.id}
        stack = [(root, iter(root.waiting_for_task_ids))]

        while stack:
            task, deps = stack[-1]
            for dep_id in deps:
                dep = index.get(dep_id)
                if dep is None or dep_id in on_path or dep_id in length:
                    continue
                on_path.add(dep_id)
                stack.append((dep, iter(dep.waiting_for_task_ids)))
                break
            else:
                stack.pop()
                on_path.discard(task.id)
                best_len, best_dep = 0, None
                for dep_id in task.waiting_for_task_ids:
                    if length.get(dep_id, 0) > best_len:
                        best_len, best_dep = length[dep_id], dep_id
                length[task.id] = best_len + 1
                via[task.id] = best_dep

    end_id: Optional[str] = None
    for task_id in index:
        if end_id is None or length[task_id] > length[end_id]:
            end_id = task_id
    if end_id is None or length[end_id] < 2:
        return []

    path: List[Task] = []
    current: Optional[str] = end_id
    while current is not None:
        path.append(index[current])
        current = via[current]
    path.reverse()
    return path
