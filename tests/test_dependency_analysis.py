"""
Unit Tests for Dependency Analysis

Test coverage for:
- Cycle prevention on add_dependency
- Cycle diagnostics over existing data
- Blocked/ready statistics
- Critical path
"""

import pytest

from gtd_engine.dependency_analysis import (
    add_dependency,
    critical_path,
    find_cycles,
    get_dependency_stats,
    would_create_cycle,
)
from gtd_engine.errors import DependencyCycleError, TaskNotFoundError
from gtd_engine.task_model import TaskStatus

from tests.conftest import make_task, make_completed_task


def _chain(length):
    """Tasks t0..t{n-1}, each waiting for the one before it (dependents first)."""
    tasks = [make_task("t0")]
    for i in range(1, length):
        tasks.append(make_task(f"t{i}", waiting_for_task_ids=[f"t{i - 1}"]))
    tasks.reverse()
    return tasks


# -----------------------------------------------------------------------------
# Cycle Prevention
# -----------------------------------------------------------------------------
class TestCyclePrevention:

    def test_direct_cycle(self):
        a = make_task("a", waiting_for_task_ids=["b"])
        b = make_task("b")

        assert would_create_cycle("b", "a", [a, b])

    def test_indirect_cycle(self):
        a = make_task("a", waiting_for_task_ids=["b"])
        b = make_task("b", waiting_for_task_ids=["c"])
        c = make_task("c")

        assert would_create_cycle("c", "a", [a, b, c])

    def test_self_dependency(self):
        assert would_create_cycle("a", "a", [make_task("a")])

    def test_independent_edge(self):
        a = make_task("a", waiting_for_task_ids=["b"])
        b = make_task("b")
        c = make_task("c")

        assert not would_create_cycle("c", "a", [a, b, c])

    def test_add_dependency(self):
        a = make_task("a")
        b = make_task("b")

        assert add_dependency(a, "b", [a, b]) is True
        assert a.waiting_for_task_ids == ["b"]

    def test_add_duplicate_dependency(self):
        a = make_task("a", waiting_for_task_ids=["b"])
        b = make_task("b")

        assert add_dependency(a, "b", [a, b]) is False
        assert a.waiting_for_task_ids == ["b"]

    def test_add_unknown_prerequisite(self):
        a = make_task("a")

        with pytest.raises(TaskNotFoundError) as exc_info:
            add_dependency(a, "ghost", [a])
        assert exc_info.value.details == {"task_id": "ghost"}

    def test_add_cyclic_dependency(self):
        a = make_task("a", waiting_for_task_ids=["b"])
        b = make_task("b")

        with pytest.raises(DependencyCycleError) as exc_info:
            add_dependency(b, "a", [a, b])
        assert exc_info.value.code == "DEPENDENCY_CYCLE"
        assert b.waiting_for_task_ids == []


# -----------------------------------------------------------------------------
# Cycle Diagnostics
# -----------------------------------------------------------------------------
class TestFindCycles:

    def test_no_cycles(self):
        a = make_task("a", waiting_for_task_ids=["b"])
        b = make_task("b")

        assert find_cycles([a, b]) == []

    def test_two_node_cycle_reported_once(self):
        a = make_task("a", waiting_for_task_ids=["b"])
        b = make_task("b", waiting_for_task_ids=["a"])

        assert find_cycles([b, a]) == [["a", "b"]]

    def test_three_node_cycle(self):
        a = make_task("a", waiting_for_task_ids=["b"])
        b = make_task("b", waiting_for_task_ids=["c"])
        c = make_task("c", waiting_for_task_ids=["a"])

        assert find_cycles([a, b, c]) == [["a", "b", "c"]]

    def test_missing_ids_are_ignored(self):
        a = make_task("a", waiting_for_task_ids=["gone"])

        assert find_cycles([a]) == []

    def test_long_chain(self):
        assert find_cycles(_chain(1500)) == []

    def test_long_cycle(self):
        tasks = _chain(1500)
        tasks[-1].waiting_for_task_ids.append("t1499")

        cycles = find_cycles(tasks)

        assert len(cycles) == 1
        assert len(cycles[0]) == 1500
        assert cycles[0][:2] == ["t0", "t1499"]


# -----------------------------------------------------------------------------
# Statistics
# -----------------------------------------------------------------------------
class TestDependencyStats:

    def test_counts(self):
        done = make_completed_task("done")
        open_task = make_task("open")
        ready = make_task("ready", waiting_for_task_ids=["done"])
        blocked = make_task("blocked", TaskStatus.WAITING, waiting_for_task_ids=["open"])

        stats = get_dependency_stats([done, open_task, ready, blocked])

        assert stats.to_dict() == {
            "total_tasks": 3,
            "with_dependencies": 2,
            "blocked": 1,
            "ready": 1,
        }

    def test_project_scope_uses_full_collection_for_lookups(self):
        outside = make_task("outside", project_id="other")
        inside = make_task("inside", project_id="p1", waiting_for_task_ids=["outside"])

        stats = get_dependency_stats([outside, inside], project_id="p1")

        assert stats.total_tasks == 1
        assert stats.blocked == 1


# -----------------------------------------------------------------------------
# Critical Path
# -----------------------------------------------------------------------------
class TestCriticalPath:

    def test_longest_chain_prerequisite_first(self):
        a = make_task("a")
        b = make_task("b", waiting_for_task_ids=["a"])
        c = make_task("c", waiting_for_task_ids=["b"])
        side = make_task("side", waiting_for_task_ids=["a"])

        path = critical_path([c, side, b, a])

        assert [t.id for t in path] == ["a", "b", "c"]

    def test_completed_tasks_break_the_chain(self):
        a = make_completed_task("a")
        b = make_task("b", waiting_for_task_ids=["a"])
        c = make_task("c", waiting_for_task_ids=["b"])

        assert [t.id for t in critical_path([a, b, c])] == ["b", "c"]

    def test_no_chain(self):
        assert critical_path([make_task("a"), make_task("b")]) == []

    def test_cycle_does_not_recurse_forever(self):
        a = make_task("a", waiting_for_task_ids=["b"])
        b = make_task("b", waiting_for_task_ids=["a"])

        path = critical_path([a, b])

        assert len(path) == 2
        assert {t.id for t in path} == {"a", "b"}

    def test_long_chain(self):
        path = critical_path(_chain(1500))

        assert len(path) == 1500
        assert path[0].id == "t0"
        assert path[-1].id == "t1499"
