"""
Pytest configuration for GTD engine tests.

This module provides:
1. A fixed clock (2025-01-10 09:00) for deterministic date boundaries
2. Task/project factories
3. Engine fixtures
"""

from datetime import datetime

import pytest

from gtd_engine.config import EngineConfig
from gtd_engine.lifecycle_engine import LifecycleEngine
from gtd_engine.recommendation_engine import RecommendationEngine
from gtd_engine.task_model import Project, Task, TaskStatus


# -----------------------------------------------------------------------------
# Test Constants
# -----------------------------------------------------------------------------
NOW = datetime(2025, 1, 10, 9, 0, 0)
TODAY = NOW.date()


def make_task(task_id: str, status: TaskStatus = TaskStatus.NEXT, **kwargs) -> Task:
    """Helper to create test tasks with stable ids and timestamps."""
    kwargs.setdefault("title", f"Task {task_id}")
    kwargs.setdefault("created_at", NOW)
    kwargs.setdefault("updated_at", NOW)
    return Task(id=task_id, status=status, **kwargs)


def make_completed_task(task_id: str, **kwargs) -> Task:
    task = make_task(task_id, TaskStatus.NEXT, **kwargs)
    task.mark_complete(NOW)
    return task


# -----------------------------------------------------------------------------
# Common Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def now():
    return NOW


@pytest.fixture
def engine_config():
    return EngineConfig()


@pytest.fixture
def lifecycle_engine(engine_config):
    return LifecycleEngine(engine_config)


@pytest.fixture
def recommendation_engine(engine_config):
    return RecommendationEngine(engine_config)


@pytest.fixture
def active_project():
    return Project(id="proj-active", title="Launch", status="active")


@pytest.fixture
def archived_project():
    return Project(id="proj-archived", title="Old", status="archived")
