"""
Task & Project Model

Canonical representation of GTD tasks and projects, plus the status and
tag enums they use.

Statuses:
    inbox → {next, someday}            (triage, external)
    {next, someday} → waiting          (promote_blocked)
    waiting → next                     (promote_ready)
    {inbox, next, someday, waiting} → completed

Dates are calendar dates (datetime.date). Every date predicate takes the
caller's `today` instead of reading a clock, so boundary behavior
(overdue vs. due today) is deterministic.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any, Set, Tuple, Union

logger = logging.getLogger("task_model")


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------
class TaskStatus(str, Enum):
    """GTD task statuses."""
    INBOX = "inbox"
    NEXT = "next"
    WAITING = "waiting"
    SOMEDAY = "someday"
    COMPLETED = "completed"

    @classmethod
    def actionable_states(cls) -> Set["TaskStatus"]:
        """Statuses a blocked task can be demoted out of."""
        return {cls.NEXT, cls.SOMEDAY}


class EnergyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    SOMEDAY = "someday"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class RecurrenceType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# -----------------------------------------------------------------------------
# Parsing Helpers
# -----------------------------------------------------------------------------
def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Normalize an ISO date/timestamp string or datetime to a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    return date.fromisoformat(text[:10])


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Normalize an ISO timestamp to a naive UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _generate_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


# -----------------------------------------------------------------------------
# Recurrence Pattern
# -----------------------------------------------------------------------------
@dataclass
class RecurrencePattern:
    """
    How a recurring task repeats.

    days_of_week uses ISO weekday numbers (1 = Monday ... 7 = Sunday).
    nth_weekday is (n, weekday), e.g. (3, 4) = third Thursday.
    month_day is (month, day) for yearly patterns.
    """
    type: RecurrenceType
    days_of_week: List[int] = field(default_factory=list)
    day_of_month: Optional[int] = None
    nth_weekday: Optional[Tuple[int, int]] = None
    month_day: Optional[Tuple[int, int]] = None

    def __post_init__(self):
        self.type = RecurrenceType(self.type)
        for day in self.days_of_week:
            if not 1 <= day <= 7:
                raise ValueError(f"days_of_week values must be 1-7, got {day}")
        if self.day_of_month is not None and not 1 <= self.day_of_month <= 31:
            raise ValueError(f"day_of_month must be 1-31, got {self.day_of_month}")
        if self.nth_weekday is not None:
            n, weekday = self.nth_weekday
            if not 1 <= n <= 5 or not 1 <= weekday <= 7:
                raise ValueError(f"Invalid nth_weekday: {self.nth_weekday}")
            self.nth_weekday = (n, weekday)
        if self.month_day is not None:
            month, day = self.month_day
            if not 1 <= month <= 12 or not 1 <= day <= 31:
                raise ValueError(f"Invalid month_day: {self.month_day}")
            self.month_day = (month, day)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "days_of_week": list(self.days_of_week),
            "day_of_month": self.day_of_month,
            "nth_weekday": list(self.nth_weekday) if self.nth_weekday else None,
            "month_day": list(self.month_day) if self.month_day else None,
        }

    @classmethod
    def from_value(cls, value: Any) -> Optional["RecurrencePattern"]:
        """Build from the legacy string form ("weekly") or a mapping."""
        if not value:
            return None
        if isinstance(value, RecurrencePattern):
            return value
        if isinstance(value, str):
            return cls(type=RecurrenceType(value))

        month_day = value.get("month_day")
        if isinstance(month_day, str):
            m, d = month_day.split("-")
            month_day = (int(m), int(d))
        elif isinstance(month_day, dict):
            month_day = (month_day["month"], month_day["day"])
        elif month_day is not None:
            month_day = tuple(month_day)

        nth_weekday = value.get("nth_weekday")
        if isinstance(nth_weekday, dict):
            nth_weekday = (nth_weekday["n"], nth_weekday["weekday"])
        elif nth_weekday is not None:
            nth_weekday = tuple(nth_weekday)

        return cls(
            type=RecurrenceType(value["type"]),
            days_of_week=list(value.get("days_of_week") or []),
            day_of_month=value.get("day_of_month"),
            nth_weekday=nth_weekday,
            month_day=month_day,
        )


# -----------------------------------------------------------------------------
# Task
# -----------------------------------------------------------------------------
@dataclass
class Task:
    """
    A single GTD task.

    `completed` and `status == completed` are kept consistent by
    mark_complete() / mark_incomplete(); is_done accepts either.
    `time` is the estimated duration in minutes (0 = no estimate).
    """
    title: str = ""
    id: str = field(default_factory=lambda: _generate_id("task"))
    status: TaskStatus = TaskStatus.INBOX
    completed: bool = False
    completed_at: Optional[datetime] = None
    due_date: Optional[date] = None
    defer_date: Optional[date] = None
    waiting_for_task_ids: List[str] = field(default_factory=list)
    waiting_for_description: str = ""
    project_id: Optional[str] = None
    contexts: List[str] = field(default_factory=list)
    energy: Optional[EnergyLevel] = None
    time: int = 0
    recurrence: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[date] = None
    recurrence_parent_id: Optional[str] = None
    description: str = ""
    starred: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        """Normalize loose inputs and validate invariants."""
        self.status = TaskStatus(self.status)
        self.energy = EnergyLevel(self.energy) if self.energy else None
        self.due_date = parse_date(self.due_date)
        self.defer_date = parse_date(self.defer_date)
        self.recurrence_end_date = parse_date(self.recurrence_end_date)
        self.completed_at = parse_datetime(self.completed_at)
        self.created_at = parse_datetime(self.created_at)
        self.updated_at = parse_datetime(self.updated_at)
        self.recurrence = RecurrencePattern.from_value(self.recurrence)
        self.time = int(self.time or 0)
        if self.time < 0:
            raise ValueError(f"Estimated time cannot be negative: {self.time}")
        if self.id in self.waiting_for_task_ids:
            raise ValueError(f"Task {self.id} cannot wait for itself")

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    @property
    def is_done(self) -> bool:
        return self.completed or self.status == TaskStatus.COMPLETED

    def mark_complete(self, now: datetime) -> None:
        self.completed = True
        self.completed_at = now
        self.status = TaskStatus.COMPLETED
        self.updated_at = now

    def mark_incomplete(self, now: datetime) -> None:
        self.completed = False
        self.completed_at = None
        if self.status == TaskStatus.COMPLETED:
            self.status = TaskStatus.INBOX
        self.updated_at = now

    # -------------------------------------------------------------------------
    # Date Predicates
    # -------------------------------------------------------------------------

    def is_available(self, today: date) -> bool:
        """Not deferred, or the defer date has arrived."""
        return self.defer_date is None or self.defer_date <= today

    def days_until_due(self, today: date) -> Optional[int]:
        if self.due_date is None:
            return None
        return (self.due_date - today).days

    def is_overdue(self, today: date) -> bool:
        if self.due_date is None or self.is_done:
            return False
        return self.due_date < today

    def is_due_today(self, today: date) -> bool:
        if self.due_date is None or self.is_done:
            return False
        return self.due_date == today

    def is_due_within(self, days: int, today: date) -> bool:
        """Due in [today, today + days)."""
        if self.due_date is None or self.is_done:
            return False
        return 0 <= (self.due_date - today).days < days

    def is_recurring(self) -> bool:
        return self.recurrence is not None

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "completed": self.completed,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "defer_date": self.defer_date.isoformat() if self.defer_date else None,
            "waiting_for_task_ids": list(self.waiting_for_task_ids),
            "waiting_for_description": self.waiting_for_description,
            "project_id": self.project_id,
            "contexts": list(self.contexts),
            "energy": self.energy.value if self.energy else None,
            "time": self.time,
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "recurrence_end_date": self.recurrence_end_date.isoformat() if self.recurrence_end_date else None,
            "recurrence_parent_id": self.recurrence_parent_id,
            "description": self.description,
            "starred": self.starred,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Deserialize from a storage mapping (legacy 'tags' → contexts)."""
        kwargs: Dict[str, Any] = dict(
            title=data.get("title", ""),
            status=data.get("status") or TaskStatus.INBOX,
            completed=bool(data.get("completed", False)),
            completed_at=data.get("completed_at"),
            due_date=data.get("due_date"),
            defer_date=data.get("defer_date"),
            waiting_for_task_ids=list(data.get("waiting_for_task_ids") or []),
            waiting_for_description=data.get("waiting_for_description") or "",
            project_id=data.get("project_id") or None,
            contexts=list(data.get("contexts") or data.get("tags") or []),
            energy=data.get("energy") or None,
            time=data.get("time") or 0,
            recurrence=data.get("recurrence") or None,
            recurrence_end_date=data.get("recurrence_end_date"),
            recurrence_parent_id=data.get("recurrence_parent_id"),
            description=data.get("description") or "",
            starred=bool(data.get("starred", False)),
        )
        if data.get("id"):
            kwargs["id"] = data["id"]
        if data.get("created_at"):
            kwargs["created_at"] = parse_datetime(data["created_at"])
        if data.get("updated_at"):
            kwargs["updated_at"] = parse_datetime(data["updated_at"])
        return cls(**kwargs)


# -----------------------------------------------------------------------------
# Project
# -----------------------------------------------------------------------------
@dataclass
class Project:
    """A project; tasks point at it through Task.project_id."""
    title: str = ""
    id: str = field(default_factory=lambda: _generate_id("project"))
    status: ProjectStatus = ProjectStatus.ACTIVE
    description: str = ""
    contexts: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        self.status = ProjectStatus(self.status)
        self.created_at = parse_datetime(self.created_at)
        self.updated_at = parse_datetime(self.updated_at)

    @property
    def is_active(self) -> bool:
        return self.status == ProjectStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "description": self.description,
            "contexts": list(self.contexts),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        kwargs: Dict[str, Any] = dict(
            title=data.get("title", ""),
            status=data.get("status") or ProjectStatus.ACTIVE,
            description=data.get("description") or "",
            contexts=list(data.get("contexts") or data.get("tags") or []),
        )
        if data.get("id"):
            kwargs["id"] = data["id"]
        if data.get("created_at"):
            kwargs["created_at"] = parse_datetime(data["created_at"])
        if data.get("updated_at"):
            kwargs["updated_at"] = parse_datetime(data["updated_at"])
        return cls(**kwargs)
