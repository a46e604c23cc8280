"""
Task Lifecycle Engine

Moves tasks between GTD statuses as their prerequisites and defer dates
change.

Key responsibilities:
- promote_blocked: demote actionable tasks whose prerequisites are open
- promote_ready: release waiting tasks whose block has cleared
- Validated manual transitions (triage, completion, reopen)
- In-memory transition ledger

Scans mutate the task collection in place and return the number of tasks
moved. They never create or delete tasks, and completed tasks are never
touched by either scan.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Tuple, Any

from .config import EngineConfig, LifecycleConfig
from .dependency_resolver import dependencies_met, index_tasks, is_available
from .errors import InvalidTransitionError
from .task_model import Task, TaskStatus

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
logger = logging.getLogger("lifecycle_engine")

# -----------------------------------------------------------------------------
# Transition Rules
# -----------------------------------------------------------------------------

# Valid targets from each status
VALID_TRANSITIONS: Dict[TaskStatus, List[TaskStatus]] = {
    TaskStatus.INBOX: [TaskStatus.NEXT, TaskStatus.SOMEDAY, TaskStatus.WAITING, TaskStatus.COMPLETED],
    TaskStatus.NEXT: [TaskStatus.WAITING, TaskStatus.SOMEDAY, TaskStatus.COMPLETED],
    TaskStatus.SOMEDAY: [TaskStatus.NEXT, TaskStatus.WAITING, TaskStatus.COMPLETED],
    TaskStatus.WAITING: [TaskStatus.NEXT, TaskStatus.SOMEDAY, TaskStatus.COMPLETED],
    TaskStatus.COMPLETED: [TaskStatus.INBOX]  # Reopen only
}


class TransitionTrigger(str, Enum):
    """Why a task changed status."""
    DEPENDENCIES_UNMET = "dependencies_unmet"
    DEPENDENCIES_MET = "dependencies_met"
    DEFER_DATE_REACHED = "defer_date_reached"
    GENERIC_WAITING_RELEASED = "generic_waiting_released"
    MANUAL = "manual"
    COMPLETED = "completed"
    REOPENED = "reopened"


@dataclass(frozen=True)
class TransitionRecord:
    """Immutable record of a status change."""
    record_id: str
    task_id: str
    from_status: TaskStatus
    to_status: TaskStatus
    trigger: TransitionTrigger
    actor: str
    at: datetime
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": self.record_id,
            "task_id": self.task_id,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "trigger": self.trigger.value,
            "actor": self.actor,
            "at": self.at.isoformat(),
            "reason": self.reason,
        }


@dataclass
class LifecycleSweepResult:
    """Counts from one sweep (ready pass, then blocked pass)."""
    promoted_ready: int = 0
    promoted_blocked: int = 0
    records: List[TransitionRecord] = field(default_factory=list)

    @property
    def total_moved(self) -> int:
        return self.promoted_ready + self.promoted_blocked


class LifecycleEngine:
    """
    Engine for GTD status transitions.

    Holds no reference to any task collection between calls; only the
    ledger of transition records persists on the instance.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config: LifecycleConfig = (config or EngineConfig()).lifecycle
        self.ledger: List[TransitionRecord] = []

    # -------------------------------------------------------------------------
    # Scans
    # -------------------------------------------------------------------------

    def promote_blocked(self, tasks: List[Task], now: Optional[datetime] = None) -> int:
        """
        Move next/someday tasks with open prerequisites to waiting.

        Inbox tasks (not triaged yet) and waiting/completed tasks are left
        alone. Returns the number of tasks moved.
        """
        now = now or datetime.utcnow()
        index = index_tasks(tasks)
        moved = 0

        for task in tasks:
            if task.is_done or task.status not in TaskStatus.actionable_states():
                continue
            if dependencies_met(task, index):
                continue
            self._apply(
                task,
                TaskStatus.WAITING,
                TransitionTrigger.DEPENDENCIES_UNMET,
                now,
                actor="system",
                reason=f"Waiting for {len(task.waiting_for_task_ids)} task(s)"
            )
            moved += 1

        if moved:
            logger.info(f"Moved {moved} blocked task(s) to waiting")
        return moved

    def promote_ready(self, tasks: List[Task], now: datetime) -> int:
        """
        Move waiting tasks whose block has cleared back to next.

        Per task, in collection order:
        (a) prerequisites recorded -> promote once all are complete
        (b) else defer date set    -> promote once it has arrived
        (c) else generic waiting   -> promote (unless held, see config)
        """
        index = index_tasks(tasks)
        moved = 0

        for task in tasks:
            if task.is_done or task.status != TaskStatus.WAITING:
                continue

            trigger: Optional[TransitionTrigger] = None
            if task.waiting_for_task_ids:
                if dependencies_met(task, index):
                    trigger = TransitionTrigger.DEPENDENCIES_MET
            elif task.defer_date is not None:
                if is_available(task, now):
                    trigger = TransitionTrigger.DEFER_DATE_REACHED
            elif not (self.config.hold_described_waiting and task.waiting_for_description.strip()):
                trigger = TransitionTrigger.GENERIC_WAITING_RELEASED

            if trigger is None:
                continue

            task.waiting_for_task_ids = []
            task.waiting_for_description = ""
            self._apply(task, TaskStatus.NEXT, trigger, now, actor="system")
            moved += 1

        if moved:
            logger.info(f"Moved {moved} waiting task(s) to next")
        return moved

    def sweep(self, tasks: List[Task], now: datetime) -> LifecycleSweepResult:
        """Run promote_ready then promote_blocked over the collection."""
        ledger_start = len(self.ledger)
        result = LifecycleSweepResult()
        result.promoted_ready = self.promote_ready(tasks, now)
        result.promoted_blocked = self.promote_blocked(tasks, now)
        result.records = self.ledger[ledger_start:]
        return result

    # -------------------------------------------------------------------------
    # Manual Transitions
    # -------------------------------------------------------------------------

    def can_transition(
        self,
        current_status: TaskStatus,
        target_status: TaskStatus
    ) -> Tuple[bool, str]:
        """Check if a status transition is valid."""
        valid_targets = VALID_TRANSITIONS.get(current_status, [])
        if target_status in valid_targets:
            return True, f"Transition {current_status.value} -> {target_status.value} allowed"
        return False, f"Invalid transition: {current_status.value} -> {target_status.value}. Valid targets: {[t.value for t in valid_targets]}"

    def transition(
        self,
        task: Task,
        target_status: TaskStatus,
        now: datetime,
        actor: str = "user",
        reason: str = ""
    ) -> Tuple[bool, str]:
        """
        Move a single task to a new status (triage, complete, reopen).

        Returns (success, message)
        """
        target_status = TaskStatus(target_status)
        current = TaskStatus.COMPLETED if task.is_done else task.status

        if current == target_status:
            return False, f"Task {task.id} already in {target_status.value}"

        can_do, message = self.can_transition(current, target_status)
        if not can_do:
            return False, message

        if target_status == TaskStatus.COMPLETED:
            trigger = TransitionTrigger.COMPLETED
        elif current == TaskStatus.COMPLETED:
            trigger = TransitionTrigger.REOPENED
        else:
            trigger = TransitionTrigger.MANUAL

        self._apply(task, target_status, trigger, now, actor=actor, reason=reason)
        return True, f"Transitioned to {target_status.value}"

    def transition_or_raise(
        self,
        task: Task,
        target_status: TaskStatus,
        now: datetime,
        actor: str = "user",
        reason: str = ""
    ) -> None:
        """Like transition(), but raises InvalidTransitionError on refusal."""
        success, message = self.transition(task, target_status, now, actor=actor, reason=reason)
        if not success:
            raise InvalidTransitionError(
                task_id=task.id,
                from_status=task.status.value,
                to_status=TaskStatus(target_status).value,
                message=message
            )

    def complete_task(self, task: Task, tasks: List[Task], now: datetime, actor: str = "user") -> int:
        """
        Complete a task and release any dependents it was blocking.

        Returns the number of waiting tasks promoted as a result.
        """
        success, message = self.transition(task, TaskStatus.COMPLETED, now, actor=actor)
        if not success:
            logger.debug(f"complete_task skipped for {task.id}: {message}")
            return 0
        return self.promote_ready(tasks, now)

    # -------------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------------

    def _apply(
        self,
        task: Task,
        target_status: TaskStatus,
        trigger: TransitionTrigger,
        now: datetime,
        actor: str,
        reason: str = ""
    ) -> None:
        """Assign the new status and record it."""
        old_status = TaskStatus.COMPLETED if task.is_done else task.status

        if target_status == TaskStatus.COMPLETED:
            task.mark_complete(now)
        elif task.is_done:
            task.mark_incomplete(now)
            task.status = target_status
        else:
            task.status = target_status
            task.updated_at = now

        record = TransitionRecord(
            record_id=f"trn-{uuid.uuid4().hex[:12]}",
            task_id=task.id,
            from_status=old_status,
            to_status=target_status,
            trigger=trigger,
            actor=actor,
            at=now,
            reason=reason
        )
        self.ledger.append(record)
        if len(self.ledger) > self.config.ledger_limit:
            del self.ledger[:len(self.ledger) - self.config.ledger_limit]

        logger.debug(f"Status transition: {task.id}: {old_status.value} -> {target_status.value} ({trigger.value})")

    def get_ledger_entries(
        self,
        task_id: Optional[str] = None,
        limit: int = 100
    ) -> List[TransitionRecord]:
        """Get recent ledger entries, optionally for one task."""
        entries = self.ledger
        if task_id:
            entries = [e for e in entries if e.task_id == task_id]
        return entries[-limit:]


# -----------------------------------------------------------------------------
# Singleton Instance
# -----------------------------------------------------------------------------

_engine_instance: Optional[LifecycleEngine] = None


def get_lifecycle_engine() -> LifecycleEngine:
    """Get or create the lifecycle engine singleton."""
    global _engine_instance
    if _engine_instance is None:
        _engine_instance = LifecycleEngine()
    return _engine_instance


def promote_blocked(tasks: List[Task], now: Optional[datetime] = None) -> int:
    """Demote blocked actionable tasks using the default engine."""
    return get_lifecycle_engine().promote_blocked(tasks, now)


def promote_ready(tasks: List[Task], now: datetime) -> int:
    """Release ready waiting tasks using the default engine."""
    return get_lifecycle_engine().promote_ready(tasks, now)
