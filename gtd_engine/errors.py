"""
Engine Errors

Structured exceptions raised by the explicit edit helpers and the
configuration loader. Scans and scoring never raise: missing data means
"no constraint" there.
"""

from typing import Any, Dict, List, Optional


# -----------------------------------------------------------------------------
# Base Error
# -----------------------------------------------------------------------------
class GTDError(Exception):
    """Base engine error with structured details."""
    def __init__(self, code: str, message: str, details: Dict[str, Any] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class TaskNotFoundError(GTDError):
    def __init__(self, task_id: str):
        super().__init__(
            code="TASK_NOT_FOUND",
            message=f"Task '{task_id}' not found",
            details={"task_id": task_id}
        )


class DependencyCycleError(GTDError):
    def __init__(self, dependent_id: str, prerequisite_id: str, path: Optional[List[str]] = None):
        super().__init__(
            code="DEPENDENCY_CYCLE",
            message=f"Task '{dependent_id}' cannot wait for '{prerequisite_id}': circular dependency",
            details={
                "dependent_id": dependent_id,
                "prerequisite_id": prerequisite_id,
                "path": path or [],
            }
        )


class InvalidTransitionError(GTDError):
    def __init__(self, task_id: str, from_status: str, to_status: str, message: str):
        super().__init__(
            code="INVALID_TRANSITION",
            message=message,
            details={
                "task_id": task_id,
                "from_status": from_status,
                "to_status": to_status,
            }
        )


class ConfigError(GTDError):
    def __init__(self, source: str, errors: List[str]):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Invalid engine configuration in {source}",
            details={"source": source, "errors": errors}
        )
