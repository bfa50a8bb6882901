"""Audit status state machine."""

from __future__ import annotations

from enum import Enum


class AuditStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (AuditStatus.COMPLETED, AuditStatus.FAILED)


class InvalidTransitionError(ValueError):
    """Raised when an audit is moved to a status its current status cannot reach."""

    def __init__(self, current: AuditStatus, target: AuditStatus) -> None:
        super().__init__(f"illegal audit transition {current.value} -> {target.value}")
        self.current = current
        self.target = target


_TRANSITIONS: dict[AuditStatus, frozenset[AuditStatus]] = {
    AuditStatus.QUEUED: frozenset({AuditStatus.RUNNING}),
    AuditStatus.RUNNING: frozenset({AuditStatus.COMPLETED, AuditStatus.FAILED}),
    AuditStatus.COMPLETED: frozenset(),
    AuditStatus.FAILED: frozenset(),
}


def can_advance(current: AuditStatus, target: AuditStatus) -> bool:
    return target in _TRANSITIONS[current]


def advance(current: AuditStatus, target: AuditStatus) -> AuditStatus:
    """Return *target* if the transition from *current* is legal, else raise."""
    if not can_advance(current, target):
        raise InvalidTransitionError(current, target)
    return target
