"""Pulp client datatypes and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .errors import EmptyStateError


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class PulpClientOptions:
    api_root: str = "/pulp/api/v3"
    timeout_seconds: float = 30.0
    upload_timeout_seconds: float = 300.0
    verify_tls: bool = True


class TaskState(str, Enum):
    """Lifecycle states reported by the Pulp tasking system.

    ``waiting -> running -> completed | failed | canceled``, with ``canceling``
    preceding ``canceled`` and ``skipped`` reachable straight from ``waiting``.
    """

    WAITING = "waiting"
    SKIPPED = "skipped"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"
    CANCELING = "canceling"

    @classmethod
    def parse(cls, value: object, *, task_href: str = "") -> "TaskState":
        text = str(value).strip() if value is not None else ""
        if not text:
            raise EmptyStateError(task_href)
        try:
            return cls(text)
        except ValueError as exc:
            raise EmptyStateError(task_href, state=text) from exc

    @property
    def is_final(self) -> bool:
        return self in _FINAL_STATES

    @property
    def is_waiting_or_running(self) -> bool:
        return self in (TaskState.WAITING, TaskState.RUNNING)


_FINAL_STATES = frozenset(
    {TaskState.SKIPPED, TaskState.COMPLETED, TaskState.FAILED, TaskState.CANCELED}
)


class TaskProgress(Enum):
    WAITING_OR_RUNNING = "waiting_or_running"
    FINISHED = "finished"
    QUERY_FAILED = "query_failed"
