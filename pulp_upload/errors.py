"""Errors raised by the Pulp client."""

from __future__ import annotations


class PulpError(Exception):
    """Base error for Pulp client failures."""


class RemoteError(PulpError):
    """A Pulp request failed in transport or was rejected by the server."""

    def __init__(
        self,
        operation: str,
        message: str,
        response_body: str = "",
        *,
        status_code: int | None = None,
    ) -> None:
        self.operation = operation
        self.underlying_message = message
        self.response_body = response_body
        self.status_code = status_code
        super().__init__(f"{operation}: {message} ({response_body})")


class EmptyStateError(PulpError):
    """A task came back without a usable state."""

    def __init__(self, task_href: str, state: str = "") -> None:
        self.task_href = task_href
        self.state = state
        if state:
            message = f"got unrecognized task state {state!r} for {task_href}"
        else:
            message = f"got empty task state for {task_href}"
        super().__init__(message)
