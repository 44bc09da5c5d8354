"""Pulp client for uploading, importing and distributing ostree commits."""

from .client import COMMIT_REPOSITORY_NAME, PulpClient
from .config import PulpSettings, load_settings
from .errors import EmptyStateError, PulpError, RemoteError
from .transport import PulpApi, PulpApiProtocol, read_body
from .types import Credentials, PulpClientOptions, TaskProgress, TaskState

__all__ = [
    "PulpClient",
    "PulpApi",
    "PulpApiProtocol",
    "PulpClientOptions",
    "PulpSettings",
    "Credentials",
    "TaskState",
    "TaskProgress",
    "PulpError",
    "RemoteError",
    "EmptyStateError",
    "COMMIT_REPOSITORY_NAME",
    "load_settings",
    "read_body",
]
