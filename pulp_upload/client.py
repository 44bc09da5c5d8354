"""Pulp client wrapper for publishing ostree commits."""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

from .errors import PulpError, RemoteError
from .transport import PulpApi, PulpApiProtocol, read_body
from .types import Credentials, PulpClientOptions, TaskProgress, TaskState

logger = logging.getLogger(__name__)

# Commit archives produced by our pipeline always use this repository name.
COMMIT_REPOSITORY_NAME = "repo"


def _remote_error(operation: str, exc: requests.RequestException) -> RemoteError:
    response = exc.response
    return RemoteError(
        operation,
        str(exc),
        read_body(response),
        status_code=response.status_code if response is not None else None,
    )


def _href(payload: dict[str, Any], key: str, operation: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise RemoteError(operation, f"response is missing {key!r}")
    return value


class PulpClient:
    """Single-call wrappers around the Pulp ostree workflow.

    Every method issues one blocking request. Import and distribute only start
    server tasks; callers poll :meth:`task_state` (or :meth:`task_progress`)
    with their own backoff until the task is final.
    """

    def __init__(
        self,
        server_url: str,
        credentials: Credentials | None = None,
        *,
        options: PulpClientOptions | None = None,
        api: PulpApiProtocol | None = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.options = options or PulpClientOptions()
        self.api: PulpApiProtocol = (
            api if api is not None else PulpApi(self.server_url, credentials, self.options)
        )

    def __enter__(self) -> "PulpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.api.close()

    def upload_file(self, path: str | os.PathLike[str]) -> str:
        """Upload the file at ``path`` and return the href of the new artifact.

        ``OSError`` from opening or reading the file propagates unchanged.
        """
        with open(path, "rb") as fp:
            logger.debug("uploading artifact path=%s", path)
            try:
                result = self.api.artifacts.create(fp, os.path.basename(os.fspath(path)))
            except requests.RequestException as exc:
                raise _remote_error(f"failed to upload file {os.fspath(path)!r}", exc) from exc
        return _href(result, "pulp_href", "artifact upload failed")

    def list_ostree_repositories(self) -> dict[str, str]:
        """Return a mapping of repository name to href for all ostree repositories."""
        operation = "repository list request returned an error"
        repos: dict[str, str] = {}
        seen_pages: set[str] = set()
        try:
            page = self.api.repositories_ostree.list()
            while True:
                for repo in page.get("results") or []:
                    repos[str(repo["name"])] = str(repo["pulp_href"])
                next_url = page.get("next")
                if not next_url:
                    break
                if next_url in seen_pages:
                    raise RemoteError(operation, f"pagination loops back to {next_url}")
                seen_pages.add(next_url)
                page = self.api.repositories_ostree.next_page(next_url)
        except requests.RequestException as exc:
            raise _remote_error(operation, exc) from exc
        except (KeyError, TypeError) as exc:
            raise RemoteError(operation, f"malformed repository entry: {exc}") from exc
        logger.debug("listed ostree repositories count=%s", len(repos))
        return repos

    def create_ostree_repository(self, name: str, description: str = "") -> str:
        """Create an ostree repository and return its href.

        An empty ``description`` is left out of the request entirely.
        """
        body: dict[str, Any] = {"name": name}
        if description:
            body["description"] = description
        try:
            result = self.api.repositories_ostree.create(body)
        except requests.RequestException as exc:
            raise _remote_error("repository creation failed", exc) from exc
        href = _href(result, "pulp_href", "repository creation failed")
        logger.debug("created ostree repository name=%s href=%s", name, href)
        return href

    def import_commit(self, commit_href: str, repo_href: str) -> str:
        """Import an uploaded commit tarball into a repository.

        The import runs as a server task; the returned value is the task href.
        """
        body = {"artifact": commit_href, "repository_name": COMMIT_REPOSITORY_NAME}
        try:
            result = self.api.repositories_ostree.import_all(repo_href, body)
        except requests.RequestException as exc:
            raise _remote_error("ostree commit import failed", exc) from exc
        return _href(result, "task", "ostree commit import failed")

    def distribute_ostree_repository(self, base_path: str, name: str, repo_href: str) -> str:
        """Make a repository available for download under ``base_path``.

        Asynchronous like :meth:`import_commit`; returns the task href.
        """
        body = {"base_path": base_path, "name": name, "repository": repo_href}
        try:
            result = self.api.distributions_ostree.create(body)
        except requests.RequestException as exc:
            raise _remote_error("error distributing ostree repository", exc) from exc
        return _href(result, "task", "error distributing ostree repository")

    def task_state(self, task_href: str) -> TaskState:
        try:
            result = self.api.tasks.read(task_href)
        except requests.RequestException as exc:
            raise _remote_error(f"error reading task {task_href}", exc) from exc
        return TaskState.parse(result.get("state"), task_href=task_href)

    def task_waiting_or_running(self, task_href: str) -> bool:
        """Return True while the task is waiting or running.

        Query errors are logged and reported as False, so a failed lookup reads
        the same as a finished task. Use :meth:`task_progress` or
        :meth:`task_state` when the difference matters.
        """
        try:
            state = self.task_state(task_href)
        except PulpError as exc:
            logger.error("failed to get task state: %s", exc)
            return False
        return state.is_waiting_or_running

    def task_progress(self, task_href: str) -> TaskProgress:
        """Three-valued variant of :meth:`task_waiting_or_running`.

        ``FINISHED`` only for final states, so a task still ``canceling`` reads
        as in progress. Lookup errors are logged and reported as ``QUERY_FAILED``.
        """
        try:
            state = self.task_state(task_href)
        except PulpError as exc:
            logger.error("failed to get task state: %s", exc)
            return TaskProgress.QUERY_FAILED
        if state.is_final:
            return TaskProgress.FINISHED
        return TaskProgress.WAITING_OR_RUNNING
