"""Narrow HTTP binding for the Pulp REST endpoints used by the client.

Only the calls :class:`pulp_upload.client.PulpClient` makes are bound here.
Each method issues a single request, raises ``requests.HTTPError`` for non-2xx
responses and returns the decoded JSON document.
"""

from __future__ import annotations

import logging
import os
from typing import IO, Any, Mapping, Protocol, runtime_checkable

import requests

from .types import Credentials, PulpClientOptions

logger = logging.getLogger(__name__)


@runtime_checkable
class ArtifactsProtocol(Protocol):
    def create(self, fp: IO[bytes], filename: str | None = None) -> dict[str, Any]:
        ...


@runtime_checkable
class OstreeRepositoriesProtocol(Protocol):
    def list(self) -> dict[str, Any]:
        ...

    def next_page(self, url: str) -> dict[str, Any]:
        ...

    def create(self, body: Mapping[str, Any]) -> dict[str, Any]:
        ...

    def import_all(self, repo_href: str, body: Mapping[str, Any]) -> dict[str, Any]:
        ...


@runtime_checkable
class OstreeDistributionsProtocol(Protocol):
    def create(self, body: Mapping[str, Any]) -> dict[str, Any]:
        ...


@runtime_checkable
class TasksProtocol(Protocol):
    def read(self, task_href: str) -> dict[str, Any]:
        ...


@runtime_checkable
class PulpApiProtocol(Protocol):
    """The Pulp endpoints :class:`pulp_upload.client.PulpClient` depends on.

    :class:`PulpApi` is the network implementation; tests substitute doubles.
    """

    artifacts: ArtifactsProtocol
    repositories_ostree: OstreeRepositoriesProtocol
    distributions_ostree: OstreeDistributionsProtocol
    tasks: TasksProtocol

    def close(self) -> None:
        ...


def _join_path(root: str, path: str) -> str:
    root = "/" + root.strip("/")
    if root == "/":
        return "/" + path.lstrip("/")
    return f"{root}/{path.lstrip('/')}"


def read_body(response: requests.Response | None) -> str:
    """Return the body of a response as text, or ``""`` if it cannot be read.

    Used to add server detail to errors without masking the original failure.
    """
    if response is None:
        return ""
    try:
        return response.text or ""
    except (requests.RequestException, RuntimeError):
        return ""


class PulpSession:
    """A ``requests.Session`` bound to one Pulp server."""

    def __init__(
        self,
        server_url: str,
        credentials: Credentials | None = None,
        options: PulpClientOptions | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.options = options or PulpClientOptions()
        self.session = session or requests.Session()
        self.session.verify = self.options.verify_tls
        self.session.headers.setdefault("Accept", "application/json")
        if credentials is not None:
            self.session.auth = (credentials.username, credentials.password)

    def api_path(self, path: str) -> str:
        return _join_path(self.options.api_root, path)

    def request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        return self.request_url(method, f"{self.server_url}{path}", **kwargs)

    def request_url(
        self,
        method: str,
        url: str,
        *,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        logger.debug("pulp request method=%s url=%s", method, url)
        response = self.session.request(
            method,
            url,
            timeout=timeout if timeout is not None else self.options.timeout_seconds,
            **kwargs,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise requests.JSONDecodeError(
                "expected a JSON object from pulp", read_body(response), 0, response=response
            )
        return payload

    def close(self) -> None:
        self.session.close()


class ArtifactsApi:
    def __init__(self, session: PulpSession) -> None:
        self._session = session

    def create(self, fp: IO[bytes], filename: str | None = None) -> dict[str, Any]:
        """Upload ``fp`` as the multipart ``file`` field in a single request.

        ``requests`` encodes the whole multipart body before sending, so the
        file is held in memory for the duration of the upload.
        """
        name = filename or os.path.basename(getattr(fp, "name", "") or "upload")
        return self._session.request(
            "POST",
            self._session.api_path("artifacts/"),
            files={"file": (name, fp, "application/octet-stream")},
            timeout=self._session.options.upload_timeout_seconds,
        )


class OstreeRepositoriesApi:
    def __init__(self, session: PulpSession) -> None:
        self._session = session

    @property
    def _collection(self) -> str:
        return self._session.api_path("repositories/ostree/ostree/")

    def list(self) -> dict[str, Any]:
        return self._session.request("GET", self._collection)

    def next_page(self, url: str) -> dict[str, Any]:
        return self._session.request_url("GET", url)

    def create(self, body: Mapping[str, Any]) -> dict[str, Any]:
        return self._session.request("POST", self._collection, json=dict(body))

    def import_all(self, repo_href: str, body: Mapping[str, Any]) -> dict[str, Any]:
        return self._session.request("POST", f"{repo_href}import_all/", json=dict(body))


class OstreeDistributionsApi:
    def __init__(self, session: PulpSession) -> None:
        self._session = session

    def create(self, body: Mapping[str, Any]) -> dict[str, Any]:
        return self._session.request(
            "POST",
            self._session.api_path("distributions/ostree/ostree/"),
            json=dict(body),
        )


class TasksApi:
    def __init__(self, session: PulpSession) -> None:
        self._session = session

    def read(self, task_href: str) -> dict[str, Any]:
        return self._session.request("GET", task_href)


class PulpApi:
    """Resource sub-clients sharing one authenticated session."""

    def __init__(
        self,
        server_url: str,
        credentials: Credentials | None = None,
        options: PulpClientOptions | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.session = PulpSession(server_url, credentials, options, session)
        self.artifacts = ArtifactsApi(self.session)
        self.repositories_ostree = OstreeRepositoriesApi(self.session)
        self.distributions_ostree = OstreeDistributionsApi(self.session)
        self.tasks = TasksApi(self.session)

    def close(self) -> None:
        self.session.close()
