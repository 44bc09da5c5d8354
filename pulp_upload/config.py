from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .client import PulpClient
from .types import Credentials, PulpClientOptions

CONFIG_FILENAME = "pulp.yml"
ENV_URL = "PULP_URL"
ENV_USERNAME = "PULP_USERNAME"
ENV_PASSWORD = "PULP_PASSWORD"


def _ensure_mapping(data: Any) -> Mapping[str, Any]:
    if isinstance(data, Mapping):
        return data
    raise ValueError("expected mapping for pulp configuration")


def _resolve_env_value(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        env_name = value[2:-1].strip()
        if env_name:
            return os.getenv(env_name, "")
    return value


def _to_optional_str(value: Any) -> str | None:
    value = _resolve_env_value(value)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_float(value: Any, default: float) -> float:
    value = _resolve_env_value(value)
    if value is None or value == "":
        return default
    return float(value)


def _to_bool(value: Any, default: bool) -> bool:
    value = _resolve_env_value(value)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"expected a boolean value, got {value!r}")
    return bool(value)


@dataclass(frozen=True)
class PulpSettings:
    server_url: str
    credentials: Credentials | None = None
    options: PulpClientOptions = field(default_factory=PulpClientOptions)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PulpSettings":
        raw = _ensure_mapping(data)
        server_url = _to_optional_str(raw.get("server_url", raw.get("url")))
        if not server_url:
            raise ValueError("pulp configuration requires server_url")

        username = _to_optional_str(raw.get("username"))
        password = _to_optional_str(raw.get("password"))
        credentials = Credentials(username, password) if username and password else None

        defaults = PulpClientOptions()
        options = PulpClientOptions(
            api_root=_to_optional_str(raw.get("api_root")) or defaults.api_root,
            timeout_seconds=_to_float(raw.get("timeout_seconds"), defaults.timeout_seconds),
            upload_timeout_seconds=_to_float(
                raw.get("upload_timeout_seconds"), defaults.upload_timeout_seconds
            ),
            verify_tls=_to_bool(raw.get("verify_tls"), defaults.verify_tls),
        )
        return cls(server_url=server_url.rstrip("/"), credentials=credentials, options=options)

    @classmethod
    def from_env(cls) -> "PulpSettings":
        return cls.from_dict(
            {
                "server_url": os.getenv(ENV_URL),
                "username": os.getenv(ENV_USERNAME),
                "password": os.getenv(ENV_PASSWORD),
            }
        )

    def build_client(self) -> PulpClient:
        return PulpClient(self.server_url, self.credentials, options=self.options)


def load_settings(path: Path | str | None = None) -> PulpSettings:
    """Load settings from a YAML file, falling back to ``PULP_*`` env vars.

    An explicit ``path`` must exist. Without one, ``pulp.yml`` in the current
    directory is used when present.
    """
    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(str(config_path))
    else:
        config_path = Path(CONFIG_FILENAME)
        if not config_path.exists():
            return PulpSettings.from_env()
    raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    return PulpSettings.from_dict(raw)
