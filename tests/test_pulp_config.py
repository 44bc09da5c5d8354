from __future__ import annotations

from pathlib import Path

import pytest

from pulp_upload import Credentials, PulpClient, PulpClientOptions, PulpSettings, load_settings


def test_load_settings_from_yaml_with_env_values(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TEST_PULP_PASSWORD", "from-env")
    config = tmp_path / "pulp.yml"
    config.write_text(
        """
server_url: https://pulp.example.com/
username: admin
password: ${TEST_PULP_PASSWORD}
api_root: /api/pulp/v3
timeout_seconds: 12
upload_timeout_seconds: "600"
verify_tls: "no"
""",
        encoding="utf-8",
    )

    settings = load_settings(config)

    assert settings.server_url == "https://pulp.example.com"
    assert settings.credentials == Credentials("admin", "from-env")
    assert settings.options == PulpClientOptions(
        api_root="/api/pulp/v3",
        timeout_seconds=12.0,
        upload_timeout_seconds=600.0,
        verify_tls=False,
    )


def test_defaults_without_optional_keys() -> None:
    settings = PulpSettings.from_dict({"url": "http://pulp.local"})
    assert settings.credentials is None
    assert settings.options == PulpClientOptions()


def test_credentials_need_username_and_password(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("UNSET_PULP_PASSWORD", raising=False)
    settings = PulpSettings.from_dict(
        {"server_url": "http://pulp.local", "username": "admin", "password": "${UNSET_PULP_PASSWORD}"}
    )
    assert settings.credentials is None


def test_missing_server_url_raises() -> None:
    with pytest.raises(ValueError, match="server_url"):
        PulpSettings.from_dict({"username": "admin"})


def test_non_mapping_config_raises() -> None:
    with pytest.raises(ValueError, match="expected mapping"):
        PulpSettings.from_dict(["http://pulp.local"])  # type: ignore[arg-type]


def test_explicit_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yml")


def test_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PULP_URL", "https://pulp.env")
    monkeypatch.setenv("PULP_USERNAME", "robot")
    monkeypatch.setenv("PULP_PASSWORD", "pw")

    settings = load_settings()

    assert settings.server_url == "https://pulp.env"
    assert settings.credentials == Credentials("robot", "pw")


def test_build_client_uses_settings() -> None:
    settings = PulpSettings.from_dict(
        {"server_url": "https://pulp.local", "username": "admin", "password": "pw", "timeout_seconds": 5}
    )
    client = settings.build_client()
    assert isinstance(client, PulpClient)
    assert client.server_url == "https://pulp.local"
    assert client.options.timeout_seconds == 5.0
    assert client.api.session.session.auth == ("admin", "pw")
    client.close()


def test_unrecognised_verify_tls_value_raises() -> None:
    with pytest.raises(ValueError, match="expected a boolean value, got 'maybe'"):
        PulpSettings.from_dict({"server_url": "https://pulp.local", "verify_tls": "maybe"})
