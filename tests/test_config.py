"""Tests for client config and logging setup."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from execforge.config import ClientConfig
from execforge.logging import CredentialRedactingFilter


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig()
        assert config.domain == "https://secure.gooddata.com"
        assert config.password is None
        assert config.max_poll_attempts == 60

    def test_domain_is_normalized(self):
        """Scheme is added and trailing slashes dropped."""
        assert ClientConfig(domain="example.gooddata.test/").domain == (
            "https://example.gooddata.test"
        )
        assert ClientConfig(domain="http://localhost:8443").domain == "http://localhost:8443"

    def test_password_not_in_repr(self):
        config = ClientConfig(username="me@example.com", password="hunter2")
        assert "hunter2" not in repr(config)
        assert config.password.get_secret_value() == "hunter2"

    def test_invalid_poll_attempts(self):
        with pytest.raises(ValidationError):
            ClientConfig(max_poll_attempts=0)

    def test_from_yaml(self, tmp_path: Path):
        path = tmp_path / "execforge.yaml"
        path.write_text(
            "domain: https://example.gooddata.test\n"
            "username: me@example.com\n"
            "password: hunter2\n"
            "project_id: GoodSalesDemo\n"
            "poll_interval: 0.5\n"
        )

        config = ClientConfig.from_yaml(path)
        assert config.project_id == "GoodSalesDemo"
        assert config.poll_interval == 0.5

    def test_from_empty_yaml(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ClientConfig.from_yaml(path) == ClientConfig()

    def test_from_missing_yaml(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ClientConfig.from_yaml(tmp_path / "nope.yaml")

    def test_from_yaml_list_raises(self, tmp_path: Path):
        path = tmp_path / "list.yaml"
        path.write_text("- domain\n")
        with pytest.raises(ValueError, match="must contain a mapping"):
            ClientConfig.from_yaml(path)

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch):
        """EXECFORGE_* variables map onto config fields."""
        monkeypatch.setenv("EXECFORGE_DOMAIN", "example.gooddata.test")
        monkeypatch.setenv("EXECFORGE_USERNAME", "me@example.com")
        monkeypatch.setenv("EXECFORGE_PASSWORD", "hunter2")
        monkeypatch.setenv("EXECFORGE_PROJECT_ID", "GoodSalesDemo")
        monkeypatch.setenv("EXECFORGE_MAX_POLL_ATTEMPTS", "5")
        monkeypatch.setenv("PROJECT_ID", "unprefixed")

        config = ClientConfig.from_env()

        assert config.domain == "https://example.gooddata.test"
        assert config.username == "me@example.com"
        assert config.password.get_secret_value() == "hunter2"
        assert config.project_id == "GoodSalesDemo"
        assert config.max_poll_attempts == 5

    def test_from_env_ignores_empty_values(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("EXECFORGE_PROJECT_ID", "")
        assert ClientConfig.from_env().project_id is None

    def test_explicit_values_win_over_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("EXECFORGE_PROJECT_ID", "FromEnv")
        assert ClientConfig(project_id="Explicit").project_id == "Explicit"

    def test_yaml_falls_back_to_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Values missing from the file come from the environment."""
        monkeypatch.setenv("EXECFORGE_PASSWORD", "hunter2")
        monkeypatch.setenv("EXECFORGE_PROJECT_ID", "FromEnv")
        path = tmp_path / "execforge.yaml"
        path.write_text("project_id: GoodSalesDemo\n")

        config = ClientConfig.from_yaml(path)

        assert config.project_id == "GoodSalesDemo"
        assert config.password.get_secret_value() == "hunter2"

    def test_from_yaml_ignores_unknown_keys(self, tmp_path: Path):
        path = tmp_path / "execforge.yaml"
        path.write_text("project_id: GoodSalesDemo\ncolor: blue\n")
        assert ClientConfig.from_yaml(path).project_id == "GoodSalesDemo"


class TestCredentialRedactingFilter:
    def _record(self, msg: str, *args) -> logging.LogRecord:
        return logging.LogRecord("execforge", logging.DEBUG, __file__, 1, msg, args, None)

    def test_redacts_json_password(self):
        record = self._record('{"login": "me", "password": "hunter2"}')
        CredentialRedactingFilter().filter(record)
        assert "hunter2" not in record.getMessage()
        assert '"password": "[REDACTED]"' in record.getMessage()

    def test_redacts_session_cookies(self):
        """Auth cookies in args are redacted too."""
        record = self._record("Cookie: %s", "GDCAuthSST=abc123; GDCAuthTT=def456")
        CredentialRedactingFilter().filter(record)
        message = record.getMessage()
        assert "abc123" not in message
        assert "def456" not in message

    def test_redacts_auth_header(self):
        record = self._record("X-GDC-AuthTT: secrettoken")
        CredentialRedactingFilter().filter(record)
        assert record.getMessage() == "X-GDC-AuthTT: [REDACTED]"

    def test_leaves_other_messages_alone(self):
        record = self._record("Creating execution in %s for %d columns", "GoodSalesDemo", 3)
        CredentialRedactingFilter().filter(record)
        assert record.getMessage() == "Creating execution in GoodSalesDemo for 3 columns"
