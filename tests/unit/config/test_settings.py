"""Unit tests for Settings and the cached configuration accessors."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from lianxin.config import (
    ConfigNotFoundError,
    configure_logging,
    get_database_config,
    get_database_configs,
    get_settings,
    reload,
)
from lianxin.config.models import Environment, ServiceKey
from lianxin.config.settings import Settings
from lianxin.observability.logging import REDACTED, get_logger


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Point the dotenv lookup at an empty temp directory."""
    monkeypatch.setenv("LIANXIN_ENV_FILE", str(tmp_path / ".env"))
    for name in ("LIANXIN_ENVIRONMENT", "DB_HOST", "DB_PORT", "DB_POOL_MAX", "DB_NAME_TEST"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    """Tests for Settings model."""

    def test_default_values(self, isolated_env: pytest.MonkeyPatch) -> None:
        """Settings has sensible defaults."""
        settings = Settings()
        assert settings.app_name == "lianxin"
        assert settings.environment is Environment.DEVELOPMENT
        assert settings.log_level == "INFO"
        assert settings.redact_secrets is True

    def test_environment_override(self, isolated_env: pytest.MonkeyPatch) -> None:
        """LIANXIN_ENVIRONMENT selects the tier."""
        isolated_env.setenv("LIANXIN_ENVIRONMENT", "production")
        assert Settings().environment is Environment.PRODUCTION

    def test_settings_cached(self, isolated_env: pytest.MonkeyPatch) -> None:
        """get_settings returns cached instance."""
        assert get_settings() is get_settings()


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_applies_settings(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Level, format, redaction and app name come from settings."""
        configure_logging(
            Settings(app_name="user-service", log_level="WARNING", log_format="json")
        )
        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("connecting", password="hunter2")

        lines = capsys.readouterr().err.strip().splitlines()
        assert len(lines) == 1
        event = json.loads(lines[0])
        assert event["event"] == "connecting"
        assert event["app"] == "user-service"
        assert event["password"] == REDACTED

    def test_redaction_can_be_disabled(self, capsys: pytest.CaptureFixture[str]) -> None:
        """LIANXIN_REDACT_SECRETS=false leaves values as they are."""
        configure_logging(Settings(redact_secrets=False, log_format="json"))
        get_logger("test").info("connecting", password="hunter2")

        assert json.loads(capsys.readouterr().err.strip())["password"] == "hunter2"

    def test_defaults_to_cached_settings(
        self, isolated_env: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Without an argument the process settings are used."""
        isolated_env.setenv("LIANXIN_APP_NAME", "media-service")
        configure_logging()
        get_logger("test").info("ready")

        assert json.loads(capsys.readouterr().err.strip())["app"] == "media-service"


class TestGetDatabaseConfigs:
    """Tests for the process-wide cached mapping."""

    def test_cached_for_process(self, isolated_env: pytest.MonkeyPatch) -> None:
        """Later environment changes are not observed without reload."""
        isolated_env.setenv("DB_HOST", "first")
        configs = get_database_configs()
        isolated_env.setenv("DB_HOST", "second")

        assert get_database_configs() is configs
        assert get_database_configs().production[ServiceKey.USER].host == "first"

    def test_reload_picks_up_changes(self, isolated_env: pytest.MonkeyPatch) -> None:
        """reload() takes a fresh snapshot."""
        isolated_env.setenv("DB_HOST", "first")
        get_database_configs()
        isolated_env.setenv("DB_HOST", "second")

        assert reload().production[ServiceKey.USER].host == "second"

    def test_shared_mapping_is_read_only(self, isolated_env: pytest.MonkeyPatch) -> None:
        """Callers cannot swap records in the process-wide mapping."""
        configs = get_database_configs()
        with pytest.raises(TypeError):
            configs.development[ServiceKey.USER] = configs.test  # type: ignore[index]

        assert get_database_configs().development[ServiceKey.USER] is not configs.test

    def test_reads_dotenv_file(
        self, isolated_env: pytest.MonkeyPatch, write_env_file: Callable[[str], Path]
    ) -> None:
        """Values from the dotenv file feed the resolver."""
        env_file = write_env_file("DB_NAME_TEST=from_dotenv\nDB_POOL_MAX=25\n")
        isolated_env.setenv("LIANXIN_ENV_FILE", str(env_file))

        configs = get_database_configs()
        assert configs.test.database == "from_dotenv"
        assert configs.test.pool.max == 25


class TestGetDatabaseConfig:
    """Tests for get_database_config lookups."""

    def test_uses_configured_environment(self, isolated_env: pytest.MonkeyPatch) -> None:
        """Omitted environment falls back to LIANXIN_ENVIRONMENT."""
        isolated_env.setenv("LIANXIN_ENVIRONMENT", "production")
        config = get_database_config("userServiceDB")
        assert config.pool.min == 5
        assert config.retry.max == 5

    def test_explicit_environment(self, isolated_env: pytest.MonkeyPatch) -> None:
        """An explicit environment wins over settings."""
        config = get_database_config(ServiceKey.MEDIA, environment="development")
        assert config.pool.min == 3

    def test_test_environment_needs_no_service(self, isolated_env: pytest.MonkeyPatch) -> None:
        """Test returns the flat record."""
        config = get_database_config(environment="test")
        assert config.database == "lianxin"
        assert config is get_database_configs().test

    def test_unknown_service(self, isolated_env: pytest.MonkeyPatch) -> None:
        """Unknown service keys raise ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError, match="paymentServiceDB"):
            get_database_config("paymentServiceDB", environment="production")

    def test_missing_service(self, isolated_env: pytest.MonkeyPatch) -> None:
        """Per-service environments need a service key."""
        with pytest.raises(ConfigNotFoundError):
            get_database_config(environment="development")
