"""Unit tests for settings validation."""
import pytest
import structlog
from pydantic import ValidationError

from classifieds.config import Settings
from classifieds.logging_config import configure_logging


class TestLogLevel:
    def test_defaults_to_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert Settings().log_level == "INFO"

    @pytest.mark.parametrize("raw", ["debug", " Warning ", "ERROR"])
    def test_level_names_are_normalised(self, raw: str) -> None:
        assert Settings(log_level=raw).log_level == raw.strip().upper()

    def test_env_variable_is_read(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "critical")
        assert Settings().log_level == "CRITICAL"

    @pytest.mark.parametrize("raw", ["verbose", "INFOO", ""])
    def test_unknown_level_fails_at_load(self, raw: str) -> None:
        with pytest.raises(ValidationError):
            Settings(log_level=raw)

    @pytest.fixture()
    def reset_structlog(self):  # type: ignore[no-untyped-def]
        yield
        structlog.reset_defaults()

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    def test_every_accepted_level_configures_logging(
        self, level: str, reset_structlog: None
    ) -> None:
        configure_logging(level, json_logs=False)  # type: ignore[arg-type]
