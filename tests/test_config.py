"""Tests for settings and logging setup."""

import logging

import pytest
import structlog
from pydantic import ValidationError

from py_voronoi.config import Settings, configure_logging, install_default_logging
from py_voronoi.core import Voronoi, generate, triangulate


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    structlog.reset_defaults()
    install_default_logging()


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Defaults without any environment overrides."""
        for name in ("DUPLICATE_TOLERANCE", "CLIP_MARGIN", "DEFAULT_SITE_COUNT", "STRICT_DUPLICATES"):
            monkeypatch.delenv(f"PY_VORONOI_{name}", raising=False)
        settings = Settings(_env_file=None)

        assert settings.duplicate_tolerance == 1e-9
        assert settings.clip_margin == 0.1
        assert settings.default_site_count == 20
        assert settings.strict_duplicates is False
        assert (settings.domain_min, settings.domain_max) == (-1.0, 1.0)

    def test_environment_override(self, monkeypatch):
        """Prefixed environment variables override defaults."""
        monkeypatch.setenv("PY_VORONOI_DUPLICATE_TOLERANCE", "1e-6")
        monkeypatch.setenv("PY_VORONOI_STRICT_DUPLICATES", "true")
        settings = Settings(_env_file=None)

        assert settings.duplicate_tolerance == 1e-6
        assert settings.strict_duplicates is True

    def test_rejects_negative_tolerance(self):
        """Validation catches impossible values."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, duplicate_tolerance=-1.0)


class TestLogging:
    """Test structlog configuration."""

    def test_events_reach_stdlib(self, caplog, restore_logging):
        """Engine events are routed through the standard logging module."""
        configure_logging("DEBUG", "plain")
        with caplog.at_level(logging.DEBUG):
            triangulate(generate(10, "log"))

        messages = [record.getMessage() for record in caplog.records]
        assert any("Triangulation built" in message for message in messages)

    @pytest.mark.parametrize("log_format, renderer", [
        ("json", structlog.processors.JSONRenderer),
        ("plain", structlog.dev.ConsoleRenderer),
    ])
    def test_renderer(self, log_format, renderer, restore_logging):
        """The last processor renders in the requested format."""
        configure_logging("INFO", log_format)
        assert isinstance(structlog.get_config()["processors"][-1], renderer)
        assert logging.getLogger().level == logging.INFO

    def test_quiet_without_configuration(self, capsys, restore_logging):
        """Without configure_logging, routine events print nothing."""
        structlog.reset_defaults()
        install_default_logging()
        Voronoi.random(10, "quiet").relax()

        assert capsys.readouterr().out == ""

    def test_default_does_not_override(self, restore_logging):
        """An existing structlog setup is left alone."""
        configure_logging("INFO", "json")
        install_default_logging()
        assert isinstance(structlog.get_config()["processors"][-1],
                          structlog.processors.JSONRenderer)
