# =============================================================================
# TESTES - Config Module
# =============================================================================
# Testes unitários para configuração via variáveis de ambiente
# =============================================================================

import os
from unittest.mock import patch

import pytest


class TestLoadSettings:
    """Testes para load_settings."""

    def test_defaults(self, clean_env):
        """Verifica valores padrão sem variáveis de ambiente."""
        from quiz_engine.config import load_settings

        settings = load_settings()

        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert settings.warning_seconds == 300
        assert settings.critical_seconds == 60
        assert settings.expiry_notice_seconds == 2.0
        assert settings.tick_interval == 1.0
        assert settings.is_test is False

    def test_custom_values(self):
        """Verifica valores customizados via env vars."""
        from quiz_engine.config import load_settings

        env_vars = {
            "ENVIRONMENT": "Test",
            "LOG_LEVEL": "debug",
            "QUIZ_WARNING_SECONDS": "120",
            "QUIZ_CRITICAL_SECONDS": "30",
            "QUIZ_EXPIRY_NOTICE_SECONDS": "0.5",
            "QUIZ_TICK_INTERVAL": "0.25",
        }
        with patch.dict(os.environ, env_vars):
            settings = load_settings()

        assert settings.is_test is True
        assert settings.log_level == "DEBUG"
        assert settings.warning_seconds == 120
        assert settings.critical_seconds == 30
        assert settings.expiry_notice_seconds == 0.5
        assert settings.tick_interval == 0.25

    @pytest.mark.parametrize(
        "env_vars",
        [
            {"LOG_LEVEL": "VERBOSE"},
            {"QUIZ_WARNING_SECONDS": "cinco"},
            {"QUIZ_CRITICAL_SECONDS": "-1"},
            {"QUIZ_TICK_INTERVAL": "0"},
            {"QUIZ_WARNING_SECONDS": "30", "QUIZ_CRITICAL_SECONDS": "60"},
        ],
    )
    def test_invalid_values(self, env_vars):
        """Valores inválidos falham cedo com ValueError."""
        from quiz_engine.config import load_settings

        with patch.dict(os.environ, env_vars):
            with pytest.raises(ValueError):
                load_settings()

    def test_settings_are_frozen(self):
        from dataclasses import FrozenInstanceError

        from quiz_engine.config import load_settings

        settings = load_settings()

        with pytest.raises(FrozenInstanceError):
            settings.warning_seconds = 10


class TestConfigureLogging:
    def test_sets_package_level(self):
        import logging

        from quiz_engine.config import configure_logging, load_settings

        package_logger = logging.getLogger("quiz_engine")
        previous = package_logger.level
        try:
            with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
                configure_logging(load_settings())

            assert package_logger.level == logging.WARNING
        finally:
            package_logger.setLevel(previous)
