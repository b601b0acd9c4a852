"""Tests unitarios para Settings y la configuración de logging."""

import logging

import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.core.logging_config import RequestContextFilter, get_logging_configuration, request_id_var


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.VARIANT_UPDATE_STRATEGY == "replace"
        assert settings.STRICT_VARIANT_LOOKUP is False
        assert settings.ENFORCE_ORDER_STATUS_TRANSITIONS is False
        assert settings.MONEY_DECIMAL_PLACES == 2

    def test_values_are_normalised(self):
        settings = Settings(LOG_LEVEL="debug", ENVIRONMENT="Production", VARIANT_UPDATE_STRATEGY="RECONCILE")

        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.is_production
        assert settings.VARIANT_UPDATE_STRATEGY == "reconcile"

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValidationError):
            Settings(VARIANT_UPDATE_STRATEGY="merge")

    def test_allowed_hosts_from_csv(self):
        settings = Settings(ALLOWED_HOSTS="admin.example.com, api.example.com")
        assert settings.ALLOWED_HOSTS == ["admin.example.com", "api.example.com"]


class TestLoggingConfiguration:
    def test_console_only_without_file(self):
        config = get_logging_configuration(Settings(LOG_FILE_PATH=None))

        assert set(config["handlers"]) == {"console"}

    def test_file_handlers(self):
        config = get_logging_configuration(Settings(LOG_FILE_PATH="logs/app.log", ENVIRONMENT="production"))

        assert config["handlers"]["error_file"]["filename"] == "logs/app_errors.log"
        assert "json_file" in config["root"]["handlers"]

    def test_request_id_filter(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
        token = request_id_var.set("abc12345")
        try:
            RequestContextFilter().filter(record)
        finally:
            request_id_var.reset(token)

        assert record.request_id == "abc12345"
