"""
Unit Tests - Logging Configuration
"""
import logging

import pytest
import structlog

from bio_storefront.config.logging import configure_logging, service_context
from bio_storefront.config.settings import DatabaseSettings, Settings


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    sql_level = logging.getLogger("sqlalchemy.engine").level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)
    structlog.reset_defaults()


class TestServiceContext:
    """Tests for the service stamp processor"""

    def test_adds_service_and_environment(self):
        """Test every event carries the deployment identity"""
        processor = service_context("bio-storefront", "staging")

        event = processor(None, "info", {"event": "Page created"})

        assert event == {"event": "Page created", "service": "bio-storefront", "environment": "staging"}

    def test_keeps_explicit_values(self):
        """Test a caller-bound environment is not overwritten"""
        processor = service_context("bio-storefront", "staging")

        event = processor(None, "info", {"event": "x", "environment": "production"})

        assert event["environment"] == "production"


class TestConfigureLogging:
    """Tests for root logger setup"""

    def test_sql_logging_quiet_by_default(self, restore_logging):
        """Test engine logs are held at WARNING"""
        configure_logging(settings=Settings(APP_ENV="testing"))

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert len(logging.getLogger().handlers) == 1

    def test_sql_logging_follows_echo(self, restore_logging):
        """Test echo turns engine logs on"""
        settings = Settings(APP_ENV="testing", database=DatabaseSettings(echo=True))

        configure_logging(log_level="debug", settings=settings)

        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
        assert logging.getLogger().level == logging.DEBUG
