"""
Logging Configuration for Bio Storefront

Every event goes through structlog and out of a single stdout handler.
Events are stamped with the service name and deployment environment so
log lines from several storefront instances can share one sink.
"""

import logging
import sys
from typing import Any, Callable, Dict, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import ProcessorFormatter, add_log_level

from bio_storefront.config.settings import Settings, get_settings

# Third-party loggers whose records are re-rendered by our handler
ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine")


def service_context(service: str, environment: str) -> Callable[[Any, str, Dict[str, Any]], Dict[str, Any]]:
    """Processor that stamps ``service`` and ``environment`` on each event"""

    def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_service_context


def _renderer(settings: Settings):
    if settings.monitoring.log_format == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: Optional[str] = None, settings: Optional[Settings] = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    SQL statement logging stays at WARNING unless ``POSTGRES_ECHO`` is on.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        settings: Settings to read; defaults to the cached process settings
    """
    settings = settings or get_settings()
    level = (log_level or settings.monitoring.log_level).upper()
    numeric_level = getattr(logging, level, logging.INFO)

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        service_context(settings.app_name, settings.app_env),
        TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=pre_chain + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processor=_renderer(settings), foreign_pre_chain=pre_chain))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    for name in ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers = []
        routed.propagate = True

    sql_level = logging.INFO if settings.database.echo else logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level,
        format=settings.monitoring.log_format,
    )
