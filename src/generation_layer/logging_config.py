"""Structured logging setup built on structlog.

Production emits one JSON object per line; development gets a coloured
console. Stdlib loggers (uvicorn, httpx) are routed through the same
processor chain so every line carries the request id bound by the
middleware. Provider credentials are masked before any renderer sees them.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

APP_NAME = "ui-generation-layer"

SECRET_KEY_MARKERS = ("api_key", "apikey", "token", "authorization", "secret")
MASK = "***"

# Libraries that log every request or chunk at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "multipart")


def add_app_name(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def mask_secrets(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace values of credential-looking keys with a fixed mask."""
    for key in list(event_dict):
        if any(marker in key.lower() for marker in SECRET_KEY_MARKERS):
            event_dict[key] = MASK
    return event_dict


def build_processors(json_output: bool) -> list[Processor]:
    """Processor chain shared by structlog and foreign (stdlib) records."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_name,
        mask_secrets,
    ]
    if json_output:
        processors.append(structlog.processors.format_exc_info)
    return processors


def build_renderer(json_output: bool) -> Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str = "INFO", environment: str = "development") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown values fall back to INFO)
        environment: "production" selects JSON output, anything else the console renderer
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    json_output = environment.lower() == "production"
    processors = build_processors(json_output)

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                build_renderer(json_output),
            ],
            foreign_pre_chain=processors,
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=logging.getLevelName(level),
        environment=environment,
        renderer="json" if json_output else "console",
    )
