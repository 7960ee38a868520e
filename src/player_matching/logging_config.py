"""structlog-over-stdlib logging setup.

Both ``structlog.get_logger()`` and plain ``logging.getLogger(__name__)``
records are rendered by the same formatter: JSON lines in production,
the coloured console renderer during development.
"""

import logging
import sys

import structlog

from player_matching.config.settings import Settings

# Libraries whose INFO output drowns out review events
_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


def configure_logging(json_output: bool = True, log_level: str = "INFO") -> None:
    """Route structlog and stdlib logging through one handler on stdout.

    Args:
        json_output: Render JSON lines when ``True``; otherwise use
            structlog's console renderer.
        log_level: Root level name (``"DEBUG"``, ``"INFO"``, ...).
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, log_level.upper()))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root.level, logging.WARNING))


def configure_from_settings(settings: Settings) -> None:
    """Apply ``log_json`` / ``log_level`` from application settings."""
    configure_logging(json_output=settings.log_json, log_level=settings.log_level)
