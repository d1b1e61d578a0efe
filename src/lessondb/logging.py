"""Structured logging for the store.

Both ``lessondb`` events and SQLAlchemy's stdlib records are rendered by one
structlog ``ProcessorFormatter``, so SQL echo lines come out in the same JSON
or console format as everything else.
"""

import logging

import structlog

from lessondb.config import Settings


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(settings: Settings) -> None:
    """Configure structlog and the ``lessondb`` / ``sqlalchemy.engine`` stdlib loggers.

    Safe to call again: handlers installed by a previous call are replaced.
    ``settings.echo_sql`` turns on SQL statement logging at INFO.
    """
    shared = _shared_processors()
    if settings.log_format == "json":
        final: list[structlog.types.Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
        )
    )

    # the root logger is left to the host app
    levels = {
        "lessondb": getattr(logging, settings.log_level.upper(), logging.INFO),
        "sqlalchemy.engine": logging.INFO if settings.echo_sql else logging.WARNING,
    }
    for name, level in levels.items():
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [handler]
        stdlib_logger.setLevel(level)
        stdlib_logger.propagate = False
