"""Structured logging for the depsupdater CLI: structlog rendered through stdlib logging.

Logs go to stderr so that the dependency listing and summary printed on
stdout stay machine-readable.
"""

from __future__ import annotations

import logging
import logging.config
import os
import sys

import structlog

LOG_FORMATS = ("console", "json")

# Third-party loggers that are only interesting when something breaks.
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def _processors(log_format: str) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    # timestamps for json only
    if log_format == "json":
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    return processors


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def setup_logging(level: str | None = None) -> None:
    """Configure structlog and stdlib logging.

    Reads from environment variables:
        DEPSUPDATER_LOG_LEVEL:  log level (default: INFO)
        DEPSUPDATER_LOG_FORMAT: console | json (default: console)

    An explicit *level* (e.g. from ``--verbose``) wins over the environment.
    Raises ``ValueError`` for an unknown log format.
    """
    log_level = (level or os.environ.get("DEPSUPDATER_LOG_LEVEL", "INFO")).upper()
    log_format = os.environ.get("DEPSUPDATER_LOG_FORMAT", "console").lower()
    if log_format not in LOG_FORMATS:
        raise ValueError(
            f"DEPSUPDATER_LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}, got {log_format!r}"
        )

    processors = _processors(log_format)

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "depsupdater": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(log_format),
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "depsupdater",
                },
            },
            "root": {"handlers": ["stderr"], "level": "WARNING"},
            "loggers": {
                "depsupdater": {"level": log_level},
                **{name: {"level": "WARNING"} for name in _QUIET_LOGGERS},
            },
        }
    )
