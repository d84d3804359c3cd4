"""Logging configuration for the warehousing domain.

Standard library logging carries the output (stdout plus rotating files);
structlog formats it. Production and staging emit JSON lines, every other
environment gets a colored console renderer.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

_ENV_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5


def current_environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """Resolve the log level; ``LOG_LEVEL`` wins over the environment default."""
    return os.getenv("LOG_LEVEL", _ENV_LEVELS.get(current_environment(), "INFO")).upper()


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: str | Path = "logs") -> None:
    """Route the root logger to stdout and the warehousing log files."""
    log_level = get_log_level()

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(_rotating_handler(log_path / "warehousing.log", log_level))
    root_logger.addHandler(_rotating_handler(log_path / "warehousing_error.log", logging.ERROR))

    for noisy in ("urllib3", "asyncio", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def build_processors(env: str | None = None) -> list:
    """Return the structlog processor chain for ``env``."""
    env = (env or current_environment()).lower()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
    ]

    if env in ("production", "staging"):
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(
                    show_locals=False,
                    max_frames=3,
                ),
            )
        )
    return processors


def setup_structlog(env: str | None = None) -> None:
    structlog.configure(
        processors=build_processors(env),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | Path = "logs") -> None:
    """Configure all logging for the warehousing service."""
    setup_stdlib_logging(log_dir)
    setup_structlog()


def add_context(**kwargs: Any) -> None:
    """Bind keys to every subsequent log line of the current request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
