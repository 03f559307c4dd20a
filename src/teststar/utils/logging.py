from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import structlog

LOG_FILENAME = "teststar.log"


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    logs_dir: Optional[Path] = None,
) -> None:
    """
    Initialize Python logging and structlog with consistent formatting.

    Stdlib loggers (used by the grading and progress modules) go to stderr and, when
    `logs_dir` is given, to `teststar.log` inside it. structlog shares the same level and
    renders either console or JSON output.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if logs_dir is not None:
        logs_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(logs_dir / LOG_FILENAME, encoding="utf-8"))
    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    processors = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )
