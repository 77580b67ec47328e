"""Structlog configuration for the bookmark authorization service.

Decision and store probes log through structlog. Output is a colored console
rendering for local work and one JSON object per line everywhere else.
"""

import logging
import os
import sys

import structlog

LOG_FORMATS = ("auto", "console", "json")


def _use_console(log_format: str) -> bool:
    if log_format == "console":
        return True
    if log_format == "json":
        return False
    # FORCE_COLOR=1 keeps console output in non-TTY environments (like Docker)
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    return force_color or sys.stdout.isatty()


def build_processors(log_format: str = "auto") -> list[structlog.types.Processor]:
    """Return the processor chain for the requested output format.

    Args:
        log_format: "console", "json", or "auto" to pick console output on a TTY

    Raises:
        ValueError: If log_format is not one of LOG_FORMATS
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {log_format!r}")

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if _use_console(log_format):
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(level: str = "info", log_format: str = "auto") -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum level name to emit, case-insensitive; unknown names
            fall back to info
        log_format: Output format, see build_processors
    """
    min_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
