"""Structured logging configuration for MediaTidy."""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from mediatidy.config import LoggingConfig

# Longest tool output kept in a single log event
MAX_OUTPUT_CHARS = 2000


def setup_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Configure structured logging.

    Console output goes to stderr so command output on stdout stays clean.

    Args:
        config: Logging configuration
        verbose: Force debug level regardless of config
    """
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper())

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if config.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    # An empty output path disables the log file
    if config.output:
        try:
            Path(config.output).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(config.output, mode="a", encoding="utf-8")
            file_handler.setLevel(level)
            handlers.append(file_handler)
        except OSError as e:
            print(f"Warning: Could not create log file {config.output}: {e}", file=sys.stderr)

    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=handlers,
        force=True,
    )


def truncate_output(output: Optional[str], limit: int = MAX_OUTPUT_CHARS) -> str:
    """Keep the tail of captured tool output for logging."""
    if not output:
        return ""
    if len(output) <= limit:
        return output
    return "..." + output[-limit:]


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Logger name (defaults to caller's module name)

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)
