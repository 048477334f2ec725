"""Logging setup rendering stdlib records as key/value text or JSON."""

import logging
import sys
from typing import TextIO

import structlog
from structlog.typing import Processor

from boostsec.waf_guard.models.run_config import RunConfig


def build_formatter(log_format: str) -> structlog.stdlib.ProcessorFormatter:
    """Build a formatter that keeps the ``extra`` fields of each record."""
    pre_chain: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
    ]

    processors: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=processors,
    )


def configure_logging(config: RunConfig, stream: TextIO | None = None) -> None:
    """Install the root handler for the configured level and format."""
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(build_formatter(config.log_format))

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
