"""Logging configuration using loguru.

The library logs under the ``extratext`` name and stays silent until the
host calls ``setup_logging`` (or ``logger.enable("extratext")`` with its own
sinks).
"""

import sys

from loguru import logger

from extratext.config import get_settings


def format_record(_record: dict) -> str:
    """Human-readable format for development."""
    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>\n"
        "{exception}"
    )


def setup_logging(json_logs: bool | None = None, log_level: str | None = None) -> None:
    """Configure loguru sinks and enable the library's logs.

    Args:
        json_logs: If True, output logs as JSON. Defaults to the
            ``json_logs`` setting.
        log_level: Minimum log level to output. Defaults to the
            ``log_level`` setting.
    """
    settings = get_settings()
    if json_logs is None:
        json_logs = settings.json_logs
    if log_level is None:
        log_level = settings.log_level

    # Remove default handler
    logger.remove()

    if json_logs:
        logger.add(
            sys.stderr,
            format="{message}",
            level=log_level,
            serialize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format=format_record,
            level=log_level,
            colorize=True,
        )

    logger.enable("extratext")


# Re-export logger for convenience
__all__ = [
    "format_record",
    "logger",
    "setup_logging",
]
