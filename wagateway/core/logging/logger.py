"""
Rich-based logger with business phone and user context for wagateway.

Context is added as a message prefix (``[P:<phone_id>][U:<wa_id>]``) by a
logger wrapper instead of changing the format string, so third-party log
records keep rendering normally.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from .context import get_current_phone_context, get_current_user_context


class CompactFormatter(logging.Formatter):
    """Shortens wagateway module names: wagateway.webhooks.whatsapp.dispatcher -> whatsapp.dispatcher."""

    def format(self, record):
        if record.name.startswith("wagateway."):
            parts = record.name.split(".")
            if len(parts) > 2:
                record.name = ".".join(parts[-2:])
        return super().format(record)


_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "debug": "dim white",
    }
)
_console = Console(theme=_theme)


class ContextLogger:
    """Logger wrapper that prefixes messages with the current request context."""

    def __init__(
        self,
        logger: logging.Logger,
        phone_number_id: str | None = None,
        user_id: str | None = None,
    ):
        self.logger = logger
        self.phone_number_id = phone_number_id or "---"
        self.user_id = user_id or "---"

    def _format_message(self, message: str) -> str:
        # Context is read on every call so a logger created at import time
        # still reflects the request being processed
        phone = get_current_phone_context() or self.phone_number_id
        user = get_current_user_context() or self.user_id

        prefix = ""
        if phone and phone != "---":
            prefix += f"[P:{phone}]"
        if user and user != "---":
            prefix += f"[U:{user}]"
        return f"{prefix} {message}" if prefix else message

    def debug(self, message: str, *args, **kwargs) -> None:
        self.logger.debug(self._format_message(message), *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> None:
        self.logger.info(self._format_message(message), *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> None:
        self.logger.warning(self._format_message(message), *args, **kwargs)

    def error(self, message: str, *args, **kwargs) -> None:
        self.logger.error(self._format_message(message), *args, **kwargs)

    def critical(self, message: str, *args, **kwargs) -> None:
        self.logger.critical(self._format_message(message), *args, **kwargs)

    def exception(self, message: str, *args, **kwargs) -> None:
        self.logger.exception(self._format_message(message), *args, **kwargs)


def setup_logging(
    *,
    level: str = "INFO",
    mode: str = "PROD",
    log_dir: str | None = None,
    console_fmt: str | None = None,
    file_fmt: str | None = None,
) -> None:
    """
    Initialize the root logger with Rich formatting.

    Parameters
    ----------
    level : str
        Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
    mode : str
        "DEV" creates daily log files + console; anything else → console only
    log_dir : str, optional
        Directory for log files (DEV mode only)
    console_fmt : str, optional
        Console format string
    file_fmt : str, optional
        File format string
    """
    lvl = level.upper()
    lvl = lvl if lvl in ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO"

    # RichHandler already shows level and time
    console_format = console_fmt or "[%(name)s] %(message)s"
    file_format = file_fmt or "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    rich_handler = RichHandler(
        console=_console,
        rich_tracebacks=True,
        show_time=True,
        show_level=True,
        markup=False,
    )
    rich_handler.setFormatter(CompactFormatter(console_format))

    handlers: list[logging.Handler] = [rich_handler]

    if mode.upper() == "DEV" and log_dir:
        os.makedirs(log_dir, exist_ok=True)
        logfile = os.path.join(log_dir, f"wagateway_{datetime.now():%Y%m%d}.log")
        file_handler = logging.FileHandler(logfile, encoding="utf-8")
        file_handler.setFormatter(CompactFormatter(file_format))
        handlers.append(file_handler)
        _console.print(f"[green]DEV mode:[/] console + file → {logfile}")
    else:
        _console.print(f"Logging configured for mode '{mode}'. Console only.")

    logging.basicConfig(level=lvl, handlers=handlers, force=True)

    logging.getLogger("wagateway.logging").info(f"Logging initialized ({lvl})")


def setup_app_logging(settings) -> None:
    """
    Initialize application logging from settings.

    Called once during FastAPI application startup.
    """
    setup_logging(
        level=settings.log_level,
        mode="DEV" if settings.is_development else "PROD",
        log_dir=settings.log_dir if settings.is_development else None,
    )


def get_logger(name: str) -> ContextLogger:
    """
    Get a logger that automatically uses request context variables.

    Args:
        name: Logger name (usually __name__)

    Returns:
        ContextLogger picking up phone and user context on every call
    """
    return ContextLogger(
        logging.getLogger(name),
        phone_number_id=get_current_phone_context(),
        user_id=get_current_user_context(),
    )


def get_app_logger() -> ContextLogger:
    """Logger for application lifecycle events (startup, shutdown, etc.)."""
    return get_logger("wagateway.app")
