"""Process-wide logging setup for the API server and the CLI.

``configure_logging`` installs a single stdout handler (plain text or JSON).
``set_debug_mode`` mirrors the desktop app's debug switch: when enabled, the
``invoicehub`` logger drops to DEBUG and writes a per-day
``Debug-log-dd-MM-yyyy.log`` file in the log directory.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from pythonjsonlogger.json import JsonFormatter

from invoicehub.utils.paths import get_log_dir

_TEXT_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"
_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_DEBUG_HANDLER_NAME = "invoicehub-debug-file"
_APP_LOGGER = "invoicehub"

# Level chosen by configure_logging; restored when debug mode is turned off.
_configured_level = logging.INFO


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonFormatter(_JSON_FORMAT)
    return logging.Formatter(_TEXT_FORMAT)


def configure_logging(
    level: str = "info",
    log_format: str = "text",
    log_file: str | None = None,
) -> None:
    """Configure root logging once for the running process.

    Args:
        level: Level name (debug, info, warning, ...).
        log_format: 'text' or 'json'.
        log_file: Optional extra file to append log records to.
    """
    global _configured_level
    formatter = _build_formatter(log_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).expanduser().parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(Path(log_file).expanduser(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level.upper(), handlers=handlers, force=True)
    _configured_level = logging.getLevelName(level.upper())
    logging.getLogger(_APP_LOGGER).setLevel(_configured_level)


def debug_log_path(log_dir: Path | None = None, today: datetime | None = None) -> Path:
    """Return the per-day debug log file path."""
    stamp = (today or datetime.now()).strftime("%d-%m-%Y")
    return (log_dir or get_log_dir()) / f"Debug-log-{stamp}.log"


def set_debug_mode(enabled: bool, log_dir: Path | None = None) -> Path | None:
    """Toggle verbose logging for the application logger.

    Args:
        enabled: Whether debug logging should be active.
        log_dir: Directory for the debug log file (defaults to the log dir).

    Returns:
        Path of the active debug log file, or None when disabled.
    """
    app_logger = logging.getLogger(_APP_LOGGER)
    for handler in list(app_logger.handlers):
        if handler.get_name() == _DEBUG_HANDLER_NAME:
            app_logger.removeHandler(handler)
            handler.close()

    if not enabled:
        app_logger.setLevel(_configured_level)
        return None

    path = debug_log_path(log_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.set_name(_DEBUG_HANDLER_NAME)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    app_logger.addHandler(handler)
    app_logger.setLevel(logging.DEBUG)
    app_logger.debug("Debug logging enabled: %s", path)
    return path
