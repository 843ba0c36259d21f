from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Optional

_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

# Active CLI command, inherited by everything the command calls
_current_command: ContextVar[str] = ContextVar("chaoslab_current_command", default="cli")


class _CommandFilter(logging.Filter):
    """Stamp every record with the command label used in the prefix."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.command = getattr(record, "command", None) or _current_command.get()
        return True


def setup_logging(level: str | int = "WARNING") -> None:
    """
    Configure root logging: one stderr handler with a command prefix.

    Calling it again replaces the handler so it follows the current stderr.
    """
    if isinstance(level, str):
        numeric_level = _LEVELS.get(level.lower(), logging.WARNING)
    else:
        numeric_level = int(level)
    root = logging.getLogger()
    for old in [h for h in root.handlers if any(isinstance(f, _CommandFilter) for f in h.filters)]:
        root.removeHandler(old)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(command)s] %(levelname)s: %(message)s"))
    handler.addFilter(_CommandFilter())
    root.addHandler(handler)
    root.setLevel(numeric_level)
    # matplotlib is chatty at DEBUG
    logging.getLogger("matplotlib").setLevel(max(numeric_level, logging.INFO))
    logging.captureWarnings(True)


def set_command_context(command: str) -> None:
    _current_command.set(command)


def current_command() -> str:
    return _current_command.get()


def resolve_log_level(verbose: bool, debug: bool) -> str:
    """Map the CLI flags to a level name; --debug wins over --verbose."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    return "WARNING"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name if name is not None else __name__)
