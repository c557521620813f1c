"""Shared logging configuration for the checklist analytics project.

Call ``configure_logging()`` once at any CLI entry point to ensure logs are emitted.
The function is idempotent: if the root logger already has handlers, it does nothing.

The file log defaults to ``logs/checklists.log``; set ``CHECKLISTS_LOG_FILE``
to move it, or to an empty string to log to stderr only.
"""

import logging
import os
from typing import Optional


LOG_FILE_ENV = "CHECKLISTS_LOG_FILE"
DEFAULT_LOG_FILE = "logs/checklists.log"

# urllib3 logs every adapter-level retry; JoltClient logs its own attempts
QUIET_LOGGERS = ("urllib3",)


def resolve_log_file(log_file: Optional[str] = None) -> str:
    """Explicit path, else $CHECKLISTS_LOG_FILE, else the default. "" disables."""
    if log_file is not None:
        return log_file
    return os.getenv(LOG_FILE_ENV, DEFAULT_LOG_FILE)


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """Configure root logger with a stderr handler plus an optional file handler.

    Only configures if the root logger has no handlers (idempotent).
    """
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    path = resolve_log_file(log_file)
    if path:
        try:
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            fh = logging.FileHandler(path, mode="a")
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError:
            pass

    root.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
