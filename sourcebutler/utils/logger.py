# sourcebutler/utils/logger.py

import logging
import os
from collections import deque
from pathlib import Path
from platformdirs import user_log_dir

from sourcebutler.config import APP_NAME, APP_AUTHOR


class DiagnosticLog(logging.Handler):
    """Keeps timestamped diagnostic lines ("HH:MM:SS: message") for a log pane."""

    def __init__(self, capacity: int = 2000):
        super().__init__(level=logging.INFO)
        self.lines = deque(maxlen=capacity)
        self.setFormatter(logging.Formatter("%(asctime)s: %(message)s", datefmt="%H:%M:%S"))

    def emit(self, record):
        try:
            self.lines.append(self.format(record))
        except Exception:
            self.handleError(record)

    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines)

    def clear(self):
        self.lines.clear()


def setup_logger():
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(logging.INFO)

    # Default: nothing is written anywhere unless SB_DEBUG=1 is set;
    # attached DiagnosticLog handlers still receive records.
    if not os.environ.get("SB_DEBUG"):
        if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
            logger.addHandler(logging.NullHandler())
        logger.propagate = False
        return logger

    # Debug mode: write to user logs
    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        log_dir = Path(user_log_dir(appname=APP_NAME, appauthor=APP_AUTHOR))
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "sourcebutler.debug.log"
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
        logger.addHandler(fh)
        logger.setLevel(logging.DEBUG)
    return logger


def attach_diagnostics(handler: DiagnosticLog) -> DiagnosticLog:
    """Route application log records into ``handler`` as well."""
    if handler not in logger.handlers:
        logger.addHandler(handler)
    return handler


def detach_diagnostics(handler: DiagnosticLog) -> None:
    logger.removeHandler(handler)


logger = setup_logger()
