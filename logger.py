"""
Logger - central logging for the filter lab

Usage:
    from logger import logger

    logger.info("Pipeline started", component="LAB")
    logger.error("Snapshot failed", component="ANALYSIS", details=str(e))

Listeners registered with add_listener() receive every formatted message,
which is how the GUI console mirrors the log.
"""

import logging
import sys
from datetime import datetime
from enum import IntEnum
from typing import Callable, List, Optional


class LogLevel(IntEnum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


class ListenerHandler(logging.Handler):
    """Forwards records to plain callables: (message, level, timestamp)."""

    def __init__(self):
        super().__init__()
        self.listeners: List[Callable[[str, int, str], None]] = []

    def emit(self, record: logging.LogRecord):
        try:
            msg = self.format(record)
            timestamp = datetime.now().strftime("%H:%M:%S")
            for listener in list(self.listeners):
                listener(msg, record.levelno, timestamp)
        except Exception:
            self.handleError(record)


class LabLogger:
    def __init__(self, name="commlab"):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

        self._console_handler = logging.StreamHandler(sys.stdout)
        self._console_handler.setLevel(logging.INFO)
        self._console_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%H:%M:%S"
        ))
        self._logger.addHandler(self._console_handler)

        self._listener_handler = ListenerHandler()
        self._listener_handler.setLevel(logging.INFO)
        self._listener_handler.setFormatter(logging.Formatter("%(message)s"))
        self._logger.addHandler(self._listener_handler)

    def add_listener(self, callback):
        self._listener_handler.listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listener_handler.listeners:
            self._listener_handler.listeners.remove(callback)

    def _format_message(self, msg: str, component: Optional[str] = None,
                        details: Optional[str] = None) -> str:
        parts = []
        if component:
            parts.append(f"[{component}]")
        parts.append(msg)
        if details:
            parts.append(f"- {details}")
        return " ".join(parts)

    def debug(self, msg: str, component: Optional[str] = None,
              details: Optional[str] = None):
        self._logger.debug(self._format_message(msg, component, details))

    def info(self, msg: str, component: Optional[str] = None,
             details: Optional[str] = None):
        self._logger.info(self._format_message(msg, component, details))

    def warning(self, msg: str, component: Optional[str] = None,
                details: Optional[str] = None):
        self._logger.warning(self._format_message(msg, component, details))

    def error(self, msg: str, component: Optional[str] = None,
              details: Optional[str] = None):
        self._logger.error(self._format_message(msg, component, details))


logger = LabLogger()
