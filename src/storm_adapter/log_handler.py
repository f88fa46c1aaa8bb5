"""Forward Python log records to the host as ``log`` commands."""

import logging

from .channel import Channel
from .messages import LogMessage
from .protocol import LOG_DEBUG, LOG_ERROR, LOG_INFO, LOG_TRACE, LOG_WARN


def storm_level(levelno: int) -> int:
    """Map a Python logging level to the host's log level."""
    if levelno >= logging.ERROR:
        return LOG_ERROR
    if levelno >= logging.WARNING:
        return LOG_WARN
    if levelno >= logging.INFO:
        return LOG_INFO
    if levelno >= logging.DEBUG:
        return LOG_DEBUG
    return LOG_TRACE


class StormLogHandler(logging.Handler):
    """Logging handler that writes records into the host's worker log."""

    def __init__(self, channel: Channel, level: int = logging.NOTSET):
        super().__init__(level)
        self._channel = channel

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            self._channel.send(LogMessage(msg=msg, level=storm_level(record.levelno)))
        except Exception:
            self.handleError(record)
