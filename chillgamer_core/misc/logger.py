"""
ChillGamer library containing logging helper functionality
"""

import logging
from typing import Optional


def enforce_logger(logger: Optional[logging.Logger] = None, name: Optional[str] = None) -> logging.Logger:
    """
    Return the given logger or fall back to the named (or this module's) logger

    :param logger: optional logger instance supplied by the caller
    :param name: optional name of the fallback logger
    :return: a usable logger instance
    :raises TypeError: when something other than a logger has been supplied
    """

    if logger is not None and isinstance(logger, logging.Logger):
        return logger
    elif logger is not None:
        raise TypeError(f"Expected 'logging.Logger', got {type(logger)}")
    return logging.getLogger(name or __name__)


class NoDebugFilter(logging.Filter):
    """
    Logging filter that drops DEBUG records of the specified logger and its children

    Records of other loggers are passed through unchanged, so the filter
    can be attached to handlers that serve the whole logging tree.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if super().filter(record):
            return record.levelno > logging.DEBUG
        return True
