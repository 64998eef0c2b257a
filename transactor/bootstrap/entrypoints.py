"""
bootstrap/entrypoints.py - Library entry points

Logging setup and a one-call factory for a configured Transactor.
"""

from __future__ import annotations
from typing import Optional
import json
import logging
import sys

from transactor.core.config import LoggingConfig, TransactorConfig, load_config
from transactor.errors import TransactorError
from transactor.storage.adapter import Getter, Setter
from transactor.transactions import Transactor

logger = logging.getLogger("bootstrap.entrypoints")


# Marks handlers installed here so a repeated setup replaces them
_HANDLER_TAG = "_transactor_handler"


class JSONFormatter(logging.Formatter):
    """
    One JSON object per log line.

    Records logged with exc_info carry the traceback; when the exception is
    a TransactorError its code and details are added as fields.
    """

    def format(self, record):
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            error = record.exc_info[1]
            entry["exception"] = self.formatException(record.exc_info)
            if isinstance(error, TransactorError):
                entry["error"] = error.to_dict()

        return json.dumps(entry, default=str)


def setup_logging(
    level: str = "INFO",
    log_file: str = None,
    json_format: bool = False,
    log_format: str = LoggingConfig.format,
) -> None:
    """
    Point the root logger at stdout and, optionally, a log file.

    Safe to call more than once: handlers from an earlier call are closed
    and replaced, other handlers are left alone.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        json_format: Use JSON format for logs
        log_format: Format string for plain-text logs
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JSONFormatter() if json_format else logging.Formatter(log_format)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        setattr(handler, _HANDLER_TAG, True)
        root_logger.addHandler(handler)


def build_transactor(
    config: Optional[TransactorConfig] = None,
    getter: Getter = None,
    setter: Setter = None,
    configure_logging: bool = True,
) -> Transactor:
    """
    Create a configured Transactor.

    Args:
        config: Configuration; loaded from file or environment when omitted
        getter: Store getter; the in-memory store is used when omitted
        setter: Store setter; the in-memory store is used when omitted
        configure_logging: Apply config.logging to the root logger

    Returns:
        Transactor with its store adapter configured
    """
    config = config or load_config()

    if configure_logging:
        setup_logging(
            level=config.logging.level,
            log_file=config.logging.log_file,
            json_format=config.logging.json_logs,
            log_format=config.logging.format,
        )

    transactor = Transactor(config=config).configure(getter, setter)
    logger.info(f"Transactor ready (namespace_key={config.store.namespace_key})")
    return transactor
