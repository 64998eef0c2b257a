"""
core/config.py - Transactor configuration

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from pathlib import Path
import os
import json
import logging

logger = logging.getLogger("core.config")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class StoreConfig:
    """Backing store configuration."""

    # Top-level key the default in-memory store keeps the namespace under
    namespace_key: str = "transactions"

    @classmethod
    def from_env(cls) -> "StoreConfig":
        return cls(
            namespace_key=os.getenv("TRANSACTOR_NAMESPACE_KEY", "transactions"),
        )


@dataclass
class FlushConfig:
    """Flush behavior configuration."""

    # save_each / save_each_edge run one worker at a time through the queue
    sequential_save_each: bool = True

    @classmethod
    def from_env(cls) -> "FlushConfig":
        return cls(
            sequential_save_each=_env_flag("TRANSACTOR_SEQUENTIAL_SAVE_EACH", "true"),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("TRANSACTOR_LOG_LEVEL", "INFO"),
            format=os.getenv("TRANSACTOR_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("TRANSACTOR_LOG_FILE"),
            json_logs=_env_flag("TRANSACTOR_JSON_LOGS", "false"),
        )


@dataclass
class TransactorConfig:
    """Root configuration for a transactor context."""

    store: StoreConfig = field(default_factory=StoreConfig)
    flush: FlushConfig = field(default_factory=FlushConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "TransactorConfig":
        """Create configuration from environment variables."""
        return cls(
            store=StoreConfig.from_env(),
            flush=FlushConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "TransactorConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "TransactorConfig":
        """Create config from dictionary, file values over environment."""
        config = cls.from_env()

        for section in ("store", "flush", "logging"):
            target = getattr(config, section)
            for key, value in data.get(section, {}).items():
                if hasattr(target, key):
                    setattr(target, key, value)
                else:
                    logger.warning(f"Ignoring unknown config key: {section}.{key}")

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "store": {
                "namespace_key": self.store.namespace_key,
            },
            "flush": {
                "sequential_save_each": self.flush.sequential_save_each,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "log_file": self.logging.log_file,
                "json_logs": self.logging.json_logs,
            },
        }


def load_config(filepath: str = None) -> TransactorConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        TransactorConfig instance
    """
    if filepath:
        return TransactorConfig.from_file(filepath)

    default_paths = [
        "./transactor.json",
        os.path.expanduser("~/.transactor/config.json"),
    ]

    for path in default_paths:
        if Path(path).exists():
            logger.info(f"Loading config from: {path}")
            return TransactorConfig.from_file(path)

    return TransactorConfig.from_env()
