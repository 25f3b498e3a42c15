"""
bootstrap/config.py - Application configuration

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from pathlib import Path
import os
import json
import logging

from settree.tree.store import DUPLICATE_POLICIES, DUPLICATE_RELINK

logger = logging.getLogger("bootstrap.config")


@dataclass
class TreeConfig:
    """Settings tree behaviour."""

    duplicate_policy: str = DUPLICATE_RELINK  # "relink" or "reject"
    max_history: int = 100  # ToggleEvents kept by the dispatcher
    definitions_file: Optional[str] = None  # JSON node definitions, None = built-in

    def __post_init__(self):
        if self.duplicate_policy not in DUPLICATE_POLICIES:
            logger.warning(
                f"Unknown duplicate policy '{self.duplicate_policy}', "
                f"using '{DUPLICATE_RELINK}'"
            )
            self.duplicate_policy = DUPLICATE_RELINK

    @classmethod
    def from_env(cls) -> "TreeConfig":
        return cls(
            duplicate_policy=os.getenv("SETTREE_DUPLICATE_POLICY", DUPLICATE_RELINK).lower(),
            max_history=int(os.getenv("SETTREE_MAX_HISTORY", "100")),
            definitions_file=os.getenv("SETTREE_DEFINITIONS_FILE"),
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
            level=os.getenv("SETTREE_LOG_LEVEL", "INFO"),
            format=os.getenv("SETTREE_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            log_file=os.getenv("SETTREE_LOG_FILE"),
            json_logs=os.getenv("SETTREE_JSON_LOGS", "false").lower() == "true",
        )


@dataclass
class SettreeConfig:
    """Root configuration."""

    environment: str = "development"
    debug: bool = False

    tree: TreeConfig = field(default_factory=TreeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "SettreeConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("SETTREE_ENVIRONMENT", "development"),
            debug=os.getenv("SETTREE_DEBUG", "false").lower() == "true",
            tree=TreeConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "SettreeConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using defaults")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "SettreeConfig":
        """Create config from dictionary, file values over environment."""
        config = cls.from_env()

        if "environment" in data:
            config.environment = data["environment"]
        if "debug" in data:
            config.debug = data["debug"]

        if "tree" in data:
            for key, value in data["tree"].items():
                if hasattr(config.tree, key):
                    setattr(config.tree, key, value)
            # Re-run policy check after overrides
            config.tree.__post_init__()

        if "logging" in data:
            for key, value in data["logging"].items():
                if hasattr(config.logging, key):
                    setattr(config.logging, key, value)

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "tree": {
                "duplicate_policy": self.tree.duplicate_policy,
                "max_history": self.tree.max_history,
                "definitions_file": self.tree.definitions_file,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "log_file": self.logging.log_file,
                "json_logs": self.logging.json_logs,
            },
        }


# Global config instance
_config: Optional[SettreeConfig] = None


def load_config(filepath: str = None) -> SettreeConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        SettreeConfig instance
    """
    global _config

    if filepath:
        _config = SettreeConfig.from_file(filepath)
    else:
        default_paths = [
            "./settree.json",
            "./config/settree.json",
            os.path.expanduser("~/.settree/config.json"),
        ]

        for path in default_paths:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                _config = SettreeConfig.from_file(path)
                return _config

        _config = SettreeConfig.from_env()

    logger.info(f"Configuration loaded: environment={_config.environment}")
    return _config


def get_config() -> SettreeConfig:
    """Get current configuration, loading if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
