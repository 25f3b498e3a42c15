"""
settree.bootstrap - Configuration and entry points
"""

from .config import (
    SettreeConfig,
    TreeConfig,
    LoggingConfig,
    load_config,
    get_config,
)
from .entrypoints import (
    setup_logging,
    cli_main,
)

__all__ = [
    # Config
    "SettreeConfig",
    "TreeConfig",
    "LoggingConfig",
    "load_config",
    "get_config",
    # Entry points
    "setup_logging",
    "cli_main",
]
