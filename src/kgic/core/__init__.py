"""Core infrastructure layer - no business logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML + environment)
- Logging (Loguru)
- Console management (Rich)
"""

# Configuration
from .config import (
    Config,
    LoggingConfig,
    PlayerConfig,
    SiteConfig,
    SupabaseConfig,
    get_config_dir,
    get_config_path,
    get_data_dir,
    load_config,
)

# Logging
from .output import setup_from_config, setup_loguru

# Console
from .console import get_console, print_error, print_notice

__all__ = [
    # Config
    "Config",
    "LoggingConfig",
    "PlayerConfig",
    "SiteConfig",
    "SupabaseConfig",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "load_config",
    # Logging
    "setup_from_config",
    "setup_loguru",
    # Console
    "get_console",
    "print_error",
    "print_notice",
]
