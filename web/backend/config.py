#!/usr/bin/env python3
"""
Configuration management for the staffalloc web application.
"""

import os
from pathlib import Path
from functools import lru_cache

from core.config_loader import AppConfig, load_config


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


@lru_cache()
def get_config() -> AppConfig:
    """
    Get application configuration with caching.

    Loads config.yaml from the project root (or STAFFALLOC_CONFIG) and applies
    environment variable overrides. Result is cached for performance.

    Returns:
        AppConfig: The application configuration.
    """
    config_path = os.environ.get("STAFFALLOC_CONFIG", str(get_project_root() / 'config.yaml'))
    return load_config(config_path)
