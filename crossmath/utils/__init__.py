"""
Utilities package for the CrossMath generator.

This package provides configuration management.
"""

from .config_loader import ConfigLoader, get_config, reload_config

__all__ = ["ConfigLoader", "get_config", "reload_config"]
