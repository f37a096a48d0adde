# Searchlight Utilities Package
"""
Shared utility functions: settings loading and logging setup.
"""

from .helpers import load_settings, parse_ide_configs, setup_logging

__all__ = ["load_settings", "parse_ide_configs", "setup_logging"]
