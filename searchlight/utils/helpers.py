"""
Helper utilities for Searchlight.

Provides:
- Settings loading (TOML, deep-merged over defaults)
- IDE configuration parsing
- Logging setup
"""

import copy
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
from loguru import logger

from searchlight.search.models import IDEConfig

SETTINGS_PATH = Path.home() / ".config" / "searchlight" / "settings.toml"
LOG_DIR = Path.home() / ".local" / "share" / "searchlight" / "logs"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "search": {
        "max_results": 10,
        "high_score_threshold": 50.0,
        "usage_weight_threshold": 1.0,
        "debounce_ms": 150,
    },
    "usage": {
        "max_entries": 1000,
        "db_path": "~/.local/share/searchlight/state.db",
    },
    "providers": {
        "browser_history_enabled": True,
        "tabs_enabled": True,
        "tabs_refresh_seconds": 10,
        "history_refresh_seconds": 30,
        "sanity_limit": 10000,
        "applications": {
            "search_paths": [
                "/Applications",
                "~/Applications",
                "/System/Applications",
                "/usr/share/applications",
                "~/.local/share/applications",
            ],
        },
        "bookmarks": {
            "chrome_bookmarks_path": "~/.config/google-chrome/Default/Bookmarks",
            "export_dir": "~/Documents/Spotlight",
        },
        "history": {
            "path": "~/.config/google-chrome/Default/History",
            "limit": 500,
        },
        "tabs": {
            "max_tabs": 200,
        },
        "dictionary": {
            "command": ["dict"],
        },
    },
    "suffixes": {
        "ap": "application",
        "ch": "bookmark",
        "hi": "history",
        "di": "dictionary",
        "tb": "tab",
    },
    "logging": {
        "level": "WARNING",
    },
    "ides": [],
}


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings from a TOML file.

    Args:
        path: Settings file (defaults to ~/.config/searchlight/settings.toml)

    Returns:
        Dictionary containing settings with defaults applied

    Example settings.toml:
        [search]
        debounce_ms = 200

        [providers]
        browser_history_enabled = false

        [[ides]]
        name = "PyCharm"
        prefixes = ["py"]
        type = "jetbrains"
        recent_projects_path = "~/.config/JetBrains/PyCharm2024.1/options/recentProjects.xml"
    """
    settings_path = Path(path) if path else SETTINGS_PATH
    defaults = copy.deepcopy(DEFAULT_SETTINGS)

    if not settings_path.exists():
        logger.info(f"Settings file not found at {settings_path}, using defaults")
        return defaults

    try:
        loaded = toml.load(settings_path)
    except (toml.TomlDecodeError, OSError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}, using defaults")
        return defaults

    return _deep_merge(defaults, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def parse_ide_configs(entries: List[Dict]) -> List[IDEConfig]:
    """
    Build IDEConfig objects from the [[ides]] tables.

    Malformed entries are skipped with a warning.
    """
    configs = []
    for entry in entries or []:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping malformed IDE entry: {entry!r}")
            continue
        try:
            configs.append(IDEConfig.from_dict(entry))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Skipping malformed IDE entry '{entry.get('name', '?')}': {e}")
    return configs


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure loguru sinks: stderr plus a rotating debug log file.

    Args:
        level: Minimum level for stderr
        log_file: Log file path (defaults to ~/.local/share/searchlight/logs/searchlight.log)
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level,
    )

    log_path = Path(log_file) if log_file else LOG_DIR / "searchlight.log"
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Cannot create log directory {log_path.parent}: {e}")
        return

    logger.add(
        log_path,
        rotation="1 day",
        retention="7 days",
        level="DEBUG",
    )
