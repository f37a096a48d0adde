"""
Applications Provider - Installed applications from configured directories.

Recognizes two layouts:
  - macOS bundles: Name.app (display name from Contents/Info.plist)
  - XDG desktop entries: name.desktop (display name from Name=)

Directories are scanned in order; an app found in several directories is
kept once per path, and the engine's first-occurrence dedup handles the rest.
"""

import configparser
import plistlib
from pathlib import Path
from typing import Optional

from loguru import logger

from searchlight.search.models import Candidate, ProviderType
from searchlight.search.providers.base import Provider

DEFAULT_SEARCH_PATHS = [
    "/Applications",
    "~/Applications",
    "/System/Applications",
    "/usr/share/applications",
    "~/.local/share/applications",
]


class ApplicationsProvider(Provider):
    """Static provider listing .app bundles and .desktop entries."""

    kind = ProviderType.APPLICATION

    def __init__(self, search_paths: Optional[list[str]] = None, **kwargs):
        super().__init__(**kwargs)
        self.search_paths = [
            Path(p).expanduser() for p in (search_paths or DEFAULT_SEARCH_PATHS)
        ]

    def load_or_refresh(self) -> list[Candidate]:
        candidates = []
        for directory in self.search_paths:
            if not directory.is_dir():
                continue
            try:
                entries = sorted(directory.iterdir())
            except OSError as e:
                logger.warning(f"Cannot list {directory}: {e}")
                continue

            for entry in entries:
                candidate = self._to_candidate(entry)
                if candidate is not None:
                    candidates.append(candidate)

        logger.debug(f"Loaded {len(candidates)} applications")
        return candidates

    def _to_candidate(self, path: Path) -> Optional[Candidate]:
        """Build a candidate, or None for non-apps and unreadable entries."""
        if path.suffix == ".app":
            name = _bundle_name(path)
        elif path.suffix == ".desktop":
            name = _desktop_name(path)
        else:
            return None

        if not name:
            return None

        return Candidate(
            identity=str(path),
            title=name,
            subtitle=str(path),
            provider_type=ProviderType.APPLICATION,
            raw_fields=(name,),
        )


def _bundle_name(path: Path) -> str:
    """CFBundleName from Info.plist, falling back to the bundle stem."""
    info = path / "Contents" / "Info.plist"
    try:
        with open(info, "rb") as f:
            plist = plistlib.load(f)
        name = plist.get("CFBundleName")
        if isinstance(name, str) and name.strip():
            return name.strip()
    except (OSError, plistlib.InvalidFileException, ValueError):
        pass
    return path.stem


def _desktop_name(path: Path) -> Optional[str]:
    """Name= from a desktop entry. Hidden and NoDisplay entries are skipped."""
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, OSError, UnicodeDecodeError) as e:
        logger.debug(f"Skipping malformed desktop entry {path}: {e}")
        return None

    if not parser.has_section("Desktop Entry"):
        return None

    section = parser["Desktop Entry"]
    if section.get("NoDisplay", "false").lower() == "true":
        return None
    if section.get("Hidden", "false").lower() == "true":
        return None

    name = section.get("Name", "").strip()
    return name or path.stem
