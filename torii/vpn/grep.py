"""Line search over config directories."""

import logging
from pathlib import Path
from typing import Iterable, List

LOGGER = logging.getLogger(__name__)


def find_in_file(pattern: str, path: Path) -> List[str]:
    """Return lines of ``path`` containing ``pattern`` (unreadable files give [])."""
    try:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            return [line for line in handle if pattern in line]
    except OSError as exc:
        LOGGER.warning("Cannot read %s: %s", path, exc)
        return []


def find_in_dir(pattern: str, directories: Iterable[Path]) -> List[str]:
    """Recursively collect matching lines from every file below ``directories``.

    Files are visited in sorted path order so repeated scans are stable.
    """
    matches: List[str] = []
    for directory in directories:
        root = Path(directory)
        if not root.is_dir():
            LOGGER.warning("Not a directory: %s", root)
            continue
        for path in sorted(p for p in root.rglob("*") if p.is_file()):
            matches.extend(find_in_file(pattern, path))
    return matches


__all__ = ["find_in_dir", "find_in_file"]
