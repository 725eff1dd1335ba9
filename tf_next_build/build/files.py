"""Source file enumeration for the build."""

from __future__ import annotations

import logging
from pathlib import Path

from tf_next_build.types import FileFsRef

logger = logging.getLogger(__name__)

# Dependencies, build cache and our own output are never build inputs
IGNORE_PATTERNS = ["node_modules/**", ".next/**", ".next-tf/**"]


def is_ignored(relative_path: str) -> bool:
    """Check a POSIX relative path against IGNORE_PATTERNS.

    Args:
        relative_path: Path relative to the source root.

    Returns:
        True if the path lies in an ignored directory.
    """
    for pattern in IGNORE_PATTERNS:
        prefix = pattern[: -len("/**")]
        if relative_path == prefix or relative_path.startswith(f"{prefix}/"):
            return True
    return False


def get_files(base_path: Path) -> dict[str, FileFsRef]:
    """Enumerate the source files under a directory.

    Args:
        base_path: Source root.

    Returns:
        File references keyed by POSIX path relative to ``base_path``,
        sorted by path.
    """
    files: dict[str, FileFsRef] = {}

    for path in sorted(base_path.rglob("*")):
        if not path.is_file():
            continue

        relative_path = path.relative_to(base_path).as_posix()
        if is_ignored(relative_path):
            continue

        files[relative_path] = FileFsRef(
            fs_path=path,
            mode=path.stat().st_mode & 0o7777,
        )

    logger.debug("Found %d source files in %s", len(files), base_path)
    return files


__all__ = ["IGNORE_PATTERNS", "get_files", "is_ignored"]
