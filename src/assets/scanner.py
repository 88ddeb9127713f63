# src/assets/scanner.py - v1
"""Directory scanner: walk a site root and list the files to deploy.

Each entry's path relative to the root is tested against an ignore list.
A plain pattern matches when it occurs anywhere in the relative path
(substring); a pattern containing ``*`` is a wildcard. An ignored
directory is pruned together with its whole subtree.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

from pagesync.core.errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

# Build outputs, VCS directories and OS/editor metadata.
DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    "_worker.js",
    "_routes.json",
    "functions",
    ".DS_Store",
    "node_modules",
    ".git",
    "Thumbs.db",
    ".vscode",
    ".idea",
)


def _compile_wildcard(pattern: str) -> re.Pattern[str]:
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")))


def should_ignore(relative_path: str, patterns: Sequence[str]) -> bool:
    """Return True if ``relative_path`` (POSIX separators) matches any pattern."""
    for pattern in patterns:
        if "*" in pattern:
            if _compile_wildcard(pattern).search(relative_path):
                return True
        elif pattern in relative_path:
            return True
    return False


class DirectoryScanner:
    """List deployable files under a root directory.

    Args:
        ignore_patterns: Patterns excluded from the scan. Defaults to
            DEFAULT_IGNORE_PATTERNS.
    """

    def __init__(self, ignore_patterns: Sequence[str] | None = None) -> None:
        self._patterns = tuple(
            DEFAULT_IGNORE_PATTERNS if ignore_patterns is None else ignore_patterns
        )

    @property
    def ignore_patterns(self) -> tuple[str, ...]:
        return self._patterns

    def validate_root(self, root: Path) -> None:
        """Raise unless ``root`` is an existing directory."""
        if not root.exists():
            raise NotFoundError(f"Folder does not exist: {root}")
        if not root.is_dir():
            raise InvalidInputError(f"Path is not a directory: {root}")

    def scan(self, root: Path) -> list[str]:
        """Discover all non-ignored files under ``root``.

        Returns:
            Relative POSIX paths (no leading separator) in a stable,
            sorted walk order.

        Raises:
            NotFoundError: If ``root`` does not exist.
            InvalidInputError: If ``root`` is not a directory.
        """
        self.validate_root(root)

        files: list[str] = []
        ignored = self._walk(root, "", files)

        logger.info(
            "Scanned %s: %d files, %d entries ignored",
            root, len(files), ignored,
        )
        return files

    def _walk(self, directory: Path, prefix: str, files: list[str]) -> int:
        ignored = 0
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            relative = f"{prefix}{entry.name}"
            if should_ignore(relative, self._patterns):
                logger.debug("Ignoring %s", relative)
                ignored += 1
                continue
            if entry.is_dir():
                ignored += self._walk(entry, f"{relative}/", files)
            elif entry.is_file():
                files.append(relative)
        return ignored
