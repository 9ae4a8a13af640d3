"""File discovery: enumerate candidate documents under a root via include/exclude globs."""

from __future__ import annotations

import fnmatch
import functools
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

# Files whose presence marks a directory as a project root.
PROJECT_MARKERS: tuple[str, ...] = ("pom.xml", "mule-artifact.json")

DEFAULT_INCLUDE: tuple[str, ...] = ("**/*.xml",)
DEFAULT_EXCLUDE: tuple[str, ...] = (
    "**/target/**",
    "**/node_modules/**",
    "**/.git/**",
    "**/*.munit.xml",
)


@dataclass(frozen=True)
class ScannedFile:
    """A discovered file."""

    absolute_path: Path
    relative_path: str  # POSIX-style, relative to the scan root
    size: int


@functools.lru_cache(maxsize=256)
def _glob_regex(pattern: str) -> re.Pattern[str]:
    """Translate a glob with ``**`` support into a compiled regex.

    ``**/`` matches zero or more directories, ``*`` and ``?`` never cross a
    ``/`` boundary.
    """
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(parts) + "$")


def matches_glob(relative_path: str, pattern: str) -> bool:
    """Return True if POSIX *relative_path* matches *pattern*."""
    if "**" not in pattern:
        # Plain globs behave like fnmatch but never cross directories.
        return fnmatch.fnmatchcase(relative_path, pattern) and (
            pattern.count("/") == relative_path.count("/")
        )
    return _glob_regex(pattern).match(relative_path) is not None


def scan_directory(
    root: Path,
    include: Sequence[str] = DEFAULT_INCLUDE,
    exclude: Sequence[str] = DEFAULT_EXCLUDE,
) -> list[ScannedFile]:
    """Enumerate files under *root* matching *include* and none of *exclude*.

    A file *root* yields just that file.  Results are sorted by relative path.

    Raises
    ------
    FileNotFoundError
        When *root* does not exist.
    """
    root = root.resolve()
    if not root.exists():
        msg = f"Path does not exist: {root}"
        raise FileNotFoundError(msg)

    if root.is_file():
        return [ScannedFile(absolute_path=root, relative_path=root.name, size=root.stat().st_size)]

    found: list[ScannedFile] = []
    for path in root.rglob("*"):
        if not path.is_file():
            continue
        rel = path.relative_to(root).as_posix()
        if not any(matches_glob(rel, pat) for pat in include):
            continue
        if any(matches_glob(rel, pat) for pat in exclude):
            continue
        found.append(ScannedFile(absolute_path=path, relative_path=rel, size=path.stat().st_size))

    found.sort(key=lambda f: f.relative_path)
    return found


def find_project_root(start_dir: Path) -> Path | None:
    """Walk up from *start_dir* looking for a project marker file."""
    current = start_dir.resolve()
    for candidate in (current, *current.parents):
        if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
            return candidate
    return None
