"""Destination resolution.

Maps a location hint from the registry (`.`, `$HOST`, `$HOME/...`, an
absolute path, `dir/` or `file.ext`) to a concrete base directory, and a
bundle filename to the absolute path it is written to.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Iterator

from core.domain.errors import (
    InvalidLocationError,
    NotFoundError,
    PlatformMismatchError,
    TraversalError,
)
from core.templating import Substitution


logger = logging.getLogger(__name__)

HOST_SENTINEL = "$HOST"
HOME_SENTINEL = "$HOME"

# Searched in this order; the first marker with any hit wins.
HOST_FILES: tuple[str, ...] = (
    "appsettings.json",
    "Web.config",
    "App.config",
    "Startup.cs",
    "Program.cs",
    "*.csproj",
)

SKIP_DIRS: frozenset[str] = frozenset({"node_modules", "bin", "obj"})
MAX_SEARCH_DEPTH = 10

OPTIONAL_MARKER = "?"
BINARY_MARKER = "|base64"


def walk_tree(
    root: Path,
    predicate: Callable[[Path], bool],
    *,
    dirs: bool = False,
    max_depth: int = MAX_SEARCH_DEPTH,
    skip: frozenset[str] = SKIP_DIRS,
) -> Iterator[Path]:
    """Depth-first search yielding files (or directories) matching `predicate`.

    Dot-prefixed entries are never visited. Directories in `skip` may still
    match when searching for directories but are not descended into.
    """

    if max_depth <= 0:
        return
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError:
        return

    for entry in entries:
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            if dirs and predicate(entry):
                yield entry
            if entry.name not in skip:
                yield from walk_tree(entry, predicate, dirs=dirs, max_depth=max_depth - 1, skip=skip)
        elif not dirs and entry.is_file() and predicate(entry):
            yield entry


def _name_matcher(pattern: str) -> Callable[[Path], bool]:
    if "*" in pattern:
        return lambda p: fnmatchcase(p.name, pattern)
    return lambda p: p.name == pattern


def find_files(root: Path, pattern: str) -> list[Path]:
    return list(walk_tree(root, _name_matcher(pattern)))


def find_directories(root: Path, name: str) -> list[Path]:
    return list(walk_tree(root, _name_matcher(name), dirs=True))


def _first_file(root: Path, pattern: str) -> Path | None:
    return next(walk_tree(root, _name_matcher(pattern)), None)


@dataclass(frozen=True)
class DestinationResolver:
    """Resolves hints relative to `cwd` for one target platform."""

    cwd: Path = field(default_factory=Path.cwd)
    windows: bool = sys.platform == "win32"
    home: Path = field(default_factory=Path.home)

    def resolve_base_path(self, to: str | None, suffix: str = "") -> Path:
        """Return the base directory for a location hint.

        `suffix` is appended to error messages (usually " required by <url>").
        """

        if not to or to == ".":
            return self.cwd

        if ".." in to:
            raise TraversalError(f"Invalid location '{to}'{suffix}")

        if to.startswith("/"):
            if self.windows:
                raise PlatformMismatchError(f"Cannot write to '{to}' on Windows{suffix}")
            return Path(to)

        if ":\\" in to:
            if not self.windows:
                raise PlatformMismatchError(f"Cannot write to '{to}'{suffix}")
            return Path(to)

        if to.startswith("$"):
            if to.startswith(HOST_SENTINEL):
                return self.find_host_dir(suffix)
            if to.startswith(HOME_SENTINEL):
                rest = to[len(HOME_SENTINEL) :].lstrip("/\\")
                return self.home / rest if rest else self.home
            raise InvalidLocationError(f"Unknown location '{to}'{suffix}")

        if to.endswith("/"):
            dir_name = to[:-1]
            found = next(walk_tree(self.cwd, _name_matcher(dir_name), dirs=True), None)
            if found is None:
                raise NotFoundError(f"Unable to find Directory named '{dir_name}'{suffix}")
            return found

        found = _first_file(self.cwd, to)
        if found is None:
            raise NotFoundError(f"Unable to find File named '{to}'{suffix}")
        return found.parent

    def find_host_dir(self, suffix: str = "") -> Path:
        for marker in HOST_FILES:
            found = _first_file(self.cwd, marker)
            if found is not None:
                logger.debug("Found host marker %s", found)
                return found.parent
        raise NotFoundError(
            f"Couldn't find host project location containing any of {', '.join(HOST_FILES)}{suffix}"
        )

    def resolve_file_path(
        self,
        filename: str,
        base: Path,
        substitution: Substitution,
        to: str | None,
    ) -> Path:
        """Absolute destination of a bundle file.

        Gist filenames use `\\` as folder separator. `$HOST` bundles that write
        into a folder missing under the host directory are retried under the
        project-qualified path (`<Project>.<filename>`) from the cwd.
        """

        if ".." in filename:
            raise TraversalError(f"Invalid file name '{filename}'")

        name = substitution.apply(_os_path(filename))
        name = name.removesuffix(OPTIONAL_MARKER)
        resolved = _join_within(base, name, filename)

        writes_to_folder = "\\" in filename
        if to == HOST_SENTINEL and writes_to_folder and not resolved.parent.exists():
            qualified = f"{substitution.project_name}.{filename}"
            retry = self.resolve_file_path(qualified, self.cwd, substitution, ".")
            if retry.parent.exists():
                logger.debug("Using matching qualified path: %s", retry)
                return retry

        return resolved


def _os_path(filename: str) -> str:
    return filename.replace("\\", "/")


def _join_within(base: Path, name: str, original: str) -> Path:
    base = Path(os.path.abspath(base))
    target = Path(os.path.abspath(base / name))
    if target != base and base not in target.parents:
        raise TraversalError(f"Invalid file name '{original}' resolves outside {base}")
    return target


def split_markers(path: Path) -> tuple[Path, bool]:
    """Strip the binary marker from a resolved path, returning (path, binary)."""

    if path.name.endswith(BINARY_MARKER):
        return path.with_name(path.name.removesuffix(BINARY_MARKER)), True
    return path, False
