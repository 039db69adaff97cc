"""
Ignore files: loading them and finding them in ancestor directories.
"""

import asyncio
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pathspec

from srclint.errors import FilesystemError

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".srclintignore"


@dataclass(frozen=True)
class IgnoreSource:
    """
    One ignore file and its compiled patterns.

    Patterns are matched against paths relative to `base_dir`; paths
    outside `base_dir` never match.
    """

    path: Path
    base_dir: Path
    spec: pathspec.PathSpec

    def matches(self, path: Path, is_dir: bool = False) -> bool:
        try:
            rel = path.relative_to(self.base_dir).as_posix()
        except ValueError:
            return False

        if rel == ".":
            return False
        if self.spec.match_file(rel):
            return True
        # directory-only patterns such as "build/"
        return is_dir and self.spec.match_file(rel + "/")


def read_ignore_source(path: Path, base_dir: Path | None = None) -> IgnoreSource:
    """
    Read and compile an ignore file.

    Raises:
        FilesystemError if the file cannot be read or is not valid UTF-8
    """
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise FilesystemError(path, e) from e

    return IgnoreSource(
        path=path,
        base_dir=base_dir if base_dir is not None else path.parent,
        spec=pathspec.GitIgnoreSpec.from_lines(lines),
    )


class IgnoreFileLocator:
    """
    Finds ignore files in a directory and all of its ancestors, and loads them.

    Both lookups and loads are memoized for the lifetime of the locator,
    which is one Engine run.
    """

    def __init__(
        self,
        filename: str = IGNORE_FILENAME,
        listdir: Callable[[Path], list[str]] = os.listdir,
    ):
        self.filename = filename
        self._listdir = listdir

        # directory -> ignore files in it and its ancestors, nearest first
        self._found: dict[Path, tuple[Path, ...]] = {}
        self._sources: dict[Path, IgnoreSource] = {}

    async def find_all(self, directory: str | Path) -> tuple[Path, ...]:
        """
        Return the ignore files in `directory` and every ancestor up to
        the filesystem root, nearest first.

        Raises:
            FilesystemError if any of those directories cannot be listed
        """
        directory = Path(os.path.abspath(directory))

        # Directories not scanned yet, nearest first
        pending: list[Path] = []
        current = directory
        while current not in self._found:
            pending.append(current)
            if current.parent == current:
                break
            current = current.parent

        if not pending:
            logger.debug("Ignore files for %s already known", directory)

        found = self._found.get(current, ())
        for scanned in reversed(pending):
            names = await asyncio.to_thread(self._scan, scanned)
            if self.filename in names:
                found = (scanned / self.filename,) + found
            self._found[scanned] = found

        return self._found[directory]

    async def load(self, path: Path, base_dir: Path | None = None) -> IgnoreSource:
        """Load (or return the already loaded) ignore source at `path`."""
        source = self._sources.get(path)
        if source is None:
            logger.debug("Loading ignore file %s", path)
            source = await asyncio.to_thread(read_ignore_source, path, base_dir)
            self._sources[path] = source
        return source

    def _scan(self, directory: Path) -> list[str]:
        try:
            return list(self._listdir(directory))
        except OSError as e:
            raise FilesystemError(directory, e) from e
