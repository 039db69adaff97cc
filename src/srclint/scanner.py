"""
Directory traversal with .srclintignore support.
"""

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from srclint.config import ConfigProvider
from srclint.errors import FilesystemError
from srclint.ignore import IgnoreFileLocator, IgnoreSource
from srclint.options import RunOptions
from srclint.processor import FileProcessor, LintResult

logger = logging.getLogger(__name__)


def _scan_directory(directory: Path) -> list[tuple[str, bool]]:
    """
    List (name, is_dir) for the regular files and directories in
    `directory`, sorted by name. Symlinked directories are not followed.
    """
    entries: list[tuple[str, bool]] = []
    with os.scandir(directory) as it:
        for entry in it:
            if entry.is_dir(follow_symlinks=False):
                entries.append((entry.name, True))
            elif entry.is_file():
                entries.append((entry.name, False))
    entries.sort()
    return entries


async def _cancel(tasks: list[asyncio.Task]) -> None:
    """Cancel `tasks` and wait for them to finish."""
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


class IgnoreBarrier:
    """
    Counts inherited ignore files as they finish loading.

    Nothing may be filtered or emitted until `expected` loads have
    arrived. With expected == 0 the barrier starts cleared. A failed
    load releases the waiters with its error instead.
    """

    def __init__(self, expected: int):
        if expected < 0:
            raise ValueError("expected must be >= 0")
        self.expected = expected
        self.arrived = 0
        self._error: Optional[BaseException] = None
        self._event = asyncio.Event()
        if expected == 0:
            self._event.set()

    @property
    def cleared(self) -> bool:
        return self._error is None and self.arrived >= self.expected

    def arrive(self) -> None:
        self.arrived += 1
        if self.cleared:
            self._event.set()

    def fail(self, error: BaseException) -> None:
        # first failure wins
        if self._error is None:
            self._error = error
        self._event.set()

    async def wait(self) -> None:
        """
        Raises:
            The error of the first failed load, if any
        """
        await self._event.wait()
        if self._error is not None:
            raise self._error


@dataclass
class WalkContext:
    """State of one directory walk."""

    root: Path  # absolute
    display_root: Path  # as the caller spelled it
    inherited: list[IgnoreSource] = field(default_factory=list)
    results: list[LintResult] = field(default_factory=list)


class DirectoryWalker:
    """
    Recursively walks a directory and lints the eligible files in it.

    Eligible files have a suffix in `options.extensions` and are not
    matched by any ignore source: the ignore files inherited from the
    directory's ancestors, plus the ignore file of every directory on
    the way down (applying to that directory's subtree).
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        options: RunOptions,
        locator: IgnoreFileLocator,
        processor: FileProcessor,
        config_provider: ConfigProvider,
    ):
        self.directory = str(directory)
        self.options = options
        self.locator = locator
        self.processor = processor
        self.config_provider = config_provider

        self.context = WalkContext(
            root=Path(os.path.abspath(directory)),
            display_root=Path(directory),
        )
        self.barrier: Optional[IgnoreBarrier] = None

    @property
    def _per_directory_ignores(self) -> bool:
        return self.options.ignore and self.options.ignore_path is None

    async def walk(self) -> list[LintResult]:
        """
        Lint every eligible file, in discovery order.

        Raises:
            FilesystemError if listing a directory or loading an ignore file fails
        """
        logger.debug("Processing directory %s", self.directory)
        async for path in self.iter_files():
            self.context.results.append(self.processor.process(path, self.config_provider))
        return self.context.results

    async def iter_files(self) -> AsyncIterator[Path]:
        """
        Yield eligible files, depth-first with entries sorted by name.

        Listing the root and loading the inherited ignore files run
        alongside each other; filtering waits on the barrier until every
        inherited ignore file is registered.
        """
        ctx = self.context
        tasks = [asyncio.create_task(self._list_dir(ctx.root))]
        try:
            tasks.extend(await self._register_inherited(ctx))
            entries = await tasks[0]
            await self.barrier.wait()
        except BaseException:
            await _cancel(tasks)
            raise

        ctx.inherited.sort(key=lambda source: len(source.base_dir.parts))
        async for path in self._walk_dir(ctx.root, ctx.display_root, tuple(ctx.inherited), entries):
            yield path

    async def _inherited_ignore_files(self) -> list[tuple[Path, Optional[Path]]]:
        """(ignore file, base dir) pairs that apply to the whole walk."""
        if not self.options.ignore:
            return []

        if self.options.ignore_path is not None:
            # patterns in an explicit ignore file are relative to the cwd
            return [(Path(os.path.abspath(self.options.ignore_path)), Path.cwd())]

        root = self.context.root
        if root.parent == root:
            return []
        return [(path, None) for path in await self.locator.find_all(root.parent)]

    async def _register_inherited(self, ctx: WalkContext) -> list[asyncio.Task]:
        """
        Create the barrier and start one load per inherited ignore file.
        Each load arrives at the barrier when its source is registered.
        """
        files = await self._inherited_ignore_files()
        barrier = IgnoreBarrier(len(files))
        self.barrier = barrier

        if files:
            logger.debug("Waiting for %d inherited ignore file(s) for %s", len(files), self.directory)

        async def load(path: Path, base_dir: Optional[Path]) -> None:
            try:
                source = await self.locator.load(path, base_dir)
            except Exception as e:
                barrier.fail(e)
                return
            ctx.inherited.append(source)
            barrier.arrive()

        return [asyncio.create_task(load(path, base_dir)) for path, base_dir in files]

    async def _walk_dir(
        self,
        directory: Path,
        display: Path,
        sources: tuple[IgnoreSource, ...],
        entries: list[tuple[str, bool]],
    ) -> AsyncIterator[Path]:
        if self._per_directory_ignores and (self.locator.filename, False) in entries:
            local = await self.locator.load(directory / self.locator.filename)
            sources = sources + (local,)

        for name, is_dir in entries:
            path = directory / name
            if any(source.matches(path, is_dir) for source in sources):
                logger.debug("Ignoring %s", display / name)
                continue

            if is_dir:
                children = await self._list_dir(path)
                async for found in self._walk_dir(path, display / name, sources, children):
                    yield found
            elif path.suffix in self.options.extensions:
                self._check_barrier()
                yield display / name

    def _check_barrier(self) -> None:
        if self.barrier is None or not self.barrier.cleared:
            raise RuntimeError(
                f"File emitted from {self.directory} before inherited ignore files finished loading"
            )

    async def _list_dir(self, directory: Path) -> list[tuple[str, bool]]:
        try:
            return await asyncio.to_thread(_scan_directory, directory)
        except OSError as e:
            raise FilesystemError(directory, e) from e
