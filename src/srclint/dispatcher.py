"""
Route one target to the file processor or the directory walker.
"""

import asyncio
import logging
import os
import stat

from srclint.config import ConfigProvider
from srclint.errors import FilesystemError
from srclint.ignore import IgnoreFileLocator
from srclint.options import RunOptions
from srclint.processor import FileProcessor, LintResult
from srclint.scanner import DirectoryWalker

logger = logging.getLogger(__name__)


def _names_directory(target: str) -> bool:
    return target.endswith("/") or target.endswith(os.sep)


class TargetDispatcher:
    """
    Lints one target, always returning a list of results.
    """

    def __init__(self, options: RunOptions, processor: FileProcessor, locator: IgnoreFileLocator):
        self.options = options
        self.processor = processor
        self.locator = locator

    async def dispatch(self, target: str, config_provider: ConfigProvider) -> list[LintResult]:
        """
        Raises:
            FilesystemError if the target cannot be stat'd or walked. A
            missing target that is not spelled as a directory is not an
            error: it yields one result with a fatal message.
        """
        logger.debug("Processing file %s", target)
        try:
            st = await asyncio.to_thread(os.stat, target)
        except FileNotFoundError as e:
            if _names_directory(target):
                raise FilesystemError(target, e) from e
            return [self.processor.process(target, config_provider)]
        except OSError as e:
            raise FilesystemError(target, e) from e

        if not stat.S_ISDIR(st.st_mode):
            return [self.processor.process(target, config_provider)]

        walker = DirectoryWalker(
            target,
            options=self.options,
            locator=self.locator,
            processor=self.processor,
            config_provider=config_provider,
        )
        return await walker.walk()
