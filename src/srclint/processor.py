"""
Lint a single file.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from srclint.config import ConfigProvider
from srclint.errors import FilesystemError
from srclint.verifier import Verifier
from srclint.visitor import LintMessage

logger = logging.getLogger(__name__)


@dataclass
class LintResult:
    """All messages for one file."""

    file_path: str
    messages: list[LintMessage] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(1 for m in self.messages if m.fatal or m.severity == 2)

    @property
    def warning_count(self) -> int:
        return sum(1 for m in self.messages if not m.fatal and m.severity == 1)


class FileProcessor:
    """
    Produces one LintResult per file.

    A file that does not exist still gets a result, carrying a single
    fatal message.
    """

    def __init__(self, verifier: Verifier):
        self.verifier = verifier

    def process(self, filename: str | Path, config_provider: ConfigProvider) -> LintResult:
        # clear all state left over from the previous file
        self.verifier.reset()

        file_path = Path(os.path.abspath(filename))

        if file_path.exists():
            logger.debug("Linting %s", file_path)
            config = config_provider.get_config(file_path)
            messages = self._verify(file_path, config, str(filename))
        else:
            logger.debug("Couldn't find %s", file_path)
            messages = [LintMessage(message=f"Could not find file at '{file_path}'.", fatal=True)]

        return LintResult(file_path=str(filename), messages=messages)

    def _verify(self, file_path: Path, config, filename: str) -> list[LintMessage]:
        try:
            text = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            return [LintMessage(message=f"Could not decode '{file_path}' as UTF-8: {e.reason}", fatal=True)]
        except OSError as e:
            raise FilesystemError(file_path, e) from e

        return self.verifier.verify(text, config, filename)
