"""srclint: lint Python sources, honoring .srclintignore files."""

from .engine import Engine
from .errors import ConfigError, FilesystemError, RuleLoadError, SrclintError
from .options import RunOptions
from .processor import LintResult
from .visitor import LintMessage

__version__ = "0.1.0"

__all__ = [
    "Engine",
    "RunOptions",
    "LintResult",
    "LintMessage",
    "SrclintError",
    "FilesystemError",
    "ConfigError",
    "RuleLoadError",
]
