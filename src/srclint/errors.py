"""
Error types and user-friendly error messages.
"""

from pathlib import Path

from rich.console import Console
from rich.markup import escape

console = Console(stderr=True)


class SrclintError(Exception):
    """Base class for errors that abort a lint run."""

    pass


class FilesystemError(SrclintError):
    """
    A filesystem operation failed while stat'ing a target, listing a
    directory, or reading an ignore file.

    `cause` is the OSError raised, or the UnicodeDecodeError for an
    ignore file that is not valid UTF-8.
    """

    def __init__(self, path: str | Path, cause: OSError | UnicodeDecodeError):
        self.path = str(path)
        self.cause = cause
        if isinstance(cause, UnicodeDecodeError):
            reason = f"Not valid UTF-8 ({cause.reason})"
        else:
            reason = cause.strerror or str(cause)
        super().__init__(f"{reason}: '{self.path}'")


class ConfigError(SrclintError):
    """A configuration file could not be read or parsed."""

    def __init__(self, path: str | Path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Invalid configuration in '{self.path}': {reason}")


class RuleLoadError(SrclintError):
    """A rules directory could not be loaded."""

    pass


def show_error_help(error: SrclintError) -> None:
    """Print a hard error with a hint about how to fix it."""
    console.print(f"[red]❌ Error:[/red] {escape(str(error))}")

    if isinstance(error, FilesystemError):
        if isinstance(error.cause, FileNotFoundError):
            console.print("\n[yellow]💡 Tip:[/yellow] Check the path and try again")
        elif isinstance(error.cause, PermissionError):
            console.print(f"\n[yellow]💡 Fix:[/yellow] Make sure {escape(error.path)} is readable")
        elif isinstance(error.cause, UnicodeDecodeError):
            console.print("\n[yellow]💡 Fix:[/yellow] Save the file as UTF-8")
    elif isinstance(error, ConfigError):
        console.print(
            "\n[yellow]💡 Tip:[/yellow] Config files are TOML with a [rules] table, "
            "e.g. [dim]no-print = \"warn\"[/dim]"
        )
    elif isinstance(error, RuleLoadError):
        console.print("\n[yellow]💡 Tip:[/yellow] Rule modules must define Rule subclasses with a RULE_ID")
