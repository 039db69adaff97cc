"""Run options for the lint engine."""

from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Severity = Union[int, str]


class RunOptions(BaseModel):
    """
    Options an Engine is constructed with.

    Defaults live on the fields; anything the caller passes wins.
    Instances are frozen once built.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Explicit config file layered over any .srclintrc.toml files
    config_file: Optional[Path] = None

    # Drop builtin rule defaults
    reset: bool = False

    # Extra directories to load Rule subclasses from
    rule_paths: tuple[Path, ...] = ()

    # Look up .srclintrc.toml files along the file's ancestors
    use_config_files: bool = True

    envs: tuple[str, ...] = ()
    globals: tuple[str, ...] = ()

    # Inline rule overrides, e.g. {"no-print": "off"}
    rules: dict[str, Severity] = Field(default_factory=dict)

    # False disables .srclintignore handling entirely
    ignore: bool = True

    # Ignore file used instead of per-directory .srclintignore files
    ignore_path: Optional[Path] = None

    # Suffixes of files picked up while walking directories
    extensions: tuple[str, ...] = (".py",)

    @field_validator("extensions")
    @classmethod
    def _dotted(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(ext if ext.startswith(".") else f".{ext}" for ext in value)
