"""
Resolve the effective lint configuration for a file.
"""

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from srclint.errors import ConfigError
from srclint.options import RunOptions
from srclint.rules import RuleRegistry

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".srclintrc.toml"

SEVERITY_NAMES = {"off": 0, "warn": 1, "warning": 1, "error": 2}

# Globals predefined by each environment
ENVIRONMENTS: dict[str, frozenset[str]] = {
    "pytest": frozenset({"pytest", "request", "tmp_path", "monkeypatch", "capsys", "caplog"}),
    "django": frozenset({"settings", "request"}),
    "ipython": frozenset({"get_ipython", "display", "In", "Out"}),
    "jupyter": frozenset({"get_ipython", "display", "In", "Out", "_", "__", "___"}),
}


def normalize_severity(value: Any) -> int:
    """
    Map 0/1/2 or "off"/"warn"/"error" to an integer severity.

    Raises:
        ValueError for anything else
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid severity {value!r}")
    if isinstance(value, int) and value in (0, 1, 2):
        return value
    if isinstance(value, str) and value.lower() in SEVERITY_NAMES:
        return SEVERITY_NAMES[value.lower()]
    raise ValueError(f"Invalid severity {value!r}; expected 0, 1, 2, 'off', 'warn' or 'error'")


@dataclass(frozen=True)
class LintConfig:
    """Effective configuration for one file."""

    rules: Mapping[str, int] = field(default_factory=dict)
    globals: frozenset[str] = frozenset()
    envs: tuple[str, ...] = ()

    def severity(self, rule_id: str) -> int:
        return self.rules.get(rule_id, 0)


class ConfigProvider(Protocol):
    def get_config(self, path: str | Path) -> LintConfig: ...


@dataclass(frozen=True)
class _ConfigLayer:
    """The contents of one config file."""

    rules: dict[str, int]
    envs: tuple[str, ...]
    globals: tuple[str, ...]


class ConfigResolver:
    """
    Maps a file path to its LintConfig.

    Layers, lowest first: builtin rule defaults (unless `reset`),
    .srclintrc.toml files from the filesystem root down to the file's
    directory, the explicit `config_file`, `envs`/`globals` from the
    options, inline `rules` from the options.
    """

    def __init__(self, options: RunOptions, registry: RuleRegistry):
        self.options = options
        self.registry = registry

        self._file_cache: dict[Path, _ConfigLayer] = {}
        self._dir_cache: dict[Path, tuple[Path, ...]] = {}

        self._explicit = self._load_file(Path(options.config_file)) if options.config_file else None

        self._inline: dict[str, int] = {}
        for rule_id, value in options.rules.items():
            try:
                self._inline[rule_id] = normalize_severity(value)
            except ValueError as e:
                raise ConfigError("<options>", f"rule '{rule_id}': {e}") from e

        for env in options.envs:
            if env not in ENVIRONMENTS:
                raise ConfigError("<options>", f"unknown environment '{env}'")

    def get_config(self, path: str | Path) -> LintConfig:
        path = Path(os.path.abspath(path))

        layers: list[_ConfigLayer] = []
        if self.options.use_config_files:
            layers.extend(self._load_file(p) for p in self._config_files(path.parent))
        if self._explicit is not None:
            layers.append(self._explicit)

        rules = {} if self.options.reset else self.registry.defaults()
        envs: list[str] = []
        declared: set[str] = set()

        for layer in layers:
            rules.update(layer.rules)
            envs.extend(layer.envs)
            declared.update(layer.globals)

        envs.extend(self.options.envs)
        declared.update(self.options.globals)
        rules.update(self._inline)

        for env in envs:
            declared.update(ENVIRONMENTS[env])

        return LintConfig(
            rules=rules,
            globals=frozenset(declared),
            envs=tuple(dict.fromkeys(envs)),
        )

    def _config_files(self, directory: Path) -> tuple[Path, ...]:
        """Config files from the filesystem root down to `directory`."""
        cached = self._dir_cache.get(directory)
        if cached is not None:
            return cached

        parent = directory.parent
        inherited = () if parent == directory else self._config_files(parent)

        candidate = directory / CONFIG_FILENAME
        found = inherited + (candidate,) if candidate.is_file() else inherited
        self._dir_cache[directory] = found
        return found

    def _load_file(self, path: Path) -> _ConfigLayer:
        cached = self._file_cache.get(path)
        if cached is not None:
            return cached

        logger.debug("Loading config file %s", path)
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(path, e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise ConfigError(path, f"not valid UTF-8 ({e.reason})") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(path, str(e)) from e

        raw_rules = data.get("rules", {})
        if not isinstance(raw_rules, dict):
            raise ConfigError(path, "[rules] must be a table")

        rules: dict[str, int] = {}
        for rule_id, value in raw_rules.items():
            try:
                rules[rule_id] = normalize_severity(value)
            except ValueError as e:
                raise ConfigError(path, f"rule '{rule_id}': {e}") from e

        envs = data.get("env", [])
        declared = data.get("globals", [])
        if not isinstance(envs, list) or not isinstance(declared, list):
            raise ConfigError(path, "'env' and 'globals' must be arrays")

        unknown = [env for env in envs if env not in ENVIRONMENTS]
        if unknown:
            raise ConfigError(path, f"unknown environment '{unknown[0]}'")

        layer = _ConfigLayer(rules=rules, envs=tuple(envs), globals=tuple(str(g) for g in declared))
        self._file_cache[path] = layer
        return layer
