"""
The lint engine: runs a list of targets in order and collects the results.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, Optional

from srclint.config import ConfigResolver
from srclint.dispatcher import TargetDispatcher
from srclint.errors import SrclintError
from srclint.ignore import IgnoreFileLocator
from srclint.options import RunOptions
from srclint.processor import FileProcessor, LintResult
from srclint.rules import RuleRegistry
from srclint.verifier import SourceVerifier, Verifier

logger = logging.getLogger(__name__)

ResultsCallback = Callable[[Optional[SrclintError], Optional[list[LintResult]]], None]


class Engine:
    """
    Lints files and directories.

    Typical use:
        engine = Engine({"rules": {"no-print": "off"}})
        results = asyncio.run(engine.execute_on_files(["src", "setup.py"]))

    One engine may be used for several runs, one at a time; each run
    gets its own config resolver and ignore-file cache.
    """

    def __init__(
        self,
        options: RunOptions | Mapping[str, Any] | None = None,
        verifier: Verifier | None = None,
    ):
        if options is None:
            options = RunOptions()
        elif not isinstance(options, RunOptions):
            options = RunOptions.model_validate(dict(options))
        self.options = options

        # load in additional rules
        self.registry = RuleRegistry()
        for rules_dir in options.rule_paths:
            logger.debug("Loading rules from %s", rules_dir)
            self.registry.load_directory(rules_dir)

        self.verifier = verifier or SourceVerifier(self.registry)

    async def execute_on_files(self, targets: Sequence[str | Path]) -> list[LintResult]:
        """
        Lint `targets` strictly one after another.

        Returns:
            Results in target order; within a directory, in discovery order

        Raises:
            SrclintError on the first hard error; no partial results are returned
        """
        config_resolver = ConfigResolver(self.options, self.registry)
        dispatcher = TargetDispatcher(
            self.options,
            FileProcessor(self.verifier),
            IgnoreFileLocator(),
        )

        results: list[LintResult] = []
        for target in targets:
            results.extend(await dispatcher.dispatch(str(target), config_resolver))

        logger.debug("Linted %d file(s) from %d target(s)", len(results), len(targets))
        return results

    def execute(self, targets: Sequence[str | Path], callback: ResultsCallback) -> None:
        """
        Run `execute_on_files` to completion and report through `callback`,
        which is called exactly once with either (error, None) or
        (None, results).
        """
        try:
            results = asyncio.run(self.execute_on_files(list(targets)))
        except SrclintError as e:
            logger.debug("Run aborted: %s", e)
            callback(e, None)
            return
        callback(None, results)
