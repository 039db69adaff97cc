"""
Verification: turn source text plus a LintConfig into messages.
"""

import ast
from typing import Optional, Protocol

from srclint.config import LintConfig
from srclint.rules import RuleRegistry
from srclint.visitor import LintMessage, RuleVisitor


class Verifier(Protocol):
    """
    What the FileProcessor needs from a verifier.

    `reset()` is called before every file; `verify()` must report bad
    input as messages instead of raising.
    """

    def reset(self) -> None: ...

    def verify(self, text: str, config: LintConfig, filename: str) -> list[LintMessage]: ...


class SourceVerifier:
    """
    Parses Python source and runs the rules enabled in the config.
    """

    def __init__(self, registry: RuleRegistry | None = None):
        self.registry = registry or RuleRegistry()
        self._visitor: Optional[RuleVisitor] = None

    def reset(self) -> None:
        """Drop the state left over from the previous file."""
        self._visitor = None

    def verify(self, text: str, config: LintConfig, filename: str) -> list[LintMessage]:
        if self._visitor is not None:
            raise RuntimeError("reset() must be called before verifying another file")

        try:
            tree = ast.parse(text, filename=filename)
        except SyntaxError as e:
            return [
                LintMessage(
                    message=f"Parsing error: {e.msg}",
                    fatal=True,
                    line=e.lineno,
                    column=e.offset,
                )
            ]
        except ValueError as e:
            # e.g. source containing null bytes
            return [LintMessage(message=f"Parsing error: {e}", fatal=True)]

        messages: list[LintMessage] = []
        active = []
        for rule_id, severity in config.rules.items():
            if severity <= 0:
                continue
            rule = self.registry.get(rule_id)
            if rule is None:
                messages.append(
                    LintMessage(
                        message=f"Definition for rule '{rule_id}' was not found.",
                        rule_id=rule_id,
                        severity=2,
                        line=1,
                        column=1,
                    )
                )
                continue
            active.append((rule, severity))

        self._visitor = RuleVisitor(active, declared_globals=config.globals)
        self._visitor.visit(tree)
        messages.extend(self._visitor.messages)

        messages.sort(key=lambda m: (m.line or 0, m.column or 0))
        return messages
