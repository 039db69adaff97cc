"""
AST visitor that runs the active rules over a parsed module.
"""

import ast
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from srclint.rules import Rule

SEVERITY_LABELS = {1: "warning", 2: "error"}


@dataclass
class LintMessage:
    """A single problem reported for a file."""

    message: str
    fatal: bool = False
    rule_id: Optional[str] = None
    severity: int = 2  # 1 = warning, 2 = error
    line: Optional[int] = None
    column: Optional[int] = None

    @property
    def label(self) -> str:
        return SEVERITY_LABELS.get(self.severity, "error")


class RuleVisitor(ast.NodeVisitor):
    """
    Dispatches every node to the rules interested in its type and
    collects the messages they report.
    """

    def __init__(
        self,
        rules: list[tuple["Rule", int]] | None = None,
        declared_globals: frozenset[str] = frozenset(),
    ):
        self.messages: list[LintMessage] = []
        self._seen_message_keys: set[tuple[Optional[int], Optional[int], Optional[str]]] = set()

        # (rule, configured severity) pairs, severity > 0
        self.rules = rules or []

        # Names configured through `globals` and `envs`
        self.declared_globals = declared_globals

        # 0 at module level, incremented inside functions and lambdas
        self.scope_depth = 0

    def visit(self, node: ast.AST):
        for rule, severity in self.rules:
            if isinstance(node, rule.NODE_TYPES):
                message = rule.check(node, self)
                if message:
                    self._append_message(replace(message, severity=severity))
        return super().visit(node)

    def visit_FunctionDef(self, node: ast.FunctionDef):
        self._visit_scope(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef):
        self._visit_scope(node)

    def visit_Lambda(self, node: ast.Lambda):
        self._visit_scope(node)

    def _visit_scope(self, node: ast.AST) -> None:
        self.scope_depth += 1
        try:
            self.generic_visit(node)
        finally:
            self.scope_depth -= 1

    def _append_message(self, message: LintMessage) -> None:
        """
        Append a message unless an identical one was already recorded.
        Keyed by (line, column, rule_id).
        """
        key = (message.line, message.column, message.rule_id)
        if key in self._seen_message_keys:
            return
        self._seen_message_keys.add(key)
        self.messages.append(message)
