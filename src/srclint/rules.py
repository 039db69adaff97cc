"""
Rule registry: builtin rules plus rules loaded from rule directories.
"""

import ast
import importlib.util
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from srclint.errors import RuleLoadError
from srclint.visitor import LintMessage, RuleVisitor

logger = logging.getLogger(__name__)


class Rule(ABC):
    """Base class for lint rules."""

    RULE_ID: str = ""
    DEFAULT_SEVERITY: int = 2

    # Node classes `check` is called for
    NODE_TYPES: tuple[type[ast.AST], ...] = ()

    @abstractmethod
    def check(self, node: ast.AST, visitor: RuleVisitor) -> Optional[LintMessage]:
        """
        Check a node of one of NODE_TYPES.

        Returns:
            LintMessage if the node violates the rule, None otherwise
        """
        pass

    def report(self, node: ast.AST, message: str) -> LintMessage:
        """Build a message for `node`; the visitor fills in the configured severity."""
        return LintMessage(
            message=message,
            rule_id=self.RULE_ID,
            severity=self.DEFAULT_SEVERITY,
            line=getattr(node, "lineno", None),
            column=getattr(node, "col_offset", -1) + 1,
        )


class NoEvalRule(Rule):
    """
    Flag calls to the eval() and exec() builtins.
    """

    RULE_ID = "no-eval"
    DEFAULT_SEVERITY = 2
    NODE_TYPES = (ast.Call,)

    FORBIDDEN = {"eval", "exec"}

    def check(self, node: ast.Call, visitor: RuleVisitor) -> Optional[LintMessage]:
        if isinstance(node.func, ast.Name) and node.func.id in self.FORBIDDEN:
            return self.report(node, f"{node.func.id}() can be harmful.")
        return None


class NoBareExceptRule(Rule):
    """
    Flag `except:` clauses without an exception type.
    """

    RULE_ID = "no-bare-except"
    DEFAULT_SEVERITY = 1
    NODE_TYPES = (ast.ExceptHandler,)

    def check(self, node: ast.ExceptHandler, visitor: RuleVisitor) -> Optional[LintMessage]:
        if node.type is None:
            return self.report(node, "Bare 'except:' also catches SystemExit and KeyboardInterrupt.")
        return None


class NoPrintRule(Rule):
    RULE_ID = "no-print"
    DEFAULT_SEVERITY = 1
    NODE_TYPES = (ast.Call,)

    def check(self, node: ast.Call, visitor: RuleVisitor) -> Optional[LintMessage]:
        if isinstance(node.func, ast.Name) and node.func.id == "print":
            return self.report(node, "Unexpected print() call.")
        return None


class NoShadowGlobalRule(Rule):
    """
    Flag local bindings that shadow a declared global.

    Declared globals come from the `globals` option and from the
    environments enabled with `envs`.
    """

    RULE_ID = "no-shadow-global"
    DEFAULT_SEVERITY = 2
    NODE_TYPES = (ast.Name, ast.arg)

    def check(self, node: ast.AST, visitor: RuleVisitor) -> Optional[LintMessage]:
        if visitor.scope_depth == 0:
            return None

        if isinstance(node, ast.Name):
            if not isinstance(node.ctx, ast.Store):
                return None
            name = node.id
        else:
            name = node.arg

        if name in visitor.declared_globals:
            return self.report(node, f"'{name}' shadows a declared global.")
        return None


BUILTIN_RULES: list[type[Rule]] = [
    NoEvalRule,
    NoBareExceptRule,
    NoPrintRule,
    NoShadowGlobalRule,
]


class RuleRegistry:
    """
    Rules known to one engine, keyed by RULE_ID.
    """

    def __init__(self, rule_classes: list[type[Rule]] | None = None):
        self._rules: dict[str, Rule] = {}
        for rule_class in BUILTIN_RULES if rule_classes is None else rule_classes:
            self.register(rule_class())

    def register(self, rule: Rule) -> None:
        if not rule.RULE_ID:
            raise RuleLoadError(f"{type(rule).__name__} does not define a RULE_ID")
        self._rules[rule.RULE_ID] = rule

    def get(self, rule_id: str) -> Optional[Rule]:
        return self._rules.get(rule_id)

    def defaults(self) -> dict[str, int]:
        """Default severity of every registered rule."""
        return {rule_id: rule.DEFAULT_SEVERITY for rule_id, rule in self._rules.items()}

    def load_directory(self, directory: str | Path) -> list[str]:
        """
        Import every *.py module in `directory` and register the Rule
        subclasses it defines.

        Returns:
            The ids of the rules registered, in load order

        Raises:
            RuleLoadError if the directory is missing or a module fails to import
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise RuleLoadError(f"Rules directory not found: {directory}")

        loaded: list[str] = []
        for path in sorted(directory.glob("*.py")):
            module_name = f"srclint_rules_{path.stem}"
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise RuleLoadError(f"Cannot import rule module {path}")

            module = importlib.util.module_from_spec(spec)
            try:
                spec.loader.exec_module(module)
            except Exception as e:
                raise RuleLoadError(f"Failed to import rule module {path}: {e}") from e

            for obj in vars(module).values():
                if (
                    isinstance(obj, type)
                    and issubclass(obj, Rule)
                    and obj.__module__ == module_name
                    and obj.RULE_ID
                ):
                    self.register(obj())
                    loaded.append(obj.RULE_ID)
                    logger.debug("Loaded rule %s from %s", obj.RULE_ID, path)

        return loaded
