# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Rule oracle interface and an expression-based implementation.

The selection pipeline treats rule evaluation as an oracle answering four
questions: is a selection rule satisfied, what does a width/depth rule
estimate, which QPUs are statically eligible, and which parameters does a
rule reference. Any object implementing :class:`RuleOracleProtocol` can be
plugged in.

:class:`ExpressionRuleOracle` evaluates rules written as Python
expressions over parameter names, without using :func:`eval`::

    selection_rule = "N % 2 == 1 and N > 3"
    width_rule     = "2 * ceil(log2(N)) + 3"
    depth_rule     = "40 * ceil(log2(N)) ** 3"

Supported syntax: numbers, strings, booleans, parameter names, arithmetic
(``+ - * / // % **``), comparisons (including chained), ``and``/``or``/
``not``, conditional expressions, and the functions listed in
:data:`RULE_FUNCTIONS`.
"""

from __future__ import annotations

import ast
import functools
import logging
import math
import operator
from typing import Any, Callable, Mapping, Protocol, runtime_checkable

from nisq_analyzer.errors import RuleError
from nisq_analyzer.models import Implementation, Parameter, ParameterType, Qpu


logger = logging.getLogger(__name__)


@runtime_checkable
class RuleOracleProtocol(Protocol):
    """Contract of the symbolic rule engine used during selection."""

    def is_feasible(self, rule: str | None, params: Mapping[str, str]) -> bool:
        """Evaluate a selection rule; a missing rule is always satisfied."""
        ...

    def estimate(self, rule: str | None, params: Mapping[str, str]) -> int:
        """Evaluate a width or depth rule; a missing rule estimates 0."""
        ...

    def shortlist(
        self,
        implementation: Implementation,
        estimated_width: int,
        estimated_depth: int,
    ) -> list[str]:
        """Return ids of QPUs statically compatible with the estimates."""
        ...

    def referenced_parameters(
        self,
        rule: str | None,
        *,
        numeric: bool = False,
    ) -> set[Parameter]:
        """Return the parameters a rule refers to, without evaluating it."""
        ...


#: Functions callable from rule expressions.
RULE_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "abs": abs,
    "ceil": math.ceil,
    "floor": math.floor,
    "float": float,
    "int": int,
    "len": len,
    "log": math.log,
    "log2": math.log2,
    "max": max,
    "min": min,
    "sqrt": math.sqrt,
    "str": str,
}

_BINARY_OPS: dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS: dict[type, Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
    ast.Not: operator.not_,
}

_COMPARE_OPS: dict[type, Callable[[Any, Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}

_ALLOWED_NODES: tuple[type, ...] = (
    ast.Expression,
    ast.BoolOp,
    ast.And,
    ast.Or,
    ast.BinOp,
    ast.UnaryOp,
    ast.Compare,
    ast.IfExp,
    ast.Call,
    ast.Name,
    ast.Load,
    ast.Constant,
    *_BINARY_OPS,
    *_UNARY_OPS,
    *_COMPARE_OPS,
)


@functools.lru_cache(maxsize=512)
def parse_rule(rule: str) -> ast.Expression:
    """
    Parse and validate a rule expression.

    Parameters
    ----------
    rule : str
        Rule source.

    Returns
    -------
    ast.Expression
        Validated syntax tree.

    Raises
    ------
    RuleError
        If the rule is not valid syntax or uses unsupported constructs.
    """
    try:
        tree = ast.parse(rule.strip(), mode="eval")
    except SyntaxError as e:
        raise RuleError(f"Invalid rule {rule!r}: {e.msg}") from e

    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            raise RuleError(
                f"Unsupported construct {type(node).__name__} in rule {rule!r}"
            )
        if isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.func.id not in RULE_FUNCTIONS:
                raise RuleError(f"Unsupported function call in rule {rule!r}")
            if node.keywords:
                raise RuleError(f"Keyword arguments are not allowed in rule {rule!r}")

    return tree


def rule_names(rule: str) -> list[str]:
    """Return parameter names referenced by a rule, in syntax-tree traversal order."""
    tree = parse_rule(rule)
    function_nodes = {
        id(node.func) for node in ast.walk(tree) if isinstance(node, ast.Call)
    }
    names: list[str] = []
    for node in ast.walk(tree):
        if (
            isinstance(node, ast.Name)
            and id(node) not in function_nodes
            and node.id not in names
        ):
            names.append(node.id)
    return names


def coerce_value(raw: Any) -> Any:
    """Turn a raw parameter string into int, float or bool when it parses."""
    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return raw


class _Evaluator:
    """Walks a validated rule tree against a variable binding."""

    def __init__(self, rule: str, variables: Mapping[str, Any]) -> None:
        self._rule = rule
        self._variables = variables

    def eval(self, node: ast.AST) -> Any:
        if isinstance(node, ast.Expression):
            return self.eval(node.body)
        if isinstance(node, ast.Constant):
            return node.value
        if isinstance(node, ast.Name):
            if node.id not in self._variables:
                raise RuleError(f"Unbound name {node.id!r} in rule {self._rule!r}")
            return self._variables[node.id]
        if isinstance(node, ast.BoolOp):
            if isinstance(node.op, ast.And):
                result: Any = True
                for value in node.values:
                    result = self.eval(value)
                    if not result:
                        return result
                return result
            result = False
            for value in node.values:
                result = self.eval(value)
                if result:
                    return result
            return result
        if isinstance(node, ast.BinOp):
            return _BINARY_OPS[type(node.op)](self.eval(node.left), self.eval(node.right))
        if isinstance(node, ast.UnaryOp):
            return _UNARY_OPS[type(node.op)](self.eval(node.operand))
        if isinstance(node, ast.Compare):
            left = self.eval(node.left)
            for op, comparator in zip(node.ops, node.comparators):
                right = self.eval(comparator)
                if not _COMPARE_OPS[type(op)](left, right):
                    return False
                left = right
            return True
        if isinstance(node, ast.IfExp):
            return self.eval(node.body) if self.eval(node.test) else self.eval(node.orelse)
        if isinstance(node, ast.Call):
            func = RULE_FUNCTIONS[node.func.id]  # type: ignore[attr-defined]
            return func(*(self.eval(arg) for arg in node.args))
        raise RuleError(f"Unsupported construct in rule {self._rule!r}")


def evaluate_rule(rule: str, variables: Mapping[str, Any]) -> Any:
    """
    Evaluate a rule expression.

    Raises
    ------
    RuleError
        If the rule is invalid, references an unbound name, or fails
        during evaluation (e.g. division by zero, type mismatch).
    """
    tree = parse_rule(rule)
    try:
        return _Evaluator(rule, variables).eval(tree)
    except RuleError:
        raise
    except (ArithmeticError, TypeError, ValueError) as e:
        raise RuleError(f"Evaluation of rule {rule!r} failed: {e}") from e


class ExpressionRuleOracle:
    """
    Rule oracle over Python-expression rules and catalog QPU facts.

    Parameters
    ----------
    catalog : CatalogProtocol
        Source of QPU facts for :meth:`shortlist`.
    qpu_rules : mapping of str to str, optional
        Extra per-implementation QPU predicates, keyed by implementation
        id. The expression sees ``qubit_count``, ``t1``,
        ``max_gate_time``, ``max_depth``, ``simulator``, ``width`` and
        ``depth``.
    """

    def __init__(self, catalog: Any, qpu_rules: Mapping[str, str] | None = None) -> None:
        self._catalog = catalog
        self._qpu_rules = dict(qpu_rules or {})

    def is_feasible(self, rule: str | None, params: Mapping[str, str]) -> bool:
        if rule is None or not rule.strip():
            return True
        result = evaluate_rule(rule, self._bind(params))
        logger.debug("Selection rule %r evaluated to %r", rule, result)
        return bool(result)

    def estimate(self, rule: str | None, params: Mapping[str, str]) -> int:
        if rule is None or not rule.strip():
            return 0
        value = evaluate_rule(rule, self._bind(params))
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise RuleError(f"Rule {rule!r} did not produce a number: {value!r}")
        if value < 0 or math.isnan(value) or math.isinf(value):
            raise RuleError(f"Rule {rule!r} produced an invalid estimate: {value!r}")
        return int(math.ceil(value))

    def shortlist(
        self,
        implementation: Implementation,
        estimated_width: int,
        estimated_depth: int,
    ) -> list[str]:
        suitable = [
            qpu.id
            for qpu in self._catalog.list_qpus()
            if self._qpu_matches(qpu, implementation, estimated_width, estimated_depth)
        ]
        logger.debug(
            "Shortlisted %d QPU(s) for implementation %s (width=%d, depth=%d)",
            len(suitable),
            implementation.name,
            estimated_width,
            estimated_depth,
        )
        return suitable

    def referenced_parameters(
        self,
        rule: str | None,
        *,
        numeric: bool = False,
    ) -> set[Parameter]:
        if rule is None or not rule.strip():
            return set()
        type_ = ParameterType.INTEGER if numeric else ParameterType.UNKNOWN
        return {Parameter(name, type_) for name in rule_names(rule)}

    def _bind(self, params: Mapping[str, str]) -> dict[str, Any]:
        return {name: coerce_value(value) for name, value in params.items()}

    def _qpu_matches(
        self,
        qpu: Qpu,
        implementation: Implementation,
        width: int,
        depth: int,
    ) -> bool:
        if not qpu.supports_sdk(implementation.sdk):
            return False
        if width and qpu.qubit_count < width:
            return False
        max_depth = qpu.max_circuit_depth
        if depth and max_depth is not None and max_depth < depth:
            return False

        custom = self._qpu_rules.get(implementation.id)
        if custom is None:
            return True
        facts = {
            "qubit_count": qpu.qubit_count,
            "t1": qpu.t1,
            "max_gate_time": qpu.max_gate_time,
            "max_depth": max_depth if max_depth is not None else math.inf,
            "simulator": qpu.simulator,
            "width": width,
            "depth": depth,
        }
        return bool(evaluate_rule(custom, facts))
