"""Expression tree and its recursive evaluator."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from ._errors import ArityError, InvalidExpressionError, UnboundVariableError
from ._token import Function, Operand, Operator, OperatorKind, Token, Variable, required_arity

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Node[T]:
    """A node of the expression tree.

    Leaves hold an Operand or a Variable and have no children. Operator and
    Function nodes hold their operands, in source order, as children.

    Attributes:
        token: The token held by this node.
        children: Child nodes (empty for leaves).

    """

    token: Token[T]
    children: tuple[Node[T], ...] = ()

    @property
    def is_leaf(self) -> bool:
        """Check if this node has no children."""
        return len(self.children) == 0

    def iter_nodes(self) -> Generator[Node[T]]:
        """Iterate over this node and its descendants, depth first, left to right."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def __str__(self) -> str:
        match self.token:
            case Operand() | Variable():
                return str(self.token)
            case Function(label=label):
                return f"{label}({', '.join(str(child) for child in self.children)})"
            case Operator(label=label, kind=kind):
                operands = [str(child) for child in self.children]
                if kind is OperatorKind.PREFIX:
                    return f"({label}{' ' if label[-1].isalnum() else ''}{''.join(operands)})"
                if kind is OperatorKind.SUFFIX:
                    return f"({''.join(operands)}{label})"
                return f"({f' {label} '.join(operands)})"
            case _:
                msg = f"Unknown token type: {type(self.token)}"
                raise TypeError(msg)


def evaluate_node[T](node: Node[T], bindings: Mapping[str, T]) -> T:
    """Recursively evaluate ``node`` against ``bindings``.

    Raises:
        UnboundVariableError: If a variable of the tree has no binding.
        ArityError: If an operator or function node has the wrong number of children.

    """
    match node.token:
        case Variable(label=label):
            if label not in bindings:
                raise UnboundVariableError(label)
            return bindings[label]
        case Operand(value=value):
            return value
        case Operator() | Function() as token:
            expected = required_arity(token)
            if expected is not None and len(node.children) != expected:
                raise ArityError(token.label, expected, len(node.children))
            operands = [evaluate_node(child, bindings) for child in node.children]
            return token.compute(operands)
        case _:
            msg = f"Unknown token type: {type(node.token)}"
            raise TypeError(msg)


@dataclass(frozen=True, slots=True)
class Expression[T]:
    """A parsed expression that can be evaluated any number of times.

    The tree and the constants snapshot are never modified after
    construction, so one expression can be evaluated from several threads
    with different bindings.

    Attributes:
        root: Root node of the tree, or None for an empty expression.
        constants: Read-only snapshot of the constants known at parse time.

    """

    root: Node[T] | None
    constants: Mapping[str, T] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "constants", MappingProxyType(dict(self.constants)))

    def evaluate(self, variables: Mapping[str, T] | None = None) -> T:
        """Evaluate the expression.

        Variables override constants with the same label.

        Args:
            variables: Values for the variables of the expression.

        Returns:
            The value of the expression.

        Raises:
            InvalidExpressionError: If the expression has no root.
            UnboundVariableError: If a variable has no value.

        Example:
            >>> expr = create_parser(variables=["x"]).parse("2x + 1")
            >>> expr.evaluate({"x": 3.0})
            7.0

        """
        if self.root is None:
            msg = "Cannot evaluate an expression without a root node"
            raise InvalidExpressionError(msg)

        bindings: dict[str, T] = dict(self.constants)
        if variables is not None:
            bindings.update(variables)

        logger.debug("Evaluating %s with %d binding(s)", self, len(bindings))
        return evaluate_node(self.root, bindings)

    def variables(self) -> tuple[str, ...]:
        """Labels of the free variables in the tree, in order of first occurrence."""
        if self.root is None:
            return ()
        seen: dict[str, None] = {}
        for node in self.root.iter_nodes():
            if isinstance(node.token, Variable) and node.token.label not in self.constants:
                seen.setdefault(node.token.label, None)
        return tuple(seen)

    def __str__(self) -> str:
        return "" if self.root is None else str(self.root)
