"""Token model shared by the registry, parser and evaluator.

A token is one of four immutable records:

- Operand: a concrete domain value
- Operator: a symbol with a kind, a precedence and a compute callable
- Function: a named call with a fixed or unlimited parameter count
- Variable: a label resolved from the bindings at evaluation time

Operators and functions carry their behavior with them, so a token taken out
of a tree is enough to evaluate that node.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Final, Self

type Compute[T] = Callable[[Sequence[T]], T]

UNLIMITED: Final = -1
"""Parameter count of functions that accept any number of arguments."""


class OperatorKind(StrEnum):
    """Syntactic kind of an operator.

    Members carry a docstring, following https://guicommits.com/add-docstrings-python-enum-members/
    """

    def __new__(cls, value: str, doc: str = "") -> Self:
        """Create a new enum member with a docstring."""
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.__doc__ = doc
        return obj

    PREFIX = "prefix", "Unary operator written before its operand"
    SUFFIX = "suffix", "Unary operator written after its operand"
    INFIX = "infix", "Left-associative binary operator"
    INFIX_RTL = "infix_rtl", "Right-associative binary operator"

    @property
    def arity(self) -> int:
        return 2 if self in (OperatorKind.INFIX, OperatorKind.INFIX_RTL) else 1

    @property
    def is_unary(self) -> bool:
        return self.arity == 1

    @property
    def left_associative(self) -> bool:
        return self is not OperatorKind.INFIX_RTL


@dataclass(frozen=True, slots=True)
class Operand[T]:
    """Leaf token holding one concrete value."""

    value: T

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class Operator[T]:
    """Symbolic operator.

    Attributes:
        label: Text of the operator in the source (e.g. '+', 'sin').
        kind: Position and associativity of the operator.
        precedence: Binding strength; higher binds first.
        compute: Callable receiving the evaluated operands in source order.

    """

    label: str
    kind: OperatorKind
    precedence: int
    compute: Compute[T] = field(compare=False, repr=False)

    @property
    def arity(self) -> int:
        return self.kind.arity

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True, slots=True)
class Function[T]:
    """Named function called as ``label(arg, ...)``."""

    label: str
    parameters: int
    compute: Compute[T] = field(compare=False, repr=False)

    @property
    def unlimited(self) -> bool:
        return self.parameters == UNLIMITED

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True, slots=True)
class Variable:
    """Named value supplied when the expression is evaluated."""

    label: str

    def __str__(self) -> str:
        return self.label


type Token[T] = Operand[T] | Operator[T] | Function[T] | Variable


def required_arity(token: Token[Any]) -> int | None:
    """Return the number of children a node holding ``token`` must have.

    None means any count is accepted (functions with UNLIMITED parameters).
    """
    match token:
        case Operand() | Variable():
            return 0
        case Operator(kind=kind):
            return kind.arity
        case Function(parameters=parameters):
            return None if parameters == UNLIMITED else parameters
        case _:
            msg = f"Unknown token type: {type(token)}"
            raise TypeError(msg)
