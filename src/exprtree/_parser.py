"""Dual-stack shunting-yard parser.

The parser makes a single left-to-right pass over the lexical tokens and
keeps two stacks:

- operands: finished subtrees (Node)
- operators: OperatorEntry, OpenParenMarker or FunctionCallMarker

Operators are reduced into nodes as soon as precedence and associativity
allow, so when the input ends the operand stack holds the whole tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import StrEnum, auto
from typing import TYPE_CHECKING

from ._errors import ArityError, ExpressionSyntaxError, LexError, UnknownSymbolError
from ._expression import Expression, Node
from ._lexer import LexKind, LexToken, tokenize
from ._token import Function, Operand, Operator, OperatorKind, Variable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._registry import Registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OperatorEntry[T]:
    """Operator waiting for its right operand or for a lower-precedence operator."""

    operator: Operator[T]


@dataclass(frozen=True, slots=True)
class OpenParenMarker:
    """Grouping parenthesis.

    Attributes:
        position: Position of the '(' in the source.
        depth: Size of the operand stack when the parenthesis was opened.

    """

    position: int
    depth: int


@dataclass(frozen=True, slots=True)
class FunctionCallMarker[T]:
    """Opening parenthesis of a function call.

    Attributes:
        function: The function being called.
        position: Position of the '(' in the source.
        depth: Size of the operand stack when the call was opened.
        arg_count: Number of argument separators seen so far.

    """

    function: Function[T]
    position: int
    depth: int
    arg_count: int = 0


type StackEntry[T] = OperatorEntry[T] | OpenParenMarker | FunctionCallMarker[T]


class _Previous(StrEnum):
    """What the parser consumed last, which decides how the next token is read."""

    START = auto()  # Nothing yet
    OPERAND = auto()  # Operand, ')' or suffix operator
    OPERATOR = auto()  # Prefix or binary operator
    OPEN = auto()  # '(' of a group or call
    COMMA = auto()  # Argument separator
    FUNCTION = auto()  # Function label, '(' expected next


def _should_reduce(top: Operator[object], arriving: Operator[object]) -> bool:
    if top.precedence > arriving.precedence:
        return True
    return top.precedence == arriving.precedence and arriving.kind.left_associative


@dataclass(slots=True)
class _ParseState[T]:
    """Mutable state of one parse. Never shared between parses."""

    registry: Registry[T]
    operands: list[Node[T]] = field(default_factory=list)
    operators: list[StackEntry[T]] = field(default_factory=list)
    previous: _Previous = _Previous.START
    pending_function: Function[T] | None = None

    # --- Shared primitives ---

    def operand_floor(self) -> int:
        """Operand stack size below which the innermost group may not reach."""
        for entry in reversed(self.operators):
            if isinstance(entry, (OpenParenMarker, FunctionCallMarker)):
                return entry.depth
        return 0

    def reduce(self) -> None:
        """Pop one operator entry and combine it with its operands into a node."""
        entry = self.operators.pop()
        if not isinstance(entry, OperatorEntry):
            msg = f"Expected an operator on the stack, got {entry}"
            raise TypeError(msg)

        operator = entry.operator
        available = len(self.operands) - self.operand_floor()
        if available < operator.arity:
            raise ArityError(operator.label, operator.arity, available)

        # First popped is the right operand
        children = tuple(self.operands[-operator.arity :])
        del self.operands[-operator.arity :]
        self.operands.append(Node(operator, children))

    def reduce_operators(self, arriving: Operator[T] | None = None) -> None:
        """Reduce operator entries at the top of the stack.

        Without ``arriving``, reduce until a marker or the bottom of the stack.
        With it, stop at the first entry that binds less tightly.
        """
        while self.operators:
            top = self.operators[-1]
            if not isinstance(top, OperatorEntry):
                return
            if arriving is not None and not _should_reduce(top.operator, arriving):
                return
            self.reduce()

    def implicit_multiplication(self, token: LexToken) -> None:
        operator = self.registry.implicit_multiplication
        if operator is None:
            msg = f"Missing operator before '{token.text}' at position {token.position}"
            raise ExpressionSyntaxError(msg, token.position)
        self.push_binary(operator)

    def push_binary(self, operator: Operator[T]) -> None:
        self.reduce_operators(operator)
        self.operators.append(OperatorEntry(operator))
        self.previous = _Previous.OPERATOR

    def push_operand(self, node: Node[T], token: LexToken) -> None:
        if self.previous is _Previous.OPERAND:
            self.implicit_multiplication(token)
        self.operands.append(node)
        self.previous = _Previous.OPERAND

    # --- Token handlers ---

    def feed(self, token: LexToken) -> None:
        if self.previous is _Previous.FUNCTION and token.text != "(":
            self.resolve_bare_function(token.position)

        match token.kind, token.text:
            case LexKind.NUMBER, _:
                self.push_operand(Node(Operand(self.parse_number(token))), token)
            case LexKind.SYMBOL, "(":
                self.open_paren(token)
            case LexKind.SYMBOL, ")":
                self.close_paren(token)
            case LexKind.SYMBOL, ",":
                self.comma(token)
            case _:
                self.identifier(token)

    def parse_number(self, token: LexToken) -> T:
        try:
            return self.registry.number_parser(token.text)
        except (ValueError, ArithmeticError) as e:
            msg = f"Invalid number '{token.text}' at position {token.position}: {e}"
            raise LexError(msg, token.position) from e

    def resolve_bare_function(self, position: int | None) -> None:
        """Turn a zero-parameter function written without parentheses into a call."""
        function = self.pending_function
        assert function is not None
        if function.parameters != 0:
            where = "at end of expression" if position is None else f"at position {position}"
            msg = f"Expected '(' after function '{function.label}' {where}"
            raise ExpressionSyntaxError(msg, position)
        self.pending_function = None
        self.operands.append(Node(function))
        self.previous = _Previous.OPERAND

    def open_paren(self, token: LexToken) -> None:
        if self.previous is _Previous.FUNCTION:
            assert self.pending_function is not None
            self.operators.append(FunctionCallMarker(self.pending_function, token.position, len(self.operands)))
            self.pending_function = None
        else:
            if self.previous is _Previous.OPERAND:
                self.implicit_multiplication(token)
            self.operators.append(OpenParenMarker(token.position, len(self.operands)))
        self.previous = _Previous.OPEN

    def comma(self, token: LexToken) -> None:
        if self.previous in (_Previous.OPEN, _Previous.COMMA, _Previous.START):
            msg = f"Empty argument before ',' at position {token.position}"
            raise ExpressionSyntaxError(msg, token.position)

        self.reduce_operators()

        top = self.operators[-1] if self.operators else None
        if not isinstance(top, FunctionCallMarker):
            msg = f"Unexpected ',' outside of a function call at position {token.position}"
            raise ExpressionSyntaxError(msg, token.position)

        self.operators[-1] = replace(top, arg_count=top.arg_count + 1)
        self.previous = _Previous.COMMA

    def close_paren(self, token: LexToken) -> None:
        if self.previous is _Previous.COMMA:
            msg = f"Empty argument before ')' at position {token.position}"
            raise ExpressionSyntaxError(msg, token.position)

        self.reduce_operators()

        if not self.operators:
            msg = f"Unmatched ')' at position {token.position}"
            raise ExpressionSyntaxError(msg, token.position)

        match self.operators.pop():
            case OpenParenMarker():
                if self.previous is _Previous.OPEN:
                    msg = f"Empty parentheses at position {token.position}"
                    raise ExpressionSyntaxError(msg, token.position)
            case FunctionCallMarker(function=function, depth=depth, arg_count=arg_count):
                self.close_call(function, depth, 0 if self.previous is _Previous.OPEN else arg_count + 1)
            case OperatorEntry() as entry:
                msg = f"Unreduced operator {entry.operator} at ')'"
                raise TypeError(msg)

        self.previous = _Previous.OPERAND

    def close_call(self, function: Function[T], depth: int, count: int) -> None:
        if not function.unlimited and count != function.parameters:
            raise ArityError(function.label, function.parameters, count)
        if len(self.operands) - depth != count:
            msg = f"Malformed arguments in call to '{function.label}'"
            raise ExpressionSyntaxError(msg)

        arguments = tuple(self.operands[depth:])
        del self.operands[depth:]
        self.operands.append(Node(function, arguments))

    def identifier(self, token: LexToken) -> None:
        label = token.text
        registry = self.registry
        prefix_position = self.previous is not _Previous.OPERAND

        operator = registry.lookup_operator(label, prefix_position=prefix_position)
        if operator is None and not prefix_position:
            # Prefix-only operator right after an operand, as in '2sqrt 4'
            operator = registry.lookup_operator(label, prefix_position=True)
            if operator is not None:
                self.implicit_multiplication(token)
        if operator is not None:
            self.operator(operator)
            return

        if registry.has_operator(label):
            msg = f"Operator '{label}' cannot be used at position {token.position}"
            raise ExpressionSyntaxError(msg, token.position)

        function = registry.lookup_function(label)
        if function is not None:
            if self.previous is _Previous.OPERAND:
                self.implicit_multiplication(token)
            self.pending_function = function
            self.previous = _Previous.FUNCTION
            return

        if registry.has_constant(label) or registry.is_variable(label):
            # Constants stay symbolic so a same-named binding can override them
            self.push_operand(Node(Variable(label)), token)
            return

        raise UnknownSymbolError(label, token.position)

    def operator(self, operator: Operator[T]) -> None:
        match operator.kind:
            case OperatorKind.PREFIX:
                self.operators.append(OperatorEntry(operator))
                self.previous = _Previous.OPERATOR
            case OperatorKind.SUFFIX:
                # The operand is already complete, so reduce right away
                self.reduce_operators(operator)
                self.operators.append(OperatorEntry(operator))
                self.reduce()
                self.previous = _Previous.OPERAND
            case OperatorKind.INFIX | OperatorKind.INFIX_RTL:
                self.push_binary(operator)

    def finish(self) -> Node[T]:
        if self.previous is _Previous.FUNCTION:
            assert self.pending_function is not None
            self.resolve_bare_function(None)

        self.reduce_operators()

        if self.operators:
            marker = self.operators[-1]
            position = marker.position if isinstance(marker, (OpenParenMarker, FunctionCallMarker)) else None
            msg = f"Unmatched '(' at position {position}"
            raise ExpressionSyntaxError(msg, position)
        if not self.operands:
            msg = "Empty expression"
            raise ExpressionSyntaxError(msg)
        if len(self.operands) != 1:
            msg = f"Malformed expression: {len(self.operands)} operands left after parsing"
            raise ExpressionSyntaxError(msg)

        return self.operands[0]


class ExpressionParser[T]:
    """Parse infix expressions into Expression trees.

    Example:
        >>> parser = ExpressionParser(registry)
        >>> expression = parser.parse("2^3^2")
        >>> expression.evaluate()
        512.0

    """

    def __init__(self, registry: Registry[T]) -> None:
        self.registry = registry

    def parse_tokens(self, tokens: Iterable[LexToken]) -> Node[T]:
        """Build the tree for an already tokenized expression.

        Raises:
            ExpressionSyntaxError: On unbalanced parentheses, misplaced commas or operators.
            ArityError: When an operator or function gets the wrong number of operands.
            UnknownSymbolError: On an identifier unknown to the registry.

        """
        state = _ParseState(self.registry)
        for token in tokens:
            state.feed(token)
        return state.finish()

    def parse(self, text: str) -> Expression[T]:
        """Parse ``text`` into an Expression.

        The constants of the registry are captured when the expression is
        built; later registrations do not affect it.

        Raises:
            LexError: On text that cannot be tokenized.
            ExpressionSyntaxError: On malformed structure.
            ArityError: On an operand or argument count mismatch.
            UnknownSymbolError: On an unregistered identifier.

        """
        root = self.parse_tokens(tokenize(text, self.registry))
        expression = Expression(root=root, constants=self.registry.constants())
        logger.debug("Parsed %r as %s", text, expression)
        return expression
