"""Infix expression parsing into reusable, evaluable expression trees."""

__all__ = [
    "UNLIMITED",
    "ArityError",
    "ConfigurationError",
    "Expression",
    "ExpressionParser",
    "ExpressionSyntaxError",
    "ExprTreeError",
    "Function",
    "InvalidExpressionError",
    "LexError",
    "LexKind",
    "LexToken",
    "Node",
    "Operand",
    "Operator",
    "OperatorKind",
    "Registry",
    "Token",
    "UnboundVariableError",
    "UnknownSymbolError",
    "Variable",
    "evaluate_node",
    "tokenize",
]

from ._errors import (
    ArityError,
    ConfigurationError,
    ExpressionSyntaxError,
    ExprTreeError,
    InvalidExpressionError,
    LexError,
    UnboundVariableError,
    UnknownSymbolError,
)
from ._expression import Expression, Node, evaluate_node
from ._lexer import LexKind, LexToken, tokenize
from ._parser import ExpressionParser
from ._registry import Registry
from ._token import UNLIMITED, Function, Operand, Operator, OperatorKind, Token, Variable
