"""Exception hierarchy for exprtree.

Every error raised by configuration, parsing or evaluation derives from
ExprTreeError, so callers can catch the whole family in one place.
"""


class ExprTreeError(Exception):
    """Base class for all exprtree errors."""


class ConfigurationError(ExprTreeError):
    """Duplicate or conflicting registration in a Registry."""


class LexError(ExprTreeError):
    """Character sequence that starts no literal, identifier or known symbol."""

    def __init__(self, message: str, position: int) -> None:
        super().__init__(message)
        self.position = position


class ExpressionSyntaxError(ExprTreeError):
    """Malformed expression structure (parentheses, commas, operand count)."""

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class ArityError(ExprTreeError):
    """Operand or argument count does not match a token's declared arity."""

    def __init__(self, label: str, expected: int, actual: int) -> None:
        super().__init__(f"'{label}' expects {expected} operand(s), got {actual}")
        self.label = label
        self.expected = expected
        self.actual = actual


class UnknownSymbolError(ExprTreeError):
    """Identifier that is not registered as operator, function, constant or variable."""

    def __init__(self, label: str, position: int) -> None:
        super().__init__(f"Unknown symbol '{label}' at position {position}")
        self.label = label
        self.position = position


class UnboundVariableError(ExprTreeError):
    """Variable without a value in the evaluation bindings."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Variable not bound: {label}")
        self.label = label


class InvalidExpressionError(ExprTreeError):
    """Expression that has no root node."""
