"""Label table consulted by the tokenizer and the parser."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Self

from ._errors import ConfigurationError
from ._token import UNLIMITED, Compute, Function, Operator, OperatorKind

logger = logging.getLogger(__name__)

RESERVED_CHARACTERS = frozenset("(),")

IMPLICIT_MULTIPLICATION_LABEL = "*"

# Kinds tried, in order, when an operator follows an operand.
_POSTFIX_POSITION_KINDS = (OperatorKind.INFIX, OperatorKind.INFIX_RTL, OperatorKind.SUFFIX)


def _validate_label(label: str) -> None:
    if not label:
        msg = "Label must not be empty"
        raise ConfigurationError(msg)
    if any(c.isspace() for c in label):
        msg = f"Label must not contain whitespace: {label!r}"
        raise ConfigurationError(msg)
    if RESERVED_CHARACTERS.intersection(label):
        msg = f"Label must not contain '(', ')' or ',': {label!r}"
        raise ConfigurationError(msg)
    if label[0].isdigit() or label[0] == ".":
        msg = f"Label must not start like a number: {label!r}"
        raise ConfigurationError(msg)


@dataclass(slots=True)
class Registry[T]:
    """Operators, functions, constants and variables known to a parser.

    The registry is populated once, before parsing, and treated as read-only
    afterwards. Operators are keyed by ``(label, kind)`` so the same symbol can
    be both a prefix and an infix operator (e.g. unary and binary minus).

    Attributes:
        number_parser: Converts the text of a numeric literal into a value.

    """

    number_parser: Callable[[str], T]
    _operators: dict[tuple[str, OperatorKind], Operator[T]] = field(default_factory=dict)
    _functions: dict[str, Function[T]] = field(default_factory=dict)
    _constants: dict[str, T] = field(default_factory=dict)
    _variables: set[str] = field(default_factory=set)
    _implicit_multiplication: Operator[T] | None = None

    def register_operator(
        self,
        label: str,
        kind: OperatorKind,
        precedence: int,
        compute: Compute[T],
    ) -> Operator[T]:
        """Register an operator.

        Raises:
            ConfigurationError: If an operator with the same label and kind
                exists, or the label is used by a function, constant or variable.

        """
        _validate_label(label)
        key = (label, kind)
        if key in self._operators:
            msg = f"Operator '{label}' of kind {kind} is already registered"
            raise ConfigurationError(msg)
        if label in self._functions or label in self._constants or label in self._variables:
            msg = f"Operator '{label}' conflicts with a function, constant or variable of the same name"
            raise ConfigurationError(msg)
        operator = Operator(label=label, kind=kind, precedence=precedence, compute=compute)
        self._operators[key] = operator
        logger.debug("Registered %s operator '%s' (precedence %d)", kind, label, precedence)
        return operator

    def register_function(self, label: str, parameters: int, compute: Compute[T]) -> Function[T]:
        """Register a function taking ``parameters`` arguments (or UNLIMITED).

        Raises:
            ConfigurationError: On a duplicate label, a label already used by an
                operator, constant or variable, or an invalid parameter count.

        """
        _validate_label(label)
        if label in self._functions:
            msg = f"Function '{label}' is already registered"
            raise ConfigurationError(msg)
        if self.has_operator(label) or label in self._constants or label in self._variables:
            msg = f"Function '{label}' conflicts with an operator, constant or variable of the same name"
            raise ConfigurationError(msg)
        if parameters < 0 and parameters != UNLIMITED:
            msg = f"Invalid parameter count for function '{label}': {parameters}"
            raise ConfigurationError(msg)
        function = Function(label=label, parameters=parameters, compute=compute)
        self._functions[label] = function
        logger.debug("Registered function '%s' with %s parameter(s)", label, "any" if function.unlimited else parameters)
        return function

    def register_constant(self, label: str, value: T) -> None:
        """Register a named constant.

        Raises:
            ConfigurationError: On a duplicate label or a clash with an operator,
                function or variable.

        """
        _validate_label(label)
        if label in self._constants:
            msg = f"Constant '{label}' is already registered"
            raise ConfigurationError(msg)
        if self.has_operator(label) or label in self._functions or label in self._variables:
            msg = f"Constant '{label}' conflicts with an operator, function or variable of the same name"
            raise ConfigurationError(msg)
        self._constants[label] = value
        logger.debug("Registered constant '%s' = %r", label, value)

    def register_variable(self, label: str) -> None:
        """Declare a variable name so expressions may refer to it.

        Raises:
            ConfigurationError: On a duplicate label or a clash with an operator,
                function or constant.

        """
        _validate_label(label)
        if label in self._variables:
            msg = f"Variable '{label}' is already registered"
            raise ConfigurationError(msg)
        if self.has_operator(label) or label in self._functions or label in self._constants:
            msg = f"Variable '{label}' conflicts with an operator, function or constant of the same name"
            raise ConfigurationError(msg)
        self._variables.add(label)
        logger.debug("Registered variable '%s'", label)

    def set_implicit_multiplication(self, compute: Compute[T], *, precedence: int) -> None:
        """Configure the operator synthesized between two adjacent operands, as in ``2(3+4)``."""
        self._implicit_multiplication = Operator(
            label=IMPLICIT_MULTIPLICATION_LABEL,
            kind=OperatorKind.INFIX,
            precedence=precedence,
            compute=compute,
        )

    @property
    def implicit_multiplication(self) -> Operator[T] | None:
        return self._implicit_multiplication

    def lookup_operator(self, label: str, *, prefix_position: bool) -> Operator[T] | None:
        """Return the operator valid for the syntactic position, if any.

        In prefix position (start of input, after an operator, an opening
        parenthesis or a comma) only PREFIX operators apply. Otherwise the
        binary kinds are preferred over SUFFIX.
        """
        if prefix_position:
            return self._operators.get((label, OperatorKind.PREFIX))
        for kind in _POSTFIX_POSITION_KINDS:
            operator = self._operators.get((label, kind))
            if operator is not None:
                return operator
        return None

    def has_operator(self, label: str) -> bool:
        return any(key[0] == label for key in self._operators)

    def lookup_function(self, label: str) -> Function[T] | None:
        return self._functions.get(label)

    def lookup_constant(self, label: str) -> T | None:
        return self._constants.get(label)

    def has_constant(self, label: str) -> bool:
        return label in self._constants

    def is_variable(self, label: str) -> bool:
        return label in self._variables

    def constants(self) -> Mapping[str, T]:
        """Read-only view of the registered constants."""
        return MappingProxyType(self._constants)

    def labels(self) -> frozenset[str]:
        """Every registered label, for longest-match tokenizing."""
        operator_labels = {label for label, _kind in self._operators}
        return frozenset(operator_labels.union(self._functions, self._constants, self._variables))

    def copy(self) -> Self:
        """Return an independent registry with the same entries.

        Used to extend a shared base configuration without modifying it.
        """
        return type(self)(
            number_parser=self.number_parser,
            _operators=dict(self._operators),
            _functions=dict(self._functions),
            _constants=dict(self._constants),
            _variables=set(self._variables),
            _implicit_multiplication=self._implicit_multiplication,
        )
