"""Operators, functions and constants for real numbers (``float``).

Example:
    >>> from exprtree.real import create_parser
    >>> create_parser(variables=["x"]).parse("2x^2 + 1").evaluate({"x": 3.0})
    19.0

"""

import math
import random
from collections.abc import Callable, Iterable, Mapping, Sequence
from statistics import fmean

from ._expression import Expression
from ._parser import ExpressionParser
from ._registry import Registry
from ._token import UNLIMITED, OperatorKind

ADDITIVE_PRECEDENCE = 1
MULTIPLICATIVE_PRECEDENCE = 2
UNARY_SIGN_PRECEDENCE = 3
POWER_PRECEDENCE = 4
PREFIX_FUNCTION_PRECEDENCE = 5
SUFFIX_PRECEDENCE = 6


def factorial(x: float) -> float:
    """Factorial of a non-negative integral float."""
    if x < 0 or not x.is_integer():
        msg = f"Cannot calculate factorial of {x}"
        raise ValueError(msg)
    return float(math.factorial(int(x)))


def log(x: float, base: float) -> float:
    """Logarithm of ``x`` to ``base``."""
    return math.log(x) / math.log(base)


def _unary(fn: Callable[[float], float]) -> Callable[[Sequence[float]], float]:
    return lambda operands: fn(operands[0])


_PREFIX_FUNCTIONS = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "asinh": math.asinh,
    "acosh": math.acosh,
    "atanh": math.atanh,
    "round": lambda x: float(math.floor(x + 0.5)),
    "floor": lambda x: float(math.floor(x)),
    "ceil": lambda x: float(math.ceil(x)),
    "ln": math.log,
    "log10": math.log10,
    "sqrt": math.sqrt,
    "cbrt": math.cbrt,
}


def create_registry() -> Registry[float]:
    """Build a registry with the standard real-number configuration."""
    registry = Registry[float](number_parser=float)

    registry.register_operator("+", OperatorKind.INFIX, ADDITIVE_PRECEDENCE, lambda o: o[0] + o[1])
    registry.register_operator("-", OperatorKind.INFIX, ADDITIVE_PRECEDENCE, lambda o: o[0] - o[1])
    registry.register_operator("*", OperatorKind.INFIX, MULTIPLICATIVE_PRECEDENCE, lambda o: o[0] * o[1])
    registry.register_operator("/", OperatorKind.INFIX, MULTIPLICATIVE_PRECEDENCE, lambda o: o[0] / o[1])
    registry.register_operator("%", OperatorKind.INFIX, MULTIPLICATIVE_PRECEDENCE, lambda o: math.fmod(o[0], o[1]))
    registry.set_implicit_multiplication(lambda o: o[0] * o[1], precedence=MULTIPLICATIVE_PRECEDENCE)

    registry.register_operator("+", OperatorKind.PREFIX, UNARY_SIGN_PRECEDENCE, lambda o: +o[0])
    registry.register_operator("-", OperatorKind.PREFIX, UNARY_SIGN_PRECEDENCE, lambda o: -o[0])

    registry.register_operator("^", OperatorKind.INFIX_RTL, POWER_PRECEDENCE, lambda o: math.pow(o[0], o[1]))
    registry.register_operator("!", OperatorKind.SUFFIX, SUFFIX_PRECEDENCE, lambda o: factorial(o[0]))

    for label, fn in _PREFIX_FUNCTIONS.items():
        registry.register_operator(label, OperatorKind.PREFIX, PREFIX_FUNCTION_PRECEDENCE, _unary(fn))

    registry.register_function("deg", 1, _unary(math.degrees))
    registry.register_function("rad", 1, _unary(math.radians))
    registry.register_function("log", 2, lambda o: log(o[0], o[1]))
    registry.register_function("max", UNLIMITED, lambda o: max(o) if o else 0.0)
    registry.register_function("min", UNLIMITED, lambda o: min(o) if o else 0.0)
    registry.register_function("mean", UNLIMITED, lambda o: fmean(o) if o else 0.0)
    registry.register_function("rand", 0, lambda _o: random.random())  # noqa: S311

    registry.register_constant("pi", math.pi)
    registry.register_constant("e", math.e)

    return registry


def create_parser(
    variables: Iterable[str] = (),
    constants: Mapping[str, float] | None = None,
) -> ExpressionParser[float]:
    """Build a real-number parser, extended with extra variables and constants."""
    registry = create_registry()
    for label, value in (constants or {}).items():
        registry.register_constant(label, value)
    for label in variables:
        registry.register_variable(label)
    return ExpressionParser(registry)


_default_parser = ExpressionParser(create_registry())


def parse(text: str) -> Expression[float]:
    """Parse ``text`` with the default real-number configuration."""
    return _default_parser.parse(text)
