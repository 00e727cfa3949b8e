"""Tests for the real-number configuration."""

import math

import pytest

from exprtree import (
    ArityError,
    ConfigurationError,
    ExpressionSyntaxError,
    LexError,
    UnboundVariableError,
    UnknownSymbolError,
)
from exprtree.real import create_parser, create_registry, factorial, log, parse


class TestScenarios:
    def test_nested_prefix_operators_and_power(self) -> None:
        assert parse("5+3/cos(sin(-6))^0.25").evaluate() == pytest.approx(8.0298136373, abs=1e-9)

    def test_signed_exponents(self) -> None:
        assert parse("1e+2 - 1e-2").evaluate() == pytest.approx(99.99)

    def test_round_trip_through_degrees(self) -> None:
        assert parse("deg(asin(sin(rad(30))))").evaluate() == pytest.approx(30.0)

    def test_two_argument_log(self) -> None:
        assert parse("log(2, (ln(2 + 3) * 4))").evaluate() == pytest.approx(0.3722236412, abs=1e-9)

    def test_implicit_multiplication(self) -> None:
        assert parse("2(3+4)").evaluate() == 14

    def test_unmatched_parenthesis(self) -> None:
        with pytest.raises(ExpressionSyntaxError):
            parse("(1+2")

    def test_unknown_function(self) -> None:
        with pytest.raises(UnknownSymbolError):
            parse("unknownFn(1)")

    def test_unknown_function_sharing_a_constant_prefix(self) -> None:
        with pytest.raises(UnknownSymbolError) as exc_info:
            parse("exp(1)")
        assert exc_info.value.label == "exp"
        assert exc_info.value.position == 0

    @pytest.mark.parametrize("text", ["1.2.3", "3..5", "1.."])
    def test_malformed_number(self, text: str) -> None:
        with pytest.raises(LexError, match="Malformed number"):
            parse(text)

    def test_free_variable_without_binding(self) -> None:
        expression = create_parser(variables=["x"]).parse("x + 1")
        with pytest.raises(UnboundVariableError):
            expression.evaluate()

    def test_zero_argument_function_without_parentheses(self) -> None:
        assert parse("ceil(rand)").evaluate() == 1.0
        assert parse("floor(-rand)").evaluate() == -1.0


class TestAssociativity:
    def test_power_is_right_associative(self) -> None:
        assert parse("2^3^2").evaluate() == 512.0

    def test_subtraction_is_left_associative(self) -> None:
        assert parse("8-3-2").evaluate() == 3.0

    def test_unary_minus_binds_looser_than_power(self) -> None:
        assert parse("-2^2").evaluate() == -4.0
        assert parse("2^-2").evaluate() == 0.25


class TestOperatorsAndFunctions:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("7 % 4", 3.0),
            ("+3", 3.0),
            ("4!", 24.0),
            ("sqrt 16", 4.0),
            ("cbrt(27)", 3.0),
            ("log10(1000)", 3.0),
            ("round 2.5", 3.0),
            ("round(-2.5)", -2.0),
            ("max(1, 5, 3)", 5.0),
            ("min(4, 2, 8)", 2.0),
            ("mean(1, 2, 3, 4)", 2.5),
            ("max()", 0.0),
            ("mean()", 0.0),
            ("2pi", 2 * math.pi),
            ("e^1", math.e),
            ("asinh(sinh 1)", 1.0),
            ("acosh(cosh 2)", 2.0),
            ("atanh(tanh 0.5)", 0.5),
        ],
    )
    def test_values(self, text: str, expected: float) -> None:
        assert parse(text).evaluate() == pytest.approx(expected)

    def test_fixed_arity_function(self) -> None:
        with pytest.raises(ArityError):
            parse("log(8)")
        with pytest.raises(ArityError):
            parse("deg(1, 2)")

    def test_math_errors_propagate(self) -> None:
        with pytest.raises(ZeroDivisionError):
            parse("1/0").evaluate()
        with pytest.raises(ValueError):
            parse("sqrt(-1)").evaluate()

    @pytest.mark.parametrize("value", [-1.0, 2.5])
    def test_factorial_rejects_invalid_input(self, value: float) -> None:
        with pytest.raises(ValueError, match="Cannot calculate factorial"):
            factorial(value)

    def test_log_base(self) -> None:
        assert log(8.0, 2.0) == pytest.approx(3.0)


class TestCreateParser:
    def test_variables_and_constants(self) -> None:
        parser = create_parser(variables=["x", "y"], constants={"g": 9.81})
        expression = parser.parse("g x + y")
        assert expression.evaluate({"x": 2.0, "y": 1.0}) == pytest.approx(20.62)
        assert expression.constants["g"] == 9.81
        assert expression.constants["pi"] == math.pi

    def test_binding_overrides_constant(self) -> None:
        expression = parse("2pi")
        assert expression.evaluate({"pi": 3.0}) == 6.0
        assert expression.evaluate() == pytest.approx(2 * math.pi)

    def test_variable_clashing_with_constant(self) -> None:
        with pytest.raises(ConfigurationError):
            create_parser(variables=["pi"])

    def test_registries_are_independent(self) -> None:
        create_parser(variables=["x"])
        assert "x" not in create_registry().labels()

    def test_repeated_evaluation(self) -> None:
        expression = create_parser(variables=["x"]).parse("x^2 - 2x + 1")
        assert [expression.evaluate({"x": x}) for x in (0.0, 1.0, 2.0, 3.0)] == [1.0, 0.0, 1.0, 4.0]
