"""Tests for the expression tree and evaluator."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from exprtree import (
    UNLIMITED,
    ArityError,
    Expression,
    Function,
    InvalidExpressionError,
    Node,
    Operand,
    Operator,
    OperatorKind,
    UnboundVariableError,
    Variable,
    evaluate_node,
)
from exprtree.real import create_parser

ADD = Operator("+", OperatorKind.INFIX, 1, lambda o: o[0] + o[1])
NEG = Operator("-", OperatorKind.PREFIX, 3, lambda o: -o[0])
SUM = Function("sum", UNLIMITED, sum)


class TestNode:
    def test_is_leaf(self) -> None:
        assert Node(Operand(1)).is_leaf is True
        assert Node(ADD, (Node(Operand(1)), Node(Operand(2)))).is_leaf is False

    def test_iter_nodes_depth_first(self) -> None:
        left = Node(Operand(1))
        right = Node(NEG, (Node(Variable("x")),))
        root = Node(ADD, (left, right))

        assert [node.token for node in root.iter_nodes()] == [ADD, Operand(1), NEG, Variable("x")]

    def test_is_immutable(self) -> None:
        node = Node(Operand(1))
        with pytest.raises(AttributeError):
            node.children = ()  # type: ignore[misc]


class TestEvaluateNode:
    def test_operand(self) -> None:
        assert evaluate_node(Node(Operand(4)), {}) == 4

    def test_variable(self) -> None:
        assert evaluate_node(Node(Variable("x")), {"x": 7}) == 7

    def test_unbound_variable(self) -> None:
        with pytest.raises(UnboundVariableError, match="Variable not bound: x") as exc_info:
            evaluate_node(Node(ADD, (Node(Operand(1)), Node(Variable("x")))), {})
        assert exc_info.value.label == "x"

    def test_operator(self) -> None:
        tree = Node(ADD, (Node(Operand(1)), Node(NEG, (Node(Operand(5)),))))
        assert evaluate_node(tree, {}) == -4

    def test_unlimited_function_takes_any_count(self) -> None:
        assert evaluate_node(Node(SUM), {}) == 0
        assert evaluate_node(Node(SUM, tuple(Node(Operand(i)) for i in range(5))), {}) == 10

    def test_children_evaluated_left_to_right(self) -> None:
        seen: list[str] = []

        def record(operands):
            seen.append(operands[0])
            return operands[0]

        tag = Operator("@", OperatorKind.PREFIX, 1, record)
        tree = Node(SUM, (Node(tag, (Node(Operand("a")),)), Node(tag, (Node(Operand("b")),))))
        with pytest.raises(TypeError):
            # sum() of strings fails, but only after both children ran
            evaluate_node(tree, {})
        assert seen == ["a", "b"]

    @pytest.mark.parametrize(
        ("node", "expected", "actual"),
        [
            (Node(ADD, (Node(Operand(1)),)), 2, 1),
            (Node(NEG, (Node(Operand(1)), Node(Operand(2)))), 1, 2),
            (Node(Function("pair", 2, sum), (Node(Operand(1)),)), 2, 1),
        ],
    )
    def test_arity_mismatch(self, node: Node, expected: int, actual: int) -> None:
        with pytest.raises(ArityError) as exc_info:
            evaluate_node(node, {})
        assert exc_info.value.expected == expected
        assert exc_info.value.actual == actual

    def test_compute_errors_propagate(self) -> None:
        div = Operator("/", OperatorKind.INFIX, 2, lambda o: o[0] / o[1])
        with pytest.raises(ZeroDivisionError):
            evaluate_node(Node(div, (Node(Operand(1)), Node(Operand(0)))), {})


class TestExpression:
    def test_no_root(self) -> None:
        with pytest.raises(InvalidExpressionError):
            Expression(root=None).evaluate()

    def test_constants_snapshot(self) -> None:
        constants = {"k": 2}
        expression = Expression(root=Node(Variable("k")), constants=constants)
        constants["k"] = 100

        assert expression.evaluate() == 2
        assert expression.constants == {"k": 2}
        with pytest.raises(TypeError):
            expression.constants["k"] = 3  # type: ignore[index]

    def test_variable_overrides_constant(self) -> None:
        expression = Expression(root=Node(Variable("k")), constants={"k": 2})
        assert expression.evaluate({"k": 5}) == 5
        assert expression.evaluate() == 2

    def test_evaluate_does_not_mutate_inputs(self) -> None:
        expression = Expression(root=Node(ADD, (Node(Variable("k")), Node(Variable("x")))), constants={"k": 1})
        bindings = {"x": 2}
        assert expression.evaluate(bindings) == 3
        assert bindings == {"x": 2}
        assert expression.constants == {"k": 1}

    def test_variables(self) -> None:
        expression = create_parser(variables=["x", "y"]).parse("y + x*pi + y")
        assert expression.variables() == ("y", "x")
        assert Expression(root=None).variables() == ()

    def test_str(self) -> None:
        assert str(Expression(root=None)) == ""
        assert str(create_parser().parse("sin pi")) == "(sin pi)"

    def test_deterministic(self) -> None:
        expression = create_parser(variables=["x"]).parse("sqrt(x) / 3 + x^0.3")
        results = {expression.evaluate({"x": 2.0}) for _ in range(50)}
        assert len(results) == 1

    def test_concurrent_evaluation(self) -> None:
        expression = create_parser(variables=["x"]).parse("x^2 + 1")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda x: expression.evaluate({"x": float(x)}), range(100)))

        assert results == [float(x * x + 1) for x in range(100)]
