import logging
from collections.abc import Iterable
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from exprtree._errors import ExprTreeError
from exprtree._lexer import tokenize
from exprtree._parser import ExpressionParser
from exprtree.real import create_registry

from .config import ConfigError, get_config
from .render import render_token_table, render_tree

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Parse and evaluate infix expressions."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _parse_bindings(assignments: Iterable[str]) -> dict[str, float]:
    """Parse NAME=VALUE pairs given on the command line."""
    bindings: dict[str, float] = {}
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        name = name.strip()
        if not sep or not name:
            msg = f"Expected NAME=VALUE, got '{assignment}'"
            raise typer.BadParameter(msg, param_hint="--var")
        try:
            bindings[name] = float(value)
        except ValueError as e:
            msg = f"Invalid value for '{name}': '{value}'"
            raise typer.BadParameter(msg, param_hint="--var") from e
    return bindings


def _build_parser(variables: Iterable[str]) -> ExpressionParser[float]:
    """Build a real-number parser from pyproject.toml configuration and extra variables.

    Variables that share a label with a constant are not declared; their
    binding overrides the constant at evaluation time.
    """
    config = get_config()
    registry = create_registry()
    for label, value in config.constants.items():
        registry.register_constant(label, value)

    for label in dict.fromkeys([*config.variables, *variables]):
        if not registry.has_constant(label):
            registry.register_variable(label)

    logger.debug("Using %d configured variable(s)", len(config.variables))
    return ExpressionParser(registry)


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(code=1)


@app.command(name="eval")
def eval_(
    expression: Annotated[str, typer.Argument(help="Expression to evaluate, e.g. '2x^2 + 1'")],
    *,
    var: Annotated[
        list[str] | None,
        typer.Option("--var", help="Variable binding NAME=VALUE (repeatable)"),
    ] = None,
) -> None:
    """Evaluate an expression and print its value."""
    bindings = _parse_bindings(var or [])

    try:
        parser = _build_parser(bindings)
        result = parser.parse(expression).evaluate(bindings)
    except ConfigError as e:
        raise _fail(str(e)) from e
    except ExprTreeError as e:
        raise _fail(str(e)) from e
    except (ArithmeticError, ValueError) as e:
        raise _fail(f"Evaluation error: {e}") from e

    out_console.print(repr(result))


@app.command()
def tree(
    expression: Annotated[str, typer.Argument(help="Expression to parse")],
    *,
    var: Annotated[
        list[str] | None,
        typer.Option("--var", help="Variable name to declare (repeatable)"),
    ] = None,
) -> None:
    """Print the expression tree of a parsed expression."""
    try:
        parsed = _build_parser(var or []).parse(expression)
    except (ConfigError, ExprTreeError) as e:
        raise _fail(str(e)) from e

    assert parsed.root is not None
    render_tree(parsed.root, out_console)


@app.command()
def tokens(
    expression: Annotated[str, typer.Argument(help="Expression to tokenize")],
) -> None:
    """Print the lexical tokens of an expression."""
    try:
        lexed = list(tokenize(expression, _build_parser([]).registry))
    except (ConfigError, ExprTreeError) as e:
        raise _fail(str(e)) from e

    render_token_table(lexed, out_console)


def main() -> None:
    app()
