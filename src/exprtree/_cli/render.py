"""Rich rendering utilities for the CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from exprtree._token import Function, Operand, Operator, Variable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rich.console import Console

    from exprtree._expression import Node
    from exprtree._lexer import LexToken


def render_token_table(tokens: Iterable[LexToken], console: Console) -> None:
    """Render lexical tokens as a Rich table.

    Args:
        tokens: Tokens to render.
        console: Rich Console to output to.

    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Position", justify="right")
    table.add_column("Kind")
    table.add_column("Text", style="bold")

    for token in tokens:
        table.add_row(str(token.position), token.kind.upper(), escape(token.text))

    console.print(table)


def _node_label(node: Node[Any]) -> str:
    match node.token:
        case Operand(value=value):
            return f"[blue]{escape(str(value))}[/blue]"
        case Variable(label=label):
            return f"[green]{escape(label)}[/green]"
        case Operator(label=label, kind=kind):
            return f"[yellow]{escape(label)}[/yellow] [dim]{kind}[/dim]"
        case Function(label=label):
            return f"[magenta]{escape(label)}()[/magenta]"
        case _:
            msg = f"Unknown token type: {type(node.token)}"
            raise TypeError(msg)


def render_tree(root: Node[Any], console: Console) -> None:
    """Render an expression tree using Rich Tree.

    Args:
        root: Root node to render.
        console: Rich Console to output to.

    """
    rich_tree = Tree(_node_label(root))
    _add_tree_children(rich_tree, root.children)
    console.print(rich_tree)


def _add_tree_children(parent: Tree, children: tuple[Node[Any], ...]) -> None:
    for child in children:
        child_tree = parent.add(_node_label(child))
        _add_tree_children(child_tree, child.children)
