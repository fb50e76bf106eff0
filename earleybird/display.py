from collections.abc import Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .chart import Chart, Item, ItemKey
from .grammar import Grammar
from .tree import Leaf, Node

console = Console()


def print_tree(node: Node | Leaf, indent: str = "", *, last: bool = True) -> None:
    """Recursively print the parse tree."""
    pointer = "└─" if last else "├─"
    match node:
        case Node(symbol=label, children=children) if all(isinstance(c, Leaf) for c in children):
            print(f"{indent}{pointer}{label}: {', '.join(repr(c.token) for c in children)}")
        case Node(symbol=label, children=children):
            print(f"{indent}{pointer}{label}")
            new_indent = indent + ("  " if last else "│ ")
            for i, child in enumerate(children):
                print_tree(child, new_indent, last=(i == len(children) - 1))
        case Leaf(token=token):
            print(f"{indent}{pointer}{token!r}")


def print_step(
    i: int,
    items: dict[ItemKey, Item],
    tokens: Sequence[str],
    *,
    fancy: bool = True,
    out: Console | None = None,
) -> None:
    """Print one item set of the chart."""
    out = out or console
    title = f"S({i}): {' '.join(repr(e) for e in tokens[:i])} • {' '.join(repr(e) for e in tokens[i:])}"
    if fancy:
        table = Table(title=Text(title))
        table.add_column("Production")
        table.add_column("Origin")
        table.add_column("Edges")
        table.add_column("Comment")

        for item in items.values():
            table.add_row(Text(repr(item)), str(item.origin), str(len(item.edges)), Text(item.comment))
        out.print(table)
    else:
        out.print(title, markup=False)
        for item in items.values():
            out.print(repr(item), str(item.origin), str(len(item.edges)), item.comment, markup=False)


def print_chart(chart: Chart, *, fancy: bool = True, out: Console | None = None) -> None:
    """Print the entire chart after parsing."""
    out = out or console
    for i, items in enumerate(chart):
        out.print()
        print_step(i, items, chart.tokens, fancy=fancy, out=out)


def print_grammar(grammar: Grammar, *, out: Console | None = None) -> None:
    (out or console).print(str(grammar), markup=False, highlight=False)
