from collections.abc import Iterator, Sequence


class Leaf:
    """A matched input token."""

    __slots__ = ("token",)

    def __init__(self, token: str):
        """Initialize a Leaf for one matched token."""
        self.token = token

    @property
    def label(self) -> str:
        """Return the token, the leaf's label in rendered trees."""
        return self.token

    def leaves(self) -> Iterator[str]:
        """Yield the leaf's own token."""
        yield self.token

    def to_tuple(self) -> str:
        """Return the token as a plain string."""
        return self.token

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Leaf) and self.token == other.token

    def __hash__(self) -> int:
        return hash(("leaf", self.token))

    def __repr__(self) -> str:
        return f"Leaf({self.token!r})"


class Node:
    """An internal parse-tree node: a rule's left-hand symbol and one child per right-hand symbol."""

    __slots__ = ("symbol", "children", "_hash")

    def __init__(self, symbol: str, children: Sequence["Node | Leaf"] = ()):
        """Initialize a Node; the hash is computed once, bottom-up."""
        self.symbol = symbol
        self.children: tuple[Node | Leaf, ...] = tuple(children)
        self._hash = hash((self.symbol, self.children))

    @property
    def label(self) -> str:
        """Return the left-hand symbol, the node's label in rendered trees."""
        return self.symbol

    def leaves(self) -> Iterator[str]:
        """Yield the matched tokens from left to right."""
        stack = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Leaf):
                yield node.token
            else:
                stack.extend(reversed(node.children))

    def text(self, sep: str = "") -> str:
        """Return the matched tokens joined by ``sep``."""
        return sep.join(self.leaves())

    def to_tuple(self) -> tuple[str, list]:
        """Return the tree as nested ``(label, children)`` tuples with tokens as plain strings."""
        return (self.symbol, [child.to_tuple() for child in self.children])

    def __eq__(self, other: object) -> bool:
        """Compare two trees structurally, without recursing."""
        if not isinstance(other, Node):
            return False
        pairs = [(self, other)]
        while pairs:
            a, b = pairs.pop()
            if a is b:
                continue
            if isinstance(a, Leaf) or isinstance(b, Leaf):
                if a != b:
                    return False
                continue
            if a._hash != b._hash or a.symbol != b.symbol or len(a.children) != len(b.children):
                return False
            pairs.extend(zip(a.children, b.children, strict=True))
        return True

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        return f"Node({self.symbol!r}, {list(self.children)!r})"


def _escape(label: str) -> str:
    return label.replace("\\", "\\\\").replace('"', '\\"')


def to_dot(root: Node) -> str:
    """Render a parse tree as Graphviz DOT text, numbering nodes in post-order."""
    lines = ["digraph G {"]
    counter = 0

    def visit(node: Node | Leaf) -> int:
        nonlocal counter
        child_ids = [visit(child) for child in node.children] if isinstance(node, Node) else []
        counter += 1
        lines.append(f'  {counter} [label="{_escape(node.label)}"]')
        lines.extend(f"  {counter} -> {child_id}" for child_id in child_ids)
        return counter

    visit(root)
    lines.append("}")
    return "\n".join(lines)
