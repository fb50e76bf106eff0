"""Earley items, the provenance arena that owns them, and the chart.

Items live in a :class:`ProvenanceStore` and are referred to by integer id.
An item's provenance edges are ``(predecessor_id, cause)`` pairs: ``cause`` is
the scanned token (a ``str``) or the id of the completed item that matched the
symbol before the dot. Edges never point at an item that ends at a later
position, and they are plain ids, so item objects never reference each other.
"""

import logging
from collections.abc import Iterator, Sequence

from .grammar import Grammar, Rule

logger = logging.getLogger("EarleyParser.chart")

Cause = int | str
Edge = tuple[int, Cause]
ItemKey = tuple[Rule, int, int]
# A comment, or a (template, *args) tuple formatted the first time it is read.
Comment = str | tuple


class Item:
    __slots__ = ("id", "rule", "dot", "origin", "end", "edges", "_comment")

    def __init__(
        self, id: int, rule: Rule, dot: int, origin: int, end: int, comment: Comment = ""  # noqa: A002
    ):
        """Initialize an Item covering ``rule`` up to ``dot`` over the input span [origin, end)."""
        self.id = id
        self.rule = rule
        self.dot = dot
        self.origin = origin
        self.end = end
        self.edges: list[Edge] = []
        self._comment = comment

    @property
    def comment(self) -> str:
        """Return how the item was first added."""
        if isinstance(self._comment, tuple):
            template, *args = self._comment
            self._comment = template.format(*args)
        return self._comment

    @property
    def key(self) -> ItemKey:
        """Return the (rule, dot, origin) triple that identifies the item within its set."""
        return (self.rule, self.dot, self.origin)

    def next_symbol(self) -> str | None:
        """Return the next symbol after the dot, if available."""
        return self.rule.rhs[self.dot] if self.dot < len(self.rule.rhs) else None

    def is_complete(self) -> bool:
        """Check if the item is complete (dot is at the end of the rule)."""
        return self.dot >= len(self.rule.rhs)

    def add_edge(self, edge: Edge) -> bool:
        """Record an alternative derivation; return False if it was already known."""
        if edge in self.edges:
            return False
        self.edges.append(edge)
        return True

    def __repr__(self) -> str:
        """Return a string representation of the Item."""
        rhs = list(self.rule.rhs)
        rhs.insert(self.dot, "•")
        return f"({self.rule.lhs} -> {' '.join(rhs)})"


class ProvenanceStore:
    """Arena of every item of one parse, indexed by id."""

    def __init__(self):
        """Initialize an empty store."""
        self.items: list[Item] = []

    def new_item(self, rule: Rule, dot: int, origin: int, end: int, comment: Comment = "") -> Item:
        """Create an item with the next free id."""
        item = Item(len(self.items), rule, dot, origin, end, comment)
        self.items.append(item)
        return item

    def add_edge(self, item: Item, edge: Edge) -> bool:
        """Attach ``edge`` to ``item``, refusing edges that reach past the item's end."""
        predecessor, cause = edge
        if self.items[predecessor].end > item.end or (
            isinstance(cause, int) and self.items[cause].end > item.end
        ):
            raise ValueError(f"edge {edge} of item {item.id} refers to a later position")
        return item.add_edge(edge)

    def edges(self, item_id: int) -> list[Edge]:
        """Return the provenance edges of an item."""
        return self.items[item_id].edges

    def __getitem__(self, item_id: int) -> Item:
        return self.items[item_id]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)


class Chart:
    """One item set per input position, each keyed by (rule, dot, origin)."""

    def __init__(self, grammar: Grammar, tokens: Sequence[str], store: ProvenanceStore | None = None):
        """Initialize the chart with one empty set per input position."""
        self.grammar = grammar
        self.tokens = tokens
        self.store = store if store is not None else ProvenanceStore()
        self.chart: list[dict[ItemKey, Item]] = [{} for _ in range(len(tokens) + 1)]
        # Incomplete items of each set, by the symbol after their dot.
        self.waiting: list[dict[str, list[Item]]] = [{} for _ in range(len(tokens) + 1)]

    def __getitem__(self, index: int) -> dict[ItemKey, Item]:
        """Get the item set at a specific position."""
        return self.chart[index]

    def __len__(self) -> int:
        return len(self.chart)

    def __iter__(self) -> Iterator[dict[ItemKey, Item]]:
        return iter(self.chart)

    def waiting_for(self, position: int, symbol: str) -> list[Item]:
        """Return the items of set ``position`` whose next symbol is ``symbol``."""
        return self.waiting[position].get(symbol, [])

    def add(
        self,
        rule: Rule,
        dot: int,
        origin: int,
        position: int,
        edge: Edge | None = None,
        *,
        comment: Comment = "",
        worklist: list[Item] | None = None,
    ) -> Item:
        """Add an item to the chart, merging ``edge`` into it if it already exists.

        A newly created item is appended to ``worklist`` so the caller's closure
        loop picks it up.
        """
        key = (rule, dot, origin)
        item = self.chart[position].get(key)
        if item is None:
            item = self.store.new_item(rule, dot, origin, position, comment)
            self.chart[position][key] = item
            if not item.is_complete():
                self.waiting[position].setdefault(item.next_symbol(), []).append(item)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Adding item %r (origin %d) at position %d: %s", item, origin, position, item.comment
                )
            if worklist is not None:
                worklist.append(item)
        if edge is not None and self.store.add_edge(item, edge) and len(item.edges) > 1:
            logger.debug("Merged edge %s into %r at position %d", edge, item, position)
        return item

    def accepting_items(self) -> list[Item]:
        """Return the completed start-symbol items spanning the whole input."""
        return [
            item
            for item in self.chart[-1].values()
            if item.rule.lhs == self.grammar.start_symbol and item.is_complete() and item.origin == 0
        ]

    @property
    def accepted(self) -> bool:
        """Check if an accepting item spans the whole input."""
        return bool(self.accepting_items())

    def __repr__(self) -> str:
        return f"Chart(positions={len(self.chart)}, items={len(self.store)}, accepted={self.accepted})"
