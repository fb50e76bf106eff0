"""Lazy enumeration of every derivation recorded in a chart.

Trees are not shared: the trees of an item are the union, over its provenance
edges, of (rightmost subtree) x (trees of the predecessor prefix). Highly
ambiguous inputs therefore have exponentially many trees, so they are produced
one at a time by a backtracking walk over edge choices. The walk and the tree
assembly both run on explicit stacks; tree depth is bounded by memory, not by
Python's recursion limit.
"""

import itertools
import logging
from collections.abc import Iterator

from .chart import Chart, Edge, Item
from .recognizer import StepBudget
from .tree import Leaf, Node

logger = logging.getLogger("EarleyParser.forest")

# Pending items as an immutable linked list ``(item_id, rest)``, so a choice
# point can keep the pending work it resumes from without copying it.
Pending = tuple[int, "Pending"] | None


class ForestExtractor:
    def __init__(self, chart: Chart, *, budget: StepBudget | None = None):
        """Initialize an extractor over a finished chart."""
        self.chart = chart
        self.store = chart.store
        self.budget = budget if budget is not None else StepBudget()

    def __iter__(self) -> Iterator[Node]:
        """Yield the trees of every accepting item."""
        accepting = self.chart.accepting_items()
        logger.debug("Extracting trees from %d accepting item(s)", len(accepting))
        for item in accepting:
            yield from self.trees(item)

    def trees(self, item: Item) -> Iterator[Node]:
        """Yield every tree rooted at a completed item."""
        for choices in self._derivations(item.id):
            yield self._assemble(item.id, choices)

    def _derivations(self, root: int) -> Iterator[list[Edge]]:
        """Yield the edge chosen for every expanded item, in depth-first order, once per derivation."""
        # Each choice point is (pending, len(choices), item_id, index of the next edge to try).
        choice_points: list[tuple[Pending, int, int, int]] = []
        choices: list[Edge] = []
        pending: Pending = (root, None)
        while True:
            while pending is not None:
                self.budget.charge()
                item_id, pending = pending
                edges = self.store.edges(item_id)
                if not edges:
                    continue
                if len(edges) > 1:
                    choice_points.append((pending, len(choices), item_id, 1))
                pending = self._expand(edges[0], pending, choices)
            yield list(choices)

            if not choice_points:
                return
            pending, size, item_id, index = choice_points.pop()
            del choices[size:]
            edges = self.store.edges(item_id)
            if index + 1 < len(edges):
                choice_points.append((pending, size, item_id, index + 1))
            pending = self._expand(edges[index], pending, choices)

    @staticmethod
    def _expand(edge: Edge, pending: Pending, choices: list[Edge]) -> Pending:
        choices.append(edge)
        predecessor, cause = edge
        if isinstance(cause, int):
            pending = (cause, pending)
        return (predecessor, pending)

    def _assemble(self, root: int, choices: list[Edge]) -> Node:
        """Build the tree of one derivation by replaying its choices in the order they were made."""
        chosen = iter(choices)
        values: list = []
        todo: list[tuple[str, int | str]] = [("node", root), ("expand", root)]
        while todo:
            op, arg = todo.pop()
            if op == "expand":
                if self.store[arg].dot == 0:
                    values.append(())
                    continue
                predecessor, cause = next(chosen)
                todo.append(("join", 0))
                if isinstance(cause, int):
                    todo.append(("node", cause))
                    todo.append(("expand", cause))
                else:
                    todo.append(("leaf", cause))
                todo.append(("expand", predecessor))
            elif op == "leaf":
                values.append(Leaf(arg))
            elif op == "node":
                self.budget.charge()
                values.append(Node(self.store[arg].rule.lhs, values.pop()))
            else:
                right = values.pop()
                values.append((*values.pop(), right))
        return values.pop()


class Forest:
    """Every parse of one input, enumerated on demand.

    Iterating again restarts extraction from the chart, with a fresh step
    budget each time.
    """

    def __init__(self, chart: Chart, *, max_steps: int | None = None, steps_used: int = 0):
        """Initialize a forest over ``chart``; ``steps_used`` is work already spent building it."""
        self.chart = chart
        self.max_steps = max_steps
        self.steps_used = steps_used

    @property
    def accepted(self) -> bool:
        """Check if the input was accepted."""
        return self.chart.accepted

    def _budget(self) -> StepBudget:
        budget = StepBudget(self.max_steps)
        budget.steps = self.steps_used
        return budget

    def __iter__(self) -> Iterator[Node]:
        """Start a new enumeration of the trees."""
        return iter(ForestExtractor(self.chart, budget=self._budget()))

    def take(self, count: int) -> list[Node]:
        """Return at most the first ``count`` trees."""
        return list(itertools.islice(self, count))

    def first(self) -> Node | None:
        """Return the first tree, or None if the input was rejected."""
        return next(iter(self), None)

    def __bool__(self) -> bool:
        return self.accepted

    def __repr__(self) -> str:
        return f"Forest(accepted={self.accepted}, tokens={len(self.chart.tokens)})"
