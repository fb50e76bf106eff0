import logging
from collections.abc import Sequence

from .chart import Chart
from .forest import Forest
from .grammar import Grammar
from .recognizer import ChartBuilder, StepBudget
from .tree import Node


class EarleyParser:
    """Parses token sequences against one grammar.

    The grammar is never mutated and every call builds its own chart, so one
    parser can serve independent inputs, including from several threads.
    """

    def __init__(self, grammar: Grammar, *, verbose: bool = False, max_steps: int | None = None):
        """Initialize the Earley Parser with a given grammar, verbosity and step budget."""
        self.grammar = grammar
        self.verbose = verbose  # Control for debug output
        self.max_steps = max_steps

        # Setup logging
        self.logger = logging.getLogger("EarleyParser")
        if verbose:
            logging.basicConfig(level=logging.INFO)

    def _log(self, message: str) -> None:
        """Log the message if verbosity is enabled."""
        self.logger.info(message)

    def recognize(self, tokens: Sequence[str]) -> Chart:
        """Build the chart for ``tokens``; a rejected input is a chart without accepting items."""
        return self._build(tokens, StepBudget(self.max_steps))

    def _build(self, tokens: Sequence[str], budget: StepBudget) -> Chart:
        chart = ChartBuilder(self.grammar, tokens, budget=budget).build()
        if chart.accepted:
            self._log(f"Accepted {len(tokens)} tokens with {len(chart.store)} items")
        else:
            self._log(f"Parsing failed: No valid parse found for tokens {list(tokens)}")
        return chart

    def forest(self, tokens: Sequence[str]) -> Forest:
        """Recognize ``tokens`` and return a lazy, restartable view of all parse trees."""
        budget = StepBudget(self.max_steps)
        chart = self._build(tokens, budget)
        return Forest(chart, max_steps=self.max_steps, steps_used=budget.steps)

    def parse(self, tokens: Sequence[str], limit: int | None = None) -> list[Node]:
        """Parse a list of tokens, returning every tree (or the first ``limit``) of an accepted input."""
        forest = self.forest(tokens)
        trees = list(forest) if limit is None else forest.take(limit)
        if trees:
            self._log(f"Extracted {len(trees)} parse tree(s)")
        return trees


def parse(
    grammar: Grammar, tokens: Sequence[str], *, limit: int | None = None, max_steps: int | None = None
) -> list[Node]:
    """Return the parse trees of ``tokens``; an empty list means the input was rejected."""
    return EarleyParser(grammar, max_steps=max_steps).parse(tokens, limit=limit)
