import logging
from collections.abc import Sequence

from .chart import Chart, Item, ProvenanceStore
from .errors import StepBudgetExceeded
from .grammar import Grammar

logger = logging.getLogger("EarleyParser.recognizer")


class StepBudget:
    """Counts units of work and raises once ``limit`` is exceeded; ``None`` never runs out."""

    def __init__(self, limit: int | None = None):
        """Initialize a budget of ``limit`` steps."""
        if limit is not None and limit < 0:
            raise ValueError(f"step budget must be non-negative, got {limit}")
        self.limit = limit
        self.steps = 0

    def charge(self, steps: int = 1) -> None:
        """Spend ``steps`` units of work, raising StepBudgetExceeded past the limit."""
        self.steps += steps
        if self.limit is not None and self.steps > self.limit:
            raise StepBudgetExceeded(self.steps, self.limit)


class ChartBuilder:
    """Builds the Earley chart for one token sequence.

    Each position is closed with a single worklist: items appended while the
    worklist is being walked are processed in the same pass, which is the
    predict/complete fixpoint. Scanning feeds the next position's set.
    """

    def __init__(self, grammar: Grammar, tokens: Sequence[str], *, budget: StepBudget | None = None):
        self.grammar = grammar
        self.tokens = tokens
        self.budget = budget if budget is not None else StepBudget()
        self.chart = Chart(grammar, tokens, ProvenanceStore())
        # Zero-width completed items at the current position, by left-hand side.
        self._completed_here: dict[str, list[Item]] = {}

    def build(self) -> Chart:
        """Run scan/predict/complete over every position and return the chart."""
        self.add_initial_items()
        for position in range(len(self.tokens) + 1):
            self._completed_here = {}
            worklist = list(self.chart[position].values())
            self._process_items(worklist, position)
            if position < len(self.tokens) and not self.chart[position + 1]:
                logger.info("No item scans token %r at position %d", self.tokens[position], position)
                break

        logger.debug("Chart has %d items over %d positions", len(self.chart.store), len(self.chart))
        return self.chart

    def add_initial_items(self) -> None:
        """Add the initial items for all rules of the start symbol."""
        for rule in self.grammar.start_rules():
            self.chart.add(rule, 0, 0, 0, comment="initial item")

    def _process_items(self, worklist: list[Item], position: int) -> None:
        """Handle predict, scan, and complete for each item, including ones added on the way."""
        for item in worklist:
            self.budget.charge()
            if item.is_complete():
                self._complete_item(item, position, worklist)
            elif self.grammar.is_nonterminal(item.next_symbol()):
                self._predict_item(item, position, worklist)
            else:
                self._scan_item(item, position)

    def _predict_item(self, item: Item, position: int, worklist: list[Item]) -> None:
        """Handle the prediction step."""
        next_symbol = item.next_symbol()
        predicted = ("predicted from {}", item)
        for rule in self.grammar.rules_for(next_symbol):
            self.chart.add(rule, 0, position, position, comment=predicted, worklist=worklist)

        if next_symbol in self.grammar.nullable:
            for done in self._completed_here.get(next_symbol, []):
                self.chart.add(
                    item.rule,
                    item.dot + 1,
                    item.origin,
                    position,
                    (item.id, done.id),
                    comment=f"nullable {next_symbol}",
                    worklist=worklist,
                )

    def _scan_item(self, item: Item, position: int) -> None:
        """Handle the scanning step."""
        if position >= len(self.tokens):
            return
        token = self.tokens[position]
        if item.next_symbol() == token:
            self.chart.add(
                item.rule,
                item.dot + 1,
                item.origin,
                position + 1,
                (item.id, token),
                comment=f"scanned {token!r}",
            )

    def _complete_item(self, item: Item, position: int, worklist: list[Item]) -> None:
        """Handle the completion step."""
        lhs = item.rule.lhs
        if item.origin == position:
            self._completed_here.setdefault(lhs, []).append(item)

        for waiting in list(self.chart.waiting_for(item.origin, lhs)):
            self.chart.add(
                waiting.rule,
                waiting.dot + 1,
                waiting.origin,
                position,
                (waiting.id, item.id),
                comment=("completed from {} and {}", item, waiting),
                worklist=worklist,
            )


def recognize(grammar: Grammar, tokens: Sequence[str], *, max_steps: int | None = None) -> Chart:
    """Build the chart for ``tokens``; check ``chart.accepted`` for the verdict."""
    return ChartBuilder(grammar, tokens, budget=StepBudget(max_steps)).build()
