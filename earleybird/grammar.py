import enum
import logging
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from .errors import GrammarError

logger = logging.getLogger("EarleyParser.grammar")

ARROW = "->"


class SymbolKind(enum.Enum):
    TERMINAL = "terminal"
    NONTERMINAL = "nonterminal"


class Symbol:
    __slots__ = ("name", "kind")

    def __init__(self, name: str, kind: SymbolKind):
        """Initialize a Symbol with its name and kind."""
        self.name = name
        self.kind = kind

    @property
    def is_terminal(self) -> bool:
        """Check if the symbol matches input tokens directly."""
        return self.kind is SymbolKind.TERMINAL

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Symbol):
            return False
        return (self.name, self.kind) == (other.name, other.kind)

    def __hash__(self) -> int:
        return hash((self.name, self.kind))

    def __repr__(self) -> str:
        return f"Symbol({self.name!r}, {self.kind.value})"


class Rule:
    """A production ``lhs -> rhs``; an empty ``rhs`` is a nullable alternative.

    Rules compare by value, so the same production written twice is one rule.
    ``id`` is the rule's position in the grammar that owns it, or ``None``
    for a rule that has not been added to a grammar yet.
    """

    __slots__ = ("lhs", "rhs", "id")

    def __init__(self, lhs: str, rhs: Sequence[str], id: int | None = None):  # noqa: A002
        """Initialize a Rule with a left-hand side and a sequence of right-hand side symbols."""
        if not isinstance(lhs, str) or not lhs:
            raise GrammarError(f"left-hand side must be a non-empty symbol name, got {lhs!r}")
        if isinstance(rhs, str):
            raise GrammarError(f"right-hand side of {lhs} must be a sequence of symbols, not {rhs!r}")
        rhs = tuple(rhs)
        for symbol in rhs:
            if not isinstance(symbol, str) or not symbol:
                raise GrammarError(f"right-hand side of {lhs} contains an invalid symbol {symbol!r}")
        self.lhs = lhs
        self.rhs = rhs
        self.id = id

    def __len__(self) -> int:
        """Return the number of right-hand side symbols."""
        return len(self.rhs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rule):
            return False
        return (self.lhs, self.rhs) == (other.lhs, other.rhs)

    def __hash__(self) -> int:
        return hash((self.lhs, self.rhs))

    def __repr__(self) -> str:
        """Return a string representation of the Rule."""
        return f"{self.lhs} -> {' '.join(self.rhs)}".rstrip()


class Grammar:
    """A read-only context-free grammar.

    Every symbol that is the left-hand side of some rule is a nonterminal; the
    remaining right-hand side symbols are terminals and match input tokens that
    are equal to their name. ``nonterminals`` may declare extra nonterminal
    names up front: referencing one of those without giving it a rule is an
    error rather than a terminal that silently never matches.
    """

    def __init__(self, rules: Iterable[Rule], start_symbol: str, *, nonterminals: Iterable[str] = ()):
        """Initialize a Grammar with a list of rules and a start symbol."""
        self.start_symbol = start_symbol
        by_lhs: dict[str, list[Rule]] = {}
        unique: dict[Rule, Rule] = {}
        for rule in rules:
            if not isinstance(rule, Rule):
                raise GrammarError(f"expected a Rule, got {rule!r}")
            if rule in unique:
                logger.debug("Dropping duplicate rule %r", rule)
                continue
            own = Rule(rule.lhs, rule.rhs, id=len(unique))
            unique[own] = own
            by_lhs.setdefault(own.lhs, []).append(own)
        self.rules: tuple[Rule, ...] = tuple(unique)
        self.rules_by_lhs: Mapping[str, tuple[Rule, ...]] = MappingProxyType(
            {lhs: tuple(group) for lhs, group in by_lhs.items()}
        )

        if start_symbol not in self.rules_by_lhs:
            raise GrammarError(f"start symbol {start_symbol!r} is undefined")

        declared = set(nonterminals)
        self.nonterminals: frozenset[str] = frozenset(declared | set(self.rules_by_lhs))
        terminals = set()
        for rule in self.rules:
            for symbol in rule.rhs:
                if symbol in self.rules_by_lhs:
                    continue
                if symbol in declared:
                    raise GrammarError(f"nonterminal {symbol!r} referenced by {rule!r} has no rules")
                terminals.add(symbol)
        self.terminals: frozenset[str] = frozenset(terminals)
        self.nullable: frozenset[str] = self._compute_nullable_nonterminals()

    @classmethod
    def from_text(cls, text: str) -> "Grammar":
        """Build a grammar from its textual form, see :func:`load_grammar`."""
        return load_grammar(text)

    def _compute_nullable_nonterminals(self) -> frozenset[str]:
        """Precompute nullable non-terminals with indirect nullability."""
        nullable: set[str] = set()
        change = True
        while change:
            change = False
            for rule in self.rules:
                if rule.lhs not in nullable and all(symbol in nullable for symbol in rule.rhs):
                    nullable.add(rule.lhs)
                    change = True
        return frozenset(nullable)

    def is_nonterminal(self, name: str) -> bool:
        """Check if ``name`` is defined by at least one rule."""
        return name in self.rules_by_lhs

    def symbol(self, name: str) -> Symbol:
        """Return the Symbol for ``name``, raising KeyError if the grammar never mentions it."""
        if name in self.nonterminals:
            return Symbol(name, SymbolKind.NONTERMINAL)
        if name in self.terminals:
            return Symbol(name, SymbolKind.TERMINAL)
        raise KeyError(name)

    def rules_for(self, name: str) -> tuple[Rule, ...]:
        """Return the rules whose left-hand side is ``name``."""
        return self.rules_by_lhs.get(name, ())

    def start_rules(self) -> tuple[Rule, ...]:
        """Return the rules of the start symbol."""
        return self.rules_by_lhs[self.start_symbol]

    def __str__(self) -> str:
        lines = [
            f"Nonterminals: {', '.join(sorted(self.nonterminals))}",
            f"Terminals: {', '.join(sorted(self.terminals))}",
            "Rules:",
            *(f"  {rule!r}" for rule in self.rules),
            f"Start: {self.start_symbol}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Grammar(start={self.start_symbol!r}, rules={len(self.rules)})"


def load_grammar(text: str) -> Grammar:
    """Parse the textual grammar format.

    The first non-blank line names the start symbol. Every following non-blank
    line is a rule ``LHS -> RHS1 RHS2 ...`` with whitespace-separated symbols;
    ``LHS ->`` alone is an empty alternative. Line numbers in errors are
    1-based and count blank lines.
    """
    start_symbol = None
    rules = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        words = line.split()
        if not words:
            continue
        if start_symbol is None:
            if len(words) != 1 or words[0] == ARROW:
                raise GrammarError("expected a single start symbol", line_number, line)
            start_symbol = words[0]
            continue
        if len(words) < 2 or words[1] != ARROW or words[0] == ARROW:
            raise GrammarError(f"expected 'LHS {ARROW} RHS'", line_number, line)
        if ARROW in words[2:]:
            raise GrammarError(f"unexpected '{ARROW}' in right-hand side", line_number, line)
        rules.append(Rule(words[0], words[2:]))

    if start_symbol is None:
        raise GrammarError("grammar text names no start symbol")
    return Grammar(rules, start_symbol)
