"""Earley parsing of arbitrary context-free grammars, with every derivation."""

from .chart import Chart, Item, ProvenanceStore
from .display import print_chart, print_grammar, print_step, print_tree
from .errors import EarleyError, GrammarError, StepBudgetExceeded
from .forest import Forest, ForestExtractor
from .grammar import Grammar, Rule, Symbol, SymbolKind, load_grammar
from .parser import EarleyParser, parse
from .recognizer import ChartBuilder, StepBudget, recognize
from .tree import Leaf, Node, to_dot

__version__ = "0.1.0"

__all__ = [
    "Chart",
    "ChartBuilder",
    "EarleyError",
    "EarleyParser",
    "Forest",
    "ForestExtractor",
    "Grammar",
    "GrammarError",
    "Item",
    "Leaf",
    "Node",
    "ProvenanceStore",
    "Rule",
    "StepBudget",
    "StepBudgetExceeded",
    "Symbol",
    "SymbolKind",
    "load_grammar",
    "parse",
    "print_chart",
    "print_grammar",
    "print_step",
    "print_tree",
    "recognize",
    "to_dot",
]
