# ruff: noqa: S101
from concurrent.futures import ThreadPoolExecutor

import pytest

from earleybird import (
    EarleyParser,
    Grammar,
    Leaf,
    Node,
    Rule,
    StepBudgetExceeded,
    parse,
    recognize,
)


def item_in_chart(chart, position, lhs, rhs, dot, origin):
    """Check if an item is in the chart at the given position."""
    for item in chart[position].values():
        if (
            item.rule.lhs == lhs
            and list(item.rule.rhs) == rhs
            and item.dot == dot
            and item.origin == origin
        ):
            return True
    return False


def expression_grammar():
    rules = [
        Rule("EXP", ["EXP", "+", "EXP"]),
        Rule("EXP", ["EXP", "*", "EXP"]),
        Rule("EXP", ["n"]),
    ]
    return Grammar(rules, "EXP")


def test_left_recursion():
    rules = [
        Rule("S", ["S", "a"]),
        Rule("S", ["a"]),
    ]
    grammar = Grammar(rules, "S")
    tokens = ["a", "a", "a"]

    chart = recognize(grammar, tokens)
    assert chart.accepted

    final_position = len(tokens)
    assert item_in_chart(chart, final_position, "S", ["S", "a"], 2, 0)
    assert item_in_chart(chart, 0, "S", ["S", "a"], 0, 0)
    assert item_in_chart(chart, 1, "S", ["a"], 1, 0)
    assert item_in_chart(chart, 2, "S", ["S", "a"], 2, 0)
    assert len(parse(grammar, tokens)) == 1


def test_right_recursion():
    rules = [
        Rule("S", ["a", "S"]),
        Rule("S", ["a"]),
    ]
    grammar = Grammar(rules, "S")
    tokens = ["a", "a", "a"]

    chart = recognize(grammar, tokens)
    assert chart.accepted

    final_position = len(tokens)
    assert item_in_chart(chart, final_position, "S", ["a", "S"], 2, 0)
    assert item_in_chart(chart, final_position, "S", ["a", "S"], 2, 1)
    assert item_in_chart(chart, final_position, "S", ["a"], 1, 2)
    assert len(parse(grammar, tokens)) == 1


def test_nullable_nonterminals():
    rules = [
        Rule("S", ["A", "B"]),
        Rule("A", ["a"]),
        Rule("A", []),  # Nullable production
        Rule("B", ["b"]),
    ]
    grammar = Grammar(rules, "S")
    tokens = ["b"]

    chart = recognize(grammar, tokens)
    assert chart.accepted
    assert "A" in grammar.nullable
    assert item_in_chart(chart, 0, "S", ["A", "B"], 1, 0)
    assert item_in_chart(chart, 1, "S", ["A", "B"], 2, 0)

    (tree,) = parse(grammar, tokens)
    assert tree == Node("S", [Node("A"), Node("B", [Leaf("b")])])


def test_nullable_predicted_after_completion():
    # B is predicted at position 0 only after the empty A has completed there.
    rules = [
        Rule("S", ["A", "B", "c"]),
        Rule("A", []),
        Rule("B", ["A"]),
    ]
    grammar = Grammar(rules, "S")

    trees = parse(grammar, "c")
    assert trees == [Node("S", [Node("A"), Node("B", [Node("A")]), Leaf("c")])]


def test_ambiguity():
    rules = [
        Rule("E", ["E", "+", "E"]),
        Rule("E", ["E", "*", "E"]),
        Rule("E", ["(", "E", ")"]),
        Rule("E", ["id"]),
    ]
    grammar = Grammar(rules, "E")
    tokens = ["id", "+", "id", "*", "id"]

    chart = recognize(grammar, tokens)
    assert chart.accepted
    assert item_in_chart(chart, len(tokens), "E", ["E", "+", "E"], 3, 0)
    assert item_in_chart(chart, len(tokens), "E", ["E", "*", "E"], 3, 0)
    assert len(parse(grammar, tokens)) == 2


def test_ambiguity_count_and_trees():
    trees = parse(expression_grammar(), "n+n*n")
    n = Node("EXP", [Leaf("n")])
    plus_first = Node("EXP", [Node("EXP", [n, Leaf("+"), n]), Leaf("*"), n])
    times_first = Node("EXP", [n, Leaf("+"), Node("EXP", [n, Leaf("*"), n])])

    assert len(trees) == 2
    assert set(trees) == {plus_first, times_first}


def test_merged_edges_keep_chart_small():
    grammar = expression_grammar()
    chart = recognize(grammar, "n+n+n")

    assert sum(len(items) for items in chart) == len(chart.store)
    (accepting,) = chart.accepting_items()
    assert accepting.rule.rhs == ("EXP", "+", "EXP")
    assert len(accepting.edges) == 2
    assert len(parse(grammar, "n+n+n")) == 2


def test_unambiguous_nested():
    rules = [
        Rule("S", ["a", "S", "b"]),
        Rule("S", []),
    ]
    grammar = Grammar(rules, "S")

    trees = parse(grammar, "aabb")
    assert trees == [
        Node("S", [Leaf("a"), Node("S", [Leaf("a"), Node("S"), Leaf("b")]), Leaf("b")]),
    ]


def test_empty_input():
    rules = [
        Rule("S", []),  # Nullable start symbol
    ]
    grammar = Grammar(rules, "S")
    tokens = []

    chart = recognize(grammar, tokens)
    assert chart.accepted
    assert "S" in grammar.nullable
    assert item_in_chart(chart, 0, "S", [], 0, 0)

    trees = parse(grammar, tokens)
    assert trees == [Node("S")]
    assert list(trees[0].leaves()) == []


def test_empty_input_not_nullable():
    grammar = Grammar([Rule("S", ["a"])], "S")
    assert parse(grammar, []) == []


def test_invalid_input():
    rules = [
        Rule("S", ["a"]),
    ]
    grammar = Grammar(rules, "S")
    tokens = ["b"]  # Token not in grammar

    chart = recognize(grammar, tokens)
    assert not chart.accepted

    final_position = len(tokens)
    start_item_found = any(
        item.rule.lhs == "S" and item.is_complete() for item in chart[final_position].values()
    )
    assert not start_item_found
    assert parse(grammar, tokens) == []


def test_unknown_token_is_rejected():
    assert parse(expression_grammar(), "x") == []
    assert parse(expression_grammar(), "n+") == []


def test_chart_invariants():
    grammar = expression_grammar()
    chart = recognize(grammar, "n*n+n*n")
    store = chart.store

    for position, items in enumerate(chart):
        for key, item in items.items():
            assert item.end == position
            assert key == item.key
            assert store[item.id] is item
            if item.dot == 0:
                assert item.edges == []
            else:
                assert item.edges
            for predecessor, cause in item.edges:
                assert store[predecessor].end <= position
                assert store[predecessor].dot == item.dot - 1
                if isinstance(cause, str):
                    assert cause == chart.tokens[position - 1]
                else:
                    assert store[cause].is_complete()
                    assert store[cause].end == position
                    assert store[cause].origin == store[predecessor].end


def test_item_repr():
    grammar = Grammar([Rule("S", ["a", "b"])], "S")
    chart = recognize(grammar, "a")
    (item,) = chart[1].values()
    assert repr(item) == "(S -> a • b)"
    assert item.next_symbol() == "b"
    assert not item.is_complete()
    assert item.comment == "scanned 'a'"


def test_step_budget_bounds_recognition():
    with pytest.raises(StepBudgetExceeded) as excinfo:
        recognize(expression_grammar(), "n+n*n", max_steps=3)
    assert excinfo.value.limit == 3
    assert excinfo.value.steps == 4


def test_parser_limit():
    parser = EarleyParser(expression_grammar())
    assert len(parser.parse("n+n+n+n")) == 5
    assert len(parser.parse("n+n+n+n", limit=2)) == 2


def test_verbose_parser_logs_outcome(caplog):
    parser = EarleyParser(expression_grammar(), verbose=True)
    with caplog.at_level("INFO", logger="EarleyParser"):
        parser.parse("n+")
    assert "Parsing failed" in caplog.text


def test_shared_grammar_across_threads():
    grammar = expression_grammar()
    inputs = ["n", "n+n", "n+n*n", "n*n+n*n", "n+"] * 4
    expected = [len(parse(grammar, tokens)) for tokens in inputs]

    with ThreadPoolExecutor(max_workers=4) as pool:
        counts = list(pool.map(lambda tokens: len(parse(grammar, tokens)), inputs))
    assert counts == expected
    assert expected[:5] == [1, 1, 2, 5, 0]


def test_recognizer_logs_under_parser_logger(caplog):
    with caplog.at_level("INFO", logger="EarleyParser"):
        chart = recognize(expression_grammar(), "n+x")
    assert not chart.accepted
    assert [record.name for record in caplog.records] == ["EarleyParser.recognizer"]
    assert "No item scans token 'x' at position 2" in caplog.text


def test_completion_comment_names_both_items():
    grammar = Grammar([Rule("S", ["A"]), Rule("A", ["a"])], "S")
    chart = recognize(grammar, "a")
    completed = next(item for item in chart[1].values() if item.rule.lhs == "S")
    assert completed.comment == "completed from (A -> a •) and (S -> • A)"
    assert chart[0][(grammar.rules_for("A")[0], 0, 0)].comment == "predicted from (S -> • A)"
