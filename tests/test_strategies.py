import re

from nlp.strategies import PatternStrategy, compile_strategy, run_cascade


def test_first_successful_strategy_wins():
    strategies = [
        compile_strategy("missing", r"nothing-here"),
        compile_strategy("digits", r"(\d+)", group=1),
        compile_strategy("words", r"[a-z]+"),
    ]
    assert run_cascade(strategies, "abc 123") == "123"


def test_validate_skips_to_next_match_then_next_strategy():
    strategy = compile_strategy("even", r"\d+", validate=lambda v: int(v) % 2 == 0)
    assert strategy.try_extract("3 5 8") == "8"
    assert strategy.try_extract("3 5") is None

    fallback = PatternStrategy("word", re.compile(r"[a-z]+"))
    assert run_cascade([strategy, fallback], "3 five") == "five"


def test_transform_can_reject_a_match():
    strategy = compile_strategy("upper", r"\w+", transform=lambda v: v.upper() if len(v) > 2 else None)
    assert strategy.try_extract("ab cde") == "CDE"


def test_empty_cascade_returns_none():
    assert run_cascade([], "text") is None
