from __future__ import annotations

import pytest

from ganzhi.elements import Element
from ganzhi.interactions import InteractionKind, find_interactions
from ganzhi.rules import RuleSet
from ganzhi.strength import elemental_strengths


def _has_clash(chart) -> bool:
    return any(i.kind is InteractionKind.CLASH for i in find_interactions(chart))


def test_evaluate_returns_matching_names_in_order(known_chart) -> None:
    rules = RuleSet()
    rules.register("branch clash", _has_clash)
    rules.register("no wood", lambda chart: elemental_strengths(chart)[Element.WOOD] == 0)
    rules.register("geng day master", lambda chart: chart.day_master.pinyin == "Geng")
    assert rules.evaluate(known_chart) == ["branch clash", "geng day master"]
    assert len(rules) == 3


def test_clear_empties_the_set(known_chart) -> None:
    rules = RuleSet()
    rules.register("always", lambda chart: True)
    rules.clear()
    assert rules.evaluate(known_chart) == []
    assert rules.names == []


def test_sets_are_independent(known_chart) -> None:
    first, second = RuleSet(), RuleSet()
    first.register("always", lambda chart: True)
    assert second.evaluate(known_chart) == []


def test_predicate_must_be_callable() -> None:
    with pytest.raises(TypeError):
        RuleSet().register("broken", "not a function")
