from __future__ import annotations

import pytest

from ganzhi.config import Settings
from ganzhi.elements import Element, TenGod
from ganzhi.pattern import Pattern, PatternMethod
from ganzhi.useful_god import (
    CLIMATE_RANGES,
    UsefulGodMethod,
    analyze_useful_god,
)

from conftest import make_chart


def test_conflicting_elements_are_dropped(wealth_chart) -> None:
    """Jian Lu disfavours wood while the wealth auxiliary favours it; wood ends up on neither side."""
    result = analyze_useful_god(wealth_chart, UsefulGodMethod.PATTERN)
    assert result.favorable == {Element.EARTH}
    assert result.unfavorable == {Element.METAL}
    assert not result.favorable & result.unfavorable
    assert any("Conflicting elements removed: wood" in line for line in result.trace)


def test_gods_follow_elements(wealth_chart) -> None:
    result = analyze_useful_god(wealth_chart)
    assert result.favorable_gods == {TenGod.INDIRECT_WEALTH, TenGod.DIRECT_WEALTH}
    assert result.unfavorable_gods == {TenGod.SEVEN_KILLINGS, TenGod.DIRECT_OFFICER}


@pytest.mark.parametrize("pillars", [
    ("Wu-Zi", "Geng-Shen", "Geng-Chen", "Bing-Xu"),
    ("Bing-Wu", "Jia-Yin", "Jia-Zi", "Bing-Wu"),
    ("Bing-Wu", "Jia-Zi", "Jia-Chen", "Wu-Shen"),
    ("Ji-Chou", "Ding-Wei", "Wu-Xu", "Geng-Chen"),
])
def test_pattern_method_never_both_favours_and_disfavours(pillars) -> None:
    result = analyze_useful_god(make_chart(*pillars), UsefulGodMethod.PATTERN)
    assert not result.favorable & result.unfavorable


def test_follow_pattern_uses_fixed_table(killings_chart) -> None:
    result = analyze_useful_god(killings_chart, UsefulGodMethod.PATTERN)
    assert result.favorable == {Element.EARTH, Element.METAL}
    assert result.unfavorable == {Element.FIRE, Element.WATER}


def test_vitalized_pattern_favours_own_flow() -> None:
    chart = make_chart("Jia-Yin", "Yi-Mao", "Jia-Chen", "Bing-Yin")
    result = analyze_useful_god(chart)
    assert result.favorable == {Element.FIRE, Element.WOOD, Element.WATER}
    assert result.unfavorable == {Element.METAL, Element.EARTH}


def test_resource_dominant_chart_favours_output(winter_chart) -> None:
    result = analyze_useful_god(winter_chart, UsefulGodMethod.PATTERN)
    assert result.favorable == {Element.FIRE}
    assert result.unfavorable == {Element.WATER}


def test_eating_god_pattern_never_favours_indirect_resource(killings_chart) -> None:
    pattern = Pattern(TenGod.EATING_GOD, PatternMethod.MONTH_BRANCH_MAIN_QI)
    result = analyze_useful_god(killings_chart, UsefulGodMethod.PATTERN, pattern=pattern)
    assert Element.WATER in result.favorable
    assert TenGod.DIRECT_RESOURCE in result.favorable_gods
    assert TenGod.INDIRECT_RESOURCE not in result.favorable_gods
    assert result.unfavorable == {Element.METAL}


def test_strength_balance_dominant_element(killings_chart) -> None:
    result = analyze_useful_god(killings_chart, UsefulGodMethod.STRENGTH_BALANCE)
    assert result.favorable == {Element.METAL, Element.EARTH}
    assert result.unfavorable == {Element.FIRE}


def test_strength_balance_too_weak_when_dominance_is_tuned_off(killings_chart) -> None:
    settings = Settings(dominant_ratio=1.0)
    result = analyze_useful_god(killings_chart, UsefulGodMethod.STRENGTH_BALANCE, settings=settings)
    assert result.favorable == {Element.WATER}
    assert result.unfavorable == {Element.EARTH}


def test_strength_balance_can_stay_empty(wealth_chart) -> None:
    result = analyze_useful_god(wealth_chart, UsefulGodMethod.STRENGTH_BALANCE)
    assert result.favorable == frozenset()
    assert result.unfavorable == frozenset()
    assert "Status: balanced, no recommendation" in result.trace


def test_strength_balance_conflict_favours_bridge(wealth_chart) -> None:
    """Wood (~38%) against earth (~53%) once the upper conflict bound admits earth."""
    settings = Settings(conflict_max_ratio=0.55)
    result = analyze_useful_god(wealth_chart, UsefulGodMethod.STRENGTH_BALANCE, settings=settings)
    assert result.favorable == {Element.FIRE}
    assert result.unfavorable == {Element.WATER}
    assert result.favorable_gods == {TenGod.EATING_GOD, TenGod.HURTING_OFFICER}
    assert "Status: conflict, wood controls earth" in result.trace
    assert "Useful God: bridge fire" in result.trace


def test_strength_balance_too_strong(winter_chart) -> None:
    """Only wood and water: support with no consumption at all."""
    settings = Settings(dominant_ratio=1.0)
    result = analyze_useful_god(winter_chart, UsefulGodMethod.STRENGTH_BALANCE, settings=settings)
    assert result.favorable == {Element.FIRE, Element.EARTH}
    assert result.unfavorable == {Element.WATER}
    assert "Status: too strong (support > 2 x consumption)" in result.trace


def test_climate_cold_chart_wants_fire(winter_chart) -> None:
    result = analyze_useful_god(winter_chart, UsefulGodMethod.CLIMATE)
    assert result.favorable == {Element.FIRE}
    assert result.unfavorable == frozenset()
    assert result.favorable_gods == {TenGod.EATING_GOD, TenGod.HURTING_OFFICER}


def test_climate_without_configuration(winter_chart) -> None:
    ranges = {k: v for k, v in CLIMATE_RANGES.items() if k != "Jia"}
    result = analyze_useful_god(winter_chart, UsefulGodMethod.CLIMATE, climate_ranges=ranges)
    assert result.favorable == frozenset()
    assert "No configuration for Day Master Jia" in result.trace


def test_climate_table_covers_every_stem() -> None:
    assert len(CLIMATE_RANGES) == 10


def test_result_to_dict_is_sorted(wealth_chart) -> None:
    data = analyze_useful_god(wealth_chart).to_dict()
    assert data["method"] == "pattern"
    assert data["favorable"] == ["earth"]
    assert data["favorable_gods"] == ["indirect_wealth", "direct_wealth"]
    assert data["trace"][0] == "Method: pattern"
