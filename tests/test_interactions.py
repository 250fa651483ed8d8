from __future__ import annotations

from ganzhi.elements import Element
from ganzhi.interactions import (
    InteractionKind,
    directional_groups,
    find_interactions,
    pair_interactions,
    three_harmony_groups,
)
from ganzhi.pillars import PillarRole
from ganzhi.symbols import StemBranch

from conftest import make_chart

ROLES = (PillarRole.YEAR, PillarRole.MONTH)


def _kinds(lhs: str, rhs: str) -> set:
    return {i.kind for i in pair_interactions(StemBranch.parse(lhs), StemBranch.parse(rhs), ROLES)}


def test_fu_yin_for_identical_pillars() -> None:
    assert InteractionKind.FU_YIN in _kinds("Jia-Zi", "Jia-Zi")


def test_fan_yin_needs_stem_and_branch_clash() -> None:
    kinds = _kinds("Jia-Zi", "Geng-Wu")
    assert {InteractionKind.FAN_YIN, InteractionKind.STEM_CLASH, InteractionKind.CLASH} <= kinds
    assert InteractionKind.FAN_YIN not in _kinds("Jia-Zi", "Geng-Chen")


def test_stem_combination_and_six_harmony_carry_element() -> None:
    found = pair_interactions(StemBranch.parse("Jia-Zi"), StemBranch.parse("Ji-Chou"), ROLES)
    by_kind = {i.kind: i for i in found}
    assert by_kind[InteractionKind.STEM_COMBINATION].element is Element.EARTH
    assert by_kind[InteractionKind.SIX_HARMONY].element is Element.EARTH
    assert by_kind[InteractionKind.SIX_HARMONY].characters == "子丑"


def test_harm_destruction_and_punishment() -> None:
    assert InteractionKind.HARM in _kinds("Jia-Zi", "Ji-Wei")
    assert InteractionKind.DESTRUCTION in _kinds("Jia-Zi", "Ji-You")
    assert InteractionKind.PUNISHMENT in _kinds("Jia-Zi", "Ji-Mao")
    assert InteractionKind.PUNISHMENT in _kinds("Jia-Wu", "Bing-Wu")
    assert InteractionKind.PUNISHMENT not in _kinds("Jia-Zi", "Bing-Zi")


def test_full_three_harmony_in_known_chart(known_chart) -> None:
    groups = three_harmony_groups(known_chart)
    assert len(groups) == 1
    water = groups[0]
    assert water.element is Element.WATER
    assert water.complete
    assert water.roles == (PillarRole.YEAR, PillarRole.MONTH, PillarRole.DAY)
    assert water.consecutive


def test_known_chart_interactions(known_chart) -> None:
    found = find_interactions(known_chart)
    clashes = [i for i in found if i.kind is InteractionKind.CLASH]
    assert [(c.roles, c.characters) for c in clashes] == [((PillarRole.DAY, PillarRole.HOUR), "辰戌")]
    triple = [i for i in found if i.kind is InteractionKind.TRIPLE_HARMONY]
    assert triple[0].to_dict() == {
        "type": "triple_harmony",
        "pillars": ["year", "month", "day"],
        "characters": "子申辰",
        "complete": True,
        "element": "water",
    }


def test_half_groups_need_two_distinct_members() -> None:
    chart = make_chart("Jia-Zi", "Jia-Zi", "Geng-Shen", "Jia-Zi")
    groups = three_harmony_groups(chart)
    assert len(groups) == 1
    assert not groups[0].complete
    assert groups[0].members == frozenset({0, 8})

    lonely = make_chart("Bing-Wu", "Jia-Wu", "Bing-Wu", "Jia-Wu")
    assert directional_groups(lonely) == []


def test_directional_group_not_adjacent() -> None:
    chart = make_chart("Jia-Yin", "Jia-Zi", "Ding-Mao", "Jia-Chen")
    groups = directional_groups(chart)
    wood = [g for g in groups if g.element is Element.WOOD][0]
    assert wood.complete
    assert not wood.consecutive
