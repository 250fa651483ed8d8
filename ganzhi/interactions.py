"""
Stem and branch interactions inside a chart.

Handles:
- Stem Five Combinations (五合) and Clashes (相冲)
- Branch Six Harmony, Clash, Harm, Punishment and Destruction
- Fu Yin (伏吟) and Fan Yin (反吟) between whole pillars
- Three Harmony (三合) and Directional (三会) groups, full and half

This module COMPUTES and FLAGS. The energy model reads the group
detection for its combination bonuses; the rest is reporting.
"""

from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Optional

from ganzhi.elements import Element
from ganzhi.symbols import StemBranch


class InteractionKind(Enum):
    STEM_COMBINATION = "stem_combination"
    STEM_CLASH = "stem_clash"
    SIX_HARMONY = "six_harmony"
    TRIPLE_HARMONY = "triple_harmony"
    DIRECTIONAL = "directional"
    CLASH = "clash"
    HARM = "harm"
    PUNISHMENT = "punishment"
    DESTRUCTION = "destruction"
    FU_YIN = "fu_yin"
    FAN_YIN = "fan_yin"


# ============================================================
# TABLES
# ============================================================

# Five Combinations of stems (index distance 5) and the element they form
STEM_COMBINATIONS = {
    (0, 5): Element.EARTH,    # Jia-Ji
    (1, 6): Element.METAL,    # Yi-Geng
    (2, 7): Element.WATER,    # Bing-Xin
    (3, 8): Element.WOOD,     # Ding-Ren
    (4, 9): Element.FIRE,     # Wu-Gui
}

# Six Combinations (六合) - 1:1 pairings that can transform
SIX_COMBINATIONS = {
    (0, 1): Element.EARTH,    # Zi-Chou
    (2, 11): Element.WOOD,    # Yin-Hai
    (3, 10): Element.FIRE,    # Mao-Xu
    (4, 9): Element.METAL,    # Chen-You
    (5, 8): Element.WATER,    # Si-Shen
    (6, 7): Element.FIRE,     # Wu-Wei
}

# Three Harmony Combinations (三合)
THREE_HARMONY = {
    (8, 0, 4): Element.WATER,     # Shen-Zi-Chen
    (11, 3, 7): Element.WOOD,     # Hai-Mao-Wei
    (2, 6, 10): Element.FIRE,     # Yin-Wu-Xu
    (5, 9, 1): Element.METAL,     # Si-You-Chou
}

# Directional Combinations (三会) - the three branches of one season
DIRECTIONAL = {
    (2, 3, 4): Element.WOOD,      # Yin-Mao-Chen
    (5, 6, 7): Element.FIRE,      # Si-Wu-Wei
    (8, 9, 10): Element.METAL,    # Shen-You-Xu
    (11, 0, 1): Element.WATER,    # Hai-Zi-Chou
}

# Six Harms (六害)
SIX_HARMS = [(0, 7), (1, 6), (2, 5), (3, 4), (8, 11), (9, 10)]

# Destructions (相破)
DESTRUCTIONS = [(0, 9), (5, 8), (2, 11), (4, 1), (6, 3), (10, 7)]

# Pairwise punishments (刑): Zi-Mao, Yin-Si-Shen cycle, Chou-Wei-Xu cycle
PUNISHMENT_PAIRS = [(0, 3), (2, 5), (5, 8), (8, 2), (1, 7), (7, 10), (10, 1)]

# Self-punishment: Chen, Wu, You, Hai meeting themselves
SELF_PUNISHMENT = {4, 6, 9, 11}


def _pair_in(a: int, b: int, pairs) -> bool:
    return {a, b} in [set(p) for p in pairs]


def _element_for_pair(a: int, b: int, table: dict) -> Optional[Element]:
    for pair, element in table.items():
        if {a, b} == set(pair):
            return element
    return None


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class Interaction:
    kind: InteractionKind
    roles: tuple        # pillar roles involved, chart order
    characters: str
    element: Optional[Element] = None
    complete: bool = True

    def to_dict(self):
        result = {
            "type": self.kind.value,
            "pillars": [role.value for role in self.roles],
            "characters": self.characters,
            "complete": self.complete,
        }
        if self.element is not None:
            result["element"] = self.element.value
        return result


@dataclass(frozen=True)
class BranchGroup:
    """A full or half Three Harmony / Directional group found in a chart."""

    element: Element
    roles: tuple        # every pillar whose branch is a member
    members: frozenset  # distinct branch indices present
    complete: bool
    consecutive: bool = False  # three adjacent pillars hold all three members


# ============================================================
# PAIRWISE ANALYSIS
# ============================================================

def pair_interactions(lhs: StemBranch, rhs: StemBranch, roles: tuple) -> list:
    """
    All interactions between two pillars.

    Args:
        lhs, rhs: the two pillars
        roles: their PillarRole tags, (lhs_role, rhs_role)
    """
    found = []
    s1, s2 = lhs.stem.index, rhs.stem.index
    b1, b2 = lhs.branch.index, rhs.branch.index
    stem_chars = lhs.stem.chinese + rhs.stem.chinese
    branch_chars = lhs.branch.chinese + rhs.branch.chinese

    stem_clash = abs(s1 - s2) == 6
    branch_clash = abs(b1 - b2) == 6

    if lhs == rhs:
        found.append(Interaction(InteractionKind.FU_YIN, roles, lhs.chinese + rhs.chinese))
    if stem_clash and branch_clash:
        found.append(Interaction(InteractionKind.FAN_YIN, roles, lhs.chinese + rhs.chinese))

    if abs(s1 - s2) == 5:
        found.append(Interaction(InteractionKind.STEM_COMBINATION, roles, stem_chars,
                                 _element_for_pair(s1, s2, STEM_COMBINATIONS)))
    if stem_clash:
        found.append(Interaction(InteractionKind.STEM_CLASH, roles, stem_chars))

    harmony = _element_for_pair(b1, b2, SIX_COMBINATIONS)
    if harmony is not None:
        found.append(Interaction(InteractionKind.SIX_HARMONY, roles, branch_chars, harmony))
    if branch_clash:
        found.append(Interaction(InteractionKind.CLASH, roles, branch_chars))
    if _pair_in(b1, b2, SIX_HARMS):
        found.append(Interaction(InteractionKind.HARM, roles, branch_chars))
    if (b1 == b2 and b1 in SELF_PUNISHMENT) or _pair_in(b1, b2, PUNISHMENT_PAIRS):
        found.append(Interaction(InteractionKind.PUNISHMENT, roles, branch_chars))
    if _pair_in(b1, b2, DESTRUCTIONS):
        found.append(Interaction(InteractionKind.DESTRUCTION, roles, branch_chars))
    return found


# ============================================================
# GROUP DETECTION
# ============================================================

def _adjacent_run(chart, triple) -> bool:
    branches = [b.index for b in chart.branches()]
    for start in range(len(branches) - 2):
        if set(branches[start:start + 3]) == set(triple):
            return True
    return False


def _groups(chart, table: dict) -> list:
    groups = []
    for triple, element in table.items():
        roles = tuple(role for role, p in chart.items() if p.branch.index in triple)
        members = frozenset(chart.pillar(role).branch.index for role in roles)
        if len(members) >= 2:
            complete = len(members) == 3
            groups.append(BranchGroup(element, roles, members, complete,
                                      complete and _adjacent_run(chart, triple)))
    return groups


def directional_groups(chart) -> list:
    """Directional (三会) groups with at least two distinct members present."""
    return _groups(chart, DIRECTIONAL)


def three_harmony_groups(chart) -> list:
    """Three Harmony (三合) groups with at least two distinct members present."""
    return _groups(chart, THREE_HARMONY)


def _group_interaction(kind: InteractionKind, group: BranchGroup, chart) -> Interaction:
    chars = "".join(chart.pillar(role).branch.chinese for role in group.roles)
    return Interaction(kind, group.roles, chars, group.element, group.complete)


def find_interactions(chart) -> list:
    """
    Every interaction in a chart: pairwise ones for each pillar pair in
    chart order, followed by Three Harmony and Directional groups.
    """
    interactions = []
    for (role_a, a), (role_b, b) in combinations(chart.items(), 2):
        interactions.extend(pair_interactions(a, b, (role_a, role_b)))
    for group in three_harmony_groups(chart):
        interactions.append(_group_interaction(InteractionKind.TRIPLE_HARMONY, group, chart))
    for group in directional_groups(chart):
        interactions.append(_group_interaction(InteractionKind.DIRECTIONAL, group, chart))
    return interactions
