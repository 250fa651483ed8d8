"""
Elemental energy model.

Handles:
- Seasonal coefficient of an element against the month commander
- Branch and stem energy of each pillar (rooting with distance decay)
- Five Element and Ten God strength vectors
- Directional and Three Harmony combination bonuses

Energies depend on the whole chart, so every function takes the
FourPillars value and recomputes; nothing is cached on stems or branches.
The two vectors are built from the same contributions, so
sum(elemental) == sum(ten gods) + Day Master self energy.
"""

from ganzhi.elements import (
    Element,
    Polarity,
    TenGod,
    TenGodGroup,
    ten_god,
    ten_god_of_stem,
)
from ganzhi.interactions import directional_groups, three_harmony_groups
from ganzhi.pillars import FourPillars, PillarRole
from ganzhi.symbols import HeavenlyStem, EarthlyBranch


MONTH_BRANCH_ENERGY = 3.0
BASE_ENERGY = 1.0

# Hidden stem weights in the vectors: main, middle, residual
HIDDEN_STEM_WEIGHTS = (1.0, 0.6, 0.3)

# Rooting: exact stem match vs. same element, by qi layer
ROOT_WEIGHTS = (3.0, 2.0, 1.0)
ELEMENT_ROOT_WEIGHTS = (1.5, 1.0, 0.5)

# Decay by pillar distance 0..3
DISTANCE_DECAY = (1.0, 0.9, 0.8, 0.7)

DIRECTIONAL_MONTH_BONUS = 3.0
DIRECTIONAL_OTHER_BONUS = 1.0
DIRECTIONAL_CONTINUITY_BONUS = 1.0
TRIPLE_HARMONY_FULL_BONUS = 2.0
TRIPLE_HARMONY_HALF_BONUS = 1.0


# ============================================================
# COEFFICIENTS
# ============================================================

def seasonal_coefficient(element: Element, month_element: Element) -> float:
    """
    How strongly the season supports an element (旺相休囚死).

    same 1.4, generated by the month 1.2, generates the month 1.0,
    controls the month 0.8, controlled by the month 0.6.
    """
    if element == month_element:
        return 1.4
    if month_element.generates(element):
        return 1.2
    if element.generates(month_element):
        return 1.0
    if element.controls(month_element):
        return 0.8
    if month_element.controls(element):
        return 0.6
    return 1.0


def _seasonal(chart: FourPillars, element: Element) -> float:
    return seasonal_coefficient(element, chart.month_branch.element)


def branch_energy(chart: FourPillars, role: PillarRole) -> float:
    """The month branch commands at 3.0; other branches scale with the season."""
    if role is PillarRole.MONTH:
        return MONTH_BRANCH_ENERGY
    return BASE_ENERGY * _seasonal(chart, chart.pillar(role).branch.element)


def rooting_score(stem: HeavenlyStem, branch: EarthlyBranch) -> float:
    """
    Root strength of a stem in one branch.

    Additive over the branch's hidden stems: an exact match scores 3/2/1
    for main/middle/residual qi, a different stem of the same element
    half of that.
    """
    score = 0.0
    for hidden, layer in branch.qi_layers():
        if hidden == stem:
            score += ROOT_WEIGHTS[layer]
        elif hidden.element == stem.element:
            score += ELEMENT_ROOT_WEIGHTS[layer]
    return score


def stem_energy(chart: FourPillars, role: PillarRole) -> float:
    """
    Energy of the stem at a pillar.

    Seasonal base plus, for every branch the stem roots in, that branch's
    energy and the root score weighted by the branch's season coefficient
    (1.0 for the month branch) and the pillar distance decay. Branches
    without a root add nothing.
    """
    stem = chart.pillar(role).stem
    total = BASE_ENERGY * _seasonal(chart, stem.element)

    for branch_role, p in chart.items():
        root = rooting_score(stem, p.branch)
        if root == 0:
            continue
        if branch_role is PillarRole.MONTH:
            season = 1.0
        else:
            season = _seasonal(chart, p.branch.element)
        decay = DISTANCE_DECAY[abs(role.position - branch_role.position)]
        total += branch_energy(chart, branch_role) + root * season * decay
    return total


def day_master_strength(chart: FourPillars) -> float:
    """Energy of the Day Master's own stem ("self strength")."""
    return stem_energy(chart, PillarRole.DAY)


# ============================================================
# CONTRIBUTIONS
# ============================================================

def _stem_contributions(chart: FourPillars) -> list:
    """(role, stem, amount, visible) for visible stems and weighted hidden stems."""
    contributions = []
    for role, p in chart.items():
        contributions.append((role, p.stem, stem_energy(chart, role), True))
        energy = branch_energy(chart, role)
        for hidden, layer in p.branch.qi_layers():
            contributions.append((role, hidden, energy * HIDDEN_STEM_WEIGHTS[layer], False))
    return contributions


def combination_bonuses(chart: FourPillars) -> list:
    """
    (element, amount) bonuses from branch combinations.

    Full directional set: 3.0 per month-pillar member, 1.0 per other
    member, plus 1.0 when three adjacent pillars hold it. Half set: half
    of the per-member amounts. Three Harmony: +2.0 full, +1.0 half.
    """
    bonuses = []
    for group in directional_groups(chart):
        share = 1.0 if group.complete else 0.5
        for role in group.roles:
            amount = DIRECTIONAL_MONTH_BONUS if role is PillarRole.MONTH else DIRECTIONAL_OTHER_BONUS
            bonuses.append((group.element, amount * share))
        if group.consecutive:
            bonuses.append((group.element, DIRECTIONAL_CONTINUITY_BONUS))

    for group in three_harmony_groups(chart):
        amount = TRIPLE_HARMONY_FULL_BONUS if group.complete else TRIPLE_HARMONY_HALF_BONUS
        bonuses.append((group.element, amount))
    return bonuses


# ============================================================
# STRENGTH VECTORS
# ============================================================

def elemental_strengths(chart: FourPillars) -> dict:
    """Five Element strength vector, every element present (0.0 if absent)."""
    scores = {element: 0.0 for element in Element}
    for _, stem, amount, _ in _stem_contributions(chart):
        scores[stem.element] += amount
    for element, amount in combination_bonuses(chart):
        scores[element] += amount
    return scores


def ten_god_strengths(chart: FourPillars) -> dict:
    """
    Ten God strength vector relative to the Day Master.

    The Day Master's own stem is left out (see day_master_strength).
    Combination bonuses are split evenly between the yang and yin god of
    the bonus element.
    """
    day_master = chart.day_master
    scores = {god: 0.0 for god in TenGod}
    for role, stem, amount, visible in _stem_contributions(chart):
        if visible and role is PillarRole.DAY:
            continue
        scores[ten_god_of_stem(day_master, stem)] += amount

    for element, amount in combination_bonuses(chart):
        for polarity in (Polarity.YANG, Polarity.YIN):
            god = ten_god(day_master.element, day_master.polarity, element, polarity)
            scores[god] += amount * 0.5
    return scores


def group_strengths(chart: FourPillars, include_self: bool = True) -> dict:
    """
    Ten God strengths summed per group.

    With include_self the Day Master's own energy counts in the peer
    group, which makes the groups line up with the element vector.
    """
    groups = {group: 0.0 for group in TenGodGroup}
    for god, value in ten_god_strengths(chart).items():
        groups[god.group] += value
    if include_self:
        groups[TenGodGroup.PEER] += day_master_strength(chart)
    return groups


def ratio(part: float, total: float) -> float:
    """part / total, 0.0 when the total is zero."""
    return part / total if total > 0 else 0.0


def strength_summary(chart: FourPillars) -> dict:
    """JSON-ready strengths for reporting."""
    elements = elemental_strengths(chart)
    total = sum(elements.values())
    return {
        "elements": {e.value: round(v, 3) for e, v in elements.items()},
        "element_ratios": {e.value: round(ratio(v, total), 4) for e, v in elements.items()},
        "ten_gods": {g.value: round(v, 3) for g, v in ten_god_strengths(chart).items()},
        "day_master_strength": round(day_master_strength(chart), 3),
        "pillar_energy": {
            role.value: {
                "stem": round(stem_energy(chart, role), 3),
                "branch": round(branch_energy(chart, role), 3),
            }
            for role, _ in chart.items()
        },
    }
