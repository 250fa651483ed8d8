"""
Pattern (格局) classification.

Handles:
- Life-stage patterns: Jian Lu (建禄), Yang Ren (羊刃) / Yue Ren (月刃)
- Transpired month-branch hidden stems (透干) and the main-qi fallback
- Follow patterns (从格) when the Day Master has no root
- Vitalized patterns (专旺格) when the Day Master's element dominates
- An auxiliary pattern when another Ten God outweighs the primary one

Rules are kept as ordered lists of (predicate, builder) pairs so that
each step can be read and tested on its own. The ordinary cascade always
ends in a catch-all rule, so every chart gets a pattern.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Callable, Optional

from ganzhi.config import Settings, get_settings
from ganzhi.elements import Element, Polarity, TenGod, TenGodGroup, gods_in_group, ten_god_of_stem
from ganzhi.interactions import directional_groups, three_harmony_groups
from ganzhi.pillars import FourPillars
from ganzhi.strength import day_master_strength, elemental_strengths, ten_god_strengths
from ganzhi.symbols import LifeStage

logger = logging.getLogger(__name__)


class PatternKind(Enum):
    LIFE_STAGE = "life_stage"
    TRANSPIRED = "transpired"
    MAIN_QI = "main_qi"
    FOLLOW = "follow"
    VITALIZED = "vitalized"
    AUXILIARY = "auxiliary"


class PatternMethod(Enum):
    JIAN_LU = "jian_lu"                                # 建禄格
    YANG_REN = "yang_ren"                              # 羊刃格
    YUE_REN = "yue_ren"                                # 月刃格
    TRANSPIRED_MONTH_STEM = "transpired_month_stem"    # 月支藏干透出月干
    TRANSPIRED_YEAR_STEM = "transpired_year_stem"
    TRANSPIRED_HOUR_STEM = "transpired_hour_stem"
    MONTH_BRANCH_MAIN_QI = "month_branch_main_qi"      # 月支本气
    FOLLOW_SEVEN_KILLINGS = "follow_seven_killings"    # 从杀格
    FOLLOW_WEALTH = "follow_wealth"                    # 从财格
    FOLLOW_CHILD = "follow_child"                      # 从儿格
    QU_ZHI = "qu_zhi"                                  # 曲直格 wood
    YAN_SHANG = "yan_shang"                            # 炎上格 fire
    JIA_SE = "jia_se"                                  # 稼穑格 earth
    CONG_GE = "cong_ge"                                # 从革格 metal
    RUN_XIA = "run_xia"                                # 润下格 water
    DOMINANT_STRENGTH = "dominant_strength"            # auxiliary only

    @property
    def kind(self) -> PatternKind:
        return _METHOD_KINDS[self]


_METHOD_KINDS = {
    PatternMethod.JIAN_LU: PatternKind.LIFE_STAGE,
    PatternMethod.YANG_REN: PatternKind.LIFE_STAGE,
    PatternMethod.YUE_REN: PatternKind.LIFE_STAGE,
    PatternMethod.TRANSPIRED_MONTH_STEM: PatternKind.TRANSPIRED,
    PatternMethod.TRANSPIRED_YEAR_STEM: PatternKind.TRANSPIRED,
    PatternMethod.TRANSPIRED_HOUR_STEM: PatternKind.TRANSPIRED,
    PatternMethod.MONTH_BRANCH_MAIN_QI: PatternKind.MAIN_QI,
    PatternMethod.FOLLOW_SEVEN_KILLINGS: PatternKind.FOLLOW,
    PatternMethod.FOLLOW_WEALTH: PatternKind.FOLLOW,
    PatternMethod.FOLLOW_CHILD: PatternKind.FOLLOW,
    PatternMethod.QU_ZHI: PatternKind.VITALIZED,
    PatternMethod.YAN_SHANG: PatternKind.VITALIZED,
    PatternMethod.JIA_SE: PatternKind.VITALIZED,
    PatternMethod.CONG_GE: PatternKind.VITALIZED,
    PatternMethod.RUN_XIA: PatternKind.VITALIZED,
    PatternMethod.DOMINANT_STRENGTH: PatternKind.AUXILIARY,
}

FOLLOW_METHODS = {
    TenGodGroup.OFFICER: PatternMethod.FOLLOW_SEVEN_KILLINGS,
    TenGodGroup.WEALTH: PatternMethod.FOLLOW_WEALTH,
    TenGodGroup.OUTPUT: PatternMethod.FOLLOW_CHILD,
}

VITALIZED_METHODS = {
    Element.WOOD: PatternMethod.QU_ZHI,
    Element.FIRE: PatternMethod.YAN_SHANG,
    Element.EARTH: PatternMethod.JIA_SE,
    Element.METAL: PatternMethod.CONG_GE,
    Element.WATER: PatternMethod.RUN_XIA,
}

# Chen, Wei, Xu, Chou: the four storage branches
EARTH_STORAGE_BRANCHES = {4, 7, 10, 1}


@dataclass(frozen=True)
class AuxiliaryPattern:
    ten_god: TenGod
    method: PatternMethod = PatternMethod.DOMINANT_STRENGTH


@dataclass(frozen=True)
class Pattern:
    ten_god: TenGod
    method: PatternMethod
    auxiliary: Optional[AuxiliaryPattern] = None

    @property
    def kind(self) -> PatternKind:
        return self.method.kind

    @property
    def is_special(self) -> bool:
        return self.kind in (PatternKind.FOLLOW, PatternKind.VITALIZED)

    def with_auxiliary(self, auxiliary: Optional[AuxiliaryPattern]) -> "Pattern":
        return Pattern(self.ten_god, self.method, auxiliary)

    def to_dict(self):
        result = {
            "ten_god": self.ten_god.value,
            "method": self.method.value,
            "kind": self.kind.value,
        }
        if self.auxiliary is not None:
            result["auxiliary"] = {
                "ten_god": self.auxiliary.ten_god.value,
                "method": self.auxiliary.method.value,
            }
        return result


# ============================================================
# EVALUATION CONTEXT
# ============================================================

class PatternContext:
    """Chart plus the derived values the rules read, computed once."""

    def __init__(self, chart: FourPillars, settings: Settings):
        self.chart = chart
        self.settings = settings

    @property
    def day_master(self):
        return self.chart.day_master

    @cached_property
    def month_stage(self) -> LifeStage:
        return self.day_master.life_stage(self.chart.month_branch)

    @cached_property
    def ten_gods(self) -> dict:
        return ten_god_strengths(self.chart)

    @cached_property
    def elements(self) -> dict:
        return elemental_strengths(self.chart)

    @cached_property
    def self_strength(self) -> float:
        return day_master_strength(self.chart)

    @cached_property
    def groups(self) -> dict:
        totals = {group: 0.0 for group in TenGodGroup}
        for god, value in self.ten_gods.items():
            totals[god.group] += value
        return totals

    def god(self, stem) -> TenGod:
        return ten_god_of_stem(self.day_master, stem)

    def transpired(self) -> list:
        """(stem, method) for month, year and hour stems that appear in the month branch."""
        hidden = self.chart.month_branch.hidden_stems
        found = []
        for stem, method in ((self.chart.month.stem, PatternMethod.TRANSPIRED_MONTH_STEM),
                             (self.chart.year.stem, PatternMethod.TRANSPIRED_YEAR_STEM),
                             (self.chart.hour.stem, PatternMethod.TRANSPIRED_HOUR_STEM)):
            if stem in hidden:
                found.append((stem, method))
        return found


@dataclass(frozen=True)
class PatternRule:
    name: str
    predicate: Callable[[PatternContext], bool]
    build: Callable[[PatternContext], Pattern]


# ============================================================
# ORDINARY CASCADE
# ============================================================

def _non_peer_transpired(ctx: PatternContext) -> Optional[Pattern]:
    chart = ctx.chart
    month_stem = chart.month.stem
    hidden = chart.month_branch.hidden_stems

    if month_stem in hidden and not ctx.god(month_stem).is_peer:
        return Pattern(ctx.god(month_stem), PatternMethod.TRANSPIRED_MONTH_STEM)

    # Main -> middle -> residual, then month, year, hour for each
    for stem in hidden:
        god = ctx.god(stem)
        if god.is_peer:
            continue
        if chart.month.stem == stem:
            return Pattern(god, PatternMethod.TRANSPIRED_MONTH_STEM)
        if chart.year.stem == stem:
            return Pattern(god, PatternMethod.TRANSPIRED_YEAR_STEM)
        if chart.hour.stem == stem:
            return Pattern(god, PatternMethod.TRANSPIRED_HOUR_STEM)
    return None


def _main_qi_pattern(ctx: PatternContext) -> Pattern:
    main_god = ctx.god(ctx.chart.month_branch.main_qi)
    if not main_god.is_peer:
        return Pattern(main_god, PatternMethod.MONTH_BRANCH_MAIN_QI)

    # Only peer gods transpire: a transpired peer beats the bare main qi
    candidates = ctx.transpired()
    if candidates:
        stem, method = candidates[0]
        return Pattern(ctx.god(stem), method)
    return Pattern(main_god, PatternMethod.MONTH_BRANCH_MAIN_QI)


def _ren_pattern(ctx: PatternContext) -> Pattern:
    if ctx.day_master.polarity is Polarity.YANG:
        return Pattern(TenGod.ROB_WEALTH, PatternMethod.YANG_REN)
    return Pattern(TenGod.ROB_WEALTH, PatternMethod.YUE_REN)


ORDINARY_RULES = [
    PatternRule("jian_lu",
                lambda ctx: ctx.month_stage is LifeStage.LIN_GUAN,
                lambda ctx: Pattern(TenGod.FRIEND, PatternMethod.JIAN_LU)),
    PatternRule("month_blade",
                lambda ctx: ctx.month_stage is LifeStage.DI_WANG,
                _ren_pattern),
    PatternRule("transpired",
                lambda ctx: _non_peer_transpired(ctx) is not None,
                _non_peer_transpired),
    PatternRule("main_qi",
                lambda ctx: True,
                _main_qi_pattern),
]


# ============================================================
# SPECIAL PATTERN OVERRIDES
# ============================================================

def has_root(ctx: PatternContext) -> bool:
    """
    Whether the Day Master roots anywhere in the chart's branches.

    A yin Day Master needs its element as main or residual qi; a yang
    Day Master roots in any hidden stem of its element.
    """
    element = ctx.day_master.element
    for branch in ctx.chart.branches():
        for hidden, layer in branch.qi_layers():
            if hidden.element != element:
                continue
            if ctx.day_master.polarity is Polarity.YANG or layer in (0, 2):
                return True
    return False


def _dominant_follow_group(ctx: PatternContext) -> Optional[TenGodGroup]:
    total = sum(ctx.ten_gods.values())
    if total <= 0:
        return None
    candidates = [TenGodGroup.OFFICER, TenGodGroup.WEALTH, TenGodGroup.OUTPUT]
    group = max(candidates, key=lambda g: ctx.groups[g])
    dominant = ctx.groups[group]
    support = max(0.0, ctx.groups[TenGodGroup.RESOURCE] + ctx.groups[TenGodGroup.PEER]
                  - ctx.groups[TenGodGroup.WEALTH])

    settings = ctx.settings
    if dominant <= settings.follow_dominance_ratio * total:
        return None
    if support >= settings.follow_support_ceiling:
        return None
    if dominant - support < settings.follow_margin_factor * support:
        return None
    return group


def _is_follow(ctx: PatternContext) -> bool:
    return not has_root(ctx) and _dominant_follow_group(ctx) is not None


def _build_follow(ctx: PatternContext) -> Pattern:
    group = _dominant_follow_group(ctx)
    god = max(gods_in_group(group), key=lambda g: ctx.ten_gods[g])
    logger.debug("follow pattern: %s dominates without root", group.value)
    return Pattern(god, FOLLOW_METHODS[group])


def has_full_combination(ctx: PatternContext, element: Element) -> bool:
    """Full Directional or Three Harmony set of an element (earth: three storage branches)."""
    if element is Element.EARTH:
        present = {b.index for b in ctx.chart.branches()} & EARTH_STORAGE_BRANCHES
        return len(present) >= 3
    for group in directional_groups(ctx.chart) + three_harmony_groups(ctx.chart):
        if group.complete and group.element is element:
            return True
    return False


def _is_vitalized(ctx: PatternContext) -> bool:
    element = ctx.day_master.element
    settings = ctx.settings
    officer = ctx.groups[TenGodGroup.OFFICER]
    if officer >= settings.vitalized_officer_ceilings[element.value]:
        return False
    return (has_full_combination(ctx, element)
            or ctx.elements[element] > settings.vitalized_strength_thresholds[element.value])


def _build_vitalized(ctx: PatternContext) -> Pattern:
    element = ctx.day_master.element
    logger.debug("vitalized pattern: %s", element.value)
    return Pattern(TenGod.FRIEND, VITALIZED_METHODS[element])


OVERRIDE_RULES = [
    PatternRule("follow", _is_follow, _build_follow),
    PatternRule("vitalized", _is_vitalized, _build_vitalized),
]


# ============================================================
# AUXILIARY PATTERN
# ============================================================

def auxiliary_threshold(ctx: PatternContext, primary: Pattern) -> float:
    if primary.ten_god.is_peer:
        return ctx.ten_gods[TenGod.FRIEND] + ctx.ten_gods[TenGod.ROB_WEALTH] + ctx.self_strength
    return ctx.ten_gods[primary.ten_god]


def find_auxiliary(ctx: PatternContext, primary: Pattern) -> Optional[AuxiliaryPattern]:
    """Strongest non-peer Ten God that strictly outweighs the primary pattern."""
    threshold = auxiliary_threshold(ctx, primary)
    best = None
    for god, value in ctx.ten_gods.items():
        if god.is_peer or god == primary.ten_god or value <= threshold:
            continue
        if best is None or value > ctx.ten_gods[best]:
            best = god
    return AuxiliaryPattern(best) if best is not None else None


# ============================================================
# ENTRY POINT
# ============================================================

def _first_match(rules: list, ctx: PatternContext) -> Optional[Pattern]:
    for rule in rules:
        if rule.predicate(ctx):
            logger.debug("pattern rule matched: %s", rule.name)
            return rule.build(ctx)
    return None


def classify_pattern(chart: FourPillars, settings: Optional[Settings] = None) -> Pattern:
    """
    Classify a chart's pattern.

    The ordinary cascade picks the primary pattern; follow and vitalized
    overrides then replace it when they apply. Ordinary patterns may
    carry an auxiliary pattern.
    """
    ctx = PatternContext(chart, settings or get_settings())
    ordinary = _first_match(ORDINARY_RULES, ctx)

    special = _first_match(OVERRIDE_RULES, ctx)
    if special is not None:
        return special
    return ordinary.with_auxiliary(find_auxiliary(ctx, ordinary))
