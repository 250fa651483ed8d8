"""
Useful God (用神) / Ji Shen (忌神) analysis.

Handles:
- Pattern method (格局法): fixed tables for follow / vitalized patterns,
  otherwise a percentage cascade keyed by the pattern's Ten God group,
  merged with the auxiliary pattern's recommendation
- Strength-balance method (旺衰): dominant element, conflict bridge, Fu Yi
- Climate method (调候): ideal temperature / moisture range per Day Master

All methods return the same UsefulGodResult: favourable / unfavourable
elements, the Ten Gods those elements stand for, and a reasoning trace.
No method fails; when nothing triggers the recommendation is empty.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ganzhi.config import Settings, get_settings
from ganzhi.elements import Element, TenGod, TenGodGroup, gods_of_element
from ganzhi.pattern import Pattern, PatternMethod, classify_pattern
from ganzhi.pillars import FourPillars
from ganzhi.strength import elemental_strengths, ratio
from ganzhi.thermal import thermal_balance

logger = logging.getLogger(__name__)


class UsefulGodMethod(Enum):
    PATTERN = "pattern"
    STRENGTH_BALANCE = "strength_balance"
    CLIMATE = "climate"


@dataclass(frozen=True)
class UsefulGodResult:
    method: UsefulGodMethod
    favorable: frozenset
    unfavorable: frozenset
    favorable_gods: frozenset
    unfavorable_gods: frozenset
    trace: tuple

    def to_dict(self):
        order = list(Element)
        god_order = list(TenGod)
        return {
            "method": self.method.value,
            "favorable": [e.value for e in sorted(self.favorable, key=order.index)],
            "unfavorable": [e.value for e in sorted(self.unfavorable, key=order.index)],
            "favorable_gods": [g.value for g in sorted(self.favorable_gods, key=god_order.index)],
            "unfavorable_gods": [g.value for g in sorted(self.unfavorable_gods, key=god_order.index)],
            "trace": list(self.trace),
        }


class AnalysisContext:
    """Energies and relations of the Day Master's element, plus the running result."""

    def __init__(self, chart: FourPillars, method: UsefulGodMethod, settings: Settings):
        self.chart = chart
        self.method = method
        self.settings = settings
        self.dm = chart.day_master.element

        self.parent = self.dm.parent          # resource
        self.child = self.dm.child            # output
        self.controlled = self.dm.controlled  # wealth
        self.controller = self.dm.controller  # officer

        self.energies = elemental_strengths(chart)
        self.total = sum(self.energies.values())
        self.support = self.energies[self.dm] + self.energies[self.parent]
        self.consumption = self.total - self.support

        self.trace = []
        self.favorable = set()
        self.unfavorable = set()

    def energy(self, element: Element) -> float:
        return self.energies[element]

    def note(self, text: str):
        self.trace.append(text)

    def max_consumption(self) -> Element:
        # max() keeps the first of equal values: output, wealth, officer
        return max((self.child, self.controlled, self.controller), key=self.energy)


# ============================================================
# PATTERN METHOD
# ============================================================

# Relations are Element attribute names; "self" is the Day Master's element
SPECIAL_PATTERN_TABLE = {
    PatternMethod.FOLLOW_SEVEN_KILLINGS: (("controlled", "controller"), ("child", "parent")),
    PatternMethod.FOLLOW_WEALTH: (("child", "controlled", "controller"), ("self", "parent")),
    PatternMethod.FOLLOW_CHILD: (("controlled", "child", "self"), ("parent", "controller")),
    PatternMethod.QU_ZHI: (("child", "self", "parent"), ("controller", "controlled")),
    PatternMethod.YAN_SHANG: (("child", "self", "parent"), ("controller", "controlled")),
    PatternMethod.JIA_SE: (("child", "self", "parent"), ("controller", "controlled")),
    PatternMethod.CONG_GE: (("child", "self", "parent"), ("controller", "controlled")),
    PatternMethod.RUN_XIA: (("child", "controlled", "parent"), ("controller",)),
}

PROTECTION_METHODS = {PatternMethod.JIAN_LU, PatternMethod.YANG_REN, PatternMethod.YUE_REN}


def _relation(dm: Element, name: str) -> Element:
    return dm if name == "self" else getattr(dm, name)


def _apply_special(ctx: AnalysisContext, pattern: Pattern) -> bool:
    entry = SPECIAL_PATTERN_TABLE.get(pattern.method)
    if entry is None:
        return False
    fav_names, unfav_names = entry
    fav = [_relation(ctx.dm, name) for name in fav_names]
    unfav = [_relation(ctx.dm, name) for name in unfav_names]
    ctx.note(f"Status: special pattern ({pattern.method.value})")
    ctx.note("Useful God: " + ", ".join(e.value for e in fav))
    ctx.note("Ji God: " + ", ".join(e.value for e in unfav))
    ctx.favorable.update(fav)
    ctx.unfavorable.update(unfav)
    return True


@dataclass
class Focus:
    """Recommendation for one pattern focus (primary or auxiliary)."""

    god: TenGod
    method: PatternMethod
    favorable: set
    unfavorable: set
    trace: list

    def add(self, text: str, fav: Optional[Element] = None, unfav: Optional[Element] = None):
        self.trace.append(text)
        if fav is not None:
            self.favorable.add(fav)
        if unfav is not None:
            self.unfavorable.add(unfav)


@dataclass(frozen=True)
class FocusRule:
    name: str
    predicate: Callable[[AnalysisContext, Focus], bool]
    apply: Callable[[AnalysisContext, Focus], None]


def _resource_pct(ctx):
    return ratio(ctx.energy(ctx.parent), ctx.total)


def _self_pct(ctx):
    return ratio(ctx.energy(ctx.dm), ctx.total)


def _consumption_pct(ctx):
    return ratio(ctx.consumption, ctx.total)


def _resource_dominant(ctx: AnalysisContext, focus: Focus):
    focus.add(f"Pattern logic ({focus.god.value}): resource dominant (>50%)", unfav=ctx.parent)
    if _consumption_pct(ctx) > _self_pct(ctx):
        focus.add(f"Useful God: self, consumption > self [{ctx.dm.value}]", fav=ctx.dm)
    elif ctx.energy(ctx.child) >= ctx.energy(ctx.controller):
        focus.add(f"Useful God: output, output >= officer [{ctx.child.value}]", fav=ctx.child)
    else:
        focus.add(f"Useful God: officer, officer > output [{ctx.controller.value}]", fav=ctx.controller)


def _self_dominant(ctx: AnalysisContext, focus: Focus):
    focus.add(f"Pattern logic ({focus.god.value}): self dominant (>50%)", unfav=ctx.dm)
    group = focus.god.group
    if focus.method in PROTECTION_METHODS or group in (TenGodGroup.RESOURCE, TenGodGroup.OFFICER):
        focus.add(f"Useful God: officer, pattern requirement [{ctx.controller.value}]", fav=ctx.controller)
    elif group is TenGodGroup.OUTPUT:
        focus.add(f"Useful God: output, pattern requirement [{ctx.child.value}]", fav=ctx.child)
    elif group is TenGodGroup.WEALTH:
        focus.add(f"Useful God: wealth, pattern requirement [{ctx.controlled.value}]", fav=ctx.controlled)
    else:
        strongest = ctx.max_consumption()
        focus.add(f"Useful God: max consumption [{strongest.value}]", fav=strongest)


def _balanced_resource(ctx: AnalysisContext, focus: Focus):
    parts = {"resource": _resource_pct(ctx), "self": _self_pct(ctx), "consumption": _consumption_pct(ctx)}
    strongest = max(parts, key=parts.get)
    weakest = min(parts, key=parts.get)
    if strongest == "resource" and weakest == "consumption":
        focus.add(f"Useful God: output, resource is strongest [{ctx.child.value}]",
                  fav=ctx.child, unfav=ctx.parent)
        focus.add(f"Ji God: resource [{ctx.parent.value}]")
        return
    target = ctx.controller if ctx.energy(ctx.controller) >= ctx.energy(ctx.child) else ctx.child
    focus.add(f"Useful God: {target.value}", fav=target, unfav=target.controller)
    focus.add(f"Ji God: controller of useful [{target.controller.value}]")


def _balanced_wealth(ctx: AnalysisContext, focus: Focus):
    if _consumption_pct(ctx) > _self_pct(ctx) + _resource_pct(ctx):
        focus.add(f"Useful God: peer, consumption > self + resource [{ctx.dm.value}]",
                  fav=ctx.dm, unfav=ctx.controller)
        focus.add(f"Ji God: officer [{ctx.controller.value}]")
        return
    target = ctx.controlled if ctx.energy(ctx.controlled) <= ctx.energy(ctx.child) else ctx.child
    focus.add(f"Useful God: {target.value}", fav=target, unfav=ctx.parent)
    focus.add(f"Ji God: resource [{ctx.parent.value}]")


def _balanced_officer(ctx: AnalysisContext, focus: Focus):
    winner = max((ctx.child, ctx.dm, ctx.parent), key=ctx.energy)
    focus.add(f"Useful God: max of output, peer, resource [{winner.value}]",
              fav=winner, unfav=winner.controller)
    focus.add(f"Ji God: controller of useful [{winner.controller.value}]")


def _balanced_output(ctx: AnalysisContext, focus: Focus):
    if _consumption_pct(ctx) > 2 * (_self_pct(ctx) + _resource_pct(ctx)):
        focus.add("Useful God: resource and peer, consumption > 2 x (self + resource)",
                  fav=ctx.parent)
        focus.favorable.add(ctx.dm)
        strongest = ctx.max_consumption()
        focus.add(f"Ji God: max consumption [{strongest.value}]", unfav=strongest)
        return
    winner = ctx.controlled if ctx.energy(ctx.controlled) >= ctx.energy(ctx.controller) else ctx.controller
    focus.add(f"Useful God: {winner.value}", fav=winner, unfav=winner.controller)
    focus.add(f"Ji God: controller of useful [{winner.controller.value}]")


def _balanced_other(ctx: AnalysisContext, focus: Focus):
    focus.add("Status: blade / other")
    focus.add(f"Ji God: peer [{ctx.dm.value}]", unfav=ctx.dm)
    strongest = ctx.max_consumption()
    focus.add(f"Useful God: max consumption [{strongest.value}]", fav=strongest)


def _is_balanced(ctx: AnalysisContext, focus: Focus) -> bool:
    return _resource_pct(ctx) <= 0.5 and _self_pct(ctx) <= 0.5


def _balanced_for(*groups):
    return lambda ctx, focus: _is_balanced(ctx, focus) and focus.god.group in groups


FOCUS_RULES = [
    FocusRule("resource_dominant", lambda ctx, focus: _resource_pct(ctx) > 0.5, _resource_dominant),
    FocusRule("self_dominant", lambda ctx, focus: _self_pct(ctx) > 0.5, _self_dominant),
    FocusRule("resource_pattern", _balanced_for(TenGodGroup.RESOURCE), _balanced_resource),
    FocusRule("wealth_pattern", _balanced_for(TenGodGroup.WEALTH), _balanced_wealth),
    FocusRule("officer_pattern", _balanced_for(TenGodGroup.OFFICER), _balanced_officer),
    FocusRule("output_pattern", _balanced_for(TenGodGroup.OUTPUT), _balanced_output),
    FocusRule("other", lambda ctx, focus: True, _balanced_other),
]


def evaluate_focus(ctx: AnalysisContext, god: TenGod, method: PatternMethod) -> Focus:
    focus = Focus(god, method, set(), set(), [])
    if _is_balanced(ctx, focus):
        focus.trace.append(
            f"Pattern logic ({god.value}): balanced (self + resource "
            f"{(_self_pct(ctx) + _resource_pct(ctx)) * 100:.1f}%)")
    for rule in FOCUS_RULES:
        if rule.predicate(ctx, focus):
            rule.apply(ctx, focus)
            break
    return focus


def _analyze_pattern(ctx: AnalysisContext, pattern: Pattern):
    if _apply_special(ctx, pattern):
        return

    ctx.note(
        f"Energy division: resource {_resource_pct(ctx) * 100:.1f}%, "
        f"self {_self_pct(ctx) * 100:.1f}%, consumption {_consumption_pct(ctx) * 100:.1f}%")

    primary = evaluate_focus(ctx, pattern.ten_god, pattern.method)
    ctx.trace.extend(primary.trace)
    favorable = set(primary.favorable)
    unfavorable = set(primary.unfavorable)

    if pattern.auxiliary is not None:
        ctx.note(f"Auxiliary pattern: {pattern.auxiliary.ten_god.value}")
        aux = evaluate_focus(ctx, pattern.auxiliary.ten_god, pattern.auxiliary.method)
        ctx.trace.extend(aux.trace)
        favorable |= aux.favorable
        unfavorable |= aux.unfavorable

        conflict = favorable & unfavorable
        if conflict:
            ctx.note("Conflicting elements removed: " + ", ".join(sorted(e.value for e in conflict)))
            favorable -= conflict
            unfavorable -= conflict

    ctx.favorable = favorable
    ctx.unfavorable = unfavorable


# Pattern god -> favourable god it must never recommend
PATTERN_GOD_EXCLUSIONS = {
    TenGod.EATING_GOD: TenGod.INDIRECT_RESOURCE,      # 枭神夺食
    TenGod.HURTING_OFFICER: TenGod.DIRECT_OFFICER,    # 伤官见官
    TenGod.DIRECT_OFFICER: TenGod.HURTING_OFFICER,
}


# ============================================================
# STRENGTH-BALANCE METHOD
# ============================================================

def find_dominant_element(ctx: AnalysisContext) -> Optional[Element]:
    for element in Element:
        if ratio(ctx.energy(element), ctx.total) > ctx.settings.dominant_ratio:
            return element
    return None


def find_conflict_pair(ctx: AnalysisContext) -> Optional[tuple]:
    """(attacker, defender) when both hold between the conflict bounds."""
    if ctx.total <= 0:
        return None
    low, high = ctx.settings.conflict_min_ratio, ctx.settings.conflict_max_ratio
    for attacker in Element:
        if not low <= ratio(ctx.energy(attacker), ctx.total) <= high:
            continue
        defender = attacker.controlled
        if low <= ratio(ctx.energy(defender), ctx.total) <= high:
            return attacker, defender
    return None


def _analyze_strength_balance(ctx: AnalysisContext):
    dominant = find_dominant_element(ctx)
    if dominant is not None:
        ctx.note(f"Status: dominant element {dominant.value} (>{ctx.settings.dominant_ratio:.0%})")
        ctx.note(f"Useful God: {dominant.value} and its source {dominant.parent.value}")
        ctx.note(f"Ji God: controller {dominant.controller.value}")
        ctx.favorable.update((dominant, dominant.parent))
        ctx.unfavorable.add(dominant.controller)
        return

    pair = find_conflict_pair(ctx)
    if pair is not None:
        attacker, defender = pair
        bridge = attacker.child
        ctx.note(f"Status: conflict, {attacker.value} controls {defender.value}")
        ctx.note(f"Useful God: bridge {bridge.value}")
        ctx.note(f"Ji God: controller of bridge {bridge.controller.value}")
        ctx.favorable.add(bridge)
        ctx.unfavorable.add(bridge.controller)
        return

    factor = ctx.settings.support_ratio_factor
    if ctx.consumption > factor * ctx.support:
        ctx.note("Status: too weak (consumption > 2 x support)")
        ctx.note(f"Useful God: resource [{ctx.parent.value}]")
        ctx.note(f"Ji God: wealth [{ctx.controlled.value}]")
        ctx.favorable.add(ctx.parent)
        ctx.unfavorable.add(ctx.controlled)
    elif ctx.support > factor * ctx.consumption:
        ctx.note("Status: too strong (support > 2 x consumption)")
        ctx.note(f"Useful God: output [{ctx.child.value}] and wealth [{ctx.controlled.value}]")
        ctx.note(f"Ji God: resource [{ctx.parent.value}]")
        ctx.favorable.update((ctx.child, ctx.controlled))
        ctx.unfavorable.add(ctx.parent)
    else:
        ctx.note("Status: balanced, no recommendation")


# ============================================================
# CLIMATE METHOD
# ============================================================

# Day Master pinyin -> ((temperature min, max), (moisture min, max))
CLIMATE_RANGES = {
    "Jia": ((12, 65), (3, 90)),
    "Yi": ((8, 60), (5, 80)),
    "Bing": ((10, 1500), (1, 100)),
    "Ding": ((0, 1500), (1, 100)),
    "Wu": ((5, 150), (1, 110)),
    "Ji": ((5, 130), (10, 120)),
    "Geng": ((1, 200), (1, 100)),
    "Xin": ((0, 120), (3, 150)),
    "Ren": ((7, 99), (15, 1000)),
    "Gui": ((3, 130), (10, 1000)),
}


def _analyze_climate(ctx: AnalysisContext, ranges: dict):
    balance = thermal_balance(ctx.chart)
    ctx.note(f"Current: temperature {balance.temperature:.2f}, moisture {balance.moisture:.2f}")

    dm_stem = ctx.chart.day_master
    ideal = ranges.get(dm_stem.pinyin)
    if ideal is None:
        ctx.note(f"No configuration for Day Master {dm_stem.pinyin}")
        return

    (t_min, t_max), (m_min, m_max) = ideal
    if balance.temperature > t_max:
        ctx.note(f"Temperature too high (> {t_max}): fire is Ji God")
        ctx.unfavorable.add(Element.FIRE)
    elif balance.temperature < t_min:
        ctx.note(f"Temperature too low (< {t_min}): fire is Useful God")
        ctx.favorable.add(Element.FIRE)

    if balance.moisture > m_max:
        ctx.note(f"Moisture too high (> {m_max}): water is Ji God")
        ctx.unfavorable.add(Element.WATER)
    elif balance.moisture < m_min:
        ctx.note(f"Moisture too low (< {m_min}): water is Useful God")
        ctx.favorable.add(Element.WATER)

    if not ctx.favorable and not ctx.unfavorable:
        ctx.note("Status: climate ideal")


# ============================================================
# ENTRY POINT
# ============================================================

def _gods_for(elements, dm: Element) -> set:
    gods = set()
    for element in elements:
        gods.update(gods_of_element(element, dm))
    return gods


def analyze_useful_god(chart: FourPillars, method: UsefulGodMethod = UsefulGodMethod.PATTERN,
                       settings: Optional[Settings] = None,
                       climate_ranges: Optional[dict] = None,
                       pattern: Optional[Pattern] = None) -> UsefulGodResult:
    """
    Recommend favourable and unfavourable elements for a chart.

    Args:
        chart: the Four Pillars
        method: which of the three strategies to run
        settings: thresholds; defaults to get_settings()
        climate_ranges: override of CLIMATE_RANGES for the climate method
        pattern: a precomputed classify_pattern result for the pattern method

    Returns:
        UsefulGodResult with elements, their Ten Gods and a reasoning trace
    """
    settings = settings or get_settings()
    ctx = AnalysisContext(chart, method, settings)
    logger.debug("useful god analysis for %s using %s", chart, method.value)

    ctx.note(f"Method: {method.value}")
    ctx.note("Five element energies: " + ", ".join(f"{e.value}:{v:.2f}" for e, v in ctx.energies.items()))
    ctx.note(f"Support (self + resource): {ctx.support:.2f}")
    ctx.note(f"Consumption (output + wealth + officer): {ctx.consumption:.2f}")

    if method is UsefulGodMethod.PATTERN:
        pattern = pattern or classify_pattern(chart, settings)
        _analyze_pattern(ctx, pattern)
    elif method is UsefulGodMethod.STRENGTH_BALANCE:
        _analyze_strength_balance(ctx)
    else:
        _analyze_climate(ctx, CLIMATE_RANGES if climate_ranges is None else climate_ranges)

    favorable_gods = _gods_for(ctx.favorable, ctx.dm)
    unfavorable_gods = _gods_for(ctx.unfavorable, ctx.dm)

    if method is UsefulGodMethod.PATTERN:
        excluded = PATTERN_GOD_EXCLUSIONS.get(pattern.ten_god)
        if excluded in favorable_gods:
            ctx.note(f"Excluded by pattern: {excluded.value}")
            favorable_gods.discard(excluded)

    return UsefulGodResult(
        method=method,
        favorable=frozenset(ctx.favorable),
        unfavorable=frozenset(ctx.unfavorable),
        favorable_gods=frozenset(favorable_gods),
        unfavorable_gods=frozenset(unfavorable_gods),
        trace=tuple(ctx.trace),
    )
