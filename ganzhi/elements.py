"""
Five Elements and Ten Gods.

Handles:
- Yin/Yang polarity
- Five Element generation and control cycles
- Ten Gods (十神) classification relative to the Day Master
- Element <-> Ten God expansion used by the useful-god analysis

Everything here is a pure function of the enum values. Stems and
branches live in symbols.py and only depend on this module.
"""

from enum import Enum


# ============================================================
# POLARITY AND ELEMENTS
# ============================================================

class Polarity(Enum):
    YANG = "yang"
    YIN = "yin"


class Element(Enum):
    WOOD = "wood"
    FIRE = "fire"
    EARTH = "earth"
    METAL = "metal"
    WATER = "water"

    @property
    def child(self) -> "Element":
        """The element this one generates (我生)."""
        return PRODUCTION_CYCLE[self]

    @property
    def parent(self) -> "Element":
        """The element that generates this one (生我)."""
        return _PRODUCED_BY[self]

    @property
    def controlled(self) -> "Element":
        """The element this one controls (我克)."""
        return CONTROL_CYCLE[self]

    @property
    def controller(self) -> "Element":
        """The element that controls this one (克我)."""
        return _CONTROLLED_BY[self]

    def generates(self, other: "Element") -> bool:
        return PRODUCTION_CYCLE[self] == other

    def controls(self, other: "Element") -> bool:
        return CONTROL_CYCLE[self] == other


# Production cycle: Wood → Fire → Earth → Metal → Water → Wood
PRODUCTION_CYCLE = {
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
}

# Control cycle: Wood → Earth → Water → Fire → Metal → Wood
CONTROL_CYCLE = {
    Element.WOOD: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
    Element.FIRE: Element.METAL,
    Element.METAL: Element.WOOD,
}

_PRODUCED_BY = {child: parent for parent, child in PRODUCTION_CYCLE.items()}
_CONTROLLED_BY = {target: source for source, target in CONTROL_CYCLE.items()}


def element_relationship(day_master_element: Element, other_element: Element) -> str:
    """Determine the elemental relationship from the Day Master's perspective."""
    if day_master_element == other_element:
        return "same"
    elif other_element.generates(day_master_element):
        return "produces_me"
    elif day_master_element.generates(other_element):
        return "i_produce"
    elif day_master_element.controls(other_element):
        return "i_control"
    elif other_element.controls(day_master_element):
        return "controls_me"
    else:
        raise ValueError(f"No valid relationship between {day_master_element} and {other_element}")


# ============================================================
# TEN GODS (十神)
# ============================================================

class TenGodGroup(Enum):
    PEER = "peer"            # 比劫
    OUTPUT = "output"        # 食伤
    WEALTH = "wealth"        # 财
    OFFICER = "officer"      # 官杀
    RESOURCE = "resource"    # 印


class TenGod(Enum):
    FRIEND = "friend"                        # 比肩
    ROB_WEALTH = "rob_wealth"                # 劫财
    EATING_GOD = "eating_god"                # 食神
    HURTING_OFFICER = "hurting_officer"      # 伤官
    INDIRECT_WEALTH = "indirect_wealth"      # 偏财
    DIRECT_WEALTH = "direct_wealth"          # 正财
    SEVEN_KILLINGS = "seven_killings"        # 七杀
    DIRECT_OFFICER = "direct_officer"        # 正官
    INDIRECT_RESOURCE = "indirect_resource"  # 偏印
    DIRECT_RESOURCE = "direct_resource"      # 正印

    @property
    def group(self) -> TenGodGroup:
        return _GOD_GROUPS[self]

    @property
    def is_peer(self) -> bool:
        return self.group is TenGodGroup.PEER


TEN_GODS = {
    # (relationship, same_polarity): god
    ("same", True): TenGod.FRIEND,
    ("same", False): TenGod.ROB_WEALTH,
    ("produces_me", True): TenGod.INDIRECT_RESOURCE,
    ("produces_me", False): TenGod.DIRECT_RESOURCE,
    ("i_produce", True): TenGod.EATING_GOD,
    ("i_produce", False): TenGod.HURTING_OFFICER,
    ("i_control", True): TenGod.INDIRECT_WEALTH,
    ("i_control", False): TenGod.DIRECT_WEALTH,
    ("controls_me", True): TenGod.SEVEN_KILLINGS,
    ("controls_me", False): TenGod.DIRECT_OFFICER,
}

_GOD_GROUPS = {
    TenGod.FRIEND: TenGodGroup.PEER,
    TenGod.ROB_WEALTH: TenGodGroup.PEER,
    TenGod.EATING_GOD: TenGodGroup.OUTPUT,
    TenGod.HURTING_OFFICER: TenGodGroup.OUTPUT,
    TenGod.INDIRECT_WEALTH: TenGodGroup.WEALTH,
    TenGod.DIRECT_WEALTH: TenGodGroup.WEALTH,
    TenGod.SEVEN_KILLINGS: TenGodGroup.OFFICER,
    TenGod.DIRECT_OFFICER: TenGodGroup.OFFICER,
    TenGod.INDIRECT_RESOURCE: TenGodGroup.RESOURCE,
    TenGod.DIRECT_RESOURCE: TenGodGroup.RESOURCE,
}

GROUP_RELATIONSHIP = {
    TenGodGroup.PEER: "same",
    TenGodGroup.OUTPUT: "i_produce",
    TenGodGroup.WEALTH: "i_control",
    TenGodGroup.OFFICER: "controls_me",
    TenGodGroup.RESOURCE: "produces_me",
}


def ten_god(day_master_element: Element, day_master_polarity: Polarity,
            target_element: Element, target_polarity: Polarity) -> TenGod:
    """
    Classify a target element/polarity against the Day Master.

    Args:
        day_master_element, day_master_polarity: the Day Master stem's attributes
        target_element, target_polarity: the stem (or hidden stem) being evaluated

    Returns:
        Exactly one of the ten TenGod members
    """
    relationship = element_relationship(day_master_element, target_element)
    same_polarity = (day_master_polarity == target_polarity)
    return TEN_GODS[(relationship, same_polarity)]


def ten_god_of_stem(day_master, stem) -> TenGod:
    """Ten God of a HeavenlyStem relative to the Day Master stem."""
    return ten_god(day_master.element, day_master.polarity, stem.element, stem.polarity)


def ten_god_of_branch(day_master, branch) -> TenGod:
    """
    Ten God of a branch, taken from its main qi.

    The branch's own polarity is not used: Zi is a yang branch but its
    main qi Gui is yin water.
    """
    return ten_god_of_stem(day_master, branch.main_qi)


def element_of_god(god: TenGod, day_master_element: Element) -> Element:
    """The Five Element a Ten God stands for, given the Day Master's element."""
    group = god.group
    if group is TenGodGroup.PEER:
        return day_master_element
    if group is TenGodGroup.OUTPUT:
        return day_master_element.child
    if group is TenGodGroup.WEALTH:
        return day_master_element.controlled
    if group is TenGodGroup.OFFICER:
        return day_master_element.controller
    return day_master_element.parent


def gods_of_element(element: Element, day_master_element: Element) -> tuple:
    """Both Ten Gods (yang and yin variant) that an element maps to."""
    return tuple(god for god in TenGod if element_of_god(god, day_master_element) == element)


def gods_in_group(group: TenGodGroup) -> tuple:
    return tuple(god for god in TenGod if god.group is group)
