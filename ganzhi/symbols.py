"""
Heavenly Stems, Earthly Branches and the sexagenary cycle.

Handles:
- The 10 stems and 12 branches as immutable records indexed by cycle position
- Hidden stems (main / middle / residual qi) of every branch
- Cyclic offset arithmetic and the 60-pair StemBranch cycle
- Twelve Life Stages (十二长生) of a stem in a branch

Records are looked up by their 0-based index in HEAVENLY_STEMS /
EARTHLY_BRANCHES; nothing here carries chart context.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ganzhi.elements import Element, Polarity


STEM_COUNT = 10
BRANCH_COUNT = 12
CYCLE_LENGTH = 60


# ============================================================
# TWELVE LIFE STAGES (十二长生)
# ============================================================

class LifeStage(Enum):
    CHANG_SHENG = 1   # 长生 birth
    MU_YU = 2         # 沐浴 bath
    GUAN_DAI = 3      # 冠带 attire
    LIN_GUAN = 4      # 临官 official / Lu
    DI_WANG = 5       # 帝旺 peak
    SHUAI = 6         # 衰 decline
    BING = 7          # 病 sickness
    SI = 8            # 死 death
    MU = 9            # 墓 grave
    JUE = 10          # 绝 extinction
    TAI = 11          # 胎 conception
    YANG = 12         # 养 nourishment


# Fire and Earth share the same palace (火土同宫)
CHANG_SHENG_BRANCH = {
    "Jia": "Hai",
    "Yi": "Wu",
    "Bing": "Yin",
    "Wu": "Yin",
    "Ding": "You",
    "Ji": "You",
    "Geng": "Si",
    "Xin": "Zi",
    "Ren": "Shen",
    "Gui": "Mao",
}


# ============================================================
# FUNDAMENTAL DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class HeavenlyStem:
    chinese: str
    pinyin: str
    element: Element
    polarity: Polarity
    index: int  # 0-9 in the cycle

    @property
    def number(self) -> int:
        """1-based cycle position (Jia = 1)."""
        return self.index + 1

    @classmethod
    def from_index(cls, index: int) -> "HeavenlyStem":
        return HEAVENLY_STEMS[index % STEM_COUNT]

    def next(self, offset: int = 1) -> "HeavenlyStem":
        return HeavenlyStem.from_index(self.index + offset)

    def previous(self, offset: int = 1) -> "HeavenlyStem":
        return HeavenlyStem.from_index(self.index - offset)

    def life_stage(self, branch: "EarthlyBranch") -> LifeStage:
        """
        Life stage of this stem in a branch.

        Yang stems walk forward from their Chang Sheng branch, yin stems
        walk backward.
        """
        start = BRANCH_BY_PINYIN[CHANG_SHENG_BRANCH[self.pinyin]]
        if self.polarity is Polarity.YANG:
            distance = (branch.index - start.index) % BRANCH_COUNT
        else:
            distance = (start.index - branch.index) % BRANCH_COUNT
        return LifeStage(distance + 1)

    def __str__(self):
        return f"{self.pinyin} ({self.polarity.value} {self.element.value})"


@dataclass(frozen=True)
class EarthlyBranch:
    chinese: str
    pinyin: str
    animal: str
    element: Element  # primary/season element
    polarity: Polarity
    index: int  # 0-11 in the cycle
    hidden_stem_names: tuple  # pinyin of hidden stems [main_qi, middle_qi, residual_qi]

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def hidden_stems(self) -> tuple:
        return tuple(STEM_BY_PINYIN[name] for name in self.hidden_stem_names)

    @property
    def main_qi(self) -> HeavenlyStem:
        return STEM_BY_PINYIN[self.hidden_stem_names[0]]

    @property
    def middle_qi(self) -> Optional[HeavenlyStem]:
        if len(self.hidden_stem_names) > 1:
            return STEM_BY_PINYIN[self.hidden_stem_names[1]]
        return None

    @property
    def residual_qi(self) -> Optional[HeavenlyStem]:
        if len(self.hidden_stem_names) > 2:
            return STEM_BY_PINYIN[self.hidden_stem_names[2]]
        return None

    def qi_layers(self) -> list:
        """(stem, layer) pairs, layer 0 = main, 1 = middle, 2 = residual."""
        return [(stem, layer) for layer, stem in enumerate(self.hidden_stems)]

    @classmethod
    def from_index(cls, index: int) -> "EarthlyBranch":
        return EARTHLY_BRANCHES[index % BRANCH_COUNT]

    def next(self, offset: int = 1) -> "EarthlyBranch":
        return EarthlyBranch.from_index(self.index + offset)

    def previous(self, offset: int = 1) -> "EarthlyBranch":
        return EarthlyBranch.from_index(self.index - offset)

    def __str__(self):
        return f"{self.pinyin} ({self.animal})"


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = [
    HeavenlyStem("甲", "Jia", Element.WOOD, Polarity.YANG, 0),
    HeavenlyStem("乙", "Yi", Element.WOOD, Polarity.YIN, 1),
    HeavenlyStem("丙", "Bing", Element.FIRE, Polarity.YANG, 2),
    HeavenlyStem("丁", "Ding", Element.FIRE, Polarity.YIN, 3),
    HeavenlyStem("戊", "Wu", Element.EARTH, Polarity.YANG, 4),
    HeavenlyStem("己", "Ji", Element.EARTH, Polarity.YIN, 5),
    HeavenlyStem("庚", "Geng", Element.METAL, Polarity.YANG, 6),
    HeavenlyStem("辛", "Xin", Element.METAL, Polarity.YIN, 7),
    HeavenlyStem("壬", "Ren", Element.WATER, Polarity.YANG, 8),
    HeavenlyStem("癸", "Gui", Element.WATER, Polarity.YIN, 9),
]

EARTHLY_BRANCHES = [
    EarthlyBranch("子", "Zi", "Rat", Element.WATER, Polarity.YANG, 0,
                  ("Gui",)),
    EarthlyBranch("丑", "Chou", "Ox", Element.EARTH, Polarity.YIN, 1,
                  ("Ji", "Xin", "Gui")),  # metal grave, winter water residue
    EarthlyBranch("寅", "Yin", "Tiger", Element.WOOD, Polarity.YANG, 2,
                  ("Jia", "Bing", "Wu")),
    EarthlyBranch("卯", "Mao", "Rabbit", Element.WOOD, Polarity.YIN, 3,
                  ("Yi",)),
    EarthlyBranch("辰", "Chen", "Dragon", Element.EARTH, Polarity.YANG, 4,
                  ("Wu", "Gui", "Yi")),  # water grave, spring wood residue
    EarthlyBranch("巳", "Si", "Snake", Element.FIRE, Polarity.YIN, 5,
                  ("Bing", "Geng", "Wu")),
    EarthlyBranch("午", "Wu", "Horse", Element.FIRE, Polarity.YANG, 6,
                  ("Ding", "Ji")),
    EarthlyBranch("未", "Wei", "Goat", Element.EARTH, Polarity.YIN, 7,
                  ("Ji", "Yi", "Ding")),  # wood grave, summer fire residue
    EarthlyBranch("申", "Shen", "Monkey", Element.METAL, Polarity.YANG, 8,
                  ("Geng", "Ren", "Wu")),
    EarthlyBranch("酉", "You", "Rooster", Element.METAL, Polarity.YIN, 9,
                  ("Xin",)),
    EarthlyBranch("戌", "Xu", "Dog", Element.EARTH, Polarity.YANG, 10,
                  ("Wu", "Ding", "Xin")),  # fire grave, autumn metal residue
    EarthlyBranch("亥", "Hai", "Pig", Element.WATER, Polarity.YIN, 11,
                  ("Ren", "Jia")),
]

# Lookup helpers
STEM_BY_PINYIN = {s.pinyin: s for s in HEAVENLY_STEMS}
STEM_BY_CHINESE = {s.chinese: s for s in HEAVENLY_STEMS}
BRANCH_BY_PINYIN = {b.pinyin: b for b in EARTHLY_BRANCHES}
BRANCH_BY_CHINESE = {b.chinese: b for b in EARTHLY_BRANCHES}
BRANCH_BY_ANIMAL = {b.animal: b for b in EARTHLY_BRANCHES}


def stem(name: str) -> HeavenlyStem:
    """Look up a stem by pinyin or glyph."""
    found = STEM_BY_PINYIN.get(name) or STEM_BY_CHINESE.get(name)
    if found is None:
        raise ValueError(f"Unknown heavenly stem: {name!r}")
    return found


def branch(name: str) -> EarthlyBranch:
    """Look up a branch by pinyin, glyph or animal."""
    found = BRANCH_BY_PINYIN.get(name) or BRANCH_BY_CHINESE.get(name) or BRANCH_BY_ANIMAL.get(name)
    if found is None:
        raise ValueError(f"Unknown earthly branch: {name!r}")
    return found


# ============================================================
# SEXAGENARY CYCLE (六十甲子)
# ============================================================

@dataclass(frozen=True)
class StemBranch:
    """One of the 60 valid (stem, branch) pairs."""

    stem: HeavenlyStem
    branch: EarthlyBranch

    def __post_init__(self):
        # Only pairs of equal parity occur in the cycle
        if self.stem.index % 2 != self.branch.index % 2:
            raise ValueError(f"{self.stem.pinyin}-{self.branch.pinyin} is not a sexagenary pair")

    @classmethod
    def from_index(cls, index: int) -> "StemBranch":
        """Pair at a 0-based cycle position; any integer is normalised mod 60."""
        index %= CYCLE_LENGTH
        return cls(HeavenlyStem.from_index(index), EarthlyBranch.from_index(index))

    @classmethod
    def parse(cls, text: str) -> "StemBranch":
        """Parse '甲子', 'Jia-Zi' or 'Jia Zi'."""
        text = text.strip()
        if len(text) == 2 and text[0] in STEM_BY_CHINESE:
            return cls(stem(text[0]), branch(text[1]))
        parts = text.replace("-", " ").split()
        if len(parts) != 2:
            raise ValueError(f"Cannot parse stem-branch pair: {text!r}")
        return cls(stem(parts[0].capitalize()), branch(parts[1].capitalize()))

    @property
    def index(self) -> int:
        return (6 * self.stem.index - 5 * self.branch.index + CYCLE_LENGTH) % CYCLE_LENGTH

    @property
    def chinese(self) -> str:
        return self.stem.chinese + self.branch.chinese

    def label(self) -> str:
        return f"{self.stem.pinyin}-{self.branch.pinyin}"

    def next(self, offset: int = 1) -> "StemBranch":
        return StemBranch(self.stem.next(offset), self.branch.next(offset))

    def previous(self, offset: int = 1) -> "StemBranch":
        return StemBranch(self.stem.previous(offset), self.branch.previous(offset))

    def to_dict(self) -> dict:
        return {
            "stem": {
                "chinese": self.stem.chinese,
                "pinyin": self.stem.pinyin,
                "element": self.stem.element.value,
                "polarity": self.stem.polarity.value,
            },
            "branch": {
                "chinese": self.branch.chinese,
                "pinyin": self.branch.pinyin,
                "animal": self.branch.animal,
                "element": self.branch.element.value,
                "polarity": self.branch.polarity.value,
                "hidden_stems": list(self.branch.hidden_stem_names),
            },
            "combined": self.chinese,
            "label": self.label(),
            "index": self.index,
        }

    def __str__(self):
        return f"{self.stem.pinyin} {self.branch.pinyin} ({self.stem.polarity.value} {self.stem.element.value} {self.branch.animal})"


SEXAGENARY_CYCLE = tuple(StemBranch.from_index(i) for i in range(CYCLE_LENGTH))
