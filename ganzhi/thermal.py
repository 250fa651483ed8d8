"""
Thermal balance (寒暖燥湿) of a chart.

Temperature is driven by the branches' seasonal baseline and by fire
stems / branches, the latter scaled by how strong Bing fire is in the
month (its life stage there). Moisture sums each character's wet/dry
base weighted by its energy and never goes below zero.
"""

from dataclasses import dataclass

from ganzhi.pillars import FourPillars
from ganzhi.strength import branch_energy, stem_energy
from ganzhi.symbols import LifeStage, STEM_BY_PINYIN


THERMAL_SCALE = 40.0

STEM_FIRE_BASE = {"Bing": 10.0, "Ding": 6.0}

STEM_MOISTURE = {
    "Ren": 3.0, "Gui": 3.0,      # water
    "Bing": -3.0, "Ding": -3.0,  # fire
    "Wu": -2.0,                  # dry earth
    "Ji": 1.0,                   # wet earth
    "Jia": 0.5, "Yi": 0.5,       # living wood
    "Geng": -0.5, "Xin": -0.5,   # metal
}

BRANCH_BASELINE = {
    "Zi": -5.0, "Chou": -10.0, "Yin": 1.0, "Mao": 3.0,
    "Chen": 9.0, "Si": 15.0, "Wu": 20.0, "Wei": 15.0,
    "Shen": 9.0, "You": 3.0, "Xu": 1.0, "Hai": -2.0,
}

BRANCH_FIRE_BASE = {"Si": 8.0, "Wu": 10.0}

BRANCH_MOISTURE = {
    "Zi": 3.0, "Hai": 3.0,
    "Chen": 2.0, "Chou": 2.0,
    "Wu": -3.0, "Si": -3.0,
    "Xu": -2.0, "Wei": -2.0,
    "Shen": -1.0, "You": -1.0,
    "Yin": 0.5, "Mao": 0.5,
}

LIFE_STAGE_MULTIPLIER = {
    LifeStage.CHANG_SHENG: 1.2,
    LifeStage.MU_YU: 1.3,
    LifeStage.GUAN_DAI: 1.5,
    LifeStage.LIN_GUAN: 1.8,
    LifeStage.DI_WANG: 2.0,
    LifeStage.SHUAI: 1.0,
    LifeStage.BING: 0.8,
    LifeStage.SI: 0.5,
    LifeStage.MU: 0.6,
    LifeStage.JUE: 0.5,
    LifeStage.TAI: 0.7,
    LifeStage.YANG: 0.9,
}

TEMPERATURE_BANDS = ("scalding", "warm", "neutral", "chilly", "freezing")
MOISTURE_BANDS = ("soggy", "moist", "balanced", "dry", "parched")


def _band(index: float, names: tuple) -> str:
    if index > 0.6:
        return names[0]
    if index > 0.2:
        return names[1]
    if index > -0.2:
        return names[2]
    if index > -0.6:
        return names[3]
    return names[4]


@dataclass(frozen=True)
class ThermalBalance:
    temperature: float  # positive = warm
    moisture: float     # >= 0, larger = wetter

    @property
    def temperature_index(self) -> float:
        return max(-1.0, min(1.0, self.temperature / THERMAL_SCALE))

    @property
    def moisture_index(self) -> float:
        return max(-1.0, min(1.0, self.moisture / THERMAL_SCALE))

    @property
    def temperature_band(self) -> str:
        return _band(self.temperature_index, TEMPERATURE_BANDS)

    @property
    def moisture_band(self) -> str:
        return _band(self.moisture_index, MOISTURE_BANDS)

    def to_dict(self):
        return {
            "temperature": round(self.temperature, 3),
            "moisture": round(self.moisture, 3),
            "temperature_band": self.temperature_band,
            "moisture_band": self.moisture_band,
        }


def month_fire_coefficient(chart: FourPillars) -> float:
    """Bing fire's life-stage multiplier in the month branch."""
    bing = STEM_BY_PINYIN["Bing"]
    return LIFE_STAGE_MULTIPLIER[bing.life_stage(chart.month_branch)]


def thermal_balance(chart: FourPillars) -> ThermalBalance:
    month_coefficient = month_fire_coefficient(chart)
    temperature = 0.0
    moisture = 0.0

    for role, p in chart.items():
        s_energy = stem_energy(chart, role)
        b_energy = branch_energy(chart, role)

        temperature += BRANCH_BASELINE[p.branch.pinyin] * b_energy

        fire = STEM_FIRE_BASE.get(p.stem.pinyin, 0.0)
        if fire:
            stage = p.stem.life_stage(p.branch)
            temperature += fire * LIFE_STAGE_MULTIPLIER[stage] * month_coefficient * s_energy

        temperature += BRANCH_FIRE_BASE.get(p.branch.pinyin, 0.0) * month_coefficient * b_energy

        moisture += STEM_MOISTURE[p.stem.pinyin] * s_energy
        moisture += BRANCH_MOISTURE[p.branch.pinyin] * b_energy

    return ThermalBalance(temperature=temperature, moisture=max(0.0, moisture))
