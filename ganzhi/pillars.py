"""
Four Pillars construction.

Handles:
- Year pillar from the Li Chun (315°) solar boundary
- Month pillar from the solar sector (Five Tigers Escape for the stem)
- Day pillar from the calendar-day count since 2000-01-01 (Wu-Wu)
- Hour pillar (Five Rats Escape) with the 23:00 day rollover
- True solar time correction when a location is supplied
- Ten Gods views and element / polarity counts of a finished chart

Design principle: a FourPillars value only stores the eight characters.
Anything that depends on the whole chart (energies, strengths) is
computed from it on demand.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Optional

import swisseph as swe

from ganzhi.astro_calendar import (
    LI_CHUN_LONGITUDE,
    Location,
    normalize_degrees,
    solar_longitude,
    true_solar_time,
)
from ganzhi.elements import Element, Polarity, TenGod, ten_god_of_stem
from ganzhi.symbols import (
    CYCLE_LENGTH,
    EarthlyBranch,
    HeavenlyStem,
    StemBranch,
)


# 2000-01-01 is Wu-Wu (戊午), position 54 of the cycle
DAY_EPOCH = (2000, 1, 1)
DAY_EPOCH_INDEX = 54


class PillarRole(Enum):
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    HOUR = "hour"

    @property
    def position(self) -> int:
        """Pillar order used for distance decay (year = 0 ... hour = 3)."""
        return _ROLE_ORDER.index(self)


_ROLE_ORDER = [PillarRole.YEAR, PillarRole.MONTH, PillarRole.DAY, PillarRole.HOUR]


@dataclass(frozen=True)
class FourPillars:
    year: StemBranch
    month: StemBranch
    day: StemBranch
    hour: StemBranch

    @classmethod
    def from_strings(cls, year: str, month: str, day: str, hour: str) -> "FourPillars":
        """Build a chart from pillar labels such as 'Wu-Zi' or '戊子'."""
        return cls(StemBranch.parse(year), StemBranch.parse(month),
                   StemBranch.parse(day), StemBranch.parse(hour))

    @property
    def day_master(self) -> HeavenlyStem:
        return self.day.stem

    @property
    def month_branch(self) -> EarthlyBranch:
        return self.month.branch

    def pillar(self, role: PillarRole) -> StemBranch:
        return getattr(self, role.value)

    def items(self) -> list:
        """(role, pillar) pairs in year, month, day, hour order."""
        return [(role, self.pillar(role)) for role in _ROLE_ORDER]

    def stems(self) -> list:
        return [p.stem for _, p in self.items()]

    def branches(self) -> list:
        return [p.branch for _, p in self.items()]

    # ------------------------------------------------------------
    # Ten Gods views
    # ------------------------------------------------------------

    def stem_ten_gods(self) -> dict:
        """Ten God of each visible stem; the day stem is the Day Master itself."""
        result = {}
        for role, p in self.items():
            if role is PillarRole.DAY:
                continue
            result[role] = ten_god_of_stem(self.day_master, p.stem)
        return result

    def hidden_ten_gods(self) -> dict:
        """Per pillar, the (hidden stem, Ten God) list in main/middle/residual order."""
        return {
            role: [(hidden, ten_god_of_stem(self.day_master, hidden)) for hidden in p.branch.hidden_stems]
            for role, p in self.items()
        }

    def visible_ten_god_counts(self) -> dict:
        counts = Counter(self.stem_ten_gods().values())
        return {god: counts.get(god, 0) for god in TenGod}

    # ------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------

    def element_counts(self) -> dict:
        """Five Element counts of the eight visible characters."""
        counts = Counter()
        for _, p in self.items():
            counts[p.stem.element] += 1
            counts[p.branch.element] += 1
        return {element: counts.get(element, 0) for element in Element}

    def polarity_counts(self) -> dict:
        counts = Counter()
        for _, p in self.items():
            counts[p.stem.polarity] += 1
            counts[p.branch.polarity] += 1
        return {polarity: counts.get(polarity, 0) for polarity in Polarity}

    def description(self) -> str:
        return " ".join(p.chinese for _, p in self.items())

    def to_dict(self) -> dict:
        stem_gods = self.stem_ten_gods()
        hidden = self.hidden_ten_gods()
        pillars = {}
        for role, p in self.items():
            entry = p.to_dict()
            entry["stem_ten_god"] = stem_gods[role].value if role in stem_gods else "day_master"
            entry["hidden_ten_gods"] = [
                {"stem": stem.pinyin, "ten_god": god.value} for stem, god in hidden[role]
            ]
            pillars[role.value] = entry
        return pillars

    def __str__(self):
        return " | ".join(p.label() for _, p in self.items())


# ============================================================
# PILLAR COMPUTATION
# ============================================================

def month_sector(sun_longitude: float) -> int:
    """0-based solar month counted from Li Chun (0 = Yin month)."""
    return int(normalize_degrees(sun_longitude - LI_CHUN_LONGITUDE) // 30)


def year_pillar(local_time: datetime, sun_longitude: float) -> StemBranch:
    """
    Compute the Year Pillar.

    The BaZi year starts at Li Chun (315°). A January/February moment
    whose solar longitude has not reached 315° still belongs to the
    previous year. Year 4 CE was Jia-Zi.
    """
    effective_year = local_time.year
    if local_time.month < 3 and sun_longitude < LI_CHUN_LONGITUDE:
        effective_year -= 1
    return StemBranch.from_index(effective_year - 4)


def month_pillar(year_stem: HeavenlyStem, sun_longitude: float) -> StemBranch:
    """
    Compute the Month Pillar using the Five Tigers Escape (Wu Hu Dun) formula.

    The branch comes from the 30° solar sector alone (Yin starts at
    315°). The Tiger month stem starts at Bing for Jia/Ji years, Wu for
    Yi/Geng, Geng for Bing/Xin, Ren for Ding/Ren and Jia for Wu/Gui.
    """
    branch = EarthlyBranch.from_index(month_sector(sun_longitude) + 2)
    tiger_start = (year_stem.index % 5) * 2 + 2
    months_from_tiger = (branch.index - 2) % 12
    return StemBranch(HeavenlyStem.from_index(tiger_start + months_from_tiger), branch)


def day_pillar(local_time: datetime) -> StemBranch:
    """
    Compute the Day Pillar from whole calendar days since 2000-01-01.

    Time of day is ignored; the 23:00 rollover only affects the hour stem.
    """
    jd = swe.julday(local_time.year, local_time.month, local_time.day, 0.0)
    epoch = swe.julday(*DAY_EPOCH, 0.0)
    days = int(round(jd - epoch))
    return StemBranch.from_index((DAY_EPOCH_INDEX + days) % CYCLE_LENGTH)


def hour_pillar(day_stem: HeavenlyStem, hour: int) -> StemBranch:
    """
    Compute the Hour Pillar using Five Rats Escape (Wu Shu Dun) formula.

    Chinese hours (shi chen) are 2-hour blocks starting at 23:00 (Zi).
    From 23:00 the next sexagenary day has begun, so the Zi-hour stem is
    derived from the following day stem even though the calendar day
    pillar has not advanced.

    Args:
        day_stem: the day pillar's stem
        hour: hour in 24h format (solar-time corrected when a location is known)
    """
    branch = EarthlyBranch.from_index((hour + 1) // 2)
    lookup_stem = day_stem.next() if hour >= 23 else day_stem
    zi_start = (lookup_stem.index % 5) * 2
    return StemBranch(HeavenlyStem.from_index(zi_start + branch.index), branch)


def resolve_local_time(moment: datetime, location: Optional[Location] = None,
                       tz: Optional[tzinfo] = None) -> datetime:
    """
    Wall-clock time the pillars are read from.

    Naive moments are interpreted in the location's standard offset when
    a location is given, else in ``tz``, else UTC. With a location the
    result is further shifted to true solar time.
    """
    if location is not None:
        zone = location.tzinfo
    elif tz is not None:
        zone = tz
    else:
        zone = timezone.utc

    if moment.tzinfo is None:
        local = moment.replace(tzinfo=zone)
    else:
        local = moment.astimezone(zone)

    if location is not None:
        local = true_solar_time(local, location)
    return local


def compute_four_pillars(moment: datetime, location: Optional[Location] = None,
                         tz: Optional[tzinfo] = None) -> FourPillars:
    """
    Compute the Four Pillars for a moment.

    Args:
        moment: birth moment; aware or naive (see resolve_local_time)
        location: optional longitude / standard offset for true solar time
        tz: zone for naive moments when no location is given

    Returns:
        FourPillars with year, month, day and hour StemBranch values
    """
    local = resolve_local_time(moment, location, tz)
    # Aware, so the solar-time shift carries into the sun position too
    sun_longitude = solar_longitude(local)

    year = year_pillar(local, sun_longitude)
    month = month_pillar(year.stem, sun_longitude)
    day = day_pillar(local)
    hour = hour_pillar(day.stem, local.hour)
    return FourPillars(year, month, day, hour)
