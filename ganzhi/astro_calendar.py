"""
Astronomical calendar utilities for pillar construction.

Handles:
- Julian Day conversion (Swiss Ephemeris julday / revjul)
- Apparent solar ecliptic longitude and the equation of time
- Jie (节) solar-term boundary search before / after a moment
- LMT and true solar time correction for a birth location

The solar series is a low-order truncated expansion, not a live
ephemeris lookup. Its coefficients decide where month and year pillars
turn over, so they must not be "improved" independently of reference
charts.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import swisseph as swe

from ganzhi.symbols import EarthlyBranch

logger = logging.getLogger(__name__)

J2000 = 2451545.0
DAYS_PER_CENTURY = 36525.0

JIE_SEARCH_WINDOW_DAYS = 40.0
JIE_SEARCH_ITERATIONS = 30


def normalize_degrees(degrees: float) -> float:
    """Wrap an angle into [0, 360)."""
    result = math.fmod(degrees, 360.0)
    if result < 0:
        result += 360.0
    # fmod of a tiny negative can land exactly on 360.0 after the add
    return 0.0 if result >= 360.0 else result


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def julian_day(moment: datetime) -> float:
    """
    Julian Day (UT) of a moment.

    Naive datetimes are treated as UTC.
    """
    utc = _as_utc(moment)
    hour = (utc.hour + utc.minute / 60.0 + utc.second / 3600.0
            + utc.microsecond / 3_600_000_000.0)
    return swe.julday(utc.year, utc.month, utc.day, hour)


def datetime_from_julian_day(jd: float) -> datetime:
    """Inverse of julian_day, as an aware UTC datetime."""
    year, month, day, hour = swe.revjul(jd)
    return datetime(year, month, day, tzinfo=timezone.utc) + timedelta(hours=hour)


def _centuries_since_j2000(jd: float) -> float:
    return (jd - J2000) / DAYS_PER_CENTURY


def _mean_longitude(t: float) -> float:
    return normalize_degrees(280.46646 + 36000.76983 * t + 0.0003032 * t * t)


def _mean_anomaly(t: float) -> float:
    return normalize_degrees(357.52911 + 35999.05029 * t - 0.0001537 * t * t)


# ============================================================
# SOLAR POSITION
# ============================================================

def solar_longitude_jd(jd: float) -> float:
    """Apparent solar ecliptic longitude in degrees [0, 360) at a Julian Day."""
    t = _centuries_since_j2000(jd)
    l0 = _mean_longitude(t)
    m = math.radians(_mean_anomaly(t))

    # Equation of centre
    c = ((1.914602 - 0.004817 * t - 0.000014 * t * t) * math.sin(m)
         + (0.019993 - 0.000101 * t) * math.sin(2 * m)
         + 0.000289 * math.sin(3 * m))

    # Nutation and aberration
    omega = math.radians(125.04 - 1934.136 * t)
    apparent = l0 + c - 0.00569 - 0.00478 * math.sin(omega)
    return normalize_degrees(apparent)


def solar_longitude(moment: datetime) -> float:
    """Apparent solar ecliptic longitude in degrees [0, 360)."""
    return solar_longitude_jd(julian_day(moment))


def equation_of_time(moment: datetime) -> float:
    """
    Equation of time in minutes (apparent minus mean solar time).

    Positive values mean the sundial runs ahead of the clock.
    """
    t = _centuries_since_j2000(julian_day(moment))
    l0 = math.radians(_mean_longitude(t))
    m = math.radians(_mean_anomaly(t))
    e = 0.016708634 - 0.000042037 * t - 0.0000001267 * t * t
    epsilon = math.radians(23.4392911)
    y = math.tan(epsilon / 2) ** 2

    eot = (y * math.sin(2 * l0)
           - 2 * e * math.sin(m)
           + 4 * e * y * math.sin(m) * math.cos(2 * l0)
           - 0.5 * y * y * math.sin(4 * l0)
           - 1.25 * e * e * math.sin(2 * m))
    return math.degrees(eot) * 4.0


# ============================================================
# SOLAR TERM (JIE) SEARCH
# ============================================================
#
# The 12 Jie (节) solar terms mark BaZi month boundaries. They sit every
# 30° starting from Li Chun at 315°.

# Jie names in month order; the i-th opens month branch i + 2 (Yin first)
JIE_NAMES = (
    "Li Chun", "Jing Zhe", "Qing Ming", "Li Xia", "Mang Zhong", "Xiao Shu",
    "Li Qiu", "Bai Lu", "Han Lu", "Li Dong", "Da Xue", "Xiao Han",
)

LI_CHUN_LONGITUDE = 315.0

# sector start longitude -> (term name, month branch pinyin)
_JIE_BY_LONGITUDE = {
    int(normalize_degrees(LI_CHUN_LONGITUDE + 30 * i)): (name, EarthlyBranch.from_index(i + 2).pinyin)
    for i, name in enumerate(JIE_NAMES)
}


@dataclass(frozen=True)
class JieTerm:
    moment: datetime  # UTC
    longitude: float  # target longitude of the boundary
    name: str
    branch: str       # pinyin of the month branch the term opens

    def to_dict(self):
        return {
            "term_name": self.name,
            "longitude": self.longitude,
            "branch": self.branch,
            "moment_utc": self.moment.isoformat(),
        }


def jie_term_name(longitude: float) -> str:
    """Name of the Jie boundary at (or the sector starting at) a longitude."""
    sector_start = _sector_start(longitude)
    return _JIE_BY_LONGITUDE[int(round(sector_start))][0]


def _sector_start(longitude: float) -> float:
    offset = normalize_degrees(longitude - LI_CHUN_LONGITUDE)
    return normalize_degrees(math.floor(offset / 30.0) * 30.0 + LI_CHUN_LONGITUDE)


def _wrapped_delta(longitude: float, target: float) -> float:
    """longitude - target wrapped into (-180, 180]."""
    delta = normalize_degrees(longitude - target)
    return delta - 360.0 if delta > 180.0 else delta


def _bisect_crossing(low: float, high: float, target: float) -> float:
    for _ in range(JIE_SEARCH_ITERATIONS):
        mid = (low + high) / 2
        if _wrapped_delta(solar_longitude_jd(mid), target) > 0:
            high = mid
        else:
            low = mid
    return (low + high) / 2


def _jie_term(jd: float, target: float) -> JieTerm:
    name, branch = _JIE_BY_LONGITUDE[int(round(target))]
    return JieTerm(datetime_from_julian_day(jd), target, name, branch)


def find_previous_jie(moment: datetime) -> JieTerm:
    """
    Most recent Jie boundary at or before a moment.

    Bisects a 40-day window ending at the moment for the crossing of
    the sector start that the current solar longitude lies in.
    """
    jd = julian_day(moment)
    target = _sector_start(solar_longitude_jd(jd))
    crossing = _bisect_crossing(jd - JIE_SEARCH_WINDOW_DAYS, jd, target)
    term = _jie_term(crossing, target)
    logger.debug("previous jie for %s: %s at %s", moment.isoformat(), term.name, term.moment.isoformat())
    return term


def find_next_jie(moment: datetime) -> JieTerm:
    """Next Jie boundary after a moment, searched over a 40-day window."""
    jd = julian_day(moment)
    target = normalize_degrees(_sector_start(solar_longitude_jd(jd)) + 30.0)
    crossing = _bisect_crossing(jd, jd + JIE_SEARCH_WINDOW_DAYS, target)
    term = _jie_term(crossing, target)
    logger.debug("next jie for %s: %s at %s", moment.isoformat(), term.name, term.moment.isoformat())
    return term


# ============================================================
# LOCATION AND SOLAR TIME
# ============================================================

@dataclass(frozen=True)
class Location:
    longitude: float           # degrees, east positive
    utc_offset: float          # standard (non-DST) offset in hours
    latitude: Optional[float] = None
    timezone_name: Optional[str] = None

    @property
    def standard_meridian(self) -> float:
        return self.utc_offset * 15.0

    @property
    def tzinfo(self) -> timezone:
        return timezone(timedelta(hours=self.utc_offset))


def lmt_correction(longitude: float, standard_meridian: float = 120.0) -> float:
    """
    Minutes from zone clock time to local mean time: 4 per degree of
    longitude east of the zone's meridian (Location.standard_meridian).

    Kashgar (75.99E) on Beijing time: (75.99 - 120) * 4 = -176.04 min.
    """
    return (longitude - standard_meridian) * 4.0


def solar_time_offset(moment: datetime, location: Location) -> float:
    """Minutes to add to clock time to reach true solar time."""
    return lmt_correction(location.longitude, location.standard_meridian) + equation_of_time(moment)


def true_solar_time(moment: datetime, location: Location) -> datetime:
    """
    Shift a clock moment to true solar time for a location.

    LMT correction plus the equation of time. The result keeps the
    input's tzinfo so its wall-clock fields read as solar time.
    """
    return moment + timedelta(minutes=solar_time_offset(moment, location))
