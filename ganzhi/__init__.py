"""GanZhi: Four Pillars (BaZi) chart engine."""

from ganzhi.astro_calendar import Location, solar_longitude, true_solar_time
from ganzhi.pattern import Pattern, PatternMethod, classify_pattern
from ganzhi.pillars import FourPillars, PillarRole, compute_four_pillars
from ganzhi.strength import elemental_strengths, ten_god_strengths
from ganzhi.symbols import EarthlyBranch, HeavenlyStem, StemBranch
from ganzhi.thermal import ThermalBalance, thermal_balance
from ganzhi.useful_god import UsefulGodMethod, UsefulGodResult, analyze_useful_god

__version__ = "0.1.0"
