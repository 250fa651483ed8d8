"""
Chart payload builder.

Computes a Four Pillars chart from birth data and assembles every
analysis into one JSON-ready dict. Timezone is auto-detected from the
birth coordinates and date; DST is stripped so solar time is measured
from the zone's standard meridian.

Usage from Python:
    from ganzhi.create_chart import build_chart_payload
    payload = build_chart_payload(
        birth_date="2008-08-08", birth_time="20:08",
        latitude=39.9042, longitude=116.4074,
        utc_offset=None,  # optional: override auto-detected offset
    )
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from timezonefinder import TimezoneFinder

from ganzhi.astro_calendar import Location, find_next_jie, find_previous_jie, solar_time_offset
from ganzhi.config import get_settings
from ganzhi.interactions import find_interactions
from ganzhi.labels import label, pattern_name
from ganzhi.pattern import classify_pattern
from ganzhi.pillars import compute_four_pillars, resolve_local_time
from ganzhi.rules import RuleSet
from ganzhi.strength import strength_summary
from ganzhi.thermal import thermal_balance
from ganzhi.useful_god import UsefulGodMethod, analyze_useful_god

logger = logging.getLogger(__name__)

_tf = None


def _timezone_finder() -> TimezoneFinder:
    global _tf
    if _tf is None:
        _tf = TimezoneFinder()
    return _tf


def utc_offset_for(latitude, longitude, birth_date, birth_time):
    """
    Determine UTC offset from coordinates and date.
    Detects historical DST (e.g., China 1986-1991).

    Returns:
        (clock_offset, standard_offset, timezone_name, dst_detected)

        clock_offset:    what the clock was actually set to (includes DST if active)
        standard_offset: the zone's standard (non-DST) offset
        dst_detected:    True if DST was active at birth time
    """
    tz_name = _timezone_finder().timezone_at(lat=latitude, lng=longitude)
    if tz_name is None:
        raise ValueError(f"Could not determine timezone for ({latitude}, {longitude})")

    hour, minute = parse_time(birth_time)
    local_dt = datetime(birth_date.year, birth_date.month, birth_date.day,
                        hour, minute, tzinfo=ZoneInfo(tz_name))
    clock_offset = local_dt.utcoffset().total_seconds() / 3600

    dst = local_dt.dst()
    dst_detected = dst is not None and dst.total_seconds() > 0
    if dst_detected:
        standard_offset = clock_offset - dst.total_seconds() / 3600
    else:
        standard_offset = clock_offset

    logger.info("timezone %s: clock UTC%+g, standard UTC%+g", tz_name, clock_offset, standard_offset)
    return clock_offset, standard_offset, tz_name, dst_detected


def location_from_coordinates(latitude: float, longitude: float, birth_date, birth_time="12:00") -> Location:
    """Location with the standard (DST-free) offset of the zone at the coordinates."""
    if isinstance(birth_date, str):
        birth_date = parse_date(birth_date)
    _, standard_offset, tz_name, _ = utc_offset_for(latitude, longitude, birth_date, birth_time)
    return Location(longitude=longitude, utc_offset=standard_offset,
                    latitude=latitude, timezone_name=tz_name)


# ============================================================
# INPUT PARSING
# ============================================================

def parse_date(text: str) -> date:
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid birth date {text!r}, expected YYYY-MM-DD") from None


def parse_time(text: str) -> tuple:
    try:
        parsed = datetime.strptime(text, "%H:%M")
    except ValueError:
        raise ValueError(f"Invalid birth time {text!r}, expected HH:MM") from None
    return parsed.hour, parsed.minute


# ============================================================
# PAYLOAD
# ============================================================

def _labelled(value, language):
    return {"value": value.value, "label": label(value, language)}


def build_chart_payload(birth_date, birth_time: str,
                        latitude: Optional[float] = None,
                        longitude: Optional[float] = None,
                        utc_offset: Optional[float] = None,
                        location: Optional[Location] = None,
                        rules: Optional[RuleSet] = None,
                        language: Optional[str] = None,
                        settings=None) -> dict:
    """
    Compute a chart and every analysis of it.

    Args:
        birth_date: "YYYY-MM-DD" string or date
        birth_time: "HH:MM" (24h, local clock time)
        latitude, longitude: birth coordinates; enable true solar time
        utc_offset: hours; overrides the auto-detected offset. Without
            coordinates it is the zone of the clock time (default 0).
        location: ready-made Location; takes precedence over coordinates
        rules: custom rules to evaluate against the chart
        language: label language, defaults to settings.language

    Returns:
        dict with input, pillars, day_master, counts, strengths, pattern,
        useful_gods (one per method), thermal, interactions, solar_terms,
        matched_rules
    """
    settings = settings or get_settings()
    language = language or settings.language
    if isinstance(birth_date, str):
        birth_date = parse_date(birth_date)
    hour, minute = parse_time(birth_time)
    clock = datetime(birth_date.year, birth_date.month, birth_date.day, hour, minute)

    timezone_source = None
    if location is None and longitude is not None:
        if utc_offset is not None:
            location = Location(longitude=longitude, utc_offset=utc_offset, latitude=latitude)
            timezone_source = "manual"
        else:
            if latitude is None:
                raise ValueError("latitude is required to detect the timezone")
            clock_offset, standard_offset, tz_name, dst_detected = utc_offset_for(
                latitude, longitude, birth_date, birth_time)
            location = Location(longitude=longitude, utc_offset=standard_offset,
                                latitude=latitude, timezone_name=tz_name)
            # Clock time read under DST is moved back to standard time
            if dst_detected:
                clock = clock.replace(tzinfo=ZoneInfo(tz_name))
            timezone_source = "auto_split" if dst_detected else "auto"
    elif location is not None:
        timezone_source = "location"

    tz = None
    if location is None:
        tz = timezone(timedelta(hours=utc_offset or 0.0))
        timezone_source = "manual" if utc_offset is not None else "utc"

    chart = compute_four_pillars(clock, location=location, tz=tz)
    local = resolve_local_time(clock, location, tz)
    if clock.tzinfo is not None:
        instant = clock
    else:
        instant = clock.replace(tzinfo=location.tzinfo if location is not None else tz)

    pattern = classify_pattern(chart, settings)
    useful_gods = {
        method.value: analyze_useful_god(chart, method, settings=settings,
                                         pattern=pattern if method is UsefulGodMethod.PATTERN else None).to_dict()
        for method in UsefulGodMethod
    }
    thermal = thermal_balance(chart)
    previous_jie = find_previous_jie(instant)
    next_jie = find_next_jie(instant)

    payload = {
        "input": {
            "birth_date": birth_date.strftime("%Y-%m-%d"),
            "birth_time_clock": birth_time,
            "chart_time": local.strftime("%Y-%m-%d %H:%M"),
            "timezone_source": timezone_source,
            "location": {
                "latitude": location.latitude,
                "longitude": location.longitude,
                "utc_offset": location.utc_offset,
                "timezone": location.timezone_name,
                "solar_time_correction_minutes": round(solar_time_offset(instant, location), 1),
            } if location is not None else None,
        },
        "pillars": chart.to_dict(),
        "description": chart.description(),
        "day_master": {
            "stem": chart.day_master.pinyin,
            "element": _labelled(chart.day_master.element, language),
            "polarity": _labelled(chart.day_master.polarity, language),
        },
        "counts": {
            "visible_ten_gods": {g.value: n for g, n in chart.visible_ten_god_counts().items()},
            "elements": {e.value: n for e, n in chart.element_counts().items()},
            "polarity": {p.value: n for p, n in chart.polarity_counts().items()},
        },
        "strengths": strength_summary(chart),
        "pattern": dict(pattern.to_dict(), label=pattern_name(pattern, language)),
        "useful_gods": useful_gods,
        "thermal": dict(
            thermal.to_dict(),
            temperature_label=label(thermal.temperature_band, language),
            moisture_label=label(thermal.moisture_band, language),
        ),
        "interactions": [
            dict(item.to_dict(), label=label(item.kind, language))
            for item in find_interactions(chart)
        ],
        "solar_terms": {
            "previous": previous_jie.to_dict(),
            "next": next_jie.to_dict(),
        },
        "matched_rules": rules.evaluate(chart) if rules is not None else [],
    }
    return payload
