from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from ganzhi.astro_calendar import (
    Location,
    datetime_from_julian_day,
    equation_of_time,
    find_next_jie,
    find_previous_jie,
    jie_term_name,
    julian_day,
    lmt_correction,
    normalize_degrees,
    solar_longitude,
    true_solar_time,
)

UTC = timezone.utc
CST = timezone(timedelta(hours=8))


def _angular_distance(a: float, b: float) -> float:
    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)


@pytest.mark.parametrize("value, expected", [(-30.0, 330.0), (720.0, 0.0), (359.5, 359.5), (-360.0, 0.0)])
def test_normalize_degrees(value: float, expected: float) -> None:
    assert normalize_degrees(value) == pytest.approx(expected)


def test_julian_day_of_j2000() -> None:
    assert julian_day(datetime(2000, 1, 1, 12, 0, tzinfo=UTC)) == pytest.approx(2451545.0)


def test_naive_datetimes_are_utc() -> None:
    naive = datetime(2010, 5, 1, 6, 30)
    assert julian_day(naive) == pytest.approx(julian_day(naive.replace(tzinfo=UTC)))
    assert julian_day(datetime(2010, 5, 1, 14, 30, tzinfo=CST)) == pytest.approx(julian_day(naive))


def test_julian_day_round_trip() -> None:
    moment = datetime(1987, 4, 10, 19, 21, tzinfo=UTC)
    back = datetime_from_julian_day(julian_day(moment))
    assert abs((back - moment).total_seconds()) < 1.0


def test_solar_longitude_at_march_equinox() -> None:
    lon = solar_longitude(datetime(2024, 3, 20, 3, 6, tzinfo=UTC))
    assert _angular_distance(lon, 0.0) < 0.1


def test_solar_longitude_at_june_solstice() -> None:
    lon = solar_longitude(datetime(2024, 6, 20, 20, 51, tzinfo=UTC))
    assert _angular_distance(lon, 90.0) < 0.1


@pytest.mark.parametrize("moment, expected", [
    (datetime(2024, 11, 3, 12, tzinfo=UTC), 16.4),
    (datetime(2024, 2, 11, 12, tzinfo=UTC), -14.2),
])
def test_equation_of_time_extremes(moment: datetime, expected: float) -> None:
    assert equation_of_time(moment) == pytest.approx(expected, abs=0.5)


@pytest.mark.parametrize("longitude, name", [
    (315.0, "Li Chun"),
    (316.0, "Li Chun"),
    (14.9, "Jing Zhe"),
    (15.0, "Qing Ming"),
    (300.0, "Xiao Han"),
    (260.0, "Da Xue"),
])
def test_jie_term_name(longitude: float, name: str) -> None:
    assert jie_term_name(longitude) == name


def test_previous_jie_is_li_qiu_before_beijing_olympics() -> None:
    moment = datetime(2008, 8, 8, 20, 8, tzinfo=CST)
    term = find_previous_jie(moment)
    assert term.name == "Li Qiu"
    assert term.branch == "Shen"
    assert term.longitude == 135
    assert term.moment.date() == datetime(2008, 8, 7).date()
    assert term.moment < moment


def test_next_jie_is_bai_lu() -> None:
    moment = datetime(2008, 8, 8, 20, 8, tzinfo=CST)
    term = find_next_jie(moment)
    assert term.name == "Bai Lu"
    assert term.branch == "You"
    assert term.moment.date() == datetime(2008, 9, 7).date()
    assert _angular_distance(solar_longitude(term.moment), 165.0) < 0.01


def test_li_chun_2024() -> None:
    term = find_previous_jie(datetime(2024, 2, 10, tzinfo=UTC))
    assert term.name == "Li Chun"
    assert term.moment.date() == datetime(2024, 2, 4).date()
    assert term.to_dict()["term_name"] == "Li Chun"


def test_lmt_correction() -> None:
    # Nanning, 108.37E on China Standard Time
    assert lmt_correction(108.37, 120.0) == pytest.approx(-46.52)
    assert lmt_correction(120.0) == 0.0


def test_location_standard_meridian() -> None:
    location = Location(longitude=-73.9, utc_offset=-5.0)
    assert location.standard_meridian == -75.0
    assert location.tzinfo.utcoffset(None) == timedelta(hours=-5)


def test_true_solar_time_moves_west_earlier() -> None:
    moment = datetime(2024, 6, 15, 10, 0, tzinfo=CST)
    urumqi = Location(longitude=87.6, utc_offset=8.0)
    solar = true_solar_time(moment, urumqi)
    shift = (solar - moment).total_seconds() / 60.0
    assert shift == pytest.approx(-129.6 + equation_of_time(moment))
    assert solar.hour == 7


def test_xiao_han_opens_chou_month() -> None:
    term = find_previous_jie(datetime(2024, 1, 20, tzinfo=UTC))
    assert (term.name, term.branch, term.longitude) == ("Xiao Han", "Chou", 285)
    assert term.moment.astimezone(CST).date() == datetime(2024, 1, 6).date()


def test_lmt_correction_against_zone_meridian() -> None:
    kashgar = Location(longitude=75.99, utc_offset=8.0)
    assert lmt_correction(kashgar.longitude, kashgar.standard_meridian) == pytest.approx(-176.04)
