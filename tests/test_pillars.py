from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from ganzhi.astro_calendar import Location
from ganzhi.elements import Element, Polarity, TenGod
from ganzhi.pillars import (
    FourPillars,
    PillarRole,
    compute_four_pillars,
    day_pillar,
    hour_pillar,
    month_pillar,
    month_sector,
    resolve_local_time,
    year_pillar,
)
from ganzhi.symbols import stem

CST = timezone(timedelta(hours=8))


def _labels(chart: FourPillars) -> list:
    return [p.label() for _, p in chart.items()]


def test_known_chart_beijing_olympics() -> None:
    chart = compute_four_pillars(datetime(2008, 8, 8, 20, 8), tz=CST)
    assert _labels(chart) == ["Wu-Zi", "Geng-Shen", "Geng-Chen", "Bing-Xu"]


def test_aware_moment_gives_same_chart() -> None:
    utc = datetime(2008, 8, 8, 12, 8, tzinfo=timezone.utc)
    assert compute_four_pillars(utc, tz=CST) == compute_four_pillars(datetime(2008, 8, 8, 20, 8), tz=CST)


def test_hour_rollover_uses_next_day_stem() -> None:
    chart = compute_four_pillars(datetime(2008, 8, 8, 23, 30), tz=CST)
    assert chart.day.label() == "Geng-Chen"
    assert chart.hour.label() == "Wu-Zi"


def test_early_zi_hour_uses_own_day_stem() -> None:
    chart = compute_four_pillars(datetime(2008, 8, 8, 0, 30), tz=CST)
    assert chart.day.label() == "Geng-Chen"
    assert chart.hour.label() == "Bing-Zi"


def test_day_pillar_epoch_and_known_day() -> None:
    assert day_pillar(datetime(2000, 1, 1)).index == 54
    assert day_pillar(datetime(2000, 1, 2)).index == 55
    assert day_pillar(datetime(1999, 12, 31)).index == 53
    assert day_pillar(datetime(2008, 8, 8)).label() == "Geng-Chen"


def test_day_pillar_ignores_time_of_day() -> None:
    assert day_pillar(datetime(2008, 8, 8, 0, 1)) == day_pillar(datetime(2008, 8, 8, 23, 59))


def test_year_turns_at_li_chun() -> None:
    before = compute_four_pillars(datetime(2024, 2, 3, 12, 0), tz=CST)
    after = compute_four_pillars(datetime(2024, 2, 5, 12, 0), tz=CST)
    assert before.year.label() == "Gui-Mao"
    assert before.month.branch.pinyin == "Chou"
    assert after.year.label() == "Jia-Chen"
    assert after.month.label() == "Bing-Yin"


def test_year_pillar_after_li_chun_in_late_year() -> None:
    assert year_pillar(datetime(1984, 12, 31), 280.0).label() == "Jia-Zi"
    assert year_pillar(datetime(1985, 1, 31), 310.0).label() == "Jia-Zi"


@pytest.mark.parametrize("year_stem, expected", [
    ("Jia", "Bing-Yin"),
    ("Ji", "Bing-Yin"),
    ("Yi", "Wu-Yin"),
    ("Bing", "Geng-Yin"),
    ("Ding", "Ren-Yin"),
    ("Wu", "Jia-Yin"),
])
def test_five_tigers_month_stem(year_stem: str, expected: str) -> None:
    assert month_pillar(stem(year_stem), 316.0).label() == expected


def test_month_sectors() -> None:
    assert month_sector(315.0) == 0
    assert month_sector(314.9) == 11
    assert month_sector(136.0) == 6
    assert month_pillar(stem("Wu"), 136.0).label() == "Geng-Shen"


@pytest.mark.parametrize("day_stem, hour, expected", [
    ("Jia", 0, "Jia-Zi"),
    ("Jia", 1, "Yi-Chou"),
    ("Ji", 12, "Geng-Wu"),
    ("Geng", 20, "Bing-Xu"),
    ("Gui", 22, "Gui-Hai"),
    ("Gui", 23, "Jia-Zi"),
])
def test_five_rats_hour_pillar(day_stem: str, hour: int, expected: str) -> None:
    assert hour_pillar(stem(day_stem), hour).label() == expected


def test_true_solar_time_changes_hour_branch() -> None:
    moment = datetime(2024, 6, 15, 10, 0)
    urumqi = Location(longitude=87.6, utc_offset=8.0)
    plain = compute_four_pillars(moment, tz=CST)
    corrected = compute_four_pillars(moment, location=urumqi)
    assert plain.hour.branch.pinyin == "Si"
    assert corrected.hour.branch.pinyin == "Chen"
    assert corrected.day == plain.day


def test_true_solar_time_moves_chart_back_across_li_chun() -> None:
    """An hour after Li Chun on the clock, but before it in solar time at 75E."""
    moment = datetime(2024, 2, 4, 17, 21)
    kashgar_meridian = Location(longitude=75.0, utc_offset=8.0)
    plain = compute_four_pillars(moment, tz=CST)
    corrected = compute_four_pillars(moment, location=kashgar_meridian)
    assert _labels(plain)[:2] == ["Jia-Chen", "Bing-Yin"]
    assert _labels(corrected)[:2] == ["Gui-Mao", "Yi-Chou"]
    local = resolve_local_time(moment, kashgar_meridian)
    assert local.hour * 60 + local.minute + local.second / 60 == pytest.approx(14 * 60 + 7, abs=1.5)


def test_resolve_local_time_defaults_to_utc() -> None:
    local = resolve_local_time(datetime(2020, 1, 1, 5, 0))
    assert local.utcoffset() == timedelta(0)
    assert local.hour == 5


def test_resolve_local_time_converts_aware_moment() -> None:
    local = resolve_local_time(datetime(2020, 1, 1, 0, 0, tzinfo=timezone.utc), tz=CST)
    assert local.hour == 8


def test_chart_accessors(known_chart: FourPillars) -> None:
    assert known_chart.day_master.pinyin == "Geng"
    assert known_chart.month_branch.pinyin == "Shen"
    assert known_chart.pillar(PillarRole.HOUR).label() == "Bing-Xu"
    assert [r.position for r, _ in known_chart.items()] == [0, 1, 2, 3]
    assert str(known_chart) == "Wu-Zi | Geng-Shen | Geng-Chen | Bing-Xu"
    assert known_chart.description() == "戊子 庚申 庚辰 丙戌"


def test_stem_ten_gods_skip_day_master(known_chart: FourPillars) -> None:
    gods = known_chart.stem_ten_gods()
    assert PillarRole.DAY not in gods
    assert gods[PillarRole.YEAR] is TenGod.INDIRECT_RESOURCE
    assert gods[PillarRole.MONTH] is TenGod.FRIEND
    assert gods[PillarRole.HOUR] is TenGod.SEVEN_KILLINGS


def test_hidden_ten_gods(known_chart: FourPillars) -> None:
    hidden = known_chart.hidden_ten_gods()
    assert [(s.pinyin, g) for s, g in hidden[PillarRole.MONTH]] == [
        ("Geng", TenGod.FRIEND),
        ("Ren", TenGod.EATING_GOD),
        ("Wu", TenGod.INDIRECT_RESOURCE),
    ]


def test_counts(known_chart: FourPillars) -> None:
    elements = known_chart.element_counts()
    assert elements == {
        Element.WOOD: 0,
        Element.FIRE: 1,
        Element.EARTH: 3,
        Element.METAL: 3,
        Element.WATER: 1,
    }
    assert sum(known_chart.polarity_counts().values()) == 8
    assert known_chart.polarity_counts()[Polarity.YANG] == 8
    assert sum(known_chart.visible_ten_god_counts().values()) == 3


def test_to_dict_marks_day_master(known_chart: FourPillars) -> None:
    data = known_chart.to_dict()
    assert data["day"]["stem_ten_god"] == "day_master"
    assert data["hour"]["stem_ten_god"] == "seven_killings"
    assert data["year"]["label"] == "Wu-Zi"
