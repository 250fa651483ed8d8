from __future__ import annotations

import pytest

from ganzhi.config import reset_settings
from ganzhi.elements import Element, Polarity, TenGod, TenGodGroup
from ganzhi.interactions import InteractionKind
from ganzhi.labels import LABELS, LANGUAGES, label, pattern_name
from ganzhi.pattern import AuxiliaryPattern, Pattern, PatternMethod
from ganzhi.pillars import PillarRole
from ganzhi.symbols import LifeStage
from ganzhi.thermal import MOISTURE_BANDS, TEMPERATURE_BANDS
from ganzhi.useful_god import UsefulGodMethod

LABELLED_ENUMS = [Element, Polarity, TenGod, TenGodGroup, LifeStage, PatternMethod,
                  UsefulGodMethod, InteractionKind, PillarRole]


@pytest.mark.parametrize("enum", LABELLED_ENUMS)
def test_every_member_has_every_language(enum) -> None:
    for member in enum:
        for language in LANGUAGES:
            assert label(member, language)


def test_thermal_bands_are_labelled() -> None:
    for band in TEMPERATURE_BANDS + MOISTURE_BANDS:
        assert set(LABELS[band]) == set(LANGUAGES)


@pytest.mark.parametrize("value, language, expected", [
    (Element.WOOD, "en", "Wood"),
    (Element.WOOD, "zh-hans", "木"),
    (TenGod.SEVEN_KILLINGS, "zh-hans", "七杀"),
    (TenGod.SEVEN_KILLINGS, "zh-hant", "七殺"),
    (LifeStage.LIN_GUAN, "zh-hant", "臨官"),
    ("scalding", "zh-hans", "极热"),
    ("freezing", "zh-hant", "極寒"),
    (TenGod.DIRECT_RESOURCE, "ja", "印綬"),
    (InteractionKind.STEM_COMBINATION, "ja", "干合"),
    ("parched", "ja", "極乾"),
])
def test_label_values(value, language: str, expected: str) -> None:
    assert label(value, language) == expected


def test_default_language_comes_from_settings(monkeypatch) -> None:
    assert label(Element.FIRE) == "Fire"
    monkeypatch.setenv("GANZHI_LANGUAGE", "zh-hans")
    reset_settings()
    assert label(Element.FIRE) == "火"


def test_unknown_language_is_rejected() -> None:
    with pytest.raises(ValueError):
        label(Element.FIRE, "fr")


def test_pattern_names() -> None:
    ordinary = Pattern(TenGod.DIRECT_OFFICER, PatternMethod.TRANSPIRED_MONTH_STEM)
    assert pattern_name(ordinary, "en") == "Direct Officer Pattern"
    assert pattern_name(ordinary, "zh-hans") == "正官格"

    jian_lu = Pattern(TenGod.FRIEND, PatternMethod.JIAN_LU, AuxiliaryPattern(TenGod.EATING_GOD))
    assert pattern_name(jian_lu, "zh-hans") == "建禄格 / 食神格"
    assert pattern_name(Pattern(TenGod.SEVEN_KILLINGS, PatternMethod.FOLLOW_SEVEN_KILLINGS), "zh-hant") == "從殺格"


def test_japanese_pattern_names() -> None:
    follow = Pattern(TenGod.SEVEN_KILLINGS, PatternMethod.FOLLOW_SEVEN_KILLINGS)
    assert pattern_name(follow, "ja") == "従殺格"
    ordinary = Pattern(TenGod.SEVEN_KILLINGS, PatternMethod.TRANSPIRED_MONTH_STEM)
    assert pattern_name(ordinary, "ja") == "偏官格"
