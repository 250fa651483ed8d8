"""
Display labels.

Localised names keyed by (value, language). The core never reads these;
they only feed reports, the CLI and the JSON payload.
"""

from typing import Optional

from ganzhi.config import get_settings
from ganzhi.elements import Element, Polarity, TenGod, TenGodGroup
from ganzhi.interactions import InteractionKind
from ganzhi.pattern import Pattern, PatternKind, PatternMethod
from ganzhi.pillars import PillarRole
from ganzhi.symbols import LifeStage
from ganzhi.useful_god import UsefulGodMethod

LANGUAGES = ("en", "zh-hans", "zh-hant", "ja")


def _row(en, hans, hant=None, ja=None):
    hant = hant or hans
    return {"en": en, "zh-hans": hans, "zh-hant": hant, "ja": ja or hant}


LABELS = {
    Element.WOOD: _row("Wood", "木"),
    Element.FIRE: _row("Fire", "火"),
    Element.EARTH: _row("Earth", "土"),
    Element.METAL: _row("Metal", "金"),
    Element.WATER: _row("Water", "水"),

    Polarity.YANG: _row("Yang", "阳", "陽"),
    Polarity.YIN: _row("Yin", "阴", "陰"),

    TenGod.FRIEND: _row("Friend", "比肩"),
    TenGod.ROB_WEALTH: _row("Rob Wealth", "劫财", "劫財"),
    TenGod.EATING_GOD: _row("Eating God", "食神"),
    TenGod.HURTING_OFFICER: _row("Hurting Officer", "伤官", "傷官"),
    TenGod.INDIRECT_WEALTH: _row("Indirect Wealth", "偏财", "偏財"),
    TenGod.DIRECT_WEALTH: _row("Direct Wealth", "正财", "正財"),
    TenGod.SEVEN_KILLINGS: _row("Seven Killings", "七杀", "七殺", "偏官"),
    TenGod.DIRECT_OFFICER: _row("Direct Officer", "正官"),
    TenGod.INDIRECT_RESOURCE: _row("Indirect Resource", "偏印"),
    TenGod.DIRECT_RESOURCE: _row("Direct Resource", "正印", ja="印綬"),

    TenGodGroup.PEER: _row("Peer", "比劫"),
    TenGodGroup.OUTPUT: _row("Output", "食伤", "食傷"),
    TenGodGroup.WEALTH: _row("Wealth", "财星", "財星"),
    TenGodGroup.OFFICER: _row("Officer", "官杀", "官殺", "官星"),
    TenGodGroup.RESOURCE: _row("Resource", "印星"),

    LifeStage.CHANG_SHENG: _row("Birth", "长生", "長生"),
    LifeStage.MU_YU: _row("Bath", "沐浴"),
    LifeStage.GUAN_DAI: _row("Attire", "冠带", "冠帶", "冠帯"),
    LifeStage.LIN_GUAN: _row("Official", "临官", "臨官", "建禄"),
    LifeStage.DI_WANG: _row("Peak", "帝旺"),
    LifeStage.SHUAI: _row("Decline", "衰"),
    LifeStage.BING: _row("Sickness", "病"),
    LifeStage.SI: _row("Death", "死"),
    LifeStage.MU: _row("Grave", "墓"),
    LifeStage.JUE: _row("Extinction", "绝", "絕", "絶"),
    LifeStage.TAI: _row("Conception", "胎"),
    LifeStage.YANG: _row("Nourishment", "养", "養"),

    PatternMethod.JIAN_LU: _row("Jian Lu", "建禄格", "建祿格", "建禄格"),
    PatternMethod.YANG_REN: _row("Yang Ren", "羊刃格"),
    PatternMethod.YUE_REN: _row("Yue Ren", "月刃格"),
    PatternMethod.TRANSPIRED_MONTH_STEM: _row("Transpired in month stem", "月支藏干透出月干",
                                              ja="月支蔵干透出月干"),
    PatternMethod.TRANSPIRED_YEAR_STEM: _row("Transpired in year stem", "月支藏干透出年干",
                                             ja="月支蔵干透出年干"),
    PatternMethod.TRANSPIRED_HOUR_STEM: _row("Transpired in hour stem", "月支藏干透出时干", "月支藏干透出時干",
                                             "月支蔵干透出時干"),
    PatternMethod.MONTH_BRANCH_MAIN_QI: _row("Month branch main qi", "月支本气", "月支本氣", "月支本気"),
    PatternMethod.FOLLOW_SEVEN_KILLINGS: _row("Follow Seven Killings", "从杀格", "從殺格", "従殺格"),
    PatternMethod.FOLLOW_WEALTH: _row("Follow Wealth", "从财格", "從財格", "従財格"),
    PatternMethod.FOLLOW_CHILD: _row("Follow Child", "从儿格", "從兒格", "従児格"),
    PatternMethod.QU_ZHI: _row("Qu Zhi (Wood)", "曲直格"),
    PatternMethod.YAN_SHANG: _row("Yan Shang (Fire)", "炎上格"),
    PatternMethod.JIA_SE: _row("Jia Se (Earth)", "稼穑格", "稼穡格"),
    PatternMethod.CONG_GE: _row("Cong Ge (Metal)", "从革格", "從革格", "従革格"),
    PatternMethod.RUN_XIA: _row("Run Xia (Water)", "润下格", "潤下格"),
    PatternMethod.DOMINANT_STRENGTH: _row("Dominant strength", "力量突出"),

    UsefulGodMethod.PATTERN: _row("Pattern method", "格局法"),
    UsefulGodMethod.STRENGTH_BALANCE: _row("Strength balance", "旺衰法", ja="扶抑法"),
    UsefulGodMethod.CLIMATE: _row("Climate adjustment", "调候法", "調候法"),

    InteractionKind.STEM_COMBINATION: _row("Stem Combination", "天干五合", ja="干合"),
    InteractionKind.STEM_CLASH: _row("Stem Clash", "天干相冲", "天干相衝", "相冲"),
    InteractionKind.SIX_HARMONY: _row("Branch Six Harmony", "地支六合", ja="支合"),
    InteractionKind.TRIPLE_HARMONY: _row("Branch Triple Harmony", "地支三合", ja="三合"),
    InteractionKind.DIRECTIONAL: _row("Branch Directional Harmony", "地支三会", "地支三會", "三会"),
    InteractionKind.CLASH: _row("Branch Clash", "地支六冲", "地支六衝", "六冲"),
    InteractionKind.HARM: _row("Branch Harm", "地支六害", ja="六害"),
    InteractionKind.PUNISHMENT: _row("Branch Punishment", "地支相刑", ja="刑"),
    InteractionKind.DESTRUCTION: _row("Branch Destruction", "地支相破", ja="破"),
    InteractionKind.FU_YIN: _row("Fu Yin", "伏吟"),
    InteractionKind.FAN_YIN: _row("Fan Yin", "反吟"),

    PillarRole.YEAR: _row("Year", "年柱"),
    PillarRole.MONTH: _row("Month", "月柱"),
    PillarRole.DAY: _row("Day", "日柱"),
    PillarRole.HOUR: _row("Hour", "时柱", "時柱"),

    # Thermal bands
    "scalding": _row("Scalding", "极热", "極熱"),
    "warm": _row("Warm", "温热", "溫熱", "暖"),
    "neutral": _row("Neutral", "中和"),
    "chilly": _row("Chilly", "偏寒", ja="寒"),
    "freezing": _row("Freezing", "极寒", "極寒"),
    "soggy": _row("Soggy", "极湿", "極濕", "極湿"),
    "moist": _row("Moist", "湿润", "濕潤", "湿"),
    "balanced": _row("Balanced", "中和"),
    "dry": _row("Dry", "干燥", "乾燥", "乾"),
    "parched": _row("Parched", "极燥", "極燥", "極乾"),
}

_PATTERN_SUFFIX = {"en": " Pattern", "zh-hans": "格", "zh-hant": "格", "ja": "格"}


def _language(language: Optional[str]) -> str:
    language = language or get_settings().language
    if language not in LANGUAGES:
        raise ValueError(f"Unsupported language: {language!r} (expected one of {', '.join(LANGUAGES)})")
    return language


def label(value, language: Optional[str] = None) -> str:
    """Display name of an enum member or thermal band; unknown values fall back to str()."""
    row = LABELS.get(value)
    if row is None:
        return getattr(value, "value", str(value))
    return row[_language(language)]


def pattern_name(pattern: Pattern, language: Optional[str] = None) -> str:
    """
    Display name of a pattern, e.g. 'Direct Officer Pattern' or '建禄格'.

    Life-stage and special patterns carry their own names; the others are
    named after their Ten God. An auxiliary pattern is appended after '/'.
    """
    language = _language(language)
    if pattern.kind in (PatternKind.LIFE_STAGE, PatternKind.FOLLOW, PatternKind.VITALIZED):
        name = label(pattern.method, language)
    else:
        name = label(pattern.ten_god, language) + _PATTERN_SUFFIX[language]
    if pattern.auxiliary is not None:
        name += " / " + label(pattern.auxiliary.ten_god, language) + _PATTERN_SUFFIX[language]
    return name
