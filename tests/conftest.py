from __future__ import annotations

import pytest

from ganzhi.config import reset_settings
from ganzhi.pillars import FourPillars


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Every test starts from default settings, untouched by the caller's environment."""
    for name in ("GANZHI_LANGUAGE", "GANZHI_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


def make_chart(year: str, month: str, day: str, hour: str) -> FourPillars:
    return FourPillars.from_strings(year, month, day, hour)


@pytest.fixture
def known_chart() -> FourPillars:
    """2008-08-08 20:08 Beijing time."""
    return make_chart("Wu-Zi", "Geng-Shen", "Geng-Chen", "Bing-Xu")


@pytest.fixture
def wealth_chart() -> FourPillars:
    """Jia Day Master in a Yin month surrounded by Wu earth."""
    return make_chart("Wu-Xu", "Jia-Yin", "Jia-Xu", "Wu-Xu")


@pytest.fixture
def killings_chart() -> FourPillars:
    """Rootless Yi wood among Xin-You metal."""
    return make_chart("Xin-You", "Xin-You", "Yi-You", "Xin-You")


@pytest.fixture
def winter_chart() -> FourPillars:
    return make_chart("Jia-Zi", "Jia-Zi", "Jia-Zi", "Jia-Zi")
