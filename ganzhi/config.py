"""
GanZhi engine settings.

Values come from the environment (GANZHI_*) or a local .env file.
Thresholds here tune the special-pattern overrides and the
strength-balance method; labels only affect display text.
"""
from typing import Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GANZHI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Display
    language: str = "en"  # en, zh-hans, zh-hant, ja
    log_level: str = "WARNING"

    # Follow pattern (从格)
    follow_dominance_ratio: float = 0.5
    follow_support_ceiling: float = 3.5
    follow_margin_factor: float = 2.0

    # Vitalized pattern (专旺格), keyed by element value
    vitalized_strength_thresholds: Dict[str, float] = {
        "wood": 24.2,
        "fire": 23.9,
        "earth": 33.2,
        "metal": 24.4,
        "water": 23.8,
    }
    vitalized_officer_ceilings: Dict[str, float] = {
        "wood": 3.0,
        "fire": 3.0,
        "earth": 3.0,
        "metal": 3.0,
        "water": 3.0,
    }

    # Strength-balance method
    dominant_ratio: float = 0.55
    conflict_min_ratio: float = 0.35
    conflict_max_ratio: float = 0.50
    support_ratio_factor: float = 2.0


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached instance so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
