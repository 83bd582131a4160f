"""Application configuration using Pydantic Settings."""

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    APP_NAME: str = "Lottery Tier Generator"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Path | None = None

    # Tier cutoffs (cold = 100 - hot - mid)
    TIER_HOT_PCT: int = 20
    TIER_MID_PCT: int = 50

    # Generator
    GENERATOR_TEMPERATURE: float = 1.75
    GENERATOR_ALPHA: float = 0.30
    GENERATOR_SEED: int | None = None


settings = Settings()


def default_cutoffs():
    """Tier cutoffs from the current settings."""
    from lottery_tiers.schemas.numbers import TierCutoffs

    return TierCutoffs(hot_pct=settings.TIER_HOT_PCT, mid_pct=settings.TIER_MID_PCT)


def default_options():
    """Generator options from the current settings."""
    from lottery_tiers.schemas.generator import GeneratorOptions

    return GeneratorOptions(
        temperature=settings.GENERATOR_TEMPERATURE,
        alpha=settings.GENERATOR_ALPHA,
        seed=settings.GENERATOR_SEED,
    )
