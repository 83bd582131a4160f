"""Pydantic schemas for game rules and draw history."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, model_validator


class PoolType(str, Enum):
    WHITE = "WHITE"
    RED = "RED"


class PoolRules(BaseModel):
    model_config = {"frozen": True}

    min_value: int
    max_value: int
    pick_count: int
    ordered: bool = False
    allow_repeats: bool = False

    @model_validator(mode="after")
    def _check_range(self):
        if self.min_value > self.max_value:
            raise ValueError("min_value must be <= max_value")
        if self.pick_count < 0:
            raise ValueError("pick_count must be >= 0")
        return self

    def values(self) -> range:
        return range(self.min_value, self.max_value + 1)


class Rules(BaseModel):
    model_config = {"frozen": True}

    format_start_date: date | None = None
    white: PoolRules
    red: PoolRules | None = None  # games without a bonus pool

    def pool(self, pool_type: PoolType) -> PoolRules | None:
        return self.white if pool_type == PoolType.WHITE else self.red


class GameMode(BaseModel):
    model_config = {"frozen": True}

    id: int
    display_name: str = ""
    rules: Rules | None = None
    tier_range_start_date: date | None = None
    tier_range_end_date: date | None = None
    # Numbers of the most recent draw, used by exclude_last_draw_numbers
    latest_white_winning: list[int] = []
    latest_red_winning: list[int] = []

    def latest_winning(self, pool_type: PoolType) -> list[int]:
        if pool_type == PoolType.WHITE:
            return self.latest_white_winning
        return self.latest_red_winning


class DrawResult(BaseModel):
    model_config = {"frozen": True}

    draw_date: date
    white: list[int]
    red: list[int] = []

    def picks(self, pool_type: PoolType) -> list[int]:
        return self.white if pool_type == PoolType.WHITE else self.red
