"""Pydantic schemas for number balls and tier classification."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from lottery_tiers.schemas.game import PoolType


class Tier(str, Enum):
    HOT = "HOT"
    MID = "MID"
    COLD = "COLD"

    @property
    def rank(self) -> int:
        return TIER_RANK[self]


TIER_RANK = {Tier.COLD: 0, Tier.MID: 1, Tier.HOT: 2}


class StatusChange(str, Enum):
    """How a number moved after the most recent tier recalculation."""

    PROMOTED = "PROMOTED"
    DEMOTED = "DEMOTED"
    NONE = "NONE"


class NumberBall(BaseModel):
    """One row per (pool, number value)."""

    model_config = {"frozen": True}

    pool_type: PoolType = PoolType.WHITE
    number_value: int
    total_count: int = 0
    tier_count: int = 0  # draws inside the active tier window
    last_drawn_date: date | None = None
    tier: Tier | None = None
    status_change: StatusChange = StatusChange.NONE


class TierCutoffs(BaseModel):
    model_config = {"frozen": True}

    hot_pct: int = Field(default=20, ge=0, le=100)
    mid_pct: int = Field(default=50, ge=0, le=100)

    @model_validator(mode="after")
    def _check_sum(self):
        if self.hot_pct + self.mid_pct > 100:
            raise ValueError("hot_pct + mid_pct must be <= 100")
        return self

    @property
    def cold_pct(self) -> int:
        return 100 - self.hot_pct - self.mid_pct


class TierWindow(BaseModel):
    """Inclusive date range over which tier counts are measured."""

    model_config = {"frozen": True}

    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self):
        if self.start > self.end:
            raise ValueError("TierWindow start cannot be after end")
        return self

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class TierAssignment(BaseModel):
    model_config = {"frozen": True}

    number_value: int
    tier: Tier
    status_change: StatusChange
