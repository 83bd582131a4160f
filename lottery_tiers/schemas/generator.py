"""Pydantic schemas for ticket groups, generator input and generated batches."""

from enum import Enum

from pydantic import BaseModel

from lottery_tiers.schemas.game import PoolType, Rules
from lottery_tiers.schemas.numbers import NumberBall


class GroupMode(str, Enum):
    COUNT = "COUNT"
    PERCENT = "PERCENT"


class TicketGroup(BaseModel):
    """Named tier mix for one pool. Only the fields of its mode are set."""

    model_config = {"frozen": True}

    id: int | None = None
    game_mode_id: int | None = None
    pool_type: PoolType
    group_mode: GroupMode
    group_key: str = ""
    display_name: str = ""

    hot_count: int | None = None
    mid_count: int | None = None
    cold_count: int | None = None

    hot_pct: int | None = None
    mid_pct: int | None = None
    cold_pct: int | None = None

    @property
    def is_count_mode(self) -> bool:
        return self.group_mode == GroupMode.COUNT

    @property
    def is_percent_mode(self) -> bool:
        return self.group_mode == GroupMode.PERCENT


class GeneratorOptions(BaseModel):
    model_config = {"frozen": True}

    temperature: float = 1.75
    alpha: float = 0.30
    seed: int | None = None


class GeneratorSpec(BaseModel):
    model_config = {"frozen": True}

    ticket_count: int
    white_group: TicketGroup | None = None
    red_group: TicketGroup | None = None
    exclude_last_draw_numbers: bool = False
    excluded_white: frozenset[int] = frozenset()
    excluded_red: frozenset[int] = frozenset()

    def group_for(self, pool_type: PoolType) -> TicketGroup | None:
        return self.white_group if pool_type == PoolType.WHITE else self.red_group

    def excluded_for(self, pool_type: PoolType) -> frozenset[int]:
        return self.excluded_white if pool_type == PoolType.WHITE else self.excluded_red

    @property
    def white_group_id(self) -> int | None:
        return self.white_group.id if self.white_group else None

    @property
    def red_group_id(self) -> int | None:
        return self.red_group.id if self.red_group else None


class GeneratorContext(BaseModel):
    model_config = {"frozen": True}

    rules: Rules | None
    white_balls: list[NumberBall] | None = None
    red_balls: list[NumberBall] | None = None
    options: GeneratorOptions = GeneratorOptions()

    def balls_for(self, pool_type: PoolType) -> list[NumberBall] | None:
        return self.white_balls if pool_type == PoolType.WHITE else self.red_balls


class GeneratedTicket(BaseModel):
    ticket_index: int
    spec_number: int
    white: list[int]
    red: list[int] = []
    white_group_key: str | None = None
    red_group_key: str | None = None


class GeneratedSpecResult(BaseModel):
    spec_number: int
    ticket_count: int
    white_group_id: int | None = None
    red_group_id: int | None = None
    exclude_last_draw_numbers: bool = False
    tickets: list[GeneratedTicket] = []
    warnings: list[str] = []

    def warn(self, message: str) -> None:
        self.warnings.append(message)


class GeneratedBatch(BaseModel):
    spec_results: list[GeneratedSpecResult] = []
    warnings: list[str] = []

    @property
    def tickets(self) -> list[GeneratedTicket]:
        return [t for spec in self.spec_results for t in spec.tickets]

    def warn(self, message: str) -> None:
        self.warnings.append(message)


# --- Service requests ---

class TicketSpecRequest(BaseModel):
    """One spec of a generation request, referring to stored groups by id."""

    ticket_count: int
    white_group_id: int | None = None
    red_group_id: int | None = None
    exclude_last_draw_numbers: bool = False
    excluded_white: set[int] = set()
    excluded_red: set[int] = set()
