"""Ticket generator service: validates a request and runs the engine."""

from collections.abc import Iterable, Sequence

import numpy as np
from loguru import logger

from lottery_tiers.config import default_options
from lottery_tiers.engine.ticket_generator import TicketGenerator
from lottery_tiers.errors import PreconditionError
from lottery_tiers.schemas.game import GameMode, PoolType
from lottery_tiers.schemas.generator import (
    GeneratedBatch,
    GeneratorContext,
    GeneratorOptions,
    GeneratorSpec,
    TicketGroup,
    TicketSpecRequest,
)
from lottery_tiers.schemas.numbers import NumberBall

_engine = TicketGenerator()


def _resolve_group(
    group_id: int | None,
    groups: dict[int, TicketGroup],
    mode: GameMode,
    expected_pool: PoolType,
) -> TicketGroup | None:
    if group_id is None:
        return None

    group = groups.get(group_id)
    if group is None:
        raise PreconditionError(
            f"TicketGroup not found: {group_id}",
            code="GROUP_NOT_FOUND",
            details={"group_id": group_id},
        )
    if group.game_mode_id != mode.id:
        raise PreconditionError(
            f"TicketGroup {group_id} does not belong to game mode {mode.id}.",
            code="GROUP_GAME_MODE_MISMATCH",
            details={"group_id": group_id, "game_mode_id": mode.id},
        )
    if group.pool_type != expected_pool:
        raise PreconditionError(
            f"TicketGroup {group_id} is for {group.pool_type.value} but expected {expected_pool.value}.",
            code="GROUP_POOL_MISMATCH",
            details={"group_id": group_id},
        )
    return group


def _balls_by_pool(balls: Iterable[NumberBall], pool_type: PoolType) -> list[NumberBall]:
    return sorted(
        (b for b in balls if b.pool_type == pool_type),
        key=lambda b: b.number_value,
    )


def build_specs(
    mode: GameMode,
    requests: Sequence[TicketSpecRequest],
    groups: dict[int, TicketGroup],
) -> list[GeneratorSpec]:
    """Turn request specs into engine specs, resolving last-draw exclusions."""
    latest_white = frozenset(mode.latest_winning(PoolType.WHITE))
    latest_red = frozenset(mode.latest_winning(PoolType.RED))

    specs = []
    for req in requests:
        if req.ticket_count <= 0:
            raise PreconditionError(
                "ticket_count must be > 0 for every spec.",
                code="INVALID_TICKET_COUNT",
                details={"ticket_count": req.ticket_count},
            )

        excluded_white = frozenset(req.excluded_white)
        excluded_red = frozenset(req.excluded_red)
        if req.exclude_last_draw_numbers:
            excluded_white |= latest_white
            excluded_red |= latest_red

        specs.append(GeneratorSpec(
            ticket_count=req.ticket_count,
            white_group=_resolve_group(req.white_group_id, groups, mode, PoolType.WHITE),
            red_group=_resolve_group(req.red_group_id, groups, mode, PoolType.RED),
            exclude_last_draw_numbers=req.exclude_last_draw_numbers,
            excluded_white=excluded_white,
            excluded_red=excluded_red,
        ))
    return specs


def generate_batch(
    mode: GameMode,
    balls: Sequence[NumberBall],
    requests: Sequence[TicketSpecRequest],
    groups: Iterable[TicketGroup] = (),
    options: GeneratorOptions | None = None,
    rng: np.random.Generator | None = None,
) -> GeneratedBatch:
    """Generate preview tickets for ``mode``. Nothing is persisted."""
    if mode.rules is None:
        raise PreconditionError(
            f"Rules are not set for game mode {mode.id}",
            code="RULES_REQUIRED",
            details={"game_mode_id": mode.id},
        )
    if not requests:
        raise PreconditionError(
            "ticket specs must contain at least one spec.", code="SPECS_REQUIRED"
        )

    group_index = {g.id: g for g in groups if g.id is not None}
    specs = build_specs(mode, requests, group_index)

    ctx = GeneratorContext(
        rules=mode.rules,
        white_balls=_balls_by_pool(balls, PoolType.WHITE),
        red_balls=_balls_by_pool(balls, PoolType.RED),
        options=options or default_options(),
    )

    batch = _engine.generate(ctx, specs, rng=rng)
    logger.info(
        "Generated {} tickets across {} specs for game mode {} ({} warnings)",
        len(batch.tickets), len(specs), mode.id, len(batch.warnings),
    )
    return batch
