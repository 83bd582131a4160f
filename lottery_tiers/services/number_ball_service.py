"""Number ball service: initialize, count draws and recompute tiers.

All functions take ball snapshots and return new lists; persisting them is
the caller's job.
"""

from collections.abc import Sequence
from datetime import date

from loguru import logger

from lottery_tiers.config import default_cutoffs
from lottery_tiers.engine.tier_classifier import (
    apply_assignments,
    canonical_order,
    classify,
    tier_counts_by_tier,
)
from lottery_tiers.engine.tier_window import resolve_for_game_mode, validate_tier_range
from lottery_tiers.errors import PreconditionError
from lottery_tiers.schemas.game import DrawResult, GameMode, PoolType, Rules
from lottery_tiers.schemas.numbers import NumberBall, Tier, TierCutoffs, TierWindow


def _require_rules(mode: GameMode) -> Rules:
    if mode.rules is None:
        raise PreconditionError(
            f"Rules are not set for game mode {mode.id}",
            code="RULES_REQUIRED",
            details={"game_mode_id": mode.id},
        )
    return mode.rules


def initialize_balls(rules: Rules) -> list[NumberBall]:
    """One COLD ball per value of the white pool and, if present, the red pool."""
    balls = [
        NumberBall(pool_type=PoolType.WHITE, number_value=v, tier=Tier.COLD)
        for v in rules.white.values()
    ]
    if rules.red is not None and rules.red.pick_count > 0:
        balls.extend(
            NumberBall(pool_type=PoolType.RED, number_value=v, tier=Tier.COLD)
            for v in rules.red.values()
        )
    return balls


def filter_draws_in_window(draws: Sequence[DrawResult], window: TierWindow) -> list[DrawResult]:
    return [d for d in draws if window.contains(d.draw_date)]


def apply_counts(
    balls: Sequence[NumberBall], draws: Sequence[DrawResult], *, total: bool
) -> list[NumberBall]:
    """Bump total_count (total=True) or tier_count for every drawn number.

    last_drawn_date always advances to the most recent draw seen.
    """
    index = {(b.pool_type, b.number_value): i for i, b in enumerate(balls)}
    updated = list(balls)

    for draw in draws:
        for pool_type in PoolType:
            for value in draw.picks(pool_type):
                i = index.get((pool_type, value))
                if i is None:
                    continue
                ball = updated[i]
                if total:
                    changes = {"total_count": ball.total_count + 1}
                else:
                    changes = {"tier_count": ball.tier_count + 1}
                if ball.last_drawn_date is None or draw.draw_date > ball.last_drawn_date:
                    changes["last_drawn_date"] = draw.draw_date
                updated[i] = ball.model_copy(update=changes)

    return updated


def classify_pools(balls: Sequence[NumberBall], cutoffs: TierCutoffs) -> list[NumberBall]:
    """Run tier classification separately for each pool."""
    updated = list(balls)
    for pool_type in PoolType:
        pool_balls = [b for b in updated if b.pool_type == pool_type]
        if not pool_balls:
            continue
        assignments = classify(pool_balls, cutoffs)
        by_value = {b.number_value: b for b in apply_assignments(pool_balls, assignments)}
        updated = [
            by_value[b.number_value] if b.pool_type == pool_type else b
            for b in updated
        ]
        counts = tier_counts_by_tier(assignments)
        logger.debug(
            "{} pool tiers: hot={} mid={} cold={}",
            pool_type.value, counts[Tier.HOT], counts[Tier.MID], counts[Tier.COLD],
        )
    return updated


def rebuild_for_game_mode(
    mode: GameMode,
    history: Sequence[DrawResult],
    today: date | None = None,
    cutoffs: TierCutoffs | None = None,
) -> list[NumberBall]:
    """Recreate every ball from scratch and recompute counts and tiers.

    Used on first setup and after a rules/format change.
    """
    rules = _require_rules(mode)
    today = today or date.today()
    cutoffs = cutoffs or default_cutoffs()

    balls = initialize_balls(rules)
    balls = apply_counts(balls, history, total=True)

    window = resolve_for_game_mode(mode, today)
    balls = apply_counts(balls, filter_draws_in_window(history, window), total=False)

    logger.info(
        "Rebuilt {} balls for game mode {} from {} draws (window {}..{})",
        len(balls), mode.id, len(history), window.start, window.end,
    )
    return classify_pools(balls, cutoffs)


def apply_new_draw(
    mode: GameMode,
    draw: DrawResult,
    balls: Sequence[NumberBall],
    today: date | None = None,
    cutoffs: TierCutoffs | None = None,
) -> list[NumberBall]:
    """Fold a newly saved draw into the counts and reclassify."""
    _require_rules(mode)
    today = today or date.today()
    cutoffs = cutoffs or default_cutoffs()

    updated = apply_counts(balls, [draw], total=True)

    window = resolve_for_game_mode(mode, today)
    if window.contains(draw.draw_date):
        updated = apply_counts(updated, [draw], total=False)
    else:
        logger.debug("Draw {} is outside tier window; tier counts unchanged", draw.draw_date)

    return classify_pools(updated, cutoffs)


def recalculate_tiers(
    mode: GameMode,
    history: Sequence[DrawResult],
    balls: Sequence[NumberBall],
    today: date | None = None,
    cutoffs: TierCutoffs | None = None,
) -> list[NumberBall]:
    """Recount tier_count for the current window and reclassify.

    total_count is left untouched.
    """
    _require_rules(mode)
    today = today or date.today()
    cutoffs = cutoffs or default_cutoffs()

    reset = [b.model_copy(update={"tier_count": 0}) for b in balls]
    window = resolve_for_game_mode(mode, today)
    recounted = apply_counts(reset, filter_draws_in_window(history, window), total=False)
    return classify_pools(recounted, cutoffs)


def update_tier_range(
    mode: GameMode,
    start: date | None,
    end: date | None,
    history: Sequence[DrawResult],
    balls: Sequence[NumberBall],
    today: date | None = None,
    cutoffs: TierCutoffs | None = None,
) -> tuple[GameMode, list[NumberBall]]:
    """Store a new tier range on the game mode and recompute tiers for it."""
    today = today or date.today()
    validate_tier_range(start, end, today)

    updated_mode = mode.model_copy(
        update={"tier_range_start_date": start, "tier_range_end_date": end}
    )
    logger.info("Tier range for game mode {} set to {}..{}", mode.id, start, end)
    return updated_mode, recalculate_tiers(updated_mode, history, balls, today, cutoffs)


def tier_matrix(balls: Sequence[NumberBall]) -> dict[PoolType, dict[Tier, list[NumberBall]]]:
    """Balls grouped by pool and tier, each list in canonical order."""
    matrix = {p: {t: [] for t in Tier} for p in PoolType}
    for ball in canonical_order(balls):
        matrix[ball.pool_type][ball.tier or Tier.COLD].append(ball)
    return matrix
