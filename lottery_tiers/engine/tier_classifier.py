"""HOT/MID/COLD tier classification of one pool's number balls.

Bucket sizes come from TierCutoffs; whatever is left over is COLD. When a
cutoff falls inside a group of balls sharing the same tier count, the group
is not split by raw position: everything strictly above the boundary count
goes in first, then the tied balls fill the remaining slots by recency and
number value.

Classification is pure. It returns one TierAssignment per number value and
leaves persisting the result to the caller.
"""

from collections.abc import Callable, Sequence
from math import floor

from loguru import logger

from lottery_tiers.schemas.numbers import (
    NumberBall,
    StatusChange,
    Tier,
    TierAssignment,
    TierCutoffs,
)


def _recency_key(ball: NumberBall) -> tuple:
    # last_drawn_date desc, nulls last
    if ball.last_drawn_date is None:
        return (1, 0)
    return (0, -ball.last_drawn_date.toordinal())


def recency_sort_key(ball: NumberBall) -> tuple:
    """Tie-break ordering: last drawn date desc (nulls last), number asc."""
    return (*_recency_key(ball), ball.number_value)


def canonical_sort_key(ball: NumberBall) -> tuple:
    """Tier count desc, last drawn date desc (nulls last), number asc."""
    return (-ball.tier_count, *recency_sort_key(ball))


def canonical_order(balls: Sequence[NumberBall]) -> list[NumberBall]:
    return sorted(balls, key=canonical_sort_key)


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def bucket_targets(n: int, cutoffs: TierCutoffs) -> tuple[int, int]:
    """Return (hot_target, mid_target) for a pool of n balls."""
    hot = _round_half_up(n * cutoffs.hot_pct / 100.0)
    mid = _round_half_up(n * cutoffs.mid_pct / 100.0)
    hot = max(0, min(hot, n))
    mid = max(0, min(mid, n - hot))
    return hot, mid


def pick_top_with_tie_safety(
    ordered: Sequence[NumberBall],
    target: int,
    score: Callable[[NumberBall], int] = lambda b: b.tier_count,
) -> list[NumberBall]:
    """Take the first ``target`` balls of ``ordered`` without splitting a tie.

    ``ordered`` must already be in canonical order.
    """
    if target <= 0 or not ordered:
        return []
    if target >= len(ordered):
        return list(ordered)

    top = list(ordered[:target])
    boundary = score(top[-1])

    tied = [b for b in ordered if score(b) == boundary]
    top_values = {b.number_value for b in top}
    split = any(b.number_value not in top_values for b in tied)
    if not split:
        return top

    picked = [b for b in ordered if score(b) > boundary]
    for ball in sorted(tied, key=recency_sort_key):
        if len(picked) >= target:
            break
        picked.append(ball)
    return picked


def _status_change(previous: Tier | None, current: Tier) -> StatusChange:
    if previous is None or previous == current:
        return StatusChange.NONE
    if current.rank > previous.rank:
        return StatusChange.PROMOTED
    return StatusChange.DEMOTED


def _assign_all(balls: Sequence[NumberBall], tier: Tier) -> dict[int, TierAssignment]:
    return {
        b.number_value: TierAssignment(
            number_value=b.number_value,
            tier=tier,
            status_change=_status_change(b.tier, tier),
        )
        for b in balls
    }


def classify(balls: Sequence[NumberBall], cutoffs: TierCutoffs) -> dict[int, TierAssignment]:
    """Assign a tier and status change to every ball of a single pool.

    Returns assignments keyed by number value, in canonical order.
    """
    if not balls:
        return {}

    ordered = canonical_order(balls)

    if all(b.tier_count == 0 for b in ordered):
        logger.debug("All {} balls have tier_count 0; classifying all as COLD", len(ordered))
        return _assign_all(ordered, Tier.COLD)

    hot_target, mid_target = bucket_targets(len(ordered), cutoffs)

    hot = pick_top_with_tie_safety(ordered, hot_target)
    hot_values = {b.number_value for b in hot}
    remaining = [b for b in ordered if b.number_value not in hot_values]
    mid = pick_top_with_tie_safety(remaining, mid_target)
    mid_values = {b.number_value for b in mid}

    if not hot and not mid:
        return _assign_all(ordered, Tier.COLD)

    result: dict[int, TierAssignment] = {}
    for b in ordered:
        if b.number_value in hot_values:
            tier = Tier.HOT
        elif b.number_value in mid_values:
            tier = Tier.MID
        else:
            tier = Tier.COLD
        result[b.number_value] = TierAssignment(
            number_value=b.number_value,
            tier=tier,
            status_change=_status_change(b.tier, tier),
        )

    logger.debug(
        "Classified {} balls: hot={} mid={} cold={}",
        len(ordered), len(hot), len(mid), len(ordered) - len(hot) - len(mid),
    )
    return result


def apply_assignments(
    balls: Sequence[NumberBall], assignments: dict[int, TierAssignment]
) -> list[NumberBall]:
    """Return copies of ``balls`` carrying their assigned tier and status change."""
    updated = []
    for b in balls:
        a = assignments.get(b.number_value)
        if a is None:
            updated.append(b)
        else:
            updated.append(b.model_copy(update={"tier": a.tier, "status_change": a.status_change}))
    return updated


def tier_counts_by_tier(assignments: dict[int, TierAssignment]) -> dict[Tier, int]:
    counts = {Tier.HOT: 0, Tier.MID: 0, Tier.COLD: 0}
    for a in assignments.values():
        counts[a.tier] += 1
    return counts

