"""Ticket generation engine: quick pick and tier-weighted group picks.

Each pool of each ticket is generated independently with one of three
strategies:

- quick pick: uniform over the pool range minus exclusions;
- COUNT group: a fixed number of picks from each tier bucket;
- PERCENT group: every pick rolls its tier from the group percentages.

Group picks are weighted by ``(1 + tier_count) * TIER_MULTIPLIER[tier]``,
shaped by temperature and by diminishing returns on values already drawn for
the same pool earlier in the call. An exhausted bucket falls through to the
next entry of ``FALLTHROUGH`` (never upward).

Insufficient data never raises. Every relaxation or fallback appends a
warning to the spec result and to the batch, and generation continues with
the best available substitute.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from math import floor

import numpy as np
from loguru import logger

from lottery_tiers.engine.weighted_sampler import (
    NO_CANDIDATE,
    apply_diminishing_returns,
    apply_temperature,
    make_rng,
    pick_index_by_weight,
)
from lottery_tiers.errors import PreconditionError
from lottery_tiers.schemas.game import PoolRules, PoolType
from lottery_tiers.schemas.generator import (
    GeneratedBatch,
    GeneratedSpecResult,
    GeneratedTicket,
    GeneratorContext,
    GeneratorOptions,
    GeneratorSpec,
    TicketGroup,
)
from lottery_tiers.schemas.numbers import NumberBall, Tier

TIER_MULTIPLIER = {Tier.HOT: 3.0, Tier.MID: 1.7, Tier.COLD: 1.0}

# Buckets consulted, in order, when a pick is requested from a tier
FALLTHROUGH: dict[Tier, tuple[Tier, ...]] = {
    Tier.HOT: (Tier.HOT, Tier.MID, Tier.COLD),
    Tier.MID: (Tier.MID, Tier.COLD),
    Tier.COLD: (Tier.COLD,),
}

# COUNT mode draws its configured counts in this order, and fills any
# shortfall starting from the first entry.
COUNT_FILL_ORDER = (Tier.HOT, Tier.MID, Tier.COLD)

POOL_ORDER = (PoolType.WHITE, PoolType.RED)

Warn = Callable[[str], None]


def base_weight(ball: NumberBall) -> float:
    return (1.0 + max(0, ball.tier_count)) * TIER_MULTIPLIER.get(ball.tier, 1.0)


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


def _clamp_pct(value: int | None) -> int:
    if value is None:
        return 0
    return max(0, min(100, value))


@dataclass
class TierBuckets:
    hot: list[NumberBall] = field(default_factory=list)
    mid: list[NumberBall] = field(default_factory=list)
    cold: list[NumberBall] = field(default_factory=list)

    @classmethod
    def from_balls(
        cls, balls: Sequence[NumberBall], excluded: frozenset[int], pool: PoolRules
    ) -> "TierBuckets":
        buckets = cls()
        for b in balls:
            if b.number_value in excluded:
                continue
            if not pool.min_value <= b.number_value <= pool.max_value:
                continue
            buckets.get(b.tier or Tier.COLD).append(b)
        return buckets

    def get(self, tier: Tier) -> list[NumberBall]:
        if tier == Tier.HOT:
            return self.hot
        if tier == Tier.MID:
            return self.mid
        return self.cold

    def values(self) -> list[int]:
        return [b.number_value for b in (*self.hot, *self.mid, *self.cold)]


def sample_uniform(
    values: Sequence[int], pick_count: int, allow_repeats: bool, rng: np.random.Generator
) -> list[int] | None:
    """Uniform draw of ``pick_count`` values, or None when infeasible."""
    if pick_count <= 0:
        return []
    if not values:
        return None
    if allow_repeats:
        return [int(values[i]) for i in rng.integers(0, len(values), size=pick_count)]
    if len(values) < pick_count:
        return None
    order = rng.permutation(len(values))
    return [int(values[i]) for i in order[:pick_count]]


class TicketGenerator:
    """Generates preview tickets for one game's rules and tier snapshots."""

    def generate(
        self,
        ctx: GeneratorContext,
        specs: Sequence[GeneratorSpec],
        rng: np.random.Generator | None = None,
    ) -> GeneratedBatch:
        if ctx is None or ctx.rules is None:
            raise PreconditionError("rules is required", code="RULES_REQUIRED")
        if not specs:
            raise PreconditionError("at least one generator spec is required", code="SPECS_REQUIRED")
        for spec in specs:
            if spec.ticket_count <= 0:
                raise PreconditionError(
                    "ticket_count must be > 0",
                    code="INVALID_TICKET_COUNT",
                    details={"ticket_count": spec.ticket_count},
                )

        if rng is None:
            rng = make_rng(ctx.options.seed)

        # Anti-dominance memory, per pool, shared by every ticket in this call
        used_counts: dict[PoolType, dict[int, int]] = {p: {} for p in POOL_ORDER}

        batch = GeneratedBatch()
        for spec_number, spec in enumerate(specs, start=1):
            spec_out = GeneratedSpecResult(
                spec_number=spec_number,
                ticket_count=spec.ticket_count,
                white_group_id=spec.white_group_id,
                red_group_id=spec.red_group_id,
                exclude_last_draw_numbers=spec.exclude_last_draw_numbers,
            )

            for ticket_index in range(1, spec.ticket_count + 1):
                picks = {
                    pool_type: self._generate_pool(
                        ctx, spec, pool_type, rng, used_counts[pool_type], spec_out.warn
                    )
                    for pool_type in POOL_ORDER
                }
                spec_out.tickets.append(GeneratedTicket(
                    ticket_index=ticket_index,
                    spec_number=spec_number,
                    white=picks[PoolType.WHITE],
                    red=picks[PoolType.RED],
                    white_group_key=spec.white_group.group_key if spec.white_group else None,
                    red_group_key=spec.red_group.group_key if spec.red_group else None,
                ))

            for message in spec_out.warnings:
                batch.warn(f"Spec {spec_number}: {message}")
            batch.spec_results.append(spec_out)

            if spec_out.warnings:
                logger.warning(
                    "Spec {}: {} relaxations or fallbacks while generating {} tickets",
                    spec_number, len(spec_out.warnings), spec.ticket_count,
                )

        return batch

    # -------------------------
    # Per pool dispatch
    # -------------------------

    def _generate_pool(
        self,
        ctx: GeneratorContext,
        spec: GeneratorSpec,
        pool_type: PoolType,
        rng: np.random.Generator,
        used: dict[int, int],
        warn: Warn,
    ) -> list[int]:
        pool = ctx.rules.pool(pool_type)
        if pool is None or pool.pick_count <= 0:
            return []

        excluded = spec.excluded_for(pool_type)
        picks = self._select(ctx, spec, pool, pool_type, excluded, rng, used, warn)

        if not pool.ordered:
            picks.sort()
        return picks

    def _select(
        self,
        ctx: GeneratorContext,
        spec: GeneratorSpec,
        pool: PoolRules,
        pool_type: PoolType,
        excluded: frozenset[int],
        rng: np.random.Generator,
        used: dict[int, int],
        warn: Warn,
    ) -> list[int]:
        group = spec.group_for(pool_type)
        if group is None:
            return self._quick_pick(pool, pool_type, excluded, rng, warn)

        if group.pool_type != pool_type:
            warn(f"{pool_type.value}: group pool type mismatch; falling back to quick pick for this pool.")
            return self._quick_pick(pool, pool_type, excluded, rng, warn)

        balls = ctx.balls_for(pool_type)
        if balls is None:
            warn(f"{pool_type.value}: tier list missing; falling back to quick pick for this pool.")
            return self._quick_pick(pool, pool_type, excluded, rng, warn)

        buckets = TierBuckets.from_balls(balls, excluded, pool)
        if not buckets.hot and not buckets.mid:
            warn(f"{pool_type.value}: Hot+Mid empty; treating pool as quick pick (all cold).")
            return self._quick_pick(pool, pool_type, excluded, rng, warn)

        if group.is_count_mode:
            return self._group_weighted_count(pool, pool_type, group, buckets, rng, used, ctx.options, warn)
        return self._group_weighted_percent(pool, pool_type, group, buckets, excluded, rng, used, ctx.options, warn)

    # -------------------------
    # Quick pick
    # -------------------------

    def _quick_pick(
        self,
        pool: PoolRules,
        pool_type: PoolType,
        excluded: frozenset[int],
        rng: np.random.Generator,
        warn: Warn,
    ) -> list[int]:
        candidates = [v for v in pool.values() if v not in excluded]

        if not candidates or (not pool.allow_repeats and len(candidates) < pool.pick_count):
            warn(f"{pool_type.value}: exclusions made quick pick impossible; relaxing exclusions for this pool.")
            candidates = list(pool.values())

        picks = sample_uniform(candidates, pool.pick_count, pool.allow_repeats, rng)
        if picks is None:
            warn(f"{pool_type.value}: pool range cannot satisfy pick count; returning no picks.")
            return []
        return picks

    def _quick_pick_from_buckets(
        self,
        pool: PoolRules,
        pool_type: PoolType,
        buckets: TierBuckets,
        excluded: frozenset[int],
        rng: np.random.Generator,
        warn: Warn,
    ) -> list[int]:
        picks = sample_uniform(buckets.values(), pool.pick_count, pool.allow_repeats, rng)
        if picks is not None:
            return picks

        warn(f"{pool_type.value}: not enough tier candidates for quick pick; using the full pool range.")
        return self._quick_pick(pool, pool_type, excluded, rng, warn)

    # -------------------------
    # Weighted pick core
    # -------------------------

    def _pick_one(
        self,
        candidates: Sequence[NumberBall],
        picks: list[int],
        allow_repeats: bool,
        rng: np.random.Generator,
        used: dict[int, int],
        options: GeneratorOptions,
    ) -> bool:
        if not candidates:
            return False

        usable = candidates
        if not allow_repeats:
            already = set(picks)
            usable = [b for b in candidates if b.number_value not in already]
            if not usable:
                return False

        # Scaled into (0, 1] so low temperatures cannot overflow
        bases = [base_weight(b) for b in usable]
        heaviest = max(bases)
        weights = [
            apply_diminishing_returns(
                apply_temperature(w / heaviest, options.temperature),
                used.get(b.number_value, 0),
                options.alpha,
            )
            for b, w in zip(usable, bases)
        ]

        idx = pick_index_by_weight(weights, rng)
        if idx == NO_CANDIDATE:
            return False

        value = usable[idx].number_value
        picks.append(value)
        used[value] = used.get(value, 0) + 1
        return True

    def _pick_with_fallthrough(
        self,
        tier: Tier,
        buckets: TierBuckets,
        picks: list[int],
        allow_repeats: bool,
        rng: np.random.Generator,
        used: dict[int, int],
        options: GeneratorOptions,
    ) -> bool:
        return any(
            self._pick_one(buckets.get(t), picks, allow_repeats, rng, used, options)
            for t in FALLTHROUGH[tier]
        )

    # -------------------------
    # Group weighted: COUNT
    # -------------------------

    def _group_weighted_count(
        self,
        pool: PoolRules,
        pool_type: PoolType,
        group: TicketGroup,
        buckets: TierBuckets,
        rng: np.random.Generator,
        used: dict[int, int],
        options: GeneratorOptions,
        warn: Warn,
    ) -> list[int]:
        requested = {
            Tier.HOT: max(0, group.hot_count or 0),
            Tier.MID: max(0, group.mid_count or 0),
            Tier.COLD: max(0, group.cold_count or 0),
        }
        if sum(requested.values()) != pool.pick_count:
            warn(f"{pool_type.value}: COUNT group does not match pick count; attempting tier fall-down fill.")

        picks: list[int] = []
        for tier in COUNT_FILL_ORDER:
            for _ in range(requested[tier]):
                if len(picks) >= pool.pick_count:
                    break
                if not self._pick_with_fallthrough(tier, buckets, picks, pool.allow_repeats, rng, used, options):
                    warn(
                        f"{pool_type.value}: tier {tier.value} empty after exclusions; "
                        "unable to fill requested count."
                    )
                    break

        while len(picks) < pool.pick_count:
            if not self._pick_with_fallthrough(
                COUNT_FILL_ORDER[0], buckets, picks, pool.allow_repeats, rng, used, options
            ):
                warn(f"{pool_type.value}: unable to fill remaining picks; bucket candidates empty.")
                break

        return picks

    # -------------------------
    # Group weighted: PERCENT
    # -------------------------

    def _group_weighted_percent(
        self,
        pool: PoolRules,
        pool_type: PoolType,
        group: TicketGroup,
        buckets: TierBuckets,
        excluded: frozenset[int],
        rng: np.random.Generator,
        used: dict[int, int],
        options: GeneratorOptions,
        warn: Warn,
    ) -> list[int]:
        hot_pct = _clamp_pct(group.hot_pct)
        mid_pct = _clamp_pct(group.mid_pct)
        cold_pct = _clamp_pct(group.cold_pct)

        total = hot_pct + mid_pct + cold_pct
        if total != 100:
            warn(f"{pool_type.value}: PERCENT group does not sum to 100; renormalizing.")
            if total <= 0:
                warn(f"{pool_type.value}: all percentages are 0; treating pool as quick pick.")
                return self._quick_pick_from_buckets(pool, pool_type, buckets, excluded, rng, warn)
            hot_pct = _round_half_up(hot_pct * 100.0 / total)
            mid_pct = _round_half_up(mid_pct * 100.0 / total)

        picks: list[int] = []
        for _ in range(pool.pick_count):
            chosen = self._roll_tier(hot_pct, mid_pct, rng)
            if not self._pick_with_fallthrough(chosen, buckets, picks, pool.allow_repeats, rng, used, options):
                warn(
                    f"{pool_type.value}: no candidates available while picking by percent; "
                    "treating pool as quick pick."
                )
                return self._quick_pick_from_buckets(pool, pool_type, buckets, excluded, rng, warn)

        return picks

    @staticmethod
    def _roll_tier(hot_pct: int, mid_pct: int, rng: np.random.Generator) -> Tier:
        r = int(rng.integers(0, 100))
        if r < hot_pct:
            return Tier.HOT
        if r < hot_pct + mid_pct:
            return Tier.MID
        return Tier.COLD
