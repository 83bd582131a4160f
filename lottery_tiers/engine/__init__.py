"""Tier classification and ticket generation engines."""

from lottery_tiers.engine.tier_classifier import (
    apply_assignments,
    canonical_order,
    canonical_sort_key,
    classify,
)
from lottery_tiers.engine.tier_window import (
    resolve_for_game_mode,
    resolve_window,
    validate_tier_range,
)
from lottery_tiers.engine.ticket_generator import TicketGenerator
from lottery_tiers.engine.weighted_sampler import (
    NO_CANDIDATE,
    apply_diminishing_returns,
    apply_temperature,
    make_rng,
    pick_index_by_weight,
)

__all__ = [
    "apply_assignments",
    "canonical_order",
    "canonical_sort_key",
    "classify",
    "resolve_for_game_mode",
    "resolve_window",
    "validate_tier_range",
    "TicketGenerator",
    "NO_CANDIDATE",
    "apply_diminishing_returns",
    "apply_temperature",
    "make_rng",
    "pick_index_by_weight",
]
