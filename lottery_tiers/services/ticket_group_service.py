"""Ticket group service: validated construction and naming of tier mixes."""

import re

from lottery_tiers.errors import PreconditionError
from lottery_tiers.schemas.game import GameMode, PoolType
from lottery_tiers.schemas.generator import GroupMode, TicketGroup


def _require_non_negative(value: int | None, field: str) -> int:
    if value is None:
        raise PreconditionError(f"{field} is required")
    if value < 0:
        raise PreconditionError(f"{field} must be >= 0")
    return value


def _require_percent(value: int | None, field: str) -> int:
    if value is None:
        raise PreconditionError(f"{field} is required")
    if value < 0 or value > 100:
        raise PreconditionError(f"{field} must be between 0 and 100")
    return value


def resolve_game_mode_name(mode: GameMode) -> str:
    name = (mode.display_name or "").strip()
    return name or f"GAMEMODE_{mode.id}"


def _mix(group: TicketGroup) -> tuple[int | None, int | None, int | None]:
    if group.is_count_mode:
        return group.hot_count, group.mid_count, group.cold_count
    return group.hot_pct, group.mid_pct, group.cold_pct


def compute_group_key(game_mode_name: str, group: TicketGroup) -> str:
    base = re.sub(r"[^A-Z0-9]+", "_", game_mode_name.strip().upper()).strip("_")
    hot, mid, cold = _mix(group)
    return f"{base}_{group.pool_type.value}_HOT_{hot}_MID_{mid}_COLD_{cold}"


def compute_display_name(game_mode_name: str, group: TicketGroup) -> str:
    hot, mid, cold = _mix(group)
    return f"{game_mode_name} {group.pool_type.value} Hot {hot} Mid {mid} Cold {cold}"


def build_ticket_group(
    mode: GameMode,
    pool_type: PoolType,
    group_mode: GroupMode,
    hot: int | None,
    mid: int | None,
    cold: int | None,
    group_id: int | None = None,
) -> TicketGroup:
    """Validate a tier mix and return a named group for ``mode``.

    COUNT values must be >= 0; PERCENT values must lie in 0..100 and sum
    to 100.
    """
    if group_mode == GroupMode.COUNT:
        mix = {
            "hot_count": _require_non_negative(hot, "hot_count"),
            "mid_count": _require_non_negative(mid, "mid_count"),
            "cold_count": _require_non_negative(cold, "cold_count"),
        }
    elif group_mode == GroupMode.PERCENT:
        mix = {
            "hot_pct": _require_percent(hot, "hot_pct"),
            "mid_pct": _require_percent(mid, "mid_pct"),
            "cold_pct": _require_percent(cold, "cold_pct"),
        }
        if sum(mix.values()) != 100:
            raise PreconditionError("Percent groups must sum to 100", code="INVALID_GROUP")
    else:
        raise PreconditionError(f"Unsupported group mode: {group_mode}")

    group = TicketGroup(
        id=group_id,
        game_mode_id=mode.id,
        pool_type=pool_type,
        group_mode=group_mode,
        **mix,
    )
    name = resolve_game_mode_name(mode)
    return group.model_copy(update={
        "group_key": compute_group_key(name, group),
        "display_name": compute_display_name(name, group),
    })
