"""Resolve the date window over which tier counts are measured."""

from datetime import date

from lottery_tiers.errors import PreconditionError
from lottery_tiers.schemas.game import GameMode, Rules
from lottery_tiers.schemas.numbers import TierWindow


def resolve_window(
    rules: Rules | None,
    start: date | None,
    end: date | None,
    today: date,
) -> TierWindow:
    """Fill in missing window bounds.

    - both None  -> format start (or date.min) .. today
    - start only -> start .. today
    - end only   -> format start (or date.min) .. end
    """
    if rules is None:
        raise PreconditionError(
            "Rules are required to resolve the tier window.", code="RULES_REQUIRED"
        )

    floor = rules.format_start_date or date.min
    return TierWindow(
        start=start if start is not None else floor,
        end=end if end is not None else today,
    )


def resolve_for_game_mode(mode: GameMode, today: date) -> TierWindow:
    return resolve_window(mode.rules, mode.tier_range_start_date, mode.tier_range_end_date, today)


def validate_tier_range(start: date | None, end: date | None, today: date) -> None:
    """Reject a configured tier range before it is stored on a game mode."""
    if start is not None and start > today:
        raise PreconditionError(
            "tier_range_start_date cannot be in the future",
            code="INVALID_TIER_RANGE",
            details={"tier_range_start_date": start, "today": today},
        )
    if end is not None and end > today:
        raise PreconditionError(
            "tier_range_end_date cannot be in the future",
            code="INVALID_TIER_RANGE",
            details={"tier_range_end_date": end, "today": today},
        )
    if start is not None and end is not None and start > end:
        raise PreconditionError(
            "tier_range_start_date must be <= tier_range_end_date",
            code="INVALID_TIER_RANGE",
            details={"tier_range_start_date": start, "tier_range_end_date": end},
        )
