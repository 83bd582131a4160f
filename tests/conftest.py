from datetime import date, timedelta

import pytest

from lottery_tiers.engine.tier_classifier import apply_assignments, classify
from lottery_tiers.schemas.game import GameMode, PoolRules, PoolType, Rules
from lottery_tiers.schemas.generator import GeneratorContext, GeneratorOptions, GroupMode, TicketGroup
from lottery_tiers.schemas.numbers import NumberBall, Tier, TierCutoffs


@pytest.fixture
def powerball_rules():
    """Five whites from 1..69 plus one red from 1..26."""
    return Rules(
        format_start_date=date(2015, 10, 7),
        white=PoolRules(min_value=1, max_value=69, pick_count=5),
        red=PoolRules(min_value=1, max_value=26, pick_count=1),
    )


def make_classified_balls(pool_type: PoolType, low: int, high: int) -> list[NumberBall]:
    """Balls with distinct, deterministic tier counts, classified with default cutoffs."""
    base = date(2024, 1, 1)
    balls = [
        NumberBall(
            pool_type=pool_type,
            number_value=v,
            tier_count=(v * 7) % 23,
            total_count=(v * 7) % 23 + 5,
            last_drawn_date=base + timedelta(days=v),
        )
        for v in range(low, high + 1)
    ]
    return apply_assignments(balls, classify(balls, TierCutoffs()))


@pytest.fixture
def white_balls():
    return make_classified_balls(PoolType.WHITE, 1, 69)


@pytest.fixture
def red_balls():
    return make_classified_balls(PoolType.RED, 1, 26)


@pytest.fixture
def context(powerball_rules, white_balls, red_balls):
    return GeneratorContext(
        rules=powerball_rules,
        white_balls=white_balls,
        red_balls=red_balls,
        options=GeneratorOptions(seed=1234),
    )


@pytest.fixture
def game_mode(powerball_rules):
    return GameMode(
        id=1,
        display_name="Powerball",
        rules=powerball_rules,
        latest_white_winning=[3, 14, 27, 41, 62],
        latest_red_winning=[9],
    )


def values_in_tier(balls: list[NumberBall], tier: Tier) -> set[int]:
    return {b.number_value for b in balls if b.tier == tier}


def count_group(pool_type=PoolType.WHITE, hot=2, mid=2, cold=1, group_id=1, game_mode_id=1):
    return TicketGroup(
        id=group_id,
        game_mode_id=game_mode_id,
        pool_type=pool_type,
        group_mode=GroupMode.COUNT,
        group_key=f"TEST_{pool_type.value}_HOT_{hot}_MID_{mid}_COLD_{cold}",
        hot_count=hot,
        mid_count=mid,
        cold_count=cold,
    )


def percent_group(pool_type=PoolType.WHITE, hot=60, mid=30, cold=10, group_id=2, game_mode_id=1):
    return TicketGroup(
        id=group_id,
        game_mode_id=game_mode_id,
        pool_type=pool_type,
        group_mode=GroupMode.PERCENT,
        group_key=f"TEST_{pool_type.value}_HOT_{hot}_MID_{mid}_COLD_{cold}",
        hot_pct=hot,
        mid_pct=mid,
        cold_pct=cold,
    )
