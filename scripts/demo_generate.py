#!/usr/bin/env python3
"""
Tier Generation Demo
====================
Builds a Powerball-style game from synthetic draw history, classifies the
balls into HOT/MID/COLD tiers and generates a seeded batch of tickets using
quick pick, COUNT and PERCENT groups.
"""

from datetime import date, timedelta

from loguru import logger

from lottery_tiers.engine.weighted_sampler import make_rng
from lottery_tiers.log_config import configure_logging
from lottery_tiers.schemas.game import DrawResult, GameMode, PoolRules, PoolType, Rules
from lottery_tiers.schemas.generator import GeneratorOptions, GroupMode, TicketSpecRequest
from lottery_tiers.services import number_ball_service, ticket_group_service
from lottery_tiers.services.ticket_generator_service import generate_batch


def synthetic_history(rules: Rules, n_draws: int, seed: int) -> list[DrawResult]:
    rng = make_rng(seed)
    start = date(2024, 1, 1)
    draws = []
    for i in range(n_draws):
        white = rng.choice(list(rules.white.values()), size=rules.white.pick_count, replace=False)
        red = rng.choice(list(rules.red.values()), size=rules.red.pick_count, replace=False)
        draws.append(DrawResult(
            draw_date=start + timedelta(days=3 * i),
            white=sorted(int(v) for v in white),
            red=[int(v) for v in red],
        ))
    return draws


def main():
    configure_logging()

    rules = Rules(
        format_start_date=date(2024, 1, 1),
        white=PoolRules(min_value=1, max_value=69, pick_count=5),
        red=PoolRules(min_value=1, max_value=26, pick_count=1),
    )
    history = synthetic_history(rules, n_draws=120, seed=7)
    mode = GameMode(
        id=1,
        display_name="Powerball",
        rules=rules,
        latest_white_winning=history[-1].white,
        latest_red_winning=history[-1].red,
    )

    balls = number_ball_service.rebuild_for_game_mode(mode, history, today=date(2025, 1, 1))
    matrix = number_ball_service.tier_matrix(balls)
    for pool_type in PoolType:
        for tier, pool_balls in matrix[pool_type].items():
            logger.info("{} {}: {}", pool_type.value, tier.value, [b.number_value for b in pool_balls])

    count_group = ticket_group_service.build_ticket_group(
        mode, PoolType.WHITE, GroupMode.COUNT, 2, 2, 1, group_id=10,
    )
    percent_group = ticket_group_service.build_ticket_group(
        mode, PoolType.RED, GroupMode.PERCENT, 60, 30, 10, group_id=11,
    )

    batch = generate_batch(
        mode,
        balls,
        [
            TicketSpecRequest(ticket_count=3),
            TicketSpecRequest(ticket_count=3, white_group_id=10, red_group_id=11),
            TicketSpecRequest(ticket_count=3, white_group_id=10, exclude_last_draw_numbers=True),
        ],
        groups=[count_group, percent_group],
        options=GeneratorOptions(seed=42),
    )

    print("=" * 70)
    for ticket in batch.tickets:
        print(
            f"spec {ticket.spec_number} #{ticket.ticket_index}: "
            f"{ticket.white} + {ticket.red} ({ticket.white_group_key or 'quick pick'})"
        )
    for warning in batch.warnings:
        print(f"warning: {warning}")


if __name__ == "__main__":
    main()
