"""Tests for the ticket generation engine."""

from datetime import date

import pytest

from conftest import count_group, percent_group, values_in_tier
from lottery_tiers.engine.ticket_generator import TicketGenerator
from lottery_tiers.engine.weighted_sampler import make_rng
from lottery_tiers.errors import PreconditionError
from lottery_tiers.schemas.game import PoolRules, PoolType, Rules
from lottery_tiers.schemas.generator import GeneratorContext, GeneratorOptions, GeneratorSpec
from lottery_tiers.schemas.numbers import NumberBall, Tier


def small_rules(low=1, high=10, pick=5, ordered=False, allow_repeats=False, red=None):
    return Rules(
        format_start_date=date(2020, 1, 1),
        white=PoolRules(
            min_value=low, max_value=high, pick_count=pick,
            ordered=ordered, allow_repeats=allow_repeats,
        ),
        red=red,
    )


def tiered(assignments, pool_type=PoolType.WHITE):
    """Balls from a {value: (tier, tier_count)} mapping."""
    return [
        NumberBall(pool_type=pool_type, number_value=v, tier=tier, tier_count=count)
        for v, (tier, count) in sorted(assignments.items())
    ]


def tier_mix(picks, balls):
    return (
        len(set(picks) & values_in_tier(balls, Tier.HOT)),
        len(set(picks) & values_in_tier(balls, Tier.MID)),
        len(set(picks) & values_in_tier(balls, Tier.COLD)),
    )


@pytest.fixture
def generator():
    return TicketGenerator()


class TestPreconditions:
    def test_rules_required(self, generator):
        ctx = GeneratorContext(rules=None)
        with pytest.raises(PreconditionError) as exc:
            generator.generate(ctx, [GeneratorSpec(ticket_count=1)])
        assert exc.value.code == "RULES_REQUIRED"

    def test_specs_required(self, generator, context):
        with pytest.raises(PreconditionError) as exc:
            generator.generate(context, [])
        assert exc.value.code == "SPECS_REQUIRED"

    @pytest.mark.parametrize("count", [0, -3])
    def test_ticket_count_must_be_positive(self, generator, context, count):
        with pytest.raises(PreconditionError) as exc:
            generator.generate(context, [GeneratorSpec(ticket_count=count)])
        assert exc.value.code == "INVALID_TICKET_COUNT"


class TestQuickPick:
    def test_distinct_sorted_in_range(self, generator, context):
        batch = generator.generate(context, [GeneratorSpec(ticket_count=25)])

        assert len(batch.tickets) == 25
        assert batch.warnings == []
        for ticket in batch.tickets:
            assert len(ticket.white) == 5
            assert len(set(ticket.white)) == 5
            assert ticket.white == sorted(ticket.white)
            assert all(1 <= v <= 69 for v in ticket.white)
            assert len(ticket.red) == 1
            assert 1 <= ticket.red[0] <= 26

    def test_ticket_numbering(self, generator, context):
        batch = generator.generate(context, [GeneratorSpec(ticket_count=3), GeneratorSpec(ticket_count=2)])

        assert [(t.spec_number, t.ticket_index) for t in batch.tickets] == [
            (1, 1), (1, 2), (1, 3), (2, 1), (2, 2),
        ]
        assert [r.spec_number for r in batch.spec_results] == [1, 2]

    def test_ordered_pool_keeps_draw_order(self, generator):
        ctx = GeneratorContext(rules=small_rules(1, 69, 5, ordered=True))
        batch = generator.generate(ctx, [GeneratorSpec(ticket_count=30)], rng=make_rng(11))
        assert any(t.white != sorted(t.white) for t in batch.tickets)

    def test_repeats_allowed_when_pool_smaller_than_pick(self, generator):
        ctx = GeneratorContext(rules=small_rules(1, 3, 5, allow_repeats=True))
        batch = generator.generate(ctx, [GeneratorSpec(ticket_count=10)], rng=make_rng(5))

        assert batch.warnings == []
        for ticket in batch.tickets:
            assert len(ticket.white) == 5
            assert len(set(ticket.white)) < 5
            assert set(ticket.white) <= {1, 2, 3}

    def test_exclusions_respected(self, generator, context):
        spec = GeneratorSpec(ticket_count=20, excluded_white=frozenset(range(1, 60)))
        batch = generator.generate(context, [spec])

        assert batch.warnings == []
        for ticket in batch.tickets:
            assert all(v >= 60 for v in ticket.white)

    def test_impossible_exclusions_are_relaxed(self, generator):
        ctx = GeneratorContext(rules=small_rules(1, 5, 5))
        spec = GeneratorSpec(ticket_count=1, excluded_white=frozenset({1}))
        batch = generator.generate(ctx, [spec], rng=make_rng(1))

        assert batch.tickets[0].white == [1, 2, 3, 4, 5]
        assert any("relaxing exclusions" in w for w in batch.spec_results[0].warnings)

    def test_pool_too_small_returns_no_picks(self, generator):
        ctx = GeneratorContext(rules=small_rules(1, 3, 5))
        batch = generator.generate(ctx, [GeneratorSpec(ticket_count=1)], rng=make_rng(1))

        assert batch.tickets[0].white == []
        assert any("cannot satisfy pick count" in w for w in batch.warnings)

    def test_game_without_red_pool(self, generator):
        ctx = GeneratorContext(rules=small_rules(1, 40, 6))
        batch = generator.generate(ctx, [GeneratorSpec(ticket_count=4)], rng=make_rng(2))
        assert all(t.red == [] for t in batch.tickets)
        assert all(len(t.white) == 6 for t in batch.tickets)


class TestCountGroups:
    def test_exact_tier_composition(self, generator, context, white_balls):
        group = count_group(hot=2, mid=2, cold=1)
        batch = generator.generate(context, [GeneratorSpec(ticket_count=30, white_group=group)])

        assert batch.warnings == []
        for ticket in batch.tickets:
            assert tier_mix(ticket.white, white_balls) == (2, 2, 1)
            assert len(set(ticket.white)) == 5
            assert ticket.white_group_key == group.group_key
            assert ticket.red_group_key is None

    def test_mismatched_sum_falls_down_from_hot(self, generator, context, white_balls):
        group = count_group(hot=1, mid=1, cold=1)
        batch = generator.generate(context, [GeneratorSpec(ticket_count=10, white_group=group)])

        assert any("does not match pick count" in w for w in batch.warnings)
        for ticket in batch.tickets:
            assert tier_mix(ticket.white, white_balls) == (3, 1, 1)

    def test_oversized_counts_are_capped(self, generator, context, white_balls):
        group = count_group(hot=4, mid=4, cold=4)
        batch = generator.generate(context, [GeneratorSpec(ticket_count=10, white_group=group)])

        for ticket in batch.tickets:
            assert len(ticket.white) == 5
            assert tier_mix(ticket.white, white_balls) == (4, 1, 0)

    def test_excluded_hot_falls_through_to_mid(self, generator, context, white_balls):
        hot = values_in_tier(white_balls, Tier.HOT)
        spec = GeneratorSpec(
            ticket_count=15, white_group=count_group(hot=2, mid=2, cold=1), excluded_white=frozenset(hot)
        )
        batch = generator.generate(context, [spec])

        assert batch.warnings == []
        for ticket in batch.tickets:
            assert tier_mix(ticket.white, white_balls) == (0, 4, 1)

    def test_insufficient_candidates_returns_fewer_picks(self, generator):
        balls = tiered({
            1: (Tier.HOT, 9),
            2: (Tier.MID, 5),
            3: (Tier.COLD, 0),
            4: (Tier.COLD, 0),
            5: (Tier.COLD, 0),
            6: (Tier.COLD, 0),
        })
        ctx = GeneratorContext(rules=small_rules(1, 6, 5), white_balls=balls)
        spec = GeneratorSpec(
            ticket_count=1, white_group=count_group(hot=2, mid=2, cold=1), excluded_white=frozenset({3, 4, 5})
        )
        batch = generator.generate(ctx, [spec], rng=make_rng(3))

        assert batch.tickets[0].white == [1, 2, 6]
        warnings = batch.spec_results[0].warnings
        assert any("tier MID empty" in w for w in warnings)
        assert any("unable to fill remaining picks" in w for w in warnings)


class TestPercentGroups:
    def test_all_hot(self, generator, context, white_balls):
        group = percent_group(hot=100, mid=0, cold=0)
        batch = generator.generate(context, [GeneratorSpec(ticket_count=10, white_group=group)])

        assert batch.warnings == []
        for ticket in batch.tickets:
            assert tier_mix(ticket.white, white_balls) == (5, 0, 0)

    def test_all_hot_with_hot_excluded_uses_mid(self, generator, context, white_balls):
        hot = values_in_tier(white_balls, Tier.HOT)
        spec = GeneratorSpec(
            ticket_count=10, white_group=percent_group(hot=100, mid=0, cold=0), excluded_white=frozenset(hot)
        )
        batch = generator.generate(context, [spec])

        assert batch.warnings == []
        for ticket in batch.tickets:
            assert tier_mix(ticket.white, white_balls) == (0, 5, 0)

    def test_mixed_percentages_stay_in_pool(self, generator, context):
        batch = generator.generate(context, [GeneratorSpec(ticket_count=20, white_group=percent_group())])

        assert batch.warnings == []
        for ticket in batch.tickets:
            assert len(set(ticket.white)) == 5
            assert all(1 <= v <= 69 for v in ticket.white)

    def test_everything_excluded_relaxes_to_quick_pick(self, generator, context):
        spec = GeneratorSpec(
            ticket_count=1, white_group=percent_group(), excluded_white=frozenset(range(1, 70))
        )
        batch = generator.generate(context, [spec])

        warnings = batch.spec_results[0].warnings
        assert any("Hot+Mid empty" in w for w in warnings)
        assert any("relaxing exclusions" in w for w in warnings)
        assert len(set(batch.tickets[0].white)) == 5

    def test_all_zero_percentages(self, generator, context):
        batch = generator.generate(
            context, [GeneratorSpec(ticket_count=3, white_group=percent_group(hot=0, mid=0, cold=0))]
        )

        warnings = batch.spec_results[0].warnings
        assert any("renormalizing" in w for w in warnings)
        assert any("all percentages are 0" in w for w in warnings)
        for ticket in batch.tickets:
            assert len(set(ticket.white)) == 5

    def test_renormalizes_when_sum_is_not_100(self, generator, context):
        batch = generator.generate(
            context, [GeneratorSpec(ticket_count=3, white_group=percent_group(hot=30, mid=15, cold=5))]
        )

        assert any("renormalizing" in w for w in batch.warnings)
        assert all(len(t.white) == 5 for t in batch.tickets)

    def test_degrades_to_full_pool_when_buckets_run_dry(self, generator):
        balls = tiered({1: (Tier.HOT, 4), 2: (Tier.MID, 2), 3: (Tier.COLD, 0)})
        ctx = GeneratorContext(rules=small_rules(1, 10, 5), white_balls=balls)
        spec = GeneratorSpec(ticket_count=1, white_group=percent_group(hot=34, mid=33, cold=33))
        batch = generator.generate(ctx, [spec], rng=make_rng(8))

        white = batch.tickets[0].white
        assert len(set(white)) == 5
        assert all(1 <= v <= 10 for v in white)
        warnings = batch.spec_results[0].warnings
        assert any("no candidates available while picking by percent" in w for w in warnings)
        assert any("using the full pool range" in w for w in warnings)


class TestFallbacks:
    def test_group_for_wrong_pool(self, generator, context):
        spec = GeneratorSpec(ticket_count=2, white_group=count_group(pool_type=PoolType.RED))
        batch = generator.generate(context, [spec])

        assert any("group pool type mismatch" in w for w in batch.warnings)
        assert all(len(set(t.white)) == 5 for t in batch.tickets)

    def test_missing_tier_list(self, generator, powerball_rules):
        ctx = GeneratorContext(rules=powerball_rules, white_balls=None)
        batch = generator.generate(ctx, [GeneratorSpec(ticket_count=2, white_group=count_group())])

        assert any("tier list missing" in w for w in batch.warnings)
        assert all(len(t.white) == 5 for t in batch.tickets)

    def test_all_cold_pool_is_quick_pick(self, generator, powerball_rules):
        balls = tiered({v: (Tier.COLD, 0) for v in range(1, 70)})
        ctx = GeneratorContext(rules=powerball_rules, white_balls=balls)
        batch = generator.generate(ctx, [GeneratorSpec(ticket_count=2, white_group=count_group())])

        assert any("Hot+Mid empty" in w for w in batch.warnings)
        assert all(len(set(t.white)) == 5 for t in batch.tickets)

    def test_batch_warnings_are_prefixed_by_spec(self, generator, context):
        specs = [
            GeneratorSpec(ticket_count=1),
            GeneratorSpec(ticket_count=1, white_group=count_group(pool_type=PoolType.RED)),
        ]
        batch = generator.generate(context, specs)

        assert batch.spec_results[0].warnings == []
        assert batch.warnings
        assert all(w.startswith("Spec 2: ") for w in batch.warnings)


class TestDeterminismAndWeighting:
    def test_same_seed_same_batch(self, generator, context):
        specs = [
            GeneratorSpec(ticket_count=5, white_group=count_group(), red_group=percent_group(pool_type=PoolType.RED)),
            GeneratorSpec(ticket_count=5, white_group=percent_group()),
        ]
        first = generator.generate(context, specs)
        second = generator.generate(context, specs)
        assert first.model_dump_json() == second.model_dump_json()

    def test_different_seed_changes_batch(self, generator, context):
        specs = [GeneratorSpec(ticket_count=10, white_group=percent_group())]
        first = generator.generate(context, specs, rng=make_rng(1))
        second = generator.generate(context, specs, rng=make_rng(2))
        assert first.model_dump_json() != second.model_dump_json()

    @pytest.mark.parametrize("alpha,heavy_share_high", [(0.0, True), (1000.0, False)])
    def test_diminishing_returns_spreads_picks(self, generator, alpha, heavy_share_high):
        # One heavy HOT ball against ten light ones, one pick per ticket
        balls = tiered({1: (Tier.HOT, 99), **{v: (Tier.HOT, 0) for v in range(2, 12)}})
        ctx = GeneratorContext(
            rules=small_rules(1, 11, 1),
            white_balls=balls,
            options=GeneratorOptions(temperature=1.0, alpha=alpha, seed=17),
        )
        batch = generator.generate(ctx, [GeneratorSpec(ticket_count=50, white_group=count_group(hot=1, mid=0, cold=0))])

        heavy = sum(1 for t in batch.tickets if t.white == [1])
        if heavy_share_high:
            assert heavy > 35
        else:
            assert heavy < 35

    def test_zero_temperature_always_takes_heaviest(self, generator, powerball_rules, white_balls):
        ctx = GeneratorContext(
            rules=powerball_rules,
            white_balls=white_balls,
            options=GeneratorOptions(temperature=0.0, alpha=0.0, seed=1),
        )
        batch = generator.generate(ctx, [GeneratorSpec(ticket_count=10, white_group=count_group(hot=2, mid=2, cold=1))])

        counts = {b.number_value: b.tier_count for b in white_balls}
        for tier, k in ((Tier.HOT, 2), (Tier.MID, 2), (Tier.COLD, 1)):
            in_tier = values_in_tier(white_balls, tier)
            top = sorted((counts[v] for v in in_tier), reverse=True)[:k]
            for ticket in batch.tickets:
                assert len(ticket.white) == 5
                picked = sorted((counts[v] for v in ticket.white if v in in_tier), reverse=True)
                assert picked == top
