"""
Tests for the generator pipeline: rule universe, randomized reduction,
redundancy cleanup, criteria and full games.
"""

import logging
import random

import pytest

from enigmind.bitmask import BitMask
from enigmind.errors import ConfigurationError, GenerationFailed
from enigmind.game import Verifier
from enigmind.generate import (
    GenerationParams,
    enumerate_rules,
    generate_criterias,
    generate_game,
    generate_rules,
    passes_difficulty,
    remove_redundant,
    select_verifiers,
)
from enigmind.model import Code, ColumnSet
from enigmind.rules import MatchesOp, Pair, XColumnsEquals


def intersection(verifiers, config) -> BitMask:
    mask = BitMask.ones(config.solution_count)
    for v in verifiers:
        mask &= v.mask
    return mask


class TestRuleUniverse:
    def test_enumerate_rules_count(self, tiny_config):
        # 2 columns x 4 single-column operators
        # + sums: {A}, {B} with thresholds 0..1, {A, B} with 0..3, three comparisons each
        # + XColumnsEquals: counts 0..2 x values 0..1
        assert len(enumerate_rules(tiny_config)) == 8 + (2 * 2 + 4) * 3 + 3 * 2

    def test_enumerated_rules_are_distinct(self, small_config):
        rules = enumerate_rules(small_config)

        assert len(set(rules)) == len(rules)

    @pytest.mark.parametrize(
        "ones,expected",
        [(0, False), (12, False), (13, False), (14, True), (125, True)],
    )
    def test_passes_difficulty(self, small_config, ones, expected):
        # 13 * 100 // 125 == 10, which is not above the 10% threshold
        assert passes_difficulty(ones, small_config) is expected

    def test_generated_rules_respect_difficulty(self, small_config):
        universe = generate_rules(small_config)

        assert universe
        for verifier in universe:
            ones = verifier.ones_count
            assert ones > 0
            assert ones * 100 // small_config.solution_count > small_config.min_difficulty

    def test_zero_difficulty_still_drops_empty_rules(self, tiny_config):
        universe = generate_rules(tiny_config)

        assert all(v.ones_count > 0 for v in universe)
        assert MatchesOp(Pair(), ColumnSet.of(0)) in [v.rule for v in universe]


class TestSelection:
    def test_select_verifiers_isolates_one_code(self, small_config, rng):
        universe = generate_rules(small_config)

        code, accepted = select_verifiers(universe, small_config, rng)

        combined = intersection(accepted, small_config)
        assert combined.count_ones() == 1
        assert Code.from_shift(combined.trailing_zeros(), small_config) == code

    def test_each_accepted_verifier_shrinks_the_candidates(self, small_config, rng):
        universe = generate_rules(small_config)

        _, accepted = select_verifiers(universe, small_config, rng)

        remaining = BitMask.ones(small_config.solution_count)
        for verifier in accepted:
            narrowed = remaining & verifier.mask
            assert 0 < narrowed.count_ones() < remaining.count_ones()
            remaining = narrowed

    def test_attempt_budget_raises_generation_failed(self, small_config, rng):
        universe = generate_rules(small_config)

        with pytest.raises(GenerationFailed):
            select_verifiers(universe, small_config, rng, max_attempts=1)

    def test_empty_universe_raises_generation_failed(self, small_config, rng):
        with pytest.raises(GenerationFailed):
            select_verifiers([], small_config, rng)


class TestRedundancy:
    def test_rules_implied_by_the_others_are_dropped(self, tiny_config):
        a_even = Verifier.create(MatchesOp(Pair(), ColumnSet.of(0)), tiny_config)
        b_even = Verifier.create(MatchesOp(Pair(), ColumnSet.of(1)), tiny_config)
        all_zero = Verifier.create(XColumnsEquals(2, 0), tiny_config)

        kept = remove_redundant([a_even, b_even, all_zero], tiny_config)

        assert kept == [all_zero]

    def test_mutually_needed_rules_are_kept(self, tiny_config):
        a_even = Verifier.create(MatchesOp(Pair(), ColumnSet.of(0)), tiny_config)
        b_even = Verifier.create(MatchesOp(Pair(), ColumnSet.of(1)), tiny_config)

        kept = remove_redundant([a_even, b_even], tiny_config)

        assert kept == [a_even, b_even]

    def test_cleanup_preserves_the_intersection(self, small_config):
        universe = generate_rules(small_config)
        for seed in range(5):
            _, accepted = select_verifiers(universe, small_config, random.Random(seed))

            kept = remove_redundant(accepted, small_config)

            assert intersection(kept, small_config) == intersection(accepted, small_config)


class TestCriteria:
    def test_each_criteria_lists_its_true_rule(self, small_config, rng):
        universe = generate_rules(small_config)
        _, accepted = select_verifiers(universe, small_config, rng)

        criterias = generate_criterias(accepted, small_config, rng)

        assert [c.verifier for c in criterias] == accepted
        for criteria in criterias:
            groups = {d: set(r) for d, r in criteria.verifier.rule.similar(small_config)}
            assert criteria.verifier.rule in criteria.decoy_rules
            assert groups[criteria.description] == set(criteria.decoy_rules)


class TestGenerateGame:
    @pytest.mark.parametrize("seed", range(5))
    def test_game_identifies_exactly_its_code(self, seed):
        game = generate_game(5, 3, 10, GenerationParams(rng=random.Random(seed)))

        combined = game.combined_mask()
        assert combined.count_ones() == 1
        assert Code.from_shift(combined.trailing_zeros(), game.configuration) == game.code
        for criteria in game.criterias:
            assert criteria.verifier.rule in criteria.decoy_rules

    @pytest.mark.parametrize("seed", range(5))
    def test_no_criteria_is_redundant(self, seed):
        game = generate_game(5, 3, 10, GenerationParams(rng=random.Random(seed)))
        verifiers = game.verifiers

        for i in range(len(verifiers)):
            others = verifiers[:i] + verifiers[i + 1:]
            assert intersection(others, game.configuration).count_ones() > 1

    def test_same_seed_gives_same_game(self):
        first = generate_game(5, 3, 10, GenerationParams(rng=random.Random(99)))
        second = generate_game(5, 3, 10, GenerationParams(rng=random.Random(99)))

        assert first == second

    def test_same_seed_gives_same_secret_across_many_runs(self):
        codes = {generate_game(5, 3, 10, GenerationParams(rng=random.Random(42))).code for _ in range(8)}

        assert len(codes) == 1

    def test_random_source_must_be_supplied(self):
        with pytest.raises(TypeError):
            GenerationParams()
        with pytest.raises(TypeError):
            generate_game(5, 3, 10)

    def test_secret_is_not_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="enigmind"):
            game = generate_game(5, 3, 10, GenerationParams(rng=random.Random(3)))

        assert "Secret code" not in caplog.text
        assert f"Code: {game.code}" not in caplog.text

    def test_base_one_gives_a_game_without_criteria(self):
        game = generate_game(1, 3, 0, GenerationParams(rng=random.Random(0)))

        assert game.criterias == ()
        assert game.code == Code((0, 0, 0))

    def test_impossible_difficulty_raises_generation_failed(self):
        with pytest.raises(GenerationFailed):
            generate_game(5, 3, 100, GenerationParams(rng=random.Random(0)))

    def test_oversized_configuration_is_rejected(self):
        params = GenerationParams(rng=random.Random(0), max_solution_count=1000)

        with pytest.raises(ConfigurationError):
            generate_game(6, 4, 10, params)

    def test_difficulty_is_clamped(self):
        game = generate_game(3, 2, -20, GenerationParams(rng=random.Random(0)))

        assert game.configuration.min_difficulty == 0
