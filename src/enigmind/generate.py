"""Enigmind puzzle generator core.

Builds a secret code together with a small set of *criteria* that single it
out among every ``base ** column_count`` possible codes:

1. enumerate every rule for the configuration and drop those that keep too
   small a share of the solution space (:func:`generate_rules`);
2. draw rules at random, keeping each one that shrinks the set of remaining
   candidates without emptying it, until one candidate is left
   (:func:`select_verifiers`);
3. drop the kept rules that the others already imply
   (:func:`remove_redundant`);
4. wrap each survivor with a description and a list of look-alike rules
   (:func:`generate_criterias`).

All randomness comes from the ``random.Random`` carried by
:class:`GenerationParams`, so a fixed seed reproduces the same game.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .bitmask import BitMask
from .errors import GenerationFailed
from .game import Criteria, Game, Verifier
from .model import Code, GameConfiguration
from .rules import SINGLE_COLUMN_OPERATORS, SUM_OPERATORS, MatchesOp, Rule, XColumnsEquals

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# 1 - Parameter bundle
# ---------------------------------------------------------------------------


@dataclass
class GenerationParams:
    rng: random.Random
    max_attempts: Optional[int] = 100_000  # rule draws before giving up; None = never
    max_solution_count: Optional[int] = 1_000_000


def generate_game_configuration(base: int, column_count: int, difficulty_percent: int) -> GameConfiguration:
    return GameConfiguration.create(base, column_count, difficulty_percent)


# ---------------------------------------------------------------------------
# 2 - Rule universe
# ---------------------------------------------------------------------------


def enumerate_rules(config: GameConfiguration) -> List[Rule]:
    """Every rule instance the generator may use, before difficulty filtering."""
    rules: List[Rule] = []

    for columns in config.column_combinations(1):
        for op in SINGLE_COLUMN_OPERATORS:
            rules.append(MatchesOp(op, columns))

    for columns in config.column_combinations():
        for threshold in range(len(columns) * config.base):
            for op_cls in SUM_OPERATORS:
                rules.append(MatchesOp(op_cls(threshold), columns))

    for count in range(config.column_count + 1):
        for value in range(config.base):
            rules.append(XColumnsEquals(count, value))

    return rules


def passes_difficulty(ones_count: int, config: GameConfiguration) -> bool:
    """A rule is usable if it keeps more than ``min_difficulty`` percent of the codes."""
    return ones_count > 0 and ones_count * 100 // config.solution_count > config.min_difficulty


def generate_rules(config: GameConfiguration) -> List[Verifier]:
    """Materialise every rule's mask once and keep those passing the difficulty filter."""
    candidates = enumerate_rules(config)
    universe: List[Verifier] = []
    for rule in candidates:
        verifier = Verifier.create(rule, config)
        if passes_difficulty(verifier.ones_count, config):
            universe.append(verifier)

    logger.info(
        f"Rules generated from configuration {config}: {len(universe)} of {len(candidates)} "
        f"kept by difficulty filter (> {config.min_difficulty}%)"
    )
    return universe


# ---------------------------------------------------------------------------
# 3 - Randomized reduction
# ---------------------------------------------------------------------------


def select_verifiers(
    universe: Sequence[Verifier],
    config: GameConfiguration,
    rng: random.Random,
    max_attempts: Optional[int] = None,
) -> Tuple[Code, List[Verifier]]:
    """Draw rules until exactly one candidate code remains.

    A drawn rule is rejected when it would eliminate every remaining
    candidate or none of them.  Returns the surviving code and the accepted
    verifiers in acceptance order.
    """
    remaining = BitMask.ones(config.solution_count)
    remaining_count = remaining.count_ones()
    accepted: List[Verifier] = []
    attempts = 0

    logger.debug("Picking rules until a single solution is found")
    while remaining_count > 1:
        if not universe:
            raise GenerationFailed(
                f"no rule passes the difficulty filter for {config}; lower the difficulty"
            )
        if max_attempts is not None and attempts >= max_attempts:
            raise GenerationFailed(
                f"{remaining_count} candidates still remain after {attempts} rule draws"
            )
        attempts += 1

        verifier = rng.choice(universe)
        candidate = remaining & verifier.mask
        candidate_count = candidate.count_ones()

        if candidate_count == 0:
            outcome = "skipped (0 sols)."
        elif candidate == remaining:
            outcome = "skipped (0 impr)."
        else:
            accepted.append(verifier)
            remaining, remaining_count = candidate, candidate_count
            outcome = "chosen."
        logger.debug(
            f"{str(verifier.rule):<25} {outcome:<18} remaining: {remaining_count} "
            f"({verifier.ones_count})"
        )

    logger.info(f"Accepted {len(accepted)} rules after {attempts} draws")
    return Code.from_shift(remaining.trailing_zeros(), config), accepted


# ---------------------------------------------------------------------------
# 4 - Redundancy elimination
# ---------------------------------------------------------------------------


def remove_redundant(verifiers: Sequence[Verifier], config: GameConfiguration) -> List[Verifier]:
    """Single pass dropping every verifier the others already imply.

    Verifiers are visited from the most permissive mask to the strictest.
    A verifier is redundant when the intersection of the *still kept* others
    lies inside its own mask; it is then dropped before the next one is
    examined, so the intersection of the result is unchanged.
    """
    ordered = sorted(verifiers, key=lambda v: v.ones_count, reverse=True)
    kept = list(ordered)

    for verifier in ordered:
        others = BitMask.ones(config.solution_count)
        for other in kept:
            if other is not verifier:
                others &= other.mask
        if others.is_subset_of(verifier.mask):
            kept = [v for v in kept if v is not verifier]
            logger.debug(f"Dropped redundant rule {verifier.rule}")

    logger.info(f"Kept {len(kept)} of {len(ordered)} rules after redundancy cleanup")
    return kept


# ---------------------------------------------------------------------------
# 5 - Criteria & game assembly
# ---------------------------------------------------------------------------


def generate_criterias(
    verifiers: Sequence[Verifier],
    config: GameConfiguration,
    rng: random.Random,
) -> List[Criteria]:
    criterias: List[Criteria] = []
    for verifier in verifiers:
        description, rules = rng.choice(verifier.rule.similar(config))
        rules = list(rules)
        rng.shuffle(rules)
        criterias.append(Criteria(verifier, description, decoy_rules=tuple(rules)))
        logger.debug(f"Criteria chosen for {verifier.rule}: \"{description}\" ({len(rules)} rules)")
    return criterias


def generate_game(
    base: int,
    column_count: int,
    difficulty_percent: int,
    params: GenerationParams,
) -> Game:
    """Generate a game whose criteria identify exactly one code.

    All randomness is drawn from ``params.rng``.
    """
    config = generate_game_configuration(base, column_count, difficulty_percent)
    config.validate(params.max_solution_count)

    universe = generate_rules(config)
    code, verifiers = select_verifiers(universe, config, params.rng, params.max_attempts)
    verifiers = remove_redundant(verifiers, config)

    if verifiers:
        mean_complexity = sum(v.ones_count for v in verifiers) // len(verifiers)
        logger.info(f"Final set of {len(verifiers)} rules (complexity: {mean_complexity})")

    criterias = generate_criterias(verifiers, config, params.rng)
    return Game(configuration=config, criterias=tuple(criterias), code=code)
