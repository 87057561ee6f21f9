"""Generate batches of Enigmind code-breaking puzzles.

Example::

    enigmind-generate --base 5 --columns 3 --difficulty 10 --count 10 --seed 42 --output puzzles/

writes ``puzzles/enigmind_puzzles.json`` (question, answer and the full game
for every puzzle) and ``puzzles/enigmind_puzzles.txt``.
"""
from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import EnigmindError
from .game import Game
from .generate import GenerationParams, generate_game
from .model import MAX_COLUMNS
from .writers import write_json_all, write_text_all

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Generate Enigmind code-breaking puzzles.")
    ap.add_argument("--base", type=int, default=5, help="Digits are drawn from [0, base)")
    ap.add_argument("--columns", type=int, default=3, help="Number of digits in the code")
    ap.add_argument("--difficulty", type=int, default=10,
                    help="Drop rules keeping at most this percentage of the codes (0-100)")
    ap.add_argument("--count", type=int, default=10, help="How many puzzles to generate")
    ap.add_argument("--seed", type=int, default=None, help="Random-seed for reproducibility")
    ap.add_argument("--output", type=Path, default=Path("."), help="Directory for output files")
    ap.add_argument("--max-attempts", type=int, default=100_000,
                    help="Rule draws per puzzle before giving up (0 = unbounded)")
    ap.add_argument("--max-solutions", type=int, default=1_000_000,
                    help="Refuse configurations with more candidate codes than this")
    ap.add_argument("--verbose", "-v", action="store_true", help="Log every rule draw")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.base < 1:
        ap.error("--base must be at least 1")
    if not 1 <= args.columns <= MAX_COLUMNS:
        ap.error(f"--columns must be between 1 and {MAX_COLUMNS}")
    if args.count < 1:
        ap.error("--count must be positive")
    if args.max_attempts < 0:
        ap.error("--max-attempts must not be negative")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    params = GenerationParams(
        rng=random.Random(args.seed),
        max_attempts=args.max_attempts or None,
        max_solution_count=args.max_solutions,
    )

    games: List[Game] = []
    for i in range(args.count):
        logger.info(f"Generating puzzle {i + 1}/{args.count}")
        try:
            games.append(generate_game(args.base, args.columns, args.difficulty, params))
        except EnigmindError as er:
            logger.warning(f"Skipping puzzle {i + 1}: {er}")

    args.output.mkdir(parents=True, exist_ok=True)
    json_path = args.output / "enigmind_puzzles.json"
    txt_path = args.output / "enigmind_puzzles.txt"
    write_json_all(games, json_path)
    write_text_all(games, txt_path)
    print(f"Created {json_path} and {txt_path} with {len(games)} puzzles")


if __name__ == "__main__":  # pragma: no cover
    main()
