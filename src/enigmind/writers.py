"""Exports of generated games: question text, JSON list and plain text."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Sequence

from .game import Game
from .model import LETTERS

logger = logging.getLogger(__name__)


def complete_puzzle_description(game: Game) -> str:
    """English statement of the puzzle, without the secret."""
    config = game.configuration
    last_letter = LETTERS[config.column_count - 1]
    lines: List[str] = []

    lines.append(f"Find the secret {config.column_count}-digit code.")
    lines.append(
        f"The columns are labelled A to {last_letter} from left to right and every digit "
        f"is between 0 and {config.base - 1}."
    )
    lines.append("Each criterion below holds for the secret code, but you are only told that")
    lines.append("it is one of the listed rules, not which one.")
    lines.append("Exactly one code is consistent with the true rules of all the criteria.")
    lines.append("")

    lines.append("Criteria:")
    for i, criteria in enumerate(game.criterias, 1):
        lines.append(f"{i}. {criteria.description}")
        for rule in criteria.decoy_rules:
            lines.append(f"   - {rule.to_text()}")
    lines.append("")
    lines.append(
        "You can think step-by-step as long as you want, but eventually you need to give your answer. "
        "Give your answer inside a \\boxed{...} tag, writing the digits of the code from column A onwards, "
        "like this: \\boxed{" + "0" * config.column_count + "}."
    )
    return "\n".join(lines)


def puzzle_record(game: Game) -> dict:
    return {
        "metadata": game.to_json(),
        "question": complete_puzzle_description(game),
        "canonical_answer": str(game.code),
    }


def write_json_all(games: Sequence[Game], path: Path) -> None:
    """Write all games to a single JSON file."""
    records = [puzzle_record(g) for g in games]
    path.write_text(json.dumps(records, indent=2), encoding="utf8")
    logger.info(f"Saved {len(records)} puzzles to {path}")


def load_games(path: Path) -> List[Game]:
    """Read back the games written by :func:`write_json_all`."""
    records = json.loads(Path(path).read_text(encoding="utf8"))
    if not isinstance(records, list):
        raise ValueError(f"JSON file {path} does not contain a list")
    return [Game.from_json(r["metadata"]) for r in records]


def write_text_all(games: Sequence[Game], path: Path) -> None:
    """Write all games to a single text file, each followed by its answer key."""
    lines: List[str] = []

    for idx, game in enumerate(games, 1):
        if idx > 1:
            lines.append("")
            lines.append("=" * 80)
            lines.append("")

        lines.append(f"Enigmind #{idx} - {game.configuration}")
        lines.append("")
        lines.append(complete_puzzle_description(game))
        lines.append("")
        lines.append("Answer key (scroll past if you don't want spoilers)")
        lines.append("=" * 60)
        lines.append(" ")
        for i, criteria in enumerate(game.criterias, 1):
            lines.append(f"{i}. {criteria.verifier.rule}")
        lines.append(f"Code: {game.code}")

    path.write_text("\n".join(lines), encoding="utf8")
