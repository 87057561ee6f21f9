"""Generated game containers and their JSON representation.

A :class:`Game` carries the secret :attr:`Game.code` in plaintext.  Whoever
hands a game to a player is responsible for withholding it until the player
has won; nothing in this module hides it.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .bitmask import BitMask
from .errors import CodeFormatError
from .model import LETTERS, Code, GameConfiguration
from .rules import Rule, mask_of, rule_from_json


@dataclass(frozen=True)
class Verifier:
    """A rule bound to the mask of every candidate code it accepts."""

    rule: Rule
    mask: BitMask

    @classmethod
    def create(cls, rule: Rule, config: GameConfiguration) -> "Verifier":
        return cls(rule, mask_of(rule, config))

    @property
    def ones_count(self) -> int:
        return self.mask.count_ones()

    def __hash__(self) -> int:
        return hash(self.rule)

    def to_json(self) -> Dict:
        return {"rule": self.rule.to_json(), "mask": self.mask.to_hex()}

    @classmethod
    def from_json(cls, data: Dict, config: GameConfiguration) -> "Verifier":
        return cls(rule_from_json(data["rule"]), BitMask.from_hex(config.solution_count, data["mask"]))

    def __str__(self) -> str:
        return f"{self.rule} {self.mask} ({self.ones_count})"


@dataclass(frozen=True)
class Criteria:
    """What the player sees: a description and rules, one of which is the real one."""

    verifier: Verifier
    description: str
    decoy_rules: Tuple[Rule, ...]

    def __post_init__(self):
        object.__setattr__(self, "decoy_rules", tuple(self.decoy_rules))

    def to_json(self) -> Dict:
        return {
            "verifier": self.verifier.to_json(),
            "description": self.description,
            "decoy_rules": [r.to_json() for r in self.decoy_rules],
        }

    @classmethod
    def from_json(cls, data: Dict, config: GameConfiguration) -> "Criteria":
        return cls(
            verifier=Verifier.from_json(data["verifier"], config),
            description=data["description"],
            decoy_rules=tuple(rule_from_json(r) for r in data["decoy_rules"]),
        )

    def render(self, reveal: bool = False) -> str:
        """Player view; with *reveal* the true rule is starred."""
        lines = [f"Criteria : {self.description}."]
        for rule in self.decoy_rules:
            star = " (*)" if reveal and rule == self.verifier.rule else ""
            lines.append(f"\t{rule}{star}")
        return "\n".join(lines)


@dataclass(frozen=True)
class Game:
    configuration: GameConfiguration
    criterias: Tuple[Criteria, ...]
    code: Code

    def __post_init__(self):
        object.__setattr__(self, "criterias", tuple(self.criterias))

    # ---- player-facing checks ---------------------------------------------
    def is_solution_compatible(self, code: Code) -> bool:
        return code.fits(self.configuration)

    def is_column_compatible(self, letter: str) -> bool:
        upper = letter.upper()
        return len(upper) == 1 and upper in LETTERS and LETTERS.index(upper) < self.configuration.column_count

    def to_column_index(self, letter: str) -> int:
        if not self.is_column_compatible(letter):
            raise CodeFormatError(f"{letter!r} is not a column of this game")
        return LETTERS.index(letter.upper())

    def is_value_compatible(self, value: int) -> bool:
        return 0 <= value < self.configuration.base

    def _checked(self, code: Code) -> Code:
        if not self.is_solution_compatible(code):
            raise CodeFormatError(f"code {code} does not fit {self.configuration}")
        return code

    def test_code(self, criteria_index: int, code: Code) -> bool:
        """Evaluate the *true* rule of one criteria against a player's code."""
        if not 0 <= criteria_index < len(self.criterias):
            raise IndexError(f"criteria {criteria_index} does not exist")
        return self.criterias[criteria_index].verifier.rule.evaluate(self._checked(code))

    def bid(self, code: Code) -> bool:
        return self._checked(code) == self.code

    # ---- verification helpers ------------------------------------------
    def combined_mask(self) -> BitMask:
        mask = BitMask.ones(self.configuration.solution_count)
        for criteria in self.criterias:
            mask &= criteria.verifier.mask
        return mask

    @property
    def verifiers(self) -> List[Verifier]:
        return [c.verifier for c in self.criterias]

    # ---- serialisation ----------------------------------------------------
    def to_json(self) -> Dict:
        config = self.configuration
        return {
            "configuration": {
                "column_count": config.column_count,
                "base": config.base,
                "min_difficulty": config.min_difficulty,
            },
            "criterias": [c.to_json() for c in self.criterias],
            "code": list(self.code.digits),
        }

    @classmethod
    def from_json(cls, data: Dict) -> "Game":
        config = GameConfiguration(**data["configuration"])
        return cls(
            configuration=config,
            criterias=tuple(Criteria.from_json(c, config) for c in data["criterias"]),
            code=Code(tuple(data["code"])),
        )

    def dumps(self, **kwargs) -> str:
        return json.dumps(self.to_json(), **kwargs)

    @classmethod
    def loads(cls, text: str) -> "Game":
        return cls.from_json(json.loads(text))

    def __str__(self) -> str:
        parts = [f"Game : {self.configuration}"]
        parts.extend(c.render(reveal=True) for c in self.criterias)
        parts.append(f"Code to find : {self.code}")
        return "\n".join(parts)
