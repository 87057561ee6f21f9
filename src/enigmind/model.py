"""Value types: columns, codes and the game configuration.

A code of ``column_count`` digits in ``[0, base)`` is identified with its
*shift*, the integer it spells in base ``base``::

    shift = sum(digit_i * base ** (column_count - 1 - i))

so the whole solution space is simply ``range(base ** column_count)`` and a
set of codes can be stored as a :class:`~enigmind.bitmask.BitMask`.
"""
from __future__ import annotations

import string
from dataclasses import dataclass, field
from functools import lru_cache
from itertools import combinations
from typing import FrozenSet, Iterator, List, Optional, Tuple

import numpy as np

from .errors import CodeFormatError, ColumnIndexOutOfBounds, ConfigurationError

LETTERS = string.ascii_uppercase
MAX_COLUMNS = len(LETTERS)  # columns are displayed as a single letter


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------


@dataclass(frozen=True, order=True)
class Column:
    index: int

    def __post_init__(self):
        if not 0 <= self.index < MAX_COLUMNS:
            raise ConfigurationError(
                f"column index {self.index} cannot be displayed (only {MAX_COLUMNS} letters)"
            )

    @classmethod
    def from_letter(cls, letter: str) -> "Column":
        upper = letter.upper()
        if len(upper) != 1 or upper not in LETTERS:
            raise CodeFormatError(f"{letter!r} is not a column letter")
        return cls(LETTERS.index(upper))

    def __str__(self) -> str:
        return LETTERS[self.index]


@dataclass(frozen=True)
class ColumnSet:
    """Unordered set of distinct columns; iteration is always in column order."""

    columns: FrozenSet[Column] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "columns", frozenset(self.columns))

    @classmethod
    def of(cls, *indices: int) -> "ColumnSet":
        return cls(frozenset(Column(i) for i in indices))

    @property
    def indices(self) -> Tuple[int, ...]:
        return tuple(c.index for c in self)

    def __iter__(self) -> Iterator[Column]:
        return iter(sorted(self.columns))

    def __len__(self) -> int:
        return len(self.columns)

    def __contains__(self, column: object) -> bool:
        return column in self.columns

    def __str__(self) -> str:
        return "[" + ", ".join(str(c) for c in self) + "]"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GameConfiguration:
    column_count: int
    base: int
    min_difficulty: int = 0  # percent of the space a rule must keep to be usable

    @classmethod
    def create(cls, base: int, column_count: int, difficulty_percent: int = 0) -> "GameConfiguration":
        """Build a configuration, clamping the difficulty into ``[0, 100]``."""
        return cls(
            column_count=column_count,
            base=base,
            min_difficulty=max(0, min(100, difficulty_percent)),
        )

    @property
    def solution_count(self) -> int:
        return self.base ** self.column_count

    def validate(self, max_solution_count: Optional[int] = None) -> None:
        if self.base < 1:
            raise ConfigurationError(f"base must be at least 1, got {self.base}")
        if self.column_count < 1:
            raise ConfigurationError(f"column_count must be at least 1, got {self.column_count}")
        if self.column_count > MAX_COLUMNS:
            raise ConfigurationError(
                f"column_count {self.column_count} exceeds the {MAX_COLUMNS} displayable columns"
            )
        if max_solution_count is not None and self.solution_count > max_solution_count:
            raise ConfigurationError(
                f"{self.base}^{self.column_count} = {self.solution_count} candidate codes "
                f"exceeds the limit of {max_solution_count}"
            )

    def column_combinations(self, length: Optional[int] = None) -> List[ColumnSet]:
        """Every distinct non-empty column subset, optionally of one size only.

        Collapsing each tuple of ``product(range(n), repeat=n)`` into a set
        yields exactly these subsets, so they are enumerated directly.
        """
        sizes = range(1, self.column_count + 1) if length is None else [length]
        return [
            ColumnSet.of(*combo)
            for size in sizes
            if 0 < size <= self.column_count
            for combo in combinations(range(self.column_count), size)
        ]

    def digit_matrix(self) -> np.ndarray:
        """``(solution_count, column_count)`` array; row ``i`` is ``decode(i)``."""
        return _digit_matrix(self.base, self.column_count)

    def __str__(self) -> str:
        return (
            f"{{{self.column_count} columns between 0 and {self.base} "
            f"({self.solution_count} possibilities)}}"
        )


@lru_cache(maxsize=4)
def _digit_matrix(base: int, column_count: int) -> np.ndarray:
    shifts = np.arange(base ** column_count, dtype=np.int64)
    powers = base ** np.arange(column_count - 1, -1, -1, dtype=np.int64)
    matrix = (shifts[:, None] // powers[None, :]) % base
    matrix = matrix.astype(np.int32)
    matrix.setflags(write=False)
    return matrix


# ---------------------------------------------------------------------------
# Codes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Code:
    digits: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, "digits", tuple(int(d) for d in self.digits))

    @classmethod
    def parse(cls, text: str) -> "Code":
        """``"402"`` -> ``Code((4, 0, 2))``."""
        text = text.strip()
        if not text or any(ch not in string.digits for ch in text):
            raise CodeFormatError(f"{text!r} is not a code (expected digits only)")
        return cls(tuple(int(ch) for ch in text))

    @classmethod
    def from_shift(cls, shift: int, config: GameConfiguration) -> "Code":
        if not 0 <= shift < config.solution_count:
            raise CodeFormatError(f"shift {shift} outside [0, {config.solution_count})")
        digits = []
        for _ in range(config.column_count):
            shift, digit = divmod(shift, config.base)
            digits.append(digit)
        return cls(tuple(reversed(digits)))

    def shift(self, config: GameConfiguration) -> int:
        value = 0
        for digit in self.digits:
            value = value * config.base + digit
        return value

    def get(self, column: Column) -> int:
        if not 0 <= column.index < len(self.digits):
            raise ColumnIndexOutOfBounds(column.index, len(self.digits))
        return self.digits[column.index]

    def fits(self, config: GameConfiguration) -> bool:
        return len(self.digits) == config.column_count and all(
            0 <= d < config.base for d in self.digits
        )

    def __len__(self) -> int:
        return len(self.digits)

    def __iter__(self) -> Iterator[int]:
        return iter(self.digits)

    def __str__(self) -> str:
        return "".join(str(d) for d in self.digits)


def encode(code: Code, config: GameConfiguration) -> int:
    return code.shift(config)


def decode(shift: int, config: GameConfiguration) -> Code:
    return Code.from_shift(shift, config)


def display(column: Column) -> str:
    return str(column)
