"""Rule model: predicates over a :class:`~enigmind.model.Code`.

A rule is either an *operator applied to a set of columns* (``MatchesOp``)
or a count of equal digits across the whole code (``XColumnsEquals``).
Every rule can be evaluated on one code (``evaluate``) or on the whole
solution space at once (``evaluate_many`` over the digit matrix), the
latter being what :func:`mask_of` packs into a bitmask.

Extending: add an ``Operator`` subclass with ``check``/``check_many`` and
register it in ``_OPERATORS``; the generator picks it up from there.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, List, Sequence, Tuple, Type

import numpy as np

from .bitmask import BitMask
from .errors import ColumnIndexOutOfBounds, EnigmindError
from .model import Code, ColumnSet, GameConfiguration

SimilarGroup = Tuple[str, List["Rule"]]  # (description, alternatives incl. the true rule)


def _plural(n: int, singular: str, plural: str) -> str:
    return singular if n == 1 else plural


def _columns_phrase(columns: ColumnSet) -> str:
    letters = [str(c) for c in columns]
    if len(letters) == 1:
        return f"column {letters[0]}"
    return f"columns {', '.join(letters[:-1])} and {letters[-1]}"


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Operator:
    """Abstract comparison applied to the digits of the referenced columns."""

    rule_name: ClassVar[str] = "<abstract>"
    word: ClassVar[str] = ""

    def check(self, values: Sequence[int], digits: Sequence[int]) -> bool:
        """*values* are the referenced digits, *digits* the whole code."""
        raise NotImplementedError

    def check_many(self, values: np.ndarray, digits: np.ndarray) -> np.ndarray:
        """Row-wise :meth:`check` over ``(N, k)`` values and ``(N, n)`` digits."""
        raise NotImplementedError

    def to_json(self) -> Dict:
        return {"type": self.rule_name}

    def __str__(self) -> str:
        return self.word


@dataclass(frozen=True)
class Pair(Operator):
    rule_name: ClassVar[str] = "Pair"
    word: ClassVar[str] = "even"

    def check(self, values, digits):
        return all(v % 2 == 0 for v in values)

    def check_many(self, values, digits):
        return np.all(values % 2 == 0, axis=1)


@dataclass(frozen=True)
class Impair(Operator):
    rule_name: ClassVar[str] = "Impair"
    word: ClassVar[str] = "odd"

    def check(self, values, digits):
        return all(v % 2 == 1 for v in values)

    def check_many(self, values, digits):
        return np.all(values % 2 == 1, axis=1)


@dataclass(frozen=True)
class Lowest(Operator):
    """Each referenced digit is the code's minimum, and that minimum is unique."""

    rule_name: ClassVar[str] = "Lowest"
    word: ClassVar[str] = "lowest"

    def check(self, values, digits):
        extreme = min(digits)
        unique = sum(1 for d in digits if d == extreme) == 1
        return all(v == extreme and unique for v in values)

    def check_many(self, values, digits):
        extreme = digits.min(axis=1)[:, None]
        unique = ((digits == extreme).sum(axis=1) == 1)[:, None]
        return np.all((values == extreme) & unique, axis=1)


@dataclass(frozen=True)
class Highest(Operator):
    """Each referenced digit is the code's maximum, and that maximum is unique."""

    rule_name: ClassVar[str] = "Highest"
    word: ClassVar[str] = "highest"

    def check(self, values, digits):
        extreme = max(digits)
        unique = sum(1 for d in digits if d == extreme) == 1
        return all(v == extreme and unique for v in values)

    def check_many(self, values, digits):
        extreme = digits.max(axis=1)[:, None]
        unique = ((digits == extreme).sum(axis=1) == 1)[:, None]
        return np.all((values == extreme) & unique, axis=1)


@dataclass(frozen=True)
class SumOperator(Operator):
    """Compares the sum of the referenced digits with ``value``."""

    value: int = 0

    def compare(self, total):
        raise NotImplementedError

    def check(self, values, digits):
        return bool(self.compare(sum(values)))

    def check_many(self, values, digits):
        return np.asarray(self.compare(values.sum(axis=1)), dtype=bool)

    def to_json(self) -> Dict:
        return {"type": self.rule_name, "value": self.value}


@dataclass(frozen=True)
class SumBelow(SumOperator):
    rule_name: ClassVar[str] = "SumBelow"
    word: ClassVar[str] = "below"

    def compare(self, total):
        return total < self.value


@dataclass(frozen=True)
class SumEquals(SumOperator):
    rule_name: ClassVar[str] = "SumEquals"
    word: ClassVar[str] = "equal to"

    def compare(self, total):
        return total == self.value


@dataclass(frozen=True)
class SumAbove(SumOperator):
    rule_name: ClassVar[str] = "SumAbove"
    word: ClassVar[str] = "above"

    def compare(self, total):
        return total > self.value


SUM_OPERATORS: Tuple[Type[SumOperator], ...] = (SumBelow, SumEquals, SumAbove)
SINGLE_COLUMN_OPERATORS: Tuple[Operator, ...] = (Pair(), Impair(), Lowest(), Highest())

_OPERATORS: Dict[str, Type[Operator]] = {
    cls.rule_name: cls for cls in (Pair, Impair, Lowest, Highest, SumBelow, SumEquals, SumAbove)
}

_DISPLAY_NAMES = {
    "Pair": "IsPair",
    "Impair": "IsImpair",
    "Lowest": "IsLowest",
    "Highest": "IsHighest",
}


def operator_from_json(data: Dict) -> Operator:
    try:
        cls = _OPERATORS[data["type"]]
    except KeyError as e:
        raise EnigmindError(f"unknown operator payload: {data!r}") from e
    if issubclass(cls, SumOperator):
        return cls(int(data["value"]))
    return cls()


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


class Rule:
    """Abstract base class for every rule; instances are immutable and hashable."""

    rule_name: ClassVar[str] = "<abstract>"

    def evaluate(self, code: Code) -> bool:
        raise NotImplementedError

    def evaluate_many(self, digits: np.ndarray) -> np.ndarray:
        """Evaluate the rule on every row of a ``(N, column_count)`` digit matrix."""
        raise NotImplementedError

    def similar(self, config: GameConfiguration) -> List[SimilarGroup]:
        """Groups of plausible alternative phrasings, each containing ``self``."""
        raise NotImplementedError

    def to_text(self) -> str:
        raise NotImplementedError

    def to_json(self) -> Dict:
        raise NotImplementedError

    def __repr__(self):  # pragma: no cover
        return f"<{self.rule_name}: {self}>"


@dataclass(frozen=True, repr=False)
class MatchesOp(Rule):
    operator: Operator
    columns: ColumnSet
    rule_name: ClassVar[str] = "MatchesOp"

    def _values(self, code: Code) -> List[int]:
        # fetch every referenced digit first so a bad column always raises
        return [code.get(c) for c in self.columns]

    def evaluate(self, code: Code) -> bool:
        return self.operator.check(self._values(code), code.digits)

    def evaluate_many(self, digits: np.ndarray) -> np.ndarray:
        width = digits.shape[1]
        for index in self.columns.indices:
            if index >= width:
                raise ColumnIndexOutOfBounds(index, width)
        values = digits[:, list(self.columns.indices)]
        return self.operator.check_many(values, digits)

    def similar(self, config: GameConfiguration) -> List[SimilarGroup]:
        op, columns = self.operator, self.columns
        same_size = [MatchesOp(op, cs) for cs in config.column_combinations(len(columns))]
        size = len(columns)

        if isinstance(op, (Pair, Impair)):
            return [
                (
                    f"{_capitalize(_columns_phrase(columns))} is even or odd",
                    [MatchesOp(Pair(), columns), MatchesOp(Impair(), columns)],
                ),
                (f"One of the columns is {op.word}", same_size),
            ]
        if isinstance(op, (Lowest, Highest)):
            return [(f"One of the columns is the {op.word}", same_size)]
        if isinstance(op, SumOperator):
            return [
                (
                    f"Sum of {_columns_phrase(columns)} is below, equal to or above {op.value}",
                    [MatchesOp(cls(op.value), columns) for cls in SUM_OPERATORS],
                ),
                (
                    f"Sum of {size} {_plural(size, 'column', 'columns')} is {op.word} {op.value}",
                    same_size,
                ),
            ]
        raise EnigmindError(f"no similar rules defined for operator {op!r}")

    def to_text(self) -> str:
        op, columns = self.operator, self.columns
        subject = _capitalize(_columns_phrase(columns))
        many = len(columns) > 1
        if isinstance(op, (Pair, Impair)):
            return f"{subject} {'are all' if many else 'is'} {op.word}."
        if isinstance(op, (Lowest, Highest)):
            return (
                f"{subject} {'each hold' if many else 'holds'} the {op.word} digit of the code, "
                f"and no other column ties it."
            )
        if isinstance(op, SumOperator):
            if many:
                return f"The sum of {_columns_phrase(columns)} is {op.word} {op.value}."
            return f"{subject} is {op.word} {op.value}."
        raise EnigmindError(f"no text defined for operator {op!r}")

    def to_json(self) -> Dict:
        return {
            "type": self.rule_name,
            "operator": self.operator.to_json(),
            "columns": list(self.columns.indices),
        }

    def __str__(self) -> str:
        op = self.operator
        if isinstance(op, SumOperator):
            return f"{op.rule_name}({self.columns}, {op.value})"
        return f"{_DISPLAY_NAMES[op.rule_name]}({self.columns})"


@dataclass(frozen=True, repr=False)
class XColumnsEquals(Rule):
    """Exactly ``count`` digits of the whole code equal ``value``."""

    count: int
    value: int
    rule_name: ClassVar[str] = "XColumnsEquals"

    def evaluate(self, code: Code) -> bool:
        return sum(1 for d in code.digits if d == self.value) == self.count

    def evaluate_many(self, digits: np.ndarray) -> np.ndarray:
        return (digits == self.value).sum(axis=1) == self.count

    def similar(self, config: GameConfiguration) -> List[SimilarGroup]:
        return [
            (
                f"There are X columns equal to {self.value}",
                [XColumnsEquals(i, self.value) for i in range(config.column_count + 1)],
            )
        ]

    def to_text(self) -> str:
        return (
            f"Exactly {self.count} {_plural(self.count, 'digit', 'digits')} "
            f"{_plural(self.count, 'is', 'are')} equal to {self.value}."
        )

    def to_json(self) -> Dict:
        return {"type": self.rule_name, "count": self.count, "value": self.value}

    def __str__(self) -> str:
        return f"XColumnsEquals({self.count}, {self.value})"


def rule_from_json(data: Dict) -> Rule:
    kind = data.get("type")
    if kind == MatchesOp.rule_name:
        return MatchesOp(operator_from_json(data["operator"]), ColumnSet.of(*data["columns"]))
    if kind == XColumnsEquals.rule_name:
        return XColumnsEquals(int(data["count"]), int(data["value"]))
    raise EnigmindError(f"unknown rule payload: {data!r}")


# ---------------------------------------------------------------------------
# Materialisation over the solution space
# ---------------------------------------------------------------------------


def evaluate(rule: Rule, code: Code) -> bool:
    return rule.evaluate(code)


def mask_of(rule: Rule, config: GameConfiguration) -> BitMask:
    """Bit ``i`` is set iff *rule* holds for ``decode(i)``."""
    return BitMask.from_bools(rule.evaluate_many(config.digit_matrix()))
