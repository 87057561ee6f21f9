"""Word-packed bit-vector over the solution space.

Bit ``i`` of a :class:`BitMask` lives in word ``i // 64`` at position
``i % 64``.  Words are stored little-endian so that the packed bytes are
identical on every platform, which keeps :meth:`BitMask.to_hex` portable.
Bits past ``len(mask)`` in the last word are always zero.
"""
from __future__ import annotations

from typing import Iterable, Union

import numpy as np

from .errors import BitMaskError

WORD_BITS = 64
WORD_DTYPE = np.dtype("<u8")
MAX_BITS = 1 << 32  # refuse sizes whose packed storage would not fit in memory

_FULL_WORD = (1 << WORD_BITS) - 1


def _word_count(length: int) -> int:
    return (length + WORD_BITS - 1) // WORD_BITS


def _check_length(length: int) -> None:
    if length < 1:
        raise BitMaskError(f"bitmask length must be positive, got {length}")
    if length > MAX_BITS:
        raise BitMaskError(f"bitmask length {length} exceeds the supported maximum of {MAX_BITS} bits")


class BitMask:
    """Fixed-length bit-vector with the handful of operations the generator needs."""

    __slots__ = ("_length", "_words")

    def __init__(self, length: int, words: np.ndarray):
        _check_length(length)
        if words.shape != (_word_count(length),):
            raise BitMaskError(
                f"expected {_word_count(length)} words for {length} bits, got {words.shape[0]}"
            )
        self._length = length
        self._words = words.astype(WORD_DTYPE, copy=False)

    # ---- constructors -----------------------------------------------------
    @classmethod
    def zeros(cls, length: int) -> "BitMask":
        _check_length(length)
        return cls(length, np.zeros(_word_count(length), dtype=WORD_DTYPE))

    @classmethod
    def ones(cls, length: int) -> "BitMask":
        _check_length(length)
        words = np.full(_word_count(length), _FULL_WORD, dtype=WORD_DTYPE)
        tail = length % WORD_BITS
        if tail:
            words[-1] = (1 << tail) - 1
        return cls(length, words)

    @classmethod
    def from_bools(cls, flags: Union[np.ndarray, Iterable[bool]]) -> "BitMask":
        """Pack a boolean sequence; element ``i`` becomes bit ``i``."""
        if not isinstance(flags, np.ndarray):
            flags = list(flags)
        flags = np.asarray(flags, dtype=bool)
        if flags.ndim != 1:
            raise BitMaskError("from_bools expects a one-dimensional sequence")
        length = flags.shape[0]
        _check_length(length)
        packed = np.packbits(flags, bitorder="little")
        padding = (-packed.shape[0]) % WORD_DTYPE.itemsize
        if padding:
            packed = np.concatenate([packed, np.zeros(padding, dtype=np.uint8)])
        return cls(length, packed.view(WORD_DTYPE).copy())

    @classmethod
    def from_hex(cls, length: int, text: str) -> "BitMask":
        """Inverse of :meth:`to_hex`."""
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise BitMaskError(f"invalid bitmask hex payload: {e}") from e
        if len(raw) != _word_count(length) * WORD_DTYPE.itemsize:
            raise BitMaskError(f"hex payload of {len(raw)} bytes does not hold {length} bits")
        mask = cls(length, np.frombuffer(raw, dtype=WORD_DTYPE).copy())
        if mask.count_ones() != int(mask.to_bools().sum()):
            raise BitMaskError("hex payload has bits set past the mask length")
        return mask

    # ---- bit access -------------------------------------------------------
    def __len__(self) -> int:
        return self._length

    def _locate(self, index: int):
        if not 0 <= index < self._length:
            raise BitMaskError(f"bit index {index} out of range for a {self._length}-bit mask")
        return divmod(index, WORD_BITS)

    def get(self, index: int) -> bool:
        word, bit = self._locate(index)
        return bool((int(self._words[word]) >> bit) & 1)

    __getitem__ = get

    def set(self, index: int, value: bool) -> None:
        word, bit = self._locate(index)
        current = int(self._words[word])
        if value:
            current |= 1 << bit
        else:
            current &= ~(1 << bit) & _FULL_WORD
        self._words[word] = current

    # ---- queries ----------------------------------------------------------
    def count_ones(self) -> int:
        return int(np.unpackbits(self._words.view(np.uint8)).sum())

    def trailing_zeros(self) -> int:
        """Index of the lowest set bit, or ``len(self)`` when no bit is set."""
        nonzero = np.flatnonzero(self._words)
        if nonzero.size == 0:
            return self._length
        word_index = int(nonzero[0])
        word = int(self._words[word_index])
        return word_index * WORD_BITS + (word & -word).bit_length() - 1

    def to_bools(self) -> np.ndarray:
        bits = np.unpackbits(self._words.view(np.uint8), bitorder="little")
        return bits[: self._length].astype(bool)

    def ones_indices(self) -> list[int]:
        return [int(i) for i in np.flatnonzero(self.to_bools())]

    def is_subset_of(self, other: "BitMask") -> bool:
        return (self | other) == other

    def copy(self) -> "BitMask":
        return BitMask(self._length, self._words.copy())

    # ---- bitwise operators ------------------------------------------------
    def _compatible(self, other: object) -> "BitMask":
        if not isinstance(other, BitMask):
            raise BitMaskError(f"cannot combine a BitMask with {type(other).__name__}")
        if other._length != self._length:
            raise BitMaskError(f"length mismatch: {self._length} vs {other._length} bits")
        return other

    def __and__(self, other: "BitMask") -> "BitMask":
        other = self._compatible(other)
        return BitMask(self._length, np.bitwise_and(self._words, other._words))

    def __or__(self, other: "BitMask") -> "BitMask":
        other = self._compatible(other)
        return BitMask(self._length, np.bitwise_or(self._words, other._words))

    def __iand__(self, other: "BitMask") -> "BitMask":
        other = self._compatible(other)
        np.bitwise_and(self._words, other._words, out=self._words)
        return self

    def __ior__(self, other: "BitMask") -> "BitMask":
        other = self._compatible(other)
        np.bitwise_or(self._words, other._words, out=self._words)
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitMask):
            return NotImplemented
        return self._length == other._length and bool(np.array_equal(self._words, other._words))

    __hash__ = None  # mutable

    # ---- serialisation / display -----------------------------------------
    def to_hex(self) -> str:
        return self._words.tobytes().hex()

    def to_bit_string(self) -> str:
        return "".join("1" if b else "0" for b in self.to_bools())

    def __str__(self) -> str:
        if self._length <= WORD_BITS:
            return self.to_bit_string()
        return f"<{self.count_ones()}/{self._length} bits set>"

    def __repr__(self) -> str:
        return f"BitMask(length={self._length}, ones={self.count_ones()})"
