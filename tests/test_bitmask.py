"""
Unit tests for the word-packed BitMask.
"""

import numpy as np
import pytest

from enigmind.bitmask import MAX_BITS, BitMask
from enigmind.errors import BitMaskError


class TestConstruction:
    @pytest.mark.parametrize("length", [1, 63, 64, 65, 125, 200])
    def test_ones_sets_exactly_length_bits(self, length):
        assert BitMask.ones(length).count_ones() == length
        assert BitMask.zeros(length).count_ones() == 0

    def test_from_bools_maps_element_i_to_bit_i(self):
        flags = np.zeros(130, dtype=bool)
        flags[[0, 5, 64, 129]] = True

        mask = BitMask.from_bools(flags)

        assert len(mask) == 130
        assert mask.ones_indices() == [0, 5, 64, 129]
        assert mask.get(64)
        assert not mask.get(63)

    def test_invalid_lengths_are_rejected(self):
        with pytest.raises(BitMaskError):
            BitMask.zeros(-1)
        with pytest.raises(BitMaskError):
            BitMask.zeros(0)
        with pytest.raises(BitMaskError):
            BitMask.ones(0)
        with pytest.raises(BitMaskError):
            BitMask.ones(MAX_BITS + 1)


class TestBitAccess:
    def test_set_and_clear(self):
        mask = BitMask.zeros(100)

        mask.set(70, True)
        mask.set(3, True)
        mask.set(3, False)

        assert mask.ones_indices() == [70]

    @pytest.mark.parametrize("index", [-1, 100])
    def test_set_out_of_range_raises(self, index):
        with pytest.raises(BitMaskError):
            BitMask.zeros(100).set(index, True)

    def test_trailing_zeros_is_lowest_set_bit(self):
        mask = BitMask.zeros(200)
        mask.set(150, True)
        mask.set(67, True)

        assert mask.trailing_zeros() == 67

    def test_trailing_zeros_of_empty_mask_is_length(self):
        assert BitMask.zeros(10).trailing_zeros() == 10


class TestBitwise:
    def test_and_or(self):
        a = BitMask.from_bools([True, True, False, False])
        b = BitMask.from_bools([True, False, True, False])

        assert (a & b).ones_indices() == [0]
        assert (a | b).ones_indices() == [0, 1, 2]

    def test_in_place_and_mutates_left_operand_only(self):
        a = BitMask.ones(70)
        b = BitMask.zeros(70)
        b.set(69, True)

        a &= b

        assert a.ones_indices() == [69]
        assert b.ones_indices() == [69]

    def test_length_mismatch_raises(self):
        with pytest.raises(BitMaskError):
            BitMask.ones(10) & BitMask.ones(11)

    def test_equality_and_subset(self):
        a = BitMask.from_bools([True, False, True])
        b = BitMask.from_bools([True, True, True])

        assert a == a.copy()
        assert a != b
        assert a.is_subset_of(b)
        assert not b.is_subset_of(a)


class TestSerialization:
    def test_hex_roundtrip_preserves_bits(self):
        mask = BitMask.zeros(125)
        for i in (0, 17, 64, 124):
            mask.set(i, True)

        restored = BitMask.from_hex(125, mask.to_hex())

        assert restored == mask

    def test_hex_with_wrong_size_raises(self):
        with pytest.raises(BitMaskError):
            BitMask.from_hex(125, BitMask.ones(10).to_hex() + "00")

    def test_hex_with_bits_past_length_raises(self):
        with pytest.raises(BitMaskError):
            BitMask.from_hex(10, BitMask.ones(64).to_hex())
