"""Tests for the block-file entry point."""

import pytest

from dexlens.main import get_block_number


class TestGetBlockNumber:
    def test_slot_preferred(self) -> None:
        assert get_block_number({"slot": 100, "parentSlot": 41}) == 100

    def test_parent_slot_plus_one(self) -> None:
        assert get_block_number({"parentSlot": 41}) == 42

    @pytest.mark.parametrize("block", [{}, {"parentSlot": None}, {"slot": None, "parentSlot": None}])
    def test_missing_slots_are_zero(self, block) -> None:
        assert get_block_number(block) == 0
