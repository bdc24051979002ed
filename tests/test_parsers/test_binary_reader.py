"""Tests for the little-endian Borsh reader."""

import struct

import pytest

from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import SYSTEM_PROGRAM_ID
from dexlens.parsers.exceptions import BinaryReaderError, DexParseError


class TestBinaryReader:
    def test_reads_integers_in_order(self) -> None:
        data = struct.pack("<BHIQq", 7, 513, 70_000, 2**63 + 5, -42)
        reader = BinaryReader(data)
        assert reader.read_u8() == 7
        assert reader.read_u16() == 513
        assert reader.read_u32() == 70_000
        assert reader.read_u64() == 2**63 + 5
        assert reader.read_i64() == -42
        assert reader.remaining() == 0

    def test_length_prefixed_string(self) -> None:
        payload = "PEPE 🐸".encode()
        reader = BinaryReader(struct.pack("<I", len(payload)) + payload + b"\x01")
        assert reader.read_string() == "PEPE 🐸"
        assert reader.read_bool() is True

    def test_pubkey_is_base58(self) -> None:
        reader = BinaryReader(bytes(32))
        assert reader.read_pubkey() == SYSTEM_PROGRAM_ID

    def test_start_offset_and_skip(self) -> None:
        reader = BinaryReader(b"\xff" * 8 + struct.pack("<H", 9), offset=4)
        reader.skip(4)
        assert reader.offset == 8
        assert reader.read_u16() == 9

    def test_over_read_raises(self) -> None:
        reader = BinaryReader(b"\x01\x02\x03")
        with pytest.raises(BinaryReaderError):
            reader.read_u64()
        # failed read does not advance
        assert reader.offset == 0

    def test_truncated_string_raises(self) -> None:
        reader = BinaryReader(struct.pack("<I", 50) + b"short")
        with pytest.raises(DexParseError):
            reader.read_string()
