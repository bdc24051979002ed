"""Sequential little-endian reader for Borsh-style instruction payloads."""

import struct

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from dexlens.parsers.exceptions import BinaryReaderError


class BinaryReader:
    def __init__(self, data: bytes, offset: int = 0) -> None:
        self._data = bytes(data)
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _check(self, length: int) -> None:
        if self._offset + length > len(self._data):
            raise BinaryReaderError(
                f"read of {length} bytes at offset {self._offset} exceeds buffer of {len(self._data)}"
            )

    def _unpack(self, fmt: str, size: int) -> int:
        self._check(size)
        value = struct.unpack_from(fmt, self._data, self._offset)[0]
        self._offset += size
        return value

    def read_u8(self) -> int:
        return self._unpack("<B", 1)

    def read_u16(self) -> int:
        return self._unpack("<H", 2)

    def read_u32(self) -> int:
        return self._unpack("<I", 4)

    def read_u64(self) -> int:
        return self._unpack("<Q", 8)

    def read_i64(self) -> int:
        return self._unpack("<q", 8)

    def read_bool(self) -> bool:
        return self.read_u8() == 1

    def read_fixed(self, length: int) -> bytes:
        self._check(length)
        value = self._data[self._offset : self._offset + length]
        self._offset += length
        return value

    def read_string(self) -> str:
        """Read a u32 length-prefixed UTF-8 string."""
        length = self.read_u32()
        return self.read_fixed(length).decode("utf-8", errors="replace")

    def read_pubkey(self) -> str:
        return str(Pubkey.from_bytes(self.read_fixed(32)))

    def skip(self, length: int) -> None:
        self._check(length)
        self._offset += length
