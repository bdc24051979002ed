class DexParseError(Exception):
    pass


class BinaryReaderError(DexParseError):
    pass


class EventDataError(DexParseError):
    pass


class InsufficientAccountsError(DexParseError):
    pass


class BaseMintMismatchError(DexParseError):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"baseMint mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class BlockDataError(DexParseError):
    pass
