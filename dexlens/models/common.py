from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


def to_ui_amount(raw: int | str, decimals: int) -> Decimal:
    """Scale a raw integer amount by 10^-decimals without float rounding."""
    return Decimal(int(raw)).scaleb(-decimals)


class TransactionStatus(str, Enum):
    UNKNOWN = "unknown"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class TokenAmount:
    amount: str  # raw integer as string
    ui_amount: Decimal
    decimals: int

    @classmethod
    def from_raw(cls, raw: int | str, decimals: int) -> "TokenAmount":
        return cls(amount=str(int(raw)), ui_amount=to_ui_amount(raw, decimals), decimals=decimals)


@dataclass
class BalanceChange:
    pre: TokenAmount
    post: TokenAmount
    change: TokenAmount


@dataclass
class DexInfo:
    program_id: str | None = None
    amm: str | None = None
    route: str | None = None
