from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from dexlens.models.common import TokenAmount, to_ui_amount


class TradeType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    SWAP = "SWAP"


@dataclass
class TokenInfo:
    mint: str
    amount: Decimal  # ui-scaled
    amount_raw: str
    decimals: int
    authority: str | None = None
    source: str | None = None
    destination: str | None = None
    destination_owner: str | None = None
    source_balance: TokenAmount | None = None
    source_pre_balance: TokenAmount | None = None
    destination_balance: TokenAmount | None = None
    destination_pre_balance: TokenAmount | None = None
    balance_change: str | None = None  # raw signer delta that overrides amount_raw downstream

    @classmethod
    def from_raw(cls, mint: str, raw: int | str, decimals: int) -> "TokenInfo":
        return cls(mint=mint, amount=to_ui_amount(raw, decimals), amount_raw=str(int(raw)), decimals=decimals)


@dataclass
class FeeInfo:
    mint: str
    amount: Decimal
    amount_raw: str
    decimals: int
    dex: str | None = None
    type: str | None = None  # "protocol", "coinCreator", ...
    recipient: str | None = None

    @classmethod
    def from_raw(cls, mint: str, raw: int | str, decimals: int, **extra: str | None) -> "FeeInfo":
        return cls(mint=mint, amount=to_ui_amount(raw, decimals), amount_raw=str(int(raw)), decimals=decimals, **extra)


@dataclass
class TradeInfo:
    type: TradeType
    input_token: TokenInfo
    output_token: TokenInfo
    user: str
    program_id: str | None
    amm: str | None
    route: str
    slot: int
    timestamp: int
    signature: str
    idx: str
    pool: list[str] = field(default_factory=list)
    fee: FeeInfo | None = None
    fees: list[FeeInfo] = field(default_factory=list)
    signer: list[str] = field(default_factory=list)
