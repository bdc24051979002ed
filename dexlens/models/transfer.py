from dataclasses import dataclass
from typing import Literal

from dexlens.models.common import TokenAmount
from dexlens.models.trade import TokenInfo

TransferType = Literal[
    "transfer",
    "transferChecked",
    "nativeTransfer",
    "mintTo",
    "burn",
    "mintToChecked",
    "burnChecked",
]


@dataclass
class TransferInfo:
    mint: str
    source: str
    destination: str
    token_amount: TokenAmount
    authority: str | None = None
    destination_owner: str | None = None
    source_balance: TokenAmount | None = None
    source_pre_balance: TokenAmount | None = None
    destination_balance: TokenAmount | None = None
    destination_pre_balance: TokenAmount | None = None


@dataclass
class TransferData:
    """One token movement produced by an inner or outer instruction."""

    type: TransferType
    program_id: str
    info: TransferInfo
    idx: str  # "outer-inner" or "outer"
    timestamp: int
    signature: str
    is_fee: bool = False

    def to_token_info(self) -> TokenInfo:
        info = self.info
        return TokenInfo(
            mint=info.mint,
            amount=info.token_amount.ui_amount,
            amount_raw=info.token_amount.amount,
            decimals=info.token_amount.decimals,
            authority=info.authority,
            source=info.source,
            destination=info.destination,
            destination_owner=info.destination_owner,
            source_balance=info.source_balance,
            source_pre_balance=info.source_pre_balance,
            destination_balance=info.destination_balance,
            destination_pre_balance=info.destination_pre_balance,
        )


@dataclass
class TransferRecord:
    """Flattened transfer view from the signer's perspective."""

    type: Literal["TRANSFER_IN", "TRANSFER_OUT"]
    token: TokenInfo
    from_account: str
    to_account: str
    timestamp: int
    signature: str
