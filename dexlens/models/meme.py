from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from dexlens.models.trade import TokenInfo


class MemeEventType(str, Enum):
    CREATE = "CREATE"
    BUY = "BUY"
    SELL = "SELL"
    SWAP = "SWAP"
    COMPLETE = "COMPLETE"
    MIGRATE = "MIGRATE"


@dataclass
class MemeEvent:
    """Launchpad / bonding-curve lifecycle event."""

    type: MemeEventType
    protocol: str
    base_mint: str
    quote_mint: str
    user: str | None = None
    creator: str | None = None
    bonding_curve: str | None = None
    pool: str | None = None
    pool_dex: str | None = None
    platform_config: str | None = None
    input_token: TokenInfo | None = None
    output_token: TokenInfo | None = None

    # CREATE only
    name: str | None = None
    symbol: str | None = None
    uri: str | None = None
    decimals: int | None = None
    total_supply: Decimal | None = None

    # Fees in ui units of the quote token
    fee: Decimal | None = None
    protocol_fee: Decimal | None = None
    platform_fee: Decimal | None = None
    share_fee: Decimal | None = None
    creator_fee: Decimal | None = None

    signature: str = ""
    slot: int = 0
    timestamp: int = 0
    idx: str = ""
