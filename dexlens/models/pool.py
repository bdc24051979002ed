from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class PoolEventType(str, Enum):
    CREATE = "CREATE"
    ADD = "ADD"
    REMOVE = "REMOVE"


@dataclass
class PoolEvent:
    """Liquidity pool create / add / remove decoded from one instruction."""

    type: PoolEventType
    user: str
    program_id: str
    amm: str
    slot: int
    timestamp: int
    signature: str
    idx: str = ""
    pool_id: str = ""
    config: str | None = None
    pool_lp_mint: str | None = None
    token0_mint: str | None = None
    token0_amount: Decimal = Decimal(0)
    token0_amount_raw: str = "0"
    token0_decimals: int | None = None
    token0_balance_change: str | None = None
    token1_mint: str | None = None
    token1_amount: Decimal = Decimal(0)
    token1_amount_raw: str = "0"
    token1_decimals: int | None = None
    token1_balance_change: str | None = None
    lp_amount: Decimal = Decimal(0)
    lp_amount_raw: str = "0"
    signer: list[str] = field(default_factory=list)
