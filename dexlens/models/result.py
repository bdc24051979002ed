from dataclasses import dataclass, field
from decimal import Decimal

from pydantic import BaseModel, Field

from config.settings import settings, split_ids
from dexlens.models.common import BalanceChange, TokenAmount, TransactionStatus
from dexlens.models.meme import MemeEvent
from dexlens.models.pool import PoolEvent
from dexlens.models.trade import TradeInfo
from dexlens.models.transfer import TransferData
from dexlens.parsers.constants import DEX_PROGRAMS


class ParseConfig(BaseModel):
    """Per-call parser options."""

    model_config = {"extra": "ignore"}

    try_unknown_dex: bool = True
    aggregate_trades: bool = False
    program_ids: list[str] | None = None  # allow-list
    ignore_program_ids: list[str] | None = None  # deny-list
    throw_error: bool = False
    router_ids: list[str] = Field(default_factory=lambda: [DEX_PROGRAMS.OKX_ROUTER.id])

    @classmethod
    def from_settings(cls) -> "ParseConfig":
        return cls(
            try_unknown_dex=settings.parser_try_unknown_dex,
            aggregate_trades=settings.parser_aggregate_trades,
            program_ids=split_ids(settings.parser_program_ids) or None,
            ignore_program_ids=split_ids(settings.parser_ignore_program_ids) or None,
            throw_error=settings.parser_throw_error,
            router_ids=split_ids(settings.parser_router_ids),
        )


def _default_fee() -> TokenAmount:
    return TokenAmount(amount="0", ui_amount=Decimal(0), decimals=9)


@dataclass
class ParseResult:
    """Everything extracted from one transaction."""

    state: bool = True
    fee: TokenAmount = field(default_factory=_default_fee)
    aggregate_trade: TradeInfo | None = None
    trades: list[TradeInfo] = field(default_factory=list)
    liquidities: list[PoolEvent] = field(default_factory=list)
    transfers: list[TransferData] = field(default_factory=list)
    meme_events: list[MemeEvent] = field(default_factory=list)
    sol_balance_change: BalanceChange | None = None
    token_balance_change: dict[str, BalanceChange] | None = None
    slot: int = 0
    timestamp: int = 0
    signature: str = ""
    signer: list[str] = field(default_factory=list)
    compute_units: int = 0
    tx_status: TransactionStatus = TransactionStatus.UNKNOWN
    msg: str = ""
