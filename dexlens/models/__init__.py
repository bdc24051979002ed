from dexlens.models.common import (
    BalanceChange,
    DexInfo,
    TokenAmount,
    TransactionStatus,
    to_ui_amount,
)
from dexlens.models.instruction import (
    ClassifiedInstruction,
    CompiledInstruction,
    Instruction,
    ParsedInstruction,
    instruction_key,
)
from dexlens.models.meme import MemeEvent, MemeEventType
from dexlens.models.pool import PoolEvent, PoolEventType
from dexlens.models.result import ParseConfig, ParseResult
from dexlens.models.trade import FeeInfo, TokenInfo, TradeInfo, TradeType
from dexlens.models.transfer import TransferData, TransferInfo, TransferRecord

__all__ = [
    "BalanceChange",
    "ClassifiedInstruction",
    "CompiledInstruction",
    "DexInfo",
    "FeeInfo",
    "Instruction",
    "MemeEvent",
    "MemeEventType",
    "ParseConfig",
    "ParseResult",
    "ParsedInstruction",
    "PoolEvent",
    "PoolEventType",
    "TokenAmount",
    "TokenInfo",
    "TradeInfo",
    "TradeType",
    "TransactionStatus",
    "TransferData",
    "TransferInfo",
    "TransferRecord",
    "instruction_key",
    "to_ui_amount",
]
