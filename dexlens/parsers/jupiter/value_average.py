"""Jupiter value averaging (VA): keeper fills become trades, deposits and withdrawals transfers.

FillEvent layout (after the 16-byte event tag):
  value_average(32) user(32) keeper(32) input_mint(32) output_mint(32)
  input_amount(u64) output_amount(u64) fee(u64)
The fee is charged in the output mint.
"""

from dataclasses import dataclass

from dexlens.models import FeeInfo, TokenInfo, TradeInfo
from dexlens.parsers.base import BaseParser, DecodeContext, EventDecoder, EventTable, dispatch
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS
from dexlens.parsers.discriminators import JUPITER_VA
from dexlens.parsers.jupiter.transfers import InstructionTransferParser
from dexlens.parsers.utils import get_trade_type, sort_by_idx


@dataclass
class VAFillEvent:
    value_average: str
    user: str
    keeper: str
    input_mint: str
    output_mint: str
    input_amount: int
    output_amount: int
    fee: int


def decode_fill_event(data: bytes) -> VAFillEvent:
    reader = BinaryReader(data)
    return VAFillEvent(
        value_average=reader.read_pubkey(),
        user=reader.read_pubkey(),
        keeper=reader.read_pubkey(),
        input_mint=reader.read_pubkey(),
        output_mint=reader.read_pubkey(),
        input_amount=reader.read_u64(),
        output_amount=reader.read_u64(),
        fee=reader.read_u64(),
    )


class JupiterVAParser(BaseParser):
    def event_table(self) -> EventTable:
        return {"FILL": EventDecoder((JUPITER_VA.FILL_EVENT,), 16, self.build_trade)}

    def build_trade(self, data: bytes, ctx: DecodeContext) -> TradeInfo:
        event = decode_fill_event(data)
        decimals = self.adapter.get_token_decimals
        output_decimals = decimals(event.output_mint)
        trade = TradeInfo(
            type=get_trade_type(event.input_mint, event.output_mint),
            input_token=TokenInfo.from_raw(event.input_mint, event.input_amount, decimals(event.input_mint)),
            output_token=TokenInfo.from_raw(event.output_mint, event.output_amount, output_decimals),
            user=event.user,
            program_id=DEX_PROGRAMS.JUPITER_VA.id,
            amm=self.dex_info.amm or DEX_PROGRAMS.JUPITER_VA.name,
            route=DEX_PROGRAMS.JUPITER_VA.name,
            slot=self.adapter.slot,
            timestamp=self.adapter.block_time,
            signature=self.adapter.signature,
            idx=ctx.idx,
            pool=[event.value_average],
        )
        if event.fee:
            trade.fee = FeeInfo.from_raw(
                event.output_mint, event.fee, output_decimals, dex=DEX_PROGRAMS.JUPITER_VA.name
            )
        return trade

    def process_trades(self) -> list[TradeInfo]:
        trades = [
            self.utils.attach_token_transfer_info(trade, self.transfer_actions)
            for _, _, trade in dispatch(self.event_table(), self.classified_instructions)
        ]
        return sort_by_idx(trades)


class JupiterVATransferParser(InstructionTransferParser):
    program_ids = (DEX_PROGRAMS.JUPITER_VA.id,)
    discriminators = (JUPITER_VA.OPEN, JUPITER_VA.DEPOSIT, JUPITER_VA.WITHDRAW, JUPITER_VA.CLOSE)
