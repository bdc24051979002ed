"""Jupiter DCA: keeper fills become trades, open/close become transfers.

FilledEvent layout (after the 16-byte event tag):
  user_key(32) dca_key(32) input_mint(32) output_mint(32)
  in_amount(u64) out_amount(u64) fee_mint(32) fee(u64)
"""

from dataclasses import dataclass

from dexlens.models import FeeInfo, TokenInfo, TradeInfo
from dexlens.parsers.base import BaseParser, DecodeContext, EventDecoder, EventTable, dispatch
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS
from dexlens.parsers.discriminators import JUPITER_DCA
from dexlens.parsers.jupiter.transfers import InstructionTransferParser
from dexlens.parsers.utils import get_trade_type, sort_by_idx


@dataclass
class DCAFilledEvent:
    user_key: str
    dca_key: str
    input_mint: str
    output_mint: str
    in_amount: int
    out_amount: int
    fee_mint: str
    fee: int


def decode_filled_event(data: bytes) -> DCAFilledEvent:
    reader = BinaryReader(data)
    return DCAFilledEvent(
        user_key=reader.read_pubkey(),
        dca_key=reader.read_pubkey(),
        input_mint=reader.read_pubkey(),
        output_mint=reader.read_pubkey(),
        in_amount=reader.read_u64(),
        out_amount=reader.read_u64(),
        fee_mint=reader.read_pubkey(),
        fee=reader.read_u64(),
    )


class JupiterDCAParser(BaseParser):
    def event_table(self) -> EventTable:
        return {"FILLED": EventDecoder((JUPITER_DCA.FILLED_EVENT,), 16, self.build_trade)}

    def build_trade(self, data: bytes, ctx: DecodeContext) -> TradeInfo:
        event = decode_filled_event(data)
        decimals = self.adapter.get_token_decimals
        trade = TradeInfo(
            type=get_trade_type(event.input_mint, event.output_mint),
            input_token=TokenInfo.from_raw(event.input_mint, event.in_amount, decimals(event.input_mint)),
            output_token=TokenInfo.from_raw(event.output_mint, event.out_amount, decimals(event.output_mint)),
            user=event.user_key,
            program_id=DEX_PROGRAMS.JUPITER_DCA.id,
            amm=self.dex_info.amm or DEX_PROGRAMS.JUPITER_DCA.name,
            route=DEX_PROGRAMS.JUPITER_DCA.name,
            slot=self.adapter.slot,
            timestamp=self.adapter.block_time,
            signature=self.adapter.signature,
            idx=ctx.idx,
            pool=[event.dca_key],
        )
        if event.fee:
            trade.fee = FeeInfo.from_raw(
                event.fee_mint, event.fee, decimals(event.fee_mint), dex=DEX_PROGRAMS.JUPITER_DCA.name
            )
        return trade

    def process_trades(self) -> list[TradeInfo]:
        trades = [
            self.utils.attach_token_transfer_info(trade, self.transfer_actions)
            for _, _, trade in dispatch(self.event_table(), self.classified_instructions)
        ]
        return sort_by_idx(trades)


class JupiterDCATransferParser(InstructionTransferParser):
    program_ids = (DEX_PROGRAMS.JUPITER_DCA.id,)
    discriminators = (
        JUPITER_DCA.OPEN_DCA,
        JUPITER_DCA.OPEN_DCA_V2,
        JUPITER_DCA.CLOSE_DCA,
        JUPITER_DCA.END_AND_CLOSE,
    )
