"""Jupiter v6 aggregator routes.

Every hop of a route emits a SwapEvent through self-CPI:
  amm(32) input_mint(32) input_amount(u64) output_mint(32) output_amount(u64)
Hops of one outer instruction are merged into a single trade.
"""

from dataclasses import dataclass
from itertools import groupby

from loguru import logger

from dexlens.models import DexInfo, TokenInfo, TradeInfo
from dexlens.parsers.base import BaseParser, DecodeContext, EventDecoder, EventTable, dispatch
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS, get_program_name
from dexlens.parsers.discriminators import JUPITER
from dexlens.parsers.utils import get_final_swap, get_trade_type, sort_by_idx


@dataclass
class JupiterSwapEvent:
    amm: str
    input_mint: str
    input_amount: int
    output_mint: str
    output_amount: int


def decode_swap_event(data: bytes) -> JupiterSwapEvent:
    reader = BinaryReader(data)
    return JupiterSwapEvent(
        amm=reader.read_pubkey(),
        input_mint=reader.read_pubkey(),
        input_amount=reader.read_u64(),
        output_mint=reader.read_pubkey(),
        output_amount=reader.read_u64(),
    )


class JupiterParser(BaseParser):
    def event_table(self) -> EventTable:
        return {"SWAP": EventDecoder((JUPITER.ROUTE_EVENT,), 16, self.decode_leg)}

    def decode_leg(self, data: bytes, ctx: DecodeContext) -> TradeInfo:
        event = decode_swap_event(data)
        input_token = TokenInfo.from_raw(
            event.input_mint, event.input_amount, self.adapter.get_token_decimals(event.input_mint)
        )
        output_token = TokenInfo.from_raw(
            event.output_mint, event.output_amount, self.adapter.get_token_decimals(event.output_mint)
        )
        return TradeInfo(
            type=get_trade_type(event.input_mint, event.output_mint),
            input_token=input_token,
            output_token=output_token,
            user=self.adapter.signer,
            program_id=DEX_PROGRAMS.JUPITER.id,
            amm=get_program_name(event.amm),
            route=DEX_PROGRAMS.JUPITER.name,
            slot=self.adapter.slot,
            timestamp=self.adapter.block_time,
            signature=self.adapter.signature,
            idx=ctx.idx,
        )

    def process_trades(self) -> list[TradeInfo]:
        legs = [
            (ctx.outer_index, leg)
            for _, ctx, leg in dispatch(self.event_table(), self.classified_instructions)
            if ctx.program_id == DEX_PROGRAMS.JUPITER.id
        ]
        dex_info = DexInfo(
            program_id=DEX_PROGRAMS.JUPITER.id,
            amm=self.dex_info.amm,
            route=DEX_PROGRAMS.JUPITER.name,
        )

        trades = []
        for outer_index, group in groupby(legs, key=lambda pair: pair[0]):
            route_legs = [leg for _, leg in group]
            trade = get_final_swap(route_legs, dex_info)
            if trade is None:
                continue
            logger.debug(f"[JUPITER] Route at {outer_index}: {len(route_legs)} legs via {trade.amm}")
            trades.append(self.utils.attach_token_transfer_info(trade, self.transfer_actions))
        return sort_by_idx(trades)
