"""Orca Whirlpool swaps and liquidity."""

from dexlens.models import DexInfo, PoolEventType, TradeInfo
from dexlens.parsers.base import BaseParser, LiquidityLayout, TransferLiquidityParser
from dexlens.parsers.constants import DEX_PROGRAMS, get_program_name
from dexlens.parsers.discriminators import ORCA
from dexlens.parsers.utils import get_instruction_data, sort_by_idx

_LIQUIDITY = ORCA.CREATE + ORCA.ADD_LIQUIDITY + ORCA.REMOVE_LIQUIDITY


class OrcaParser(BaseParser):
    def process_trades(self) -> list[TradeInfo]:
        trades: list[TradeInfo] = []
        for item in self.classified_instructions:
            if item.program_id != DEX_PROGRAMS.ORCA.id:
                continue
            if get_instruction_data(item.instruction)[:8] in _LIQUIDITY:
                continue

            transfers = self.get_transfers_for_instruction(item.program_id, item.outer_index, item.inner_index)
            if len(transfers) < 2:
                continue
            dex_info = DexInfo(
                program_id=self.dex_info.program_id,
                amm=self.dex_info.amm or get_program_name(item.program_id),
                route=self.dex_info.route,
            )
            trade = self.utils.process_swap_data(transfers, dex_info)
            if trade is not None:
                trade.idx = item.idx
                # swap: token_program 0, token_authority 1, whirlpool 2
                if len(item.instruction.accounts) > 2:
                    trade.pool = [item.instruction.accounts[2]]
                trades.append(self.utils.attach_token_transfer_info(trade, self.transfer_actions))
        return sort_by_idx(trades)


class OrcaLiquidityParser(TransferLiquidityParser):
    program_ids = (DEX_PROGRAMS.ORCA.id,)

    def get_pool_action(self, data: bytes) -> PoolEventType | None:
        head = data[:8]
        if head in ORCA.CREATE:
            return PoolEventType.CREATE
        if head in ORCA.ADD_LIQUIDITY:
            return PoolEventType.ADD
        if head in ORCA.REMOVE_LIQUIDITY:
            return PoolEventType.REMOVE
        return None

    def get_layout(self, action: PoolEventType, data: bytes) -> LiquidityLayout | None:
        if action == PoolEventType.CREATE:
            # initialize_pool_v2 inserts the two token badge accounts before the whirlpool
            pool_index = 6 if data[:8] == ORCA.CREATE[1] else 4
            return LiquidityLayout(pool_index=pool_index, token0_index=1, token1_index=2, config_index=0)
        return LiquidityLayout(pool_index=0)
