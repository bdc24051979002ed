from dexlens.models import DexInfo, FeeInfo, TradeInfo
from dexlens.parsers.base import BaseParser
from dexlens.parsers.constants import DEX_PROGRAMS, get_program_name
from dexlens.parsers.discriminators import RAYDIUM, RAYDIUM_CL, RAYDIUM_CPMM
from dexlens.parsers.utils import get_instruction_data, sort_by_idx

_V4_PROGRAMS = (DEX_PROGRAMS.RAYDIUM_V4.id, DEX_PROGRAMS.RAYDIUM_AMM.id)
_V4_LIQUIDITY_CODES = (RAYDIUM.CREATE, RAYDIUM.ADD_LIQUIDITY, RAYDIUM.REMOVE_LIQUIDITY)
_CL_LIQUIDITY = RAYDIUM_CL.CREATE + RAYDIUM_CL.ADD_LIQUIDITY + RAYDIUM_CL.REMOVE_LIQUIDITY
_CPMM_LIQUIDITY = (RAYDIUM_CPMM.CREATE, RAYDIUM_CPMM.ADD_LIQUIDITY, RAYDIUM_CPMM.REMOVE_LIQUIDITY)

# Pool account position per program
_POOL_INDEX = {
    DEX_PROGRAMS.RAYDIUM_V4.id: 1,
    DEX_PROGRAMS.RAYDIUM_AMM.id: 1,
    DEX_PROGRAMS.RAYDIUM_CL.id: 2,
    DEX_PROGRAMS.RAYDIUM_CPMM.id: 3,
}


class RaydiumParser(BaseParser):
    """Swaps on Raydium V4 / AMM / CLMM / CPMM / route, inferred from transfers."""

    def process_trades(self) -> list[TradeInfo]:
        trades: list[TradeInfo] = []
        for item in self.classified_instructions:
            data = get_instruction_data(item.instruction)
            if self.is_liquidity_instruction(item.program_id, data):
                continue

            transfers = self.get_transfers_for_instruction(item.program_id, item.outer_index, item.inner_index)
            if len(transfers) < 2:
                continue

            dex_info = DexInfo(
                program_id=self.dex_info.program_id,
                amm=self.dex_info.amm or get_program_name(item.program_id),
                route=self.dex_info.route,
            )
            trade = self.utils.process_swap_data(transfers[:2], dex_info)
            if trade is None:
                continue
            trade.idx = item.idx

            pool = self.get_pool_address(item.program_id, item.instruction.accounts)
            if pool:
                trade.pool = [pool]
            if len(transfers) > 2:
                extra = transfers[2].info
                trade.fee = FeeInfo(
                    mint=extra.mint,
                    amount=extra.token_amount.ui_amount,
                    amount_raw=extra.token_amount.amount,
                    decimals=extra.token_amount.decimals,
                    recipient=extra.destination,
                )
            trades.append(self.utils.attach_token_transfer_info(trade, self.transfer_actions))
        return sort_by_idx(trades)

    @staticmethod
    def is_liquidity_instruction(program_id: str, data: bytes) -> bool:
        if program_id in _V4_PROGRAMS and data[:1] in _V4_LIQUIDITY_CODES:
            return True
        return data[:8] in _CL_LIQUIDITY or data[:8] in _CPMM_LIQUIDITY

    @staticmethod
    def get_pool_address(program_id: str, accounts: tuple[str, ...]) -> str | None:
        index = _POOL_INDEX.get(program_id)
        if index is None or len(accounts) <= 5:
            return None
        return accounts[index]
