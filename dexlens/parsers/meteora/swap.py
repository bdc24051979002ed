from dexlens.models import DexInfo, TradeInfo
from dexlens.parsers.base import BaseParser
from dexlens.parsers.constants import DEX_PROGRAMS, get_program_name
from dexlens.parsers.discriminators import METEORA_DAMM, METEORA_DAMM_V2, METEORA_DLMM
from dexlens.parsers.utils import get_instruction_data, sort_by_idx

_PROGRAMS = (DEX_PROGRAMS.METEORA.id, DEX_PROGRAMS.METEORA_DAMM.id, DEX_PROGRAMS.METEORA_DAMM_V2.id)
_LIQUIDITY = tuple(
    discriminator
    for group in (METEORA_DLMM, METEORA_DAMM, METEORA_DAMM_V2)
    for discriminator in group.CREATE + group.ADD_LIQUIDITY + group.REMOVE_LIQUIDITY
)


def is_liquidity_instruction(data: bytes) -> bool:
    return any(data[: len(d)] == d for d in _LIQUIDITY)


class MeteoraParser(BaseParser):
    """Swaps on DLMM, DAMM and DAMM v2 pools, inferred from transfers."""

    def process_trades(self) -> list[TradeInfo]:
        trades: list[TradeInfo] = []
        for item in self.classified_instructions:
            if item.program_id not in _PROGRAMS:
                continue
            if is_liquidity_instruction(get_instruction_data(item.instruction)):
                continue

            transfers = self.get_transfers_for_instruction(item.program_id, item.outer_index, item.inner_index)
            if len(transfers) < 2:
                continue
            # DLMM host fee transfers follow the two swap legs
            if item.program_id == DEX_PROGRAMS.METEORA.id:
                transfers = transfers[:2]

            dex_info = DexInfo(
                program_id=self.dex_info.program_id,
                amm=self.dex_info.amm or get_program_name(item.program_id),
                route=self.dex_info.route,
            )
            trade = self.utils.process_swap_data(transfers, dex_info)
            if trade is None:
                continue
            trade.idx = item.idx
            pool = self.get_pool_address(item.program_id, item.instruction.accounts)
            if pool:
                trade.pool = [pool]
            trades.append(self.utils.attach_token_transfer_info(trade, self.transfer_actions))
        return sort_by_idx(trades)

    @staticmethod
    def get_pool_address(program_id: str, accounts: tuple[str, ...]) -> str | None:
        if len(accounts) <= 5:
            return None
        if program_id in (DEX_PROGRAMS.METEORA.id, DEX_PROGRAMS.METEORA_DAMM.id):
            return accounts[0]
        if program_id == DEX_PROGRAMS.METEORA_DAMM_V2.id:
            return accounts[1]
        return None
