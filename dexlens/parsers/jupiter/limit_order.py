from dexlens.models import DexInfo, TradeInfo
from dexlens.parsers.base import BaseParser
from dexlens.parsers.constants import DEX_PROGRAMS
from dexlens.parsers.discriminators import JUPITER_LIMIT_ORDER
from dexlens.parsers.jupiter.transfers import InstructionTransferParser
from dexlens.parsers.utils import get_instruction_data, sort_by_idx

_FILLS = (JUPITER_LIMIT_ORDER.FILL_ORDER, JUPITER_LIMIT_ORDER.FLASH_FILL_ORDER)
_ORDER_LIFECYCLE = (JUPITER_LIMIT_ORDER.INITIALIZE_ORDER, JUPITER_LIMIT_ORDER.CANCEL_ORDER)


class JupiterLimitOrderV2Parser(BaseParser):
    """Order fills; the swap is inferred from the fill's transfers."""

    def process_trades(self) -> list[TradeInfo]:
        trades: list[TradeInfo] = []
        dex_info = DexInfo(
            program_id=DEX_PROGRAMS.JUPITER_LIMIT_ORDER_V2.id,
            amm=self.dex_info.amm or DEX_PROGRAMS.JUPITER_LIMIT_ORDER_V2.name,
            route=DEX_PROGRAMS.JUPITER_LIMIT_ORDER_V2.name,
        )
        for item in self.classified_instructions:
            if item.program_id != DEX_PROGRAMS.JUPITER_LIMIT_ORDER_V2.id:
                continue
            if get_instruction_data(item.instruction)[:8] not in _FILLS:
                continue
            transfers = self.get_transfers_for_instruction(item.program_id, item.outer_index, item.inner_index)
            trade = self.utils.process_swap_data(transfers, dex_info)
            if trade is not None:
                trade.idx = item.idx
                trades.append(self.utils.attach_token_transfer_info(trade, self.transfer_actions))
        return sort_by_idx(trades)


class JupiterLimitOrderTransferParser(InstructionTransferParser):
    program_ids = (DEX_PROGRAMS.JUPITER_LIMIT_ORDER.id,)
    discriminators = _ORDER_LIFECYCLE


class JupiterLimitOrderV2TransferParser(InstructionTransferParser):
    program_ids = (DEX_PROGRAMS.JUPITER_LIMIT_ORDER_V2.id,)
    discriminators = _ORDER_LIFECYCLE
