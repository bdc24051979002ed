from dexlens.models import DexInfo, MemeEvent, MemeEventType, TradeInfo, TradeType
from dexlens.parsers.base import BaseParser
from dexlens.parsers.boopfun.event import BoopfunEventParser
from dexlens.parsers.constants import DEX_PROGRAMS
from dexlens.parsers.utils import sort_by_idx


def get_boopfun_trade_info(event: MemeEvent, dex_info: DexInfo | None = None) -> TradeInfo:
    return TradeInfo(
        type=TradeType(event.type.value),
        input_token=event.input_token,
        output_token=event.output_token,
        user=event.user or "",
        program_id=DEX_PROGRAMS.BOOP_FUN.id,
        amm=(dex_info.amm if dex_info else None) or DEX_PROGRAMS.BOOP_FUN.name,
        route=(dex_info.route if dex_info else None) or "",
        slot=event.slot,
        timestamp=event.timestamp,
        signature=event.signature,
        idx=event.idx,
        pool=[event.bonding_curve] if event.bonding_curve else [],
    )


class BoopfunParser(BaseParser):
    def process_trades(self) -> list[TradeInfo]:
        event_parser = BoopfunEventParser(self.adapter, self.transfer_actions)
        trades = [
            self.utils.attach_token_transfer_info(get_boopfun_trade_info(event, self.dex_info), self.transfer_actions)
            for event in event_parser.parse_instructions(self.classified_instructions)
            if event.type in (MemeEventType.BUY, MemeEventType.SELL)
        ]
        return sort_by_idx(trades)
