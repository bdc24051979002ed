from dexlens.models import DexInfo, FeeInfo, MemeEvent, MemeEventType, TradeInfo, TradeType
from dexlens.parsers.base import BaseParser
from dexlens.parsers.constants import DEX_PROGRAMS, SOL_DECIMALS, TOKENS
from dexlens.parsers.pumpfun.event import PumpfunEventParser
from dexlens.parsers.utils import sort_by_idx


def get_pumpfun_trade_info(event: MemeEvent, dex_info: DexInfo | None = None) -> TradeInfo:
    trade = TradeInfo(
        type=TradeType(event.type.value),
        input_token=event.input_token,
        output_token=event.output_token,
        user=event.user or "",
        program_id=DEX_PROGRAMS.PUMP_FUN.id,
        amm=(dex_info.amm if dex_info else None) or DEX_PROGRAMS.PUMP_FUN.name,
        route=(dex_info.route if dex_info else None) or "",
        slot=event.slot,
        timestamp=event.timestamp,
        signature=event.signature,
        idx=event.idx,
        pool=[event.bonding_curve] if event.bonding_curve else [],
    )
    if event.fee:
        raw = int(event.fee.scaleb(SOL_DECIMALS))
        trade.fee = FeeInfo.from_raw(TOKENS.SOL, raw, SOL_DECIMALS, dex=DEX_PROGRAMS.PUMP_FUN.name)
    return trade


class PumpfunParser(BaseParser):
    """Trades from Pump.fun TradeEvents."""

    def process_trades(self) -> list[TradeInfo]:
        event_parser = PumpfunEventParser(self.adapter, self.transfer_actions)
        events = [
            event
            for event in event_parser.parse_instructions(self.classified_instructions)
            if event.type in (MemeEventType.BUY, MemeEventType.SELL)
        ]
        trades = [
            self.utils.attach_token_transfer_info(get_pumpfun_trade_info(event, self.dex_info), self.transfer_actions)
            for event in events
        ]
        return sort_by_idx(trades)
