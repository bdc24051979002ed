from dexlens.models import FeeInfo, MemeEvent, MemeEventType, TradeInfo, TradeType
from dexlens.parsers.base import BaseParser
from dexlens.parsers.constants import DEX_PROGRAMS
from dexlens.parsers.moonit.event import MoonitEventParser
from dexlens.parsers.utils import sort_by_idx


class MoonitParser(BaseParser):
    """Trades from Moonit buy/sell instructions; the pool is the curve account."""

    def process_trades(self) -> list[TradeInfo]:
        event_parser = MoonitEventParser(self.adapter, self.transfer_actions)
        trades = []
        for event in event_parser.parse_instructions(self.classified_instructions):
            if event.type not in (MemeEventType.BUY, MemeEventType.SELL):
                continue
            trades.append(self.utils.attach_token_transfer_info(self.create_trade_info(event), self.transfer_actions))
        return sort_by_idx(trades)

    def create_trade_info(self, event: MemeEvent) -> TradeInfo:
        trade = TradeInfo(
            type=TradeType(event.type.value),
            input_token=event.input_token,
            output_token=event.output_token,
            user=event.user or "",
            program_id=DEX_PROGRAMS.MOONIT.id,
            amm=self.dex_info.amm or DEX_PROGRAMS.MOONIT.name,
            route=self.dex_info.route or "",
            slot=event.slot,
            timestamp=event.timestamp,
            signature=event.signature,
            idx=event.idx,
            pool=[event.pool] if event.pool else [],
        )
        if event.fee:
            decimals = self.adapter.get_token_decimals(event.quote_mint)
            trade.fee = FeeInfo.from_raw(
                event.quote_mint, int(event.fee.scaleb(decimals)), decimals, dex=DEX_PROGRAMS.MOONIT.name
            )
        return trade
