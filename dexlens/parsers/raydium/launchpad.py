"""Raydium LaunchLab (bonding-curve launchpad).

Trade instructions (buy/sell exact in/out) are followed by a TradeEvent
self-CPI as the next inner instruction. Two event layouts exist; the v2
layout adds ``creator_fee`` after ``platform_fee`` and is longer than 130
bytes.

Account indices:
  trade:            user 0, pool_state 4, base_mint 9, quote_mint 10
  initialize:       base_mint 6, quote_mint 7 (PoolCreateEvent carries the rest)
  migrate_to_amm:   base 1, quote 2, pool 13, lp 16
  migrate_to_cpswap: base 1, quote 2, pool 5, lp 7
"""

from dataclasses import dataclass

from dexlens.models import FeeInfo, MemeEvent, MemeEventType, TokenInfo, TradeInfo, TradeType, to_ui_amount
from dexlens.parsers.base import BaseEventParser, BaseParser, DecodeContext, EventDecoder, EventTable
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS, PUMPFUN_TOKEN_DECIMALS, SOL_DECIMALS
from dexlens.parsers.discriminators import RAYDIUM_LCP
from dexlens.parsers.exceptions import EventDataError, InsufficientAccountsError
from dexlens.parsers.utils import get_instruction_data, sort_by_idx

_V2_MIN_LENGTH = 130


@dataclass
class LaunchpadTradeEvent:
    pool_state: str
    amount_in: int
    amount_out: int
    protocol_fee: int
    platform_fee: int
    creator_fee: int
    share_fee: int
    trade_direction: int
    pool_status: int


def decode_trade_event(data: bytes) -> LaunchpadTradeEvent:
    is_v2 = len(data) > _V2_MIN_LENGTH
    reader = BinaryReader(data)
    pool_state = reader.read_pubkey()
    reader.skip(8 * 7)  # total_base_sell, virtual base/quote, real base/quote before/after
    amount_in = reader.read_u64()
    amount_out = reader.read_u64()
    protocol_fee = reader.read_u64()
    platform_fee = reader.read_u64()
    creator_fee = reader.read_u64() if is_v2 else 0
    share_fee = reader.read_u64()
    return LaunchpadTradeEvent(
        pool_state=pool_state,
        amount_in=amount_in,
        amount_out=amount_out,
        protocol_fee=protocol_fee,
        platform_fee=platform_fee,
        creator_fee=creator_fee,
        share_fee=share_fee,
        trade_direction=reader.read_u8(),
        pool_status=reader.read_u8(),
    )


class RaydiumLaunchpadEventParser(BaseEventParser):
    program_ids = (DEX_PROGRAMS.RAYDIUM_LCP.id,)

    def build_event_table(self) -> EventTable:
        return {
            "CREATE": EventDecoder((RAYDIUM_LCP.CREATE_EVENT,), 16, self.decode_create_event),
            "TRADE": EventDecoder(
                (
                    RAYDIUM_LCP.BUY_EXACT_IN,
                    RAYDIUM_LCP.BUY_EXACT_OUT,
                    RAYDIUM_LCP.SELL_EXACT_IN,
                    RAYDIUM_LCP.SELL_EXACT_OUT,
                ),
                8,
                self.decode_trade_instruction,
            ),
            "MIGRATE_AMM": EventDecoder((RAYDIUM_LCP.MIGRATE_TO_AMM,), 8, self.decode_migrate_to_amm),
            "MIGRATE_CPSWAP": EventDecoder((RAYDIUM_LCP.MIGRATE_TO_CPSWAP,), 8, self.decode_migrate_to_cpswap),
        }

    def _decimals(self, mint: str, default: int) -> int:
        return self.adapter.spl_decimals_map.get(mint, default)

    def decode_trade_instruction(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        event_ix = self.adapter.get_inner_instruction(
            ctx.outer_index, 0 if ctx.inner_index is None else ctx.inner_index + 1
        )
        if event_ix is None:
            raise EventDataError(f"LaunchLab trade event not found after {ctx.idx}")
        accounts = ctx.accounts
        if len(accounts) < 11:
            raise InsufficientAccountsError(f"LaunchLab trade at {ctx.idx} has {len(accounts)} accounts")

        evt = decode_trade_event(get_instruction_data(event_ix)[16:])
        user, base_mint, quote_mint = accounts[0], accounts[9], accounts[10]
        base_decimals = self._decimals(base_mint, PUMPFUN_TOKEN_DECIMALS)
        quote_decimals = self._decimals(quote_mint, SOL_DECIMALS)

        is_buy = evt.trade_direction == 0
        if is_buy:
            input_token = TokenInfo.from_raw(quote_mint, evt.amount_in, quote_decimals)
            output_token = TokenInfo.from_raw(base_mint, evt.amount_out, base_decimals)
        else:
            input_token = TokenInfo.from_raw(base_mint, evt.amount_in, base_decimals)
            output_token = TokenInfo.from_raw(quote_mint, evt.amount_out, quote_decimals)

        return MemeEvent(
            type=MemeEventType.BUY if is_buy else MemeEventType.SELL,
            protocol=DEX_PROGRAMS.RAYDIUM_LCP.name,
            base_mint=base_mint,
            quote_mint=quote_mint,
            user=user,
            bonding_curve=evt.pool_state,
            input_token=input_token,
            output_token=output_token,
            protocol_fee=to_ui_amount(evt.protocol_fee, quote_decimals),
            platform_fee=to_ui_amount(evt.platform_fee, quote_decimals),
            share_fee=to_ui_amount(evt.share_fee, quote_decimals),
            creator_fee=to_ui_amount(evt.creator_fee, quote_decimals),
            fee=to_ui_amount(evt.protocol_fee + evt.platform_fee + evt.creator_fee, quote_decimals),
        )

    def decode_create_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        if ctx.outer_index >= len(self.adapter.instructions):
            raise EventDataError(f"LaunchLab create instruction not found for {ctx.idx}")
        accounts = self.adapter.instructions[ctx.outer_index].accounts
        if len(accounts) < 8:
            raise InsufficientAccountsError(f"LaunchLab initialize at {ctx.outer_index} has {len(accounts)} accounts")

        reader = BinaryReader(data)
        pool_state = reader.read_pubkey()
        creator = reader.read_pubkey()
        config = reader.read_pubkey()
        decimals = reader.read_u8()
        name = reader.read_string()
        symbol = reader.read_string()
        uri = reader.read_string()

        return MemeEvent(
            type=MemeEventType.CREATE,
            protocol=DEX_PROGRAMS.RAYDIUM_LCP.name,
            base_mint=accounts[6],
            quote_mint=accounts[7],
            user=creator,
            creator=creator,
            bonding_curve=pool_state,
            platform_config=config,
            name=name,
            symbol=symbol,
            uri=uri,
            decimals=decimals,
        )

    def _migrate(self, ctx: DecodeContext, pool_index: int, pool_dex: str) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) <= pool_index:
            raise InsufficientAccountsError(f"LaunchLab migrate at {ctx.idx} has {len(accounts)} accounts")
        return MemeEvent(
            type=MemeEventType.MIGRATE,
            protocol=DEX_PROGRAMS.RAYDIUM_LCP.name,
            base_mint=accounts[1],
            quote_mint=accounts[2],
            pool=accounts[pool_index],
            pool_dex=pool_dex,
        )

    def decode_migrate_to_amm(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        return self._migrate(ctx, 13, DEX_PROGRAMS.RAYDIUM_V4.name)

    def decode_migrate_to_cpswap(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        return self._migrate(ctx, 5, DEX_PROGRAMS.RAYDIUM_CPMM.name)


class RaydiumLaunchpadParser(BaseParser):
    """Trades from LaunchLab buy/sell instructions."""

    def process_trades(self) -> list[TradeInfo]:
        event_parser = RaydiumLaunchpadEventParser(self.adapter, self.transfer_actions)
        trades = []
        for event in event_parser.parse_instructions(self.classified_instructions):
            if event.type not in (MemeEventType.BUY, MemeEventType.SELL, MemeEventType.SWAP):
                continue
            trades.append(self.utils.attach_token_transfer_info(self.create_trade_info(event), self.transfer_actions))
        return sort_by_idx(trades)

    def create_trade_info(self, event: MemeEvent) -> TradeInfo:
        quote_decimals = event.output_token.decimals if event.type == MemeEventType.SELL else event.input_token.decimals
        fee_raw = int((event.fee or 0) * (10 ** quote_decimals))
        return TradeInfo(
            type=TradeType.BUY if event.type == MemeEventType.BUY else TradeType.SELL,
            input_token=event.input_token,
            output_token=event.output_token,
            user=event.user or "",
            program_id=self.dex_info.program_id or DEX_PROGRAMS.RAYDIUM_LCP.id,
            amm=DEX_PROGRAMS.RAYDIUM_LCP.name,
            route=self.dex_info.route or "",
            slot=self.adapter.slot,
            timestamp=self.adapter.block_time,
            signature=self.adapter.signature,
            idx=event.idx,
            pool=[event.bonding_curve] if event.bonding_curve else [],
            fee=FeeInfo.from_raw(event.quote_mint, fee_raw, quote_decimals),
        )
