"""PumpSwap AMM: trade and liquidity events.

PumpSwap emits Anchor self-CPI events after each buy / sell / create_pool /
deposit / withdraw. Events carry amounts and the pool; token mints come from
the accounts of the instruction that emitted them:
  buy / sell:          pool 0, user 1, global_config 2, base_mint 3, quote_mint 4
  deposit / withdraw:  pool 0, global_config 1, user 2, base_mint 3, quote_mint 4, lp_mint 5
"""

from dataclasses import dataclass

from loguru import logger

from dexlens.models import (
    ClassifiedInstruction,
    FeeInfo,
    PoolEvent,
    PoolEventType,
    TokenInfo,
    TradeInfo,
    to_ui_amount,
)
from dexlens.parsers.base import (
    BaseLiquidityParser,
    BaseParser,
    DecodeContext,
    EventDecoder,
    EventTable,
    dispatch,
)
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS
from dexlens.parsers.discriminators import PUMPSWAP
from dexlens.parsers.utils import get_instruction_data, get_prev_instruction_by_index, get_trade_type, sort_by_idx


@dataclass
class PumpswapTradeEvent:
    is_buy: bool
    timestamp: int
    base_amount: int  # base_amount_out (buy) / base_amount_in (sell)
    quote_amount: int  # quote_amount_in_with_lp_fee (buy) / user_quote_amount_out (sell)
    lp_fee: int
    protocol_fee: int
    pool: str
    user: str
    protocol_fee_recipient: str
    coin_creator: str | None = None
    coin_creator_fee: int = 0


@dataclass
class PumpswapCreatePoolEvent:
    timestamp: int
    creator: str
    base_mint: str
    quote_mint: str
    base_mint_decimals: int
    quote_mint_decimals: int
    base_amount_in: int
    quote_amount_in: int
    lp_token_amount_out: int
    pool: str
    lp_mint: str


@dataclass
class PumpswapLiquidityEvent:
    is_deposit: bool
    timestamp: int
    lp_token_amount: int
    base_amount: int
    quote_amount: int
    pool: str
    user: str


def decode_trade_event(data: bytes, is_buy: bool) -> PumpswapTradeEvent:
    reader = BinaryReader(data)
    timestamp = reader.read_i64()
    base_amount = reader.read_u64()
    reader.read_u64()  # max_quote_amount_in / min_quote_amount_out
    reader.skip(8 * 4)  # user / pool reserves
    reader.read_u64()  # quote_amount_in / quote_amount_out
    reader.read_u64()  # lp_fee_basis_points
    lp_fee = reader.read_u64()
    reader.read_u64()  # protocol_fee_basis_points
    protocol_fee = reader.read_u64()
    quote_with_lp_fee = reader.read_u64()  # quote_amount_out_without_lp_fee on sell
    user_quote_amount = reader.read_u64()
    pool = reader.read_pubkey()
    user = reader.read_pubkey()
    reader.skip(32 * 2)  # user base / quote token accounts
    protocol_fee_recipient = reader.read_pubkey()
    reader.skip(32)  # protocol_fee_recipient_token_account

    event = PumpswapTradeEvent(
        is_buy=is_buy,
        timestamp=timestamp,
        base_amount=base_amount,
        quote_amount=quote_with_lp_fee if is_buy else user_quote_amount,
        lp_fee=lp_fee,
        protocol_fee=protocol_fee,
        pool=pool,
        user=user,
        protocol_fee_recipient=protocol_fee_recipient,
    )
    if reader.remaining() >= 48:
        event.coin_creator = reader.read_pubkey()
        reader.read_u64()  # coin_creator_fee_basis_points
        event.coin_creator_fee = reader.read_u64()
    return event


def decode_create_pool_event(data: bytes) -> PumpswapCreatePoolEvent:
    reader = BinaryReader(data)
    timestamp = reader.read_i64()
    reader.read_u16()  # index
    creator = reader.read_pubkey()
    base_mint = reader.read_pubkey()
    quote_mint = reader.read_pubkey()
    base_decimals = reader.read_u8()
    quote_decimals = reader.read_u8()
    base_amount_in = reader.read_u64()
    quote_amount_in = reader.read_u64()
    reader.skip(8 * 4)  # pool reserves, minimum_liquidity, initial_liquidity
    lp_token_amount_out = reader.read_u64()
    reader.read_u8()  # pool_bump
    pool = reader.read_pubkey()
    lp_mint = reader.read_pubkey()
    return PumpswapCreatePoolEvent(
        timestamp=timestamp,
        creator=creator,
        base_mint=base_mint,
        quote_mint=quote_mint,
        base_mint_decimals=base_decimals,
        quote_mint_decimals=quote_decimals,
        base_amount_in=base_amount_in,
        quote_amount_in=quote_amount_in,
        lp_token_amount_out=lp_token_amount_out,
        pool=pool,
        lp_mint=lp_mint,
    )


def decode_liquidity_event(data: bytes, is_deposit: bool) -> PumpswapLiquidityEvent:
    reader = BinaryReader(data)
    timestamp = reader.read_i64()
    lp_token_amount = reader.read_u64()
    reader.skip(8 * 2)  # max/min base and quote bounds
    reader.skip(8 * 4)  # user / pool reserves
    base_amount = reader.read_u64()
    quote_amount = reader.read_u64()
    reader.read_u64()  # lp_mint_supply
    pool = reader.read_pubkey()
    user = reader.read_pubkey()
    return PumpswapLiquidityEvent(
        is_deposit=is_deposit,
        timestamp=timestamp,
        lp_token_amount=lp_token_amount,
        base_amount=base_amount,
        quote_amount=quote_amount,
        pool=pool,
        user=user,
    )


def find_event_instruction(
    instructions: list[ClassifiedInstruction],
    ctx: DecodeContext,
    discriminators: tuple[bytes, ...],
) -> ClassifiedInstruction | None:
    """Closest instruction before the event in the same outer call matching ``discriminators``."""
    candidate = None
    for item in instructions:
        if item.outer_index != ctx.outer_index:
            continue
        if ctx.inner_index is not None and item.inner_index is not None and item.inner_index >= ctx.inner_index:
            continue
        if get_instruction_data(item.instruction)[:8] in discriminators:
            candidate = item
    if candidate is None:
        candidate = get_prev_instruction_by_index(instructions, ctx.outer_index, ctx.inner_index)
    return candidate


class PumpswapParser(BaseParser):
    """Trades from PumpSwap Buy/Sell events."""

    def event_table(self) -> EventTable:
        return {
            "BUY": EventDecoder((PUMPSWAP.BUY_EVENT,), 16, lambda data, ctx: decode_trade_event(data, True)),
            "SELL": EventDecoder((PUMPSWAP.SELL_EVENT,), 16, lambda data, ctx: decode_trade_event(data, False)),
        }

    def process_trades(self) -> list[TradeInfo]:
        trades: list[TradeInfo] = []
        for _, ctx, event in dispatch(self.event_table(), self.classified_instructions):
            swap_ix = find_event_instruction(
                self.classified_instructions, ctx, (PUMPSWAP.BUY, PUMPSWAP.SELL)
            )
            if swap_ix is None or len(swap_ix.instruction.accounts) < 5:
                logger.debug(f"[PUMPSWAP] No swap instruction for event at {ctx.idx}")
                continue
            accounts = swap_ix.instruction.accounts
            base_mint, quote_mint = accounts[3], accounts[4]
            trade = self.build_trade(event, base_mint, quote_mint)
            trades.append(self.finalize_trade(trade, ctx))
        return sort_by_idx(trades)

    def build_trade(self, event: PumpswapTradeEvent, base_mint: str, quote_mint: str) -> TradeInfo:
        base_decimals = self.adapter.get_token_decimals(base_mint)
        quote_decimals = self.adapter.get_token_decimals(quote_mint)
        base = TokenInfo.from_raw(base_mint, event.base_amount, base_decimals)
        quote = TokenInfo.from_raw(quote_mint, event.quote_amount, quote_decimals)
        input_token, output_token = (quote, base) if event.is_buy else (base, quote)

        fee_raw = event.protocol_fee + event.coin_creator_fee
        fees = [
            FeeInfo.from_raw(
                quote_mint,
                event.protocol_fee,
                quote_decimals,
                dex=DEX_PROGRAMS.PUMP_SWAP.name,
                type="protocol",
                recipient=event.protocol_fee_recipient,
            )
        ]
        if event.coin_creator_fee > 0:
            fees.append(
                FeeInfo.from_raw(
                    quote_mint,
                    event.coin_creator_fee,
                    quote_decimals,
                    dex=DEX_PROGRAMS.PUMP_SWAP.name,
                    type="coinCreator",
                    recipient=event.coin_creator,
                )
            )

        return TradeInfo(
            type=get_trade_type(input_token.mint, output_token.mint),
            input_token=input_token,
            output_token=output_token,
            user=event.user,
            program_id=self.dex_info.program_id or DEX_PROGRAMS.PUMP_SWAP.id,
            amm=DEX_PROGRAMS.PUMP_SWAP.name,
            route=self.dex_info.route or "",
            slot=self.adapter.slot,
            timestamp=self.adapter.block_time,
            signature=self.adapter.signature,
            idx="",
            pool=[event.pool],
            fee=FeeInfo.from_raw(quote_mint, fee_raw, quote_decimals, dex=DEX_PROGRAMS.PUMP_SWAP.name),
            fees=fees,
        )


class PumpswapLiquidityParser(BaseLiquidityParser):
    """Pool create / deposit / withdraw from PumpSwap events."""

    def event_table(self) -> EventTable:
        return {
            "CREATE": EventDecoder((PUMPSWAP.CREATE_POOL_EVENT,), 16, self.decode_create),
            "ADD": EventDecoder((PUMPSWAP.DEPOSIT_EVENT,), 16, self.decode_deposit),
            "REMOVE": EventDecoder((PUMPSWAP.WITHDRAW_EVENT,), 16, self.decode_withdraw),
        }

    def process_liquidity(self) -> list[PoolEvent]:
        events: list[PoolEvent] = []
        for _, ctx, event in dispatch(self.event_table(), self.classified_instructions):
            event.idx = ctx.idx
            events.append(event)
        return sort_by_idx(events)

    def decode_create(self, data: bytes, ctx: DecodeContext) -> PoolEvent:
        evt = decode_create_pool_event(data)
        base = self.adapter.get_pool_event_base(PoolEventType.CREATE, DEX_PROGRAMS.PUMP_SWAP.id)
        base["user"] = evt.creator
        lp_decimals = self.adapter.get_token_decimals(evt.lp_mint)
        return PoolEvent(
            **base,
            pool_id=evt.pool,
            pool_lp_mint=evt.lp_mint,
            token0_mint=evt.base_mint,
            token0_amount=to_ui_amount(evt.base_amount_in, evt.base_mint_decimals),
            token0_amount_raw=str(evt.base_amount_in),
            token0_decimals=evt.base_mint_decimals,
            token1_mint=evt.quote_mint,
            token1_amount=to_ui_amount(evt.quote_amount_in, evt.quote_mint_decimals),
            token1_amount_raw=str(evt.quote_amount_in),
            token1_decimals=evt.quote_mint_decimals,
            lp_amount=to_ui_amount(evt.lp_token_amount_out, lp_decimals),
            lp_amount_raw=str(evt.lp_token_amount_out),
        )

    def decode_deposit(self, data: bytes, ctx: DecodeContext) -> PoolEvent | None:
        return self._liquidity_event(decode_liquidity_event(data, True), ctx, PUMPSWAP.DEPOSIT)

    def decode_withdraw(self, data: bytes, ctx: DecodeContext) -> PoolEvent | None:
        return self._liquidity_event(decode_liquidity_event(data, False), ctx, PUMPSWAP.WITHDRAW)

    def _liquidity_event(
        self, evt: PumpswapLiquidityEvent, ctx: DecodeContext, discriminator: bytes
    ) -> PoolEvent | None:
        ix = find_event_instruction(self.classified_instructions, ctx, (discriminator,))
        if ix is None or len(ix.instruction.accounts) < 6:
            logger.debug(f"[PUMPSWAP] No liquidity instruction for event at {ctx.idx}")
            return None
        accounts = ix.instruction.accounts
        base_mint, quote_mint, lp_mint = accounts[3], accounts[4], accounts[5]
        base_decimals = self.adapter.get_token_decimals(base_mint)
        quote_decimals = self.adapter.get_token_decimals(quote_mint)
        lp_decimals = self.adapter.get_token_decimals(lp_mint)

        event_type = PoolEventType.ADD if evt.is_deposit else PoolEventType.REMOVE
        base = self.adapter.get_pool_event_base(event_type, DEX_PROGRAMS.PUMP_SWAP.id)
        base["user"] = evt.user
        return PoolEvent(
            **base,
            pool_id=evt.pool,
            pool_lp_mint=lp_mint,
            token0_mint=base_mint,
            token0_amount=to_ui_amount(evt.base_amount, base_decimals),
            token0_amount_raw=str(evt.base_amount),
            token0_decimals=base_decimals,
            token1_mint=quote_mint,
            token1_amount=to_ui_amount(evt.quote_amount, quote_decimals),
            token1_amount_raw=str(evt.quote_amount),
            token1_decimals=quote_decimals,
            lp_amount=to_ui_amount(evt.lp_token_amount, lp_decimals),
            lp_amount_raw=str(evt.lp_token_amount),
        )
