"""Pump.fun bonding-curve events (Anchor self-CPI, 16-byte discriminators).

TradeEvent layout (after discriminator):
  mint(32) sol_amount(u64) token_amount(u64) is_buy(u8) user(32)
  timestamp(i64) virtual_sol_reserves(u64) virtual_token_reserves(u64)
  [real_sol_reserves(u64) real_token_reserves(u64) fee_recipient(32)
   fee_basis_points(u16) fee(u64) creator(32) creator_fee_basis_points(u16)
   creator_fee(u64)]  -- present on newer program versions
"""

from loguru import logger

from dexlens.models import MemeEvent, MemeEventType, TokenInfo, to_ui_amount
from dexlens.parsers.base import BaseEventParser, DecodeContext, EventDecoder, EventTable
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS, PUMPFUN_TOKEN_DECIMALS, SOL_DECIMALS, TOKENS
from dexlens.parsers.discriminators import PUMPFUN
from dexlens.parsers.utils import get_prev_instruction_by_index

_EXTENDED_TRADE_FIELDS = 52


class PumpfunEventParser(BaseEventParser):
    program_ids = (DEX_PROGRAMS.PUMP_FUN.id,)

    def build_event_table(self) -> EventTable:
        return {
            "TRADE": EventDecoder((PUMPFUN.TRADE_EVENT,), 16, self.decode_trade_event),
            "CREATE": EventDecoder((PUMPFUN.CREATE_EVENT,), 16, self.decode_create_event),
            "COMPLETE": EventDecoder((PUMPFUN.COMPLETE_EVENT,), 16, self.decode_complete_event),
            "MIGRATE": EventDecoder((PUMPFUN.MIGRATE_EVENT,), 16, self.decode_migrate_event),
        }

    def decode_trade_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        reader = BinaryReader(data)
        mint = reader.read_pubkey()
        sol_amount = reader.read_u64()
        token_amount = reader.read_u64()
        is_buy = reader.read_u8() == 1
        user = reader.read_pubkey()
        reader.read_i64()  # timestamp, superseded by block time
        reader.read_u64()  # virtual_sol_reserves
        reader.read_u64()  # virtual_token_reserves

        fee = creator_fee = None
        creator = None
        if reader.remaining() >= _EXTENDED_TRADE_FIELDS:
            reader.read_u64()  # real_sol_reserves
            reader.read_u64()  # real_token_reserves
            reader.read_pubkey()  # fee_recipient
            reader.read_u16()  # fee_basis_points
            fee = reader.read_u64()
            creator = reader.read_pubkey()
            reader.read_u16()  # creator_fee_basis_points
            creator_fee = reader.read_u64()

        sol = TokenInfo.from_raw(TOKENS.SOL, sol_amount, SOL_DECIMALS)
        token = TokenInfo.from_raw(mint, token_amount, PUMPFUN_TOKEN_DECIMALS)

        event = MemeEvent(
            type=MemeEventType.BUY if is_buy else MemeEventType.SELL,
            protocol=DEX_PROGRAMS.PUMP_FUN.name,
            base_mint=mint,
            quote_mint=TOKENS.SOL,
            user=user,
            creator=creator,
            input_token=sol if is_buy else token,
            output_token=token if is_buy else sol,
            fee=to_ui_amount(fee, SOL_DECIMALS) if fee is not None else None,
            creator_fee=to_ui_amount(creator_fee, SOL_DECIMALS) if creator_fee is not None else None,
        )

        prev = get_prev_instruction_by_index(self.instructions, ctx.outer_index, ctx.inner_index)
        if prev is not None and len(prev.instruction.accounts) > 3:
            event.bonding_curve = prev.instruction.accounts[3]
        else:
            logger.debug(f"[PUMPFUN] No trade instruction before event at {ctx.idx}")
        return event

    def decode_create_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        reader = BinaryReader(data)
        name = reader.read_string()
        symbol = reader.read_string()
        uri = reader.read_string()
        mint = reader.read_pubkey()
        bonding_curve = reader.read_pubkey()
        user = reader.read_pubkey()

        creator = None
        total_supply = None
        if reader.remaining() >= 16:
            creator = reader.read_pubkey()
            reader.read_i64()
        if reader.remaining() >= 32:
            reader.read_u64()  # virtual_token_reserves
            reader.read_u64()  # virtual_sol_reserves
            reader.read_u64()  # real_token_reserves
            total_supply = to_ui_amount(reader.read_u64(), PUMPFUN_TOKEN_DECIMALS)

        return MemeEvent(
            type=MemeEventType.CREATE,
            protocol=DEX_PROGRAMS.PUMP_FUN.name,
            base_mint=mint,
            quote_mint=TOKENS.SOL,
            user=user,
            creator=creator,
            bonding_curve=bonding_curve,
            name=name,
            symbol=symbol,
            uri=uri,
            decimals=PUMPFUN_TOKEN_DECIMALS,
            total_supply=total_supply,
        )

    def decode_complete_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        reader = BinaryReader(data)
        user = reader.read_pubkey()
        mint = reader.read_pubkey()
        bonding_curve = reader.read_pubkey()
        return MemeEvent(
            type=MemeEventType.COMPLETE,
            protocol=DEX_PROGRAMS.PUMP_FUN.name,
            base_mint=mint,
            quote_mint=TOKENS.SOL,
            user=user,
            bonding_curve=bonding_curve,
        )

    def decode_migrate_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        reader = BinaryReader(data)
        user = reader.read_pubkey()
        mint = reader.read_pubkey()
        reader.read_u64()  # mint_amount
        reader.read_u64()  # sol_amount
        pool_migration_fee = reader.read_u64()
        bonding_curve = reader.read_pubkey()
        reader.read_i64()
        pool = reader.read_pubkey()
        return MemeEvent(
            type=MemeEventType.MIGRATE,
            protocol=DEX_PROGRAMS.PUMP_FUN.name,
            base_mint=mint,
            quote_mint=TOKENS.SOL,
            user=user,
            bonding_curve=bonding_curve,
            pool=pool,
            pool_dex=DEX_PROGRAMS.PUMP_SWAP.name,
            fee=to_ui_amount(pool_migration_fee, SOL_DECIMALS),
        )
