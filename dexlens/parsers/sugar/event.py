"""Sugar bonding curve (SOL-quoted).

Trade instructions start with a u16 before the amount pair. Account indices:
  buy_* / sell_*:      mint 1, curve 2, user 6, config 12
  create:              curve 2, mint 3, creator 6
  migrate_to_raydium:  mint 1, curve 3, user 12, raydium pool 15
"""

from decimal import Decimal

from dexlens.models import MemeEvent, MemeEventType, TokenInfo
from dexlens.parsers.base import BaseEventParser, DecodeContext, EventDecoder, EventTable
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS, SOL_DECIMALS, TOKENS
from dexlens.parsers.discriminators import SUGAR
from dexlens.parsers.exceptions import InsufficientAccountsError

SUGAR_TOKEN_DECIMALS = 6
SUGAR_TOTAL_SUPPLY = Decimal(1_000_000_000)


class SugarEventParser(BaseEventParser):
    program_ids = (DEX_PROGRAMS.SUGAR.id,)

    def build_event_table(self) -> EventTable:
        return {
            "BUY": EventDecoder(
                (SUGAR.BUY_EXACT_IN, SUGAR.BUY_EXACT_OUT, SUGAR.BUY_MAX_OUT), 8, self.decode_buy_event
            ),
            "SELL": EventDecoder((SUGAR.SELL_EXACT_IN, SUGAR.SELL_EXACT_OUT), 8, self.decode_sell_event),
            "CREATE": EventDecoder((SUGAR.CREATE,), 8, self.decode_create_event),
            "MIGRATE": EventDecoder((SUGAR.MIGRATE_TO_RAYDIUM,), 8, self.decode_migrate_event),
        }

    def _trade(self, data: bytes, ctx: DecodeContext, event_type: MemeEventType) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) < 7:
            raise InsufficientAccountsError(f"Sugar trade at {ctx.idx} has {len(accounts)} accounts")
        reader = BinaryReader(data)
        reader.read_u16()
        amount_in = reader.read_u64()
        amount_out = reader.read_u64()

        mint, pool, user = accounts[1], accounts[2], accounts[6]
        sol_side = (TOKENS.SOL, SOL_DECIMALS)
        token_side = (mint, self.adapter.get_token_decimals(mint) or SUGAR_TOKEN_DECIMALS)
        (input_mint, input_decimals), (output_mint, output_decimals) = (
            (sol_side, token_side) if event_type == MemeEventType.BUY else (token_side, sol_side)
        )

        event = MemeEvent(
            type=event_type,
            protocol=DEX_PROGRAMS.SUGAR.name,
            base_mint=mint,
            quote_mint=TOKENS.SOL,
            user=user,
            bonding_curve=pool,
            pool=pool,
            platform_config=accounts[12] if len(accounts) > 12 else None,
            input_token=TokenInfo.from_raw(input_mint, amount_in, input_decimals),
            output_token=TokenInfo.from_raw(output_mint, amount_out, output_decimals),
        )
        return self.utils.process_meme_transfer_data(ctx.classified, event, mint, False, 0, self.transfer_actions)

    def decode_buy_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        return self._trade(data, ctx, MemeEventType.BUY)

    def decode_sell_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        return self._trade(data, ctx, MemeEventType.SELL)

    def decode_create_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) < 7:
            raise InsufficientAccountsError(f"Sugar create at {ctx.idx} has {len(accounts)} accounts")
        reader = BinaryReader(data)
        name = reader.read_string()
        symbol = reader.read_string()
        uri = reader.read_string()
        return MemeEvent(
            type=MemeEventType.CREATE,
            protocol=DEX_PROGRAMS.SUGAR.name,
            base_mint=accounts[3],
            quote_mint=TOKENS.SOL,
            user=accounts[6],
            creator=accounts[6],
            pool=accounts[2],
            bonding_curve=accounts[2],
            name=name,
            symbol=symbol,
            uri=uri,
            decimals=SUGAR_TOKEN_DECIMALS,
            total_supply=SUGAR_TOTAL_SUPPLY,
        )

    def decode_migrate_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) < 16:
            raise InsufficientAccountsError(f"Sugar migrate at {ctx.idx} has {len(accounts)} accounts")
        return MemeEvent(
            type=MemeEventType.MIGRATE,
            protocol=DEX_PROGRAMS.SUGAR.name,
            base_mint=accounts[1],
            quote_mint=TOKENS.SOL,
            user=accounts[12],
            creator=accounts[12],
            bonding_curve=accounts[3],
            pool=accounts[15],
        )
