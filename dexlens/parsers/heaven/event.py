"""Heaven launchpad.

Token metadata is written by a Metaplex CreateV1 call in the same
transaction, so Metaplex instructions are decoded alongside Heaven's own.
Account indices:
  buy / sell:                      pool 4, user 5, base_mint 6, quote_mint 7, config 12
  create_standard_liquidity_pool:  user 4, base_mint 5, quote_mint 6, pool 10, config 11
  metaplex CreateV1:               mint 2, authority 4
"""

from decimal import Decimal

from dexlens.models import MemeEvent, MemeEventType, TokenInfo
from dexlens.parsers.base import BaseEventParser, DecodeContext, EventDecoder, EventTable
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS, METAPLEX_PROGRAM_ID, TOKENS
from dexlens.parsers.discriminators import HEAVEN, METAPLEX
from dexlens.parsers.exceptions import InsufficientAccountsError

HEAVEN_TOKEN_DECIMALS = 9
HEAVEN_TOTAL_SUPPLY = Decimal(1_000_000_000)


class HeavenEventParser(BaseEventParser):
    program_ids = (DEX_PROGRAMS.HEAVEN.id, METAPLEX_PROGRAM_ID)

    def build_event_table(self) -> EventTable:
        # Metaplex is matched on one byte, keep it last
        return {
            "BUY": EventDecoder((HEAVEN.BUY,), 8, self.decode_buy_event),
            "SELL": EventDecoder((HEAVEN.SELL,), 8, self.decode_sell_event),
            "INITIAL_BUY": EventDecoder((HEAVEN.CREATE_POOL,), 8, self.decode_initial_buy_event),
            "CREATE": EventDecoder((METAPLEX.CREATE_MINT,), 1, self.decode_create_event),
        }

    def _trade(self, data: bytes, ctx: DecodeContext, event_type: MemeEventType) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) < 13:
            raise InsufficientAccountsError(f"Heaven trade at {ctx.idx} has {len(accounts)} accounts")
        reader = BinaryReader(data)
        amount_in = reader.read_u64()
        amount_out = reader.read_u64()

        base_mint, quote_mint = accounts[6], accounts[7]
        if event_type == MemeEventType.BUY:
            input_mint, output_mint = quote_mint, base_mint
        else:
            input_mint, output_mint = base_mint, quote_mint
        decimals = self.adapter.get_token_decimals

        event = MemeEvent(
            type=event_type,
            protocol=DEX_PROGRAMS.HEAVEN.name,
            base_mint=base_mint,
            quote_mint=quote_mint,
            user=accounts[5],
            bonding_curve=accounts[4],
            pool=accounts[4],
            platform_config=accounts[12],
            input_token=TokenInfo.from_raw(input_mint, amount_in, decimals(input_mint)),
            output_token=TokenInfo.from_raw(output_mint, amount_out, decimals(output_mint)),
        )
        return self.utils.process_meme_transfer_data(
            ctx.classified, event, base_mint, True, 0, self.transfer_actions
        )

    def decode_buy_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        return self._trade(data, ctx, MemeEventType.BUY)

    def decode_sell_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        return self._trade(data, ctx, MemeEventType.SELL)

    def decode_initial_buy_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) < 12:
            raise InsufficientAccountsError(f"Heaven pool creation at {ctx.idx} has {len(accounts)} accounts")
        event = MemeEvent(
            type=MemeEventType.BUY,
            protocol=DEX_PROGRAMS.HEAVEN.name,
            base_mint=accounts[5],
            quote_mint=accounts[6],
            user=accounts[4],
            bonding_curve=accounts[10],
            pool=accounts[10],
            platform_config=accounts[11],
        )
        # first transfer seeds the pool, the creator's buy follows
        return self.utils.process_meme_transfer_data(
            ctx.classified, event, accounts[5], False, 1, self.transfer_actions
        )

    def decode_create_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent | None:
        if ctx.program_id != METAPLEX_PROGRAM_ID:
            return None
        accounts = ctx.accounts
        if len(accounts) < 5:
            raise InsufficientAccountsError(f"Metaplex CreateV1 at {ctx.idx} has {len(accounts)} accounts")
        reader = BinaryReader(data)
        reader.read_u8()  # CreateArgs variant
        name = reader.read_string()
        symbol = reader.read_string()
        uri = reader.read_string()
        return MemeEvent(
            type=MemeEventType.CREATE,
            protocol=DEX_PROGRAMS.HEAVEN.name,
            base_mint=accounts[2],
            quote_mint=TOKENS.SOL,
            user=accounts[4],
            creator=accounts[4],
            name=name,
            symbol=symbol,
            uri=uri,
            decimals=HEAVEN_TOKEN_DECIMALS,
            total_supply=HEAVEN_TOTAL_SUPPLY,
        )
