"""Meteora Dynamic Bonding Curve: launches, curve swaps and migrations.

Account indices:
  swap / swap2:               pool 2, input_token_account 3, output_token_account 4,
                              base_mint 7, quote_mint 8, payer 9
  initialize_virtual_pool_*:  config 0, creator 2, base_mint 3, quote_mint 4, pool 5
  migrate_meteora_damm:       virtual_pool 0, config 2, pool 4, base_mint 7, quote_mint 8
  migration_damm_v2:          virtual_pool 0, config 2, pool 4, base_mint 13, quote_mint 14
"""

from loguru import logger

from dexlens.models import DexInfo, MemeEvent, MemeEventType, TokenInfo, TradeInfo, TradeType
from dexlens.parsers.base import BaseEventParser, BaseParser, DecodeContext, EventDecoder, EventTable
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS
from dexlens.parsers.discriminators import METEORA_DBC
from dexlens.parsers.exceptions import InsufficientAccountsError
from dexlens.parsers.utils import get_account_trade_type, sort_by_idx

_CREATE_MIN_ACCOUNTS = 10


class MeteoraDBCEventParser(BaseEventParser):
    program_ids = (DEX_PROGRAMS.METEORA_DBC.id,)

    def build_event_table(self) -> EventTable:
        return {
            "TRADE": EventDecoder((METEORA_DBC.SWAP, METEORA_DBC.SWAP_V2), 8, self.decode_trade_event),
            "CREATE": EventDecoder(
                (
                    METEORA_DBC.INITIALIZE_VIRTUAL_POOL_WITH_SPL_TOKEN,
                    METEORA_DBC.INITIALIZE_VIRTUAL_POOL_WITH_TOKEN2022,
                ),
                8,
                self.decode_create_event,
            ),
            "MIGRATE": EventDecoder((METEORA_DBC.MIGRATE_DAMM,), 8, self.decode_migrate_damm_event),
            "MIGRATE_V2": EventDecoder((METEORA_DBC.MIGRATE_DAMM_V2,), 8, self.decode_migrate_damm_v2_event),
        }

    def decode_trade_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) < 10:
            raise InsufficientAccountsError(f"DBC swap at {ctx.idx} has {len(accounts)} accounts")

        reader = BinaryReader(data)
        amount_in = reader.read_u64()
        minimum_amount_out = reader.read_u64()

        pool, input_account, output_account = accounts[2], accounts[3], accounts[4]
        base_mint, quote_mint, user = accounts[7], accounts[8], accounts[9]

        trade_type = get_account_trade_type(self.adapter.signer, base_mint, input_account, output_account)
        if trade_type == TradeType.SELL:
            input_mint, output_mint = base_mint, quote_mint
        else:
            input_mint, output_mint = quote_mint, base_mint

        event = MemeEvent(
            type=MemeEventType(trade_type.value),
            protocol=DEX_PROGRAMS.METEORA_DBC.name,
            base_mint=base_mint,
            quote_mint=quote_mint,
            user=user,
            bonding_curve=pool,
            pool=pool,
            input_token=TokenInfo.from_raw(input_mint, amount_in, self.adapter.get_token_decimals(input_mint)),
            output_token=TokenInfo.from_raw(
                output_mint, minimum_amount_out, self.adapter.get_token_decimals(output_mint)
            ),
        )

        # Instruction arguments are limits; the executed amounts are in the transfers
        transfers = self.get_transfers_for_instruction(ctx.program_id, ctx.outer_index, ctx.inner_index)
        if len(transfers) >= 2:
            trade = self.utils.process_swap_data(transfers[:2], DexInfo())
            if trade is not None:
                event.input_token = trade.input_token
                event.output_token = trade.output_token
        else:
            logger.debug(f"[DBC] Swap at {ctx.idx} has {len(transfers)} transfers, keeping instruction amounts")
        return event

    def decode_create_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) < _CREATE_MIN_ACCOUNTS:
            raise InsufficientAccountsError(
                f"DBC initialize_virtual_pool at {ctx.idx}: {len(accounts)} accounts, need {_CREATE_MIN_ACCOUNTS}"
            )
        reader = BinaryReader(data)
        name = reader.read_string()
        symbol = reader.read_string()
        uri = reader.read_string()
        return MemeEvent(
            type=MemeEventType.CREATE,
            protocol=DEX_PROGRAMS.METEORA_DBC.name,
            base_mint=accounts[3],
            quote_mint=accounts[4],
            user=accounts[2],
            creator=accounts[2],
            pool=accounts[5],
            bonding_curve=accounts[5],
            platform_config=accounts[0],
            name=name,
            symbol=symbol,
            uri=uri,
        )

    def _migrate(self, ctx: DecodeContext, base_index: int, quote_index: int, pool_dex: str) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) <= quote_index:
            raise InsufficientAccountsError(f"DBC migrate at {ctx.idx} has {len(accounts)} accounts")
        return MemeEvent(
            type=MemeEventType.MIGRATE,
            protocol=DEX_PROGRAMS.METEORA_DBC.name,
            base_mint=accounts[base_index],
            quote_mint=accounts[quote_index],
            platform_config=accounts[2],
            bonding_curve=accounts[0],
            pool=accounts[4],
            pool_dex=pool_dex,
        )

    def decode_migrate_damm_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        return self._migrate(ctx, 7, 8, DEX_PROGRAMS.METEORA_DAMM.name)

    def decode_migrate_damm_v2_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        return self._migrate(ctx, 13, 14, DEX_PROGRAMS.METEORA_DAMM_V2.name)


class MeteoraDBCParser(BaseParser):
    """Curve swaps reported as trades; the pool is the virtual pool."""

    def process_trades(self) -> list[TradeInfo]:
        event_parser = MeteoraDBCEventParser(self.adapter, self.transfer_actions)
        trades = []
        for event in event_parser.parse_instructions(self.classified_instructions):
            if event.type not in (MemeEventType.BUY, MemeEventType.SELL, MemeEventType.SWAP):
                continue
            trades.append(self.utils.attach_token_transfer_info(self.create_trade_info(event), self.transfer_actions))
        return sort_by_idx(trades)

    def create_trade_info(self, event: MemeEvent) -> TradeInfo:
        return TradeInfo(
            type=TradeType(event.type.value),
            input_token=event.input_token,
            output_token=event.output_token,
            user=event.user or "",
            program_id=self.dex_info.program_id or DEX_PROGRAMS.METEORA_DBC.id,
            amm=DEX_PROGRAMS.METEORA_DBC.name,
            route=self.dex_info.route or "",
            slot=self.adapter.slot,
            timestamp=event.timestamp,
            signature=self.adapter.signature,
            idx=event.idx,
            pool=[event.pool] if event.pool else [],
        )
