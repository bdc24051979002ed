"""Boop.fun launchpad instructions.

Boop.fun emits no trade events; amounts come from instruction arguments and
the instruction's transfers. Account indices:
  buy_token / sell_token:  mint 0, bonding_curve 1, buyer/seller 6
  create_token:            mint 2, creator 3 (curve and config live on deploy_bonding_curve)
  deploy_bonding_curve:    bonding_curve 2, config 5
  graduate:                mint 0, bonding_curve 7, user 10
"""

from loguru import logger

from dexlens.models import MemeEvent, MemeEventType, TokenInfo
from dexlens.parsers.base import BaseEventParser, DecodeContext, EventDecoder, EventTable
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS, SOL_DECIMALS, TOKENS
from dexlens.parsers.discriminators import BOOPFUN
from dexlens.parsers.exceptions import InsufficientAccountsError

BOOPFUN_TOKEN_DECIMALS = 6


class BoopfunEventParser(BaseEventParser):
    program_ids = (DEX_PROGRAMS.BOOP_FUN.id,)

    def build_event_table(self) -> EventTable:
        return {
            "BUY": EventDecoder((BOOPFUN.BUY,), 8, self.decode_buy_event),
            "SELL": EventDecoder((BOOPFUN.SELL,), 8, self.decode_sell_event),
            "CREATE": EventDecoder((BOOPFUN.CREATE,), 8, self.decode_create_event),
            "COMPLETE": EventDecoder((BOOPFUN.COMPLETE,), 8, self.decode_complete_event),
        }

    def _trade_accounts(self, ctx: DecodeContext) -> tuple[str, str, str]:
        accounts = ctx.accounts
        if len(accounts) < 7:
            raise InsufficientAccountsError(f"Boop.fun trade at {ctx.idx} has {len(accounts)} accounts")
        return accounts[0], accounts[1], accounts[6]

    def _transfer_amount(self, ctx: DecodeContext, mint: str) -> int:
        transfers = self.get_transfers_for_instruction(ctx.program_id, ctx.outer_index, ctx.inner_index)
        transfer = next((t for t in transfers if t.info.mint == mint), None)
        if transfer is None:
            logger.debug(f"[BOOPFUN] No {mint} transfer for {ctx.idx}")
            return 0
        return int(transfer.info.token_amount.amount)

    def decode_buy_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        mint, bonding_curve, user = self._trade_accounts(ctx)
        sol_amount = BinaryReader(data).read_u64()
        token_amount = self._transfer_amount(ctx, mint)
        return MemeEvent(
            type=MemeEventType.BUY,
            protocol=DEX_PROGRAMS.BOOP_FUN.name,
            base_mint=mint,
            quote_mint=TOKENS.SOL,
            user=user,
            bonding_curve=bonding_curve,
            input_token=TokenInfo.from_raw(TOKENS.SOL, sol_amount, SOL_DECIMALS),
            output_token=TokenInfo.from_raw(mint, token_amount, BOOPFUN_TOKEN_DECIMALS),
        )

    def decode_sell_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        mint, bonding_curve, user = self._trade_accounts(ctx)
        token_amount = BinaryReader(data).read_u64()
        sol_amount = self._transfer_amount(ctx, TOKENS.SOL)
        return MemeEvent(
            type=MemeEventType.SELL,
            protocol=DEX_PROGRAMS.BOOP_FUN.name,
            base_mint=mint,
            quote_mint=TOKENS.SOL,
            user=user,
            bonding_curve=bonding_curve,
            input_token=TokenInfo.from_raw(mint, token_amount, BOOPFUN_TOKEN_DECIMALS),
            output_token=TokenInfo.from_raw(TOKENS.SOL, sol_amount, SOL_DECIMALS),
        )

    def decode_create_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) < 4:
            raise InsufficientAccountsError(f"Boop.fun create at {ctx.idx} has {len(accounts)} accounts")
        reader = BinaryReader(data)
        reader.skip(8)  # salt
        name = reader.read_string()
        symbol = reader.read_string()
        uri = reader.read_string()

        event = MemeEvent(
            type=MemeEventType.CREATE,
            protocol=DEX_PROGRAMS.BOOP_FUN.name,
            base_mint=accounts[2],
            quote_mint=TOKENS.SOL,
            user=accounts[3],
            creator=accounts[3],
            name=name,
            symbol=symbol,
            uri=uri,
            decimals=BOOPFUN_TOKEN_DECIMALS,
        )
        deploy = self.classifier.get_instruction_by_discriminator(BOOPFUN.DEPLOY, 8)
        if deploy is not None and len(deploy.instruction.accounts) > 5:
            event.bonding_curve = deploy.instruction.accounts[2]
            event.platform_config = deploy.instruction.accounts[5]
        return event

    def decode_complete_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = ctx.accounts
        if len(accounts) < 11:
            raise InsufficientAccountsError(f"Boop.fun graduate at {ctx.idx} has {len(accounts)} accounts")
        return MemeEvent(
            type=MemeEventType.COMPLETE,
            protocol=DEX_PROGRAMS.BOOP_FUN.name,
            base_mint=accounts[0],
            quote_mint=TOKENS.SOL,
            user=accounts[10],
            bonding_curve=accounts[7],
        )
