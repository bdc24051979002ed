"""Moonit bonding curve.

Account indices:
  buy / sell:   sender 0, curve 2, dex_fee 4, helio_fee 5, mint 6, config 12
  token_mint:   sender 0, curve 2, mint 3
  migrate_funds: curve 2, mint 5

Sell instructions carry only limits, so the executed amounts are the
signer's balance changes.
"""

from dexlens.models import MemeEvent, MemeEventType, TokenAmount, TokenInfo, to_ui_amount
from dexlens.parsers.base import BaseEventParser, DecodeContext, EventDecoder, EventTable
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import DEX_PROGRAMS, SOL_DECIMALS, TOKENS
from dexlens.parsers.discriminators import MOONIT
from dexlens.parsers.exceptions import EventDataError, InsufficientAccountsError


class MoonitEventParser(BaseEventParser):
    program_ids = (DEX_PROGRAMS.MOONIT.id,)

    def build_event_table(self) -> EventTable:
        return {
            "BUY": EventDecoder((MOONIT.BUY,), 8, self.decode_buy_event),
            "SELL": EventDecoder((MOONIT.SELL,), 8, self.decode_sell_event),
            "CREATE": EventDecoder((MOONIT.CREATE,), 8, self.decode_create_event),
            "MIGRATE": EventDecoder((MOONIT.MIGRATE,), 8, self.decode_migrate_event),
        }

    def _require(self, ctx: DecodeContext, count: int) -> tuple[str, ...]:
        if len(ctx.accounts) < count:
            raise InsufficientAccountsError(f"Moonit instruction at {ctx.idx} has {len(ctx.accounts)} accounts")
        return ctx.accounts

    def decode_buy_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = self._require(ctx, 7)
        reader = BinaryReader(data)
        token_amount = reader.read_u64()
        collateral_amount = reader.read_u64()

        user, pool, mint = accounts[0], accounts[2], accounts[6]
        event = MemeEvent(
            type=MemeEventType.BUY,
            protocol=DEX_PROGRAMS.MOONIT.name,
            base_mint=mint,
            quote_mint=TOKENS.SOL,
            user=user,
            bonding_curve=pool,
            pool=pool,
            platform_config=accounts[12] if len(accounts) > 12 else None,
            input_token=TokenInfo.from_raw(TOKENS.SOL, collateral_amount, SOL_DECIMALS),
            output_token=TokenInfo.from_raw(mint, token_amount, self.adapter.get_token_decimals(mint)),
        )
        return self.utils.process_meme_transfer_data(ctx.classified, event, mint, False, 0, self.transfer_actions)

    def decode_sell_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = self._require(ctx, 7)
        user, pool, dex_fee, mint = accounts[0], accounts[2], accounts[4], accounts[6]
        collateral_mint = self.detect_collateral_mint(accounts)

        token_amount = self.signer_balance_change(mint)
        collateral_amount = self.signer_balance_change(collateral_mint)
        fee_change = self.utils.get_balance_change(dex_fee, collateral_mint)

        return MemeEvent(
            type=MemeEventType.SELL,
            protocol=DEX_PROGRAMS.MOONIT.name,
            base_mint=mint,
            quote_mint=collateral_mint,
            user=user,
            bonding_curve=pool,
            pool=pool,
            input_token=TokenInfo(
                mint=mint,
                amount=token_amount.ui_amount,
                amount_raw=token_amount.amount,
                decimals=token_amount.decimals,
            ),
            output_token=TokenInfo(
                mint=collateral_mint,
                amount=collateral_amount.ui_amount,
                amount_raw=collateral_amount.amount,
                decimals=collateral_amount.decimals,
            ),
            fee=abs(fee_change.change.ui_amount) if fee_change else None,
        )

    def decode_create_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = self._require(ctx, 4)
        reader = BinaryReader(data)
        name = reader.read_string()
        symbol = reader.read_string()
        uri = reader.read_string()
        decimals = reader.read_u8()
        reader.read_u8()  # curve type
        total_supply = to_ui_amount(reader.read_u64(), decimals)

        return MemeEvent(
            type=MemeEventType.CREATE,
            protocol=DEX_PROGRAMS.MOONIT.name,
            base_mint=accounts[3],
            quote_mint=TOKENS.SOL,
            user=accounts[0],
            creator=accounts[0],
            pool=accounts[2],
            bonding_curve=accounts[2],
            name=name,
            symbol=symbol,
            uri=uri,
            decimals=decimals,
            total_supply=total_supply,
        )

    def decode_migrate_event(self, data: bytes, ctx: DecodeContext) -> MemeEvent:
        accounts = self._require(ctx, 6)
        return MemeEvent(
            type=MemeEventType.MIGRATE,
            protocol=DEX_PROGRAMS.MOONIT.name,
            base_mint=accounts[5],
            quote_mint=TOKENS.SOL,
            bonding_curve=accounts[2],
        )

    @staticmethod
    def detect_collateral_mint(accounts: tuple[str, ...]) -> str:
        if TOKENS.USDC in accounts:
            return TOKENS.USDC
        if TOKENS.USDT in accounts:
            return TOKENS.USDT
        return TOKENS.SOL

    def signer_balance_change(self, mint: str) -> TokenAmount:
        """Absolute change of the signer's holding of ``mint``."""
        if mint == TOKENS.SOL:
            pre, post = self.adapter.pre_balances, self.adapter.post_balances
            if not pre or not post:
                raise EventDataError(f"No SOL balances for {self.adapter.signature}")
            return TokenAmount.from_raw(abs(int(post[0]) - int(pre[0])), SOL_DECIMALS)

        signer = self.adapter.signer
        found = False
        pre_amount = post_amount = 0
        for row in self.adapter.pre_token_balances:
            if row.get("mint") == mint and row.get("owner") == signer:
                pre_amount = int(row["uiTokenAmount"]["amount"])
                found = True
        for row in self.adapter.post_token_balances:
            if row.get("mint") == mint and row.get("owner") == signer:
                post_amount = int(row["uiTokenAmount"]["amount"])
                found = True
        if not found:
            raise EventDataError(f"No {mint} balance for signer {signer}")
        return TokenAmount.from_raw(abs(post_amount - pre_amount), self.adapter.get_token_decimals(mint))
