"""Raydium pool create / add / remove for V4, CPMM and CLMM."""

from dexlens.models import PoolEventType, TradeType
from dexlens.parsers.base import LiquidityLayout, TransferLiquidityParser
from dexlens.parsers.constants import DEX_PROGRAMS
from dexlens.parsers.discriminators import RAYDIUM, RAYDIUM_CL, RAYDIUM_CPMM
from dexlens.parsers.utils import get_trade_type


class RaydiumV4PoolParser(TransferLiquidityParser):
    program_ids = (DEX_PROGRAMS.RAYDIUM_V4.id,)

    def get_pool_action(self, data: bytes) -> PoolEventType | None:
        code = data[:1]
        if code == RAYDIUM.CREATE:
            return PoolEventType.CREATE
        if code == RAYDIUM.ADD_LIQUIDITY:
            return PoolEventType.ADD
        if code == RAYDIUM.REMOVE_LIQUIDITY:
            return PoolEventType.REMOVE
        return None

    def get_layout(self, action: PoolEventType, data: bytes) -> LiquidityLayout | None:
        if action == PoolEventType.CREATE:
            return LiquidityLayout(pool_index=4, lp_mint_index=7)
        # add_liquidity carries max_coin, max_pc and base_side
        if action == PoolEventType.ADD and len(data) < 16:
            return None
        return LiquidityLayout(pool_index=1, lp_mint_index=5)


class RaydiumCPMMPoolParser(TransferLiquidityParser):
    program_ids = (DEX_PROGRAMS.RAYDIUM_CPMM.id,)

    def get_pool_action(self, data: bytes) -> PoolEventType | None:
        head = data[:8]
        if head == RAYDIUM_CPMM.CREATE:
            return PoolEventType.CREATE
        if head == RAYDIUM_CPMM.ADD_LIQUIDITY:
            return PoolEventType.ADD
        if head == RAYDIUM_CPMM.REMOVE_LIQUIDITY:
            return PoolEventType.REMOVE
        return None

    def get_layout(self, action: PoolEventType, data: bytes) -> LiquidityLayout | None:
        if action == PoolEventType.CREATE:
            return LiquidityLayout(
                pool_index=3,
                lp_mint_index=6,
                token0_index=4,
                token1_index=5,
                user_index=0,
                config_index=1,
            )
        return LiquidityLayout(pool_index=2, lp_mint_index=12, token0_index=10, token1_index=11, user_index=0)


class RaydiumCLPoolParser(TransferLiquidityParser):
    program_ids = (DEX_PROGRAMS.RAYDIUM_CL.id,)

    def get_pool_action(self, data: bytes) -> PoolEventType | None:
        head = data[:8]
        if head in RAYDIUM_CL.CREATE:
            return PoolEventType.CREATE
        if head in RAYDIUM_CL.ADD_LIQUIDITY:
            return PoolEventType.ADD
        if head in RAYDIUM_CL.REMOVE_LIQUIDITY:
            return PoolEventType.REMOVE
        return None

    def get_layout(self, action: PoolEventType, data: bytes) -> LiquidityLayout | None:
        if action == PoolEventType.CREATE:
            return LiquidityLayout(
                pool_index=2,
                token0_index=3,
                token1_index=4,
                user_index=0,
                config_index=1,
                min_accounts=10,
            )
        if action == PoolEventType.REMOVE:
            return LiquidityLayout(pool_index=3)
        if data[:8] in RAYDIUM_CL.OPEN_POSITION:
            return LiquidityLayout(pool_index=5)
        return LiquidityLayout(pool_index=2)

    def order_mints(
        self, action: PoolEventType, token0: str | None, token1: str | None
    ) -> tuple[str | None, str | None]:
        # token0 is the base token, token1 the quote
        if action == PoolEventType.CREATE and token0 and token1 and get_trade_type(token0, token1) == TradeType.BUY:
            return token1, token0
        return token0, token1
