"""Meteora pool create / add / remove for DLMM, DAMM (pools) and DAMM v2.

Token amounts come from the instruction's transfers. Account indices:
  DLMM     initialize_lb_pair: lb_pair 0, token_x 2, token_y 3
           add / remove:       position 0, lb_pair 1
  DAMM     initialize:         pool 0, lp_mint 1, token_a 2, token_b 3
           add / remove:       pool 0, lp_mint 1
  DAMM v2  initialize_pool:    pool 6, token_a 8, token_b 9
           add / remove:       pool 0
"""

from dexlens.models import PoolEventType
from dexlens.parsers.base import LiquidityLayout, TransferLiquidityParser
from dexlens.parsers.constants import DEX_PROGRAMS
from dexlens.parsers.discriminators import METEORA_DAMM, METEORA_DAMM_V2, METEORA_DLMM


def _classify(group, data: bytes) -> PoolEventType | None:
    head = data[:8]
    if head in group.CREATE:
        return PoolEventType.CREATE
    if head in group.ADD_LIQUIDITY:
        return PoolEventType.ADD
    if head in group.REMOVE_LIQUIDITY:
        return PoolEventType.REMOVE
    return None


class MeteoraDLMMPoolParser(TransferLiquidityParser):
    program_ids = (DEX_PROGRAMS.METEORA.id,)

    def get_pool_action(self, data: bytes) -> PoolEventType | None:
        return _classify(METEORA_DLMM, data)

    def get_layout(self, action: PoolEventType, data: bytes) -> LiquidityLayout | None:
        if action == PoolEventType.CREATE:
            return LiquidityLayout(pool_index=0, token0_index=2, token1_index=3)
        return LiquidityLayout(pool_index=1)


class MeteoraPoolsParser(TransferLiquidityParser):
    program_ids = (DEX_PROGRAMS.METEORA_DAMM.id,)

    def get_pool_action(self, data: bytes) -> PoolEventType | None:
        return _classify(METEORA_DAMM, data)

    def get_layout(self, action: PoolEventType, data: bytes) -> LiquidityLayout | None:
        if action == PoolEventType.CREATE:
            return LiquidityLayout(pool_index=0, lp_mint_index=1, token0_index=2, token1_index=3)
        return LiquidityLayout(pool_index=0, lp_mint_index=1)


class MeteoraDAMMPoolParser(TransferLiquidityParser):
    program_ids = (DEX_PROGRAMS.METEORA_DAMM_V2.id,)

    def get_pool_action(self, data: bytes) -> PoolEventType | None:
        return _classify(METEORA_DAMM_V2, data)

    def get_layout(self, action: PoolEventType, data: bytes) -> LiquidityLayout | None:
        if action == PoolEventType.CREATE:
            return LiquidityLayout(pool_index=6, token0_index=8, token1_index=9)
        return LiquidityLayout(pool_index=0)
