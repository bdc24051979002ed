"""Program id -> decoder class, one table per output role.

Trade parsers take ``(adapter, dex_info, transfer_actions, instructions)``,
liquidity parsers ``(adapter, transfer_actions, instructions)``, transfer
parsers the same as trade parsers and meme parsers ``(adapter, transfer_actions)``.
"""

from dexlens.parsers.base import BaseEventParser, BaseLiquidityParser, BaseParser, BaseTransferParser
from dexlens.parsers.boopfun.event import BoopfunEventParser
from dexlens.parsers.boopfun.trade import BoopfunParser
from dexlens.parsers.constants import DEX_PROGRAMS
from dexlens.parsers.heaven.event import HeavenEventParser
from dexlens.parsers.jupiter.dca import JupiterDCAParser, JupiterDCATransferParser
from dexlens.parsers.jupiter.limit_order import (
    JupiterLimitOrderTransferParser,
    JupiterLimitOrderV2Parser,
    JupiterLimitOrderV2TransferParser,
)
from dexlens.parsers.jupiter.route import JupiterParser
from dexlens.parsers.jupiter.value_average import JupiterVAParser, JupiterVATransferParser
from dexlens.parsers.meteora.dbc import MeteoraDBCEventParser, MeteoraDBCParser
from dexlens.parsers.meteora.liquidity import MeteoraDAMMPoolParser, MeteoraDLMMPoolParser, MeteoraPoolsParser
from dexlens.parsers.meteora.swap import MeteoraParser
from dexlens.parsers.moonit.event import MoonitEventParser
from dexlens.parsers.moonit.trade import MoonitParser
from dexlens.parsers.orca.whirlpool import OrcaLiquidityParser, OrcaParser
from dexlens.parsers.pumpfun.event import PumpfunEventParser
from dexlens.parsers.pumpfun.pumpswap import PumpswapLiquidityParser, PumpswapParser
from dexlens.parsers.pumpfun.trade import PumpfunParser
from dexlens.parsers.raydium.launchpad import RaydiumLaunchpadEventParser, RaydiumLaunchpadParser
from dexlens.parsers.raydium.liquidity import RaydiumCLPoolParser, RaydiumCPMMPoolParser, RaydiumV4PoolParser
from dexlens.parsers.raydium.swap import RaydiumParser
from dexlens.parsers.sugar.event import SugarEventParser

TRADE_PARSERS: dict[str, type[BaseParser]] = {
    DEX_PROGRAMS.JUPITER.id: JupiterParser,
    DEX_PROGRAMS.JUPITER_DCA.id: JupiterDCAParser,
    DEX_PROGRAMS.JUPITER_VA.id: JupiterVAParser,
    DEX_PROGRAMS.JUPITER_LIMIT_ORDER_V2.id: JupiterLimitOrderV2Parser,
    DEX_PROGRAMS.MOONIT.id: MoonitParser,
    DEX_PROGRAMS.METEORA.id: MeteoraParser,
    DEX_PROGRAMS.METEORA_DAMM.id: MeteoraParser,
    DEX_PROGRAMS.METEORA_DAMM_V2.id: MeteoraParser,
    DEX_PROGRAMS.METEORA_DBC.id: MeteoraDBCParser,
    DEX_PROGRAMS.PUMP_FUN.id: PumpfunParser,
    DEX_PROGRAMS.PUMP_SWAP.id: PumpswapParser,
    DEX_PROGRAMS.RAYDIUM_ROUTE.id: RaydiumParser,
    DEX_PROGRAMS.RAYDIUM_CL.id: RaydiumParser,
    DEX_PROGRAMS.RAYDIUM_CPMM.id: RaydiumParser,
    DEX_PROGRAMS.RAYDIUM_V4.id: RaydiumParser,
    DEX_PROGRAMS.RAYDIUM_AMM.id: RaydiumParser,
    DEX_PROGRAMS.RAYDIUM_LCP.id: RaydiumLaunchpadParser,
    DEX_PROGRAMS.ORCA.id: OrcaParser,
    DEX_PROGRAMS.BOOP_FUN.id: BoopfunParser,
}

LIQUIDITY_PARSERS: dict[str, type[BaseLiquidityParser]] = {
    DEX_PROGRAMS.METEORA.id: MeteoraDLMMPoolParser,
    DEX_PROGRAMS.METEORA_DAMM.id: MeteoraPoolsParser,
    DEX_PROGRAMS.METEORA_DAMM_V2.id: MeteoraDAMMPoolParser,
    DEX_PROGRAMS.RAYDIUM_V4.id: RaydiumV4PoolParser,
    DEX_PROGRAMS.RAYDIUM_CPMM.id: RaydiumCPMMPoolParser,
    DEX_PROGRAMS.RAYDIUM_CL.id: RaydiumCLPoolParser,
    DEX_PROGRAMS.ORCA.id: OrcaLiquidityParser,
    DEX_PROGRAMS.PUMP_FUN.id: PumpswapLiquidityParser,
    DEX_PROGRAMS.PUMP_SWAP.id: PumpswapLiquidityParser,
}

TRANSFER_PARSERS: dict[str, type[BaseTransferParser]] = {
    DEX_PROGRAMS.JUPITER_DCA.id: JupiterDCATransferParser,
    DEX_PROGRAMS.JUPITER_VA.id: JupiterVATransferParser,
    DEX_PROGRAMS.JUPITER_LIMIT_ORDER.id: JupiterLimitOrderTransferParser,
    DEX_PROGRAMS.JUPITER_LIMIT_ORDER_V2.id: JupiterLimitOrderV2TransferParser,
}

MEME_PARSERS: dict[str, type[BaseEventParser]] = {
    DEX_PROGRAMS.PUMP_FUN.id: PumpfunEventParser,
    DEX_PROGRAMS.METEORA_DBC.id: MeteoraDBCEventParser,
    DEX_PROGRAMS.RAYDIUM_LCP.id: RaydiumLaunchpadEventParser,
    DEX_PROGRAMS.BOOP_FUN.id: BoopfunEventParser,
    DEX_PROGRAMS.MOONIT.id: MoonitEventParser,
    DEX_PROGRAMS.HEAVEN.id: HeavenEventParser,
    DEX_PROGRAMS.SUGAR.id: SugarEventParser,
}
