"""Instruction and event discriminators per program.

Anchor programs prefix instruction data with sha256("global:<ix_name>")[:8].
Events emitted through self-CPI carry the 8-byte event-CPI tag followed by
sha256("event:<EventName>")[:8], so they are matched on 16 bytes.
Non-Anchor programs (Raydium V4, Metaplex) use a single tag byte.
"""

import hashlib
import struct

# sha256("anchor:event")[:8]
EVENT_CPI_TAG = bytes.fromhex("e445a52e51cb9a1d")


def anchor_ix(name: str) -> bytes:
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


def anchor_event(name: str) -> bytes:
    return EVENT_CPI_TAG + hashlib.sha256(f"event:{name}".encode()).digest()[:8]


class PUMPFUN:
    CREATE = struct.pack("<Q", 8576854823835016728)
    BUY = struct.pack("<Q", 16927863322537952870)
    SELL = struct.pack("<Q", 12502976635542562355)
    MIGRATE = anchor_ix("migrate")
    TRADE_EVENT = anchor_event("TradeEvent")
    CREATE_EVENT = anchor_event("CreateEvent")
    COMPLETE_EVENT = anchor_event("CompleteEvent")
    MIGRATE_EVENT = anchor_event("CompletePumpAmmMigrationEvent")


class PUMPSWAP:
    BUY = anchor_ix("buy")
    SELL = anchor_ix("sell")
    CREATE_POOL = anchor_ix("create_pool")
    DEPOSIT = anchor_ix("deposit")
    WITHDRAW = anchor_ix("withdraw")
    BUY_EVENT = anchor_event("BuyEvent")
    SELL_EVENT = anchor_event("SellEvent")
    CREATE_POOL_EVENT = anchor_event("CreatePoolEvent")
    DEPOSIT_EVENT = anchor_event("DepositEvent")
    WITHDRAW_EVENT = anchor_event("WithdrawEvent")


class JUPITER:
    ROUTE_EVENT = anchor_event("SwapEvent")


class JUPITER_DCA:
    OPEN_DCA = anchor_ix("open_dca")
    OPEN_DCA_V2 = anchor_ix("open_dca_v2")
    CLOSE_DCA = anchor_ix("close_dca")
    END_AND_CLOSE = anchor_ix("end_and_close")
    FILLED_EVENT = anchor_event("FilledEvent")


class JUPITER_VA:
    OPEN = anchor_ix("open")
    DEPOSIT = anchor_ix("deposit")
    WITHDRAW = anchor_ix("withdraw")
    CLOSE = anchor_ix("close")
    FILL_EVENT = anchor_event("FillEvent")


class JUPITER_LIMIT_ORDER:
    INITIALIZE_ORDER = anchor_ix("initialize_order")
    CANCEL_ORDER = anchor_ix("cancel_order")
    FILL_ORDER = anchor_ix("fill_order")
    FLASH_FILL_ORDER = anchor_ix("flash_fill_order")


class RAYDIUM:
    CREATE = bytes([1])
    ADD_LIQUIDITY = bytes([3])
    REMOVE_LIQUIDITY = bytes([4])


class RAYDIUM_CL:
    CREATE = (anchor_ix("create_pool"),)
    OPEN_POSITION = (
        anchor_ix("open_position"),
        anchor_ix("open_position_v2"),
        anchor_ix("open_position_with_token22_nft"),
    )
    INCREASE_LIQUIDITY = (
        anchor_ix("increase_liquidity"),
        anchor_ix("increase_liquidity_v2"),
    )
    ADD_LIQUIDITY = OPEN_POSITION + INCREASE_LIQUIDITY
    REMOVE_LIQUIDITY = (
        anchor_ix("decrease_liquidity"),
        anchor_ix("decrease_liquidity_v2"),
    )


class RAYDIUM_CPMM:
    CREATE = anchor_ix("initialize")
    ADD_LIQUIDITY = anchor_ix("deposit")
    REMOVE_LIQUIDITY = anchor_ix("withdraw")


class RAYDIUM_LCP:
    CREATE = anchor_ix("initialize")
    BUY_EXACT_IN = anchor_ix("buy_exact_in")
    BUY_EXACT_OUT = anchor_ix("buy_exact_out")
    SELL_EXACT_IN = anchor_ix("sell_exact_in")
    SELL_EXACT_OUT = anchor_ix("sell_exact_out")
    MIGRATE_TO_AMM = anchor_ix("migrate_to_amm")
    MIGRATE_TO_CPSWAP = anchor_ix("migrate_to_cpswap")
    CREATE_EVENT = anchor_event("PoolCreateEvent")
    TRADE_EVENT = anchor_event("TradeEvent")


class ORCA:
    CREATE = (anchor_ix("initialize_pool"), anchor_ix("initialize_pool_v2"))
    ADD_LIQUIDITY = (anchor_ix("increase_liquidity"), anchor_ix("increase_liquidity_v2"))
    REMOVE_LIQUIDITY = (anchor_ix("decrease_liquidity"), anchor_ix("decrease_liquidity_v2"))


class METEORA_DLMM:
    CREATE = (
        anchor_ix("initialize_lb_pair"),
        anchor_ix("initialize_permission_lb_pair"),
        anchor_ix("initialize_customizable_permissionless_lb_pair"),
    )
    ADD_LIQUIDITY = (
        anchor_ix("add_liquidity"),
        anchor_ix("add_liquidity2"),
        anchor_ix("add_liquidity_by_weight"),
        anchor_ix("add_liquidity_by_strategy"),
        anchor_ix("add_liquidity_by_strategy2"),
        anchor_ix("add_liquidity_by_strategy_one_side"),
        anchor_ix("add_liquidity_one_side"),
        anchor_ix("add_liquidity_one_side_precise"),
    )
    REMOVE_LIQUIDITY = (
        anchor_ix("remove_liquidity"),
        anchor_ix("remove_liquidity2"),
        anchor_ix("remove_liquidity_by_range"),
        anchor_ix("remove_liquidity_by_range2"),
        anchor_ix("remove_all_liquidity"),
    )


class METEORA_DAMM:
    CREATE = (
        anchor_ix("initialize_permissionless_pool"),
        anchor_ix("initialize_permissionless_constant_product_pool_with_config"),
    )
    ADD_LIQUIDITY = (
        anchor_ix("add_balance_liquidity"),
        anchor_ix("add_imbalance_liquidity"),
        anchor_ix("bootstrap_liquidity"),
    )
    REMOVE_LIQUIDITY = (
        anchor_ix("remove_balance_liquidity"),
        anchor_ix("remove_liquidity_single_side"),
    )


class METEORA_DAMM_V2:
    CREATE = (
        anchor_ix("initialize_pool"),
        anchor_ix("initialize_customizable_pool"),
        anchor_ix("initialize_pool_with_dynamic_config"),
    )
    ADD_LIQUIDITY = (anchor_ix("add_liquidity"),)
    REMOVE_LIQUIDITY = (anchor_ix("remove_liquidity"), anchor_ix("remove_all_liquidity"))


class METEORA_DBC:
    SWAP = anchor_ix("swap")
    SWAP_V2 = anchor_ix("swap2")
    INITIALIZE_VIRTUAL_POOL_WITH_SPL_TOKEN = anchor_ix("initialize_virtual_pool_with_spl_token")
    INITIALIZE_VIRTUAL_POOL_WITH_TOKEN2022 = anchor_ix("initialize_virtual_pool_with_token2022")
    MIGRATE_DAMM = anchor_ix("migrate_meteora_damm")
    MIGRATE_DAMM_V2 = anchor_ix("migration_damm_v2")


class BOOPFUN:
    BUY = anchor_ix("buy_token")
    SELL = anchor_ix("sell_token")
    CREATE = anchor_ix("create_token")
    DEPLOY = anchor_ix("deploy_bonding_curve")
    COMPLETE = anchor_ix("graduate")


class MOONIT:
    BUY = anchor_ix("buy")
    SELL = anchor_ix("sell")
    CREATE = anchor_ix("token_mint")
    MIGRATE = anchor_ix("migrate_funds")


class HEAVEN:
    BUY = anchor_ix("buy")
    SELL = anchor_ix("sell")
    CREATE_POOL = anchor_ix("create_standard_liquidity_pool")


class SUGAR:
    BUY_EXACT_IN = anchor_ix("buy_exact_in")
    BUY_EXACT_OUT = anchor_ix("buy_exact_out")
    BUY_MAX_OUT = anchor_ix("buy_max_out")
    SELL_EXACT_IN = anchor_ix("sell_exact_in")
    SELL_EXACT_OUT = anchor_ix("sell_exact_out")
    CREATE = anchor_ix("create")
    MIGRATE_TO_RAYDIUM = anchor_ix("migrate_to_raydium")


class METAPLEX:
    CREATE_MINT = bytes([42])
