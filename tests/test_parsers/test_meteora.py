"""Tests for Meteora DBC curve events and DAMM v2 liquidity."""

import struct
from decimal import Decimal

import pytest

from dexlens.models import MemeEventType, ParseConfig, PoolEventType, TradeType
from dexlens.parsers.adapter import TransactionAdapter
from dexlens.parsers.constants import DEX_PROGRAMS, TOKENS
from dexlens.parsers.dex_parser import DexParser
from dexlens.parsers.discriminators import METEORA_DAMM_V2, METEORA_DBC, anchor_ix
from dexlens.parsers.exceptions import InsufficientAccountsError
from dexlens.parsers.meteora.dbc import MeteoraDBCEventParser
from dexlens.parsers.meteora.swap import MeteoraParser
from dexlens.parsers.transaction_utils import TransactionUtils
from dexlens.parsers.utils import find_associated_token_addresses

DBC = DEX_PROGRAMS.METEORA_DBC.id
DAMM_V2 = DEX_PROGRAMS.METEORA_DAMM_V2.id
DLMM = DEX_PROGRAMS.METEORA.id


def _string(value: str) -> bytes:
    return struct.pack("<I", len(value)) + value.encode()


def _dbc_events(raw: dict):
    adapter = TransactionAdapter(raw)
    return MeteoraDBCEventParser(adapter, TransactionUtils(adapter).get_transfer_actions()).process_events()


def _make_dbc_buy(raw_tx, pubkeys):
    pool_authority, config, pool, user_wsol, base_vault, quote_vault, base_mint = pubkeys(7)
    tx = raw_tx()
    user_base = find_associated_token_addresses(tx.signer, base_mint)[0]
    tx.add_token_account(user_wsol, TOKENS.SOL, tx.signer, 1_000_000_000, 0, 9)
    tx.add_token_account(quote_vault, TOKENS.SOL, pool_authority, 0, 1_000_000_000, 9)
    tx.add_token_account(base_vault, base_mint, pool_authority, 10**15, 10**15 - 35_000_000_000, 6)
    tx.add_token_account(user_base, base_mint, tx.signer, 0, 35_000_000_000, 6)
    accounts = [
        pool_authority, config, pool, user_wsol, user_base, base_vault, quote_vault,
        base_mint, TOKENS.SOL, tx.signer,
    ]
    tx.add_instruction(DBC, accounts, METEORA_DBC.SWAP + struct.pack("<QQ", 1_000_000_000, 30_000_000_000))
    tx.add_token_transfer(0, user_wsol, quote_vault, tx.signer, 1_000_000_000)
    tx.add_token_transfer(0, base_vault, user_base, pool_authority, 35_000_000_000)
    return tx, pool, base_mint


class TestMeteoraDBC:
    def test_swap_into_user_ata_is_buy(self, raw_tx, pubkeys) -> None:
        tx, pool, base_mint = _make_dbc_buy(raw_tx, pubkeys)

        (event,) = _dbc_events(tx.build())

        assert event.type == MemeEventType.BUY
        assert event.base_mint == base_mint
        assert event.pool == pool
        assert event.input_token.mint == TOKENS.SOL
        assert event.input_token.amount == Decimal(1)
        # executed amount replaces the instruction's minimum_amount_out
        assert event.output_token.amount == Decimal(35_000)

    def test_trade_through_orchestrator(self, raw_tx, pubkeys) -> None:
        tx, pool, base_mint = _make_dbc_buy(raw_tx, pubkeys)

        result = DexParser(ParseConfig()).parse_all(tx.build())

        assert len(result.trades) == 1
        trade = result.trades[0]
        assert trade.type == TradeType.BUY
        assert trade.pool == [pool]
        assert trade.amm == DEX_PROGRAMS.METEORA_DBC.name
        assert trade.output_token.mint == base_mint
        assert [e.type for e in result.meme_events] == [MemeEventType.BUY]

    def test_create_event(self, raw_tx, pubkeys) -> None:
        config, pool_authority, creator, base_mint, pool, *rest = pubkeys(10)
        tx = raw_tx()
        accounts = [config, pool_authority, creator, base_mint, TOKENS.SOL, pool, *rest]
        data = (
            METEORA_DBC.INITIALIZE_VIRTUAL_POOL_WITH_SPL_TOKEN
            + _string("Moon")
            + _string("MOON")
            + _string("https://example.com/moon.json")
        )
        tx.add_instruction(DBC, accounts, data)

        (event,) = _dbc_events(tx.build())

        assert event.type == MemeEventType.CREATE
        assert (event.name, event.symbol) == ("Moon", "MOON")
        assert event.uri == "https://example.com/moon.json"
        assert event.base_mint == base_mint
        assert event.quote_mint == TOKENS.SOL
        assert event.creator == creator
        assert event.pool == pool
        assert event.platform_config == config

    def test_create_with_too_few_accounts(self, raw_tx, pubkeys) -> None:
        tx = raw_tx()
        tx.add_instruction(DBC, pubkeys(4), METEORA_DBC.INITIALIZE_VIRTUAL_POOL_WITH_TOKEN2022 + _string("A"))
        with pytest.raises(InsufficientAccountsError):
            _dbc_events(tx.build())


def _make_damm_v2_add(raw_tx, pubkeys):
    pool, position, user_x, user_wsol, vault_a, vault_b, mint_x, vault_auth = pubkeys(8)
    tx = raw_tx()
    tx.add_token_account(user_x, mint_x, tx.signer, 5_000_000, 3_000_000, 6)
    tx.add_token_account(user_wsol, TOKENS.SOL, tx.signer, 1_000_000_000, 0, 9)
    tx.add_token_account(vault_a, mint_x, vault_auth, 0, 2_000_000, 6)
    tx.add_token_account(vault_b, TOKENS.SOL, vault_auth, 0, 1_000_000_000, 9)
    accounts = [pool, position, user_x, user_wsol, vault_a, vault_b, mint_x, TOKENS.SOL, tx.signer]
    args = (10**12).to_bytes(16, "little") + struct.pack("<QQ", 2_000_000, 1_000_000_000)
    tx.add_instruction(DAMM_V2, accounts, METEORA_DAMM_V2.ADD_LIQUIDITY[0] + args)
    tx.add_token_transfer(0, user_x, vault_a, tx.signer, 2_000_000)
    tx.add_token_transfer(0, user_wsol, vault_b, tx.signer, 1_000_000_000)
    return tx, pool, mint_x


class TestMeteoraDAMMv2Liquidity:
    def test_add_liquidity_event(self, raw_tx, pubkeys) -> None:
        tx, pool, mint_x = _make_damm_v2_add(raw_tx, pubkeys)

        result = DexParser(ParseConfig()).parse_all(tx.build())

        assert result.trades == []
        assert len(result.liquidities) == 1
        event = result.liquidities[0]
        assert event.type == PoolEventType.ADD
        assert event.pool_id == pool
        assert event.amm == DEX_PROGRAMS.METEORA_DAMM_V2.name
        assert event.user == tx.signer
        assert event.token0_mint == mint_x
        assert event.token0_amount == Decimal(2)
        assert event.token1_mint == TOKENS.SOL
        assert event.token1_amount == Decimal(1)
        assert event.token0_balance_change == "-2000000"
        assert event.idx == "0-0"
        assert event.signer == [tx.signer]

    def test_parse_liquidity_only(self, raw_tx, pubkeys) -> None:
        tx, pool, _ = _make_damm_v2_add(raw_tx, pubkeys)
        events = DexParser(ParseConfig()).parse_liquidity(tx.build())
        assert [e.pool_id for e in events] == [pool]


def test_pool_address_positions() -> None:
    accounts = tuple(f"acc{i}" for i in range(8))
    assert MeteoraParser.get_pool_address(DEX_PROGRAMS.METEORA.id, accounts) == "acc0"
    assert MeteoraParser.get_pool_address(DAMM_V2, accounts) == "acc1"
    assert MeteoraParser.get_pool_address(DAMM_V2, accounts[:5]) is None


def _make_dbc_sell(raw_tx, pubkeys):
    pool_authority, config, pool, user_wsol, base_vault, quote_vault, base_mint = pubkeys(7)
    tx = raw_tx()
    user_base = find_associated_token_addresses(tx.signer, base_mint)[0]
    tx.add_token_account(user_base, base_mint, tx.signer, 35_000_000_000, 0, 6)
    tx.add_token_account(base_vault, base_mint, pool_authority, 0, 35_000_000_000, 6)
    tx.add_token_account(quote_vault, TOKENS.SOL, pool_authority, 2_000_000_000, 1_100_000_000, 9)
    tx.add_token_account(user_wsol, TOKENS.SOL, tx.signer, 0, 900_000_000, 9)
    accounts = [
        pool_authority, config, pool, user_base, user_wsol, base_vault, quote_vault,
        base_mint, TOKENS.SOL, tx.signer,
    ]
    tx.add_instruction(DBC, accounts, METEORA_DBC.SWAP + struct.pack("<QQ", 35_000_000_000, 800_000_000))
    tx.add_token_transfer(0, user_base, base_vault, tx.signer, 35_000_000_000)
    tx.add_token_transfer(0, quote_vault, user_wsol, pool_authority, 900_000_000)
    return tx, pool, base_mint


class TestMeteoraDBCSell:
    def test_swap_from_user_ata_is_sell(self, raw_tx, pubkeys) -> None:
        tx, pool, base_mint = _make_dbc_sell(raw_tx, pubkeys)

        (event,) = _dbc_events(tx.build())

        assert event.type == MemeEventType.SELL
        assert event.input_token.mint == base_mint
        assert event.input_token.amount == Decimal(35_000)
        assert event.output_token.mint == TOKENS.SOL
        assert event.output_token.amount == Decimal("0.9")

    def test_sell_trade(self, raw_tx, pubkeys) -> None:
        tx, pool, _ = _make_dbc_sell(raw_tx, pubkeys)

        (trade,) = DexParser(ParseConfig()).parse_trades(tx.build())

        assert trade.type == TradeType.SELL
        assert trade.pool == [pool]
        assert trade.output_token.amount_raw == "900000000"


def _make_pool_swap(raw_tx, pubkeys, program_id: str, accounts_before: int, host_fee: int = 0):
    """Signer swaps 1 WSOL for 700 X; the pool sits at ``accounts[accounts_before]``."""
    pool, reserve_x, reserve_sol, user_wsol, user_x, mint_x, pool_auth, host, *padding = pubkeys(10)
    tx = raw_tx()
    tx.add_token_account(user_wsol, TOKENS.SOL, tx.signer, 2_000_000_000, 1_000_000_000 - host_fee, 9)
    tx.add_token_account(reserve_sol, TOKENS.SOL, pool_auth, 0, 1_000_000_000, 9)
    tx.add_token_account(reserve_x, mint_x, pool_auth, 1_000_000_000, 999_999_300, 6)
    tx.add_token_account(user_x, mint_x, tx.signer, 0, 700, 6)
    accounts = padding[:accounts_before] + [pool, reserve_x, reserve_sol, user_wsol, user_x, mint_x, TOKENS.SOL]
    tx.add_instruction(program_id, accounts, anchor_ix("swap") + struct.pack("<QQ", 1_000_000_000, 1))
    tx.add_token_transfer(0, user_wsol, reserve_sol, tx.signer, 1_000_000_000)
    tx.add_token_transfer(0, reserve_x, user_x, pool_auth, 700)
    if host_fee:
        tx.add_token_account(host, TOKENS.SOL, pool_auth, 0, host_fee, 9)
        tx.add_token_transfer(0, user_wsol, host, tx.signer, host_fee)
    return tx, pool, mint_x


class TestMeteoraSwaps:
    def test_dlmm_swap_ignores_host_fee_leg(self, raw_tx, pubkeys) -> None:
        tx, pool, mint_x = _make_pool_swap(raw_tx, pubkeys, DLMM, 0, host_fee=1_000)

        (trade,) = DexParser(ParseConfig()).parse_trades(tx.build())

        assert trade.type == TradeType.BUY
        assert trade.amm == DEX_PROGRAMS.METEORA.name
        assert trade.pool == [pool]
        assert trade.input_token.amount == Decimal(1)
        assert trade.output_token.mint == mint_x
        assert trade.output_token.amount_raw == "700"
        assert trade.idx == "0-0"

    def test_damm_v2_swap(self, raw_tx, pubkeys) -> None:
        tx, pool, mint_x = _make_pool_swap(raw_tx, pubkeys, DAMM_V2, 1)

        (trade,) = DexParser(ParseConfig()).parse_trades(tx.build())

        assert trade.amm == DEX_PROGRAMS.METEORA_DAMM_V2.name
        assert trade.pool == [pool]
        assert trade.input_token.mint == TOKENS.SOL
        assert trade.output_token.mint == mint_x

    def test_liquidity_instruction_is_not_a_swap(self, raw_tx, pubkeys) -> None:
        tx, _, _ = _make_damm_v2_add(raw_tx, pubkeys)
        assert DexParser(ParseConfig()).parse_trades(tx.build()) == []
