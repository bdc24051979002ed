"""Tests for Heaven launchpad trades, pool creation and Metaplex token metadata."""

import struct
from decimal import Decimal

import pytest

from dexlens.models import MemeEventType, ParseConfig, TradeType
from dexlens.parsers.adapter import TransactionAdapter
from dexlens.parsers.constants import DEX_PROGRAMS, METAPLEX_PROGRAM_ID, TOKENS
from dexlens.parsers.dex_parser import DexParser
from dexlens.parsers.discriminators import HEAVEN, METAPLEX
from dexlens.parsers.exceptions import InsufficientAccountsError
from dexlens.parsers.heaven.event import HeavenEventParser
from dexlens.parsers.transaction_utils import TransactionUtils

HEAVEN_ID = DEX_PROGRAMS.HEAVEN.id


def _string(value: str) -> bytes:
    return struct.pack("<I", len(value)) + value.encode()


def _events(raw: dict):
    adapter = TransactionAdapter(raw)
    return HeavenEventParser(adapter, TransactionUtils(adapter).get_transfer_actions()).process_events()


def _make_trade(raw_tx, pubkeys, is_buy: bool):
    mint, pool, user_base, user_wsol, base_vault, quote_vault, config, *head = pubkeys(11)
    tx = raw_tx()
    tx.add_token_account(user_base, mint, tx.signer, 0 if is_buy else 40_000_000_000, 40_000_000_000 if is_buy else 0, 9)
    tx.add_token_account(user_wsol, TOKENS.SOL, tx.signer, 2_000_000_000, 1_000_000_000, 9)
    tx.add_token_account(base_vault, mint, pool, 900_000_000_000, 860_000_000_000, 9)
    tx.add_token_account(quote_vault, TOKENS.SOL, pool, 5_000_000_000, 6_000_000_000, 9)
    accounts = [*head, pool, tx.signer, mint, TOKENS.SOL, user_base, user_wsol, base_vault, quote_vault, config]
    if is_buy:
        tx.add_instruction(HEAVEN_ID, accounts, HEAVEN.BUY + struct.pack("<QQ", 1_000_000_000, 39_000_000_000))
        tx.add_token_transfer(0, user_wsol, quote_vault, tx.signer, 1_000_000_000)
        tx.add_token_transfer(0, base_vault, user_base, pool, 40_000_000_000)
    else:
        tx.add_instruction(HEAVEN_ID, accounts, HEAVEN.SELL + struct.pack("<QQ", 40_000_000_000, 900_000_000))
        tx.add_token_transfer(0, user_base, base_vault, tx.signer, 40_000_000_000)
        tx.add_token_transfer(0, quote_vault, user_wsol, pool, 950_000_000)
    return tx, mint, pool, config


class TestHeavenTrades:
    def test_buy_event_from_transfers(self, raw_tx, pubkeys) -> None:
        tx, mint, pool, config = _make_trade(raw_tx, pubkeys, is_buy=True)

        (event,) = _events(tx.build())

        assert event.type == MemeEventType.BUY
        assert event.user == tx.signer
        assert event.pool == pool
        assert event.platform_config == config
        assert event.input_token.mint == TOKENS.SOL
        assert event.input_token.amount == Decimal(1)
        assert event.output_token.mint == mint
        assert event.output_token.amount == Decimal(40)

    def test_sell_event_reports_executed_output(self, raw_tx, pubkeys) -> None:
        tx, mint, _, _ = _make_trade(raw_tx, pubkeys, is_buy=False)

        (event,) = _events(tx.build())

        assert event.type == MemeEventType.SELL
        assert event.input_token.mint == mint
        assert event.output_token.amount_raw == "950000000"

    def test_trade_inferred_by_orchestrator(self, raw_tx, pubkeys) -> None:
        tx, mint, _, _ = _make_trade(raw_tx, pubkeys, is_buy=True)

        result = DexParser(ParseConfig()).parse_all(tx.build())

        (trade,) = result.trades
        assert trade.type == TradeType.BUY
        assert trade.amm == DEX_PROGRAMS.HEAVEN.name
        assert trade.output_token.mint == mint
        assert [e.type for e in result.meme_events] == [MemeEventType.BUY]

    def test_short_account_list(self, raw_tx, pubkeys) -> None:
        tx = raw_tx()
        tx.add_instruction(HEAVEN_ID, pubkeys(6), HEAVEN.BUY + bytes(16))

        with pytest.raises(InsufficientAccountsError):
            _events(tx.build())


class TestHeavenCreate:
    def test_pool_creation_skips_seed_transfer(self, raw_tx, pubkeys) -> None:
        mint, pool, config, user_base, user_wsol, base_vault, quote_vault, *head = pubkeys(14)
        tx = raw_tx()
        tx.add_token_account(user_base, mint, tx.signer, 0, 30_000_000_000, 9)
        tx.add_token_account(user_wsol, TOKENS.SOL, tx.signer, 1_000_000_000, 500_000_000, 9)
        tx.add_token_account(base_vault, mint, pool, 0, 970_000_000_000, 9)
        tx.add_token_account(quote_vault, TOKENS.SOL, pool, 0, 500_000_000, 9)
        accounts = [*head[:4], tx.signer, mint, TOKENS.SOL, user_base, user_wsol, base_vault, pool, config]
        tx.add_instruction(HEAVEN_ID, accounts, HEAVEN.CREATE_POOL + bytes(16))
        tx.add_sol_transfer(0, tx.signer, pool, 20_000_000)
        tx.add_token_transfer(0, user_wsol, quote_vault, tx.signer, 500_000_000)
        tx.add_token_transfer(0, base_vault, user_base, pool, 30_000_000_000)

        (event,) = _events(tx.build())

        assert event.type == MemeEventType.BUY
        assert event.base_mint == mint
        assert event.pool == pool
        assert event.platform_config == config
        assert event.input_token.amount == Decimal("0.5")
        assert event.output_token.amount == Decimal(30)

    def test_metaplex_create(self, raw_tx, pubkeys) -> None:
        metadata, master, mint, authority = pubkeys(4)
        tx = raw_tx()
        data = METAPLEX.CREATE_MINT + bytes([0]) + _string("Halo") + _string("HALO") + _string("https://example.invalid/h")
        tx.add_instruction(METAPLEX_PROGRAM_ID, [metadata, master, mint, authority, tx.signer], data)

        (event,) = _events(tx.build())

        assert event.type == MemeEventType.CREATE
        assert event.base_mint == mint
        assert event.creator == tx.signer
        assert (event.name, event.symbol) == ("Halo", "HALO")
        assert event.decimals == 9
        assert event.total_supply == Decimal(1_000_000_000)
