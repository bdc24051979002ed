"""Tests for Jupiter route events collapsing into one trade per route."""

import struct
from decimal import Decimal

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from dexlens.models import ParseConfig, TradeType
from dexlens.parsers.constants import DEX_PROGRAMS, TOKENS
from dexlens.parsers.dex_parser import DexParser
from dexlens.parsers.discriminators import JUPITER
from dexlens.parsers.jupiter.route import decode_swap_event

JUPITER_ID = DEX_PROGRAMS.JUPITER.id


def _swap_event(amm: str, in_mint: str, in_amount: int, out_mint: str, out_amount: int) -> bytes:
    return (
        JUPITER.ROUTE_EVENT
        + bytes(Pubkey.from_string(amm))
        + bytes(Pubkey.from_string(in_mint))
        + struct.pack("<Q", in_amount)
        + bytes(Pubkey.from_string(out_mint))
        + struct.pack("<Q", out_amount)
    )


def _make_route(raw_tx, pubkeys, routes: int = 1):
    """SOL -> USDC -> X, two hops per route instruction."""
    event_authority, mint_x, user_x, user_usdc = pubkeys(4)
    tx = raw_tx()
    tx.add_token_account(user_x, mint_x, tx.signer, 0, 42_000_000 * routes, 6)
    tx.add_token_account(user_usdc, TOKENS.USDC, tx.signer, 0, 0, 6)
    for outer in range(routes):
        tx.add_instruction(JUPITER_ID, [tx.signer, user_x], b"\xe5\x17\xcb\x97\x7a\xe3\xad\x2a")
        tx.add_inner_instruction(
            outer,
            JUPITER_ID,
            [event_authority],
            _swap_event(DEX_PROGRAMS.RAYDIUM_V4.id, TOKENS.SOL, 1_000_000_000, TOKENS.USDC, 150_000_000),
        )
        tx.add_inner_instruction(
            outer,
            JUPITER_ID,
            [event_authority],
            _swap_event(DEX_PROGRAMS.ORCA.id, TOKENS.USDC, 150_000_000, mint_x, 42_000_000),
        )
    return tx, mint_x


def test_decode_swap_event() -> None:
    data = _swap_event(DEX_PROGRAMS.ORCA.id, TOKENS.SOL, 7, TOKENS.USDC, 9)
    event = decode_swap_event(data[16:])
    assert event.amm == DEX_PROGRAMS.ORCA.id
    assert (event.input_mint, event.input_amount) == (TOKENS.SOL, 7)
    assert (event.output_mint, event.output_amount) == (TOKENS.USDC, 9)


class TestJupiterRoute:
    def test_two_hops_merge_into_one_trade(self, raw_tx, pubkeys) -> None:
        tx, mint_x = _make_route(raw_tx, pubkeys)

        result = DexParser(ParseConfig()).parse_all(tx.build())

        assert result.state is True
        assert len(result.trades) == 1
        trade = result.trades[0]
        assert trade.type == TradeType.BUY
        assert trade.route == DEX_PROGRAMS.JUPITER.name
        assert trade.program_id == JUPITER_ID
        assert trade.input_token.mint == TOKENS.SOL
        assert trade.input_token.amount == Decimal(1)
        assert trade.output_token.mint == mint_x
        assert trade.output_token.amount == Decimal(42)
        assert trade.idx == "0-0"
        assert trade.user == tx.signer

    def test_one_trade_per_route_instruction(self, raw_tx, pubkeys) -> None:
        tx, _ = _make_route(raw_tx, pubkeys, routes=2)

        trades = DexParser(ParseConfig()).parse_trades(tx.build())

        assert [t.idx for t in trades] == ["0-0", "1-0"]

    def test_aggregate_trade_replaces_trade_list(self, raw_tx, pubkeys) -> None:
        tx, mint_x = _make_route(raw_tx, pubkeys, routes=2)

        result = DexParser(ParseConfig(aggregate_trades=True)).parse_all(tx.build())

        assert result.trades == []
        assert result.aggregate_trade is not None
        assert result.aggregate_trade.input_token.amount == Decimal(2)
        assert result.aggregate_trade.output_token.mint == mint_x
        assert result.aggregate_trade.output_token.amount == Decimal(84)
