"""Tests for Jupiter DCA, value averaging and limit orders."""

import struct
from decimal import Decimal

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from dexlens.models import ParseConfig, TradeType
from dexlens.parsers.constants import AGGREGATOR_PROGRAM_IDS, DEX_PROGRAMS, TOKENS
from dexlens.parsers.dex_parser import DexParser
from dexlens.parsers.discriminators import JUPITER_DCA, JUPITER_LIMIT_ORDER, JUPITER_VA
from dexlens.parsers.jupiter.value_average import decode_fill_event
from dexlens.parsers.registry import TRADE_PARSERS, TRANSFER_PARSERS

DCA_ID = DEX_PROGRAMS.JUPITER_DCA.id
VA_ID = DEX_PROGRAMS.JUPITER_VA.id
LIMIT_V1_ID = DEX_PROGRAMS.JUPITER_LIMIT_ORDER.id
LIMIT_V2_ID = DEX_PROGRAMS.JUPITER_LIMIT_ORDER_V2.id


def _key(value: str) -> bytes:
    return bytes(Pubkey.from_string(value))


def _dca_filled(user: str, dca: str, in_mint: str, out_mint: str, amounts: tuple[int, int], fee: int) -> bytes:
    return (
        JUPITER_DCA.FILLED_EVENT
        + _key(user)
        + _key(dca)
        + _key(in_mint)
        + _key(out_mint)
        + struct.pack("<QQ", *amounts)
        + _key(out_mint)
        + struct.pack("<Q", fee)
    )


def _va_fill(va: str, user: str, keeper: str, in_mint: str, out_mint: str, amounts: tuple[int, int, int]) -> bytes:
    return (
        JUPITER_VA.FILL_EVENT
        + _key(va)
        + _key(user)
        + _key(keeper)
        + _key(in_mint)
        + _key(out_mint)
        + struct.pack("<QQQ", *amounts)
    )


def _make_deposit(raw_tx, pubkeys, program_id: str, discriminator: bytes):
    """Signer moves 25 USDC into an order-program vault."""
    order, user_usdc, vault = pubkeys(3)
    tx = raw_tx()
    tx.add_token_account(user_usdc, TOKENS.USDC, tx.signer, 25_000_000, 0, 6)
    tx.add_token_account(vault, TOKENS.USDC, order, 0, 25_000_000, 6)
    tx.add_instruction(program_id, [tx.signer, order, user_usdc, vault], discriminator)
    tx.add_token_transfer(0, user_usdc, vault, tx.signer, 25_000_000)
    return tx, user_usdc, vault


class TestJupiterDCA:
    def test_filled_event_becomes_trade(self, raw_tx, pubkeys) -> None:
        keeper_event_auth, user, dca, user_usdc = pubkeys(4)
        tx = raw_tx()
        tx.add_token_account(user_usdc, TOKENS.USDC, user, 0, 149_850_000, 6)
        tx.add_instruction(DCA_ID, [tx.signer, dca, user_usdc], b"\x00" * 8)
        tx.add_inner_instruction(
            0,
            DCA_ID,
            [keeper_event_auth],
            _dca_filled(user, dca, TOKENS.SOL, TOKENS.USDC, (1_000_000_000, 150_000_000), 150_000),
        )

        result = DexParser(ParseConfig()).parse_all(tx.build())

        (trade,) = result.trades
        assert trade.type == TradeType.BUY
        assert trade.user == user
        assert trade.pool == [dca]
        assert trade.route == DEX_PROGRAMS.JUPITER_DCA.name
        assert trade.input_token.amount == Decimal(1)
        assert trade.output_token.amount == Decimal(150)
        assert trade.fee is not None
        assert trade.fee.mint == TOKENS.USDC
        assert trade.fee.amount == Decimal("0.15")
        assert trade.idx == "0-0"

    def test_open_dca_reported_as_transfer(self, raw_tx, pubkeys) -> None:
        tx, user_usdc, vault = _make_deposit(raw_tx, pubkeys, DCA_ID, JUPITER_DCA.OPEN_DCA_V2)

        result = DexParser(ParseConfig()).parse_all(tx.build())

        assert result.trades == []
        (transfer,) = result.transfers
        assert (transfer.info.source, transfer.info.destination) == (user_usdc, vault)
        assert transfer.info.token_amount.ui_amount == Decimal(25)


class TestJupiterValueAverage:
    def test_registered_as_aggregator(self) -> None:
        assert VA_ID in AGGREGATOR_PROGRAM_IDS
        assert VA_ID in TRADE_PARSERS
        assert VA_ID in TRANSFER_PARSERS

    def test_decode_fill_event(self, pubkeys) -> None:
        va, user, keeper, mint_x = pubkeys(4)
        data = _va_fill(va, user, keeper, TOKENS.USDC, mint_x, (10_000_000, 4_000_000, 2_000))

        event = decode_fill_event(data[16:])

        assert (event.value_average, event.user, event.keeper) == (va, user, keeper)
        assert (event.input_mint, event.output_mint) == (TOKENS.USDC, mint_x)
        assert (event.input_amount, event.output_amount, event.fee) == (10_000_000, 4_000_000, 2_000)

    def test_fill_event_becomes_trade(self, raw_tx, pubkeys) -> None:
        event_auth, va, user, mint_x, user_x, user_usdc = pubkeys(6)
        tx = raw_tx()
        tx.add_token_account(user_usdc, TOKENS.USDC, user, 10_000_000, 0, 6)
        tx.add_token_account(user_x, mint_x, user, 0, 3_998_000, 6)
        tx.add_instruction(VA_ID, [tx.signer, va, user_x], b"\x01" * 8)
        tx.add_inner_instruction(
            0, VA_ID, [event_auth], _va_fill(va, user, tx.signer, TOKENS.USDC, mint_x, (10_000_000, 4_000_000, 2_000))
        )

        result = DexParser(ParseConfig()).parse_all(tx.build())

        (trade,) = result.trades
        assert trade.type == TradeType.BUY
        assert trade.user == user
        assert trade.program_id == VA_ID
        assert trade.route == DEX_PROGRAMS.JUPITER_VA.name
        assert trade.pool == [va]
        assert trade.input_token.amount == Decimal(10)
        assert trade.output_token.mint == mint_x
        assert trade.output_token.amount == Decimal(4)
        assert trade.fee is not None
        assert trade.fee.mint == mint_x
        assert trade.fee.amount_raw == "2000"
        assert trade.fee.dex == DEX_PROGRAMS.JUPITER_VA.name

    def test_fill_aggregates(self, raw_tx, pubkeys) -> None:
        event_auth, va, user, mint_x = pubkeys(4)
        tx = raw_tx()
        tx.add_instruction(VA_ID, [tx.signer, va], b"\x01" * 8)
        tx.add_inner_instruction(
            0, VA_ID, [event_auth], _va_fill(va, user, tx.signer, TOKENS.USDC, mint_x, (10_000_000, 4_000_000, 0))
        )

        result = DexParser(ParseConfig(aggregate_trades=True)).parse_all(tx.build())

        assert result.trades == []
        assert result.aggregate_trade is not None
        assert result.aggregate_trade.pool == [va]
        assert result.aggregate_trade.fee is None

    def test_deposit_reported_as_transfer(self, raw_tx, pubkeys) -> None:
        tx, user_usdc, vault = _make_deposit(raw_tx, pubkeys, VA_ID, JUPITER_VA.DEPOSIT)

        transfers = DexParser(ParseConfig()).parse_transfers(tx.build())

        assert [(t.info.source, t.info.destination) for t in transfers] == [(user_usdc, vault)]


class TestJupiterLimitOrder:
    def test_v2_fill_inferred_from_transfers(self, raw_tx, pubkeys) -> None:
        order, maker_usdc, taker_usdc, escrow_x, taker_x, mint_x = pubkeys(6)
        tx = raw_tx()
        tx.add_token_account(taker_usdc, TOKENS.USDC, tx.signer, 5_000_000, 0, 6)
        tx.add_token_account(maker_usdc, TOKENS.USDC, order, 0, 5_000_000, 6)
        tx.add_token_account(escrow_x, mint_x, order, 700, 0, 6)
        tx.add_token_account(taker_x, mint_x, tx.signer, 0, 700, 6)
        tx.add_instruction(LIMIT_V2_ID, [tx.signer, order, taker_usdc, maker_usdc], JUPITER_LIMIT_ORDER.FILL_ORDER)
        tx.add_token_transfer(0, taker_usdc, maker_usdc, tx.signer, 5_000_000)
        tx.add_token_transfer(0, escrow_x, taker_x, order, 700)

        trades = DexParser(ParseConfig()).parse_trades(tx.build())

        (trade,) = trades
        assert trade.type == TradeType.BUY
        assert trade.program_id == LIMIT_V2_ID
        assert trade.route == DEX_PROGRAMS.JUPITER_LIMIT_ORDER_V2.name
        assert trade.input_token.amount == Decimal(5)
        assert trade.output_token.amount_raw == "700"
        assert trade.idx == "0-0"

    def test_v2_cancel_is_not_a_trade(self, raw_tx, pubkeys) -> None:
        tx, _, vault = _make_deposit(raw_tx, pubkeys, LIMIT_V2_ID, JUPITER_LIMIT_ORDER.CANCEL_ORDER)

        result = DexParser(ParseConfig()).parse_all(tx.build())

        assert result.trades == []
        assert [t.info.destination for t in result.transfers] == [vault]

    def test_v1_initialize_reported_as_transfer(self, raw_tx, pubkeys) -> None:
        tx, user_usdc, _ = _make_deposit(raw_tx, pubkeys, LIMIT_V1_ID, JUPITER_LIMIT_ORDER.INITIALIZE_ORDER)

        transfers = DexParser(ParseConfig()).parse_transfers(tx.build())

        assert [t.info.source for t in transfers] == [user_usdc]
