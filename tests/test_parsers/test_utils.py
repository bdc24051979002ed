"""Tests for idx ordering, trade direction and route collapsing."""

from dataclasses import dataclass
from decimal import Decimal

from dexlens.models import DexInfo, TokenInfo, TradeInfo, TradeType, to_ui_amount
from dexlens.parsers.constants import TOKENS
from dexlens.parsers.dex_parser import dedupe_trades
from dexlens.parsers.utils import (
    find_associated_token_addresses,
    get_account_trade_type,
    get_final_swap,
    get_trade_type,
    sort_by_idx,
)

MINT_X = "7GCihgDB8fe6KNjn2MYtkzZcRjQy3t9GHdC8uHYmW2hr"
MINT_Y = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


@dataclass
class _Indexed:
    idx: str


def _make_trade(
    idx: str, in_mint: str, in_raw: int, out_mint: str, out_raw: int, signature: str = "sig-1"
) -> TradeInfo:
    return TradeInfo(
        type=get_trade_type(in_mint, out_mint),
        input_token=TokenInfo.from_raw(in_mint, in_raw, 6),
        output_token=TokenInfo.from_raw(out_mint, out_raw, 9 if out_mint == TOKENS.SOL else 6),
        user="user",
        program_id="prog",
        amm="SomeAmm",
        route="",
        slot=1,
        timestamp=2,
        signature=signature,
        idx=idx,
    )


class TestSortByIdx:
    def test_numeric_not_lexicographic(self) -> None:
        items = [_Indexed("10-0"), _Indexed("2-0"), _Indexed("2-3"), _Indexed("2-1")]
        assert [i.idx for i in sort_by_idx(items)] == ["2-0", "2-1", "2-3", "10-0"]

    def test_outer_only_idx_sorts_as_inner_zero(self) -> None:
        items = [_Indexed("3-1"), _Indexed("3")]
        assert [i.idx for i in sort_by_idx(items)] == ["3", "3-1"]

    def test_stable_for_equal_idx(self) -> None:
        first, second = _Indexed("1-0"), _Indexed("1-0")
        assert sort_by_idx([first, second])[0] is first


class TestTradeType:
    def test_spending_sol_is_buy(self) -> None:
        assert get_trade_type(TOKENS.SOL, MINT_X) == TradeType.BUY

    def test_receiving_sol_is_sell(self) -> None:
        assert get_trade_type(MINT_X, TOKENS.SOL) == TradeType.SELL

    def test_spending_stable_is_buy(self) -> None:
        assert get_trade_type(TOKENS.USDC, MINT_X) == TradeType.BUY

    def test_unknown_pair_is_sell(self) -> None:
        assert get_trade_type(MINT_X, MINT_Y) == TradeType.SELL


class TestGetFinalSwap:
    def test_three_legs_collapse_in_idx_order(self) -> None:
        legs = [
            _make_trade("10-0", MINT_Y, 300, TOKENS.SOL, 2_000_000_000),
            _make_trade("2-0", TOKENS.USDC, 5_000_000, MINT_X, 100),
            _make_trade("3-0", MINT_X, 100, MINT_Y, 300),
        ]
        final = get_final_swap(legs, DexInfo(amm="Jupiter", route="Jupiter"))

        assert final is not None
        assert final.input_token.mint == TOKENS.USDC
        assert final.input_token.amount == Decimal(5)
        assert final.output_token.mint == TOKENS.SOL
        assert final.output_token.amount == Decimal(2)
        assert final.type == TradeType.SELL
        assert final.idx == "2-0"
        assert final.amm == "Jupiter"

    def test_two_legs_out_of_order(self) -> None:
        legs = [
            _make_trade("1-0", MINT_X, 100, TOKENS.SOL, 2_000_000_000),
            _make_trade("0-1", TOKENS.USDC, 5_000_000, MINT_X, 100),
        ]
        final = get_final_swap(legs)

        assert final is not None
        assert final.idx == "0-1"
        assert final.input_token.mint == TOKENS.USDC
        assert final.output_token.mint == TOKENS.SOL

    def test_single_leg_returned_unchanged(self) -> None:
        leg = _make_trade("0-0", TOKENS.USDC, 1, MINT_X, 1)
        assert get_final_swap([leg]) is leg

    def test_empty_is_none(self) -> None:
        assert get_final_swap([]) is None

    def test_split_route_sums_matching_mints(self) -> None:
        legs = [
            _make_trade("1-0", TOKENS.USDC, 3_000_000, MINT_X, 60),
            _make_trade("1-1", TOKENS.USDC, 2_000_000, MINT_X, 40),
        ]
        final = get_final_swap(legs)
        assert final is not None
        assert final.input_token.amount_raw == "5000000"
        assert final.output_token.amount_raw == "100"
        assert final.output_token.amount == to_ui_amount(100, 6)


class TestDedupeTrades:
    def test_same_idx_and_signature_collapse_to_last(self) -> None:
        first = _make_trade("1-0", TOKENS.USDC, 1, MINT_X, 1)
        other = _make_trade("2-0", TOKENS.USDC, 1, MINT_X, 1)
        repeat = _make_trade("1-0", TOKENS.USDC, 9, MINT_X, 9)

        result = dedupe_trades([first, other, repeat])

        assert len(result) == 2
        assert result[0] is repeat  # keeps first position
        assert result[1] is other

    def test_different_signatures_kept(self) -> None:
        a = _make_trade("1-0", TOKENS.USDC, 1, MINT_X, 1, signature="a")
        b = _make_trade("1-0", TOKENS.USDC, 1, MINT_X, 1, signature="b")
        assert len(dedupe_trades([a, b])) == 2


def test_associated_token_addresses_differ_per_token_program() -> None:
    standard, token2022 = find_associated_token_addresses(MINT_X, TOKENS.USDC)
    assert standard != token2022
    assert find_associated_token_addresses(MINT_X, TOKENS.USDC) == (standard, token2022)


def test_account_trade_type_from_user_ata() -> None:
    user = MINT_Y
    standard, token2022 = find_associated_token_addresses(user, MINT_X)
    assert get_account_trade_type(user, MINT_X, standard, "other") == TradeType.SELL
    assert get_account_trade_type(user, MINT_X, "other", token2022) == TradeType.BUY
    assert get_account_trade_type(user, MINT_X, "a", "b") == TradeType.SWAP
