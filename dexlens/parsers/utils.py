"""Small helpers shared by the decoders and the orchestrator."""

from dataclasses import replace
from typing import Sequence, TypeVar

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from dexlens.models import ClassifiedInstruction, DexInfo, Instruction, TradeInfo, TradeType, to_ui_amount
from dexlens.parsers.constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    BASE_TOKENS,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    TOKENS,
)

T = TypeVar("T")


def get_instruction_data(instruction: Instruction) -> bytes:
    return instruction.data or b""


def _idx_key(idx: str) -> tuple[int, int]:
    main, _, sub = idx.partition("-")
    try:
        return int(main), int(sub or 0)
    except ValueError:
        return 0, 0


def sort_by_idx(items: Sequence[T]) -> list[T]:
    """Stable numeric sort on ``idx`` = "outer-inner" ("2-0" before "10-0")."""
    return sorted(items, key=lambda item: _idx_key(getattr(item, "idx", "") or ""))


def get_trade_type(in_mint: str, out_mint: str) -> TradeType:
    if in_mint == TOKENS.SOL:
        return TradeType.BUY
    if out_mint == TOKENS.SOL:
        return TradeType.SELL
    if in_mint in BASE_TOKENS:
        return TradeType.BUY
    return TradeType.SELL


def get_final_swap(trades: list[TradeInfo], dex_info: DexInfo | None = None) -> TradeInfo | None:
    """Collapse a multi-hop route into one trade from the first input to the last output."""
    if not trades:
        return None
    if len(trades) == 1:
        return trades[0]

    ordered = sort_by_idx(trades)
    first, last = ordered[0], ordered[-1]

    input_raw = sum(
        int(t.input_token.amount_raw) for t in ordered if t.input_token.mint == first.input_token.mint
    )
    output_raw = sum(
        int(t.output_token.amount_raw) for t in ordered if t.output_token.mint == last.output_token.mint
    )
    input_token = replace(
        first.input_token,
        amount_raw=str(input_raw),
        amount=to_ui_amount(input_raw, first.input_token.decimals),
    )
    output_token = replace(
        last.output_token,
        amount_raw=str(output_raw),
        amount=to_ui_amount(output_raw, last.output_token.decimals),
    )

    return TradeInfo(
        type=get_trade_type(input_token.mint, output_token.mint),
        input_token=input_token,
        output_token=output_token,
        user=first.user,
        program_id=first.program_id,
        amm=(dex_info.amm if dex_info and dex_info.amm else None) or first.amm,
        route=(dex_info.route if dex_info and dex_info.route else None) or first.route or "",
        slot=first.slot,
        timestamp=first.timestamp,
        signature=first.signature,
        idx=first.idx,
    )


def get_prev_instruction_by_index(
    instructions: list[ClassifiedInstruction], outer_index: int, inner_index: int | None
) -> ClassifiedInstruction | None:
    """Instruction listed right before (outer_index, inner_index) in the same program group."""
    for position, item in enumerate(instructions):
        if item.outer_index == outer_index and item.inner_index == inner_index:
            return instructions[position - 1] if position > 0 else None
    return None


def find_associated_token_addresses(wallet: str, mint: str) -> tuple[str, str]:
    """ATA of ``wallet`` for ``mint`` under the SPL Token and Token-2022 programs."""
    owner = Pubkey.from_string(wallet)
    mint_key = Pubkey.from_string(mint)
    ata_program = Pubkey.from_string(ASSOCIATED_TOKEN_PROGRAM_ID)
    addresses = []
    for token_program in (TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID):
        address, _ = Pubkey.find_program_address(
            [bytes(owner), bytes(Pubkey.from_string(token_program)), bytes(mint_key)],
            ata_program,
        )
        addresses.append(str(address))
    return addresses[0], addresses[1]


def get_account_trade_type(
    user: str, base_mint: str, input_user_account: str, output_user_account: str
) -> TradeType:
    """Direction from which of the user's accounts holds the base token."""
    standard, token2022 = find_associated_token_addresses(user, base_mint)
    if input_user_account in (standard, token2022):
        return TradeType.SELL
    if output_user_account in (standard, token2022):
        return TradeType.BUY
    return TradeType.SWAP
