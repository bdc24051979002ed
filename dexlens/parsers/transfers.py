"""Extract token movements (SPL / Token-2022 / native SOL) from a transaction.

Transfers are grouped by the program that caused them:
  "<programId>:<outer>"        inner transfers of an outer program call
  "<programId>:<outer>-<inner>" transfers following a CPI into another program
  "transfer"                    top-level transfer instructions
"""

from typing import Iterable

from loguru import logger

from dexlens.models import (
    CompiledInstruction,
    Instruction,
    ParsedInstruction,
    TokenAmount,
    TransferData,
    TransferInfo,
)
from dexlens.parsers.adapter import TransactionAdapter
from dexlens.parsers.binary_reader import BinaryReader
from dexlens.parsers.constants import (
    FEE_ACCOUNTS,
    SKIP_PROGRAM_IDS,
    SOL_DECIMALS,
    SYSTEM_PROGRAM_ID,
    SYSTEM_PROGRAMS,
    TOKEN_PROGRAM_IDS,
    TOKENS,
    VAULT_PROGRAM_IDS,
)
from dexlens.parsers.exceptions import BinaryReaderError

EXTRA_ACTION_TYPES = ("mintTo", "burn", "mintToChecked", "burnChecked")

# SPL token instruction tags
_TOKEN_TAGS = {
    3: "transfer",
    12: "transferChecked",
    7: "mintTo",
    8: "burn",
    14: "mintToChecked",
    15: "burnChecked",
}
_SYSTEM_TRANSFER_TAG = 2

TRANSFER_GROUP_KEY = "transfer"


def is_pass_through_program(program_id: str) -> bool:
    """Programs whose inner calls never open a new transfer group."""
    return program_id in SKIP_PROGRAM_IDS or program_id in VAULT_PROGRAM_IDS


def get_transfer_actions(
    adapter: TransactionAdapter, extra_types: Iterable[str] | None = None
) -> dict[str, list[TransferData]]:
    extra = tuple(extra_types or ())
    actions: dict[str, list[TransferData]] = {}

    for inner_set in adapter.inner_instructions:
        outer_index = inner_set.index
        if outer_index >= len(adapter.instructions):
            continue
        outer_program = adapter.instructions[outer_index].program_id
        if outer_program in SYSTEM_PROGRAMS:
            continue

        group_key = f"{outer_program}:{outer_index}"
        for inner_index, ix in enumerate(inner_set.instructions):
            program_id = ix.program_id
            if (
                program_id != outer_program
                and program_id not in SYSTEM_PROGRAMS
                and not is_pass_through_program(program_id)
            ):
                group_key = f"{program_id}:{outer_index}-{inner_index}"
                continue

            transfer = parse_instruction_action(adapter, ix, f"{outer_index}-{inner_index}", extra)
            if transfer is None:
                continue
            if (
                transfer.info.destination in FEE_ACCOUNTS
                or transfer.info.destination_owner in FEE_ACCOUNTS
            ):
                transfer.is_fee = True
            actions.setdefault(group_key, []).append(transfer)

    for outer_index, ix in enumerate(adapter.instructions):
        transfer = parse_instruction_action(adapter, ix, str(outer_index), extra)
        if transfer is not None:
            actions.setdefault(TRANSFER_GROUP_KEY, []).append(transfer)

    return actions


def process_transfer_instructions(
    adapter: TransactionAdapter, outer_index: int, extra_types: Iterable[str] | None = None
) -> list[TransferData]:
    """All transfers among the inner instructions of one outer instruction."""
    extra = tuple(extra_types or ())
    result: list[TransferData] = []
    for inner_set in adapter.inner_instructions:
        if inner_set.index != outer_index:
            continue
        for inner_index, ix in enumerate(inner_set.instructions):
            transfer = parse_instruction_action(adapter, ix, f"{outer_index}-{inner_index}", extra)
            if transfer is not None:
                result.append(transfer)
    return result


def parse_instruction_action(
    adapter: TransactionAdapter,
    ix: Instruction,
    idx: str,
    extra_types: tuple[str, ...] = (),
) -> TransferData | None:
    if isinstance(ix, ParsedInstruction):
        return _parse_parsed_action(adapter, ix, idx, extra_types)
    return _parse_compiled_action(adapter, ix, idx, extra_types)


# --- jsonParsed shape --------------------------------------------------------


def _parse_parsed_action(
    adapter: TransactionAdapter, ix: ParsedInstruction, idx: str, extra_types: tuple[str, ...]
) -> TransferData | None:
    kind = ix.parsed_type
    info = ix.info

    if ix.program_id == SYSTEM_PROGRAM_ID:
        if kind != "transfer":
            return None
        return _native_transfer(
            adapter, ix.program_id, idx, info.get("source", ""), info.get("destination", ""), info.get("lamports", 0)
        )

    if ix.program_id not in TOKEN_PROGRAM_IDS:
        return None

    try:
        if kind == "transfer":
            source, destination = info.get("source", ""), info.get("destination", "")
            mint = _mint_for_accounts(adapter, destination, source)
            if not mint:
                return None
            amount = TokenAmount.from_raw(info.get("amount", 0), adapter.get_token_decimals(mint))
            authority = info.get("authority") or info.get("multisigAuthority")
            return _token_transfer(adapter, "transfer", ix.program_id, idx, mint, source, destination, amount, authority)

        if kind == "transferChecked":
            source, destination = info.get("source", ""), info.get("destination", "")
            mint = info.get("mint") or _mint_for_accounts(adapter, destination, source)
            if not mint:
                return None
            amount = _parsed_token_amount(info, adapter.get_token_decimals(mint))
            authority = info.get("authority") or info.get("multisigAuthority")
            return _token_transfer(
                adapter, "transferChecked", ix.program_id, idx, mint, source, destination, amount, authority
            )

        if kind in extra_types:
            mint = info.get("mint", "")
            amount = _parsed_token_amount(info, adapter.get_token_decimals(mint))
            account = info.get("account", "")
            if kind.startswith("mintTo"):
                authority = info.get("mintAuthority") or info.get("multisigMintAuthority")
                return _token_transfer(adapter, kind, ix.program_id, idx, mint, "", account, amount, authority)
            authority = info.get("authority") or info.get("multisigAuthority")
            return _token_transfer(adapter, kind, ix.program_id, idx, mint, account, "", amount, authority)
    except (TypeError, ValueError) as e:
        logger.debug(f"[TRANSFER] Skipping malformed {kind} at {idx}: {e}")
    return None


def _parsed_token_amount(info: dict, decimals: int) -> TokenAmount:
    token_amount = info.get("tokenAmount")
    if isinstance(token_amount, dict):
        return TokenAmount.from_raw(token_amount.get("amount", 0), int(token_amount.get("decimals", decimals)))
    return TokenAmount.from_raw(info.get("amount", 0), decimals)


# --- compiled shape ----------------------------------------------------------


def _parse_compiled_action(
    adapter: TransactionAdapter, ix: CompiledInstruction, idx: str, extra_types: tuple[str, ...]
) -> TransferData | None:
    data, accounts = ix.data, ix.accounts
    if not data:
        return None

    try:
        if ix.program_id == SYSTEM_PROGRAM_ID:
            reader = BinaryReader(data)
            if reader.read_u32() != _SYSTEM_TRANSFER_TAG or len(accounts) < 2:
                return None
            return _native_transfer(adapter, ix.program_id, idx, accounts[0], accounts[1], reader.read_u64())

        if ix.program_id not in TOKEN_PROGRAM_IDS:
            return None

        kind = _TOKEN_TAGS.get(data[0])
        if kind is None:
            return None
        if kind not in ("transfer", "transferChecked") and kind not in extra_types:
            return None

        reader = BinaryReader(data, 1)
        raw = reader.read_u64()

        if kind == "transfer":
            if len(accounts) < 3:
                return None
            source, destination, authority = accounts[0], accounts[1], accounts[2]
            mint = _mint_for_accounts(adapter, destination, source)
            if not mint:
                return None
            amount = TokenAmount.from_raw(raw, adapter.get_token_decimals(mint))
            return _token_transfer(adapter, kind, ix.program_id, idx, mint, source, destination, amount, authority)

        if kind == "transferChecked":
            if len(accounts) < 4:
                return None
            source, mint, destination, authority = accounts[0], accounts[1], accounts[2], accounts[3]
            amount = TokenAmount.from_raw(raw, reader.read_u8())
            return _token_transfer(adapter, kind, ix.program_id, idx, mint, source, destination, amount, authority)

        if len(accounts) < 3:
            return None
        decimals = reader.read_u8() if kind.endswith("Checked") else None
        if kind.startswith("mintTo"):
            mint, account, authority = accounts[0], accounts[1], accounts[2]
            amount = TokenAmount.from_raw(raw, decimals if decimals is not None else adapter.get_token_decimals(mint))
            return _token_transfer(adapter, kind, ix.program_id, idx, mint, "", account, amount, authority)

        account, mint, authority = accounts[0], accounts[1], accounts[2]
        amount = TokenAmount.from_raw(raw, decimals if decimals is not None else adapter.get_token_decimals(mint))
        return _token_transfer(adapter, kind, ix.program_id, idx, mint, account, "", amount, authority)
    except BinaryReaderError as e:
        logger.debug(f"[TRANSFER] Skipping truncated instruction at {idx}: {e}")
        return None


# --- builders ----------------------------------------------------------------


def _mint_for_accounts(adapter: TransactionAdapter, destination: str, source: str) -> str | None:
    for account in (destination, source):
        info = adapter.spl_token_map.get(account)
        if info:
            return info.mint
    return None


def _native_transfer(
    adapter: TransactionAdapter, program_id: str, idx: str, source: str, destination: str, lamports: int | str
) -> TransferData:
    return TransferData(
        type="nativeTransfer",
        program_id=program_id,
        info=TransferInfo(
            mint=TOKENS.SOL,
            source=source,
            destination=destination,
            token_amount=TokenAmount.from_raw(lamports, SOL_DECIMALS),
            authority=source,
            source_balance=adapter.get_account_balance(source),
            source_pre_balance=adapter.get_account_pre_balance(source),
            destination_balance=adapter.get_account_balance(destination),
            destination_pre_balance=adapter.get_account_pre_balance(destination),
        ),
        idx=idx,
        timestamp=adapter.block_time,
        signature=adapter.signature,
    )


def _token_transfer(
    adapter: TransactionAdapter,
    kind: str,
    program_id: str,
    idx: str,
    mint: str,
    source: str,
    destination: str,
    amount: TokenAmount,
    authority: str | None,
) -> TransferData:
    return TransferData(
        type=kind,  # type: ignore[arg-type]
        program_id=program_id,
        info=TransferInfo(
            mint=mint,
            source=source,
            destination=destination,
            token_amount=amount,
            authority=authority,
            destination_owner=adapter.get_token_account_owner(destination) if destination else None,
            source_balance=adapter.get_token_account_balance(source) if source else None,
            source_pre_balance=adapter.get_token_account_pre_balance(source) if source else None,
            destination_balance=adapter.get_token_account_balance(destination) if destination else None,
            destination_pre_balance=adapter.get_token_account_pre_balance(destination) if destination else None,
        ),
        idx=idx,
        timestamp=adapter.block_time,
        signature=adapter.signature,
    )
