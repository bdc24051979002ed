"""Uniform read-only view over an RPC JSON transaction.

Handles both wire shapes returned by getBlock/getTransaction:
  - jsonParsed: accountKeys are {pubkey, signer, writable} objects,
    known programs come back with a ``parsed`` payload
  - json (compiled): accountKeys are strings, instructions carry
    programIdIndex + account indices + base58 data; v0 lookup-table
    addresses live in meta.loadedAddresses
"""

import base64
from dataclasses import dataclass
from typing import Any

import base58
from loguru import logger

from dexlens.models import (
    BalanceChange,
    CompiledInstruction,
    Instruction,
    ParseConfig,
    ParsedInstruction,
    PoolEventType,
    TokenAmount,
    TransactionStatus,
)
from dexlens.parsers.constants import (
    BASE_TOKENS,
    SOL_DECIMALS,
    TOKEN_PROGRAM_IDS,
    TOKENS,
    get_program_name,
)


@dataclass(frozen=True)
class InnerInstructionSet:
    index: int
    instructions: tuple[Instruction, ...]


@dataclass(frozen=True)
class TokenAccountInfo:
    mint: str
    owner: str | None
    amount: str
    decimals: int


def to_base58(value: Any) -> str:
    """Normalize a pubkey given as str, bytes, int list or Buffer-JSON."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and value.get("type") == "Buffer":
        value = value.get("data") or []
    if isinstance(value, (bytes, bytearray, list)):
        return base58.b58encode(bytes(value)).decode()
    return str(value)


def decode_instruction_data(raw: Any) -> bytes:
    """Decode instruction data from any RPC / gRPC encoding. Undecodable data yields b""."""
    if raw is None:
        return b""
    try:
        if isinstance(raw, str):
            return base58.b58decode(raw)
        if isinstance(raw, (bytes, bytearray)):
            return bytes(raw)
        if isinstance(raw, dict) and raw.get("type") == "Buffer":
            return bytes(raw.get("data") or [])
        if isinstance(raw, list):
            if len(raw) == 2 and isinstance(raw[0], str) and raw[1] in ("base64", "base58"):
                return base64.b64decode(raw[0]) if raw[1] == "base64" else base58.b58decode(raw[0])
            return bytes(raw)
    except ValueError as e:
        logger.debug(f"[ADAPTER] Undecodable instruction data: {e}")
    return b""


class TransactionAdapter:
    def __init__(
        self,
        tx: dict[str, Any],
        config: ParseConfig | None = None,
        *,
        slot: int | None = None,
        block_time: int | None = None,
    ) -> None:
        self.tx = tx
        self.config = config or ParseConfig()

        transaction = tx.get("transaction") or {}
        self._message: dict[str, Any] = transaction.get("message") or {}
        self._signatures: list[Any] = transaction.get("signatures") or []
        self._meta: dict[str, Any] = tx.get("meta") or {}

        self.slot = int(tx.get("slot") or slot or 0)
        self.block_time = int(tx.get("blockTime") or block_time or 0)

        self.account_keys, self._flagged_signers = self._extract_account_keys()
        self.instructions: list[Instruction] = [
            self._normalize(ix) for ix in self._message.get("instructions") or []
        ]
        self.inner_instructions: list[InnerInstructionSet] = [
            InnerInstructionSet(
                index=int(item.get("index", 0)),
                instructions=tuple(self._normalize(ix) for ix in item.get("instructions") or []),
            )
            for item in self._meta.get("innerInstructions") or []
        ]

        self.spl_token_map: dict[str, TokenAccountInfo] = {}
        self.spl_decimals_map: dict[str, int] = {TOKENS.SOL: SOL_DECIMALS}
        self._extract_token_maps()

        self._sol_changes: dict[bool, dict[str, BalanceChange]] = {}
        self._token_changes: dict[bool, dict[str, dict[str, BalanceChange]]] = {}

    # --- account keys and instructions -------------------------------------

    def _extract_account_keys(self) -> tuple[list[str], list[str]]:
        raw_keys = self._message.get("accountKeys") or []
        keys: list[str] = []
        signers: list[str] = []
        has_objects = False
        for item in raw_keys:
            if isinstance(item, dict) and "pubkey" in item:
                has_objects = True
                pubkey = to_base58(item["pubkey"])
                keys.append(pubkey)
                if item.get("signer"):
                    signers.append(pubkey)
            else:
                keys.append(to_base58(item))

        # jsonParsed already lists lookup-table keys in accountKeys
        if not has_objects:
            loaded = self._meta.get("loadedAddresses") or {}
            keys.extend(to_base58(k) for k in loaded.get("writable") or [])
            keys.extend(to_base58(k) for k in loaded.get("readonly") or [])
        return keys, signers

    def _key_at(self, index: Any) -> str:
        if isinstance(index, int) and 0 <= index < len(self.account_keys):
            return self.account_keys[index]
        return ""

    def _normalize(self, ix: dict[str, Any]) -> Instruction:
        if "programId" in ix:
            program_id = to_base58(ix["programId"])
        else:
            program_id = self._key_at(ix.get("programIdIndex"))

        accounts = tuple(
            self._key_at(a) if isinstance(a, int) else to_base58(a)
            for a in ix.get("accounts") or []
        )

        if "parsed" in ix:
            parsed = ix["parsed"] if isinstance(ix["parsed"], dict) else {}
            return ParsedInstruction(
                program_id=program_id,
                program=str(ix.get("program") or ""),
                parsed=parsed,
                accounts=accounts,
                data=decode_instruction_data(ix.get("data")),
            )
        return CompiledInstruction(
            program_id=program_id,
            accounts=accounts,
            data=decode_instruction_data(ix.get("data")),
        )

    def get_inner_instruction(self, outer_index: int, inner_index: int) -> Instruction | None:
        for inner_set in self.inner_instructions:
            if inner_set.index == outer_index:
                if 0 <= inner_index < len(inner_set.instructions):
                    return inner_set.instructions[inner_index]
                return None
        return None

    # --- token account maps ------------------------------------------------

    def _extract_token_maps(self) -> None:
        for balance in [*self.pre_token_balances, *self.post_token_balances]:
            account = self._key_at(balance.get("accountIndex"))
            mint = balance.get("mint")
            if not account or not mint:
                continue
            ui = balance.get("uiTokenAmount") or {}
            decimals = int(ui.get("decimals") or 0)
            self.spl_token_map[account] = TokenAccountInfo(
                mint=mint,
                owner=balance.get("owner"),
                amount=str(ui.get("amount") or "0"),
                decimals=decimals,
            )
            self.spl_decimals_map[mint] = decimals

        # Accounts opened and closed within the transaction have no balance rows
        for ix in self._all_instructions():
            if ix.program_id not in TOKEN_PROGRAM_IDS:
                continue
            self._register_initialized_account(ix)

    def _all_instructions(self) -> list[Instruction]:
        items = list(self.instructions)
        for inner_set in self.inner_instructions:
            items.extend(inner_set.instructions)
        return items

    def _register_initialized_account(self, ix: Instruction) -> None:
        account = mint = owner = None
        if isinstance(ix, ParsedInstruction):
            if not ix.parsed_type.startswith("initializeAccount"):
                return
            info = ix.info
            account, mint, owner = info.get("account"), info.get("mint"), info.get("owner")
        else:
            if not ix.data or len(ix.accounts) < 2:
                return
            tag = ix.data[0]
            if tag == 1 and len(ix.accounts) >= 3:
                account, mint, owner = ix.accounts[0], ix.accounts[1], ix.accounts[2]
            elif tag in (16, 18) and len(ix.data) >= 33:
                account, mint = ix.accounts[0], ix.accounts[1]
                owner = base58.b58encode(ix.data[1:33]).decode()
            else:
                return
        if account and mint and account not in self.spl_token_map:
            self.spl_token_map[account] = TokenAccountInfo(
                mint=mint,
                owner=owner,
                amount="0",
                decimals=self.spl_decimals_map.get(mint, 0),
            )

    # --- transaction level fields ------------------------------------------

    @property
    def signature(self) -> str:
        return to_base58(self._signatures[0]) if self._signatures else ""

    @property
    def signer(self) -> str:
        return self.account_keys[0] if self.account_keys else ""

    @property
    def signers(self) -> list[str]:
        if self._flagged_signers:
            return list(self._flagged_signers)
        header = self._message.get("header") or {}
        count = int(header.get("numRequiredSignatures") or 1)
        return self.account_keys[:count]

    @property
    def fee(self) -> TokenAmount:
        return TokenAmount.from_raw(self._meta.get("fee") or 0, SOL_DECIMALS)

    @property
    def compute_units(self) -> int:
        return int(self._meta.get("computeUnitsConsumed") or 0)

    @property
    def tx_status(self) -> TransactionStatus:
        if not self._meta:
            return TransactionStatus.UNKNOWN
        return TransactionStatus.FAILED if self._meta.get("err") else TransactionStatus.SUCCESS

    @property
    def log_messages(self) -> list[str]:
        return self._meta.get("logMessages") or []

    @property
    def pre_balances(self) -> list[int]:
        return self._meta.get("preBalances") or []

    @property
    def post_balances(self) -> list[int]:
        return self._meta.get("postBalances") or []

    @property
    def pre_token_balances(self) -> list[dict[str, Any]]:
        return self._meta.get("preTokenBalances") or []

    @property
    def post_token_balances(self) -> list[dict[str, Any]]:
        return self._meta.get("postTokenBalances") or []

    # --- token helpers -----------------------------------------------------

    def get_token_decimals(self, mint: str) -> int:
        return self.spl_decimals_map.get(mint, 0)

    def get_token_account_owner(self, account: str) -> str | None:
        info = self.spl_token_map.get(account)
        return info.owner if info else None

    def is_supported_token(self, mint: str) -> bool:
        return mint in BASE_TOKENS

    def _token_balance(self, rows: list[dict[str, Any]], account: str) -> TokenAmount | None:
        for row in rows:
            if self._key_at(row.get("accountIndex")) == account:
                ui = row.get("uiTokenAmount") or {}
                return TokenAmount.from_raw(ui.get("amount") or 0, int(ui.get("decimals") or 0))
        return None

    def get_token_account_balance(self, account: str) -> TokenAmount | None:
        return self._token_balance(self.post_token_balances, account)

    def get_token_account_pre_balance(self, account: str) -> TokenAmount | None:
        return self._token_balance(self.pre_token_balances, account)

    def _lamports(self, balances: list[int], account: str) -> TokenAmount | None:
        try:
            index = self.account_keys.index(account)
        except ValueError:
            return None
        if index >= len(balances):
            return None
        return TokenAmount.from_raw(balances[index], SOL_DECIMALS)

    def get_account_balance(self, account: str) -> TokenAmount | None:
        return self._lamports(self.post_balances, account)

    def get_account_pre_balance(self, account: str) -> TokenAmount | None:
        return self._lamports(self.pre_balances, account)

    # --- balance changes ---------------------------------------------------

    def get_account_sol_balance_changes(self, is_without_sol_fee: bool = False) -> dict[str, BalanceChange]:
        """Lamport deltas per account key, non-zero changes only.

        With ``is_without_sol_fee`` the network fee is added back to the fee
        payer (key 0), so only the transaction's own SOL movements remain.
        """
        if is_without_sol_fee not in self._sol_changes:
            changes: dict[str, BalanceChange] = {}
            pre, post = self.pre_balances, self.post_balances
            network_fee = int(self._meta.get("fee") or 0) if is_without_sol_fee else 0
            for index, key in enumerate(self.account_keys):
                pre_value = int(pre[index]) if index < len(pre) else 0
                post_value = int(post[index]) if index < len(post) else 0
                if index == 0:
                    post_value += network_fee
                if pre_value == post_value:
                    continue
                changes[key] = BalanceChange(
                    pre=TokenAmount.from_raw(pre_value, SOL_DECIMALS),
                    post=TokenAmount.from_raw(post_value, SOL_DECIMALS),
                    change=TokenAmount.from_raw(post_value - pre_value, SOL_DECIMALS),
                )
            self._sol_changes[is_without_sol_fee] = changes
        return self._sol_changes[is_without_sol_fee]

    def get_account_token_balance_changes(self, is_owner: bool = True) -> dict[str, dict[str, BalanceChange]]:
        """Token deltas keyed by owner (``is_owner``) or token account, then by mint."""
        if is_owner in self._token_changes:
            return self._token_changes[is_owner]

        rows: dict[int, dict[str, Any]] = {}
        for side, balances in (("pre", self.pre_token_balances), ("post", self.post_token_balances)):
            for balance in balances:
                index = balance.get("accountIndex")
                ui = balance.get("uiTokenAmount") or {}
                row = rows.setdefault(index, {"mint": balance.get("mint"), "pre": 0, "post": 0, "decimals": 0})
                row[side] = int(ui.get("amount") or 0)
                row["decimals"] = int(ui.get("decimals") or 0)
                row["owner"] = balance.get("owner") or row.get("owner")

        sums: dict[str, dict[str, list[int]]] = {}
        decimals_by_mint: dict[str, int] = {}
        for index, row in rows.items():
            mint = row["mint"]
            key = row.get("owner") if is_owner else self._key_at(index)
            if not key or not mint:
                continue
            decimals_by_mint[mint] = row["decimals"]
            totals = sums.setdefault(key, {}).setdefault(mint, [0, 0])
            totals[0] += row["pre"]
            totals[1] += row["post"]

        changes: dict[str, dict[str, BalanceChange]] = {}
        for key, by_mint in sums.items():
            for mint, (pre_value, post_value) in by_mint.items():
                if pre_value == post_value:
                    continue
                decimals = decimals_by_mint[mint]
                changes.setdefault(key, {})[mint] = BalanceChange(
                    pre=TokenAmount.from_raw(pre_value, decimals),
                    post=TokenAmount.from_raw(post_value, decimals),
                    change=TokenAmount.from_raw(post_value - pre_value, decimals),
                )
        self._token_changes[is_owner] = changes
        return changes

    def get_pool_event_base(self, event_type: PoolEventType, program_id: str) -> dict[str, Any]:
        return {
            "type": event_type,
            "user": self.signer,
            "program_id": program_id,
            "amm": get_program_name(program_id),
            "slot": self.slot,
            "timestamp": self.block_time,
            "signature": self.signature,
        }
