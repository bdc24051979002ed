"""Shared test fixtures: raw RPC transactions built one instruction at a time."""

import struct
from collections.abc import Callable
from typing import Any

import base58
import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from dexlens.parsers.constants import SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID


class RawTransaction:
    """Builder for a ``json``-encoded (compiled) transaction as getBlock returns it.

    Accounts are passed as base58 strings and converted to account-key
    indices; the signer is always key 0.
    """

    def __init__(self, signer: str | None = None, signature: str = "sig-1") -> None:
        self.signer = signer or str(Pubkey.new_unique())
        self.signature = signature
        self.slot = 300_000_000
        self.block_time = 1_750_000_000
        self.fee = 5000
        self.err: Any = None
        self._keys: list[str] = []
        self._instructions: list[dict[str, Any]] = []
        self._inner: dict[int, list[dict[str, Any]]] = {}
        self._lamports: dict[str, tuple[int, int]] = {}
        self._pre_tokens: list[dict[str, Any]] = []
        self._post_tokens: list[dict[str, Any]] = []
        self.index(self.signer)

    def index(self, pubkey: str) -> int:
        if pubkey not in self._keys:
            self._keys.append(pubkey)
        return self._keys.index(pubkey)

    def _compiled(self, program_id: str, accounts: list[str], data: bytes) -> dict[str, Any]:
        return {
            "programIdIndex": self.index(program_id),
            "accounts": [self.index(a) for a in accounts],
            "data": base58.b58encode(data).decode(),
        }

    def add_instruction(self, program_id: str, accounts: list[str], data: bytes = b"") -> int:
        self._instructions.append(self._compiled(program_id, accounts, data))
        return len(self._instructions) - 1

    def add_inner_instruction(self, outer_index: int, program_id: str, accounts: list[str], data: bytes = b"") -> None:
        self._inner.setdefault(outer_index, []).append(self._compiled(program_id, accounts, data))

    def add_token_transfer(
        self, outer_index: int, source: str, destination: str, authority: str, amount: int
    ) -> None:
        data = bytes([3]) + struct.pack("<Q", amount)
        self.add_inner_instruction(outer_index, TOKEN_PROGRAM_ID, [source, destination, authority], data)

    def add_sol_transfer(self, outer_index: int, source: str, destination: str, lamports: int) -> None:
        data = struct.pack("<IQ", 2, lamports)
        self.add_inner_instruction(outer_index, SYSTEM_PROGRAM_ID, [source, destination], data)

    def add_token_account(
        self, account: str, mint: str, owner: str, pre: int, post: int, decimals: int
    ) -> None:
        index = self.index(account)
        for rows, amount in ((self._pre_tokens, pre), (self._post_tokens, post)):
            rows.append(
                {
                    "accountIndex": index,
                    "mint": mint,
                    "owner": owner,
                    "uiTokenAmount": {"amount": str(amount), "decimals": decimals},
                }
            )

    def set_lamports(self, account: str, pre: int, post: int) -> None:
        self.index(account)
        self._lamports[account] = (pre, post)

    def build(self) -> dict[str, Any]:
        return {
            "slot": self.slot,
            "blockTime": self.block_time,
            "transaction": {
                "signatures": [self.signature],
                "message": {
                    "header": {
                        "numRequiredSignatures": 1,
                        "numReadonlySignedAccounts": 0,
                        "numReadonlyUnsignedAccounts": 0,
                    },
                    "accountKeys": list(self._keys),
                    "instructions": list(self._instructions),
                },
            },
            "meta": {
                "err": self.err,
                "fee": self.fee,
                "preBalances": [self._lamports.get(k, (0, 0))[0] for k in self._keys],
                "postBalances": [self._lamports.get(k, (0, 0))[1] for k in self._keys],
                "preTokenBalances": list(self._pre_tokens),
                "postTokenBalances": list(self._post_tokens),
                "innerInstructions": [
                    {"index": index, "instructions": items} for index, items in sorted(self._inner.items())
                ],
                "computeUnitsConsumed": 52_000,
                "loadedAddresses": {"writable": [], "readonly": []},
            },
        }


@pytest.fixture
def raw_tx() -> type[RawTransaction]:
    return RawTransaction


@pytest.fixture
def pubkeys() -> Callable[[int], list[str]]:
    def _make(count: int) -> list[str]:
        return [str(Pubkey.new_unique()) for _ in range(count)]

    return _make
