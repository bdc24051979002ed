"""Normalized instruction shapes.

RPC JSON carries instructions either already decoded by the node
(``jsonParsed``) or compiled (program/account indices + opaque data).
The adapter converts both into one of these two frozen variants with
resolved base58 program id and account list.
"""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ParsedInstruction:
    program_id: str
    program: str  # e.g. "spl-token", "system"
    parsed: dict[str, Any] = field(default_factory=dict, hash=False)
    accounts: tuple[str, ...] = ()
    data: bytes = b""

    @property
    def parsed_type(self) -> str:
        return str(self.parsed.get("type", "")) if isinstance(self.parsed, dict) else ""

    @property
    def info(self) -> dict[str, Any]:
        if not isinstance(self.parsed, dict):
            return {}
        return self.parsed.get("info") or {}


@dataclass(frozen=True)
class CompiledInstruction:
    program_id: str
    accounts: tuple[str, ...] = ()
    data: bytes = b""


Instruction = Union[ParsedInstruction, CompiledInstruction]


@dataclass(frozen=True)
class ClassifiedInstruction:
    instruction: Instruction
    program_id: str
    outer_index: int
    inner_index: int | None = None

    @property
    def key(self) -> str:
        """Grouping key: ``programId:outer`` or ``programId:outer-inner``."""
        return instruction_key(self.program_id, self.outer_index, self.inner_index)

    @property
    def idx(self) -> str:
        return f"{self.outer_index}-{self.inner_index or 0}"


def instruction_key(program_id: str, outer_index: int, inner_index: int | None = None) -> str:
    if inner_index is None:
        return f"{program_id}:{outer_index}"
    return f"{program_id}:{outer_index}-{inner_index}"
