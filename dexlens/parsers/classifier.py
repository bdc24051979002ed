"""Group a transaction's instructions by program id."""

from dexlens.models import ClassifiedInstruction
from dexlens.parsers.adapter import TransactionAdapter
from dexlens.parsers.constants import SKIP_PROGRAM_IDS, SYSTEM_PROGRAMS
from dexlens.parsers.utils import get_instruction_data


class InstructionClassifier:
    """Per-program ordered index of outer and inner instructions.

    Outer instructions are indexed first, then each inner set in the order
    the node reported them. Built once; read-only afterwards.
    """

    def __init__(self, adapter: TransactionAdapter) -> None:
        self._by_program: dict[str, list[ClassifiedInstruction]] = {}

        for outer_index, ix in enumerate(adapter.instructions):
            self._add(ClassifiedInstruction(ix, ix.program_id, outer_index))

        for inner_set in adapter.inner_instructions:
            for inner_index, ix in enumerate(inner_set.instructions):
                self._add(ClassifiedInstruction(ix, ix.program_id, inner_set.index, inner_index))

    def _add(self, item: ClassifiedInstruction) -> None:
        if not item.program_id:
            return
        self._by_program.setdefault(item.program_id, []).append(item)

    def get_instructions(self, program_id: str) -> list[ClassifiedInstruction]:
        return list(self._by_program.get(program_id, []))

    def get_multi_instructions(self, program_ids: list[str]) -> list[ClassifiedInstruction]:
        result: list[ClassifiedInstruction] = []
        for program_id in program_ids:
            result.extend(self._by_program.get(program_id, []))
        return result

    def get_instruction_by_discriminator(
        self, discriminator: bytes, slice_length: int
    ) -> ClassifiedInstruction | None:
        for items in self._by_program.values():
            for item in items:
                data = get_instruction_data(item.instruction)
                if data[:slice_length] == discriminator:
                    return item
        return None

    def get_all_program_ids(self) -> list[str]:
        return [
            program_id
            for program_id in self._by_program
            if program_id not in SYSTEM_PROGRAMS and program_id not in SKIP_PROGRAM_IDS
        ]
