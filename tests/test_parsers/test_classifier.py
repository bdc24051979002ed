"""Tests for grouping instructions by program."""

from dexlens.parsers.adapter import TransactionAdapter
from dexlens.parsers.classifier import InstructionClassifier
from dexlens.parsers.constants import COMPUTE_BUDGET_PROGRAM_ID, TOKEN_PROGRAM_ID


def _build(raw_tx, dex: str, other: str):
    tx = raw_tx()
    tx.add_instruction(COMPUTE_BUDGET_PROGRAM_ID, [], b"\x02\x40\x0d\x03\x00")
    tx.add_instruction(dex, [tx.signer], b"\xaa" * 8)
    tx.add_inner_instruction(1, TOKEN_PROGRAM_ID, [], b"\x03")
    tx.add_inner_instruction(1, other, [], b"\xbb" * 8)
    tx.add_inner_instruction(1, dex, [], b"\xcc" * 16)
    tx.add_instruction(other, [], b"\xdd")
    return TransactionAdapter(tx.build())


class TestInstructionClassifier:
    def test_outer_before_inner(self, raw_tx, pubkeys) -> None:
        dex, other = pubkeys(2)
        classifier = InstructionClassifier(_build(raw_tx, dex, other))

        items = classifier.get_instructions(dex)
        assert [(i.outer_index, i.inner_index) for i in items] == [(1, None), (1, 2)]
        assert items[0].key == f"{dex}:1"
        assert items[1].key == f"{dex}:1-2"
        assert items[1].idx == "1-2"

        others = classifier.get_instructions(other)
        assert [(i.outer_index, i.inner_index) for i in others] == [(2, None), (1, 1)]

    def test_program_ids_skip_infrastructure(self, raw_tx, pubkeys) -> None:
        dex, other = pubkeys(2)
        classifier = InstructionClassifier(_build(raw_tx, dex, other))

        program_ids = classifier.get_all_program_ids()
        assert program_ids == [dex, other]
        assert TOKEN_PROGRAM_ID not in program_ids
        assert COMPUTE_BUDGET_PROGRAM_ID not in program_ids

    def test_multi_and_discriminator_lookup(self, raw_tx, pubkeys) -> None:
        dex, other = pubkeys(2)
        classifier = InstructionClassifier(_build(raw_tx, dex, other))

        assert len(classifier.get_multi_instructions([dex, other])) == 4
        found = classifier.get_instruction_by_discriminator(b"\xcc" * 16, 16)
        assert found is not None
        assert (found.program_id, found.outer_index, found.inner_index) == (dex, 1, 2)
        assert classifier.get_instruction_by_discriminator(b"\xee", 1) is None

    def test_unknown_program_gives_empty_list(self, raw_tx, pubkeys) -> None:
        dex, other, absent = pubkeys(3)
        classifier = InstructionClassifier(_build(raw_tx, dex, other))
        assert classifier.get_instructions(absent) == []

    def test_same_result_on_rebuild(self, raw_tx, pubkeys) -> None:
        dex, other = pubkeys(2)
        adapter = _build(raw_tx, dex, other)
        first, second = InstructionClassifier(adapter), InstructionClassifier(adapter)

        assert first.get_all_program_ids() == second.get_all_program_ids()
        assert first.get_instructions(dex) == second.get_instructions(dex)
        # returned lists are copies
        first.get_instructions(dex).clear()
        assert len(first.get_instructions(dex)) == 2

    def test_unresolvable_program_index_dropped(self, raw_tx, pubkeys) -> None:
        (dex,) = pubkeys(1)
        tx = raw_tx()
        tx.add_instruction(dex, [])
        raw = tx.build()
        raw["transaction"]["message"]["instructions"].append({"programIdIndex": 40, "accounts": [], "data": ""})

        classifier = InstructionClassifier(TransactionAdapter(raw))
        assert classifier.get_all_program_ids() == [dex]
