from dexlens.models import TransferData
from dexlens.parsers.base import BaseTransferParser
from dexlens.parsers.utils import get_instruction_data, sort_by_idx


class InstructionTransferParser(BaseTransferParser):
    """Reports the token movements of selected instructions as plain transfers.

    Used for deposits and withdrawals into order programs, where funds
    change hands without a swap.
    """

    program_ids: tuple[str, ...] = ()
    discriminators: tuple[bytes, ...] = ()

    def process_transfers(self) -> list[TransferData]:
        transfers: list[TransferData] = []
        for item in self.classified_instructions:
            if item.program_id not in self.program_ids:
                continue
            if get_instruction_data(item.instruction)[:8] not in self.discriminators:
                continue
            transfers.extend(
                self.utils.get_transfers_for_instruction(
                    self.transfer_actions, item.program_id, item.outer_index, item.inner_index
                )
            )
        return sort_by_idx(transfers)
