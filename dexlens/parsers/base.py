"""Shared plumbing for protocol decoders.

Each protocol declares an event table: name -> EventDecoder. An instruction
matches the first decoder whose discriminator equals its leading
``slice_length`` bytes; the decoder receives the remaining bytes and a
DecodeContext describing where the instruction sits in the transaction.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from loguru import logger

from dexlens.models import (
    ClassifiedInstruction,
    DexInfo,
    Instruction,
    MemeEvent,
    PoolEvent,
    PoolEventType,
    TradeInfo,
    TransferData,
    instruction_key,
)
from dexlens.parsers.adapter import TransactionAdapter
from dexlens.parsers.classifier import InstructionClassifier
from dexlens.parsers.constants import get_program_name
from dexlens.parsers.exceptions import InsufficientAccountsError
from dexlens.parsers.transaction_utils import DEFAULT_TRANSFER_TYPES, TransactionUtils
from dexlens.parsers.utils import get_instruction_data, sort_by_idx


@dataclass(frozen=True)
class DecodeContext:
    instruction: Instruction
    program_id: str
    outer_index: int
    inner_index: int | None = None

    @classmethod
    def from_classified(cls, item: ClassifiedInstruction) -> "DecodeContext":
        return cls(item.instruction, item.program_id, item.outer_index, item.inner_index)

    @property
    def accounts(self) -> tuple[str, ...]:
        return self.instruction.accounts

    @property
    def idx(self) -> str:
        return f"{self.outer_index}-{self.inner_index or 0}"

    @property
    def classified(self) -> ClassifiedInstruction:
        return ClassifiedInstruction(self.instruction, self.program_id, self.outer_index, self.inner_index)


@dataclass(frozen=True)
class EventDecoder:
    discriminators: tuple[bytes, ...]
    slice_length: int
    decode: Callable[[bytes, DecodeContext], Any]

    def matches(self, data: bytes) -> bool:
        head = data[: self.slice_length]
        return any(head == d for d in self.discriminators)


EventTable = dict[str, EventDecoder]


def match_event(table: EventTable, data: bytes) -> tuple[str, EventDecoder] | None:
    for name, decoder in table.items():
        if decoder.matches(data):
            return name, decoder
    return None


def dispatch(table: EventTable, instructions: Iterable[ClassifiedInstruction]) -> list[tuple[str, DecodeContext, Any]]:
    """Run every instruction through ``table``; unmatched ones and ``None`` results are dropped."""
    results: list[tuple[str, DecodeContext, Any]] = []
    for item in instructions:
        data = get_instruction_data(item.instruction)
        matched = match_event(table, data)
        if matched is None:
            continue
        name, decoder = matched
        ctx = DecodeContext.from_classified(item)
        decoded = decoder.decode(data[decoder.slice_length :], ctx)
        if decoded is not None:
            results.append((name, ctx, decoded))
    return results


def _transfers_for(
    transfer_actions: dict[str, list[TransferData]],
    program_id: str,
    outer_index: int,
    inner_index: int | None,
    types: Iterable[str] | None,
) -> list[TransferData]:
    transfers = transfer_actions.get(instruction_key(program_id, outer_index, inner_index), [])
    if types is None:
        return list(transfers)
    allowed = tuple(types)
    return [t for t in transfers if t.type in allowed]


class BaseParser:
    """Trade role: ``process_trades`` over one program's classified instructions."""

    def __init__(
        self,
        adapter: TransactionAdapter,
        dex_info: DexInfo,
        transfer_actions: dict[str, list[TransferData]],
        classified_instructions: list[ClassifiedInstruction],
    ) -> None:
        self.adapter = adapter
        self.dex_info = dex_info
        self.transfer_actions = transfer_actions
        self.classified_instructions = classified_instructions
        self.utils = TransactionUtils(adapter)

    def process_trades(self) -> list[TradeInfo]:
        raise NotImplementedError

    def get_transfers_for_instruction(
        self,
        program_id: str,
        outer_index: int,
        inner_index: int | None = None,
        extra_types: Iterable[str] | None = None,
    ) -> list[TransferData]:
        types = DEFAULT_TRANSFER_TYPES + tuple(extra_types or ())
        return _transfers_for(self.transfer_actions, program_id, outer_index, inner_index, types)

    def finalize_trade(self, trade: TradeInfo, ctx: DecodeContext) -> TradeInfo:
        trade.slot = self.adapter.slot
        trade.timestamp = self.adapter.block_time
        trade.signature = self.adapter.signature
        trade.idx = ctx.idx
        return self.utils.attach_token_transfer_info(trade, self.transfer_actions)


class BaseLiquidityParser:
    """Liquidity role: ``process_liquidity`` producing PoolEvents."""

    def __init__(
        self,
        adapter: TransactionAdapter,
        transfer_actions: dict[str, list[TransferData]],
        classified_instructions: list[ClassifiedInstruction],
    ) -> None:
        self.adapter = adapter
        self.transfer_actions = transfer_actions
        self.classified_instructions = classified_instructions
        self.utils = TransactionUtils(adapter)

    def process_liquidity(self) -> list[PoolEvent]:
        raise NotImplementedError

    def get_transfers_for_instruction(
        self,
        program_id: str,
        outer_index: int,
        inner_index: int | None = None,
        filter_types: Iterable[str] | None = None,
    ) -> list[TransferData]:
        return _transfers_for(self.transfer_actions, program_id, outer_index, inner_index, filter_types)

    def get_instruction_by_discriminator(self, discriminator: bytes, slice_length: int) -> ClassifiedInstruction | None:
        for item in self.classified_instructions:
            if get_instruction_data(item.instruction)[:slice_length] == discriminator:
                return item
        return None


class BaseEventParser:
    """Meme role: decode launchpad lifecycle events for ``program_ids``."""

    program_ids: tuple[str, ...] = ()

    def __init__(
        self,
        adapter: TransactionAdapter,
        transfer_actions: dict[str, list[TransferData]],
        classifier: InstructionClassifier | None = None,
    ) -> None:
        self.adapter = adapter
        self.transfer_actions = transfer_actions
        self.classifier = classifier or InstructionClassifier(adapter)
        self.utils = TransactionUtils(adapter)
        self.instructions: list[ClassifiedInstruction] = []
        self.event_table: EventTable = self.build_event_table()

    def build_event_table(self) -> EventTable:
        raise NotImplementedError

    def process_events(self) -> list[MemeEvent]:
        return self.parse_instructions(self.classifier.get_multi_instructions(list(self.program_ids)))

    def parse_instructions(self, instructions: list[ClassifiedInstruction]) -> list[MemeEvent]:
        self.instructions = instructions
        events: list[MemeEvent] = []
        for _, ctx, event in dispatch(self.event_table, instructions):
            self.finalize_event(event, ctx)
            events.append(event)
        return sort_by_idx(events)

    def finalize_event(self, event: MemeEvent, ctx: DecodeContext) -> MemeEvent:
        event.signature = self.adapter.signature
        event.slot = self.adapter.slot
        event.timestamp = self.adapter.block_time
        event.idx = ctx.idx
        return event

    def get_transfers_for_instruction(
        self, program_id: str, outer_index: int, inner_index: int | None = None
    ) -> list[TransferData]:
        return _transfers_for(self.transfer_actions, program_id, outer_index, inner_index, DEFAULT_TRANSFER_TYPES)


class BaseTransferParser:
    """Transfer-only role: programs whose activity is reported as plain transfers."""

    def __init__(
        self,
        adapter: TransactionAdapter,
        dex_info: DexInfo,
        transfer_actions: dict[str, list[TransferData]],
        classified_instructions: list[ClassifiedInstruction],
    ) -> None:
        self.adapter = adapter
        self.dex_info = dex_info
        self.transfer_actions = transfer_actions
        self.classified_instructions = classified_instructions
        self.utils = TransactionUtils(adapter)

    def process_transfers(self) -> list[TransferData]:
        raise NotImplementedError


@dataclass(frozen=True)
class LiquidityLayout:
    """Account positions of one pool instruction; ``None`` means take it from transfers."""

    pool_index: int
    lp_mint_index: int | None = None
    token0_index: int | None = None
    token1_index: int | None = None
    user_index: int | None = None
    config_index: int | None = None
    min_accounts: int = 0


def _account_at(accounts: tuple[str, ...], index: int | None) -> str | None:
    if index is None or index >= len(accounts):
        return None
    return accounts[index]


class TransferLiquidityParser(BaseLiquidityParser):
    """Pool events reconstructed from the token movements of each pool instruction.

    Subclasses classify instruction data into an action and give the
    account layout for it; amounts come from the instruction's transfers
    and the LP amount from its mintTo (create/add) or burn (remove).
    """

    program_ids: tuple[str, ...] = ()

    def get_pool_action(self, data: bytes) -> PoolEventType | None:
        raise NotImplementedError

    def get_layout(self, action: PoolEventType, data: bytes) -> LiquidityLayout | None:
        raise NotImplementedError

    def order_mints(self, action: PoolEventType, token0: str | None, token1: str | None) -> tuple[str | None, str | None]:
        return token0, token1

    def process_liquidity(self) -> list[PoolEvent]:
        events: list[PoolEvent] = []
        for item in self.classified_instructions:
            if self.program_ids and item.program_id not in self.program_ids:
                continue
            data = get_instruction_data(item.instruction)
            action = self.get_pool_action(data)
            if action is None:
                continue
            layout = self.get_layout(action, data)
            if layout is None:
                continue
            event = self.parse_instruction(item, action, layout)
            if event is not None:
                events.append(event)
        return sort_by_idx(events)

    def parse_instruction(
        self, item: ClassifiedInstruction, action: PoolEventType, layout: LiquidityLayout
    ) -> PoolEvent | None:
        accounts = item.instruction.accounts
        if len(accounts) < layout.min_accounts:
            raise InsufficientAccountsError(
                f"{get_program_name(item.program_id)} {action.value} at {item.idx}: "
                f"{len(accounts)} accounts, need {layout.min_accounts}"
            )
        pool_id = _account_at(accounts, layout.pool_index)
        if pool_id is None:
            logger.debug(f"[LIQUIDITY] Missing pool account for {item.key}")
            return None

        transfers = self.get_transfers_for_instruction(item.program_id, item.outer_index, item.inner_index)
        token_transfers = self.utils.get_lp_transfers(transfers)

        token0_mint = _account_at(accounts, layout.token0_index)
        token1_mint = _account_at(accounts, layout.token1_index)
        if token0_mint is None and token_transfers:
            token0_mint = token_transfers[0].info.mint
        if token1_mint is None and len(token_transfers) > 1:
            token1_mint = token_transfers[1].info.mint
        token0_mint, token1_mint = self.order_mints(action, token0_mint, token1_mint)

        lp_kinds = ("burn", "burnChecked") if action == PoolEventType.REMOVE else ("mintTo", "mintToChecked")
        lp_mint = _account_at(accounts, layout.lp_mint_index)
        lp_transfer = next(
            (t for t in transfers if t.type in lp_kinds and (lp_mint is None or t.info.mint == lp_mint)),
            None,
        )
        if lp_mint is None and lp_transfer is not None:
            lp_mint = lp_transfer.info.mint

        base = self.adapter.get_pool_event_base(action, item.program_id)
        user = _account_at(accounts, layout.user_index)
        if user:
            base["user"] = user

        event = PoolEvent(
            **base,
            idx=item.idx,
            pool_id=pool_id,
            config=_account_at(accounts, layout.config_index),
            pool_lp_mint=lp_mint,
        )
        self._fill_token(event, 0, token0_mint, token_transfers)
        self._fill_token(event, 1, token1_mint, token_transfers)
        if lp_transfer is not None:
            event.lp_amount = lp_transfer.info.token_amount.ui_amount
            event.lp_amount_raw = lp_transfer.info.token_amount.amount
        return event

    def _fill_token(
        self, event: PoolEvent, slot: int, mint: str | None, transfers: list[TransferData]
    ) -> None:
        if mint is None:
            return
        transfer = next((t for t in transfers if t.info.mint == mint), None)
        if transfer is not None:
            amount = transfer.info.token_amount
            values = (amount.ui_amount, amount.amount, amount.decimals)
        else:
            values = (Decimal(0), "0", self.adapter.get_token_decimals(mint))
        prefix = f"token{slot}_"
        setattr(event, prefix + "mint", mint)
        setattr(event, prefix + "amount", values[0])
        setattr(event, prefix + "amount_raw", values[1])
        setattr(event, prefix + "decimals", values[2])
