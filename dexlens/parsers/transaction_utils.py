"""Trade reconstruction from transfers and balance changes."""

from decimal import Decimal
from typing import Iterable

from dexlens.models import (
    BalanceChange,
    ClassifiedInstruction,
    DexInfo,
    FeeInfo,
    MemeEvent,
    MemeEventType,
    PoolEvent,
    TokenInfo,
    TradeInfo,
    TransferData,
    TransferRecord,
    instruction_key,
    to_ui_amount,
)
from dexlens.parsers.adapter import TransactionAdapter
from dexlens.parsers.classifier import InstructionClassifier
from dexlens.parsers.constants import ALL_DEX_PROGRAMS, DEX_PROGRAMS, FEE_ACCOUNTS, TOKENS, get_program_name
from dexlens.parsers.exceptions import BaseMintMismatchError
from dexlens.parsers.transfers import get_transfer_actions, process_transfer_instructions
from dexlens.parsers.utils import get_trade_type

DEFAULT_TRANSFER_TYPES = ("transfer", "transferChecked", "nativeTransfer")


def _is_native(transfer: TransferData) -> bool:
    return transfer.type == "nativeTransfer" or transfer.info.mint == TOKENS.NATIVE


class TransactionUtils:
    def __init__(self, adapter: TransactionAdapter) -> None:
        self.adapter = adapter

    # --- discovery ---------------------------------------------------------

    def get_dex_info(self, classifier: InstructionClassifier) -> DexInfo:
        """First known DEX program in classification order; routers fill ``route``, AMMs ``amm``."""
        program_ids = classifier.get_all_program_ids()
        if not program_ids:
            return DexInfo()

        for program_id in program_ids:
            program = ALL_DEX_PROGRAMS.get(program_id)
            if program is None:
                continue
            if program.is_amm:
                return DexInfo(program_id=program.id, amm=program.name)
            return DexInfo(program_id=program.id, route=program.name)

        return DexInfo(program_id=program_ids[0])

    def get_transfer_actions(self, extra_types: Iterable[str] | None = None) -> dict[str, list[TransferData]]:
        return get_transfer_actions(self.adapter, extra_types)

    def process_transfer_instructions(
        self, outer_index: int, extra_types: Iterable[str] | None = None
    ) -> list[TransferData]:
        return process_transfer_instructions(self.adapter, outer_index, extra_types)

    def filter_transfers_for_instruction(
        self,
        transfer_actions: dict[str, list[TransferData]],
        program_id: str,
        outer_index: int,
        inner_index: int | None = None,
        filter_types: Iterable[str] | None = None,
    ) -> list[TransferData]:
        transfers = transfer_actions.get(instruction_key(program_id, outer_index, inner_index), [])
        types = tuple(filter_types or ())
        if not types:
            return list(transfers)
        return [t for t in transfers if t.type in types]

    def get_transfers_for_instruction(
        self,
        transfer_actions: dict[str, list[TransferData]],
        program_id: str,
        outer_index: int,
        inner_index: int | None = None,
        extra_types: Iterable[str] | None = None,
    ) -> list[TransferData]:
        types = DEFAULT_TRANSFER_TYPES + tuple(extra_types or ())
        return self.filter_transfers_for_instruction(transfer_actions, program_id, outer_index, inner_index, types)

    # --- signer-perspective transfer view ----------------------------------

    def get_transfer_info(self, transfer: TransferData, timestamp: int, signature: str) -> TransferRecord:
        info = transfer.info
        return TransferRecord(
            type="TRANSFER_OUT" if info.source == info.authority else "TRANSFER_IN",
            token=TokenInfo(
                mint=info.mint or "",
                amount=info.token_amount.ui_amount,
                amount_raw=info.token_amount.amount,
                decimals=info.token_amount.decimals,
            ),
            from_account=info.source,
            to_account=info.destination,
            timestamp=timestamp,
            signature=signature,
        )

    def get_transfer_info_list(self, transfers: list[TransferData]) -> list[TransferRecord]:
        return [self.get_transfer_info(t, self.adapter.block_time, self.adapter.signature) for t in transfers]

    # --- swap inference ----------------------------------------------------

    def get_swap_signer(self) -> str:
        keys = self.adapter.account_keys
        if DEX_PROGRAMS.JUPITER_DCA.id in keys and len(keys) > 2:
            return keys[2]
        return keys[0] if keys else ""

    def process_swap_data(
        self, transfers: list[TransferData], dex_info: DexInfo, skip_native: bool = True
    ) -> TradeInfo | None:
        """Infer one swap from a group of transfers.

        Unique mints are taken in first-seen order; the first is the input and
        the last is the output unless the output side was sent by the signer
        (or a router acting for it). Returns None with fewer than two mints.
        """
        if not transfers:
            return None

        unique_tokens = self._extract_unique_tokens(transfers, skip_native)
        if len(unique_tokens) < 2:
            return None

        signer = self.get_swap_signer()
        input_token, output_token = unique_tokens[0], unique_tokens[-1]
        router_ids = set(self.adapter.config.router_ids)
        if signer in (output_token.source, output_token.authority) or (
            output_token.source in router_ids or output_token.authority in router_ids
        ):
            input_token, output_token = output_token, input_token

        input_raw, output_raw, fee_transfer = self._sum_token_amounts(transfers, input_token.mint, output_token.mint)
        input_token.amount_raw = str(input_raw)
        input_token.amount = to_ui_amount(input_raw, input_token.decimals)
        output_token.amount_raw = str(output_raw)
        output_token.amount = to_ui_amount(output_raw, output_token.decimals)

        trade = TradeInfo(
            type=get_trade_type(input_token.mint, output_token.mint),
            input_token=input_token,
            output_token=output_token,
            user=signer,
            program_id=dex_info.program_id,
            amm=dex_info.amm,
            route=dex_info.route or "",
            slot=self.adapter.slot,
            timestamp=self.adapter.block_time,
            signature=self.adapter.signature,
            idx=transfers[0].idx,
        )
        if fee_transfer is not None:
            amount = fee_transfer.info.token_amount
            trade.fee = FeeInfo(
                mint=fee_transfer.info.mint,
                amount=amount.ui_amount,
                amount_raw=amount.amount,
                decimals=amount.decimals,
            )
        return trade

    def _extract_unique_tokens(self, transfers: list[TransferData], skip_native: bool) -> list[TokenInfo]:
        tokens: list[TokenInfo] = []
        seen: set[str] = set()
        for transfer in transfers:
            if skip_native and _is_native(transfer):
                continue
            if transfer.info.mint in seen:
                continue
            seen.add(transfer.info.mint)
            tokens.append(transfer.to_token_info())
        return tokens

    def _sum_token_amounts(
        self, transfers: list[TransferData], input_mint: str, output_mint: str
    ) -> tuple[int, int, TransferData | None]:
        # native legs count toward the totals even when they were skipped as candidate tokens
        seen: set[tuple[str, str]] = set()
        input_raw = output_raw = 0
        fee_transfer: TransferData | None = None

        for transfer in transfers:
            info = transfer.info
            destination = info.destination_owner or info.destination or ""
            if destination in FEE_ACCOUNTS:
                fee_transfer = transfer
                continue

            key = (info.token_amount.amount, info.mint)
            if key in seen:
                continue
            seen.add(key)

            if info.mint == input_mint:
                input_raw += int(info.token_amount.amount)
            if info.mint == output_mint:
                output_raw += int(info.token_amount.amount)

        return input_raw, output_raw, fee_transfer

    def get_lp_transfers(self, transfers: list[TransferData]) -> list[TransferData]:
        """Token transfers ordered so token0 is the non-quote side and token1 the quote."""
        tokens = [t for t in transfers if "transfer" in t.type]
        if len(tokens) >= 2:
            first, second = tokens[0].info.mint, tokens[1].info.mint
            if first == TOKENS.SOL or (
                self.adapter.is_supported_token(first) and not self.adapter.is_supported_token(second)
            ):
                return [tokens[1], tokens[0], *tokens[2:]]
        return tokens

    # --- balance attachment ------------------------------------------------

    def get_balance_change(self, user: str, mint: str, is_without_sol_fee: bool = False) -> BalanceChange | None:
        if mint == TOKENS.SOL:
            return self.adapter.get_account_sol_balance_changes(is_without_sol_fee).get(user)
        return self.adapter.get_account_token_balance_changes(True).get(user, {}).get(mint)

    def attach_token_transfer_info(
        self, trade: TradeInfo, transfer_actions: dict[str, list[TransferData]]
    ) -> TradeInfo:
        all_transfers = [t for items in transfer_actions.values() for t in items]
        input_transfer = next(
            (
                t for t in all_transfers
                if t.info.mint == trade.input_token.mint and t.info.token_amount.amount == trade.input_token.amount_raw
            ),
            None,
        )
        output_transfer = next(
            (
                t for t in all_transfers
                if t.info.mint == trade.output_token.mint and t.info.token_amount.amount == trade.output_token.amount_raw
            ),
            None,
        )

        input_change = self.get_balance_change(trade.user, trade.input_token.mint)
        output_change = self.get_balance_change(trade.user, trade.output_token.mint)

        raw_in = input_change.change.amount if input_change else trade.input_token.amount_raw
        trade.input_token.balance_change = raw_in.replace("-", "")
        trade.output_token.balance_change = (
            output_change.change.amount if output_change else trade.output_token.amount_raw
        )

        if input_transfer is not None:
            self._copy_transfer_fields(trade.input_token, input_transfer)
        elif input_change is not None:
            trade.input_token.source_balance = input_change.post
            trade.input_token.source_pre_balance = input_change.pre

        if output_transfer is not None:
            self._copy_transfer_fields(trade.output_token, output_transfer)
        elif output_change is not None:
            trade.output_token.destination_balance = output_change.post
            trade.output_token.destination_pre_balance = output_change.pre

        trade.signer = self.adapter.signers
        return trade

    @staticmethod
    def _copy_transfer_fields(token: TokenInfo, transfer: TransferData) -> None:
        info = transfer.info
        token.authority = info.authority
        token.source = info.source
        token.destination = info.destination
        token.destination_owner = info.destination_owner
        token.destination_balance = info.destination_balance
        token.destination_pre_balance = info.destination_pre_balance
        token.source_balance = info.source_balance
        token.source_pre_balance = info.source_pre_balance

    def attach_user_balance_to_lps(self, liquidities: list[PoolEvent]) -> list[PoolEvent]:
        for event in liquidities:
            token0 = self.get_balance_change(event.user, event.token0_mint) if event.token0_mint else None
            token1 = self.get_balance_change(event.user, event.token1_mint) if event.token1_mint else None
            event.token0_balance_change = token0.change.amount if token0 else event.token0_amount_raw
            event.token1_balance_change = token1.change.amount if token1 else event.token1_amount_raw
            event.signer = self.adapter.signers
        return liquidities

    def attach_trade_fee(self, trade: TradeInfo | None) -> TradeInfo | None:
        """Derive an implicit fee from the gap between output amount and the user's delta."""
        if trade is None:
            return None

        if trade.fee is None:
            mint = trade.output_token.mint
            change = self.get_balance_change(trade.user, mint, is_without_sol_fee=True)
            if change is not None:
                fee_raw = int(trade.output_token.amount_raw) - int(change.change.amount)
                if fee_raw > 0:
                    trade.fee = FeeInfo.from_raw(mint, fee_raw, trade.output_token.decimals)
                    trade.output_token.balance_change = change.change.amount

        if trade.input_token.mint == TOKENS.SOL:
            change = self.adapter.get_account_sol_balance_changes(True).get(trade.user)
            if change is not None and abs(change.change.ui_amount) > trade.input_token.amount:
                trade.input_token.balance_change = change.change.amount

        return trade

    # --- meme events -------------------------------------------------------

    def process_meme_transfer_data(
        self,
        instruction: ClassifiedInstruction,
        event: MemeEvent,
        base_mint: str,
        skip_native: bool,
        transfer_start_idx: int,
        transfer_actions: dict[str, list[TransferData]],
    ) -> MemeEvent:
        """Fill a BUY/SELL meme event's token legs from the instruction's transfers.

        Raises BaseMintMismatchError when the inferred trade does not move
        ``base_mint`` on the side the event type requires.
        """
        transfers = self.get_transfers_for_instruction(
            transfer_actions, instruction.program_id, instruction.outer_index, instruction.inner_index
        )
        if len(transfers) < 2:
            return event

        dex_info = DexInfo(
            program_id=instruction.program_id,
            amm=get_program_name(instruction.program_id),
            route="",
        )
        trade = self.process_swap_data(transfers[transfer_start_idx:], dex_info, skip_native)
        if trade is None:
            return event

        if event.type == MemeEventType.BUY and trade.output_token.mint != base_mint:
            raise BaseMintMismatchError(base_mint, trade.output_token.mint)
        if event.type == MemeEventType.SELL and trade.input_token.mint != base_mint:
            raise BaseMintMismatchError(base_mint, trade.input_token.mint)

        self.update_meme_token_info(event, trade)
        return event

    def update_meme_token_info(self, event: MemeEvent, trade: TradeInfo) -> None:
        event.input_token = TokenInfo(
            mint=trade.input_token.mint,
            amount=trade.input_token.amount,
            amount_raw=trade.input_token.amount_raw,
            decimals=trade.input_token.decimals,
        )
        event.output_token = TokenInfo(
            mint=trade.output_token.mint,
            amount=trade.output_token.amount,
            amount_raw=trade.output_token.amount_raw,
            decimals=trade.output_token.decimals,
        )
        if trade.fee is not None:
            event.fee = trade.fee.amount
        elif trade.fees:
            event.fee = sum((fee.amount for fee in trade.fees), Decimal(0))
