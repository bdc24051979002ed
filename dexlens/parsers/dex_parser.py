"""Parser orchestrator: one raw transaction in, one ParseResult out.

Per program found in the transaction the registered decoders run for the
requested output kinds; programs without a trade decoder may still yield a
trade inferred from their transfers. Any error inside a transaction is
captured on its result unless ``throw_error`` is set.
"""

import asyncio
import time
from typing import Any, Literal

from loguru import logger

from dexlens.models import DexInfo, ParseConfig, ParseResult, PoolEvent, TradeInfo, TransferData
from dexlens.parsers.adapter import TransactionAdapter
from dexlens.parsers.classifier import InstructionClassifier
from dexlens.parsers.constants import AGGREGATOR_PROGRAM_IDS, get_program_name
from dexlens.parsers.exceptions import BlockDataError
from dexlens.parsers.registry import LIQUIDITY_PARSERS, MEME_PARSERS, TRADE_PARSERS, TRANSFER_PARSERS
from dexlens.parsers.transaction_utils import TransactionUtils
from dexlens.parsers.utils import get_final_swap, sort_by_idx

ParseType = Literal["trades", "liquidity", "transfer", "all"]

# Supply and LP token movements are kept alongside plain transfers
LP_ACTION_TYPES = ("mintTo", "burn", "mintToChecked", "burnChecked")


def _first_signature(tx: Any) -> str:
    if not isinstance(tx, dict):
        return ""
    signatures = (tx.get("transaction") or {}).get("signatures") or []
    return str(signatures[0]) if signatures else ""


def dedupe_trades(trades: list[TradeInfo]) -> list[TradeInfo]:
    """Drop repeated (idx, signature) pairs; the first position wins, the last value is kept."""
    unique: dict[tuple[str, str], TradeInfo] = {}
    for trade in trades:
        unique[(trade.idx, trade.signature)] = trade
    return list(unique.values())


class DexParser:
    def __init__(self, config: ParseConfig | None = None) -> None:
        self.config = config or ParseConfig.from_settings()

    # --- public entry points -----------------------------------------------

    def parse_all(
        self,
        tx: dict[str, Any],
        config: ParseConfig | None = None,
        *,
        slot: int | None = None,
        block_time: int | None = None,
    ) -> ParseResult:
        return self._parse(tx, config, "all", slot=slot, block_time=block_time)

    def parse_trades(self, tx: dict[str, Any], config: ParseConfig | None = None) -> list[TradeInfo]:
        return self._parse(tx, config, "trades").trades

    def parse_liquidity(self, tx: dict[str, Any], config: ParseConfig | None = None) -> list[PoolEvent]:
        return self._parse(tx, config, "liquidity").liquidities

    def parse_transfers(self, tx: dict[str, Any], config: ParseConfig | None = None) -> list[TransferData]:
        return self._parse(tx, config, "transfer").transfers

    async def parse_block_data(
        self, block: dict[str, Any] | None, block_number: int, config: ParseConfig | None = None
    ) -> list[ParseResult]:
        """Parse every successful transaction of a block concurrently, in block order."""
        if not block or block.get("transactions") is None:
            raise BlockDataError(f"Block {block_number} has no transaction list")

        started = time.monotonic()
        block_time = block.get("blockTime")
        transactions = [tx for tx in block["transactions"] if not (tx.get("meta") or {}).get("err")]

        outcomes = await asyncio.gather(
            *(
                asyncio.to_thread(self.parse_all, tx, config, slot=block_number, block_time=block_time)
                for tx in transactions
            ),
            return_exceptions=True,
        )

        results: list[ParseResult] = []
        for tx, outcome in zip(transactions, outcomes):
            if isinstance(outcome, ParseResult):
                results.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            signature = _first_signature(tx)
            logger.warning(f"[BLOCK] Transaction {signature} failed in block {block_number}: {outcome}")
            results.append(
                ParseResult(
                    state=False,
                    slot=block_number,
                    timestamp=int(block_time or 0),
                    signature=signature,
                    msg=f"Parse error: {signature} {outcome}",
                )
            )

        cost_ms = (time.monotonic() - started) * 1000
        logger.info(f"[BLOCK] parse block {block_number}, cost: {cost_ms:.1f} ms")
        return results

    # --- pipeline -----------------------------------------------------------

    def _parse(
        self,
        tx: dict[str, Any],
        config: ParseConfig | None,
        parse_type: ParseType,
        *,
        slot: int | None = None,
        block_time: int | None = None,
    ) -> ParseResult:
        config = config or self.config
        result = ParseResult(slot=int(slot or 0))

        try:
            adapter = TransactionAdapter(tx, config, slot=slot, block_time=block_time)
            utils = TransactionUtils(adapter)
            classifier = InstructionClassifier(adapter)
            dex_info = utils.get_dex_info(classifier)
            all_program_ids = classifier.get_all_program_ids()

            result.slot = adapter.slot
            result.timestamp = adapter.block_time
            result.signature = adapter.signature
            result.signer = adapter.signers
            result.compute_units = adapter.compute_units
            result.tx_status = adapter.tx_status

            if config.program_ids and not any(pid in all_program_ids for pid in config.program_ids):
                result.state = False
                return result

            transfer_actions = utils.get_transfer_actions(LP_ACTION_TYPES)
            result.fee = adapter.fee
            result.sol_balance_change = adapter.get_account_sol_balance_changes().get(adapter.signer)
            result.token_balance_change = adapter.get_account_token_balance_changes(True).get(adapter.signer)

            if dex_info.program_id in AGGREGATOR_PROGRAM_IDS and parse_type in ("trades", "all"):
                if self._parse_aggregator(adapter, utils, classifier, dex_info, transfer_actions, config, result):
                    return result

            for program_id in all_program_ids:
                if config.program_ids and program_id not in config.program_ids:
                    continue
                if config.ignore_program_ids and program_id in config.ignore_program_ids:
                    continue
                self._parse_program(
                    program_id, adapter, utils, classifier, dex_info, transfer_actions, config, parse_type, result
                )

            if not result.trades and not result.liquidities and parse_type in ("transfer", "all"):
                self._parse_transfers(adapter, classifier, dex_info, transfer_actions, result)

        except Exception as exc:
            if config.throw_error:
                raise
            signature = _first_signature(tx)
            result.state = False
            result.msg = f"Parse error: {signature} {exc}"
            logger.warning(f"[PARSER] {result.msg}")

        return result

    def _parse_aggregator(
        self,
        adapter: TransactionAdapter,
        utils: TransactionUtils,
        classifier: InstructionClassifier,
        dex_info: DexInfo,
        transfer_actions: dict[str, list[TransferData]],
        config: ParseConfig,
        result: ParseResult,
    ) -> bool:
        program_id = dex_info.program_id
        parser_class = TRADE_PARSERS.get(program_id)
        if parser_class is None:
            return False

        parser = parser_class(
            adapter,
            DexInfo(program_id=program_id, amm=get_program_name(program_id), route=dex_info.route),
            transfer_actions,
            classifier.get_instructions(program_id),
        )
        trades = parser.process_trades()
        if not trades:
            return False

        if config.aggregate_trades:
            result.aggregate_trade = utils.attach_trade_fee(get_final_swap(trades))
        else:
            result.trades.extend(trades)
        logger.debug(f"[PARSER] {get_program_name(program_id)} route: {len(trades)} trades")
        return True

    def _parse_program(
        self,
        program_id: str,
        adapter: TransactionAdapter,
        utils: TransactionUtils,
        classifier: InstructionClassifier,
        dex_info: DexInfo,
        transfer_actions: dict[str, list[TransferData]],
        config: ParseConfig,
        parse_type: ParseType,
        result: ParseResult,
    ) -> None:
        instructions = classifier.get_instructions(program_id)
        program_dex_info = DexInfo(program_id=program_id, amm=get_program_name(program_id), route=dex_info.route)

        if parse_type in ("trades", "all"):
            parser_class = TRADE_PARSERS.get(program_id)
            if parser_class is not None:
                parser = parser_class(adapter, program_dex_info, transfer_actions, instructions)
                result.trades.extend(parser.process_trades())
            elif config.try_unknown_dex:
                trade = self._infer_unknown_trade(program_id, adapter, utils, program_dex_info, transfer_actions)
                if trade is not None:
                    result.trades.append(trade)

        if parse_type in ("liquidity", "all"):
            liquidity_class = LIQUIDITY_PARSERS.get(program_id)
            if liquidity_class is not None:
                liquidity_parser = liquidity_class(adapter, transfer_actions, instructions)
                result.liquidities.extend(utils.attach_user_balance_to_lps(liquidity_parser.process_liquidity()))

        if parse_type == "all":
            meme_class = MEME_PARSERS.get(program_id)
            if meme_class is not None:
                result.meme_events.extend(meme_class(adapter, transfer_actions, classifier).process_events())

        if result.trades:
            result.trades = dedupe_trades(sort_by_idx(result.trades))
            if config.aggregate_trades:
                result.aggregate_trade = utils.attach_trade_fee(get_final_swap(result.trades))

    @staticmethod
    def _infer_unknown_trade(
        program_id: str,
        adapter: TransactionAdapter,
        utils: TransactionUtils,
        dex_info: DexInfo,
        transfer_actions: dict[str, list[TransferData]],
    ) -> TradeInfo | None:
        prefix = f"{program_id}:"
        transfers = next((items for key, items in transfer_actions.items() if key.startswith(prefix)), None)
        if not transfers or len(transfers) < 2:
            return None
        if not any(adapter.is_supported_token(t.info.mint) for t in transfers):
            return None
        trade = utils.process_swap_data(transfers, dex_info)
        if trade is None:
            return None
        logger.debug(f"[PARSER] Inferred trade for unregistered program {program_id}")
        return utils.attach_token_transfer_info(trade, transfer_actions)

    @staticmethod
    def _parse_transfers(
        adapter: TransactionAdapter,
        classifier: InstructionClassifier,
        dex_info: DexInfo,
        transfer_actions: dict[str, list[TransferData]],
        result: ParseResult,
    ) -> None:
        if dex_info.program_id:
            transfer_class = TRANSFER_PARSERS.get(dex_info.program_id)
            if transfer_class is not None:
                parser = transfer_class(
                    adapter, dex_info, transfer_actions, classifier.get_instructions(dex_info.program_id)
                )
                result.transfers.extend(parser.process_transfers())
        if not result.transfers:
            result.transfers.extend(t for items in transfer_actions.values() for t in items)
