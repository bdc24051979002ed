"""Entry point: parse one block JSON file and log what was found."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from config.settings import settings
from dexlens.models import ParseConfig
from dexlens.parsers.dex_parser import DexParser
from dexlens.utils.logger import setup_logger


def get_block_number(block: dict[str, Any]) -> int:
    """Slot of the block: ``slot`` when present, else ``parentSlot + 1``, else 0."""
    if block.get("slot") is not None:
        return int(block["slot"])
    parent_slot = block.get("parentSlot")
    return int(parent_slot) + 1 if parent_slot is not None else 0


async def main(path: str) -> None:
    block = json.loads(Path(path).read_text())
    block_number = get_block_number(block)

    parser = DexParser(ParseConfig.from_settings())
    results = await parser.parse_block_data(block, block_number)

    failed = [r for r in results if not r.state]
    trades = sum(len(r.trades) for r in results)
    liquidities = sum(len(r.liquidities) for r in results)
    meme_events = sum(len(r.meme_events) for r in results)
    logger.info(
        f"[BLOCK] {block_number}: {len(results)} txs, {trades} trades, "
        f"{liquidities} pool events, {meme_events} meme events, {len(failed)} failed"
    )
    for result in failed:
        logger.warning(f"[BLOCK] {result.msg}")


def run() -> None:
    setup_logger(json_logs=settings.log_json, level=settings.log_level, log_dir=settings.log_dir)
    if len(sys.argv) != 2:
        logger.error("Usage: dexlens <block.json>")
        sys.exit(2)
    asyncio.run(main(sys.argv[1]))


if __name__ == "__main__":
    run()
