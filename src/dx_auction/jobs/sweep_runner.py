"""Periodic auction sweep process.

Run with:
    python -m src.dx_auction.jobs.sweep_runner            # loop forever
    python -m src.dx_auction.jobs.sweep_runner --once     # single pass (cron)

Each pass opens a fresh session and calls AuctionSweeper.sweep_ended. The
sweep is idempotent, so overlapping runners or retries are safe.
"""

import argparse
import asyncio
import logging

import uvloop

from config.settings import settings
from src.dx_auction.application.sweep import AuctionSweeper
from src.dx_common.database import async_session_factory, engine

logger = logging.getLogger("dx.sweep")


async def run_once(sweeper: AuctionSweeper) -> None:
    async with async_session_factory() as session:
        result = await sweeper.sweep_ended(session)
    if result.errors:
        logger.warning("Sweep finished with %d error(s)", len(result.errors))


async def run_forever(interval_seconds: int) -> None:
    sweeper = AuctionSweeper()
    logger.info("Auction sweep started, interval=%ss", interval_seconds)
    while True:
        try:
            await run_once(sweeper)
        except Exception:
            # Database down or similar; the next tick retries.
            logger.exception("Sweep pass failed")
        await asyncio.sleep(interval_seconds)


async def _main(once: bool, interval_seconds: int) -> None:
    try:
        if once:
            await run_once(AuctionSweeper())
        else:
            await run_forever(interval_seconds)
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Settle auctions past their end time.")
    parser.add_argument("--once", action="store_true", help="run a single pass and exit")
    parser.add_argument(
        "--interval",
        type=int,
        default=settings.SWEEP_INTERVAL_SECONDS,
        help="seconds between passes",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvloop.install()
    asyncio.run(_main(args.once, args.interval))


if __name__ == "__main__":
    main()
