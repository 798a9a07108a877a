"""Periodic crawl scheduling."""

import asyncio
import logging
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from woningjager.config import settings
from woningjager.pipeline import Crawler, RunSummary

logger = logging.getLogger(__name__)


async def run_pass(crawler: Crawler) -> list[RunSummary]:
    """One crawl pass; a failing pass is logged and never ends the process."""
    try:
        return await crawler.run_once()
    except Exception:
        logger.exception("Crawl pass failed")
        return []


def build_scheduler(crawler: Crawler, interval_minutes: int | None = None) -> AsyncIOScheduler:
    """
    Schedule a crawl pass now and then every interval.

    A pass still running when the next one is due makes the scheduler skip
    that firing (max_instances=1) rather than run two passes side by side.
    """
    sched = AsyncIOScheduler()
    sched.add_job(
        run_pass,
        "interval",
        args=[crawler],
        minutes=interval_minutes or settings.interval_minutes,
        next_run_time=datetime.now(),
        max_instances=1,
        coalesce=True,
        id="crawl",
        name="crawl listings",
    )
    return sched


async def serve(crawler: Crawler, interval_minutes: int | None = None) -> None:
    """Ensure the schema exists, then crawl on the interval until cancelled."""
    await crawler.store.init_schema()

    sched = build_scheduler(crawler, interval_minutes)
    sched.start()
    logger.info(
        "Crawling %s every %d minutes",
        ", ".join(adapter.platform for adapter in crawler.adapters),
        interval_minutes or settings.interval_minutes,
    )

    try:
        await asyncio.Event().wait()
    finally:
        sched.shutdown(wait=False)
        await crawler.close()
