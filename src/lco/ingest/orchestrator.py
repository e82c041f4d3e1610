"""Orchestrator for one pass of the amendment pipeline.

For each chamber (run concurrently):
    1. Fetch and parse the amendment listing
    2. Reconcile against the chamber's table and store new amendments
    3. Resolve the bill of every new amendment (bounded concurrency)
    4. Render and send a digest if anything was new
"""

import asyncio
import logging
from collections import defaultdict
from typing import Iterable, Optional

from lco.amendment.models import AmendmentRecord
from lco.amendment.pipeline import fetch_and_parse
from lco.amendment.reconcile import AmendmentReconciler
from lco.amendment.scraper import AmendmentScraper
from lco.bill.resolver import BillResolver
from lco.core.models import Partition
from lco.digest.mailer import DigestSender
from lco.digest.renderer import render
from lco.settings import BILL_CONCURRENCY

logger = logging.getLogger(__name__)


async def run_ingest(
    reconciler: AmendmentReconciler,
    resolver: BillResolver,
    sender: Optional[DigestSender] = None,
    scraper: Optional[AmendmentScraper] = None,
    partitions: Optional[Iterable[Partition]] = None,
    bill_concurrency: int = BILL_CONCURRENCY,
) -> dict:
    """Run the pipeline for every partition.

    Args:
        reconciler: Reconciler holding the amendment store
        resolver: Resolver holding the bill store
        sender: Where to send digests. None skips sending
        scraper: Listing scraper shared by the partitions
        partitions: Chambers to process (defaults to senate and house)
        bill_concurrency: Maximum number of bills resolved at once

    Returns:
        Statistics keyed by partition name

    Raises:
        ValueError: If bill_concurrency is below 1
    """
    if bill_concurrency < 1:
        raise ValueError(f"bill_concurrency must be at least 1, got {bill_concurrency}")

    partitions = [Partition(p) for p in (partitions or list(Partition))]
    scraper = scraper or AmendmentScraper()

    semaphore = asyncio.Semaphore(bill_concurrency)
    # The same bill can be amended in both chambers
    bill_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    logger.info(f"Starting ingest for {[p.value for p in partitions]}")

    results = await asyncio.gather(
        *[
            ingest_partition(
                partition, reconciler, resolver, sender, scraper, semaphore, bill_locks
            )
            for partition in partitions
        ],
        return_exceptions=True,
    )

    stats = {}
    for partition, result in zip(partitions, results):
        if isinstance(result, Exception):
            logger.error(
                f"{partition} ingest failed: {result}",
                extra={"partition": partition.value, "error_type": type(result).__name__},
            )
            stats[partition.value] = {"error": str(result)}
        else:
            stats[partition.value] = result

    logger.info(f"Ingest complete: {stats}")
    return stats


async def ingest_partition(
    partition: Partition,
    reconciler: AmendmentReconciler,
    resolver: BillResolver,
    sender: Optional[DigestSender],
    scraper: AmendmentScraper,
    semaphore: asyncio.Semaphore,
    bill_locks: defaultdict[str, asyncio.Lock],
) -> dict:
    """Run the pipeline for a single chamber."""
    stats = {"listed": 0, "new": 0, "bills_processed": 0, "digest_sent": False}

    records = await asyncio.to_thread(fetch_and_parse, partition, scraper)
    if records is None:
        stats["error"] = "listing unavailable"
        return stats
    stats["listed"] = len(records)

    new_records = await asyncio.to_thread(reconciler.reconcile, records, partition)
    stats["new"] = len(new_records)
    if not new_records:
        logger.info(f"No new {partition} amendments")
        return stats

    stats["bills_processed"] = await resolve_bills(new_records, resolver, semaphore, bill_locks)

    if sender is not None:
        digest = render(new_records, partition)
        logger.info(f"Sending email for {partition} amendments")
        stats["digest_sent"] = await asyncio.to_thread(sender.send, digest)

    return stats


async def resolve_bills(
    records: list[AmendmentRecord],
    resolver: BillResolver,
    semaphore: asyncio.Semaphore,
    bill_locks: defaultdict[str, asyncio.Lock],
) -> int:
    """Resolve the bill of every record. Returns the number of resolutions run."""

    async def resolve_single(record: AmendmentRecord) -> None:
        async with bill_locks[record.bill_number]:
            async with semaphore:
                await asyncio.to_thread(
                    resolver.resolve_bill, record.bill_number, record.bill_document_link
                )

    await asyncio.gather(*[resolve_single(record) for record in records])
    return len(records)
