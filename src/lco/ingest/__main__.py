"""CLI entry point for a pipeline run.

Usage:
    # Both chambers, email digests
    python -m lco.ingest

    # Senate only, no email
    python -m lco.ingest --partitions senate --no-email

    # Skip a chamber when its table cannot be read instead of treating everything as new
    python -m lco.ingest --on-read-failure abort
"""

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from lco import settings
from lco.amendment.reconcile import AmendmentReconciler, ReadFailurePolicy
from lco.amendment.scraper import AmendmentScraper
from lco.bill.resolver import BillResolver
from lco.bill.scraper import BillScraper
from lco.core.http import get_http_client
from lco.core.models import Partition
from lco.core.qdrant_client import get_qdrant_client
from lco.core.store import QdrantStore
from lco.core.utils import set_logging_level
from lco.digest.mailer import SmtpDigestSender
from lco.ingest.orchestrator import run_ingest


def positive_int(value: str) -> int:
    """argparse type for integers of at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def main() -> int:
    """Main entry point for the ingest CLI."""
    parser = argparse.ArgumentParser(
        description="Track new LCO amendments for the Connecticut General Assembly",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--partitions",
        nargs="+",
        choices=[p.value for p in Partition],
        default=[p.value for p in Partition],
        help="Chambers to process (default: senate house)",
    )

    parser.add_argument(
        "--on-read-failure",
        choices=[p.value for p in ReadFailurePolicy],
        default=settings.RECONCILE_ON_READ_FAILURE,
        help="What to do when known amendments cannot be read (default: %(default)s)",
    )

    parser.add_argument(
        "--bill-concurrency",
        type=positive_int,
        default=settings.BILL_CONCURRENCY,
        help="Maximum bill pages fetched at once (default: %(default)s)",
    )

    parser.add_argument(
        "--no-email",
        action="store_true",
        help="Do not send digest emails",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()
    if args.bill_concurrency < 1:
        parser.error(f"BILL_CONCURRENCY must be at least 1, got {args.bill_concurrency}")

    set_logging_level(logging.DEBUG if args.verbose else logging.INFO, service_name="ingest")
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Starting ingest: partitions={args.partitions}")

    store = QdrantStore(get_qdrant_client())
    for table in (
        settings.SENATE_AMENDMENTS_TABLE,
        settings.HOUSE_AMENDMENTS_TABLE,
        settings.BILLS_TABLE,
    ):
        store.ensure_table(table)

    http_client = get_http_client()
    reconciler = AmendmentReconciler(store, on_read_failure=args.on_read_failure)
    resolver = BillResolver(store, scraper=BillScraper(http_client))
    sender = None if args.no_email else SmtpDigestSender()

    try:
        stats = asyncio.run(
            run_ingest(
                reconciler,
                resolver,
                sender=sender,
                scraper=AmendmentScraper(http_client),
                partitions=args.partitions,
                bill_concurrency=args.bill_concurrency,
            )
        )
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    print(json.dumps(stats, indent=2))
    return 0 if all("error" not in s for s in stats.values()) else 1


if __name__ == "__main__":
    sys.exit(main())
