import logging
from typing import Optional

from lco.core.exceptions import TransportError
from lco.core.models import Partition

from .models import AmendmentRecord
from .parser import AmendmentParser, filter_records
from .scraper import AmendmentScraper

logger = logging.getLogger(__name__)


def fetch_and_parse(
    partition: Partition,
    scraper: Optional[AmendmentScraper] = None,
    parser: Optional[AmendmentParser] = None,
) -> Optional[list[AmendmentRecord]]:
    """
    Fetch a chamber's listing and return its valid amendment records.

    Returns:
        Records in listing order, or None if the listing could not be fetched
    """
    partition = Partition(partition)
    scraper = scraper or AmendmentScraper()
    parser = parser or AmendmentParser()

    try:
        html = scraper.fetch_listing(partition)
    except TransportError as e:
        logger.error(
            f"Error fetching {partition} amendment listing: {e}",
            extra={"partition": partition.value, "processing_status": "failed", "url": e.url},
        )
        return None

    records = filter_records(parser.parse_content(html))

    logger.info(
        f"Parsed {len(records)} {partition} amendments",
        extra={
            "partition": partition.value,
            "processing_status": "success",
            "amendment_count": len(records),
            "sample_lco": records[0].lco_number if records else None,
        },
    )
    return records
