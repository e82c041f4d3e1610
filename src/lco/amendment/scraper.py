import logging
from typing import Optional

from lco.core.http import HttpClient, get_http_client
from lco.core.models import Partition
from lco.settings import HOUSE_LISTING_URL, LISTING_FORM_DATA, SENATE_LISTING_URL

logger = logging.getLogger(__name__)

LISTING_URLS = {
    Partition.SENATE: SENATE_LISTING_URL,
    Partition.HOUSE: HOUSE_LISTING_URL,
}


class AmendmentScraper:
    """Fetches a chamber's amendment report from cga.ct.gov."""

    def __init__(self, http_client: Optional[HttpClient] = None):
        self.http_client = http_client or get_http_client()

    def fetch_listing(self, partition: Partition) -> str:
        """
        Fetch the raw HTML of the amendment listing, sorted by date ascending.

        Raises:
            TransportError: If the listing could not be fetched
        """
        url = LISTING_URLS[Partition(partition)]
        logger.debug(f"Fetching {partition} amendment listing: {url}")

        res = self.http_client.post(url, data=LISTING_FORM_DATA)
        return res.text
