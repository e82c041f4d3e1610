import logging
from typing import Optional

from lco.core.http import HttpClient, get_http_client

logger = logging.getLogger(__name__)


class BillScraper:
    """Fetches bill status pages from cga.ct.gov."""

    def __init__(self, http_client: Optional[HttpClient] = None):
        self.http_client = http_client or get_http_client()

    def fetch_bill_page(self, bill_link: str) -> str:
        """
        Fetch the raw HTML of a bill status page.

        Raises:
            TransportError: If the page could not be fetched
        """
        logger.debug(f"Fetching bill page: {bill_link}")
        res = self.http_client.get(bill_link)
        return res.text
