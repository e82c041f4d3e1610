import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from lco.settings import CGA_BASE_URL

logger = logging.getLogger(__name__)

# Summary attribute of the table listing a bill's text versions and analyses
STATUS_TABLE_SUMMARY = "Status of bills"


class BillDocumentParser:
    """Extracts PDF document links from a bill status page."""

    def __init__(self, base_url: str = CGA_BASE_URL):
        self.base_url = base_url

    def parse_content(self, html: str) -> list[str]:
        """Return the unique PDF links in the status table, in page order."""
        soup = BeautifulSoup(html or "", "html.parser")
        links: list[str] = []

        for table in soup.find_all("table", attrs={"summary": STATUS_TABLE_SUMMARY}):
            for anchor in table.find_all("a", href=True):
                href = anchor["href"].strip()
                if not href.lower().endswith(".pdf"):
                    continue

                link = urljoin(self.base_url + "/", href)
                if link not in links:
                    links.append(link)

        logger.debug(f"Found {len(links)} PDF links")
        return links
