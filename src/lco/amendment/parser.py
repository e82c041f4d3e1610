import logging
from typing import Iterable, Iterator

from bs4 import BeautifulSoup, Tag

from lco.settings import CGA_BASE_URL, LCO_HEADER_TOKEN

from .models import AmendmentRecord

logger = logging.getLogger(__name__)


class AmendmentTable:
    """Lazy view over the rows of a listing page.

    Each iteration walks the parsed document again, so the same table can be
    consumed more than once.
    """

    def __init__(self, soup: BeautifulSoup, parser: "AmendmentParser"):
        self.soup = soup
        self.parser = parser

    def __iter__(self) -> Iterator[AmendmentRecord]:
        for row in self.soup.select("table tr"):
            yield self.parser.row_to_record(row)


class AmendmentParser:
    """
    Parser for the senate and house amendment reports. Takes the raw listing
    HTML and returns an AmendmentRecord per table row.

    Columns are: (unused), calendar number, LCO number with a link to the LCO
    document, bill number with a link to the bill status page, date.
    """

    def __init__(self, base_url: str = CGA_BASE_URL):
        self.base_url = base_url

    def parse_content(self, html: str) -> AmendmentTable:
        soup = BeautifulSoup(html or "", "html.parser")
        return AmendmentTable(soup, self)

    def row_to_record(self, row: Tag) -> AmendmentRecord:
        """Convert a table row to an AmendmentRecord.

        Short rows give empty fields rather than an error.
        """
        cols = row.find_all("td")

        return AmendmentRecord(
            calendar_number=self._get_text(cols, 1),
            lco_number=self._get_text(cols, 2),
            lco_document_link=self._get_link(cols, 2),
            bill_number=self._get_text(cols, 3),
            bill_document_link=self._get_link(cols, 3),
            date=self._get_text(cols, 4),
        )

    def _get_text(self, cols: list[Tag], index: int) -> str:
        if index >= len(cols):
            return ""
        return cols[index].get_text().strip()

    def _get_link(self, cols: list[Tag], index: int) -> str:
        """Prefix the cell's anchor href with the site origin.

        A missing anchor gives the bare origin.
        """
        if index >= len(cols):
            return self.base_url
        anchor = cols[index].find("a")
        if anchor is None:
            return self.base_url
        return self.base_url + (anchor.get("href") or "")


def filter_records(records: Iterable[AmendmentRecord]) -> list[AmendmentRecord]:
    """Drop the header row and rows without an LCO number, keeping order."""
    return [
        record
        for record in records
        if record.lco_number and record.lco_number != LCO_HEADER_TOKEN
    ]
