import logging
from typing import Optional

from lco.core.exceptions import StoreReadError, StoreWriteError, TransportError
from lco.core.store import KeyValueStore
from lco.settings import BILLS_TABLE

from .models import BillEntry
from .parser import BillDocumentParser
from .scraper import BillScraper

logger = logging.getLogger(__name__)


class BillResolver:
    """Records the PDF documents of bills that have not been seen before.

    The existence check and the write are not atomic. Two resolutions of the
    same bill running at once can both write, and the last write wins.
    """

    def __init__(
        self,
        store: KeyValueStore,
        scraper: Optional[BillScraper] = None,
        parser: Optional[BillDocumentParser] = None,
        table: str = BILLS_TABLE,
    ):
        self.store = store
        self.scraper = scraper or BillScraper()
        self.parser = parser or BillDocumentParser()
        self.table = table

    def resolve_bill(self, bill_number: str, bill_link: str) -> None:
        """Store a BillEntry for bill_number unless it exists or has no documents.

        Never raises; failures are logged and the bill is left for a later run.
        """
        try:
            self._resolve(bill_number, bill_link)
        except (StoreReadError, StoreWriteError, TransportError) as e:
            logger.error(
                f"Error processing bill {bill_number}: {e}",
                extra={
                    "bill_number": bill_number,
                    "bill_link": bill_link,
                    "processing_status": "failed",
                    "error_type": type(e).__name__,
                },
            )
        except Exception as e:
            logger.exception(
                f"Unexpected error processing bill {bill_number}: {e}",
                extra={"bill_number": bill_number, "bill_link": bill_link},
            )

    def _resolve(self, bill_number: str, bill_link: str) -> None:
        if self.store.get(self.table, bill_number) is not None:
            logger.debug(f"Bill {bill_number} already exists in {self.table}")
            return

        logger.info(f"Processing new bill: {bill_number}")
        html = self.scraper.fetch_bill_page(bill_link)
        document_links = self.parser.parse_content(html)

        if not document_links:
            logger.info(
                f"No PDFs found for bill {bill_number}",
                extra={"bill_number": bill_number, "processing_status": "skipped"},
            )
            return

        entry = BillEntry(bill_number=bill_number, bill_link=bill_link, document_links=document_links)
        self.store.put(self.table, entry.bill_number, entry.to_item())

        logger.info(
            f"Added new bill {bill_number} with {len(entry.document_links)} PDFs",
            extra={
                "bill_number": bill_number,
                "processing_status": "success",
                "document_count": len(entry.document_links),
            },
        )
