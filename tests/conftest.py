"""Shared fixtures and test doubles for the lco test suite."""

from typing import Optional, Sequence

import pytest

from lco.core.exceptions import StoreReadError, StoreWriteError, TransportError
from lco.core.store import KeyValueStore

LISTING_HTML = """
<html>
  <table>
    <tr>
      <td>Header</td>
      <td>Cal #</td>
      <td>LCO #</td>
      <td>Bill #</td>
      <td>Date</td>
    </tr>
    <tr>
      <td></td>
      <td>123</td>
      <td><a href="/lco1">LCO-456</a></td>
      <td><a href="/bill1">HB-1234</a></td>
      <td>01/15/2024</td>
    </tr>
    <tr>
      <td></td>
      <td>789</td>
      <td><a href="/lco2">LCO-999</a></td>
      <td><a href="/bill2">SB-5678</a></td>
      <td>01/16/2024</td>
    </tr>
  </table>
</html>
"""

BILL_PAGE_HTML = """
<html>
  <table summary="Bill Information"><tr><td><a href="/other.PDF">Not this one</a></td></tr></table>
  <table summary="Status of bills">
    <tbody>
      <tr>
        <td><a href="/2024/TOB/S/PDF/2024SB-05678-R00-SB.PDF">File No. 1</a></td>
        <td><a href="/2024/FN/PDF/2024SB-05678-R000123-FN.PDF">Fiscal Note</a></td>
        <td><a href="/asp/cgabillstatus/cgabillstatus.asp?which_year=2024">Status</a></td>
      </tr>
      <tr>
        <td><a href="/2024/TOB/S/PDF/2024SB-05678-R00-SB.PDF">File No. 1 (again)</a></td>
      </tr>
    </tbody>
  </table>
</html>
"""


class MemoryStore(KeyValueStore):
    """In-memory KeyValueStore that records every call."""

    def __init__(self, tables: Optional[dict[str, dict[str, dict]]] = None):
        self.tables = tables or {}
        self.calls: list[tuple] = []
        self.fail_scan = False
        self.fail_get = False
        self.fail_put = False
        self.fail_batches: set[int] = set()
        self._batch_count = 0

    def scan(self, table: str) -> list[dict]:
        self.calls.append(("scan", table))
        if self.fail_scan:
            raise StoreReadError("scan failed", table=table)
        return list(self.tables.get(table, {}).values())

    def get(self, table: str, key: str) -> Optional[dict]:
        self.calls.append(("get", table, key))
        if self.fail_get:
            raise StoreReadError("get failed", table=table)
        return self.tables.get(table, {}).get(key)

    def put(self, table: str, key: str, item: dict) -> None:
        self.calls.append(("put", table, key))
        if self.fail_put:
            raise StoreWriteError("put failed", table=table)
        self.tables.setdefault(table, {})[key] = item

    def batch_write(self, table: str, items: Sequence[tuple[str, dict]]) -> None:
        self._check_batch_size(items)
        self._batch_count += 1
        self.calls.append(("batch_write", table, [key for key, _ in items]))
        if self._batch_count in self.fail_batches:
            raise StoreWriteError("batch write failed", table=table)
        for key, item in items:
            self.tables.setdefault(table, {})[key] = item

    def calls_named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


class StubListingScraper:
    """Returns canned listing HTML per partition, or raises TransportError."""

    def __init__(self, pages: Optional[dict[str, str]] = None, fail: bool = False):
        self.pages = pages or {}
        self.fail = fail
        self.requested: list[str] = []

    def fetch_listing(self, partition) -> str:
        self.requested.append(str(partition))
        if self.fail:
            raise TransportError("Network error", url=f"https://cga.ct.gov/{partition}")
        return self.pages.get(str(partition), "<html></html>")


class StubBillScraper:
    """Returns canned bill page HTML, or raises TransportError for unknown links."""

    def __init__(self, pages: Optional[dict[str, str]] = None, default: Optional[str] = None):
        self.pages = pages or {}
        self.default = default
        self.requested: list[str] = []

    def fetch_bill_page(self, bill_link: str) -> str:
        self.requested.append(bill_link)
        if bill_link in self.pages:
            return self.pages[bill_link]
        if self.default is not None:
            return self.default
        raise TransportError(f"404 for {bill_link}", url=bill_link)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def listing_html():
    return LISTING_HTML


@pytest.fixture
def bill_page_html():
    return BILL_PAGE_HTML


@pytest.fixture
def make_listing_scraper():
    return StubListingScraper


@pytest.fixture
def make_bill_scraper():
    return StubBillScraper
