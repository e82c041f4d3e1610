"""End-to-end tests for a pipeline run with in-memory doubles."""

import asyncio
import threading
import time
from collections import defaultdict

import pytest

from lco.amendment.models import AmendmentRecord
from lco.amendment.reconcile import AmendmentReconciler
from lco.bill.resolver import BillResolver
from lco.core.models import Partition
from lco.digest.mailer import DigestSender
from lco.ingest.orchestrator import resolve_bills, run_ingest

TABLES = {Partition.SENATE: "test-senate-table", Partition.HOUSE: "test-house-table"}


class RecordingResolver(BillResolver):
    def __init__(self, store, scraper, **kwargs):
        super().__init__(store, scraper=scraper, **kwargs)
        self.invocations = []
        self._lock = threading.Lock()

    def resolve_bill(self, bill_number, bill_link):
        with self._lock:
            self.invocations.append((bill_number, bill_link))
        super().resolve_bill(bill_number, bill_link)


class CountingResolver:
    """Tracks how many resolutions run at once, overall and per bill."""

    def __init__(self, duration: float = 0.05):
        self.duration = duration
        self.invocations = []
        self.active = 0
        self.peak = 0
        self.active_per_bill = defaultdict(int)
        self.peak_per_bill = defaultdict(int)
        self._lock = threading.Lock()

    def resolve_bill(self, bill_number, bill_link):
        with self._lock:
            self.invocations.append(bill_number)
            self.active += 1
            self.active_per_bill[bill_number] += 1
            self.peak = max(self.peak, self.active)
            self.peak_per_bill[bill_number] = max(
                self.peak_per_bill[bill_number], self.active_per_bill[bill_number]
            )
        time.sleep(self.duration)
        with self._lock:
            self.active -= 1
            self.active_per_bill[bill_number] -= 1


class RecordingSender(DigestSender):
    def __init__(self):
        self.digests = []

    def send(self, digest):
        self.digests.append(digest)
        return True


def listing_rows(count: int) -> str:
    rows = "".join(
        f'<tr><td></td><td>{i}</td><td><a href="/lco{i}">LCO-{100 + i}</a></td>'
        f'<td><a href="/bill{i}">HB-{1000 + i}</a></td><td>01/15/2024</td></tr>'
        for i in range(count)
    )
    return f"<html><table>{rows}</table></html>"


def make_records(bill_numbers: list[str]) -> list[AmendmentRecord]:
    return [
        AmendmentRecord(
            lco_number=f"LCO-{100 + i}",
            bill_number=bill_number,
            bill_document_link=f"https://cga.ct.gov/{bill_number}",
        )
        for i, bill_number in enumerate(bill_numbers)
    ]


@pytest.fixture
def components(store, make_bill_scraper, bill_page_html):
    reconciler = AmendmentReconciler(store, tables=TABLES)
    resolver = RecordingResolver(
        store, make_bill_scraper(default=bill_page_html), table="test-bills-table"
    )
    sender = RecordingSender()
    return reconciler, resolver, sender


def run(components, scraper, partitions=("senate",), **kwargs):
    reconciler, resolver, sender = components
    return asyncio.run(
        run_ingest(
            reconciler, resolver, sender=sender, scraper=scraper, partitions=partitions, **kwargs
        )
    )


class TestRunIngest:
    def test_two_new_records_with_empty_store(
        self, store, components, make_listing_scraper, listing_html
    ):
        stats = run(components, make_listing_scraper(pages={"senate": listing_html}))

        assert stats["senate"]["new"] == 2
        assert len(store.calls_named("batch_write")) == 1
        assert store.calls_named("batch_write")[0][2] == ["LCO-456", "LCO-999"]

    def test_only_unknown_record_is_resolved_and_reported(
        self, store, components, make_listing_scraper, listing_html
    ):
        store.tables["test-senate-table"] = {"LCO-456": {"lco_number": "LCO-456"}}
        _, resolver, sender = components

        stats = run(components, make_listing_scraper(pages={"senate": listing_html}))

        assert stats["senate"] == {"listed": 2, "new": 1, "bills_processed": 1, "digest_sent": True}
        assert resolver.invocations == [("SB-5678", "https://cga.ct.gov/bill2")]
        assert [d.record_count for d in sender.digests] == [1]
        assert "LCO-999" in sender.digests[0].html

    def test_thirty_new_records(self, store, components, make_listing_scraper):
        _, resolver, _ = components

        stats = run(
            components, make_listing_scraper(pages={"house": listing_rows(30)}), ("house",)
        )

        assert stats["house"]["new"] == 30
        assert [len(call[2]) for call in store.calls_named("batch_write")] == [25, 5]
        assert len(resolver.invocations) == 30

    def test_listing_failure_stops_the_partition(self, store, components, make_listing_scraper):
        _, resolver, sender = components

        stats = run(components, make_listing_scraper(fail=True))

        assert stats["senate"]["error"] == "listing unavailable"
        assert store.calls == []
        assert resolver.invocations == []
        assert sender.digests == []

    def test_no_digest_when_nothing_is_new(
        self, store, components, make_listing_scraper, listing_html
    ):
        _, _, sender = components
        scraper = make_listing_scraper(pages={"senate": listing_html})

        run(components, scraper)
        sender.digests.clear()
        stats = run(components, scraper)

        assert stats["senate"]["new"] == 0
        assert sender.digests == []

    def test_partitions_are_independent(self, store, components, make_listing_scraper, listing_html):
        _, _, sender = components
        scraper = make_listing_scraper(pages={"senate": listing_html, "house": listing_rows(3)})

        stats = run(components, scraper, ("senate", "house"))

        assert stats["senate"]["new"] == 2
        assert stats["house"]["new"] == 3
        assert {d.partition for d in sender.digests} == {Partition.SENATE, Partition.HOUSE}

    def test_bill_amended_in_both_chambers_is_stored_once(
        self, store, components, make_listing_scraper, listing_html
    ):
        _, resolver, _ = components
        scraper = make_listing_scraper(pages={"senate": listing_html, "house": listing_html})

        run(components, scraper, ("senate", "house"))

        assert len(resolver.invocations) == 4
        assert store.calls_named("put").count(("put", "test-bills-table", "SB-5678")) == 1
        assert set(store.tables["test-bills-table"]) == {"HB-1234", "SB-5678"}

    @pytest.mark.parametrize("bill_concurrency", [0, -1])
    def test_bill_concurrency_below_one_is_rejected_before_any_work(
        self, store, components, make_listing_scraper, listing_html, bill_concurrency
    ):
        scraper = make_listing_scraper(pages={"senate": listing_html})

        with pytest.raises(ValueError):
            run(components, scraper, bill_concurrency=bill_concurrency)

        assert scraper.requested == []
        assert store.calls == []

    def test_bill_resolutions_never_exceed_bill_concurrency(self, store, make_listing_scraper):
        reconciler = AmendmentReconciler(store, tables=TABLES)
        resolver = CountingResolver()

        stats = asyncio.run(
            run_ingest(
                reconciler,
                resolver,
                scraper=make_listing_scraper(pages={"house": listing_rows(8)}),
                partitions=["house"],
                bill_concurrency=2,
            )
        )

        assert stats["house"]["bills_processed"] == 8
        assert len(resolver.invocations) == 8
        assert resolver.peak <= 2


class TestResolveBills:
    def test_concurrent_resolutions_are_capped_by_the_semaphore(self):
        resolver = CountingResolver()
        records = make_records([f"HB-{1000 + i}" for i in range(12)])

        processed = asyncio.run(
            resolve_bills(records, resolver, asyncio.Semaphore(3), defaultdict(asyncio.Lock))
        )

        assert processed == 12
        assert sorted(resolver.invocations) == sorted(r.bill_number for r in records)
        assert 1 <= resolver.peak <= 3

    def test_same_bill_is_never_resolved_concurrently(self):
        resolver = CountingResolver()
        records = make_records(["SB-5678", "HB-1234", "SB-5678", "SB-5678"])

        asyncio.run(
            resolve_bills(records, resolver, asyncio.Semaphore(4), defaultdict(asyncio.Lock))
        )

        assert resolver.invocations.count("SB-5678") == 3
        assert resolver.peak_per_bill["SB-5678"] == 1
