import logging
import math
from enum import Enum
from typing import Iterable, Optional

from lco.core.exceptions import StoreReadError, StoreWriteError
from lco.core.models import Partition
from lco.core.store import KeyValueStore
from lco.core.utils import chunked
from lco.settings import (
    HOUSE_AMENDMENTS_TABLE,
    RECONCILE_ON_READ_FAILURE,
    SENATE_AMENDMENTS_TABLE,
)

from .models import AmendmentRecord

logger = logging.getLogger(__name__)


class ReadFailurePolicy(str, Enum):
    """What to do when the known records of a partition cannot be read."""

    ASSUME_EMPTY = "assume-empty"
    ABORT = "abort"


DEFAULT_TABLES = {
    Partition.SENATE: SENATE_AMENDMENTS_TABLE,
    Partition.HOUSE: HOUSE_AMENDMENTS_TABLE,
}


class AmendmentReconciler:
    """Works out which listed amendments are new and stores them.

    Novelty is decided on `lco_number` alone. A known record whose other
    fields changed upstream is not rewritten.
    """

    def __init__(
        self,
        store: KeyValueStore,
        tables: Optional[dict[Partition, str]] = None,
        on_read_failure: ReadFailurePolicy | str = RECONCILE_ON_READ_FAILURE,
        batch_size: Optional[int] = None,
    ):
        self.store = store
        self.tables = tables or DEFAULT_TABLES
        self.on_read_failure = ReadFailurePolicy(on_read_failure)
        self.batch_size = batch_size or store.batch_write_limit

        if self.batch_size > store.batch_write_limit:
            raise ValueError(
                f"batch_size {self.batch_size} exceeds the store limit of {store.batch_write_limit}"
            )

    def reconcile(
        self, records: Iterable[AmendmentRecord], partition: Partition
    ) -> list[AmendmentRecord]:
        """
        Store the records that are not yet known for a partition.

        Args:
            records: Candidate records from the listing
            partition: Chamber the records belong to

        Returns:
            Every record found to be new, in candidate order. Records of a batch
            that failed to write are still included.
        """
        partition = Partition(partition)
        table = self.tables[partition]
        candidates = list(records)

        known = self._get_known_lco_numbers(table, partition)
        if known is None:
            return []

        new_records = []
        seen = set(known)
        for record in candidates:
            if record.lco_number in seen:
                continue
            seen.add(record.lco_number)
            new_records.append(record)

        logger.info(
            f"Found {len(new_records)} new {partition} amendments out of {len(candidates)} listed",
            extra={
                "partition": partition.value,
                "table": table,
                "candidate_count": len(candidates),
                "known_count": len(known),
                "new_count": len(new_records),
            },
        )

        if not new_records:
            return []

        self._write_records(table, partition, new_records)
        return new_records

    def _get_known_lco_numbers(self, table: str, partition: Partition) -> Optional[set[str]]:
        """Scan the partition table once. Returns None if the run should stop."""
        try:
            items = self.store.scan(table)
        except StoreReadError as e:
            if self.on_read_failure is ReadFailurePolicy.ABORT:
                logger.error(
                    f"Could not read known {partition} amendments, skipping reconciliation: {e}",
                    extra={"partition": partition.value, "table": table, "policy": "abort"},
                )
                return None

            logger.error(
                f"Could not read known {partition} amendments, treating all as new: {e}",
                extra={"partition": partition.value, "table": table, "policy": "assume-empty"},
            )
            return set()

        return {item["lco_number"] for item in items if item.get("lco_number")}

    def _write_records(
        self, table: str, partition: Partition, records: list[AmendmentRecord]
    ) -> None:
        total_batches = math.ceil(len(records) / self.batch_size)
        failed_batches = 0

        for i, batch in enumerate(chunked(records, self.batch_size), start=1):
            try:
                self.store.batch_write(
                    table, [(record.lco_number, record.to_item()) for record in batch]
                )
                logger.debug(f"Wrote batch {i}/{total_batches} ({len(batch)} items) to {table}")
            except StoreWriteError as e:
                failed_batches += 1
                logger.error(
                    f"Failed to write batch {i}/{total_batches} to {table}: {e}",
                    extra={
                        "partition": partition.value,
                        "table": table,
                        "lco_numbers": [record.lco_number for record in batch],
                    },
                )

        logger.info(
            f"Wrote {total_batches - failed_batches}/{total_batches} batches to {table}",
            extra={
                "partition": partition.value,
                "table": table,
                "processing_status": "success" if not failed_batches else "partial",
                "failed_batches": failed_batches,
            },
        )
