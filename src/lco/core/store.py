"""Key-value store used for amendment and bill state.

The pipeline only needs four operations against a table: a full scan, a point
lookup, a single put and a bounded batch write. `KeyValueStore` is that
interface; `QdrantStore` implements it on top of payload-only Qdrant
collections, one collection per table.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from qdrant_client import QdrantClient
from qdrant_client.models import PointStruct

from lco.core.exceptions import StoreReadError, StoreWriteError
from lco.settings import BATCH_WRITE_LIMIT

logger = logging.getLogger(__name__)

# Namespace UUID for generating deterministic point ids from identity keys
NAMESPACE_LCO = uuid.UUID("6ba7b811-9dad-11d1-80b4-00c04fd430c8")

Item = dict[str, Any]


def key_to_uuid(key: str) -> str:
    """Convert an identity key (LCO number, bill number) to a deterministic UUID string."""
    return str(uuid.uuid5(NAMESPACE_LCO, key))


class KeyValueStore(ABC):
    """Abstract store keyed by a string identity. Writes to an existing key overwrite it."""

    batch_write_limit: int = BATCH_WRITE_LIMIT

    @abstractmethod
    def scan(self, table: str) -> list[Item]:
        """Return every item in the table.

        Raises:
            StoreReadError: If the table could not be read
        """

    @abstractmethod
    def get(self, table: str, key: str) -> Optional[Item]:
        """Return the item stored under key, or None.

        Raises:
            StoreReadError: If the lookup failed
        """

    @abstractmethod
    def put(self, table: str, key: str, item: Item) -> None:
        """Store a single item.

        Raises:
            StoreWriteError: If the write failed
        """

    @abstractmethod
    def batch_write(self, table: str, items: Sequence[tuple[str, Item]]) -> None:
        """Store up to `batch_write_limit` (key, item) pairs in one call.

        Raises:
            ValueError: If more than `batch_write_limit` items are passed
            StoreWriteError: If the write failed
        """

    def _check_batch_size(self, items: Sequence[tuple[str, Item]]) -> None:
        if len(items) > self.batch_write_limit:
            raise ValueError(
                f"Batch of {len(items)} items exceeds the limit of {self.batch_write_limit}"
            )


class QdrantStore(KeyValueStore):
    """KeyValueStore backed by Qdrant collections without vectors."""

    def __init__(self, client: QdrantClient, scroll_page_size: int = 256):
        self.client = client
        self.scroll_page_size = scroll_page_size

    def ensure_table(self, table: str) -> None:
        """Create the collection for a table if it does not already exist."""
        if self.client.collection_exists(table):
            logger.debug(f"Collection {table} already exists")
            return

        logger.info(f"Creating collection {table}")
        self.client.create_collection(collection_name=table, vectors_config={})

    def scan(self, table: str) -> list[Item]:
        items: list[Item] = []
        offset = None

        try:
            while True:
                points, offset = self.client.scroll(
                    collection_name=table,
                    limit=self.scroll_page_size,
                    offset=offset,
                    with_payload=True,
                    with_vectors=False,
                )
                items.extend(point.payload for point in points if point.payload)

                if offset is None:
                    break
        except Exception as e:
            raise StoreReadError(f"Failed to scan {table}: {e}", table=table) from e

        logger.debug(f"Scanned {len(items)} items from {table}")
        return items

    def get(self, table: str, key: str) -> Optional[Item]:
        try:
            points = self.client.retrieve(
                collection_name=table,
                ids=[key_to_uuid(key)],
                with_payload=True,
                with_vectors=False,
            )
        except Exception as e:
            raise StoreReadError(f"Failed to get {key} from {table}: {e}", table=table) from e

        if not points:
            return None
        return points[0].payload

    def put(self, table: str, key: str, item: Item) -> None:
        self._upsert(table, [(key, item)])

    def batch_write(self, table: str, items: Sequence[tuple[str, Item]]) -> None:
        self._check_batch_size(items)
        self._upsert(table, items)

    def _upsert(self, table: str, items: Sequence[tuple[str, Item]]) -> None:
        points = [PointStruct(id=key_to_uuid(key), vector={}, payload=item) for key, item in items]

        try:
            self.client.upsert(collection_name=table, points=points, wait=True)
        except Exception as e:
            raise StoreWriteError(
                f"Failed to write {len(points)} items to {table}: {e}", table=table
            ) from e
