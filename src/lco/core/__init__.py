from .exceptions import StoreReadError, StoreWriteError, TransportError
from .models import Partition
from .store import KeyValueStore, QdrantStore
from .utils import chunked, set_logging_level

__all__ = [
    "KeyValueStore",
    "Partition",
    "QdrantStore",
    "StoreReadError",
    "StoreWriteError",
    "TransportError",
    "chunked",
    "set_logging_level",
]
