import logging
from typing import Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


def set_logging_level(
    level: int,
    service_name: Optional[str] = None,
    environment: Optional[str] = None,
) -> None:
    """Set logging level for all lco loggers.

    Args:
        level: The logging level to set
        service_name: Name of the service (e.g., "ingest")
        environment: Environment name (e.g., "localhost", "dev", "prod")
    """
    logging.getLogger("lco").setLevel(level)
    logging.getLogger("__main__").setLevel(level)

    # Configure basic logging format
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if service_name or environment:
        logging.getLogger("lco").info(
            f"Logging configured for {service_name or 'lco'}",
            extra={"service_name": service_name, "environment": environment},
        )


def chunked(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive lists of at most `size` items, in order."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")

    batch = []
    for item in items:
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch
