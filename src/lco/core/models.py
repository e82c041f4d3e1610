from enum import Enum

from pydantic import BaseModel, ConfigDict


class Partition(str, Enum):
    """A chamber of the General Assembly. Each one has its own listing and table."""

    SENATE = "senate"
    HOUSE = "house"

    def __str__(self) -> str:
        return self.value


class LcoModel(BaseModel):
    """Base class for all stored records. Records are never mutated once created."""

    model_config = ConfigDict(frozen=True)

    def to_item(self) -> dict:
        """Return the record as a store item."""
        return self.model_dump(mode="json")
