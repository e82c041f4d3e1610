from pydantic import Field, field_validator

from lco.core.models import LcoModel


class BillEntry(LcoModel):
    """A bill and the PDF documents listed on its status page."""

    bill_number: str
    bill_link: str
    document_links: list[str] = Field(default_factory=list)

    @field_validator("document_links")
    @classmethod
    def dedupe_links(cls, value: list[str]) -> list[str]:
        """Drop repeated links, keeping the order they appear on the page."""
        return list(dict.fromkeys(value))
