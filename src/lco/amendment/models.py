from lco.core.models import LcoModel


class AmendmentRecord(LcoModel):
    """
    One row of a chamber's amendment listing on cga.ct.gov.

    `lco_number` identifies the record within its chamber. The date is kept
    exactly as the listing prints it.
    """

    calendar_number: str = ""
    lco_number: str = ""
    lco_document_link: str = ""
    bill_number: str = ""
    bill_document_link: str = ""
    date: str = ""
