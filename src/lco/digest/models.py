from lco.core.models import LcoModel, Partition


class Digest(LcoModel):
    """Rendered notification for the new amendments of one chamber."""

    partition: Partition
    subject: str
    html: str
    record_count: int
