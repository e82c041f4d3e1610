from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from lco.amendment.models import AmendmentRecord
from lco.core.models import Partition

from .models import Digest

TEMPLATE_DIR = Path(__file__).parent / "templates"

environment = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render(new_records: Sequence[AmendmentRecord], partition: Partition) -> Digest:
    """Render the digest email for a chamber's new amendments."""
    partition = Partition(partition)
    html = environment.get_template("digest.html").render(
        amendments=list(new_records), partition=partition.value
    )

    return Digest(
        partition=partition,
        subject=f"New {partition.value} amendments",
        html=html,
        record_count=len(new_records),
    )
