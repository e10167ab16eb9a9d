"""
Percentage-of-total metric for cached tags.
"""
from typing import Iterable, List, Optional, Union

from app.schemas.tag import RankedTag, Snapshot, TagRecord

PERCENTAGE_DECIMALS = 5


def derive_percentages(snapshot: Optional[Union[Snapshot, Iterable[TagRecord]]]) -> List[RankedTag]:
    """
    Annotate every tag with its share of the total count.

    The result keeps the snapshot's order. A missing snapshot, an empty one,
    or one whose counts sum to zero yields an empty list.
    """
    if snapshot is None:
        return []

    records = list(snapshot.tags if isinstance(snapshot, Snapshot) else snapshot)
    total_count = sum(record.count for record in records)
    if total_count == 0:
        return []

    return [
        RankedTag(
            name=record.name,
            percentage=round(record.count / total_count * 100, PERCENTAGE_DECIMALS),
        )
        for record in records
    ]
