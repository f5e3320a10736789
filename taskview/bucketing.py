"""Status bucketing for board columns, swimlanes and overview widgets."""

import logging
from dataclasses import dataclass
from operator import attrgetter
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from taskview.models import enum_value

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")

_status_of = attrgetter("status")


def bucket_by_status(
    entities: Iterable[T],
    ordered_status_keys: Sequence[K],
    key: Optional[Callable[[T], Any]] = None,
) -> Dict[K, List[T]]:
    """Partition entities into one bucket per status key.

    Every key gets a bucket, in the order given, even when nothing matches
    it. Entities keep their input order within a bucket. Entities whose
    status is not one of the keys are left out.

    Args:
        entities: Entities to partition
        ordered_status_keys: Status keys (enum members or raw values)
        key: Function returning an entity's status. Defaults to the
             ``status`` attribute.

    Returns:
        Dict mapping each status key to its entities
    """
    status_of = key or _status_of
    lookup = {enum_value(k): k for k in ordered_status_keys}
    buckets: Dict[K, List[T]] = {k: [] for k in ordered_status_keys}

    dropped = 0
    for entity in entities:
        status_key = lookup.get(enum_value(status_of(entity)))
        if status_key is None:
            dropped += 1
            continue
        buckets[status_key].append(entity)

    if dropped:
        logger.debug("Dropped %d entities with unrecognised status", dropped)
    return buckets


def status_counts(entities: Iterable[T], ordered_status_keys: Sequence[K]) -> Dict[K, int]:
    buckets = bucket_by_status(entities, ordered_status_keys)
    return {status: len(bucket) for status, bucket in buckets.items()}


@dataclass(frozen=True)
class StatusShare:
    """One segment of a status overview bar."""

    status: Any
    count: int
    percentage: float

    @property
    def visible(self) -> bool:
        return self.count > 0


def status_breakdown(entities: Iterable[T], ordered_status_keys: Sequence[K]) -> List[StatusShare]:
    """Per-status counts and percentages, in key order.

    Percentages are taken over the entities that landed in a bucket, so
    they sum to 100 unless nothing was bucketed, in which case all are 0.
    """
    counts = status_counts(entities, ordered_status_keys)
    total = sum(counts.values())
    return [
        StatusShare(
            status=status,
            count=count,
            percentage=(count / total * 100) if total else 0.0,
        )
        for status, count in counts.items()
    ]
