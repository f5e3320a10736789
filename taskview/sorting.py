"""Table ordering for task and project lists."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, TypeVar, Union

from taskview.models import as_utc, reference_name

T = TypeVar("T")


class SortField(Enum):
    """Columns a table can be sorted by."""

    NAME = "name"
    PROJECT_NAME = "project_name"
    STATUS = "status"
    UPDATED_AT = "updated_at"


class SortDirection(Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"

    def toggled(self) -> "SortDirection":
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


def status_rank(status: Any) -> int:
    """Position of a status within its enum; -1 for unknown values."""
    if isinstance(status, Enum):
        return list(type(status)).index(status)
    return -1


def _name_key(entity) -> str:
    return entity.name.lower()


def _project_name_key(entity) -> str:
    return reference_name(getattr(entity, "project", None)).lower()


def _status_key(entity) -> int:
    return status_rank(entity.status)


def _updated_at_key(entity):
    # Missing timestamps sort after every instant.
    updated_at = getattr(entity, "updated_at", None)
    if updated_at is None:
        return (True, None)
    return (False, as_utc(updated_at))


SORT_KEYS: Dict[SortField, Callable[[Any], Any]] = {
    SortField.NAME: _name_key,
    SortField.PROJECT_NAME: _project_name_key,
    SortField.STATUS: _status_key,
    SortField.UPDATED_AT: _updated_at_key,
}


def sort_entities(
    entities: Iterable[T],
    field: Union[SortField, str],
    direction: Union[SortDirection, str] = SortDirection.ASCENDING,
) -> List[T]:
    """Return a new list of entities ordered by a table column.

    Text columns compare case-insensitively, status compares by workflow
    position and timestamps by instant. The sort is stable in both
    directions: entities with equal keys keep their input order.

    Args:
        entities: Entities to order; the input is not modified
        field: Column to sort by
        direction: Ascending or descending

    Returns:
        Sorted list

    Raises:
        ValueError: If field or direction is not recognised
    """
    sort_key = SORT_KEYS[SortField(field)]
    descending = SortDirection(direction) is SortDirection.DESCENDING
    return sorted(entities, key=sort_key, reverse=descending)


@dataclass(frozen=True)
class SortState:
    """Current table sort selection.

    Selecting the active column again flips the direction; selecting a
    different column switches to it in ascending order.
    """

    field: SortField = SortField.UPDATED_AT
    direction: SortDirection = SortDirection.DESCENDING

    def select(self, field: Union[SortField, str]) -> "SortState":
        field = SortField(field)
        if field is self.field:
            return replace(self, direction=self.direction.toggled())
        return SortState(field=field, direction=SortDirection.ASCENDING)

    def apply(self, entities: Iterable[T]) -> List[T]:
        return sort_entities(entities, self.field, self.direction)
