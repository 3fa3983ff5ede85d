from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")


def as_utc(ts: datetime) -> datetime:
    """Mongo hands back naive UTC datetimes; make every timestamp aware so they compare."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def sort_desc(
    items: Iterable[T],
    key: Callable[[T], float],
    tie_break: Optional[Callable[[T], Any]] = None,
) -> List[T]:
    """
    Stable sort by `key` descending.
    Equal keys keep their input order, or are ordered by `tie_break`
    ascending when one is given.
    """
    ordered = list(items)
    if tie_break is not None:
        ordered.sort(key=tie_break)
    ordered.sort(key=key, reverse=True)  # list.sort stays stable with reverse=True
    return ordered


def take(items: List[T], limit: int) -> List[T]:
    return items[:max(limit, 0)]
