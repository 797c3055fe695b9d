"""Detection of items whose time window lies inside a longer visit."""

from datetime import datetime
from typing import List, Optional, Sequence, Set, Tuple

from arcdiary.core.logger import log_debug
from arcdiary.models.timeline import TimelineItem

Window = Tuple[datetime, datetime]


def _window(item: TimelineItem) -> Optional[Window]:
    if item.start is None:
        return None
    end = item.end if item.end is not None and item.end >= item.start else item.start
    return item.start, end


def find_contained_items(items: Sequence[TimelineItem]) -> Set[str]:
    """Returns ids of items fully inside another visit's window.

    A visit B contains A (B is not A) when A's window lies within B's. For
    identical windows the visit that comes first in input order is the
    container, and a trip never contains a visit.
    """
    windows: List[Tuple[int, TimelineItem, Window]] = []
    for index, item in enumerate(items):
        window = _window(item)
        if window is not None:
            windows.append((index, item, window))

    containers = [entry for entry in windows if entry[1].is_visit]
    contained: Set[str] = set()

    for index, item, (start, end) in windows:
        for c_index, container, (c_start, c_end) in containers:
            if c_index == index or container.id == item.id:
                continue
            if not (c_start <= start and end <= c_end):
                continue

            same_window = c_start == start and c_end == end
            if same_window and item.is_visit and c_index > index:
                continue

            contained.add(item.id)
            log_debug(f"contained: {item.id} inside visit {container.id}")
            break

    return contained
