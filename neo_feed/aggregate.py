"""Group normalized objects by date, sort them, and merge "load more" pages."""

import logging
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .normalize import normalize_neo
from .schemas import DateGroup, NearEarthObject, SortOrder

logger = logging.getLogger(__name__)

SortKey = Callable[[NearEarthObject], Tuple[bool, float]]


def _approach_epoch(neo: NearEarthObject) -> Optional[float]:
    if neo.nearest_approach is None:
        return None
    return neo.nearest_approach.epoch_millis


def _diameter(neo: NearEarthObject) -> Optional[float]:
    return neo.avg_diameter_km


_SORT_FIELDS = {
    SortOrder.APPROACH_ASC: (_approach_epoch, False),
    SortOrder.APPROACH_DESC: (_approach_epoch, True),
    SortOrder.SIZE_ASC: (_diameter, False),
    SortOrder.SIZE_DESC: (_diameter, True),
}


def sort_key(order: SortOrder) -> SortKey:
    """Key placing objects without a value last in either direction."""

    field, descending = _SORT_FIELDS[SortOrder(order)]

    def key(neo: NearEarthObject) -> Tuple[bool, float]:
        value = field(neo)
        if value is None:
            return (True, 0.0)
        return (False, -value if descending else value)

    return key


def sort_objects(
    objects: Sequence[NearEarthObject], order: SortOrder = SortOrder.APPROACH_ASC
) -> List[NearEarthObject]:
    # sorted() is stable, ties keep their incoming order
    return sorted(objects, key=sort_key(order))


def aggregate_feed(
    near_earth_objects: Mapping[str, Sequence[dict]],
    hazardous_only: bool = False,
    order: SortOrder = SortOrder.APPROACH_ASC,
) -> List[DateGroup]:
    """Build sorted date groups from a validated date-keyed feed mapping."""

    groups: List[DateGroup] = []
    for date in sorted(near_earth_objects):
        objects = [normalize_neo(raw) for raw in near_earth_objects[date]]
        if hazardous_only:
            objects = [neo for neo in objects if neo.hazardous]
        groups.append(DateGroup(date=date, objects=sort_objects(objects, order)))
    logger.debug(
        "Aggregated %d dates (hazardous_only=%s, order=%s)",
        len(groups),
        hazardous_only,
        SortOrder(order).value,
    )
    return groups


def merge_groups(
    held: Sequence[DateGroup],
    incoming: Sequence[DateGroup],
    order: SortOrder = SortOrder.APPROACH_ASC,
) -> List[DateGroup]:
    """Union ``incoming`` into ``held`` without duplicating object ids per date.

    Neither argument is modified; a new list of groups is returned, ordered
    by date. Dates that gained objects are re-sorted under ``order``.
    """

    by_date: Dict[str, List[NearEarthObject]] = {
        group.date: list(group.objects) for group in held
    }
    touched = set()
    for group in incoming:
        objects = by_date.setdefault(group.date, [])
        seen = {neo.id for neo in objects}
        for neo in group.objects:
            if neo.id in seen:
                continue
            objects.append(neo)
            seen.add(neo.id)
        touched.add(group.date)

    merged = []
    for date in sorted(by_date):
        objects = by_date[date]
        if date in touched:
            objects = sort_objects(objects, order)
        merged.append(DateGroup(date=date, objects=objects))
    return merged
