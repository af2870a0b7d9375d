"""Turn raw NeoWs records into :class:`NearEarthObject` instances.

Every field goes through a parse-or-null helper: a missing or malformed
optional value becomes ``None`` and never aborts the enclosing record.
"""

import math
from typing import Any, List, Mapping, Optional

from .schemas import Approach, NearEarthObject


def parse_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_int(value: Any) -> Optional[int]:
    number = parse_float(value)
    if number is None:
        return None
    return int(number)


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in {"true", "1"}
    return False


def parse_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _nested(record: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(record, Mapping):
            return None
        record = record.get(key)
    return record


def normalize_approach(raw: Mapping[str, Any]) -> Approach:
    return Approach(
        datetime=parse_str(raw.get("close_approach_date_full"))
        or parse_str(raw.get("close_approach_date")),
        epoch_millis=parse_int(raw.get("epoch_date_close_approach")),
        velocity_km_per_sec=parse_float(
            _nested(raw, "relative_velocity", "kilometers_per_second")
        ),
        miss_distance_km=parse_float(_nested(raw, "miss_distance", "kilometers")),
        orbiting_body=parse_str(raw.get("orbiting_body")),
    )


def average_diameter(raw: Mapping[str, Any]) -> Optional[float]:
    bounds = _nested(raw, "estimated_diameter", "kilometers")
    low = parse_float(_nested(bounds, "estimated_diameter_min"))
    high = parse_float(_nested(bounds, "estimated_diameter_max"))
    if low is None or high is None:
        return None
    return (low + high) / 2


def nearest_approach(approaches: List[Approach]) -> Optional[Approach]:
    """Earliest approach by epoch; unknown epochs rank last."""

    if not approaches:
        return None
    ranked = sorted(
        approaches,
        key=lambda a: (a.epoch_millis is None, a.epoch_millis or 0),
    )
    return ranked[0]


def normalize_neo(raw: Mapping[str, Any]) -> NearEarthObject:
    raw_approaches = raw.get("close_approach_data") or []
    approaches = [
        normalize_approach(item) for item in raw_approaches if isinstance(item, Mapping)
    ]
    return NearEarthObject(
        id=str(raw["id"]),
        name=str(raw["name"]),
        hazardous=parse_bool(raw.get("is_potentially_hazardous_asteroid")),
        avg_diameter_km=average_diameter(raw),
        nearest_approach=nearest_approach(approaches),
        approaches_count=len(raw_approaches),
        reference_url=parse_str(raw.get("nasa_jpl_url")),
    )


def normalize_detail(raw: Mapping[str, Any], with_orbit: bool = False) -> NearEarthObject:
    """Normalize a detail record, keeping every approach in upstream order."""

    neo = normalize_neo(raw)
    neo.approaches = [
        normalize_approach(item)
        for item in raw.get("close_approach_data") or []
        if isinstance(item, Mapping)
    ]
    orbital = raw.get("orbital_data")
    if with_orbit and isinstance(orbital, Mapping):
        neo.orbital_parameters = dict(orbital)
    return neo
