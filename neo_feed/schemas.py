import datetime as dt
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, StrictBool, computed_field
from pydantic.alias_generators import to_camel


class SortOrder(str, Enum):
    APPROACH_ASC = "approach_asc"
    APPROACH_DESC = "approach_desc"
    SIZE_ASC = "size_asc"
    SIZE_DESC = "size_desc"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Approach(CamelModel):
    datetime: Optional[str] = None
    epoch_millis: Optional[int] = None
    velocity_km_per_sec: Optional[float] = None
    miss_distance_km: Optional[float] = None
    orbiting_body: Optional[str] = None


class NearEarthObject(CamelModel):
    id: str
    name: str
    hazardous: bool = False
    avg_diameter_km: Optional[float] = None
    nearest_approach: Optional[Approach] = None
    approaches_count: int = 0
    approaches: Optional[List[Approach]] = None
    reference_url: Optional[str] = None
    orbital_parameters: Optional[Dict[str, Any]] = None


class DateGroup(CamelModel):
    date: str
    objects: List[NearEarthObject] = []

    @computed_field
    @property
    def count(self) -> int:
        return len(self.objects)


class MergeRequest(CamelModel):
    held: List[DateGroup] = []
    incoming: List[DateGroup] = []
    sort: SortOrder = SortOrder.APPROACH_ASC


class DateRange(CamelModel):
    start_date: str
    end_date: str


# Upstream (NASA NeoWs) shapes. Only the fields the normalizer depends on
# are declared; anything else the provider sends is kept as-is.


class RawModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class RawVelocity(RawModel):
    kilometers_per_second: Optional[str] = None


class RawMissDistance(RawModel):
    kilometers: Optional[str] = None


class RawApproach(RawModel):
    close_approach_date: str
    close_approach_date_full: Optional[str] = None
    epoch_date_close_approach: Optional[int] = None
    relative_velocity: Optional[RawVelocity] = None
    miss_distance: Optional[RawMissDistance] = None
    orbiting_body: Optional[str] = None


class RawDiameterBounds(RawModel):
    estimated_diameter_min: float
    estimated_diameter_max: float


class RawDiameter(RawModel):
    kilometers: RawDiameterBounds


class RawNeo(RawModel):
    id: str
    name: str
    nasa_jpl_url: Optional[str] = None
    is_potentially_hazardous_asteroid: StrictBool
    estimated_diameter: RawDiameter
    close_approach_data: List[RawApproach]


class RawFeed(RawModel):
    element_count: Optional[int] = None
    near_earth_objects: Dict[str, List[RawNeo]]


class RawDetail(RawNeo):
    orbital_data: Optional[Dict[str, Any]] = None


# Favorites


class FavoriteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    neo_id: str
    name: Optional[str] = None
    hazardous: Optional[bool] = None
    nearest_approach: Optional[str] = None
    avg_diameter_km: Optional[float] = None
    created_at: dt.datetime


class FavoriteStatus(BaseModel):
    neo_id: str
    favorite: bool = False
