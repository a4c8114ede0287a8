"""Decide which provider serves a coordinate.

The domestic region is approximated by a handful of latitude/longitude boxes
rather than real borders. Points in southern Canada or northern Mexico that
fall inside a box classify as domestic; NWS then rejects them and the caller
gets an UnsupportedLocation error.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from . import config
from .models import Coordinates


class Region(str, Enum):
    DOMESTIC = "domestic"
    GLOBAL = "global"


@dataclass(frozen=True)
class BoundingBox:
    name: str
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def __post_init__(self):
        if self.min_lat > self.max_lat or self.min_lon > self.max_lon:
            raise ValueError(f"Bounding box {self.name!r} has inverted bounds")

    def contains(self, latitude: float, longitude: float) -> bool:
        # Inclusive on every edge so boundary points always land the same way
        return self.min_lat <= latitude <= self.max_lat and self.min_lon <= longitude <= self.max_lon


DEFAULT_DOMESTIC_REGIONS = (
    BoundingBox("contiguous_us", 24.0, 49.5, -125.0, -66.5),
    BoundingBox("alaska", 51.0, 71.5, -180.0, -129.9),
    # Western Aleutians sit past the antimeridian
    BoundingBox("aleutians_west", 51.0, 53.5, 172.0, 180.0),
    BoundingBox("hawaii", 18.5, 22.5, -161.0, -154.5),
    BoundingBox("puerto_rico_vi", 17.5, 18.7, -67.5, -64.3),
    BoundingBox("guam_nmi", 13.0, 20.7, 144.5, 146.2),
    BoundingBox("american_samoa", -14.7, -10.9, -171.2, -168.0),
)


def parse_regions(text: str) -> tuple[BoundingBox, ...]:
    """Parse `name:min_lat,max_lat,min_lon,max_lon;...` into bounding boxes."""
    boxes = []
    for chunk in text.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        name, sep, bounds = chunk.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Region {chunk!r} must look like name:min_lat,max_lat,min_lon,max_lon")
        try:
            values = [float(v) for v in bounds.split(",")]
        except ValueError:
            raise ValueError(f"Region {name.strip()!r} has non-numeric bounds: {bounds!r}") from None
        if len(values) != 4:
            raise ValueError(f"Region {name.strip()!r} needs 4 bounds, got {len(values)}")
        boxes.append(BoundingBox(name.strip(), *values))
    if not boxes:
        raise ValueError("No domestic regions defined")
    return tuple(boxes)


def load_regions() -> tuple[BoundingBox, ...]:
    """Domestic regions from WEATHER_DOMESTIC_REGIONS, or the built-in defaults."""
    if config.DOMESTIC_REGIONS:
        return parse_regions(config.DOMESTIC_REGIONS)
    return DEFAULT_DOMESTIC_REGIONS


def classify(coordinates: Coordinates, regions: Optional[Iterable[BoundingBox]] = None) -> Region:
    """Return DOMESTIC when any domestic box contains the point, else GLOBAL."""
    boxes = DEFAULT_DOMESTIC_REGIONS if regions is None else regions
    for box in boxes:
        if box.contains(coordinates.latitude, coordinates.longitude):
            return Region.DOMESTIC
    return Region.GLOBAL
