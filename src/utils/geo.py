from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BoundingBox:
    min_lng: float
    min_lat: float
    max_lng: float
    max_lat: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    def as_leaflet_bounds(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Return ((south, west), (north, east)) as Leaflet expects."""
        return ((self.min_lat, self.min_lng), (self.max_lat, self.max_lng))
