"""Models for coordinates, GPS samples and places."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

EARTH_RADIUS_M = 6371000


@dataclass(frozen=True)
class GPSCoordinates:
    """GPS coordinates with optional altitude."""

    latitude: float
    longitude: float
    altitude: Optional[float] = None

    def __str__(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"

    def distance_to(self, other: "GPSCoordinates") -> float:
        """Calculate distance to other coordinates in metres (haversine formula).

        Args:
            other: Target GPS coordinates

        Returns:
            Distance in metres
        """
        return haversine_m(self.latitude, self.longitude, other.latitude, other.longitude)


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in metres."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


@dataclass(frozen=True)
class Sample:
    """A single locomotion sample. Any field may be missing in exports."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    timestamp: Optional[datetime] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def coordinates(self) -> Optional[GPSCoordinates]:
        if not self.has_coordinates:
            return None
        return GPSCoordinates(self.latitude, self.longitude, self.altitude)


@dataclass(frozen=True)
class Place:
    """Place embedded in a timeline item."""

    id: Optional[str] = None
    name: Optional[str] = None
    center: Optional[GPSCoordinates] = None
    radius_meters: Optional[float] = None
