"""
Immutable geographic position in signed decimal degrees.
Includes degree <-> (degrees, minutes, seconds) conversion as stored in GPS tags.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple


DMS = Tuple[float, float, float]

LATITUDE_REF_NORTH = "N"
LATITUDE_REF_SOUTH = "S"
LONGITUDE_REF_EAST = "E"
LONGITUDE_REF_WEST = "W"


def validate_gps_coordinates(lat: float, lon: float) -> bool:
    """
    Validate GPS coordinates are within valid ranges.

    Args:
        lat: Latitude
        lon: Longitude

    Returns:
        True if coordinates are valid
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180


def degrees_to_dms(value: float) -> DMS:
    """
    Split an unsigned decimal degree value into degrees, minutes and seconds.

    Degrees and minutes are whole numbers, seconds keep the remaining fraction.
    """
    value = abs(value)
    degrees = math.floor(value)
    minutes_full = (value - degrees) * 60
    minutes = math.floor(minutes_full)
    seconds = (minutes_full - minutes) * 60
    return float(degrees), float(minutes), seconds


def dms_to_degrees(dms: DMS, ref: str) -> float:
    """Join (degrees, minutes, seconds) and a hemisphere ref into signed degrees."""
    degrees, minutes, seconds = dms
    value = degrees + minutes / 60.0 + seconds / 3600.0
    if ref.upper() in (LATITUDE_REF_SOUTH, LONGITUDE_REF_WEST):
        return -value
    return value


@dataclass(frozen=True)
class GeoPoint:
    """Single geographic position."""
    latitude: float
    longitude: float
    altitude: Optional[float] = None  # meters, negative = below reference

    def __post_init__(self):
        if not validate_gps_coordinates(self.latitude, self.longitude):
            raise ValueError(
                f"Invalid GPS coordinates: lat={self.latitude}, lon={self.longitude}"
            )

    @classmethod
    def zero(cls) -> 'GeoPoint':
        """Point synthesized for records without a position."""
        return cls(0.0, 0.0)

    @property
    def latitude_ref(self) -> str:
        return LATITUDE_REF_NORTH if self.latitude >= 0.0 else LATITUDE_REF_SOUTH

    @property
    def longitude_ref(self) -> str:
        return LONGITUDE_REF_EAST if self.longitude >= 0.0 else LONGITUDE_REF_WEST

    def to_dms(self) -> Tuple[DMS, DMS]:
        """
        Convert to GPS tag representation.

        Returns:
            Tuple of (latitude_dms, longitude_dms), both unsigned; use
            latitude_ref and longitude_ref for the hemispheres
        """
        return degrees_to_dms(self.latitude), degrees_to_dms(self.longitude)

    @classmethod
    def from_dms(
        cls,
        latitude: DMS,
        latitude_ref: str,
        longitude: DMS,
        longitude_ref: str,
        altitude: Optional[float] = None
    ) -> 'GeoPoint':
        """Build a point from GPS tag (degrees, minutes, seconds) values."""
        return cls(
            dms_to_degrees(latitude, latitude_ref),
            dms_to_degrees(longitude, longitude_ref),
            altitude
        )

    def with_altitude(self, altitude: Optional[float]) -> 'GeoPoint':
        return GeoPoint(self.latitude, self.longitude, altitude)
