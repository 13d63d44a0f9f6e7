"""
Sequence records: one mutable working record per photo.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .geo_point import GeoPoint
from ..errors import MetadataReadError
from ..utils.logger import get_logger
from ..utils.time_resolver import TimestampCandidates, parse_gps_datetime


BEARING_REF_TRUE_NORTH = "T"
BEARING_REF_MAGNETIC_NORTH = "M"

SPEED_UNITS = {
    "K": "km/h",
    "M": "mph",
    "N": "knots",
}


@dataclass(frozen=True)
class RawMetadata:
    """Metadata of one photo as delivered by a metadata source."""
    point: Optional[GeoPoint] = None
    candidates: TimestampCandidates = field(default_factory=TimestampCandidates)
    altitude: Optional[float] = None
    speed: Optional[float] = None
    speed_ref: str = "K"
    bearing: Optional[float] = None
    bearing_ref: str = BEARING_REF_TRUE_NORTH
    area_information: Optional[str] = None


@dataclass
class SequenceRecord:
    """Single photo in a capture sequence."""
    file_id: str
    point: GeoPoint
    candidates: TimestampCandidates = field(default_factory=TimestampCandidates)
    timestamp: Optional[datetime] = None  # GPS time stamp, UTC
    speed: Optional[float] = None
    speed_ref: str = "K"
    bearing: Optional[float] = None  # degrees
    bearing_ref: str = BEARING_REF_TRUE_NORTH
    altitude: Optional[float] = None  # meters
    area_information: Optional[str] = None

    @classmethod
    def from_metadata(cls, file_id: str, metadata: RawMetadata) -> 'SequenceRecord':
        """
        Build a working record from source metadata.

        A missing position is replaced by the zero point. The GPS time stamp
        is taken over only when the GPS date stamp is present.
        """
        point = metadata.point
        if point is None:
            get_logger(__name__).warning(f"{file_id}: no GPS position, using 0,0")
            point = GeoPoint.zero()

        altitude = metadata.altitude if metadata.altitude is not None else point.altitude

        timestamp = None
        if metadata.candidates.has_gps_timestamp:
            try:
                timestamp = parse_gps_datetime(
                    metadata.candidates.gps_date,
                    metadata.candidates.gps_time
                )
            except ValueError as e:
                raise MetadataReadError(f"{file_id}: {e}", file_id=file_id) from e

        return cls(
            file_id=file_id,
            point=point,
            candidates=metadata.candidates,
            timestamp=timestamp,
            speed=metadata.speed,
            speed_ref=metadata.speed_ref,
            bearing=metadata.bearing,
            bearing_ref=metadata.bearing_ref,
            altitude=altitude,
            area_information=metadata.area_information,
        )

    def describe(self, utc: bool = False, iso: bool = False) -> str:
        """
        Human readable multi-line summary of the record.

        Args:
            utc: Show time stamps in UTC instead of local time
            iso: Use ISO 8601 time stamps
        """
        lines = [self.file_id]
        lat_dms, lon_dms = self.point.to_dms()
        lines.append(
            f"\tposition: {lat_dms[0]:.0f}°{lat_dms[1]:.0f}'{lat_dms[2]:.3f}\"{self.point.latitude_ref} "
            f"{lon_dms[0]:.0f}°{lon_dms[1]:.0f}'{lon_dms[2]:.3f}\"{self.point.longitude_ref}"
        )
        if self.altitude is not None:
            lines.append(f"\taltitude: {self.altitude:.1f} m")
        if self.bearing is not None:
            lines.append(f"\tbearing: {self.bearing:.2f}° {self.bearing_ref}")
        if self.speed is not None:
            lines.append(f"\tspeed: {self.speed:.2f} {SPEED_UNITS.get(self.speed_ref, self.speed_ref)}")
        if self.timestamp is not None:
            instant = self.timestamp.astimezone(timezone.utc if utc else None)
            text = instant.isoformat() if iso else instant.strftime('%Y-%m-%d %H:%M:%S %Z')
            lines.append(f"\tdate time: {text}")
        if self.area_information:
            lines.append(f"\tarea: {self.area_information}")
        return "\n".join(lines)
