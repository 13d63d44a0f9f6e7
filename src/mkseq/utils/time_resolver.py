"""
Timestamp resolution for photo records.
Picks one authoritative instant per record from a priority-ordered set of sources.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from ..errors import MetadataReadError
from .logger import get_logger

if TYPE_CHECKING:
    from ..processors.metadata_io import MetadataSource


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

EXIF_DATETIME_PATTERN = re.compile(
    r"\d+:(0?\d|1[0-2]):([0-2]?\d|3[0-1])\s+(0?\d|1\d|2[0-3])(:[0-5]?\d){2}"
)
EXIF_DATETIME_SPLIT_PATTERN = re.compile(r":|\s+")
GPS_DATE_PATTERN = re.compile(r"\d+:\d{1,2}:\d{1,2}")

logger = get_logger(__name__)


@dataclass(frozen=True)
class TimestampCandidates:
    """Raw timestamp sources of one record, in priority order."""
    gps_date: Optional[str] = None  # "YYYY:MM:DD", UTC
    gps_time: Optional[Tuple[float, ...]] = None  # (hours, minutes, seconds), UTC
    datetime_original: Optional[str] = None  # "YYYY:MM:DD HH:MM:SS", local time
    datetime_digitized: Optional[str] = None
    datetime: Optional[str] = None
    modified: Optional[datetime] = None  # file modification time, timezone-aware

    @property
    def has_gps_timestamp(self) -> bool:
        return bool(self.gps_date)


def parse_exif_datetime(exif_datetime: str, utc: bool = False) -> datetime:
    """
    Convert an EXIF date time string into a timezone-aware datetime.

    Args:
        exif_datetime: String of the form "YYYY:MM:DD HH:MM:SS"
        utc: Interpret the value as UTC instead of local time

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the string is empty or improperly formatted
    """
    if not exif_datetime or not EXIF_DATETIME_PATTERN.fullmatch(exif_datetime.strip()):
        raise ValueError(f"Invalid EXIF date time: {exif_datetime!r}")

    year, month, day, hour, minute, second = (
        int(token) for token in EXIF_DATETIME_SPLIT_PATTERN.split(exif_datetime.strip())
    )
    naive = datetime(year, month, day, hour, minute, second)

    if utc:
        return naive.replace(tzinfo=timezone.utc)
    return naive.astimezone()


def parse_gps_datetime(gps_date: str, gps_time: Optional[Sequence[float]] = None) -> datetime:
    """
    Convert GPS date and time stamps into a UTC datetime.

    GPS date time is always in UTC. Missing time components count as zero.

    Raises:
        ValueError: If the date stamp is improperly formatted
    """
    if not gps_date or not GPS_DATE_PATTERN.fullmatch(gps_date.strip()):
        raise ValueError(f"Invalid GPS date stamp: {gps_date!r}")

    year, month, day = (int(token) for token in gps_date.strip().split(":"))
    result = datetime(year, month, day, tzinfo=timezone.utc)

    if gps_time:
        parts = list(gps_time) + [0.0] * (3 - len(gps_time))
        hours, minutes, seconds = (float(p or 0.0) for p in parts[:3])
        result += timedelta(
            hours=int(hours),
            minutes=int(minutes),
            milliseconds=round(seconds * 1000)
        )

    return result


def to_gps_date(instant: datetime) -> str:
    """Format an instant as a GPS date stamp ("YYYY:MM:DD", UTC)."""
    instant = instant.astimezone(timezone.utc)
    return f"{instant.year:04d}:{instant.month:02d}:{instant.day:02d}"


def to_gps_time(instant: datetime) -> Tuple[float, float, float]:
    """Format an instant as a GPS time stamp (hours, minutes, seconds with millis)."""
    instant = instant.astimezone(timezone.utc)
    seconds = instant.second + (instant.microsecond // 1000) / 1000.0
    return float(instant.hour), float(instant.minute), seconds


def resolve_candidates(
    candidates: TimestampCandidates,
    fallback: bool = True,
    utc: bool = False,
    file_id: Optional[str] = None
) -> Optional[datetime]:
    """
    Resolve one instant from a record's timestamp sources.

    Priority: GPS date/time stamp, then (with fallback) EXIF DateTimeOriginal,
    DateTimeDigitized, DateTime, and finally the file modification time.

    Args:
        candidates: Timestamp sources of the record
        fallback: Fall back to the EXIF and file system time stamps
        utc: Interpret EXIF time stamps as UTC instead of local time
        file_id: Record identifier used in error messages

    Returns:
        Timezone-aware datetime, or None without GPS stamp and fallback

    Raises:
        MetadataReadError: If the selected time stamp is malformed
    """
    try:
        if candidates.has_gps_timestamp:
            return parse_gps_datetime(candidates.gps_date, candidates.gps_time)
        if not fallback:
            return None

        for exif_value in (
            candidates.datetime_original,
            candidates.datetime_digitized,
            candidates.datetime,
        ):
            if exif_value:
                return parse_exif_datetime(exif_value, utc=utc)
    except ValueError as e:
        raise MetadataReadError(f"{file_id or 'record'}: {e}", file_id=file_id) from e

    if candidates.modified is None:
        logger.warning(f"No time stamp available for {file_id or 'record'}, using epoch")
        return EPOCH

    modified = candidates.modified
    if modified.tzinfo is None:
        modified = modified.replace(tzinfo=timezone.utc)
    return modified


class TemporalResolver:
    """
    Orders records by their resolved time stamps.

    Resolved instants are cached per identifier, so sorting reads each
    record's metadata once.
    """

    def __init__(self, source: 'MetadataSource', fallback: bool = True, utc: bool = False):
        """
        Initialize resolver.

        Args:
            source: Metadata source providing read(file_id)
            fallback: Fall back to EXIF and file system time stamps
            utc: Interpret EXIF time stamps as UTC
        """
        self.source = source
        self.fallback = fallback
        self.utc = utc
        self._cache: Dict[str, datetime] = {}

    def resolve(self, file_id: str) -> datetime:
        """
        Resolve the instant of one record.

        Unreadable metadata is logged and resolves to the epoch.

        Returns:
            Timezone-aware datetime (the epoch when nothing is available)
        """
        if file_id in self._cache:
            return self._cache[file_id]

        try:
            metadata = self.source.read(file_id)
            instant = resolve_candidates(
                metadata.candidates,
                fallback=self.fallback,
                utc=self.utc,
                file_id=file_id
            ) or EPOCH
        except MetadataReadError as e:
            logger.error(f"Cannot read time stamp of {file_id}: {e}")
            instant = EPOCH

        self._cache[file_id] = instant
        return instant

    def compare(self, a: str, b: str) -> int:
        """Compare two records by resolved instant (-1, 0 or 1)."""
        ta, tb = self.resolve(a), self.resolve(b)
        return (ta > tb) - (ta < tb)

    def sort(self, file_ids: Sequence[str]) -> List[str]:
        """
        Sort records into sequence order.

        Complexity: O(n log n), stable for equal instants
        """
        return sorted(file_ids, key=self.resolve)

    def clear(self):
        """Clear cached instants."""
        self._cache.clear()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fallback={self.fallback}, utc={self.utc})"
