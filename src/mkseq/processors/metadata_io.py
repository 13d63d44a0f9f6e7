"""
Metadata source and sink for photo sequences.
Reads photo metadata from a JSON manifest and writes processed records as JSON sidecars.
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Protocol, runtime_checkable

from ..core.geo_point import GeoPoint, validate_gps_coordinates
from ..core.sequence import RawMetadata, SequenceRecord
from ..errors import MetadataReadError, MetadataWriteError
from ..utils.logger import get_logger
from ..utils.time_resolver import TimestampCandidates, to_gps_date, to_gps_time


@runtime_checkable
class MetadataSource(Protocol):
    """Provides the metadata of one photo by identifier."""

    def read(self, file_id: str) -> RawMetadata:
        ...


@runtime_checkable
class MetadataSink(Protocol):
    """Persists one fully processed record."""

    def write(self, record: SequenceRecord):
        ...


def _optional_float(entry: dict, key: str) -> Optional[float]:
    value = entry.get(key)
    return None if value is None else float(value)


class JsonManifestSource:
    """
    Metadata source backed by a JSON manifest.

    The manifest holds one object per photo:

        {"records": [{"file": "IMG_0001.jpg", "latitude": 52.1, "longitude": 4.3,
                      "gps_date": "2016:05:01", "gps_time": [12, 0, 0], ...}]}

    Relative file names resolve against the manifest directory.
    """

    def __init__(self, manifest_path: str):
        """
        Initialize source.

        Args:
            manifest_path: Path to the JSON manifest

        Raises:
            MetadataReadError: If the manifest cannot be read or parsed
        """
        self.manifest_path = Path(manifest_path)
        self.logger = get_logger(__name__)

        try:
            with open(self.manifest_path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise MetadataReadError(
                f"Cannot read manifest {self.manifest_path}: {e}",
                file_id=str(self.manifest_path)
            ) from e

        entries = document.get('records') if isinstance(document, dict) else None
        if not isinstance(entries, list):
            raise MetadataReadError(
                f"Manifest {self.manifest_path} has no 'records' list",
                file_id=str(self.manifest_path)
            )

        self._entries: Dict[str, dict] = {}
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get('file'):
                raise MetadataReadError(
                    f"Manifest entry without 'file': {entry!r}",
                    file_id=str(self.manifest_path)
                )
            if str(entry['file']) in self._entries:
                raise MetadataReadError(
                    f"Duplicate manifest entry for {entry['file']}",
                    file_id=str(entry['file'])
                )
            self._entries[str(entry['file'])] = entry

        self.logger.debug(f"Loaded {len(self._entries)} manifest entries from {self.manifest_path}")

    @property
    def file_ids(self) -> List[str]:
        """Identifiers in manifest order."""
        return list(self._entries)

    def resolve_path(self, file_id: str) -> Path:
        path = Path(file_id)
        return path if path.is_absolute() else self.manifest_path.parent / path

    def read(self, file_id: str) -> RawMetadata:
        """
        Read the metadata of one photo.

        Raises:
            MetadataReadError: If the photo is unknown or a value is malformed
        """
        entry = self._entries.get(file_id)
        if entry is None:
            raise MetadataReadError(f"Unknown photo: {file_id}", file_id=file_id)

        try:
            point = None
            if entry.get('latitude') is not None and entry.get('longitude') is not None:
                lat, lon = float(entry['latitude']), float(entry['longitude'])
                if not validate_gps_coordinates(lat, lon):
                    raise ValueError(f"coordinates out of range: lat={lat}, lon={lon}")
                point = GeoPoint(lat, lon)

            gps_time = entry.get('gps_time')
            candidates = TimestampCandidates(
                gps_date=entry.get('gps_date'),
                gps_time=tuple(float(v) for v in gps_time) if gps_time else None,
                datetime_original=entry.get('datetime_original'),
                datetime_digitized=entry.get('datetime_digitized'),
                datetime=entry.get('datetime'),
                modified=self._modified(file_id, entry),
            )

            return RawMetadata(
                point=point,
                candidates=candidates,
                altitude=_optional_float(entry, 'altitude'),
                speed=_optional_float(entry, 'speed'),
                speed_ref=entry.get('speed_ref', 'K'),
                bearing=_optional_float(entry, 'bearing'),
                bearing_ref=entry.get('bearing_ref', 'T'),
                area_information=entry.get('area_information'),
            )
        except (TypeError, ValueError) as e:
            raise MetadataReadError(f"{file_id}: invalid metadata: {e}", file_id=file_id) from e

    def _modified(self, file_id: str, entry: dict) -> Optional[datetime]:
        """Modification time from the manifest, else from the file system."""
        value = entry.get('modified')
        if value is not None:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)

        path = self.resolve_path(file_id)
        if path.exists():
            return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        return None


class JsonSidecarWriter:
    """
    Writes processed records as JSON sidecar files.

    Each record is written as soon as it is handed over, so a failed run
    leaves the sidecars of all earlier records in place.
    """

    SUMMARY_NAME = "sequence.json"

    def __init__(self, output_dir: str, preserve_mtime: bool = False):
        """
        Initialize writer.

        Args:
            output_dir: Directory receiving one <photo>.json per record
            preserve_mtime: Give each sidecar the modification time of its photo
        """
        self.output_dir = Path(output_dir)
        self.preserve_mtime = preserve_mtime
        self.logger = get_logger(__name__)
        self.entries: List[dict] = []

    @staticmethod
    def to_entry(record: SequenceRecord) -> dict:
        """Serialize one record into GPS tag style fields."""
        lat_dms, lon_dms = record.point.to_dms()
        entry = {
            'file': record.file_id,
            'latitude': record.point.latitude,
            'longitude': record.point.longitude,
            'gps_latitude': list(lat_dms),
            'gps_latitude_ref': record.point.latitude_ref,
            'gps_longitude': list(lon_dms),
            'gps_longitude_ref': record.point.longitude_ref,
        }

        if record.altitude is not None:
            entry['gps_altitude'] = abs(record.altitude)
            entry['gps_altitude_ref'] = 1 if record.altitude < 0 else 0

        if record.bearing is not None:
            entry['gps_img_direction'] = record.bearing
            entry['gps_img_direction_ref'] = record.bearing_ref

        if record.speed is not None:
            entry['gps_speed'] = record.speed
            entry['gps_speed_ref'] = record.speed_ref

        if record.timestamp is not None:
            entry['gps_date_stamp'] = to_gps_date(record.timestamp)
            entry['gps_time_stamp'] = list(to_gps_time(record.timestamp))
            entry['timestamp_iso'] = record.timestamp.astimezone(timezone.utc).isoformat()

        if record.area_information is not None:
            entry['gps_area_information'] = record.area_information

        return entry

    def write(self, record: SequenceRecord):
        """
        Write the sidecar of one record.

        Raises:
            MetadataWriteError: If the sidecar cannot be written
        """
        entry = self.to_entry(record)
        sidecar = self.output_dir / f"{Path(record.file_id).name}.json"

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(sidecar, 'w', encoding='utf-8') as f:
                json.dump(entry, f, indent=2, ensure_ascii=False)

            modified = record.candidates.modified
            if self.preserve_mtime and modified is not None:
                mtime = modified.timestamp()
                os.utime(sidecar, (mtime, mtime))
        except OSError as e:
            raise MetadataWriteError(
                f"Cannot write {sidecar}: {e}", file_id=record.file_id
            ) from e

        self.entries.append(entry)
        self.logger.debug(f"Wrote {sidecar}")

    def write_summary(self) -> Path:
        """
        Write all written records, in sequence order, as one JSON document.

        Returns:
            Path to written summary file
        """
        summary_path = self.output_dir / self.SUMMARY_NAME
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(summary_path, 'w', encoding='utf-8') as f:
                json.dump({
                    'metadata': {
                        'format': 'mkseq sequence',
                        'version': '1.0',
                        'total_records': len(self.entries)
                    },
                    'records': self.entries
                }, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise MetadataWriteError(
                f"Cannot write {summary_path}: {e}", file_id=str(summary_path)
            ) from e

        self.logger.info(f"Sequence summary written to: {summary_path}")
        return summary_path
