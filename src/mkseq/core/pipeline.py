"""
Sequence pipeline: smoothing, interpolation, bearing normalization and
metadata policies over a whole, time-ordered photo sequence.

Bearings are only known once the following point exists, so records leave
the pipeline one step behind: each step returns the records it emits and the
new pending record, and the last step emits two records.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .config import TransformationConfig
from .geo_point import GeoPoint
from .sequence import BEARING_REF_TRUE_NORTH, SequenceRecord
from ..utils.geo_utils import (
    bearing, centroid, greatest_distance, linear_increment, normalize_degrees, weighted_centroid
)
from ..utils.logger import get_logger
from ..utils.time_resolver import TimestampCandidates, resolve_candidates
from ..utils.window import select_window


@dataclass(frozen=True)
class PendingRecord:
    """Processed record waiting for the next point to learn its bearing."""
    record: SequenceRecord
    point: GeoPoint


def _weighted_mean(values: Sequence[Optional[float]], weights: np.ndarray) -> Optional[float]:
    """Weighted mean over the values that are present, None if there are none."""
    mask = np.array([v is not None for v in values])
    if not mask.any():
        return None
    present = np.array([v for v in values if v is not None], dtype=float)
    return float(np.average(present, weights=weights[mask]))


def _clamp_point(latitude: float, longitude: float) -> GeoPoint:
    # Floating error at the path ends may step just outside the valid range
    return GeoPoint(min(max(latitude, -90.0), 90.0), min(max(longitude, -180.0), 180.0))


class SequencePipeline:
    """
    Applies the configured transformations to a photo sequence.

    Stages per record, in order:
    1. Smoothing (centroid of the surrounding window)
    2. Linear interpolation between the first and last point
    3. Bearing normalization (deferred by one record)
    4. Altitude policy
    5. GPS time stamp synthesis
    6. Fixed metadata (area information, speed)

    Centering replaces the whole per-record pipeline.
    """

    def __init__(self, config: TransformationConfig):
        """
        Initialize pipeline.

        Args:
            config: Validated transformation configuration
        """
        self.config = config
        self.logger = get_logger(__name__)

    def run(self, records: Iterable[SequenceRecord]) -> Iterator[SequenceRecord]:
        """
        Transform a sequence according to the configuration.

        Args:
            records: Records in sequence order

        Yields:
            Fully processed records, in input order
        """
        if self.config.center.enabled:
            return self.center(records)
        return self.process(records)

    def window_size(self, count: int) -> int:
        """
        Resolve the smoothing window for a sequence of count records.

        Returns:
            Window size in [0, count]; values below 2 disable smoothing
        """
        nodes = self.config.smooth.nodes
        if nodes == 0:
            return count
        if nodes < 0:
            self.logger.warning(f"Smoothing window {nodes} is negative, using 0")
            return 0
        if nodes > count:
            self.logger.warning(
                f"Smoothing window {nodes} exceeds sequence length, using {count}"
            )
            return count
        return nodes

    def process(self, records: Iterable[SequenceRecord]) -> Iterator[SequenceRecord]:
        """
        Run stages 1-6 over the sequence.

        Smoothing and interpolation read the original positions, never
        positions already replaced earlier in the same pass.

        Raises:
            MathDomainError: If interpolation is requested for fewer than 2 records
        """
        records = list(records)
        count = len(records)
        if count == 0:
            return

        points = [r.point for r in records]

        nodes = 0
        if self.config.smooth.enabled:
            nodes = self.window_size(count)
            if nodes < 2:
                self.logger.warning(f"Smoothing window {nodes} is below 2, not smoothing")
                nodes = 0

        increment = None
        if self.config.interpolate_linear:
            increment = linear_increment(points[0], points[-1], count)
            self.logger.debug(f"Linear increment: {increment[0]:.8f}, {increment[1]:.8f}")

        altitudes = [r.altitude for r in records]
        speeds = [r.speed for r in records]
        timestamps = [r.timestamp.timestamp() if r.timestamp else None for r in records]

        pending: Optional[PendingRecord] = None
        for i, record in enumerate(records):
            point = record.point

            if nodes:
                point = self._smooth(record, i, nodes, points, altitudes, speeds, timestamps)

            if increment is not None:
                point = _clamp_point(
                    points[0].latitude + increment[0] * i,
                    points[0].longitude + increment[1] * i
                )

            record.point = point
            emitted, pending = self._step(pending, record, i >= count - 1)
            yield from emitted

    def _smooth(
        self,
        record: SequenceRecord,
        index: int,
        nodes: int,
        points: List[GeoPoint],
        altitudes: List[Optional[float]],
        speeds: List[Optional[float]],
        timestamps: List[Optional[float]]
    ) -> GeoPoint:
        """Replace the point (and optionally altitude, speed, time) by window averages."""
        lo, hi = select_window(len(points), index, nodes)

        if self.config.smooth.harmonic:
            weights = 1.0 / (np.abs(np.arange(lo, hi) - index) + 1.0)
        else:
            weights = np.ones(hi - lo)

        smoothed = weighted_centroid(points[lo:hi], weights)

        if self.config.smooth.altitude:
            record.altitude = _weighted_mean(altitudes[lo:hi], weights)
        if self.config.smooth.speed:
            record.speed = _weighted_mean(speeds[lo:hi], weights)
        if self.config.smooth.time:
            mean_time = _weighted_mean(timestamps[lo:hi], weights)
            if mean_time is not None:
                record.timestamp = datetime.fromtimestamp(mean_time, tz=timezone.utc)

        return smoothed

    def _step(
        self,
        pending: Optional[PendingRecord],
        record: SequenceRecord,
        is_last: bool
    ) -> Tuple[List[SequenceRecord], Optional[PendingRecord]]:
        """
        Apply stages 3-6 to one record and advance the pending slot.

        Returns:
            Tuple of (records to emit now, new pending record)
        """
        point = record.point

        # Stage 3: the bearing towards this point belongs to the previous record
        if self.config.normalize_bearing:
            record.bearing = None
            record.bearing_ref = BEARING_REF_TRUE_NORTH
            if pending is not None:
                direction = bearing(pending.point, point)
                pending.record.bearing = direction
                # Nothing to look ahead to from the last photo
                if is_last:
                    record.bearing = direction

        self._apply_altitude(record)
        self._apply_timestamp(record)
        self._apply_fixed_metadata(record)

        emitted = [pending.record] if pending is not None else []
        if is_last:
            emitted.append(record)
            return emitted, None
        return emitted, PendingRecord(record, point)

    def _apply_altitude(self, record: SequenceRecord):
        policy = self.config.altitude
        if policy.keep:
            if record.altitude is None:
                record.altitude = policy.value
        else:
            record.altitude = None

    def _apply_timestamp(self, record: SequenceRecord):
        policy = self.config.timestamp
        if not policy.enabled:
            return

        if record.timestamp is None:
            record.timestamp = resolve_candidates(
                record.candidates,
                fallback=True,
                utc=policy.utc,
                file_id=record.file_id
            )

        if policy.overwrite:
            record.timestamp = resolve_candidates(
                TimestampCandidates(modified=record.candidates.modified),
                file_id=record.file_id
            )

    def _apply_fixed_metadata(self, record: SequenceRecord):
        if self.config.area_information is not None:
            record.area_information = self.config.area_information
        if self.config.speed.enabled:
            record.speed = self.config.speed.value
            record.speed_ref = self.config.speed.unit

    def center(self, records: Iterable[SequenceRecord]) -> Iterator[SequenceRecord]:
        """
        Collapse the sequence onto its centroid with outward bearings.

        Every record gets the shared centroid and a bearing of
        degrees + 360 / N * index, wrapped into [0, 360). Altitude is removed.

        Yields:
            Centered records, in input order
        """
        records = list(records)
        count = len(records)
        if count == 0:
            return

        points = [r.point for r in records]
        middle = centroid(points)
        self.logger.info(
            f"Centering {count} photos on {middle.latitude:.7f}, {middle.longitude:.7f} "
            f"(radius {greatest_distance(middle, points):.7f}°)"
        )

        step = 360.0 / count
        for i, record in enumerate(records):
            record.point = GeoPoint(middle.latitude, middle.longitude)
            record.bearing = normalize_degrees(self.config.center.degrees + step * i)
            record.bearing_ref = self.config.center.degrees_ref
            record.altitude = None
            yield record
