"""
Main sequencer orchestrating all components.
Handles a complete run from unordered photo identifiers to written records.
"""

from typing import List, Sequence

from tqdm import tqdm

from ..core.config import TransformationConfig
from ..core.pipeline import SequencePipeline
from ..core.sequence import SequenceRecord
from ..errors import MetadataWriteError
from ..utils.geo_utils import haversine_distance
from ..utils.logger import setup_logger, get_logger
from ..utils.time_resolver import TemporalResolver
from .metadata_io import MetadataSink, MetadataSource


class Sequencer:
    """
    Main sequencer class.

    Orchestrates the complete run:
    1. Sort photos by resolved time stamp
    2. Load metadata into working records
    3. Transform the sequence and hand each record to the sink
    4. Report statistics

    Any unreadable or unwritable record aborts the run. Records written
    before the failure stay written.
    """

    def __init__(
        self,
        config: TransformationConfig,
        source: MetadataSource,
        sink: MetadataSink,
        show_progress: bool = True
    ):
        """
        Initialize sequencer.

        Args:
            config: Transformation configuration
            source: Metadata source providing read(file_id)
            sink: Metadata sink providing write(record)
            show_progress: Display tqdm progress bars
        """
        self.config = config
        config.validate()

        setup_logger(
            "mkseq",
            level=config.log_level,
            log_file=config.log_file
        )
        self.logger = get_logger(__name__)

        self.source = source
        self.sink = sink
        self.show_progress = show_progress
        self.resolver = TemporalResolver(source, fallback=True, utc=config.timestamp.utc)
        self.pipeline = SequencePipeline(config)

        self.records: List[SequenceRecord] = []

        self.logger.debug(f"Sequencer initialized ({config})")

    def order(self, file_ids: Sequence[str]) -> List[str]:
        """Sort identifiers into sequence order by resolved time stamp."""
        return self.resolver.sort(file_ids)

    def load(self, file_ids: Sequence[str]) -> List[SequenceRecord]:
        """
        Read every photo's metadata into a working record.

        Raises:
            MetadataReadError: On the first unreadable photo
        """
        records = []
        for file_id in tqdm(
            file_ids,
            desc="Reading metadata",
            unit="photo",
            disable=not self.show_progress
        ):
            record = SequenceRecord.from_metadata(file_id, self.source.read(file_id))
            self.logger.debug(record.describe(utc=self.config.timestamp.utc))
            records.append(record)
        return records

    def run(self, file_ids: Sequence[str]) -> List[SequenceRecord]:
        """
        Sort, transform and write a photo sequence.

        Args:
            file_ids: Photo identifiers in any order

        Returns:
            Written records in sequence order

        Raises:
            SequencerError: On the first failing photo or invalid math
        """
        self.logger.info("=" * 60)
        self.logger.info(f"Starting sequence of {len(file_ids)} photos")
        self.logger.info("=" * 60)

        self.logger.info("Step 1/4: Sorting photos by time stamp")
        ordered = self.order(file_ids)

        self.logger.info("Step 2/4: Reading metadata")
        records = self.load(ordered)

        self.logger.info("Step 3/4: Transforming and writing records")
        self.records = []
        for record in tqdm(
            self.pipeline.run(records),
            total=len(records),
            desc="Writing",
            unit="photo",
            disable=not self.show_progress
        ):
            try:
                self.sink.write(record)
            except OSError as e:
                raise MetadataWriteError(
                    f"Cannot write {record.file_id}: {e}", file_id=record.file_id
                ) from e
            self.records.append(record)

        self.logger.info("Step 4/4: Finalization")
        stats = self.get_statistics()
        if stats['num_records']:
            self.logger.info(
                f"Sequence: {stats['num_records']} photos, "
                f"{stats['duration_s']:.1f}s duration, "
                f"{stats['total_distance_m']:.1f}m distance"
            )

        return self.records

    def get_statistics(self) -> dict:
        """
        Get statistics about the written sequence.

        Returns:
            Dictionary with sequence statistics
        """
        if not self.records:
            return {'num_records': 0}

        total_distance = sum(
            haversine_distance(
                a.point.latitude, a.point.longitude,
                b.point.latitude, b.point.longitude
            )
            for a, b in zip(self.records, self.records[1:])
        )

        timestamps = [r.timestamp for r in self.records if r.timestamp is not None]
        duration = (max(timestamps) - min(timestamps)).total_seconds() if timestamps else 0.0

        return {
            'num_records': len(self.records),
            'total_distance_m': total_distance,
            'duration_s': duration,
            'first_file': self.records[0].file_id,
            'last_file': self.records[-1].file_id,
        }
