"""Core modules for mkseq."""

# geo_point first: the utils package depends on it
from .geo_point import GeoPoint
from .sequence import RawMetadata, SequenceRecord
from .config import TransformationConfig
from .pipeline import SequencePipeline

__all__ = ["GeoPoint", "RawMetadata", "SequenceRecord", "TransformationConfig", "SequencePipeline"]
