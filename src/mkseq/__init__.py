"""
mkseq - Geotagged Photo Sequencer
Orders geotagged photos by time and rewrites their positions, bearings and
GPS metadata so the sequence can be published to map services.
"""

__version__ = "1.0.0"
__author__ = "mkseq Team"

from .core.config import TransformationConfig
from .core.geo_point import GeoPoint
from .core.pipeline import SequencePipeline
from .processors.sequencer import Sequencer

__all__ = ["TransformationConfig", "GeoPoint", "SequencePipeline", "Sequencer", "__version__"]
