"""Utility modules for mkseq."""

from .logger import setup_logger, get_logger
from .geo_utils import bearing, centroid, distance, haversine_distance
from .window import select_window
from .time_resolver import TemporalResolver

__all__ = [
    "setup_logger",
    "get_logger",
    "bearing",
    "centroid",
    "distance",
    "haversine_distance",
    "select_window",
    "TemporalResolver",
]
