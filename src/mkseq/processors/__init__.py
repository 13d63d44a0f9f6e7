"""Processing modules for mkseq."""

from .metadata_io import JsonManifestSource, JsonSidecarWriter
from .sequencer import Sequencer

__all__ = ["JsonManifestSource", "JsonSidecarWriter", "Sequencer"]
