"""
Error types raised by the sequencing engine.
Every error carries enough context (flag, raw value or file) for a diagnostic.
"""

from typing import Any, Optional


class SequencerError(RuntimeError):
    """Base error for all mkseq failures."""


class ConfigurationError(SequencerError):
    """Raised when flags are mutually exclusive, malformed, or out of range."""

    def __init__(self, message: str, flag: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.flag = flag
        self.value = value


class MetadataError(SequencerError):
    """Base error for per-record metadata failures."""

    def __init__(self, message: str, file_id: Optional[str] = None):
        super().__init__(message)
        self.file_id = file_id


class MetadataReadError(MetadataError):
    """Raised when a record's geodata cannot be read. Aborts the run."""


class MetadataWriteError(MetadataError):
    """Raised when a record cannot be persisted. Aborts the run."""


class MathDomainError(SequencerError):
    """Raised for undefined math, e.g. the centroid of no points."""


__all__ = [
    "SequencerError",
    "ConfigurationError",
    "MetadataError",
    "MetadataReadError",
    "MetadataWriteError",
    "MathDomainError",
]
