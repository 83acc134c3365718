"""Persisted sidecar artifacts kept inside the rules source directory."""

from .fingerprint import (
    FINGERPRINT_FILENAME,
    FingerprintStatus,
    compare,
    compute_fingerprint,
    persist,
    read_stored,
    remove_stored,
)
from .metadata import METADATA_FILENAME, stamp_metadata

__all__ = [
    "FINGERPRINT_FILENAME",
    "FingerprintStatus",
    "METADATA_FILENAME",
    "compare",
    "compute_fingerprint",
    "persist",
    "read_stored",
    "remove_stored",
    "stamp_metadata",
]
