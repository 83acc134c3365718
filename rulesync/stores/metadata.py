"""Opportunistic build stamp for the ``00-meta.yaml`` rules document."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..logging import get_logger

METADATA_FILENAME = "00-meta.yaml"

_LOGGER = get_logger("stores.metadata")


def stamp_metadata(
    source_dir: Path,
    fingerprint: str,
    *,
    now: Optional[datetime] = None,
) -> Optional[Dict[str, Any]]:
    """Set ``build_hash`` and ``build_timestamp`` on an existing metadata document.

    Returns the stamped mapping, or ``None`` when the document is missing or
    cannot be stamped. The document is never created here.
    """
    path = Path(source_dir) / METADATA_FILENAME
    if not path.is_file():
        return None

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _LOGGER.warning("Skipping metadata stamp; %s could not be read: %s", path.name, exc)
        return None

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        _LOGGER.warning("Skipping metadata stamp; %s is not valid YAML: %s", path.name, exc)
        return None

    if loaded is None:
        meta: Dict[str, Any] = {}
    elif isinstance(loaded, dict):
        meta = loaded
    else:
        _LOGGER.warning("Skipping metadata stamp; %s must contain a mapping", path.name)
        return None

    timestamp = (now or datetime.now(UTC)).isoformat().replace("+00:00", "Z")
    meta["build_timestamp"] = timestamp
    meta["build_hash"] = fingerprint
    try:
        path.write_text(
            yaml.safe_dump(meta, sort_keys=False, allow_unicode=True),
            encoding="utf-8",
        )
    except OSError as exc:
        _LOGGER.warning("Skipping metadata stamp; %s could not be written: %s", path.name, exc)
        return None
    _LOGGER.info("Metadata updated (hash: %s...)", fingerprint[:8])
    return meta


__all__ = ["METADATA_FILENAME", "stamp_metadata"]
