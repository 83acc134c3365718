"""Content fingerprint of the rules directory and its ``.build_hash`` sidecar."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from ..loader import load_rule_files
from ..models import RuleFile

FINGERPRINT_FILENAME = ".build_hash"


@dataclass
class FingerprintStatus:
    """Outcome of comparing the current rules against the stored fingerprint."""

    computed: str
    stored: Optional[str]
    needs_build: bool


def compute_fingerprint(rule_files: Sequence[RuleFile]) -> str:
    """Hash the content of ``rule_files`` in the order given.

    File names and titles are not hashed; renaming a file only changes the
    digest when it changes the order of the contents.
    """
    digest = hashlib.sha256()
    for rule_file in rule_files:
        digest.update(rule_file.content.encode("utf-8"))
    return digest.hexdigest()


def read_stored(source_dir: Path) -> Optional[str]:
    """Return the persisted fingerprint, or ``None`` when absent or unreadable."""
    path = Path(source_dir) / FINGERPRINT_FILENAME
    try:
        return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return None


def compare(source_dir: Path) -> FingerprintStatus:
    """Compare the current rules with the sidecar without writing anything."""
    computed = compute_fingerprint(load_rule_files(Path(source_dir)))
    stored = read_stored(source_dir)
    return FingerprintStatus(
        computed=computed,
        stored=stored,
        needs_build=not stored or stored != computed,
    )


def persist(source_dir: Path, fingerprint: str) -> Path:
    """Overwrite the sidecar with ``fingerprint``."""
    path = Path(source_dir) / FINGERPRINT_FILENAME
    path.write_text(fingerprint, encoding="utf-8")
    return path


def remove_stored(source_dir: Path) -> bool:
    """Delete the sidecar; return True when a file was removed."""
    path = Path(source_dir) / FINGERPRINT_FILENAME
    if not path.is_file():
        return False
    path.unlink()
    return True


__all__ = [
    "FINGERPRINT_FILENAME",
    "FingerprintStatus",
    "compare",
    "compute_fingerprint",
    "persist",
    "read_stored",
    "remove_stored",
]
