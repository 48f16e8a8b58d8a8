"""Content fingerprinting for linter configuration files.

A fingerprint is only ever compared with another fingerprint produced here,
so the digest algorithm is an internal detail.
"""

import hashlib
from pathlib import Path

UNKNOWN_FINGERPRINT = "unknown"

_CHUNK_SIZE = 64 * 1024


def fingerprint_file(path: Path) -> str:
    """Compute a SHA-256 hex digest of a file's bytes.

    Args:
        path: File to fingerprint.

    Returns:
        64-character hexadecimal digest, or UNKNOWN_FINGERPRINT if the file
        does not exist.

    Raises:
        OSError: If the file exists but cannot be read.
    """
    hash_obj = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                hash_obj.update(chunk)
    except FileNotFoundError:
        return UNKNOWN_FINGERPRINT
    return hash_obj.hexdigest()


def is_known_fingerprint(value: str | None) -> bool:
    """Return True if value is a real digest rather than the sentinel."""
    return bool(value) and value != UNKNOWN_FINGERPRINT
