"""Baseline manifest storage.

This module reads and writes baseline manifests as JSON files. A manifest that
is missing or fails validation reads back as None so callers can treat it as
"no baseline yet". Writes replace the whole file atomically.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from models.manifest import BaselineManifest

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, text: str) -> None:
    """Atomically write text to a file.

    Creates parent directories if needed, writes to a temporary file first,
    then atomically replaces the target file. The temporary file is removed
    if either step fails.

    Args:
        path: Target file path.
        text: Text content to write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_file = tempfile.NamedTemporaryFile(
        mode="w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", delete=False
    )
    tmp_path = Path(tmp_file.name)
    try:
        with tmp_file:
            tmp_file.write(text)
        os.replace(tmp_path, path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise


def serialize_manifest(manifest: BaselineManifest) -> str:
    """Render a manifest as the persisted JSON text (2-space indent)."""
    return json.dumps(manifest.to_payload(), indent=2, ensure_ascii=True) + "\n"


def write_manifest(manifest_path: Path, manifest: BaselineManifest) -> None:
    """Persist a manifest, replacing any manifest already at manifest_path.

    Raises:
        OSError: If the directory cannot be created or the file cannot be written.
    """
    atomic_write_text(manifest_path, serialize_manifest(manifest))
    logger.info(
        "Wrote %s baseline manifest to %s (%d directories, %d violations)",
        manifest.tool,
        manifest_path,
        manifest.total_directories,
        manifest.total_violations,
    )


def parse_manifest(payload: object) -> BaselineManifest:
    """Validate a decoded JSON payload into a manifest.

    Raises:
        ValueError: If the payload is not a well-formed manifest.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"manifest root must be an object, got {type(payload).__name__}")
    try:
        return BaselineManifest.model_validate(payload)
    except ValidationError as e:
        raise ValueError(f"invalid manifest: {e}") from e


def read_manifest(manifest_path: Path) -> BaselineManifest | None:
    """Load a manifest from disk.

    Args:
        manifest_path: Path to the manifest JSON file.

    Returns:
        The manifest, or None if the file does not exist or is corrupt.

    Raises:
        OSError: If the file exists but cannot be read.
    """
    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError:
        return None
    except UnicodeDecodeError:
        logger.warning("Ignoring corrupt manifest %s: not valid UTF-8", manifest_path)
        return None

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(
            "Ignoring corrupt manifest %s: invalid JSON at line %d, column %d",
            manifest_path,
            e.lineno,
            e.colno,
        )
        return None

    try:
        return parse_manifest(payload)
    except ValueError as e:
        logger.warning("Ignoring corrupt manifest %s: %s", manifest_path, e)
        return None
