"""Baseline service for creating, healing and inspecting baseline manifests.

Baselines are never edited in place: creating a baseline and auto-healing a
stale one both build a complete new manifest and write it over the old file.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from models.drift import HealResult
from models.manifest import BaselineManifest
from services.drift_detector import baseline_age_days, check_drift, format_report
from utils.directory_catalog import catalog_directories, catalog_excluded_directories
from utils.fingerprint import fingerprint_file
from utils.manifest_store import read_manifest, write_manifest
from utils.project_config import ProjectLayout

logger = logging.getLogger(__name__)


def _check_violations(count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError(f"Violation count must be an integer, got {type(count).__name__}")
    if count < 0:
        raise ValueError(f"Violation count must be >= 0, got {count}")


def _replace_manifest(
    manifest_path: Path,
    *,
    tool: str,
    version: str,
    current_directories: list[str],
    current_violations: int,
    config_path: Path,
    test_excluded: list[str] | None = None,
    now: datetime | None = None,
) -> HealResult:
    _check_violations(current_violations)
    old_manifest = read_manifest(manifest_path)

    new_manifest = BaselineManifest.create(
        tool=tool,
        version=version,
        directories=current_directories,
        violations=current_violations,
        config_hash=fingerprint_file(Path(config_path)),
        test_excluded=test_excluded,
        now=now,
    )
    write_manifest(manifest_path, new_manifest)

    return HealResult(
        old_directories=list(old_manifest.directories_baselined) if old_manifest else [],
        new_directories=list(new_manifest.directories_baselined),
        old_violations=old_manifest.total_violations if old_manifest else 0,
        new_violations=new_manifest.total_violations,
        manifest=new_manifest,
    )


def _tool_inputs(layout: ProjectLayout, tool: str) -> dict:
    """Collect the live state a tool's manifest is rebuilt from."""
    spec = layout.tool(tool)
    root = layout.source_root(spec.scope)
    return {
        "manifest_path": spec.manifest_path,
        "current_directories": catalog_directories(root, layout.exclude_patterns),
        "config_path": spec.config_path,
        "test_excluded": catalog_excluded_directories(root, layout.exclude_patterns),
    }


def auto_heal(
    manifest_path: Path,
    *,
    tool: str,
    version: str,
    current_directories: list[str],
    current_violations: int,
    config_path: Path,
    test_excluded: list[str] | None = None,
    now: datetime | None = None,
) -> HealResult:
    """Replace a (possibly stale or missing) manifest with one built from live state.

    The config fingerprint is always recomputed from config_path, never
    reused from the old manifest.

    Args:
        manifest_path: Where the tool's manifest lives.
        tool: Tool name recorded in the manifest.
        version: Tool version recorded in the manifest.
        current_directories: Current directory catalog.
        current_violations: Current violation count.
        config_path: Live linter configuration file.
        test_excluded: Directories deliberately left out, for the audit field.
        now: Creation time for the new manifest (defaults to now, UTC).

    Returns:
        HealResult with the previous and new directories and violation counts.

    Raises:
        ValueError: If the inputs cannot form a valid manifest.
        OSError: If the manifest cannot be written.
    """
    result = _replace_manifest(
        manifest_path,
        tool=tool,
        version=version,
        current_directories=current_directories,
        current_violations=current_violations,
        config_path=config_path,
        test_excluded=test_excluded,
        now=now,
    )
    logger.info(
        "Auto-healed %s baseline: %d -> %d directories, %d -> %d violations",
        tool,
        len(result.old_directories),
        len(result.new_directories),
        result.old_violations,
        result.new_violations,
    )
    return result


def heal_tool(
    layout: ProjectLayout,
    tool: str,
    version: str,
    current_violations: int,
    *,
    now: datetime | None = None,
) -> HealResult:
    """Auto-heal a configured tool's baseline using the layout's paths."""
    inputs = _tool_inputs(layout, tool)
    return auto_heal(
        inputs.pop("manifest_path"),
        tool=tool,
        version=version,
        current_violations=current_violations,
        now=now,
        **inputs,
    )


def create_baseline(
    layout: ProjectLayout,
    tool: str,
    version: str,
    current_violations: int,
    *,
    now: datetime | None = None,
) -> BaselineManifest:
    """Freeze the tool's current directories and violation count as a new baseline.

    Any existing manifest for the tool is superseded wholesale.

    Returns:
        The manifest that was written.
    """
    inputs = _tool_inputs(layout, tool)
    result = _replace_manifest(
        inputs.pop("manifest_path"),
        tool=tool,
        version=version,
        current_violations=current_violations,
        now=now,
        **inputs,
    )
    logger.info(
        "Created %s baseline: %d directories, %d violations",
        tool,
        len(result.new_directories),
        result.new_violations,
    )
    return result.manifest


def get_baseline_status(
    layout: ProjectLayout, tool: str, *, now: datetime | None = None
) -> dict:
    """Get the status of a tool's baseline (read-only).

    Returns:
        Dictionary containing:
        - tool: tool name
        - exists: bool indicating if a usable manifest exists
        - manifest_path: path of the manifest file
        - manifest: persisted manifest payload, None if missing
        - age_in_days: baseline age, None if missing
        - drift: DriftReport as a dict
        - report: formatted drift text, None when there is no drift
    """
    if now is None:
        now = datetime.now(timezone.utc)

    spec = layout.tool(tool)
    manifest = read_manifest(spec.manifest_path)
    drift = check_drift(layout, tool, now=now)

    return {
        "tool": tool,
        "exists": manifest is not None,
        "manifest_path": str(spec.manifest_path),
        "manifest": manifest.to_payload() if manifest else None,
        "age_in_days": baseline_age_days(manifest.created_at, now) if manifest else None,
        "drift": drift.model_dump(),
        "report": format_report(drift),
    }
