"""Drift detector for baseline manifests.

Compares the live project (directory catalog, config fingerprint, baseline
age, optionally the violation count) against a stored manifest. Each rule
is independent and contributes at most one detail line, always in this order:
directories added, directories removed, config changed, baseline too old.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from models.drift import DriftReport
from models.manifest import BaselineManifest
from services.violation_counter import ViolationCounter, ViolationCountFailure
from utils.directory_catalog import catalog_directories
from utils.fingerprint import fingerprint_file, is_known_fingerprint
from utils.manifest_store import read_manifest
from utils.project_config import ProjectLayout

logger = logging.getLogger(__name__)

# Baselines older than this are flagged for re-validation even if nothing else changed
BASELINE_MAX_AGE_DAYS = 30

REPORT_HEADER = "Drift Detected:"


def baseline_age_days(created_at: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed since created_at (floored)."""
    if now is None:
        now = datetime.now(timezone.utc)
    return (now - created_at).days


def violations_regressed(manifest: BaselineManifest, current_violations: int) -> bool:
    """Return True if the live count exceeds the count accepted at baseline time."""
    return current_violations > manifest.total_violations


def detect_drift(
    manifest: BaselineManifest | None,
    current_config_fingerprint: str,
    current_directories: list[str],
    *,
    violation_drift: bool = False,
    now: datetime | None = None,
    max_age_days: int = BASELINE_MAX_AGE_DAYS,
) -> DriftReport:
    """Classify how the live project diverges from a manifest.

    Args:
        manifest: Loaded manifest, or None when there is no usable baseline.
        current_config_fingerprint: Fingerprint of the live linter config.
        current_directories: Current directory catalog.
        violation_drift: Caller's own violation comparison result.
        now: Reference time for the age rule (defaults to now, UTC).
        max_age_days: Age above which the baseline counts as stale.

    Returns:
        DriftReport. When manifest is None, the "no baseline" report.
    """
    if manifest is None:
        return DriftReport.missing()

    details: list[str] = []

    current = set(current_directories)
    baselined = set(manifest.directories_baselined)
    added = sorted(current - baselined)
    removed = sorted(baselined - current)
    if added:
        details.append(f"Added directories: {', '.join(added)}")
    if removed:
        details.append(f"Removed directories: {', '.join(removed)}")

    # A config we cannot read is "cannot tell", not "changed"
    has_config_drift = (
        is_known_fingerprint(current_config_fingerprint)
        and current_config_fingerprint != manifest.config_hash
    )
    if has_config_drift:
        details.append("Configuration changed (config file hash mismatch)")

    age = baseline_age_days(manifest.created_at, now)
    has_time_drift = age > max_age_days
    if has_time_drift:
        details.append(f"Baseline is {age} days old (consider refreshing)")

    return DriftReport(
        has_directory_drift=bool(added or removed),
        has_config_drift=has_config_drift,
        has_time_drift=has_time_drift,
        has_violation_drift=violation_drift,
        added_directories=added,
        removed_directories=removed,
        age_in_days=age,
        details=details,
    )


def format_report(report: DriftReport) -> str | None:
    """Render a drift report as text.

    Returns:
        The "no baseline" message verbatim, None when nothing drifted,
        otherwise a header line followed by one bullet per detail.
    """
    if report.no_manifest:
        return report.message
    if not report.has_drift:
        return None

    lines = [REPORT_HEADER]
    for detail in report.details:
        lines.append(f"  - {detail}")
    return "\n".join(lines)


def check_drift(
    layout: ProjectLayout,
    tool: str,
    current_directories: list[str] | None = None,
    *,
    counter: ViolationCounter | None = None,
    now: datetime | None = None,
) -> DriftReport:
    """Load a tool's manifest and compare it with the live project.

    Args:
        layout: Project layout for this invocation.
        tool: Configured tool name (e.g. "eslint").
        current_directories: Catalog to compare; computed from the layout if None.
        counter: Optional linter boundary used for the violation rule.
        now: Reference time for the age rule.

    Raises:
        ValueError: If the tool is not configured.
        OSError: If an existing source root or config file cannot be read.
    """
    spec = layout.tool(tool)
    manifest = read_manifest(spec.manifest_path)
    if manifest is None:
        return DriftReport.missing()

    if current_directories is None:
        current_directories = catalog_directories(
            layout.source_root(spec.scope), layout.exclude_patterns
        )

    violation_drift = False
    if counter is not None:
        count = counter.count_violations(spec.scope)
        if isinstance(count, ViolationCountFailure):
            logger.warning("Skipping violation drift for %s: %s", tool, count.reason)
        else:
            violation_drift = violations_regressed(manifest, count)

    return detect_drift(
        manifest,
        fingerprint_file(Path(spec.config_path)),
        current_directories,
        violation_drift=violation_drift,
        now=now,
    )
