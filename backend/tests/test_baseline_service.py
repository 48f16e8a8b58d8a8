"""Tests for baseline creation, auto-heal and status.

These tests verify that auto-heal always produces a fresh, self-consistent
manifest, reports the before/after delta, and is idempotent apart from the
creation timestamp.
"""

import json
import logging
from datetime import datetime, timedelta, timezone

import pytest

from services.baseline_service import auto_heal, create_baseline, get_baseline_status, heal_tool
from utils.fingerprint import fingerprint_file
from utils.manifest_store import read_manifest
from utils.project_config import load_project_layout


def create_test_project(tmp_path):
    """Create a project with a frontend source tree and an eslint config."""
    src = tmp_path / "frontend" / "src"
    for name in ("api", "components", "hooks", "__tests__", "e2e"):
        (src / name).mkdir(parents=True)
    (tmp_path / "frontend" / "eslint.config.js").write_text(
        "module.exports = { rules: {} };", encoding="utf-8"
    )
    return load_project_layout(tmp_path)


def test_auto_heal_without_prior_manifest(tmp_path):
    manifest_path = tmp_path / "baselines" / "eslint-manifest.json"
    config_path = tmp_path / "eslint.config.js"
    config_path.write_text("module.exports = {};", encoding="utf-8")

    result = auto_heal(
        manifest_path,
        tool="eslint",
        version="9.0.0",
        current_directories=["c", "a", "b"],
        current_violations=8,
        config_path=config_path,
    )

    assert result.old_directories == []
    assert result.new_directories == ["a", "b", "c"]
    assert result.old_violations == 0
    assert result.new_violations == 8
    assert result.violation_delta == 8

    data = json.loads(manifest_path.read_text(encoding="utf-8"))
    assert data["total_directories"] == 3
    assert data["total_violations"] == 8
    assert data["config_hash"] == fingerprint_file(config_path)
    assert data["test_excluded"] == []


def test_auto_heal_replaces_prior_manifest(tmp_path):
    manifest_path = tmp_path / "heal-manifest.json"
    config_path = tmp_path / "eslint.config.js"
    config_path.write_text("module.exports = { rules: {} };", encoding="utf-8")

    auto_heal(
        manifest_path,
        tool="eslint",
        version="9.0.0",
        current_directories=["api", "components"],
        current_violations=10,
        config_path=config_path,
        test_excluded=["__tests__"],
    )
    result = auto_heal(
        manifest_path,
        tool="eslint",
        version="9.0.0",
        current_directories=["api", "components", "features"],
        current_violations=8,
        config_path=config_path,
        test_excluded=["__tests__"],
    )

    assert result.old_directories == ["api", "components"]
    assert result.new_directories == ["api", "components", "features"]
    assert result.old_violations == 10
    assert result.new_violations == 8
    assert result.violation_delta == -2

    updated = read_manifest(manifest_path)
    assert updated.total_directories == 3
    assert updated.total_violations == 8
    assert "features" in updated.directories_baselined


def test_auto_heal_recomputes_config_fingerprint(tmp_path):
    manifest_path = tmp_path / "eslint-manifest.json"
    config_path = tmp_path / "eslint.config.js"
    config_path.write_text("v1", encoding="utf-8")
    first = auto_heal(
        manifest_path,
        tool="eslint",
        version="9.0.0",
        current_directories=["api"],
        current_violations=1,
        config_path=config_path,
    )

    config_path.write_text("v2", encoding="utf-8")
    second = auto_heal(
        manifest_path,
        tool="eslint",
        version="9.0.0",
        current_directories=["api"],
        current_violations=1,
        config_path=config_path,
    )

    assert first.manifest.config_hash != second.manifest.config_hash
    assert second.manifest.config_hash == fingerprint_file(config_path)


def test_auto_heal_missing_config_records_unknown(tmp_path):
    result = auto_heal(
        tmp_path / "ruff-manifest.json",
        tool="ruff",
        version="0.5.0",
        current_directories=["api"],
        current_violations=0,
        config_path=tmp_path / "pyproject.toml",
    )

    assert result.manifest.config_hash == "unknown"


def test_auto_heal_over_corrupt_manifest(tmp_path):
    manifest_path = tmp_path / "eslint-manifest.json"
    manifest_path.write_text("{broken", encoding="utf-8")

    result = auto_heal(
        manifest_path,
        tool="eslint",
        version="9.0.0",
        current_directories=["api"],
        current_violations=2,
        config_path=tmp_path / "eslint.config.js",
    )

    assert result.old_directories == []
    assert result.old_violations == 0
    assert read_manifest(manifest_path).total_violations == 2


def test_auto_heal_is_idempotent(tmp_path):
    manifest_path = tmp_path / "eslint-manifest.json"
    config_path = tmp_path / "eslint.config.js"
    config_path.write_text("module.exports = {};", encoding="utf-8")
    kwargs = dict(
        tool="eslint",
        version="9.0.0",
        current_directories=["api", "hooks"],
        current_violations=5,
        config_path=config_path,
        test_excluded=["__tests__"],
    )

    first = auto_heal(manifest_path, now=datetime(2024, 1, 1, tzinfo=timezone.utc), **kwargs)
    second = auto_heal(manifest_path, now=datetime(2024, 1, 2, tzinfo=timezone.utc), **kwargs)

    first_payload = first.manifest.to_payload()
    second_payload = second.manifest.to_payload()
    assert first_payload.pop("created_at") != second_payload.pop("created_at")
    assert first_payload == second_payload
    assert first.manifest.drift_key() == second.manifest.drift_key()


@pytest.mark.parametrize("violations", [-1, 2.5, True])
def test_auto_heal_rejects_bad_violation_counts(tmp_path, violations):
    with pytest.raises(ValueError):
        auto_heal(
            tmp_path / "eslint-manifest.json",
            tool="eslint",
            version="9.0.0",
            current_directories=["api"],
            current_violations=violations,
            config_path=tmp_path / "eslint.config.js",
        )
    assert not (tmp_path / "eslint-manifest.json").exists()


def test_create_baseline_catalogs_project(tmp_path):
    layout = create_test_project(tmp_path)

    manifest = create_baseline(layout, "eslint", "9.0.0", 42)

    assert manifest.directories_baselined == ["api", "components", "hooks"]
    assert manifest.test_excluded == ["__tests__", "e2e"]
    assert manifest.total_violations == 42
    assert read_manifest(layout.tool("eslint").manifest_path) == manifest


def test_heal_tool_picks_up_new_directory(tmp_path):
    layout = create_test_project(tmp_path)
    create_baseline(layout, "eslint", "9.0.0", 42)
    (layout.frontend_root / "features").mkdir()

    result = heal_tool(layout, "eslint", "9.0.0", 40)

    assert result.old_directories == ["api", "components", "hooks"]
    assert result.new_directories == ["api", "components", "features", "hooks"]
    assert result.old_violations == 42
    assert result.new_violations == 40


def test_status_without_baseline(tmp_path):
    layout = create_test_project(tmp_path)

    status = get_baseline_status(layout, "eslint")

    assert status["exists"] is False
    assert status["manifest"] is None
    assert status["age_in_days"] is None
    assert status["drift"]["no_manifest"] is True
    assert status["report"] == "No manifest found - run baseline first"


def test_status_with_stale_baseline(tmp_path):
    layout = create_test_project(tmp_path)
    created = datetime.now(timezone.utc) - timedelta(days=45)
    create_baseline(layout, "eslint", "9.0.0", 3, now=created)

    status = get_baseline_status(layout, "eslint")

    assert status["exists"] is True
    assert status["age_in_days"] == 45
    assert status["manifest"]["total_violations"] == 3
    assert status["drift"]["has_time_drift"] is True
    assert status["report"].startswith("Drift Detected:")


def test_status_with_fresh_baseline(tmp_path):
    layout = create_test_project(tmp_path)
    create_baseline(layout, "eslint", "9.0.0", 3)

    status = get_baseline_status(layout, "eslint")

    assert status["exists"] is True
    assert status["report"] is None


def test_create_and_heal_log_distinct_messages(tmp_path, caplog):
    layout = create_test_project(tmp_path)

    with caplog.at_level(logging.INFO, logger="services.baseline_service"):
        create_baseline(layout, "eslint", "9.0.0", 42)
    created = [r.getMessage() for r in caplog.records if r.name == "services.baseline_service"]
    caplog.clear()

    with caplog.at_level(logging.INFO, logger="services.baseline_service"):
        heal_tool(layout, "eslint", "9.0.0", 40)
    healed = [r.getMessage() for r in caplog.records if r.name == "services.baseline_service"]

    assert created == ["Created eslint baseline: 3 directories, 42 violations"]
    assert healed == ["Auto-healed eslint baseline: 3 -> 3 directories, 42 -> 40 violations"]
