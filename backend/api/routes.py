"""API route definitions for the baseline engine."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from services.baseline_service import create_baseline, get_baseline_status, heal_tool
from utils.directory_catalog import (
    catalog_backend_directories,
    catalog_frontend_directories,
    changed_directories,
    changed_source_files,
)
from utils.git_parser import list_staged_files
from utils.project_config import ProjectLayout, load_project_layout

router = APIRouter()

# Thread pool for blocking filesystem and git work
executor = ThreadPoolExecutor(max_workers=2)

REQUEST_TIMEOUT_SECONDS = 120.0


def _resolve_layout(project_root: str | None) -> ProjectLayout:
    """Load the layout for an explicit project root, or the configured default."""
    if project_root is None:
        return load_project_layout()
    root = Path(project_root)
    if not root.exists():
        raise ValueError(f"Project root does not exist: {root}")
    if not root.is_dir():
        raise ValueError(f"Project root is not a directory: {root}")
    return load_project_layout(root)


async def _run_blocking(func):
    loop = asyncio.get_event_loop()
    return await asyncio.wait_for(
        loop.run_in_executor(executor, func),
        timeout=REQUEST_TIMEOUT_SECONDS,
    )


@router.get("/health")
async def health_check() -> dict:
    """
    Lightweight endpoint for uptime checks.

    Returns:
        dict: Health status payload.
    """
    return {"status": "healthy"}


# ============================================================================
# BASELINE ENDPOINTS
# ============================================================================


class CreateBaselineRequest(BaseModel):
    """Request model for the baseline/create and baseline/auto-heal endpoints."""

    tool: str
    version: str = ""
    violations: int
    project_root: str | None = None


@router.get("/baseline/status")
async def baseline_status(tool: str, project_root: str | None = None) -> dict:
    """
    Get the status of a tool's baseline, including a fresh drift report.

    Drift is informational: the response is 200 whether or not drift exists.

    Query params:
        tool: Configured tool name, e.g. "eslint" or "ruff".
        project_root: Optional project root (defaults to LINT_BASELINE_PROJECT_ROOT).

    Returns:
        dict: exists, manifest, age_in_days, drift, report.

    Raises:
        HTTPException: 400 if the project root or tool is invalid.
    """
    try:
        layout = _resolve_layout(project_root)
        return await _run_blocking(lambda: get_baseline_status(layout, tool))
    except asyncio.TimeoutError:
        raise HTTPException(status_code=408, detail="Baseline status timed out.")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Error reading baseline status: {str(e)}"
        )


@router.post("/baseline/create")
async def create_baseline_endpoint(payload: CreateBaselineRequest) -> dict:
    """
    Create a new baseline for a tool, superseding any existing one.

    Request body:
        {
            "tool": "eslint",
            "version": "9.0.0",       // optional
            "violations": 42,          // count produced by the linter
            "project_root": "/path"    // optional
        }

    Returns:
        dict: The persisted manifest and where it was written.

    Raises:
        HTTPException: 400 if the request is invalid.
    """
    try:
        layout = _resolve_layout(payload.project_root)
        manifest = await _run_blocking(
            lambda: create_baseline(layout, payload.tool, payload.version, payload.violations)
        )
        return {
            "manifest_path": str(layout.tool(payload.tool).manifest_path),
            "manifest": manifest.to_payload(),
        }
    except asyncio.TimeoutError:
        raise HTTPException(status_code=408, detail="Baseline creation timed out.")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Error creating baseline: {str(e)}"
        )


@router.post("/baseline/auto-heal")
async def auto_heal_endpoint(payload: CreateBaselineRequest) -> dict:
    """
    Bring a stale baseline back in sync with the live project.

    Returns:
        dict: old/new directories, old/new violation counts, and the new manifest.

    Raises:
        HTTPException: 400 if the request is invalid.
    """
    try:
        layout = _resolve_layout(payload.project_root)
        result = await _run_blocking(
            lambda: heal_tool(layout, payload.tool, payload.version, payload.violations)
        )
        return {
            "old_directories": result.old_directories,
            "new_directories": result.new_directories,
            "old_violations": result.old_violations,
            "new_violations": result.new_violations,
            "violation_delta": result.violation_delta,
            "manifest": result.manifest.to_payload(),
        }
    except asyncio.TimeoutError:
        raise HTTPException(status_code=408, detail="Auto-heal timed out.")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Error healing baseline: {str(e)}"
        )


# ============================================================================
# CATALOG ENDPOINTS
# ============================================================================


@router.get("/directories")
async def list_directories(project_root: str | None = None) -> dict:
    """
    List the production directories under the frontend and backend source roots.

    Returns:
        dict: frontend and backend directory lists (sorted).
    """
    try:
        layout = _resolve_layout(project_root)
        return await _run_blocking(
            lambda: {
                "frontend_root": str(layout.frontend_root),
                "backend_root": str(layout.backend_root),
                "frontend": catalog_frontend_directories(layout),
                "backend": catalog_backend_directories(layout),
            }
        )
    except asyncio.TimeoutError:
        raise HTTPException(status_code=408, detail="Directory listing timed out.")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Error listing directories: {str(e)}"
        )


@router.get("/changes")
async def list_changes(project_root: str | None = None) -> dict:
    """
    Report which frontend/backend directories have staged changes.

    When git state is unavailable the lists are empty and `available` is false.
    """
    try:
        layout = _resolve_layout(project_root)
        staged = await _run_blocking(lambda: list_staged_files(layout.project_root))
        changed = changed_directories(layout, staged)
        files = changed_source_files(layout, staged)
        return {
            "available": changed.available,
            "unavailable_reason": changed.unavailable_reason,
            "frontend": changed.frontend,
            "backend": changed.backend,
            "files": changed.all_files,
            "frontend_files": files.frontend,
            "backend_files": files.backend,
        }
    except asyncio.TimeoutError:
        raise HTTPException(status_code=408, detail="Change detection timed out.")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Error detecting changes: {str(e)}"
        )
