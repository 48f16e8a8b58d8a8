"""Entry point for the lint baseline FastAPI application."""

import logging
import os
import shutil

logger = logging.getLogger(__name__)

# Configure GitPython to find git executable before anything imports git.
# Change detection is advisory, so a missing git only disables /changes.
git_path = os.getenv("GIT_PYTHON_GIT_EXECUTABLE") or shutil.which("git")
if git_path:
    os.environ["GIT_PYTHON_GIT_EXECUTABLE"] = git_path
else:
    os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")
    logger.warning("Git executable not found; staged change detection is unavailable")

from fastapi import FastAPI

from api.routes import router as api_router

app = FastAPI(title="Lint Baseline Backend", version="0.1.0")

app.include_router(api_router)


@app.get("/")
async def root() -> dict:
    """
    Simple heartbeat endpoint to confirm the API is online.

    Returns:
        dict: App metadata payload.
    """
    return {"status": "ok", "app": "Lint Baseline Backend"}
