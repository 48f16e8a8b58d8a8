"""Project layout loader and validator.

This module loads the optional lint_baseline.json file at a project root and
resolves it into a ProjectLayout: the frontend and backend source roots, the
linter configuration file per tool, and where each tool's baseline manifest
lives. A project without lint_baseline.json gets the defaults below.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_FILE_NAME = "lint_baseline.json"
PROJECT_ROOT_ENV = "LINT_BASELINE_PROJECT_ROOT"

SCOPE_FRONTEND = "frontend"
SCOPE_BACKEND = "backend"
VALID_SCOPES = (SCOPE_FRONTEND, SCOPE_BACKEND)

DEFAULT_TOOLS = {
    "eslint": {"config": "frontend/eslint.config.js", "scope": SCOPE_FRONTEND},
    "ruff": {"config": "pyproject.toml", "scope": SCOPE_BACKEND},
}


@dataclass(frozen=True)
class ToolSpec:
    """A linting tool and the configuration file it reads."""

    name: str
    config_path: Path
    scope: str
    manifest_path: Path


@dataclass(frozen=True)
class ProjectLayout:
    """Resolved paths for one project, built once per invocation."""

    project_root: Path
    frontend_dir: str
    src_dir: str
    backend_dir: str
    app_dir: str
    baseline_dir: Path
    exclude_patterns: tuple[str, ...] = ()
    tools: dict[str, ToolSpec] = field(default_factory=dict)

    @property
    def frontend_root(self) -> Path:
        return self.project_root / self.frontend_dir / self.src_dir

    @property
    def backend_root(self) -> Path:
        return self.project_root / self.backend_dir / self.app_dir

    @property
    def frontend_prefix(self) -> str:
        return f"{self.frontend_dir}/{self.src_dir}/"

    @property
    def backend_prefix(self) -> str:
        return f"{self.backend_dir}/{self.app_dir}/"

    @property
    def config_paths(self) -> dict[str, Path]:
        return {name: spec.config_path for name, spec in self.tools.items()}

    def source_root(self, scope: str) -> Path:
        if scope == SCOPE_FRONTEND:
            return self.frontend_root
        if scope == SCOPE_BACKEND:
            return self.backend_root
        raise ValueError(f"Unknown scope '{scope}', expected one of {', '.join(VALID_SCOPES)}")

    def tool(self, name: str) -> ToolSpec:
        """Look up a configured tool.

        Raises:
            ValueError: If the tool is not configured.
        """
        if name not in self.tools:
            known = ", ".join(sorted(self.tools)) or "none"
            raise ValueError(f"Unknown tool '{name}' (configured tools: {known})")
        return self.tools[name]


def default_project_root() -> Path:
    """Get the project root from LINT_BASELINE_PROJECT_ROOT, else the working directory."""
    raw = os.getenv(PROJECT_ROOT_ENV, "").strip()
    if raw:
        return Path(raw)
    return Path.cwd()


def _require_str(data: dict, key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise ValueError(
            f"'{CONFIG_FILE_NAME}': '{key}' must be a string, got {type(value).__name__}"
        )
    value = value.strip().strip("/")
    if not value:
        raise ValueError(f"'{CONFIG_FILE_NAME}': '{key}' must be non-empty")
    return value


def _validate_exclude_patterns(data: dict) -> tuple[str, ...]:
    raw = data.get("exclude_patterns", [])
    if not isinstance(raw, list):
        raise ValueError(
            f"'{CONFIG_FILE_NAME}': 'exclude_patterns' must be a list, got {type(raw).__name__}"
        )
    patterns: list[str] = []
    for i, pattern in enumerate(raw):
        if not isinstance(pattern, str):
            raise ValueError(
                f"'{CONFIG_FILE_NAME}': 'exclude_patterns'[{i}] must be a string, got {type(pattern).__name__}"
            )
        if not pattern:
            raise ValueError(f"'{CONFIG_FILE_NAME}': 'exclude_patterns'[{i}] must be non-empty")
        patterns.append(pattern)
    return tuple(patterns)


def _validate_tools(data: dict, project_root: Path, baseline_dir: Path) -> dict[str, ToolSpec]:
    raw = data.get("tools", DEFAULT_TOOLS)
    if not isinstance(raw, dict):
        raise ValueError(
            f"'{CONFIG_FILE_NAME}': 'tools' must be an object, got {type(raw).__name__}"
        )

    tools: dict[str, ToolSpec] = {}
    for name, spec in raw.items():
        if not name or "/" in name or "\\" in name:
            raise ValueError(f"'{CONFIG_FILE_NAME}': invalid tool name '{name}'")
        if not isinstance(spec, dict):
            raise ValueError(
                f"'{CONFIG_FILE_NAME}': 'tools'['{name}'] must be an object, got {type(spec).__name__}"
            )

        config = spec.get("config")
        if not isinstance(config, str) or not config:
            raise ValueError(
                f"'{CONFIG_FILE_NAME}': 'tools'['{name}'] missing required string key 'config'"
            )

        scope = spec.get("scope")
        if scope not in VALID_SCOPES:
            raise ValueError(
                f"'{CONFIG_FILE_NAME}': 'tools'['{name}']['scope'] must be one of "
                f"{', '.join(VALID_SCOPES)}, got {scope!r}"
            )

        tools[name] = ToolSpec(
            name=name,
            config_path=project_root / config,
            scope=scope,
            manifest_path=baseline_dir / f"{name}-manifest.json",
        )
    return tools


def load_project_layout(project_root: Path | None = None) -> ProjectLayout:
    """Load the project layout for a project root.

    Args:
        project_root: Project root directory. If None, uses default_project_root().

    Returns:
        ProjectLayout with all paths resolved against project_root.

    Raises:
        ValueError: If lint_baseline.json exists but is invalid.
    """
    if project_root is None:
        project_root = default_project_root()
    project_root = Path(project_root)

    config_path = project_root / CONFIG_FILE_NAME
    data: dict = {}
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(
                f"Invalid JSON in '{CONFIG_FILE_NAME}': {e.msg} at line {e.lineno}, column {e.colno}"
            ) from e
        if not isinstance(data, dict):
            raise ValueError(
                f"'{CONFIG_FILE_NAME}': root must be an object, got {type(data).__name__}"
            )

    baseline_dir = project_root / _require_str(data, "baseline_dir", ".lint-baselines")

    return ProjectLayout(
        project_root=project_root,
        frontend_dir=_require_str(data, "frontend_dir", "frontend"),
        src_dir=_require_str(data, "src_dir", "src"),
        backend_dir=_require_str(data, "backend_dir", "backend"),
        app_dir=_require_str(data, "app_dir", "app"),
        baseline_dir=baseline_dir,
        exclude_patterns=_validate_exclude_patterns(data),
        tools=_validate_tools(data, project_root, baseline_dir),
    )
