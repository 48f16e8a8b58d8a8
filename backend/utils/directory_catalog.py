"""Directory catalog for production source directories.

A production directory is an immediate child directory of a source root
whose name does not match the test/scratch exclusion rules. Catalogs are
always sorted so that comparisons and manifests are deterministic.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from utils.git_parser import StagedFilesUnavailable
from utils.project_config import ProjectLayout

EXCLUDED_DIR_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"test", re.IGNORECASE),
    re.compile(r"^__pycache__$"),
    re.compile(r"^e2e$"),
    re.compile(r"^\."),
    re.compile(r"^node_modules$"),
)

FRONTEND_SOURCE_SUFFIXES = (".js", ".jsx", ".ts", ".tsx")
BACKEND_SOURCE_SUFFIXES = (".py",)


@dataclass(frozen=True)
class ChangedDirectories:
    """Staged changes partitioned into frontend and backend directories."""

    frontend: list[str] = field(default_factory=list)
    backend: list[str] = field(default_factory=list)
    all_files: list[str] = field(default_factory=list)
    available: bool = True
    unavailable_reason: str | None = None


@dataclass(frozen=True)
class ChangedSourceFiles:
    """Staged source files grouped by side."""

    frontend: list[str] = field(default_factory=list)
    backend: list[str] = field(default_factory=list)


def compile_patterns(extra_patterns: Iterable[str] = ()) -> tuple[re.Pattern, ...]:
    """Union the fixed exclusion rules with caller patterns (case-insensitive).

    Raises:
        ValueError: If a caller pattern is not a valid regular expression.
    """
    compiled = list(EXCLUDED_DIR_PATTERNS)
    for pattern in extra_patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            raise ValueError(f"Invalid exclude pattern '{pattern}': {e}") from e
    return tuple(compiled)


def is_excluded_dir(name: str, extra_patterns: Iterable[str] = ()) -> bool:
    """Return True if a directory name is test-like, hidden, or otherwise excluded."""
    return _matches(name, compile_patterns(extra_patterns))


def _matches(name: str, patterns: tuple[re.Pattern, ...]) -> bool:
    return any(p.search(name) for p in patterns)


def _child_directories(root: Path) -> list[str]:
    if not root.exists():
        return []
    return [entry.name for entry in root.iterdir() if entry.is_dir()]


def catalog_directories(root: Path, extra_patterns: Iterable[str] = ()) -> list[str]:
    """List the production directories directly under root.

    Args:
        root: Source root to enumerate.
        extra_patterns: Additional case-insensitive regexes to exclude.

    Returns:
        Sorted list of directory names. Empty if root does not exist.

    Raises:
        OSError: If root exists but cannot be listed.
        ValueError: If an extra pattern is invalid.
    """
    patterns = compile_patterns(extra_patterns)
    return sorted(name for name in _child_directories(root) if not _matches(name, patterns))


def catalog_excluded_directories(root: Path, extra_patterns: Iterable[str] = ()) -> list[str]:
    """List the directories under root that the exclusion rules removed."""
    patterns = compile_patterns(extra_patterns)
    return sorted(name for name in _child_directories(root) if _matches(name, patterns))


def catalog_frontend_directories(layout: ProjectLayout) -> list[str]:
    return catalog_directories(layout.frontend_root, layout.exclude_patterns)


def catalog_backend_directories(layout: ProjectLayout) -> list[str]:
    return catalog_directories(layout.backend_root, layout.exclude_patterns)


def changed_directories(
    layout: ProjectLayout, staged: list[str] | StagedFilesUnavailable
) -> ChangedDirectories:
    """Partition staged files into changed frontend and backend directories.

    A file under `<frontend_dir>/<src_dir>/` contributes the first path
    segment after that prefix; likewise for the backend prefix. Excluded
    segments are dropped.
    """
    if isinstance(staged, StagedFilesUnavailable):
        return ChangedDirectories(available=False, unavailable_reason=staged.reason)

    patterns = compile_patterns(layout.exclude_patterns)
    frontend: set[str] = set()
    backend: set[str] = set()

    for path in staged:
        if path.startswith(layout.frontend_prefix):
            target, rest = frontend, path[len(layout.frontend_prefix):]
        elif path.startswith(layout.backend_prefix):
            target, rest = backend, path[len(layout.backend_prefix):]
        else:
            continue
        # Files sitting directly in the source root belong to no directory
        segment, sep, _ = rest.partition("/")
        if sep and segment and not _matches(segment, patterns):
            target.add(segment)

    return ChangedDirectories(
        frontend=sorted(frontend),
        backend=sorted(backend),
        all_files=list(staged),
    )


def changed_source_files(
    layout: ProjectLayout, staged: list[str] | StagedFilesUnavailable
) -> ChangedSourceFiles:
    """Pick out staged frontend script files and backend Python files."""
    if isinstance(staged, StagedFilesUnavailable):
        return ChangedSourceFiles()

    frontend_prefix = f"{layout.frontend_dir}/"
    backend_prefix = f"{layout.backend_dir}/"
    return ChangedSourceFiles(
        frontend=[
            f for f in staged
            if f.startswith(frontend_prefix) and f.endswith(FRONTEND_SOURCE_SUFFIXES)
        ],
        backend=[
            f for f in staged
            if f.startswith(backend_prefix) and f.endswith(BACKEND_SOURCE_SUFFIXES)
        ],
    )
