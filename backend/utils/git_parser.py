"""Git queries for the staged change set.

Change detection is advisory: when the repository state cannot be read, the
query returns a StagedFilesUnavailable value instead of raising.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo
from git.exc import CommandError

logger = logging.getLogger(__name__)

# Added, copied, modified, renamed
STAGED_DIFF_FILTER = "ACMR"


@dataclass(frozen=True)
class StagedFilesUnavailable:
    """Staged files could not be listed (not a repository, git failure, ...)."""

    reason: str


def list_staged_files(repo_root: Path) -> list[str] | StagedFilesUnavailable:
    """
    List paths staged for commit, relative to the repository root.

    Uses `git diff --cached --name-only --diff-filter=ACMR`, so deleted
    files are not reported.

    Returns:
        list[str] of POSIX-style paths, or StagedFilesUnavailable.
    """
    try:
        repo = Repo(str(repo_root), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        logger.info("Staged files unavailable for %s: not a git repository", repo_root)
        return StagedFilesUnavailable(reason=f"Not a git repository: {e}")

    try:
        output = repo.git.diff("--cached", "--name-only", f"--diff-filter={STAGED_DIFF_FILTER}")
    except CommandError as e:
        # Covers a failing diff and a missing or unrunnable git executable
        logger.warning("Staged files unavailable for %s: %s", repo_root, e)
        return StagedFilesUnavailable(reason=f"git diff failed: {e}")
    finally:
        repo.close()

    return [line.strip() for line in output.splitlines() if line.strip()]
