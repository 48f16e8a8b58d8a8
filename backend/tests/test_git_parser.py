"""Tests for listing staged files with GitPython."""

import git
from git import Repo

from utils.directory_catalog import changed_directories
from utils.git_parser import StagedFilesUnavailable, list_staged_files
from utils.project_config import load_project_layout


def _init_repo(path):
    repo = Repo.init(path)
    repo.config_writer().set_value("user", "name", "Tester").release()
    repo.config_writer().set_value("user", "email", "tester@example.com").release()
    return repo


def test_not_a_repository_is_unavailable(tmp_path):
    result = list_staged_files(tmp_path)

    assert isinstance(result, StagedFilesUnavailable)
    assert "Not a git repository" in result.reason


def test_missing_path_is_unavailable(tmp_path):
    assert isinstance(list_staged_files(tmp_path / "nope"), StagedFilesUnavailable)


def test_lists_staged_files(tmp_path):
    repo = _init_repo(tmp_path)
    (tmp_path / "README.md").write_text("hello\n", encoding="utf-8")
    repo.git.add("--all")
    repo.index.commit("Initial commit")

    api_dir = tmp_path / "backend" / "app" / "api"
    api_dir.mkdir(parents=True)
    (api_dir / "routes.py").write_text("x = 1\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("hello again\n", encoding="utf-8")
    (tmp_path / "unstaged.txt").write_text("not staged\n", encoding="utf-8")
    repo.git.add("backend/app/api/routes.py", "README.md")

    staged = list_staged_files(tmp_path)

    assert sorted(staged) == ["README.md", "backend/app/api/routes.py"]


def test_deleted_files_are_not_listed(tmp_path):
    repo = _init_repo(tmp_path)
    (tmp_path / "old.py").write_text("x = 1\n", encoding="utf-8")
    repo.git.add("--all")
    repo.index.commit("Initial commit")

    repo.git.rm("old.py")

    assert list_staged_files(tmp_path) == []


def test_nothing_staged(tmp_path):
    repo = _init_repo(tmp_path)
    (tmp_path / "a.txt").write_text("a\n", encoding="utf-8")
    repo.git.add("--all")
    repo.index.commit("Initial commit")

    assert list_staged_files(tmp_path) == []


def test_repository_without_commits(tmp_path):
    repo = _init_repo(tmp_path)
    api_dir = tmp_path / "frontend" / "src" / "api"
    api_dir.mkdir(parents=True)
    (api_dir / "x.ts").write_text("export {};\n", encoding="utf-8")
    repo.git.add("frontend/src/api/x.ts")

    staged = list_staged_files(tmp_path)

    assert staged == ["frontend/src/api/x.ts"]
    changed = changed_directories(load_project_layout(tmp_path), staged)
    assert changed.available is True
    assert changed.frontend == ["api"]
    assert changed.backend == []


def test_missing_git_executable_is_unavailable(tmp_path, monkeypatch):
    _init_repo(tmp_path)
    monkeypatch.setattr(git.Git, "GIT_PYTHON_GIT_EXECUTABLE", str(tmp_path / "no-such-git"))

    result = list_staged_files(tmp_path)

    assert isinstance(result, StagedFilesUnavailable)
    assert "git diff failed" in result.reason
