"""
Pytest configuration and shared fixtures.

Provides real git repositories (upstream projects and a manifest
repository) served from local paths, plus an empty workspace.
"""

import os
import subprocess
from pathlib import Path

import pytest

from repotree.core.workspace import CONTROL_DIR_NAME, Workspace

# ==============================================================================
# Git helpers
# ==============================================================================


def run_git(cwd: Path, *args: str) -> str:
    """Run git in cwd and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def init_repo(path: Path) -> Path:
    """Create an empty repository on branch main."""
    path.mkdir(parents=True, exist_ok=True)
    run_git(path, "init", "-q")
    run_git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    return path


def commit_files(repo: Path, files: dict[str, str], message: str = "update") -> str:
    """Write files, commit them and return the new commit SHA."""
    for name, content in files.items():
        target = repo / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    run_git(repo, "add", "-A")
    run_git(repo, "commit", "-q", "-m", message)
    return run_git(repo, "rev-parse", "HEAD")


def head_of(repo: Path) -> str:
    return run_git(repo, "rev-parse", "HEAD")


def branch_of(repo: Path, branch: str) -> str:
    return run_git(repo, "rev-parse", f"refs/heads/{branch}")


def manifest_xml(
    remotes_dir: Path, projects: str, default: str = 'revision="main" remote="origin"'
) -> str:
    """Build a manifest document with a single remote named origin."""
    return (
        "<manifest>\n"
        f'  <remote name="origin" fetch="{remotes_dir}"/>\n'
        f"  <default {default}/>\n"
        f"{projects}"
        "</manifest>\n"
    )


class GitHelper:
    """Shell-level git operations for building fixtures and checking results."""

    run = staticmethod(run_git)
    init = staticmethod(init_repo)
    commit = staticmethod(commit_files)
    head = staticmethod(head_of)
    branch = staticmethod(branch_of)
    manifest_xml = staticmethod(manifest_xml)


@pytest.fixture
def git_helper() -> type[GitHelper]:
    return GitHelper


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def git_env(tmp_path_factory, monkeypatch):
    """
    Isolate git and repotree from the user's configuration.

    Commits get a fixed identity and no global/system git config is read.
    """
    home = tmp_path_factory.mktemp("home")
    (home / ".gitconfig").write_text("")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")

    for key in list(os.environ.keys()):
        if key.startswith("REPOTREE_"):
            monkeypatch.delenv(key, raising=False)

    return monkeypatch


# ==============================================================================
# Repository Fixtures
# ==============================================================================


@pytest.fixture
def remotes_dir(tmp_path: Path) -> Path:
    """Directory acting as the fetch prefix of the `origin` remote."""
    path = tmp_path / "remotes"
    path.mkdir()
    return path


@pytest.fixture
def upstream(remotes_dir: Path) -> Path:
    """
    Upstream project `lib/foo` with two commits on main and a tag.

    Layout:
    - README.md, Makefile, tools/run.sh
    - annotated tag v1.0 on the first commit
    - branch stable at the first commit
    """
    repo = init_repo(remotes_dir / "lib" / "foo")
    commit_files(
        repo,
        {"README.md": "# foo\n", "Makefile": "all:\n", "tools/run.sh": "echo run\n"},
        "Initial commit",
    )
    run_git(repo, "tag", "-a", "v1.0", "-m", "Release 1.0")
    run_git(repo, "branch", "stable")
    commit_files(repo, {"README.md": "# foo\n\nSecond\n"}, "Second commit")
    return repo


@pytest.fixture
def upstream_bar(remotes_dir: Path) -> Path:
    """Upstream project `lib/bar` with a single commit."""
    repo = init_repo(remotes_dir / "lib" / "bar")
    commit_files(repo, {"bar.txt": "bar\n"}, "Initial commit")
    return repo


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """Empty workspace with a control directory."""
    root = tmp_path / "ws"
    (root / CONTROL_DIR_NAME).mkdir(parents=True)
    return Workspace(root)


@pytest.fixture
def manifest_upstream(remotes_dir: Path, upstream: Path, upstream_bar: Path) -> Path:
    """
    Manifest repository listing lib/foo and lib/bar on branch main.

    lib/foo copies its Makefile to the workspace root and links tools/.
    """
    repo = init_repo(remotes_dir / "manifest")
    projects = (
        '  <project name="lib/foo" path="libs/foo">\n'
        '    <copyfile src="Makefile" dest="Makefile"/>\n'
        '    <linkfile src="tools" dest="tools"/>\n'
        "  </project>\n"
        '  <project name="lib/bar" path="libs/bar"/>\n'
    )
    commit_files(repo, {"default.xml": manifest_xml(remotes_dir, projects)}, "Add manifest")
    return repo
