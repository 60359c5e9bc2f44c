"""
Tests for the manifest repository checkout.
"""

from pathlib import Path

import pytest

from repotree.core.config import ManifestSettings, RepoTreeConfig
from repotree.core.errors import GitError, InvalidRemoteBranchError, ManifestCheckoutExistsError
from repotree.core.sync import ManifestRepository
from repotree.core.workspace import Workspace


@pytest.fixture
def config(manifest_upstream: Path) -> RepoTreeConfig:
    return RepoTreeConfig(manifest=ManifestSettings(url=str(manifest_upstream)))


class TestInit:
    """Tests for cloning the manifest repository."""

    def test_clones_into_control_dir(
        self, workspace: Workspace, config: RepoTreeConfig, manifest_upstream: Path, git_helper
    ) -> None:
        manifest_repo = ManifestRepository(workspace, config)

        manifest_repo.init(str(manifest_upstream))

        assert manifest_repo.path == workspace.root / ".repotree" / "manifests"
        assert manifest_repo.manifest_file.is_file()
        assert manifest_repo.head_commit() == git_helper.head(manifest_upstream)

    def test_existing_checkout_is_an_error(
        self, workspace: Workspace, config: RepoTreeConfig, manifest_upstream: Path
    ) -> None:
        manifest_repo = ManifestRepository(workspace, config)
        manifest_repo.init(str(manifest_upstream))

        with pytest.raises(ManifestCheckoutExistsError, match="--force-delete"):
            manifest_repo.init(str(manifest_upstream))

    def test_force_delete_replaces_checkout(
        self, workspace: Workspace, config: RepoTreeConfig, manifest_upstream: Path
    ) -> None:
        manifest_repo = ManifestRepository(workspace, config)
        manifest_repo.init(str(manifest_upstream))
        (manifest_repo.path / "stale.txt").write_text("x")

        manifest_repo.init(str(manifest_upstream), force_delete=True)

        assert not (manifest_repo.path / "stale.txt").exists()
        assert manifest_repo.manifest_file.is_file()

    def test_missing_branch(
        self, workspace: Workspace, manifest_upstream: Path
    ) -> None:
        config = RepoTreeConfig(manifest=ManifestSettings(branch="nope"))

        with pytest.raises(GitError):
            ManifestRepository(workspace, config).init(str(manifest_upstream))

    def test_load_parses_manifest(
        self, workspace: Workspace, config: RepoTreeConfig, manifest_upstream: Path
    ) -> None:
        manifest_repo = ManifestRepository(workspace, config)
        manifest_repo.init(str(manifest_upstream))

        manifest = manifest_repo.load()

        assert [p.path for p in manifest.projects] == ["libs/foo", "libs/bar"]


class TestSync:
    """Tests for refreshing the manifest checkout."""

    @pytest.fixture
    def manifest_repo(
        self, workspace: Workspace, config: RepoTreeConfig, manifest_upstream: Path
    ) -> ManifestRepository:
        manifest_repo = ManifestRepository(workspace, config)
        manifest_repo.init(str(manifest_upstream))
        return manifest_repo

    def test_up_to_date(self, manifest_repo: ManifestRepository) -> None:
        assert manifest_repo.sync() is False

    def test_follows_branch(
        self, manifest_repo: ManifestRepository, manifest_upstream: Path, git_helper
    ) -> None:
        new_head = git_helper.commit(manifest_upstream, {"other.xml": "<manifest/>"}, "Add other")

        assert manifest_repo.sync() is True

        assert manifest_repo.head_commit() == new_head
        assert (manifest_repo.path / "other.xml").is_file()
        assert git_helper.run(manifest_repo.path, "symbolic-ref", "--short", "HEAD") == "main"

    def test_local_edits_are_discarded_on_move(
        self, manifest_repo: ManifestRepository, manifest_upstream: Path, git_helper
    ) -> None:
        manifest_repo.manifest_file.write_text("garbage")
        git_helper.commit(manifest_upstream, {"other.xml": "<manifest/>"}, "Add other")

        manifest_repo.sync()

        assert manifest_repo.load().projects

    def test_branch_removed_upstream(
        self, manifest_repo: ManifestRepository, manifest_upstream: Path, git_helper
    ) -> None:
        git_helper.run(manifest_upstream, "checkout", "-q", "-b", "other")
        git_helper.run(manifest_upstream, "branch", "-D", "main")
        git_helper.run(manifest_repo.path, "remote", "prune", "origin")

        with pytest.raises(InvalidRemoteBranchError):
            manifest_repo.sync()
