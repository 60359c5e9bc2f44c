"""
Tests for the manifest model and parser.

Tests cover:
- Parsing remotes, defaults, projects and their copy/link directives
- Revision and remote defaulting
- URL joining
- sync-j handling
- Malformed documents
"""

from pathlib import Path

import pytest

from repotree.core.errors import (
    ConfigurationError,
    ManifestError,
    NoRemoteError,
    NoRevisionError,
    UnknownRemoteError,
)
from repotree.core.manifest import (
    Copyfile,
    Default,
    Linkfile,
    Manifest,
    Project,
    Remote,
    join_url,
    load_manifest,
    parse_manifest,
)

SAMPLE = """\
<manifest>
  <remote name="origin" fetch="https://git.example.com/"/>
  <remote name="mirror" fetch="ssh://mirror.example.com/base"/>
  <default revision="main" remote="origin" sync-j="4" sync-c="true"/>
  <project name="lib/foo" path="libs/foo">
    <copyfile src="Makefile" dest="Makefile"/>
    <linkfile src="tools" dest="tools"/>
  </project>
  <project name="lib/bar" path="libs/bar" remote="mirror" revision="refs/tags/v2"/>
</manifest>
"""


class TestParseManifest:
    """Tests for parse_manifest."""

    def test_parses_remotes(self) -> None:
        """Remotes keep document order."""
        manifest = parse_manifest(SAMPLE)

        assert manifest.remotes == (
            Remote(name="origin", fetch="https://git.example.com/"),
            Remote(name="mirror", fetch="ssh://mirror.example.com/base"),
        )

    def test_parses_defaults(self) -> None:
        """Known default attributes are mapped, others kept as extra."""
        manifest = parse_manifest(SAMPLE)

        assert manifest.defaults.revision == "main"
        assert manifest.defaults.remote == "origin"
        assert manifest.defaults.sync_j == "4"
        assert manifest.defaults.extra == {"sync-c": "true"}

    def test_parses_projects_with_directives(self) -> None:
        """Projects carry their copyfile and linkfile children."""
        manifest = parse_manifest(SAMPLE)

        foo, bar = manifest.projects
        assert foo.name == "lib/foo"
        assert foo.path == "libs/foo"
        assert foo.remote == ""
        assert foo.copyfiles == (Copyfile(src="Makefile", dest="Makefile"),)
        assert foo.linkfiles == (Linkfile(src="tools", dest="tools"),)
        assert bar.remote == "mirror"
        assert bar.revision == "refs/tags/v2"
        assert bar.copyfiles == ()

    def test_accepts_bytes(self) -> None:
        """Raw file content can be parsed directly."""
        manifest = parse_manifest(SAMPLE.encode())

        assert len(manifest.projects) == 2

    def test_missing_default_element(self) -> None:
        """A manifest without <default> gets empty defaults."""
        manifest = parse_manifest('<manifest><project name="a" path="a"/></manifest>')

        assert manifest.defaults == Default()

    def test_first_default_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        """Only the first <default> element is used."""
        manifest = parse_manifest(
            '<manifest><default revision="one"/><default revision="two"/></manifest>'
        )

        assert manifest.defaults.revision == "one"
        assert "using the first" in caplog.text

    def test_malformed_xml(self) -> None:
        """Broken XML raises ManifestError."""
        with pytest.raises(ManifestError, match="Fail to parse xml"):
            parse_manifest("<manifest><project></manifest>")

    def test_wrong_root_element(self) -> None:
        """The root element must be <manifest>."""
        with pytest.raises(ManifestError, match="<manifest>"):
            parse_manifest("<projects/>")


class TestLoadManifest:
    """Tests for load_manifest."""

    def test_loads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "default.xml"
        path.write_text(SAMPLE)

        manifest = load_manifest(path)

        assert [p.path for p in manifest.projects] == ["libs/foo", "libs/bar"]

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ManifestError, not OSError."""
        with pytest.raises(ManifestError, match="Fail to open manifest"):
            load_manifest(tmp_path / "nope.xml")


class TestJoinUrl:
    """Tests for join_url."""

    @pytest.mark.parametrize(
        "prefix,name,expected",
        [
            ("https://git.example.com/", "lib/foo", "https://git.example.com/lib/foo"),
            ("https://git.example.com", "lib/foo", "https://git.example.com/lib/foo"),
            ("https://git.example.com/", "/lib/foo", "https://git.example.com/lib/foo"),
            ("", "lib/foo", "lib/foo"),
            ("https://git.example.com/", "", "https://git.example.com/"),
        ],
    )
    def test_join(self, prefix: str, name: str, expected: str) -> None:
        assert join_url(prefix, name) == expected


class TestDefaulting:
    """Tests for revision and remote defaulting."""

    @pytest.fixture
    def manifest(self) -> Manifest:
        return parse_manifest(SAMPLE)

    def test_revision_from_default(self, manifest: Manifest) -> None:
        assert manifest.resolve_revision(manifest.projects[0]) == "main"

    def test_revision_from_project(self, manifest: Manifest) -> None:
        assert manifest.resolve_revision(manifest.projects[1]) == "refs/tags/v2"

    def test_remote_from_default(self, manifest: Manifest) -> None:
        """The default remote's fetch prefix is joined with the project name."""
        assert manifest.resolve_remote(manifest.projects[0]) == (
            "origin",
            "https://git.example.com/lib/foo",
        )

    def test_remote_from_project(self, manifest: Manifest) -> None:
        assert manifest.resolve_remote(manifest.projects[1]) == (
            "mirror",
            "ssh://mirror.example.com/base/lib/bar",
        )

    def test_no_revision(self) -> None:
        """No revision anywhere is a configuration error."""
        manifest = Manifest(projects=(Project(name="a", path="a", remote="origin"),))

        with pytest.raises(NoRevisionError):
            manifest.resolve_revision(manifest.projects[0])

    def test_no_remote(self) -> None:
        manifest = Manifest(projects=(Project(name="a", path="a"),))

        with pytest.raises(NoRemoteError):
            manifest.resolve_remote(manifest.projects[0])

    def test_unknown_remote(self) -> None:
        """A remote name that is not declared cannot be resolved."""
        manifest = Manifest(
            remotes=(Remote(name="origin", fetch="https://git.example.com/"),),
            projects=(Project(name="a", path="a", remote="upstream"),),
        )

        with pytest.raises(UnknownRemoteError, match="upstream"):
            manifest.resolve_remote(manifest.projects[0])

    def test_errors_are_configuration_errors(self) -> None:
        """All defaulting failures share one base class."""
        for error in (NoRevisionError, NoRemoteError, UnknownRemoteError):
            assert issubclass(error, ConfigurationError)

    def test_first_remote_with_name_wins(self) -> None:
        manifest = Manifest(
            remotes=(
                Remote(name="origin", fetch="https://one.example.com/"),
                Remote(name="origin", fetch="https://two.example.com/"),
            ),
        )

        assert manifest.find_remote("origin").fetch == "https://one.example.com/"


class TestSyncJ:
    """Tests for the advisory sync-j attribute."""

    def test_integer_value(self) -> None:
        assert Manifest(defaults=Default(sync_j="8")).get_sync_j() == 8

    def test_absent(self) -> None:
        assert Manifest().get_sync_j() == 0

    def test_malformed_value(self, caplog: pytest.LogCaptureFixture) -> None:
        """A non-integer value is ignored with a warning."""
        assert Manifest(defaults=Default(sync_j="many")).get_sync_j() == 0
        assert "Ignoring invalid sync-j" in caplog.text
