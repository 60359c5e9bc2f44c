"""
Manifest data models.

A manifest declares remotes, defaults and projects. It is parsed once per
command invocation and is read-only afterwards, so every model is frozen.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from repotree.core.errors import NoRemoteError, NoRevisionError, UnknownRemoteError

logger = logging.getLogger(__name__)


class Copyfile(BaseModel):
    """`<copyfile>` directive: copy src (in the project) to dest (in the workspace)."""

    model_config = ConfigDict(frozen=True)

    src: str = ""
    dest: str = ""


class Linkfile(BaseModel):
    """`<linkfile>` directive: symlink dest (in the workspace) to src (in the project)."""

    model_config = ConfigDict(frozen=True)

    src: str = ""
    dest: str = ""


class Remote(BaseModel):
    """A named fetch URL prefix."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    fetch: str = ""


class Default(BaseModel):
    """
    Fallback attributes applied to projects that do not set them.

    Attributes:
        revision: Default revision specifier
        remote: Default remote name
        sync_j: Advisory worker count (`sync-j` attribute, kept as written)
        extra: Any other attributes found on the element
    """

    model_config = ConfigDict(frozen=True)

    revision: str = ""
    remote: str = ""
    sync_j: str = ""
    extra: dict[str, str] = Field(default_factory=dict)

    def get_sync_j(self) -> int:
        """Return `sync-j` as an integer, or 0 when it is absent or malformed."""
        if not self.sync_j:
            return 0
        try:
            return int(self.sync_j)
        except ValueError:
            logger.warning("Ignoring invalid sync-j value '%s'", self.sync_j)
            return 0


class Project(BaseModel):
    """
    One repository entry of the manifest.

    Attributes:
        name: Upstream repository name, joined to the remote fetch prefix
        path: Workspace-relative checkout path
        remote: Remote name (falls back to the default remote)
        revision: Revision specifier (falls back to the default revision)
        copyfiles: Copy directives applied after checkout
        linkfiles: Link directives applied after checkout
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    path: str = ""
    remote: str = ""
    revision: str = ""
    copyfiles: tuple[Copyfile, ...] = ()
    linkfiles: tuple[Linkfile, ...] = ()


def join_url(prefix: str, name: str) -> str:
    """
    Join a remote fetch prefix and a project name.

    Example:
        >>> join_url("https://git.example.com/", "lib/foo")
        'https://git.example.com/lib/foo'
    """
    if not prefix:
        return name
    if not name:
        return prefix
    return prefix.rstrip("/") + "/" + name.lstrip("/")


class Manifest(BaseModel):
    """
    Parsed manifest document.

    Example:
        >>> m = Manifest(
        ...     defaults=Default(revision="main", remote="origin"),
        ...     remotes=(Remote(name="origin", fetch="https://git.example.com/"),),
        ...     projects=(Project(name="lib/foo", path="libs/foo"),),
        ... )
        >>> m.resolve_remote(m.projects[0])
        ('origin', 'https://git.example.com/lib/foo')
    """

    model_config = ConfigDict(frozen=True)

    defaults: Default = Field(default_factory=Default)
    remotes: tuple[Remote, ...] = ()
    projects: tuple[Project, ...] = ()

    def get_sync_j(self) -> int:
        return self.defaults.get_sync_j()

    def find_remote(self, name: str) -> Remote | None:
        """Return the first remote declared with this name."""
        for remote in self.remotes:
            if remote.name == name:
                return remote
        return None

    def resolve_revision(self, project: Project) -> str:
        """
        Revision specifier for a project.

        Raises:
            NoRevisionError: If neither the project nor the defaults set one.
        """
        revision = project.revision or self.defaults.revision
        if not revision:
            raise NoRevisionError(
                f"No revision is specified for '{project.name}', nor default revision is found"
            )
        return revision

    def resolve_remote(self, project: Project) -> tuple[str, str]:
        """
        Remote name and fetch URL for a project.

        Raises:
            NoRemoteError: If neither the project nor the defaults name a remote.
            UnknownRemoteError: If the remote name is not declared.
        """
        remote_name = project.remote or self.defaults.remote
        if not remote_name:
            raise NoRemoteError(
                f"No remote is specified for '{project.name}', nor default remote name is found"
            )

        remote = self.find_remote(remote_name)
        if remote is None:
            raise UnknownRemoteError(
                f"Remote '{remote_name}' of '{project.name}' is not declared in the manifest"
            )
        return remote_name, join_url(remote.fetch, project.name)
