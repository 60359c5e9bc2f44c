"""
Copy/link directive materialization.

After a project is checked out, its `<copyfile>` and `<linkfile>`
directives place files from the checkout into the workspace root. Every
directive is validated before anything is written: sources must stay in
the project checkout and destinations must stay in the workspace.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from repotree.core.errors import AbsolutePathError, EmptyPathError, NotAFileError, PathEscapeError
from repotree.core.manifest import Copyfile, Linkfile
from repotree.core.workspace import Workspace

logger = logging.getLogger(__name__)


def sandboxed_path(root: Path, relative: str, label: str, *, allow_root: bool = False) -> Path:
    """
    Join a relative directive path to its root, refusing to leave it.

    The check is lexical: `..` components are collapsed before comparing.

    Args:
        root: Directory the path must stay in
        relative: Path from the manifest
        label: Directive and attribute name for error messages (e.g. "copyfile src")
        allow_root: Accept a path that resolves to root itself

    Raises:
        EmptyPathError: If relative is empty
        AbsolutePathError: If relative is absolute
        PathEscapeError: If the cleaned path is outside root
    """
    if not relative:
        raise EmptyPathError(f"{label} is empty")
    if os.path.isabs(relative):
        raise AbsolutePathError(f"{label} is not relative path: {relative}")

    root = Path(os.path.normpath(root))
    resolved = Path(os.path.normpath(root / relative))
    if resolved == root:
        if allow_root:
            return resolved
    elif resolved.is_relative_to(root):
        return resolved
    raise PathEscapeError(f"{label} ({relative}) is outside of {root}")


@dataclass(frozen=True)
class _Operation:
    kind: str
    src: Path
    dest: Path


class FileMaterializer:
    """
    Applies copy/link directives for project checkouts.

    Example:
        >>> materializer = FileMaterializer(workspace)
        >>> materializer.apply(workspace.root / "build", copyfiles, linkfiles)
    """

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    def _plan_copy(self, repo_dir: Path, directive: Copyfile) -> _Operation:
        src = sandboxed_path(repo_dir, directive.src, "copyfile src")
        dest = sandboxed_path(self.workspace.root, directive.dest, "copyfile dest")
        if not src.is_file():
            raise NotAFileError(f"copyfile src is not a file: {directive.src}")
        return _Operation("copy", src, dest)

    def _plan_link(self, repo_dir: Path, directive: Linkfile) -> _Operation:
        src = sandboxed_path(repo_dir, directive.src, "linkfile src", allow_root=True)
        dest = sandboxed_path(self.workspace.root, directive.dest, "linkfile dest")
        return _Operation("link", src, dest)

    def check(
        self,
        repo_dir: Path,
        copyfiles: Iterable[Copyfile] = (),
        linkfiles: Iterable[Linkfile] = (),
    ) -> None:
        """
        Run the lexical sandbox checks of every directive.

        Needs no checkout, so it can run before the project directory is
        touched. Whether a copy source is a regular file is left to `plan`.

        Raises:
            SandboxError: On the first invalid directive
        """
        root = self.workspace.root
        for c in copyfiles:
            sandboxed_path(repo_dir, c.src, "copyfile src")
            sandboxed_path(root, c.dest, "copyfile dest")
        for lnk in linkfiles:
            sandboxed_path(repo_dir, lnk.src, "linkfile src", allow_root=True)
            sandboxed_path(root, lnk.dest, "linkfile dest")

    def plan(
        self,
        repo_dir: Path,
        copyfiles: Iterable[Copyfile] = (),
        linkfiles: Iterable[Linkfile] = (),
    ) -> list[_Operation]:
        """
        Validate every directive of a project.

        Raises:
            SandboxError: On the first invalid directive
        """
        operations = [self._plan_copy(repo_dir, c) for c in copyfiles]
        operations.extend(self._plan_link(repo_dir, lnk) for lnk in linkfiles)
        return operations

    def apply(
        self,
        repo_dir: Path,
        copyfiles: Iterable[Copyfile] = (),
        linkfiles: Iterable[Linkfile] = (),
    ) -> None:
        """
        Validate, then perform, all directives of a project.

        Raises:
            SandboxError: If any directive is invalid (nothing is written)
            OSError: If writing a destination fails
        """
        for op in self.plan(repo_dir, copyfiles, linkfiles):
            if op.kind == "copy":
                self._copy(op.src, op.dest)
            else:
                self._link(op.src, op.dest)

    def _copy(self, src: Path, dest: Path) -> None:
        dest.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Copyfile %s -> %s", src, dest)
        shutil.copyfile(src, dest)

    def _link(self, src: Path, dest: Path) -> None:
        if os.path.lexists(dest):
            logger.debug("linkfile dest (%s) exists. Skip.", dest)
            return

        dest.parent.mkdir(parents=True, exist_ok=True)
        target = os.path.relpath(src, dest.parent)
        logger.debug("Linkfile %s -> %s", target, dest)
        os.symlink(target, dest)
