"""
Revision specifier resolution.

A manifest revision is one of, tried in this order:

1. a full object id (40 hex characters), used as-is
2. a tag reference (`refs/tags/...`), looked up in the repository
3. a branch name on the project's remote (`refs/remotes/<remote>/<name>`)

The order is fixed: an even-length hex string is never looked up as a ref.
Odd-length hex (`abc`, `201`) does not decode as bytes and is treated as a
branch name.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from repotree.core.errors import (
    InvalidHashFormatError,
    InvalidRemoteBranchError,
    InvalidTagError,
    RefNotFoundError,
)

logger = logging.getLogger(__name__)

HASH_HEX_LENGTH = 40
TAG_PREFIX = "refs/tags/"

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


class RefResolver(Protocol):
    """Anything that can resolve a full reference name to a commit."""

    def resolve(self, refname: str) -> str:
        ...


def is_hex(revision: str) -> bool:
    """True for a string that decodes as bytes: hex digits, even length."""
    return len(revision) % 2 == 0 and _HEX_RE.fullmatch(revision) is not None


def remote_branch_ref(remote: str, branch: str) -> str:
    return f"refs/remotes/{remote}/{branch}"


def resolve_revision(repo: RefResolver, remote: str, revision: str) -> str:
    """
    Resolve a revision specifier to a commit SHA.

    Args:
        repo: Repository to look references up in
        remote: Remote name used for branch specifiers
        revision: Manifest revision specifier

    Returns:
        Commit SHA (lowercase hex)

    Raises:
        InvalidHashFormatError: Even-length hex string that is not 40 long
        InvalidTagError: Tag reference that does not exist
        InvalidRemoteBranchError: Branch missing on the remote
    """
    if is_hex(revision):
        if len(revision) != HASH_HEX_LENGTH:
            raise InvalidHashFormatError(f"Invalid hash format: {revision}", revision)
        return revision.lower()

    if revision.startswith(TAG_PREFIX):
        try:
            return repo.resolve(revision)
        except RefNotFoundError as e:
            raise InvalidTagError(f"Invalid tag: {revision}", revision) from e

    full_ref = remote_branch_ref(remote, revision)
    logger.debug("Resolving %s", full_ref)
    try:
        return repo.resolve(full_ref)
    except RefNotFoundError as e:
        raise InvalidRemoteBranchError(f"Invalid remote branch: {full_ref}", revision) from e
