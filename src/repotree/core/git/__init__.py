"""
Git engine access and revision resolution.
"""

from .repository import FetchResult, FileStatus, GitRepository
from .revision import HASH_HEX_LENGTH, TAG_PREFIX, resolve_revision

__all__ = [
    "FetchResult",
    "FileStatus",
    "GitRepository",
    "HASH_HEX_LENGTH",
    "TAG_PREFIX",
    "resolve_revision",
]
