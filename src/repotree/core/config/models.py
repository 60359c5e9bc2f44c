"""
Configuration data models for repotree.

These models define the structure of `.repotree/config.json`, with
validation and type safety via Pydantic.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ManifestSettings(BaseModel):
    """
    Where the manifest lives.

    The manifest repository is cloned into `.repotree/<path>` and the
    manifest document is `<path>/<file>` inside it.
    """
    url: Optional[str] = Field(
        default=None,
        description="URL the manifest repository was cloned from"
    )
    path: str = Field(
        default="manifests",
        min_length=1,
        description="Manifest checkout directory, relative to .repotree/"
    )
    file: str = Field(
        default="default.xml",
        min_length=1,
        description="Manifest file name inside the manifest checkout"
    )
    branch: str = Field(
        default="main",
        min_length=1,
        description="Branch of the manifest repository to track"
    )

    @field_validator("path", "file")
    @classmethod
    def must_be_relative(cls, v: str) -> str:
        if v.startswith("/"):
            raise ValueError(f"must be a relative path, got {v!r}")
        return v


class SyncSettings(BaseModel):
    """
    Defaults for `repotree sync`.
    """
    jobs: int = Field(
        default=0,
        ge=0,
        description="Worker count (0 means use the manifest sync-j, else 1)"
    )


class RepoTreeConfig(BaseModel):
    """
    Persisted run configuration.

    Example:
        >>> config = RepoTreeConfig(manifest=ManifestSettings(branch="stable"))
        >>> config.manifest.file
        'default.xml'
    """
    manifest: ManifestSettings = Field(default_factory=ManifestSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
