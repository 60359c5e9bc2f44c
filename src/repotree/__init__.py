"""
repotree - manifest-driven multi-repository checkouts

A CLI tool that keeps a tree of git repositories at the revisions pinned
by a manifest.
"""

__version__ = "0.3.0"

# Re-export core models for convenience
from repotree.core.config.models import RepoTreeConfig
from repotree.core.manifest.models import Manifest, Project

__all__ = ["Manifest", "Project", "RepoTreeConfig", "__version__"]
