"""
Manifest model, parser and defaulting rules.

Example:
    >>> from repotree.core.manifest import load_manifest
    >>> manifest = load_manifest(Path(".repotree/manifests/default.xml"))
    >>> for project in manifest.projects:
    ...     print(project.path, manifest.resolve_revision(project))
"""

from .models import Copyfile, Default, Linkfile, Manifest, Project, Remote, join_url
from .parser import load_manifest, parse_manifest

__all__ = [
    "Copyfile",
    "Default",
    "Linkfile",
    "Manifest",
    "Project",
    "Remote",
    "join_url",
    "load_manifest",
    "parse_manifest",
]
