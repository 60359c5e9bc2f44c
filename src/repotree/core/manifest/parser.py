"""
Manifest XML parser.

Reads documents of the form:

    <manifest>
      <remote name="origin" fetch="https://git.example.com/"/>
      <default revision="main" remote="origin" sync-j="4"/>
      <project name="lib/foo" path="libs/foo">
        <copyfile src="Makefile" dest="Makefile"/>
        <linkfile src="tools" dest="tools"/>
      </project>
    </manifest>
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from repotree.core.errors import ManifestError

from .models import Copyfile, Default, Linkfile, Manifest, Project, Remote

logger = logging.getLogger(__name__)

_DEFAULT_KNOWN_ATTRS = {"revision", "remote", "sync-j"}


def _parse_default(element: ET.Element) -> Default:
    attrs = dict(element.attrib)
    return Default(
        revision=attrs.get("revision", ""),
        remote=attrs.get("remote", ""),
        sync_j=attrs.get("sync-j", ""),
        extra={k: v for k, v in attrs.items() if k not in _DEFAULT_KNOWN_ATTRS},
    )


def _parse_project(element: ET.Element) -> Project:
    return Project(
        name=element.get("name", ""),
        path=element.get("path", ""),
        remote=element.get("remote", ""),
        revision=element.get("revision", ""),
        copyfiles=tuple(
            Copyfile(src=c.get("src", ""), dest=c.get("dest", ""))
            for c in element.findall("copyfile")
        ),
        linkfiles=tuple(
            Linkfile(src=lnk.get("src", ""), dest=lnk.get("dest", ""))
            for lnk in element.findall("linkfile")
        ),
    )


def parse_manifest(text: str | bytes) -> Manifest:
    """
    Parse a manifest document.

    Args:
        text: XML content

    Returns:
        Parsed Manifest

    Raises:
        ManifestError: If the XML is malformed or the root is not <manifest>
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ManifestError(f"Fail to parse xml: {e}") from e

    if root.tag != "manifest":
        raise ManifestError(f"Expected <manifest> root element, got <{root.tag}>")

    default_elements = root.findall("default")
    if len(default_elements) > 1:
        logger.warning("Manifest has %d <default> elements, using the first", len(default_elements))
    defaults = _parse_default(default_elements[0]) if default_elements else Default()

    return Manifest(
        defaults=defaults,
        remotes=tuple(
            Remote(name=r.get("name", ""), fetch=r.get("fetch", ""))
            for r in root.findall("remote")
        ),
        projects=tuple(_parse_project(p) for p in root.findall("project")),
    )


def load_manifest(path: Path) -> Manifest:
    """
    Load and parse a manifest file.

    Raises:
        ManifestError: If the file cannot be read or parsed
    """
    try:
        content = path.read_bytes()
    except OSError as e:
        raise ManifestError(f"Fail to open manifest {path}: {e}") from e

    manifest = parse_manifest(content)
    logger.debug(
        "Loaded manifest %s: %d remotes, %d projects",
        path,
        len(manifest.remotes),
        len(manifest.projects),
    )
    return manifest
